# itinerary_map/routes/__init__.py
from itinerary_map.routes.travel import create_travel_blueprint

__all__ = ["create_travel_blueprint"]
