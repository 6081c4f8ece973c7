# itinerary_map/api/errors.py
"""Exceptions raised while loading and processing itineraries."""


class ItineraryError(Exception):
    """Base exception for itinerary processing failures."""


class ItineraryStructureError(ItineraryError):
    """Raised when the itinerary document has no usable day sequence."""


class ItineraryLoadError(ItineraryError):
    """Raised when the itinerary or a config file cannot be fetched or parsed."""


class GeometryUnavailableError(ItineraryError, ValueError):
    """Raised when a segment has no renderable geometry."""
