"""
Itinerary Map – main application entry point

* Flask app serving the itinerary, its computed schedule and resolved map
  geometry as JSON under `/travel/api/...`.
* The browser front-end (sidebar cards, Leaflet map) consumes those payloads;
  no HTML is rendered here.
"""

import logging

from flask import Flask
from flask_cors import CORS
from dotenv import load_dotenv

from itinerary_map.api.config import get_cors_origins, get_log_level, get_port

# --------------------------------------------------------------------------- #
# Environment & logging
# --------------------------------------------------------------------------- #
load_dotenv()

logging.basicConfig(
    level=get_log_level(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

from itinerary_map.routes.travel import create_travel_blueprint  # noqa: E402


# --------------------------------------------------------------------------- #
# Flask initialisation
# --------------------------------------------------------------------------- #
def create_app(controller=None):
    """Build the Flask app; ``controller`` lets callers supply their own state."""
    app = Flask(__name__)

    # CORS for local dev / cross‑origin front‑end requests
    CORS(app, origins=get_cors_origins())

    app.register_blueprint(create_travel_blueprint(controller))

    @app.route("/debug")
    def debug():
        """Simple JSON health endpoint."""
        return {
            "status": "ok",
            "endpoints": {
                "itinerary": "/travel/api/itinerary",
                "sidebar": "/travel/api/sidebar",
                "map": "/travel/api/map",
                "schedule": "/travel/api/schedule",
            },
        }

    return app


app = create_app()

# --------------------------------------------------------------------------- #
# Local development runner ( `python main.py` )
# --------------------------------------------------------------------------- #
if __name__ == "__main__":
    port = get_port()
    logger.info("Starting itinerary map on http://localhost:%d", port)
    app.run(host="0.0.0.0", port=port, debug=False)

__all__ = ["app", "create_app"]
