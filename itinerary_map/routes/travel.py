# itinerary_map/routes/travel.py
"""Travel routes and blueprint configuration."""

import logging

from flask import Blueprint, jsonify, request

from itinerary_map.api.config import get_config_dir
from itinerary_map.api.errors import ItineraryLoadError, ItineraryStructureError
from itinerary_map.api.services.itinerary_service import ItineraryController

logger = logging.getLogger(__name__)


def create_travel_blueprint(controller=None):
    """Create and configure the travel blueprint.

    Args:
        controller: Optional pre-built ItineraryController (tests inject one)

    Returns:
        Configured Flask Blueprint
    """
    travel_bp = Blueprint("travel", __name__, url_prefix="/travel")
    if controller is None:
        controller = ItineraryController(config_dir=get_config_dir())
    travel_bp.controller = controller

    def _ensure_loaded():
        controller.ensure_initialized()

    def _anchor_payload(anchor):
        return anchor.to_dict() if anchor else None

    @travel_bp.errorhandler(ItineraryStructureError)
    def handle_structure_error(e):
        logger.error(f"Itinerary structure error: {e}")
        return jsonify({"error": str(e), "kind": "structure"}), 500

    @travel_bp.errorhandler(ItineraryLoadError)
    def handle_load_error(e):
        logger.error(f"Itinerary load error: {e}")
        return jsonify({"error": str(e), "kind": "load"}), 502

    @travel_bp.route("/api/config")
    def api_config():
        """Return duration and icon configuration for the frontend."""
        _ensure_loaded()
        return jsonify({
            "durations": controller.durations.to_dict(),
            "icons_map": controller.icons_map,
        })

    @travel_bp.route("/api/itinerary")
    def api_itinerary():
        """Return the itinerary with computed times.

        ``date``/``time`` query parameters override the current anchor for
        this response only.
        """
        _ensure_loaded()
        anchor = controller.resolve_anchor(request.args.get("date"), request.args.get("time"))
        itinerary = controller.compute(anchor)
        return jsonify({
            "itinerary": itinerary,
            "anchor": _anchor_payload(anchor),
            "date_anchor": itinerary.get("date_anchor"),
        })

    @travel_bp.route("/api/sidebar")
    def api_sidebar():
        """Return sidebar day cards."""
        _ensure_loaded()
        anchor = controller.resolve_anchor(request.args.get("date"), request.args.get("time"))
        itinerary = controller.compute(anchor)
        return jsonify({
            "days": controller.sidebar(itinerary),
            "anchor": _anchor_payload(anchor),
        })

    @travel_bp.route("/api/map")
    def api_map():
        """Return markers, routes and bounds for the map."""
        _ensure_loaded()
        return jsonify(controller.map_layers())

    @travel_bp.route("/api/schedule", methods=["POST"])
    def api_schedule():
        """Apply a new landing date/time and return the recomputed itinerary."""
        _ensure_loaded()
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            data = {}
        date = data.get("date")
        time = data.get("time")

        if not date and not time:
            return jsonify({"error": "date and time are required"}), 400

        anchor = controller.resolve_anchor(date, time)
        if anchor is None:
            logger.warning(f"Partial landing anchor ignored: date={date!r} time={time!r}")

        itinerary = controller.update(anchor)
        return jsonify({
            "itinerary": itinerary,
            "anchor": _anchor_payload(anchor),
            "sidebar": controller.sidebar(itinerary),
        })

    @travel_bp.route("/health")
    def health():
        """Health check endpoint."""
        return jsonify({
            "status": "ok",
            "service": "travel",
            "itinerary_loaded": controller.is_initialized,
        })

    return travel_bp


# Export for backward compatibility
__all__ = ['create_travel_blueprint']
