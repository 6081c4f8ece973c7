# itinerary_map/api/services/map_service.py
"""Service layer for map geometry: markers, segment routes and bounds."""

import logging
from typing import Dict, Any, Iterable, List, Optional

from itinerary_map.api import polyline
from itinerary_map.api.errors import GeometryUnavailableError
from itinerary_map.api.models import (
    Coordinate,
    ResolvedGeometry,
    as_coordinate,
    day_stops,
    is_lat_lng,
)

logger = logging.getLogger(__name__)

MODE_COLORS = {
    "drive": "#1e40af",
    "rail": "#10b981",
    "hike": "#f97316",
    "walk": "#f97316",
}
DEFAULT_MODE_COLOR = "#6b7280"
TRANSFER_LINE_COLOR = "#2d9cdb"
TRANSFER_STOP_TYPES = ("transfer", "travel_day", "train")


class MapService:
    """Resolves itinerary geometry into drawable map layers."""

    @staticmethod
    def validate_coordinates(lat: float, lng: float) -> bool:
        """Validate that coordinates are within valid ranges.

        Args:
            lat: Latitude
            lng: Longitude

        Returns:
            True if valid, False otherwise
        """
        return -90 <= lat <= 90 and -180 <= lng <= 180

    @staticmethod
    def endpoint_coordinates(endpoint: Any) -> Optional[Coordinate]:
        """Coordinates of a segment's ``from``/``to`` reference, if valid."""
        if not isinstance(endpoint, dict):
            return None
        return as_coordinate(endpoint.get("coords"))

    @staticmethod
    def resolve_segment(segment: Dict[str, Any]) -> ResolvedGeometry:
        """Produce the coordinates to draw for a segment.

        Priority: raw ``polyline`` pairs, then ``encoded_polyline``, then a
        straight line between the endpoints (flagged as approximated).
        Raw pairs keep their values and order as ``(lat, lng)`` tuples;
        malformed pairs after the first are dropped.

        Args:
            segment: Segment dict with ``from``/``to`` endpoints

        Returns:
            ResolvedGeometry with points and the approximation flag

        Raises:
            GeometryUnavailableError: If either endpoint lacks valid coords
        """
        start = MapService.endpoint_coordinates(segment.get("from"))
        end = MapService.endpoint_coordinates(segment.get("to"))
        if start is None or end is None:
            raise GeometryUnavailableError("segment has no renderable geometry")

        raw = segment.get("polyline")
        if isinstance(raw, list) and raw and is_lat_lng(raw[0]):
            points = [as_coordinate(p) for p in raw]
            valid = [p for p in points if p is not None]
            if len(valid) < len(points):
                logger.warning(f"Dropped {len(points) - len(valid)} malformed polyline points")
            return ResolvedGeometry(points=valid, approximated=False)

        # Some documents put the encoded string in ``polyline`` itself
        encoded = segment.get("encoded_polyline")
        if not isinstance(encoded, str) and isinstance(raw, str):
            encoded = raw

        if isinstance(encoded, str):
            decoded = polyline.decode(encoded)
            if decoded:
                return ResolvedGeometry(points=decoded, approximated=False)
            logger.debug("Encoded polyline decoded to nothing, using straight line")

        return ResolvedGeometry(points=[start, end], approximated=True)

    @staticmethod
    def stop_coordinates(stop: Dict[str, Any]) -> Optional[Coordinate]:
        """Marker position for a stop: ``coords``, then ``from_coords``, then ``to_coords``."""
        for key in ("coords", "from_coords", "to_coords"):
            coords = as_coordinate(stop.get(key))
            if coords is not None:
                return coords
        return None

    @staticmethod
    def transfer_line(stop: Dict[str, Any]) -> Optional[ResolvedGeometry]:
        """Straight line for a stop that is itself a transition (transfer, train...)."""
        if stop.get("type") not in TRANSFER_STOP_TYPES:
            return None
        start = as_coordinate(stop.get("from_coords")) or as_coordinate(stop.get("coords"))
        end = as_coordinate(stop.get("to_coords"))
        if start is None or end is None:
            return None
        return ResolvedGeometry(points=[start, end], approximated=True)

    @staticmethod
    def segment_style(mode: Optional[str], approximated: bool) -> Dict[str, Any]:
        """Line style for a transport mode; approximated routes are dashed."""
        mode = (mode or "drive").lower()
        style = {
            "color": MODE_COLORS.get(mode, DEFAULT_MODE_COLOR),
            "weight": 4,
            "opacity": 0.85,
        }
        if approximated:
            style["dash_array"] = "8,8"
        return style

    @staticmethod
    def _marker(stop: Dict[str, Any], coords: Coordinate) -> Dict[str, Any]:
        marker = {
            "id": stop.get("id"),
            "name": stop.get("name") or "(unknown)",
            "type": stop.get("type", ""),
            "coords": [coords[0], coords[1]],
        }
        for key in ("description", "parking", "price_estimate"):
            if stop.get(key):
                marker[key] = stop[key]
        return marker

    @staticmethod
    def _route(segment: Dict[str, Any], geometry: ResolvedGeometry) -> Dict[str, Any]:
        mode = (segment.get("mode") or "drive").lower()
        popup = [segment.get("summary") or f"{mode} segment"]
        if segment.get("distance_text"):
            popup.append(f"Distance: {segment['distance_text']}")
        if segment.get("duration_text"):
            popup.append(f"Duration: {segment['duration_text']}")
        if geometry.approximated:
            popup.append("Warning: polyline missing, rendered as straight dashed line")

        route = geometry.to_dict()
        route.update({
            "mode": mode,
            "style": MapService.segment_style(mode, geometry.approximated),
            "popup": popup,
        })
        return route

    @staticmethod
    def build_map_layers(itinerary: Dict[str, Any]) -> Dict[str, Any]:
        """Resolve every marker and route in an itinerary.

        Stops without coordinates and segments without renderable endpoints
        are skipped and reported; they never stop the rest of the itinerary
        from being drawn.

        Args:
            itinerary: Itinerary dict with a ``days`` list

        Returns:
            Dictionary with markers, routes, transfer_lines, skipped and bounds
        """
        markers, routes, transfer_lines, skipped = [], [], [], []
        all_coords: List[Coordinate] = []

        for day_idx, day in enumerate(itinerary.get("days") or [], 1):
            if not isinstance(day, dict):
                logger.warning(f"Day {day_idx} is not an object, skipping")
                continue

            for stop in day_stops(day):
                if not isinstance(stop, dict):
                    continue
                coords = MapService.stop_coordinates(stop)
                if coords is None:
                    label = stop.get("id") or stop.get("name") or f"day{day_idx}"
                    skipped.append({"kind": "stop", "day": day_idx, "ref": label})
                    logger.warning(f"Stop '{label}' missing coords, skipping marker")
                else:
                    marker = MapService._marker(stop, coords)
                    marker["day"] = day_idx
                    markers.append(marker)
                    all_coords.append(coords)

                line = MapService.transfer_line(stop)
                if line is not None:
                    transfer_lines.append({
                        "day": day_idx,
                        "stop": stop.get("id") or stop.get("name"),
                        "style": {"color": TRANSFER_LINE_COLOR, "weight": 3, "dash_array": "6 6"},
                        **line.to_dict(),
                    })
                    all_coords.extend(line.points)

            for seg_idx, segment in enumerate(day.get("segments") or []):
                if not isinstance(segment, dict):
                    continue
                try:
                    geometry = MapService.resolve_segment(segment)
                except GeometryUnavailableError as e:
                    skipped.append({"kind": "segment", "day": day_idx, "ref": seg_idx})
                    logger.warning(f"Segment {seg_idx} on day {day_idx} skipped: {e}")
                    continue

                route = MapService._route(segment, geometry)
                route["day"] = day_idx
                routes.append(route)
                all_coords.extend(geometry.points)

        logger.info(
            f"Resolved {len(markers)} markers and {len(routes)} routes "
            f"({len(skipped)} items skipped)"
        )
        return {
            "markers": markers,
            "routes": routes,
            "transfer_lines": transfer_lines,
            "skipped": skipped,
            "bounds": MapService.calculate_bounds(all_coords),
        }

    @staticmethod
    def calculate_bounds(coords: Iterable[Coordinate]) -> Dict[str, Any]:
        """Calculate bounding box for a set of coordinates.

        Args:
            coords: (lat, lng) pairs

        Returns:
            Dictionary with north, south, east, west bounds
        """
        lats = []
        lngs = []

        for lat, lng in coords:
            if MapService.validate_coordinates(lat, lng):
                lats.append(lat)
                lngs.append(lng)

        if not lats or not lngs:
            return {}

        return {
            'north': max(lats),
            'south': min(lats),
            'east': max(lngs),
            'west': min(lngs)
        }


# Export for use in other modules
__all__ = ['MapService']
