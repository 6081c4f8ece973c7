"""Shared value objects for schedule propagation and map geometry.

Itinerary documents themselves stay as the JSON dicts they were parsed
into; the core mutates those in place. The dataclasses here describe the
inputs and outputs that travel alongside them.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from numbers import Real
from typing import Any, List, Mapping, Optional, Tuple

from itinerary_map.api.errors import ItineraryStructureError

DEFAULT_BAGGAGE_CLAIM_MINUTES = 120
DEFAULT_HOTEL_CHECKIN_MINUTES = 150

Coordinate = Tuple[float, float]


def is_lat_lng(value: Any) -> bool:
    """Return True for a 2-element list/tuple of finite numbers."""
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        return False
    for component in value:
        # bool is a Real subclass; a JSON true/false is never a coordinate
        if isinstance(component, bool) or not isinstance(component, Real):
            return False
        if not math.isfinite(component):
            return False
    return True


def as_coordinate(value: Any) -> Optional[Coordinate]:
    """Return ``(lat, lng)`` for a valid pair, ``None`` otherwise."""
    if not is_lat_lng(value):
        return None
    return float(value[0]), float(value[1])


def require_days(itinerary: Any) -> List[Any]:
    """Return the itinerary's ``days`` list.

    Raises:
        ItineraryStructureError: If the document or its day sequence is missing
    """
    if not isinstance(itinerary, dict):
        raise ItineraryStructureError("Itinerary document is not a JSON object")
    days = itinerary.get("days")
    if not isinstance(days, list):
        raise ItineraryStructureError('Parsed itinerary missing "days" array')
    return days


def day_stops(day: Mapping[str, Any]) -> List[Any]:
    """Return a day's stop list (``stops``, or ``points`` in route documents)."""
    stops = day.get("stops")
    if stops is None:
        stops = day.get("points")
    return stops if isinstance(stops, list) else []


@dataclass(frozen=True)
class DurationConfig:
    """Minute offsets used when cascading the landing time."""

    baggage_claim_minutes: int = DEFAULT_BAGGAGE_CLAIM_MINUTES
    hotel_checkin_minutes: int = DEFAULT_HOTEL_CHECKIN_MINUTES

    @classmethod
    def from_mapping(cls, values: Optional[Mapping[str, Any]]) -> "DurationConfig":
        """Build from a ``defaults.json``-style mapping.

        Missing or non-integer entries fall back to the defaults, so
        configuration is never mandatory.
        """
        values = values or {}

        def _minutes(key: str, default: int) -> int:
            raw = values.get(key)
            if isinstance(raw, bool):
                return default
            try:
                return int(raw)
            except (TypeError, ValueError):
                return default

        return cls(
            baggage_claim_minutes=_minutes(
                "baggage_claim_minutes", DEFAULT_BAGGAGE_CLAIM_MINUTES
            ),
            hotel_checkin_minutes=_minutes(
                "hotel_checkin_minutes", DEFAULT_HOTEL_CHECKIN_MINUTES
            ),
        )

    def to_dict(self) -> dict:
        return {
            "baggage_claim_minutes": self.baggage_claim_minutes,
            "hotel_checkin_minutes": self.hotel_checkin_minutes,
        }


@dataclass(frozen=True)
class Anchor:
    """The landing date and time every day-one time is derived from."""

    date: str  # YYYY-MM-DD
    time: str  # HH:MM

    @classmethod
    def from_values(cls, date: Optional[str], time: Optional[str]) -> Optional["Anchor"]:
        """Return an Anchor only when both parts are present.

        A partial anchor (date without time or the reverse) is treated the
        same as no anchor at all.
        """
        if not date or not time:
            return None
        return cls(date=str(date).strip(), time=str(time).strip())

    def to_datetime(self) -> datetime:
        """Combine date and time; raises ValueError when either is malformed."""
        return datetime.strptime(f"{self.date}T{self.time[:5]}", "%Y-%m-%dT%H:%M")

    def to_dict(self) -> dict:
        return {"date": self.date, "time": self.time}


@dataclass(frozen=True)
class ResolvedGeometry:
    """Coordinates to draw for one segment and whether they are a guess."""

    points: List[Coordinate] = field(default_factory=list)
    approximated: bool = False

    def to_dict(self) -> dict:
        return {
            "points": [[lat, lng] for lat, lng in self.points],
            "approximated": self.approximated,
        }
