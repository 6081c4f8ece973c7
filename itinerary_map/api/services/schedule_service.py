# itinerary_map/api/services/schedule_service.py
"""Cascade the landing time through the airport -> transfer -> hotel chain.

Only the first airport stop found (days in order, then stops in order)
anchors a chain, and only one chain is resolved per run. This is not a
general scheduler: every other stop keeps whatever computed values it had.
"""

import logging
import math
from datetime import datetime, timedelta
from numbers import Real
from typing import Any, Dict, List, Mapping, Optional, Union

from itinerary_map.api.models import (
    Anchor,
    DurationConfig,
    as_coordinate,
    day_stops,
    require_days,
)

logger = logging.getLogger(__name__)

TIME_FORMAT = "%H:%M"


class _RunWriter:
    """Writes computed fields, keeping the first value written in this run."""

    def __init__(self):
        self._written = set()

    def set(self, stop: Dict[str, Any], field: str, value: datetime) -> bool:
        key = (id(stop), field)
        if key in self._written:
            logger.debug(f"Keeping {field} already computed for '{stop.get('name')}'")
            return False
        computed = stop.get("computed")
        if not isinstance(computed, dict):
            computed = stop["computed"] = {}
        computed[field] = value.strftime(TIME_FORMAT)
        self._written.add(key)
        return True


class ScheduleService:
    """Computes arrival/departure times for the stops following a landing."""

    @staticmethod
    def propagate(
        itinerary: Dict[str, Any],
        anchor: Optional[Anchor],
        durations: Union[DurationConfig, Mapping[str, Any], None] = None,
    ) -> Dict[str, Any]:
        """Fill ``computed`` times on the landing chain, in place.

        Args:
            itinerary: Itinerary dict with a ``days`` list
            anchor: Landing date/time, or None to skip propagation
            durations: DurationConfig or ``defaults.json``-style mapping

        Returns:
            The same itinerary object

        Raises:
            ItineraryStructureError: If the itinerary has no ``days`` list
        """
        days = require_days(itinerary)
        if anchor is None:
            logger.debug("No landing anchor, schedule propagation skipped")
            return itinerary

        if not isinstance(durations, DurationConfig):
            durations = DurationConfig.from_mapping(durations)

        try:
            landing = anchor.to_datetime()
        except ValueError as e:
            logger.warning(f"Ignoring malformed landing anchor {anchor.to_dict()}: {e}")
            return itinerary

        for day in days:
            if not isinstance(day, dict):
                continue
            stops = day_stops(day)
            for index, stop in enumerate(stops):
                if isinstance(stop, dict) and stop.get("type") == "airport":
                    ScheduleService._cascade(stops, index, landing, durations)
                    return itinerary

        logger.info("No airport stop found, nothing to schedule")
        return itinerary

    @staticmethod
    def _cascade(
        stops: List[Any],
        index: int,
        landing: datetime,
        durations: DurationConfig,
    ) -> None:
        writer = _RunWriter()
        airport = stops[index]

        departure = landing + timedelta(minutes=durations.baggage_claim_minutes)
        writer.set(airport, "arrival_time", landing)
        writer.set(airport, "departure_time", departure)
        logger.info(
            f"Airport '{airport.get('name')}': arrival {landing:%H:%M}, "
            f"departure {departure:%H:%M}"
        )

        if index + 1 >= len(stops):
            return
        transfer = stops[index + 1]
        if not isinstance(transfer, dict) or transfer.get("type") != "transfer":
            return

        drive_minutes = ScheduleService.drive_minutes(transfer)
        if drive_minutes is None:
            return

        transfer_arrival = departure + timedelta(minutes=drive_minutes)
        writer.set(transfer, "departure_time", departure)
        writer.set(transfer, "arrival_time", transfer_arrival)

        destination = ScheduleService.find_destination(stops, transfer)
        if destination is None:
            return

        hotel_departure = transfer_arrival + timedelta(minutes=durations.hotel_checkin_minutes)
        writer.set(destination, "arrival_time", transfer_arrival)
        writer.set(destination, "departure_time", hotel_departure)

    @staticmethod
    def drive_minutes(transfer: Dict[str, Any]) -> Optional[int]:
        """Drive time carried by a transfer stop, from the stop or its ``computed``."""
        value = transfer.get("drive_minutes")
        if value is None and isinstance(transfer.get("computed"), dict):
            value = transfer["computed"].get("drive_minutes")
        if value is None:
            return None

        if isinstance(value, bool):
            value = None
        elif isinstance(value, Real):
            value = int(value) if math.isfinite(value) else None
        else:
            try:
                value = int(str(value).strip())
            except ValueError:
                value = None

        if value is None or value < 0:
            logger.warning(
                f"Transfer '{transfer.get('name')}' has unusable drive_minutes, "
                "schedule stops at the transfer"
            )
            return None
        return value

    @staticmethod
    def find_destination(stops: List[Any], transfer: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """First stop of the day the transfer leads to.

        An explicit ``to_stop_id`` is matched against stop ids first;
        otherwise the stop whose ``coords`` equal the transfer's
        ``to_coords`` exactly wins.
        """
        candidates = [s for s in stops if isinstance(s, dict) and s is not transfer]

        target_id = transfer.get("to_stop_id")
        if target_id is not None:
            for stop in candidates:
                if stop.get("id") == target_id:
                    return stop
            logger.warning(f"Transfer target id '{target_id}' not found, matching by coordinates")

        destination = as_coordinate(transfer.get("to_coords"))
        if destination is None:
            return None
        for stop in candidates:
            if as_coordinate(stop.get("coords")) == destination:
                return stop
        return None


__all__ = ["ScheduleService"]
