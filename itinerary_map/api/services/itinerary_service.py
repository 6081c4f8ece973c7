# itinerary_map/api/services/itinerary_service.py
"""Service layer for itinerary loading, scheduling and sidebar data."""

import copy
import logging
import threading
from typing import Dict, Any, List, Optional

from itinerary_map.api.config import get_duration_overrides, get_itinerary_source
from itinerary_map.api.errors import ItineraryError
from itinerary_map.api.loader import (
    DEFAULTS_FILE,
    ICONS_MAP_FILE,
    load_config_file,
    load_itinerary,
)
from itinerary_map.api.models import Anchor, DurationConfig, day_stops, require_days
from itinerary_map.api.services.map_service import MapService
from itinerary_map.api.services.schedule_service import ScheduleService

logger = logging.getLogger(__name__)

PLACEHOLDER = "-"
ICONS_PATH = "assets/icons"


class ItineraryService:
    """Helpers that turn an itinerary document into presentation data."""

    @staticmethod
    def validate(itinerary: Any) -> Dict[str, Any]:
        """Check the document has a day sequence.

        Raises:
            ItineraryStructureError: If ``days`` is missing or not a list
        """
        days = require_days(itinerary)
        if not days:
            logger.warning("Itinerary has an empty days array")
        return itinerary

    @staticmethod
    def default_anchor(itinerary: Dict[str, Any]) -> Optional[Anchor]:
        """Landing anchor from the document's own fields.

        Date: ``start_date``, then ``landing.date``, then the first day's
        ``date``. Time: ``landing.arrival_time``.
        """
        landing = itinerary.get("landing")
        if not isinstance(landing, dict):
            landing = {}

        date = itinerary.get("start_date") or landing.get("date")
        if not date:
            days = itinerary.get("days") or []
            if days and isinstance(days[0], dict):
                date = days[0].get("date")

        return Anchor.from_values(date, landing.get("arrival_time"))

    @staticmethod
    def icon_for(stop_type: Optional[str], icons_map: Dict[str, Any]) -> Optional[str]:
        """Icon path for a stop type; icons_map entries are ``[label, file]``."""
        mapping = icons_map.get(stop_type) if stop_type else None
        if not mapping:
            return None
        if isinstance(mapping, (list, tuple)):
            if len(mapping) < 2:
                return None
            mapping = mapping[1]
        return f"{ICONS_PATH}/{mapping}"

    @staticmethod
    def format_stop(stop: Dict[str, Any], icons_map: Dict[str, Any]) -> Dict[str, Any]:
        """Sidebar card for one stop; missing times show as placeholders."""
        computed = stop.get("computed") if isinstance(stop.get("computed"), dict) else {}
        return {
            "id": stop.get("id"),
            "name": stop.get("name") or "(unknown)",
            "type": stop.get("type", ""),
            "subtype": stop.get("subtype"),
            "icon": ItineraryService.icon_for(stop.get("type"), icons_map),
            "arrival_time": computed.get("arrival_time") or PLACEHOLDER,
            "departure_time": computed.get("departure_time") or PLACEHOLDER,
            "description": stop.get("description") or PLACEHOLDER,
            "stay_duration_min": stop.get("stay_duration_min"),
        }

    @staticmethod
    def build_sidebar(itinerary: Dict[str, Any], icons_map: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Day cards for the sidebar.

        Args:
            itinerary: Validated itinerary data
            icons_map: Stop type to ``[label, icon file]`` mapping

        Returns:
            One card per day, in document order
        """
        icons_map = icons_map or {}
        cards = []
        for i, day in enumerate(require_days(itinerary), 1):
            if not isinstance(day, dict):
                logger.warning(f"Day {i} is not an object, skipping card")
                continue
            stops = [s for s in day_stops(day) if isinstance(s, dict)]
            cards.append({
                "index": day.get("day", i),
                "date": day.get("date"),
                "title": day.get("title") or day.get("summary") or "",
                "stay_summary": day.get("stay_summary") or f"{len(stops)} points",
                "stops": [ItineraryService.format_stop(s, icons_map) for s in stops],
            })
        return cards


class ItineraryController:
    """Owns the loaded itinerary and its computed schedule.

    Lifecycle: ``init()`` loads the document and config, ``update(anchor)``
    recomputes from the pristine document, ``dispose()`` drops everything.
    """

    def __init__(self, source: Optional[str] = None, config_dir: Optional[str] = None):
        self.source = source
        self.config_dir = config_dir

        self.itinerary: Optional[Dict[str, Any]] = None
        self.anchor: Optional[Anchor] = None
        self.durations = DurationConfig()
        self.icons_map: Dict[str, Any] = {}

        self._pristine: Optional[Dict[str, Any]] = None
        self._map_layers: Optional[Dict[str, Any]] = None
        self.lock = threading.Lock()
        self._init_lock = threading.Lock()

    @property
    def is_initialized(self) -> bool:
        return self._pristine is not None

    def init(self) -> Dict[str, Any]:
        """Load config and itinerary, then schedule with the document's anchor.

        Raises:
            ItineraryLoadError: If a document cannot be fetched or parsed
            ItineraryStructureError: If the itinerary has no ``days`` array
        """
        source = self.source or get_itinerary_source()

        defaults = load_config_file(DEFAULTS_FILE, self.config_dir)
        defaults.update(get_duration_overrides())
        durations = DurationConfig.from_mapping(defaults)
        icons_map = load_config_file(ICONS_MAP_FILE, self.config_dir)

        itinerary = ItineraryService.validate(load_itinerary(source))

        with self.lock:
            self.durations = durations
            self.icons_map = icons_map
            self._pristine = itinerary
            self._map_layers = None
            logger.info(
                f"Loaded itinerary with {len(itinerary['days'])} days "
                f"(baggage {durations.baggage_claim_minutes} min, "
                f"check-in {durations.hotel_checkin_minutes} min)"
            )
        return self.update(ItineraryService.default_anchor(itinerary))

    def ensure_initialized(self) -> None:
        """Run ``init()`` once even when several requests arrive together."""
        with self._init_lock:
            if not self.is_initialized:
                self.init()

    def _require_init(self) -> None:
        if self._pristine is None:
            raise ItineraryError("Itinerary controller used before init()")

    def compute(self, anchor: Optional[Anchor]) -> Dict[str, Any]:
        """Schedule a fresh copy of the document without touching controller state."""
        self._require_init()
        itinerary = copy.deepcopy(self._pristine)
        return ScheduleService.propagate(itinerary, anchor, self.durations)

    def update(self, anchor: Optional[Anchor]) -> Dict[str, Any]:
        """Make ``anchor`` current and recompute the schedule."""
        itinerary = self.compute(anchor)
        with self.lock:
            self.anchor = anchor
            self.itinerary = itinerary
        return itinerary

    def resolve_anchor(self, date: Optional[str], time: Optional[str]) -> Optional[Anchor]:
        """Anchor from user input; with neither part given the current anchor stays."""
        if not date and not time:
            return self.anchor
        return Anchor.from_values(date, time)

    def sidebar(self, itinerary: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        self._require_init()
        return ItineraryService.build_sidebar(
            itinerary if itinerary is not None else self.itinerary, self.icons_map
        )

    def map_layers(self) -> Dict[str, Any]:
        """Map geometry; it does not depend on the schedule so it is built once."""
        self._require_init()
        if self._map_layers is None:
            self._map_layers = MapService.build_map_layers(self._pristine)
        return self._map_layers

    def dispose(self) -> None:
        with self.lock:
            self.itinerary = None
            self.anchor = None
            self._pristine = None
            self._map_layers = None
            self.icons_map = {}
            self.durations = DurationConfig()
        logger.debug("Itinerary controller disposed")


__all__ = ['ItineraryService', 'ItineraryController']
