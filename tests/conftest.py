"""Shared fixtures for itinerary map tests."""

import copy
import json

import pytest

from itinerary_map.api.services.itinerary_service import ItineraryController

LANDING_DAY = {
    "day": 1,
    "date": "2025-06-01",
    "title": "Arrival",
    "stops": [
        {"id": "apt", "name": "Airport", "type": "airport", "coords": [47.45, -122.31]},
        {
            "id": "drive",
            "name": "Drive to hotel",
            "type": "transfer",
            "from_coords": [47.45, -122.31],
            "to_coords": [47.61, -122.33],
            "drive_minutes": 45,
        },
        {"id": "museum", "name": "Museum", "type": "activity", "coords": [47.60, -122.34]},
        {"id": "hotel", "name": "Hotel", "type": "hotel", "coords": [47.61, -122.33]},
    ],
    "segments": [
        {
            "from": {"coords": [47.45, -122.31]},
            "to": {"coords": [47.61, -122.33]},
            "mode": "drive",
            "summary": "I-5 North",
        }
    ],
}

SAMPLE_ITINERARY = {
    "start_date": "2025-06-01",
    "landing": {"arrival_time": "14:30"},
    "date_anchor": "Landing day",
    "days": [
        LANDING_DAY,
        {
            "day": 2,
            "date": "2025-06-02",
            "summary": "Onward",
            "stops": [
                {"id": "apt2", "name": "Second airport", "type": "airport", "coords": [45.59, -122.6]},
            ],
            "segments": [],
        },
    ],
}


@pytest.fixture
def itinerary():
    """A fresh copy of the sample itinerary for each test."""
    return copy.deepcopy(SAMPLE_ITINERARY)


@pytest.fixture
def config_dir(tmp_path):
    """Config directory with defaults.json and icons_map.json."""
    directory = tmp_path / "config"
    directory.mkdir()
    (directory / "defaults.json").write_text(
        json.dumps({"baggage_claim_minutes": 120, "hotel_checkin_minutes": 150})
    )
    (directory / "icons_map.json").write_text(
        json.dumps({"airport": ["Airport", "airport.svg"], "hotel": ["Hotel", "hotel.svg"]})
    )
    return directory


@pytest.fixture
def itinerary_file(tmp_path, itinerary):
    path = tmp_path / "itinerary_spec.txt"
    path.write_text(json.dumps(itinerary))
    return path


@pytest.fixture
def controller(itinerary_file, config_dir, monkeypatch):
    monkeypatch.delenv("BAGGAGE_CLAIM_MINUTES", raising=False)
    monkeypatch.delenv("HOTEL_CHECKIN_MINUTES", raising=False)
    return ItineraryController(source=str(itinerary_file), config_dir=str(config_dir))
