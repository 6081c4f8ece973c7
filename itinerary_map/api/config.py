# itinerary_map/api/config.py
"""Configuration management for the itinerary map service."""
import os
from typing import Any, Dict, Optional

from dotenv import load_dotenv

load_dotenv()

APP_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def get_port():
    """Get port configuration."""
    return int(os.getenv("PORT", 5000))


def get_log_level():
    """Get logging level name."""
    return os.getenv("LOG_LEVEL", "INFO").upper()


def get_cors_origins():
    """Get allowed CORS origins."""
    origins = os.getenv("CORS_ORIGINS", "*")
    return "*" if origins.strip() == "*" else [o.strip() for o in origins.split(",") if o.strip()]


def get_config_dir():
    """Directory holding defaults.json and icons_map.json."""
    return os.getenv("CONFIG_DIR", os.path.join(APP_DIR, "config"))


def get_itinerary_source():
    """Where the itinerary document lives: ITINERARY_URL wins over ITINERARY_PATH."""
    url = os.getenv("ITINERARY_URL", "").strip()
    if url:
        return url
    return os.getenv("ITINERARY_PATH", os.path.join(APP_DIR, "itinerary_spec.txt"))


def get_fetch_timeout():
    """Timeout in seconds for remote itinerary/config fetches."""
    return float(os.getenv("FETCH_TIMEOUT_SECONDS", "10"))


def _env_minutes(name: str) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer number of minutes, got '{raw}'")


def get_duration_overrides() -> Dict[str, Any]:
    """Duration minutes set in the environment; they win over defaults.json."""
    overrides = {}
    for env_name, key in (
        ("BAGGAGE_CLAIM_MINUTES", "baggage_claim_minutes"),
        ("HOTEL_CHECKIN_MINUTES", "hotel_checkin_minutes"),
    ):
        minutes = _env_minutes(env_name)
        if minutes is not None:
            overrides[key] = minutes
    return overrides
