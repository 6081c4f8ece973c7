# itinerary_map/api/loader.py
"""Fetch the itinerary document and JSON config files from disk or HTTP."""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict

import requests
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from itinerary_map.api.config import get_config_dir, get_fetch_timeout
from itinerary_map.api.errors import ItineraryLoadError

logger = logging.getLogger(__name__)

DEFAULTS_FILE = "defaults.json"
ICONS_MAP_FILE = "icons_map.json"


def _is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


@retry(
    retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
    reraise=True,
)
def _fetch_text(url: str) -> str:
    response = requests.get(url, timeout=get_fetch_timeout(), headers={"Cache-Control": "no-store"})
    response.raise_for_status()
    return response.text


def read_source(source: str) -> str:
    """Return the raw text at a URL or file path.

    Raises:
        ItineraryLoadError: If the source cannot be read
    """
    try:
        if _is_url(source):
            return _fetch_text(source)
        with open(source, encoding="utf-8") as fh:
            return fh.read()
    except (OSError, requests.RequestException) as e:
        raise ItineraryLoadError(f"Failed to fetch {source}: {e}") from e


def load_json(source: str) -> Any:
    """Read and parse a JSON document from a URL or file path."""
    text = read_source(source)
    try:
        return json.loads(text.strip())
    except json.JSONDecodeError as e:
        raise ItineraryLoadError(f"{source} is not valid JSON: {e}") from e


def load_itinerary(source: str) -> Dict[str, Any]:
    """Load the itinerary document (itinerary_spec.txt is JSON despite the name)."""
    logger.info(f"Loading itinerary from {source}")
    return load_json(source)


def load_config_file(name: str, config_dir: str | None = None) -> Dict[str, Any]:
    """Load one JSON config mapping; a missing file yields an empty mapping."""
    config_dir = config_dir or get_config_dir()
    if _is_url(config_dir):
        path = f"{config_dir.rstrip('/')}/{name}"
    else:
        path = os.path.join(config_dir, name)
        if not os.path.exists(path):
            logger.warning(f"Config file {path} not found, using built-in defaults")
            return {}

    data = load_json(path)
    if not isinstance(data, dict):
        raise ItineraryLoadError(f"{path} must contain a JSON object")
    return data


__all__ = ["read_source", "load_json", "load_itinerary", "load_config_file"]
