# itinerary_map/api/polyline.py
"""Encoded polyline codec (Google's polyline algorithm, precision 1e5)."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)

PRECISION = 1e5


def _read_value(encoded: str, index: int) -> Tuple[Optional[int], int]:
    """Read one zig-zag encoded value starting at ``index``.

    Returns ``(value, next_index)``; ``value`` is None when the string ends
    before the value's continuation sequence does.
    """
    shift, result = 0, 0
    length = len(encoded)
    while index < length:
        chunk = ord(encoded[index]) - 63
        index += 1
        result |= (chunk & 0x1F) << shift
        shift += 5
        if chunk < 0x20:
            return (~(result >> 1) if result & 1 else result >> 1), index
    return None, index


def decode(encoded: str) -> List[Tuple[float, float]]:
    """Decode a polyline string into a list of (lat, lng) coordinates.

    Empty or non-string input yields an empty list. A truncated tail yields
    no further point; the points decoded before it are returned.
    """
    if not encoded or not isinstance(encoded, str):
        return []

    index, lat, lng = 0, 0, 0
    coordinates: List[Tuple[float, float]] = []

    while index < len(encoded):
        d_lat, index = _read_value(encoded, index)
        if d_lat is None:
            logger.debug("Truncated polyline: latitude cut off at %d", index)
            break
        d_lng, index = _read_value(encoded, index)
        if d_lng is None:
            logger.debug("Truncated polyline: longitude cut off at %d", index)
            break

        lat += d_lat
        lng += d_lng
        coordinates.append((lat / PRECISION, lng / PRECISION))

    return coordinates


def _encode_value(value: int) -> str:
    value = ~(value << 1) if value < 0 else value << 1
    chunks = []
    while value >= 0x20:
        chunks.append(chr((0x20 | (value & 0x1F)) + 63))
        value >>= 5
    chunks.append(chr(value + 63))
    return "".join(chunks)


def encode(points: Iterable[Tuple[float, float]]) -> str:
    """Encode (lat, lng) pairs; the inverse of :func:`decode`."""
    output = []
    prev_lat, prev_lng = 0, 0
    for lat, lng in points:
        lat_i = int(round(lat * PRECISION))
        lng_i = int(round(lng * PRECISION))
        output.append(_encode_value(lat_i - prev_lat))
        output.append(_encode_value(lng_i - prev_lng))
        prev_lat, prev_lng = lat_i, lng_i
    return "".join(output)


__all__ = ["decode", "encode", "PRECISION"]
