"""Helpers for reverse geocoding pin coordinates."""

from __future__ import annotations

from functools import lru_cache
from typing import Dict, Optional

import reverse_geocoder  # type: ignore[import]

from ..config import UNKNOWN_LOCATION_NAME
from ..errors import GeoError
from .logging import get_logger


@lru_cache(maxsize=1)
def _geocoder() -> "reverse_geocoder.RGeocoder":
    """Return a cached reverse geocoder instance."""

    return reverse_geocoder.RGeocoder(mode=1, verbose=False)


def _coerce_coordinate(value: object) -> Optional[float]:
    """Return *value* as decimal coordinates when possible."""

    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        candidate = value.strip()
        if not candidate:
            return None
        try:
            return float(candidate)
        except ValueError:
            return None
    return None


def _to_text(value: object) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="ignore")
    return str(value)


def reverse_geocode(latitude: object, longitude: object) -> str:
    """Return a ``"City, Region"`` style name for the coordinates.

    Raises
    ------
    GeoError
        When the coordinates are unusable or the lookup yields nothing.
    """

    lat = _coerce_coordinate(latitude)
    lon = _coerce_coordinate(longitude)
    if lat is None or lon is None:
        raise GeoError(f"Invalid coordinates: {latitude!r}, {longitude!r}")
    if not (-90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0):
        raise GeoError(f"Coordinates out of range: {lat}, {lon}")

    try:
        result = _geocoder().query([(lat, lon)])
    except Exception as exc:
        raise GeoError(f"Reverse geocoding failed: {exc}") from exc

    record: Optional[Dict[str, str]] = None
    if isinstance(result, dict):
        record = {key: _to_text(value) for key, value in result.items() if isinstance(key, str)}
    elif isinstance(result, list) and result:
        first = result[0]
        if isinstance(first, dict):
            record = {key: _to_text(value) for key, value in first.items() if isinstance(key, str)}

    if not record:
        raise GeoError(f"No place found near {lat}, {lon}")

    city = str(record.get("name", "")).strip()
    admin = str(record.get("admin1") or record.get("admin2") or record.get("cc") or "").strip()
    components = [component for component in (city, admin) if component]
    if not components:
        raise GeoError(f"No place name near {lat}, {lon}")
    return ", ".join(components)


def resolve_location_name(latitude: object, longitude: object) -> str:
    """Like :func:`reverse_geocode` but falls back to ``"Unknown"``."""

    try:
        name = reverse_geocode(latitude, longitude)
    except GeoError as exc:
        get_logger(__name__).debug("Falling back to %s: %s", UNKNOWN_LOCATION_NAME, exc)
        return UNKNOWN_LOCATION_NAME
    get_logger(__name__).debug("Resolved location display name: %s", name)
    return name


__all__ = ["resolve_location_name", "reverse_geocode"]
