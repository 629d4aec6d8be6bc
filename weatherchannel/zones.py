"""Time zone lookup for coordinates."""
from __future__ import annotations

import logging
from datetime import datetime, tzinfo
from typing import Optional

from pytz import UnknownTimeZoneError, timezone
from timezonefinder import TimezoneFinder

from .entities import Coordinate


logger = logging.getLogger(__name__)

_finder: Optional[TimezoneFinder] = None


def _get_finder() -> TimezoneFinder:
    global _finder
    if _finder is None:
        _finder = TimezoneFinder()
    return _finder


def local_zone() -> tzinfo:
    """The host's current local zone."""
    return datetime.now().astimezone().tzinfo  # type: ignore[return-value]


def zone_for(coordinate: Coordinate) -> tzinfo:
    """Return the IANA zone containing ``coordinate``.

    Falls back to the host's local zone when the point lies outside every
    zone polygon or the lookup fails.
    """
    try:
        name = _get_finder().timezone_at(lat=coordinate.latitude, lng=coordinate.longitude)
    except ValueError as exc:
        logger.warning("Time zone lookup failed for %s: %s", coordinate, exc)
        name = None
    if name:
        try:
            return timezone(name)
        except UnknownTimeZoneError:
            logger.warning("Unknown time zone %s for %s", name, coordinate)
    return local_zone()


__all__ = ["local_zone", "zone_for"]
