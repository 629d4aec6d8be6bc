"""Sunrise and sunset for a coordinate, computed with ``astral``.

``astral`` uses the official zenith (90°50'), which accounts for the solar
disc radius and atmospheric refraction.
"""
from __future__ import annotations

from datetime import date, datetime, tzinfo
from typing import Tuple

from astral import Observer
from astral.sun import sunrise, sunset

from .entities import Coordinate


class SunCalculationError(ValueError):
    """Raised when the sun does not rise or set on the requested date."""


def sun_times(coordinate: Coordinate, day: date, tz: tzinfo) -> Tuple[datetime, datetime]:
    """Return ``(sunrise, sunset)`` falling on the local date ``day`` in ``tz``.

    Both events are on ``day``'s calendar, so far west in a zone the sunset
    can be earlier than the sunrise: it closes the previous evening.
    """
    observer = Observer(latitude=coordinate.latitude, longitude=coordinate.longitude)
    try:
        return (
            sunrise(observer, date=day, tzinfo=tz),
            sunset(observer, date=day, tzinfo=tz),
        )
    except ValueError as exc:
        raise SunCalculationError(f"no sunrise or sunset at {coordinate} on {day}: {exc}") from exc


def is_daytime(now: datetime, rise: datetime, set_: datetime) -> bool:
    """Whether ``now`` is between a sunrise and the following sunset.

    ``rise`` and ``set_`` come from the same local date. When the sunset is
    the earlier of the two, the night runs from it until the sunrise.
    """
    if rise < set_:
        return rise <= now < set_
    return not set_ <= now < rise


__all__ = ["SunCalculationError", "is_daytime", "sun_times"]
