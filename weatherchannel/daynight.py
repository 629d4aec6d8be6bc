from __future__ import annotations

import logging
from datetime import datetime, timezone, tzinfo
from typing import Callable, Optional, Protocol

from .astro import is_daytime, sun_times
from .entities import Coordinate, DayNight
from .zones import zone_for


DAY_START_HOUR = 7
DAY_END_HOUR = 18


class DayNightLookup(Protocol):
    def query(self, latitude: str, longitude: str) -> Optional[DayNight]:
        """Return DAY, NIGHT, or None when the answer is unknown."""
        ...


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class DayNightResolver:
    """Decides whether it is day or night at a coordinate.

    Tiers, each consulted only when the previous one has no answer:

    1. the remote lookup service;
    2. official sunrise/sunset computed locally for the coordinate's zone;
    3. a fixed daytime window of 07:00-18:59 local time.
    """

    def __init__(
        self,
        lookup: Optional[DayNightLookup] = None,
        *,
        zone_resolver: Callable[[Coordinate], tzinfo] = zone_for,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.lookup = lookup
        self._zone_resolver = zone_resolver
        self._clock = clock
        self._log = logging.getLogger(self.__class__.__name__)

    def resolve(self, coordinate: Coordinate, now: Optional[datetime] = None) -> DayNight:
        now = now or self._clock()
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)

        remote = self._query_remote(coordinate)
        if remote is not None:
            return remote

        zone = self._zone(coordinate)
        try:
            return self._from_sun_times(coordinate, now, zone)
        except Exception as exc:
            self._log.warning("Sunrise/sunset calculation failed for %s: %s", coordinate, exc)

        local_hour = now.astimezone(zone).hour
        result = DayNight.DAY if DAY_START_HOUR <= local_hour <= DAY_END_HOUR else DayNight.NIGHT
        self._log.debug("Falling back to hour heuristic: hour=%s result=%s", local_hour, result)
        return result

    def _query_remote(self, coordinate: Coordinate) -> Optional[DayNight]:
        if self.lookup is None:
            return None
        try:
            return self.lookup.query(str(coordinate.latitude), str(coordinate.longitude))
        except Exception as exc:
            self._log.warning("Day/night lookup raised: %s", exc, exc_info=exc)
            return None

    def _zone(self, coordinate: Coordinate) -> tzinfo:
        try:
            return self._zone_resolver(coordinate)
        except Exception as exc:
            self._log.warning("Zone lookup failed for %s, using UTC: %s", coordinate, exc)
            return timezone.utc

    def _from_sun_times(self, coordinate: Coordinate, now: datetime, zone: tzinfo) -> DayNight:
        local_now = now.astimezone(zone)
        sunrise, sunset = sun_times(coordinate, local_now.date(), zone)
        self._log.debug("now=%s sunrise=%s sunset=%s", local_now, sunrise, sunset)
        return DayNight.DAY if is_daytime(now, sunrise, sunset) else DayNight.NIGHT


__all__ = ["DAY_END_HOUR", "DAY_START_HOUR", "DayNightLookup", "DayNightResolver"]
