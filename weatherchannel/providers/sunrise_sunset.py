from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from .base import HttpProvider, ProviderError
from ..entities import DayNight


# The API reports polar day/night with this placeholder instead of a time.
_POLAR_PLACEHOLDER_YEAR = 1970


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class SunriseSunsetClient(HttpProvider):
    """Day/night lookup backed by sunrise-sunset.org."""

    base_url = "https://api.sunrise-sunset.org/json"

    def __init__(
        self,
        base_url: Optional[str] = None,
        clock: Callable[[], datetime] = _utcnow,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.base_url = base_url or self.base_url
        self._clock = clock
        self._log = logging.getLogger(self.__class__.__name__)

    def query(self, latitude: str, longitude: str) -> Optional[DayNight]:
        """Return DAY or NIGHT for the coordinate right now, ``None`` when unknown."""
        try:
            sunrise, sunset = self._fetch(latitude, longitude)
        except ProviderError as exc:
            self._log.warning("Day/night lookup failed: %s", exc)
            return None
        now = self._clock()
        if sunrise < sunset:
            is_day = sunrise <= now < sunset
        else:
            # Both instants are UTC; far from Greenwich the sunset of the local
            # day can fall before the sunrise on the UTC calendar.
            is_day = now >= sunrise or now < sunset
        self._log.debug("sunrise=%s sunset=%s now=%s day=%s", sunrise, sunset, now, is_day)
        return DayNight.DAY if is_day else DayNight.NIGHT

    def _fetch(self, latitude: str, longitude: str):
        params = {"lat": latitude, "lng": longitude, "formatted": 0}
        response = self._request("GET", self.base_url, params=params)
        data = self._json(response)
        if data.get("status") != "OK":
            raise ProviderError(f"status {data.get('status')!r}")
        results = data.get("results") or {}
        sunrise = self._parse_time(results.get("sunrise"))
        sunset = self._parse_time(results.get("sunset"))
        if sunrise.year == _POLAR_PLACEHOLDER_YEAR or sunset.year == _POLAR_PLACEHOLDER_YEAR:
            raise ProviderError("no sunrise or sunset on this date")
        return sunrise, sunset

    def _parse_time(self, value: Optional[str]) -> datetime:
        if not value:
            raise ProviderError("missing sunrise/sunset")
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as exc:
            raise ProviderError(f"invalid timestamp {value!r}") from exc
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed


__all__ = ["SunriseSunsetClient"]
