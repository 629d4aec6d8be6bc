from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Optional

from ..conditions import map_condition
from ..daynight import DayNightResolver
from ..document import (
    CONDITION_ICON_SELECTOR,
    TEMPERATURE_SELECTOR,
    Document,
    ExtractionFailed,
    extract_fields,
)
from ..entities import LocationFix, WeatherResult
from ..fetcher import CachingFetcher, FetchError
from ..location import LocationAcquirer


WEATHER_URL_TEMPLATE = "https://weather.com/weather/today/l/{latitude},{longitude}?par=google"


class LocationUnavailable(RuntimeError):
    """No location fix is available, or a query is still running."""


def fahrenheit_to_celsius(fahrenheit: int) -> int:
    """Convert to whole degrees Celsius, rounding halves away from zero."""
    celsius = Decimal(fahrenheit - 32) * 5 / 9
    return int(celsius.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class WeatherResolutionService:
    def __init__(
        self,
        *,
        acquirer: LocationAcquirer,
        fetcher: CachingFetcher,
        day_night: DayNightResolver,
        url_template: str = WEATHER_URL_TEMPLATE,
        temperature_selector: str = TEMPERATURE_SELECTOR,
        condition_selector: str = CONDITION_ICON_SELECTOR,
        clock: Callable[[], datetime] = _utcnow,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.acquirer = acquirer
        self.fetcher = fetcher
        self.day_night = day_night
        self.url_template = url_template
        self.temperature_selector = temperature_selector
        self.condition_selector = condition_selector
        self._clock = clock
        self._log = logger or logging.getLogger(self.__class__.__name__)

    # Public API ---------------------------------------------------------
    def get_result(self) -> WeatherResult:
        """Resolve the current weather; never raises."""
        try:
            fix = self._require_fix()
            return self._resolve(fix)
        except LocationUnavailable as exc:
            self._log.info("Location unavailable: %s", exc)
        except FetchError as exc:
            self._log.warning("Fetching weather page failed: %s", exc)
        except ExtractionFailed as exc:
            self._log.warning("Extracting weather fields failed: %s", exc)
        except Exception as exc:
            self._log.error("Unexpected failure resolving weather", exc_info=exc)
        return WeatherResult.error()

    # Helpers ------------------------------------------------------------
    def _require_fix(self) -> LocationFix:
        if self.acquirer.is_running():
            raise LocationUnavailable("location query still running")
        fix = self.acquirer.last_fix()
        if fix is None:
            raise LocationUnavailable("no location fix")
        return fix

    def _resolve(self, fix: LocationFix) -> WeatherResult:
        coordinate = fix.coordinate
        self._log.debug("latitude=%s, longitude=%s", coordinate.latitude, coordinate.longitude)
        url = self.url_template.format(latitude=coordinate.latitude, longitude=coordinate.longitude)

        response = self.fetcher.fetch(url)
        day_night = self.day_night.resolve(coordinate, self._clock())

        document = Document.parse(response.body)
        fields = extract_fields(document, self.temperature_selector, self.condition_selector)
        condition = map_condition(fields.condition_token, day_night)
        temperature_c = fahrenheit_to_celsius(fields.temperature_f)
        self._log.debug(
            "temperature_f=%s temperature_c=%s condition=%s",
            fields.temperature_f,
            temperature_c,
            condition,
        )
        return WeatherResult.success(condition, temperature_c, fields.temperature_f)


__all__ = [
    "LocationUnavailable",
    "WEATHER_URL_TEMPLATE",
    "WeatherResolutionService",
    "fahrenheit_to_celsius",
]
