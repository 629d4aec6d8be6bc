"""Entry surface: start a location query, then ask for the weather."""
from __future__ import annotations

import logging
from typing import Optional

from .cache import DiskCache
from .daynight import DayNightResolver
from .entities import WeatherResult
from .fetcher import CachingFetcher, FetcherConfig
from .location import LocationAcquirer, LocationProvider
from .providers.base import RequestConfig
from .providers.ipgeo import IpGeolocationProvider
from .providers.sunrise_sunset import SunriseSunsetClient
from .services.weather import WeatherResolutionService
from .settings import Settings


logger = logging.getLogger(__name__)


class WeatherChannelApi:
    """Pairs a :class:`LocationAcquirer` with the resolution service.

    ``get_weather_result`` blocks on the network; call it from a worker
    thread, never from the thread delivering location callbacks.
    """

    def __init__(
        self,
        acquirer: LocationAcquirer,
        service: WeatherResolutionService,
        location_timeout: float = 20.0,
    ) -> None:
        self.acquirer = acquirer
        self.service = service
        self.location_timeout = location_timeout

    def start_location_query(self, timeout_millis: Optional[int] = None) -> bool:
        timeout = self.location_timeout if timeout_millis is None else timeout_millis / 1000
        return self.acquirer.start(timeout)

    def is_running(self) -> bool:
        return self.acquirer.is_running()

    def wait_for_location(self, timeout: Optional[float] = None) -> bool:
        return self.acquirer.wait(timeout)

    def get_weather_result(self) -> WeatherResult:
        return self.service.get_result()


def build_weather_api(
    settings: Optional[Settings] = None,
    location_provider: Optional[LocationProvider] = None,
) -> WeatherChannelApi:
    """Wire the default collaborators from ``settings``."""
    settings = settings or Settings.from_env()
    request_config = RequestConfig(timeout=settings.http_timeout)
    provider = location_provider or IpGeolocationProvider(
        base_url=settings.geoip_url, request_config=request_config
    )
    acquirer = LocationAcquirer(provider)
    fetcher = CachingFetcher(
        DiskCache(settings.cache_dir, max_size=settings.cache_size),
        config=FetcherConfig(
            connect_timeout=settings.http_timeout,
            read_timeout=settings.http_timeout,
            min_freshness=settings.min_freshness,
            offline_max_stale=settings.offline_max_stale,
        ),
    )
    day_night = DayNightResolver(
        SunriseSunsetClient(base_url=settings.sun_api_url, request_config=request_config)
    )
    service = WeatherResolutionService(
        acquirer=acquirer,
        fetcher=fetcher,
        day_night=day_night,
        url_template=settings.url_template,
    )
    logger.debug("Weather API built with cache at %s", settings.cache_dir)
    return WeatherChannelApi(acquirer, service, location_timeout=settings.location_timeout)


__all__ = ["WeatherChannelApi", "build_weather_api"]
