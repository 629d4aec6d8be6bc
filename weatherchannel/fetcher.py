"""HTTP GET through a disk cache that keeps serving while offline."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import timezone
from email.utils import parsedate_to_datetime
from typing import Callable, Dict, Mapping, Optional

import requests
from requests import Response
from requests.structures import CaseInsensitiveDict

from .cache import CachedResponse, DiskCache
from .network import is_network_available
from .providers.base import ProviderError


_UNCACHEABLE_DIRECTIVES = ("no-store", "no-cache", "must-revalidate")


class FetchError(ProviderError):
    """Transport failure, non-2xx status, empty body or cache miss while offline."""

    def __init__(self, message: str, response: Optional[Response] = None) -> None:
        super().__init__(message)
        self.response = response


@dataclass
class FetcherConfig:
    connect_timeout: float = 30.0
    read_timeout: float = 30.0
    min_freshness: int = 10
    offline_max_stale: int = 4 * 60 * 60


@dataclass(frozen=True)
class FetchResponse:
    url: str
    status_code: int
    headers: Mapping[str, str]
    body: bytes
    from_cache: bool = False

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


def parse_cache_control(value: Optional[str]) -> Dict[str, Optional[str]]:
    """Split a Cache-Control header into ``{directive: argument}``."""
    directives: Dict[str, Optional[str]] = {}
    if not value:
        return directives
    for part in value.split(","):
        name, sep, argument = part.strip().partition("=")
        if not name:
            continue
        directives[name.lower()] = argument.strip().strip('"') if sep else None
    return directives


def _seconds(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return max(int(value), 0)
    except ValueError:
        return None


def _http_date(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


def needs_freshness_floor(cache_control: Optional[str]) -> bool:
    if not cache_control:
        return True
    directives = parse_cache_control(cache_control)
    if any(name in directives for name in _UNCACHEABLE_DIRECTIVES):
        return True
    return "max-age" in directives and _seconds(directives["max-age"]) == 0


class CachingFetcher:
    """Fetches pages through ``requests`` and a :class:`DiskCache`.

    Two policies wrap the transport. Responses that forbid caching are
    rewritten to stay cacheable for ``min_freshness`` seconds, and when the
    network is down requests become ``only-if-cached`` with a
    ``max-stale`` tolerance instead of failing on the wire.
    """

    def __init__(
        self,
        cache: DiskCache,
        *,
        session: Optional[requests.Session] = None,
        config: Optional[FetcherConfig] = None,
        network_available: Callable[[], bool] = is_network_available,
        time_func: Callable[[], float] = time.time,
    ) -> None:
        self.cache = cache
        self.config = config or FetcherConfig()
        self.session = session or requests.Session()
        self._network_available = network_available
        self._time_func = time_func
        self._log = logging.getLogger(self.__class__.__name__)

    def fetch(self, url: str) -> FetchResponse:
        headers = self._request_headers()
        request_directives = parse_cache_control(headers.get("Cache-Control"))
        entry = self.cache.get(url)

        if "only-if-cached" in request_directives:
            max_stale = _seconds(request_directives.get("max-stale")) or 0
            if entry is not None and self._is_usable(entry, max_stale):
                self._log.debug("Offline, serving cached %s", url)
                return self._from_entry(entry)
            raise FetchError(f"offline and no usable cached response for {url}")

        if entry is not None:
            if self._is_usable(entry, 0):
                self._log.debug("Cache hit for %s", url)
                return self._from_entry(entry)
            headers.update(self._validators(entry))

        try:
            response = self.session.get(
                url,
                headers=headers,
                timeout=(self.config.connect_timeout, self.config.read_timeout),
                allow_redirects=False,
                hooks={"response": self._rewrite_response},
            )
        except requests.RequestException as exc:
            self._log.error("Request to %s failed", url, exc_info=exc)
            raise FetchError("request failed") from exc

        if response.status_code == 304 and entry is not None:
            return self._revalidated(url, entry, response)
        if not 200 <= response.status_code < 300:
            self._log.error("%s returned %s", url, response.status_code)
            raise FetchError(f"HTTP {response.status_code}", response=response)
        body = response.content
        if not body:
            raise FetchError("empty body", response=response)

        if response.status_code == 200 and self._is_storable(response.headers.get("Cache-Control")):
            self.cache.put(
                url,
                CachedResponse(
                    url=url,
                    status_code=response.status_code,
                    headers=dict(response.headers),
                    body=body,
                    stored_at=self._time_func(),
                ),
            )
        return FetchResponse(url, response.status_code, dict(response.headers), body)

    # Policies -----------------------------------------------------------
    def _request_headers(self) -> Dict[str, str]:
        if self._network_available():
            return {}
        self._log.debug("Network unavailable, forcing cached response")
        return {
            "Cache-Control": f"public, only-if-cached, max-stale={self.config.offline_max_stale}",
        }

    def _rewrite_response(self, response: Response, *args, **kwargs) -> Response:
        if needs_freshness_floor(response.headers.get("Cache-Control")):
            response.headers["Cache-Control"] = f"public, max-age={self.config.min_freshness}"
        return response

    # Cache helpers ------------------------------------------------------
    def _is_storable(self, cache_control: Optional[str]) -> bool:
        directives = parse_cache_control(cache_control)
        return "no-store" not in directives

    def _is_usable(self, entry: CachedResponse, max_stale: int) -> bool:
        return self._age(entry) < self._lifetime(entry) + max_stale

    def _lifetime(self, entry: CachedResponse) -> float:
        stored = CaseInsensitiveDict(entry.headers)
        max_age = _seconds(parse_cache_control(stored.get("Cache-Control")).get("max-age"))
        if max_age is not None:
            return max_age
        expires = _http_date(stored.get("Expires"))
        if expires is None:
            return 0
        served = _http_date(stored.get("Date"))
        return max(expires - (entry.stored_at if served is None else served), 0.0)

    def _age(self, entry: CachedResponse) -> float:
        reported = _seconds(CaseInsensitiveDict(entry.headers).get("Age")) or 0
        return max(self._time_func() - entry.stored_at, 0.0) + reported

    def _validators(self, entry: CachedResponse) -> Dict[str, str]:
        stored = CaseInsensitiveDict(entry.headers)
        validators = {}
        if stored.get("ETag"):
            validators["If-None-Match"] = stored["ETag"]
        if stored.get("Last-Modified"):
            validators["If-Modified-Since"] = stored["Last-Modified"]
        return validators

    def _revalidated(self, url: str, entry: CachedResponse, response: Response) -> FetchResponse:
        self._log.debug("Revalidated %s", url)
        merged = CaseInsensitiveDict(entry.headers)
        merged.update(response.headers)
        refreshed = CachedResponse(
            url=url,
            status_code=entry.status_code,
            headers=dict(merged),
            body=entry.body,
            stored_at=self._time_func(),
        )
        self.cache.put(url, refreshed)
        return self._from_entry(refreshed)

    def _from_entry(self, entry: CachedResponse) -> FetchResponse:
        return FetchResponse(entry.url, entry.status_code, dict(entry.headers), entry.body, from_cache=True)


__all__ = [
    "CachingFetcher",
    "FetchError",
    "FetchResponse",
    "FetcherConfig",
    "needs_freshness_floor",
    "parse_cache_control",
]
