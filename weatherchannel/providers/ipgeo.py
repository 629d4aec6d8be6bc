from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Callable, Optional, Set

from .base import HttpProvider, ProviderError
from ..entities import Coordinate, LocationFix
from ..location import LocationListener, LocationRequest


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class IpGeolocationProvider(HttpProvider):
    """Approximate device location from the public IP address (ip-api.com)."""

    base_url = "http://ip-api.com/json/"

    def __init__(
        self,
        base_url: Optional[str] = None,
        clock: Callable[[], datetime] = _utcnow,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.base_url = base_url or self.base_url
        self._clock = clock
        self._active: Set[int] = set()
        self._lock = threading.Lock()
        self._log = logging.getLogger(self.__class__.__name__)

    def locate(self) -> LocationFix:
        response = self._request("GET", self.base_url, params={"fields": "status,message,lat,lon"})
        data = self._json(response)
        if data.get("status") != "success":
            raise ProviderError(f"geolocation failed: {data.get('message', data.get('status'))}")
        try:
            coordinate = Coordinate(float(data["lat"]), float(data["lon"]))
        except (KeyError, TypeError, ValueError) as exc:
            raise ProviderError("missing coordinates in response") from exc
        return LocationFix(coordinate, self._clock())

    # LocationProvider ---------------------------------------------------
    def request_location_updates(self, request: LocationRequest, listener: LocationListener) -> None:
        with self._lock:
            self._active.add(id(listener))
        worker = threading.Thread(target=self._deliver, args=(listener,), daemon=True)
        worker.start()

    def remove_location_updates(self, listener: LocationListener) -> None:
        with self._lock:
            self._active.discard(id(listener))

    def _deliver(self, listener: LocationListener) -> None:
        try:
            fix = self.locate()
        except ProviderError as exc:
            if self._is_active(listener):
                listener.on_failure(exc)
            return
        if self._is_active(listener):
            listener.on_location(fix)

    def _is_active(self, listener: LocationListener) -> bool:
        with self._lock:
            return id(listener) in self._active


__all__ = ["IpGeolocationProvider"]
