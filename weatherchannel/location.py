"""Bounded-time, single-flight location acquisition."""
from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional, Protocol

from .entities import Coordinate, LocationFix, QueryStatus


DEFAULT_QUERY_TIMEOUT = 20.0


class Priority(Enum):
    HIGH_ACCURACY = "high_accuracy"
    BALANCED_POWER_ACCURACY = "balanced_power_accuracy"
    LOW_POWER = "low_power"


@dataclass(frozen=True)
class LocationRequest:
    """Parameters handed to a location provider. Durations are in seconds."""

    priority: Priority = Priority.BALANCED_POWER_ACCURACY
    interval: float = 4.0
    fastest_interval: float = 2.0
    expiration: float = DEFAULT_QUERY_TIMEOUT
    num_updates: int = 1


class LocationListener(Protocol):
    def on_location(self, fix: LocationFix) -> None:
        ...

    def on_failure(self, exc: BaseException) -> None:
        ...

    def on_canceled(self) -> None:
        ...


class LocationProvider(Protocol):
    """Source of location fixes, delivered asynchronously to a listener."""

    def request_location_updates(self, request: LocationRequest, listener: LocationListener) -> None:
        ...

    def remove_location_updates(self, listener: LocationListener) -> None:
        ...


class TimerHandle(Protocol):
    def start(self) -> None:
        ...

    def cancel(self) -> None:
        ...


TimerFactory = Callable[[float, Callable[[], None]], TimerHandle]


def _thread_timer(interval: float, callback: Callable[[], None]) -> TimerHandle:
    timer = threading.Timer(interval, callback)
    timer.daemon = True
    return timer


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class _CycleListener:
    """Binds provider callbacks to one acquisition cycle."""

    def __init__(self, acquirer: "LocationAcquirer", generation: int) -> None:
        self._acquirer = acquirer
        self.generation = generation

    def on_location(self, fix: LocationFix) -> None:
        self._acquirer._on_location(self.generation, fix)

    def on_failure(self, exc: BaseException) -> None:
        self._acquirer._on_failure(self.generation, exc)

    def on_canceled(self) -> None:
        self._acquirer._on_canceled(self.generation)


class LocationAcquirer:
    """Requests one location update at a time and keeps the latest fix.

    All transitions run under a single re-entrant lock: provider callbacks,
    failure/cancel signals and the timeout timer may arrive from any thread,
    and only the first terminal signal of a cycle takes effect.
    """

    def __init__(
        self,
        provider: LocationProvider,
        *,
        timer_factory: TimerFactory = _thread_timer,
        request: Optional[LocationRequest] = None,
    ) -> None:
        self._provider = provider
        self._timer_factory = timer_factory
        self._request_template = request or LocationRequest()
        self._lock = threading.RLock()
        self._finished = threading.Condition(self._lock)
        self._status = QueryStatus.IDLE
        self._deadline: Optional[float] = None
        self._last_fix: Optional[LocationFix] = None
        self._generation = 0
        self._listener: Optional[_CycleListener] = None
        self._timer: Optional[TimerHandle] = None
        self._log = logging.getLogger(self.__class__.__name__)

    # Public API ---------------------------------------------------------
    @property
    def status(self) -> QueryStatus:
        with self._lock:
            return self._status

    @property
    def deadline(self) -> Optional[float]:
        """Monotonic deadline of the running cycle, if any."""
        with self._lock:
            return self._deadline if self._status is QueryStatus.RUNNING else None

    def is_running(self) -> bool:
        with self._lock:
            return self._status is QueryStatus.RUNNING

    def last_fix(self) -> Optional[LocationFix]:
        with self._lock:
            if self._status is QueryStatus.RUNNING:
                return None
            return self._last_fix

    def start(self, timeout: float = DEFAULT_QUERY_TIMEOUT) -> bool:
        """Begin a new cycle. Returns False when one is already running."""
        with self._lock:
            if self._status is QueryStatus.RUNNING:
                self._log.debug("start: already running")
                return False
            self._generation += 1
            generation = self._generation
            self._last_fix = None
            self._status = QueryStatus.RUNNING
            self._deadline = time.monotonic() + timeout
            self._listener = _CycleListener(self, generation)
            self._timer = self._timer_factory(timeout, lambda: self._on_timeout(generation))
            self._timer.start()
            request = LocationRequest(
                priority=self._request_template.priority,
                interval=self._request_template.interval,
                fastest_interval=self._request_template.fastest_interval,
                expiration=timeout,
                num_updates=1,
            )
            self._log.debug("start: generation=%s timeout=%s", generation, timeout)
            try:
                self._provider.request_location_updates(request, self._listener)
            except Exception as exc:
                self._log.warning("Location request rejected: %s", exc, exc_info=exc)
                self._finish(generation, QueryStatus.FAILED, None)
            return True

    def cancel(self) -> None:
        """Cancel the running cycle, if any."""
        with self._lock:
            self._finish(self._generation, QueryStatus.CANCELLED, None)

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until no cycle is running. Returns False on timeout."""
        with self._finished:
            return self._finished.wait_for(
                lambda: self._status is not QueryStatus.RUNNING, timeout=timeout
            )

    # Callbacks ----------------------------------------------------------
    def _on_location(self, generation: int, fix: LocationFix) -> None:
        self._log.debug("on_location: generation=%s fix=%s", generation, fix)
        self._finish(generation, QueryStatus.COMPLETED, fix)

    def _on_failure(self, generation: int, exc: BaseException) -> None:
        self._log.debug("on_failure: generation=%s error=%s", generation, exc)
        self._finish(generation, QueryStatus.FAILED, None)

    def _on_canceled(self, generation: int) -> None:
        self._log.debug("on_canceled: generation=%s", generation)
        self._finish(generation, QueryStatus.CANCELLED, None)

    def _on_timeout(self, generation: int) -> None:
        self._log.debug("on_timeout: generation=%s", generation)
        self._finish(generation, QueryStatus.CANCELLED, None)

    def _finish(self, generation: int, status: QueryStatus, fix: Optional[LocationFix]) -> bool:
        with self._lock:
            if generation != self._generation or self._status is not QueryStatus.RUNNING:
                return False
            listener, timer = self._listener, self._timer
            self._listener = None
            self._timer = None
            if timer is not None:
                timer.cancel()
            if listener is not None:
                try:
                    self._provider.remove_location_updates(listener)
                except Exception as exc:
                    self._log.warning("Failed to remove location updates: %s", exc)
            self._last_fix = fix
            self._status = status
            self._deadline = None
            self._finished.notify_all()
            return True


class StaticLocationProvider:
    """Reports a fixed coordinate, as if it had just been measured.

    The fix is delivered from a worker thread after ``delay`` seconds.
    """

    def __init__(
        self,
        coordinate: Coordinate,
        delay: float = 0.0,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.coordinate = coordinate
        self.delay = delay
        self._clock = clock
        self._active: set = set()
        self._lock = threading.Lock()

    def request_location_updates(self, request: LocationRequest, listener: LocationListener) -> None:
        with self._lock:
            self._active.add(id(listener))
        worker = threading.Thread(target=self._deliver, args=(listener,), daemon=True)
        worker.start()

    def remove_location_updates(self, listener: LocationListener) -> None:
        with self._lock:
            self._active.discard(id(listener))

    def _deliver(self, listener: LocationListener) -> None:
        if self.delay:
            time.sleep(self.delay)
        with self._lock:
            if id(listener) not in self._active:
                return
        listener.on_location(LocationFix(self.coordinate, self._clock()))


__all__ = [
    "DEFAULT_QUERY_TIMEOUT",
    "LocationAcquirer",
    "LocationListener",
    "LocationProvider",
    "LocationRequest",
    "Priority",
    "StaticLocationProvider",
]
