from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class LocationFix:
    """A single reported location sample.

    ``timestamp`` is timezone-aware and expressed in UTC.
    """

    coordinate: Coordinate
    timestamp: datetime


class QueryStatus(Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class DayNight(Enum):
    DAY = "d"
    NIGHT = "n"


@dataclass(frozen=True)
class RawWeatherFields:
    """Fields scraped from the weather page before normalization."""

    temperature_f: int
    condition_token: str


class WeatherStatus(Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class WeatherResult:
    """Outcome of a single weather resolution.

    An ``ERROR`` result never carries data: the condition is empty and both
    temperatures are zero.
    """

    status: WeatherStatus
    condition: str
    temperature_c: int
    temperature_f: int

    @classmethod
    def success(cls, condition: str, temperature_c: int, temperature_f: int) -> "WeatherResult":
        return cls(WeatherStatus.SUCCESS, condition, temperature_c, temperature_f)

    @classmethod
    def error(cls) -> "WeatherResult":
        return cls(WeatherStatus.ERROR, "", 0, 0)

    @property
    def ok(self) -> bool:
        return self.status is WeatherStatus.SUCCESS


__all__ = [
    "Coordinate",
    "DayNight",
    "LocationFix",
    "QueryStatus",
    "RawWeatherFields",
    "WeatherResult",
    "WeatherStatus",
]
