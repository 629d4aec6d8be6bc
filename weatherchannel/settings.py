"""Runtime configuration read from the environment."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


class ImproperlyConfigured(RuntimeError):
    """A configuration value is missing or malformed."""


def env(name: str, default: str | None = None) -> str:
    """Fetch environment variables while allowing explicit defaults."""

    value = os.environ.get(name, default)
    if value is None:
        raise ImproperlyConfigured(f"Environment variable {name} is required")
    return value


def env_int(name: str, default: int) -> int:
    raw = env(name, str(default))
    try:
        return int(raw)
    except ValueError as exc:
        raise ImproperlyConfigured(f"Environment variable {name} must be an integer, got {raw!r}") from exc


def env_float(name: str, default: float) -> float:
    raw = env(name, str(default))
    try:
        return float(raw)
    except ValueError as exc:
        raise ImproperlyConfigured(f"Environment variable {name} must be a number, got {raw!r}") from exc


DEFAULT_CACHE_DIR = Path.home() / ".cache" / "weatherchannel"


@dataclass(frozen=True)
class Settings:
    debug: bool = False
    cache_dir: Path = DEFAULT_CACHE_DIR
    cache_size: int = 10 * 1024 * 1024
    http_timeout: float = 30.0
    min_freshness: int = 10
    offline_max_stale: int = 4 * 60 * 60
    location_timeout: float = 20.0
    url_template: str = "https://weather.com/weather/today/l/{latitude},{longitude}?par=google"
    sun_api_url: str = "https://api.sunrise-sunset.org/json"
    geoip_url: str = "http://ip-api.com/json/"

    @classmethod
    def from_env(cls) -> "Settings":
        defaults = cls()
        return cls(
            debug=env("WEATHERCHANNEL_DEBUG", "0") == "1",
            cache_dir=Path(env("WEATHERCHANNEL_CACHE_DIR", str(defaults.cache_dir))).expanduser(),
            cache_size=env_int("WEATHERCHANNEL_CACHE_SIZE", defaults.cache_size),
            http_timeout=env_float("WEATHERCHANNEL_HTTP_TIMEOUT", defaults.http_timeout),
            min_freshness=env_int("WEATHERCHANNEL_MIN_FRESHNESS", defaults.min_freshness),
            offline_max_stale=env_int("WEATHERCHANNEL_OFFLINE_MAX_STALE", defaults.offline_max_stale),
            location_timeout=env_float("WEATHERCHANNEL_LOCATION_TIMEOUT", defaults.location_timeout),
            url_template=env("WEATHERCHANNEL_URL_TEMPLATE", defaults.url_template),
            sun_api_url=env("WEATHERCHANNEL_SUN_API_URL", defaults.sun_api_url),
            geoip_url=env("WEATHERCHANNEL_GEOIP_URL", defaults.geoip_url),
        )


__all__ = ["ImproperlyConfigured", "Settings", "env", "env_float", "env_int"]
