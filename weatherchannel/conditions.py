"""Normalization of weather.com icon class names into condition identifiers."""
from __future__ import annotations

import logging
import re
from typing import Tuple

from .entities import DayNight


logger = logging.getLogger(__name__)

NIGHT_SUFFIX = "-night"
DEFAULT_CONDITION = "mostly-cloudy"

# (icon class, condition, takes the night suffix). First match wins, so the
# order is part of the contract.
CONDITION_TABLE: Tuple[Tuple[str, str, bool], ...] = (
    ("icon-partly-cloudy-night", "partly-cloudy-night", False),
    ("icon-partly-cloudy", "partly-cloudy", False),
    ("icon-mostly-cloudy-night", "mostly-cloudy-night", False),
    ("icon-mostly-cloudy", "mostly-cloudy", False),
    ("icon-cloudy", "cloudy", False),
    ("icon-mostly-clear-night", "mostly-clear-night", False),
    ("icon-clear-night", "clear-night", False),
    ("icon-mostly-sunny", "mostly-sunny", False),
    ("icon-sunny", "sunny", False),
    ("icon-scattered-showers", "scattered-showers", True),
    ("icon-isolated-showers", "rain", False),
    ("icon-showers", "rain", False),
    ("icon-rain-snow", "snow", False),
    ("icon-rain", "rain", False),
    ("icon-wind", "windy", False),
    ("icon-scattered-snow", "snow", False),
    ("icon-isolated-snow", "snow", False),
    ("icon-snow", "snow", False),
    ("icon-freezing-drizzle", "snow", False),
    ("icon-scattered-thunderstorms", "scattered-thunderstorms", True),
    ("icon-isolated-thunderstorms", "isolated-thunderstorms", True),
    ("icon-thunderstorms", "thunderstorms", False),
    ("icon-foggy", "foggy", False),
)

_PATTERNS = tuple(
    (re.compile(re.escape(icon) + r"(?=\s|$)"), condition, night_sensitive)
    for icon, condition, night_sensitive in CONDITION_TABLE
)


def map_condition(raw_token: str, day_night: DayNight) -> str:
    """Return the normalized condition for an icon class attribute.

    An icon class only matches when it is followed by whitespace or ends the
    token, so ``icon-partly-cloudy`` never matches inside
    ``icon-partly-cloudy-night``.
    """
    night_fix = NIGHT_SUFFIX if day_night is DayNight.NIGHT else ""
    logger.debug("map_condition: raw_token=%r night_fix=%r", raw_token, night_fix)
    for pattern, condition, night_sensitive in _PATTERNS:
        if pattern.search(raw_token or ""):
            return condition + night_fix if night_sensitive else condition
    return DEFAULT_CONDITION + night_fix


__all__ = ["CONDITION_TABLE", "DEFAULT_CONDITION", "NIGHT_SUFFIX", "map_condition"]
