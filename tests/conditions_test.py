from __future__ import annotations

import pytest

from weatherchannel.conditions import CONDITION_TABLE, map_condition
from weatherchannel.entities import DayNight


def test_scattered_showers_takes_night_suffix():
    assert map_condition("icon-scattered-showers ", DayNight.DAY) == "scattered-showers"
    assert map_condition("icon-scattered-showers ", DayNight.NIGHT) == "scattered-showers-night"


def test_sunny_ignores_day_night():
    assert map_condition("icon-sunny ", DayNight.DAY) == "sunny"
    assert map_condition("icon-sunny ", DayNight.NIGHT) == "sunny"


@pytest.mark.parametrize("token", ["", "icon-unknown ", "weather-icon", "icon-sunnyish ", "ICON-SUNNY "])
def test_unknown_tokens_default_to_mostly_cloudy(token):
    assert map_condition(token, DayNight.DAY) == "mostly-cloudy"
    assert map_condition(token, DayNight.NIGHT) == "mostly-cloudy-night"


def test_night_specific_icons_are_not_shadowed_by_their_day_prefix():
    assert map_condition("icon-partly-cloudy-night ", DayNight.NIGHT) == "partly-cloudy-night"
    assert map_condition("icon-partly-cloudy ", DayNight.NIGHT) == "partly-cloudy"
    assert map_condition("icon-mostly-clear-night ", DayNight.NIGHT) == "mostly-clear-night"
    assert map_condition("icon-clear-night ", DayNight.NIGHT) == "clear-night"


@pytest.mark.parametrize(
    "token,expected",
    [
        ("icon-isolated-showers ", "rain"),
        ("icon-showers ", "rain"),
        ("icon-rain ", "rain"),
        ("icon-rain-snow ", "snow"),
        ("icon-freezing-drizzle ", "snow"),
        ("icon-wind ", "windy"),
        ("icon-thunderstorms ", "thunderstorms"),
        ("icon-foggy ", "foggy"),
        ("icon-cloudy ", "cloudy"),
    ],
)
def test_day_night_invariant_entries(token, expected):
    assert map_condition(token, DayNight.DAY) == expected
    assert map_condition(token, DayNight.NIGHT) == expected


@pytest.mark.parametrize("icon", ["icon-scattered-thunderstorms", "icon-isolated-thunderstorms"])
def test_thunderstorm_variants_take_night_suffix(icon):
    base = icon[len("icon-"):]
    assert map_condition(icon + " ", DayNight.DAY) == base
    assert map_condition(icon + " ", DayNight.NIGHT) == base + "-night"


def test_class_list_from_page():
    assert map_condition("icon-sunny weather-icon", DayNight.DAY) == "sunny"
    assert map_condition("weather-icon icon-foggy", DayNight.DAY) == "foggy"


def test_first_table_entry_wins_when_several_classes_match():
    token = "icon-foggy icon-sunny "
    # icon-sunny precedes icon-foggy in the table.
    assert map_condition(token, DayNight.DAY) == "sunny"


def test_table_has_no_duplicate_icons():
    icons = [icon for icon, _, _ in CONDITION_TABLE]
    assert len(icons) == len(set(icons))
