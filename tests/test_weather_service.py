from __future__ import annotations

from datetime import datetime, timezone

import pytest
import requests

from weatherchannel.cache import DiskCache
from weatherchannel.document import Document, ExtractionFailed, extract_fields
from weatherchannel.entities import Coordinate, DayNight, LocationFix, WeatherResult, WeatherStatus
from weatherchannel.fetcher import CachingFetcher
from weatherchannel.location import LocationAcquirer
from weatherchannel.services.weather import WeatherResolutionService, fahrenheit_to_celsius


WEATHER_URL = "https://weather.com/weather/today/l/37.7,-122.4?par=google"
NOW = datetime(2024, 6, 21, 19, 0, tzinfo=timezone.utc)
FIX = LocationFix(Coordinate(37.7, -122.4), NOW)


def weather_page(temperature: str = "72\N{DEGREE SIGN}", icon_class: str = "icon-sunny weather-icon") -> str:
    return f"""
    <html>
      <head><title>Today's weather</title></head>
      <body>
        <div class="today_nowcard-section today_nowcard-condition">
          <div class="today_nowcard-phrase">Sunny</div>
          <div class="today_nowcard-icon"><icon class="{icon_class}"></icon></div>
        </div>
        <div class="today_nowcard-temp"><span>{temperature}</span></div>
      </body>
    </html>
    """


class NoopTimer:
    def start(self) -> None:
        pass

    def cancel(self) -> None:
        pass


class ImmediateProvider:
    """Delivers the fix as soon as updates are requested, unless told to hold."""

    def __init__(self, fix: LocationFix, hold: bool = False) -> None:
        self.fix = fix
        self.hold = hold

    def request_location_updates(self, request, listener) -> None:
        if not self.hold:
            listener.on_location(self.fix)

    def remove_location_updates(self, listener) -> None:
        pass


class DayNightStub:
    def __init__(self, answer: DayNight) -> None:
        self.answer = answer
        self.calls = []

    def resolve(self, coordinate, now=None) -> DayNight:
        self.calls.append((coordinate, now))
        return self.answer


def make_acquirer(hold: bool = False, start: bool = True) -> LocationAcquirer:
    acquirer = LocationAcquirer(ImmediateProvider(FIX, hold=hold), timer_factory=lambda interval, cb: NoopTimer())
    if start:
        acquirer.start(10.0)
    return acquirer


@pytest.fixture
def online():
    return {"value": True}


@pytest.fixture
def fetcher(tmp_path, online) -> CachingFetcher:
    return CachingFetcher(DiskCache(tmp_path / "http"), network_available=lambda: online["value"])


def make_service(fetcher, acquirer=None, answer=DayNight.DAY) -> WeatherResolutionService:
    return WeatherResolutionService(
        acquirer=acquirer or make_acquirer(),
        fetcher=fetcher,
        day_night=DayNightStub(answer),
        clock=lambda: NOW,
    )


@pytest.mark.parametrize(
    "fahrenheit,celsius",
    [(32, 0), (100, 38), (-40, -40), (72, 22), (0, -18), (33, 1), (31, -1), (212, 100)],
)
def test_fahrenheit_to_celsius(fahrenheit, celsius):
    assert fahrenheit_to_celsius(fahrenheit) == celsius


def test_end_to_end_sunny_day(requests_mock, fetcher):
    requests_mock.get(WEATHER_URL, text=weather_page())
    day_night = DayNightStub(DayNight.DAY)
    service = WeatherResolutionService(
        acquirer=make_acquirer(), fetcher=fetcher, day_night=day_night, clock=lambda: NOW
    )

    result = service.get_result()

    assert result == WeatherResult(WeatherStatus.SUCCESS, "sunny", 22, 72)
    assert day_night.calls == [(Coordinate(37.7, -122.4), NOW)]
    assert requests_mock.last_request.url == WEATHER_URL


def test_night_sensitive_condition(requests_mock, fetcher):
    requests_mock.get(WEATHER_URL, text=weather_page("55\N{DEGREE SIGN}", "icon-scattered-showers weather-icon"))

    result = make_service(fetcher, answer=DayNight.NIGHT).get_result()

    assert result == WeatherResult(WeatherStatus.SUCCESS, "scattered-showers-night", 13, 55)


def test_transport_error_yields_error(requests_mock, fetcher):
    requests_mock.get(WEATHER_URL, exc=requests.ConnectionError)

    result = make_service(fetcher).get_result()

    assert result == WeatherResult(WeatherStatus.ERROR, "", 0, 0)
    assert not result.ok


def test_non_success_status_yields_error(requests_mock, fetcher):
    requests_mock.get(WEATHER_URL, status_code=503, text="busy")

    assert make_service(fetcher).get_result() == WeatherResult.error()


def test_running_query_yields_error_without_fetching(requests_mock, fetcher):
    requests_mock.get(WEATHER_URL, text=weather_page())
    acquirer = make_acquirer(hold=True)
    assert acquirer.is_running()

    result = make_service(fetcher, acquirer=acquirer).get_result()

    assert result == WeatherResult(WeatherStatus.ERROR, "", 0, 0)
    assert requests_mock.call_count == 0


def test_missing_fix_yields_error(requests_mock, fetcher):
    requests_mock.get(WEATHER_URL, text=weather_page())

    result = make_service(fetcher, acquirer=make_acquirer(start=False)).get_result()

    assert result == WeatherResult.error()
    assert requests_mock.call_count == 0


@pytest.mark.parametrize(
    "page",
    [
        weather_page(temperature="--\N{DEGREE SIGN}"),
        weather_page(temperature=""),
        weather_page(icon_class=""),
        "<html><body><p>Service unavailable</p></body></html>",
    ],
)
def test_extraction_failures_yield_error(requests_mock, fetcher, page):
    requests_mock.get(WEATHER_URL, text=page)

    assert make_service(fetcher).get_result() == WeatherResult.error()


def test_cached_page_is_used_offline(requests_mock, fetcher, online):
    requests_mock.get(WEATHER_URL, text=weather_page())
    service = make_service(fetcher)
    assert service.get_result().ok

    online["value"] = False
    result = service.get_result()

    assert result == WeatherResult(WeatherStatus.SUCCESS, "sunny", 22, 72)
    assert requests_mock.call_count == 1


def test_unexpected_failure_is_contained():
    class ExplodingDayNight:
        def resolve(self, coordinate, now=None):
            raise AssertionError("unexpected")

    class CannedFetcher:
        def fetch(self, url):
            return type("Response", (), {"body": weather_page().encode("utf-8")})()

    service = WeatherResolutionService(
        acquirer=make_acquirer(), fetcher=CannedFetcher(), day_night=ExplodingDayNight()
    )

    assert service.get_result() == WeatherResult.error()


def test_extract_fields_from_page():
    fields = extract_fields(Document.parse(weather_page().encode("utf-8")))

    assert fields.temperature_f == 72
    assert fields.condition_token == "icon-sunny weather-icon"


def test_document_select_first_misses():
    document = Document.parse(b"<html><body><div>nothing</div></body></html>")

    assert document.select_first("div span") is None
    assert document.select_first("div").text() == "nothing"


def test_document_rejects_empty_and_invalid_input():
    with pytest.raises(ExtractionFailed):
        Document.parse(b"")
    with pytest.raises(ExtractionFailed):
        Document.parse(b"<html></html>").select_first("div[")
