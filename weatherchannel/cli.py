"""Command line entry point: resolve the weather once and print it as JSON."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from dotenv import load_dotenv

from .api import build_weather_api
from .entities import Coordinate, WeatherResult
from .location import StaticLocationProvider
from .settings import ImproperlyConfigured, Settings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="weatherchannel",
        description="Fetch the current weather condition for this device's location",
    )
    parser.add_argument("--lat", type=float, help="Latitude (skips IP geolocation)")
    parser.add_argument("--lon", type=float, help="Longitude (skips IP geolocation)")
    parser.add_argument("--timeout", type=float, help="Location query timeout in seconds")
    return parser


def serialize_result(result: WeatherResult) -> dict:
    return {
        "status": result.status.value,
        "condition": result.condition,
        "temperature_c": result.temperature_c,
        "temperature_f": result.temperature_f,
    }


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)
    if (args.lat is None) != (args.lon is None):
        parser.error("--lat and --lon must be given together")

    try:
        settings = Settings.from_env()
    except ImproperlyConfigured as exc:
        parser.error(str(exc))

    logging.basicConfig(level=logging.DEBUG if settings.debug else logging.WARNING)

    provider = None
    if args.lat is not None:
        provider = StaticLocationProvider(Coordinate(args.lat, args.lon))
    api = build_weather_api(settings, location_provider=provider)

    timeout = args.timeout if args.timeout is not None else settings.location_timeout
    api.start_location_query(int(timeout * 1000))
    # The acquirer's own timer ends the query; the margin only covers its delivery.
    api.wait_for_location(timeout + 1)
    result = api.get_weather_result()

    sys.stdout.write(json.dumps(serialize_result(result)) + "\n")
    return 0 if result.ok else 1


__all__ = ["build_parser", "main", "serialize_result"]
