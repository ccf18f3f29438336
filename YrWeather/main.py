"""Command-line host for the yr.no weather widget."""
import argparse
import dataclasses
import json
import logging
import signal
import sys
import time
from typing import Optional

from location_watch import StaticLocationSource
from place_resolver import NominatimPlaceResolver
from presentation import PresentationPayload
from widget_settings import WidgetSettings, load_settings
from weather_data import Coordinate, UnitPreference
from weather_service import WeatherService, WidgetUpdater
from yr_provider import YrWeatherFetcher


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser("yr.no weather widget")
    parser.add_argument("--lat", type=float, help="Latitude (overrides YR_WEATHER_LAT)")
    parser.add_argument("--lon", type=float, help="Longitude (overrides YR_WEATHER_LON)")
    parser.add_argument("--units", choices=["c", "f"], help="Temperature units (overrides YR_WEATHER_UNITS)")
    parser.add_argument("--click-target", help="URI opened when the widget is clicked")
    parser.add_argument("--refresh", type=float, default=0.0, help="Seconds between refreshes (0 = run once)")
    parser.add_argument("--timeout", type=int, help="HTTP timeout in seconds")
    parser.add_argument("--env-file", help="Path to a .env file")
    parser.add_argument("--log-file")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def setup_logging(log_file: Optional[str], verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )


def apply_overrides(settings: WidgetSettings, args: argparse.Namespace) -> WidgetSettings:
    overrides = {}
    if args.lat is not None:
        overrides["latitude"] = args.lat
    if args.lon is not None:
        overrides["longitude"] = args.lon
    if args.units:
        overrides["units"] = UnitPreference.parse(args.units)
    if args.click_target:
        overrides["click_target"] = args.click_target
    if args.timeout is not None:
        overrides["timeout"] = args.timeout
    return dataclasses.replace(settings, **overrides)


def build_weather_service(settings: WidgetSettings) -> WeatherService:
    resolver = NominatimPlaceResolver(
        base_url=settings.places_url,
        user_agent=settings.user_agent,
        timeout=settings.timeout,
    )
    fetcher = YrWeatherFetcher(
        base_url=settings.weather_url,
        user_agent=settings.user_agent,
        timeout=settings.timeout,
    )
    logging.info("Weather service ready (timeout=%ss)", settings.timeout)
    return WeatherService(resolver, fetcher)


def print_payload(payload: PresentationPayload) -> None:
    sys.stdout.write(json.dumps(payload.to_dict(), ensure_ascii=False) + "\n")
    sys.stdout.flush()


def signal_handler(signum, frame):
    logging.info("Received signal %s, shutting down", signum)
    raise KeyboardInterrupt()


def main(argv=None) -> None:
    args = parse_args(argv)
    setup_logging(args.log_file, args.verbose)
    settings = apply_overrides(load_settings(args.env_file), args)

    coordinate: Optional[Coordinate] = settings.coordinate
    if coordinate is None:
        raise SystemExit("Missing YR_WEATHER_LAT/YR_WEATHER_LON (or --lat/--lon)")

    updater = WidgetUpdater(
        service=build_weather_service(settings),
        location_source=StaticLocationSource(coordinate),
        publish=print_payload,
    )

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        while True:
            updater.on_update_data(settings)
            if args.refresh <= 0:
                break
            time.sleep(max(args.refresh, 1.0))
    except KeyboardInterrupt:
        logging.info("Stopping weather widget")
    finally:
        updater.close()


if __name__ == "__main__":
    main()
