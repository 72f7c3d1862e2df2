import argparse
import logging
import pathlib
import sys

import geojson
from scrapy.utils.log import configure_logging

from reconcile.assemble import SORT_OPTIONS, StationAssembler
from reconcile.config import get_settings
from reconcile.errors import InvalidIdFormat, NotFound, ReconciliationError
from reconcile.export import stations_to_geojson
from reconcile.providers import DirectoryFeedProvider, GooglePlacesProvider, OpenChargeMapProvider, RegistryFeedProvider


logger = logging.getLogger(__name__)

REGISTRY_FEED = "openchargemap.json"
DIRECTORY_FEED = "google_places.json"


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="reconcile",
        description="Merge Open Charge Map stations with Google Places data",
    )
    ap.add_argument(
        "--from-feeds",
        type=pathlib.Path,
        help=f"Reconcile the harvested feeds in this directory ({REGISTRY_FEED}, {DIRECTORY_FEED}) instead of calling the APIs",
    )
    ap.add_argument(
        "--output",
        default="-",
        help="GeoJSON output file, - for stdout",
    )

    commands = ap.add_subparsers(dest="command", required=True)

    nearby = commands.add_parser("nearby", help="Stations around a point")
    nearby.add_argument("latitude", type=float)
    nearby.add_argument("longitude", type=float)
    nearby.add_argument("--radius", type=float, help="Search radius in meters")
    nearby.add_argument("--limit", type=int, help="Maximum number of stations")
    nearby.add_argument("--sort", choices=SORT_OPTIONS)

    detail = commands.add_parser("detail", help="A single station by ID, e.g. ocm_123")
    detail.add_argument("station_id")

    return ap


def build_assembler(settings, feed_dir: pathlib.Path | None = None) -> StationAssembler:
    if feed_dir is not None:
        registry = RegistryFeedProvider("Open Charge Map feed", feed_dir / REGISTRY_FEED)
        directory = DirectoryFeedProvider("Google Places feed", feed_dir / DIRECTORY_FEED)
    else:
        registry = OpenChargeMapProvider(settings)
        directory = GooglePlacesProvider(settings)

    return StationAssembler(registry, directory, settings)


def write_output(features, output: str):
    if output == "-":
        geojson.dump(features, sys.stdout, indent=4)
        sys.stdout.write("\n")
        return

    with open(output, "w") as stations_fh:
        geojson.dump(features, stations_fh, indent=4)

    logger.info("Wrote %d stations to %s", len(features["features"]), output)


def run_cli(args, settings) -> int:
    assembler = build_assembler(settings, args.from_feeds)

    try:
        if args.command == "nearby":
            stations = assembler.nearby(args.latitude, args.longitude, radius=args.radius, limit=args.limit, sort=args.sort)
        else:
            stations = [assembler.detail(args.station_id)]
    except (InvalidIdFormat, NotFound) as e:
        logger.error("%s", e)
        return 1
    except ReconciliationError as e:
        logger.error("Reconciliation failed: %s", e)
        return 2

    features = stations_to_geojson(
        stations,
        api_key=settings.get("GOOGLE_PLACES_API_KEY"),
        places_base_url=settings.get("GOOGLE_PLACES_API_BASE_URL"),
    )

    write_output(features, args.output)

    return 0


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings)

    return run_cli(args, settings)
