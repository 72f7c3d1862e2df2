from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal
from typing import Optional
import logging
import re

from reconcile.config import get_settings
from reconcile.enrich import enrich_station, merge_photo_references
from reconcile.errors import InvalidIdFormat, NotFound, ProviderUnavailable
from reconcile.matching import match_place_to_station, match_station_to_place, nearest_within, place_location
from reconcile.models import Station
from reconcile.normalize import REGISTRY_ID_PREFIX, normalize_station, normalize_stations
from reconcile.providers import DirectoryProvider, RegistryProvider


logger = logging.getLogger(__name__)

STATION_ID_PATTERN = re.compile(rf"{REGISTRY_ID_PREFIX}_([0-9]+)")
STREET_VIEW_PREFIX = "streetview:"

SORT_OPTIONS = ("rating",)


def parse_station_id(station_id) -> int:
    if not isinstance(station_id, str):
        raise InvalidIdFormat(station_id)

    match = STATION_ID_PATTERN.fullmatch(station_id)

    if not match:
        raise InvalidIdFormat(station_id)

    return int(match.group(1))


def street_view_reference(station: Station) -> str:
    return f"{STREET_VIEW_PREFIX}{station.location.latitude},{station.location.longitude}"


def rating_sort_key(station: Station):
    if station.combined_rating is None:
        return (1, Decimal(0))

    return (0, -station.combined_rating)


class StationAssembler:
    """Builds canonical stations for the two request shapes.

    The assembler holds no per-request state: every call builds its own
    working set from fresh provider data.
    """

    def __init__(self, registry: RegistryProvider, directory: DirectoryProvider, settings=None):
        self.registry = registry
        self.directory = directory
        self.settings = settings or get_settings()

        self.list_threshold = self.settings.getfloat("LIST_MATCH_THRESHOLD")
        self.detail_threshold = self.settings.getfloat("DETAIL_MATCH_THRESHOLD")
        self.business_threshold = self.settings.getfloat("BUSINESS_PHOTO_THRESHOLD")
        self.detail_radius = self.settings.getfloat("DETAIL_SEARCH_RADIUS")
        self.business_radius = self.settings.getfloat("BUSINESS_SEARCH_RADIUS")
        self.max_photos = self.settings.getint("MAX_PHOTOS")
        self.power_tolerance = self.settings.getfloat("CONNECTOR_POWER_TOLERANCE_KW")
        self.rating_from_comments = self.settings.getbool("REGISTRY_RATINGS_FROM_COMMENTS")

    def enrich(self, station: Station, place):
        return enrich_station(station, place, max_photos=self.max_photos, power_tolerance=self.power_tolerance)

    def fetch_directory_safely(self, fetch, *args) -> list:
        try:
            return fetch(*args)
        except ProviderUnavailable as e:
            logger.warning("Continuing without directory data: %s", e)
            return []

    def nearby(self, latitude: float, longitude: float, radius: Optional[float] = None, limit: Optional[int] = None, sort: Optional[str] = None) -> list[Station]:
        radius = radius or self.settings.getfloat("DEFAULT_SEARCH_RADIUS")
        limit = limit or self.settings.getint("DEFAULT_SEARCH_LIMIT")

        if sort is not None and sort not in SORT_OPTIONS:
            raise ValueError(f"Unsupported sort order: {sort!r}")

        logger.info("Fetching nearby stations: lat=%s, lon=%s, radius=%sm, limit=%s", latitude, longitude, radius, limit)

        with ThreadPoolExecutor(max_workers=2) as executor:
            registry_future = executor.submit(self.registry.fetch_nearby, latitude, longitude, radius, limit)
            directory_future = executor.submit(self.fetch_directory_safely, self.directory.fetch_nearby, latitude, longitude, radius, limit)

            raw_stations = registry_future.result()
            places = directory_future.result()

        stations = normalize_stations(raw_stations, rating_from_comments=self.rating_from_comments)

        enriched_count = 0

        for place in places:
            station = match_place_to_station(stations, place, self.list_threshold)

            if station is None:
                logger.debug("No registry station near directory place %s, discarding it", place.get("place_id"))
                continue

            self.enrich(station, place)
            enriched_count += 1

        logger.info("Enriched %d of %d stations with %d directory places", enriched_count, len(stations), len(places))

        if sort == "rating":
            stations = sorted(stations, key=rating_sort_key)

        stations = stations[:limit]

        logger.info("Returning %d stations", len(stations))

        return stations

    def detail(self, station_id: str) -> Station:
        native_id = parse_station_id(station_id)

        logger.info("Fetching station %s", station_id)

        raw_station = self.registry.fetch_by_id(native_id)

        if raw_station is None:
            raise NotFound(station_id)

        station = normalize_station(raw_station, rating_from_comments=self.rating_from_comments)

        if station.location is None:
            logger.warning("Station %s has no coordinates, skipping directory enrichment", station_id)
            return station

        location = station.location
        places = self.fetch_directory_safely(self.directory.fetch_nearby, location.latitude, location.longitude, self.detail_radius, None)

        if place := match_station_to_place(station, places, self.detail_threshold):
            self.enrich(station, place)

            logger.info("Enriched station %s with directory place %s (%.0fm away)", station_id, station.place_id, location.distance(place_location(place)).meters)
        else:
            logger.warning("Station %s could not be matched with a directory place", station_id)

        if not station.photo_references:
            self.borrow_nearby_business_photos(station)

        if not station.photo_references:
            station.photo_references = [street_view_reference(station)]

            logger.info("Added street view photo for station %s", station_id)

        logger.info("Found station %s (rating: %s)", station.name, station.combined_rating)

        return station

    def borrow_nearby_business_photos(self, station: Station):
        location = station.location

        try:
            businesses = self.directory.fetch_nearby_businesses(location.latitude, location.longitude, self.business_radius)

            business, _ = nearest_within(location, businesses, self.business_threshold, place_location)

            if business is None:
                logger.info("No nearby business found for station %s", station.source_id)
                return

            details = self.directory.fetch_place(business.get("place_id"))

            if details is None or not details.get("photos"):
                logger.info("Nearby business %s has no photos", business.get("name"))
                return

            station.photo_references = merge_photo_references(station.photo_references, details["photos"], self.max_photos)

            logger.info("Added %d photos from nearby business %r", len(station.photo_references), business.get("name"))
        except ProviderUnavailable as e:
            logger.warning("Could not search nearby business photos for station %s: %s", station.source_id, e)
