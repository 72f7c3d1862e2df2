"""
Provider clients for the registry (Open Charge Map) and the directory
(Google Places).

Both turn provider JSON into scrapy Items with the same parse functions the
spiders use, so everything past this module is provider-agnostic.
"""
from typing import Optional, Protocol
from urllib.parse import quote
import json
import logging
import pathlib
import requests

from scrapers.items import PlaceFeature, StationFeature
from scrapers.spiders import google_places, openchargemap

from reconcile.errors import ProviderUnavailable
from reconcile.models import Location


logger = logging.getLogger(__name__)

PARSE_ERRORS = (AttributeError, KeyError, TypeError, ValueError)


def parse_records(provider_name: str, records, parse) -> list:
    """Parse provider records one by one, skipping the ones that can't be read."""
    features = []

    for record in records:
        try:
            features.append(parse(record))
        except PARSE_ERRORS as e:
            logger.warning("Skipping unreadable %s record: %s", provider_name, e)

    return features


class Provider(Protocol):
    name: str

    def fetch_nearby(self, latitude: float, longitude: float, radius: float, max_results: int) -> list:
        ...


class RegistryProvider(Provider, Protocol):
    def fetch_by_id(self, native_id: int) -> Optional[StationFeature]:
        ...


class DirectoryProvider(Provider, Protocol):
    def fetch_nearby_businesses(self, latitude: float, longitude: float, radius: float) -> list[PlaceFeature]:
        ...

    def fetch_place(self, place_id: str) -> Optional[PlaceFeature]:
        ...


class HttpProvider:
    name = ""

    def __init__(self, settings, session: Optional[requests.Session] = None):
        self.settings = settings
        self.session = session or requests.Session()
        self.timeout = settings.getfloat("PROVIDER_TIMEOUT")

    def request_json(self, method: str, url: str, **kwargs):
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
            response.raise_for_status()

            return response.json()
        except requests.RequestException as e:
            raise ProviderUnavailable(self.name, e) from e
        except ValueError as e:
            raise ProviderUnavailable(self.name, f"unreadable response: {e}") from e


class OpenChargeMapProvider(HttpProvider):
    name = "Open Charge Map"

    def __init__(self, settings, session: Optional[requests.Session] = None):
        super().__init__(settings, session)

        self.api_key = settings.get("OCM_API_KEY")
        self.base_url = settings.get("OCM_API_BASE_URL")

    def fetch_pois(self, query: dict) -> list:
        stations = self.request_json("GET", f"{self.base_url}/poi/", params=query)

        if stations is None:
            return []

        if not isinstance(stations, list):
            raise ProviderUnavailable(self.name, f"unexpected response type {type(stations).__name__}")

        return parse_records(self.name, stations, openchargemap.station_to_feature)

    def fetch_nearby(self, latitude, longitude, radius, max_results) -> list[StationFeature]:
        logger.info("Calling Open Charge Map: lat=%s, lon=%s, radius=%sm, max=%s", latitude, longitude, radius, max_results)

        stations = self.fetch_pois(openchargemap.nearby_query(self.api_key, latitude, longitude, radius, max_results))

        logger.info("Open Charge Map returned %d stations", len(stations))

        return stations

    def fetch_by_id(self, native_id) -> Optional[StationFeature]:
        logger.info("Calling Open Charge Map for station %s", native_id)

        stations = self.fetch_pois(openchargemap.by_id_query(self.api_key, native_id))

        if not stations:
            logger.warning("Open Charge Map returned no station for ID %s", native_id)
            return None

        return stations[0]


class GooglePlacesProvider(HttpProvider):
    name = "Google Places"

    def __init__(self, settings, session: Optional[requests.Session] = None):
        super().__init__(settings, session)

        self.api_key = settings.get("GOOGLE_PLACES_API_KEY")
        self.base_url = settings.get("GOOGLE_PLACES_API_BASE_URL")
        self.page_size = settings.getint("DIRECTORY_PAGE_SIZE")

    def search(self, endpoint: str, body: dict) -> list[PlaceFeature]:
        response = self.request_json(
            "POST",
            f"{self.base_url}/{endpoint}",
            json=body,
            headers=google_places.request_headers(self.api_key, google_places.SEARCH_FIELD_MASK),
        )

        if response is None:
            return []

        places = (response.get("places") or []) if isinstance(response, dict) else None

        if not isinstance(places, list):
            raise ProviderUnavailable(self.name, f"unexpected response type {type(response).__name__}")

        return parse_records(self.name, places, google_places.place_to_feature)

    def fetch_nearby(self, latitude, longitude, radius, max_results=None) -> list[PlaceFeature]:
        logger.info("Calling Google Places: lat=%s, lon=%s, radius=%sm", latitude, longitude, radius)

        page_size = min(max_results or self.page_size, self.page_size)
        places = self.search("places:searchText", google_places.charging_station_search_body(latitude, longitude, radius, page_size))

        logger.info("Google Places returned %d places", len(places))

        for place in places:
            if place.get("connectors"):
                logger.debug("Place %s reports %s EV connectors", place.get("name"), place.get("connector_count"))

        return places

    def fetch_nearby_businesses(self, latitude, longitude, radius) -> list[PlaceFeature]:
        logger.info("Calling Google Places for nearby businesses: lat=%s, lon=%s, radius=%sm", latitude, longitude, radius)

        return self.search("places:searchNearby", google_places.business_search_body(latitude, longitude, radius, self.page_size))

    def fetch_place(self, place_id) -> Optional[PlaceFeature]:
        logger.info("Getting place details for %s", place_id)

        place = self.request_json(
            "GET",
            f"{self.base_url}/places/{quote(place_id, safe='')}",
            headers=google_places.request_headers(self.api_key, google_places.DETAILS_FIELD_MASK),
        )

        if not place:
            return None

        try:
            return google_places.place_to_feature(place)
        except PARSE_ERRORS as e:
            raise ProviderUnavailable(self.name, f"unreadable place {place_id}: {e}") from e


def load_feed(feed_file: pathlib.Path) -> list:
    with feed_file.open() as fh:
        contents = json.load(fh)

    if not isinstance(contents, list):
        raise ValueError(f"{feed_file} does not contain a list of records")

    return contents


def within_radius(record, latitude, longitude, radius) -> bool:
    location = Location.from_feature(record.get("location"))

    if location is None:
        return False

    return location.distance(Location(latitude, longitude)).meters <= radius


class FeedProvider:
    """Serves records harvested by the spiders from a JSON feed file."""

    def __init__(self, name: str, feed_file: pathlib.Path):
        self.name = name
        self.feed_file = pathlib.Path(feed_file)
        self._records = None

    @property
    def records(self) -> list:
        if self._records is None:
            try:
                self._records = load_feed(self.feed_file)
            except (OSError, ValueError) as e:
                raise ProviderUnavailable(self.name, e) from e

        return self._records

    def fetch_nearby(self, latitude, longitude, radius, max_results=None) -> list:
        nearby = [record for record in self.records if within_radius(record, latitude, longitude, radius)]

        if max_results:
            nearby = nearby[:max_results]

        return nearby


class RegistryFeedProvider(FeedProvider):
    def fetch_by_id(self, native_id):
        for record in self.records:
            if str(record.get("network_id")) == str(native_id):
                return record

        return None


class DirectoryFeedProvider(FeedProvider):
    def fetch_nearby_businesses(self, latitude, longitude, radius) -> list:
        # Only charging stations are harvested
        return []

    def fetch_place(self, place_id):
        for record in self.records:
            if record.get("place_id") == place_id:
                return record

        return None
