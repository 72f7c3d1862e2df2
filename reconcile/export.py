from datetime import datetime
from decimal import Decimal
from typing import Optional
from urllib.parse import urlencode
import dataclasses
import enum

import geojson

from reconcile.models import COORDINATE_PRECISION, Station


STREET_VIEW_URL = "https://maps.googleapis.com/maps/api/streetview"
STREET_VIEW_SIZE = "800x600"
PHOTO_MAX_WIDTH = 800

PLACES_PHOTO_BASE_URL = "https://places.googleapis.com/v1"


def photo_url(reference: str, api_key: Optional[str], places_base_url: str = PLACES_PHOTO_BASE_URL) -> str:
    if reference.startswith("streetview:"):
        location = reference[len("streetview:"):]

        return f"{STREET_VIEW_URL}?" + urlencode({
            "size": STREET_VIEW_SIZE,
            "location": location,
            "key": api_key or "",
        })

    return f"{places_base_url}/{reference}/media?" + urlencode({
        "maxWidthPx": PHOTO_MAX_WIDTH,
        "key": api_key or "",
    })


def to_plain(value):
    if isinstance(value, Decimal):
        return float(value)

    if isinstance(value, enum.Enum):
        return value.value

    if isinstance(value, datetime):
        return value.isoformat()

    if isinstance(value, dict):
        return {to_plain(key): to_plain(item) for key, item in value.items()}

    if isinstance(value, (list, tuple)):
        return [to_plain(item) for item in value]

    return value


def station_to_dict(station: Station) -> dict:
    properties = {}

    for field in dataclasses.fields(station):
        if field.name in ("location", "ratings"):
            continue

        value = getattr(station, field.name)

        if dataclasses.is_dataclass(value) and not isinstance(value, type):
            value = dataclasses.asdict(value)
        elif field.name == "connectors":
            value = [dataclasses.asdict(connector) for connector in value]

        properties[field.name] = to_plain(value)

    if station.location:
        properties["latitude"] = station.location.latitude
        properties["longitude"] = station.location.longitude

    properties["ratings"] = [
        {
            "source": rating.source.value,
            "value": float(rating.value),
            "review_count": rating.review_count,
        }
        for rating in station.ratings.values()
    ]

    return properties


def station_to_feature(station: Station, api_key: Optional[str] = None, places_base_url: str = PLACES_PHOTO_BASE_URL) -> geojson.Feature:
    properties = station_to_dict(station)
    properties["photo_urls"] = [photo_url(reference, api_key, places_base_url) for reference in station.photo_references]

    geometry = None

    if station.location:
        geometry = geojson.Point(
            coordinates=(station.location.longitude, station.location.latitude),
            precision=COORDINATE_PRECISION,
        )

    return geojson.Feature(
        id=station.source_id,
        geometry=geometry,
        properties=properties,
    )


def stations_to_geojson(stations, api_key: Optional[str] = None, places_base_url: str = PLACES_PHOTO_BASE_URL) -> geojson.FeatureCollection:
    return geojson.FeatureCollection([
        station_to_feature(station, api_key, places_base_url)
        for station in stations
    ])
