from datetime import datetime, timezone
import json

import geojson

from reconcile.enrich import enrich_station
from reconcile.export import photo_url, station_to_dict, stations_to_geojson
from reconcile.models import Station
from reconcile.normalize import normalize_station


NOW = datetime(2026, 10, 19, tzinfo=timezone.utc)


def test_street_view_url():
    url = photo_url("streetview:39.78172,-89.65015", "secret")

    assert url == "https://maps.googleapis.com/maps/api/streetview?size=800x600&location=39.78172%2C-89.65015&key=secret"


def test_places_photo_url():
    url = photo_url("places/abc/photos/xyz", "secret")

    assert url == "https://places.googleapis.com/v1/places/abc/photos/xyz/media?maxWidthPx=800&key=secret"


def test_station_to_dict(station_feature, place_feature):
    station = normalize_station(station_feature, now=NOW, rating_from_comments=True)
    enrich_station(station, place_feature)

    properties = station_to_dict(station)

    assert properties["source_id"] == "ocm_123"
    assert properties["combined_rating"] == 4.1
    assert properties["latitude"] == 39.78172
    assert properties["last_sync_at"] == "2026-10-19T00:00:00+00:00"
    assert properties["connectors"][2]["provenance"] == "directory"
    assert properties["address"]["city"] == "Springfield"
    assert {rating["source"] for rating in properties["ratings"]} == {"registry", "directory"}

    json.dumps(properties)


def test_feature_collection(station_feature):
    station = normalize_station(station_feature, now=NOW)
    station.photo_references = ["streetview:39.78172,-89.65015"]

    collection = stations_to_geojson([station, Station(source_id="ocm_2")], api_key="secret")

    assert collection.is_valid
    assert collection["features"][0]["geometry"]["coordinates"] == [-89.65015, 39.78172]
    assert collection["features"][0]["properties"]["photo_urls"][0].startswith("https://maps.googleapis.com/maps/api/streetview")
    assert collection["features"][1]["geometry"] is None

    assert geojson.loads(geojson.dumps(collection))["features"][0]["id"] == "ocm_123"
