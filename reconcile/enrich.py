import logging

from reconcile.amenities import map_types_to_amenities
from reconcile.connectors import reconcile_connectors, total_quantity
from reconcile.errors import PartialEnrichmentFailure
from reconcile.models import RatingProvider, RatingSource, Station
from reconcile.normalize import PLACEHOLDER_NAME
from reconcile.ratings import to_rating, update_combined_rating


logger = logging.getLogger(__name__)

MAX_PHOTOS = 5
OPEN_24_HOURS = "open 24 hours"


def enrich_identity(station: Station, place):
    station.place_id = place.get("place_id")

    if place.get("name") and (not station.name or station.name == PLACEHOLDER_NAME):
        station.name = place["name"]

    if place.get("phone") and not station.address.phone:
        station.address.phone = place["phone"]

    if place.get("website") and not station.website:
        station.website = place["website"]


def enrich_rating(station: Station, place):
    rating = to_rating(place.get("rating"))

    if rating is not None:
        station.ratings[RatingProvider.DIRECTORY] = RatingSource(RatingProvider.DIRECTORY, rating, int(place.get("review_count") or 0))

    update_combined_rating(station)


def enrich_opening_hours(station: Station, place):
    opening_hours = place.get("opening_hours")

    if not opening_hours:
        return

    weekday_descriptions = list(opening_hours.get("weekday_descriptions") or [])

    if weekday_descriptions:
        station.opening_hours = weekday_descriptions
        station.is_open_24h = all(OPEN_24_HOURS in description.lower() for description in weekday_descriptions)

    if opening_hours.get("open_now") is not None:
        station.open_now = opening_hours["open_now"]


def merge_photo_references(existing: list[str], new: list[str], max_photos: int) -> list[str]:
    photo_references = list(existing)

    for photo_reference in new:
        if len(photo_references) >= max_photos:
            break

        if photo_reference and photo_reference not in photo_references:
            photo_references.append(photo_reference)

    return photo_references


def enrich_photos(station: Station, place, max_photos: int = MAX_PHOTOS):
    photos = place.get("photos") or []

    if not photos:
        logger.debug("No photos available from the directory for station %s", station.source_id)
        return

    station.photo_references = merge_photo_references(station.photo_references, photos, max_photos)


def enrich_amenities(station: Station, place):
    amenities = map_types_to_amenities(place.get("types") or [])

    station.amenities = station.amenities + [amenity for amenity in amenities if amenity not in station.amenities]


def enrich_connectors(station: Station, place, power_tolerance: float = 2.0):
    buckets = place.get("connectors") or []

    if not buckets:
        return

    connectors = reconcile_connectors(station.connectors, buckets, power_tolerance)

    station.connectors = connectors
    station.total_connectors = total_quantity(connectors)


def enrich_station(station: Station, place, max_photos: int = MAX_PHOTOS, power_tolerance: float = 2.0) -> list[PartialEnrichmentFailure]:
    """Write directory fields onto a matched station.

    Every step runs on its own: a failing step is logged and reported in
    the returned list while the remaining steps still apply.
    """
    steps = [
        ("identity", lambda: enrich_identity(station, place)),
        ("rating", lambda: enrich_rating(station, place)),
        ("opening_hours", lambda: enrich_opening_hours(station, place)),
        ("photos", lambda: enrich_photos(station, place, max_photos)),
        ("amenities", lambda: enrich_amenities(station, place)),
        ("connectors", lambda: enrich_connectors(station, place, power_tolerance)),
    ]

    failures = []

    for step_name, step in steps:
        try:
            step()
        except Exception as e:
            failure = PartialEnrichmentFailure(step_name, station.source_id, e)
            failures.append(failure)

            logger.warning("%s", failure)

    logger.debug("Enriched station %s with directory place %s", station.source_id, station.place_id)

    return failures
