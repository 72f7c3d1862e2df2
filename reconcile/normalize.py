from datetime import datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional
import logging

from reconcile.connectors import normalize_registry_type, total_quantity
from reconcile.models import Address, ConnectorRecord, Location, Operator, RatingProvider, RatingSource, Station, UsageTerms
from reconcile.ratings import RATING_PRECISION, to_rating, update_combined_rating


logger = logging.getLogger(__name__)

REGISTRY_ID_PREFIX = "ocm"
PLACEHOLDER_NAME = "Charging Station"
RECENTLY_VERIFIED_PERIOD = timedelta(days=90)


def registry_source_id(native_id) -> str:
    return f"{REGISTRY_ID_PREFIX}_{native_id}"


def parse_timestamp(value) -> Optional[datetime]:
    if not value:
        return None

    try:
        timestamp = datetime.fromisoformat(value)
    except (TypeError, ValueError):
        logger.debug("Ignoring unparseable registry timestamp %r", value)
        return None

    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)

    return timestamp


def normalize_address(raw_address) -> Address:
    if not raw_address:
        return Address()

    return Address(
        street_address=raw_address.get("street_address"),
        city=raw_address.get("city"),
        state=raw_address.get("state"),
        postal_code=raw_address.get("zip_code"),
        country=raw_address.get("country"),
        phone=raw_address.get("phone"),
        access_comments=raw_address.get("access_comments"),
    )


def normalize_operator(raw_operator) -> Operator:
    if not raw_operator:
        return Operator()

    return Operator(
        name=raw_operator.get("name"),
        website=raw_operator.get("website"),
        phone=raw_operator.get("phone"),
        email=raw_operator.get("email"),
    )


def normalize_usage(raw_usage) -> UsageTerms:
    if not raw_usage:
        return UsageTerms()

    return UsageTerms(
        title=raw_usage.get("title"),
        cost=raw_usage.get("cost"),
        requires_membership=raw_usage.get("membership_required"),
        pay_at_location=raw_usage.get("pay_at_location"),
        requires_access_key=raw_usage.get("access_key_required"),
    )


def normalize_connector(raw_port) -> ConnectorRecord:
    power_kw = None

    if raw_power := raw_port.get("power"):
        if raw_power.get("output") is not None:
            power_kw = float(raw_power["output"])

    connector = ConnectorRecord(
        connector_type=normalize_registry_type(raw_port.get("plug")),
        power_kw=power_kw,
        quantity=raw_port.get("quantity") or 1,
        formal_name=raw_port.get("formal_name"),
        level=raw_port.get("level"),
        current_type=raw_port.get("current_type"),
    )

    if raw_status := raw_port.get("status"):
        connector.status = raw_status.get("title")
        connector.is_operational = raw_status.get("is_operational")

    return connector


def registry_rating(raw_reviews) -> Optional[RatingSource]:
    ratings = [to_rating(review.get("rating")) for review in raw_reviews or []]
    ratings = [rating for rating in ratings if rating is not None]

    if not ratings:
        return None

    mean_rating = (sum(ratings, Decimal(0)) / len(ratings)).quantize(RATING_PRECISION, rounding=ROUND_HALF_UP)

    return RatingSource(RatingProvider.REGISTRY, mean_rating, len(ratings))


def normalize_station(raw_station, now: Optional[datetime] = None, rating_from_comments: bool = False) -> Station:
    """Build a canonical Station from one registry record.

    Only registry-derived fields are filled in: the station starts without a
    rating unless ``rating_from_comments`` turns the registry's user comment
    ratings into one. A record with a missing or malformed address still
    produces a station, named with a placeholder.
    """
    now = now or datetime.now(timezone.utc)

    if not raw_station.get("network_id"):
        raise ValueError("registry record has no ID")

    station = Station(source_id=registry_source_id(raw_station["network_id"]))

    for reference in raw_station.get("references") or []:
        if reference.get("system") == "OPEN_CHARGE_MAP_UUID":
            station.ocm_uuid = reference.get("identifier")
        elif reference.get("system"):
            station.data_provider = reference.get("system")

    raw_address = raw_station.get("address")

    if raw_address:
        station.name = raw_station.get("name") or raw_address.get("title") or PLACEHOLDER_NAME
    else:
        logger.warning("Registry record %s has no address block", station.source_id)
        station.name = PLACEHOLDER_NAME

    station.address = normalize_address(raw_address)
    station.location = Location.from_feature(raw_station.get("location"))

    if raw_status := raw_station.get("status"):
        station.is_operational = raw_status.get("is_operational")

    station.operator = normalize_operator(raw_station.get("operator"))
    station.usage = normalize_usage(raw_station.get("usage"))

    raw_ports = raw_station.get("charging_ports") or []

    if raw_ports:
        station.connectors = [normalize_connector(raw_port) for raw_port in raw_ports]
        station.total_connectors = total_quantity(station.connectors)
    else:
        station.total_connectors = raw_station.get("charge_point_count") or 0

    if rating_from_comments and (rating := registry_rating(raw_station.get("reviews"))):
        station.ratings[RatingProvider.REGISTRY] = rating

    update_combined_rating(station)

    station.last_sync_at = now
    station.last_verified_at = parse_timestamp(raw_station.get("last_verified")) or now
    station.is_recently_verified = now - station.last_verified_at <= RECENTLY_VERIFIED_PERIOD

    return station


def normalize_stations(raw_stations, now: Optional[datetime] = None, rating_from_comments: bool = False) -> list[Station]:
    stations = []

    for raw_station in raw_stations:
        try:
            stations.append(normalize_station(raw_station, now, rating_from_comments))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping unreadable registry record: %s", e)

    return stations
