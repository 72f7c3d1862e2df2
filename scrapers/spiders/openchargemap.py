from scrapers.items import AddressFeature, ChargingPortFeature, LocationFeature, OperatorFeature, PowerFeature, ReferenceFeature, ReviewFeature, SourceFeature, StationFeature, StatusFeature, UsageFeature

from scrapy.utils.project import get_project_settings
import scrapy

from urllib.parse import urlencode


def poi_query(api_key, **filters) -> dict:
    query = {
        "key": api_key,
        "compact": "false",
        "verbose": "false",
    }
    query.update(filters)

    return query


def nearby_query(api_key, latitude, longitude, radius, max_results) -> dict:
    return poi_query(
        api_key,
        latitude=latitude,
        longitude=longitude,
        distance=radius / 1000,
        distanceunit="KM",
        maxresults=max_results,
    )


def by_id_query(api_key, native_id) -> dict:
    return poi_query(api_key, chargepointid=native_id)


def parse_status(status) -> StatusFeature | None:
    if not isinstance(status, dict):
        return None

    return StatusFeature(
        title=status.get("Title"),
        is_operational=status.get("IsOperational"),
    )


def parse_address(address_info) -> AddressFeature | None:
    if not isinstance(address_info, dict):
        return None

    street_parts = [line for line in (address_info.get("AddressLine1"), address_info.get("AddressLine2")) if line]

    address = AddressFeature(
        title=address_info.get("Title"),
        street_address=", ".join(street_parts) or None,
        city=address_info.get("Town"),
        state=address_info.get("StateOrProvince"),
        zip_code=address_info.get("Postcode"),
        phone=address_info.get("ContactTelephone1"),
        access_comments=address_info.get("AccessComments"),
    )

    if isinstance(country := address_info.get("Country"), dict):
        address["country"] = country.get("Title")

    return address


def parse_location(address_info) -> LocationFeature | None:
    if not isinstance(address_info, dict):
        return None

    latitude = address_info.get("Latitude")
    longitude = address_info.get("Longitude")

    if latitude is None or longitude is None:
        return None

    return LocationFeature(
        latitude=float(latitude),
        longitude=float(longitude),
    )


def parse_connection(connection) -> ChargingPortFeature:
    port = ChargingPortFeature(
        power=PowerFeature(
            amperage=connection.get("Amps"),
            voltage=connection.get("Voltage"),
            output=connection.get("PowerKW"),
        ),
        quantity=connection.get("Quantity"),
        status=parse_status(connection.get("StatusType")),
    )

    if connection_type := connection.get("ConnectionType"):
        port["plug"] = connection_type.get("Title")
        port["formal_name"] = connection_type.get("FormalName")

    if level := connection.get("Level"):
        port["level"] = level.get("Title")

    if current_type := connection.get("CurrentType"):
        port["current_type"] = current_type.get("Title")

    return port


def station_to_feature(station) -> StationFeature:
    """Convert one Open Charge Map POI into a StationFeature.

    Missing or malformed nested blocks are left empty rather than raising,
    the normalizer decides what a partial record becomes.
    """
    address_info = station.get("AddressInfo")

    references = []

    if station_uuid := station.get("UUID"):
        references.append(
            ReferenceFeature(
                identifier=station_uuid,
                system="OPEN_CHARGE_MAP_UUID",
            )
        )

    if isinstance(data_provider := station.get("DataProvider"), dict) and data_provider.get("Title"):
        references.append(
            ReferenceFeature(
                identifier=station.get("DataProvidersReference") or "",
                system=data_provider["Title"],
            )
        )

    operator = None

    if isinstance(operator_info := station.get("OperatorInfo"), dict):
        operator = OperatorFeature(
            name=operator_info.get("Title"),
            website=operator_info.get("WebsiteURL"),
            phone=operator_info.get("PhonePrimaryContact"),
            email=operator_info.get("ContactEmail"),
        )

    usage = UsageFeature(cost=station.get("UsageCost"))

    if isinstance(usage_type := station.get("UsageType"), dict):
        usage["title"] = usage_type.get("Title")
        usage["pay_at_location"] = usage_type.get("IsPayAtLocation")
        usage["membership_required"] = usage_type.get("IsMembershipRequired")
        usage["access_key_required"] = usage_type.get("IsAccessKeyRequired")

    reviews = []

    for comment in station.get("UserComments") or []:
        if not isinstance(comment, dict) or comment.get("Rating") is None:
            continue

        reviews.append(
            ReviewFeature(
                rating=comment["Rating"],
                comment=comment.get("Comment"),
            )
        )

    return StationFeature(
        name=address_info.get("Title") if isinstance(address_info, dict) else None,
        network_id=str(station["ID"]) if station.get("ID") is not None else None,
        location=parse_location(address_info),
        address=parse_address(address_info),
        operator=operator,
        usage=usage,
        status=parse_status(station.get("StatusType")),
        charging_ports=[parse_connection(connection) for connection in station.get("Connections") or [] if isinstance(connection, dict)],
        charge_point_count=station.get("NumberOfPoints"),
        reviews=reviews,
        last_verified=station.get("DateLastVerified"),
        references=references,
        source=SourceFeature(
            quality="AGGREGATED",
            system="OPEN_CHARGE_MAP",
        ),
    )


class OpenChargeMapSpider(scrapy.Spider):
    name = "openchargemap"

    def __init__(self, latitude=None, longitude=None, radius=5000, max_results=50, station_id=None, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.latitude = latitude
        self.longitude = longitude
        self.radius = float(radius)
        self.max_results = int(max_results)
        self.station_id = station_id

    def start_requests(self):
        settings = get_project_settings()

        api_key = settings.get("OCM_API_KEY")
        base_url = settings.get("OCM_API_BASE_URL")

        if self.station_id:
            query = by_id_query(api_key, self.station_id)
        else:
            query = nearby_query(api_key, float(self.latitude), float(self.longitude), self.radius, self.max_results)

        yield scrapy.http.JsonRequest(
            url=f"{base_url}/poi/?" + urlencode(query),
        )

    def parse(self, response):
        for station in response.json():
            try:
                yield station_to_feature(station)
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                self.logger.warning("Skipping unreadable station: %s", e)
