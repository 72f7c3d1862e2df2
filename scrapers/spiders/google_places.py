from scrapers.items import ConnectorAggregationFeature, LocationFeature, OpeningHoursFeature, PlaceFeature, SourceFeature

from scrapy.utils.project import get_project_settings
import scrapy


PLACE_FIELDS = [
    "id",
    "displayName",
    "formattedAddress",
    "location",
    "rating",
    "userRatingCount",
    "types",
    "primaryType",
    "businessStatus",
    "evChargeOptions",
    "currentOpeningHours",
    "photos",
    "internationalPhoneNumber",
    "websiteUri",
]

SEARCH_FIELD_MASK = ",".join(f"places.{field}" for field in PLACE_FIELDS)
DETAILS_FIELD_MASK = ",".join(PLACE_FIELDS)


def request_headers(api_key, field_mask) -> dict:
    return {
        "Content-Type": "application/json",
        "X-Goog-Api-Key": api_key or "",
        "X-Goog-FieldMask": field_mask,
    }


def search_circle(latitude, longitude, radius) -> dict:
    return {
        "circle": {
            "center": {
                "latitude": latitude,
                "longitude": longitude,
            },
            "radius": float(radius),
        },
    }


def charging_station_search_body(latitude, longitude, radius, page_size) -> dict:
    return {
        "textQuery": "EV charging station",
        "pageSize": page_size,
        "languageCode": "en",
        "locationBias": search_circle(latitude, longitude, radius),
        "rankPreference": "DISTANCE",
    }


def business_search_body(latitude, longitude, radius, page_size) -> dict:
    return {
        "maxResultCount": page_size,
        "languageCode": "en",
        "locationRestriction": search_circle(latitude, longitude, radius),
        "rankPreference": "DISTANCE",
    }


def parse_connector_aggregation(aggregation) -> ConnectorAggregationFeature:
    return ConnectorAggregationFeature(
        plug=aggregation.get("type"),
        max_charge_rate=aggregation.get("maxChargeRateKw"),
        count=aggregation.get("count"),
        available_count=aggregation.get("availableCount"),
        out_of_service_count=aggregation.get("outOfServiceCount"),
        availability_updated=aggregation.get("availabilityLastUpdateTime"),
    )


def place_to_feature(place) -> PlaceFeature:
    feature = PlaceFeature(
        place_id=place.get("id"),
        formatted_address=place.get("formattedAddress"),
        rating=place.get("rating"),
        review_count=place.get("userRatingCount"),
        types=list(place.get("types") or []),
        primary_type=place.get("primaryType"),
        business_status=place.get("businessStatus"),
        photos=[photo["name"] for photo in place.get("photos") or [] if isinstance(photo, dict) and photo.get("name")],
        connectors=[],
        phone=place.get("internationalPhoneNumber"),
        website=place.get("websiteUri"),
        source=SourceFeature(
            quality="PARTNER",
            system="GOOGLE_PLACES",
        ),
    )

    if isinstance(display_name := place.get("displayName"), dict):
        feature["name"] = display_name.get("text")
    elif isinstance(display_name, str):
        feature["name"] = display_name

    if (location := place.get("location")) and location.get("latitude") is not None and location.get("longitude") is not None:
        feature["location"] = LocationFeature(
            latitude=float(location["latitude"]),
            longitude=float(location["longitude"]),
        )

    if opening_hours := place.get("currentOpeningHours"):
        feature["opening_hours"] = OpeningHoursFeature(
            open_now=opening_hours.get("openNow"),
            weekday_descriptions=list(opening_hours.get("weekdayDescriptions") or []),
        )

    if ev_options := place.get("evChargeOptions"):
        feature["connector_count"] = ev_options.get("connectorCount")
        feature["connectors"] = [
            parse_connector_aggregation(aggregation)
            for aggregation in ev_options.get("connectorAggregation") or []
        ]

    return feature


class GooglePlacesSpider(scrapy.Spider):
    name = "google_places"

    def __init__(self, latitude=None, longitude=None, radius=5000, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.latitude = float(latitude)
        self.longitude = float(longitude)
        self.radius = float(radius)

    def start_requests(self):
        settings = get_project_settings()

        base_url = settings.get("GOOGLE_PLACES_API_BASE_URL")

        yield scrapy.http.JsonRequest(
            url=f"{base_url}/places:searchText",
            data=charging_station_search_body(self.latitude, self.longitude, self.radius, settings.getint("DIRECTORY_PAGE_SIZE")),
            headers=request_headers(settings.get("GOOGLE_PLACES_API_KEY"), SEARCH_FIELD_MASK),
        )

    def parse(self, response):
        for place in response.json().get("places", []):
            try:
                yield place_to_feature(place)
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                self.logger.warning("Skipping unreadable place: %s", e)
