import scrapy


class ReferenceFeature(scrapy.Item):
    identifier: str = scrapy.Field()
    system: str = scrapy.Field()


class SourceFeature(scrapy.Item):
    quality: str = scrapy.Field()
    system: str = scrapy.Field()


class AddressFeature(scrapy.Item):
    title: str = scrapy.Field()
    street_address: str = scrapy.Field()
    city: str = scrapy.Field()
    state: str = scrapy.Field()
    zip_code: str = scrapy.Field()
    country: str = scrapy.Field()
    phone: str = scrapy.Field()
    access_comments: str = scrapy.Field()


class LocationFeature(scrapy.Item):
    latitude: float = scrapy.Field()
    longitude: float = scrapy.Field()


class OperatorFeature(scrapy.Item):
    name: str = scrapy.Field()
    website: str = scrapy.Field()
    phone: str = scrapy.Field()
    email: str = scrapy.Field()


class UsageFeature(scrapy.Item):
    title: str = scrapy.Field()
    cost: str = scrapy.Field()
    pay_at_location: bool = scrapy.Field()
    membership_required: bool = scrapy.Field()
    access_key_required: bool = scrapy.Field()


class StatusFeature(scrapy.Item):
    title: str = scrapy.Field()
    is_operational: bool = scrapy.Field()


class PowerFeature(scrapy.Item):
    amperage: int = scrapy.Field()
    voltage: int = scrapy.Field()
    output: float = scrapy.Field()


class ChargingPortFeature(scrapy.Item):
    plug: str = scrapy.Field()
    formal_name: str = scrapy.Field()

    power: PowerFeature = scrapy.Field()

    quantity: int = scrapy.Field()
    level: str = scrapy.Field()
    current_type: str = scrapy.Field()
    status: StatusFeature = scrapy.Field()


class ReviewFeature(scrapy.Item):
    rating: float = scrapy.Field()
    comment: str = scrapy.Field()


class StationFeature(scrapy.Item):
    name: str = scrapy.Field()
    network_id: str = scrapy.Field()

    location: LocationFeature = scrapy.Field()
    address: AddressFeature = scrapy.Field()

    operator: OperatorFeature = scrapy.Field()
    usage: UsageFeature = scrapy.Field()
    status: StatusFeature = scrapy.Field()

    charging_ports: list[ChargingPortFeature] = scrapy.Field()
    charge_point_count: int = scrapy.Field()

    reviews: list[ReviewFeature] = scrapy.Field()
    last_verified: str = scrapy.Field()

    references: list[ReferenceFeature] = scrapy.Field()
    source: SourceFeature = scrapy.Field()


class ConnectorAggregationFeature(scrapy.Item):
    plug: str = scrapy.Field()
    max_charge_rate: float = scrapy.Field()
    count: int = scrapy.Field()
    available_count: int = scrapy.Field()
    out_of_service_count: int = scrapy.Field()
    availability_updated: str = scrapy.Field()


class OpeningHoursFeature(scrapy.Item):
    open_now: bool = scrapy.Field()
    weekday_descriptions: list[str] = scrapy.Field()


class PlaceFeature(scrapy.Item):
    place_id: str = scrapy.Field()
    name: str = scrapy.Field()
    formatted_address: str = scrapy.Field()

    location: LocationFeature = scrapy.Field()

    rating: float = scrapy.Field()
    review_count: int = scrapy.Field()

    types: list[str] = scrapy.Field()
    primary_type: str = scrapy.Field()
    business_status: str = scrapy.Field()

    opening_hours: OpeningHoursFeature = scrapy.Field()
    photos: list[str] = scrapy.Field()

    connector_count: int = scrapy.Field()
    connectors: list[ConnectorAggregationFeature] = scrapy.Field()

    phone: str = scrapy.Field()
    website: str = scrapy.Field()

    source: SourceFeature = scrapy.Field()
