from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from geopy import distance
from typing import NamedTuple, Optional, Self
import dataclasses
import enum
import shapely


COORDINATE_PRECISION = 7


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float

    @classmethod
    def from_feature(cls, feature) -> Optional[Self]:
        if not feature:
            return None

        latitude = feature.get("latitude")
        longitude = feature.get("longitude")

        if latitude is None or longitude is None:
            return None

        return cls(
            latitude=round(float(latitude), COORDINATE_PRECISION),
            longitude=round(float(longitude), COORDINATE_PRECISION),
        )

    @property
    def coordinates(self):
        return (self.latitude, self.longitude)

    @property
    def point(self) -> shapely.Point:
        return shapely.Point(self.latitude, self.longitude)

    def planar_distance(self, other: Self) -> float:
        """Euclidean distance in degrees, no great-circle correction."""
        return self.point.distance(other.point)

    def distance(self, other: Self) -> distance.Distance:
        return distance.great_circle(self.coordinates, other.coordinates)


class PlugType(enum.Enum):
    J1772 = "Type 1 (J1772)"
    MENNEKES = "Type 2 (Mennekes)"
    J1772_COMBO = "CCS (Type 1)"
    MENNEKES_COMBO = "CCS (Type 2)"
    CHADEMO = "CHAdeMO"
    NACS = "NACS (Tesla)"
    GB_T = "GB/T"
    WALL_OUTLET = "Wall Outlet"


class ConnectorProvenance(enum.Enum):
    REGISTRY = "registry"
    DIRECTORY = "directory"


class RatingProvider(enum.Enum):
    REGISTRY = "registry"
    DIRECTORY = "directory"


class RatingSource(NamedTuple):
    source: RatingProvider
    value: Decimal
    review_count: int

    def __repr__(self):
        return f"<RatingSource({self.source.value!r}, {self.value}, {self.review_count})>"


@dataclass
class ConnectorRecord:
    connector_type: str
    power_kw: Optional[float] = None
    quantity: int = 1

    available_count: Optional[int] = None
    out_of_service_count: Optional[int] = None
    max_charge_rate_kw: Optional[float] = None
    availability_updated_at: Optional[str] = None

    provenance: ConnectorProvenance = ConnectorProvenance.REGISTRY

    formal_name: Optional[str] = None
    level: Optional[str] = None
    current_type: Optional[str] = None
    status: Optional[str] = None
    is_operational: Optional[bool] = None


@dataclass
class Address:
    street_address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    phone: Optional[str] = None
    access_comments: Optional[str] = None


@dataclass
class Operator:
    name: Optional[str] = None
    website: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None


@dataclass
class UsageTerms:
    title: Optional[str] = None
    cost: Optional[str] = None
    requires_membership: Optional[bool] = None
    pay_at_location: Optional[bool] = None
    requires_access_key: Optional[bool] = None


@dataclass
class Station:
    source_id: str
    name: str = ""

    ocm_uuid: Optional[str] = None
    place_id: Optional[str] = None
    data_provider: Optional[str] = None

    location: Optional[Location] = None
    address: Address = dataclasses.field(default_factory=Address)

    is_operational: Optional[bool] = None
    operator: Operator = dataclasses.field(default_factory=Operator)
    usage: UsageTerms = dataclasses.field(default_factory=UsageTerms)

    connectors: list[ConnectorRecord] = dataclasses.field(default_factory=list)
    total_connectors: int = 0

    ratings: dict[RatingProvider, RatingSource] = dataclasses.field(default_factory=dict)
    combined_rating: Optional[Decimal] = None
    total_reviews: int = 0

    opening_hours: list[str] = dataclasses.field(default_factory=list)
    open_now: Optional[bool] = None
    is_open_24h: Optional[bool] = None

    photo_references: list[str] = dataclasses.field(default_factory=list)
    amenities: list[str] = dataclasses.field(default_factory=list)
    website: Optional[str] = None

    last_sync_at: Optional[datetime] = None
    last_verified_at: Optional[datetime] = None
    is_recently_verified: bool = False

    def rating_from(self, provider: RatingProvider) -> Optional[RatingSource]:
        return self.ratings.get(provider)
