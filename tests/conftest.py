import copy
import json

import pytest
import requests

from reconcile.config import get_settings
from reconcile.errors import ProviderUnavailable
from scrapers.spiders.google_places import place_to_feature
from scrapers.spiders.openchargemap import station_to_feature


OCM_POI = {
    "ID": 123,
    "UUID": "0d5c2a38-2f4d-4b1e-9a51-6f1f2b3c4d5e",
    "DataProvider": {"Title": "Open Charge Map Contributors"},
    "DataProvidersReference": None,
    "OperatorInfo": {
        "Title": "ChargePoint",
        "WebsiteURL": "https://www.chargepoint.com/",
        "PhonePrimaryContact": "+1 888 758 4389",
    },
    "UsageType": {
        "Title": "Public - Membership Required",
        "IsPayAtLocation": False,
        "IsMembershipRequired": True,
        "IsAccessKeyRequired": False,
    },
    "UsageCost": "$0.30/kWh",
    "StatusType": {"Title": "Operational", "IsOperational": True},
    "AddressInfo": {
        "Title": "Main Street Garage",
        "AddressLine1": "1 Main St",
        "AddressLine2": "Level 2",
        "Town": "Springfield",
        "StateOrProvince": "IL",
        "Postcode": "62701",
        "Country": {"Title": "United States"},
        "Latitude": 39.78172,
        "Longitude": -89.65015,
    },
    "Connections": [
        {
            "ConnectionType": {"Title": "CCS (Type 1)", "FormalName": "SAE J1772-2009"},
            "Level": {"Title": "Level 3:  High (Over 40kW)"},
            "CurrentType": {"Title": "DC"},
            "StatusType": {"Title": "Operational", "IsOperational": True},
            "PowerKW": 50,
            "Amps": 125,
            "Voltage": 400,
            "Quantity": 2,
        },
        {
            "ConnectionType": {"Title": "Type 1 (J1772)"},
            "CurrentType": {"Title": "AC (Single-Phase)"},
            "PowerKW": 7.2,
            "Quantity": 4,
        },
    ],
    "NumberOfPoints": 6,
    "UserComments": [
        {"Rating": 4, "Comment": "Both DC chargers worked"},
        {"Rating": 5},
        {"Comment": "No rating left"},
    ],
    "DateLastVerified": "2026-09-01T12:00:00Z",
}

PLACE = {
    "id": "ChIJ-springfield-garage",
    "displayName": {"text": "Springfield Garage Chargers", "languageCode": "en"},
    "formattedAddress": "1 Main St, Springfield, IL 62701, USA",
    "location": {"latitude": 39.7818, "longitude": -89.6502},
    "rating": 4.0,
    "userRatingCount": 8,
    "types": ["electric_vehicle_charging_station", "parking", "cafe", "point_of_interest"],
    "primaryType": "electric_vehicle_charging_station",
    "businessStatus": "OPERATIONAL",
    "currentOpeningHours": {
        "openNow": True,
        "weekdayDescriptions": [
            f"{day}: Open 24 hours"
            for day in ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
        ],
    },
    "photos": [
        {"name": "places/ChIJ-springfield-garage/photos/first"},
        {"name": "places/ChIJ-springfield-garage/photos/second"},
    ],
    "evChargeOptions": {
        "connectorCount": 3,
        "connectorAggregation": [
            {
                "type": "EV_CONNECTOR_TYPE_CCS_COMBO_1",
                "maxChargeRateKw": 50,
                "count": 2,
                "availableCount": 1,
                "outOfServiceCount": 0,
                "availabilityLastUpdateTime": "2026-10-19T08:00:00Z",
            },
            {
                "type": "EV_CONNECTOR_TYPE_CHADEMO",
                "maxChargeRateKw": 50,
                "count": 1,
                "availableCount": 1,
            },
        ],
    },
    "internationalPhoneNumber": "+1 217-555-0100",
    "websiteUri": "https://springfield-garage.example.com/",
}


@pytest.fixture
def ocm_poi():
    return copy.deepcopy(OCM_POI)


@pytest.fixture
def place_json():
    return copy.deepcopy(PLACE)


@pytest.fixture
def station_feature(ocm_poi):
    return station_to_feature(ocm_poi)


@pytest.fixture
def place_feature(place_json):
    return place_to_feature(place_json)


@pytest.fixture
def settings():
    return get_settings({
        "OCM_API_KEY": "ocm-test-key",
        "GOOGLE_PLACES_API_KEY": "places-test-key",
    })


class FakeRegistry:
    name = "fake registry"

    def __init__(self, stations=None, error=None):
        self.stations = stations or []
        self.error = error
        self.calls = []

    def fetch_nearby(self, latitude, longitude, radius, max_results):
        self.calls.append(("fetch_nearby", latitude, longitude, radius, max_results))

        if self.error:
            raise self.error

        return list(self.stations)

    def fetch_by_id(self, native_id):
        self.calls.append(("fetch_by_id", native_id))

        if self.error:
            raise self.error

        for station in self.stations:
            if station.get("network_id") == str(native_id):
                return station

        return None


class FakeDirectory:
    name = "fake directory"

    def __init__(self, places=None, businesses=None, details=None, error=None):
        self.places = places or []
        self.businesses = businesses or []
        self.details = details or {}
        self.error = error
        self.calls = []

    def fetch_nearby(self, latitude, longitude, radius, max_results=None):
        self.calls.append(("fetch_nearby", latitude, longitude, radius, max_results))

        if self.error:
            raise self.error

        return list(self.places)

    def fetch_nearby_businesses(self, latitude, longitude, radius):
        self.calls.append(("fetch_nearby_businesses", latitude, longitude, radius))

        if self.error:
            raise self.error

        return list(self.businesses)

    def fetch_place(self, place_id):
        self.calls.append(("fetch_place", place_id))

        if self.error:
            raise self.error

        return self.details.get(place_id)


@pytest.fixture
def unavailable():
    return ProviderUnavailable("fake", "connection refused")


@pytest.fixture
def fake_registry():
    return FakeRegistry


@pytest.fixture
def fake_directory():
    return FakeDirectory


def make_json_response(payload, status_code=200):
    response = requests.Response()
    response.status_code = status_code
    response._content = json.dumps(payload).encode("utf-8")

    return response


class StubSession:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def request(self, method, url, **kwargs):
        self.requests.append((method, url, kwargs))

        response = self.responses.pop(0)

        if isinstance(response, Exception):
            raise response

        return response


@pytest.fixture
def json_response():
    return make_json_response


@pytest.fixture
def stub_session():
    return StubSession
