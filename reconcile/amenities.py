from typing import Iterable


PLACE_TYPE_TO_AMENITY_MAP = {
    "parking": "parking",

    "restaurant": "restaurant",
    "cafe": "cafe",
    "food": "food",
    "meal_takeaway": "food",
    "bakery": "food",

    "shopping_mall": "shopping",
    "convenience_store": "convenience_store",
    "supermarket": "shopping",
    "store": "shopping",

    "gas_station": "gas_station",
    "atm": "atm",
    "bank": "atm",

    # Restrooms are implied by these
    "rest_stop": "restroom",
    "lodging": "restroom",
    "hotel": "restroom",

    "pharmacy": "pharmacy",
    "hospital": "hospital",
    "doctor": "hospital",

    "gym": "gym",
    "spa": "spa",
    "movie_theater": "entertainment",

    "wheelchair_accessible": "wheelchair_accessible",
}


def map_types_to_amenities(place_types: Iterable[str]) -> list[str]:
    amenities = []

    for place_type in place_types or []:
        amenity = PLACE_TYPE_TO_AMENITY_MAP.get(place_type)

        if amenity and amenity not in amenities:
            amenities.append(amenity)

    return amenities
