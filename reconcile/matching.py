from typing import Callable, Iterable, Optional, TypeVar

from reconcile.models import Location, Station


T = TypeVar("T")


def nearest_within(target: Location, candidates: Iterable[T], threshold: float, locate: Callable[[T], Optional[Location]]) -> tuple[Optional[T], Optional[float]]:
    """Find the candidate closest to ``target`` that is strictly closer than ``threshold`` degrees.

    Candidates without a location are skipped. On equal distances the first
    candidate wins.
    """
    closest = None
    closest_distance = None

    for candidate in candidates:
        candidate_location = locate(candidate)

        if candidate_location is None:
            continue

        candidate_distance = target.planar_distance(candidate_location)

        if candidate_distance >= threshold:
            continue

        if closest_distance is None or candidate_distance < closest_distance:
            closest = candidate
            closest_distance = candidate_distance

    return closest, closest_distance


def place_location(place) -> Optional[Location]:
    return Location.from_feature(place.get("location"))


def station_location(station: Station) -> Optional[Location]:
    return station.location


def match_place_to_station(stations: Iterable[Station], place, threshold: float) -> Optional[Station]:
    """Return the working-set station a directory record describes, if any."""
    location = place_location(place)

    if location is None:
        return None

    station, _ = nearest_within(location, stations, threshold, station_location)

    return station


def match_station_to_place(station: Station, places: Iterable, threshold: float):
    """Return the directory record closest to a single station, if any is close enough."""
    if station.location is None:
        return None

    place, _ = nearest_within(station.location, places, threshold, place_location)

    return place
