from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from reconcile.models import RatingProvider, RatingSource, Station


RATING_PRECISION = Decimal("0.01")


def to_rating(value) -> Optional[Decimal]:
    if value is None:
        return None

    return Decimal(str(value))


def combine_ratings(registry: Optional[RatingSource], directory: Optional[RatingSource]) -> tuple[Optional[Decimal], int]:
    """Review-count weighted average of up to two ratings.

    Returns the combined rating (None when neither side has one) and the
    total number of reviews behind it.
    """
    if registry is not None and directory is not None:
        total_reviews = registry.review_count + directory.review_count

        if total_reviews:
            weighted = (registry.value * registry.review_count + directory.value * directory.review_count) / total_reviews
        else:
            weighted = (registry.value + directory.value) / 2

        return weighted.quantize(RATING_PRECISION, rounding=ROUND_HALF_UP), total_reviews

    for rating in (registry, directory):
        if rating is not None:
            return rating.value, rating.review_count

    return None, 0


def update_combined_rating(station: Station):
    station.combined_rating, station.total_reviews = combine_ratings(
        station.rating_from(RatingProvider.REGISTRY),
        station.rating_from(RatingProvider.DIRECTORY),
    )
