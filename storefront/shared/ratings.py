from typing import Any, Iterable, Mapping

from pydantic import BaseModel


class RatingSummary(BaseModel):
    average_rating: int = 0
    review_count: int = 0


def recompute_ratings(reviews: Iterable[Any]) -> RatingSummary:
    """Average (floored) and count over the full review set.

    Accepts plain ints, mappings or objects with a ``rating``. Always computed
    from scratch so the stored summary cannot drift from the reviews.
    """
    total = 0
    count = 0
    for review in reviews:
        if isinstance(review, int):
            rating = review
        elif isinstance(review, Mapping):
            rating = review["rating"]
        else:
            rating = review.rating
        total += int(rating)
        count += 1

    if count == 0:
        return RatingSummary(average_rating=0, review_count=0)
    return RatingSummary(average_rating=total // count, review_count=count)
