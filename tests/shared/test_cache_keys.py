import pytest

from storefront.api.products.models import ListingFilter
from storefront.config.constants import SortDirection
from storefront.shared.cache_keys import CacheKeys, build_listing_key


def test_empty_filter_uses_placeholders():
    assert build_listing_key(ListingFilter()) == "products-*-*-*-*-1"


def test_full_filter_field_order():
    listing_filter = ListingFilter(
        search="phone", sort=SortDirection.ASC, category="audio", max_price=500, page=3
    )
    assert build_listing_key(listing_filter) == "products-phone-asc-audio-500-3"


def test_equal_filters_give_equal_keys():
    first = ListingFilter(search="lamp", category="home", page=2)
    second = ListingFilter(search="lamp", category="home", page=2)
    assert build_listing_key(first) == build_listing_key(second)


def test_price_is_canonical():
    assert build_listing_key(ListingFilter(max_price=500.0)) == build_listing_key(
        ListingFilter(max_price=500)
    )
    assert build_listing_key(ListingFilter(max_price=49.5)).endswith("-49.5-1")


@pytest.mark.parametrize(
    "changes",
    [
        {"search": "lamps"},
        {"sort": SortDirection.DESC},
        {"category": "garden"},
        {"max_price": 100},
        {"page": 2},
    ],
)
def test_any_single_field_change_changes_the_key(changes):
    base = {"search": "lamp", "sort": SortDirection.ASC, "category": "home", "max_price": 50}
    assert build_listing_key(ListingFilter(**base)) != build_listing_key(
        ListingFilter(**{**base, **changes})
    )


def test_separator_inside_values_is_escaped():
    key = build_listing_key(ListingFilter(search="wi-fi", category="a-b"))
    assert key == "products-wi%2Dfi-*-a%2Db-*-1"
    assert len(key.split("-")) == 6


def test_separator_cannot_shift_fields():
    shifted = ListingFilter(search="a-asc", category=None)
    honest = ListingFilter(search="a", sort=SortDirection.ASC)
    assert build_listing_key(shifted) != build_listing_key(honest)


def test_literal_placeholder_differs_from_absent():
    assert build_listing_key(ListingFilter(search="*")) != build_listing_key(
        ListingFilter()
    )


def test_blank_strings_are_absent():
    assert build_listing_key(ListingFilter(search="", category="")) == build_listing_key(
        ListingFilter()
    )


def test_fixed_key_names():
    assert CacheKeys.product(7) == "product-7"
    assert CacheKeys.reviews("7") == "reviews-7"
    assert CacheKeys.order(3) == "order-3"
    assert CacheKeys.my_orders("u1") == "my-orders-u1"
    assert CacheKeys.admin_keys() == (
        "admin-stats",
        "admin-pie-charts",
        "admin-bar-charts",
        "admin-line-charts",
    )
