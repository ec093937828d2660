"""
Cache key namespace

Fixed keys are shared with dashboard and listing consumers outside this
service, so their spelling must not change.
"""

from typing import TYPE_CHECKING, Optional, Union
from urllib.parse import quote

if TYPE_CHECKING:
    from storefront.api.products.models import ListingFilter

# Placeholder for an absent optional field. quote() always escapes "*",
# so it can never appear inside an encoded value.
ABSENT = "*"
SEPARATOR = "-"


class CacheKeys:
    LATEST_PRODUCTS = "latest-products"
    CATEGORIES = "categories"
    ALL_PRODUCTS = "all-products"

    ADMIN_STATS = "admin-stats"
    ADMIN_PIE_CHARTS = "admin-pie-charts"
    ADMIN_BAR_CHARTS = "admin-bar-charts"
    ADMIN_LINE_CHARTS = "admin-line-charts"

    ALL_ORDERS = "all-orders"

    # Set of listing keys currently written to the store
    LISTING_INDEX = "listing-keys"

    # Counter bumped by every invalidation, shared by all workers
    GENERATION = "cache-generation"

    PRODUCT_PREFIX = "product"
    REVIEWS_PREFIX = "reviews"
    LISTING_PREFIX = "products"
    ORDER_PREFIX = "order"
    MY_ORDERS_PREFIX = "my-orders"

    @staticmethod
    def product(product_id: Union[int, str]) -> str:
        return f"{CacheKeys.PRODUCT_PREFIX}-{product_id}"

    @staticmethod
    def reviews(product_id: Union[int, str]) -> str:
        return f"{CacheKeys.REVIEWS_PREFIX}-{product_id}"

    @staticmethod
    def order(order_id: Union[int, str]) -> str:
        return f"{CacheKeys.ORDER_PREFIX}-{order_id}"

    @staticmethod
    def my_orders(user_id: str) -> str:
        return f"{CacheKeys.MY_ORDERS_PREFIX}-{user_id}"

    @classmethod
    def admin_keys(cls) -> tuple:
        return (
            cls.ADMIN_STATS,
            cls.ADMIN_PIE_CHARTS,
            cls.ADMIN_BAR_CHARTS,
            cls.ADMIN_LINE_CHARTS,
        )


def _text_part(value: Optional[str]) -> str:
    if value is None:
        return ABSENT
    # "-" is the separator and "~" is left alone by quote(); escape both
    return quote(value, safe="").replace("-", "%2D").replace("~", "%7E")


def _price_part(value: Optional[float]) -> str:
    if value is None:
        return ABSENT
    rendered = repr(float(value))
    if rendered.endswith(".0"):
        rendered = rendered[:-2]
    return _text_part(rendered)


def build_listing_key(listing_filter: "ListingFilter") -> str:
    """Derive the cache key of one listing page.

    Field order is fixed: search, sort, category, price, page. Equal filters
    always produce equal keys and any differing field produces a different key.
    """
    sort = listing_filter.sort.value if listing_filter.sort is not None else None
    parts = [
        CacheKeys.LISTING_PREFIX,
        _text_part(listing_filter.search),
        _text_part(sort),
        _text_part(listing_filter.category),
        _price_part(listing_filter.max_price),
        str(int(listing_filter.page)),
    ]
    return SEPARATOR.join(parts)
