"""
Products-specific cache operations
"""

from typing import Any, Union

from storefront.api.products.models import ListingFilter
from storefront.shared.cache_keys import CacheKeys, build_listing_key
from storefront.shared.cache_service import CacheContext, Loader


class ProductsCache:
    """Products domain cache operations"""

    def __init__(self, cache: CacheContext):
        self.cache = cache

    # Revalidated on product create/update/delete, reviews and new orders
    async def latest_products(self, loader: Loader) -> Any:
        return await self.cache.fetch(CacheKeys.LATEST_PRODUCTS, loader)

    async def categories(self, loader: Loader) -> Any:
        return await self.cache.fetch(CacheKeys.CATEGORIES, loader)

    async def all_products(self, loader: Loader) -> Any:
        # No TTL: only an invalidation ever clears this key
        return await self.cache.fetch(CacheKeys.ALL_PRODUCTS, loader, expire=False)

    async def product(self, product_id: Union[int, str], loader: Loader) -> Any:
        return await self.cache.fetch(CacheKeys.product(product_id), loader)

    async def listing(self, listing_filter: ListingFilter, loader: Loader) -> Any:
        key = build_listing_key(listing_filter)
        return await self.cache.fetch(key, loader, listing=True)

    async def reviews(self, product_id: Union[int, str], loader: Loader) -> Any:
        return await self.cache.fetch(CacheKeys.reviews(product_id), loader)
