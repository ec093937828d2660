"""
Orders-specific cache operations
"""

from typing import Any, Union

from storefront.shared.cache_keys import CacheKeys
from storefront.shared.cache_service import CacheContext, Loader


class OrdersCache:
    def __init__(self, cache: CacheContext):
        self.cache = cache

    async def my_orders(self, user_id: str, loader: Loader) -> Any:
        return await self.cache.fetch(CacheKeys.my_orders(user_id), loader)

    async def all_orders(self, loader: Loader) -> Any:
        return await self.cache.fetch(CacheKeys.ALL_ORDERS, loader)

    async def order(self, order_id: Union[int, str], loader: Loader) -> Any:
        return await self.cache.fetch(CacheKeys.order(order_id), loader)
