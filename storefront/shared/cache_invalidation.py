"""
Tag-based cache invalidation

Write paths describe what changed with an InvalidationTagSet; the manager
turns the tags into concrete keys and deletes them in one batch.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Set, Union

from storefront.shared.cache_keys import CacheKeys
from storefront.shared.core_cache import KeyValueStore
from storefront.shared.exceptions import UpstreamUnavailable
from storefront.shared.utils import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class InvalidationTagSet:
    """What a write just changed. Built by the caller, consumed once."""

    product: bool = False
    order: bool = False
    admin: bool = False
    review: bool = False
    product_id: Union[str, int, Sequence[Union[str, int]], None] = None
    order_id: Union[str, int, None] = None
    user_id: Optional[str] = None

    def product_ids(self) -> List[str]:
        if self.product_id is None:
            return []
        if isinstance(self.product_id, (str, int)):
            return [str(self.product_id)]
        return [str(pid) for pid in self.product_id]


class ListingKeyIndex:
    """Every listing key that may currently be cached.

    Stored as a set in the key-value backend so all workers share it. A key is
    added before its value is written, so the index always covers what the
    store holds; stale extra members only cost a no-op delete.
    """

    def __init__(self, store: KeyValueStore, name: str = CacheKeys.LISTING_INDEX):
        self.store = store
        self.name = name

    async def add(self, key: str) -> None:
        await self.store.add_to_set(self.name, key)

    async def drain(self) -> Set[str]:
        return await self.store.drain_set(self.name)

    async def restore(self, keys: Set[str]) -> None:
        """Put drained keys back after a failed delete, as far as possible"""
        for key in keys:
            try:
                await self.store.add_to_set(self.name, key)
            except UpstreamUnavailable:
                logger.error(f"Could not restore listing key {key} to the index")
                return


class CacheInvalidationManager:
    """Translates tag sets into keys and purges them"""

    def __init__(self, store: KeyValueStore, listing_index: ListingKeyIndex):
        self.store = store
        self.listing_index = listing_index

    async def current_generation(self) -> int:
        """Bumped by every invalidation in any worker; fills that straddle a
        bump are dropped. Raises UpstreamUnavailable."""
        return await self.store.get_counter(CacheKeys.GENERATION)

    def keys_for(self, tags: InvalidationTagSet) -> Set[str]:
        """Fixed keys for a tag set, excluding the tracked listing keys"""
        keys: Set[str] = set()
        product_ids = tags.product_ids()

        if tags.product:
            keys.update(
                (CacheKeys.LATEST_PRODUCTS, CacheKeys.CATEGORIES, CacheKeys.ALL_PRODUCTS)
            )
            keys.update(CacheKeys.product(pid) for pid in product_ids)

        if tags.order:
            keys.add(CacheKeys.ALL_ORDERS)
            if tags.user_id:
                keys.add(CacheKeys.my_orders(tags.user_id))
            if tags.order_id is not None:
                keys.add(CacheKeys.order(tags.order_id))

        if tags.admin:
            keys.update(CacheKeys.admin_keys())

        if tags.review:
            keys.update(CacheKeys.reviews(pid) for pid in product_ids)

        return keys

    async def invalidate(self, tags: InvalidationTagSet) -> int:
        """Delete every key the tags could have made stale.

        Must be called after the mutation is committed. Raises
        UpstreamUnavailable when the delete cannot be confirmed.
        """
        keys = self.keys_for(tags)

        listing_keys: Set[str] = set()
        try:
            await self.store.incr(CacheKeys.GENERATION)
            if tags.product:
                listing_keys = await self.listing_index.drain()
            deleted = await self.store.delete(keys | listing_keys)
        except UpstreamUnavailable as e:
            logger.error(
                f"Cache invalidation failed for {tags}; "
                f"{len(keys) + len(listing_keys)} keys may serve stale data: {e}"
            )
            if listing_keys:
                await self.listing_index.restore(listing_keys)
            raise

        logger.info(
            f"Cache invalidation completed for {tags}. "
            f"Keys requested: {len(keys) + len(listing_keys)}, deleted: {deleted}"
        )
        return deleted
