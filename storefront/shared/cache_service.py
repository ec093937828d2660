"""
Read-through cache and the per-process cache context

ReadThroughCache is the only code path that writes cache entries. Reads fail
open: when the store is unreachable the loader runs against the document
store and the request still succeeds.
"""

from typing import Any, Awaitable, Callable, Optional

from storefront.config.cache_config import cache_config
from storefront.shared.cache_invalidation import (
    CacheInvalidationManager,
    InvalidationTagSet,
    ListingKeyIndex,
)
from storefront.shared.core_cache import CacheBackend, KeyValueStore, build_backend
from storefront.shared.exceptions import UpstreamUnavailable
from storefront.shared.single_flight import SingleFlight
from storefront.shared.utils import get_logger

logger = get_logger(__name__)

Loader = Callable[[], Awaitable[Any]]


class ReadThroughCache:
    def __init__(
        self,
        store: KeyValueStore,
        invalidation: CacheInvalidationManager,
        ttl_seconds: int = cache_config.TTL_SECONDS,
    ):
        self.store = store
        self.invalidation = invalidation
        self.ttl_seconds = ttl_seconds
        self.single_flight = SingleFlight()

    async def lookup(self, key: str) -> Optional[Any]:
        try:
            return await self.store.get(key)
        except UpstreamUnavailable as e:
            logger.warning(f"Cache read failed for {key}, using the document store: {e}")
            return None

    async def fetch(
        self,
        key: str,
        loader: Loader,
        *,
        expire: bool = True,
        listing: bool = False,
        read: bool = True,
    ) -> Any:
        """Return the cached value for key, or load, fill and return it.

        expire=False writes the entry without a TTL. listing=True registers the
        key in the listing index before writing it. read=False skips the lookup
        and always recomputes (the value is still written).
        """
        if read:
            cached = await self.lookup(key)
            if cached is not None:
                logger.debug(f"Cache hit: {key}")
                return cached
            logger.debug(f"Cache miss: {key}")

        try:
            generation = await self.invalidation.current_generation()
        except UpstreamUnavailable as e:
            logger.warning(f"Cache generation unreadable, loading {key} without fill: {e}")
            return await self.single_flight.do((key, None), loader)

        return await self.single_flight.do(
            (key, generation),
            lambda: self._load_and_fill(key, loader, generation, expire, listing),
        )

    async def _generation_moved(self, generation: int) -> bool:
        try:
            return await self.invalidation.current_generation() != generation
        except UpstreamUnavailable:
            return True

    async def _load_and_fill(
        self, key: str, loader: Loader, generation: int, expire: bool, listing: bool
    ) -> Any:
        value = await loader()

        if await self._generation_moved(generation):
            logger.info(f"Skipping cache fill for {key}: invalidated while loading")
            return value

        try:
            if listing:
                await self.invalidation.listing_index.add(key)
            if expire:
                await self.store.set_with_expiry(key, self.ttl_seconds, value)
            else:
                await self.store.set_no_expiry(key, value)
        except UpstreamUnavailable as e:
            logger.warning(f"Cache fill failed for {key}: {e}")
            return value

        if await self._generation_moved(generation):
            # An invalidation ran while we were writing; drop what we wrote
            try:
                await self.store.delete({key})
            except UpstreamUnavailable as e:
                logger.error(f"Could not retract racing cache fill for {key}: {e}")

        return value


class CacheContext:
    """Everything cache-related a request needs, created once per process"""

    def __init__(self, store: KeyValueStore):
        self.store = store
        self.listing_index = ListingKeyIndex(store)
        self.invalidation = CacheInvalidationManager(store, self.listing_index)
        self.read_through = ReadThroughCache(store, self.invalidation)

    async def connect(self) -> None:
        await self.store.connect()
        logger.info("Cache context connected")

    async def close(self) -> None:
        await self.store.close()
        logger.info("Cache context closed")

    async def fetch(self, key: str, loader: Loader, **options) -> Any:
        return await self.read_through.fetch(key, loader, **options)

    async def invalidate(self, **tags) -> int:
        return await self.invalidation.invalidate(InvalidationTagSet(**tags))


def build_cache_context(backend: Optional[CacheBackend] = None) -> CacheContext:
    return CacheContext(KeyValueStore(backend or build_backend()))
