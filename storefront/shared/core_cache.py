"""
Key-value store client used by the read-through cache

Two backends share one contract: an in-process TTL map for development and
tests, and Redis for anything that runs more than one worker. Every call is
bounded by a timeout and every failure surfaces as UpstreamUnavailable.
"""

import asyncio
import json
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Any, Awaitable, Dict, Iterable, Optional, Set

import redis.asyncio as redis
from redis.exceptions import RedisError

from storefront.config.cache_config import cache_config
from storefront.shared.exceptions import UpstreamUnavailable
from storefront.shared.utils import get_logger

logger = get_logger(__name__)


class CacheCodec(ABC):
    """Turns cached values into bytes and back"""

    @abstractmethod
    def encode(self, value: Any) -> bytes: ...

    @abstractmethod
    def decode(self, data: bytes) -> Any: ...


class JsonCodec(CacheCodec):
    def encode(self, value: Any) -> bytes:
        return json.dumps(value, default=str, separators=(",", ":")).encode("utf-8")

    def decode(self, data: bytes) -> Any:
        return json.loads(data)


class CacheEntry:
    """Cache entry with optional expiration time"""

    def __init__(self, value: bytes, ttl_seconds: Optional[int] = None):
        self.value = value
        self.expires_at = (
            datetime.now() + timedelta(seconds=ttl_seconds) if ttl_seconds else None
        )

    def is_expired(self) -> bool:
        return self.expires_at is not None and datetime.now() >= self.expires_at


class CacheBackend(ABC):
    """Raw byte-level operations against a cache service"""

    async def connect(self) -> None:
        pass

    async def close(self) -> None:
        pass

    @abstractmethod
    async def ping(self) -> bool: ...

    @abstractmethod
    async def get(self, key: str) -> Optional[bytes]: ...

    @abstractmethod
    async def set(self, key: str, data: bytes, ttl_seconds: Optional[int]) -> None: ...

    @abstractmethod
    async def delete(self, keys: Set[str]) -> int: ...

    @abstractmethod
    async def add_to_set(self, name: str, member: str) -> None: ...

    @abstractmethod
    async def drain_set(self, name: str) -> Set[str]: ...

    @abstractmethod
    async def incr(self, name: str) -> int: ...

    @abstractmethod
    async def get_counter(self, name: str) -> int: ...


class InMemoryCacheBackend(CacheBackend):
    """Single-process backend; expired entries are dropped lazily"""

    def __init__(self):
        self._cache: Dict[str, CacheEntry] = {}
        self._sets: Dict[str, Set[str]] = {}
        self._counters: Dict[str, int] = {}
        self._lock = asyncio.Lock()
        self._last_cleanup = datetime.now()
        self._cleanup_interval = timedelta(
            minutes=cache_config.CLEANUP_INTERVAL_MINUTES
        )

    def _cleanup_if_needed(self):
        now = datetime.now()
        if now - self._last_cleanup > self._cleanup_interval:
            expired_keys = [
                key for key, entry in self._cache.items() if entry.is_expired()
            ]

            for key in expired_keys:
                del self._cache[key]

            if expired_keys:
                logger.info(f"Cleaned up {len(expired_keys)} expired cache entries")

            self._last_cleanup = now

    async def ping(self) -> bool:
        return True

    async def get(self, key: str) -> Optional[bytes]:
        async with self._lock:
            self._cleanup_if_needed()

            entry = self._cache.get(key)
            if entry is None:
                return None
            if entry.is_expired():
                del self._cache[key]
                return None
            return entry.value

    async def set(self, key: str, data: bytes, ttl_seconds: Optional[int]) -> None:
        async with self._lock:
            self._cache[key] = CacheEntry(data, ttl_seconds)

    async def delete(self, keys: Set[str]) -> int:
        deleted = 0
        async with self._lock:
            for key in keys:
                entry = self._cache.pop(key, None)
                if entry is not None and not entry.is_expired():
                    deleted += 1
                if self._sets.pop(key, None) is not None:
                    deleted += 1
        return deleted

    async def add_to_set(self, name: str, member: str) -> None:
        async with self._lock:
            self._sets.setdefault(name, set()).add(member)

    async def drain_set(self, name: str) -> Set[str]:
        async with self._lock:
            return self._sets.pop(name, set())

    async def incr(self, name: str) -> int:
        async with self._lock:
            self._counters[name] = self._counters.get(name, 0) + 1
            return self._counters[name]

    async def get_counter(self, name: str) -> int:
        async with self._lock:
            return self._counters.get(name, 0)

    def keys(self) -> Set[str]:
        """Live keys, for diagnostics and tests"""
        return {key for key, entry in self._cache.items() if not entry.is_expired()}


class RedisCacheBackend(CacheBackend):
    def __init__(self, url: str, socket_timeout: float = cache_config.TIMEOUT_SECONDS):
        self.url = url
        self.socket_timeout = socket_timeout
        self._client: Optional[redis.Redis] = None

    @property
    def client(self) -> redis.Redis:
        if self._client is None:
            raise UpstreamUnavailable("connect")
        return self._client

    async def connect(self) -> None:
        self._client = redis.from_url(
            self.url,
            decode_responses=False,
            socket_connect_timeout=self.socket_timeout,
            socket_timeout=self.socket_timeout,
        )
        logger.info("Redis cache backend configured")

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def ping(self) -> bool:
        return bool(await self.client.ping())

    async def get(self, key: str) -> Optional[bytes]:
        return await self.client.get(key)

    async def set(self, key: str, data: bytes, ttl_seconds: Optional[int]) -> None:
        if ttl_seconds:
            await self.client.setex(key, ttl_seconds, data)
        else:
            await self.client.set(key, data)

    async def delete(self, keys: Set[str]) -> int:
        return int(await self.client.delete(*keys))

    async def add_to_set(self, name: str, member: str) -> None:
        await self.client.sadd(name, member)

    async def drain_set(self, name: str) -> Set[str]:
        async with self.client.pipeline(transaction=True) as pipe:
            pipe.smembers(name)
            pipe.delete(name)
            members, _ = await pipe.execute()
        return {m.decode() if isinstance(m, bytes) else m for m in members}

    async def incr(self, name: str) -> int:
        return int(await self.client.incr(name))

    async def get_counter(self, name: str) -> int:
        value = await self.client.get(name)
        return int(value) if value is not None else 0


class KeyValueStore:
    """Value-level cache client: encodes, bounds every call, normalizes failures"""

    def __init__(
        self,
        backend: CacheBackend,
        codec: Optional[CacheCodec] = None,
        timeout_seconds: float = cache_config.TIMEOUT_SECONDS,
    ):
        self.backend = backend
        self.codec = codec or JsonCodec()
        self.timeout_seconds = timeout_seconds

    async def connect(self) -> None:
        await self.backend.connect()

    async def close(self) -> None:
        await self.backend.close()

    async def _call(self, operation: str, awaitable: Awaitable[Any]) -> Any:
        try:
            return await asyncio.wait_for(awaitable, timeout=self.timeout_seconds)
        except UpstreamUnavailable:
            raise
        except asyncio.TimeoutError as e:
            raise UpstreamUnavailable(operation, e) from e
        except (RedisError, OSError) as e:
            raise UpstreamUnavailable(operation, e) from e

    async def ping(self) -> bool:
        return await self._call("ping", self.backend.ping())

    async def get(self, key: str) -> Optional[Any]:
        """Get value from cache; None when absent"""
        data = await self._call("get", self.backend.get(key))
        if data is None:
            return None
        try:
            return self.codec.decode(data)
        except ValueError:
            logger.warning(f"Discarding undecodable cache entry {key}")
            return None

    async def set_with_expiry(self, key: str, ttl_seconds: int, value: Any) -> None:
        data = self.codec.encode(value)
        await self._call("set", self.backend.set(key, data, ttl_seconds))

    async def set_no_expiry(self, key: str, value: Any) -> None:
        data = self.codec.encode(value)
        await self._call("set", self.backend.set(key, data, None))

    async def delete(self, keys: Iterable[str]) -> int:
        """Delete keys in one batch; absent keys are not an error"""
        keys = set(keys)
        if not keys:
            return 0
        return await self._call("delete", self.backend.delete(keys))

    async def add_to_set(self, name: str, member: str) -> None:
        await self._call("index add", self.backend.add_to_set(name, member))

    async def drain_set(self, name: str) -> Set[str]:
        return await self._call("index drain", self.backend.drain_set(name))

    async def incr(self, name: str) -> int:
        return await self._call("incr", self.backend.incr(name))

    async def get_counter(self, name: str) -> int:
        return await self._call("counter read", self.backend.get_counter(name))


def build_backend(backend: str = cache_config.BACKEND) -> CacheBackend:
    if backend == "redis":
        return RedisCacheBackend(cache_config.REDIS_URL)
    if backend == "memory":
        return InMemoryCacheBackend()
    raise ValueError(f"Unknown cache backend: {backend}")
