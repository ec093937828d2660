import asyncio
from typing import Optional, Set

from storefront.shared.core_cache import InMemoryCacheBackend


class FlakyBackend(InMemoryCacheBackend):
    """In-memory backend whose operations can be switched to fail."""

    def __init__(self):
        super().__init__()
        self.fail_reads = False
        self.fail_writes = False
        self.fail_deletes = False
        self.delay_seconds = 0.0

    async def _maybe_fail(self, enabled: bool, operation: str) -> None:
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)
        if enabled:
            raise ConnectionError(f"{operation} refused")

    async def get(self, key: str) -> Optional[bytes]:
        await self._maybe_fail(self.fail_reads, "get")
        return await super().get(key)

    async def set(self, key: str, data: bytes, ttl_seconds: Optional[int]) -> None:
        await self._maybe_fail(self.fail_writes, "set")
        await super().set(key, data, ttl_seconds)

    async def add_to_set(self, name: str, member: str) -> None:
        await self._maybe_fail(self.fail_writes, "sadd")
        await super().add_to_set(name, member)

    async def delete(self, keys: Set[str]) -> int:
        await self._maybe_fail(self.fail_deletes, "delete")
        return await super().delete(keys)

    async def incr(self, name: str) -> int:
        await self._maybe_fail(self.fail_writes, "incr")
        return await super().incr(name)

    async def get_counter(self, name: str) -> int:
        await self._maybe_fail(self.fail_reads, "get counter")
        return await super().get_counter(name)


class CountingLoader:
    """Loader that records how often it ran and can pause until released."""

    def __init__(self, value, gate: Optional[asyncio.Event] = None):
        self.value = value
        self.gate = gate
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        return self.value
