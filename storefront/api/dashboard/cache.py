"""
Dashboard cache operations
"""

from typing import Any

from storefront.config.cache_config import cache_config
from storefront.shared.cache_keys import CacheKeys
from storefront.shared.cache_service import CacheContext, Loader


class DashboardCache:
    """Stats are read-through. Chart keys are always recomputed and written
    unless CACHE_CHART_READS is enabled."""

    def __init__(self, cache: CacheContext, chart_reads: bool = cache_config.CHART_READS):
        self.cache = cache
        self.chart_reads = chart_reads

    async def stats(self, loader: Loader) -> Any:
        return await self.cache.fetch(CacheKeys.ADMIN_STATS, loader)

    async def pie_charts(self, loader: Loader) -> Any:
        return await self.cache.fetch(
            CacheKeys.ADMIN_PIE_CHARTS, loader, read=self.chart_reads
        )

    async def bar_charts(self, loader: Loader) -> Any:
        return await self.cache.fetch(
            CacheKeys.ADMIN_BAR_CHARTS, loader, read=self.chart_reads
        )

    async def line_charts(self, loader: Loader) -> Any:
        return await self.cache.fetch(
            CacheKeys.ADMIN_LINE_CHARTS, loader, read=self.chart_reads
        )
