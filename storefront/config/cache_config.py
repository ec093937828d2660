"""
Cache configuration settings
TTL, backend selection and call timeouts for the read-through cache
"""

import os
from typing import Any, Dict

from dotenv import load_dotenv

from storefront.shared.utils import env_flag

load_dotenv()


class CacheConfig:
    """Cache configuration with environment variable overrides"""

    # Expiry applied to every set_with_expiry call
    TTL_SECONDS = int(os.getenv("TTL_SECONDS", str(60 * 60 * 4)))  # 4 hours

    # "memory" for a single process, "redis" for anything shared
    BACKEND = os.getenv("CACHE_BACKEND", "memory").strip().lower()
    REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

    # Upper bound on every call into the key-value store
    TIMEOUT_SECONDS = float(os.getenv("CACHE_TIMEOUT_SECONDS", "2.0"))

    # Pie/bar/line charts are write-only unless this is enabled
    CHART_READS = env_flag("CACHE_CHART_READS")

    # In-memory backend housekeeping
    CLEANUP_INTERVAL_MINUTES = int(os.getenv("CACHE_CLEANUP_INTERVAL", "5"))

    @classmethod
    def get_all_settings(cls) -> Dict[str, Any]:
        """Get all cache settings for debugging/monitoring"""
        return {
            "ttl_seconds": cls.TTL_SECONDS,
            "backend": cls.BACKEND,
            "timeout_seconds": cls.TIMEOUT_SECONDS,
            "chart_reads": cls.CHART_READS,
            "cleanup_interval_minutes": cls.CLEANUP_INTERVAL_MINUTES,
        }


# Global cache config instance
cache_config = CacheConfig()
