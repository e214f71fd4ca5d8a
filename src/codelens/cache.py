"""
Bounded result cache for codelens.

Uses diskcache for SQLite-backed storage shared safely across threads and
processes.
"""

import hashlib
import json
from typing import Any, Optional

from diskcache import Cache

from .logging_config import get_logger

logger = get_logger(__name__)


def cache_key(language: str, source: str, salt: str = "") -> str:
    """SHA-256 of language, source and an optional configuration salt."""
    data = f"{salt}\0{language}\0{source}"
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


def compute_config_hash(config: dict) -> str:
    """
    Compute hash of configuration for cache invalidation.

    Args:
        config: Configuration dictionary

    Returns:
        Short SHA-256 hash of configuration
    """
    config_str = json.dumps(config, sort_keys=True, default=str)
    return hashlib.sha256(config_str.encode()).hexdigest()[:16]


class ResultCache:
    """
    Size-limited, TTL-expiring cache of analysis results.

    Features:
    - Keys derived from (language, content hash)
    - Oldest entries evicted once ``max_entries`` is exceeded
    - Insert and eviction run in one transaction
    - Every fault is logged and reported as a miss
    """

    def __init__(
        self,
        cache_dir: Optional[str] = None,
        max_entries: int = 100,
        ttl_seconds: int = 300,
        enabled: bool = True,
        salt: str = "",
    ):
        """
        Initialize cache.

        Args:
            cache_dir: Directory for cache storage (None = private temp dir)
            max_entries: Maximum number of stored results
            ttl_seconds: Time-to-live in seconds (0 = no expiry)
            enabled: Whether caching is enabled
            salt: Mixed into every key, e.g. a configuration hash
        """
        self.enabled = enabled
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self.salt = salt
        self.cache: Optional[Cache] = None

        if self.enabled:
            try:
                self.cache = Cache(cache_dir)
                logger.debug(
                    f"Cache initialized at {self.cache.directory} "
                    f"(max={max_entries}, ttl={ttl_seconds}s)"
                )
            except Exception as e:
                logger.warning(f"Cache unavailable, continuing without it: {e}")
                self.enabled = False
        else:
            logger.debug("Cache disabled")

    def key(self, language: str, source: str) -> str:
        return cache_key(language, source, self.salt)

    def get(self, language: str, source: str) -> Optional[Any]:
        """
        Get a cached result.

        Returns:
            Cached value or None if not found, expired or unreadable
        """
        if not self.enabled or self.cache is None:
            return None

        key = self.key(language, source)
        try:
            value = self.cache.get(key)
            if value is not None:
                logger.debug(f"Cache hit: {key[:16]}...")
            return value
        except Exception as e:
            logger.warning(f"Cache get failed: {e}")
            return None

    def set(self, language: str, source: str, value: Any) -> None:
        """Store a result, evicting the oldest entries beyond the bound."""
        if not self.enabled or self.cache is None:
            return

        key = self.key(language, source)
        expire = self.ttl_seconds or None
        try:
            with self.cache.transact():
                self.cache.set(key, value, expire=expire)
                evicted = self._evict()
            logger.debug(f"Cache set: {key[:16]}... (evicted {evicted})")
        except Exception as e:
            logger.warning(f"Cache set failed: {e}")

    def _evict(self) -> int:
        """Drop expired entries, then the oldest until within bounds."""
        self.cache.expire()
        evicted = 0
        while len(self.cache) > self.max_entries:
            try:
                oldest, _ = self.cache.peekitem(last=False)
            except KeyError:
                break
            self.cache.delete(oldest)
            evicted += 1
        return evicted

    def __len__(self) -> int:
        if not self.enabled or self.cache is None:
            return 0
        try:
            return len(self.cache)
        except Exception as e:
            logger.warning(f"Cache size failed: {e}")
            return 0

    def clear(self) -> None:
        """Clear all cache entries."""
        if not self.enabled or self.cache is None:
            return

        try:
            self.cache.clear()
            logger.info("Cache cleared")
        except Exception as e:
            logger.warning(f"Cache clear failed: {e}")

    def stats(self) -> dict:
        """
        Get cache statistics.

        Returns:
            Dictionary with cache stats
        """
        if not self.enabled or self.cache is None:
            return {"enabled": False}

        try:
            return {
                "enabled": True,
                "size": len(self.cache),
                "max_entries": self.max_entries,
                "ttl_seconds": self.ttl_seconds,
                "directory": self.cache.directory,
                "volume": self.cache.volume(),
            }
        except Exception as e:
            logger.warning(f"Cache stats failed: {e}")
            return {"enabled": True, "error": str(e)}

    def close(self) -> None:
        """Close cache (cleanup)."""
        if self.cache is not None:
            self.cache.close()
