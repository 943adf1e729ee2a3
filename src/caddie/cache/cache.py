"""Disk-based cache for search result pages."""

import hashlib
from pathlib import Path
from typing import Optional
import diskcache

from ..config import CACHE_DIR, SEARCH_CACHE_TTL
from ..logging import get_logger

logger = get_logger(__name__)


class Cache:
    """Disk cache for raw search result HTML."""

    def __init__(self, cache_dir: Optional[Path] = None, ttl: int = SEARCH_CACHE_TTL):
        cache_dir = Path(cache_dir or CACHE_DIR)
        cache_dir.mkdir(parents=True, exist_ok=True)
        self.cache = diskcache.Cache(str(cache_dir))
        self.ttl = ttl

    def _make_key(self, prefix: str, identifier: str) -> str:
        """Create a cache key."""
        normalized = identifier.strip().lower()
        if len(normalized) > 100:
            normalized = hashlib.md5(normalized.encode()).hexdigest()
        return f"{prefix}:{normalized}"

    def get_search(self, query: str) -> Optional[str]:
        """Get cached search result HTML."""
        key = self._make_key("search", query)
        result = self.cache.get(key)
        if result:
            logger.debug("Cache hit for search: %s", query)
        return result

    def set_search(self, query: str, html: str) -> None:
        """Cache search result HTML. Empty pages are not cached."""
        if not html:
            return
        key = self._make_key("search", query)
        self.cache.set(key, html, expire=self.ttl)
        logger.debug("Cached search results for: %s", query)

    def clear(self) -> None:
        """Clear all cache."""
        self.cache.clear()
        logger.info("Cache cleared")

    def close(self) -> None:
        self.cache.close()
