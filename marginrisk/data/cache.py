"""In-memory memoization of analysis results keyed by a hash of their inputs"""

import hashlib
import json
import logging
from collections import OrderedDict
from dataclasses import asdict, is_dataclass
from typing import Any, Optional

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def _canonical(obj: Any) -> Any:
    if is_dataclass(obj) and not isinstance(obj, type):
        return {"__type__": type(obj).__name__, **asdict(obj)}
    if isinstance(obj, (list, tuple)):
        return [_canonical(o) for o in obj]
    if isinstance(obj, dict):
        return {str(k): _canonical(v) for k, v in obj.items()}
    return obj


def make_key(*parts: Any) -> str:
    """
    Stable cache key for a set of inputs

    Args:
        parts: Positions, configs and scalar parameters

    Returns:
        SHA-256 hex digest of a canonical JSON dump
    """
    payload = json.dumps(_canonical(list(parts)), sort_keys=True, default=str)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class ResultCache:
    """Bounded least-recently-used cache for analysis results"""

    def __init__(self, max_entries: int = 128):
        """
        Initialize cache

        Args:
            max_entries: Entries kept before the least recently used is evicted
        """
        if max_entries <= 0:
            raise ValueError(f"max_entries must be positive, got {max_entries}")

        self.max_entries = max_entries
        self._entries: "OrderedDict[str, Any]" = OrderedDict()
        self.hits = 0
        self.misses = 0
        logger.debug(f"Initialized result cache with {max_entries} entries")

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def get(self, key: str) -> Optional[Any]:
        """
        Get a cached result

        Args:
            key: Cache key from make_key

        Returns:
            Cached value, or None on a miss
        """
        if key not in self._entries:
            self.misses += 1
            logger.debug(f"Cache miss: {key[:12]}")
            return None

        self._entries.move_to_end(key)
        self.hits += 1
        logger.debug(f"Cache hit: {key[:12]}")
        return self._entries[key]

    def set(self, key: str, value: Any):
        """
        Cache a result, evicting the oldest entry when full

        Args:
            key: Cache key
            value: Result to store
        """
        self._entries[key] = value
        self._entries.move_to_end(key)

        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(f"Evicted cache entry: {evicted[:12]}")

    def clear(self, key: Optional[str] = None):
        """
        Clear cache

        Args:
            key: Specific key to clear, or None to clear all
        """
        if key is None:
            self._entries.clear()
            logger.info("Cleared all cached results")
        elif key in self._entries:
            del self._entries[key]
            logger.info(f"Cleared cached result: {key[:12]}")

    def get_cache_info(self) -> dict:
        """Get information about cache contents"""
        return {
            "max_entries": self.max_entries,
            "num_entries": len(self._entries),
            "hits": self.hits,
            "misses": self.misses,
        }
