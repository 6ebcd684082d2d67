"""
Caching layer for market snapshots.

Market data is only fresh for a short while, so entries carry the time they
were written and expire after a time-to-live. Entries are keyed by a hash
of the query parameters and pickled to disk.
"""

import hashlib
import json
import pickle
import time
from pathlib import Path
from typing import Any, Optional
from fxlab.errors import CacheError


class SnapshotCache:
    """
    A disk-based, expiring cache for downloaded market data.

    Representation Invariants:
        - cache_dir exists and is a directory
        - ttl_seconds > 0
        - each file holds a (written_at, data) tuple named by its query hash
    """

    def __init__(self, cache_dir: str = ".cache", ttl_seconds: float = 900):
        """
        Initialize the cache.

        Preconditions:
            - cache_dir is a valid path (created if missing)
            - ttl_seconds > 0

        Postconditions:
            - cache_dir exists as a directory
        """
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.cache_dir = Path(cache_dir)
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self.ttl_seconds = ttl_seconds

    def _path_for(self, query_params: dict) -> Path:
        key = hashlib.md5(json.dumps(query_params, sort_keys=True).encode()).hexdigest()
        return self.cache_dir / f"{key}.pkl"

    def get(self, query_params: dict, now: Optional[float] = None) -> Optional[Any]:
        """
        Retrieve cached data if present and not expired.

        Args:
            query_params: Query parameters used to generate the key
            now: Current epoch seconds (default: time.time())

        Returns:
            Cached data, or None on a miss or an expired entry

        Raises:
            CacheError: If the cache file cannot be read
        """
        cache_file = self._path_for(query_params)
        if not cache_file.exists():
            return None

        try:
            with open(cache_file, "rb") as f:
                written_at, data = pickle.load(f)
        except Exception as e:
            raise CacheError(f"Failed to read cache file: {e}") from e

        now = time.time() if now is None else now
        if now - written_at > self.ttl_seconds:
            return None
        return data

    def set(self, query_params: dict, data: Any, now: Optional[float] = None) -> None:
        """
        Store data under the query parameters.

        The entry is written to a temporary file and moved into place so a
        concurrent reader never sees a partial file.

        Raises:
            CacheError: If the cache file cannot be written
        """
        cache_file = self._path_for(query_params)
        tmp_file = cache_file.with_suffix(".tmp")
        written_at = time.time() if now is None else now

        try:
            with open(tmp_file, "wb") as f:
                pickle.dump((written_at, data), f)
            tmp_file.replace(cache_file)
        except Exception as e:
            raise CacheError(f"Failed to write cache file: {e}") from e

    def clear(self) -> None:
        """Remove every cached entry."""
        for cache_file in self.cache_dir.glob("*.pkl"):
            cache_file.unlink()
