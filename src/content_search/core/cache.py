"""Result cache with per-entry TTL, bounded size and JSON persistence."""

import asyncio
import json
import logging
import threading
import time
from collections import OrderedDict
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..models.query import SearchOptions
from ..models.result import SearchResult
from .exceptions import PersistenceError, SnapshotCorruptError

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 5 * 60
DEFAULT_MAX_SIZE = 100
KEY_SEPARATOR = "::"


@dataclass(frozen=True)
class CacheEntry:
    """
    Cached search results.

    Attributes:
        key: Cache key derived from query and options
        results: Results fixed at insertion time
        timestamp: Insertion time, epoch seconds
        ttl: Lifetime in seconds
    """
    key: str
    results: Tuple[SearchResult, ...]
    timestamp: float
    ttl: float

    def is_expired(self, now: float) -> bool:
        return now - self.timestamp > self.ttl

    @property
    def query(self) -> str:
        return self.key.rsplit(KEY_SEPARATOR + "{", 1)[0]

    def to_dict(self) -> Dict[str, Any]:
        """Snapshot representation; timestamp and ttl in milliseconds."""
        return {
            "key": self.key,
            "results": [result.to_dict() for result in self.results],
            "timestamp": int(self.timestamp * 1000),
            "ttl": int(self.ttl * 1000)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CacheEntry':
        return cls(
            key=str(data["key"]),
            results=tuple(SearchResult.from_dict(item) for item in data["results"]),
            timestamp=float(data["timestamp"]) / 1000,
            ttl=float(data["ttl"]) / 1000
        )


def make_key(query: str, options: SearchOptions) -> str:
    """Deterministic key from the lowercased, trimmed query and resolved options."""
    normalized_query = (query or "").lower().strip()
    serialized = json.dumps(options.cache_fields(), sort_keys=True, separators=(",", ":"))
    return f"{normalized_query}{KEY_SEPARATOR}{serialized}"


class ResultCache:
    """
    Memoizes query engine results.

    Entries expire lazily on read. Once ``max_size`` is exceeded the oldest
    inserted entry is evicted. Mutations are serialized with a lock; reads
    take no lock.
    """

    def __init__(
        self,
        max_size: int = DEFAULT_MAX_SIZE,
        default_ttl: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
        executor: Optional[ThreadPoolExecutor] = None
    ):
        """
        Initialize result cache.

        Args:
            max_size: Maximum number of entries
            default_ttl: Entry lifetime in seconds when put() gets no ttl
            clock: Wall-clock time source, epoch seconds
            executor: Thread pool for snapshot IO
        """
        if max_size <= 0:
            raise ValueError("Cache max size must be positive")

        self.max_size = max_size
        self.default_ttl = default_ttl
        self._clock = clock
        self._executor = executor
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, query: str, options: SearchOptions) -> Optional[List[SearchResult]]:
        """
        Look up cached results.

        Returns:
            The cached results, or None when absent or expired
        """
        key = make_key(query, options)
        entry = self._entries.get(key)
        if entry is None:
            return None

        if entry.is_expired(self._clock()):
            with self._lock:
                if self._entries.get(key) is entry:
                    del self._entries[key]
            return None

        return list(entry.results)

    def put(
        self,
        query: str,
        options: SearchOptions,
        results: List[SearchResult],
        ttl: Optional[float] = None
    ) -> None:
        """
        Cache results for a query.

        Args:
            query: Query text
            options: Resolved search options
            results: Results to cache
            ttl: Lifetime in seconds (default_ttl when None)
        """
        key = make_key(query, options)
        entry = CacheEntry(
            key=key,
            results=tuple(results),
            timestamp=self._clock(),
            ttl=self.default_ttl if ttl is None else ttl
        )

        with self._lock:
            self._entries.pop(key, None)
            self._entries[key] = entry
            while len(self._entries) > self.max_size:
                evicted_key, _ = self._entries.popitem(last=False)
                logger.debug(f"Evicted cached query: {evicted_key[:50]}")

    def invalidate(self, pattern: Optional[str] = None) -> int:
        """
        Remove cached entries.

        Args:
            pattern: Only remove entries whose query contains this text
                (case-insensitive); None removes everything

        Returns:
            Number of entries removed
        """
        with self._lock:
            if pattern is None:
                removed = len(self._entries)
                self._entries.clear()
                return removed

            needle = pattern.lower().strip()
            keys = [key for key, entry in self._entries.items() if needle in entry.query]
            for key in keys:
                del self._entries[key]
            return len(keys)

    def clear(self) -> None:
        self.invalidate()

    def stats(self) -> Dict[str, Any]:
        """Cache size and per-entry age and TTL in seconds."""
        now = self._clock()
        entries = list(self._entries.values())
        return {
            "size": len(entries),
            "maxSize": self.max_size,
            "entries": [
                {
                    "key": entry.query,
                    "age": now - entry.timestamp,
                    "ttl": entry.ttl
                }
                for entry in entries
            ]
        }

    async def persist(self, path: Path) -> bool:
        """
        Write the cache to a JSON snapshot.

        Returns:
            False if the snapshot could not be written
        """
        entries = [entry.to_dict() for entry in list(self._entries.values())]
        try:
            await asyncio.get_running_loop().run_in_executor(
                self._executor, self._write_snapshot, Path(path), entries
            )
            logger.info(f"Persisted {len(entries)} cached queries to {path}")
            return True
        except PersistenceError as e:
            logger.error(f"Failed to persist search cache: {str(e)}")
            return False

    async def load_persisted(self, path: Path) -> bool:
        """
        Restore cache entries from a JSON snapshot, skipping expired ones.

        Returns:
            False if the snapshot is missing or unparseable
        """
        try:
            raw_entries = await asyncio.get_running_loop().run_in_executor(
                self._executor, self._read_snapshot, Path(path)
            )
        except SnapshotCorruptError as e:
            logger.warning(f"Search cache snapshot unusable: {str(e)}")
            return False

        now = self._clock()
        loaded = 0
        with self._lock:
            for raw in raw_entries:
                try:
                    entry = CacheEntry.from_dict(raw)
                except (KeyError, TypeError, ValueError) as e:
                    logger.warning(f"Skipping invalid cache entry: {str(e)}")
                    continue
                if entry.is_expired(now):
                    continue
                self._entries.pop(entry.key, None)
                self._entries[entry.key] = entry
                loaded += 1
            while len(self._entries) > self.max_size:
                self._entries.popitem(last=False)

        logger.info(f"Loaded {loaded} cached queries from {path}")
        return True

    @staticmethod
    def _write_snapshot(path: Path, entries: List[Dict[str, Any]]) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(entries, f, ensure_ascii=False)
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceError(str(e))

    @staticmethod
    def _read_snapshot(path: Path) -> List[Dict[str, Any]]:
        try:
            with open(path, encoding="utf-8") as f:
                text = f.read()
        except OSError as e:
            raise SnapshotCorruptError(str(e))

        if not text.strip():
            return []

        try:
            data = json.loads(text)
        except ValueError as e:
            raise SnapshotCorruptError(str(e))

        if not isinstance(data, list):
            raise SnapshotCorruptError("cache snapshot is not a JSON array")
        return data


async def read_popular_queries(
    path: Path,
    top_n: int = 10,
    executor: Optional[ThreadPoolExecutor] = None
) -> List[str]:
    """
    Read popular-query statistics and return the most frequent queries.

    The file holds a JSON object mapping query text to hit count.

    Raises:
        SnapshotCorruptError: If the file is missing or malformed
    """
    def _read() -> Dict[str, Any]:
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise SnapshotCorruptError(f"Cannot read search stats {path}: {str(e)}")
        if not isinstance(data, dict):
            raise SnapshotCorruptError("search stats are not a JSON object")
        return data

    stats = await asyncio.get_running_loop().run_in_executor(executor, _read)
    counts = []
    for query, count in stats.items():
        if isinstance(count, (int, float)) and not isinstance(count, bool):
            counts.append((query, count))

    counts.sort(key=lambda item: (-item[1], item[0]))
    return [query for query, _ in counts[:top_n]]
