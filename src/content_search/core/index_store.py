"""In-memory search index store mirrored to a JSON snapshot."""

import asyncio
import json
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from ..models.content import ContentType
from ..models.index import SearchIndexEntry
from .exceptions import PersistenceError, SnapshotCorruptError, SourceUnavailableError
from .index_builder import IndexBuilder
from .source import ContentSource

logger = logging.getLogger(__name__)


class IndexStore:
    """
    Holds the built search index for the process lifetime.

    The in-memory list is replaced on every update and never mutated, so a
    reader holding a reference always sees one consistent index. Updates are
    serialized with an asyncio lock; reads of the current list take no lock.
    """

    def __init__(
        self,
        source: ContentSource,
        snapshot_path: Path,
        builder: Optional[IndexBuilder] = None,
        memory_ttl: float = 12 * 60 * 60,
        include_all: bool = False,
        executor: Optional[ThreadPoolExecutor] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Initialize the index store.

        Args:
            source: Content record source used for (re)builds
            snapshot_path: JSON snapshot location
            builder: Index builder (default IndexBuilder())
            memory_ttl: Seconds the in-memory copy is served before re-reading
            include_all: Index unpublished records as well
            executor: Thread pool for snapshot IO
            clock: Monotonic time source
        """
        self.source = source
        self.snapshot_path = Path(snapshot_path)
        self.builder = builder or IndexBuilder()
        self.memory_ttl = memory_ttl
        self.include_all = include_all

        self._executor = executor
        self._clock = clock
        self._lock = asyncio.Lock()
        self._entries: Optional[List[SearchIndexEntry]] = None
        self._loaded_at = 0.0

    @property
    def entries(self) -> Optional[List[SearchIndexEntry]]:
        """Current in-memory index, None when nothing is loaded."""
        return self._entries

    def invalidate(self) -> None:
        """Drop the in-memory copy so the next load re-reads the snapshot."""
        self._entries = None
        self._loaded_at = 0.0

    async def load(self) -> List[SearchIndexEntry]:
        """
        Load the search index.

        Prefers the in-memory copy, then the snapshot, then a rebuild from the
        content source (persisted for next time).

        Returns:
            Index entries; an empty list if nothing could be loaded
        """
        entries = self._fresh_entries()
        if entries is not None:
            return entries

        try:
            async with self._lock:
                return await self._load_unlocked()
        except Exception as e:
            logger.error(f"Failed to load search index: {str(e)}")
            return self._entries or []

    async def save(self, entries: Iterable[SearchIndexEntry]) -> bool:
        """
        Persist entries and make them the in-memory index.

        Returns:
            False if the snapshot could not be written
        """
        entries = list(entries)
        async with self._lock:
            return await self._persist(entries)

    async def update_type(
        self,
        content_type: ContentType,
        new_entries: Optional[Iterable[SearchIndexEntry]] = None
    ) -> List[SearchIndexEntry]:
        """
        Replace all entries of one content type.

        Args:
            content_type: Type whose entries are replaced
            new_entries: Replacement entries; built from the source when None

        Returns:
            The merged index

        Raises:
            SourceUnavailableError: If the source cannot be read; the current
                index is left untouched
        """
        content_type = ContentType(content_type)

        async with self._lock:
            current = await self._load_unlocked()

            if new_entries is None:
                fresh = await self._build(content_type)
                if fresh is None:
                    logger.warning(f"Keeping existing {content_type.value} entries, source unavailable")
                    raise SourceUnavailableError(f"Cannot reindex {content_type.value} content")
            else:
                fresh = []
                for entry in new_entries:
                    if entry.type != content_type:
                        logger.warning(f"Ignoring {entry.type.value} entry {entry.id} in {content_type.value} update")
                        continue
                    fresh.append(entry)

            merged = [entry for entry in current if entry.type != content_type]
            merged.extend(fresh)
            await self._persist(merged)

            logger.info(f"Reindexed {len(fresh)} {content_type.value} entries ({len(merged)} total)")
            return merged

    async def rebuild(self) -> bool:
        """
        Rebuild the whole index from the content source.

        Returns:
            False if the source failed; the last good index keeps being served
        """
        async with self._lock:
            fresh = await self._build(None)
            if fresh is None:
                logger.warning("Index rebuild failed, keeping last good index")
                return False

            await self._persist(fresh)
            logger.info(f"Rebuilt search index with {len(fresh)} entries")
            return True

    def _fresh_entries(self) -> Optional[List[SearchIndexEntry]]:
        entries = self._entries
        if entries is None:
            return None
        if self._clock() - self._loaded_at > self.memory_ttl:
            return None
        return entries

    async def _load_unlocked(self) -> List[SearchIndexEntry]:
        entries = self._fresh_entries()
        if entries is not None:
            return entries

        try:
            entries = await self._run(self._read_snapshot)
            logger.debug(f"Loaded {len(entries)} index entries from {self.snapshot_path}")
        except SnapshotCorruptError as e:
            logger.info(f"Search index snapshot unusable ({str(e)}), generating a new one")
            entries = await self._build(None)
            if entries is None:
                return self._entries or []
            await self._persist(entries)
            return entries

        self._set_entries(entries)
        return entries

    async def _build(self, content_type: Optional[ContentType]) -> Optional[List[SearchIndexEntry]]:
        """Build from the source, None when the source fails."""
        try:
            records = await self.source.load_records(content_type)
        except Exception as e:
            logger.error(f"Content source unavailable: {str(e)}")
            return None
        return self.builder.build(records, include_all=self.include_all)

    async def _persist(self, entries: List[SearchIndexEntry]) -> bool:
        self._set_entries(entries)
        try:
            await self._run(self._write_snapshot, entries)
            return True
        except PersistenceError as e:
            logger.error(f"Failed to save search index to {self.snapshot_path}: {str(e)}")
            return False

    def _set_entries(self, entries: List[SearchIndexEntry]) -> None:
        self._entries = entries
        self._loaded_at = self._clock()

    async def _run(self, func, *args):
        return await asyncio.get_running_loop().run_in_executor(self._executor, func, *args)

    def _read_snapshot(self) -> List[SearchIndexEntry]:
        """Read the snapshot synchronously in thread pool."""
        try:
            with open(self.snapshot_path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            raise SnapshotCorruptError("snapshot not found")
        except (OSError, ValueError) as e:
            raise SnapshotCorruptError(str(e))

        if not isinstance(data, list):
            raise SnapshotCorruptError("snapshot is not a JSON array")

        try:
            return [SearchIndexEntry.from_dict(item) for item in data]
        except (KeyError, TypeError, ValueError) as e:
            raise SnapshotCorruptError(f"invalid entry: {str(e)}")

    def _write_snapshot(self, entries: List[SearchIndexEntry]) -> None:
        """Write the snapshot synchronously in thread pool."""
        tmp_path = self.snapshot_path.with_suffix(self.snapshot_path.suffix + ".tmp")
        try:
            self.snapshot_path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump([entry.to_dict() for entry in entries], f, ensure_ascii=False, indent=2)
            tmp_path.replace(self.snapshot_path)
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceError(str(e))
