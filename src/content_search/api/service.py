"""High-level API service for content search."""

import logging
from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

from ..config import SearchSettings
from ..core.cache import ResultCache, read_popular_queries
from ..core.engine import ContentSearchEngine, OptionsLike
from ..core.exceptions import ContentSearchError, SnapshotCorruptError, SourceUnavailableError
from ..core.index_builder import IndexBuilder
from ..core.index_store import IndexStore
from ..core.source import ContentSource, JsonContentSource
from ..models.content import ContentRecord, ContentType
from ..models.index import SearchIndexEntry
from ..models.result import SearchResult, SearchResponse, RelatedContent
from ..utils.logging_config import setup_logging
from ..utils.validators import validate_content_type, validate_records_batch

logger = logging.getLogger(__name__)


class ContentSearchService:
    """
    High-level service interface for site content search.

    Wires the content source, index builder, index store, result cache and
    query engine together and exposes the public search operations.
    """

    def __init__(
        self,
        settings: Optional[SearchSettings] = None,
        source: Optional[ContentSource] = None,
        max_workers: int = 4,
        persist_cache: bool = True,
        log_level: Optional[str] = None
    ):
        """
        Initialize content search service.

        Args:
            settings: Service settings (defaults when None)
            source: Content record source; JSON files under settings.data_dir when None
            max_workers: Number of worker threads for file IO
            persist_cache: Whether to restore and persist the result cache
            log_level: Logging level, overriding settings.log_level
        """
        self.settings = settings or SearchSettings()
        setup_logging(level=log_level or self.settings.log_level)

        self.persist_cache = persist_cache
        self.executor = ThreadPoolExecutor(max_workers=max_workers)

        self.source = source or JsonContentSource(self.settings.data_dir, executor=self.executor)
        self.builder = IndexBuilder()
        self.store = IndexStore(
            source=self.source,
            snapshot_path=self.settings.index_snapshot_path,
            builder=self.builder,
            memory_ttl=self.settings.index_memory_ttl_seconds,
            executor=self.executor
        )
        self.cache = ResultCache(
            max_size=self.settings.cache_max_size,
            default_ttl=self.settings.cache_ttl_seconds,
            executor=self.executor
        )
        self.engine = ContentSearchEngine(
            store=self.store,
            cache=self.cache,
            defaults={
                'limit': self.settings.default_limit,
                'threshold': self.settings.default_threshold,
                'min_score': self.settings.default_min_score,
                'highlight_length': self.settings.highlight_length
            }
        )

        self._initialized = False
        logger.info("Content search service initialized")

    async def initialize(self, warm_index: bool = True) -> None:
        """
        Initialize the service.

        Restores the persisted result cache and optionally loads the index.

        Args:
            warm_index: Whether to load the index now instead of on first search
        """
        if self.persist_cache and self.settings.cache_snapshot_path.exists():
            await self.cache.load_persisted(self.settings.cache_snapshot_path)

        if warm_index:
            entries = await self.store.load()
            logger.info(f"Search index ready with {len(entries)} entries")

        self._initialized = True
        logger.info("Service initialization complete")

    def build_index(self, records: Sequence[ContentRecord], include_all: bool = False) -> List[SearchIndexEntry]:
        """
        Build index entries from records without touching the store.

        Raises:
            ValidationError: If records are invalid
        """
        records = list(records)
        validate_records_batch(records)
        return self.builder.build(records, include_all=include_all)

    async def build_index_from_source(self, include_all: bool = False) -> List[SearchIndexEntry]:
        """Build index entries from the configured source; empty if it fails."""
        return await self.builder.build_from_source(self.source, include_all=include_all)

    async def load_index(self) -> List[SearchIndexEntry]:
        """Load the search index (memory, snapshot, then rebuild)."""
        self._check_initialized()
        return await self.store.load()

    async def save_index(self, entries: Sequence[SearchIndexEntry]) -> bool:
        """Replace and persist the search index."""
        self._check_initialized()
        saved = await self.store.save(entries)
        self.cache.clear()
        return saved

    async def update_index(self, content_type: Optional[Any] = None) -> bool:
        """
        Reindex all content, or only one content type.

        Clears the result cache on success.

        Returns:
            False if the content source could not be read
        """
        self._check_initialized()
        content_type = validate_content_type(content_type)

        try:
            if content_type is None:
                updated = await self.store.rebuild()
            else:
                await self.store.update_type(content_type)
                updated = True
        except SourceUnavailableError as e:
            logger.warning(f"Search index not updated: {str(e)}")
            return False
        except Exception as e:
            logger.error(f"Failed to update search index: {str(e)}")
            return False

        if updated:
            self.cache.clear()
        return updated

    async def search(self, query: str, options: OptionsLike = None) -> List[SearchResult]:
        """Search site content; see ContentSearchEngine.search."""
        self._check_initialized()
        return await self.engine.search(query, options)

    async def search_page(self, query: str, options: OptionsLike = None) -> SearchResponse:
        """Search returning totals, pagination and suggested queries."""
        self._check_initialized()
        return await self.engine.search_page(query, options)

    async def list_content(self, options: OptionsLike = None) -> List[SearchResult]:
        self._check_initialized()
        return await self.engine.list_content(options)

    async def simple_search(self, query: str, options: OptionsLike = None) -> List[SearchResult]:
        self._check_initialized()
        return await self.engine.simple_search(query, options)

    async def detailed_search(self, query: str, options: OptionsLike = None) -> List[SearchResult]:
        self._check_initialized()
        return await self.engine.detailed_search(query, options)

    async def get_suggestions(self, query: str, limit: int = 5) -> List[str]:
        self._check_initialized()
        return await self.engine.get_suggestions(query, limit)

    async def get_related_content(
        self,
        content_id: str,
        limit: int = 5,
        content_type: Optional[Any] = None
    ) -> List[RelatedContent]:
        self._check_initialized()
        return await self.engine.get_related_content(content_id, limit, content_type)

    def cache_get(self, query: str, options: OptionsLike = None) -> Optional[List[SearchResult]]:
        return self.cache.get(query, self.engine.resolve(options))

    def cache_put(
        self,
        query: str,
        options: OptionsLike,
        results: List[SearchResult],
        ttl: Optional[float] = None
    ) -> None:
        self.cache.put(query, self.engine.resolve(options), results, ttl)

    def cache_clear(self, pattern: Optional[str] = None) -> int:
        return self.cache.invalidate(pattern)

    def cache_stats(self) -> Dict[str, Any]:
        return self.cache.stats()

    async def cache_persist(self, path: Optional[Path] = None) -> bool:
        return await self.cache.persist(path or self.settings.cache_snapshot_path)

    async def cache_load_persisted(self, path: Optional[Path] = None) -> bool:
        return await self.cache.load_persisted(path or self.settings.cache_snapshot_path)

    async def preload_popular_searches(self, top_n: int = 10, path: Optional[Path] = None) -> List[str]:
        """
        Warm the result cache with the most popular queries.

        Args:
            top_n: Number of queries to run
            path: Popular-query stats file (settings.popular_stats_path when None)

        Returns:
            The queries that were run
        """
        self._check_initialized()
        stats_path = path or self.settings.popular_stats_path

        try:
            queries = await read_popular_queries(stats_path, top_n=top_n, executor=self.executor)
        except SnapshotCorruptError as e:
            logger.warning(f"Failed to preload popular searches: {str(e)}")
            return []

        logger.info(f"Preloading {len(queries)} popular searches...")
        for query in queries:
            await self.engine.search(query)
        return queries

    async def get_stats(self) -> Dict[str, Any]:
        """Get service and engine statistics."""
        self._check_initialized()

        return {
            'service': {
                'initialized': self._initialized,
                'persist_cache': self.persist_cache,
                'index_path': str(self.settings.index_snapshot_path)
            },
            'engine': self.engine.get_stats()
        }

    async def health_check(self) -> Dict[str, Any]:
        """Perform comprehensive health check."""
        if not self._initialized:
            return {
                'status': 'not_initialized',
                'message': 'Service not initialized'
            }

        return await self.engine.health_check()

    def _check_initialized(self) -> None:
        """Check if service is properly initialized."""
        if not self._initialized:
            raise ContentSearchError("Service not initialized. Call initialize() first.")

    async def close(self) -> None:
        """Persist the result cache and release worker threads."""
        try:
            if self.persist_cache and self._initialized:
                await self.cache.persist(self.settings.cache_snapshot_path)

            self._initialized = False
            logger.info("Service closed successfully")

        except Exception as e:
            logger.error(f"Error during service shutdown: {str(e)}")
        finally:
            self.executor.shutdown(wait=True)

    @classmethod
    @asynccontextmanager
    async def create(
        cls,
        settings: Optional[SearchSettings] = None,
        **kwargs
    ) -> AsyncIterator['ContentSearchService']:
        """
        Create and manage service lifecycle with context manager.

        Args:
            settings: Service settings
            **kwargs: Additional service configuration

        Yields:
            Initialized content search service
        """
        service = cls(settings=settings, **kwargs)

        try:
            await service.initialize()
            yield service
        finally:
            await service.close()
