"""Core engine components for content search."""

from .engine import ContentSearchEngine
from .cache import ResultCache, CacheEntry
from .index_builder import IndexBuilder
from .index_store import IndexStore
from .source import ContentSource, InMemoryContentSource, JsonContentSource
from .exceptions import (
    ContentSearchError,
    SourceUnavailableError,
    SnapshotCorruptError,
    PersistenceError,
    ValidationError,
    ConfigurationError
)

__all__ = [
    "ContentSearchEngine",
    "ResultCache",
    "CacheEntry",
    "IndexBuilder",
    "IndexStore",
    "ContentSource",
    "InMemoryContentSource",
    "JsonContentSource",
    "ContentSearchError",
    "SourceUnavailableError",
    "SnapshotCorruptError",
    "PersistenceError",
    "ValidationError",
    "ConfigurationError"
]
