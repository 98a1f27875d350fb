"""Data models for the content search system."""

from .content import ContentRecord, ContentRecordModel, ContentStatus, ContentType
from .index import SearchIndexEntry
from .query import SearchOptions, SearchOptionsModel
from .result import SearchResult, SearchResponse, RelatedContent

__all__ = [
    "ContentRecord",
    "ContentRecordModel",
    "ContentStatus",
    "ContentType",
    "SearchIndexEntry",
    "SearchOptions",
    "SearchOptionsModel",
    "SearchResult",
    "SearchResponse",
    "RelatedContent",
]
