"""
Content Search for a Portfolio Site

Builds an in-memory search index over site content (blog posts, portfolio
entries, plugins, tools, pages), ranks weighted fuzzy term matches with
highlighted snippets, and caches results with TTL and bounded size.
"""

from .api.service import ContentSearchService
from .config import SearchSettings
from .core.engine import ContentSearchEngine
from .models.content import ContentRecord, ContentStatus, ContentType
from .models.index import SearchIndexEntry
from .models.query import SearchOptions
from .models.result import SearchResult, SearchResponse, RelatedContent

__version__ = "1.0.0"

__all__ = [
    "ContentSearchService",
    "ContentSearchEngine",
    "SearchSettings",
    "ContentRecord",
    "ContentStatus",
    "ContentType",
    "SearchIndexEntry",
    "SearchOptions",
    "SearchResult",
    "SearchResponse",
    "RelatedContent",
]
