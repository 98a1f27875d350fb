"""Search result data models."""

from typing import List, Dict, Any, Optional, Tuple
from dataclasses import dataclass, field

from .content import ContentType

MAX_HIGHLIGHTS = 3


@dataclass(frozen=True)
class SearchResult:
    """
    Search result with relevance scoring and highlights.

    Attributes:
        id: Matched content identifier
        type: Matched content type
        title: Display title
        description: Short summary
        url: Route of the content page
        score: Relevance score (0.0-1.0, higher is better)
        highlights: Up to three snippets around matched terms
    """
    id: str
    type: ContentType
    title: str
    description: str
    url: str
    score: float
    highlights: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        """Validate search result."""
        if not isinstance(self.highlights, tuple):
            object.__setattr__(self, "highlights", tuple(self.highlights))
        if not 0.0 <= self.score <= 1.0:
            raise ValueError("Score must be between 0.0 and 1.0")
        if len(self.highlights) > MAX_HIGHLIGHTS:
            raise ValueError(f"At most {MAX_HIGHLIGHTS} highlights are allowed")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "type": self.type.value,
            "title": self.title,
            "description": self.description,
            "url": self.url,
            "score": round(self.score, 4),
            "highlights": list(self.highlights)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SearchResult':
        return cls(
            id=str(data["id"]),
            type=ContentType(data["type"]),
            title=data["title"],
            description=data.get("description", ""),
            url=data["url"],
            score=float(data["score"]),
            highlights=tuple(data.get("highlights") or ())
        )


@dataclass
class SearchResponse:
    """
    Paginated search response.

    Attributes:
        results: Results of the requested page
        total: Number of ranked results before pagination
        has_more: Whether results exist beyond this page
        query: Original query text
        limit: Page size used
        offset: Offset used
        execution_time_ms: Wall time spent ranking
        suggested_queries: Alternate queries, set when nothing matched
    """
    results: List[SearchResult]
    total: int
    has_more: bool
    query: str
    limit: int
    offset: int
    execution_time_ms: float = 0.0
    suggested_queries: Optional[List[str]] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "results": [result.to_dict() for result in self.results],
            "total": self.total,
            "hasMore": self.has_more,
            "query": self.query,
            "limit": self.limit,
            "offset": self.offset,
            "executionTimeMs": round(self.execution_time_ms, 3)
        }
        if self.suggested_queries is not None:
            data["suggestedQueries"] = self.suggested_queries
        return data


@dataclass(frozen=True)
class RelatedContent:
    """Entry related to a given content item by category and tag overlap."""
    id: str
    score: int
    type: ContentType
    title: str
    url: str
