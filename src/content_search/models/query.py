"""Search options model with filtering capabilities."""

from typing import Dict, Any, Optional, Tuple, List
from dataclasses import dataclass, field
from pydantic import BaseModel, ConfigDict, Field

from .content import ContentType

DEFAULT_LIMIT = 10
DEFAULT_THRESHOLD = 0.3
DEFAULT_MIN_SCORE = 0.1
DEFAULT_HIGHLIGHT_LENGTH = 160
MAX_LIMIT = 1000


@dataclass
class SearchOptions:
    """
    Search configuration with structural filters and matching knobs.

    Resolved once at the start of a search and never re-derived.

    Attributes:
        type: Restrict to one content type (None = all types)
        category: Restrict to one category, compared case-insensitively
        tags: Keep only entries sharing at least one of these tags
        limit: Page size
        offset: Number of ranked results to skip
        include_content: Whether body text participates in matching
        threshold: Fuzziness tolerance, smaller is stricter (0.0-1.0)
        min_score: Results scoring below this are dropped (0.0-1.0)
        fuzzy: Use edit-distance matching instead of plain containment
        list_all: Empty queries list filtered entries instead of returning nothing
        highlight_length: Maximum snippet length before ellipsis markers
    """
    type: Optional[ContentType] = None
    category: Optional[str] = None
    tags: Tuple[str, ...] = field(default_factory=tuple)
    limit: int = DEFAULT_LIMIT
    offset: int = 0
    include_content: bool = False
    threshold: float = DEFAULT_THRESHOLD
    min_score: float = DEFAULT_MIN_SCORE
    fuzzy: bool = True
    list_all: bool = False
    highlight_length: int = DEFAULT_HIGHLIGHT_LENGTH

    def __post_init__(self) -> None:
        """Validate option values."""
        if self.type is not None and not isinstance(self.type, ContentType):
            self.type = ContentType(self.type)
        self.tags = tuple(self.tags or ())
        if not 0.0 <= self.threshold <= 1.0:
            raise ValueError("Threshold must be between 0.0 and 1.0")
        if not 0.0 <= self.min_score <= 1.0:
            raise ValueError("Min score must be between 0.0 and 1.0")
        if self.limit <= 0:
            raise ValueError("Limit must be positive")
        if self.limit > MAX_LIMIT:
            raise ValueError(f"Limit cannot exceed {MAX_LIMIT}")
        if self.offset < 0:
            raise ValueError("Offset cannot be negative")
        if self.highlight_length <= 0:
            raise ValueError("Highlight length must be positive")

    def cache_fields(self) -> Dict[str, Any]:
        """Stable, defaults-filled representation used for cache keys."""
        return {
            "type": self.type.value if self.type else None,
            "category": self.category.lower() if self.category else None,
            "tags": sorted(self.tags),
            "limit": self.limit,
            "offset": self.offset,
            "includeContent": self.include_content,
            "threshold": self.threshold,
            "minScore": self.min_score,
            "fuzzy": self.fuzzy,
            "listAll": self.list_all,
            "highlightLength": self.highlight_length
        }


class SearchOptionsModel(BaseModel):
    """Pydantic model for option validation in API contexts."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    type: Optional[ContentType] = Field(None, description="Content type filter")
    category: Optional[str] = Field(None, description="Category filter")
    tags: List[str] = Field(default_factory=list, description="Tag overlap filter")
    limit: int = Field(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT, description="Page size")
    offset: int = Field(0, ge=0, description="Pagination offset")
    include_content: bool = Field(False, alias="includeContent")
    threshold: float = Field(DEFAULT_THRESHOLD, ge=0.0, le=1.0)
    min_score: float = Field(DEFAULT_MIN_SCORE, ge=0.0, le=1.0, alias="minScore")
    fuzzy: bool = True
    list_all: bool = Field(False, alias="listAll")
    highlight_length: int = Field(DEFAULT_HIGHLIGHT_LENGTH, ge=1, alias="highlightLength")

    def to_options(self) -> SearchOptions:
        """Convert to SearchOptions dataclass."""
        return SearchOptions(
            type=self.type,
            category=self.category,
            tags=tuple(self.tags),
            limit=self.limit,
            offset=self.offset,
            include_content=self.include_content,
            threshold=self.threshold,
            min_score=self.min_score,
            fuzzy=self.fuzzy,
            list_all=self.list_all,
            highlight_length=self.highlight_length
        )
