"""Search index entry data model."""

from dataclasses import dataclass, field
from typing import Dict, Any, Optional, Tuple

from .content import ContentType


@dataclass(frozen=True)
class SearchIndexEntry:
    """
    Search-optimized projection of a published content record.

    Entries are never mutated; a changed record produces a replacement entry.

    Attributes:
        id: Content identifier
        type: Content type
        title: Display title
        description: Short summary
        tags: Record tags
        category: Record category
        content: Optional body text, kept apart from searchable_content
        searchable_content: Normalized concatenation of all text fields
        search_score: Static relevance bias blended in at query time
    """
    id: str
    type: ContentType
    title: str
    description: str
    tags: Tuple[str, ...] = field(default_factory=tuple)
    category: str = ""
    content: Optional[str] = None
    searchable_content: str = ""
    search_score: float = 0.0

    def __post_init__(self) -> None:
        if not isinstance(self.tags, tuple):
            object.__setattr__(self, "tags", tuple(self.tags))
        if not isinstance(self.type, ContentType):
            object.__setattr__(self, "type", ContentType(self.type))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON snapshot representation."""
        return {
            "id": self.id,
            "type": self.type.value,
            "title": self.title,
            "description": self.description,
            "content": self.content,
            "tags": list(self.tags),
            "category": self.category,
            "searchableContent": self.searchable_content,
            "searchScore": self.search_score
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SearchIndexEntry':
        """Restore an entry from its snapshot representation."""
        return cls(
            id=str(data["id"]),
            type=ContentType(data["type"]),
            title=data["title"],
            description=data.get("description", ""),
            tags=tuple(data.get("tags") or ()),
            category=data.get("category", ""),
            content=data.get("content"),
            searchable_content=data.get("searchableContent", ""),
            search_score=float(data.get("searchScore", 0.0))
        )
