"""Content record data model with validation."""

from datetime import datetime
from enum import Enum
from typing import Dict, Any, List, Optional
from dataclasses import dataclass, field
from pydantic import BaseModel, ConfigDict, Field, field_validator


class ContentType(str, Enum):
    """Kinds of site content that can be indexed."""
    PORTFOLIO = "portfolio"
    BLOG = "blog"
    PLUGIN = "plugin"
    TOOL = "tool"
    PROFILE = "profile"
    PAGE = "page"
    DOWNLOAD = "download"
    ASSET = "asset"
    OTHER = "other"


class ContentStatus(str, Enum):
    """Publication state of a content record."""
    PUBLISHED = "published"
    DRAFT = "draft"
    ARCHIVED = "archived"
    SCHEDULED = "scheduled"


@dataclass
class ContentRecord:
    """
    A single unit of site content as supplied by a content source.

    Attributes:
        id: Identifier, unique within its type
        type: Content kind
        title: Display title
        description: Short summary
        status: Publication state
        content: Optional long-form body text
        tags: Free-form tags
        category: Category name
        priority: Editorial priority, used as a relevance bias
        created_at: Creation timestamp
        updated_at: Last modification timestamp
        no_index: SEO flag excluding the record from search
        views: Optional view count
    """
    id: str
    type: ContentType
    title: str
    description: str
    status: ContentStatus = ContentStatus.PUBLISHED
    content: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    category: str = ""
    priority: float = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    no_index: bool = False
    views: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate record after initialization."""
        if not self.id.strip():
            raise ValueError("Content ID cannot be empty")
        if not self.title.strip():
            raise ValueError("Content title cannot be empty")
        if not isinstance(self.type, ContentType):
            raise ValueError(f"Invalid content type: {self.type}")
        if not isinstance(self.status, ContentStatus):
            raise ValueError(f"Invalid content status: {self.status}")

    @property
    def is_published(self) -> bool:
        return self.status == ContentStatus.PUBLISHED


class SeoModel(BaseModel):
    """SEO block of a stored content record."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    no_index: bool = Field(False, alias="noIndex")


class StatsModel(BaseModel):
    """Statistics block of a stored content record."""

    model_config = ConfigDict(extra="ignore")

    views: Optional[int] = None


class ContentRecordModel(BaseModel):
    """Pydantic model for content records stored as camelCase JSON."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(..., min_length=1, description="Content identifier")
    type: ContentType = Field(..., description="Content type")
    title: str = Field(..., min_length=1, description="Display title")
    description: str = Field("", description="Short summary")
    status: ContentStatus = Field(ContentStatus.DRAFT, description="Publication state")
    content: Optional[str] = Field(None, description="Body text")
    tags: List[str] = Field(default_factory=list, description="Tags")
    category: str = Field("", description="Category")
    priority: float = Field(0, description="Editorial priority")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")
    seo: Optional[SeoModel] = None
    stats: Optional[StatsModel] = None

    @field_validator('title')
    @classmethod
    def validate_title(cls, v: str) -> str:
        """Ensure title is not just whitespace."""
        if not v.strip():
            raise ValueError('Title cannot be empty or whitespace only')
        return v.strip()

    @field_validator('tags', mode='before')
    @classmethod
    def drop_empty_tags(cls, v: Any) -> Any:
        if isinstance(v, list):
            return [tag for tag in v if isinstance(tag, str) and tag.strip()]
        return v

    def to_record(self) -> ContentRecord:
        """Convert to ContentRecord dataclass."""
        return ContentRecord(
            id=self.id,
            type=self.type,
            title=self.title,
            description=self.description,
            status=self.status,
            content=self.content,
            tags=list(self.tags),
            category=self.category,
            priority=self.priority,
            created_at=self.created_at,
            updated_at=self.updated_at,
            no_index=bool(self.seo and self.seo.no_index),
            views=self.stats.views if self.stats else None
        )

    @classmethod
    def parse_record(cls, data: Dict[str, Any], content_type: Optional[ContentType] = None) -> ContentRecord:
        """Validate a raw mapping, filling ``type`` from the file it came from."""
        if content_type is not None and 'type' not in data:
            data = {**data, 'type': content_type}
        return cls.model_validate(data).to_record()
