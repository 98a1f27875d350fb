"""Pytest configuration and shared fixtures."""

import json
import pytest
from datetime import datetime, timezone
from pathlib import Path
from typing import List

from content_search.config import SearchSettings
from content_search.core.cache import ResultCache
from content_search.core.engine import ContentSearchEngine
from content_search.core.index_builder import IndexBuilder
from content_search.core.index_store import IndexStore
from content_search.core.source import ContentSource, InMemoryContentSource
from content_search.core.exceptions import SourceUnavailableError
from content_search.models.content import ContentRecord, ContentStatus, ContentType

FIXED_NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced clock returning epoch seconds."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FailingSource(ContentSource):
    """Source that always fails to load."""

    async def load_records(self, content_type=None):
        raise SourceUnavailableError("content directory is gone")


@pytest.fixture
def fixed_builder() -> IndexBuilder:
    return IndexBuilder(clock=lambda: FIXED_NOW)


@pytest.fixture
def javascript_record() -> ContentRecord:
    return ContentRecord(
        id="blog1",
        type=ContentType.BLOG,
        title="JavaScript Tips",
        description="Useful JavaScript tips and tricks",
        tags=["javascript", "tips"],
        category="tutorial",
        status=ContentStatus.PUBLISHED,
        priority=8
    )


@pytest.fixture
def sample_records(javascript_record) -> List[ContentRecord]:
    """Create sample site content for testing."""
    return [
        javascript_record,
        ContentRecord(
            id="blog2",
            type=ContentType.BLOG,
            title="React Hooks Guide",
            description="Learn how to use React hooks effectively",
            content="Hooks let function components hold state. "
                    "The useEffect hook runs side effects after rendering. "
                    + "Filler text about component structure. " * 8
                    + "Custom hooks share stateful logic between components.",
            tags=["react", "hooks"],
            category="tutorial",
            priority=5,
            created_at=datetime(2025, 12, 20, tzinfo=timezone.utc)
        ),
        ContentRecord(
            id="portfolio1",
            type=ContentType.PORTFOLIO,
            title="Brand Identity Design",
            description="Logo and visual identity for a coffee shop",
            tags=["design", "branding"],
            category="design",
            priority=3,
            created_at=datetime(2024, 5, 1, tzinfo=timezone.utc)
        ),
        ContentRecord(
            id="plugin1",
            type=ContentType.PLUGIN,
            title="After Effects Expression Helper",
            description="Plugin that speeds up expression writing",
            tags=["after-effects", "plugin"],
            category="video",
            priority=2
        ),
        ContentRecord(
            id="tool1",
            type=ContentType.TOOL,
            title="Pomodoro Timer",
            description="Focus timer tool",
            tags=["productivity"],
            category="utility"
        ),
        ContentRecord(
            id="draft1",
            type=ContentType.BLOG,
            title="Unreleased JavaScript Post",
            description="Work in progress",
            tags=["javascript"],
            category="tutorial",
            status=ContentStatus.DRAFT
        ),
        ContentRecord(
            id="privacy",
            type=ContentType.PAGE,
            title="Privacy Policy",
            description="How this site handles data",
            category="legal",
            no_index=True
        ),
    ]


@pytest.fixture
def source(sample_records) -> InMemoryContentSource:
    return InMemoryContentSource(sample_records)


@pytest.fixture
def index_path(tmp_path) -> Path:
    return tmp_path / "cache" / "search-index.json"


@pytest.fixture
def store(source, index_path, fixed_builder) -> IndexStore:
    return IndexStore(source=source, snapshot_path=index_path, builder=fixed_builder)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def engine(store, clock) -> ContentSearchEngine:
    return ContentSearchEngine(store=store, cache=ResultCache(clock=clock))


@pytest.fixture
def make_engine(tmp_path, fixed_builder, clock):
    """Factory building an engine over an arbitrary record list."""
    counter = [0]

    def factory(records: List[ContentRecord], **kwargs) -> ContentSearchEngine:
        counter[0] += 1
        store = IndexStore(
            source=InMemoryContentSource(records),
            snapshot_path=tmp_path / f"index-{counter[0]}.json",
            builder=fixed_builder
        )
        return ContentSearchEngine(store=store, cache=ResultCache(clock=clock), **kwargs)

    return factory


@pytest.fixture
def content_dir(tmp_path) -> Path:
    """Write stored content JSON files the way the site keeps them."""
    data_dir = tmp_path / "content"
    data_dir.mkdir()

    blog = [
        {
            "id": "blog1",
            "type": "blog",
            "title": "JavaScript Tips",
            "description": "Useful JavaScript tips and tricks",
            "content": "Prefer const over let. Arrow functions keep this bound.",
            "tags": ["javascript", "tips"],
            "category": "tutorial",
            "status": "published",
            "priority": 8,
            "createdAt": "2025-12-01T09:00:00Z",
            "updatedAt": "2025-12-02T09:00:00Z"
        },
        {
            "id": "blog-draft",
            "type": "blog",
            "title": "Draft About Rust",
            "description": "Not ready yet",
            "tags": ["rust"],
            "category": "tutorial",
            "status": "draft"
        }
    ]
    portfolio = [
        {
            "id": "web-redesign",
            "title": "Web Redesign",
            "description": "Responsive redesign of a bakery website",
            "tags": ["web", "design"],
            "category": "develop",
            "status": "published",
            "priority": 5,
            "stats": {"views": 120}
        },
        {
            "id": "hidden",
            "title": "Hidden Work",
            "description": "Client work under NDA",
            "tags": ["design"],
            "category": "develop",
            "status": "published",
            "seo": {"noIndex": True}
        }
    ]

    (data_dir / "blog.json").write_text(json.dumps(blog), encoding="utf-8")
    (data_dir / "portfolio.json").write_text(json.dumps(portfolio), encoding="utf-8")
    return data_dir


@pytest.fixture
def settings(tmp_path, content_dir) -> SearchSettings:
    return SearchSettings(
        data_dir=content_dir,
        cache_dir=tmp_path / "cache",
        log_level="WARNING"
    )
