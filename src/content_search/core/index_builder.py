"""Index builder turning content records into search index entries."""

import logging
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional

from ..models.content import ContentRecord, ContentType
from ..models.index import SearchIndexEntry
from ..utils.text_processing import normalize_text
from .source import ContentSource

logger = logging.getLogger(__name__)

# Content kinds the site considers most valuable rank first on ties.
TYPE_WEIGHTS: Dict[ContentType, float] = {
    ContentType.BLOG: 20,
    ContentType.PORTFOLIO: 15,
    ContentType.PLUGIN: 12,
    ContentType.TOOL: 12,
    ContentType.DOWNLOAD: 8,
    ContentType.PROFILE: 5,
    ContentType.PAGE: 5,
    ContentType.ASSET: 2,
    ContentType.OTHER: 0,
}

MIN_SEARCH_SCORE = 1.0


def _utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class IndexBuilder:
    """
    Builds search index entries from content records.

    The static bias stored as ``search_score`` is::

        priority + type weight + quality bonus + recency bonus + view bonus

    with a floor of 1. It never decreases when priority grows or when a
    record becomes more recent.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        """
        Args:
            clock: Returns the current time, used for the recency bonus
        """
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def build(self, records: Iterable[ContentRecord], include_all: bool = False) -> List[SearchIndexEntry]:
        """
        Build index entries from content records.

        Args:
            records: All known content records
            include_all: Index drafts, archived and scheduled records too

        Returns:
            Entries sorted by search_score descending, then id
        """
        now = _utc(self._clock())
        entries = []

        for record in records:
            if not include_all and not record.is_published:
                continue
            if record.no_index:
                continue
            entries.append(self._to_entry(record, now))

        entries.sort(key=lambda entry: (-entry.search_score, entry.id))
        logger.debug(f"Built {len(entries)} index entries")
        return entries

    async def build_from_source(
        self,
        source: ContentSource,
        content_type: Optional[ContentType] = None,
        include_all: bool = False
    ) -> List[SearchIndexEntry]:
        """
        Load records from a source and build entries from them.

        A failing source yields an empty index instead of an error.
        """
        try:
            records = await source.load_records(content_type)
        except Exception as e:
            logger.error(f"Failed to load content records: {str(e)}")
            return []
        return self.build(records, include_all=include_all)

    def _to_entry(self, record: ContentRecord, now: datetime) -> SearchIndexEntry:
        searchable_content = normalize_text(" ".join([
            record.title,
            record.description,
            record.content or "",
            *record.tags,
            record.category,
        ]))

        return SearchIndexEntry(
            id=record.id,
            type=record.type,
            title=record.title,
            description=record.description,
            tags=tuple(record.tags),
            category=record.category,
            content=record.content,
            searchable_content=searchable_content,
            search_score=self.calculate_score(record, now)
        )

    def calculate_score(self, record: ContentRecord, now: Optional[datetime] = None) -> float:
        """Compute the static relevance bias of a record."""
        now = _utc(now or self._clock())
        score = float(record.priority or 0)
        score += TYPE_WEIGHTS.get(record.type, 0)

        title_length = len(record.title)
        if 10 <= title_length <= 50:
            score += 10
        elif title_length >= 5:
            score += 5

        description_length = len(record.description)
        if 20 <= description_length <= 200:
            score += 15
        elif description_length >= 10:
            score += 8

        content_length = len(record.content or "")
        if content_length > 100:
            score += 20
        elif content_length > 50:
            score += 10

        score += min(len(record.tags) * 5, 25)
        score += self._recency_bonus(record, now)

        if record.views:
            score += min(record.views / 10, 30)

        return max(score, MIN_SEARCH_SCORE)

    def _recency_bonus(self, record: ContentRecord, now: datetime) -> float:
        timestamp = record.updated_at or record.created_at
        if timestamp is None:
            return 0

        age_days = (now - _utc(timestamp)).total_seconds() / 86400
        if age_days < 30:
            return 15
        if age_days < 90:
            return 10
        if age_days < 365:
            return 5
        return 0
