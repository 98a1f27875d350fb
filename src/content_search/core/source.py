"""Content record sources feeding the index builder."""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Iterable, List, Optional

import pydantic

from ..models.content import ContentRecord, ContentRecordModel, ContentType
from .exceptions import SourceUnavailableError

logger = logging.getLogger(__name__)


class ContentSource(ABC):
    """Read-only supplier of content records."""

    @abstractmethod
    async def load_records(self, content_type: Optional[ContentType] = None) -> List[ContentRecord]:
        """
        Load content records.

        Args:
            content_type: Only load records of this type (None = all types)

        Returns:
            Records in no particular order

        Raises:
            SourceUnavailableError: If the records cannot be read
        """


class InMemoryContentSource(ContentSource):
    """Source over records already held in memory."""

    def __init__(self, records: Iterable[ContentRecord] = ()):
        self._records = list(records)

    def replace(self, records: Iterable[ContentRecord]) -> None:
        self._records = list(records)

    async def load_records(self, content_type: Optional[ContentType] = None) -> List[ContentRecord]:
        if content_type is None:
            return list(self._records)
        return [record for record in self._records if record.type == content_type]


class JsonContentSource(ContentSource):
    """
    Source reading one JSON array of records per content type.

    Records for type ``blog`` live in ``<data_dir>/blog.json``. Missing files
    contribute nothing; invalid records are skipped with a warning.
    """

    def __init__(self, data_dir: Path, executor: Optional[ThreadPoolExecutor] = None):
        self.data_dir = Path(data_dir)
        self._executor = executor

    def path_for(self, content_type: ContentType) -> Path:
        return self.data_dir / f"{content_type.value}.json"

    async def load_records(self, content_type: Optional[ContentType] = None) -> List[ContentRecord]:
        types = [content_type] if content_type else list(ContentType)
        loop = asyncio.get_running_loop()

        records: List[ContentRecord] = []
        for current_type in types:
            raw_items = await loop.run_in_executor(
                self._executor, self._read_file, self.path_for(current_type)
            )
            records.extend(self._parse_items(raw_items, current_type))

        logger.debug(f"Loaded {len(records)} content records from {self.data_dir}")
        return records

    def _read_file(self, path: Path) -> List[Any]:
        """Read a content file synchronously in thread pool."""
        if not path.exists():
            return []

        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise SourceUnavailableError(f"Cannot read content file {path}: {str(e)}")

        if not isinstance(data, list):
            raise SourceUnavailableError(f"Content file {path} does not hold a JSON array")
        return data

    def _parse_items(self, items: List[Any], content_type: ContentType) -> List[ContentRecord]:
        records = []
        for item in items:
            if not isinstance(item, dict):
                logger.warning(f"Skipping non-object entry in {content_type.value} content")
                continue
            try:
                records.append(ContentRecordModel.parse_record(item, content_type))
            except (pydantic.ValidationError, ValueError) as e:
                logger.warning(f"Skipping invalid {content_type.value} record {item.get('id')}: {str(e)}")
        return records
