"""Settings for the content search system.

Every knob has a default and can be overridden through environment
variables such as ``CONTENT_SEARCH_CACHE_TTL_SECONDS``.
"""

from pathlib import Path
from typing import Optional

import pydantic
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.exceptions import ConfigurationError

ENV_PREFIX = "CONTENT_SEARCH_"

INDEX_SNAPSHOT_NAME = "search-index.json"
CACHE_SNAPSHOT_NAME = "search-cache.json"
POPULAR_STATS_NAME = "search-stats.json"


class SearchSettings(BaseSettings):
    """Configuration for indexing, querying and caching."""

    data_dir: Path = Field(Path("./data/content"), description="Directory of <type>.json content files")
    cache_dir: Path = Field(Path("./data/cache"), description="Directory for index and cache snapshots")
    cache_ttl_seconds: float = Field(300.0, gt=0, description="Default result cache TTL")
    cache_max_size: int = Field(100, ge=1, description="Maximum cached queries")
    default_threshold: float = Field(0.3, ge=0.0, le=1.0, description="Default fuzziness tolerance")
    default_limit: int = Field(10, ge=1, le=1000, description="Default page size")
    default_min_score: float = Field(0.1, ge=0.0, le=1.0, description="Default score cutoff")
    highlight_length: int = Field(160, ge=1, description="Maximum highlight snippet length")
    index_memory_ttl_seconds: float = Field(12 * 60 * 60, gt=0, description="Lifetime of the in-memory index copy")
    log_level: str = Field("INFO", description="Logging level")

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_ignore_empty=True,
        extra="ignore"
    )

    @property
    def index_snapshot_path(self) -> Path:
        return self.cache_dir / INDEX_SNAPSHOT_NAME

    @property
    def cache_snapshot_path(self) -> Path:
        return self.cache_dir / CACHE_SNAPSHOT_NAME

    @property
    def popular_stats_path(self) -> Path:
        return self.cache_dir / POPULAR_STATS_NAME

    @classmethod
    def from_env(cls, prefix: Optional[str] = None, **overrides) -> 'SearchSettings':
        """
        Build settings from environment variables.

        Args:
            prefix: Variable name prefix (CONTENT_SEARCH_ when None)
            **overrides: Values taking precedence over the environment

        Returns:
            Validated settings

        Raises:
            ConfigurationError: If a variable holds an invalid value
        """
        try:
            if prefix is None:
                return cls(**overrides)
            return cls(_env_prefix=prefix, **overrides)
        except pydantic.ValidationError as e:
            raise ConfigurationError(f"Invalid search settings: {str(e)}")
