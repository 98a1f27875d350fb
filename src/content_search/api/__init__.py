"""Service layer for content search."""

from .service import ContentSearchService

__all__ = ["ContentSearchService"]
