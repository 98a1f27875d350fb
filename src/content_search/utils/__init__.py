"""Utility modules for content search."""

from .text_processing import TextProcessor, normalize_text, split_terms
from .validators import resolve_options, validate_records_batch
from .logging_config import setup_logging

__all__ = [
    "TextProcessor",
    "normalize_text",
    "split_terms",
    "resolve_options",
    "validate_records_batch",
    "setup_logging",
]
