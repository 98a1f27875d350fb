"""Logging configuration for the content search system."""

import logging
import sys
from typing import Optional


def setup_logging(
    level: str = "INFO",
    format_string: Optional[str] = None,
    include_timestamp: bool = True
) -> None:
    """
    Set up logging for the content search system.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_string: Custom format string
        include_timestamp: Whether to include timestamps
    """
    if format_string is None:
        if include_timestamp:
            format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        else:
            format_string = "%(name)s - %(levelname)s - %(message)s"

    log_level = getattr(logging, level.upper(), None)
    if not isinstance(log_level, int):
        raise ValueError(f"Unknown logging level: {level}")

    # Configure root logger
    logging.basicConfig(
        level=log_level,
        format=format_string,
        stream=sys.stdout,
        force=True
    )

    logging.getLogger("content_search").setLevel(log_level)

    # Reduce noise from external libraries
    logging.getLogger("sklearn").setLevel(logging.WARNING)
    logging.getLogger("numpy").setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.debug(f"Logging configured with level: {level}")
