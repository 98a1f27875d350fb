"""Custom exceptions for the content search system."""


class ContentSearchError(Exception):
    """Base exception for content search operations."""
    pass


class SourceUnavailableError(ContentSearchError):
    """Exception raised when content records cannot be read."""
    pass


class SnapshotCorruptError(ContentSearchError):
    """Exception raised when a persisted snapshot is missing or unparseable."""
    pass


class PersistenceError(ContentSearchError):
    """Exception raised when a snapshot cannot be written."""
    pass


class ValidationError(ContentSearchError):
    """Exception raised during input validation."""
    pass


class ConfigurationError(ContentSearchError):
    """Exception raised for configuration issues."""
    pass
