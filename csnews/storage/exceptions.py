"""
Custom exceptions for storage layer.

Provides explicit error types instead of silent failures.
"""


class StorageError(Exception):
    """Base exception for all storage errors."""

    pass


class CacheError(StorageError):
    """Raised when a cache file cannot be read or written."""

    def __init__(self, operation: str, key: str, cause: Exception):
        self.operation = operation
        self.key = key
        self.cause = cause
        super().__init__(f"Cache {operation} failed for '{key}': {cause}")


class CacheUnavailableError(StorageError):
    """Raised when the cache directory cannot be created."""

    def __init__(self, directory, cause: Exception):
        self.directory = directory
        self.cause = cause
        super().__init__(
            f"Cache directory {directory} is not available: {cause}. "
            "Check the CSNEWS_CACHE_DIRECTORY setting and permissions."
        )
