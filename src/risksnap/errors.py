"""Exceptions raised around the risk snapshot core.

The extractor and classifier never raise; these cover the collaborators
that run before and after them (URL handling, fetching, storage).
"""

from typing import Optional


class RiskSnapshotError(Exception):
    """Base class for all risk snapshot errors."""


class InvalidURLError(RiskSnapshotError):
    """Raised when user input cannot be turned into an absolute URL."""
    def __init__(self, message: str, url: Optional[str] = None):
        self.message = message
        self.url = url
        super().__init__(message)


class FetchError(RiskSnapshotError):
    """Raised when a page could not be fetched (network error, timeout, non-2xx)."""
    def __init__(self, message: str, url: Optional[str] = None, status_code: Optional[int] = None):
        self.message = message
        self.url = url
        self.status_code = status_code
        super().__init__(message)


class StorageError(RiskSnapshotError):
    """Raised when a snapshot cannot be saved or loaded."""
