"""Custom exceptions for the images crawler."""

from __future__ import annotations

from typing import List, Optional, Sequence


class ImagesCrawlerError(Exception):
    """Base exception for all images crawler errors."""


class ConfigurationError(ImagesCrawlerError):
    """Error raised for invalid configuration or unmet preconditions."""


class TransformNotFoundError(ConfigurationError):
    """Error raised when a transform descriptor is not registered."""


class StorageError(ImagesCrawlerError):
    """Error raised for object store or table store failures."""


class OperationError(ImagesCrawlerError):
    """A single throttled operation that failed or was cancelled."""

    def __init__(
        self, message: str, source: Optional[str] = None, cancelled: bool = False
    ):
        super().__init__(message)
        self.source = source
        self.cancelled = cancelled


class CrawlError(ImagesCrawlerError):
    """Aggregate error raised once a crawl finishes with failed operations."""

    def __init__(self, errors: Sequence[OperationError]):
        self.errors: List[OperationError] = list(errors)
        super().__init__(
            f"{len(self.errors)} operation(s) failed: "
            + "; ".join(str(error) for error in self.errors)
        )
