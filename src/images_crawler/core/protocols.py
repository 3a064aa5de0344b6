"""Protocol definitions for dependency injection and testability."""

from typing import Any, Iterable, List, Optional, Protocol

from .models import ImageSet, ImageTransform


class TagExtractor(Protocol):
    """Turns a directory suffix into classification tags."""

    def __call__(self, suffix: str) -> Iterable[str]:
        ...


class ImageUploader(Protocol):
    """Protocol for object store uploads."""

    async def upload(self, local_path: str, destination_key: str) -> Any:
        """Upload a local file under the image set's destination key."""
        ...


class ImageSetUpserter(Protocol):
    """Protocol for image set metadata writes."""

    async def upsert_image_set(self, image_set: ImageSet) -> Any:
        """Insert or replace an image set record."""
        ...


class TransformStore(Protocol):
    """Protocol for transform descriptor persistence."""

    async def upsert_transform(self, transform: ImageTransform) -> Any:
        """Insert or replace a transform descriptor."""
        ...

    async def get_transform(self, name: str, version: str) -> Optional[ImageTransform]:
        """Look up a transform descriptor, None when it is not registered."""
        ...


class FileEnumerator(Protocol):
    """Lists file paths under a directory."""

    def __call__(self, directory: str, recursive: bool) -> List[str]:
        ...


class ProcessRunner(Protocol):
    """Runs an external program to completion and returns its exit code."""

    def __call__(self, argv: List[str]) -> int:
        ...


class LoggerProtocol(Protocol):
    """Protocol for logging operations."""

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log debug message."""
        ...

    def info(self, message: str, **kwargs: Any) -> None:
        """Log info message."""
        ...

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log warning message."""
        ...

    def error(self, message: str, **kwargs: Any) -> None:
        """Log error message."""
        ...
