"""Core utilities and shared components for the images crawler."""

from .logging_config import get_logger, setup_logger
from .exceptions import (
    ImagesCrawlerError,
    ConfigurationError,
    CrawlError,
    OperationError,
    StorageError,
    TransformNotFoundError,
)
from .models import (
    CrawlConfig,
    CrawlSummary,
    ImageGroup,
    ImageSet,
    ImageTransform,
    StorageSettings,
    TransformOutcome,
)
from .path_utils import (
    DEFAULT_EXTENSIONS,
    calculate_dest_key,
    clean_key,
    split_path_tags,
)
from .throttle import Operation, OperationFailure, run_throttled, throttle_work
from .grouping import enumerate_files, group_images, list_images
from .transform_runner import TransformRunner
from .crawler import ImageDirectoryCrawler

__all__ = [
    "CrawlConfig",
    "CrawlSummary",
    "ImageGroup",
    "ImageSet",
    "ImageTransform",
    "StorageSettings",
    "TransformOutcome",
    "DEFAULT_EXTENSIONS",
    "calculate_dest_key",
    "clean_key",
    "split_path_tags",
    "Operation",
    "OperationFailure",
    "run_throttled",
    "throttle_work",
    "enumerate_files",
    "group_images",
    "list_images",
    "TransformRunner",
    "ImageDirectoryCrawler",
    "setup_logger",
    "get_logger",
    "ImagesCrawlerError",
    "ConfigurationError",
    "CrawlError",
    "OperationError",
    "StorageError",
    "TransformNotFoundError",
]
