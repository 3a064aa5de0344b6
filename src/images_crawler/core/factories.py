"""Factory classes for creating configured service instances."""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional, Tuple

import aioboto3

from .crawler import ImageDirectoryCrawler
from .logging_config import get_logger
from .models import CrawlConfig, StorageSettings
from .path_utils import split_path_tags
from .protocols import ImageSetUpserter, ImageUploader, LoggerProtocol, TagExtractor
from .services import DynamoMetadataStore, S3ImageUploader
from .transform_runner import TransformRunner


class LoggerAdapter:
    """Adapter to make standard logger compatible with LoggerProtocol."""

    def __init__(self, logger: logging.Logger):
        self._logger = logger

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log debug message."""
        self._logger.debug(message)

    def info(self, message: str, **kwargs: Any) -> None:
        """Log info message."""
        self._logger.info(message)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log warning message."""
        self._logger.warning(message)

    def error(self, message: str, **kwargs: Any) -> None:
        """Log error message."""
        self._logger.error(message)


class LoggerFactory:
    """Factory for creating logger instances."""

    @staticmethod
    def create_logger(name: str, level: Optional[int] = None) -> LoggerProtocol:
        """Create an adapter over a package child logger.

        Without ``level`` the logger inherits the package logger's level.
        """
        logger = get_logger(name)
        if level is not None:
            logger.setLevel(level)
        return LoggerAdapter(logger)


class StorageFactory:
    """Factory for the S3 uploader and DynamoDB metadata store."""

    @staticmethod
    @asynccontextmanager
    async def open_storage(
        settings: StorageSettings,
        logger: LoggerProtocol,
        session: Optional[Any] = None,
    ) -> AsyncIterator[Tuple[S3ImageUploader, DynamoMetadataStore]]:
        """
        Open one shared S3 client and DynamoDB resource for a run.

        Yields:
            The uploader and the metadata store, valid inside the block.
        """
        session = session or aioboto3.Session(region_name=settings.region_name)
        async with session.client(
            "s3", endpoint_url=settings.endpoint_url
        ) as s3_client, session.resource(
            "dynamodb", endpoint_url=settings.endpoint_url
        ) as dynamodb:
            yield (
                S3ImageUploader(
                    s3_client,
                    settings.bucket,
                    logger,
                    key_prefix=settings.key_prefix,
                ),
                DynamoMetadataStore(
                    dynamodb,
                    logger,
                    image_set_table=settings.image_set_table,
                    image_transform_table=settings.image_transform_table,
                ),
            )


class CrawlerFactory:
    """Factory for creating a fully wired crawler."""

    @staticmethod
    def create_crawler(
        uploader: ImageUploader,
        upserter: ImageSetUpserter,
        config: Optional[CrawlConfig] = None,
        logger: Optional[LoggerProtocol] = None,
        tag_extractor: Optional[TagExtractor] = None,
        transform_runner: Optional[TransformRunner] = None,
    ) -> ImageDirectoryCrawler:
        """Create a crawler, filling in defaults for anything not provided."""
        if logger is None:
            logger = LoggerFactory.create_logger("crawler")

        kwargs: Dict[str, Any] = {}
        if config is not None:
            kwargs.update(
                extensions=config.extensions,
                max_parallel_upserts=config.max_parallel_upserts,
                max_parallel_uploads=config.max_parallel_uploads,
            )
            if transform_runner is None:
                transform_runner = TransformRunner(logger, extensions=config.extensions)

        return ImageDirectoryCrawler(
            tag_extractor=tag_extractor or split_path_tags,
            uploader=uploader,
            upserter=upserter,
            logger=logger,
            transform_runner=transform_runner,
            **kwargs,
        )
