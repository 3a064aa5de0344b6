"""Walks an image tree and publishes it to the object and table stores."""

import asyncio
import functools
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Optional, Sequence

from .error_handling import BatchOperationContextManager
from .exceptions import ConfigurationError, CrawlError, OperationError
from .grouping import enumerate_files, group_images
from .models import CrawlSummary, ImageSet, ImageTransform
from .path_utils import DEFAULT_EXTENSIONS, normalize_extensions
from .protocols import (
    FileEnumerator,
    ImageSetUpserter,
    ImageUploader,
    LoggerProtocol,
    TagExtractor,
)
from .throttle import Operation, OperationFailure, throttle_work
from .transform_runner import TransformRunner


class ImageDirectoryCrawler:
    """
    Walks every subdirectory of a root and, for each one:

    - derives tags from the directory suffix (e.g. ``trees/coniferous`` might
      become "trees", "coniferous"),
    - records an image set in the table store,
    - uploads the directory's images (or their transforms) to the object store.

    Image set upserts run first under their own concurrency ceiling, then the
    uploads. Failures of either batch are raised together as one CrawlError
    after both batches have finished.
    """

    MAX_PARALLEL_UPLOADS = 20
    MAX_PARALLEL_UPSERTS = 5

    def __init__(
        self,
        tag_extractor: TagExtractor,
        uploader: ImageUploader,
        upserter: ImageSetUpserter,
        logger: LoggerProtocol,
        extensions: Iterable[str] = DEFAULT_EXTENSIONS,
        max_parallel_upserts: int = MAX_PARALLEL_UPSERTS,
        max_parallel_uploads: int = MAX_PARALLEL_UPLOADS,
        transform_runner: Optional[TransformRunner] = None,
        enumerate_files: FileEnumerator = enumerate_files,
    ):
        self._tag_extractor = tag_extractor
        self._uploader = uploader
        self._upserter = upserter
        self._logger = logger
        self._extensions = normalize_extensions(extensions or [])
        self._max_parallel_upserts = max_parallel_upserts
        self._max_parallel_uploads = max_parallel_uploads
        self._transform_runner = transform_runner or TransformRunner(
            logger, extensions=self._extensions
        )
        self._enumerate_files = enumerate_files

    async def walk_tree(self, root: str, version: str) -> CrawlSummary:
        """
        Walk ``root`` recursively, upload every image and record its image set.

        Args:
            root: Directory to walk.
            version: Version tagged onto every uploaded image set.

        Raises:
            ConfigurationError: If a precondition is not met.
            CrawlError: If any upsert or upload failed.
        """
        start_time = time.time()
        self._check_preconditions()
        groups = group_images(root, self._extensions, self._enumerate_files)

        image_sets: List[ImageSet] = []
        uploads: List[Operation] = []
        for group in groups:
            image_set = self._build_image_set(group.suffix, version)
            image_sets.append(image_set)
            uploads.extend(self._upload_operations(image_set, group.files))

        summary = CrawlSummary(image_sets=len(image_sets), uploads=len(uploads))
        await self._publish(image_sets, uploads)
        summary.processing_time = time.time() - start_time
        return summary

    async def transform_tree(
        self,
        root: str,
        version: str,
        transform: ImageTransform,
        executable: str,
        transformed_root: str,
    ) -> CrawlSummary:
        """
        Walk ``root``, transform every image, upload the results and record them.

        Transformed images are left on disk under ``transformed_root``. The
        transform descriptor itself is not upserted here.

        Raises:
            ConfigurationError: If a precondition is not met.
            CrawlError: If any upsert or upload failed.
        """
        start_time = time.time()
        self._check_preconditions()
        if transform is None:
            raise ConfigurationError("A transform is required.")
        if not transformed_root or not str(transformed_root).strip():
            raise ConfigurationError("A transformed output root is required.")
        self._transform_runner.check_executable(executable)
        groups = group_images(root, self._extensions, self._enumerate_files)

        image_sets: List[ImageSet] = []
        uploads: List[Operation] = []
        summary = CrawlSummary()
        loop = asyncio.get_running_loop()

        # External tools block; keep them off the event loop, one at a time.
        with ThreadPoolExecutor(max_workers=1) as pool:
            for group in groups:
                outcome = await loop.run_in_executor(
                    pool,
                    self._transform_runner.transform_group,
                    group,
                    transform,
                    executable,
                    transformed_root,
                )
                summary.skipped_files += len(outcome.failed_files)
                if outcome.is_empty:
                    summary.dropped_groups += 1
                    continue
                image_set = self._build_image_set(group.suffix, version, transform)
                image_sets.append(image_set)
                uploads.extend(self._upload_operations(image_set, outcome.files))

        summary.image_sets = len(image_sets)
        summary.uploads = len(uploads)
        await self._publish(image_sets, uploads)
        summary.processing_time = time.time() - start_time
        return summary

    def _check_preconditions(self) -> None:
        if not self._extensions:
            raise ConfigurationError("At least one image extension is required.")
        if self._tag_extractor is None:
            raise ConfigurationError("A tag extractor is required.")
        if self._uploader is None:
            raise ConfigurationError("An image uploader is required.")
        if self._upserter is None:
            raise ConfigurationError("An image set upserter is required.")

    def _build_image_set(
        self, suffix: str, version: str, transform: Optional[ImageTransform] = None
    ) -> ImageSet:
        image_set = ImageSet(
            suffix=suffix,
            version=version,
            tags=list(self._tag_extractor(suffix)),
            transform=transform,
        )
        self._logger.info(
            f"New Image Set {image_set.partition_key} "
            f"w/ tags ('{', '.join(image_set.tags)}')"
        )
        return image_set

    def _upload_operations(
        self, image_set: ImageSet, files: Sequence[str]
    ) -> List[Operation]:
        destination_key = image_set.destination_key
        return [
            Operation(
                start=functools.partial(self._uploader.upload, path, destination_key),
                source=path,
                description=f"upload of '{path}' to '{destination_key}'",
            )
            for path in files
        ]

    def _upsert_operation(self, image_set: ImageSet) -> Operation:
        return Operation(
            start=functools.partial(self._upserter.upsert_image_set, image_set),
            description=f"upsert for image set '{image_set.partition_key}'",
        )

    async def _publish(
        self, image_sets: List[ImageSet], uploads: List[Operation]
    ) -> None:
        self._logger.info(
            f"Publishing {len(image_sets)} image set(s) and {len(uploads)} image(s)"
        )
        failed_upserts = await throttle_work(
            self._max_parallel_upserts,
            [self._upsert_operation(image_set) for image_set in image_sets],
        )
        failed_uploads = await throttle_work(self._max_parallel_uploads, uploads)

        failures = failed_uploads + failed_upserts
        if failures:
            raise self._as_crawl_error(failures)
        self._logger.info("All image sets and uploads completed")

    def _as_crawl_error(self, failures: List[OperationFailure]) -> CrawlError:
        errors: List[OperationError] = []
        with BatchOperationContextManager("Image publishing") as batch:
            for failure in failures:
                operation = failure.operation
                if operation.source is not None:
                    message = f"Failed upload for '{operation.source}'"
                else:
                    message = f"Failed {operation.description}"
                if failure.cancelled:
                    message += " (cancelled)"
                error = OperationError(
                    message, source=operation.source, cancelled=failure.cancelled
                )
                error.__cause__ = failure.error
                errors.append(error)
                batch.add_error(
                    str(failure.error) if failure.error else "cancelled",
                    item_identifier=operation.source or operation.description,
                )
        self._logger.error(f"{len(errors)} operation(s) failed")
        return CrawlError(errors)
