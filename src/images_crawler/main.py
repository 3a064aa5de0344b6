#!/usr/bin/env python3
"""
Images Crawler CLI

Walks a directory tree of images → tags each directory → (optionally)
transforms every image with an external tool → uploads to S3 and records
image sets in DynamoDB.
"""

import sys
import asyncio
import logging
import argparse
from typing import Optional

from . import __version__
from .core import (
    CrawlConfig,
    CrawlError,
    CrawlSummary,
    DEFAULT_EXTENSIONS,
    ImageTransform,
    StorageSettings,
    TransformNotFoundError,
    get_logger,
    setup_logger,
)
from .core.factories import CrawlerFactory, LoggerAdapter, StorageFactory


def _add_storage_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--bucket", default=None, help="Destination S3 bucket (env: IMAGES_BUCKET)")
    parser.add_argument("--key-prefix", default=None, help="Prefix for every object key (env: IMAGES_KEY_PREFIX)")
    parser.add_argument("--image-set-table", default=None, help="DynamoDB table for image sets (env: IMAGE_SET_TABLE)")
    parser.add_argument(
        "--image-transform-table",
        default=None,
        help="DynamoDB table for transform descriptors (env: IMAGE_TRANSFORM_TABLE)",
    )
    parser.add_argument("--region", default=None, help="AWS region (env: AWS_REGION)")
    parser.add_argument("--endpoint-url", default=None, help="Custom S3/DynamoDB endpoint (env: AWS_ENDPOINT_URL)")
    parser.add_argument(
        "--skip-storage-setup",
        action="store_true",
        help="Do not create the bucket and tables when they are missing",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")


def _add_crawl_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("root", help="Directory to walk (recursively)")
    parser.add_argument("--version", dest="images_version", default="0", help="Version tagged onto uploaded image sets")
    parser.add_argument(
        "--extensions",
        nargs="+",
        default=list(DEFAULT_EXTENSIONS),
        help="Image extensions to pick up (default: .png .gif .jpg)",
    )
    parser.add_argument("--max-parallel-upserts", type=int, default=5, help="Concurrent image set upserts")
    parser.add_argument("--max-parallel-uploads", type=int, default=20, help="Concurrent uploads")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="images-crawler",
        description="Images Crawler - upload tagged image directory trees to S3 and DynamoDB",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Upload originals, tagging each directory by its path
  images-crawler walk ./images --version 0 --bucket my-images

  # Register a transform, then upload charcoal versions of every image
  images-crawler register-transform --name Charcoal --version 1 \\
                 --command-template "{infile} -charcoal 2 {outfile}"
  images-crawler transform ./images --version 0 --transform-name Charcoal \\
                 --transform-version 1 --executable magick --output-root ./out

  # Show version
  images-crawler version
        """,
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    walk_parser = subparsers.add_parser("walk", help="Upload original images")
    _add_crawl_arguments(walk_parser)
    _add_storage_arguments(walk_parser)

    transform_parser = subparsers.add_parser("transform", help="Transform, then upload images")
    _add_crawl_arguments(transform_parser)
    transform_parser.add_argument("--transform-name", required=True, help="Transform name")
    transform_parser.add_argument("--transform-version", required=True, help="Transform version")
    transform_parser.add_argument("--executable", required=True, help="Path or name of the image tool")
    transform_parser.add_argument("--output-root", required=True, help="Where transformed images are written")
    transform_parser.add_argument(
        "--command-template",
        default=None,
        help="Arguments template with {infile} and {outfile}; registers the transform. "
        "When omitted the registered transform is looked up.",
    )
    _add_storage_arguments(transform_parser)

    register_parser = subparsers.add_parser("register-transform", help="Store a transform descriptor")
    register_parser.add_argument("--name", required=True, help="Transform name")
    register_parser.add_argument("--version", dest="transform_version", required=True, help="Transform version")
    register_parser.add_argument(
        "--command-template", required=True, help="Arguments template with {infile} and {outfile}"
    )
    _add_storage_arguments(register_parser)

    subparsers.add_parser("version", help="Show version information")
    return parser


def settings_from_args(args: argparse.Namespace) -> StorageSettings:
    """Environment settings overridden by whatever was given on the command line."""
    return StorageSettings.from_env(
        bucket=args.bucket,
        key_prefix=args.key_prefix,
        image_set_table=args.image_set_table,
        image_transform_table=args.image_transform_table,
        region_name=args.region,
        endpoint_url=args.endpoint_url,
    )


def config_from_args(args: argparse.Namespace) -> CrawlConfig:
    return CrawlConfig(
        root=args.root,
        version=args.images_version,
        extensions=tuple(args.extensions),
        max_parallel_upserts=args.max_parallel_upserts,
        max_parallel_uploads=args.max_parallel_uploads,
        debug=args.debug,
    )


async def run_command(
    args: argparse.Namespace, settings: StorageSettings, logger: logging.Logger
) -> Optional[CrawlSummary]:
    """Open storage once and run the selected command against it."""
    adapter = LoggerAdapter(logger)
    async with StorageFactory.open_storage(settings, adapter) as (uploader, store):
        if not args.skip_storage_setup:
            await uploader.ensure_bucket()
            await store.ensure_tables()

        if args.command == "register-transform":
            await store.upsert_transform(
                ImageTransform(
                    name=args.name,
                    version=args.transform_version,
                    command_line_arguments=args.command_template,
                )
            )
            return None

        config = config_from_args(args)
        crawler = CrawlerFactory.create_crawler(uploader, store, config=config, logger=adapter)

        if args.command == "walk":
            return await crawler.walk_tree(config.root, config.version)

        if args.command_template:
            transform = ImageTransform(
                name=args.transform_name,
                version=args.transform_version,
                command_line_arguments=args.command_template,
            )
            await store.upsert_transform(transform)
        else:
            transform = await store.get_transform(args.transform_name, args.transform_version)
            if transform is None:
                raise TransformNotFoundError(
                    f"Transform {args.transform_name} v{args.transform_version} is not registered"
                )
        return await crawler.transform_tree(
            config.root, config.version, transform, args.executable, args.output_root
        )


def main() -> None:
    """
    Entry point for the images-crawler command.

    Parses arguments, builds the storage settings once and runs the selected
    subcommand. Exits with status 1 when the run fails.
    """
    parser = build_parser()
    args = parser.parse_args()

    if args.command == "version":
        print("Images Crawler CLI")
        print(f"Version {__version__}")
        sys.exit(0)
        return
    if args.command is None:
        parser.print_help()
        sys.exit(1)
        return

    setup_logger(level="DEBUG" if args.debug else None)
    logger = get_logger("crawler")

    try:
        settings = settings_from_args(args)
        summary = asyncio.run(run_command(args, settings, logger))
        if summary is not None:
            logger.info(
                f"Crawl completed: {summary.image_sets} image set(s), "
                f"{summary.uploads} upload(s), {summary.dropped_groups} dropped group(s), "
                f"{summary.skipped_files} skipped file(s) in {summary.processing_time:.1f}s"
            )
    except KeyboardInterrupt:
        logger.warning("Crawl interrupted by user.")
    except CrawlError as e:
        logger.error(f"Crawl finished with {len(e.errors)} failure(s)")
        for error in e.errors:
            logger.error(f"  {error}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Crawl failed: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
