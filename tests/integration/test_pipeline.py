"""Integration tests for complete crawls through the factories."""

import asyncio
import os

import pytest

from images_crawler.core.exceptions import CrawlError
from images_crawler.core.factories import CrawlerFactory
from images_crawler.core.models import CrawlConfig, ImageTransform
from images_crawler.core.transform_runner import TransformRunner
from images_crawler.testing.fakes import (
    FakeLogger,
    FakeMetadataStore,
    FakeObjectStore,
    FakeProcessRunner,
    build_image_tree,
)


class TestCrawlIntegration:
    """End-to-end crawls against the fake stores."""

    def test_one_failed_upload_out_of_twenty_five(self, tmp_path):
        """Every upload is attempted and exactly the failed one is reported."""
        files = build_image_tree(str(tmp_path), [f"batch/f{i:02d}.png" for i in range(25)])
        object_store = FakeObjectStore()
        object_store.set_delay(0.005)
        object_store.fail_for(files[6])
        metadata_store = FakeMetadataStore()
        crawler = CrawlerFactory.create_crawler(
            object_store, metadata_store, config=CrawlConfig(root=str(tmp_path)), logger=FakeLogger()
        )

        with pytest.raises(CrawlError) as info:
            asyncio.run(crawler.walk_tree(str(tmp_path), "0"))

        assert [error.source for error in info.value.errors] == [files[6]]
        assert sorted(object_store.attempts) == sorted(files)
        assert len(object_store.objects) == 24
        assert object_store.probe.peak <= 20
        assert metadata_store.get_image_set("batch") is not None

    def test_empty_root(self, tmp_path):
        """A tree without images finishes cleanly with nothing recorded."""
        build_image_tree(str(tmp_path), ["docs/readme.txt"])
        object_store = FakeObjectStore()
        metadata_store = FakeMetadataStore()
        crawler = CrawlerFactory.create_crawler(object_store, metadata_store, logger=FakeLogger())

        summary = asyncio.run(crawler.walk_tree(str(tmp_path), "0"))

        assert summary.image_sets == 0
        assert summary.uploads == 0
        assert metadata_store.image_sets == {}
        assert object_store.objects == []

    def test_walk_then_transform(self, tmp_path):
        """Transformed objects sit beside the originals; records are keyed by path and version."""
        source = str(tmp_path / "images")
        build_image_tree(
            source,
            ["trees/coniferous/pine.png", "trees/coniferous/fir.jpg", "cats/tabby.gif", "root.png"],
        )
        logger = FakeLogger()
        object_store = FakeObjectStore()
        metadata_store = FakeMetadataStore()
        config = CrawlConfig(root=source, version="2")
        runner = TransformRunner(
            logger,
            extensions=config.extensions,
            run_process=FakeProcessRunner(fail_names={"tabby.gif"}),
            resolve_executable=lambda name: name,
        )
        crawler = CrawlerFactory.create_crawler(
            object_store, metadata_store, config=config, logger=logger, transform_runner=runner
        )
        sketch = ImageTransform(
            name="Sketch", version="1", command_line_arguments="{infile} -sketch 0x20+120 {outfile}"
        )

        walked = asyncio.run(crawler.walk_tree(config.root, config.version))
        transformed = asyncio.run(
            crawler.transform_tree(
                config.root, config.version, sketch, "magick", str(tmp_path / "sketched")
            )
        )

        assert walked.image_sets == 3
        assert walked.uploads == 4
        assert transformed.image_sets == 2
        assert transformed.uploads == 3
        assert transformed.dropped_groups == 1
        assert transformed.skipped_files == 1

        coniferous = metadata_store.get_image_set("trees/coniferous", row_key="2")
        assert coniferous.tags == ("trees", "coniferous")
        assert coniferous.transform == sketch
        assert coniferous.destination_key == "transform/Sketch/1/trees/coniferous/2"
        cats = metadata_store.get_image_set("cats", row_key="2")
        assert cats.transform is None
        assert cats.destination_key == "original/cats/2"
        assert len(metadata_store.image_sets) == 3

        assert sorted(object_store.keys()) == [
            "original//2/root.png",
            "original/cats/2/tabby.gif",
            "original/trees/coniferous/2/fir.jpg",
            "original/trees/coniferous/2/pine.png",
            "transform/Sketch/1//2/root.png",
            "transform/Sketch/1/trees/coniferous/2/fir.jpg",
            "transform/Sketch/1/trees/coniferous/2/pine.png",
        ]
        assert os.path.isfile(tmp_path / "sketched" / "trees" / "coniferous" / "pine.png")

    def test_extensions_from_config(self, tmp_path):
        build_image_tree(str(tmp_path), ["a/x.png", "a/y.gif", "a/z.jpg"])
        object_store = FakeObjectStore()
        crawler = CrawlerFactory.create_crawler(
            object_store,
            FakeMetadataStore(),
            config=CrawlConfig(root=str(tmp_path), extensions=("gif",)),
            logger=FakeLogger(),
        )

        asyncio.run(crawler.walk_tree(str(tmp_path), "0"))

        assert object_store.keys() == ["original/a/0/y.gif"]
