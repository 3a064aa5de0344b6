"""Testing utilities and fakes for the images crawler."""

from .fakes import (
    ConcurrencyProbe,
    FakeLogger,
    FakeMetadataStore,
    FakeObjectStore,
    FakeProcessRunner,
    UploadedObject,
    build_image_tree,
    create_test_image,
)

__all__ = [
    "ConcurrencyProbe",
    "FakeLogger",
    "FakeMetadataStore",
    "FakeObjectStore",
    "FakeProcessRunner",
    "UploadedObject",
    "build_image_tree",
    "create_test_image",
]
