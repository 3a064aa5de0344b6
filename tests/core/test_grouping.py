# tests/core/test_grouping.py

import os

import pytest

from images_crawler.core.exceptions import ConfigurationError
from images_crawler.core.grouping import enumerate_files, group_images, list_images
from images_crawler.core.path_utils import DEFAULT_EXTENSIONS
from images_crawler.testing.fakes import build_image_tree


def _by_suffix(groups):
    return {
        group.suffix.replace(os.sep, "/"): sorted(os.path.basename(f) for f in group.files)
        for group in groups
    }


class TestGroupImages:
    """Tests for group_images."""

    def test_groups_by_containing_directory(self, tmp_path):
        """Nested directories and the root each become one group."""
        build_image_tree(str(tmp_path), ["a/b/x.png", "a/b/y.gif", "a/c/z.jpg", "w.png"])

        groups = group_images(str(tmp_path), DEFAULT_EXTENSIONS)

        assert _by_suffix(groups) == {
            "a/b": ["x.png", "y.gif"],
            "a/c": ["z.jpg"],
            "": ["w.png"],
        }

    def test_extension_match_is_case_insensitive(self, tmp_path):
        build_image_tree(str(tmp_path), ["trees/OAK.PNG", "trees/elm.Jpg"])

        groups = group_images(str(tmp_path), [".png", ".jpg"])

        assert _by_suffix(groups) == {"trees": ["OAK.PNG", "elm.Jpg"]}

    def test_non_matching_files_ignored(self, tmp_path):
        """Directories with no matching files yield no group."""
        build_image_tree(str(tmp_path), ["docs/readme.txt", "trees/oak.png", "trees/notes.md"])

        groups = group_images(str(tmp_path), DEFAULT_EXTENSIONS)

        assert _by_suffix(groups) == {"trees": ["oak.png"]}

    def test_extensions_without_leading_dot(self, tmp_path):
        build_image_tree(str(tmp_path), ["a/x.gif", "a/y.png"])

        groups = group_images(str(tmp_path), ["gif"])

        assert _by_suffix(groups) == {"a": ["x.gif"]}

    def test_empty_tree(self, tmp_path):
        assert group_images(str(tmp_path), DEFAULT_EXTENSIONS) == []

    def test_trailing_separator_on_root(self, tmp_path):
        build_image_tree(str(tmp_path), ["a/x.png"])

        groups = group_images(str(tmp_path) + os.sep, DEFAULT_EXTENSIONS)

        assert _by_suffix(groups) == {"a": ["x.png"]}

    def test_file_paths_are_absolute(self, tmp_path):
        written = build_image_tree(str(tmp_path), ["a/x.png"])

        groups = group_images(str(tmp_path), DEFAULT_EXTENSIONS)

        assert groups[0].files == written

    def test_deterministic(self, tmp_path):
        build_image_tree(str(tmp_path), ["b/2.png", "a/1.png", "b/1.png", "0.png"])

        assert group_images(str(tmp_path), DEFAULT_EXTENSIONS) == group_images(
            str(tmp_path), DEFAULT_EXTENSIONS
        )

    def test_custom_enumerator(self, tmp_path):
        """The enumeration collaborator decides which files exist."""
        root = str(tmp_path)
        calls = []

        def enumerate_stub(directory, recursive):
            calls.append((directory, recursive))
            return [
                os.path.join(directory, "trees", "oak.png"),
                os.path.join(directory, "trees", "oak.txt"),
            ]

        groups = group_images(root, DEFAULT_EXTENSIONS, enumerate_files=enumerate_stub)

        assert calls == [(os.path.normpath(os.path.abspath(root)), True)]
        assert _by_suffix(groups) == {"trees": ["oak.png"]}

    @pytest.mark.parametrize("root", ["", "   ", None])
    def test_blank_root_rejected(self, root):
        with pytest.raises(ConfigurationError):
            group_images(root, DEFAULT_EXTENSIONS)

    def test_missing_root_rejected(self, tmp_path):
        with pytest.raises(ConfigurationError, match="does not exist"):
            group_images(str(tmp_path / "missing"), DEFAULT_EXTENSIONS)

    @pytest.mark.parametrize("extensions", [[], None, ["", "  "]])
    def test_empty_extensions_rejected(self, tmp_path, extensions):
        with pytest.raises(ConfigurationError):
            group_images(str(tmp_path), extensions)


class TestEnumeration:
    """Tests for enumerate_files and list_images."""

    def test_enumerate_recursive(self, tmp_path):
        build_image_tree(str(tmp_path), ["a/x.png", "y.png"])

        names = [os.path.basename(p) for p in enumerate_files(str(tmp_path), True)]

        assert sorted(names) == ["x.png", "y.png"]

    def test_enumerate_top_level_only(self, tmp_path):
        build_image_tree(str(tmp_path), ["a/x.png", "y.png"])

        names = [os.path.basename(p) for p in enumerate_files(str(tmp_path), False)]

        assert names == ["y.png"]

    def test_list_images_filters_extensions(self, tmp_path):
        build_image_tree(str(tmp_path), ["x.png", "y.txt", "z.GIF", "sub/w.png"])

        names = [os.path.basename(p) for p in list_images(str(tmp_path), DEFAULT_EXTENSIONS)]

        assert sorted(names) == ["x.png", "z.GIF"]
