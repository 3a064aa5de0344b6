"""Path, key and tag helpers for the images crawler."""

import os
import re
from typing import Iterable, List, Optional, Set

ROOT_PATH_MARKER = "<root>"
DEFAULT_EXTENSIONS = (".png", ".gif", ".jpg")

# Characters the table store and object store refuse in keys.
_UNSAFE_KEY_CHARS = re.compile(r"[/\\#?]")


def clean_key(dirty_key: str) -> str:
    """Replace '/', '\\', '#' and '?' with '_' so the value is usable as a key."""
    return _UNSAFE_KEY_CHARS.sub("_", dirty_key)


def to_forward_slashes(path: str) -> str:
    """Return ``path`` using forward slashes regardless of the source separator."""
    return path.replace("\\", "/")


def logical_path(suffix: str) -> str:
    """Map a directory suffix to the logical path stored on its image set."""
    return ROOT_PATH_MARKER if suffix == "" else suffix


def calculate_dest_key(
    suffix: str,
    version: str,
    transform_name: Optional[str] = None,
    transform_version: Optional[str] = None,
) -> str:
    """
    Calculate the destination key for an image set.

    Untransformed sets land under ``original/<suffix>/<version>``, transformed
    sets under ``transform/<name>/<transformVersion>/<suffix>/<version>``.
    """
    blob_suffix = to_forward_slashes(suffix)
    if transform_name is None:
        return f"original/{blob_suffix}/{version}"
    return f"transform/{transform_name}/{transform_version}/{blob_suffix}/{version}"


def path_suffix(directory: str, root: str) -> str:
    """
    Compute a directory's suffix relative to the crawl root.

    The path relative to the root is trimmed. The root itself, and anything
    outside it, yields "". A filesystem root such as "/" works like any other.
    """
    relative = os.path.relpath(directory, root)
    if relative in (os.curdir, os.pardir) or relative.startswith(os.pardir + os.sep):
        return ""
    return relative.strip()


def normalize_root(root: str) -> str:
    """Absolute, normalized form of ``root`` without a trailing separator."""
    return os.path.normpath(os.path.abspath(root))


def normalize_extensions(extensions: Iterable[str]) -> Set[str]:
    """Lower-case extensions and make sure each one starts with a dot."""
    normalized = set()
    for extension in extensions:
        extension = extension.strip().lower()
        if not extension:
            continue
        if not extension.startswith("."):
            extension = "." + extension
        normalized.add(extension)
    return normalized


def has_extension(file_name: str, extensions: Set[str]) -> bool:
    """Case-insensitive membership test against normalized extensions."""
    return os.path.splitext(file_name)[1].lower() in extensions


def split_path_tags(suffix: str) -> List[str]:
    """Default tag extractor: every directory name in the suffix is a tag."""
    return re.split(r"[/\\]", suffix)


def clean_tags(tags: Iterable[str]) -> List[str]:
    """Trim tags and drop blanks, keeping the extractor's order."""
    return [tag.strip() for tag in tags if tag is not None and tag.strip()]
