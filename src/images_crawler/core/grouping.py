"""Discovery of image files and their grouping by directory."""

import os
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from .exceptions import ConfigurationError
from .models import ImageGroup
from .path_utils import has_extension, normalize_extensions, normalize_root, path_suffix
from .protocols import FileEnumerator


def enumerate_files(directory: str, recursive: bool = True) -> List[str]:
    """List regular files under ``directory`` in a stable (sorted) order."""
    base = Path(directory)
    candidates = base.rglob("*") if recursive else base.glob("*")
    return sorted(str(path) for path in candidates if path.is_file())


def list_images(
    directory: str,
    extensions: Iterable[str],
    recursive: bool = False,
    enumerate_files: FileEnumerator = enumerate_files,
) -> List[str]:
    """List files in ``directory`` whose extension is in ``extensions``."""
    normalized = normalize_extensions(extensions)
    return [
        file_path
        for file_path in enumerate_files(directory, recursive)
        if has_extension(file_path, normalized)
    ]


def validate_root(root: Optional[str]) -> str:
    """Return the normalized root or raise if it is blank or not a directory."""
    if root is None or not str(root).strip():
        raise ConfigurationError("A root directory is required.")
    if not os.path.isdir(root):
        raise ConfigurationError(f"Directory '{root}' does not exist.")
    return normalize_root(str(root))


def group_images(
    root: str,
    extensions: Iterable[str],
    enumerate_files: FileEnumerator = enumerate_files,
) -> List[ImageGroup]:
    """
    Group the images under ``root`` by the directory that contains them.

    Args:
        root: Directory to walk recursively.
        extensions: Case-insensitive extensions to keep (".png" or "png").
        enumerate_files: File listing collaborator.

    Returns:
        One ImageGroup per directory holding at least one matching file. The
        root directory itself gets the suffix "".

    Raises:
        ConfigurationError: If the root is blank or missing, or no extension
            is configured.
    """
    root_path = validate_root(root)
    normalized = normalize_extensions(extensions or [])
    if not normalized:
        raise ConfigurationError("At least one image extension is required.")

    by_directory: Dict[str, List[str]] = {}
    for file_path in enumerate_files(root_path, True):
        if not has_extension(file_path, normalized):
            continue
        by_directory.setdefault(os.path.dirname(file_path), []).append(file_path)

    return [
        ImageGroup(suffix=path_suffix(directory, root_path), files=files)
        for directory, files in by_directory.items()
    ]
