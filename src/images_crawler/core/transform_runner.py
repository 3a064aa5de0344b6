"""Runs an external image tool over each directory group."""

import os
import shutil
import subprocess
from typing import Callable, Iterable, List, Optional

from .exceptions import ConfigurationError
from .grouping import list_images
from .logging_config import get_logger
from .models import ImageGroup, ImageTransform, TransformOutcome
from .path_utils import DEFAULT_EXTENSIONS, normalize_extensions
from .protocols import LoggerProtocol, ProcessRunner

logger = get_logger(__name__)


def run_process(argv: List[str]) -> int:
    """Run ``argv`` to completion and return its exit code."""
    completed = subprocess.run(
        argv,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.PIPE,
        check=False,
    )
    if completed.returncode != 0 and completed.stderr:
        logger.debug(
            completed.stderr.decode("utf-8", errors="replace").strip()
        )
    return completed.returncode


class TransformRunner:
    """
    Applies an ImageTransform to every file of a group, one process at a time.

    The files found in the output directory afterwards are what counts, not
    what was attempted: a tool that fails for one file only loses that file.
    """

    def __init__(
        self,
        logger: LoggerProtocol,
        extensions: Iterable[str] = DEFAULT_EXTENSIONS,
        run_process: ProcessRunner = run_process,
        resolve_executable: Callable[[str], Optional[str]] = shutil.which,
    ):
        self._logger = logger
        self._extensions = normalize_extensions(extensions)
        self._run_process = run_process
        self._resolve_executable = resolve_executable

    def check_executable(self, executable: str) -> str:
        """Resolve the tool path, raising ConfigurationError if it is missing."""
        if not executable or not executable.strip():
            raise ConfigurationError("A transform executable is required.")
        resolved = self._resolve_executable(executable)
        if not resolved:
            raise ConfigurationError(f"Transform executable '{executable}' not found.")
        return resolved

    def transform_group(
        self,
        group: ImageGroup,
        transform: ImageTransform,
        executable: str,
        output_root: str,
    ) -> TransformOutcome:
        """Transform every file of ``group`` into a mirrored output directory."""
        executable = self.check_executable(executable)
        output_dir = os.path.normpath(os.path.join(output_root, group.suffix))
        os.makedirs(output_dir, exist_ok=True)

        failed_files: List[str] = []
        for source in group.files:
            destination = os.path.join(output_dir, os.path.basename(source))
            argv = [executable, *transform.command_args(source, destination)]
            self._logger.info(f"Transforming: '{' '.join(argv)}'")
            exit_code = self._run_process(argv)
            if exit_code != 0:
                self._logger.warning(
                    f"Failed to execute '{' '.join(argv)}': Code {exit_code}"
                )
                failed_files.append(source)

        produced = list_images(output_dir, self._extensions, recursive=False)
        if not produced:
            self._logger.warning(f"No transformed images found for '{output_dir}'")

        return TransformOutcome(
            suffix=group.suffix,
            output_dir=output_dir,
            files=produced,
            failed_files=failed_files,
        )
