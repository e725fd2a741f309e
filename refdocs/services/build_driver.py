"""
Documentation generator driver for refdocs.

Runs the external generator once per reference. The generator (Doxygen
by default) cannot take an output directory on its command line, so it
is started with ``-`` and fed a complete configuration on stdin: the
flattened base configuration plus one ``OUTPUT_DIRECTORY = ...`` line
pointing at the reference's own output subdirectory.
"""

import logging
import shlex
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence, Union

from ..exit_codes import BuildError, FilesystemError
from ..infra.git_client import WorkingTree
from .config_resolver import DEFAULT_OUTPUT_KEY, compose_build_config

logger = logging.getLogger(__name__)

DEFAULT_COMMAND = ("doxygen", "-")


class BuildDriver:
    """
    Builds documentation for one reference at a time.

    Example:
        driver = BuildDriver()
        out = driver.build("v1.0.0", tree, Path("/srv/docs"), config_text)
    """

    def __init__(
        self,
        command: Optional[Union[str, Sequence[str]]] = None,
        output_key: str = DEFAULT_OUTPUT_KEY,
        timeout: Optional[float] = None
    ):
        """
        Initialize BuildDriver.

        Args:
            command: Generator command line, as a list or a shell-style
                string (default: doxygen reading stdin)
            output_key: Configuration key naming the output directory
            timeout: Seconds to wait for the generator (None = no limit)
        """
        if isinstance(command, str):
            command = shlex.split(command)
        self.command: List[str] = list(command or DEFAULT_COMMAND)
        self.output_key = output_key
        self.timeout = timeout

    def prepare_output_dir(self, output_root: Path, slug: str) -> Path:
        """Create the reference's output directory; it must not exist yet."""
        out_dir = output_root / slug
        try:
            out_dir.mkdir()
        except FileExistsError as e:
            raise FilesystemError(
                f"output directory {out_dir} already exists (slug collision on '{slug}')"
            ) from e
        except OSError as e:
            raise FilesystemError(f"failed to create output directory {out_dir}") from e
        return out_dir

    def build(self, slug: str, tree: WorkingTree, output_root: Path, base_config: str) -> Path:
        """
        Generate documentation for the currently checked-out reference.

        Blocks until the generator exits.

        Args:
            slug: Directory name for this reference's output
            tree: Working tree the generator runs in
            output_root: Absolute output root
            base_config: Flattened base configuration

        Returns:
            The reference's output directory

        Raises:
            FilesystemError: the output directory exists or cannot be created
            BuildError: the generator cannot be started, times out or fails
        """
        out_dir = self.prepare_output_dir(output_root, slug)
        local_config = compose_build_config(base_config, out_dir, self.output_key)

        logger.debug(f"Running {' '.join(self.command)} in {tree.path} -> {out_dir}")
        try:
            result = subprocess.run(
                self.command,
                cwd=str(tree.path),
                input=local_config,
                capture_output=True,
                text=True,
                errors="replace",
                timeout=self.timeout
            )
        except subprocess.TimeoutExpired as e:
            raise BuildError(
                f"{self.command[0]} timed out after {self.timeout}s",
                stderr=_decode(e.stderr)
            ) from e
        except OSError as e:
            raise BuildError(f"failed to run {self.command[0]}") from e

        if result.stdout:
            logger.debug(result.stdout.rstrip())

        if result.returncode != 0:
            raise BuildError(
                f"{self.command[0]} failed with status {result.returncode}",
                stderr=result.stderr or "",
                returncode=result.returncode
            )

        return out_dir


def _decode(data) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data
