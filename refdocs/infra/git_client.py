"""
Git client infrastructure for refdocs.

Provides a clean abstraction over git command execution.
All git operations go through this client, making them:
- Easy to mock for testing
- Consistent in error handling
- Isolated from business logic

The git binary is invoked directly; only reference listing and
checkout are needed, so no git library is involved.
"""

import subprocess
from dataclasses import dataclass, field
from typing import Optional, List
from pathlib import Path
import logging

from ..exit_codes import VCSError

logger = logging.getLogger(__name__)


@dataclass
class GitResult:
    """Outcome of one git invocation."""
    stdout: str = ""
    stderr: str = ""
    returncode: int = 0

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class GitClient:
    """
    Abstraction over git commands.

    Example:
        client = GitClient()
        for name in client.list_references("/path/to/repo"):
            print(name)  # refs/heads/master, refs/tags/v1.0.0, ...
    """

    def __init__(self, timeout: Optional[int] = 60):
        """
        Initialize GitClient.

        Args:
            timeout: Command timeout in seconds (None disables it)
        """
        self.timeout = timeout

    def _run(self, args: List[str], cwd: str) -> GitResult:
        """
        Run a git command.

        Args:
            args: Arguments after ``git``
            cwd: Working directory

        Returns:
            GitResult with captured output and exit status

        Raises:
            VCSError: git could not be started or timed out
        """
        cmd = ["git", *args]
        logger.debug(f"Running {' '.join(cmd)} in {cwd}")
        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                capture_output=True,
                text=True,
                timeout=self.timeout
            )
        except subprocess.TimeoutExpired as e:
            raise VCSError(f"git command timed out after {self.timeout}s: {' '.join(cmd)}") from e
        except OSError as e:
            raise VCSError(f"failed to run git: {' '.join(cmd)}") from e

        return GitResult(
            stdout=result.stdout or "",
            stderr=result.stderr or "",
            returncode=result.returncode
        )

    def list_references(self, path: str) -> List[str]:
        """
        Retrieve every reference in the repository.

        Includes local branches, remote-tracking branches and tags, in the
        order git reports them.

        Raises:
            VCSError: git failed or exited non-zero
        """
        result = self._run(["for-each-ref", "--format=%(refname)"], cwd=path)
        if not result.ok:
            raise VCSError(
                f"git for-each-ref failed with status {result.returncode}: {result.stderr.strip()}",
                stderr=result.stderr
            )
        return [line.strip() for line in result.stdout.split('\n') if line.strip()]

    def checkout(self, path: str, ref: str) -> None:
        """
        Check out ``ref`` in the working tree at ``path``.

        Raises:
            VCSError: the checkout did not complete
        """
        result = self._run(["checkout", "--quiet", ref], cwd=path)
        if not result.ok:
            raise VCSError(
                f"failed to check out '{ref}': {result.stderr.strip() or f'status {result.returncode}'}",
                stderr=result.stderr
            )

    def head(self, path: str) -> Optional[str]:
        """Get current branch name, or the commit hash on a detached HEAD."""
        result = self._run(["rev-parse", "--abbrev-ref", "HEAD"], cwd=path)
        if not result.ok or not result.stdout.strip():
            return None
        name = result.stdout.strip()
        if name != "HEAD":
            return name
        result = self._run(["rev-parse", "HEAD"], cwd=path)
        return result.stdout.strip() if result.ok and result.stdout.strip() else None


@dataclass
class WorkingTree:
    """
    The single working tree a build run walks through references with.

    Exactly one owner (the build service) holds a WorkingTree for the
    duration of a run; every checkout goes through it so the currently
    checked-out reference is always known.
    """
    path: Path
    git: GitClient = field(default_factory=GitClient)
    current_ref: Optional[str] = None
    attempts: int = 0                   # checkouts started, successful or not

    def references(self) -> List[str]:
        return self.git.list_references(str(self.path))

    def checkout(self, ref: str) -> None:
        logger.debug(f"Checking out {ref}")
        self.attempts += 1
        self.git.checkout(str(self.path), ref)
        self.current_ref = ref

    def head(self) -> Optional[str]:
        return self.git.head(str(self.path))
