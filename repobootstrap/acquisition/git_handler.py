"""
Git operations used for repository acquisition.

The handler only runs git and reports what happened; deciding whether a
failure is worth retrying is left to the caller.
"""

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence

from repobootstrap.core.config import AcquisitionConfig

logger = logging.getLogger(__name__)

SHALLOW_OPTIONS = ("--depth", "1", "--no-single-branch")


@dataclass(frozen=True)
class FetchResult:
    """Exit status and combined stdout/stderr of a git command."""

    returncode: int
    output: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class GitHandler:
    """
    Runs git commands for cloning and branch checkout.

    Credential prompts are disabled so an unreachable private remote fails
    instead of blocking the run.
    """

    def __init__(self, config: AcquisitionConfig):
        self.config = config

    @property
    def clone_options(self) -> List[str]:
        """Options passed to every ``git clone``."""
        options = []
        if self.config.recursive:
            options.append("--recursive")
        if self.config.shallow:
            options.extend(SHALLOW_OPTIONS)
        return options

    def _environment(self) -> dict:
        env = os.environ.copy()
        env["GIT_ASKPASS"] = "true"
        env["GIT_TERMINAL_PROMPT"] = "0"
        return env

    def _run(self, cmd: Sequence[str], cwd: Path = None) -> FetchResult:
        logger.debug(f"Running: {' '.join(cmd)}")
        timeout = self.config.git_timeout or None
        try:
            result = subprocess.run(
                list(cmd),
                cwd=str(cwd) if cwd else None,
                env=self._environment(),
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as e:
            output = e.output.decode(errors="replace") if isinstance(e.output, bytes) else (e.output or "")
            return FetchResult(
                returncode=-1,
                output=f"{output}\ngit timed out after {timeout} seconds",
            )
        except FileNotFoundError as e:
            return FetchResult(returncode=127, output=f"git is not available on this system: {e}")

        return FetchResult(returncode=result.returncode, output=result.stdout or "")

    def clone(self, url: str, destination: Path) -> FetchResult:
        """
        Clone ``url`` into ``destination``.

        Args:
            url: Full repository URL.
            destination: Directory the repository is cloned into.

        Returns:
            FetchResult with the exit status and captured output.
        """
        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)
        cmd = ["git", "clone", *self.clone_options, "--", url, str(destination)]
        return self._run(cmd)

    def checkout(self, repo_path: Path, branch: str) -> FetchResult:
        """Check out ``branch`` in an existing clone."""
        repo_path = Path(repo_path)
        if not repo_path.is_dir():
            return FetchResult(returncode=128, output=f"Not a repository directory: {repo_path}")
        return self._run(["git", "checkout", branch], cwd=repo_path)

    def cleanup_clone(self, clone_path: Path) -> None:
        """
        Remove a partially created clone.

        Args:
            clone_path: Path to the clone destination.
        """
        clone_path = Path(clone_path)
        if clone_path.exists():
            try:
                shutil.rmtree(clone_path)
                logger.debug(f"Cleaned up clone: {clone_path}")
            except OSError as e:
                logger.warning(f"Failed to cleanup clone {clone_path}: {e}")
