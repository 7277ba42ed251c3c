"""
Package installation through pip.
"""

import logging
import os
import subprocess
import sys
from pathlib import Path
from typing import List, Sequence

from repobootstrap.core.config import InstallConfig
from repobootstrap.core.exceptions import InstallFailure

logger = logging.getLogger(__name__)


def in_virtual_environment() -> bool:
    """Whether the running interpreter belongs to a virtualenv or conda env."""
    return (
        sys.prefix != getattr(sys, "base_prefix", sys.prefix)
        or bool(os.environ.get("VIRTUAL_ENV"))
        or bool(os.environ.get("CONDA_DEFAULT_ENV"))
    )


class PipInstaller:
    """
    Installs packages and editable repositories with pip.

    Every invocation runs ``python -m pip install`` with the configured
    interpreter so packages land in the same environment.
    """

    def __init__(self, config: InstallConfig, python_executable: str = None):
        self.config = config
        self.python_executable = python_executable or sys.executable

    def _base_command(self) -> List[str]:
        return [self.python_executable, "-m", "pip", "install", *self.config.pip_options]

    def _run(self, args: Sequence[str], target: str) -> str:
        cmd = self._base_command() + list(args)
        logger.debug(f"pip-installing: {' '.join(args)}.")
        try:
            result = subprocess.run(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
            )
        except OSError as e:
            raise InstallFailure(target, str(e)) from e

        if result.returncode != 0:
            raise InstallFailure(target, result.stdout or "")
        return result.stdout or ""

    def install_packages(self, specifiers: Sequence[str]) -> str:
        """
        Install a list of package specifiers (pip options allowed).

        Args:
            specifiers: Arguments for ``pip install``, e.g. ["--pre", "capstone"].

        Returns:
            Captured pip output.

        Raises:
            InstallFailure: If pip exits with a non-zero status.
        """
        return self._run(specifiers, " ".join(specifiers))

    def install_editable(self, repo_path: Path) -> str:
        """Install a repository in editable mode."""
        args = []
        if self.config.no_build_isolation:
            args.append("--no-build-isolation")
        args.extend(["-e", str(repo_path)])
        return self._run(args, str(repo_path))
