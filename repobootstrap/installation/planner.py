"""
Install list construction from acquired repositories.

Only repositories with a recognized packaging manifest are installed.
Extra dependencies for a repository are attached to its task so they can
be installed in a separate step before the repository itself.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Mapping, Optional

from repobootstrap.core.models import (
    InstallTask,
    ManifestKind,
    RepositoryResult,
    freeze_extra_dependencies,
)

logger = logging.getLogger(__name__)


class InstallPlanner:
    """Builds an ordered install list from acquisition results."""

    def __init__(
        self,
        workspace_dir: Path,
        extra_dependencies: Optional[Mapping[str, Iterable[str]]] = None,
    ):
        self.workspace_dir = Path(workspace_dir)
        self.extra_dependencies = freeze_extra_dependencies(extra_dependencies)

    @staticmethod
    def detect_manifest(repo_path: Path) -> ManifestKind:
        """
        Find the packaging manifest of a repository.

        Args:
            repo_path: Repository root directory.

        Returns:
            The first manifest found, checking setup.py before
            pyproject.toml, or ManifestKind.NONE.
        """
        for kind in ManifestKind.probe_order():
            if (Path(repo_path) / kind.value).is_file():
                return kind
        return ManifestKind.NONE

    def plan(self, results: Iterable[RepositoryResult]) -> List[InstallTask]:
        """
        Build install tasks for the available repositories.

        Args:
            results: Acquisition results in request order.

        Returns:
            Install tasks in request order.
        """
        tasks: List[InstallTask] = []
        for result in results:
            if not result.available:
                continue

            repo_path = self.workspace_dir / result.name
            manifest = self.detect_manifest(repo_path)
            if manifest is ManifestKind.NONE:
                logger.debug(f"{result.name} has no packaging manifest, not installing it")
                continue

            tasks.append(InstallTask(
                repository_name=result.name,
                path=repo_path,
                manifest_kind=manifest,
                extra_deps=self.extra_dependencies.get(result.name, ()),
            ))

        logger.info(f"Install list: {' '.join(t.repository_name for t in tasks)}")
        return tasks
