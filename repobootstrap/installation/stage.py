"""
Pipeline stage for the installation phase.
"""

from typing import Any, Dict, List, Optional, Tuple

from repobootstrap.core.config import BootstrapConfig
from repobootstrap.core.models import InstallTask, RepositoryResult
from repobootstrap.core.pipeline import PipelineStage, PipelineState
from repobootstrap.installation.installer import PipInstaller, in_virtual_environment
from repobootstrap.installation.planner import InstallPlanner


class InstallationStage(PipelineStage):
    """
    Installs the acquired repositories in request order.

    For each task the extra dependencies are installed first, as their own
    pip invocation, followed by the editable install of the repository.
    The first failing pip invocation aborts the stage.
    """

    def __init__(
        self,
        config: BootstrapConfig,
        installer: Optional[PipInstaller] = None,
    ):
        super().__init__(config)
        self.installer = installer or PipInstaller(config.installation)
        self.planner = InstallPlanner(
            config.workspace_path, config.installation.extra_dependencies
        )

    @property
    def name(self) -> str:
        return "installation"

    @property
    def dependencies(self) -> List[str]:
        return ["acquisition"]

    def execute(self, state: PipelineState) -> Tuple[List[InstallTask], Dict[str, Any]]:
        results: List[RepositoryResult] = state.data.get("acquisition", [])
        tasks = self.planner.plan(results)
        metrics = {
            "planned": len(tasks),
            "installed": 0,
            "extra_dependency_steps": 0,
        }

        if not in_virtual_environment():
            self.logger.warning(
                "You are installing outside of a virtualenv. This is NOT RECOMMENDED."
            )

        install_config = self.config.installation
        if install_config.build_prerequisites:
            self.logger.info("Installing build dependencies...")
            self.installer.install_packages(install_config.build_prerequisites)

        self.logger.info("Installing python packages!")
        for task in tasks:
            self.logger.info(f"Installing {task.repository_name}.")
            if task.extra_deps:
                self.installer.install_packages(task.extra_deps)
                metrics["extra_dependency_steps"] += 1
            self.installer.install_editable(task.path)
            metrics["installed"] += 1

        if install_config.post_install_packages:
            self.logger.info("Installing some other helpful stuff")
            self.installer.install_packages(install_config.post_install_packages)

        return tasks, metrics
