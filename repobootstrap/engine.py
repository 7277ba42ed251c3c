"""
Main engine for the workspace bootstrapper.

Provides a high-level interface that wires the acquisition, checkout and
installation stages into a pipeline and runs it for a list of
repositories.
"""

from typing import Any, Callable, Dict, Iterable, List, Optional

from repobootstrap.acquisition.git_handler import GitHandler
from repobootstrap.acquisition.stages import AcquisitionStage, BranchCheckoutStage
from repobootstrap.core.config import BootstrapConfig, Config
from repobootstrap.core.exceptions import RepositoryAcquisitionFailure
from repobootstrap.core.models import RemoteCatalog
from repobootstrap.core.pipeline import Pipeline, PipelineState
from repobootstrap.installation.installer import PipInstaller
from repobootstrap.installation.stage import InstallationStage
from repobootstrap.utils.logging_config import get_logger

logger = get_logger(__name__)


class BootstrapEngine:
    """
    Clones a set of repositories into a workspace and installs them.

    The remote catalog is fixed when the engine is created; user remotes
    passed as ``preferred_remotes`` are tried before the configured ones.
    """

    def __init__(
        self,
        config: BootstrapConfig = None,
        preferred_remotes: Iterable[str] = (),
        git_handler: Optional[GitHandler] = None,
        installer: Optional[PipInstaller] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self.config = config or Config.get()
        self.catalog = RemoteCatalog.from_remotes(
            self.config.acquisition.remotes, preferred_remotes
        )
        self.git_handler = git_handler or GitHandler(self.config.acquisition)
        self.installer = installer
        self.sleep = sleep
        self.pipeline = self._create_pipeline()

    def _create_pipeline(self) -> Pipeline:
        """Create and configure the bootstrap pipeline."""
        pipeline = Pipeline(self.config)
        order = ["acquisition"]

        pipeline.register_stage(AcquisitionStage(
            self.config, self.catalog, git_handler=self.git_handler, sleep=self.sleep,
        ))

        if self.config.acquisition.branch:
            pipeline.register_stage(BranchCheckoutStage(self.config, self.git_handler))
            order.append("checkout")

        if self.config.installation.enabled:
            pipeline.register_stage(InstallationStage(
                self.config, installer=self.installer,
            ))
            order.append("installation")

        pipeline.set_execution_order(order)
        return pipeline

    def bootstrap(self, repositories: List[str]) -> PipelineState:
        """
        Run the pipeline for the given repositories.

        Args:
            repositories: Repository names in install order.

        Returns:
            Final pipeline state.
        """
        self.config.workspace_path.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Remotes: {' '.join(self.catalog)}")
        return self.pipeline.run(repositories)

    @staticmethod
    def summarize(state: PipelineState) -> Dict[str, Any]:
        """Collect per-repository outcomes and install tasks from a finished run."""
        results = state.data.get("acquisition")
        if results is None and isinstance(state.failure, RepositoryAcquisitionFailure):
            results = state.failure.results

        return {
            "pipeline_id": state.pipeline_id,
            "succeeded": state.succeeded,
            "repositories": [r.to_dict() for r in results or []],
            "install": [t.to_dict() for t in state.data.get("installation", [])],
            "stages": {name: r.status.value for name, r in state.stage_results.items()},
        }
