"""
Pipeline stages for the acquisition phase.
"""

from typing import Any, Callable, Dict, List, Optional, Tuple

from repobootstrap.acquisition.coordinator import ConcurrencyCoordinator
from repobootstrap.acquisition.git_handler import GitHandler
from repobootstrap.acquisition.resolver import RemoteFallbackResolver
from repobootstrap.acquisition.retry import CloneRetryEngine
from repobootstrap.core.config import BootstrapConfig
from repobootstrap.core.models import (
    CloneOutcome,
    RemoteCatalog,
    RepositoryRequest,
    RepositoryResult,
)
from repobootstrap.core.pipeline import PipelineStage, PipelineState


class AcquisitionStage(PipelineStage):
    """
    Clones every requested repository that is not yet in the workspace.

    Output is the ordered list of RepositoryResult objects.
    """

    def __init__(
        self,
        config: BootstrapConfig,
        catalog: RemoteCatalog,
        git_handler: Optional[GitHandler] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        super().__init__(config)
        self.catalog = catalog
        self.git_handler = git_handler or GitHandler(config.acquisition)

        retry_kwargs = {"sleep": sleep} if sleep is not None else {}
        engine = CloneRetryEngine(self.git_handler, config.retry, **retry_kwargs)
        resolver = RemoteFallbackResolver(engine, config.workspace_path)
        self.coordinator = ConcurrencyCoordinator(
            resolver, max_workers=config.acquisition.max_workers
        )

    @property
    def name(self) -> str:
        return "acquisition"

    def build_requests(self, names: List[str]) -> List[RepositoryRequest]:
        workspace = self.config.workspace_path
        return [RepositoryRequest.from_workspace(name, workspace) for name in names]

    def execute(self, state: PipelineState) -> Tuple[List[RepositoryResult], Dict[str, Any]]:
        requests = self.build_requests(state.repositories)
        parallel = self.config.acquisition.concurrent

        self.logger.info(
            f"Cloning {len(requests)} components"
            f"{' concurrently' if parallel else ''}!"
        )
        results = self.coordinator.run(requests, self.catalog, parallel=parallel)

        metrics = {
            "requested": len(requests),
            "cloned": sum(1 for r in results if r.outcome is CloneOutcome.CLONED),
            "skipped": sum(1 for r in results if r.outcome is CloneOutcome.SKIPPED),
            "fetch_attempts": sum(r.attempts for r in results),
        }
        return results, metrics


class BranchCheckoutStage(PipelineStage):
    """Checks out the configured branch in every available repository."""

    def __init__(self, config: BootstrapConfig, git_handler: Optional[GitHandler] = None):
        super().__init__(config)
        self.git_handler = git_handler or GitHandler(config.acquisition)

    @property
    def name(self) -> str:
        return "checkout"

    @property
    def dependencies(self) -> List[str]:
        return ["acquisition"]

    def execute(self, state: PipelineState) -> Tuple[Dict[str, bool], Dict[str, Any]]:
        branch = self.config.acquisition.branch
        results: List[RepositoryResult] = state.data.get("acquisition", [])
        self.logger.info(f"Checking out branch {branch}.")

        checked_out: Dict[str, bool] = {}
        for result in results:
            if not result.available:
                continue
            repo_path = self.config.workspace_path / result.name
            outcome = self.git_handler.checkout(repo_path, branch)
            checked_out[result.name] = outcome.ok
            if not outcome.ok:
                self.logger.warning(
                    f"Could not check out {branch} in {result.name}: {outcome.output.strip()}"
                )

        metrics = {
            "branch": branch,
            "checked_out": sum(1 for ok in checked_out.values() if ok),
            "failed": sorted(name for name, ok in checked_out.items() if not ok),
        }
        return checked_out, metrics
