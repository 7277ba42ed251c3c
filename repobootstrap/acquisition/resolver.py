"""
Per-repository remote fallback.
"""

import logging
from pathlib import Path

from repobootstrap.acquisition.retry import CloneRetryEngine
from repobootstrap.core.exceptions import RemoteUnavailableError
from repobootstrap.core.models import (
    CloneOutcome,
    RemoteCatalog,
    RepositoryRequest,
    RepositoryResult,
)

logger = logging.getLogger(__name__)


class RemoteFallbackResolver:
    """
    Acquires a repository from the first remote that can provide it.

    Remotes are tried strictly in catalog order. A repository whose
    directory already exists in the workspace is never fetched.
    """

    def __init__(self, engine: CloneRetryEngine, workspace_dir: Path):
        self.engine = engine
        self.workspace_dir = Path(workspace_dir)

    def resolve(self, request: RepositoryRequest, catalog: RemoteCatalog) -> RepositoryResult:
        """
        Acquire one repository.

        Args:
            request: Repository to acquire.
            catalog: Remote bases in priority order.

        Returns:
            RepositoryResult with outcome SKIPPED, CLONED or FAILED. Failed
            results carry the output of the last remote tried.
        """
        if request.already_present:
            logger.info(f"Skipping {request.name} -- already cloned.")
            return RepositoryResult(name=request.name, outcome=CloneOutcome.SKIPPED)

        logger.info(f"Cloning repo {request.name}.")
        destination = self.workspace_dir / request.name
        attempts = 0
        last_log = None

        for remote in catalog:
            url = catalog.url_for(remote, request.name)
            try:
                attempt = self.engine.attempt(url, destination)
            except RemoteUnavailableError as e:
                attempts += e.details.get("tries", 1)
                last_log = e.log
                logger.debug(f"{e}")
                continue

            attempts += attempt.tries
            logger.debug(f"Success - {request.name} cloned from {remote}!")
            return RepositoryResult(
                name=request.name,
                outcome=CloneOutcome.CLONED,
                remote=remote,
                attempts=attempts,
            )

        if not len(catalog):
            last_log = "No remotes configured"

        logger.error(f"Failed to clone {request.name}.")
        return RepositoryResult(
            name=request.name,
            outcome=CloneOutcome.FAILED,
            error_log=last_log,
            attempts=attempts,
        )
