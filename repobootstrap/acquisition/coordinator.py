"""
Sequential or concurrent acquisition of many repositories.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Sequence

from repobootstrap.acquisition.resolver import RemoteFallbackResolver
from repobootstrap.core.exceptions import RepositoryAcquisitionFailure
from repobootstrap.core.models import RemoteCatalog, RepositoryRequest, RepositoryResult

logger = logging.getLogger(__name__)


class ConcurrencyCoordinator:
    """
    Runs the resolver for every request and aggregates the outcome.

    Sequential runs stop at the first failed repository. Concurrent runs
    let every repository finish before reporting, so one failure cannot
    hide the status of the others. Results always follow request order.
    """

    def __init__(self, resolver: RemoteFallbackResolver, max_workers: int = 0):
        self.resolver = resolver
        self.max_workers = max_workers

    def run(
        self,
        requests: Sequence[RepositoryRequest],
        catalog: RemoteCatalog,
        parallel: bool = False,
    ) -> List[RepositoryResult]:
        """
        Acquire all requested repositories.

        Args:
            requests: Repositories in the order they were requested.
            catalog: Remote bases in priority order.
            parallel: Resolve repositories concurrently.

        Returns:
            One result per request, in request order.

        Raises:
            RepositoryAcquisitionFailure: If any repository failed. The
                exception carries the ordered results gathered so far.
        """
        if parallel and len(requests) > 1:
            results = self._run_concurrent(requests, catalog)
        else:
            results = self._run_sequential(requests, catalog)

        if any(not result.available for result in results):
            raise RepositoryAcquisitionFailure(results)
        return results

    def _run_sequential(
        self, requests: Sequence[RepositoryRequest], catalog: RemoteCatalog
    ) -> List[RepositoryResult]:
        results: List[RepositoryResult] = []
        for request in requests:
            result = self.resolver.resolve(request, catalog)
            results.append(result)
            if not result.available:
                break
        return results

    def _run_concurrent(
        self, requests: Sequence[RepositoryRequest], catalog: RemoteCatalog
    ) -> List[RepositoryResult]:
        workers = self.max_workers or len(requests)
        logger.debug(f"Cloning {len(requests)} repositories with {workers} workers")

        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(self.resolver.resolve, r, catalog) for r in requests]
            results = []
            for request, future in zip(requests, futures):
                result = future.result()
                logger.debug(f"Finished: {request.name} -> {result.outcome.value}")
                results.append(result)
            return results
