"""
Repository acquisition: cloning with remote fallback, transient-failure
retries and optional concurrency.
"""

from repobootstrap.acquisition.git_handler import FetchResult, GitHandler
from repobootstrap.acquisition.retry import CloneAttempt, CloneRetryEngine
from repobootstrap.acquisition.resolver import RemoteFallbackResolver
from repobootstrap.acquisition.coordinator import ConcurrencyCoordinator
from repobootstrap.acquisition.stages import AcquisitionStage, BranchCheckoutStage

__all__ = [
    "FetchResult",
    "GitHandler",
    "CloneAttempt",
    "CloneRetryEngine",
    "RemoteFallbackResolver",
    "ConcurrencyCoordinator",
    "AcquisitionStage",
    "BranchCheckoutStage",
]
