"""
Core module containing pipeline orchestration, configuration, data model
and exceptions.
"""

from repobootstrap.core.config import Config, BootstrapConfig
from repobootstrap.core.pipeline import Pipeline, PipelineStage, PipelineState
from repobootstrap.core.exceptions import (
    BootstrapError,
    AcquisitionError,
    TransientTransportError,
    RemoteUnavailableError,
    RetryExhaustedError,
    RepositoryAcquisitionFailure,
    InstallFailure,
)

__all__ = [
    "Config",
    "BootstrapConfig",
    "Pipeline",
    "PipelineStage",
    "PipelineState",
    "BootstrapError",
    "AcquisitionError",
    "TransientTransportError",
    "RemoteUnavailableError",
    "RetryExhaustedError",
    "RepositoryAcquisitionFailure",
    "InstallFailure",
]
