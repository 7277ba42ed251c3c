"""
Pipeline orchestration for the workspace bootstrapper.

Runs the bootstrap phases as ordered stages with explicit dependencies,
records per-stage results and writes a checkpoint when a stage fails so
the failure can be inspected after the process exits.
"""

import logging
import json
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from repobootstrap.core.config import BootstrapConfig, Config
from repobootstrap.core.exceptions import BootstrapError

logger = logging.getLogger(__name__)


class StageStatus(Enum):
    """Status of a pipeline stage."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class StageResult:
    """Result from a pipeline stage execution."""

    stage_name: str
    status: StageStatus
    started_at: datetime
    completed_at: Optional[datetime] = None
    output: Any = None
    error: Optional[str] = None
    metrics: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "stage_name": self.stage_name,
            "status": self.status.value,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "error": self.error,
            "metrics": self.metrics,
        }


@dataclass
class PipelineState:
    """Complete state of one bootstrap run."""

    pipeline_id: str
    repositories: List[str]
    created_at: datetime = field(default_factory=datetime.now)
    stage_results: Dict[str, StageResult] = field(default_factory=dict)
    current_stage: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)
    failure: Optional[BootstrapError] = None

    @property
    def succeeded(self) -> bool:
        return self.failure is None

    def get_stage_status(self, stage_name: str) -> StageStatus:
        """Get the status of a specific stage."""
        if stage_name in self.stage_results:
            return self.stage_results[stage_name].status
        return StageStatus.PENDING

    def is_stage_completed(self, stage_name: str) -> bool:
        return self.get_stage_status(stage_name) == StageStatus.COMPLETED

    def record_stage_start(self, stage_name: str) -> None:
        self.current_stage = stage_name
        self.stage_results[stage_name] = StageResult(
            stage_name=stage_name,
            status=StageStatus.RUNNING,
            started_at=datetime.now(),
        )

    def record_stage_completion(
        self, stage_name: str, output: Any, metrics: Dict[str, Any] = None
    ) -> None:
        if stage_name in self.stage_results:
            result = self.stage_results[stage_name]
            result.status = StageStatus.COMPLETED
            result.completed_at = datetime.now()
            result.output = output
            result.metrics = metrics or {}

    def record_stage_failure(self, stage_name: str, error: BootstrapError) -> None:
        if stage_name in self.stage_results:
            result = self.stage_results[stage_name]
            result.status = StageStatus.FAILED
            result.completed_at = datetime.now()
            result.error = str(error)
        self.failure = error

    def to_dict(self) -> Dict[str, Any]:
        """Convert state to dictionary for serialization."""
        return {
            "pipeline_id": self.pipeline_id,
            "repositories": self.repositories,
            "created_at": self.created_at.isoformat(),
            "current_stage": self.current_stage,
            "stage_results": {
                name: result.to_dict()
                for name, result in self.stage_results.items()
            },
            "failure": {
                "message": str(self.failure),
                "details": self.failure.details,
            } if self.failure else None,
        }

    def save(self, path: Path) -> None:
        """Save state to a checkpoint file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2, default=str)
        logger.debug(f"Pipeline state saved to {path}")


class PipelineStage(ABC):
    """
    Abstract base class for pipeline stages.

    Each stage implements execute and names the stages whose output it
    consumes.
    """

    def __init__(self, config: BootstrapConfig):
        self.config = config
        self.logger = logging.getLogger(f"{__name__}.{self.name}")

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for this stage."""
        pass

    @property
    def dependencies(self) -> List[str]:
        """List of stage names that must complete before this stage."""
        return []

    @abstractmethod
    def execute(self, state: PipelineState) -> Tuple[Any, Dict[str, Any]]:
        """
        Execute the stage.

        Args:
            state: Current pipeline state with data from previous stages.

        Returns:
            Tuple of (output_data, metrics_dict).

        Raises:
            BootstrapError: If the stage fails.
        """
        pass

    def validate_inputs(self, state: PipelineState) -> bool:
        for dep in self.dependencies:
            if not state.is_stage_completed(dep):
                self.logger.error(f"Dependency not met: {dep}")
                return False
        return True


class Pipeline:
    """
    Runs registered stages in order and stops at the first failure.
    """

    def __init__(self, config: BootstrapConfig = None):
        self.config = config or Config.get()
        self.stages: Dict[str, PipelineStage] = {}
        self.execution_order: List[str] = []
        self.logger = logging.getLogger(__name__)

    def register_stage(self, stage: PipelineStage) -> None:
        """Register a stage with the pipeline."""
        self.stages[stage.name] = stage
        self.logger.debug(f"Registered stage: {stage.name}")

    def set_execution_order(self, order: List[str]) -> None:
        """
        Set the order in which stages should execute.

        Raises:
            ValueError: If a stage in the order is not registered.
        """
        for stage_name in order:
            if stage_name not in self.stages:
                raise ValueError(f"Unknown stage: {stage_name}")
        self.execution_order = order

    def checkpoint_path(self, state: PipelineState) -> Path:
        return self.config.state_path / f"{state.pipeline_id}_checkpoint.json"

    def run(self, repositories: List[str]) -> PipelineState:
        """
        Run every stage for the given repositories.

        Args:
            repositories: Ordered repository names.

        Returns:
            Final pipeline state. ``state.failure`` holds the error that
            stopped the run, if any.
        """
        state = PipelineState(
            pipeline_id=str(uuid.uuid4())[:8],
            repositories=list(repositories),
        )

        self.logger.info(f"Starting bootstrap {state.pipeline_id}")
        self.logger.debug(f"Repositories: {' '.join(state.repositories)}")

        for stage_name in self.execution_order:
            stage = self.stages[stage_name]

            if not stage.validate_inputs(state):
                missing = [d for d in stage.dependencies if not state.is_stage_completed(d)]
                error = BootstrapError(
                    f"Dependencies not met: {', '.join(missing)}",
                    stage=stage_name,
                    details={"missing": missing},
                )
                state.record_stage_start(stage_name)
                state.record_stage_failure(stage_name, error)
                self.logger.error(f"Stage {stage_name} failed: {error}")
                break

            self.logger.debug(f"Executing stage: {stage_name}")
            state.record_stage_start(stage_name)

            try:
                output, metrics = stage.execute(state)
                state.record_stage_completion(stage_name, output, metrics)
                state.data[stage_name] = output
                self.logger.debug(f"Stage {stage_name} completed: {metrics}")

            except BootstrapError as e:
                state.record_stage_failure(stage_name, e)
                self.logger.error(f"Stage {stage_name} failed: {e}")

                checkpoint_path = self.checkpoint_path(state)
                state.save(checkpoint_path)
                self.logger.info(f"Checkpoint saved to {checkpoint_path}")
                break

        return state

    def list_stages(self) -> List[str]:
        return list(self.stages.keys())
