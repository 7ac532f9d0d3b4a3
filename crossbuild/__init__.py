"""Crossbuild package entry point."""

from .environment import EnvironmentOverlay
from .exceptions import (
    ConfigurationError,
    CrossbuildError,
    StageFailedError,
)
from .orchestrator import Orchestrator
from .pipeline import StagePipeline
from .types import (
    PipelineResult,
    RunContext,
    Stage,
    StageResult,
    ToolchainChannel,
)

__all__ = [
    "ConfigurationError",
    "CrossbuildError",
    "EnvironmentOverlay",
    "Orchestrator",
    "PipelineResult",
    "RunContext",
    "Stage",
    "StageFailedError",
    "StagePipeline",
    "StageResult",
    "ToolchainChannel",
]
