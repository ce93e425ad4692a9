"""roomshell core: pipeline runner, base step, shared contracts."""

from .step_base import BaseStep
from .contracts import ReconstructionConfig, RoomBounds, PipelineSummary
from .errors import (
    RoomShellError,
    DegenerateGeometryError,
    InsufficientDataError,
    CollaboratorError,
    ConfigurationError,
)
from .pipeline_runner import run_pipeline, load_config
from .logging import setup_logging

__all__ = [
    "BaseStep",
    "ReconstructionConfig",
    "RoomBounds",
    "PipelineSummary",
    "RoomShellError",
    "DegenerateGeometryError",
    "InsufficientDataError",
    "CollaboratorError",
    "ConfigurationError",
    "run_pipeline",
    "load_config",
    "setup_logging",
]
