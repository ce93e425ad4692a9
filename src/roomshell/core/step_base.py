"""Base class for all pipeline stages.

Every stage declares typed Input and Output Pydantic models and receives the
one frozen `ReconstructionConfig` of the run. Plane collections travel inside
the input/output models by reference; a stage owns its input collection for
the duration of `run()` and nothing else touches it meanwhile.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import ClassVar, Generic, TypeVar

from pydantic import BaseModel

from .contracts import ReconstructionConfig

InputT = TypeVar("InputT", bound=BaseModel)
OutputT = TypeVar("OutputT", bound=BaseModel)

logger = logging.getLogger(__name__)


class BaseStep(ABC, Generic[InputT, OutputT]):
    """Abstract base for pipeline stages.

    Subclasses must:
    1. Define concrete Pydantic models for InputT and OutputT
    2. Set class variables: name, input_type, output_type
    3. Implement run() and validate_inputs()

    Example:
        class GroupClusteringStep(BaseStep[ClusteringInput, ClusteringOutput]):
            name = "group_clustering"
            input_type = ClusteringInput
            output_type = ClusteringOutput

            def run(self, inputs: ClusteringInput) -> ClusteringOutput: ...
            def validate_inputs(self, inputs: ClusteringInput) -> bool: ...
    """

    name: ClassVar[str] = ""
    input_type: ClassVar[type[BaseModel]]
    output_type: ClassVar[type[BaseModel]]

    def __init__(self, config: ReconstructionConfig):
        self.config = config
        self.last_elapsed: float = 0.0

    @abstractmethod
    def run(self, inputs: InputT) -> OutputT:
        """Execute this stage. Returns output model."""
        ...

    @abstractmethod
    def validate_inputs(self, inputs: InputT) -> bool:
        """Check that the stage's inputs are usable."""
        ...

    def execute(self, inputs: InputT) -> OutputT:
        """Run with logging, timing, and validation."""
        step_name = self.name or self.__class__.__name__
        logger.info(f"[{step_name}] Validating inputs...")

        if not self.validate_inputs(inputs):
            raise ValueError(f"[{step_name}] Input validation failed")

        logger.info(f"[{step_name}] Starting...")
        t0 = time.time()
        result = self.run(inputs)
        self.last_elapsed = time.time() - t0
        logger.info(f"[{step_name}] Done in {self.last_elapsed:.1f}s")
        return result
