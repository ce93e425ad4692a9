"""Pipeline orchestrator: loads config.yaml and executes the stages in order."""

from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import NamedTuple, Optional

import yaml
from pydantic import ValidationError

from .contracts import PipelineSummary, ReconstructionConfig
from .errors import ConfigurationError

logger = logging.getLogger(__name__)


class StageEntry(NamedTuple):
    name: str
    module: str
    description: str


STAGES: list[StageEntry] = [
    StageEntry("segmentation", "roomshell.steps.s00_segmentation", "Downsample, region growing, RANSAC per region"),
    StageEntry("candidate_filter", "roomshell.steps.s01_candidate_filter", "Room bounds, height and isolation filters"),
    StageEntry("group_clustering", "roomshell.steps.s02_group_clustering", "Flood fill into coplanar groups"),
    StageEntry("group_merge", "roomshell.steps.s03_group_merge", "One refitted representative per group"),
    StageEntry("plane_extension", "roomshell.steps.s04_plane_extension", "Extend members onto representatives"),
    StageEntry("boundary_fill", "roomshell.steps.s05_boundary_fill", "Ceiling and floor outlines"),
]


def load_config(config_path: Optional[Path] = None) -> ReconstructionConfig:
    """Load and validate config.yaml. No path means all defaults."""
    if config_path is None:
        return ReconstructionConfig()
    try:
        with open(config_path, encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigurationError(f"Cannot read config {config_path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Malformed YAML in {config_path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Config {config_path} must be a mapping, got {type(raw).__name__}")
    try:
        return ReconstructionConfig(**raw)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid config {config_path}:\n{e}") from e


def import_step_class(module_path: str):
    """Dynamically import a step class from its module path.

    Expects module_path like 'roomshell.steps.s02_group_clustering'
    and looks for a class ending in 'Step' in that module's step.py.
    """
    step_module = importlib.import_module(f"{module_path}.step")
    for attr_name in dir(step_module):
        attr = getattr(step_module, attr_name)
        if (
            isinstance(attr, type)
            and hasattr(attr, "run")
            and attr_name.endswith("Step")
            and attr_name != "BaseStep"
        ):
            return attr
    raise ImportError(f"No Step class found in {module_path}.step")


def run_pipeline(
    input_path: Path,
    config: ReconstructionConfig,
    output_path: Optional[Path] = None,
    view: Optional[bool] = None,
) -> PipelineSummary:
    """Execute the full pipeline on one scan and write the combined cloud.

    `output_path` and `view` override the config's Output section.
    """
    from roomshell.utils.io import write_point_cloud
    from roomshell.utils.visualization import simple_view

    output_path = Path(output_path or config.output.path)
    show = config.output.view if view is None else view
    snapshots = config.output.snapshot_dir

    def checkpoint(label: str, data) -> None:
        simple_view(label, data, enabled=show or snapshots is not None, save_dir=snapshots)

    steps = {entry.name: import_step_class(entry.module)(config) for entry in STAGES}
    stage_seconds: dict[str, float] = {}

    def execute(name: str, inputs):
        step = steps[name]
        logger.info(f"--- Step: {name} ---")
        result = step.execute(step.input_type(**inputs))
        stage_seconds[name] = step.last_elapsed
        return result

    seg = execute("segmentation", {"cloud_path": Path(input_path)})
    checkpoint("Segmented planes", seg.planes)

    filt = execute("candidate_filter", {"planes": seg.planes})
    checkpoint("Filled candidate walls", filt.walls)

    clus = execute("group_clustering", {"walls": filt.walls})
    checkpoint("Group planes", clus.walls)

    merged = execute("group_merge", {
        "walls": clus.walls,
        "groups": clus.groups,
        "colors": clus.colors,
        "room_bounds": filt.room_bounds,
    })
    checkpoint("Filled group planes", merged.representatives)

    ext = execute("plane_extension", {
        "representatives": merged.representatives,
        "members": merged.members,
        "groups": merged.groups,
        "room_bounds": filt.room_bounds,
    })
    checkpoint("Extended planes", [*ext.representatives, *ext.extended])

    boundary = execute("boundary_fill", {
        "representatives": ext.representatives,
        "extended": ext.extended,
    })
    checkpoint("Cloud filled", boundary.cloud)

    write_point_cloud(boundary.cloud, output_path)
    logger.info("Pipeline complete.")

    return PipelineSummary(
        output_path=output_path,
        num_candidates=len(seg.planes),
        num_walls=len(filt.walls),
        num_groups=len(clus.groups),
        num_merged_groups=clus.num_nontrivial,
        num_boundary_points=boundary.num_boundary_points,
        num_output_points=len(boundary.cloud),
        stage_seconds=stage_seconds,
    )
