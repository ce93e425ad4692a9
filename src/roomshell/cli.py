"""CLI entry point for the roomshell pipeline.

Usage:
    roomshell run scan.ply                 # Run full pipeline
    roomshell run scan.ply --view          # Stop at each checkpoint view
    roomshell show-config                  # Show resolved parameters
    roomshell info                         # Show pipeline stages
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from roomshell.core.errors import RoomShellError
from roomshell.core.logging import setup_logging

app = typer.Typer(name="roomshell", help="Close segmented room scans into wall/ceiling/floor surfaces")
console = Console()

DEFAULT_CONFIG = Path("configs/config.yaml")


def _resolve_config(config: Path):
    from roomshell.core.pipeline_runner import load_config

    if config == DEFAULT_CONFIG and not config.exists():
        console.print(f"[yellow]{config} not found, using defaults[/yellow]")
        return load_config(None)
    return load_config(config)


@app.command()
def run(
    input_cloud: Path = typer.Argument(..., help="Room scan (PLY/PCD)"),
    config: Path = typer.Option(DEFAULT_CONFIG, help="Config path"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Override output path"),
    view: bool = typer.Option(False, "--view", help="Show blocking checkpoint views"),
    log_level: str = typer.Option("INFO", help="Logging level"),
) -> None:
    """Run the full pipeline."""
    try:
        setup_logging(log_level)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    from roomshell.core.pipeline_runner import run_pipeline

    try:
        cfg = _resolve_config(config)
        summary = run_pipeline(input_cloud, cfg, output_path=output, view=view or None)
    except (RoomShellError, FileNotFoundError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    table = Table(title="Run summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Candidate planes", str(summary.num_candidates))
    table.add_row("Walls after filtering", str(summary.num_walls))
    table.add_row("Groups", f"{summary.num_groups} ({summary.num_merged_groups} merged)")
    table.add_row("Boundary points", str(summary.num_boundary_points))
    table.add_row("Output points", str(summary.num_output_points))
    for name, seconds in summary.stage_seconds.items():
        table.add_row(f"{name} time", f"{seconds:.1f}s")
    console.print(table)
    console.print(f"[green]Saved:[/green] {summary.output_path}")


@app.command()
def show_config(config: Path = typer.Option(DEFAULT_CONFIG, help="Config path")) -> None:
    """Show the resolved configuration."""
    try:
        cfg = _resolve_config(config)
    except RoomShellError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    table = Table(title=f"Config: {config}")
    table.add_column("Section", style="dim")
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="green")

    dumped = cfg.model_dump(by_alias=True)
    for key, value in dumped.items():
        if isinstance(value, dict):
            for sub_key, sub_value in value.items():
                table.add_row(key, sub_key, str(sub_value))
        else:
            table.add_row("-", key, str(value))
    console.print(table)


@app.command()
def info() -> None:
    """Show pipeline stages."""
    from roomshell.core.pipeline_runner import STAGES

    table = Table(title="Pipeline: roomshell")
    table.add_column("#", style="dim")
    table.add_column("Stage", style="cyan")
    table.add_column("Module", style="green")
    table.add_column("Description", style="dim")

    for i, stage in enumerate(STAGES):
        table.add_row(f"s{i:02d}", stage.name, stage.module, stage.description)
    console.print(table)


if __name__ == "__main__":
    app()
