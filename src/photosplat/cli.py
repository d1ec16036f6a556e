"""CLI entry point for photosplat.

Usage:
    photosplat generate photo.jpg             # Photo -> data/splats/photo.ply
    photosplat generate photo.jpg --backend mock
    photosplat info                           # Show the model's declared tensors
    photosplat steps                          # Show each step's config fields and values
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from photosplat.core.logging import setup_logging

app = typer.Typer(name="photosplat", help="Single photo to 3D Gaussian splat PLY")
console = Console()

DEFAULT_CONFIG = Path("configs/pipeline.yaml")


def _load_config(
    config: Path,
    backend: Optional[str] = None,
    model: Optional[Path] = None,
    data_root: Optional[Path] = None,
):
    """pipeline.yaml (or defaults if it does not exist) with CLI overrides applied."""
    from photosplat.core.contracts import PipelineConfig
    from photosplat.core.pipeline_runner import load_pipeline_config

    pipeline_cfg = load_pipeline_config(config) if config.exists() else PipelineConfig()
    if backend is not None:
        pipeline_cfg.model.backend = backend
    if model is not None:
        pipeline_cfg.model.path = model
    if data_root is not None:
        pipeline_cfg.data_root = data_root
    return pipeline_cfg


@app.command()
def generate(
    image: Path = typer.Argument(..., help="Source photograph"),
    config: Path = typer.Option(DEFAULT_CONFIG, help="Pipeline config path"),
    backend: Optional[str] = typer.Option(None, help="Override model backend: onnxruntime|mock"),
    model: Optional[Path] = typer.Option(None, help="Override model path"),
    data_root: Optional[Path] = typer.Option(None, help="Override data root (PLY goes to <root>/splats)"),
    log_level: str = typer.Option("INFO", help="Logging level"),
    log_file: Optional[Path] = typer.Option(None, help="Also write logs to this file"),
) -> None:
    """Generate a Gaussian splat PLY from a single photograph."""
    setup_logging(log_level, log_file)
    from photosplat.core.errors import GeneratorError
    from photosplat.core.generator import SplatGenerator

    pipeline_cfg = _load_config(config, backend, model, data_root)

    with SplatGenerator(pipeline_cfg) as generator:
        generator.add_listener(lambda s: console.print(f"[dim]state: {s.state.value}[/dim]"))
        future = generator.submit(image)
        try:
            ply_path = future.result()
        except GeneratorError as e:
            console.print(f"[red]{e}[/red]")
            raise typer.Exit(1)

    console.print(f"[green]Done.[/green] Wrote {ply_path}")


@app.command()
def info(
    config: Path = typer.Option(DEFAULT_CONFIG, help="Pipeline config path"),
    backend: Optional[str] = typer.Option(None, help="Override model backend: onnxruntime|mock"),
    model: Optional[Path] = typer.Option(None, help="Override model path"),
) -> None:
    """Show the model's declared inputs/outputs."""
    from photosplat.core.errors import GeneratorError
    from photosplat.core.model import load_model

    pipeline_cfg = _load_config(config, backend, model)
    try:
        handle = load_model(pipeline_cfg.model)
        width, height = handle.io_spec.target_size()
    except GeneratorError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    table = Table(title=f"Model: {pipeline_cfg.model.backend} ({width}x{height} input)")
    table.add_column("Direction", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Shape", style="green")
    table.add_column("Type", style="yellow")

    for direction, specs in (("in", handle.io_spec.inputs), ("out", handle.io_spec.outputs)):
        for spec in specs.values():
            shape = "scalar" if spec.kind == "scalar" else str(spec.shape)
            table.add_row(direction, spec.name, shape, spec.element_type)
    console.print(table)


@app.command()
def steps(
    config: Path = typer.Option(DEFAULT_CONFIG, help="Pipeline config path"),
) -> None:
    """Show each step's config fields, defaults and effective values."""
    from photosplat.core.pipeline_runner import resolve_step_config
    from photosplat.steps.s01_preprocess.step import PreprocessStep
    from photosplat.steps.s02_inference.step import InferenceStep
    from photosplat.steps.s03_unproject.step import UnprojectStep
    from photosplat.steps.s04_export_ply.step import ExportPlyStep

    pipeline_cfg = _load_config(config)

    table = Table(title="Pipeline steps")
    table.add_column("Step", style="cyan")
    table.add_column("Field", style="green")
    table.add_column("Value", style="yellow")
    table.add_column("Default", style="dim")
    table.add_column("Description")

    for step_cls in (PreprocessStep, InferenceStep, UnprojectStep, ExportPlyStep):
        effective = resolve_step_config(pipeline_cfg, step_cls.name, step_cls.config_type)
        schema = step_cls.get_config_schema()
        for field, prop in schema.get("properties", {}).items():
            table.add_row(
                step_cls.name,
                field,
                str(getattr(effective, field)),
                str(prop.get("default", "")),
                prop.get("description", ""),
            )
    console.print(table)


if __name__ == "__main__":
    app()
