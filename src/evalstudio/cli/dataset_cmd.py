"""evalstudio dataset -- create, inspect, import, export and generate datasets."""

from __future__ import annotations

import json
from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.markup import escape

from evalstudio.cli.output import render_dataset_detail, render_dataset_table
from evalstudio.cli.project import open_project
from evalstudio.datasets.codec import export_to_csv, export_to_json, import_file
from evalstudio.datasets.generator import GenerationConfig, generate_test_cases
from evalstudio.datasets.validation import validate_dataset
from evalstudio.errors import EvalStudioError
from evalstudio.models.dataset import DatasetSource

console = Console()
err_console = Console(stderr=True)

dataset_app = typer.Typer(help="Manage test datasets.", no_args_is_help=True)


def _fail(message: str) -> NoReturn:
    err_console.print(f"[red]{escape(message)}[/red]")
    raise typer.Exit(code=1)


@dataset_app.command("create")
def create(
    name: str = typer.Argument(..., help="Dataset name"),
    description: Optional[str] = typer.Option(None, "--description", "-d", help="Dataset description"),
) -> None:
    """Create an empty dataset."""
    project = open_project()
    dataset = project.datasets.save(project.datasets.create(name, description))
    console.print(
        f"[green]Created dataset[/green] {escape(dataset.name)} ({escape(dataset.id)})"
    )


@dataset_app.command("list")
def list_datasets() -> None:
    """List stored datasets."""
    datasets = open_project().datasets.load()
    if not datasets:
        console.print("[dim]No datasets found. Create or import one first.[/dim]")
        return
    render_dataset_table(datasets, console)


@dataset_app.command("show")
def show(dataset_id: str = typer.Argument(..., help="Dataset ID")) -> None:
    """Show a dataset and its data points."""
    try:
        dataset = open_project().datasets.require(dataset_id)
    except EvalStudioError as exc:
        _fail(str(exc))
    render_dataset_detail(dataset, console)


@dataset_app.command("delete")
def delete(dataset_id: str = typer.Argument(..., help="Dataset ID")) -> None:
    """Delete a dataset."""
    if not open_project().datasets.delete(dataset_id):
        _fail(f"Dataset '{dataset_id}' not found")
    console.print(f"Deleted dataset {escape(dataset_id)}")


@dataset_app.command("validate")
def validate(dataset_id: str = typer.Argument(..., help="Dataset ID")) -> None:
    """Check a dataset for errors and warnings."""
    try:
        dataset = open_project().datasets.require(dataset_id)
    except EvalStudioError as exc:
        _fail(str(exc))

    result = validate_dataset(dataset)
    for error in result.errors:
        console.print(f"  [red]ERROR[/red]    {escape(error)}")
    for warning in result.warnings:
        console.print(f"  [yellow]WARNING[/yellow]  {escape(warning)}")

    if not result.is_valid:
        console.print(f"\n[red]✗ {escape(dataset.name)} is invalid[/red]")
        raise typer.Exit(code=1)
    console.print(f"\n[green]✓ {escape(dataset.name)} is valid[/green]")


@dataset_app.command("import")
def import_(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="CSV, JSON or JSONL file"),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Dataset name (default: file name)"),
) -> None:
    """Import data points from a file into a new dataset."""
    project = open_project()
    result = import_file(file, id_generator=project.datasets.id_generator)

    for error in result.errors:
        err_console.print(f"  [red]ERROR[/red]    {escape(error)}")
    for warning in result.warnings:
        err_console.print(f"  [yellow]WARNING[/yellow]  {escape(warning)}")

    if not result.success:
        _fail(f"Nothing imported from {file}")

    dataset = project.datasets.create(name or file.stem, source=DatasetSource.import_)
    dataset.data_points = result.data_points
    dataset = project.datasets.save(dataset)
    console.print(
        f"[green]Imported {len(result.data_points)} data point(s)[/green] "
        f"into {escape(dataset.name)} ({escape(dataset.id)})"
    )


@dataset_app.command("export")
def export(
    dataset_id: str = typer.Argument(..., help="Dataset ID"),
    fmt: str = typer.Option("json", "--format", "-f", help="csv or json"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write to file instead of stdout"),
) -> None:
    """Export a dataset in the canonical CSV or JSON format."""
    exporters = {"csv": export_to_csv, "json": export_to_json}
    exporter = exporters.get(fmt.lower())
    if exporter is None:
        _fail(f"Unknown format {fmt!r}. Available: {sorted(exporters)}")

    try:
        dataset = open_project().datasets.require(dataset_id)
    except EvalStudioError as exc:
        _fail(str(exc))

    text = exporter(dataset)
    if output is None:
        typer.echo(text)
    else:
        output.write_text(text + "\n", encoding="utf-8")
        err_console.print(
            f"Wrote {len(dataset.data_points)} data point(s) to {escape(str(output))}"
        )


@dataset_app.command("generate")
def generate(
    name: str = typer.Argument(..., help="Name of the generated dataset"),
    count: int = typer.Option(10, "--count", "-c", min=0, help="Requested number of cases"),
    sample_input: Optional[str] = typer.Option(None, "--sample-input", help="Sample input as a JSON object"),
    node_types: Optional[list[str]] = typer.Option(None, "--node-type", "-t", help="Node types present in the flow"),
    edge_cases: bool = typer.Option(True, "--edge-cases/--no-edge-cases", help="Include edge cases"),
    negative_cases: bool = typer.Option(True, "--negative-cases/--no-negative-cases", help="Include negative cases"),
) -> None:
    """Generate synthetic standard, edge and negative test cases."""
    sample = None
    if sample_input:
        try:
            sample = json.loads(sample_input)
        except json.JSONDecodeError as exc:
            _fail(f"--sample-input is not valid JSON: {exc}")
        if not isinstance(sample, dict):
            _fail("--sample-input must be a JSON object")

    project = open_project()
    data_points = generate_test_cases(
        GenerationConfig(
            sample_input=sample,
            node_types=node_types or [],
            count=count,
            include_edge_cases=edge_cases,
            include_negative_cases=negative_cases,
        ),
        id_generator=project.datasets.id_generator,
    )

    dataset = project.datasets.create(name, source=DatasetSource.generated)
    dataset.data_points = data_points
    dataset = project.datasets.save(dataset)
    console.print(
        f"[green]Generated {len(data_points)} data point(s)[/green] "
        f"into {escape(dataset.name)} ({escape(dataset.id)})"
    )
