"""Rich terminal output layer for datasets, runs and comparisons.

Rendering only; commands decide what to show. JSON output goes to
stdout without markup so it can be piped.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

if TYPE_CHECKING:
    from pydantic import BaseModel

    from evalstudio.models.dataset import Dataset
    from evalstudio.models.result import RunComparison, TestCaseResult
    from evalstudio.models.run import EvaluationRun


# Status value -> (symbol, Rich style)
_STATUS_STYLES: dict[str, tuple[str, str]] = {
    "completed": ("✓ completed", "bold green"),
    "failed": ("✗ failed", "bold red"),
    "running": ("~ running", "bold yellow"),
    "pending": ("… pending", "dim"),
}


def _status_display(run: EvaluationRun) -> str:
    symbol, style = _STATUS_STYLES.get(run.status.value, (run.status.value, "bold"))
    return f"[{style}]{symbol}[/{style}]"


def _case_display(result: TestCaseResult) -> str:
    if result.error:
        return "[bold bright_red]! ERROR[/bold bright_red]"
    if result.passed:
        return "[green]✓ PASS[/green]"
    return "[red]✗ FAIL[/red]"


def _score_style(score: float) -> str:
    if score >= 0.7:
        return "green"
    if score >= 0.4:
        return "yellow"
    return "red"


def create_progress(console: Console) -> Progress | None:
    """Progress bar for data point evaluation, or None when not on a terminal."""
    if not console.is_terminal:
        return None

    return Progress(
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )


def render_dataset_table(datasets: list[Dataset], console: Console) -> None:
    table = Table(box=box.ROUNDED, title="Datasets")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Source")
    table.add_column("Data points", justify="right")
    table.add_column("Updated")

    for dataset in datasets:
        table.add_row(
            escape(dataset.id),
            escape(dataset.name),
            dataset.source.value,
            str(len(dataset.data_points)),
            dataset.updated_at[:19],
        )
    console.print(table)


def render_dataset_detail(dataset: Dataset, console: Console) -> None:
    console.print()
    console.print(f"[bold]Dataset:[/bold] {escape(dataset.name)} ({escape(dataset.id)})")
    if dataset.description:
        console.print(f"[bold]Description:[/bold] {escape(dataset.description)}")
    console.print(
        f"[bold]Source:[/bold] {dataset.source.value}  "
        f"[bold]Created:[/bold] {dataset.created_at[:19]}  "
        f"[bold]Updated:[/bold] {dataset.updated_at[:19]}"
    )
    console.print()

    table = Table(box=box.ROUNDED)
    table.add_column("#", justify="right")
    table.add_column("ID")
    table.add_column("Input")
    table.add_column("Expected output")
    table.add_column("Trajectory")

    for i, dp in enumerate(dataset.data_points, 1):
        table.add_row(
            str(i),
            escape(dp.id),
            escape(_truncate(str(dp.input))),
            escape(_truncate(str(dp.expected_output))) if dp.expected_output is not None else "-",
            escape(" > ".join(dp.expected_trajectory)) if dp.expected_trajectory else "-",
        )
    console.print(table)


def _truncate(text: str, limit: int = 60) -> str:
    return text if len(text) <= limit else text[: limit - 3] + "..."


def render_run_headline(run: EvaluationRun, console: Console) -> None:
    """Compact key-value summary of a run."""
    summary = run.summary
    table = Table(box=box.SIMPLE, show_header=False, padding=(0, 2))
    table.add_column("Key", style="bold")
    table.add_column("Value")

    table.add_row("Run", f"{escape(run.name)} ({escape(run.id)})")
    table.add_row("Dataset", escape(run.config.dataset_id))
    table.add_row("Status", _status_display(run))
    table.add_row(
        "Tests",
        f"{summary.passed}/{summary.total_tests} passed ({summary.pass_rate:.0%})",
    )
    style = _score_style(summary.average_score)
    table.add_row("Score", f"[{style}]avg={summary.average_score:.2f}[/{style}]")
    table.add_row("Latency", f"avg={summary.average_latency_ms:.1f}ms")
    if summary.trajectory_accuracy is not None:
        table.add_row("Trajectory", f"{summary.trajectory_accuracy:.0%} accurate")

    errors = sum(1 for r in run.results if r.error)
    if errors:
        table.add_row("Errors", f"{errors} data point(s) produced no output")

    console.print()
    console.print(table)


def render_evaluator_scores(run: EvaluationRun, console: Console) -> None:
    if not run.summary.score_by_evaluator:
        return
    table = Table(box=box.ROUNDED, title="Score by evaluator")
    table.add_column("Evaluator")
    table.add_column("Avg weighted score", justify="right")
    for evaluator_type, score in sorted(run.summary.score_by_evaluator.items()):
        style = _score_style(score)
        table.add_row(evaluator_type, f"[{style}]{score:.2f}[/{style}]")
    console.print(table)


def render_case_table(
    results: list[TestCaseResult], console: Console, *, failures_only: bool = False
) -> None:
    if failures_only:
        results = [r for r in results if not r.passed]
    if not results:
        console.print("[dim]No matching test cases.[/dim]")
        return

    table = Table(box=box.ROUNDED, title="Test cases")
    table.add_column("Data point")
    table.add_column("Result")
    table.add_column("Score", justify="right")
    table.add_column("Time", justify="right")
    table.add_column("Failed evaluators")

    for result in results:
        failed = ", ".join(
            er.evaluator_type.value for er in result.evaluator_results if not er.passed
        )
        table.add_row(
            escape(result.data_point_id),
            _case_display(result),
            f"{result.aggregate_score:.2f}",
            f"{result.execution_time_ms:.1f}ms",
            escape(result.error or failed or "-"),
        )
    console.print(table)


def render_history(runs: list[EvaluationRun], console: Console) -> None:
    """Trend table of stored runs, most recent first."""
    if not runs:
        console.print("[dim]No matching runs found.[/dim]")
        return

    table = Table(box=box.ROUNDED, title="Run History")
    table.add_column("Run ID")
    table.add_column("Name")
    table.add_column("Status")
    table.add_column("Score", justify="right")
    table.add_column("Passed", justify="right")
    table.add_column("Started")

    for run in runs:
        table.add_row(
            escape(run.id),
            escape(run.name),
            _status_display(run),
            f"{run.summary.average_score:.2f}",
            f"{run.summary.passed}/{run.summary.total_tests}",
            run.started_at[:19],
        )
    console.print()
    console.print(table)

    if len(runs) >= 2:
        newest, oldest = runs[0].summary.pass_rate, runs[-1].summary.pass_rate
        console.print(
            f"\n{len(runs)} runs shown. Pass rate trend: {oldest:.0%} -> {newest:.0%}"
        )
    else:
        console.print(f"\n{len(runs)} run(s) shown.")


def render_comparison(comparison: RunComparison, console: Console) -> None:
    table = Table(box=box.SIMPLE, show_header=False, padding=(0, 2))
    table.add_column("Key", style="bold")
    table.add_column("Value")
    table.add_row("Current", escape(comparison.current_run_id))
    table.add_row("Baseline", escape(comparison.baseline_run_id))
    table.add_row("Score delta", _signed(comparison.score_delta))
    table.add_row("Pass rate delta", _signed(comparison.pass_rate_delta * 100, "pp"))
    table.add_row("Latency delta", _signed(comparison.latency_delta, "ms", invert=True))
    console.print()
    console.print(table)

    if comparison.regressions:
        reg_table = Table(box=box.ROUNDED, title="Regressions")
        reg_table.add_column("Data point")
        reg_table.add_column("Before", justify="right")
        reg_table.add_column("After", justify="right")
        reg_table.add_column("Delta", justify="right")
        reg_table.add_column("Evaluators")
        for reg in comparison.regressions:
            reg_table.add_row(
                escape(reg.data_point_id),
                f"{reg.previous_score:.2f}",
                f"{reg.current_score:.2f}",
                f"[red]{reg.delta:+.2f}[/red]",
                ", ".join(reg.affected_evaluators) or "-",
            )
        console.print(reg_table)

    if comparison.improvements:
        imp_table = Table(box=box.ROUNDED, title="Improvements")
        imp_table.add_column("Data point")
        imp_table.add_column("Before", justify="right")
        imp_table.add_column("After", justify="right")
        imp_table.add_column("Delta", justify="right")
        imp_table.add_column("Evaluators")
        for imp in comparison.improvements:
            imp_table.add_row(
                escape(imp.data_point_id),
                f"{imp.previous_score:.2f}",
                f"{imp.current_score:.2f}",
                f"[green]{imp.delta:+.2f}[/green]",
                ", ".join(imp.improved_evaluators) or "-",
            )
        console.print(imp_table)

    if not comparison.regressions and not comparison.improvements:
        console.print("[dim]No per-case score changes.[/dim]")


def _signed(value: float, unit: str = "", *, invert: bool = False) -> str:
    if value == 0:
        return f"0{unit}"
    good = value < 0 if invert else value > 0
    style = "green" if good else "red"
    return f"[{style}]{value:+.2f}{unit}[/{style}]"


def output_json(model: BaseModel) -> None:
    """Write a model as pure JSON to stdout, no Rich markup."""
    sys.stdout.write(model.model_dump_json(indent=2))
    sys.stdout.write("\n")
