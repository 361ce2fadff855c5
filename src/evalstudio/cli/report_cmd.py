"""evalstudio report / compare -- display stored runs and diff them.

Shows the latest run's detailed results by default, supports a
--history trend view across recent runs, and compares a run against
a baseline. Reads evaluation runs from RunStore.
"""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from evalstudio.cli.output import (
    output_json,
    render_case_table,
    render_comparison,
    render_evaluator_scores,
    render_history,
    render_run_headline,
)
from evalstudio.cli.project import open_project
from evalstudio.errors import RunNotFoundError
from evalstudio.evaluation.aggregation import compare_runs
from evalstudio.evaluation.formatting import format_results
from evalstudio.models.run import EvaluationStatus


def report(
    run_id: Optional[str] = typer.Argument(None, help="Run ID to display (default: latest)"),
    history: bool = typer.Option(False, "--history", help="Show trend view of recent runs"),
    limit: int = typer.Option(10, "--limit", "-l", min=1, help="Number of runs to show in history"),
    failures_only: bool = typer.Option(False, "--failures", help="Show only failed test cases"),
    format_json: bool = typer.Option(False, "--json", help="Output the run as JSON to stdout"),
) -> None:
    """Display stored run results and history trends."""
    console = Console()
    store = open_project().runs

    if history:
        runs = store.load_runs()
        if failures_only:
            runs = [
                r
                for r in runs
                if r.status == EvaluationStatus.failed or r.summary.failed > 0
            ]
        if not runs:
            console.print("[dim]No runs found. Run 'evalstudio run' first.[/dim]")
            raise typer.Exit(code=0)
        render_history(runs[:limit], console)
        return

    if run_id is not None:
        try:
            evaluation_run = store.require_run(run_id)
        except RunNotFoundError as exc:
            console.print(escape(str(exc)))
            available = [r.id for r in store.load_runs()[:10]]
            if available:
                console.print(f"Available runs: {escape(', '.join(available))}")
            raise typer.Exit(code=1)
    else:
        evaluation_run = store.latest_run()
        if evaluation_run is None:
            console.print("[dim]No runs found. Run 'evalstudio run' first.[/dim]")
            raise typer.Exit(code=0)

    if format_json:
        output_json(evaluation_run)
        return

    render_run_headline(evaluation_run, console)
    render_evaluator_scores(evaluation_run, console)
    render_case_table(evaluation_run.results, console, failures_only=failures_only)

    failing = [r for r in evaluation_run.results if not r.passed]
    if failing:
        console.print()
        console.print(
            format_results(failing, evaluation_run.config.evaluators),
            markup=False,
            highlight=False,
        )


def compare(
    run_id: str = typer.Argument(..., help="Run to inspect"),
    baseline_id: str = typer.Argument(..., help="Baseline run to compare against"),
    format_json: bool = typer.Option(False, "--json", help="Output the comparison as JSON to stdout"),
) -> None:
    """Compare a run against a baseline and list regressions and improvements.

    Exits 1 when any test case regressed.
    """
    console = Console()
    store = open_project().runs

    try:
        current = store.require_run(run_id)
        baseline = store.require_run(baseline_id)
    except RunNotFoundError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(code=1)

    comparison = compare_runs(current, baseline)
    if format_json:
        output_json(comparison)
    else:
        render_comparison(comparison, console)

    if comparison.regressions:
        raise typer.Exit(code=1)
