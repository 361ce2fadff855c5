"""evalstudio run -- evaluate recorded outputs against a dataset.

Loads the dataset and evaluator suite, replays recorded outputs through
RunExecutor, renders the summary, persists the run, and exits 0 only
when every test case passed.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from evalstudio.cli.output import (
    create_progress,
    output_json,
    render_case_table,
    render_evaluator_scores,
    render_run_headline,
)
from evalstudio.cli.project import open_project
from evalstudio.errors import EvalStudioError
from evalstudio.evaluation.formatting import format_results
from evalstudio.evaluation.suite import default_suite, load_suite
from evalstudio.execution.executor import RunExecutor
from evalstudio.execution.producer import RecordedOutputs
from evalstudio.judge import build_judge_backend
from evalstudio.models.evaluator import EvaluatorType

console = Console(stderr=True)

# Evaluators used when neither --evaluators nor --evaluator is given.
DEFAULT_SUITE = [EvaluatorType.json_similarity.value, EvaluatorType.trajectory_match.value]


def run(
    dataset_id: str = typer.Argument(..., help="Dataset ID to evaluate"),
    outputs: Path = typer.Option(..., "--outputs", "-o", exists=True, dir_okay=False, help="Recorded outputs (JSON or JSONL)"),
    evaluators_file: Optional[Path] = typer.Option(None, "--evaluators", help="Evaluator suite YAML file"),
    evaluator_types: Optional[list[str]] = typer.Option(None, "--evaluator", "-e", help="Evaluator type (repeatable)"),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Run name"),
    parallel: Optional[int] = typer.Option(None, "--parallel", min=1, help="Max data points evaluated concurrently"),
    format_json: bool = typer.Option(False, "--json", help="Output the run as JSON to stdout"),
    verbose: bool = typer.Option(False, "-V", "--verbose", help="Show per-evaluator detail even on pass"),
) -> None:
    """Evaluate recorded outputs for a dataset and display results."""
    project = open_project()

    try:
        dataset = project.datasets.require(dataset_id)
        if evaluators_file is not None:
            evaluators = load_suite(evaluators_file)
        else:
            evaluators = default_suite(evaluator_types or DEFAULT_SUITE)
    except (EvalStudioError, ValueError) as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(code=1)

    try:
        producer = RecordedOutputs.load(outputs, dataset)
    except (OSError, ValueError) as exc:
        console.print(f"[red]Cannot load recorded outputs from {escape(str(outputs))}: {escape(str(exc))}[/red]")
        raise typer.Exit(code=1)

    judge_config = project.config.judge
    executor = RunExecutor(
        producer,
        run_store=project.runs,
        max_parallel=parallel or project.config.max_parallel,
        judge_backend=build_judge_backend(judge_config),
        judge_timeout=judge_config.timeout_seconds,
    )

    progress = create_progress(console) if not format_json else None

    async def _execute():
        if progress is None:
            return await executor.execute(dataset, evaluators, name=name)
        with progress:
            task = progress.add_task("Evaluating", total=len(dataset.data_points))
            return await executor.execute(
                dataset,
                evaluators,
                name=name,
                progress_callback=lambda done, total: progress.update(task, completed=done),
            )

    try:
        evaluation_run = asyncio.run(_execute())
    except EvalStudioError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(code=1)

    if format_json:
        output_json(evaluation_run)
    else:
        render_run_headline(evaluation_run, console)
        render_evaluator_scores(evaluation_run, console)
        render_case_table(evaluation_run.results, console, failures_only=not verbose)
        details = format_results(
            [r for r in evaluation_run.results if verbose or not r.passed],
            evaluators,
            verbose=verbose,
        )
        if details:
            console.print()
            console.print(details, markup=False, highlight=False)
        console.print(f"\n[dim]Run saved as {escape(evaluation_run.id)}[/dim]")

    all_passed = all(r.passed for r in evaluation_run.results)
    raise typer.Exit(code=0 if all_passed else 1)
