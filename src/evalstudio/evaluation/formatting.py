"""Per-case result formatting with severity ordering and score breakdowns.

Minimal on pass, detailed on fail, full detail on demand.
"""

from __future__ import annotations

import json
from typing import Any

from evalstudio.evaluation.runner import PASS_THRESHOLD
from evalstudio.models.evaluator import EvaluatorConfig, EvaluatorResult
from evalstudio.models.result import TestCaseResult

# Characters of a rendered detail value shown per line.
DETAIL_LIMIT = 160


def _short(value: Any) -> str:
    text = value if isinstance(value, str) else json.dumps(value, ensure_ascii=False, default=str)
    if len(text) > DETAIL_LIMIT:
        return text[: DETAIL_LIMIT - 3] + "..."
    return text


def _append_details(lines: list[str], result: EvaluatorResult) -> None:
    """Reasoning if present, otherwise the diff or expected/actual pair."""
    details = result.details
    if details.reasoning:
        for line in details.reasoning.splitlines():
            lines.append(f"             {line}")
    elif details.diff:
        lines.append(f"             Diff: {_short(details.diff)}")
    else:
        if details.expected is not None:
            lines.append(f"             Expected: {_short(details.expected)}")
        if details.actual is not None:
            lines.append(f"             Actual: {_short(details.actual)}")


def format_test_case_result(
    result: TestCaseResult,
    evaluators: list[EvaluatorConfig] | None = None,
    verbose: bool = False,
) -> str:
    """Format one test case for CLI output.

    On pass (not verbose): single score line.
    On fail or verbose: score line, evaluators with failures first, and
    a ``raw x weight = weighted`` breakdown.

    Returns:
        Multi-line plain text (no Rich markup).
    """
    score = result.aggregate_score
    lines = [f"[{result.data_point_id}]"]

    if result.error:
        lines[0] += f"  ERROR  {result.error}"
        return "\n".join(lines)

    if result.passed:
        lines[0] += f"  Score: {score:.2f} (>= {PASS_THRESHOLD:.2f})  PASS"
    else:
        lines[0] += f"  Score: {score:.2f}  FAILED"

    if (result.passed and not verbose) or not result.evaluator_results:
        return "\n".join(lines)

    # Weights pair with results by position when the suite is known.
    weights: list[float | None] = [None] * len(result.evaluator_results)
    if evaluators and len(evaluators) == len(result.evaluator_results):
        weights = [e.weight for e in evaluators]
    entries = list(zip(result.evaluator_results, weights))
    ordered = [p for p in entries if not p[0].passed] + [p for p in entries if p[0].passed]

    for er, _ in ordered:
        label = f"{er.evaluator_name} ({er.evaluator_type.value})"
        if er.passed:
            lines.append(f"  PASS       {label}")
        else:
            lines.append(f"  FAILED     {label}")
            _append_details(lines, er)

    lines.append("")
    lines.append("  Score breakdown:")
    for er, weight in ordered:
        if weight is None:
            lines.append(f"    {er.evaluator_name}    {er.raw_score:.2f} -> {er.score:.2f}")
        else:
            lines.append(
                f"    {er.evaluator_name}    {er.raw_score:.2f} * {weight:.1f} = {er.score:.2f}"
            )

    weighted_sum = sum(er.score for er in result.evaluator_results)
    lines.append("    " + "─" * 30)
    if evaluators:
        total_weight = sum(e.weight for e in evaluators)
        lines.append(f"    Total: {weighted_sum:.2f} / {total_weight:.2f} = {score:.2f}")
    else:
        lines.append(f"    Total: {score:.2f}")

    return "\n".join(lines)


def format_results(
    results: list[TestCaseResult],
    evaluators: list[EvaluatorConfig] | None = None,
    verbose: bool = False,
) -> str:
    """Format many cases, failures and errors first."""
    ordered = [r for r in results if not r.passed] + [r for r in results if r.passed]
    return "\n\n".join(format_test_case_result(r, evaluators, verbose) for r in ordered)
