"""Run-level summary statistics and run-to-run comparison."""

from __future__ import annotations

from typing import TYPE_CHECKING

from evalstudio.models.evaluator import TRAJECTORY_EVALUATORS
from evalstudio.models.result import (
    EvaluationSummary,
    RunComparison,
    TestCaseImprovement,
    TestCaseRegression,
)

if TYPE_CHECKING:
    from evalstudio.models.result import TestCaseResult
    from evalstudio.models.run import EvaluationRun


def calculate_summary(results: list[TestCaseResult]) -> EvaluationSummary:
    """Reduce per-case results to run statistics.

    ``score_by_evaluator`` averages the weighted score of each evaluator
    type over only the cases it appeared in. ``trajectory_accuracy`` is
    the share of cases with a non-empty actual trajectory that have a
    passing trajectory-family evaluator; it is None when no case has a
    trajectory.
    """
    if not results:
        return EvaluationSummary()

    n = len(results)
    passed = sum(1 for r in results if r.passed)

    totals: dict[str, list[float]] = {}
    for result in results:
        for er in result.evaluator_results:
            totals.setdefault(er.evaluator_type.value, []).append(er.score)
    score_by_evaluator = {key: sum(v) / len(v) for key, v in totals.items()}

    with_trajectory = [r for r in results if r.actual_trajectory]
    trajectory_accuracy = None
    if with_trajectory:
        hits = sum(
            1
            for r in with_trajectory
            if any(
                er.evaluator_type in TRAJECTORY_EVALUATORS and er.passed
                for er in r.evaluator_results
            )
        )
        trajectory_accuracy = hits / len(with_trajectory)

    return EvaluationSummary(
        total_tests=n,
        passed=passed,
        failed=n - passed,
        pass_rate=passed / n,
        average_score=sum(r.aggregate_score for r in results) / n,
        score_by_evaluator=score_by_evaluator,
        average_latency_ms=sum(r.execution_time_ms for r in results) / n,
        trajectory_accuracy=trajectory_accuracy,
    )


def _evaluator_scores(result: TestCaseResult) -> dict[str, float]:
    return {er.evaluator_type.value: er.score for er in result.evaluator_results}


def compare_runs(current: EvaluationRun, baseline: EvaluationRun) -> RunComparison:
    """Compare two runs case by case, matching on data point id.

    Cases present in only one run are ignored. A drop in aggregate score
    is a regression listing the evaluator types whose score dropped; a
    rise is an improvement.
    """
    baseline_by_id = {r.data_point_id: r for r in baseline.results}

    regressions: list[TestCaseRegression] = []
    improvements: list[TestCaseImprovement] = []

    for result in current.results:
        previous = baseline_by_id.get(result.data_point_id)
        if previous is None:
            continue

        delta = result.aggregate_score - previous.aggregate_score
        if delta == 0:
            continue

        now_scores = _evaluator_scores(result)
        before_scores = _evaluator_scores(previous)
        shared = [k for k in now_scores if k in before_scores]

        if delta < 0:
            regressions.append(
                TestCaseRegression(
                    data_point_id=result.data_point_id,
                    previous_score=previous.aggregate_score,
                    current_score=result.aggregate_score,
                    delta=delta,
                    affected_evaluators=[
                        k for k in shared if now_scores[k] < before_scores[k]
                    ],
                )
            )
        else:
            improvements.append(
                TestCaseImprovement(
                    data_point_id=result.data_point_id,
                    previous_score=previous.aggregate_score,
                    current_score=result.aggregate_score,
                    delta=delta,
                    improved_evaluators=[
                        k for k in shared if now_scores[k] > before_scores[k]
                    ],
                )
            )

    regressions.sort(key=lambda r: r.delta)
    improvements.sort(key=lambda r: r.delta, reverse=True)

    return RunComparison(
        current_run_id=current.id,
        baseline_run_id=baseline.id,
        score_delta=current.summary.average_score - baseline.summary.average_score,
        pass_rate_delta=current.summary.pass_rate - baseline.summary.pass_rate,
        latency_delta=(
            current.summary.average_latency_ms - baseline.summary.average_latency_ms
        ),
        regressions=regressions,
        improvements=improvements,
    )
