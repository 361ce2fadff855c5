"""Evaluation runner -- applies a configured evaluator suite to one data point.

Every evaluator result keeps its raw score; the runner adds the
weighted score. The aggregate is the weighted sum over the total
weight, and a case passes only when every evaluator passed and the
aggregate reaches PASS_THRESHOLD.

An evaluator that raises (or times out, or has no registered class) is
recorded as a failed result with score 0 and the error as its
reasoning; the remaining evaluators still run.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any

import structlog

from evalstudio.errors import EvaluatorTimeoutError
from evalstudio.evaluation.context import EvaluationContext
from evalstudio.evaluation.evaluators import get_evaluator
from evalstudio.evaluation.evaluators.base import elapsed_ms
from evalstudio.judge.backend import JudgeBackend
from evalstudio.models.dataset import DataPoint
from evalstudio.models.evaluator import (
    EvaluatorConfig,
    EvaluatorDetails,
    EvaluatorResult,
    EvaluatorType,
)
from evalstudio.models.execution import ExecutionStep
from evalstudio.models.result import TestCaseResult

log = structlog.get_logger(__name__)

PASS_THRESHOLD = 0.7

JUDGE_EVALUATORS: frozenset[EvaluatorType] = frozenset(
    {EvaluatorType.llm_judge_output, EvaluatorType.llm_judge_trajectory}
)


def build_context(
    data_point: DataPoint,
    actual_trajectory: list[str],
    execution_trace: list[ExecutionStep] | None = None,
) -> EvaluationContext:
    return EvaluationContext(
        input=data_point.input,
        trajectory=list(actual_trajectory),
        expected_trajectory=data_point.expected_trajectory,
        context_used=data_point.context,
        execution_trace=execution_trace,
    )


def resolve_timeout(
    evaluator: EvaluatorConfig, judge_timeout: float | None
) -> float | None:
    """``timeoutSeconds`` option, else the judge timeout for judge evaluators."""
    configured = evaluator.config.get("timeoutSeconds")
    if configured is not None:
        return float(configured)
    if evaluator.type in JUDGE_EVALUATORS:
        return judge_timeout
    return None


def _failed_result(
    evaluator: EvaluatorConfig, exc: Exception, latency_ms: float
) -> EvaluatorResult:
    log.warning(
        "evaluation.evaluator_failed",
        evaluator_type=evaluator.type.value,
        evaluator_name=evaluator.name,
        error=f"{type(exc).__name__}: {exc}",
    )
    return EvaluatorResult(
        evaluator_type=evaluator.type,
        evaluator_name=evaluator.name,
        raw_score=0.0,
        passed=False,
        details=EvaluatorDetails(reasoning=f"{type(exc).__name__}: {exc}"),
        latency_ms=latency_ms,
    )


def _apply_weight(result: EvaluatorResult, evaluator: EvaluatorConfig) -> EvaluatorResult:
    return result.model_copy(
        update={
            "evaluator_name": evaluator.name,
            "weighted_score": result.raw_score * evaluator.weight,
        }
    )


def _finalize(
    data_point: DataPoint,
    actual_output: dict[str, Any],
    actual_trajectory: list[str],
    evaluators: list[EvaluatorConfig],
    results: list[EvaluatorResult],
    start: float,
) -> TestCaseResult:
    total_weight = sum(e.weight for e in evaluators)
    weighted_sum = sum(r.score for r in results)
    aggregate = weighted_sum / total_weight if total_weight > 0 else 0.0
    passed = all(r.passed for r in results) and aggregate >= PASS_THRESHOLD

    log.debug(
        "evaluation.case_scored",
        data_point_id=data_point.id,
        aggregate_score=round(aggregate, 4),
        passed=passed,
    )
    return TestCaseResult(
        data_point_id=data_point.id,
        input=data_point.input,
        actual_output=actual_output,
        actual_trajectory=list(actual_trajectory),
        evaluator_results=results,
        aggregate_score=aggregate,
        passed=passed,
        execution_time_ms=elapsed_ms(start),
    )


def run_evaluation(
    data_point: DataPoint,
    actual_output: dict[str, Any],
    actual_trajectory: list[str],
    evaluators: list[EvaluatorConfig],
    execution_trace: list[ExecutionStep] | None = None,
    judge_backend: JudgeBackend | None = None,
) -> TestCaseResult:
    """Evaluate one data point synchronously, evaluators in list order.

    Must not be called from inside a running event loop when the suite
    contains judge evaluators; use run_evaluation_async() there.
    """
    start = time.perf_counter()
    context = build_context(data_point, actual_trajectory, execution_trace)

    results: list[EvaluatorResult] = []
    for evaluator in evaluators:
        eval_start = time.perf_counter()
        try:
            result = get_evaluator(evaluator.type, judge_backend).evaluate(
                actual_output, data_point.expected_output, evaluator.config, context
            )
        except Exception as exc:
            result = _failed_result(evaluator, exc, elapsed_ms(eval_start))
        results.append(_apply_weight(result, evaluator))

    return _finalize(
        data_point, actual_output, actual_trajectory, evaluators, results, start
    )


async def _evaluate_one(
    evaluator: EvaluatorConfig,
    actual_output: dict[str, Any],
    expected_output: dict[str, Any] | None,
    context: EvaluationContext,
    judge_backend: JudgeBackend | None,
    judge_timeout: float | None,
) -> EvaluatorResult:
    start = time.perf_counter()
    try:
        instance = get_evaluator(evaluator.type, judge_backend)
        timeout = resolve_timeout(evaluator, judge_timeout)
        pending = instance.evaluate_async(
            actual_output, expected_output, evaluator.config, context
        )
        if timeout is None:
            result = await pending
        else:
            try:
                result = await asyncio.wait_for(pending, timeout=timeout)
            except TimeoutError as exc:
                raise EvaluatorTimeoutError(
                    f"{evaluator.name} exceeded {timeout:g}s"
                ) from exc
    except Exception as exc:
        result = _failed_result(evaluator, exc, elapsed_ms(start))
    return _apply_weight(result, evaluator)


async def run_evaluation_async(
    data_point: DataPoint,
    actual_output: dict[str, Any],
    actual_trajectory: list[str],
    evaluators: list[EvaluatorConfig],
    execution_trace: list[ExecutionStep] | None = None,
    judge_backend: JudgeBackend | None = None,
    judge_timeout: float | None = None,
    concurrent: bool = False,
) -> TestCaseResult:
    """Async counterpart of run_evaluation() with per-evaluator timeouts.

    With ``concurrent`` the evaluators of this data point run together;
    results keep the order of *evaluators* either way.
    """
    start = time.perf_counter()
    context = build_context(data_point, actual_trajectory, execution_trace)

    def _one(evaluator: EvaluatorConfig):
        return _evaluate_one(
            evaluator,
            actual_output,
            data_point.expected_output,
            context,
            judge_backend,
            judge_timeout,
        )

    if concurrent:
        results = list(await asyncio.gather(*(_one(e) for e in evaluators)))
    else:
        results = [await _one(e) for e in evaluators]

    return _finalize(
        data_point, actual_output, actual_trajectory, evaluators, results, start
    )
