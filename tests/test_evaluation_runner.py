"""Tests for the evaluation runner: weighting, aggregation gate, failure capture."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from evalstudio.evaluation.context import EvaluationContext
from evalstudio.evaluation.evaluators import EVALUATOR_REGISTRY, register_evaluator
from evalstudio.evaluation.evaluators.base import BaseEvaluator
from evalstudio.evaluation.runner import (
    PASS_THRESHOLD,
    resolve_timeout,
    run_evaluation,
    run_evaluation_async,
)
from evalstudio.models.dataset import DataPoint
from evalstudio.models.evaluator import (
    EvaluatorConfig,
    EvaluatorDetails,
    EvaluatorResult,
    EvaluatorType,
)


def _make_data_point(**overrides) -> DataPoint:
    data = {
        "id": "dp-1",
        "input": {"query": "capital of France?"},
        "expected_output": {"answer": "Paris"},
        "expected_trajectory": ["t1", "llm1"],
        "context": "Paris is the capital of France",
    }
    data.update(overrides)
    return DataPoint(**data)


def _config(evaluator_type: str, weight: float | None = None, **options: Any) -> EvaluatorConfig:
    data: dict[str, Any] = {"type": evaluator_type, "config": options}
    if weight is not None:
        data["weight"] = weight
    return EvaluatorConfig.model_validate(data)


class ExplodingEvaluator(BaseEvaluator):
    evaluator_type = EvaluatorType.exact_match

    def evaluate(self, actual, expected, config, context):
        raise ZeroDivisionError("boom")


class SlowEvaluator(BaseEvaluator):
    evaluator_type = EvaluatorType.contains

    def evaluate(self, actual, expected, config, context):  # pragma: no cover
        raise AssertionError("sync path not used")

    async def evaluate_async(self, actual, expected, config, context):
        await asyncio.sleep(1)
        return EvaluatorResult(
            evaluator_type=self.evaluator_type,
            evaluator_name="slow",
            raw_score=1.0,
            passed=True,
            details=EvaluatorDetails(),
        )


@pytest.fixture
def swap_registry():
    """Temporarily register replacement evaluator classes."""
    saved = dict(EVALUATOR_REGISTRY)
    yield register_evaluator
    EVALUATOR_REGISTRY.clear()
    EVALUATOR_REGISTRY.update(saved)


class TestRunEvaluation:
    def test_all_passing(self):
        result = run_evaluation(
            _make_data_point(),
            {"answer": "Paris"},
            ["t1", "llm1"],
            [_config("exact_match"), _config("trajectory_match")],
        )
        assert result.passed is True
        assert result.aggregate_score == pytest.approx(1.0)
        assert result.data_point_id == "dp-1"
        assert result.actual_trajectory == ["t1", "llm1"]
        assert [er.evaluator_type for er in result.evaluator_results] == [
            EvaluatorType.exact_match,
            EvaluatorType.trajectory_match,
        ]

    def test_weights_keep_raw_scores(self):
        result = run_evaluation(
            _make_data_point(),
            {"answer": "Lyon"},
            ["t1", "llm1"],
            [_config("exact_match", weight=2.0), _config("trajectory_match", weight=1.0)],
        )
        exact, trajectory = result.evaluator_results
        assert exact.raw_score == 0.0
        assert exact.weighted_score == 0.0
        assert trajectory.raw_score == 1.0
        assert trajectory.weighted_score == 1.0
        assert result.aggregate_score == pytest.approx(1 / 3)
        assert result.passed is False

    def test_weighted_score_scales_raw(self):
        result = run_evaluation(
            _make_data_point(),
            {},
            ["t1", "llm1"],
            [_config("trajectory_match", weight=3.0)],
        )
        [er] = result.evaluator_results
        assert er.raw_score == 1.0
        assert er.weighted_score == 3.0
        assert result.aggregate_score == pytest.approx(1.0)

    def test_any_failed_evaluator_fails_case(self):
        # aggregate stays above the gate but contains misses its keyword
        result = run_evaluation(
            _make_data_point(),
            {"answer": "Paris"},
            ["t1", "llm1"],
            [
                _config("exact_match", weight=10.0),
                _config("contains", weight=0.1, keywords=["Berlin"]),
            ],
        )
        assert result.aggregate_score > PASS_THRESHOLD
        assert result.passed is False

    def test_zero_total_weight(self):
        result = run_evaluation(
            _make_data_point(), {"answer": "Paris"}, [], [_config("exact_match", weight=0.0)]
        )
        assert result.aggregate_score == 0.0
        assert result.passed is False

    def test_empty_suite(self):
        result = run_evaluation(_make_data_point(), {}, [], [])
        assert result.evaluator_results == []
        assert result.aggregate_score == 0.0
        assert result.passed is False

    def test_context_is_passed_through(self):
        result = run_evaluation(
            _make_data_point(),
            {"answer": "Paris capital"},
            [],
            [_config("context_precision")],
        )
        [er] = result.evaluator_results
        assert er.details.breakdown["relevance"] == 1.0

    def test_raising_evaluator_is_captured(self, swap_registry):
        swap_registry("exact_match", ExplodingEvaluator)
        result = run_evaluation(
            _make_data_point(),
            {"answer": "Paris"},
            ["t1", "llm1"],
            [_config("exact_match"), _config("trajectory_match")],
        )
        failed, trajectory = result.evaluator_results
        assert failed.raw_score == 0.0
        assert failed.passed is False
        assert failed.details.reasoning == "ZeroDivisionError: boom"
        assert failed.evaluator_name == "Exact Match"
        assert trajectory.passed is True
        assert result.passed is False

    def test_unregistered_type_is_captured(self, swap_registry):
        EVALUATOR_REGISTRY.pop("contains")
        result = run_evaluation(_make_data_point(), {}, [], [_config("contains")])
        [er] = result.evaluator_results
        assert er.passed is False
        assert er.details.reasoning.startswith("UnknownEvaluatorError:")


class TestRunEvaluationAsync:
    @pytest.mark.asyncio
    async def test_matches_sync_runner(self):
        evaluators = [_config("exact_match"), _config("json_similarity"), _config("llm_judge_output")]
        sync_result = await asyncio.to_thread(
            run_evaluation, _make_data_point(), {"answer": "Paris"}, ["t1"], evaluators
        )
        async_result = await run_evaluation_async(
            _make_data_point(), {"answer": "Paris"}, ["t1"], evaluators
        )
        assert async_result.aggregate_score == pytest.approx(sync_result.aggregate_score)
        assert [r.raw_score for r in async_result.evaluator_results] == pytest.approx(
            [r.raw_score for r in sync_result.evaluator_results]
        )

    @pytest.mark.asyncio
    async def test_concurrent_keeps_order(self):
        evaluators = [_config("trajectory_match"), _config("exact_match"), _config("contains")]
        result = await run_evaluation_async(
            _make_data_point(), {"answer": "Paris"}, ["t1", "llm1"], evaluators, concurrent=True
        )
        assert [er.evaluator_type.value for er in result.evaluator_results] == [
            "trajectory_match",
            "exact_match",
            "contains",
        ]

    @pytest.mark.asyncio
    async def test_timeout_is_captured(self, swap_registry):
        swap_registry("contains", SlowEvaluator)
        result = await run_evaluation_async(
            _make_data_point(),
            {},
            [],
            [_config("contains", timeoutSeconds=0.01), _config("exact_match")],
        )
        timed_out, _ = result.evaluator_results
        assert timed_out.passed is False
        assert timed_out.details.reasoning.startswith("EvaluatorTimeoutError:")

    @pytest.mark.asyncio
    async def test_judge_evaluator_uses_judge_timeout(self, swap_registry):
        class SlowJudge(SlowEvaluator):
            evaluator_type = EvaluatorType.llm_judge_output

        swap_registry("llm_judge_output", SlowJudge)
        result = await run_evaluation_async(
            _make_data_point(), {}, [], [_config("llm_judge_output")], judge_timeout=0.01
        )
        [er] = result.evaluator_results
        assert "EvaluatorTimeoutError" in er.details.reasoning


class TestResolveTimeout:
    def test_explicit_option_wins(self):
        assert resolve_timeout(_config("exact_match", timeoutSeconds=3), 60) == 3.0

    def test_judge_default(self):
        assert resolve_timeout(_config("llm_judge_trajectory"), 60) == 60

    def test_pure_evaluators_unbounded(self):
        assert resolve_timeout(_config("exact_match"), 60) is None
