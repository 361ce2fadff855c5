"""Per-case results, run summaries and run comparisons."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from evalstudio.models.evaluator import EvaluatorResult


class TestCaseResult(BaseModel):
    """All evaluator outcomes for a single data point."""

    __test__ = False  # keep pytest from collecting this model

    data_point_id: str
    input: dict[str, Any]
    actual_output: dict[str, Any] = Field(default_factory=dict)
    actual_trajectory: list[str] = Field(default_factory=list)
    evaluator_results: list[EvaluatorResult] = Field(default_factory=list)
    aggregate_score: float = 0.0
    passed: bool = False
    execution_time_ms: float = 0.0
    error: str | None = None


class EvaluationSummary(BaseModel):
    """Run-level statistics reduced from a list of test case results."""

    total_tests: int = 0
    passed: int = 0
    failed: int = 0
    pass_rate: float = 0.0
    average_score: float = 0.0
    score_by_evaluator: dict[str, float] = Field(default_factory=dict)
    average_latency_ms: float = 0.0
    trajectory_accuracy: float | None = None


class TestCaseRegression(BaseModel):
    """A test case whose aggregate score dropped against the baseline."""

    __test__ = False

    data_point_id: str
    previous_score: float
    current_score: float
    delta: float
    affected_evaluators: list[str] = Field(default_factory=list)


class TestCaseImprovement(BaseModel):
    """A test case whose aggregate score rose against the baseline."""

    __test__ = False

    data_point_id: str
    previous_score: float
    current_score: float
    delta: float
    improved_evaluators: list[str] = Field(default_factory=list)


class RunComparison(BaseModel):
    """Differences between a run and a baseline run."""

    current_run_id: str
    baseline_run_id: str
    score_delta: float
    pass_rate_delta: float
    latency_delta: float
    regressions: list[TestCaseRegression] = Field(default_factory=list)
    improvements: list[TestCaseImprovement] = Field(default_factory=list)
