"""Evaluation package: evaluators, the per-case runner and run aggregation.

Provides the evaluator registry, the runner that applies a weighted
evaluator suite to one data point, summary statistics and run
comparison.
"""

from __future__ import annotations

from evalstudio.evaluation.aggregation import calculate_summary, compare_runs
from evalstudio.evaluation.context import EvaluationContext
from evalstudio.evaluation.evaluators import get_evaluator, register_evaluator
from evalstudio.evaluation.evaluators.base import BaseEvaluator
from evalstudio.evaluation.runner import (
    PASS_THRESHOLD,
    run_evaluation,
    run_evaluation_async,
)

__all__ = [
    "PASS_THRESHOLD",
    "BaseEvaluator",
    "EvaluationContext",
    "calculate_summary",
    "compare_runs",
    "get_evaluator",
    "register_evaluator",
    "run_evaluation",
    "run_evaluation_async",
]
