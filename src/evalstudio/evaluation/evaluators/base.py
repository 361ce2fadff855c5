"""Base evaluator abstract class."""

from __future__ import annotations

import asyncio
import time
from abc import ABC, abstractmethod
from typing import Any, ClassVar

from evalstudio.evaluation.context import EvaluationContext
from evalstudio.judge.backend import JudgeBackend
from evalstudio.models.evaluator import (
    DEFAULT_EVALUATORS,
    EvaluatorDetails,
    EvaluatorResult,
    EvaluatorType,
)


def elapsed_ms(start: float) -> float:
    """Milliseconds since a ``time.perf_counter()`` reading."""
    return (time.perf_counter() - start) * 1000


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def option_list(value: Any) -> list[Any]:
    """A list-valued option; a lone scalar (``keywords: cat``) is one item."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


class BaseEvaluator(ABC):
    """Abstract base class for scoring strategies.

    Each evaluator receives the actual output, the expected output, its
    options mapping and the per-data-point context, and returns an
    EvaluatorResult whose ``raw_score`` lies in [0, 1].
    """

    evaluator_type: ClassVar[EvaluatorType]

    @abstractmethod
    def evaluate(
        self,
        actual: Any,
        expected: Any,
        config: dict[str, Any],
        context: EvaluationContext,
    ) -> EvaluatorResult:
        """Score one pairing of actual and expected output."""

    async def evaluate_async(
        self,
        actual: Any,
        expected: Any,
        config: dict[str, Any],
        context: EvaluationContext,
    ) -> EvaluatorResult:
        """Async evaluation. Default delegates to sync evaluate().

        Judge-backed evaluators override this with their async pipeline.
        """
        return self.evaluate(actual, expected, config, context)

    def _result(
        self,
        score: float,
        passed: bool,
        details: EvaluatorDetails,
        start: float,
    ) -> EvaluatorResult:
        return EvaluatorResult(
            evaluator_type=self.evaluator_type,
            evaluator_name=DEFAULT_EVALUATORS[self.evaluator_type]["name"],
            raw_score=clamp(score),
            passed=passed,
            details=details,
            latency_ms=elapsed_ms(start),
        )


class JudgeBackedEvaluator(BaseEvaluator):
    """Evaluator that delegates qualitative scoring to a JudgeBackend."""

    def __init__(self, judge_backend: JudgeBackend | None = None) -> None:
        if judge_backend is None:
            from evalstudio.judge.heuristic import HeuristicJudgeBackend

            judge_backend = HeuristicJudgeBackend()
        self.judge_backend = judge_backend

    def evaluate(
        self,
        actual: Any,
        expected: Any,
        config: dict[str, Any],
        context: EvaluationContext,
    ) -> EvaluatorResult:
        """Sync entry point -- delegates to evaluate_async.

        Raises:
            RuntimeError: When called from inside a running event loop.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop is not None:
            raise RuntimeError(
                f"{type(self).__name__}.evaluate() called from within an async "
                "context. Use evaluate_async() instead."
            )

        return asyncio.run(self.evaluate_async(actual, expected, config, context))

    @abstractmethod
    async def evaluate_async(
        self,
        actual: Any,
        expected: Any,
        config: dict[str, Any],
        context: EvaluationContext,
    ) -> EvaluatorResult:
        """Score via the judge backend."""
