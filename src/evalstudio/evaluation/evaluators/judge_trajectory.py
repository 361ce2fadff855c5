"""Judge trajectory evaluator -- path alignment blended with reasoning quality."""

from __future__ import annotations

import math
import time
from typing import Any

from evalstudio.evaluation.context import EvaluationContext
from evalstudio.evaluation.evaluators.base import JudgeBackedEvaluator
from evalstudio.evaluation.evaluators.trajectory_match import calculate_trajectory_match
from evalstudio.models.evaluator import EvaluatorDetails, EvaluatorResult, EvaluatorType

PASS_THRESHOLD = 0.7
TRAJECTORY_WEIGHT = 0.6
REASONING_WEIGHT = 0.4


class JudgeTrajectoryEvaluator(JudgeBackedEvaluator):
    """Score = 0.6 x alignment + 0.4 x reasoning, or alignment alone.

    Alignment uses the strict-order trajectory match with no missing
    steps allowed; extra steps are free with ``allowExtraSteps`` and
    penalized from the first one otherwise.
    """

    evaluator_type = EvaluatorType.llm_judge_trajectory

    async def evaluate_async(
        self,
        actual: Any,
        expected: Any,
        config: dict[str, Any],
        context: EvaluationContext,
    ) -> EvaluatorResult:
        start = time.perf_counter()
        allow_extra = config.get("allowExtraSteps", True)
        evaluate_reasoning = config.get("evaluateReasoning", True)

        actual_path = list(context.trajectory or [])
        expected_path = list(context.expected_trajectory or [])

        match = calculate_trajectory_match(
            actual_path,
            expected_path,
            strict_order=True,
            allow_missing=False,
            max_extra=math.inf if allow_extra else 0,
        )
        trajectory_score = match.score

        breakdown = {"trajectory_score": trajectory_score}
        reasoning = f"Trajectory alignment: {trajectory_score * 100:.1f}%"

        if evaluate_reasoning:
            reasoning_score = await self.judge_backend.score_reasoning(
                context.execution_trace
            )
            score = trajectory_score * TRAJECTORY_WEIGHT + reasoning_score * REASONING_WEIGHT
            breakdown["reasoning_score"] = reasoning_score
            reasoning += f"\nReasoning quality: {reasoning_score * 100:.1f}%"
        else:
            score = trajectory_score

        return self._result(
            score,
            score >= PASS_THRESHOLD,
            EvaluatorDetails(
                expected=expected_path,
                actual=actual_path,
                diff={
                    "missing_steps": match.missing_steps,
                    "extra_steps": match.extra_steps,
                },
                reasoning=reasoning,
                breakdown=breakdown,
            ),
            start,
        )
