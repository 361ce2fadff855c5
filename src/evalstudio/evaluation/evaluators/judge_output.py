"""Judge output evaluator -- criterion scores from the judge backend."""

from __future__ import annotations

import time
from typing import Any

from evalstudio.evaluation.context import EvaluationContext
from evalstudio.evaluation.evaluators.base import JudgeBackedEvaluator, option_list
from evalstudio.evaluation.similarity import text_content
from evalstudio.models.evaluator import (
    DEFAULT_EVALUATORS,
    EvaluatorDetails,
    EvaluatorResult,
    EvaluatorType,
)

PASS_THRESHOLD = 0.7
DEFAULT_CRITERIA: list[str] = DEFAULT_EVALUATORS[EvaluatorType.llm_judge_output][
    "config"
]["criteria"]


class JudgeOutputEvaluator(JudgeBackedEvaluator):
    """Averages per-criterion scores and normalizes by ``scoreScale``.

    ``rubric`` is accepted in the options but not used.
    """

    evaluator_type = EvaluatorType.llm_judge_output

    async def evaluate_async(
        self,
        actual: Any,
        expected: Any,
        config: dict[str, Any],
        context: EvaluationContext,
    ) -> EvaluatorResult:
        start = time.perf_counter()
        criteria = [
            str(c) for c in option_list(config.get("criteria")) or DEFAULT_CRITERIA
        ]
        score_scale = float(config.get("scoreScale") or 5)

        verdict = await self.judge_backend.score_output(
            text_content(actual), text_content(expected), criteria, score_scale
        )

        average = sum(verdict.scores.get(c, 0.0) for c in criteria) / len(criteria)
        normalized = average / score_scale

        return self._result(
            normalized,
            normalized >= PASS_THRESHOLD,
            EvaluatorDetails(
                expected=expected,
                actual=actual,
                reasoning=verdict.reasoning,
                breakdown={c: verdict.scores.get(c, 0.0) for c in criteria},
            ),
            start,
        )
