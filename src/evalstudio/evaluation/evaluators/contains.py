"""Contains evaluator -- keyword substring hits in the actual output."""

from __future__ import annotations

import time
from typing import Any

from evalstudio.evaluation.context import EvaluationContext
from evalstudio.evaluation.evaluators.base import BaseEvaluator, option_list
from evalstudio.evaluation.similarity import text_content
from evalstudio.models.evaluator import EvaluatorDetails, EvaluatorResult, EvaluatorType

# Characters of the actual output kept in result details.
DISPLAY_LIMIT = 500


class ContainsEvaluator(BaseEvaluator):
    """Score is the fraction of keywords found (1 when none are configured).

    Passes when any keyword is found, or when all are found with
    ``matchAll``.
    """

    evaluator_type = EvaluatorType.contains

    def evaluate(
        self,
        actual: Any,
        expected: Any,
        config: dict[str, Any],
        context: EvaluationContext,
    ) -> EvaluatorResult:
        start = time.perf_counter()
        keywords = [str(k) for k in option_list(config.get("keywords"))]
        match_all = config.get("matchAll", False)
        case_sensitive = config.get("caseSensitive", False)

        actual_str = text_content(actual)
        if not case_sensitive:
            actual_str = actual_str.lower()

        hits: dict[str, float] = {}
        for keyword in keywords:
            needle = keyword if case_sensitive else keyword.lower()
            hits[keyword] = 1.0 if needle in actual_str else 0.0

        match_count = int(sum(hits.values()))
        passed = match_count == len(keywords) if match_all else match_count > 0
        score = match_count / len(keywords) if keywords else 1.0

        return self._result(
            score,
            passed,
            EvaluatorDetails(
                expected=keywords,
                actual=actual_str[:DISPLAY_LIMIT],
                breakdown=hits,
            ),
            start,
        )
