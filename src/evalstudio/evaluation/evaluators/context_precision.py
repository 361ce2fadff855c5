"""Context precision evaluator -- grounding and coverage by word overlap."""

from __future__ import annotations

import time
from typing import Any

from evalstudio.evaluation.context import EvaluationContext
from evalstudio.evaluation.evaluators.base import BaseEvaluator
from evalstudio.evaluation.similarity import text_content, tokenize
from evalstudio.models.evaluator import EvaluatorDetails, EvaluatorResult, EvaluatorType

# Relevance when no grounding context was supplied.
NO_CONTEXT_RELEVANCE = 0.5

DISPLAY_LIMIT = 200


def calculate_relevance(response: str, context: str) -> float:
    """Fraction of response words that also appear in the context."""
    if not context:
        return NO_CONTEXT_RELEVANCE
    response_words = tokenize(response)
    if not response_words:
        return 0.0
    return len(response_words & tokenize(context)) / len(response_words)


def calculate_coverage(response: str, expected: str) -> float:
    """Fraction of expected words that also appear in the response."""
    expected_words = tokenize(expected)
    if not expected_words:
        return 1.0
    return len(expected_words & tokenize(response)) / len(expected_words)


class ContextPrecisionEvaluator(BaseEvaluator):
    evaluator_type = EvaluatorType.context_precision

    def evaluate(
        self,
        actual: Any,
        expected: Any,
        config: dict[str, Any],
        context: EvaluationContext,
    ) -> EvaluatorResult:
        start = time.perf_counter()
        threshold = float(config.get("threshold", 0.8))
        relevance_weight = float(config.get("relevanceWeight", 0.6))
        coverage_weight = float(config.get("coverageWeight", 0.4))

        actual_str = text_content(actual).lower()
        context_str = (context.context_used or "").lower()
        expected_str = text_content(expected).lower()

        relevance = calculate_relevance(actual_str, context_str)
        coverage = calculate_coverage(actual_str, expected_str)
        score = relevance * relevance_weight + coverage * coverage_weight

        return self._result(
            score,
            score >= threshold,
            EvaluatorDetails(
                expected=expected_str[:DISPLAY_LIMIT],
                actual=actual_str[:DISPLAY_LIMIT],
                breakdown={
                    "relevance": relevance,
                    "coverage": coverage,
                    "threshold": threshold,
                },
            ),
            start,
        )
