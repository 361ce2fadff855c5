"""Exact match evaluator -- normalized string equality."""

from __future__ import annotations

import time
from typing import Any

from evalstudio.evaluation.context import EvaluationContext
from evalstudio.evaluation.evaluators.base import BaseEvaluator
from evalstudio.evaluation.similarity import stringify
from evalstudio.models.evaluator import EvaluatorDetails, EvaluatorResult, EvaluatorType


class ExactMatchEvaluator(BaseEvaluator):
    """Scores 1 when both sides are equal after optional trim/lowercase."""

    evaluator_type = EvaluatorType.exact_match

    def evaluate(
        self,
        actual: Any,
        expected: Any,
        config: dict[str, Any],
        context: EvaluationContext,
    ) -> EvaluatorResult:
        start = time.perf_counter()
        case_sensitive = config.get("caseSensitive", False)
        trim_whitespace = config.get("trimWhitespace", True)

        actual_str = stringify(actual)
        expected_str = stringify(expected)

        if trim_whitespace:
            actual_str = actual_str.strip()
            expected_str = expected_str.strip()

        if not case_sensitive:
            actual_str = actual_str.lower()
            expected_str = expected_str.lower()

        passed = actual_str == expected_str

        return self._result(
            1.0 if passed else 0.0,
            passed,
            EvaluatorDetails(
                expected=expected_str,
                actual=actual_str,
                diff=None if passed else {"expected": expected_str, "actual": actual_str},
            ),
            start,
        )
