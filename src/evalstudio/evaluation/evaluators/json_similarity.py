"""JSON similarity evaluator -- recursive structural comparison.

Objects score as the average over the union of keys: keys present on
both sides recurse, a key missing from actual scores 0 and a key only
in actual scores 0.5. Arrays average element-wise over the longer side.
Primitives score 1 on equal string form, otherwise (non-strict, both
strings) a character-overlap similarity.
"""

from __future__ import annotations

import json
import time
from typing import Any

from evalstudio.evaluation.context import EvaluationContext
from evalstudio.evaluation.evaluators.base import BaseEvaluator, option_list
from evalstudio.evaluation.similarity import string_similarity, stringify
from evalstudio.models.evaluator import EvaluatorDetails, EvaluatorResult, EvaluatorType

EXTRA_KEY_CREDIT = 0.5


def _json_kind(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    return "object"


def json_similarity(
    actual: Any,
    expected: Any,
    ignore_fields: list[str],
    strict_types: bool,
    path: str = "",
) -> float:
    """Structural similarity of *actual* to *expected* in [0, 1]."""
    if expected is None:
        return 1.0 if actual is None else 0.0

    if any(path.endswith(f) for f in ignore_fields):
        return 1.0

    if strict_types and _json_kind(actual) != _json_kind(expected):
        return 0.0

    if not isinstance(expected, (dict, list)):
        if stringify(actual) == stringify(expected):
            return 1.0
        if not strict_types and isinstance(actual, str) and isinstance(expected, str):
            return string_similarity(actual, expected)
        return 0.0

    if isinstance(expected, list):
        if not isinstance(actual, list):
            return 0.0
        if not expected:
            return 1.0 if not actual else 0.0
        total = sum(
            json_similarity(a, e, ignore_fields, strict_types, f"{path}[{i}]")
            for i, (a, e) in enumerate(zip(actual, expected))
        )
        return total / max(len(expected), len(actual))

    actual_obj = actual if isinstance(actual, dict) else {}
    keys = [
        k
        for k in dict.fromkeys([*expected, *actual_obj])
        if k not in ignore_fields
    ]
    if not keys:
        return 1.0

    total = 0.0
    for key in keys:
        if key in expected and key in actual_obj:
            child_path = f"{path}.{key}" if path else key
            total += json_similarity(
                actual_obj[key], expected[key], ignore_fields, strict_types, child_path
            )
        elif key not in expected:
            total += EXTRA_KEY_CREDIT
    return total / len(keys)


def get_json_diff(expected: Any, actual: Any, path: str = "") -> dict[str, Any]:
    """Map of leaf path -> {expected, actual} wherever they differ or are missing."""
    diff: dict[str, Any] = {}

    if not isinstance(expected, (dict, list)):
        if expected != actual:
            diff[path or "value"] = {"expected": expected, "actual": actual}
        return diff

    if isinstance(expected, list):
        actual_list = actual if isinstance(actual, list) else []
        for i, item in enumerate(expected):
            other = actual_list[i] if i < len(actual_list) else None
            diff.update(get_json_diff(item, other, f"{path}[{i}]"))
        return diff

    actual_obj = actual if isinstance(actual, dict) else {}
    for key, value in expected.items():
        child_path = f"{path}.{key}" if path else key
        if key not in actual_obj:
            diff[child_path] = {"expected": value, "actual": None}
        else:
            diff.update(get_json_diff(value, actual_obj[key], child_path))
    return diff


class JsonSimilarityEvaluator(BaseEvaluator):
    """Passes when structural similarity reaches ``threshold``."""

    evaluator_type = EvaluatorType.json_similarity

    def evaluate(
        self,
        actual: Any,
        expected: Any,
        config: dict[str, Any],
        context: EvaluationContext,
    ) -> EvaluatorResult:
        start = time.perf_counter()
        threshold = float(config.get("threshold", 0.9))
        ignore_fields = option_list(config.get("ignoreFields"))
        strict_types = config.get("strictTypeMatching", False)

        try:
            actual_obj = json.loads(actual) if isinstance(actual, str) else actual
            expected_obj = json.loads(expected) if isinstance(expected, str) else expected
        except json.JSONDecodeError:
            return self._result(
                0.0,
                False,
                EvaluatorDetails(
                    expected=expected, actual=actual, reasoning="Failed to parse JSON"
                ),
                start,
            )

        similarity = json_similarity(actual_obj, expected_obj, ignore_fields, strict_types)

        return self._result(
            similarity,
            similarity >= threshold,
            EvaluatorDetails(
                expected=expected_obj,
                actual=actual_obj,
                diff=get_json_diff(expected_obj, actual_obj),
                breakdown={"similarity": similarity, "threshold": threshold},
            ),
            start,
        )
