"""Trajectory match evaluator -- order-aware execution path alignment.

Two matching modes:
- strict order: walk the actual path once; for each expected step,
  consume actual entries as extra until the step is found, else it is
  missing. Leftover actual entries are extra.
- any order: set comparison of expected vs actual.

The score is the matched fraction, reduced by half the missing ratio
(unless missing steps are allowed) and by 0.1 per extra step beyond
the allowance, clamped to [0, 1].
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from typing import Any

from evalstudio.evaluation.context import EvaluationContext
from evalstudio.evaluation.evaluators.base import BaseEvaluator, clamp, option_list
from evalstudio.models.evaluator import EvaluatorDetails, EvaluatorResult, EvaluatorType

PASS_THRESHOLD = 0.8
MISSING_PENALTY = 0.5
EXTRA_STEP_PENALTY = 0.1


@dataclass
class TrajectoryMatch:
    """Alignment of an actual path against an expected one."""

    score: float
    matched_steps: list[str] = field(default_factory=list)
    missing_steps: list[str] = field(default_factory=list)
    extra_steps: list[str] = field(default_factory=list)


def calculate_trajectory_match(
    actual: list[str],
    expected: list[str],
    strict_order: bool = True,
    allow_missing: bool = False,
    max_extra: float = 2,
) -> TrajectoryMatch:
    """Align *actual* against *expected* and score the alignment."""
    matched: list[str] = []
    missing: list[str] = []
    extra: list[str] = []

    if strict_order:
        ai = 0  # pointer into actual
        for step in expected:
            found = False
            while ai < len(actual):
                current = actual[ai]
                ai += 1
                if current == step:
                    matched.append(step)
                    found = True
                    break
                extra.append(current)
            if not found:
                missing.append(step)
        extra.extend(actual[ai:])
    else:
        actual_set = set(actual)
        expected_set = set(expected)
        for step in expected:
            (matched if step in actual_set else missing).append(step)
        extra.extend(step for step in actual if step not in expected_set)

    if expected:
        score = len(matched) / len(expected)
        if not allow_missing and missing:
            score *= 1 - (len(missing) / len(expected)) * MISSING_PENALTY
        if len(extra) > max_extra:
            score *= 1 - (len(extra) - max_extra) * EXTRA_STEP_PENALTY
    elif not actual:
        score = 1.0
    elif len(actual) <= max_extra:
        score = 0.8
    else:
        score = 0.5

    return TrajectoryMatch(
        score=clamp(score),
        matched_steps=matched,
        missing_steps=missing,
        extra_steps=extra,
    )


class TrajectoryMatchEvaluator(BaseEvaluator):
    """Compares the actual execution path to ``expectedPath``.

    Falls back to the data point's expected trajectory when no path is
    configured.
    """

    evaluator_type = EvaluatorType.trajectory_match

    def evaluate(
        self,
        actual: Any,
        expected: Any,
        config: dict[str, Any],
        context: EvaluationContext,
    ) -> EvaluatorResult:
        start = time.perf_counter()
        expected_path = list(
            option_list(config.get("expectedPath"))
            or context.expected_trajectory
            or []
        )
        strict_order = config.get("strictOrder", True)
        allow_missing = config.get("allowMissingSteps", False)
        max_extra = config.get("maxExtraSteps", 2)
        if max_extra is None:
            max_extra = math.inf

        actual_path = list(context.trajectory or [])
        match = calculate_trajectory_match(
            actual_path, expected_path, strict_order, allow_missing, max_extra
        )

        return self._result(
            match.score,
            match.score >= PASS_THRESHOLD,
            EvaluatorDetails(
                expected=expected_path,
                actual=actual_path,
                diff={
                    "missing_steps": match.missing_steps,
                    "extra_steps": match.extra_steps,
                    "matched_steps": match.matched_steps,
                },
                breakdown={
                    "matched_count": float(len(match.matched_steps)),
                    "missing_count": float(len(match.missing_steps)),
                    "extra_count": float(len(match.extra_steps)),
                },
            ),
            start,
        )
