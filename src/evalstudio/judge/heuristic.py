"""Deterministic heuristic judge backend.

Stands in for a judge model when none is configured. Each criterion
gets a fixed rule, expressed as a fraction of the score scale:

- accuracy: character similarity of actual to expected
- relevance: 0.85 for non-empty output, 0.2 otherwise
- completeness: length ratio of actual to expected, capped at 1
- coherence: 0.8 when the text splits into sentences, 0.5 otherwise
- safety: 0.9
- anything else: 0.8
"""

from __future__ import annotations

import re

from evalstudio.evaluation.similarity import string_similarity
from evalstudio.judge.backend import JudgeBackend, JudgeVerdict, summarize_scores
from evalstudio.models.execution import ExecutionStep

_SENTENCE_END = re.compile(r"[.!?]")

# Mean step duration below which the reasoning bonus applies.
FAST_STEP_MS = 5000


def criterion_fraction(criterion: str, actual: str, expected: str) -> float:
    """Heuristic score for one criterion as a fraction in [0, 1]."""
    actual = actual.lower()
    expected = expected.lower()

    if criterion == "accuracy":
        return string_similarity(actual, expected)
    if criterion == "relevance":
        return 0.85 if actual else 0.2
    if criterion == "completeness":
        return min(len(actual) / max(len(expected), 1), 1.0)
    if criterion == "coherence":
        return 0.8 if len(_SENTENCE_END.split(actual)) > 1 else 0.5
    if criterion == "safety":
        return 0.9
    return 0.8


def reasoning_fraction(trace: list[ExecutionStep] | None) -> float:
    """0.5 baseline, up to 0.3 for steps with output, 0.2 for fast steps."""
    if not trace:
        return 0.5

    score = 0.5
    with_output = sum(1 for step in trace if step.output is not None)
    score += (with_output / len(trace)) * 0.3

    mean_duration = sum(step.duration_ms for step in trace) / len(trace)
    if mean_duration < FAST_STEP_MS:
        score += 0.2

    return min(1.0, score)


class HeuristicJudgeBackend(JudgeBackend):
    name = "heuristic"

    async def score_output(
        self,
        actual: str,
        expected: str,
        criteria: list[str],
        score_scale: float,
    ) -> JudgeVerdict:
        scores = {
            criterion: criterion_fraction(criterion, actual, expected) * score_scale
            for criterion in criteria
        }
        return JudgeVerdict(
            scores=scores,
            reasoning=summarize_scores(scores, score_scale),
            metadata={"backend": self.name},
        )

    async def score_reasoning(self, trace: list[ExecutionStep] | None) -> float:
        return reasoning_fraction(trace)
