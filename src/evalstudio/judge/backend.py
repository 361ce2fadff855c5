"""JudgeBackend ABC -- the pluggable qualitative scorer behind the judge evaluators."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from evalstudio.models.execution import ExecutionStep


@dataclass
class JudgeVerdict:
    """Per-criterion scores on the requested scale, plus a readable rationale."""

    scores: dict[str, float]
    reasoning: str = ""
    metadata: dict[str, object] = field(default_factory=dict)


class JudgeBackend(ABC):
    """Scores output quality and reasoning quality.

    Implementations may be deterministic heuristics or real model calls;
    the judge evaluators only see this interface.
    """

    name: str = "judge"

    @abstractmethod
    async def score_output(
        self,
        actual: str,
        expected: str,
        criteria: list[str],
        score_scale: float,
    ) -> JudgeVerdict:
        """Return one score in ``[0, score_scale]`` per criterion."""

    @abstractmethod
    async def score_reasoning(self, trace: list[ExecutionStep] | None) -> float:
        """Return a reasoning-quality score in [0, 1] for an execution trace."""


def rating_for(score: float, score_scale: float) -> str:
    """Coarse label for a criterion score."""
    ratio = score / score_scale if score_scale else 0.0
    if ratio >= 0.8:
        return "strong"
    if ratio >= 0.6:
        return "adequate"
    return "weak"


def summarize_scores(scores: dict[str, float], score_scale: float) -> str:
    lines = [
        f"{criterion}: {rating_for(score, score_scale)} ({score:.1f}/{score_scale:g})"
        for criterion, score in scores.items()
    ]
    return "Evaluation Summary:\n" + "\n".join(lines)
