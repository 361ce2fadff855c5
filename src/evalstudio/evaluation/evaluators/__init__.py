"""Evaluator registry -- maps evaluator type tags to evaluator classes."""

from __future__ import annotations

from evalstudio.errors import UnknownEvaluatorError
from evalstudio.evaluation.evaluators.base import BaseEvaluator, JudgeBackedEvaluator
from evalstudio.evaluation.evaluators.contains import ContainsEvaluator
from evalstudio.evaluation.evaluators.context_precision import ContextPrecisionEvaluator
from evalstudio.evaluation.evaluators.exact_match import ExactMatchEvaluator
from evalstudio.evaluation.evaluators.json_similarity import JsonSimilarityEvaluator
from evalstudio.evaluation.evaluators.judge_output import JudgeOutputEvaluator
from evalstudio.evaluation.evaluators.judge_trajectory import JudgeTrajectoryEvaluator
from evalstudio.evaluation.evaluators.trajectory_match import TrajectoryMatchEvaluator
from evalstudio.judge.backend import JudgeBackend
from evalstudio.models.evaluator import EvaluatorType

EVALUATOR_REGISTRY: dict[str, type[BaseEvaluator]] = {
    EvaluatorType.exact_match.value: ExactMatchEvaluator,
    EvaluatorType.contains.value: ContainsEvaluator,
    EvaluatorType.json_similarity.value: JsonSimilarityEvaluator,
    EvaluatorType.context_precision.value: ContextPrecisionEvaluator,
    EvaluatorType.llm_judge_output.value: JudgeOutputEvaluator,
    EvaluatorType.llm_judge_trajectory.value: JudgeTrajectoryEvaluator,
    EvaluatorType.trajectory_match.value: TrajectoryMatchEvaluator,
}


def register_evaluator(evaluator_type: str, cls: type[BaseEvaluator]) -> None:
    """Register (or replace) the evaluator class for a type tag."""
    EVALUATOR_REGISTRY[str(getattr(evaluator_type, "value", evaluator_type))] = cls


def get_evaluator(
    evaluator_type: EvaluatorType | str,
    judge_backend: JudgeBackend | None = None,
) -> BaseEvaluator:
    """Look up and instantiate an evaluator for the given type tag.

    Judge-backed evaluators receive *judge_backend* (heuristic when None).

    Raises:
        UnknownEvaluatorError: If *evaluator_type* is not in the registry.
    """
    key = str(getattr(evaluator_type, "value", evaluator_type))
    cls = EVALUATOR_REGISTRY.get(key)
    if cls is None:
        available = sorted(EVALUATOR_REGISTRY)
        raise UnknownEvaluatorError(
            f"Unknown evaluator type {key!r}. Available types: {available}"
        )
    if issubclass(cls, JudgeBackedEvaluator):
        return cls(judge_backend)
    return cls()


__all__ = [
    "EVALUATOR_REGISTRY",
    "BaseEvaluator",
    "JudgeBackedEvaluator",
    "get_evaluator",
    "register_evaluator",
]
