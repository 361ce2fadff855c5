"""Evaluator configuration and result models."""

from __future__ import annotations

import copy
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, model_validator


class EvaluatorType(str, Enum):
    """Type tag selecting a scoring strategy."""

    exact_match = "exact_match"
    contains = "contains"
    json_similarity = "json_similarity"
    context_precision = "context_precision"
    llm_judge_output = "llm_judge_output"
    llm_judge_trajectory = "llm_judge_trajectory"
    trajectory_match = "trajectory_match"


TRAJECTORY_EVALUATORS: frozenset[EvaluatorType] = frozenset(
    {EvaluatorType.trajectory_match, EvaluatorType.llm_judge_trajectory}
)

# Per-type display name, description, default weight and default options.
DEFAULT_EVALUATORS: dict[EvaluatorType, dict[str, Any]] = {
    EvaluatorType.exact_match: {
        "name": "Exact Match",
        "description": "Checks if output exactly matches expected value",
        "weight": 1.0,
        "config": {"caseSensitive": False, "trimWhitespace": True},
    },
    EvaluatorType.contains: {
        "name": "Contains Keywords",
        "description": "Checks if output contains specified keywords",
        "weight": 0.8,
        "config": {"keywords": [], "matchAll": False, "caseSensitive": False},
    },
    EvaluatorType.json_similarity: {
        "name": "JSON Similarity",
        "description": "Compares JSON structure and values with threshold",
        "weight": 1.0,
        "config": {"threshold": 0.9, "ignoreFields": [], "strictTypeMatching": False},
    },
    EvaluatorType.context_precision: {
        "name": "Context Precision",
        "description": "Evaluates how precisely context was used in response",
        "weight": 1.0,
        "config": {"threshold": 0.8, "relevanceWeight": 0.6, "coverageWeight": 0.4},
    },
    EvaluatorType.llm_judge_output: {
        "name": "LLM Judge (Output)",
        "description": "Judges output quality against criteria",
        "weight": 1.0,
        "config": {
            "criteria": ["accuracy", "relevance", "completeness"],
            "scoreScale": 5,
        },
    },
    EvaluatorType.llm_judge_trajectory: {
        "name": "LLM Judge (Trajectory)",
        "description": "Judges the execution path and reasoning",
        "weight": 1.0,
        "config": {"allowExtraSteps": True, "evaluateReasoning": True},
    },
    EvaluatorType.trajectory_match: {
        "name": "Trajectory Match",
        "description": "Compares actual execution path to expected path",
        "weight": 1.0,
        "config": {
            "expectedPath": [],
            "strictOrder": True,
            "allowMissingSteps": False,
            "maxExtraSteps": 2,
        },
    },
}


class EvaluatorConfig(BaseModel):
    """A configured evaluator: type tag, weight and type-specific options.

    Missing name, description and weight are taken from DEFAULT_EVALUATORS,
    and the given ``config`` mapping is merged over the default options.
    """

    type: EvaluatorType
    name: str
    description: str = ""
    weight: float = Field(default=1.0, ge=0.0)
    config: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _fill_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "type" not in data:
            return data
        try:
            evaluator_type = EvaluatorType(data["type"])
        except ValueError:
            return data  # let field validation report the bad tag
        defaults = DEFAULT_EVALUATORS[evaluator_type]
        merged = dict(data)
        merged.setdefault("name", defaults["name"])
        merged.setdefault("description", defaults["description"])
        merged.setdefault("weight", defaults["weight"])
        given = merged.get("config") or {}
        if isinstance(given, dict):
            options = copy.deepcopy(defaults["config"])
            options.update(given)
            merged["config"] = options
        return merged

    @classmethod
    def default(cls, evaluator_type: EvaluatorType | str) -> EvaluatorConfig:
        """Build a config with every field taken from the defaults table."""
        return cls.model_validate({"type": evaluator_type})


class EvaluatorDetails(BaseModel):
    """Explanatory payload attached to an evaluator result."""

    expected: Any = None
    actual: Any = None
    diff: Any = None
    reasoning: str | None = None
    breakdown: dict[str, float] | None = None


class EvaluatorResult(BaseModel):
    """Outcome of one evaluator applied to one data point.

    ``raw_score`` is the evaluator's own value in [0, 1] and is never
    rewritten. ``weighted_score`` is filled in by the runner.
    """

    evaluator_type: EvaluatorType
    evaluator_name: str
    raw_score: float
    weighted_score: float | None = None
    passed: bool
    details: EvaluatorDetails = Field(default_factory=EvaluatorDetails)
    latency_ms: float = 0.0

    @property
    def score(self) -> float:
        """Weighted score when the runner has applied a weight, else raw."""
        if self.weighted_score is not None:
            return self.weighted_score
        return self.raw_score
