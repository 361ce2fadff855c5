"""Synthetic test-case generation from a sample input template.

Three independent buckets are filled: standard variations (60% of
``count``), fixed edge-case templates (25%, at most 5) and fixed
negative templates (15%, at most 3). Each bucket rounds up on its own,
so the total can exceed ``count``.
"""

from __future__ import annotations

import math
from typing import Any, Callable

from pydantic import BaseModel, Field

from evalstudio.datasets.factory import new_data_point
from evalstudio.ids import IdGenerator
from evalstudio.models.dataset import DataPoint, DatasetSource

STANDARD_SHARE = 0.6
EDGE_CASE_SHARE = 0.25
NEGATIVE_CASE_SHARE = 0.15

DEFAULT_SAMPLE_INPUT: dict[str, Any] = {"query": "Sample query"}

EDGE_CASES: list[tuple[dict[str, Any], str]] = [
    ({"query": ""}, "Empty input"),
    ({"query": "a" * 10000}, "Very long input"),
    ({"query": "!@#$%^&*()"}, "Special characters"),
    ({"query": "   \n\t   "}, "Whitespace only"),
    ({"query": '{"nested": {"deep": {"value": true}}}'}, "JSON-like string"),
]

NEGATIVE_CASES: list[tuple[dict[str, Any], str]] = [
    ({"query": "DROP TABLE users;"}, "SQL injection attempt"),
    ({"query": '<script>alert("xss")</script>'}, "XSS attempt"),
    ({"invalidField": "wrong schema"}, "Invalid schema"),
]

# Node type -> canonical step id, in trajectory order.
TRAJECTORY_STEPS: list[tuple[str, str]] = [
    ("trigger", "trigger-1"),
    ("retrieval", "retrieval-1"),
    ("llm", "llm-1"),
    ("output", "output-1"),
]


class GenerationConfig(BaseModel):
    """Parameters for :func:`generate_test_cases`."""

    sample_input: dict[str, Any] | None = None
    node_types: list[str] = Field(default_factory=list)
    count: int = Field(default=10, ge=0)
    include_edge_cases: bool = True
    include_negative_cases: bool = True


_VARIATIONS: list[Callable[[dict[str, Any]], dict[str, Any]]] = [
    lambda base: {**base, "variation": "standard"},
    lambda base: {**base, "query": f"Modified: {base.get('query') or ''}"},
    lambda base: {**base, "priority": "high"},
    lambda base: {**base, "context": "additional context"},
    lambda base: {**base, "format": "json"},
]


def generate_variation(base_input: dict[str, Any], index: int) -> dict[str, Any]:
    """Apply the transform selected by ``index`` (cycling) to a copy of the input."""
    return _VARIATIONS[index % len(_VARIATIONS)](base_input)


def expected_trajectory_for(node_types: list[str]) -> list[str]:
    """One canonical step per known node type present, in fixed order."""
    present = set(node_types)
    return [step for node_type, step in TRAJECTORY_STEPS if node_type in present]


def generate_test_cases(
    config: GenerationConfig,
    id_generator: IdGenerator | None = None,
) -> list[DataPoint]:
    """Produce standard, edge and negative data points for *config*."""
    base_input = config.sample_input or DEFAULT_SAMPLE_INPUT
    trajectory = expected_trajectory_for(config.node_types) or None

    data_points: list[DataPoint] = []

    for i in range(math.ceil(config.count * STANDARD_SHARE)):
        data_points.append(
            new_data_point(
                generate_variation(base_input, i),
                # Placeholder oracle; replace with real expectations before scoring.
                {"response": f"Expected response for variation {i + 1}"},
                list(trajectory) if trajectory else None,
                source=DatasetSource.generated,
                id_generator=id_generator,
            )
        )

    if config.include_edge_cases:
        edge_count = min(math.ceil(config.count * EDGE_CASE_SHARE), len(EDGE_CASES))
        for template, description in EDGE_CASES[:edge_count]:
            data_points.append(
                new_data_point(
                    dict(template),
                    {
                        "response": f"Edge case response: {description}",
                        "isEdgeCase": True,
                    },
                    source=DatasetSource.generated,
                    id_generator=id_generator,
                )
            )

    if config.include_negative_cases:
        negative_count = min(
            math.ceil(config.count * NEGATIVE_CASE_SHARE), len(NEGATIVE_CASES)
        )
        for template, description in NEGATIVE_CASES[:negative_count]:
            data_points.append(
                new_data_point(
                    dict(template),
                    {"error": f"Should handle: {description}", "isNegativeCase": True},
                    source=DatasetSource.generated,
                    id_generator=id_generator,
                )
            )

    return data_points
