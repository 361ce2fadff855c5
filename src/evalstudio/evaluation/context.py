"""Per-data-point context handed to every evaluator."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from evalstudio.models.execution import ExecutionStep


@dataclass
class EvaluationContext:
    """What an evaluator may look at besides actual and expected output.

    Attributes:
        input: The data point's input record.
        trajectory: Step ids the execution actually visited.
        expected_trajectory: Step ids the data point expects, if any.
        context_used: Grounding text supplied with the data point.
        execution_trace: Per-step records from the upstream producer.
    """

    input: dict[str, Any] = field(default_factory=dict)
    trajectory: list[str] = field(default_factory=list)
    expected_trajectory: list[str] | None = None
    context_used: str | None = None
    execution_trace: list[ExecutionStep] | None = None
