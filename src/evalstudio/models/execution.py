"""Execution trace model supplied by the upstream execution engine."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ExecutionStep(BaseModel):
    """A single node execution recorded while the agent ran.

    Accepts both snake_case and the engine's camelCase keys
    (``nodeId``, ``durationMs``, ...).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    node_id: str
    node_name: str = ""
    node_type: str = ""
    input: Any = None
    output: Any = None
    duration_ms: float = 0.0
    timestamp: str = ""
