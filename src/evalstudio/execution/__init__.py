"""Run orchestration: producers of actual outputs and the run executor."""

from evalstudio.execution.executor import RunExecutor
from evalstudio.execution.producer import (
    ProducedOutput,
    Producer,
    RecordedOutputError,
    RecordedOutputs,
)

__all__ = [
    "ProducedOutput",
    "Producer",
    "RecordedOutputError",
    "RecordedOutputs",
    "RunExecutor",
]
