"""Producer contract -- where actual outputs and trajectories come from.

The execution engine that actually runs an agent lives outside this
package. A producer is any callable that takes a DataPoint and returns
a ProducedOutput (or an awaitable of one). RecordedOutputs replays
outputs captured earlier into a JSON or JSONL file.
"""

from __future__ import annotations

import json
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any, Union

from pydantic import BaseModel, Field

from evalstudio.models.dataset import DataPoint, Dataset
from evalstudio.models.execution import ExecutionStep


class ProducedOutput(BaseModel):
    """What the agent did for one data point."""

    actual_output: dict[str, Any] = Field(default_factory=dict)
    actual_trajectory: list[str] = Field(default_factory=list)
    execution_trace: list[ExecutionStep] | None = None


Producer = Callable[[DataPoint], Union[ProducedOutput, Awaitable[ProducedOutput]]]

_ID_KEYS = ("data_point_id", "dataPointId", "id")
_OUTPUT_KEYS = ("actual_output", "actualOutput", "output")
_TRAJECTORY_KEYS = ("actual_trajectory", "actualTrajectory", "trajectory")
_TRACE_KEYS = ("execution_trace", "executionTrace", "trace")


class RecordedOutputError(LookupError):
    """Raised when no recorded output exists for a data point."""


def _first(entry: dict[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if entry.get(key) is not None:
            return entry[key]
    return None


def _to_produced(entry: Any) -> ProducedOutput:
    if not isinstance(entry, dict):
        return ProducedOutput(actual_output={"value": entry})
    output = _first(entry, _OUTPUT_KEYS)
    if output is None:
        output = {}
    elif not isinstance(output, dict):
        output = {"value": output}
    return ProducedOutput(
        actual_output=output,
        actual_trajectory=[str(s) for s in _first(entry, _TRAJECTORY_KEYS) or []],
        execution_trace=_first(entry, _TRACE_KEYS),
    )


class RecordedOutputs:
    """Producer backed by previously captured outputs.

    Entries are matched to data points by id. Entries that carry no id
    are matched by position against the dataset they were loaded for.
    """

    def __init__(self, outputs: dict[str, ProducedOutput]) -> None:
        self._outputs = outputs

    def __len__(self) -> int:
        return len(self._outputs)

    def __call__(self, data_point: DataPoint) -> ProducedOutput:
        try:
            return self._outputs[data_point.id]
        except KeyError:
            raise RecordedOutputError(
                f"No recorded output for data point '{data_point.id}'"
            ) from None

    @classmethod
    def from_entries(
        cls, entries: Any, dataset: Dataset | None = None
    ) -> RecordedOutputs:
        """Build from a mapping of id -> entry, or a list of entries."""
        if isinstance(entries, dict):
            return cls({str(k): _to_produced(v) for k, v in entries.items()})

        if not isinstance(entries, list):
            raise ValueError("Recorded outputs must be an object or a list")

        positional_ids = [dp.id for dp in dataset.data_points] if dataset else []
        outputs: dict[str, ProducedOutput] = {}
        for index, entry in enumerate(entries):
            key = _first(entry, _ID_KEYS) if isinstance(entry, dict) else None
            if key is None:
                if index >= len(positional_ids):
                    raise ValueError(
                        f"Recorded output {index + 1} has no data point id and "
                        "no positional match in the dataset"
                    )
                key = positional_ids[index]
            outputs[str(key)] = _to_produced(entry)
        return cls(outputs)

    @classmethod
    def load(cls, path: Path, dataset: Dataset | None = None) -> RecordedOutputs:
        """Read recorded outputs from a ``.json`` or ``.jsonl`` file."""
        text = path.read_text(encoding="utf-8")
        if path.suffix.lower() == ".jsonl":
            entries: Any = [json.loads(line) for line in text.splitlines() if line.strip()]
        else:
            entries = json.loads(text)
        return cls.from_entries(entries, dataset)
