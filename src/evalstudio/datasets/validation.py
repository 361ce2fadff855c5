"""Advisory dataset checks and capture of observed runs as data points."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from evalstudio.datasets.factory import new_data_point
from evalstudio.ids import IdGenerator
from evalstudio.models.dataset import Dataset, DatasetSource, utc_now


class DatasetValidation(BaseModel):
    """Errors should block a save; warnings are informational."""

    is_valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class TestRunCapture(BaseModel):
    """An observed execution to be recorded as a regression case."""

    __test__ = False

    input: dict[str, Any]
    output: dict[str, Any] | None = None
    trajectory: list[str] | None = None
    timestamp: str = Field(default_factory=utc_now)


def validate_dataset(dataset: Dataset) -> DatasetValidation:
    errors: list[str] = []
    warnings: list[str] = []

    if not dataset.name or not dataset.name.strip():
        errors.append("Dataset name is required")

    if not dataset.data_points:
        errors.append("Dataset must have at least one data point")

    for i, dp in enumerate(dataset.data_points, 1):
        if not dp.input:
            errors.append(f"Data point {i}: Input is required")
        if dp.expected_output is None and dp.expected_trajectory is None:
            warnings.append(f"Data point {i}: No expected output or trajectory defined")

    return DatasetValidation(is_valid=not errors, errors=errors, warnings=warnings)


def capture_from_test_run(
    dataset: Dataset,
    capture: TestRunCapture,
    id_generator: IdGenerator | None = None,
) -> Dataset:
    """Return a copy of *dataset* with the capture appended as a test_run point."""
    data_point = new_data_point(
        capture.input,
        capture.output,
        capture.trajectory,
        source=DatasetSource.test_run,
        id_generator=id_generator,
    )
    return dataset.model_copy(
        update={
            "data_points": [*dataset.data_points, data_point],
            "updated_at": utc_now(),
        }
    )
