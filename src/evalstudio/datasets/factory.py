"""Data point construction with id and provenance stamping."""

from __future__ import annotations

from typing import Any

from evalstudio.ids import IdGenerator, default_id_generator
from evalstudio.models.dataset import DataPoint, DataPointMetadata, DatasetSource


def new_data_point(
    input: dict[str, Any],
    expected_output: dict[str, Any] | None = None,
    expected_trajectory: list[str] | None = None,
    context: str | None = None,
    source: DatasetSource = DatasetSource.manual,
    id_generator: IdGenerator | None = None,
) -> DataPoint:
    """Create a DataPoint with a fresh id and ``metadata.created_at`` of now."""
    generate = id_generator or default_id_generator
    return DataPoint(
        id=generate(),
        input=input,
        expected_output=expected_output,
        expected_trajectory=expected_trajectory,
        context=context,
        metadata=DataPointMetadata(source=source),
    )
