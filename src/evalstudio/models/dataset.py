"""Dataset and data point models.

A dataset is a named, ordered collection of data points. Each data point
holds an input record and, optionally, the output and execution path the
agent is expected to produce for it.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


def utc_now() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


class DatasetSource(str, Enum):
    """Where a dataset, or a single data point, came from."""

    manual = "manual"
    import_ = "import"
    generated = "generated"
    test_run = "test_run"


class DataPointMetadata(BaseModel):
    """Provenance of a single data point."""

    source: DatasetSource = DatasetSource.manual
    created_at: str = Field(default_factory=utc_now)
    tags: list[str] = Field(default_factory=list)


class DataPoint(BaseModel):
    """One test case: an input plus optional expectations."""

    id: str
    input: dict[str, Any]
    expected_output: dict[str, Any] | None = None
    expected_trajectory: list[str] | None = None
    context: str | None = None
    metadata: DataPointMetadata = Field(default_factory=DataPointMetadata)


class Dataset(BaseModel):
    """A named, ordered collection of data points.

    ``id`` is assigned at creation and never changes. Updates replace the
    whole record on save; there is no partial patch API.
    """

    id: str
    name: str
    description: str | None = None
    data_points: list[DataPoint] = Field(default_factory=list)
    created_at: str = Field(default_factory=utc_now)
    updated_at: str = Field(default_factory=utc_now)
    source: DatasetSource = DatasetSource.manual
