"""CSV / JSON / JSONL import and CSV / JSON export of data points.

Import never fails fast at the row or item level. Only a structural
problem (no header plus data row, no ``input`` column, unparseable
top-level JSON) is fatal; every other failure is collected into
``errors`` while sibling rows keep being processed.

Canonical columns: input, expected_output, expected_trajectory, context.
"""

from __future__ import annotations

import csv
import io
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import structlog

from evalstudio.datasets.factory import new_data_point
from evalstudio.ids import IdGenerator
from evalstudio.models.dataset import DataPoint, Dataset, DatasetSource

log = structlog.get_logger(__name__)

CANONICAL_COLUMNS = ["input", "expected_output", "expected_trajectory", "context"]

# Accepted (lowercased) header spellings per canonical column.
_COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    "input": ("input",),
    "expected_output": ("expected_output", "expectedoutput"),
    "expected_trajectory": ("expected_trajectory", "trajectory"),
    "context": ("context",),
}

_INPUT_KEYS = ("input", "query")
_EXPECTED_KEYS = ("expected_output", "expectedOutput", "expected", "output")
_TRAJECTORY_KEYS = ("expected_trajectory", "expectedTrajectory", "trajectory")


@dataclass
class ImportResult:
    """Outcome of parsing an import file.

    Attributes:
        success: True once at least one data point was produced.
        data_points: Parsed data points in file order.
        errors: Fatal or per-row/per-item problems.
        warnings: Non-blocking observations.
    """

    success: bool
    data_points: list[DataPoint] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @classmethod
    def failure(cls, message: str) -> ImportResult:
        return cls(success=False, errors=[message])


def _parse_json_or_string(value: str | None) -> Any:
    """Decode a bracket/brace-delimited cell as JSON, else keep the text."""
    if not value:
        return None
    trimmed = value.strip()
    if (trimmed.startswith("{") and trimmed.endswith("}")) or (
        trimmed.startswith("[") and trimmed.endswith("]")
    ):
        try:
            return json.loads(trimmed)
        except json.JSONDecodeError:
            return trimmed
    return trimmed


def _as_record(value: Any) -> dict[str, Any]:
    """Wrap anything that is not a mapping as ``{"value": ...}``."""
    if isinstance(value, dict):
        return value
    return {"value": value}


def _resolve_columns(header: list[str]) -> dict[str, int | None]:
    lowered = [h.strip().lower() for h in header]
    columns: dict[str, int | None] = {}
    for canonical, aliases in _COLUMN_ALIASES.items():
        columns[canonical] = next(
            (i for i, name in enumerate(lowered) if name in aliases), None
        )
    return columns


def _cell(values: list[str], index: int | None) -> str:
    if index is None or index >= len(values):
        return ""
    return values[index].strip()


def _row_to_data_point(
    values: list[str],
    columns: dict[str, int | None],
    id_generator: IdGenerator | None,
) -> DataPoint:
    input_value = _parse_json_or_string(_cell(values, columns["input"]) or "{}")

    expected_output = None
    if columns["expected_output"] is not None:
        parsed = _parse_json_or_string(_cell(values, columns["expected_output"]))
        if parsed is not None:
            expected_output = _as_record(parsed)

    trajectory = None
    trajectory_cell = _cell(values, columns["expected_trajectory"])
    if trajectory_cell:
        trajectory = [s.strip() for s in trajectory_cell.split(",") if s.strip()]

    context = _cell(values, columns["context"]) or None

    return new_data_point(
        _as_record(input_value),
        expected_output,
        trajectory,
        context,
        source=DatasetSource.import_,
        id_generator=id_generator,
    )


def parse_csv(content: str, id_generator: IdGenerator | None = None) -> ImportResult:
    """Parse CSV text with a header row into data points.

    Fields follow standard CSV quoting: comma separated, optionally
    double-quote delimited, with ``""`` for an embedded quote.
    """
    text = content.strip()
    if len(text.splitlines()) < 2:
        return ImportResult.failure(
            "CSV must have header row and at least one data row"
        )

    reader = csv.reader(io.StringIO(text))
    try:
        header = next(reader)
    except csv.Error as exc:
        return ImportResult.failure(f"Invalid CSV header: {exc}")

    columns = _resolve_columns(header)
    if columns["input"] is None:
        return ImportResult.failure('CSV must have an "input" column')

    result = ImportResult(success=False)
    row_number = 1
    while True:
        row_number += 1
        try:
            values = next(reader)
        except StopIteration:
            break
        except csv.Error as exc:
            result.errors.append(f"Row {row_number}: {exc}")
            log.warning("codec.row_failed", row=row_number, reason=str(exc))
            continue

        if not values or (len(values) == 1 and not values[0].strip()):
            continue
        if len(values) > len(header):
            result.warnings.append(
                f"Row {row_number}: {len(values)} values for {len(header)} columns; "
                "extra values ignored"
            )

        try:
            result.data_points.append(
                _row_to_data_point(values, columns, id_generator)
            )
        except (ValueError, TypeError) as exc:
            result.errors.append(f"Row {row_number}: {exc}")
            log.warning("codec.row_failed", row=row_number, reason=str(exc))

    result.success = len(result.data_points) > 0
    log.info(
        "codec.csv_parsed",
        data_points=len(result.data_points),
        errors=len(result.errors),
    )
    return result


def _first_present(item: dict[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = item.get(key)
        if value is not None:
            return value
    return None


def _item_to_data_point(item: Any, id_generator: IdGenerator | None) -> DataPoint:
    if item is None:
        raise ValueError("item is null")

    if isinstance(item, dict):
        input_value = _first_present(item, _INPUT_KEYS)
        if input_value is None:
            input_value = item
        expected = _first_present(item, _EXPECTED_KEYS)
        trajectory = _first_present(item, _TRAJECTORY_KEYS)
        context = item.get("context")
    else:
        input_value, expected, trajectory, context = item, None, None, None

    if context is not None and not isinstance(context, str):
        context = json.dumps(context, ensure_ascii=False)

    return new_data_point(
        _as_record(input_value),
        _as_record(expected) if expected is not None else None,
        [str(step) for step in trajectory] if isinstance(trajectory, list) else None,
        context,
        source=DatasetSource.import_,
        id_generator=id_generator,
    )


def _top_level_items(parsed: Any) -> list[Any]:
    if isinstance(parsed, list):
        return parsed
    if isinstance(parsed, dict):
        for key in ("dataPoints", "data"):
            if isinstance(parsed.get(key), list):
                return parsed[key]
    return [parsed]


def parse_json(content: str, id_generator: IdGenerator | None = None) -> ImportResult:
    """Parse JSON text into data points.

    The top level may be an array, an object with a ``dataPoints`` or
    ``data`` array, or a single object.
    """
    try:
        parsed = json.loads(content)
    except json.JSONDecodeError as exc:
        return ImportResult.failure(f"Invalid JSON: {exc}")

    result = ImportResult(success=False)
    for index, item in enumerate(_top_level_items(parsed), 1):
        try:
            result.data_points.append(_item_to_data_point(item, id_generator))
        except (ValueError, TypeError) as exc:
            result.errors.append(f"Item {index}: {exc}")
            log.warning("codec.item_failed", item=index, reason=str(exc))

    result.success = len(result.data_points) > 0
    log.info(
        "codec.json_parsed",
        data_points=len(result.data_points),
        errors=len(result.errors),
    )
    return result


def parse_jsonl(content: str, id_generator: IdGenerator | None = None) -> ImportResult:
    """Parse one JSON item per line. Blank lines are skipped."""
    result = ImportResult(success=False)
    for line_number, line in enumerate(content.splitlines(), 1):
        if not line.strip():
            continue
        try:
            item = json.loads(line)
        except json.JSONDecodeError as exc:
            result.errors.append(f"Line {line_number}: invalid JSON: {exc}")
            continue
        try:
            result.data_points.append(_item_to_data_point(item, id_generator))
        except (ValueError, TypeError) as exc:
            result.errors.append(f"Line {line_number}: {exc}")

    result.success = len(result.data_points) > 0
    return result


_PARSERS = {
    ".csv": parse_csv,
    ".json": parse_json,
    ".jsonl": parse_jsonl,
}


def import_file(path: Path, id_generator: IdGenerator | None = None) -> ImportResult:
    """Read *path* and dispatch to the parser matching its suffix."""
    parser = _PARSERS.get(path.suffix.lower())
    if parser is None:
        return ImportResult.failure(
            f"Unsupported file type {path.suffix!r}. "
            f"Supported: {sorted(_PARSERS)}"
        )
    return parser(path.read_text(encoding="utf-8"), id_generator=id_generator)


def export_to_csv(dataset: Dataset) -> str:
    """Serialize data points to CSV with every data field quoted.

    The header row is written bare.
    """
    buffer = io.StringIO()
    buffer.write(",".join(CANONICAL_COLUMNS) + "\n")
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for dp in dataset.data_points:
        writer.writerow(
            [
                json.dumps(dp.input, ensure_ascii=False),
                json.dumps(dp.expected_output, ensure_ascii=False)
                if dp.expected_output is not None
                else "",
                ",".join(dp.expected_trajectory) if dp.expected_trajectory else "",
                dp.context or "",
            ]
        )
    return buffer.getvalue().removesuffix("\n")


def export_to_json(dataset: Dataset) -> str:
    """Serialize a dataset to JSON using canonical field names."""
    data_points = []
    for dp in dataset.data_points:
        entry: dict[str, Any] = {"input": dp.input}
        if dp.expected_output is not None:
            entry["expected_output"] = dp.expected_output
        if dp.expected_trajectory is not None:
            entry["expected_trajectory"] = dp.expected_trajectory
        if dp.context is not None:
            entry["context"] = dp.context
        data_points.append(entry)

    payload: dict[str, Any] = {
        "name": dataset.name,
        "description": dataset.description,
        "exportedAt": datetime.now(timezone.utc).isoformat(),
        "dataPoints": data_points,
    }
    return json.dumps(payload, indent=2, ensure_ascii=False)
