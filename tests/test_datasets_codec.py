"""Tests for CSV / JSON / JSONL import and export."""

from __future__ import annotations

import csv
import io
import json
from pathlib import Path

from evalstudio.datasets.codec import (
    export_to_csv,
    export_to_json,
    import_file,
    parse_csv,
    parse_json,
    parse_jsonl,
)
from evalstudio.datasets.factory import new_data_point
from evalstudio.ids import SequentialIdGenerator
from evalstudio.models.dataset import Dataset, DatasetSource


def _make_dataset() -> Dataset:
    gen = SequentialIdGenerator("dp")
    return Dataset(
        id="ds-1",
        name="support",
        description="support questions",
        data_points=[
            new_data_point(
                {"query": 'say "hi", please'},
                {"response": "hi"},
                ["trigger-1", "llm-1"],
                "greeting",
                id_generator=gen,
            ),
            new_data_point({"query": "bare"}, id_generator=gen),
        ],
    )


class TestParseCsv:
    def test_basic_rows(self):
        content = (
            "input,expected_output,expected_trajectory,context\n"
            '"{""query"": ""hello""}","{""response"": ""hi""}","a, b,,c",docs\n'
            "plain text,,,\n"
        )
        result = parse_csv(content)

        assert result.success is True
        assert result.errors == []
        first, second = result.data_points
        assert first.input == {"query": "hello"}
        assert first.expected_output == {"response": "hi"}
        assert first.expected_trajectory == ["a", "b", "c"]
        assert first.context == "docs"
        assert first.metadata.source == DatasetSource.import_
        assert second.input == {"value": "plain text"}
        assert second.expected_output is None
        assert second.expected_trajectory is None
        assert second.context is None

    def test_header_aliases_case_insensitive(self):
        content = "INPUT,ExpectedOutput,Trajectory\nq,answer,x\n"
        [dp] = parse_csv(content).data_points
        assert dp.input == {"value": "q"}
        assert dp.expected_output == {"value": "answer"}
        assert dp.expected_trajectory == ["x"]

    def test_header_only_is_fatal(self):
        result = parse_csv("input,expected_output\n")
        assert result.success is False
        assert result.data_points == []
        assert result.errors == ["CSV must have header row and at least one data row"]

    def test_missing_input_column_is_fatal(self):
        result = parse_csv("question,answer\nq,a\n")
        assert result.success is False
        assert result.errors == ['CSV must have an "input" column']

    def test_empty_input_cell_becomes_empty_record(self):
        [dp] = parse_csv('input,context\n"",ctx\n').data_points
        assert dp.input == {}

    def test_malformed_json_cell_kept_as_text(self):
        [dp] = parse_csv('input\n"{not json}"\n').data_points
        assert dp.input == {"value": "{not json}"}

    def test_extra_values_warn(self):
        result = parse_csv("input\na,b\n")
        assert result.success is True
        assert len(result.warnings) == 1
        assert result.warnings[0].startswith("Row 2:")

    def test_blank_rows_skipped(self):
        result = parse_csv("input\na\n\nb\n")
        assert [dp.input["value"] for dp in result.data_points] == ["a", "b"]

    def test_injected_ids(self):
        result = parse_csv("input\na\nb\n", id_generator=SequentialIdGenerator("x"))
        assert [dp.id for dp in result.data_points] == ["x-1", "x-2"]


class TestParseJson:
    def test_array_with_aliases(self):
        content = json.dumps(
            [
                {"input": {"q": 1}, "expectedOutput": {"a": 2}, "trajectory": ["s1", 2]},
                {"query": "text", "expected": "plain", "context": {"k": "v"}},
            ]
        )
        result = parse_json(content)
        first, second = result.data_points
        assert first.input == {"q": 1}
        assert first.expected_output == {"a": 2}
        assert first.expected_trajectory == ["s1", "2"]
        assert second.input == {"value": "text"}
        assert second.expected_output == {"value": "plain"}
        assert second.context == '{"k": "v"}'

    def test_wrapped_in_data_points_key(self):
        content = json.dumps({"name": "x", "dataPoints": [{"input": {"q": "a"}}]})
        [dp] = parse_json(content).data_points
        assert dp.input == {"q": "a"}

    def test_wrapped_in_data_key(self):
        [dp] = parse_json(json.dumps({"data": [{"input": {"q": "a"}}]})).data_points
        assert dp.input == {"q": "a"}

    def test_single_object_without_input_key_is_the_input(self):
        [dp] = parse_json(json.dumps({"city": "Paris"})).data_points
        assert dp.input == {"city": "Paris"}

    def test_null_item_is_recorded_and_siblings_kept(self):
        result = parse_json('[{"input": {"q": 1}}, null, {"input": {"q": 3}}]')
        assert result.success is True
        assert len(result.data_points) == 2
        assert result.errors == ["Item 2: item is null"]

    def test_invalid_json_is_fatal(self):
        result = parse_json("{nope")
        assert result.success is False
        assert result.errors[0].startswith("Invalid JSON:")

    def test_empty_array_is_not_success(self):
        result = parse_json("[]")
        assert result.success is False
        assert result.errors == []


class TestParseJsonl:
    def test_lines_and_bad_line(self):
        content = '{"input": {"q": 1}}\n\nnot json\n{"query": "x"}\n'
        result = parse_jsonl(content)
        assert len(result.data_points) == 2
        assert len(result.errors) == 1
        assert result.errors[0].startswith("Line 3:")


class TestImportFile:
    def test_dispatch_on_suffix(self, tmp_path: Path):
        path = tmp_path / "cases.jsonl"
        path.write_text('{"input": {"q": 1}}\n', encoding="utf-8")
        assert import_file(path).success is True

    def test_unsupported_suffix(self, tmp_path: Path):
        path = tmp_path / "cases.xml"
        path.write_text("<x/>", encoding="utf-8")
        result = import_file(path)
        assert result.success is False
        assert "Unsupported file type" in result.errors[0]


class TestExport:
    def test_csv_quotes_data_fields_not_header(self):
        text = export_to_csv(_make_dataset())
        lines = text.split("\n")
        assert lines[0] == "input,expected_output,expected_trajectory,context"
        assert lines[1].startswith('"')
        assert not text.endswith("\n")
        assert len(lines) == 3

    def test_csv_round_trip(self):
        dataset = _make_dataset()
        result = parse_csv(export_to_csv(dataset))
        assert result.errors == []
        for original, parsed in zip(dataset.data_points, result.data_points):
            assert parsed.input == original.input
            assert parsed.expected_output == original.expected_output
            assert parsed.expected_trajectory == original.expected_trajectory
            assert parsed.context == original.context

    def test_csv_embedded_quotes_are_doubled(self):
        rows = list(csv.reader(io.StringIO(export_to_csv(_make_dataset()))))
        assert json.loads(rows[1][0]) == {"query": 'say "hi", please'}

    def test_json_omits_absent_fields(self):
        payload = json.loads(export_to_json(_make_dataset()))
        assert payload["name"] == "support"
        assert payload["description"] == "support questions"
        assert "exportedAt" in payload
        first, second = payload["dataPoints"]
        assert first == {
            "input": {"query": 'say "hi", please'},
            "expected_output": {"response": "hi"},
            "expected_trajectory": ["trigger-1", "llm-1"],
            "context": "greeting",
        }
        assert second == {"input": {"query": "bare"}}

    def test_json_export_reimports(self):
        result = parse_json(export_to_json(_make_dataset()))
        assert [dp.input for dp in result.data_points] == [
            {"query": 'say "hi", please'},
            {"query": "bare"},
        ]
