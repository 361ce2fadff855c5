"""Tests for synthetic test-case generation, validation and capture."""

from __future__ import annotations

from evalstudio.datasets.generator import (
    EDGE_CASES,
    GenerationConfig,
    expected_trajectory_for,
    generate_test_cases,
    generate_variation,
)
from evalstudio.datasets.validation import (
    TestRunCapture,
    capture_from_test_run,
    validate_dataset,
)
from evalstudio.datasets.factory import new_data_point
from evalstudio.ids import SequentialIdGenerator
from evalstudio.models.dataset import Dataset, DatasetSource


def _is_edge(dp) -> bool:
    return bool(dp.expected_output and dp.expected_output.get("isEdgeCase"))


def _is_negative(dp) -> bool:
    return bool(dp.expected_output and dp.expected_output.get("isNegativeCase"))


class TestGenerateTestCases:
    def test_default_count_buckets(self):
        points = generate_test_cases(GenerationConfig(count=10))
        standard = [p for p in points if not _is_edge(p) and not _is_negative(p)]
        assert len(points) == 11
        assert len(standard) == 6
        assert len([p for p in points if _is_edge(p)]) == 3
        assert len([p for p in points if _is_negative(p)]) == 2

    def test_bucket_caps(self):
        points = generate_test_cases(GenerationConfig(count=100))
        assert len([p for p in points if _is_edge(p)]) == 5
        assert len([p for p in points if _is_negative(p)]) == 3
        assert len(points) == 68

    def test_toggles(self):
        points = generate_test_cases(
            GenerationConfig(count=10, include_edge_cases=False, include_negative_cases=False)
        )
        assert len(points) == 6

    def test_zero_count(self):
        assert generate_test_cases(GenerationConfig(count=0)) == []

    def test_standard_cases_use_sample_and_trajectory(self):
        points = generate_test_cases(
            GenerationConfig(
                sample_input={"query": "weather"},
                node_types=["llm", "trigger", "custom"],
                count=2,
                include_edge_cases=False,
                include_negative_cases=False,
            ),
            id_generator=SequentialIdGenerator("g"),
        )
        first, second = points
        assert first.id == "g-1"
        assert first.input == {"query": "weather", "variation": "standard"}
        assert first.expected_output == {"response": "Expected response for variation 1"}
        assert first.expected_trajectory == ["trigger-1", "llm-1"]
        assert second.input == {"query": "Modified: weather"}
        assert first.metadata.source == DatasetSource.generated

    def test_edge_cases_come_from_templates(self):
        points = generate_test_cases(
            GenerationConfig(count=4, include_negative_cases=False)
        )
        [edge] = [p for p in points if _is_edge(p)]
        template, description = EDGE_CASES[0]
        assert edge.input == template
        assert edge.expected_output["response"] == f"Edge case response: {description}"
        assert edge.expected_trajectory is None

    def test_no_known_node_types_means_no_trajectory(self):
        points = generate_test_cases(GenerationConfig(node_types=["custom"], count=1))
        assert points[0].expected_trajectory is None


class TestHelpers:
    def test_variations_cycle(self):
        base = {"query": "q"}
        assert generate_variation(base, 2) == {"query": "q", "priority": "high"}
        assert generate_variation(base, 7) == generate_variation(base, 2)
        assert base == {"query": "q"}

    def test_trajectory_order_is_fixed(self):
        assert expected_trajectory_for(["output", "retrieval", "trigger"]) == [
            "trigger-1",
            "retrieval-1",
            "output-1",
        ]


class TestValidateDataset:
    def test_valid_dataset(self):
        dataset = Dataset(
            id="d", name="ok", data_points=[new_data_point({"q": 1}, {"a": 1})]
        )
        result = validate_dataset(dataset)
        assert result.is_valid is True
        assert result.errors == []
        assert result.warnings == []

    def test_blank_name_and_no_points(self):
        result = validate_dataset(Dataset(id="d", name="   "))
        assert result.is_valid is False
        assert result.errors == [
            "Dataset name is required",
            "Dataset must have at least one data point",
        ]

    def test_empty_input_and_missing_expectations(self):
        dataset = Dataset(
            id="d",
            name="x",
            data_points=[new_data_point({"q": 1}), new_data_point({}, {"a": 1})],
        )
        result = validate_dataset(dataset)
        assert result.errors == ["Data point 2: Input is required"]
        assert result.warnings == ["Data point 1: No expected output or trajectory defined"]


class TestCaptureFromTestRun:
    def test_appends_test_run_point(self):
        dataset = Dataset(id="d", name="x", updated_at="2020-01-01T00:00:00+00:00")
        captured = capture_from_test_run(
            dataset,
            TestRunCapture(input={"q": "hi"}, output={"a": "yo"}, trajectory=["llm-1"]),
            id_generator=SequentialIdGenerator("cap"),
        )
        assert dataset.data_points == []
        [dp] = captured.data_points
        assert dp.id == "cap-1"
        assert dp.expected_output == {"a": "yo"}
        assert dp.expected_trajectory == ["llm-1"]
        assert dp.metadata.source == DatasetSource.test_run
        assert captured.updated_at > dataset.updated_at
