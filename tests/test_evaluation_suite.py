"""Tests for evaluator suite loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from evalstudio.evaluation.suite import SuiteLoadError, default_suite, load_suite, parse_suite
from evalstudio.models.evaluator import EvaluatorType


class TestParseSuite:
    def test_list_of_types(self):
        suite = parse_suite([{"type": "exact_match"}, {"type": "contains", "weight": 2}])
        assert [e.type for e in suite] == [EvaluatorType.exact_match, EvaluatorType.contains]
        assert suite[1].weight == 2.0

    def test_mapping_with_evaluators_key(self):
        suite = parse_suite(
            {"evaluators": [{"type": "json_similarity", "config": {"threshold": 0.5}}]}
        )
        assert suite[0].config["threshold"] == 0.5
        assert suite[0].config["ignoreFields"] == []

    def test_not_a_list(self):
        with pytest.raises(SuiteLoadError, match="expected a list"):
            parse_suite("exact_match")

    def test_invalid_entry(self):
        with pytest.raises(SuiteLoadError, match="invalid evaluator suite"):
            parse_suite([{"type": "bleu"}])


class TestLoadSuite:
    def test_yaml_file(self, tmp_path: Path):
        path = tmp_path / "suite.yaml"
        path.write_text(
            "evaluators:\n"
            "  - type: trajectory_match\n"
            "    weight: 2\n"
            "    config:\n"
            "      strictOrder: false\n"
            "  - type: contains\n"
            "    config:\n"
            "      keywords: [refund, policy]\n",
            encoding="utf-8",
        )
        suite = load_suite(path)
        assert suite[0].weight == 2.0
        assert suite[0].config["strictOrder"] is False
        assert suite[1].config["keywords"] == ["refund", "policy"]
        assert suite[1].name == "Contains Keywords"

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(SuiteLoadError, match="Cannot read"):
            load_suite(tmp_path / "nope.yaml")

    def test_bad_yaml(self, tmp_path: Path):
        path = tmp_path / "bad.yaml"
        path.write_text("evaluators: [unclosed\n", encoding="utf-8")
        with pytest.raises(SuiteLoadError, match="invalid YAML"):
            load_suite(path)


class TestDefaultSuite:
    def test_defaults_per_type(self):
        suite = default_suite(["json_similarity", "trajectory_match"])
        assert [e.name for e in suite] == ["JSON Similarity", "Trajectory Match"]

    def test_unknown_type(self):
        with pytest.raises(ValueError):
            default_suite(["bleu"])
