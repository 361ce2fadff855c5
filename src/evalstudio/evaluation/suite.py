"""Evaluator suites -- evaluator configs loaded from YAML."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import TypeAdapter, ValidationError

from evalstudio.errors import EvalStudioError
from evalstudio.models.evaluator import EvaluatorConfig, EvaluatorType

_SUITE_ADAPTER = TypeAdapter(list[EvaluatorConfig])


class SuiteLoadError(EvalStudioError):
    """Raised when an evaluator suite file is missing or malformed."""


def parse_suite(raw: Any, source: str = "<suite>") -> list[EvaluatorConfig]:
    """Validate a parsed suite: a list of evaluator mappings or ``{evaluators: [...]}``.

    Entries may give only ``type``; the remaining fields come from the
    evaluator defaults and a partial ``config`` is merged over them.
    """
    if isinstance(raw, dict) and "evaluators" in raw:
        raw = raw["evaluators"]
    if not isinstance(raw, list):
        raise SuiteLoadError(f"{source}: expected a list of evaluators")
    try:
        return _SUITE_ADAPTER.validate_python(raw)
    except ValidationError as exc:
        raise SuiteLoadError(f"{source}: invalid evaluator suite\n{exc}") from exc


def load_suite(path: Path) -> list[EvaluatorConfig]:
    """Load an evaluator suite from a YAML file."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SuiteLoadError(f"Cannot read evaluator suite {path}: {exc}") from exc
    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise SuiteLoadError(f"{path}: invalid YAML: {exc}") from exc
    return parse_suite(raw, source=str(path))


def default_suite(types: list[str]) -> list[EvaluatorConfig]:
    """One default-configured evaluator per type tag."""
    return [EvaluatorConfig.default(EvaluatorType(t)) for t in types]
