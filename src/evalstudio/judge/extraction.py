"""Structured score extraction with text-JSON fallback."""

from __future__ import annotations

import json
import re
from typing import Any

from evalstudio.judge.prompt import SCORING_TOOL_NAME
from evalstudio.judge.providers.base import ProviderResponse, ToolCall

_FENCED_JSON = re.compile(r"```json\s*\n(.*?)\n\s*```", re.DOTALL)


def _clamp_scores(args: dict[str, Any]) -> dict[str, Any]:
    for value in args.values():
        if isinstance(value, dict) and isinstance(value.get("score"), (int, float)):
            value["score"] = max(0.0, min(1.0, float(value["score"])))
    return args


def extract_scores_from_tool_call(tool_calls: list[ToolCall]) -> dict[str, Any] | None:
    """Arguments of the first score_criteria call, scores clamped to [0, 1]."""
    for tc in tool_calls:
        if tc.name == SCORING_TOOL_NAME and isinstance(tc.arguments, dict):
            return _clamp_scores(tc.arguments)
    return None


def extract_json_from_text(text: str | None) -> dict[str, Any] | None:
    """Fallback: full-text parse, then outermost braces, then a ```json block."""
    if not text:
        return None

    candidates = [text]
    first, last = text.find("{"), text.rfind("}")
    if first != -1 and last > first:
        candidates.append(text[first : last + 1])
    match = _FENCED_JSON.search(text)
    if match:
        candidates.append(match.group(1))

    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        except ValueError:
            continue
        if isinstance(parsed, dict):
            return _clamp_scores(parsed)
    return None


def extract_scores(
    response: ProviderResponse, criteria: list[str]
) -> dict[str, Any] | None:
    """Per-criterion ``{score, reasoning}`` from a judge response, or None.

    A result only counts when it names at least one requested criterion.
    """
    for scores in (
        extract_scores_from_tool_call(response.tool_calls),
        extract_json_from_text(response.content),
    ):
        if scores is not None and any(name in scores for name in criteria):
            return scores
    return None
