"""Text helpers shared by the evaluators and the heuristic judge."""

from __future__ import annotations

import json
from typing import Any


def stringify(value: Any) -> str:
    """Render a value as a comparable string.

    Strings pass through; None is empty; booleans are lowercase; integral
    floats drop the fractional part; structures become canonical JSON.
    """
    if isinstance(value, str):
        return value
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list)):
        return json.dumps(value, sort_keys=True, ensure_ascii=False, separators=(",", ":"))
    return str(value)


def text_content(value: Any) -> str:
    """Flatten the textual content of a value, ignoring structure and keys."""
    if isinstance(value, dict):
        return " ".join(t for t in (text_content(v) for v in value.values()) if t)
    if isinstance(value, list):
        return " ".join(t for t in (text_content(v) for v in value) if t)
    return stringify(value)


def string_similarity(a: str, b: str) -> float:
    """Cheap similarity in [0, 1].

    Containment scores the length ratio; otherwise the Jaccard overlap of
    the (lowercased) character sets.
    """
    if a == b:
        return 1.0
    if not a or not b:
        return 0.0

    longer, shorter = (a, b) if len(a) > len(b) else (b, a)
    if shorter in longer:
        return len(shorter) / len(longer)

    a_chars = set(a.lower())
    b_chars = set(b.lower())
    return len(a_chars & b_chars) / len(a_chars | b_chars)


def tokenize(text: str) -> set[str]:
    """Whitespace-split words longer than three characters."""
    return {word for word in text.split() if len(word) > 3}
