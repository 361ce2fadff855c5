"""Id generation services.

Ids are ``<epoch-ms>-<9 base36 chars>``: unique enough for a single
session store, with no ordering guarantee beyond the millisecond prefix.
"""

from __future__ import annotations

import itertools
import secrets
import time

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


class IdGenerator:
    """Time-based id generator with a random suffix."""

    def __call__(self) -> str:
        millis = int(time.time() * 1000)
        suffix = "".join(secrets.choice(_BASE36) for _ in range(9))
        return f"{millis}-{suffix}"


class SequentialIdGenerator(IdGenerator):
    """Deterministic generator yielding ``<prefix>-1``, ``<prefix>-2``, ..."""

    def __init__(self, prefix: str = "id") -> None:
        self._prefix = prefix
        self._counter = itertools.count(1)

    def __call__(self) -> str:
        return f"{self._prefix}-{next(self._counter)}"


default_id_generator = IdGenerator()
