"""Tests for evalstudio.ids id generation."""

from __future__ import annotations

import re

from evalstudio.ids import IdGenerator, SequentialIdGenerator, default_id_generator


class TestIdGenerator:
    def test_format_is_millis_and_base36_suffix(self):
        assert re.fullmatch(r"\d{13}-[0-9a-z]{9}", IdGenerator()())

    def test_ids_are_distinct(self):
        ids = {default_id_generator() for _ in range(200)}
        assert len(ids) == 200


class TestSequentialIdGenerator:
    def test_counts_from_one(self):
        gen = SequentialIdGenerator("dp")
        assert [gen(), gen(), gen()] == ["dp-1", "dp-2", "dp-3"]

    def test_generators_are_independent(self):
        a, b = SequentialIdGenerator(), SequentialIdGenerator()
        a()
        assert b() == "id-1"
