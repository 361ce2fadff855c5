"""Tests for the blob stores, DatasetStore and RunStore."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from evalstudio.errors import DatasetNotFoundError, RunNotFoundError
from evalstudio.datasets.factory import new_data_point
from evalstudio.ids import SequentialIdGenerator
from evalstudio.models.dataset import DatasetSource
from evalstudio.models.run import (
    EvaluationRun,
    OfflineRunConfig,
    OnlineEvaluationConfig,
)
from evalstudio.storage.blob_store import JsonFileBlobStore, MemoryBlobStore
from evalstudio.storage.dataset_store import DatasetStore
from evalstudio.storage.run_store import MAX_RUNS, RunStore


def _make_run(run_id: str) -> EvaluationRun:
    return EvaluationRun(
        id=run_id,
        name=f"run {run_id}",
        config=OfflineRunConfig(dataset_id="ds", evaluators=[]),
    )


class TestJsonFileBlobStore:
    def test_missing_key_is_none(self, tmp_path: Path):
        assert JsonFileBlobStore(tmp_path / ".evalstudio").get("datasets") is None

    def test_set_creates_directory_and_file(self, tmp_path: Path):
        store = JsonFileBlobStore(tmp_path / ".evalstudio")
        store.set("datasets", "[]")
        assert (tmp_path / ".evalstudio" / "datasets.json").read_text() == "[]"
        assert store.get("datasets") == "[]"

    def test_no_temp_file_left_behind(self, tmp_path: Path):
        store = JsonFileBlobStore(tmp_path)
        store.set("evaluation_runs", "[]")
        assert not list(tmp_path.glob("*.tmp"))

    def test_rejects_path_like_keys(self, tmp_path: Path):
        with pytest.raises(ValueError):
            JsonFileBlobStore(tmp_path).get("../escape")


class TestDatasetStore:
    def _store(self) -> DatasetStore:
        return DatasetStore(MemoryBlobStore(), id_generator=SequentialIdGenerator("ds"))

    def test_create_does_not_persist(self):
        store = self._store()
        dataset = store.create("smoke")
        assert dataset.id == "ds-1"
        assert dataset.data_points == []
        assert store.load() == []

    def test_save_then_load(self):
        store = self._store()
        dataset = store.create("smoke", "first", source=DatasetSource.generated)
        dataset.data_points.append(new_data_point({"q": "hi"}))
        store.save(dataset)

        [loaded] = store.load()
        assert loaded.name == "smoke"
        assert loaded.description == "first"
        assert loaded.source == DatasetSource.generated
        assert loaded.data_points[0].input == {"q": "hi"}

    def test_save_existing_replaces_in_place(self):
        store = self._store()
        first = store.save(store.create("a"))
        store.save(store.create("b"))

        renamed = first.model_copy(update={"name": "a2"})
        stored = store.save(renamed)

        assert [d.name for d in store.load()] == ["a2", "b"]
        assert stored.updated_at >= first.updated_at
        assert stored.created_at == first.created_at

    def test_get_and_require(self):
        store = self._store()
        saved = store.save(store.create("a"))
        assert store.get(saved.id) == saved
        assert store.get("nope") is None
        with pytest.raises(DatasetNotFoundError):
            store.require("nope")

    def test_delete(self):
        store = self._store()
        saved = store.save(store.create("a"))
        assert store.delete(saved.id) is True
        assert store.delete(saved.id) is False
        assert store.load() == []

    def test_persisted_as_json_list(self, tmp_path: Path):
        store = DatasetStore(JsonFileBlobStore(tmp_path))
        store.save(store.create("on disk"))
        raw = json.loads((tmp_path / "datasets.json").read_text())
        assert raw[0]["name"] == "on disk"
        assert "data_points" in raw[0]


class TestRunStore:
    def test_new_runs_go_first(self):
        store = RunStore(MemoryBlobStore())
        store.save_run(_make_run("r1"))
        store.save_run(_make_run("r2"))
        assert [r.id for r in store.load_runs()] == ["r2", "r1"]
        assert store.latest_run().id == "r2"

    def test_upsert_keeps_position(self):
        store = RunStore(MemoryBlobStore())
        store.save_run(_make_run("r1"))
        store.save_run(_make_run("r2"))
        store.save_run(_make_run("r1").model_copy(update={"name": "renamed"}))
        runs = store.load_runs()
        assert [r.id for r in runs] == ["r2", "r1"]
        assert runs[1].name == "renamed"

    def test_history_capped(self):
        store = RunStore(MemoryBlobStore())
        for i in range(MAX_RUNS + 5):
            store.save_run(_make_run(f"r{i}"))
        runs = store.load_runs()
        assert len(runs) == MAX_RUNS
        assert runs[0].id == f"r{MAX_RUNS + 4}"
        assert store.get_run("r0") is None

    def test_require_and_delete(self):
        store = RunStore(MemoryBlobStore())
        store.save_run(_make_run("r1"))
        assert store.require_run("r1").id == "r1"
        assert store.delete_run("r1") is True
        with pytest.raises(RunNotFoundError):
            store.require_run("r1")

    def test_empty_store(self):
        store = RunStore(MemoryBlobStore())
        assert store.load_runs() == []
        assert store.latest_run() is None

    def test_online_configs_upsert(self):
        store = RunStore(MemoryBlobStore())
        store.save_online_config(OnlineEvaluationConfig(id="c1", name="prod"))
        store.save_online_config(OnlineEvaluationConfig(id="c1", name="prod", enabled=True))
        [config] = store.load_online_configs()
        assert config.enabled is True
