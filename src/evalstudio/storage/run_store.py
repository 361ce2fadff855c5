"""Evaluation run history and online evaluation configuration storage.

Runs are kept most-recent-first and capped at MAX_RUNS; older entries
are dropped on save.
"""

from __future__ import annotations

import json

import structlog
from pydantic import TypeAdapter

from evalstudio.errors import RunNotFoundError
from evalstudio.models.run import EvaluationRun, OnlineEvaluationConfig
from evalstudio.storage.blob_store import BlobStore

log = structlog.get_logger(__name__)

MAX_RUNS = 50

_RUN_LIST = TypeAdapter(list[EvaluationRun])
_ONLINE_LIST = TypeAdapter(list[OnlineEvaluationConfig])


class RunStore:
    """Persist EvaluationRun records and online evaluation configs."""

    def __init__(
        self,
        blob_store: BlobStore,
        runs_key: str = "evaluation_runs",
        online_key: str = "online_configs",
        max_runs: int = MAX_RUNS,
    ) -> None:
        self._blob_store = blob_store
        self._runs_key = runs_key
        self._online_key = online_key
        self._max_runs = max_runs

    def load_runs(self) -> list[EvaluationRun]:
        """Return stored runs, most recent first."""
        stored = self._blob_store.get(self._runs_key)
        if not stored:
            return []
        return _RUN_LIST.validate_json(stored)

    def _save_runs(self, runs: list[EvaluationRun]) -> None:
        data = _RUN_LIST.dump_python(runs, mode="json")
        self._blob_store.set(self._runs_key, json.dumps(data, indent=2, ensure_ascii=False))

    def save_run(self, run: EvaluationRun) -> None:
        """Upsert *run*; new runs go to the front of the history."""
        runs = self.load_runs()
        for index, existing in enumerate(runs):
            if existing.id == run.id:
                runs[index] = run
                break
        else:
            runs.insert(0, run)
        dropped = len(runs) - self._max_runs
        if dropped > 0:
            log.debug("run.history_truncated", dropped=dropped)
        self._save_runs(runs[: self._max_runs])
        log.info("run.saved", run_id=run.id, status=run.status.value)

    def get_run(self, run_id: str) -> EvaluationRun | None:
        for run in self.load_runs():
            if run.id == run_id:
                return run
        return None

    def require_run(self, run_id: str) -> EvaluationRun:
        """Like get_run(), but raises RunNotFoundError when absent."""
        run = self.get_run(run_id)
        if run is None:
            raise RunNotFoundError(run_id)
        return run

    def latest_run(self) -> EvaluationRun | None:
        runs = self.load_runs()
        return runs[0] if runs else None

    def delete_run(self, run_id: str) -> bool:
        runs = self.load_runs()
        remaining = [r for r in runs if r.id != run_id]
        self._save_runs(remaining)
        return len(remaining) != len(runs)

    # -- Online evaluation configs --

    def load_online_configs(self) -> list[OnlineEvaluationConfig]:
        stored = self._blob_store.get(self._online_key)
        if not stored:
            return []
        return _ONLINE_LIST.validate_json(stored)

    def save_online_config(self, config: OnlineEvaluationConfig) -> None:
        """Upsert an online config by id."""
        configs = self.load_online_configs()
        for index, existing in enumerate(configs):
            if existing.id == config.id:
                configs[index] = config
                break
        else:
            configs.append(config)
        data = _ONLINE_LIST.dump_python(configs, mode="json")
        self._blob_store.set(self._online_key, json.dumps(data, indent=2, ensure_ascii=False))
