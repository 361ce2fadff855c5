"""Locate the project and open its stores for a CLI command."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from evalstudio.models.config import ProjectConfig, find_project_root, load_project_config
from evalstudio.storage.blob_store import JsonFileBlobStore
from evalstudio.storage.dataset_store import DatasetStore
from evalstudio.storage.run_store import RunStore


@dataclass
class Project:
    root: Path
    config: ProjectConfig
    datasets: DatasetStore
    runs: RunStore

    @property
    def storage_path(self) -> Path:
        return self.root / self.config.storage_dir


def open_project(start: Path | None = None) -> Project:
    """Find the project root, load evalstudio.yaml and build file-backed stores."""
    root = find_project_root(start)
    config = load_project_config(root)
    blob_store = JsonFileBlobStore(root / config.storage_dir)
    return Project(
        root=root,
        config=config,
        datasets=DatasetStore(blob_store),
        runs=RunStore(blob_store),
    )
