"""Project configuration model for evalstudio.

Captures evalstudio.yaml fields with sensible defaults for
project-level settings like storage location, parallelism and
the judge backend.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

CONFIG_FILENAME = "evalstudio.yaml"


class JudgeConfig(BaseModel):
    """Configuration for the judge evaluators.

    ``backend`` selects the heuristic placeholder or a model-backed
    judge. The adapter/model fields only matter for the latter.
    """

    model_config = {"extra": "forbid"}

    backend: Literal["heuristic", "model"] = "heuristic"
    adapter: str = "openai"
    model: str = "gpt-4o-mini"
    temperature: float = 0.0
    max_tokens: int = 1024
    timeout_seconds: float = Field(default=60.0, gt=0.0)
    max_retries: int = Field(default=2, ge=0, le=10)


class ProjectConfig(BaseModel):
    """Project-level configuration loaded from evalstudio.yaml."""

    model_config = {"extra": "forbid"}

    storage_dir: str = ".evalstudio"
    max_parallel: int = Field(default=1, ge=1, le=64)
    log_format: Literal["console", "json"] = "console"
    log_level: Literal["debug", "info", "warning", "error"] = "warning"
    judge: JudgeConfig = Field(default_factory=JudgeConfig)


def find_project_root(start: Path | None = None) -> Path:
    """Walk up from start (default: cwd) looking for evalstudio.yaml or .evalstudio/.

    Returns:
        The first directory containing either marker, or cwd if none does.
    """
    current = (start or Path.cwd()).resolve()
    if current.is_file():
        current = current.parent
    while current != current.parent:
        if (current / CONFIG_FILENAME).exists() or (current / ".evalstudio").exists():
            return current
        current = current.parent
    return Path.cwd()


def load_project_config(project_root: Path | None = None) -> ProjectConfig:
    """Load ProjectConfig from evalstudio.yaml. Returns defaults if not found."""
    if project_root is None:
        project_root = find_project_root()
    config_path = project_root / CONFIG_FILENAME
    if not config_path.exists():
        return ProjectConfig()
    import yaml

    raw = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    if raw is None:
        return ProjectConfig()
    return ProjectConfig.model_validate(raw)
