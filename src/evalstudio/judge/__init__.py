"""Judge backends behind the llm_judge_* evaluators."""

from __future__ import annotations

from evalstudio.judge.backend import JudgeBackend, JudgeVerdict
from evalstudio.judge.heuristic import HeuristicJudgeBackend
from evalstudio.judge.model_backend import ModelJudgeBackend
from evalstudio.models.config import JudgeConfig


def build_judge_backend(config: JudgeConfig | None = None) -> JudgeBackend:
    """Backend selected by ``config.backend`` (heuristic by default)."""
    if config is None or config.backend == "heuristic":
        return HeuristicJudgeBackend()
    return ModelJudgeBackend(config)


__all__ = [
    "HeuristicJudgeBackend",
    "JudgeBackend",
    "JudgeVerdict",
    "ModelJudgeBackend",
    "build_judge_backend",
]
