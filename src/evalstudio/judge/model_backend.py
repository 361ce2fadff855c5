"""Model-backed judge: a forced score_criteria tool call per judgement."""

from __future__ import annotations

import asyncio
from typing import Any

import structlog

from evalstudio.errors import JudgeBackendError
from evalstudio.judge.backend import JudgeBackend, JudgeVerdict, summarize_scores
from evalstudio.judge.extraction import extract_scores
from evalstudio.judge.prompt import (
    REASONING_CRITERION,
    build_judge_prompt,
    build_scoring_tool,
    render_output_prompt,
    render_trace_prompt,
)
from evalstudio.judge.providers.base import BaseProvider, JudgeRequest
from evalstudio.judge.providers.registry import get_provider
from evalstudio.judge.retry import retry_with_backoff
from evalstudio.models.config import JudgeConfig
from evalstudio.models.execution import ExecutionStep

log = structlog.get_logger(__name__)


class ModelJudgeBackend(JudgeBackend):
    """Asks a judge model for 0..1 scores and rescales them.

    The provider is resolved lazily from ``config.adapter`` so that the
    SDK is only needed once a judgement is actually requested.
    """

    name = "model"

    def __init__(
        self,
        config: JudgeConfig | None = None,
        provider: BaseProvider | None = None,
    ) -> None:
        self.config = config or JudgeConfig(backend="model")
        self._provider = provider

    @property
    def provider(self) -> BaseProvider:
        if self._provider is None:
            self._provider = get_provider(self.config.adapter)
        return self._provider

    async def _judge(self, criteria: list[str], user_prompt: str) -> dict[str, Any]:
        request = JudgeRequest(
            system=build_judge_prompt(criteria),
            user=user_prompt,
            tool=build_scoring_tool(criteria),
            model=self.config.model,
            temperature=self.config.temperature,
            max_tokens=self.config.max_tokens,
        )
        provider = self.provider

        async def _call() -> Any:
            return await asyncio.wait_for(
                provider.complete(request), timeout=self.config.timeout_seconds
            )

        try:
            response, retries = await retry_with_backoff(
                _call, max_retries=self.config.max_retries
            )
        except Exception as exc:
            log.warning(
                "judge.call_failed",
                model=self.config.model,
                error=f"{type(exc).__name__}: {exc}",
            )
            raise JudgeBackendError(
                f"Judge call to {self.config.model} failed: {exc}"
            ) from exc

        scores = extract_scores(response, criteria)
        if scores is None:
            log.warning("judge.parse_failed", model=self.config.model)
            raise JudgeBackendError(
                f"Judge response from {self.config.model} contained no usable scores"
            )

        log.debug(
            "judge.scored",
            model=self.config.model,
            retries=retries,
            input_tokens=response.input_tokens,
            output_tokens=response.output_tokens,
        )
        return scores

    @staticmethod
    def _score_of(scores: dict[str, Any], criterion: str) -> float:
        entry = scores.get(criterion)
        if isinstance(entry, dict) and isinstance(entry.get("score"), (int, float)):
            return float(entry["score"])
        if isinstance(entry, (int, float)) and not isinstance(entry, bool):
            return max(0.0, min(1.0, float(entry)))
        return 0.0

    async def score_output(
        self,
        actual: str,
        expected: str,
        criteria: list[str],
        score_scale: float,
    ) -> JudgeVerdict:
        raw = await self._judge(criteria, render_output_prompt(actual, expected))
        scores = {c: self._score_of(raw, c) * score_scale for c in criteria}

        reasons = [
            f"- {c}: {raw[c]['reasoning']}"
            for c in criteria
            if isinstance(raw.get(c), dict) and raw[c].get("reasoning")
        ]
        reasoning = summarize_scores(scores, score_scale)
        if reasons:
            reasoning += "\n\n" + "\n".join(reasons)

        return JudgeVerdict(
            scores=scores,
            reasoning=reasoning,
            metadata={"backend": self.name, "model": self.config.model},
        )

    async def score_reasoning(self, trace: list[ExecutionStep] | None) -> float:
        raw = await self._judge([REASONING_CRITERION], render_trace_prompt(trace))
        return self._score_of(raw, REASONING_CRITERION)
