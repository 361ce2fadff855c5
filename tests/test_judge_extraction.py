"""Tests for judge prompts, score extraction and provider resolution."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from evalstudio.judge.extraction import (
    extract_json_from_text,
    extract_scores,
    extract_scores_from_tool_call,
)
from evalstudio.judge.prompt import (
    SCORING_TOOL_NAME,
    build_judge_prompt,
    build_scoring_tool,
    render_output_prompt,
    render_trace_prompt,
)
from evalstudio.judge.providers.anthropic_provider import AnthropicProvider
from evalstudio.judge.providers.base import JudgeRequest, ProviderResponse, ToolCall
from evalstudio.judge.providers.openai_provider import OpenAIProvider
from evalstudio.judge.providers.registry import get_provider


def _request() -> JudgeRequest:
    return JudgeRequest(
        system="system prompt",
        user="user prompt",
        tool=build_scoring_tool(["accuracy"]),
        model="judge-model",
        temperature=0.0,
        max_tokens=256,
    )


class TestPrompt:
    def test_system_prompt_lists_criteria(self):
        prompt = build_judge_prompt(["accuracy", "tone"])
        assert "- **accuracy**:" in prompt
        assert "Overall quality with respect to 'tone'." in prompt

    def test_scoring_tool_schema(self):
        tool = build_scoring_tool(["accuracy", "safety"])
        assert tool["name"] == SCORING_TOOL_NAME
        assert tool["parameters"]["required"] == ["accuracy", "safety"]
        assert tool["parameters"]["properties"]["safety"]["required"] == ["score", "reasoning"]

    def test_output_prompt_placeholders(self):
        prompt = render_output_prompt("", "")
        assert "(none)" in prompt
        assert "(empty)" in prompt

    def test_long_values_truncated(self):
        prompt = render_output_prompt("x" * 5000, "ok")
        assert "[truncated 1000 chars]" in prompt

    def test_empty_trace(self):
        assert "(no steps recorded)" in render_trace_prompt(None)


class TestExtraction:
    def test_tool_call_scores_clamped(self):
        scores = extract_scores_from_tool_call(
            [
                ToolCall(name="other", arguments={"accuracy": {"score": 0.1}}),
                ToolCall(name=SCORING_TOOL_NAME, arguments={"accuracy": {"score": -2}}),
            ]
        )
        assert scores == {"accuracy": {"score": 0.0}}

    def test_no_scoring_call(self):
        assert extract_scores_from_tool_call([]) is None

    def test_plain_json_text(self):
        assert extract_json_from_text('{"accuracy": 1}') == {"accuracy": 1}

    def test_json_embedded_in_prose(self):
        text = 'Scores follow {"accuracy": {"score": 0.5}} as requested.'
        assert extract_json_from_text(text) == {"accuracy": {"score": 0.5}}

    def test_unparseable_text(self):
        assert extract_json_from_text("no json here") is None
        assert extract_json_from_text(None) is None

    def test_requires_a_requested_criterion(self):
        response = ProviderResponse(content=json.dumps({"unrelated": {"score": 1}}))
        assert extract_scores(response, ["accuracy"]) is None

    def test_tool_call_preferred_over_text(self):
        response = ProviderResponse(
            content='{"accuracy": {"score": 0.1}}',
            tool_calls=[ToolCall(name=SCORING_TOOL_NAME, arguments={"accuracy": {"score": 0.9}})],
        )
        assert extract_scores(response, ["accuracy"]) == {"accuracy": {"score": 0.9}}


class TestProviderRegistry:
    def test_builtin_names(self):
        assert isinstance(get_provider("openai"), OpenAIProvider)
        assert isinstance(get_provider("anthropic"), AnthropicProvider)

    def test_unknown_name(self):
        with pytest.raises(ValueError, match="Unknown judge adapter"):
            get_provider("nope")

    def test_dotted_path_must_be_provider(self):
        with pytest.raises(TypeError):
            get_provider("evalstudio.judge.heuristic.HeuristicJudgeBackend")

    def test_dotted_path_missing_attribute(self):
        with pytest.raises(ImportError):
            get_provider("evalstudio.judge.providers.base.Missing")


class TestOpenAIProvider:
    @pytest.mark.asyncio
    async def test_forced_tool_call(self):
        tool_call = MagicMock()
        tool_call.function.name = SCORING_TOOL_NAME
        tool_call.function.arguments = '{"accuracy": {"score": 1, "reasoning": "ok"}}'
        response = MagicMock()
        response.choices = [MagicMock()]
        response.choices[0].message.content = None
        response.choices[0].message.tool_calls = [tool_call]
        response.usage.prompt_tokens = 10
        response.usage.completion_tokens = 5

        provider = OpenAIProvider()
        provider._client = MagicMock()
        provider._client.chat.completions.create = AsyncMock(return_value=response)

        result = await provider.complete(_request())

        assert result.tool_calls == [
            ToolCall(name=SCORING_TOOL_NAME, arguments={"accuracy": {"score": 1, "reasoning": "ok"}})
        ]
        assert (result.input_tokens, result.output_tokens) == (10, 5)
        kwargs = provider._client.chat.completions.create.call_args.kwargs
        assert kwargs["tool_choice"] == {
            "type": "function",
            "function": {"name": SCORING_TOOL_NAME},
        }
        assert kwargs["messages"][0] == {"role": "system", "content": "system prompt"}
        assert kwargs["max_tokens"] == 256


class TestAnthropicProvider:
    @pytest.mark.asyncio
    async def test_forced_tool_use(self):
        text_block = MagicMock(type="text", text="thinking")
        tool_block = MagicMock(type="tool_use", input={"accuracy": {"score": 0.5}})
        tool_block.name = SCORING_TOOL_NAME
        response = MagicMock()
        response.content = [text_block, tool_block]
        response.usage.input_tokens = 7
        response.usage.output_tokens = 3

        provider = AnthropicProvider()
        provider._client = MagicMock()
        provider._client.messages.create = AsyncMock(return_value=response)

        result = await provider.complete(_request())

        assert result.content == "thinking"
        assert result.tool_calls[0].arguments == {"accuracy": {"score": 0.5}}
        kwargs = provider._client.messages.create.call_args.kwargs
        assert kwargs["tool_choice"] == {"type": "tool", "name": SCORING_TOOL_NAME}
        assert kwargs["system"] == "system prompt"
        assert kwargs["tools"][0]["input_schema"]["required"] == ["accuracy"]
