"""OpenAI chat completions provider for the model judge."""

from __future__ import annotations

import json
from typing import Any

from evalstudio.judge.providers.base import (
    BaseProvider,
    JudgeRequest,
    ProviderResponse,
    ToolCall,
)


class OpenAIProvider(BaseProvider):
    """Uses a lazily created AsyncOpenAI client (reads OPENAI_API_KEY)."""

    def __init__(self) -> None:
        self._client: Any = None

    def _get_client(self) -> Any:
        if self._client is None:
            try:
                from openai import AsyncOpenAI
            except ImportError as exc:
                raise ImportError(
                    "The openai judge adapter requires the openai package. "
                    "Install it: pip install evalstudio[openai]"
                ) from exc

            self._client = AsyncOpenAI()
        return self._client

    async def complete(self, request: JudgeRequest) -> ProviderResponse:
        tool = request.tool
        kwargs: dict[str, Any] = {
            "model": request.model,
            "messages": [
                {"role": "system", "content": request.system},
                {"role": "user", "content": request.user},
            ],
            "tools": [
                {
                    "type": "function",
                    "function": {
                        "name": tool["name"],
                        "description": tool.get("description", ""),
                        "parameters": tool.get("parameters", {}),
                    },
                }
            ],
            "tool_choice": {"type": "function", "function": {"name": tool["name"]}},
        }
        if request.temperature is not None:
            kwargs["temperature"] = request.temperature
        if request.max_tokens is not None:
            kwargs["max_tokens"] = request.max_tokens

        response = await self._get_client().chat.completions.create(**kwargs)
        message = response.choices[0].message

        tool_calls = [
            ToolCall(name=tc.function.name, arguments=json.loads(tc.function.arguments))
            for tc in message.tool_calls or []
        ]
        usage = response.usage
        return ProviderResponse(
            content=message.content,
            tool_calls=tool_calls,
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
        )

    def provider_name(self) -> str:
        return "openai"
