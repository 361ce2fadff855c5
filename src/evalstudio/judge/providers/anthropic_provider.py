"""Anthropic messages provider for the model judge."""

from __future__ import annotations

from typing import Any

from evalstudio.judge.providers.base import (
    BaseProvider,
    JudgeRequest,
    ProviderResponse,
    ToolCall,
)

# The messages API requires max_tokens.
DEFAULT_MAX_TOKENS = 1024


class AnthropicProvider(BaseProvider):
    """Uses a lazily created AsyncAnthropic client (reads ANTHROPIC_API_KEY)."""

    def __init__(self) -> None:
        self._client: Any = None

    def _get_client(self) -> Any:
        if self._client is None:
            try:
                from anthropic import AsyncAnthropic
            except ImportError as exc:
                raise ImportError(
                    "The anthropic judge adapter requires the anthropic package. "
                    "Install it: pip install evalstudio[anthropic]"
                ) from exc

            self._client = AsyncAnthropic()
        return self._client

    async def complete(self, request: JudgeRequest) -> ProviderResponse:
        tool = request.tool
        kwargs: dict[str, Any] = {
            "model": request.model,
            "system": request.system,
            "messages": [{"role": "user", "content": request.user}],
            "max_tokens": request.max_tokens or DEFAULT_MAX_TOKENS,
            "tools": [
                {
                    "name": tool["name"],
                    "description": tool.get("description", ""),
                    "input_schema": tool.get("parameters", {}),
                }
            ],
            "tool_choice": {"type": "tool", "name": tool["name"]},
        }
        if request.temperature is not None:
            kwargs["temperature"] = request.temperature

        response = await self._get_client().messages.create(**kwargs)

        text_parts: list[str] = []
        tool_calls: list[ToolCall] = []
        for block in response.content:
            if block.type == "text":
                text_parts.append(block.text)
            elif block.type == "tool_use":
                # block.input is already a dict
                tool_calls.append(ToolCall(name=block.name, arguments=block.input))

        return ProviderResponse(
            content="\n".join(text_parts) if text_parts else None,
            tool_calls=tool_calls,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
        )

    def provider_name(self) -> str:
        return "anthropic"
