"""Anthropic provider implementation."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Discriminator, Field, Tag, ValidationError

from llm_gateway.config import DEFAULT_CONFIGS, Backend
from llm_gateway.errors import ProtocolError
from llm_gateway.providers.base import BaseProvider
from llm_gateway.types import LLMResponse, Message, ToolCall, ToolDefinition, Usage

_MESSAGES_PATH = "/messages"
_API_VERSION = "2023-06-01"


class AnthropicTextBlock(BaseModel):
    type: Literal["text"]
    text: str = ""


class AnthropicToolUseBlock(BaseModel):
    type: Literal["tool_use"]
    id: str | None = None
    name: str
    input: dict[str, Any] = Field(default_factory=dict)


class AnthropicOtherBlock(BaseModel):
    """Block kinds the gateway does not model (thinking, etc.)."""

    type: str


def _block_kind(block: Any) -> str:
    kind = block.get("type") if isinstance(block, dict) else getattr(block, "type", None)
    return kind if kind in ("text", "tool_use") else "other"


AnthropicContentBlock = Annotated[
    Union[
        Annotated[AnthropicTextBlock, Tag("text")],
        Annotated[AnthropicToolUseBlock, Tag("tool_use")],
        Annotated[AnthropicOtherBlock, Tag("other")],
    ],
    Discriminator(_block_kind),
]


class AnthropicUsage(BaseModel):
    input_tokens: int | None = None
    output_tokens: int | None = None


class AnthropicMessageResponse(BaseModel):
    """Body of a successful ``POST /messages``."""

    content: list[AnthropicContentBlock]
    usage: AnthropicUsage | None = None


class AnthropicProvider(BaseProvider):
    """Async adapter for the Anthropic Messages API."""

    name = Backend.ANTHROPIC.value
    display_name = "Anthropic"

    @property
    def _url(self) -> str:
        base_url = self._config.base_url or DEFAULT_CONFIGS[Backend.ANTHROPIC].base_url
        return f"{base_url.rstrip('/')}{_MESSAGES_PATH}"

    @property
    def _headers(self) -> dict[str, str]:
        return {
            "x-api-key": self._config.api_key or "",
            "anthropic-version": _API_VERSION,
            "content-type": "application/json",
        }

    async def send_message(self, messages: Sequence[Message]) -> LLMResponse:
        """Call Anthropic Messages and normalize the result."""
        payload = self._build_payload(messages)
        data = await self._post_json(self._url, self._headers, payload)
        try:
            parsed = AnthropicMessageResponse.model_validate(data)
        except ValidationError as exc:
            raise ProtocolError(self.name, f"unexpected response shape: {exc}") from exc
        return self._to_response(parsed)

    def _build_payload(self, messages: Sequence[Message]) -> dict[str, Any]:
        system_text, turns = self._split_system(messages)

        payload: dict[str, Any] = {
            "model": self._config.model,
            "messages": [self._serialize_message(m) for m in turns],
            "max_tokens": self._config.max_tokens,
        }
        if system_text is not None:
            payload["system"] = system_text
        if self._tools:
            payload["tools"] = self._serialize_tools(self._tools)
        return payload

    @staticmethod
    def _split_system(messages: Sequence[Message]) -> tuple[str | None, list[Message]]:
        system_parts: list[str] = []
        rest: list[Message] = []
        for m in messages:
            if m.role == "system":
                system_parts.append(m.content)
            else:
                rest.append(m)
        return ("\n".join(system_parts) if system_parts else None, rest)

    @staticmethod
    def _serialize_message(message: Message) -> dict[str, Any]:
        # The Messages API has no tool role; tool output is replayed as assistant text.
        role = "assistant" if message.role == "tool" else message.role
        return {"role": role, "content": message.content}

    @staticmethod
    def _serialize_tools(tools: Sequence[ToolDefinition]) -> list[dict[str, Any]]:
        return [
            {
                "name": t.name,
                "description": t.description,
                "input_schema": t.parameter_schema(),
            }
            for t in tools
        ]

    @staticmethod
    def _to_response(parsed: AnthropicMessageResponse) -> LLMResponse:
        parts: list[str] = []
        calls: list[ToolCall] = []
        for block in parsed.content:
            if isinstance(block, AnthropicTextBlock):
                parts.append(block.text)
            elif isinstance(block, AnthropicToolUseBlock):
                calls.append(ToolCall(name=block.name, parameters=block.input, id=block.id))

        usage = None
        if parsed.usage is not None:
            usage = Usage(input_tokens=parsed.usage.input_tokens, output_tokens=parsed.usage.output_tokens)
        return LLMResponse(content="".join(parts), tool_calls=calls, usage=usage)
