"""OpenAI provider implementation."""

from __future__ import annotations

import json
import uuid
from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from llm_gateway.config import DEFAULT_CONFIGS, Backend
from llm_gateway.errors import ProtocolError
from llm_gateway.providers.base import BaseProvider
from llm_gateway.types import LLMResponse, Message, ToolCall, ToolDefinition, Usage

_CHAT_PATH = "/chat/completions"


class OpenAIFunctionCall(BaseModel):
    name: str
    # normally JSON text; some compatible servers send an object
    arguments: str | dict[str, Any] | None = None


class OpenAIToolCall(BaseModel):
    id: str | None = None
    type: str = "function"
    function: OpenAIFunctionCall


class OpenAIChoiceMessage(BaseModel):
    role: str | None = None
    content: str | None = None
    tool_calls: list[OpenAIToolCall] | None = None


class OpenAIChoice(BaseModel):
    message: OpenAIChoiceMessage
    finish_reason: str | None = None


class OpenAIUsage(BaseModel):
    prompt_tokens: int | None = None
    completion_tokens: int | None = None


class ChatCompletionResponse(BaseModel):
    """Body of a successful ``POST /chat/completions``."""

    choices: list[OpenAIChoice] = Field(default_factory=list)
    usage: OpenAIUsage | None = None


def _synthetic_call_id() -> str:
    return f"tool_call_{uuid.uuid4().hex}"


class OpenAIProvider(BaseProvider):
    """Async adapter for the OpenAI Chat Completions API."""

    name = Backend.OPENAI.value
    display_name = "OpenAI"

    @property
    def _url(self) -> str:
        base_url = self._config.base_url or DEFAULT_CONFIGS[Backend.OPENAI].base_url
        return f"{base_url.rstrip('/')}{_CHAT_PATH}"

    @property
    def _headers(self) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self._config.api_key}",
            "Content-Type": "application/json",
        }
        if self._config.organization:
            headers["OpenAI-Organization"] = self._config.organization
        return headers

    async def send_message(self, messages: Sequence[Message]) -> LLMResponse:
        """Call Chat Completions and normalize the result."""
        payload = self._build_payload(messages)
        data = await self._post_json(self._url, self._headers, payload)
        try:
            parsed = ChatCompletionResponse.model_validate(data)
        except ValidationError as exc:
            raise ProtocolError(self.name, f"unexpected response shape: {exc}") from exc
        return self._to_response(parsed)

    def _build_payload(self, messages: Sequence[Message]) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self._config.model,
            "messages": self._serialize_messages(messages),
            "max_tokens": self._config.max_tokens,
        }
        if self._config.temperature is not None:
            payload["temperature"] = self._config.temperature
        if self._config.top_p is not None:
            payload["top_p"] = self._config.top_p
        if self._tools:
            payload["tools"] = self._serialize_tools(self._tools)
            payload["tool_choice"] = "auto"
        return payload

    @classmethod
    def _serialize_messages(cls, messages: Sequence[Message]) -> list[dict[str, Any]]:
        # System prompts travel as one leading system message, ahead of the turns.
        system_parts = [m.content for m in messages if m.role == "system"]
        serialized: list[dict[str, Any]] = []
        if system_parts:
            serialized.append({"role": "system", "content": "\n".join(system_parts)})
        serialized.extend(cls._serialize_message(m) for m in messages if m.role != "system")
        return serialized

    @staticmethod
    def _serialize_message(message: Message) -> dict[str, Any]:
        if message.role == "tool":
            return {
                "role": "tool",
                "content": message.content,
                "tool_call_id": message.tool_call_id or _synthetic_call_id(),
            }
        return {"role": message.role, "content": message.content}

    @staticmethod
    def _serialize_tools(tools: Sequence[ToolDefinition]) -> list[dict[str, Any]]:
        return [
            {
                "type": "function",
                "function": {
                    "name": t.name,
                    "description": t.description,
                    "parameters": t.parameter_schema(),
                },
            }
            for t in tools
        ]

    def _to_response(self, parsed: ChatCompletionResponse) -> LLMResponse:
        if not parsed.choices:
            raise ProtocolError(self.name, f"No response from {self.display_name}: empty choices")

        message = parsed.choices[0].message
        calls = [
            ToolCall(name=call.function.name, parameters=self._decode_arguments(call), id=call.id)
            for call in message.tool_calls or []
        ]

        usage = None
        if parsed.usage is not None:
            usage = Usage(
                input_tokens=parsed.usage.prompt_tokens,
                output_tokens=parsed.usage.completion_tokens,
            )
        return LLMResponse(content=message.content or "", tool_calls=calls, usage=usage)

    def _decode_arguments(self, call: OpenAIToolCall) -> dict[str, Any]:
        raw = call.function.arguments
        if raw is None or raw == "":
            return {}
        if isinstance(raw, dict):
            return raw
        try:
            decoded = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ProtocolError(
                self.name, f"tool call '{call.function.name}' has undecodable arguments: {raw!r}"
            ) from exc
        if not isinstance(decoded, dict):
            raise ProtocolError(self.name, f"tool call '{call.function.name}' arguments are not an object")
        return decoded
