"""Provider-agnostic conversation and tool models."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["user", "assistant", "system", "tool"]


class Message(BaseModel):
    """Single chat message."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str = ""
    tool_results: list[Any] | None = None
    # correlation id for tool-role messages; adapters invent one when absent
    tool_call_id: str | None = None


class ToolCall(BaseModel):
    """One tool invocation requested by the model."""

    name: str
    parameters: dict[str, Any] = Field(default_factory=dict)
    id: str | None = None


class Usage(BaseModel):
    """Token accounting reported by the backend."""

    input_tokens: int | None = None
    output_tokens: int | None = None


class LLMResponse(BaseModel):
    """Normalized response shared by all providers."""

    content: str = ""
    tool_calls: list[ToolCall] = Field(default_factory=list)
    usage: Usage | None = None


class ToolParameter(BaseModel):
    """A single named argument of a tool."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: Literal["string", "number", "boolean", "integer", "object", "array"]
    description: str
    required: bool = False
    enum: tuple[str, ...] | None = None


class ToolDefinition(BaseModel):
    """Name, description and parameter contract of a locally invokable tool."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    parameters: tuple[ToolParameter, ...] = ()

    def parameter_schema(self) -> dict[str, Any]:
        """Render the parameters as a JSON-schema object.

        A new dict is built on every call, so callers may mutate the result.
        """
        properties: dict[str, Any] = {}
        for param in self.parameters:
            prop: dict[str, Any] = {"type": param.type, "description": param.description}
            if param.enum is not None:
                prop["enum"] = list(param.enum)
            properties[param.name] = prop
        return {
            "type": "object",
            "properties": properties,
            "required": [p.name for p in self.parameters if p.required],
        }
