"""Provider-agnostic base interfaces and helpers."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from types import MappingProxyType
from typing import Any

import httpx

from llm_gateway.config import ProviderConfig
from llm_gateway.errors import (
    AuthenticationError,
    BadRequestError,
    ConfigurationError,
    NotFoundError,
    ProtocolError,
    ProviderError,
    RateLimitError,
    TransportError,
    TransportTimeoutError,
)
from llm_gateway.tools import get_tool_definitions
from llm_gateway.types import LLMResponse, Message, ToolDefinition

StatusErrorMap = Mapping[int, type[ProviderError]]

DEFAULT_STATUS_ERRORS: StatusErrorMap = MappingProxyType(
    {
        400: BadRequestError,
        401: AuthenticationError,
        404: NotFoundError,
        429: RateLimitError,
    }
)

_DEFAULT_TIMEOUT_S = 120.0


class BaseProvider(ABC):
    """Abstract base class for provider implementations.

    Adapters hold only their immutable config and an HTTP client, so one
    instance may serve concurrent conversations.
    """

    name: str
    display_name: str
    _logger = logging.getLogger(__name__)

    def __init__(
        self,
        config: ProviderConfig,
        *,
        tools: Sequence[ToolDefinition] | None = None,
        status_errors: StatusErrorMap | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._validate_config(config)
        self._config = config
        self._tools: tuple[ToolDefinition, ...] = tuple(tools if tools is not None else get_tool_definitions())
        self._status_errors: StatusErrorMap = status_errors if status_errors is not None else DEFAULT_STATUS_ERRORS
        self._timeout_s = config.timeout_s if config.timeout_s is not None else _DEFAULT_TIMEOUT_S
        self._client = httpx.AsyncClient(timeout=self._timeout_s, transport=transport)

    def _validate_config(self, config: ProviderConfig) -> None:
        """Reject configs this adapter cannot use; runs before any client exists."""
        if not config.api_key:
            raise ConfigurationError(f"{self.display_name} API key is required")
        if config.timeout_s is not None and config.timeout_s <= 0:
            raise ConfigurationError(f"{self.display_name} timeout must be positive, got {config.timeout_s}")

    @property
    def config(self) -> ProviderConfig:
        """The effective configuration this adapter was built with."""
        return self._config

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> BaseProvider:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def complete(self, messages: Sequence[Message]) -> str:
        """Send the conversation and return only the text of the reply."""
        response = await self.send_message(messages)
        return response.content

    @abstractmethod
    async def send_message(self, messages: Sequence[Message]) -> LLMResponse:
        """Translate, send and parse one round trip."""
        raise NotImplementedError

    @property
    def _target(self) -> str:
        """Name of the model (or deployment) the requests address."""
        return self._config.model or ""

    @property
    def _target_kind(self) -> str:
        return "Model"

    async def _post_json(self, url: str, headers: dict[str, str], payload: dict[str, Any]) -> dict[str, Any]:
        self._logger.debug(
            "%s POST %s messages=%d tools=%d",
            self.name,
            url,
            len(payload.get("messages", [])),
            len(payload.get("tools", [])),
        )
        try:
            response = await self._client.post(url, headers=headers, json=payload)
        except httpx.TimeoutException as exc:
            raise TransportTimeoutError(self.name, f"request timed out after {self._timeout_s}s") from exc
        except httpx.RequestError as exc:
            raise TransportError(self.name, str(exc) or type(exc).__name__) from exc

        self._raise_for_status(response)

        try:
            data = response.json()
        except ValueError as exc:
            raise ProtocolError(self.name, "response body is not valid JSON") from exc
        if not isinstance(data, dict):
            raise ProtocolError(self.name, "response body is not a JSON object")
        return data

    def _raise_for_status(self, response: httpx.Response) -> None:
        status = response.status_code
        if status < 400:
            return

        error_cls = self._status_errors.get(status, ProviderError)
        if issubclass(error_cls, AuthenticationError):
            raise error_cls(self.name, f"Invalid {self.display_name} API key", status_code=status)
        if issubclass(error_cls, RateLimitError):
            retry_after = _parse_retry_after(response.headers.get("retry-after"))
            message = f"{self.display_name} API rate limit exceeded"
            if retry_after is not None:
                message += f". Retry after {retry_after:g} seconds"
            raise error_cls(self.name, message, status_code=status, retry_after=retry_after)
        if issubclass(error_cls, NotFoundError):
            raise error_cls(
                self.name,
                f"{self._target_kind} {self._target} not found or not accessible",
                status_code=status,
                model=self._target,
            )
        raise error_cls(self.name, _error_detail(response), status_code=status)


def _parse_retry_after(value: str | None) -> float | None:
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        # HTTP-date form; leave scheduling to the caller
        return None


def _error_detail(response: httpx.Response) -> str:
    """Pull the backend's own error message out of an error body."""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
        if isinstance(error, str):
            return error
    return response.text or response.reason_phrase
