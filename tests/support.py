"""Shared test doubles: an httpx transport that records what it was sent."""

import asyncio
import json
from collections.abc import Sequence
from typing import Any

import httpx

from llm_gateway.providers.base import BaseProvider
from llm_gateway.types import LLMResponse, Message


class RecordingTransport(httpx.MockTransport):
    """Answers every request with one canned response and keeps the requests."""

    def __init__(
        self,
        body: Any = None,
        *,
        status_code: int = 200,
        headers: dict[str, str] | None = None,
        text: str | None = None,
        error: Exception | None = None,
    ) -> None:
        self.requests: list[httpx.Request] = []
        self._body = body
        self._status_code = status_code
        self._headers = headers
        self._text = text
        self._error = error
        super().__init__(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._error is not None:
            raise self._error
        if self._text is not None:
            return httpx.Response(self._status_code, text=self._text, headers=self._headers)
        return httpx.Response(self._status_code, json=self._body, headers=self._headers)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    @property
    def last_payload(self) -> dict[str, Any]:
        return json.loads(self.last_request.content)


def send(provider: BaseProvider, messages: Sequence[Message]) -> LLMResponse:
    async def _run() -> LLMResponse:
        async with provider:
            return await provider.send_message(messages)

    return asyncio.run(_run())


def complete(provider: BaseProvider, messages: Sequence[Message]) -> str:
    async def _run() -> str:
        async with provider:
            return await provider.complete(messages)

    return asyncio.run(_run())


CONVERSATION = [
    Message(role="system", content="You are a careful coding agent."),
    Message(role="user", content="What is 2 + 2?"),
    Message(role="assistant", content="Let me think about that."),
]
