"""Entry point that turns a backend name into a configured adapter."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from typing import assert_never

import httpx

from llm_gateway.config import (
    BACKEND_SELECTOR_ENV,
    REQUIRED_ENV,
    Backend,
    ProviderConfig,
    resolve_config,
)
from llm_gateway.errors import UnsupportedBackendError
from llm_gateway.providers.anthropic import AnthropicProvider
from llm_gateway.providers.azure import AzureOpenAIProvider
from llm_gateway.providers.base import BaseProvider, StatusErrorMap
from llm_gateway.providers.openai import OpenAIProvider

logger = logging.getLogger(__name__)


def provider_class(backend: Backend) -> type[BaseProvider]:
    """Return the adapter type serving ``backend``."""
    match backend:
        case Backend.ANTHROPIC:
            return AnthropicProvider
        case Backend.OPENAI:
            return OpenAIProvider
        case Backend.AZURE_OPENAI:
            return AzureOpenAIProvider
        case _:
            assert_never(backend)


class GatewayFactory:
    """Builds adapters and answers availability questions.

    The process environment is read here and nowhere below: adapters receive
    a fully resolved :class:`ProviderConfig`.
    """

    @staticmethod
    def create(
        backend: str | Backend | None = None,
        config: ProviderConfig | None = None,
        *,
        env: Mapping[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        status_errors: StatusErrorMap | None = None,
    ) -> BaseProvider:
        """Construct the adapter for ``backend``.

        Args:
            backend: Backend name, case-insensitive. Falls back to
                ``LLM_PROVIDER`` and then to ``anthropic``.
            config: Explicit settings; these win over the environment.
            env: Environment snapshot. ``os.environ`` is copied when omitted.
            transport: Optional httpx transport, used by tests.
            status_errors: Optional HTTP status to error type mapping.

        Raises:
            UnsupportedBackendError: If the name is not a known backend.
            ConfigurationError: If a required setting (such as the API key) is missing.
        """
        env = dict(os.environ) if env is None else env
        selected = Backend.parse(backend or env.get(BACKEND_SELECTOR_ENV) or Backend.ANTHROPIC)
        effective = resolve_config(selected, config, env)
        logger.debug("Creating %s adapter (model=%s)", selected.value, effective.model)
        return provider_class(selected)(effective, transport=transport, status_errors=status_errors)

    @staticmethod
    def list_available_backends() -> list[str]:
        return [backend.value for backend in Backend]

    @staticmethod
    def is_available(backend: str | Backend, env: Mapping[str, str] | None = None) -> bool:
        """Check whether the credentials for ``backend`` are present in the environment."""
        if not isinstance(backend, str):
            return False
        try:
            selected = Backend.parse(backend)
        except UnsupportedBackendError:
            return False
        env = os.environ if env is None else env
        return all(any(env.get(name) for name in names) for names in REQUIRED_ENV[selected])
