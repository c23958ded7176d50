"""Azure OpenAI provider implementation.

Azure speaks the Chat Completions protocol but addresses a deployment
instead of a model, authenticates with an ``api-key`` header and pins the
protocol with an ``api-version`` query parameter.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from llm_gateway.config import Backend, ProviderConfig
from llm_gateway.errors import ConfigurationError
from llm_gateway.providers.openai import OpenAIProvider
from llm_gateway.types import Message

_DEPLOYMENTS_SEGMENT = "/openai/deployments/"


class AzureOpenAIProvider(OpenAIProvider):
    """Async adapter for an Azure OpenAI deployment."""

    name = Backend.AZURE_OPENAI.value
    display_name = "Azure OpenAI"

    def _validate_config(self, config: ProviderConfig) -> None:
        super()._validate_config(config)
        endpoint = config.endpoint or config.base_url
        if not endpoint:
            raise ConfigurationError("Azure OpenAI endpoint is required")
        # A full deployment URL already names the deployment.
        if not config.deployment_name and _DEPLOYMENTS_SEGMENT not in endpoint:
            raise ConfigurationError(
                "Azure OpenAI deployment name is required when not included in endpoint URL"
            )

    @property
    def _endpoint(self) -> str:
        return (self._config.endpoint or self._config.base_url or "").rstrip("/")

    @property
    def _target(self) -> str:
        if self._config.deployment_name:
            return self._config.deployment_name
        # https://res.openai.azure.com/openai/deployments/<name>/chat/completions
        tail = self._endpoint.split(_DEPLOYMENTS_SEGMENT, 1)[-1]
        return tail.split("/", 1)[0]

    @property
    def _target_kind(self) -> str:
        return "Deployment"

    @property
    def _url(self) -> str:
        api_version = self._config.api_version
        if _DEPLOYMENTS_SEGMENT in self._endpoint:
            url = self._endpoint
            if "api-version=" not in url:
                url += f"{'&' if '?' in url else '?'}api-version={api_version}"
            return url
        return (
            f"{self._endpoint}/openai/deployments/{self._config.deployment_name}"
            f"/chat/completions?api-version={api_version}"
        )

    @property
    def _headers(self) -> dict[str, str]:
        return {
            "api-key": self._config.api_key or "",
            "Content-Type": "application/json",
        }

    def _build_payload(self, messages: Sequence[Message]) -> dict[str, Any]:
        payload = super()._build_payload(messages)
        # the deployment in the URL selects the model
        payload.pop("model", None)
        return payload
