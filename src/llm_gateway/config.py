"""Backend selection and effective configuration resolution.

Nothing in this module reads ``os.environ``: callers pass an environment
snapshot, which keeps resolution a pure function of its inputs.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict

from llm_gateway.errors import UnsupportedBackendError

logger = logging.getLogger(__name__)


class Backend(str, Enum):
    """The fixed set of supported backends."""

    ANTHROPIC = "anthropic"
    OPENAI = "openai"
    AZURE_OPENAI = "azure-openai"

    @classmethod
    def parse(cls, name: str | Backend) -> Backend:
        """Resolve a case-insensitive backend name or alias."""
        if isinstance(name, Backend):
            return name
        key = name.strip().lower()
        key = BACKEND_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError as exc:
            raise UnsupportedBackendError(name) from exc


BACKEND_ALIASES: dict[str, str] = {"azure": Backend.AZURE_OPENAI.value}


class ProviderConfig(BaseModel):
    """Connection and sampling settings for one adapter instance."""

    model_config = ConfigDict(frozen=True)

    api_key: str | None = None
    model: str | None = None
    base_url: str | None = None
    max_tokens: int | None = None
    temperature: float | None = None
    top_p: float | None = None
    organization: str | None = None
    deployment_name: str | None = None
    api_version: str | None = None
    endpoint: str | None = None
    timeout_s: float | None = None


BACKEND_SELECTOR_ENV = "LLM_PROVIDER"

GLOBAL_ENV: dict[str, tuple[str, ...]] = {
    "temperature": ("LLM_TEMPERATURE",),
    "max_tokens": ("LLM_MAX_TOKENS",),
    "timeout_s": ("LLM_TIMEOUT",),
}

BACKEND_ENV: dict[Backend, dict[str, tuple[str, ...]]] = {
    Backend.ANTHROPIC: {
        "api_key": ("ANTHROPIC_API_KEY",),
        "model": ("ANTHROPIC_MODEL",),
        "max_tokens": ("ANTHROPIC_MAX_TOKENS",),
        "base_url": ("ANTHROPIC_BASE_URL",),
    },
    Backend.OPENAI: {
        "api_key": ("OPENAI_API_KEY",),
        "model": ("OPENAI_MODEL",),
        "max_tokens": ("OPENAI_MAX_TOKENS",),
        "organization": ("OPENAI_ORGANIZATION",),
        "base_url": ("OPENAI_BASE_URL",),
    },
    Backend.AZURE_OPENAI: {
        "api_key": ("AZURE_OPENAI_KEY", "AZURE_OPENAI_API_KEY"),
        "model": ("AZURE_OPENAI_MODEL",),
        "max_tokens": ("AZURE_OPENAI_MAX_TOKENS",),
        "deployment_name": ("AZURE_OPENAI_DEPLOYMENT",),
        "api_version": ("AZURE_OPENAI_API_VERSION",),
        "endpoint": ("AZURE_OPENAI_ENDPOINT",),
    },
}

AZURE_RESOURCE_ENV = "AZURE_OPENAI_RESOURCE_NAME"

# Variables that must all be present for a backend to authenticate.
REQUIRED_ENV: dict[Backend, tuple[tuple[str, ...], ...]] = {
    Backend.ANTHROPIC: (("ANTHROPIC_API_KEY",),),
    Backend.OPENAI: (("OPENAI_API_KEY",),),
    Backend.AZURE_OPENAI: (("AZURE_OPENAI_KEY", "AZURE_OPENAI_API_KEY"), ("AZURE_OPENAI_ENDPOINT",)),
}

_COMMON_DEFAULTS: dict[str, Any] = {"max_tokens": 4096, "top_p": 1.0, "timeout_s": 120.0}

DEFAULT_CONFIGS: dict[Backend, ProviderConfig] = {
    Backend.ANTHROPIC: ProviderConfig(
        model="claude-3-sonnet-20240229",
        base_url="https://api.anthropic.com/v1",
        **_COMMON_DEFAULTS,
    ),
    Backend.OPENAI: ProviderConfig(
        model="gpt-4-turbo-preview",
        base_url="https://api.openai.com/v1",
        temperature=1.0,
        **_COMMON_DEFAULTS,
    ),
    Backend.AZURE_OPENAI: ProviderConfig(
        model="gpt-4",
        api_version="2024-02-15-preview",
        temperature=0.7,
        **_COMMON_DEFAULTS,
    ),
}


def _milliseconds_to_seconds(raw: str) -> float:
    return float(raw) / 1000


# Environment values are text; timeouts are given in milliseconds.
_ENV_PARSERS: dict[str, Callable[[str], Any]] = {
    "max_tokens": int,
    "temperature": float,
    "top_p": float,
    "timeout_s": _milliseconds_to_seconds,
}


def _set_values(config: ProviderConfig | None) -> dict[str, Any]:
    if config is None:
        return {}
    return {k: v for k, v in config.model_dump().items() if v is not None and v != ""}


def _from_env(field: str, names: tuple[str, ...], env: Mapping[str, str]) -> Any:
    parser = _ENV_PARSERS.get(field)
    for name in names:
        raw = env.get(name)
        if not raw:
            continue
        if parser is None:
            return raw
        try:
            return parser(raw.strip())
        except ValueError:
            logger.warning("Ignoring %s=%r: not a valid number", name, raw)
    return None


def resolve_config(
    backend: Backend | str,
    explicit: ProviderConfig | None = None,
    env: Mapping[str, str] | None = None,
    defaults: ProviderConfig | None = None,
) -> ProviderConfig:
    """Merge configuration sources into the effective config for ``backend``.

    Precedence, highest first: explicit field, backend-specific environment
    variable, global environment variable, default. Empty strings count as
    unset at every level. Malformed numeric environment values are skipped
    with a warning.

    Args:
        backend: Backend name or member.
        explicit: Values supplied by the caller.
        env: Environment snapshot; treated as empty when omitted.
        defaults: Overrides the built-in defaults for the backend.

    Returns:
        The effective, immutable configuration.
    """
    backend = Backend.parse(backend)
    env = env or {}
    explicit_values = _set_values(explicit)
    # Azure treats base_url and endpoint as one setting.
    if backend is Backend.AZURE_OPENAI and "base_url" in explicit_values:
        explicit_values.setdefault("endpoint", explicit_values["base_url"])
    default_values = _set_values(defaults if defaults is not None else DEFAULT_CONFIGS[backend])
    backend_env = BACKEND_ENV[backend]

    resolved: dict[str, Any] = {}
    for field in ProviderConfig.model_fields:
        if field in explicit_values:
            resolved[field] = explicit_values[field]
            continue
        value = _from_env(field, backend_env.get(field, ()), env)
        if value is None:
            value = _from_env(field, GLOBAL_ENV.get(field, ()), env)
        if value is None and field == "endpoint" and backend is Backend.AZURE_OPENAI:
            resource = env.get(AZURE_RESOURCE_ENV)
            if resource:
                value = f"https://{resource}.openai.azure.com"
        if value is None:
            value = default_values.get(field)
        resolved[field] = value

    return ProviderConfig(**resolved)
