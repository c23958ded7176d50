"""Provider definitions for llm_gateway."""

from .anthropic import AnthropicProvider
from .azure import AzureOpenAIProvider
from .base import DEFAULT_STATUS_ERRORS, BaseProvider
from .openai import OpenAIProvider

__all__ = [
    "BaseProvider",
    "DEFAULT_STATUS_ERRORS",
    "AnthropicProvider",
    "OpenAIProvider",
    "AzureOpenAIProvider",
]
