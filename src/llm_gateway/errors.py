"""Package specific exception hierarchy."""


class GatewayError(Exception):
    """Base exception for llm_gateway package."""


class ConfigurationError(GatewayError):
    """Raised when a backend cannot be configured, before any network access."""


class UnsupportedBackendError(ConfigurationError):
    """Raised when a backend name is not recognised."""

    def __init__(self, backend: str) -> None:
        super().__init__(f"Unknown LLM backend: '{backend}'")
        self.backend = backend


class ProviderError(GatewayError):
    """Represents provider-specific HTTP or API errors."""

    def __init__(self, provider: str, message: str, status_code: int | None = None) -> None:
        suffix = f" (status {status_code})" if status_code is not None else ""
        super().__init__(f"{provider}: {message}{suffix}")
        self.provider = provider
        self.status_code = status_code


class AuthenticationError(ProviderError):
    """The backend rejected the credentials."""


class RateLimitError(ProviderError):
    """The backend is throttling requests."""

    def __init__(
        self,
        provider: str,
        message: str,
        status_code: int | None = None,
        retry_after: float | None = None,
    ) -> None:
        super().__init__(provider, message, status_code)
        self.retry_after = retry_after


class NotFoundError(ProviderError):
    """The requested model or deployment is unknown to the backend."""

    def __init__(
        self,
        provider: str,
        message: str,
        status_code: int | None = None,
        model: str | None = None,
    ) -> None:
        super().__init__(provider, message, status_code)
        self.model = model


class BadRequestError(ProviderError):
    """The backend refused the request payload."""


class ProtocolError(GatewayError):
    """The response does not match the envelope the adapter expects."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider


class TransportError(GatewayError):
    """Network failure before a response was received."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider


class TransportTimeoutError(TransportError):
    """The request did not complete within the configured timeout."""
