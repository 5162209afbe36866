"""
Error types raised while wiring managers together.

Provider transport failures are never wrapped: they surface as the
``httpx.HTTPError`` raised by the HTTP client.
"""


class VMPoolError(Exception):
    """Base class for vmpool errors."""


class ProviderConfigurationError(VMPoolError, ValueError):
    """Provider configuration is missing or unusable."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(f"[{provider}] {message}")


class UnknownProviderError(VMPoolError, ValueError):
    """No adapter is registered under the requested provider name."""

    def __init__(self, provider: str, available: list):
        self.provider = provider
        self.available = available
        super().__init__(
            f"No adapter registered for provider '{provider}'. "
            f"Available providers: {available}"
        )
