"""
Secret Core Exceptions
======================
Infrastructure failures raised by stores, gateways and configuration.

Domain failures (throttles, bad codes, unknown tokens) are never raised; they
come back as a SecretOutcome.
"""

from typing import Any, Optional


class SecretCoreError(Exception):
    """Base exception for all secret-core infrastructure errors."""
    pass


class SecretStoreError(SecretCoreError):
    """Raised when the backing key-value store fails a round-trip."""

    def __init__(self, operation: str, key: Optional[str] = None, cause: Optional[BaseException] = None):
        self.operation = operation
        self.key = key
        self.cause = cause
        super().__init__(f"{operation}: {cause}" if cause is not None else operation)


class DeliveryError(SecretCoreError):
    """Raised when a delivery gateway cannot hand the message off."""

    def __init__(
        self,
        message: str,
        provider: str = "unknown",
        status_code: Optional[int] = None,
        details: Any = None,
    ):
        self.message = message
        self.provider = provider
        self.status_code = status_code
        self.details = details
        super().__init__(f"[{provider}] {message} (Status: {status_code})")


class ConfigurationError(SecretCoreError):
    """Raised when an environment value cannot be parsed."""
    pass
