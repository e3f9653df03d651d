"""
Secret Core Library
===================
Short-lived single-use secrets: registration OTP codes and password reset
tokens, backed by an expiring key-value store.
"""

__version__ = "0.1.0"

# Outcomes
from secret_core.outcome import (
    SecretOutcome,
    OutcomeStatus,
    FailureKind,
    ThrottleReason,
)

# Exceptions
from secret_core.exceptions import (
    SecretCoreError,
    SecretStoreError,
    DeliveryError,
    ConfigurationError,
)

# Configuration
from secret_core.config import (
    OTPConfig,
    ResetConfig,
    MailConfig,
    SecretCoreSettings,
    parse_duration,
)

# Crypto
from secret_core.crypto import (
    generate_otp_code,
    generate_reset_token,
    hash_secret,
    verify_secret_hash,
    normalize_email,
    mask_email,
)

# Store
from secret_core.store import (
    BaseSecretStore,
    InMemorySecretStore,
    RedisSecretStore,
)

# Delivery
from secret_core.delivery import (
    DeliveryGateway,
    DeliveryReceipt,
    BrevoMailer,
    OutboxMailer,
)

# Engines
from secret_core.throttle import SendThrottle
from secret_core.otp import OTPEngine
from secret_core.reset import ResetEngine, build_reset_url
from secret_core.factory import SecretEngines, create_engines, build_gateway

__all__ = [
    # Outcomes
    "SecretOutcome",
    "OutcomeStatus",
    "FailureKind",
    "ThrottleReason",
    # Exceptions
    "SecretCoreError",
    "SecretStoreError",
    "DeliveryError",
    "ConfigurationError",
    # Configuration
    "OTPConfig",
    "ResetConfig",
    "MailConfig",
    "SecretCoreSettings",
    "parse_duration",
    # Crypto
    "generate_otp_code",
    "generate_reset_token",
    "hash_secret",
    "verify_secret_hash",
    "normalize_email",
    "mask_email",
    # Store
    "BaseSecretStore",
    "InMemorySecretStore",
    "RedisSecretStore",
    # Delivery
    "DeliveryGateway",
    "DeliveryReceipt",
    "BrevoMailer",
    "OutboxMailer",
    # Engines
    "SendThrottle",
    "OTPEngine",
    "ResetEngine",
    "build_reset_url",
    "SecretEngines",
    "create_engines",
    "build_gateway",
]
