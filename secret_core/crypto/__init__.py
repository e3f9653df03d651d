"""
Crypto Primitives
=================
Secure random generation, keyed hashing and constant-time comparison.
"""

from .hashing import (
    OTP_LENGTH,
    RESET_TOKEN_BYTES,
    generate_otp_code,
    generate_reset_token,
    hash_secret,
    verify_secret_hash,
)
from .identity import normalize_email, mask_email

__all__ = [
    # Hashing
    "OTP_LENGTH",
    "RESET_TOKEN_BYTES",
    "generate_otp_code",
    "generate_reset_token",
    "hash_secret",
    "verify_secret_hash",
    # Identity
    "normalize_email",
    "mask_email",
]
