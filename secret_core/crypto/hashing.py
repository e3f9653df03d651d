"""
Secret Hashing Utilities
========================
Generation, keyed hashing and constant-time verification of OTP codes and
reset tokens.
"""

import base64
import hashlib
import hmac
import secrets

OTP_LENGTH = 6
RESET_TOKEN_BYTES = 32


def generate_otp_code(length: int = OTP_LENGTH) -> str:
    """
    Generate a uniformly random numeric code.

    Args:
        length: Number of digits

    Returns:
        Decimal string, zero-padded to ``length``
    """
    return str(secrets.randbelow(10 ** length)).zfill(length)


def generate_reset_token(nbytes: int = RESET_TOKEN_BYTES) -> str:
    """
    Generate an opaque reset token.

    Args:
        nbytes: Random bytes of entropy

    Returns:
        URL-safe base64 string without padding
    """
    raw = secrets.token_bytes(nbytes)
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


def hash_secret(value: str, secret: str) -> str:
    """
    One-way hash of a code or token with the service secret.

    Args:
        value: Plain code or token
        secret: Service hashing secret

    Returns:
        SHA-256 hex digest
    """
    return hashlib.sha256(f"{value}{secret}".encode()).hexdigest()


def verify_secret_hash(value: str, secret: str, stored_hash: str) -> bool:
    """
    Verify a code or token against its stored hash.

    Uses constant-time comparison to prevent timing attacks.

    Args:
        value: User-provided code or token
        secret: Service hashing secret
        stored_hash: Hash read from the store

    Returns:
        True if the value matches
    """
    candidate = hash_secret(value, secret)
    return hmac.compare_digest(candidate.encode(), stored_hash.encode())
