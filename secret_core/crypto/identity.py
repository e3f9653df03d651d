"""
Identity Utilities
==================
Normalization and masking of the email addresses used as store join keys.
"""


def normalize_email(email: str) -> str:
    """Trim and lower-case an email. Returns "" for None or blank input."""
    if not email:
        return ""
    return email.strip().lower()


def mask_email(email: str) -> str:
    """
    Mask an email for log output.

    Args:
        email: Normalized email

    Returns:
        e.g. ``us***@test.com``
    """
    if not email:
        return ""
    local, sep, domain = email.partition("@")
    if not sep:
        return local[:2] + "***"
    return f"{local[:2]}***@{domain}"
