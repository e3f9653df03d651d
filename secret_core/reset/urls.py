"""
Reset URL Builder
=================
"""

TOKEN_PLACEHOLDER = "{token}"


def build_reset_url(template: str, token: str) -> str:
    """
    Build the link mailed to the user.

    Args:
        template: e.g. ``https://app/reset/{token}`` or ``https://app/reset``
        token: Plain reset token (URL-safe already)

    Returns:
        "" when no template is configured
    """
    template = (template or "").strip()
    if not template:
        return ""
    if TOKEN_PLACEHOLDER in template:
        return template.replace(TOKEN_PLACEHOLDER, token)
    if "?" in template:
        return f"{template}&token={token}"
    return f"{template}?token={token}"
