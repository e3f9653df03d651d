"""
Email Templates
===============
Plain-text and HTML bodies for OTP and password reset mails.
"""

from email.utils import parseaddr
from html import escape
from typing import Tuple

DEFAULT_MINUTES = 5


def ttl_minutes(ttl: int) -> int:
    """Whole minutes shown in a mail; falls back to 5 below one minute."""
    minutes = ttl // 60
    return minutes if minutes > 0 else DEFAULT_MINUTES


def parse_sender(sender: str) -> Tuple[str, str]:
    """Split ``"Name <addr@host>"`` into (name, address)."""
    name, address = parseaddr(sender)
    return name, address or sender.strip()


def _layout(app_name: str, subtitle: str, content: str) -> str:
    app = escape(app_name)
    return f"""<!doctype html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>{app}</title>
</head>
<body style="margin:0;padding:0;background:#f6f7fb;">
  <table role="presentation" cellpadding="0" cellspacing="0" width="100%" style="background:#f6f7fb;padding:24px 0;">
    <tr>
      <td align="center">
        <table role="presentation" cellpadding="0" cellspacing="0" width="600" style="max-width:600px;background:#ffffff;border-radius:12px;font-family:Arial,Helvetica,sans-serif;">
          <tr>
            <td style="padding:24px 32px;background:#0f172a;color:#ffffff;">
              <div style="font-size:18px;font-weight:bold;">{app}</div>
              <div style="font-size:12px;opacity:.8;">{subtitle}</div>
            </td>
          </tr>
          <tr>
            <td style="padding:32px;color:#111827;">
              {content}
              <div style="font-size:12px;color:#6b7280;margin-top:18px;">
                If you did not request this, please ignore this email.
              </div>
            </td>
          </tr>
        </table>
      </td>
    </tr>
  </table>
</body>
</html>"""


def render_otp_email(app_name: str, code: str, ttl: int) -> Tuple[str, str]:
    """
    Render the registration OTP mail.

    Returns:
        Tuple of (text_body, html_body)
    """
    minutes = ttl_minutes(ttl)
    text = (
        f"Your registration OTP code is: {code}\n"
        f"This code expires in {minutes} minutes.\n"
        "If you did not request this, please ignore this email.\n"
    )
    content = (
        '<div style="font-size:14px;line-height:1.6;margin-bottom:18px;">'
        f"Use the OTP below to complete your registration. This code expires in "
        f"<strong>{minutes} minutes</strong>.</div>"
        '<div style="font-size:28px;letter-spacing:6px;font-weight:bold;background:#f3f4f6;'
        f'padding:16px 20px;border-radius:10px;display:inline-block;">{escape(code)}</div>'
    )
    return text, _layout(app_name, "Registration verification", content)


def render_reset_email(app_name: str, token: str, reset_url: str, ttl: int) -> Tuple[str, str]:
    """
    Render the password reset mail.

    The link is used when present; otherwise the raw token is shown so the
    user can paste it into the app.

    Returns:
        Tuple of (text_body, html_body)
    """
    minutes = ttl_minutes(ttl)
    if reset_url:
        text_action = f"Reset your password using this link:\n{reset_url}\n"
        url = escape(reset_url, quote=True)
        action = (
            f'<a href="{url}" style="display:inline-block;background:#0f172a;color:#ffffff;'
            'padding:12px 20px;border-radius:8px;text-decoration:none;">Reset password</a>'
        )
    else:
        text_action = f"Your password reset token is:\n{token}\n"
        action = (
            '<div style="font-size:14px;font-family:monospace;background:#f3f4f6;'
            f'padding:12px 16px;border-radius:8px;word-break:break-all;">{escape(token)}</div>'
        )
    text = (
        f"{text_action}"
        f"This request expires in {minutes} minutes.\n"
        "If you did not request this, please ignore this email.\n"
    )
    content = (
        '<div style="font-size:14px;line-height:1.6;margin-bottom:18px;">'
        f"We received a request to reset your password. It expires in "
        f"<strong>{minutes} minutes</strong>.</div>{action}"
    )
    return text, _layout(app_name, "Password reset", content)
