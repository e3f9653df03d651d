"""
Delivery Gateways
=================
Mailers that carry OTP codes and reset links to the user.
"""

from .base import DeliveryGateway, DeliveryReceipt
from .brevo import BrevoMailer, BrevoEmail, BrevoContact, TransientDeliveryError
from .outbox import OutboxMailer, OutboxMessage
from .templates import render_otp_email, render_reset_email, parse_sender, ttl_minutes

__all__ = [
    # Contract
    "DeliveryGateway",
    "DeliveryReceipt",
    # Brevo
    "BrevoMailer",
    "BrevoEmail",
    "BrevoContact",
    "TransientDeliveryError",
    # Outbox
    "OutboxMailer",
    "OutboxMessage",
    # Templates
    "render_otp_email",
    "render_reset_email",
    "parse_sender",
    "ttl_minutes",
]
