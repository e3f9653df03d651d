"""
Outbox Mail Gateway
===================
Records messages in memory instead of sending them.

For development and testing only.
Use BrevoMailer in production.
"""

from dataclasses import dataclass
from typing import List, Optional

import structlog

from ..crypto import mask_email
from ..exceptions import DeliveryError
from .base import DeliveryGateway, DeliveryReceipt

logger = structlog.get_logger(__name__)


@dataclass
class OutboxMessage:
    kind: str  # "otp" or "reset"
    to: str
    secret: str
    app_name: str
    ttl: int
    reset_url: str = ""


class OutboxMailer(DeliveryGateway):
    """In-memory gateway; set ``fail_with`` to simulate provider rejection."""

    name = "outbox"

    def __init__(self, fail_with: Optional[str] = None):
        self.messages: List[OutboxMessage] = []
        self.fail_with = fail_with

    def _deliver(self, message: OutboxMessage) -> DeliveryReceipt:
        if self.fail_with:
            raise DeliveryError(self.fail_with, provider=self.name)
        self.messages.append(message)
        logger.info("Email captured", kind=message.kind, to=mask_email(message.to))
        return DeliveryReceipt(provider=self.name, message_id=str(len(self.messages)))

    async def send_otp(self, to: str, code: str, app_name: str, ttl: int) -> DeliveryReceipt:
        return self._deliver(OutboxMessage("otp", to, code, app_name, ttl))

    async def send_password_reset(
        self,
        to: str,
        token: str,
        app_name: str,
        reset_url: str,
        ttl: int,
    ) -> DeliveryReceipt:
        return self._deliver(OutboxMessage("reset", to, token, app_name, ttl, reset_url))

    @property
    def last(self) -> Optional[OutboxMessage]:
        return self.messages[-1] if self.messages else None
