"""
Delivery Gateway Contract
=========================
Base class for the mailers that carry OTP codes and reset links.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import structlog

logger = structlog.get_logger(__name__)


@dataclass
class DeliveryReceipt:
    """Result of a successful hand-off to the provider."""
    provider: str
    message_id: Optional[str] = None


class DeliveryGateway(ABC):
    """
    Abstract base class for delivery gateways.

    Implementations raise DeliveryError when the message is not accepted.
    Calls are awaited inline by the engines; there is no background queue.
    """

    name: str = "base"

    @abstractmethod
    async def send_otp(self, to: str, code: str, app_name: str, ttl: int) -> DeliveryReceipt:
        """
        Send a registration code.

        Args:
            to: Destination email
            code: Plain OTP code
            app_name: Display name used in the subject and body
            ttl: Code lifetime in seconds, shown to the user
        """
        ...

    @abstractmethod
    async def send_password_reset(
        self,
        to: str,
        token: str,
        app_name: str,
        reset_url: str,
        ttl: int,
    ) -> DeliveryReceipt:
        """
        Send a password reset link or token.

        Args:
            to: Destination email
            token: Plain reset token
            app_name: Display name
            reset_url: Link containing the token, or "" to show the token itself
            ttl: Token lifetime in seconds, shown to the user
        """
        ...

    async def close(self) -> None:
        """Clean up resources (e.g., close HTTP clients)."""
        logger.info("Delivery gateway closed", provider=self.name)
