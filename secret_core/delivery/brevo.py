"""
Brevo Mail Gateway
==================
Production gateway for the Brevo transactional email API.
"""

import logging
from typing import List, Optional

import httpx
import structlog
from pydantic import BaseModel, ConfigDict, Field
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..config import MailConfig
from ..crypto import mask_email
from ..exceptions import DeliveryError
from .base import DeliveryGateway, DeliveryReceipt
from .templates import parse_sender, render_otp_email, render_reset_email

logger = structlog.get_logger(__name__)
_retry_logger = logging.getLogger(__name__)


class TransientDeliveryError(DeliveryError):
    """Network failure or 5xx; safe to retry within the same call."""
    pass


class BrevoContact(BaseModel):
    email: str
    name: Optional[str] = None


class BrevoEmail(BaseModel):
    """Request body for POST /v3/smtp/email."""
    model_config = ConfigDict(populate_by_name=True)

    sender: BrevoContact
    to: List[BrevoContact]
    subject: str
    html_content: str = Field(alias="htmlContent")
    text_content: str = Field(alias="textContent")


class BrevoMailer(DeliveryGateway):
    """
    Brevo transactional email gateway.

    Features:
    - Retries on timeouts, connection errors and 5xx responses
    - Connection pooling (via httpx.AsyncClient)
    - Non-2xx responses mapped to DeliveryError
    """

    name = "brevo"

    def __init__(
        self,
        config: MailConfig,
        client: Optional[httpx.AsyncClient] = None,
        max_attempts: int = 3,
        backoff: float = 0.5,
    ):
        """
        Args:
            config: API key, sender and subjects
            client: Pre-built HTTP client (tests pass one with a mock transport)
            max_attempts: Total tries for transient failures
            backoff: Exponential backoff multiplier in seconds
        """
        self.config = config
        self.max_attempts = max_attempts
        self.backoff = backoff
        self._owns_client = client is None
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.config.timeout,
                headers={"Accept": "application/json"},
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None
        await super().close()

    def _build(self, to: str, subject: str, text: str, html: str) -> BrevoEmail:
        name, address = parse_sender(self.config.sender)
        return BrevoEmail(
            sender=BrevoContact(email=address, name=name or None),
            to=[BrevoContact(email=to)],
            subject=subject,
            html_content=html,
            text_content=text,
        )

    async def _post_once(self, message: BrevoEmail) -> DeliveryReceipt:
        client = self._get_client()
        try:
            response = await client.post(
                self.config.api_url,
                json=message.model_dump(by_alias=True, exclude_none=True),
                headers={"api-key": self.config.api_key},
            )
        except httpx.TimeoutException as e:
            raise TransientDeliveryError("Request timed out", provider=self.name) from e
        except httpx.TransportError as e:
            raise TransientDeliveryError(f"Failed to connect: {e}", provider=self.name) from e

        if response.status_code >= 500:
            raise TransientDeliveryError(
                "Server error", provider=self.name,
                status_code=response.status_code, details=response.text,
            )
        if response.status_code >= 400:
            raise DeliveryError(
                "Message rejected", provider=self.name,
                status_code=response.status_code, details=response.text,
            )

        try:
            message_id = response.json().get("messageId")
        except ValueError:
            message_id = None
        return DeliveryReceipt(provider=self.name, message_id=message_id)

    async def _send(self, message: BrevoEmail) -> DeliveryReceipt:
        if not self.config.configured:
            raise DeliveryError("Mailer credentials not configured", provider=self.name)

        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(TransientDeliveryError),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.backoff, max=10),
            before_sleep=before_sleep_log(_retry_logger, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                receipt = await self._post_once(message)

        logger.info(
            "Email accepted",
            provider=self.name,
            to=mask_email(message.to[0].email),
            message_id=receipt.message_id,
        )
        return receipt

    async def send_otp(self, to: str, code: str, app_name: str, ttl: int) -> DeliveryReceipt:
        text, html = render_otp_email(app_name, code, ttl)
        subject = f"{self.config.otp_subject} - {app_name}" if app_name else self.config.otp_subject
        return await self._send(self._build(to, subject, text, html))

    async def send_password_reset(
        self,
        to: str,
        token: str,
        app_name: str,
        reset_url: str,
        ttl: int,
    ) -> DeliveryReceipt:
        text, html = render_reset_email(app_name, token, reset_url, ttl)
        subject = f"{self.config.reset_subject} - {app_name}" if app_name else self.config.reset_subject
        return await self._send(self._build(to, subject, text, html))
