"""
Reset Engine
============
Issues, throttles and consumes password reset tokens.

A reset token is a complete bearer credential, so every failure after the
token is written unwinds the token, the cooldown marker and the send counter.

Tokens are consumed with a single read-and-remove on the store, so two
concurrent verifications of one token cannot both return the email.
"""

from typing import Optional

import structlog

from ..config import ResetConfig
from ..crypto import generate_reset_token, hash_secret, mask_email, normalize_email
from ..delivery import DeliveryGateway
from ..exceptions import DeliveryError, SecretStoreError
from ..outcome import FailureKind, SecretOutcome
from ..store import BaseSecretStore
from ..throttle import SendThrottle, best_effort_delete
from .urls import build_reset_url

logger = structlog.get_logger(__name__)

MAX_EXPIRES_IN_MINUTES = 1440


class ResetEngine:
    """Password reset token lifecycle over a secret store."""

    domain = "reset"

    def __init__(
        self,
        store: Optional[BaseSecretStore],
        gateway: Optional[DeliveryGateway],
        config: Optional[ResetConfig] = None,
        log=None,
    ):
        self.store = store
        self.gateway = gateway
        self.config = config or ResetConfig()
        self.log = log or logger
        self.throttle = None
        if store is not None:
            self.throttle = SendThrottle(
                store,
                self.domain,
                cooldown=self.config.cooldown,
                rate_limit=self.config.rate_limit,
                rate_window=self.config.rate_window,
                log=self.log,
            )

    @staticmethod
    def token_key(token_hash: str) -> str:
        return f"reset:token:{token_hash}"

    def _app_name(self, app_name: Optional[str]) -> str:
        return (app_name or "").strip() or self.config.app_name

    async def request_reset(self, email: str, app_name: Optional[str] = None) -> SecretOutcome:
        """
        Mint a reset token, store its hash and mail it.

        Args:
            email: Raw email; normalized before use
            app_name: Per-request display name, falls back to config

        Returns:
            SecretOutcome (ok / throttled / failed)

        Raises:
            SecretStoreError: Tagged "store token" or "set cooldown" after
                the partial writes were unwound
        """
        if self.store is None or self.gateway is None:
            return SecretOutcome.failed(FailureKind.NOT_CONFIGURED, detail="reset engine not wired")

        normalized = normalize_email(email)
        if not normalized:
            return SecretOutcome.failed(FailureKind.INVALID_INPUT, detail="empty email")

        throttled = await self.throttle.check(normalized)
        if throttled is not None:
            return throttled

        token = generate_reset_token()
        key = self.token_key(hash_secret(token, self.config.secret))

        try:
            await self.store.set(key, normalized, self.config.ttl)
        except SecretStoreError as e:
            await self.throttle.clear_send_count(normalized)
            raise SecretStoreError("store token", key=key, cause=e) from e

        try:
            await self.throttle.arm_cooldown(normalized)
        except SecretStoreError as e:
            await best_effort_delete(self.store, key, self.log, "unwind token")
            await self.throttle.clear_send_count(normalized)
            raise SecretStoreError("set cooldown", key=self.throttle.cooldown_key(normalized), cause=e) from e

        app = self._app_name(app_name)
        reset_url = build_reset_url(self.config.url_template, token)
        try:
            await self.gateway.send_password_reset(normalized, token, app, reset_url, self.config.ttl)
        except DeliveryError as e:
            await best_effort_delete(self.store, key, self.log, "unwind token")
            await self.throttle.reset(normalized)
            self.log.error(
                "Reset delivery failed",
                email=mask_email(normalized),
                provider=e.provider,
                error=str(e),
            )
            return SecretOutcome.failed(FailureKind.DELIVERY_FAILED, detail=str(e))

        self.log.info(
            "Reset token sent",
            email=mask_email(normalized),
            app_name=app,
            expires_in=self.config.ttl,
        )
        return SecretOutcome.success(normalized)

    async def verify_reset(self, token: str) -> SecretOutcome:
        """
        Resolve a token to its email and consume it.

        Unknown, expired and already-used tokens are indistinguishable.

        Returns:
            SecretOutcome carrying the email on success

        Raises:
            SecretStoreError: Tagged "get token"
        """
        if self.store is None:
            return SecretOutcome.failed(FailureKind.NOT_CONFIGURED, detail="reset engine not wired")

        clean = (token or "").strip()
        if not clean:
            return SecretOutcome.failed(FailureKind.INVALID, detail="empty token")

        key = self.token_key(hash_secret(clean, self.config.secret))
        try:
            email = await self.store.get_and_delete(key)
        except SecretStoreError as e:
            raise SecretStoreError("get token", key=key, cause=e) from e

        if email is None:
            self.log.warning("Reset token invalid or expired")
            return SecretOutcome.failed(FailureKind.INVALID, detail="unknown token")

        await self.throttle.reset(email)

        self.log.info("Reset token verified", email=mask_email(email))
        return SecretOutcome.success(email)

    async def send_reset_email(
        self,
        email: str,
        token: str,
        app_name: Optional[str] = None,
        reset_url: Optional[str] = None,
        expires_in_minutes: Optional[int] = None,
    ) -> SecretOutcome:
        """
        Mail a reset token minted by another service.

        Nothing is written to the store; throttling and redemption belong to
        the caller that owns the token.

        Args:
            email: Destination
            token: Token to deliver
            app_name: Per-request display name
            reset_url: Explicit link; built from the template when omitted
            expires_in_minutes: Lifetime shown in the mail (1-1440)
        """
        if self.gateway is None:
            return SecretOutcome.failed(FailureKind.NOT_CONFIGURED, detail="reset gateway not wired")

        normalized = normalize_email(email)
        clean = (token or "").strip()
        if not normalized or not clean:
            return SecretOutcome.failed(FailureKind.INVALID_INPUT, detail="email and token are required")

        ttl = self.config.ttl
        if expires_in_minutes is not None:
            if not 1 <= expires_in_minutes <= MAX_EXPIRES_IN_MINUTES:
                return SecretOutcome.failed(FailureKind.INVALID_INPUT, detail="expires_in_minutes out of range")
            ttl = expires_in_minutes * 60

        url = (reset_url or "").strip() or build_reset_url(self.config.url_template, clean)
        try:
            await self.gateway.send_password_reset(normalized, clean, self._app_name(app_name), url, ttl)
        except DeliveryError as e:
            self.log.error("Reset email failed", email=mask_email(normalized), error=str(e))
            return SecretOutcome.failed(FailureKind.DELIVERY_FAILED, detail=str(e))

        return SecretOutcome.success(normalized)
