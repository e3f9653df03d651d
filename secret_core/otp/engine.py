"""
OTP Engine
==========
Issues, throttles and verifies 6-digit registration codes for an email.

Two concurrent sends for the same email can both pass the cooldown check
before either writes the marker, so two codes may be issued; the later write
wins the ``otp:register`` key. This race is accepted rather than guarded with
a distributed lock.

The attempt counter belongs to the current code: writing a new code clears
it, so a resend after a lockout starts again from zero.

Verification compares before it deletes, so two concurrent verifications
with the correct code can both succeed. Registration consumers are expected
to be idempotent on the email.
"""

from typing import Optional

import structlog

from ..config import OTPConfig
from ..crypto import generate_otp_code, hash_secret, mask_email, normalize_email, verify_secret_hash
from ..delivery import DeliveryGateway
from ..exceptions import DeliveryError, SecretStoreError
from ..outcome import FailureKind, SecretOutcome
from ..store import BaseSecretStore
from ..throttle import SendThrottle, best_effort_delete

logger = structlog.get_logger(__name__)


class OTPEngine:
    """Registration OTP lifecycle over a secret store."""

    domain = "otp"

    def __init__(
        self,
        store: Optional[BaseSecretStore],
        gateway: Optional[DeliveryGateway],
        config: Optional[OTPConfig] = None,
        log=None,
    ):
        self.store = store
        self.gateway = gateway
        self.config = config or OTPConfig()
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
    def record_key(email: str) -> str:
        return f"otp:register:{email}"

    @staticmethod
    def attempt_key(email: str) -> str:
        return f"otp:attempt:{email}"

    async def send_register_otp(self, email: str, app_name: Optional[str] = None) -> SecretOutcome:
        """
        Generate, store and deliver a registration code.

        Args:
            email: Raw email; normalized before use
            app_name: Per-request display name, falls back to config

        Returns:
            SecretOutcome (ok / throttled / failed)

        Raises:
            SecretStoreError: On store transport failure
        """
        if self.store is None or self.gateway is None:
            return SecretOutcome.failed(FailureKind.NOT_CONFIGURED, detail="otp engine not wired")

        normalized = normalize_email(email)
        if not normalized:
            return SecretOutcome.failed(FailureKind.INVALID_INPUT, detail="empty email")

        throttled = await self.throttle.check(normalized)
        if throttled is not None:
            return throttled

        code = generate_otp_code()
        await self.store.set(
            self.record_key(normalized),
            hash_secret(code, self.config.secret),
            self.config.ttl,
        )
        await best_effort_delete(self.store, self.attempt_key(normalized), self.log, "reset attempts")

        try:
            await self.throttle.arm_cooldown(normalized)
        except SecretStoreError as e:
            await self.throttle.clear_send_count(normalized)
            raise SecretStoreError("set cooldown", key=self.throttle.cooldown_key(normalized), cause=e) from e

        app = (app_name or "").strip() or self.config.app_name
        try:
            await self.gateway.send_otp(normalized, code, app, self.config.ttl)
        except DeliveryError as e:
            # The stored hash is left to expire; without the plaintext it is useless.
            await self.throttle.reset(normalized)
            self.log.error(
                "OTP delivery failed",
                email=mask_email(normalized),
                provider=e.provider,
                error=str(e),
            )
            return SecretOutcome.failed(FailureKind.DELIVERY_FAILED, detail=str(e))

        self.log.info(
            "OTP sent",
            email=mask_email(normalized),
            app_name=app,
            expires_in=self.config.ttl,
        )
        return SecretOutcome.success(normalized)

    async def verify_register_otp(self, email: str, code: str) -> SecretOutcome:
        """
        Check a code and consume it on success.

        Every call that finds a live code increments the attempt counter,
        whatever the comparison result. Failures are never told apart.

        Returns:
            SecretOutcome with ``attempts`` set once the counter was touched
        """
        if self.store is None:
            return SecretOutcome.failed(FailureKind.NOT_CONFIGURED, detail="otp engine not wired")

        normalized = normalize_email(email)
        if not normalized:
            return SecretOutcome.failed(FailureKind.VERIFICATION_FAILED, detail="empty email")

        record_key = self.record_key(normalized)
        stored_hash = await self.store.get(record_key)
        if stored_hash is None:
            self.log.warning("OTP missing or expired", email=mask_email(normalized))
            return SecretOutcome.failed(FailureKind.VERIFICATION_FAILED, detail="no active code")

        attempts = await self.store.incr_window(self.attempt_key(normalized), self.config.ttl)

        if self.config.max_attempts > 0 and attempts > self.config.max_attempts:
            await best_effort_delete(self.store, record_key, self.log, "lock out code")
            self.log.warning(
                "OTP attempts exhausted",
                email=mask_email(normalized),
                attempts=attempts,
            )
            return SecretOutcome.failed(
                FailureKind.VERIFICATION_FAILED, detail="attempts exhausted", attempts=attempts,
            )

        if not verify_secret_hash((code or "").strip(), self.config.secret, stored_hash):
            self.log.warning(
                "Invalid OTP attempt",
                email=mask_email(normalized),
                attempts=attempts,
            )
            return SecretOutcome.failed(
                FailureKind.VERIFICATION_FAILED, detail="code mismatch", attempts=attempts,
            )

        await best_effort_delete(self.store, record_key, self.log, "consume code")
        await best_effort_delete(self.store, self.attempt_key(normalized), self.log, "clear attempts")

        self.log.info("OTP verified", email=mask_email(normalized), attempts=attempts)
        return SecretOutcome.success(normalized, attempts=attempts)

    async def get_attempts(self, email: str) -> int:
        """Current failed-verification count for an email."""
        if self.store is None:
            return 0
        value = await self.store.get(self.attempt_key(normalize_email(email)))
        return int(value) if value else 0

    async def clear_attempts(self, email: str) -> None:
        """Explicitly reset the attempt counter."""
        if self.store is None:
            return
        await self.store.delete(self.attempt_key(normalize_email(email)))
