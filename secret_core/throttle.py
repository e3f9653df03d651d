"""
Send Throttle
=============
Layered cooldown + windowed send counter shared by the OTP and reset flows.

Keys are ``{domain}:cooldown:{email}`` and ``{domain}:rate:{email}``.
"""

from typing import Optional

import structlog

from .crypto import mask_email
from .exceptions import SecretStoreError
from .outcome import SecretOutcome, ThrottleReason
from .store import BaseSecretStore

logger = structlog.get_logger(__name__)

COOLDOWN_SENTINEL = "1"


async def best_effort_delete(store: BaseSecretStore, key: str, log, purpose: str) -> None:
    """Delete a key, logging instead of raising on store failure."""
    try:
        await store.delete(key)
    except SecretStoreError as e:
        log.warning("Cleanup failed", purpose=purpose, operation=e.operation, error=str(e))


class SendThrottle:
    """
    Cooldown and send-rate checks for one domain.

    The send counter is incremented before the limit is compared and is not
    decremented when the send is rejected, so a throttled attempt still uses a
    slot in the current window.
    """

    def __init__(
        self,
        store: BaseSecretStore,
        domain: str,
        cooldown: int,
        rate_limit: int,
        rate_window: int,
        log=None,
    ):
        self.store = store
        self.domain = domain
        self.cooldown = cooldown
        self.rate_limit = rate_limit
        self.rate_window = rate_window
        self.log = log or logger

    def cooldown_key(self, email: str) -> str:
        return f"{self.domain}:cooldown:{email}"

    def rate_key(self, email: str) -> str:
        return f"{self.domain}:rate:{email}"

    @property
    def rate_limited(self) -> bool:
        return self.rate_limit > 0 and self.rate_window > 0

    async def check(self, email: str) -> Optional[SecretOutcome]:
        """
        Apply the cooldown then the rate limit.

        Args:
            email: Normalized email

        Returns:
            A throttled outcome, or None when the send may proceed

        Raises:
            SecretStoreError: Tagged "check cooldown" or "rate limit"
        """
        cooldown_key = self.cooldown_key(email)
        try:
            remaining = await self.store.ttl(cooldown_key)
        except SecretStoreError as e:
            raise SecretStoreError("check cooldown", key=cooldown_key, cause=e) from e

        if remaining > 0:
            self.log.info(
                "Send blocked by cooldown",
                domain=self.domain,
                email=mask_email(email),
                retry_after=remaining,
            )
            return SecretOutcome.throttled(ThrottleReason.COOLDOWN, remaining)

        if not self.rate_limited:
            return None

        rate_key = self.rate_key(email)
        try:
            count = await self.store.incr_window(rate_key, self.rate_window)
            if count <= self.rate_limit:
                return None
            window_left = await self.store.ttl(rate_key)
        except SecretStoreError as e:
            raise SecretStoreError("rate limit", key=rate_key, cause=e) from e

        retry_after = window_left if window_left > 0 else self.rate_window
        self.log.warning(
            "Send blocked by rate limit",
            domain=self.domain,
            email=mask_email(email),
            count=count,
            limit=self.rate_limit,
            retry_after=retry_after,
        )
        return SecretOutcome.throttled(ThrottleReason.RATE_LIMIT, retry_after)

    async def arm_cooldown(self, email: str) -> None:
        """Write the cooldown marker. No-op when cooldown is disabled."""
        if self.cooldown > 0:
            await self.store.set(self.cooldown_key(email), COOLDOWN_SENTINEL, self.cooldown)

    async def clear_cooldown(self, email: str) -> None:
        await best_effort_delete(self.store, self.cooldown_key(email), self.log, "clear cooldown")

    async def clear_send_count(self, email: str) -> None:
        await best_effort_delete(self.store, self.rate_key(email), self.log, "clear send count")

    async def reset(self, email: str) -> None:
        """Clear both throttle layers, best-effort."""
        await self.clear_cooldown(email)
        await self.clear_send_count(email)
