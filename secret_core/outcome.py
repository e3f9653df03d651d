"""
Outcome Models
==============
Tagged result returned by every engine operation.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class OutcomeStatus(str, Enum):
    """Top-level discriminant of an engine result."""
    OK = "ok"
    THROTTLED = "throttled"
    FAILED = "failed"


class ThrottleReason(str, Enum):
    """Which throttle layer rejected a send."""
    COOLDOWN = "cooldown"
    RATE_LIMIT = "rate_limit"


class FailureKind(str, Enum):
    """Classified domain failures."""
    INVALID_INPUT = "invalid_input"
    NOT_CONFIGURED = "not_configured"
    DELIVERY_FAILED = "delivery_failed"
    VERIFICATION_FAILED = "verification_failed"
    INVALID = "invalid"


# User-facing text. Verification failures deliberately share one message.
_FAILURE_MESSAGES = {
    FailureKind.INVALID_INPUT: "Invalid request",
    FailureKind.NOT_CONFIGURED: "Service is not available",
    FailureKind.DELIVERY_FAILED: "Service is not available",
    FailureKind.VERIFICATION_FAILED: "Verification failed, please try again",
    FailureKind.INVALID: "Invalid or expired token",
}


@dataclass(frozen=True)
class SecretOutcome:
    """Result of a send or verify call."""
    status: OutcomeStatus
    email: Optional[str] = None
    reason: Optional[ThrottleReason] = None
    retry_after: Optional[int] = None  # Seconds until retry allowed
    kind: Optional[FailureKind] = None
    attempts: Optional[int] = None
    detail: Optional[str] = None  # Operator-facing only

    @classmethod
    def success(cls, email: Optional[str] = None, attempts: Optional[int] = None) -> "SecretOutcome":
        return cls(status=OutcomeStatus.OK, email=email, attempts=attempts)

    @classmethod
    def throttled(cls, reason: ThrottleReason, retry_after: int) -> "SecretOutcome":
        return cls(status=OutcomeStatus.THROTTLED, reason=reason, retry_after=retry_after)

    @classmethod
    def failed(
        cls,
        kind: FailureKind,
        detail: Optional[str] = None,
        attempts: Optional[int] = None,
    ) -> "SecretOutcome":
        return cls(status=OutcomeStatus.FAILED, kind=kind, detail=detail, attempts=attempts)

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.OK

    @property
    def is_throttled(self) -> bool:
        return self.status is OutcomeStatus.THROTTLED

    @property
    def message(self) -> str:
        """Text safe to show to an end user."""
        if self.status is OutcomeStatus.OK:
            return "OK"
        if self.status is OutcomeStatus.THROTTLED:
            return f"Please wait {self.retry_after} seconds before trying again"
        return _FAILURE_MESSAGES.get(self.kind, "Request failed")
