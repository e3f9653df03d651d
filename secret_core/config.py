"""
Secret Core Configuration
=========================
Process-wide defaults loaded from the environment once and passed explicitly
into each engine. Request-level overrides (app name) are plain call arguments.
"""

import os
import re
from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence

from .exceptions import ConfigurationError

DEFAULT_APP_NAME = "Account Verification"
BREVO_API_URL = "https://api.brevo.com/v3/smtp/email"

_DURATION_PART = re.compile(r"(\d+)(h|m|s)")
_UNIT_SECONDS = {"h": 3600, "m": 60, "s": 1}


def parse_duration(value: str) -> int:
    """
    Parse a duration into whole seconds.

    Accepts plain seconds ("90") or unit strings ("90s", "5m", "1h30m").

    Raises:
        ConfigurationError: If the value is not a recognised duration
    """
    text = value.strip().lower()
    if text.isdigit():
        return int(text)
    parts = _DURATION_PART.findall(text)
    if not parts or "".join(n + u for n, u in parts) != text:
        raise ConfigurationError(f"Invalid duration: {value!r}")
    return sum(int(n) * _UNIT_SECONDS[u] for n, u in parts)


def _first(env: Mapping[str, str], keys: Sequence[str]) -> Optional[str]:
    for key in keys:
        value = env.get(key, "").strip()
        if value:
            return value
    return None


def _duration(env: Mapping[str, str], keys: Sequence[str], default: int) -> int:
    value = _first(env, keys)
    return parse_duration(value) if value is not None else default


def _int(env: Mapping[str, str], key: str, default: int) -> int:
    value = _first(env, [key])
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{key} must be an integer, got {value!r}")


def _str(env: Mapping[str, str], keys: Sequence[str], default: str) -> str:
    value = _first(env, keys)
    return value if value is not None else default


@dataclass
class OTPConfig:
    """Registration OTP settings. Durations are seconds."""
    ttl: int = 300  # 5 minutes
    cooldown: int = 60
    rate_limit: int = 5
    rate_window: Optional[int] = None  # Defaults to ttl
    secret: str = "otp-secret"
    max_attempts: int = 5  # 0 disables lockout
    app_name: str = DEFAULT_APP_NAME

    def __post_init__(self):
        if self.rate_window is None:
            self.rate_window = self.ttl

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "OTPConfig":
        env = os.environ if env is None else env
        ttl = _duration(env, ["OTP_TTL", "OTP_TTL_SECONDS"], 300)
        return cls(
            ttl=ttl,
            cooldown=_duration(env, ["OTP_COOLDOWN", "OTP_COOLDOWN_SECONDS"], 60),
            rate_limit=_int(env, "OTP_RATE_LIMIT", 5),
            rate_window=_duration(env, ["OTP_RATE_WINDOW", "OTP_RATE_WINDOW_SECONDS"], ttl),
            secret=_str(env, ["OTP_SECRET"], "otp-secret"),
            max_attempts=_int(env, "OTP_MAX_ATTEMPTS", 5),
            app_name=_str(env, ["OTP_APP_NAME"], DEFAULT_APP_NAME),
        )


@dataclass
class ResetConfig:
    """Password reset settings. Durations are seconds."""
    ttl: int = 900  # 15 minutes
    cooldown: int = 60
    rate_limit: int = 5
    rate_window: Optional[int] = None  # Defaults to ttl
    secret: str = "reset-secret"
    url_template: str = ""
    app_name: str = DEFAULT_APP_NAME

    def __post_init__(self):
        if self.rate_window is None:
            self.rate_window = self.ttl

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "ResetConfig":
        env = os.environ if env is None else env
        ttl = _duration(env, ["RESET_TTL", "RESET_TTL_SECONDS"], 900)
        return cls(
            ttl=ttl,
            cooldown=_duration(env, ["RESET_COOLDOWN", "RESET_COOLDOWN_SECONDS"], 60),
            rate_limit=_int(env, "RESET_RATE_LIMIT", 5),
            rate_window=_duration(env, ["RESET_RATE_WINDOW", "RESET_RATE_WINDOW_SECONDS"], ttl),
            secret=_str(env, ["RESET_SECRET"], "reset-secret"),
            url_template=_str(env, ["RESET_URL_TEMPLATE", "RESET_URL"], ""),
            app_name=_str(env, ["RESET_APP_NAME", "OTP_APP_NAME"], DEFAULT_APP_NAME),
        )


@dataclass
class MailConfig:
    """Brevo transactional email settings."""
    api_key: str = ""
    api_url: str = BREVO_API_URL
    sender: str = ""
    otp_subject: str = "Your Registration OTP"
    reset_subject: str = "Reset your password"
    timeout: float = 10.0

    @property
    def configured(self) -> bool:
        return bool(self.api_key and self.sender)

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "MailConfig":
        env = os.environ if env is None else env
        timeout = _first(env, ["MAIL_TIMEOUT"])
        try:
            timeout_value = float(timeout) if timeout is not None else 10.0
        except ValueError:
            raise ConfigurationError(f"MAIL_TIMEOUT must be a number, got {timeout!r}")
        return cls(
            api_key=_str(env, ["BREVO_API_KEY"], ""),
            api_url=_str(env, ["BREVO_API_URL"], BREVO_API_URL),
            sender=_str(env, ["MAIL_FROM", "SMTP_FROM"], ""),
            otp_subject=_str(env, ["OTP_SUBJECT", "SMTP_SUBJECT"], "Your Registration OTP"),
            reset_subject=_str(env, ["RESET_SUBJECT"], "Reset your password"),
            timeout=timeout_value,
        )


@dataclass
class SecretCoreSettings:
    """Everything a service needs to wire the engines."""
    otp: OTPConfig = field(default_factory=OTPConfig)
    reset: ResetConfig = field(default_factory=ResetConfig)
    mail: MailConfig = field(default_factory=MailConfig)
    redis_url: str = "redis://localhost:6379/0"
    service_name: str = "secret-core"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "SecretCoreSettings":
        env = os.environ if env is None else env
        return cls(
            otp=OTPConfig.from_env(env),
            reset=ResetConfig.from_env(env),
            mail=MailConfig.from_env(env),
            redis_url=_str(env, ["REDIS_URL"], "redis://localhost:6379/0"),
            service_name=_str(env, ["SERVICE_NAME"], "secret-core"),
            log_level=_str(env, ["LOG_LEVEL"], "INFO"),
        )
