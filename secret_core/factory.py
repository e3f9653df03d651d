"""
Engine Factory
==============
Wires store, gateway and settings into ready-to-use engines.
"""

from dataclasses import dataclass
from typing import Optional

import structlog

from .config import SecretCoreSettings
from .delivery import BrevoMailer, DeliveryGateway, OutboxMailer
from .otp import OTPEngine
from .reset import ResetEngine
from .store import BaseSecretStore, RedisSecretStore

logger = structlog.get_logger(__name__)


@dataclass
class SecretEngines:
    """The two engines sharing one store and one gateway."""
    otp: OTPEngine
    reset: ResetEngine
    store: BaseSecretStore
    gateway: DeliveryGateway

    async def aclose(self) -> None:
        try:
            await self.gateway.close()
        finally:
            await self.store.close()


def build_gateway(settings: SecretCoreSettings) -> DeliveryGateway:
    """Brevo when credentials are present, otherwise the in-memory outbox."""
    if settings.mail.configured:
        return BrevoMailer(settings.mail)
    logger.warning("Mail credentials missing, using outbox gateway", service=settings.service_name)
    return OutboxMailer()


def create_engines(
    settings: Optional[SecretCoreSettings] = None,
    store: Optional[BaseSecretStore] = None,
    gateway: Optional[DeliveryGateway] = None,
) -> SecretEngines:
    """
    Build both engines.

    Args:
        settings: Loaded from the environment when omitted
        store: Defaults to a RedisSecretStore on ``settings.redis_url``
        gateway: Defaults to build_gateway(settings)
    """
    settings = settings or SecretCoreSettings.from_env()
    store = store or RedisSecretStore.from_url(settings.redis_url)
    gateway = gateway or build_gateway(settings)

    log = logger.bind(service=settings.service_name)
    engines = SecretEngines(
        otp=OTPEngine(store, gateway, settings.otp, log=log),
        reset=ResetEngine(store, gateway, settings.reset, log=log),
        store=store,
        gateway=gateway,
    )
    log.info("Secret engines ready", store=store.name, gateway=gateway.name)
    return engines
