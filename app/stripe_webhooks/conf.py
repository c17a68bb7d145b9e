"""
Typed webhook configuration.

Settings are read once from ``settings.STRIPE_WEBHOOKS``, validated, and
frozen into a WebhookConfig that is passed to the queue router, the job
queue and the signature verifier. Nothing downstream reads Django settings
directly.

Settings shape:
    STRIPE_WEBHOOKS = {
        "default_queue_connection": None,        # named connection or None
        "default_queue": "stripe-webhooks",      # queue name or None
        "connections": {"billing": "redis://..."},
        "signing_secrets": {"default": "whsec_...", "connect": "whsec_..."},
        "account": {
            "invoice_payment_failed": {"queue": "billing", "job": "billing.tasks.dunning"},
        },
        "connect": {
            "account_updated": {"connection": "billing"},
        },
    }

Override keys are the event type with "." replaced by "_". Only the
``connection``, ``queue`` and ``job`` fields are allowed in an override.

Usage:
    from stripe_webhooks.conf import get_webhook_config

    config = get_webhook_config()
    secret = config.signing_secret("connect")
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import lru_cache
from typing import TYPE_CHECKING

from django.conf import settings
from django.core.signals import setting_changed
from django.dispatch import receiver

from stripe_webhooks.exceptions import ConfigurationError

if TYPE_CHECKING:
    from typing import Any

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

SETTINGS_NAME = "STRIPE_WEBHOOKS"

ACCOUNT_SCOPE = "account"
CONNECT_SCOPE = "connect"

QUEUE_FIELDS = ("connection", "queue", "job")


# =============================================================================
# Config
# =============================================================================


@dataclass(frozen=True)
class WebhookConfig:
    """
    Validated webhook configuration.

    Attributes:
        default_connection: Named broker connection used when no override sets one
        default_queue: Queue name used when no override sets one
        connections: Named broker URLs (name -> URL)
        signing_secrets: Named webhook signing secrets (name -> whsec_...)
        account_overrides: Per-type queue overrides for platform events
        connect_overrides: Per-type queue overrides for Connect events
    """

    default_connection: str | None = None
    default_queue: str | None = None
    connections: Mapping[str, str] = field(default_factory=dict)
    signing_secrets: Mapping[str, Any] = field(default_factory=dict)
    account_overrides: Mapping[str, Mapping[str, str | None]] = field(
        default_factory=dict
    )
    connect_overrides: Mapping[str, Mapping[str, str | None]] = field(
        default_factory=dict
    )

    @classmethod
    def from_settings(cls, data: Mapping[str, Any] | None) -> WebhookConfig:
        """
        Build and validate a config from the STRIPE_WEBHOOKS settings dict.

        Args:
            data: The raw settings mapping (None is treated as empty)

        Returns:
            A frozen WebhookConfig

        Raises:
            ConfigurationError: If any section has the wrong shape
        """
        data = _mapping(data or {}, SETTINGS_NAME)

        return cls(
            default_connection=_optional_str(
                data.get("default_queue_connection"),
                f"{SETTINGS_NAME}.default_queue_connection",
            ),
            default_queue=_optional_str(
                data.get("default_queue"), f"{SETTINGS_NAME}.default_queue"
            ),
            connections=_connections(data.get("connections") or {}),
            signing_secrets=dict(
                _mapping(
                    data.get("signing_secrets") or {},
                    f"{SETTINGS_NAME}.signing_secrets",
                )
            ),
            account_overrides=_overrides(data.get(ACCOUNT_SCOPE) or {}, ACCOUNT_SCOPE),
            connect_overrides=_overrides(data.get(CONNECT_SCOPE) or {}, CONNECT_SCOPE),
        )

    def overrides_for(self, connect_scoped: bool) -> Mapping[str, Mapping[str, str | None]]:
        """Return the override section for Connect or platform events."""
        return self.connect_overrides if connect_scoped else self.account_overrides

    def connection_url(self, name: str) -> str:
        """
        Get the broker URL for a named connection.

        Raises:
            ConfigurationError: If the connection is not configured
        """
        try:
            return self.connections[name]
        except KeyError:
            raise ConfigurationError(
                f"Webhook queue connection does not exist: {name}",
                details={"connection": name},
            ) from None

    def signing_secret(self, name: str) -> str:
        """
        Get a webhook signing secret by name.

        Args:
            name: The secret's configured name (e.g. "default", "connect")

        Returns:
            The signing secret

        Raises:
            ConfigurationError: If the secret is missing, empty or not a string
        """
        if name not in self.signing_secrets:
            raise ConfigurationError(
                f"Webhook signing secret does not exist: {name}",
                details={"secret": name},
            )

        secret = self.signing_secrets[name]

        if not isinstance(secret, str) or not secret:
            raise ConfigurationError(
                f"Invalid webhook signing secret: {name}",
                details={"secret": name},
            )

        return secret


# =============================================================================
# Validation Helpers
# =============================================================================


def _mapping(value: Any, path: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ConfigurationError(
            f"Expecting {path} to be a mapping, got {type(value).__name__}",
            details={"path": path},
        )
    return value


def _optional_str(value: Any, path: str) -> str | None:
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ConfigurationError(
            f"Expecting {path} to be a string, got {type(value).__name__}",
            details={"path": path},
        )
    return value


def _connections(value: Any) -> dict[str, str]:
    path = f"{SETTINGS_NAME}.connections"
    connections = {}

    for name, url in _mapping(value, path).items():
        if not isinstance(url, str) or not url:
            raise ConfigurationError(
                f"Invalid broker URL for webhook queue connection: {name}",
                details={"path": f"{path}.{name}"},
            )
        connections[name] = url

    return connections


def _overrides(value: Any, scope: str) -> dict[str, dict[str, str | None]]:
    path = f"{SETTINGS_NAME}.{scope}"
    overrides = {}

    for key, override in _mapping(value, path).items():
        override = _mapping(override, f"{path}.{key}")
        unknown = set(override) - set(QUEUE_FIELDS)
        if unknown:
            raise ConfigurationError(
                f"Unknown queue setting(s) for {path}.{key}: {', '.join(sorted(unknown))}",
                details={"path": f"{path}.{key}", "unknown": sorted(unknown)},
            )
        overrides[key] = {
            name: _optional_str(override[name], f"{path}.{key}.{name}")
            for name in QUEUE_FIELDS
            if name in override
        }

    return overrides


# =============================================================================
# Accessors
# =============================================================================


@lru_cache(maxsize=1)
def get_webhook_config() -> WebhookConfig:
    """
    Return the validated config for the current Django settings.

    The result is cached; the cache is cleared whenever STRIPE_WEBHOOKS
    changes (e.g. under override_settings in tests).
    """
    config = WebhookConfig.from_settings(getattr(settings, SETTINGS_NAME, None))
    logger.debug(
        "Loaded webhook configuration",
        extra={
            "default_queue": config.default_queue,
            "default_connection": config.default_connection,
            "account_overrides": len(config.account_overrides),
            "connect_overrides": len(config.connect_overrides),
        },
    )
    return config


@receiver(setting_changed)
def _reset_webhook_config(sender, setting: str, **kwargs) -> None:
    if setting == SETTINGS_NAME:
        get_webhook_config.cache_clear()
