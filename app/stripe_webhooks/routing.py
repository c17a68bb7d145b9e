"""
Queue routing for webhook events.

Resolves which broker connection, queue and (optionally) application job a
webhook event type is routed to. Resolution is a pure lookup over the
validated WebhookConfig; a missing override is not an error and yields the
global defaults.

Usage:
    from stripe_webhooks.routing import QueueRouter

    router = QueueRouter(config)
    settings = router.resolve("payment_intent.succeeded", connect_scoped=False)
    settings.queue  # "stripe-webhooks"
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from stripe_webhooks.conf import ACCOUNT_SCOPE, CONNECT_SCOPE

if TYPE_CHECKING:
    from stripe_webhooks.conf import WebhookConfig


@dataclass(frozen=True)
class QueueSettings:
    """
    Queue routing for one (event type, scope) pair.

    Attributes:
        connection: Named broker connection, None for the default broker
        queue: Queue name, None for the broker's default queue
        job: Celery task name to run for this event type, if any
    """

    connection: str | None = None
    queue: str | None = None
    job: str | None = None


def config_key(event_type: str) -> str:
    """Convert an event type to its override key: payment_intent.succeeded -> payment_intent_succeeded."""
    return event_type.replace(".", "_")


class QueueRouter:
    """Resolves QueueSettings from a WebhookConfig."""

    def __init__(self, config: WebhookConfig):
        self.config = config

    def path(self, event_type: str, connect_scoped: bool = False) -> str:
        """Return the dotted settings path consulted for an event type."""
        scope = CONNECT_SCOPE if connect_scoped else ACCOUNT_SCOPE
        return f"{scope}.{config_key(event_type)}"

    def resolve(self, event_type: str, connect_scoped: bool = False) -> QueueSettings:
        """
        Resolve queue settings for an event type.

        Args:
            event_type: Stripe event type (e.g. "invoice.payment_failed")
            connect_scoped: True for events belonging to a connected account

        Returns:
            QueueSettings with type-specific overrides applied over defaults
        """
        override = self.config.overrides_for(connect_scoped).get(
            config_key(event_type), {}
        )

        return QueueSettings(
            connection=override.get("connection", self.config.default_connection),
            queue=override.get("queue", self.config.default_queue),
            job=override.get("job"),
        )
