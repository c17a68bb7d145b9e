"""
Notifications handed to webhook listeners.

Every topic published for one event receives the same notification
instance. Platform events produce a Webhook; events for a connected
account produce a ConnectWebhook, which also carries the resolved
StripeAccount (None when the account is not stored locally).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from stripe_webhooks.events import Event
    from stripe_webhooks.models import StripeAccount, StripeEvent
    from stripe_webhooks.routing import QueueSettings


@dataclass(frozen=True)
class Webhook:
    """
    A dispatched platform webhook.

    Attributes:
        event: The verified event
        record: The stored record, if dispatch was given one
        queue: Queue settings resolved for the event type
    """

    event: Event
    record: StripeEvent | None
    queue: QueueSettings

    @property
    def type(self) -> str:
        return self.event.type

    @property
    def is_connect(self) -> bool:
        return False


@dataclass(frozen=True)
class ConnectWebhook(Webhook):
    """A dispatched webhook for a connected account."""

    account: StripeAccount | None = None

    @property
    def account_id(self) -> str | None:
        return self.event.account_id

    @property
    def is_connect(self) -> bool:
        return True
