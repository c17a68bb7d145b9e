"""
Webhook dispatcher: fans a processed event out to application listeners.

Runs in the Celery worker, never on the request path.

Flow:
    1. Connect event (has account id) -> look the account up once,
       build a ConnectWebhook, publish under the Connect prefix
       Platform event -> build a Webhook, publish under the platform prefix
    2. Publish to the three topics in order (coarsest to most specific)
    3. Touch the stored record

Because the record is touched only after every publish succeeded, a
failure part way through leaves updated_at unchanged and the job is
retried by Celery. Retries can publish a topic more than once.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from stripe_webhooks.bus import topics_for
from stripe_webhooks.notifications import ConnectWebhook, Webhook

if TYPE_CHECKING:
    from stripe_webhooks.accounts import AccountResolver
    from stripe_webhooks.bus import SignalEventBus
    from stripe_webhooks.events import Event
    from stripe_webhooks.models import StripeAccount, StripeEvent
    from stripe_webhooks.routing import QueueRouter
    from stripe_webhooks.store import EventStore

logger = logging.getLogger(__name__)


class Dispatcher:
    """Dispatches processed webhooks to the event bus."""

    def __init__(
        self,
        bus: SignalEventBus,
        accounts: AccountResolver,
        store: EventStore,
        router: QueueRouter,
    ):
        self.bus = bus
        self.accounts = accounts
        self.store = store
        self.router = router

    def dispatch(self, event: Event, record: StripeEvent | None = None) -> None:
        """
        Dispatch an event to listeners, then touch its stored record.

        Args:
            event: The event to dispatch
            record: Its stored record, if any

        Raises:
            DispatchError: If a listener or the account lookup fails
        """
        if event.is_connect:
            self.dispatch_connect(event, self.accounts.find(event.account_id), record)
        else:
            self.dispatch_account(event, record)

        if record is not None:
            self.store.touch(record)

        logger.info(
            f"Dispatched Stripe webhook: {event.type}",
            extra={
                "stripe_event_id": event.id,
                "event_type": event.type,
                "account_id": event.account_id,
            },
        )

    def dispatch_account(self, event: Event, record: StripeEvent | None = None) -> None:
        """Dispatch a webhook for the platform's own Stripe account."""
        webhook = Webhook(
            event=event,
            record=record,
            queue=self.router.resolve(event.type, connect_scoped=False),
        )
        self._publish(webhook, topics_for(event.type, connect=False))

    def dispatch_connect(
        self,
        event: Event,
        account: StripeAccount | None = None,
        record: StripeEvent | None = None,
    ) -> None:
        """Dispatch a webhook for a Stripe Connect account."""
        webhook = ConnectWebhook(
            event=event,
            record=record,
            queue=self.router.resolve(event.type, connect_scoped=True),
            account=account,
        )
        self._publish(webhook, topics_for(event.type, connect=True))

    def _publish(self, webhook: Webhook, topics: tuple[str, ...]) -> None:
        for topic in topics:
            logger.debug(
                f"Publishing webhook to {topic}",
                extra={"stripe_event_id": webhook.event.id, "topic": topic},
            )
            self.bus.publish(topic, webhook)
