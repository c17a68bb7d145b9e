"""
Webhook event bus: string topics over Django signals.

Each dispatched webhook is published under three topics, coarsest first:

    stripe.webhooks
    stripe.webhooks:payment_intent
    stripe.webhooks:payment_intent.succeeded

Connect webhooks use the ``stripe.connect.webhooks`` prefix instead. An
application binds at whichever level it needs.

Listeners are ordinary Django signal receivers taking the notification
as a keyword argument:

    from stripe_webhooks.bus import listen

    @listen("stripe.webhooks:invoice.payment_failed")
    def on_payment_failed(sender, notification, **kwargs):
        start_dunning(notification.event.payload["data"]["object"]["id"])

Listener exceptions are not swallowed: publish() re-raises them as
DispatchError so the worker job fails and is retried. Listeners must
therefore tolerate seeing the same event more than once.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from django.dispatch import Signal

from stripe_webhooks.exceptions import DispatchError

if TYPE_CHECKING:
    from stripe_webhooks.notifications import Webhook

logger = logging.getLogger(__name__)


# =============================================================================
# Topics
# =============================================================================

EVENT_PREFIX = "stripe.webhooks"
CONNECT_EVENT_PREFIX = "stripe.connect.webhooks"


def topics_for(event_type: str, connect: bool = False) -> tuple[str, str, str]:
    """
    Topic names for an event type, coarsest to most specific.

    Args:
        event_type: Stripe event type (e.g. "invoice.payment_failed")
        connect: True to use the Connect prefix

    Returns:
        (prefix, "prefix:root", "prefix:type")
    """
    prefix = CONNECT_EVENT_PREFIX if connect else EVENT_PREFIX
    root = event_type.split(".", 1)[0]

    return (
        prefix,
        f"{prefix}:{root}",
        f"{prefix}:{event_type}",
    )


# =============================================================================
# Bus
# =============================================================================


class SignalEventBus:
    """
    Publish/subscribe bus with one Django Signal per topic.

    Receivers are connected with strong references, so lambdas and
    closures stay registered until disconnected.
    """

    def __init__(self):
        self._signals: dict[str, Signal] = {}

    def signal(self, topic: str) -> Signal:
        """Get (creating if needed) the Signal backing a topic."""
        if topic not in self._signals:
            self._signals[topic] = Signal()
        return self._signals[topic]

    def listen(
        self,
        topic: str,
        receiver: Callable,
        dispatch_uid: str | None = None,
    ) -> None:
        """Connect a receiver to a topic."""
        self.signal(topic).connect(receiver, weak=False, dispatch_uid=dispatch_uid)
        logger.debug(f"Registered webhook listener for {topic}")

    def disconnect(
        self,
        topic: str,
        receiver: Callable | None = None,
        dispatch_uid: str | None = None,
    ) -> bool:
        """Disconnect a receiver; returns whether one was connected."""
        if topic not in self._signals:
            return False
        return self._signals[topic].disconnect(receiver, dispatch_uid=dispatch_uid)

    def has_listeners(self, topic: str) -> bool:
        return topic in self._signals and self._signals[topic].has_listeners()

    def publish(self, topic: str, notification: Webhook) -> None:
        """
        Deliver a notification to every receiver of a topic.

        Raises:
            DispatchError: If any receiver raises; later receivers of the
                topic are not called
        """
        if not self.has_listeners(topic):
            return

        try:
            self._signals[topic].send(
                sender=type(notification),
                notification=notification,
            )
        except Exception as e:
            raise DispatchError(
                f"Webhook listener for {topic} failed: {type(e).__name__}: {e}",
                details={
                    "topic": topic,
                    "stripe_event_id": notification.event.id,
                    "event_type": notification.event.type,
                },
            ) from e


# Application-wide bus used by the Dispatcher and the @listen decorator.
webhook_bus = SignalEventBus()


def listen(*topics: str, bus: SignalEventBus | None = None, **kwargs) -> Callable:
    """
    Decorator connecting a receiver to one or more topics.

    Usage:
        @listen("stripe.webhooks:customer", "stripe.connect.webhooks:customer")
        def on_customer_event(sender, notification, **kwargs):
            ...
    """
    bus = bus or webhook_bus

    def decorator(func: Callable) -> Callable:
        for topic in topics:
            bus.listen(topic, func, **kwargs)
        return func

    return decorator
