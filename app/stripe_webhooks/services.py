"""
Wiring for the webhook pipeline.

Builds Receiver and Dispatcher instances from the validated configuration
with the default Django/Celery implementations of their collaborators.
Code that needs different collaborators (tests, management commands)
constructs Receiver/Dispatcher directly.

Usage:
    from stripe_webhooks.services import get_dispatcher, get_receiver

    get_receiver().receive(event)            # request path
    get_dispatcher().dispatch(event, record) # worker
"""

from __future__ import annotations

from stripe_webhooks.accounts import DjangoAccountResolver
from stripe_webhooks.bus import webhook_bus
from stripe_webhooks.conf import get_webhook_config
from stripe_webhooks.dispatcher import Dispatcher
from stripe_webhooks.queue import CeleryJobQueue
from stripe_webhooks.receiver import Receiver
from stripe_webhooks.routing import QueueRouter
from stripe_webhooks.store import DjangoEventStore


def get_job_queue() -> CeleryJobQueue:
    return CeleryJobQueue(get_webhook_config())


def get_receiver() -> Receiver:
    """Receiver wired to the database store and the Celery job queue."""
    config = get_webhook_config()

    return Receiver(
        store=DjangoEventStore(),
        queue=CeleryJobQueue(config),
        router=QueueRouter(config),
    )


def get_dispatcher() -> Dispatcher:
    """Dispatcher wired to the application webhook bus."""
    return Dispatcher(
        bus=webhook_bus,
        accounts=DjangoAccountResolver(),
        store=DjangoEventStore(),
        router=QueueRouter(get_webhook_config()),
    )
