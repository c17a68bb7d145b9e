"""
Webhook receiver: the synchronous ingestion step.

Called on the request path right after the signature has been verified.
It stores the event and queues a job to process it, then returns so the
HTTP layer can acknowledge Stripe immediately. Dispatch to listeners
happens later in the worker (see stripe_webhooks.dispatcher).

Idempotency:
    - Stripe delivers at least once, so the same event id can arrive twice
    - The store's insert is the only duplicate check; a duplicate is
      logged and receive() returns without queueing a second job
    - The job is queued only once the insert has committed, so no job
      can refer to a rolled-back record; a failed commit raises
      TransientStoreError
    - If queueing fails the committed record is deleted again and the
      error propagates, so the caller answers with a failure status and
      Stripe redelivers
    - Called inside an outer transaction, the job is queued when that
      transaction commits

Usage:
    from stripe_webhooks.services import get_receiver

    event = construct_event(request.body, request.headers["Stripe-Signature"])
    try:
        get_receiver().receive(event)
    except WebhookError:
        return HttpResponse(status=500)
    return HttpResponse(status=200)
"""

from __future__ import annotations

import logging
from functools import partial
from typing import TYPE_CHECKING

from stripe_webhooks.exceptions import DuplicateEventError
from stripe_webhooks.queue import ProcessWebhookJob

if TYPE_CHECKING:
    from stripe_webhooks.events import Event
    from stripe_webhooks.models import StripeEvent
    from stripe_webhooks.queue import JobQueue
    from stripe_webhooks.routing import QueueRouter
    from stripe_webhooks.store import EventStore

logger = logging.getLogger(__name__)


class Receiver:
    """Stores inbound webhook events and queues them for processing."""

    def __init__(self, store: EventStore, queue: JobQueue, router: QueueRouter):
        self.store = store
        self.queue = queue
        self.router = router

    def did_receive(self, event: Event) -> bool:
        """Whether this event id has already been stored."""
        return self.store.exists(event.id)

    def receive(self, event: Event) -> None:
        """
        Store a new event and queue it for asynchronous dispatch.

        Args:
            event: The verified event

        Raises:
            TransientStoreError: If the event could not be stored or committed
            JobQueueError: If the processing job could not be queued
            ConfigurationError: If the resolved queue connection is unknown
        """
        logger.info(
            f"Received Stripe webhook: {event.type}",
            extra={
                "stripe_event_id": event.id,
                "event_type": event.type,
                "account_id": event.account_id,
            },
        )

        try:
            with self.store.atomic():
                record = self.store.create(event)
                self.store.on_commit(partial(self._enqueue, event, record))
        except DuplicateEventError:
            logger.info(
                "Webhook already received, skipping",
                extra={"stripe_event_id": event.id, "event_type": event.type},
            )

    def _enqueue(self, event: Event, record: StripeEvent) -> None:
        try:
            self.queue.enqueue(self.job_for(event, record))
        except Exception:
            logger.error(
                "Could not queue webhook, discarding stored record",
                extra={"stripe_event_id": event.id, "event_type": event.type},
            )
            self.store.delete(record)
            raise

    def job_for(self, event: Event, record: StripeEvent) -> ProcessWebhookJob:
        """Build the processing job for a stored event."""
        settings = self.router.resolve(event.type, connect_scoped=event.is_connect)

        return ProcessWebhookJob(
            record_id=record.pk,
            payload=event.payload,
            connection=settings.connection,
            queue=settings.queue,
        )
