"""
Default webhook listeners registered by the app.

dispatch_configured_job is bound to the unscoped platform and Connect
topics. When STRIPE_WEBHOOKS configures a ``job`` for an event type, it
queues that Celery task on the event type's connection and queue:

    STRIPE_WEBHOOKS = {
        "account": {
            "invoice_payment_failed": {
                "queue": "billing",
                "job": "billing.tasks.handle_payment_failed",
            },
        },
    }

The task receives ``record_id`` and ``payload`` kwargs, plus
``account_id`` for Connect webhooks.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from stripe_webhooks.services import get_job_queue

if TYPE_CHECKING:
    from stripe_webhooks.notifications import Webhook

logger = logging.getLogger(__name__)


def dispatch_configured_job(sender, notification: Webhook, **kwargs) -> None:
    """Queue the application job configured for this event type, if any."""
    settings = notification.queue
    if not settings.job:
        return

    job_kwargs = {
        "record_id": notification.record.pk if notification.record else None,
        "payload": notification.event.payload,
    }
    if notification.is_connect:
        job_kwargs["account_id"] = notification.event.account_id

    get_job_queue().send_task(
        settings.job,
        kwargs=job_kwargs,
        connection=settings.connection,
        queue=settings.queue,
    )

    logger.info(
        f"Queued configured webhook job {settings.job}",
        extra={
            "stripe_event_id": notification.event.id,
            "event_type": notification.event.type,
            "job": settings.job,
            "queue": settings.queue,
        },
    )
