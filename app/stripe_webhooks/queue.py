"""
Job queue: hands webhook jobs to Celery.

The Receiver builds a ProcessWebhookJob and passes it to a JobQueue. The
Celery implementation submits the ``process_webhook`` task on the job's
queue and, when the job names a connection, on that named broker.

Named connections map to broker URLs in STRIPE_WEBHOOKS["connections"];
a job with ``connection=None`` goes to the default Celery broker.

Usage:
    from stripe_webhooks.queue import CeleryJobQueue, ProcessWebhookJob

    queue = CeleryJobQueue(config)
    queue.enqueue(
        ProcessWebhookJob(
            record_id="evt_123",
            payload=event.payload,
            connection=None,
            queue="stripe-webhooks",
        )
    )
"""

from __future__ import annotations

import logging
from contextlib import ExitStack
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from celery import current_app
from kombu.exceptions import KombuError

from stripe_webhooks.exceptions import JobQueueError

if TYPE_CHECKING:
    from typing import Any

    from stripe_webhooks.conf import WebhookConfig

logger = logging.getLogger(__name__)

PROCESS_WEBHOOK_TASK = "stripe_webhooks.tasks.process_webhook"


@dataclass(frozen=True)
class ProcessWebhookJob:
    """
    A request to process one stored webhook asynchronously.

    Attributes:
        record_id: Primary key of the stored StripeEvent
        payload: Raw event payload, used to rebuild the Event in the worker
        connection: Named broker connection (routing only)
        queue: Queue name (routing only)
    """

    record_id: str
    payload: dict[str, Any] = field(repr=False)
    connection: str | None = None
    queue: str | None = None

    def to_kwargs(self) -> dict[str, Any]:
        """Task kwargs; routing fields are not part of the job body."""
        return {"record_id": self.record_id, "payload": self.payload}


@runtime_checkable
class JobQueue(Protocol):
    """Submits jobs to the asynchronous worker."""

    def enqueue(self, job: ProcessWebhookJob) -> None:
        ...


class CeleryJobQueue:
    """JobQueue that submits Celery tasks by name."""

    def __init__(self, config: WebhookConfig, app=None):
        self.config = config
        self.app = app

    @property
    def celery(self):
        return self.app or current_app

    def enqueue(self, job: ProcessWebhookJob) -> None:
        """
        Submit the process_webhook task for a job.

        Raises:
            ConfigurationError: If the job names an unknown connection
            JobQueueError: If the broker rejects the message
        """
        self.send_task(
            PROCESS_WEBHOOK_TASK,
            kwargs=job.to_kwargs(),
            connection=job.connection,
            queue=job.queue,
        )

        logger.info(
            "Webhook queued for processing",
            extra={
                "stripe_event_id": job.record_id,
                "connection": job.connection,
                "queue": job.queue,
            },
        )

    def send_task(
        self,
        name: str,
        kwargs: dict[str, Any],
        connection: str | None = None,
        queue: str | None = None,
    ) -> None:
        """
        Submit any task by name on a named connection and queue.

        Args:
            name: Registered Celery task name
            kwargs: JSON-serializable task kwargs
            connection: Named broker connection, None for the default broker
            queue: Queue name, None for the default queue

        Raises:
            ConfigurationError: If the connection is not configured
            JobQueueError: If the broker rejects the message
        """
        options: dict[str, Any] = {}
        if queue:
            options["queue"] = queue

        url = self.config.connection_url(connection) if connection else None

        try:
            with ExitStack() as stack:
                if url:
                    options["connection"] = stack.enter_context(
                        self.celery.connection_for_write(url)
                    )
                self.celery.send_task(name, kwargs=kwargs, **options)
        except (KombuError, OSError) as e:
            logger.error(
                f"Failed to queue task {name}: {type(e).__name__}",
                extra={"task": name, "connection": connection, "queue": queue},
                exc_info=True,
            )
            raise JobQueueError(
                f"Could not queue task {name}",
                details={
                    "task": name,
                    "connection": connection,
                    "queue": queue,
                    "error": str(e),
                },
            ) from e
