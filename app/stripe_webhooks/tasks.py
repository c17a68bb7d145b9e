"""
Celery tasks for webhook processing.

Usage:
    # Queued by the Receiver via CeleryJobQueue; can also be run by hand
    from stripe_webhooks.tasks import process_webhook

    process_webhook.delay(record_id="evt_123", payload=payload)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from celery import shared_task

from stripe_webhooks.events import Event
from stripe_webhooks.exceptions import InvalidEventError, StoredEventMissingError
from stripe_webhooks.services import get_dispatcher
from stripe_webhooks.store import DjangoEventStore

if TYPE_CHECKING:
    from typing import Any

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

MAX_WEBHOOK_RETRIES = 5


# =============================================================================
# Webhook Processing Tasks
# =============================================================================


@shared_task(
    bind=True,
    name="stripe_webhooks.tasks.process_webhook",
    autoretry_for=(Exception,),
    dont_autoretry_for=(InvalidEventError,),
    retry_backoff=True,
    retry_backoff_max=300,
    retry_kwargs={"max_retries": MAX_WEBHOOK_RETRIES},
    acks_late=True,
)
def process_webhook(self, record_id: str, payload: dict[str, Any]) -> dict:
    """
    Dispatch a stored Stripe webhook to application listeners.

    This task:
    1. Rebuilds the Event from the queued payload
    2. Loads the stored StripeEvent
    3. Dispatches to listeners and touches the record

    Args:
        record_id: Primary key of the stored StripeEvent
        payload: The raw event payload

    Returns:
        Dict with processing result status

    Raises:
        StoredEventMissingError: If the record is not visible yet (retried)
        DispatchError: If a listener fails (retried)
    """
    event = Event.from_payload(payload)
    record = DjangoEventStore().get(record_id)

    if record is None:
        logger.warning(
            "Stored Stripe event not found, retrying",
            extra={"stripe_event_id": record_id, "event_type": event.type},
        )
        raise StoredEventMissingError(
            f"Stored Stripe event {record_id} not found",
            details={"stripe_event_id": record_id},
        )

    logger.info(
        f"Processing webhook: {event.type}",
        extra={
            "stripe_event_id": event.id,
            "event_type": event.type,
            "account_id": event.account_id,
            "retries": self.request.retries,
        },
    )

    get_dispatcher().dispatch(event, record)

    return {
        "status": "dispatched",
        "stripe_event_id": event.id,
        "event_type": event.type,
    }
