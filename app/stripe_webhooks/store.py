"""
Event store: idempotent persistence of received webhook events.

The EventStore protocol is what the Receiver, Dispatcher and worker task
depend on; DjangoEventStore implements it over the StripeEvent model.

Idempotency:
    create() is a single constrained insert keyed by the Stripe event id.
    When two deliveries of the same event race, the database lets exactly
    one insert through and the other raises DuplicateEventError. No
    in-process locking is involved.

Usage:
    from stripe_webhooks.store import DjangoEventStore

    store = DjangoEventStore()

    with store.atomic():               # TransientStoreError if the commit fails
        record = store.create(event)   # DuplicateEventError if seen before
        store.on_commit(lambda: queue_job(record))

    store.touch(record)                # bump updated_at after dispatch
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Callable, ContextManager, Protocol, runtime_checkable

from django.db import DatabaseError, IntegrityError, transaction

from stripe_webhooks.exceptions import DuplicateEventError, TransientStoreError
from stripe_webhooks.models import StripeEvent

if TYPE_CHECKING:
    from stripe_webhooks.events import Event

logger = logging.getLogger(__name__)


@runtime_checkable
class EventStore(Protocol):
    """Persistence contract for received webhook events."""

    def exists(self, event_id: str) -> bool:
        """Whether a record for this event id has been stored."""
        ...

    def create(self, event: Event) -> StripeEvent:
        """
        Store a new record for the event.

        Raises:
            DuplicateEventError: If a record with this id already exists
            TransientStoreError: For any other persistence failure
        """
        ...

    def get(self, event_id: str) -> StripeEvent | None:
        """Load a stored record, or None if it is not (yet) visible."""
        ...

    def touch(self, record: StripeEvent) -> None:
        """Update the record's modification timestamp only."""
        ...

    def delete(self, record: StripeEvent) -> None:
        """Remove a record whose processing job could not be queued."""
        ...

    def atomic(self) -> ContextManager:
        """Context manager making the enclosed store calls one unit of work."""
        ...

    def on_commit(self, callback: Callable[[], None]) -> None:
        """Run callback once the enclosing atomic() block has committed."""
        ...


class DjangoEventStore:
    """EventStore backed by the StripeEvent model."""

    def __init__(self, using: str | None = None):
        self.using = using

    def exists(self, event_id: str) -> bool:
        return StripeEvent.objects.using(self.using).filter(pk=event_id).exists()

    def create(self, event: Event) -> StripeEvent:
        """
        Insert a StripeEvent for the event.

        The payload snapshot additionally carries ``account_id`` so stored
        records can be filtered by account regardless of payload shape.

        Args:
            event: The verified event

        Returns:
            The stored record

        Raises:
            DuplicateEventError: If the event id is already stored
            TransientStoreError: On any other database error
        """
        payload = {**event.payload, "account_id": event.account_id}

        try:
            with transaction.atomic(using=self.using):
                record = StripeEvent.objects.using(self.using).create(
                    id=event.id,
                    account_id=event.account_id,
                    type=event.type,
                    api_version=event.api_version,
                    livemode=event.livemode,
                    payload=payload,
                )
        except IntegrityError as e:
            raise DuplicateEventError(
                f"Stripe event {event.id} has already been received",
                details={"stripe_event_id": event.id, "event_type": event.type},
            ) from e
        except DatabaseError as e:
            logger.error(
                f"Failed to store Stripe event: {type(e).__name__}",
                extra={"stripe_event_id": event.id, "event_type": event.type},
                exc_info=True,
            )
            raise TransientStoreError(
                f"Could not store Stripe event {event.id}",
                details={"stripe_event_id": event.id, "error": str(e)},
            ) from e

        logger.debug(
            "Stored Stripe event",
            extra={
                "stripe_event_id": record.id,
                "event_type": record.type,
                "account_id": record.account_id,
            },
        )
        return record

    def get(self, event_id: str) -> StripeEvent | None:
        return StripeEvent.objects.using(self.using).filter(pk=event_id).first()

    def touch(self, record: StripeEvent) -> None:
        record.save(using=self.using, update_fields=["updated_at"])

    def delete(self, record: StripeEvent) -> None:
        try:
            record.delete(using=self.using)
        except DatabaseError as e:
            raise TransientStoreError(
                f"Could not remove Stripe event {record.pk}",
                details={"stripe_event_id": record.pk, "error": str(e)},
            ) from e

    @contextmanager
    def atomic(self):
        """
        Open a transaction; database errors, including a failed commit,
        surface as TransientStoreError.
        """
        try:
            with transaction.atomic(using=self.using):
                yield
        except DatabaseError as e:
            logger.error(
                f"Stripe event transaction failed: {type(e).__name__}",
                exc_info=True,
            )
            raise TransientStoreError(
                "Could not commit Stripe event transaction",
                details={"error": str(e)},
            ) from e

    def on_commit(self, callback: Callable[[], None]) -> None:
        transaction.on_commit(callback, using=self.using)
