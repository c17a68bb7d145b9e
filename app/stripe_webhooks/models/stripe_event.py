"""
StripeEvent model for received webhook events.

One row per Stripe event id. The primary key is the Stripe event id, so
the database itself rejects a second insert for the same event; this is
what makes webhook reception idempotent under concurrent redelivery.

Lifecycle:
    1. Receiver inserts the row (created_at == updated_at)
    2. Worker dispatches the event to listeners
    3. Worker touches the row (updated_at moves forward)

If dispatch fails part way, step 3 never happens and updated_at keeps
its insert-time value.

Usage:
    from stripe_webhooks.models import StripeEvent

    StripeEvent.objects.filter(type="invoice.paid").for_account("acct_123")
"""

from __future__ import annotations

from django.db import models

from core.models import BaseModel


class StripeEventQuerySet(models.QuerySet):
    """QuerySet helpers for stored webhook events."""

    def for_account(self, account_id: str | None):
        """Events for a connected account, or platform events when None."""
        if account_id is None:
            return self.filter(account__isnull=True)
        return self.filter(account_id=account_id)


class StripeEvent(BaseModel):
    """
    A Stripe webhook event received by the application.

    Fields:
        id: Stripe Event ID (evt_xxx) - primary key, enforces idempotency
        account: Connected account the event belongs to (null for platform events)
        type: Stripe event type (e.g. "payment_intent.succeeded")
        api_version: Stripe API version the payload was rendered with
        livemode: Whether the event came from live mode
        payload: Snapshot of the event payload, including account_id

    Note:
        The account foreign key has no database constraint: Connect events
        can arrive before the account is stored locally.
    """

    id = models.CharField(
        primary_key=True,
        max_length=255,
        help_text="Stripe Event ID (evt_xxx) - primary key for idempotency",
    )

    account = models.ForeignKey(
        "stripe_webhooks.StripeAccount",
        null=True,
        blank=True,
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        related_name="events",
        help_text="Connected account this event belongs to (Connect webhooks only)",
    )

    type = models.CharField(
        max_length=100,
        db_index=True,
        help_text="Stripe event type (e.g., 'payment_intent.succeeded')",
    )

    api_version = models.CharField(max_length=32, null=True, blank=True)

    livemode = models.BooleanField(default=False)

    payload = models.JSONField(help_text="Webhook payload snapshot (JSON)")

    objects = StripeEventQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Stripe Event"
        verbose_name_plural = "Stripe Events"
        indexes = [
            models.Index(fields=["type", "created_at"], name="stripe_event_type_created_idx"),
            models.Index(fields=["account", "created_at"], name="stripe_event_acct_created_idx"),
        ]

    def __str__(self) -> str:
        return f"StripeEvent({self.id}, {self.type})"

    @property
    def is_connect(self) -> bool:
        return self.account_id is not None
