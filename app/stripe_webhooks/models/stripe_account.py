"""
StripeAccount model for Stripe Connect accounts.

A local copy of a connected account (acct_xxx) so that Connect webhooks
can be dispatched with tenant context. The webhook pipeline only reads
these rows; onboarding and sync code owns writes.

Usage:
    from stripe_webhooks.models import StripeAccount

    account = StripeAccount.objects.create(
        id="acct_1234567890",
        owner=user,
        country="GB",
        default_currency="gbp",
    )

    # All webhook events stored for this account
    account.events.all()

    # All accounts owned by a user
    user.stripe_accounts.all()
"""

from __future__ import annotations

from django.conf import settings
from django.db import models

from core.models import BaseModel


class StripeAccount(BaseModel):
    """
    A Stripe Connect account known to the application.

    Fields:
        id: Stripe Account ID (acct_xxx), used as primary key
        owner: The user that owns this account (optional)
        type: Stripe account type (standard, express, custom)
        country: Two-letter country code
        default_currency: Three-letter currency code (lowercase)
        email: Account email address
        details_submitted: Whether onboarding details were submitted
        payouts_enabled: Whether Stripe has enabled payouts
        charges_enabled: Whether Stripe has enabled charges
        metadata: Stripe metadata for the account
    """

    id = models.CharField(
        primary_key=True,
        max_length=255,
        help_text="Stripe Account ID (acct_xxx)",
    )

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="stripe_accounts",
        help_text="User that owns this connected account",
    )

    type = models.CharField(max_length=20, blank=True, default="")
    country = models.CharField(max_length=2, blank=True, default="")
    default_currency = models.CharField(max_length=3, blank=True, default="")
    email = models.EmailField(blank=True, default="")

    details_submitted = models.BooleanField(default=False)
    payouts_enabled = models.BooleanField(default=False)
    charges_enabled = models.BooleanField(default=False)

    metadata = models.JSONField(default=dict, blank=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Stripe Account"
        verbose_name_plural = "Stripe Accounts"

    def __str__(self) -> str:
        return f"StripeAccount({self.id})"

    @property
    def is_fully_enabled(self) -> bool:
        """True if both payouts and charges are enabled."""
        return self.payouts_enabled and self.charges_enabled
