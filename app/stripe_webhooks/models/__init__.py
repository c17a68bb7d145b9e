"""
Webhook domain models.

- StripeEvent: Stored webhook event, keyed by Stripe event id
- StripeAccount: Local record of a Stripe Connect account
"""

from stripe_webhooks.models.stripe_account import StripeAccount
from stripe_webhooks.models.stripe_event import StripeEvent

__all__ = [
    "StripeAccount",
    "StripeEvent",
]
