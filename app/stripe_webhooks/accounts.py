"""
Account resolution for Connect webhooks.

The Dispatcher only needs to look a connected account up by its Stripe id
to give listeners tenant context. An unknown account is not an error:
the webhook is still dispatched, with ``account=None``.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from django.db import DatabaseError

from stripe_webhooks.exceptions import DispatchError
from stripe_webhooks.models import StripeAccount

logger = logging.getLogger(__name__)


@runtime_checkable
class AccountResolver(Protocol):
    """Read-only lookup of connected accounts by Stripe account id."""

    def find(self, account_id: str) -> StripeAccount | None:
        ...


class DjangoAccountResolver:
    """AccountResolver backed by the StripeAccount model."""

    def __init__(self, queryset=None):
        self.queryset = queryset if queryset is not None else StripeAccount.objects.all()

    def find(self, account_id: str) -> StripeAccount | None:
        """
        Find a stored connected account.

        Args:
            account_id: Stripe account id (acct_xxx)

        Returns:
            The account, or None if it is not stored locally

        Raises:
            DispatchError: If the lookup itself fails
        """
        try:
            account = self.queryset.filter(pk=account_id).first()
        except DatabaseError as e:
            raise DispatchError(
                f"Could not resolve Stripe account {account_id}",
                details={"account_id": account_id, "error": str(e)},
            ) from e

        if account is None:
            logger.info(
                "Connect webhook for unknown Stripe account",
                extra={"account_id": account_id},
            )

        return account
