"""
Typed representation of a verified Stripe event.

An Event is built once per inbound request, after signature verification,
and never modified. Connect events carry the connected account id in the
top-level ``account`` key of the payload; platform events have none.

Usage:
    from stripe_webhooks.events import Event, construct_event

    # From a raw request body (verifies the Stripe-Signature header)
    event = construct_event(request.body, request.headers["Stripe-Signature"])

    # From an already decoded payload (e.g. inside a Celery job)
    event = Event.from_payload(payload)

    event.type_root  # "payment_intent" for "payment_intent.succeeded"
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import stripe

from stripe_webhooks.exceptions import InvalidEventError, InvalidSignatureError

if TYPE_CHECKING:
    from typing import Any

    from stripe_webhooks.conf import WebhookConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Event:
    """
    A verified Stripe event.

    Attributes:
        id: Stripe event id (evt_xxx), unique per Stripe account
        type: Dot-delimited event type (e.g. "invoice.payment_failed")
        account_id: Connected account id (acct_xxx) for Connect events, else None
        payload: The full event payload as decoded JSON
    """

    id: str
    type: str
    account_id: str | None = None
    payload: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> Event:
        """
        Build an Event from a decoded Stripe event payload.

        Args:
            data: Decoded event JSON

        Returns:
            The Event

        Raises:
            InvalidEventError: If the payload lacks an id or type
        """
        if not isinstance(data, Mapping):
            raise InvalidEventError(
                f"Expecting event payload to be a mapping, got {type(data).__name__}"
            )

        event_id = data.get("id")
        event_type = data.get("type")

        if not event_id or not isinstance(event_id, str):
            raise InvalidEventError("Event payload is missing an id")

        if not event_type or not isinstance(event_type, str):
            raise InvalidEventError(
                "Event payload is missing a type",
                details={"stripe_event_id": event_id},
            )

        return cls(
            id=event_id,
            type=event_type,
            account_id=data.get("account") or None,
            payload=dict(data),
        )

    @classmethod
    def from_stripe(cls, event: stripe.Event) -> Event:
        """Build an Event from a stripe-python Event object."""
        return cls.from_payload(event.to_dict())

    @property
    def type_root(self) -> str:
        """First segment of the event type: "invoice" for "invoice.paid"."""
        return self.type.split(".", 1)[0]

    @property
    def is_connect(self) -> bool:
        """Whether the event belongs to a connected account."""
        return self.account_id is not None

    @property
    def livemode(self) -> bool:
        return bool(self.payload.get("livemode", False))

    @property
    def api_version(self) -> str | None:
        return self.payload.get("api_version")


def construct_event(
    payload: bytes | str,
    signature: str,
    secret_name: str = "default",
    config: WebhookConfig | None = None,
) -> Event:
    """
    Verify a raw webhook body and parse it into an Event.

    Signature checking is delegated to stripe-python; this function only
    picks the signing secret and translates failures.

    Args:
        payload: Raw request body
        signature: Value of the Stripe-Signature header
        secret_name: Name of the signing secret in STRIPE_WEBHOOKS["signing_secrets"]
        config: Webhook config (defaults to the one built from settings)

    Returns:
        The verified Event

    Raises:
        ConfigurationError: If the named signing secret is missing or invalid
        InvalidSignatureError: If the signature does not match
        InvalidEventError: If the body is not a valid event payload
    """
    if config is None:
        from stripe_webhooks.conf import get_webhook_config

        config = get_webhook_config()

    secret = config.signing_secret(secret_name)

    try:
        stripe_event = stripe.Webhook.construct_event(payload, signature, secret)
    except stripe.SignatureVerificationError as e:
        logger.warning(
            "Webhook signature verification failed",
            extra={"secret_name": secret_name, "error": str(e)},
        )
        raise InvalidSignatureError(
            "Invalid webhook signature",
            details={"secret_name": secret_name},
        ) from e
    except ValueError as e:
        raise InvalidEventError(
            "Webhook payload is not valid JSON",
            details={"error": str(e)},
        ) from e

    return Event.from_stripe(stripe_event)
