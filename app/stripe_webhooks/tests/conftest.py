"""
Pytest fixtures for webhook pipeline tests.

Provides a deterministic WebhookConfig, events for both scopes, an
in-memory job queue, a private event bus with a recording listener, and
stored records/accounts.
"""

import pytest

from stripe_webhooks.accounts import DjangoAccountResolver
from stripe_webhooks.bus import SignalEventBus
from stripe_webhooks.conf import WebhookConfig
from stripe_webhooks.dispatcher import Dispatcher
from stripe_webhooks.events import Event
from stripe_webhooks.receiver import Receiver
from stripe_webhooks.routing import QueueRouter
from stripe_webhooks.store import DjangoEventStore
from stripe_webhooks.tests.fakes import RecordingJobQueue, RecordingListener
from stripe_webhooks.tests.factories import (
    StripeAccountFactory,
    StripeEventFactory,
    make_event_payload,
)


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def webhook_config():
    """Config with defaults plus one override per scope."""
    return WebhookConfig(
        default_connection=None,
        default_queue="stripe-webhooks",
        connections={"billing": "redis://billing-broker:6379/0"},
        signing_secrets={"default": "whsec_test_secret", "empty": ""},
        account_overrides={
            "invoice_payment_failed": {
                "queue": "billing",
                "job": "billing.tasks.handle_payment_failed",
            },
        },
        connect_overrides={
            "account_updated": {"connection": "billing"},
        },
    )


@pytest.fixture
def router(webhook_config):
    return QueueRouter(webhook_config)


# =============================================================================
# Event Fixtures
# =============================================================================


@pytest.fixture
def platform_event():
    """A platform (non-Connect) invoice event."""
    return Event.from_payload(
        make_event_payload("invoice.payment_failed", event_id="evt_test_platform_1")
    )


@pytest.fixture
def connect_event():
    """A Connect invoice event for acct_test_connect."""
    return Event.from_payload(
        make_event_payload(
            "invoice.payment_failed",
            event_id="evt_test_connect_1",
            account="acct_test_connect",
        )
    )


# =============================================================================
# Collaborator Fixtures
# =============================================================================


@pytest.fixture
def job_queue():
    return RecordingJobQueue()


@pytest.fixture
def bus():
    """A private bus so tests never see the application's listeners."""
    return SignalEventBus()


@pytest.fixture
def listener():
    return RecordingListener()


@pytest.fixture
def store():
    return DjangoEventStore()


@pytest.fixture
def receiver(store, job_queue, router):
    return Receiver(store=store, queue=job_queue, router=router)


@pytest.fixture
def dispatcher(bus, store, router):
    return Dispatcher(
        bus=bus,
        accounts=DjangoAccountResolver(),
        store=store,
        router=router,
    )


# =============================================================================
# Model Fixtures
# =============================================================================


@pytest.fixture
def stripe_account(db):
    return StripeAccountFactory(id="acct_test_connect")


@pytest.fixture
def platform_record(db, platform_event):
    return StripeEventFactory(id=platform_event.id, type=platform_event.type)


@pytest.fixture
def connect_record(db, connect_event):
    return StripeEventFactory(
        id=connect_event.id,
        type=connect_event.type,
        account_id=connect_event.account_id,
    )
