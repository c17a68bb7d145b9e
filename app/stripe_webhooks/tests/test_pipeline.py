"""
End-to-end tests: verified payload to listener, through the worker task.

The job queue is replaced by a recording one and the queued job is run
by calling the task directly, as a worker would.
"""

from unittest.mock import MagicMock, patch

import pytest

from stripe_webhooks.bus import webhook_bus
from stripe_webhooks.conf import get_webhook_config
from stripe_webhooks.events import construct_event
from stripe_webhooks.models import StripeEvent
from stripe_webhooks.receiver import Receiver
from stripe_webhooks.routing import QueueRouter
from stripe_webhooks.store import DjangoEventStore
from stripe_webhooks.tasks import process_webhook
from stripe_webhooks.tests.factories import StripeAccountFactory, make_event_payload
from stripe_webhooks.tests.fakes import RecordingJobQueue, RecordingListener


@pytest.fixture
def pipeline_settings(settings):
    settings.STRIPE_WEBHOOKS = {
        "default_queue": "stripe-webhooks",
        "signing_secrets": {"default": "whsec_test_secret"},
        "account": {
            "invoice_payment_failed": {
                "queue": "billing",
                "job": "billing.tasks.handle_payment_failed",
            },
        },
    }
    return settings


@pytest.fixture
def app_listener():
    """Recording listener on the application bus, removed after the test."""
    listener = RecordingListener()
    yield listener
    listener.unbind_all()


def receive_signed(payload, job_queue, config):
    """Verify and receive a payload the way an HTTP endpoint would."""
    stripe_event = MagicMock()
    stripe_event.to_dict.return_value = payload

    with patch(
        "stripe_webhooks.events.stripe.Webhook.construct_event",
        return_value=stripe_event,
    ):
        event = construct_event(b"{}", "t=1,v1=sig", config=config)

    Receiver(
        store=DjangoEventStore(),
        queue=job_queue,
        router=QueueRouter(config),
    ).receive(event)


class TestWebhookPipeline:
    """Receive, queue, process and dispatch a webhook."""

    def test_platform_webhook_reaches_listener_and_configured_job(
        self, transactional_db, pipeline_settings, app_listener
    ):
        app_listener.bind(webhook_bus, "stripe.webhooks:invoice.payment_failed")
        job_queue = RecordingJobQueue()
        payload = make_event_payload("invoice.payment_failed", event_id="evt_e2e_1")

        receive_signed(payload, job_queue, get_webhook_config())
        receive_signed(payload, job_queue, get_webhook_config())

        assert len(job_queue.jobs) == 1
        job = job_queue.jobs[0]
        assert job.queue == "billing"

        with patch("stripe_webhooks.listeners.get_job_queue") as mock_get_job_queue:
            result = process_webhook(**job.to_kwargs())

        assert result["status"] == "dispatched"
        assert app_listener.topics == ["stripe.webhooks:invoice.payment_failed"]
        mock_get_job_queue.return_value.send_task.assert_called_once_with(
            "billing.tasks.handle_payment_failed",
            kwargs={"record_id": "evt_e2e_1", "payload": payload},
            connection=None,
            queue="billing",
        )

        record = StripeEvent.objects.get(pk="evt_e2e_1")
        assert record.updated_at > record.created_at

    def test_connect_webhook_carries_account(self, transactional_db, pipeline_settings, app_listener):
        account = StripeAccountFactory(id="acct_e2e")
        app_listener.bind(webhook_bus, "stripe.connect.webhooks:account")
        job_queue = RecordingJobQueue()
        payload = make_event_payload("account.updated", event_id="evt_e2e_2", account="acct_e2e")

        receive_signed(payload, job_queue, get_webhook_config())

        with patch("stripe_webhooks.listeners.get_job_queue") as mock_get_job_queue:
            process_webhook(**job_queue.jobs[0].to_kwargs())

        (topic, notification), = app_listener.calls
        assert topic == "stripe.connect.webhooks:account"
        assert notification.account == account
        assert notification.is_connect is True
        mock_get_job_queue.assert_not_called()
