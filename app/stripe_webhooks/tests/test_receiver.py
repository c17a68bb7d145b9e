"""
Tests for the Receiver.

Tests cover:
- Storing and queueing a new event
- Idempotent redelivery (one record, one job)
- Queue routing for platform and Connect events
- Queueing only after commit, and discarding the record when queueing fails
"""

from contextlib import nullcontext
from unittest.mock import patch

import pytest
from django.db import OperationalError, connections, transaction

from stripe_webhooks.events import Event
from stripe_webhooks.exceptions import JobQueueError, TransientStoreError
from stripe_webhooks.models import StripeEvent
from stripe_webhooks.queue import ProcessWebhookJob
from stripe_webhooks.receiver import Receiver
from stripe_webhooks.tests.factories import make_event_payload


class FailingJobQueue:
    def enqueue(self, job):
        raise JobQueueError("broker unavailable")


class TestReceiver:
    """Tests for Receiver.receive."""

    def test_receive_stores_and_queues(self, transactional_db, receiver, job_queue, platform_event):
        receiver.receive(platform_event)

        assert StripeEvent.objects.filter(pk=platform_event.id).exists()
        assert job_queue.jobs == [
            ProcessWebhookJob(
                record_id=platform_event.id,
                payload=platform_event.payload,
                connection=None,
                queue="billing",
            )
        ]

    def test_receive_twice_is_idempotent(self, transactional_db, receiver, job_queue, platform_event):
        """Redelivery should not create a second record or a second job."""
        receiver.receive(platform_event)
        receiver.receive(platform_event)

        assert StripeEvent.objects.filter(pk=platform_event.id).count() == 1
        assert len(job_queue.jobs) == 1

    def test_receive_unconfigured_type_uses_defaults(self, transactional_db, receiver, job_queue):
        event = Event.from_payload(make_event_payload("customer.created"))

        receiver.receive(event)

        job = job_queue.jobs[0]
        assert job.connection is None
        assert job.queue == "stripe-webhooks"

    def test_receive_connect_event_uses_connect_routing(self, transactional_db, receiver, job_queue):
        event = Event.from_payload(
            make_event_payload("account.updated", account="acct_test_connect")
        )

        receiver.receive(event)

        job = job_queue.jobs[0]
        assert job.connection == "billing"
        assert job.queue == "stripe-webhooks"
        assert StripeEvent.objects.get(pk=event.id).account_id == "acct_test_connect"

    def test_connect_event_ignores_platform_override(self, transactional_db, receiver, job_queue, connect_event):
        receiver.receive(connect_event)

        assert job_queue.jobs[0].queue == "stripe-webhooks"

    def test_queue_failure_discards_record(self, transactional_db, store, router, platform_event):
        """A failed enqueue should leave nothing stored so redelivery can succeed."""
        receiver = Receiver(store=store, queue=FailingJobQueue(), router=router)

        with pytest.raises(JobQueueError):
            receiver.receive(platform_event)

        assert not StripeEvent.objects.filter(pk=platform_event.id).exists()

    def test_redelivery_after_queue_failure(self, transactional_db, store, router, job_queue, platform_event):
        failing = Receiver(store=store, queue=FailingJobQueue(), router=router)
        with pytest.raises(JobQueueError):
            failing.receive(platform_event)

        Receiver(store=store, queue=job_queue, router=router).receive(platform_event)

        assert len(job_queue.jobs) == 1
        assert StripeEvent.objects.filter(pk=platform_event.id).count() == 1

    def test_store_failure_propagates(self, transactional_db, router, job_queue, platform_event):
        class BrokenStore:
            def atomic(self):
                return nullcontext()

            def create(self, event):
                raise TransientStoreError("database unavailable")

        receiver = Receiver(store=BrokenStore(), queue=job_queue, router=router)

        with pytest.raises(TransientStoreError):
            receiver.receive(platform_event)

        assert job_queue.jobs == []

    def test_commit_failure_queues_nothing(self, transactional_db, receiver, job_queue, platform_event):
        """A failed commit raises TransientStoreError and never queues a job."""
        with patch.object(
            connections["default"],
            "commit",
            side_effect=OperationalError("commit failed"),
        ):
            with pytest.raises(TransientStoreError):
                receiver.receive(platform_event)

        assert job_queue.jobs == []
        assert not StripeEvent.objects.filter(pk=platform_event.id).exists()

    def test_redelivery_after_commit_failure_queues_once(
        self, transactional_db, receiver, job_queue, platform_event
    ):
        with patch.object(
            connections["default"],
            "commit",
            side_effect=OperationalError("commit failed"),
        ):
            with pytest.raises(TransientStoreError):
                receiver.receive(platform_event)

        receiver.receive(platform_event)

        assert len(job_queue.jobs) == 1
        assert StripeEvent.objects.filter(pk=platform_event.id).count() == 1

    def test_queues_when_outer_transaction_commits(
        self, transactional_db, receiver, job_queue, platform_event
    ):
        with transaction.atomic():
            receiver.receive(platform_event)
            assert job_queue.jobs == []

        assert len(job_queue.jobs) == 1

    def test_outer_rollback_queues_nothing(self, transactional_db, receiver, job_queue, platform_event):
        with pytest.raises(RuntimeError):
            with transaction.atomic():
                receiver.receive(platform_event)
                raise RuntimeError("request failed")

        assert job_queue.jobs == []
        assert not StripeEvent.objects.filter(pk=platform_event.id).exists()


class TestDidReceive:
    """Tests for Receiver.did_receive."""

    def test_not_received(self, transactional_db, receiver, platform_event):
        assert receiver.did_receive(platform_event) is False

    def test_received(self, transactional_db, receiver, platform_event):
        receiver.receive(platform_event)

        assert receiver.did_receive(platform_event) is True
