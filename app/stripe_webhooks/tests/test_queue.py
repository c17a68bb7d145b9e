"""
Tests for CeleryJobQueue.
"""

from unittest.mock import MagicMock

import pytest
from kombu.exceptions import OperationalError

from stripe_webhooks.exceptions import ConfigurationError, JobQueueError
from stripe_webhooks.queue import (
    PROCESS_WEBHOOK_TASK,
    CeleryJobQueue,
    JobQueue,
    ProcessWebhookJob,
)


@pytest.fixture
def celery_app():
    return MagicMock()


@pytest.fixture
def job_queue(webhook_config, celery_app):
    return CeleryJobQueue(webhook_config, app=celery_app)


def make_job(**kwargs):
    defaults = {"record_id": "evt_queue_1", "payload": {"id": "evt_queue_1"}}
    return ProcessWebhookJob(**{**defaults, **kwargs})


class TestProcessWebhookJob:
    """Tests for ProcessWebhookJob."""

    def test_to_kwargs_excludes_routing(self):
        job = make_job(connection="billing", queue="billing")

        assert job.to_kwargs() == {
            "record_id": "evt_queue_1",
            "payload": {"id": "evt_queue_1"},
        }


class TestCeleryJobQueue:
    """Tests for CeleryJobQueue."""

    def test_implements_protocol(self, job_queue):
        assert isinstance(job_queue, JobQueue)

    def test_enqueue_default_broker(self, job_queue, celery_app):
        job_queue.enqueue(make_job(queue="stripe-webhooks"))

        celery_app.send_task.assert_called_once_with(
            PROCESS_WEBHOOK_TASK,
            kwargs={"record_id": "evt_queue_1", "payload": {"id": "evt_queue_1"}},
            queue="stripe-webhooks",
        )
        celery_app.connection_for_write.assert_not_called()

    def test_enqueue_without_queue(self, job_queue, celery_app):
        job_queue.enqueue(make_job())

        _, options = celery_app.send_task.call_args
        assert "queue" not in options
        assert "connection" not in options

    def test_enqueue_named_connection(self, job_queue, celery_app):
        """A named connection should publish over that broker's URL."""
        job_queue.enqueue(make_job(connection="billing", queue="billing"))

        celery_app.connection_for_write.assert_called_once_with(
            "redis://billing-broker:6379/0"
        )
        connection = celery_app.connection_for_write.return_value.__enter__.return_value
        _, options = celery_app.send_task.call_args
        assert options["connection"] is connection
        assert options["queue"] == "billing"

    def test_enqueue_unknown_connection(self, job_queue, celery_app):
        with pytest.raises(ConfigurationError):
            job_queue.enqueue(make_job(connection="archive"))

        celery_app.send_task.assert_not_called()

    def test_broker_error_raises_job_queue_error(self, job_queue, celery_app):
        celery_app.send_task.side_effect = OperationalError("broker unavailable")

        with pytest.raises(JobQueueError) as exc_info:
            job_queue.enqueue(make_job(queue="stripe-webhooks"))

        assert exc_info.value.details["task"] == PROCESS_WEBHOOK_TASK
        assert exc_info.value.details["queue"] == "stripe-webhooks"

    def test_socket_error_raises_job_queue_error(self, job_queue, celery_app):
        celery_app.send_task.side_effect = ConnectionRefusedError()

        with pytest.raises(JobQueueError):
            job_queue.enqueue(make_job())

    def test_send_task_any_name(self, job_queue, celery_app):
        job_queue.send_task("billing.tasks.sync", kwargs={"a": 1}, queue="billing")

        celery_app.send_task.assert_called_once_with(
            "billing.tasks.sync", kwargs={"a": 1}, queue="billing"
        )
