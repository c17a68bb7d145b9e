"""
Webhook pipeline exceptions.

Exception Hierarchy:
    WebhookError (base for the webhook pipeline)
    ├── DuplicateEventError - Event id already stored (also ConflictError)
    ├── TransientStoreError - Any other persistence failure (also ExternalServiceError)
    ├── JobQueueError - Processing job could not be submitted (also ExternalServiceError)
    ├── DispatchError - Listener or account lookup failed during dispatch
    │   └── StoredEventMissingError - Worker could not load the stored record
    ├── ConfigurationError - Invalid queue, connection or signing configuration
    └── InvalidEventError - Payload is not a usable event (also ValidationError)
        └── InvalidSignatureError - Signature verification failed

Recovery:
    - DuplicateEventError is recovered by the Receiver (receive is a no-op).
    - TransientStoreError and JobQueueError propagate out of receive so the
      HTTP layer reports failure and Stripe redelivers.
    - DispatchError propagates out of dispatch so Celery retries the job.
    - ConfigurationError is raised at load or lookup time, never defaulted.

Usage:
    from stripe_webhooks.exceptions import DuplicateEventError

    try:
        store.create(event)
    except DuplicateEventError:
        return
"""

from __future__ import annotations

from core.exceptions import (
    BaseApplicationError,
    ConflictError,
    ExternalServiceError,
    ValidationError,
)


class WebhookError(BaseApplicationError):
    """Base exception for all webhook pipeline errors."""

    default_error_code: str = "WEBHOOK_ERROR"


class DuplicateEventError(WebhookError, ConflictError):
    """
    Raised by the event store when an event id has already been stored.

    Receivers treat this as "already processed" and stop without
    enqueueing a second job.
    """

    default_error_code: str = "DUPLICATE_EVENT"


class TransientStoreError(WebhookError, ExternalServiceError):
    """Raised when persisting an event fails for any reason but a duplicate id."""

    default_error_code: str = "TRANSIENT_STORE_ERROR"


class JobQueueError(WebhookError, ExternalServiceError):
    """Raised when the processing job cannot be handed to the broker."""

    default_error_code: str = "JOB_QUEUE_ERROR"


class DispatchError(WebhookError):
    """
    Raised when dispatching a webhook to application listeners fails.

    Covers listener exceptions surfaced by the event bus and account
    lookup failures. The worker lets this propagate to trigger a retry.
    """

    default_error_code: str = "DISPATCH_ERROR"


class StoredEventMissingError(DispatchError):
    """
    Raised by the worker when the stored record for a job is not visible.

    The enqueueing transaction may not have committed yet, so the job
    is retried rather than dispatched without its record.
    """

    default_error_code: str = "STORED_EVENT_MISSING"


class ConfigurationError(WebhookError):
    """Raised for missing or invalid webhook configuration."""

    default_error_code: str = "CONFIGURATION_ERROR"


class InvalidEventError(WebhookError, ValidationError):
    """Raised when a payload cannot be turned into an Event."""

    default_error_code: str = "INVALID_EVENT"


class InvalidSignatureError(InvalidEventError):
    """Raised when a raw payload fails Stripe signature verification."""

    default_error_code: str = "INVALID_SIGNATURE"
