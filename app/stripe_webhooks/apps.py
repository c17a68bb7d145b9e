"""
Stripe webhooks app configuration.

This app provides the webhook pipeline:
- Idempotent storage of received Stripe events
- Celery hand-off for asynchronous processing
- Topic fan-out of processed webhooks to application listeners
"""

from django.apps import AppConfig


class StripeWebhooksConfig(AppConfig):
    """Configuration for the stripe_webhooks application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "stripe_webhooks"
    verbose_name = "Stripe Webhooks"

    def ready(self):
        from stripe_webhooks.bus import CONNECT_EVENT_PREFIX, EVENT_PREFIX, webhook_bus
        from stripe_webhooks.conf import get_webhook_config
        from stripe_webhooks.listeners import dispatch_configured_job

        # Fail at startup on malformed STRIPE_WEBHOOKS
        get_webhook_config()

        for prefix in (EVENT_PREFIX, CONNECT_EVENT_PREFIX):
            webhook_bus.listen(
                prefix,
                dispatch_configured_job,
                dispatch_uid=f"{prefix}:configured_job",
            )
