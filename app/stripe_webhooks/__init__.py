"""
Stripe webhook reception and routing.

Verified Stripe events are stored idempotently and queued on the request
path; a Celery worker then dispatches them to application listeners under
three topics of increasing specificity, with separate prefixes for the
platform account and for Connect accounts.

Usage:
    from stripe_webhooks.bus import listen

    @listen("stripe.connect.webhooks:account.updated")
    def on_account_updated(sender, notification, **kwargs):
        if notification.account is not None:
            sync_account(notification.account, notification.event.payload)
"""
