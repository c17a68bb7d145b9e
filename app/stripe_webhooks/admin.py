"""
Admin configuration for stored webhook events and connected accounts.

Both are read-only records from the pipeline's point of view: events are
an audit trail and accounts are synced from Stripe elsewhere.
"""

from django.contrib import admin

from stripe_webhooks.models import StripeAccount, StripeEvent

__all__ = [
    "StripeAccountAdmin",
    "StripeEventAdmin",
]


@admin.register(StripeEvent)
class StripeEventAdmin(admin.ModelAdmin):
    """
    Admin configuration for StripeEvent.

    Webhook events are immutable once received.
    """

    list_display = ["id", "type", "account", "livemode", "created_at", "updated_at"]
    list_filter = ["type", "livemode", "created_at"]
    search_fields = ["id", "type", "account__id"]
    readonly_fields = [
        "id",
        "account",
        "type",
        "api_version",
        "livemode",
        "payload",
        "created_at",
        "updated_at",
    ]
    date_hierarchy = "created_at"
    ordering = ["-created_at"]

    def has_delete_permission(self, request, obj=None) -> bool:
        """Disable delete for webhook events (audit trail)."""
        return False

    def has_add_permission(self, request) -> bool:
        """Disable adding webhook events through admin."""
        return False


@admin.register(StripeAccount)
class StripeAccountAdmin(admin.ModelAdmin):
    list_display = [
        "id",
        "owner",
        "type",
        "country",
        "payouts_enabled",
        "charges_enabled",
        "created_at",
    ]
    list_filter = ["type", "payouts_enabled", "charges_enabled"]
    search_fields = ["id", "email"]
    raw_id_fields = ["owner"]
    readonly_fields = ["created_at", "updated_at"]
