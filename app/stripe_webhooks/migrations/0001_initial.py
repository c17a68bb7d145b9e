from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="StripeAccount",
            fields=[
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "id",
                    models.CharField(
                        help_text="Stripe Account ID (acct_xxx)",
                        max_length=255,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("type", models.CharField(blank=True, default="", max_length=20)),
                ("country", models.CharField(blank=True, default="", max_length=2)),
                (
                    "default_currency",
                    models.CharField(blank=True, default="", max_length=3),
                ),
                ("email", models.EmailField(blank=True, default="", max_length=254)),
                ("details_submitted", models.BooleanField(default=False)),
                ("payouts_enabled", models.BooleanField(default=False)),
                ("charges_enabled", models.BooleanField(default=False)),
                ("metadata", models.JSONField(blank=True, default=dict)),
                (
                    "owner",
                    models.ForeignKey(
                        blank=True,
                        help_text="User that owns this connected account",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="stripe_accounts",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Stripe Account",
                "verbose_name_plural": "Stripe Accounts",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="StripeEvent",
            fields=[
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "id",
                    models.CharField(
                        help_text="Stripe Event ID (evt_xxx) - primary key for idempotency",
                        max_length=255,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "type",
                    models.CharField(
                        db_index=True,
                        help_text="Stripe event type (e.g., 'payment_intent.succeeded')",
                        max_length=100,
                    ),
                ),
                (
                    "api_version",
                    models.CharField(blank=True, max_length=32, null=True),
                ),
                ("livemode", models.BooleanField(default=False)),
                (
                    "payload",
                    models.JSONField(help_text="Webhook payload snapshot (JSON)"),
                ),
                (
                    "account",
                    models.ForeignKey(
                        blank=True,
                        db_constraint=False,
                        help_text="Connected account this event belongs to (Connect webhooks only)",
                        null=True,
                        on_delete=django.db.models.deletion.DO_NOTHING,
                        related_name="events",
                        to="stripe_webhooks.stripeaccount",
                    ),
                ),
            ],
            options={
                "verbose_name": "Stripe Event",
                "verbose_name_plural": "Stripe Events",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["type", "created_at"],
                        name="stripe_event_type_created_idx",
                    ),
                    models.Index(
                        fields=["account", "created_at"],
                        name="stripe_event_acct_created_idx",
                    ),
                ],
            },
        ),
    ]
