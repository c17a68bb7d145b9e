"""
URL configuration for the Django application.

URL Structure:
    /admin/    - Django admin (stored Stripe events and accounts)

Webhook HTTP endpoints are provided by the host application, which
verifies the request and hands the Event to stripe_webhooks.services.get_receiver().
"""

from django.contrib import admin
from django.urls import path

urlpatterns = [
    path("admin/", admin.site.urls),
]
