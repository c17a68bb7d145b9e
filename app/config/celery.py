"""
Celery configuration for the Django application.

The webhook worker runs here: the Receiver queues
``stripe_webhooks.tasks.process_webhook`` jobs on the request path and
workers dispatch them to listeners.

Redis is the default broker and result backend. Individual webhook types
can be routed to other brokers through named connections in
STRIPE_WEBHOOKS["connections"].

Usage:
    celery -A config worker -Q stripe-webhooks -l info

For more information, see:
https://docs.celeryq.dev/en/stable/django/first-steps-with-django.html
"""

import os

from celery import Celery

# Set the default Django settings module for the Celery worker
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("config")

# All Celery settings are prefixed with CELERY_ in settings.py
app.config_from_object("django.conf:settings", namespace="CELERY")

# Finds stripe_webhooks.tasks
app.autodiscover_tasks()
