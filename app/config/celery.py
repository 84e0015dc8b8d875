"""
Celery configuration for the Django application.

Celery runs the settlement background work:
- Payment webhook processing (payments.tasks.process_webhook_event)
- Weekly payout invoice generation (django-celery-beat schedule)
- Payout invoice PDF rendering and emails
- Expiry of stale checkout sessions

Redis is the broker and result backend in deployment; tests run tasks
eagerly with an in-memory transport.

Usage:
    from payouts.tasks import generate_weekly_payout_invoices

    generate_weekly_payout_invoices.delay()

For more information, see:
https://docs.celeryq.dev/en/stable/django/first-steps-with-django.html
"""

import os

from celery import Celery

# Set the default Django settings module for the Celery worker
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

# Create Celery application instance
app = Celery("config")

# Load configuration from Django settings
# All Celery settings should be prefixed with CELERY_ in settings.py
app.config_from_object("django.conf:settings", namespace="CELERY")

# Auto-discover tasks from all registered Django apps
app.autodiscover_tasks()
