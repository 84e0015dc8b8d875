"""
URL configuration for the payments app.

Routes:
    - POST /webhooks/paymongo/ - Gateway webhook endpoint

All routes are prefixed with /api/v1/payments/ when included in the main URLconf.
"""

from django.urls import path

from payments.webhooks.views import paymongo_webhook

app_name = "payments"

urlpatterns = [
    path("webhooks/paymongo/", paymongo_webhook, name="paymongo_webhook"),
]
