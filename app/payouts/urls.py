"""
URL configuration for payouts API.

All URLs are prefixed with /api/v1/payouts/ in the main URL configuration.
"""

from django.urls import path
from rest_framework.routers import SimpleRouter

from payouts.views import (
    OrganizationPlatformFeeView,
    PayoutAdjustmentViewSet,
    PayoutInvoiceViewSet,
    PayoutSettingsView,
)

router = SimpleRouter()
router.register(r"invoices", PayoutInvoiceViewSet, basename="payout-invoice")
router.register(r"adjustments", PayoutAdjustmentViewSet, basename="payout-adjustment")

app_name = "payouts"

urlpatterns = [
    path("settings/", PayoutSettingsView.as_view(), name="payout-settings"),
    path(
        "organizations/<uuid:organization_id>/platform-fee/",
        OrganizationPlatformFeeView.as_view(),
        name="organization-platform-fee",
    ),
    *router.urls,
]
