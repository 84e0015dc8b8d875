"""
URL configuration for refunds API.

All URLs are prefixed with /api/v1/refunds/ in the main URL configuration.
"""

from rest_framework.routers import SimpleRouter

from refunds.views import RefundRequestViewSet

router = SimpleRouter()
router.register(r"", RefundRequestViewSet, basename="refund-request")

app_name = "refunds"

urlpatterns = router.urls
