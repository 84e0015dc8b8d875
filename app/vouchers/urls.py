"""
URL configuration for vouchers API.

All URLs are prefixed with /api/v1/vouchers/ in the main URL configuration.
refund-requests is registered first so it is not read as a voucher id.
"""

from rest_framework.routers import SimpleRouter

from vouchers.views import VoucherRefundRequestViewSet, VoucherViewSet

router = SimpleRouter()
router.register(r"refund-requests", VoucherRefundRequestViewSet, basename="voucher-refund-request")
router.register(r"", VoucherViewSet, basename="voucher")

app_name = "vouchers"

urlpatterns = router.urls
