"""
Celery tasks for orders app.

- send_order_status_email: Notify the customer that an order is READY or DELIVERED

Emails are best effort: a failed send is logged and reported in the task
result, never retried, and never touches the order.

Usage:
    from orders.tasks import send_order_status_email

    send_order_status_email.delay(str(order.id), order.status)
"""

import logging

from celery import shared_task
from django.conf import settings

from toolkit.services.email import EmailService

logger = logging.getLogger(__name__)


@shared_task(bind=True, ignore_result=False)
def send_order_status_email(self, order_id: str, status: str) -> dict:
    """
    Send the order status update email to the customer.

    Args:
        order_id: UUID of the order
        status: Status the order moved to

    Returns:
        {"success": bool, "error": str | None}
    """
    from orders.models import Order

    order = (
        Order.objects.select_related("customer", "organization").filter(pk=order_id).first()
    )
    if order is None:
        logger.warning(f"Order {order_id} not found for status email")
        return {"success": False, "error": "Order not found"}

    result = EmailService().send_email(
        [order.customer.email],
        "orders/status_update",
        {
            "customer_name": order.customer.first_name or order.customer.email,
            "order_number": order.order_number,
            "status": status,
            "status_label": order.get_status_display(),
            "organization_name": order.organization.name if order.organization else "",
            "order_url": f"{settings.FRONTEND_URL}/orders/{order.pk}",
        },
    )
    if not result.success:
        logger.warning(
            f"Order status email failed for {order.order_number}: {result.error}",
            extra={"order_id": order_id},
        )
    return {"success": result.success, "error": result.error}
