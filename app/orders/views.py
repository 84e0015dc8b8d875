"""
ViewSets for orders API.

URL Structure:
    /api/v1/orders/                   GET
    /api/v1/orders/checkout/          POST
    /api/v1/orders/{id}/              GET
    /api/v1/orders/{id}/status/       POST
    /api/v1/orders/{id}/cancel/       POST
    /api/v1/orders/{id}/history/      GET

Design Decisions:
    - Customers see their own orders; organization managers see their
      organization's orders; platform operators see everything
    - All mutations go through OrderStateMachine / CheckoutService, whose
      exceptions are rendered by core.exceptions.api_exception_handler
"""

from __future__ import annotations

from django.db.models import Q
from drf_spectacular.utils import OpenApiResponse, extend_schema, extend_schema_view
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from organizations.models import OrganizationMember
from organizations.permissions import is_platform_operator
from orders.models import Order
from orders.serializers import (
    CheckoutSerializer,
    CheckoutSessionSerializer,
    OrderCancelSerializer,
    OrderSerializer,
    OrderStatusEventSerializer,
    OrderUpdateSerializer,
)
from orders.services import CheckoutService, OrderStateMachine


@extend_schema_view(
    list=extend_schema(operation_id="list_orders", summary="List orders", tags=["Orders"]),
    retrieve=extend_schema(operation_id="get_order", summary="Get order", tags=["Orders"]),
)
class OrderViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """
    Orders visible to the current user.

    checkout:
        Create orders from the cart (one per organization).

    update_status:
        Move an order along PENDING → PROCESSING → READY → DELIVERED and/or
        change its payment status.

    cancel:
        Cancel an open order, restoring STOCK inventory.

    history:
        Full status history, most recent first.
    """

    permission_classes = [IsAuthenticated]
    serializer_class = OrderSerializer

    def get_queryset(self):
        user = self.request.user
        queryset = Order.objects.select_related("organization", "customer").prefetch_related(
            "items"
        )
        if is_platform_operator(user):
            return queryset
        managed = OrganizationMember.objects.filter(
            user=user, is_active=True, role__in=OrganizationMember.MANAGER_ROLES
        ).values("organization_id")
        return queryset.filter(Q(customer=user) | Q(organization_id__in=managed)).distinct()

    @extend_schema(
        operation_id="checkout",
        summary="Check out cart",
        request=CheckoutSerializer,
        responses={201: OpenApiResponse(description="Created orders and gateway external id")},
        tags=["Orders"],
    )
    @action(detail=False, methods=["post"])
    def checkout(self, request):
        serializer = CheckoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = CheckoutService.create_order_from_cart(
            request.user,
            item_ids=serializer.validated_data.get("item_ids"),
            voucher_code=serializer.validated_data.get("voucher_code") or None,
            notes=serializer.validated_data.get("notes", ""),
        )
        return Response(
            {
                "external_id": result.external_id,
                "total_amount": str(result.total_amount),
                "orders": OrderSerializer(result.orders, many=True).data,
                "checkout_session": (
                    CheckoutSessionSerializer(result.checkout_session).data
                    if result.checkout_session
                    else None
                ),
            },
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(
        operation_id="update_order_status",
        summary="Update order status",
        request=OrderUpdateSerializer,
        responses={200: OrderSerializer},
        tags=["Orders"],
    )
    @action(detail=True, methods=["post"], url_path="status")
    def update_status(self, request, pk=None):
        order = self.get_object()
        serializer = OrderUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        OrderStateMachine.update_order(order, request.user, **serializer.validated_data)
        order.refresh_from_db()
        return Response(OrderSerializer(order).data)

    @extend_schema(
        operation_id="cancel_order",
        summary="Cancel order",
        request=OrderCancelSerializer,
        responses={200: OrderSerializer},
        tags=["Orders"],
    )
    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        order = self.get_object()
        serializer = OrderCancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        OrderStateMachine.cancel_order(
            order,
            request.user,
            serializer.validated_data["reason"],
            note=serializer.validated_data.get("note"),
            initiator=serializer.validated_data["initiator"],
        )
        order.refresh_from_db()
        return Response(OrderSerializer(order).data)

    @extend_schema(
        operation_id="order_history",
        summary="Full order status history",
        responses={200: OrderStatusEventSerializer(many=True)},
        tags=["Orders"],
    )
    @action(detail=True, methods=["get"])
    def history(self, request, pk=None):
        order = self.get_object()
        events = order.status_events.order_by("-created_at", "-id")
        return Response(OrderStatusEventSerializer(events, many=True).data)
