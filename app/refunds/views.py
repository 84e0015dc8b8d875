"""
ViewSets for refunds API.

URL Structure:
    /api/v1/refunds/                 GET, POST
    /api/v1/refunds/{id}/            GET
    /api/v1/refunds/{id}/approve/    POST (reviewers)
    /api/v1/refunds/{id}/reject/     POST (reviewers)

Customers see their own requests; organization managers see their
organization's requests; platform operators see everything.
"""

from __future__ import annotations

from django.db.models import Q
from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from organizations.models import OrganizationMember
from organizations.permissions import is_platform_operator
from refunds.models import RefundRequest
from refunds.serializers import (
    RefundRequestCreateSerializer,
    RefundRequestSerializer,
    RefundReviewSerializer,
)
from refunds.services import RefundRequestManager


@extend_schema_view(
    list=extend_schema(operation_id="list_refund_requests", summary="List refund requests", tags=["Refunds"]),
    retrieve=extend_schema(operation_id="get_refund_request", summary="Get refund request", tags=["Refunds"]),
)
class RefundRequestViewSet(
    mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet
):
    """
    Refund requests visible to the current user.

    create:
        Ask for a refund of a paid order within the refund window.

    approve:
        Cancel the order and issue a refund voucher to the customer.

    reject:
        Decline the request; the order is left unchanged.
    """

    permission_classes = [IsAuthenticated]
    serializer_class = RefundRequestSerializer

    def get_queryset(self):
        user = self.request.user
        queryset = RefundRequest.objects.select_related("order", "organization", "voucher")
        if is_platform_operator(user):
            return queryset
        managed = OrganizationMember.objects.filter(
            user=user, is_active=True, role__in=OrganizationMember.MANAGER_ROLES
        ).values("organization_id")
        return queryset.filter(Q(requested_by=user) | Q(organization_id__in=managed)).distinct()

    @extend_schema(
        operation_id="create_refund_request",
        summary="Request a refund",
        request=RefundRequestCreateSerializer,
        responses={201: RefundRequestSerializer},
        tags=["Refunds"],
    )
    def create(self, request):
        serializer = RefundRequestCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        refund_request = RefundRequestManager.create_refund_request(
            serializer.validated_data["order"],
            request.user,
            serializer.validated_data["reason"],
            customer_message=serializer.validated_data.get("customer_message"),
        )
        return Response(
            RefundRequestSerializer(refund_request).data, status=status.HTTP_201_CREATED
        )

    @extend_schema(
        operation_id="approve_refund_request",
        summary="Approve refund request",
        request=RefundReviewSerializer,
        responses={200: RefundRequestSerializer},
        tags=["Refunds"],
    )
    @action(detail=True, methods=["post"])
    def approve(self, request, pk=None):
        refund_request = self.get_object()
        serializer = RefundReviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        RefundRequestManager.approve_refund_request(
            refund_request, request.user, serializer.validated_data["admin_message"]
        )
        return Response(RefundRequestSerializer(refund_request).data)

    @extend_schema(
        operation_id="reject_refund_request",
        summary="Reject refund request",
        request=RefundReviewSerializer,
        responses={200: RefundRequestSerializer},
        tags=["Refunds"],
    )
    @action(detail=True, methods=["post"])
    def reject(self, request, pk=None):
        refund_request = self.get_object()
        serializer = RefundReviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        RefundRequestManager.reject_refund_request(
            refund_request, request.user, serializer.validated_data["admin_message"]
        )
        return Response(RefundRequestSerializer(refund_request).data)
