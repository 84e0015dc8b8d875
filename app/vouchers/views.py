"""
ViewSets for vouchers API.

URL Structure:
    /api/v1/vouchers/             GET, POST
    /api/v1/vouchers/{id}/        GET
    /api/v1/vouchers/validate/    POST

    /api/v1/vouchers/refund-requests/                 GET, POST
    /api/v1/vouchers/refund-requests/{id}/            GET
    /api/v1/vouchers/refund-requests/{id}/approve/    POST (system admins)
    /api/v1/vouchers/refund-requests/{id}/reject/     POST (system admins)

Listing shows the vouchers of organizations the user manages plus the
refund vouchers assigned to them; platform operators see everything.
Cash refund requests are visible to their requester and platform operators.
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
from vouchers.models import Voucher, VoucherRefundRequest
from vouchers.serializers import (
    VoucherCreateSerializer,
    VoucherRefundRequestCreateSerializer,
    VoucherRefundRequestSerializer,
    VoucherRefundReviewSerializer,
    VoucherSerializer,
    VoucherValidateSerializer,
)
from vouchers.services import VoucherEngine, VoucherRefundRequestManager


@extend_schema_view(
    list=extend_schema(operation_id="list_vouchers", summary="List vouchers", tags=["Vouchers"]),
    retrieve=extend_schema(operation_id="get_voucher", summary="Get voucher", tags=["Vouchers"]),
)
class VoucherViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """
    Vouchers.

    create:
        Create a promotional voucher for an organization (managers) or the
        whole platform (system admins).

    validate:
        Check a code against an order amount without redeeming it.
    """

    permission_classes = [IsAuthenticated]
    serializer_class = VoucherSerializer

    def get_queryset(self):
        user = self.request.user
        queryset = Voucher.objects.select_related("organization")
        if is_platform_operator(user):
            return queryset
        managed = OrganizationMember.objects.filter(
            user=user, is_active=True, role__in=OrganizationMember.MANAGER_ROLES
        ).values("organization_id")
        return queryset.filter(Q(assigned_to=user) | Q(organization_id__in=managed)).distinct()

    @extend_schema(
        operation_id="create_voucher",
        summary="Create voucher",
        request=VoucherCreateSerializer,
        responses={201: VoucherSerializer},
        tags=["Vouchers"],
    )
    def create(self, request):
        serializer = VoucherCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)

        voucher = VoucherEngine.create_voucher(
            request.user,
            name=data.pop("name"),
            discount_type=data.pop("discount_type"),
            discount_value=data.pop("discount_value"),
            code=data.pop("code", None) or None,
            code_prefix=data.pop("code_prefix", None) or None,
            **data,
        )
        return Response(VoucherSerializer(voucher).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        operation_id="validate_voucher",
        summary="Validate voucher code",
        request=VoucherValidateSerializer,
        responses={
            200: OpenApiResponse(description="Voucher is valid; discount amount included"),
            400: OpenApiResponse(description="Voucher is not valid; error code included"),
        },
        tags=["Vouchers"],
    )
    @action(detail=False, methods=["post"])
    def validate(self, request):
        serializer = VoucherValidateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        validation = VoucherEngine.validate_voucher(
            serializer.validated_data["code"],
            order_amount=serializer.validated_data["order_amount"],
            user=request.user,
            organization=serializer.validated_data["organization"],
        )
        return Response(
            validation.to_dict(),
            status=status.HTTP_200_OK if validation.valid else status.HTTP_400_BAD_REQUEST,
        )


@extend_schema_view(
    list=extend_schema(
        operation_id="list_voucher_refund_requests",
        summary="List voucher cash refund requests",
        tags=["Vouchers"],
    ),
    retrieve=extend_schema(
        operation_id="get_voucher_refund_request",
        summary="Get voucher cash refund request",
        tags=["Vouchers"],
    ),
)
class VoucherRefundRequestViewSet(
    mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet
):
    """
    Cash refund requests for SELLER refund vouchers.

    create:
        Ask for the voucher value by bank transfer once it is eligible.

    approve:
        Deactivate the voucher; the transfer happens outside the platform.

    reject:
        Decline; the voucher stays usable.
    """

    permission_classes = [IsAuthenticated]
    serializer_class = VoucherRefundRequestSerializer

    def get_queryset(self):
        user = self.request.user
        queryset = VoucherRefundRequest.objects.select_related("voucher", "requested_by")
        if is_platform_operator(user):
            return queryset
        return queryset.filter(requested_by=user)

    @extend_schema(
        operation_id="create_voucher_refund_request",
        summary="Request cash for a refund voucher",
        request=VoucherRefundRequestCreateSerializer,
        responses={201: VoucherRefundRequestSerializer},
        tags=["Vouchers"],
    )
    def create(self, request):
        serializer = VoucherRefundRequestCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        refund_request = VoucherRefundRequestManager.create_refund_request(
            serializer.validated_data["voucher"],
            request.user,
            customer_message=serializer.validated_data.get("customer_message"),
            bank_details=serializer.validated_data.get("bank_details"),
        )
        return Response(
            VoucherRefundRequestSerializer(refund_request).data, status=status.HTTP_201_CREATED
        )

    @extend_schema(
        operation_id="approve_voucher_refund_request",
        summary="Approve voucher cash refund request",
        request=VoucherRefundReviewSerializer,
        responses={200: VoucherRefundRequestSerializer},
        tags=["Vouchers"],
    )
    @action(detail=True, methods=["post"])
    def approve(self, request, pk=None):
        refund_request = self.get_object()
        serializer = VoucherRefundReviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        VoucherRefundRequestManager.approve_refund_request(
            refund_request, request.user, serializer.validated_data["admin_message"]
        )
        return Response(VoucherRefundRequestSerializer(refund_request).data)

    @extend_schema(
        operation_id="reject_voucher_refund_request",
        summary="Reject voucher cash refund request",
        request=VoucherRefundReviewSerializer,
        responses={200: VoucherRefundRequestSerializer},
        tags=["Vouchers"],
    )
    @action(detail=True, methods=["post"])
    def reject(self, request, pk=None):
        refund_request = self.get_object()
        serializer = VoucherRefundReviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        VoucherRefundRequestManager.reject_refund_request(
            refund_request, request.user, serializer.validated_data["admin_message"]
        )
        return Response(VoucherRefundRequestSerializer(refund_request).data)
