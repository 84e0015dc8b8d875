"""
Views for payouts API.

URL Structure:
    /api/v1/payouts/invoices/                         GET
    /api/v1/payouts/invoices/generate/                POST (system admin)
    /api/v1/payouts/invoices/{id}/                    GET
    /api/v1/payouts/invoices/{id}/mark-paid/          POST (system admin)
    /api/v1/payouts/invoices/{id}/revert/             POST (system admin)
    /api/v1/payouts/adjustments/                      GET
    /api/v1/payouts/settings/                         GET, PATCH (system admin)
    /api/v1/payouts/organizations/{id}/platform-fee/  PUT (system admin)

Organization managers can read their own invoices and adjustments.
"""

from __future__ import annotations

from django.shortcuts import get_object_or_404
from drf_spectacular.utils import OpenApiResponse, extend_schema, extend_schema_view
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from organizations.models import Organization, OrganizationMember
from organizations.permissions import IsSystemAdmin, is_platform_operator
from payouts.generator import PayoutInvoiceGenerator
from payouts.models import PayoutAdjustment, PayoutInvoice, PayoutSettings
from payouts.serializers import (
    GeneratePayoutsSerializer,
    MarkInvoicePaidSerializer,
    PayoutAdjustmentSerializer,
    PayoutInvoiceSerializer,
    PayoutSettingsSerializer,
    PlatformFeeSerializer,
    RevertPayoutSerializer,
)
from payouts.tasks import process_invoice_side_effects


def _managed_organization_ids(user):
    return OrganizationMember.objects.filter(
        user=user, is_active=True, role__in=OrganizationMember.MANAGER_ROLES
    ).values("organization_id")


@extend_schema_view(
    list=extend_schema(operation_id="list_payout_invoices", summary="List payout invoices", tags=["Payouts"]),
    retrieve=extend_schema(operation_id="get_payout_invoice", summary="Get payout invoice", tags=["Payouts"]),
)
class PayoutInvoiceViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """
    Payout invoices.

    generate:
        Run generation for explicit period bounds. Idempotent per period.

    mark_paid / revert:
        Confirm or undo a payout.
    """

    permission_classes = [IsAuthenticated]
    serializer_class = PayoutInvoiceSerializer

    def get_queryset(self):
        queryset = PayoutInvoice.objects.select_related("organization")
        user = self.request.user
        if is_platform_operator(user):
            return queryset
        return queryset.filter(organization_id__in=_managed_organization_ids(user))

    @extend_schema(
        operation_id="generate_payout_invoices",
        summary="Generate payout invoices",
        request=GeneratePayoutsSerializer,
        responses={200: OpenApiResponse(description="Run summary")},
        tags=["Payouts"],
    )
    @action(detail=False, methods=["post"], permission_classes=[IsAuthenticated, IsSystemAdmin])
    def generate(self, request):
        serializer = GeneratePayoutsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        summary = PayoutInvoiceGenerator.generate_payout_invoices(
            serializer.validated_data["period_start"], serializer.validated_data["period_end"]
        )
        for invoice_id in summary.invoice_ids:
            process_invoice_side_effects.delay(invoice_id)
        return Response(summary.to_dict())

    @extend_schema(
        operation_id="mark_payout_invoice_paid",
        summary="Mark invoice as paid",
        request=MarkInvoicePaidSerializer,
        responses={200: PayoutInvoiceSerializer},
        tags=["Payouts"],
    )
    @action(
        detail=True,
        methods=["post"],
        url_path="mark-paid",
        permission_classes=[IsAuthenticated, IsSystemAdmin],
    )
    def mark_paid(self, request, pk=None):
        invoice = self.get_object()
        serializer = MarkInvoicePaidSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        invoice = PayoutInvoiceGenerator.mark_invoice_paid(
            invoice, request.user, **serializer.validated_data
        )
        return Response(PayoutInvoiceSerializer(invoice).data)

    @extend_schema(
        operation_id="revert_payout_invoice",
        summary="Revert paid invoice to pending",
        request=RevertPayoutSerializer,
        responses={200: PayoutInvoiceSerializer},
        tags=["Payouts"],
    )
    @action(detail=True, methods=["post"], permission_classes=[IsAuthenticated, IsSystemAdmin])
    def revert(self, request, pk=None):
        invoice = self.get_object()
        serializer = RevertPayoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        invoice = PayoutInvoiceGenerator.revert_payout_status(
            invoice, request.user, serializer.validated_data["reason"]
        )
        return Response(PayoutInvoiceSerializer(invoice).data)


@extend_schema_view(
    list=extend_schema(operation_id="list_payout_adjustments", summary="List payout adjustments", tags=["Payouts"]),
)
class PayoutAdjustmentViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    permission_classes = [IsAuthenticated]
    serializer_class = PayoutAdjustmentSerializer

    def get_queryset(self):
        queryset = PayoutAdjustment.objects.all()
        user = self.request.user
        if not is_platform_operator(user):
            queryset = queryset.filter(organization_id__in=_managed_organization_ids(user))
        status_filter = self.request.query_params.get("status")
        if status_filter:
            queryset = queryset.filter(status=status_filter.upper())
        return queryset


class PayoutSettingsView(APIView):
    """Platform payout settings; reading never creates the row."""

    permission_classes = [IsAuthenticated, IsSystemAdmin]

    @extend_schema(
        operation_id="get_payout_settings",
        summary="Get payout settings",
        responses={200: PayoutSettingsSerializer},
        tags=["Payouts"],
    )
    def get(self, request):
        return Response(PayoutSettingsSerializer(PayoutSettings.load()).data)

    @extend_schema(
        operation_id="update_payout_settings",
        summary="Update payout settings",
        request=PayoutSettingsSerializer,
        responses={200: PayoutSettingsSerializer, 201: PayoutSettingsSerializer},
        tags=["Payouts"],
    )
    def patch(self, request):
        serializer = PayoutSettingsSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        payout_settings, is_new = PayoutInvoiceGenerator.update_payout_settings(
            request.user, **serializer.validated_data
        )
        return Response(
            PayoutSettingsSerializer(payout_settings).data,
            status=status.HTTP_201_CREATED if is_new else status.HTTP_200_OK,
        )


class OrganizationPlatformFeeView(APIView):
    permission_classes = [IsAuthenticated, IsSystemAdmin]

    @extend_schema(
        operation_id="update_organization_platform_fee",
        summary="Set or clear an organization's platform fee",
        request=PlatformFeeSerializer,
        responses={200: PlatformFeeSerializer},
        tags=["Payouts"],
    )
    def put(self, request, organization_id):
        organization = get_object_or_404(Organization, pk=organization_id)
        serializer = PlatformFeeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        organization = PayoutInvoiceGenerator.update_org_platform_fee(
            organization, request.user, serializer.validated_data["platform_fee_percentage"]
        )
        return Response({"platform_fee_percentage": organization.platform_fee_percentage})
