"""
Query endpoints for billing transactions and invoices.
"""

import logging

from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from accounts.permissions import IsAdmin, IsClientMember
from shipments.exceptions import BusinessException
from shipments.views.mixins import ClientScopedQueryMixin, error_response
from tables import configs
from tables import export
from ..filters import (
    AdditionalServiceFeeFilter, ReceivingFeeFilter, StorageFeeFilter,
    CreditFilter, ReturnFeeFilter, InvoiceFilter,
)
from ..models import (
    AdditionalServiceFee, ReceivingFee, StorageFee, Credit, ReturnFee, Invoice,
)
from ..serializers import (
    AdditionalServiceFeeSerializer, ReceivingFeeSerializer, StorageFeeSerializer,
    CreditSerializer, ReturnFeeSerializer, InvoiceSerializer,
)
from ..services import TransactionService

logger = logging.getLogger(__name__)


class BillingTransactionViewSet(ClientScopedQueryMixin, viewsets.ReadOnlyModelViewSet):
    """Base viewset for one transaction family."""

    model = None
    permission_classes = [IsClientMember]

    def base_queryset(self):
        return self.model.objects.select_related('client', 'invoice')

    def get_queryset(self):
        if self.detail:
            return self.base_queryset()
        return super().get_queryset()

    @action(detail=True, methods=['post'], permission_classes=[IsAdmin])
    def credit(self, request, pk=None):
        """Credit an invoiced transaction."""
        record = self.get_object()
        try:
            record = TransactionService.mark_credited(self.model, record.pk, user=request.user)
        except BusinessException as e:
            logger.warning(f"Credit rejected for {record.reference_id}: {e.message}")
            return error_response(e)

        return Response({
            'success': True,
            'data': self.get_serializer(record).data
        })


class AdditionalServiceFeeViewSet(BillingTransactionViewSet):
    model = AdditionalServiceFee
    serializer_class = AdditionalServiceFeeSerializer
    filterset_class = AdditionalServiceFeeFilter
    table_config = configs.ADDITIONAL_SERVICES
    export_config = export.ADDITIONAL_SERVICES_EXPORT


class ReceivingFeeViewSet(BillingTransactionViewSet):
    model = ReceivingFee
    serializer_class = ReceivingFeeSerializer
    filterset_class = ReceivingFeeFilter
    table_config = configs.RECEIVING
    export_config = export.RECEIVING_EXPORT


class StorageFeeViewSet(BillingTransactionViewSet):
    model = StorageFee
    serializer_class = StorageFeeSerializer
    filterset_class = StorageFeeFilter
    table_config = configs.STORAGE
    export_config = export.STORAGE_EXPORT


class CreditViewSet(BillingTransactionViewSet):
    model = Credit
    serializer_class = CreditSerializer
    filterset_class = CreditFilter
    table_config = configs.CREDITS
    export_config = export.CREDITS_EXPORT


class ReturnFeeViewSet(BillingTransactionViewSet):
    model = ReturnFee
    serializer_class = ReturnFeeSerializer
    filterset_class = ReturnFeeFilter
    table_config = configs.RETURNS
    export_config = export.RETURNS_EXPORT


class InvoiceViewSet(ClientScopedQueryMixin, viewsets.ReadOnlyModelViewSet):
    """Invoices for the selected client, newest first."""

    permission_classes = [IsClientMember]
    serializer_class = InvoiceSerializer
    filterset_class = InvoiceFilter
    table_config = configs.INVOICES
    export_config = export.INVOICES_EXPORT
    lookup_field = 'invoice_number'

    def base_queryset(self):
        return Invoice.objects.select_related('client', 'generated_by').prefetch_related('line_items')

    def get_queryset(self):
        if self.detail:
            return self.base_queryset()
        return super().get_queryset()
