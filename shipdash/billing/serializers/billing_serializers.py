"""
Billing serializers.
"""

from rest_framework import serializers

from ..models import (
    AdditionalServiceFee, ReceivingFee, StorageFee, Credit, ReturnFee,
    Invoice, InvoiceLineItem,
)

TRANSACTION_FIELDS = [
    'id', 'client', 'client_code', 'reference_id', 'amount', 'transaction_date',
    'status', 'invoice_number', 'created_at',
]


class BillingTransactionSerializer(serializers.ModelSerializer):
    """Fields every transaction family exposes."""

    client_code = serializers.CharField(source='client.short_code', read_only=True)
    invoice_number = serializers.CharField(source='invoice.invoice_number', read_only=True, default=None)


class AdditionalServiceFeeSerializer(BillingTransactionSerializer):
    class Meta:
        model = AdditionalServiceFee
        fields = TRANSACTION_FIELDS + ['fee_type']


class ReceivingFeeSerializer(BillingTransactionSerializer):
    class Meta:
        model = ReceivingFee
        fields = TRANSACTION_FIELDS + ['fee_type', 'wro_id', 'receiving_status', 'contents']


class StorageFeeSerializer(BillingTransactionSerializer):
    class Meta:
        model = StorageFee
        fields = TRANSACTION_FIELDS + ['fc_name', 'inventory_id', 'location_type', 'comment']


class CreditSerializer(BillingTransactionSerializer):
    class Meta:
        model = Credit
        fields = TRANSACTION_FIELDS + ['credit_reason', 'ticket_reference']


class ReturnFeeSerializer(BillingTransactionSerializer):
    class Meta:
        model = ReturnFee
        fields = TRANSACTION_FIELDS + [
            'return_id', 'original_shipment_id', 'tracking_number',
            'return_status', 'return_type', 'fc_name',
        ]


FAMILY_SERIALIZERS = {
    'additional-services': AdditionalServiceFeeSerializer,
    'receiving': ReceivingFeeSerializer,
    'storage': StorageFeeSerializer,
    'credits': CreditSerializer,
    'returns': ReturnFeeSerializer,
}


class InvoiceLineItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = InvoiceLineItem
        fields = ['id', 'category', 'description', 'quantity', 'amount']


class InvoiceSerializer(serializers.ModelSerializer):
    """Serializer for Invoice with its line items."""

    client_code = serializers.CharField(source='client.short_code', read_only=True)
    client_name = serializers.CharField(source='client.company_name', read_only=True)
    line_items = InvoiceLineItemSerializer(many=True, read_only=True)
    generated_by_name = serializers.CharField(source='generated_by.username', read_only=True, default=None)
    has_files = serializers.SerializerMethodField()

    class Meta:
        model = Invoice
        fields = [
            'id', 'client', 'client_code', 'client_name', 'invoice_number',
            'invoice_date', 'period_start', 'period_end', 'subtotal', 'tax_rate',
            'tax_amount', 'total_amount', 'shipment_count', 'transaction_count',
            'status', 'line_items', 'has_files', 'generated_by_name', 'created_at',
        ]

    def get_has_files(self, obj):
        return bool(obj.pdf_path and obj.xlsx_path)


class InvoiceGenerateSerializer(serializers.Serializer):
    week_start = serializers.DateField()
    client_id = serializers.UUIDField()
