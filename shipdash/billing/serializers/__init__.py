from .billing_serializers import (
    AdditionalServiceFeeSerializer,
    ReceivingFeeSerializer,
    StorageFeeSerializer,
    CreditSerializer,
    ReturnFeeSerializer,
    InvoiceLineItemSerializer,
    InvoiceSerializer,
    InvoiceGenerateSerializer,
    FAMILY_SERIALIZERS,
)

__all__ = [
    'AdditionalServiceFeeSerializer',
    'ReceivingFeeSerializer',
    'StorageFeeSerializer',
    'CreditSerializer',
    'ReturnFeeSerializer',
    'InvoiceLineItemSerializer',
    'InvoiceSerializer',
    'InvoiceGenerateSerializer',
    'FAMILY_SERIALIZERS',
]
