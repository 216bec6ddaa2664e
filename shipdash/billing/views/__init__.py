from .transaction_views import (
    AdditionalServiceFeeViewSet,
    ReceivingFeeViewSet,
    StorageFeeViewSet,
    CreditViewSet,
    ReturnFeeViewSet,
    InvoiceViewSet,
)
from .invoice_views import generate_invoice, invoice_files, download_invoice_file

__all__ = [
    'AdditionalServiceFeeViewSet',
    'ReceivingFeeViewSet',
    'StorageFeeViewSet',
    'CreditViewSet',
    'ReturnFeeViewSet',
    'InvoiceViewSet',
    'generate_invoice',
    'invoice_files',
    'download_invoice_file',
]
