"""
Billing models.
"""

from .transactions import (
    BillingStatus, BillingTransaction, AdditionalServiceFee, ReceivingFee,
    StorageFee, Credit, ReturnFee, TRANSACTION_FAMILIES,
)
from .invoice import Invoice, InvoiceLineItem, InvoiceStatus

__all__ = [
    'BillingStatus', 'BillingTransaction', 'AdditionalServiceFee', 'ReceivingFee',
    'StorageFee', 'Credit', 'ReturnFee', 'TRANSACTION_FAMILIES',
    'Invoice', 'InvoiceLineItem', 'InvoiceStatus',
]
