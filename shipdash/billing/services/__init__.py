"""
Services for billing transactions and invoices.
"""

from .workflow import BillingWorkflow, validate_billing_workflow
from .transaction_service import TransactionService, BillingImportService, get_family_model
from .file_service import InvoiceFileService
from .invoice_service import InvoiceService

__all__ = [
    'BillingWorkflow',
    'validate_billing_workflow',
    'TransactionService',
    'BillingImportService',
    'get_family_model',
    'InvoiceFileService',
    'InvoiceService',
]
