"""
Billing exceptions.
"""

from shipments.exceptions import BusinessException


class InvoiceGenerationException(BusinessException):
    """Raised when an invoice cannot be generated for a period."""

    def __init__(self, message: str, code: str = "INVOICE_GENERATION_FAILED", details=None):
        super().__init__(message, code, details)


class InvoiceFileException(BusinessException):
    """Raised when an invoice artifact link is invalid or has expired."""

    def __init__(self, message: str, code: str = "INVALID_FILE_TOKEN"):
        super().__init__(message, code)
