"""
Invoice models.
"""

import uuid
from decimal import Decimal
from django.conf import settings
from django.db import models


class InvoiceStatus(models.TextChoices):
    DRAFT = 'draft', 'Draft'
    APPROVED = 'approved', 'Approved'
    SENT = 'sent', 'Sent'


class Invoice(models.Model):
    """
    Weekly invoice for one client.

    Covers the client's shipments labelled in the period plus the pending fee
    transactions dated in it.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    client = models.ForeignKey(
        'accounts.Client',
        on_delete=models.PROTECT,
        related_name='invoices'
    )
    invoice_number = models.CharField(
        max_length=50,
        unique=True,
        help_text="Human-readable invoice number"
    )
    invoice_date = models.DateField()
    period_start = models.DateField()
    period_end = models.DateField()

    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    tax_rate = models.DecimalField(max_digits=6, decimal_places=4, default=Decimal('0.0000'))
    tax_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    shipment_count = models.PositiveIntegerField(default=0)
    transaction_count = models.PositiveIntegerField(default=0)

    status = models.CharField(
        max_length=20,
        choices=InvoiceStatus.choices,
        default=InvoiceStatus.DRAFT
    )
    pdf_path = models.CharField(max_length=255, blank=True)
    xlsx_path = models.CharField(max_length=255, blank=True)

    generated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='generated_invoices'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-invoice_date', '-invoice_number']
        indexes = [
            models.Index(fields=['client', 'period_start']),
        ]

    def __str__(self):
        return f"Invoice {self.invoice_number} - {self.client} ({self.total_amount})"


class InvoiceLineItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    invoice = models.ForeignKey(
        Invoice,
        on_delete=models.CASCADE,
        related_name='line_items'
    )
    category = models.CharField(max_length=100)
    description = models.CharField(max_length=255, blank=True)
    quantity = models.PositiveIntegerField(default=0)
    amount = models.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        ordering = ['invoice', 'category']

    def __str__(self):
        return f"{self.invoice.invoice_number} - {self.category}: {self.amount}"
