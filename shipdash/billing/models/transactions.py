"""
Billing transaction families.

Every family is a fee line charged to a client outside the per-shipment
charge. They share one lifecycle: pending until invoiced, then optionally
credited.
"""

import uuid
from decimal import Decimal
from django.db import models
from django.utils import timezone


class BillingStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    INVOICED = 'invoiced', 'Invoiced'
    CREDITED = 'credited', 'Credited'


class BillingTransaction(models.Model):
    """Fields common to every billing transaction family."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    client = models.ForeignKey(
        'accounts.Client',
        on_delete=models.CASCADE,
        related_name='%(class)s_set'
    )
    reference_id = models.CharField(
        max_length=100,
        db_index=True,
        help_text="Identifier of the charge in the fulfillment system"
    )
    amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    transaction_date = models.DateTimeField(default=timezone.now)
    status = models.CharField(
        max_length=20,
        choices=BillingStatus.choices,
        default=BillingStatus.PENDING
    )
    invoice = models.ForeignKey(
        'billing.Invoice',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='%(class)s_set'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    # Invoice line category the family rolls up into
    invoice_category = 'Other'

    class Meta:
        abstract = True
        ordering = ['-transaction_date']

    def __str__(self):
        return f"{self.__class__.__name__} {self.reference_id} - {self.amount} ({self.status})"

    @property
    def signed_amount(self):
        """Amount as it counts towards an invoice subtotal."""
        return self.amount


class AdditionalServiceFee(BillingTransaction):
    """Per-shipment extra fees such as extra picks, kitting or B2B handling."""

    fee_type = models.CharField(max_length=100)

    invoice_category = 'Additional Services'

    class Meta(BillingTransaction.Meta):
        indexes = [
            models.Index(fields=['client', 'transaction_date']),
            models.Index(fields=['fee_type']),
        ]


class ReceivingFee(BillingTransaction):
    fee_type = models.CharField(max_length=100, blank=True)
    wro_id = models.CharField(
        max_length=50,
        blank=True,
        help_text="Warehouse receiving order"
    )
    receiving_status = models.CharField(max_length=50, blank=True)
    contents = models.TextField(blank=True)

    invoice_category = 'Receiving'

    class Meta(BillingTransaction.Meta):
        indexes = [models.Index(fields=['client', 'transaction_date'])]


class StorageFee(BillingTransaction):
    fc_name = models.CharField(max_length=100, blank=True)
    inventory_id = models.CharField(max_length=50, blank=True)
    location_type = models.CharField(max_length=50, blank=True)
    comment = models.TextField(blank=True)

    invoice_category = 'Warehousing'

    class Meta(BillingTransaction.Meta):
        indexes = [models.Index(fields=['client', 'transaction_date'])]


class Credit(BillingTransaction):
    """A credit owed to the client; ``amount`` is the positive credit value."""

    credit_reason = models.CharField(max_length=255, blank=True)
    ticket_reference = models.CharField(max_length=100, blank=True)

    invoice_category = 'Credit'

    class Meta(BillingTransaction.Meta):
        indexes = [models.Index(fields=['client', 'transaction_date'])]

    @property
    def signed_amount(self):
        return -abs(self.amount)


class ReturnFee(BillingTransaction):
    return_id = models.CharField(max_length=50, blank=True)
    original_shipment_id = models.CharField(max_length=50, blank=True)
    tracking_number = models.CharField(max_length=100, blank=True)
    return_status = models.CharField(max_length=50, blank=True)
    return_type = models.CharField(max_length=100, blank=True)
    fc_name = models.CharField(max_length=100, blank=True)

    invoice_category = 'Returns'

    class Meta(BillingTransaction.Meta):
        indexes = [models.Index(fields=['client', 'transaction_date'])]


# Import/query family name -> model
TRANSACTION_FAMILIES = {
    'additional-services': AdditionalServiceFee,
    'receiving': ReceivingFee,
    'storage': StorageFee,
    'credits': Credit,
    'returns': ReturnFee,
}
