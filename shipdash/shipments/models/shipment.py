"""
Shipment models.
"""

import uuid
from decimal import Decimal, ROUND_HALF_UP
from django.db import models
from django.utils import timezone


class ShipmentStatus(models.TextChoices):
    """Shipment status enumeration following the fulfillment lifecycle."""
    PROCESSING = 'PROCESSING', 'Processing'
    PICKED = 'PICKED', 'Picked'
    PACKED = 'PACKED', 'Packed'
    LABELED = 'LABELED', 'Labeled'
    AWAITING_CARRIER = 'AWAITING_CARRIER', 'Awaiting Carrier'
    IN_TRANSIT = 'IN_TRANSIT', 'In Transit'
    OUT_FOR_DELIVERY = 'OUT_FOR_DELIVERY', 'Out for Delivery'
    DELIVERED = 'DELIVERED', 'Delivered'
    EXCEPTION = 'EXCEPTION', 'Exception'
    ON_HOLD = 'ON_HOLD', 'On Hold'
    OUT_OF_STOCK = 'OUT_OF_STOCK', 'Out of Stock'
    CANCELLED = 'CANCELLED', 'Cancelled'


class OrderType(models.TextChoices):
    D2C = 'D2C', 'Direct to Consumer'
    B2B = 'B2B', 'Business to Business'


class Shipment(models.Model):
    """
    A single outbound parcel imported from the fulfillment system.

    Tracks the parcel from order receipt through delivery together with the
    charges billed for it.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    client = models.ForeignKey(
        'accounts.Client',
        on_delete=models.CASCADE,
        related_name='shipments',
        help_text="Client this shipment belongs to"
    )

    # Identification
    shipment_id = models.CharField(
        max_length=50,
        unique=True,
        help_text="Shipment identifier in the fulfillment system"
    )
    order_id = models.CharField(max_length=50, db_index=True)
    store_order_id = models.CharField(max_length=100, blank=True)
    tracking_id = models.CharField(
        max_length=100,
        blank=True,
        help_text="Carrier tracking number"
    )
    customer_name = models.CharField(max_length=200, blank=True)
    channel_name = models.CharField(
        max_length=100,
        blank=True,
        help_text="Store integration the order came from"
    )
    order_type = models.CharField(
        max_length=10,
        choices=OrderType.choices,
        default=OrderType.D2C
    )

    # Shipping details
    carrier = models.CharField(max_length=100, blank=True)
    carrier_service = models.CharField(max_length=100, blank=True)
    ship_option_id = models.CharField(max_length=50, blank=True)
    zone = models.CharField(
        max_length=10,
        blank=True,
        help_text="Carrier distance band (1-8)"
    )

    status = models.CharField(
        max_length=20,
        choices=ShipmentStatus.choices,
        default=ShipmentStatus.PROCESSING,
        help_text="Current lifecycle status"
    )

    # Charges
    base_charge = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text="Fulfillment charge without surcharges"
    )
    surcharge = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    total_charge = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text="Total billed for the shipment"
    )
    insurance_charge = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    total_quantity = models.PositiveIntegerField(default=1)

    # Destination and origin
    city = models.CharField(max_length=100, blank=True)
    state = models.CharField(max_length=10, blank=True, help_text="Two-letter state code")
    zip_code = models.CharField(max_length=20, blank=True)
    destination_country = models.CharField(max_length=2, default='US')
    origin_country = models.CharField(max_length=2, default='US')
    fc_name = models.CharField(
        max_length=100,
        blank=True,
        help_text="Fulfillment center that shipped the parcel"
    )

    # Lifecycle timestamps
    order_imported_at = models.DateTimeField(default=timezone.now)
    label_created_at = models.DateTimeField(null=True, blank=True)
    in_transit_at = models.DateTimeField(null=True, blank=True)
    out_for_delivery_at = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)
    transit_time_days = models.DecimalField(
        max_digits=6,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Days from label creation to delivery"
    )

    # Billing linkage
    invoice = models.ForeignKey(
        'billing.Invoice',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='shipments',
        help_text="Invoice this shipment was billed on"
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-label_created_at', '-order_imported_at']
        indexes = [
            models.Index(fields=['client', 'label_created_at']),
            models.Index(fields=['client', 'status']),
            models.Index(fields=['carrier', 'tracking_id']),
            models.Index(fields=['invoice']),
        ]

    def __str__(self):
        return f"Shipment {self.shipment_id} - {self.carrier} ({self.status})"

    @property
    def is_delivered(self):
        return self.status == ShipmentStatus.DELIVERED or self.delivered_at is not None

    @property
    def is_international(self):
        return (self.origin_country or 'US') != (self.destination_country or 'US')

    @property
    def is_invoiced(self):
        return self.invoice_id is not None

    def days_since_label(self, now=None):
        """Whole days since the label was created, or None when unlabelled."""
        if not self.label_created_at:
            return None
        now = now or timezone.now()
        return (now - self.label_created_at).days

    def compute_transit_time_days(self):
        if not (self.label_created_at and self.delivered_at):
            return None
        seconds = Decimal((self.delivered_at - self.label_created_at).total_seconds())
        return (seconds / Decimal(86400)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
