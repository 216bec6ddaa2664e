"""
Invoice Service.

Weekly invoice generation: gathers a client's uninvoiced shipments and
pending fees for one Monday-to-Sunday period, totals them and writes the
invoice artifacts.
"""

import logging
from collections import OrderedDict
from datetime import datetime, time, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List

from django.conf import settings
from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from accounts.models import Client
from shipments.models import Shipment
from shipments.services import ShipmentService
from ..exceptions import InvoiceGenerationException
from ..models import (
    BillingStatus, Invoice, InvoiceLineItem, TRANSACTION_FAMILIES,
)
from .file_service import InvoiceFileService
from .transaction_service import TransactionService

logger = logging.getLogger(__name__)

CENTS = Decimal('0.01')
SHIPPING_CATEGORY = 'Shipping'


def period_bounds(week_start):
    """Aware datetimes covering week_start 00:00 through the following Sunday 23:59:59.999999."""
    period_end = week_start + timedelta(days=6)
    tz = timezone.get_current_timezone()
    start = timezone.make_aware(datetime.combine(week_start, time.min), tz)
    end = timezone.make_aware(datetime.combine(period_end, time.max), tz)
    return period_end, start, end


def format_invoice_number(client: Client, invoice_date) -> str:
    return (
        f"{settings.INVOICE_NUMBER_PREFIX}{client.short_code}"
        f"-{client.next_invoice_number:04d}-{invoice_date:%m%d%y}"
    )


class InvoiceService:
    """Service class for invoice generation."""

    @staticmethod
    def build_line_items(shipments: List[Shipment], fees: List) -> List[Dict]:
        """
        One line per non-empty category: Shipping first, then fee families in
        the order they appear.
        """
        lines = OrderedDict()
        if shipments:
            lines[SHIPPING_CATEGORY] = {
                'category': SHIPPING_CATEGORY,
                'description': f"{len(shipments)} shipments",
                'quantity': len(shipments),
                'amount': sum((s.total_charge for s in shipments), Decimal('0')),
            }
        for fee in fees:
            line = lines.setdefault(fee.invoice_category, {
                'category': fee.invoice_category,
                'description': '',
                'quantity': 0,
                'amount': Decimal('0'),
            })
            line['quantity'] += 1
            line['amount'] += fee.signed_amount
        for line in lines.values():
            if not line['description']:
                line['description'] = f"{line['quantity']} transactions"
            line['amount'] = line['amount'].quantize(CENTS, rounding=ROUND_HALF_UP)
        return list(lines.values())

    @staticmethod
    def generate_invoice(client_id, week_start, user=None) -> Invoice:
        """
        Generate the weekly invoice for a client.

        Args:
            client_id: Client UUID
            week_start: Monday the billing period starts on
            user: User generating the invoice

        Returns:
            Created Invoice with line items and stored artifacts

        Raises:
            InvoiceGenerationException: If the period is invalid, the client is
                unknown, or the period has no uninvoiced shipments
        """
        if week_start.weekday() != 0:
            raise InvoiceGenerationException(
                f"Billing periods start on a Monday; {week_start.isoformat()} is not one",
                "INVALID_PERIOD",
                {'week_start': week_start.isoformat()}
            )
        period_end, start, end = period_bounds(week_start)

        with transaction.atomic():
            client = Client.objects.select_for_update().filter(id=client_id).first()
            if client is None:
                raise InvoiceGenerationException(
                    "Client not found", "CLIENT_NOT_FOUND", {'client_id': str(client_id)}
                )

            shipments = list(
                Shipment.objects.select_for_update()
                .filter(
                    client=client,
                    invoice__isnull=True,
                    label_created_at__gte=start,
                    label_created_at__lte=end,
                )
                .order_by('label_created_at', 'id')
            )
            if not shipments:
                raise InvoiceGenerationException(
                    f"No uninvoiced shipments for {client.short_code} "
                    f"between {week_start.isoformat()} and {period_end.isoformat()}",
                    "NO_UNINVOICED_SHIPMENTS",
                    {'client_id': str(client.id), 'week_start': week_start.isoformat()}
                )

            if Invoice.objects.filter(client=client, period_start=week_start).exists():
                logger.warning(
                    f"Client {client.short_code} already has an invoice for the week of "
                    f"{week_start.isoformat()}; generating another"
                )

            fees = []
            for model in TRANSACTION_FAMILIES.values():
                fees.extend(
                    model.objects.select_for_update().filter(
                        client=client,
                        status=BillingStatus.PENDING,
                        transaction_date__gte=start,
                        transaction_date__lte=end,
                    )
                )

            line_items = InvoiceService.build_line_items(shipments, fees)
            subtotal = sum((line['amount'] for line in line_items), Decimal('0'))
            tax_rate = settings.INVOICE_TAX_RATE
            tax_amount = (subtotal * tax_rate).quantize(CENTS, rounding=ROUND_HALF_UP)

            invoice_date = timezone.localdate()
            invoice = Invoice.objects.create(
                client=client,
                invoice_number=format_invoice_number(client, invoice_date),
                invoice_date=invoice_date,
                period_start=week_start,
                period_end=period_end,
                subtotal=subtotal,
                tax_rate=tax_rate,
                tax_amount=tax_amount,
                total_amount=subtotal + tax_amount,
                shipment_count=len(shipments),
                transaction_count=len(fees),
                generated_by=user,
            )
            items = InvoiceLineItem.objects.bulk_create(
                [InvoiceLineItem(invoice=invoice, **line) for line in line_items]
            )

            client.next_invoice_number += 1
            client.save(update_fields=['next_invoice_number'])

            ShipmentService.stamp_invoice(shipments, invoice, user=user)
            TransactionService.mark_invoiced(fees, invoice)

            InvoiceFileService.write_artifacts(invoice, shipments, items)

        logger.info(
            f"Invoice {invoice.invoice_number} generated for {client.short_code}: "
            f"{invoice.shipment_count} shipments, {invoice.transaction_count} fees, "
            f"total {invoice.total_amount}"
        )
        return invoice

    @staticmethod
    def reconcile(invoice: Invoice) -> Dict[str, Decimal]:
        """Recompute an invoice's subtotal from the records linked to it."""
        shipping = invoice.shipments.aggregate(total=Sum('total_charge'))['total'] or Decimal('0')
        fees = Decimal('0')
        for model in TRANSACTION_FAMILIES.values():
            for record in model.objects.filter(invoice=invoice):
                fees += record.signed_amount
        return {
            'shipping': shipping,
            'fees': fees,
            'subtotal': shipping + fees,
            'matches': shipping + fees == invoice.subtotal,
        }
