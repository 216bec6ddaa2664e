"""
Invoice artifacts: XLSX and PDF files in default storage, served through
short-lived signed links.
"""

import io
import logging
from typing import Dict, Any, Iterable

from django.conf import settings
from django.core import signing
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from django.urls import reverse
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas
from rest_framework.exceptions import NotFound, PermissionDenied

from tables.renderers import format_currency, format_date
from ..exceptions import InvoiceFileException
from ..models import Invoice

logger = logging.getLogger(__name__)

SIGNER_SALT = 'shipdash.billing.invoice-files'

FILE_KINDS = {
    'pdf': ('pdf_path', 'application/pdf'),
    'xlsx': ('xlsx_path', 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'),
}

SHIPMENT_SHEET_COLUMNS = (
    ('Shipment ID', 'shipment_id'),
    ('Order ID', 'order_id'),
    ('Tracking ID', 'tracking_id'),
    ('Carrier', 'carrier'),
    ('Zone', 'zone'),
    ('Label Created', 'label_created_at'),
    ('Base Charge', 'base_charge'),
    ('Surcharge', 'surcharge'),
    ('Total Charge', 'total_charge'),
)


def _signer():
    return signing.TimestampSigner(salt=SIGNER_SALT)


class InvoiceFileService:
    """Builds invoice files and hands out signed download links."""

    @staticmethod
    def build_xlsx(invoice: Invoice, shipments: Iterable, line_items: Iterable) -> bytes:
        wb = Workbook()
        header_font = Font(bold=True)
        header_fill = PatternFill(fill_type='solid', fgColor='FFE0E0E0')

        summary = wb.active
        summary.title = 'Summary'
        summary.append(['Invoice', invoice.invoice_number])
        summary.append(['Client', invoice.client.company_name])
        summary.append(['Invoice Date', format_date(invoice.invoice_date)])
        summary.append(['Period', f"{format_date(invoice.period_start)} - {format_date(invoice.period_end)}"])
        summary.append([])
        summary.append(['Category', 'Description', 'Quantity', 'Amount'])
        for cell in summary[summary.max_row]:
            cell.font = header_font
            cell.fill = header_fill
        for item in line_items:
            summary.append([item.category, item.description, item.quantity, float(item.amount)])
        summary.append([])
        summary.append(['Subtotal', '', '', float(invoice.subtotal)])
        summary.append(['Tax', '', '', float(invoice.tax_amount)])
        summary.append(['Total', '', '', float(invoice.total_amount)])
        summary[summary.max_row][0].font = header_font
        summary.column_dimensions['A'].width = 22
        summary.column_dimensions['B'].width = 40

        sheet = wb.create_sheet('Shipments')
        sheet.append([header for header, _ in SHIPMENT_SHEET_COLUMNS])
        for cell in sheet[1]:
            cell.font = header_font
            cell.fill = header_fill
        for shipment in shipments:
            sheet.append([
                shipment.shipment_id,
                shipment.order_id,
                shipment.tracking_id,
                shipment.carrier,
                shipment.zone,
                format_date(shipment.label_created_at),
                float(shipment.base_charge),
                float(shipment.surcharge),
                float(shipment.total_charge),
            ])
        for column_cells in sheet.iter_cols(min_row=1, max_row=1):
            sheet.column_dimensions[column_cells[0].column_letter].width = 16

        buffer = io.BytesIO()
        wb.save(buffer)
        return buffer.getvalue()

    @staticmethod
    def build_pdf(invoice: Invoice, line_items: Iterable) -> bytes:
        buffer = io.BytesIO()
        p = canvas.Canvas(buffer, pagesize=letter)
        width, height = letter
        y = height - 50

        p.setFont("Helvetica-Bold", 16)
        p.drawString(50, y, f"Invoice {invoice.invoice_number}")
        y -= 24
        p.setFont("Helvetica", 10)
        p.drawString(50, y, invoice.client.company_name)
        y -= 14
        p.drawString(50, y, f"Invoice date: {format_date(invoice.invoice_date)}")
        y -= 14
        p.drawString(
            50, y,
            f"Billing period: {format_date(invoice.period_start)} - {format_date(invoice.period_end)}"
        )
        y -= 30

        p.setFont("Helvetica-Bold", 10)
        p.drawString(50, y, "Category")
        p.drawString(260, y, "Qty")
        p.drawRightString(width - 50, y, "Amount")
        y -= 16
        p.setFont("Helvetica", 10)
        for item in line_items:
            p.drawString(50, y, item.category[:40])
            p.drawString(260, y, str(item.quantity))
            p.drawRightString(width - 50, y, format_currency(item.amount))
            y -= 14
            if y < 100:
                p.showPage()
                p.setFont("Helvetica", 10)
                y = height - 50

        y -= 10
        for label, amount in (
            ('Subtotal', invoice.subtotal),
            (f"Tax ({invoice.tax_rate * 100:.2f}%)", invoice.tax_amount),
            ('Total', invoice.total_amount),
        ):
            p.drawString(260, y, label)
            p.drawRightString(width - 50, y, format_currency(amount))
            y -= 14

        p.save()
        return buffer.getvalue()

    @staticmethod
    def write_artifacts(invoice: Invoice, shipments, line_items) -> Invoice:
        """Store both invoice files and record their storage paths on the invoice."""
        base = f"invoices/{invoice.client.short_code}/{invoice.invoice_number}"
        invoice.xlsx_path = default_storage.save(
            f"{base}.xlsx", ContentFile(InvoiceFileService.build_xlsx(invoice, shipments, line_items))
        )
        invoice.pdf_path = default_storage.save(
            f"{base}.pdf", ContentFile(InvoiceFileService.build_pdf(invoice, line_items))
        )
        invoice.save(update_fields=['xlsx_path', 'pdf_path', 'updated_at'])
        logger.info(f"Stored invoice files for {invoice.invoice_number}")
        return invoice

    @staticmethod
    def get_invoice_for_user(invoice_number: str, user) -> Invoice:
        try:
            invoice = Invoice.objects.select_related('client').get(invoice_number=invoice_number)
        except Invoice.DoesNotExist:
            raise NotFound("Invoice not found")
        if not user.is_member_of(invoice.client_id):
            logger.warning(f"User {user.username} denied invoice {invoice_number}")
            raise PermissionDenied("You do not have access to this invoice")
        return invoice

    @staticmethod
    def sign(invoice_number: str, kind: str) -> str:
        return _signer().sign_object({'invoice': invoice_number, 'kind': kind})

    @staticmethod
    def get_signed_urls(invoice_number: str, user, request=None) -> Dict[str, Any]:
        """
        Signed download links for an invoice's PDF and XLSX.

        Raises:
            NotFound: If the invoice does not exist
            PermissionDenied: If the user is not a member of the invoice's client
        """
        invoice = InvoiceFileService.get_invoice_for_user(invoice_number, user)
        urls = {}
        for kind in FILE_KINDS:
            path = reverse('invoice-file-download', args=[InvoiceFileService.sign(invoice.invoice_number, kind)])
            urls[f"{kind}_url"] = request.build_absolute_uri(path) if request else path
        urls['expires_in'] = settings.INVOICE_URL_TTL_SECONDS
        return urls

    @staticmethod
    def open_signed_file(token: str):
        """
        Resolve a signed token to an open file.

        Returns:
            Tuple of (file, filename, content_type)

        Raises:
            InvoiceFileException: If the token is tampered with or expired
        """
        try:
            payload = _signer().unsign_object(token, max_age=settings.INVOICE_URL_TTL_SECONDS)
        except signing.SignatureExpired:
            raise InvoiceFileException("This download link has expired", "FILE_LINK_EXPIRED")
        except signing.BadSignature:
            raise InvoiceFileException("Invalid download link")

        kind = payload.get('kind')
        if kind not in FILE_KINDS:
            raise InvoiceFileException("Invalid download link")
        path_field, content_type = FILE_KINDS[kind]

        invoice = Invoice.objects.filter(invoice_number=payload.get('invoice')).first()
        path = getattr(invoice, path_field, '') if invoice else ''
        if not path or not default_storage.exists(path):
            raise NotFound("Invoice file not found")

        return default_storage.open(path, 'rb'), f"{invoice.invoice_number}.{kind}", content_type
