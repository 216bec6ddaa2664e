"""
CSV and XLSX export of transaction rows.

An ExportConfig lists the exported columns with the row key each one reads
and an optional formatter.
"""

import csv
import logging
from dataclasses import dataclass
from io import BytesIO
from typing import Any, Callable, Iterable, Optional, Tuple

from django.http import HttpResponse
from django.utils import timezone
from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, Side

from .renderers import format_currency, format_date, format_transit_days

logger = logging.getLogger(__name__)

XLSX_CONTENT_TYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
EXPORT_FORMATS = ('csv', 'xlsx')


@dataclass(frozen=True)
class ExportColumn:
    header: str
    key: str
    formatter: Optional[Callable[[Any], str]] = None

    def value(self, row):
        raw = row.get(self.key)
        if self.formatter is not None:
            return self.formatter(raw)
        return '' if raw is None else raw


@dataclass(frozen=True)
class ExportConfig:
    name: str
    sheet_title: str
    columns: Tuple[ExportColumn, ...]

    @property
    def headers(self):
        return [col.header for col in self.columns]

    def rows(self, records: Iterable[dict]):
        for record in records:
            yield [col.value(record) for col in self.columns]

    def filename(self, extension):
        return f"{self.name}_{timezone.localdate().isoformat()}.{extension}"


def write_csv(config: ExportConfig, records: Iterable[dict]) -> HttpResponse:
    response = HttpResponse(content_type='text/csv')
    response['Content-Disposition'] = f'attachment; filename="{config.filename("csv")}"'
    writer = csv.writer(response)
    writer.writerow(config.headers)
    count = 0
    for row in config.rows(records):
        writer.writerow(row)
        count += 1
    logger.info(f"Exported {count} {config.name} rows as CSV")
    return response


def build_workbook(config: ExportConfig, records: Iterable[dict]) -> Workbook:
    wb = Workbook()
    ws = wb.active
    ws.title = config.sheet_title

    ws.append(config.headers)
    bold_font = Font(bold=True)
    all_borders = Border(left=Side(style='thin'), right=Side(style='thin'),
                         top=Side(style='thin'), bottom=Side(style='thin'))
    center_alignment = Alignment(horizontal='center', vertical='center', wrap_text=True)
    for cell in ws[1]:
        cell.font = bold_font
        cell.border = all_borders
        cell.alignment = center_alignment

    widths = [len(header) for header in config.headers]
    for index, row in enumerate(config.rows(records)):
        ws.append(row)
        # Sample the first hundred rows for column widths
        if index < 100:
            widths = [max(w, len(str(v))) for w, v in zip(widths, row)]

    for column_cells, width in zip(ws.iter_cols(min_row=1, max_row=1), widths):
        ws.column_dimensions[column_cells[0].column_letter].width = min(width + 2, 50)
    return wb


def write_xlsx(config: ExportConfig, records: Iterable[dict]) -> HttpResponse:
    wb = build_workbook(config, records)
    excel_file = BytesIO()
    wb.save(excel_file)
    excel_file.seek(0)

    response = HttpResponse(excel_file.getvalue(), content_type=XLSX_CONTENT_TYPE)
    response['Content-Disposition'] = f'attachment; filename="{config.filename("xlsx")}"'
    logger.info(f"Exported {wb.active.max_row - 1} {config.name} rows as XLSX")
    return response


def export_response(config: ExportConfig, records: Iterable[dict], export_format: str = 'csv') -> HttpResponse:
    if export_format == 'xlsx':
        return write_xlsx(config, records)
    return write_csv(config, records)


Col = ExportColumn

SHIPMENTS_EXPORT = ExportConfig('shipments', 'Shipments', (
    Col('Client', 'client_code'),
    Col('Customer Name', 'customer_name'),
    Col('Channel', 'channel_name'),
    Col('Shipment ID', 'shipment_id'),
    Col('Order ID', 'order_id'),
    Col('Store Order ID', 'store_order_id'),
    Col('Tracking ID', 'tracking_id'),
    Col('Status', 'display_status'),
    Col('Base Charge', 'base_charge', format_currency),
    Col('Surcharges', 'surcharge', format_currency),
    Col('Total Charge', 'total_charge', format_currency),
    Col('Insurance', 'insurance_charge', format_currency),
    Col('Qty', 'total_quantity'),
    Col('Ship Option ID', 'ship_option_id'),
    Col('Carrier', 'carrier'),
    Col('Carrier Service', 'carrier_service'),
    Col('Zone', 'zone'),
    Col('Zip Code', 'zip_code'),
    Col('City', 'city'),
    Col('State', 'state'),
    Col('Destination Country', 'destination_country'),
    Col('Order Date', 'order_imported_at', format_date),
    Col('Label Created', 'label_created_at', format_date),
    Col('Delivered', 'delivered_at', format_date),
    Col('Transit Time', 'transit_time_days', format_transit_days),
    Col('FC', 'fc_name'),
    Col('Invoice', 'invoice_number'),
))

ADDITIONAL_SERVICES_EXPORT = ExportConfig('additional_services', 'Additional Services', (
    Col('Reference ID', 'reference_id'),
    Col('Fee Type', 'fee_type'),
    Col('Invoice Amount', 'amount', format_currency),
    Col('Transaction Date', 'transaction_date', format_date),
    Col('Invoice Number', 'invoice_number'),
    Col('Transaction Status', 'status'),
))

RECEIVING_EXPORT = ExportConfig('receiving', 'Receiving', (
    Col('WRO ID', 'wro_id'),
    Col('Fee Type', 'fee_type'),
    Col('Amount', 'amount', format_currency),
    Col('Transaction Date', 'transaction_date', format_date),
    Col('Receiving Status', 'receiving_status'),
    Col('Contents', 'contents'),
    Col('Invoice Number', 'invoice_number'),
    Col('Transaction Status', 'status'),
))

STORAGE_EXPORT = ExportConfig('storage', 'Storage', (
    Col('Charge Start Date', 'transaction_date', format_date),
    Col('FC Name', 'fc_name'),
    Col('Inventory ID', 'inventory_id'),
    Col('Location Type', 'location_type'),
    Col('Comment', 'comment'),
    Col('Amount', 'amount', format_currency),
    Col('Invoice Number', 'invoice_number'),
    Col('Transaction Status', 'status'),
))

CREDITS_EXPORT = ExportConfig('credits', 'Credits', (
    Col('Reference ID', 'reference_id'),
    Col('Transaction Date', 'transaction_date', format_date),
    Col('Credit Invoice Number', 'invoice_number'),
    Col('Credit Reason', 'credit_reason'),
    Col('Credit Amount', 'amount', format_currency),
    Col('Ticket', 'ticket_reference'),
    Col('Transaction Status', 'status'),
))

RETURNS_EXPORT = ExportConfig('returns', 'Returns', (
    Col('Return ID', 'return_id'),
    Col('Original Shipment ID', 'original_shipment_id'),
    Col('Tracking ID', 'tracking_number'),
    Col('Return Status', 'return_status'),
    Col('Return Type', 'return_type'),
    Col('Return Creation Date', 'transaction_date', format_date),
    Col('FC Name', 'fc_name'),
    Col('Amount', 'amount', format_currency),
    Col('Invoice Number', 'invoice_number'),
    Col('Transaction Status', 'status'),
))

INVOICES_EXPORT = ExportConfig('invoices', 'Invoices', (
    Col('Invoice Number', 'invoice_number'),
    Col('Client', 'client_code'),
    Col('Invoice Date', 'invoice_date', format_date),
    Col('Period Start', 'period_start', format_date),
    Col('Period End', 'period_end', format_date),
    Col('Shipments', 'shipment_count'),
    Col('Transactions', 'transaction_count'),
    Col('Subtotal', 'subtotal', format_currency),
    Col('Tax', 'tax_amount', format_currency),
    Col('Total', 'total_amount', format_currency),
    Col('Status', 'status'),
))
