"""
Cell renderers for the transaction tables.

Each renderer takes a serialized row (a dict) and its ColumnConfig and returns
safe HTML. Interactive controls carry ``data-stop-propagation`` so clicking
them does not trigger the row action.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from urllib.parse import quote

from django.utils import dateformat, timezone
from django.utils.dateparse import parse_date, parse_datetime
from django.utils.html import format_html

from .badges import billing_badge, return_badge, shipment_badge, DisplayStatus, DISPLAY_STATUS_BADGES

PLACEHOLDER = '-'

# Carrier name fragment -> tracking page
TRACKING_URLS = (
    ('ups', 'https://www.ups.com/track?tracknum={}'),
    ('fedex', 'https://www.fedex.com/fedextrack/?trknbr={}'),
    ('usps', 'https://tools.usps.com/go/TrackConfirmAction?tLabels={}'),
    ('dhl ecommerce', 'https://webtrack.dhlglobalmail.com/?trackingnumber={}'),
    ('dhl', 'https://www.dhl.com/global-en/home/tracking/tracking-express.html?submit=1&tracking-id={}'),
    ('veho', 'https://track.shipveho.com/#/trackingId/{}'),
    ('ontrac', 'https://www.ontrac.com/tracking/?number={}'),
    ('lasership', 'https://www.ontrac.com/tracking/?number={}'),
    ('amazon', 'https://track.amazon.com/tracking/{}'),
    ('osm', 'https://www.osmworldwide.com/tracking/?TrackingNumbers={}'),
    ('uniuni', 'https://www.uniuni.com/tracking?no={}'),
)


def to_datetime(value):
    """Coerce a datetime, date or ISO string to a local datetime (or date)."""
    if value in (None, ''):
        return None
    if isinstance(value, str):
        parsed = parse_datetime(value)
        value = parsed if parsed is not None else parse_date(value)
        if value is None:
            return None
    if isinstance(value, datetime):
        if timezone.is_naive(value):
            value = timezone.make_aware(value)
        return timezone.localtime(value)
    return value


def format_date(value):
    """'Jan 15, 2025', or an empty string when there is no date."""
    moment = to_datetime(value)
    if moment is None:
        return ''
    if not isinstance(moment, (datetime, date)):
        return str(value)
    return dateformat.format(moment, 'M j, Y')


def format_currency(value):
    if value in (None, ''):
        return ''
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        return str(value)
    sign = '-' if amount < 0 else ''
    return f"{sign}${abs(amount):,.2f}"


def format_transit_days(value):
    if value in (None, ''):
        return ''
    return f"{float(value):.1f} days"


def format_age(value, now=None):
    """Age since a timestamp as '5h' under a day, otherwise '2.5d'."""
    moment = to_datetime(value)
    if not isinstance(moment, datetime):
        return ''
    days = ((now or timezone.now()) - moment).total_seconds() / 86400
    if days < 1:
        return f"{round(days * 24)}h"
    return f"{days:.1f}d"


def get_tracking_url(carrier, tracking_id):
    if not tracking_id:
        return None
    carrier = (carrier or '').lower()
    for fragment, template in TRACKING_URLS:
        if fragment in carrier:
            return template.format(quote(str(tracking_id), safe=''))
    return None


def text_cell(key):
    def render(row, column):
        value = row.get(key)
        if value in (None, ''):
            return PLACEHOLDER
        return format_html('<div class="truncate">{}</div>', value)
    return render


def date_cell(key):
    def render(row, column):
        formatted = format_date(row.get(key))
        if not formatted:
            return PLACEHOLDER
        return format_html('<span class="whitespace-nowrap">{}</span>', formatted)
    return render


def currency_cell(key):
    def render(row, column):
        formatted = format_currency(row.get(key))
        if not formatted:
            return PLACEHOLDER
        return format_html('<div class="font-medium">{}</div>', formatted)
    return render


def copyable_cell(key, label):
    """Identifier with a copy button."""
    def render(row, column):
        value = row.get(key)
        if not value:
            return PLACEHOLDER
        return format_html(
            '<div class="copyable"><span>{}</span>'
            '<button type="button" class="copy" data-copy="{}" data-stop-propagation="true" '
            'title="Copy {}">copy</button></div>',
            value, value, label,
        )
    return render


def badge_html(badge):
    return format_html(
        '<span class="badge {}" data-icon="{}">{}</span>',
        badge.css_class, badge.icon, badge.label,
    )


def shipment_status_cell(row, column):
    status = row.get('display_status')
    if status in DisplayStatus.values:
        return badge_html(DISPLAY_STATUS_BADGES[DisplayStatus(status)])
    return badge_html(shipment_badge(row['status']))


def billing_status_cell(row, column):
    if not row.get('status'):
        return PLACEHOLDER
    return badge_html(billing_badge(row['status']))


def return_status_cell(row, column):
    return badge_html(return_badge(row.get('return_status')))


def tracking_cell(row, column):
    tracking_id = row.get('tracking_id') or row.get('tracking_number')
    if not tracking_id:
        return PLACEHOLDER
    url = get_tracking_url(row.get('carrier'), tracking_id)
    if url is None:
        return format_html('<span>{}</span>', tracking_id)
    return format_html(
        '<a href="{}" target="_blank" rel="noopener noreferrer" data-stop-propagation="true">{}</a>',
        url, tracking_id,
    )


def transit_cell(row, column):
    formatted = format_transit_days(row.get('transit_time_days'))
    return formatted or PLACEHOLDER


def age_cell(row, column):
    if row.get('delivered_at'):
        return PLACEHOLDER
    return format_age(row.get('label_created_at')) or PLACEHOLDER


SHIPMENT_RENDERERS = {
    'labelCreated': date_cell('label_created_at'),
    'shipmentId': copyable_cell('shipment_id', 'Shipment ID'),
    'status': shipment_status_cell,
    'orderId': text_cell('order_id'),
    'customerName': text_cell('customer_name'),
    'carrier': text_cell('carrier'),
    'trackingId': tracking_cell,
    'charge': currency_cell('total_charge'),
    'qty': text_cell('total_quantity'),
    'transitTimeDays': transit_cell,
    'age': age_cell,
    'orderType': text_cell('order_type'),
    'channelName': text_cell('channel_name'),
    'destCountry': text_cell('destination_country'),
    'orderDate': date_cell('order_imported_at'),
    'fcName': text_cell('fc_name'),
    'shipOption': text_cell('carrier_service'),
    'deliveredDate': date_cell('delivered_at'),
    'storeOrderId': text_cell('store_order_id'),
}

ADDITIONAL_SERVICES_RENDERERS = {
    'transactionDate': date_cell('transaction_date'),
    'referenceId': copyable_cell('reference_id', 'Reference ID'),
    'status': billing_status_cell,
    'feeType': text_cell('fee_type'),
    'charge': currency_cell('amount'),
    'invoiceNumber': text_cell('invoice_number'),
}

RETURNS_RENDERERS = {
    'returnCreationDate': date_cell('transaction_date'),
    'invoiceNumber': text_cell('invoice_number'),
    'returnId': copyable_cell('return_id', 'Return ID'),
    'returnStatus': return_status_cell,
    'returnType': text_cell('return_type'),
    'charge': currency_cell('amount'),
    'originalShipmentId': text_cell('original_shipment_id'),
    'trackingNumber': tracking_cell,
    'fcName': text_cell('fc_name'),
}

RECEIVING_RENDERERS = {
    'transactionDate': date_cell('transaction_date'),
    'wroId': copyable_cell('wro_id', 'WRO ID'),
    'feeType': text_cell('fee_type'),
    'invoiceNumber': text_cell('invoice_number'),
    'charge': currency_cell('amount'),
    'receivingStatus': text_cell('receiving_status'),
    'contents': text_cell('contents'),
}

STORAGE_RENDERERS = {
    'chargeStartDate': date_cell('transaction_date'),
    'invoiceNumber': text_cell('invoice_number'),
    'inventoryId': text_cell('inventory_id'),
    'fcName': text_cell('fc_name'),
    'locationType': text_cell('location_type'),
    'charge': currency_cell('amount'),
    'status': billing_status_cell,
    'comment': text_cell('comment'),
}

CREDITS_RENDERERS = {
    'transactionDate': date_cell('transaction_date'),
    'creditInvoiceNumber': text_cell('invoice_number'),
    'status': billing_status_cell,
    'referenceId': copyable_cell('reference_id', 'Reference ID'),
    'ticket': text_cell('ticket_reference'),
    'creditAmount': currency_cell('amount'),
    'creditReason': text_cell('credit_reason'),
}

INVOICE_RENDERERS = {
    'client': text_cell('client_code'),
    'invoiceDate': date_cell('invoice_date'),
    'invoiceNumber': copyable_cell('invoice_number', 'Invoice #'),
    'billingPeriod': lambda row, column: format_html(
        '{} - {}', format_date(row.get('period_start')), format_date(row.get('period_end'))
    ),
    'shipments': text_cell('shipment_count'),
    'cost': currency_cell('subtotal'),
    'amount': currency_cell('total_amount'),
    'status': text_cell('status'),
}
