"""
Import of shipments from the fulfillment system export.
"""

import logging
from decimal import Decimal, InvalidOperation
from datetime import datetime
from typing import Dict, Any, List
from django.db import transaction
from django.utils import timezone
from django.utils.dateparse import parse_datetime, parse_date

from ..models import Shipment, ShipmentStatus, ShipmentEvent
from ..exceptions import BusinessException, ClientAccessDenied, ValidationException
from .workflow import validate_shipment_workflow

logger = logging.getLogger(__name__)

DECIMAL_FIELDS = (
    'base_charge', 'surcharge', 'total_charge', 'insurance_charge', 'transit_time_days',
)
DATETIME_FIELDS = (
    'order_imported_at', 'label_created_at', 'in_transit_at',
    'out_for_delivery_at', 'delivered_at',
)
TEXT_FIELDS = (
    'order_id', 'store_order_id', 'tracking_id', 'customer_name', 'channel_name',
    'order_type', 'carrier', 'carrier_service', 'ship_option_id', 'zone', 'city',
    'state', 'zip_code', 'destination_country', 'origin_country', 'fc_name',
)


def parse_timestamp(value):
    """Parse an ISO datetime/date string into an aware datetime."""
    if value in (None, ''):
        return None
    if hasattr(value, 'hour'):
        parsed = value
    else:
        value = str(value)
        parsed = parse_datetime(value)
        if parsed is None:
            day = parse_date(value)
            if day is None:
                raise ValidationException(f"Invalid timestamp: {value}", {'value': value})
            parsed = datetime(day.year, day.month, day.day)
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed)
    return parsed


def parse_decimal(value, field):
    if value in (None, ''):
        return None
    try:
        return Decimal(str(value)).quantize(Decimal('0.01'))
    except InvalidOperation:
        raise ValidationException(f"Invalid amount for {field}: {value}", {field: value})


def parse_quantity(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationException(f"Invalid quantity: {value}", {'total_quantity': value})


class ShipmentImportService:
    """Upserts shipments keyed by their fulfillment-system shipment id."""

    @staticmethod
    def normalize_row(row: Dict[str, Any]) -> Dict[str, Any]:
        if not row.get('shipment_id'):
            raise ValidationException("shipment_id is required", {'shipment_id': 'missing'})

        values = {}
        for field in TEXT_FIELDS:
            if field in row and row[field] is not None:
                values[field] = str(row[field]).strip()
        if 'state' in values:
            values['state'] = values['state'].upper()
        for field in DECIMAL_FIELDS:
            if field in row:
                values[field] = parse_decimal(row[field], field)
        for field in DATETIME_FIELDS:
            if field in row:
                values[field] = parse_timestamp(row[field])
        if row.get('total_quantity') not in (None, ''):
            values['total_quantity'] = parse_quantity(row['total_quantity'])

        if 'status' in row:
            status = str(row['status']).strip().upper().replace(' ', '_').replace('-', '_')
            if status not in ShipmentStatus.values:
                raise ValidationException(f"Unknown shipment status: {row['status']}", {'status': row['status']})
            values['status'] = status

        for field in ('base_charge', 'surcharge', 'insurance_charge'):
            if field in values and values[field] is None:
                values[field] = Decimal('0.00')
        if values.get('total_charge') is None and 'base_charge' in values:
            values['total_charge'] = values['base_charge'] + values.get('surcharge', Decimal('0.00'))
        return values

    @staticmethod
    def import_shipments(client, rows: List[Dict[str, Any]], imported_by=None) -> Dict[str, Any]:
        """
        Create or update shipments for a client.

        Delivered shipments are never modified and status changes on existing
        shipments must follow the workflow. Rejected rows are reported, not raised.

        Returns:
            Counts of created, updated and skipped rows plus per-row errors
        """
        result = {'created': 0, 'updated': 0, 'skipped': 0, 'errors': []}

        with transaction.atomic():
            for index, row in enumerate(rows):
                try:
                    values = ShipmentImportService.normalize_row(row)
                except ValidationException as e:
                    result['skipped'] += 1
                    result['errors'].append({'row': index, 'code': e.code, 'message': e.message})
                    continue

                shipment_id = str(row['shipment_id']).strip()
                shipment = Shipment.objects.select_for_update().filter(shipment_id=shipment_id).first()

                if shipment is None:
                    shipment = Shipment.objects.create(client=client, shipment_id=shipment_id, **values)
                    if shipment.delivered_at and shipment.transit_time_days is None:
                        shipment.transit_time_days = shipment.compute_transit_time_days()
                        shipment.save(update_fields=['transit_time_days'])
                    ShipmentEvent.log_change(shipment, 'imported', user=imported_by, new_values={'status': shipment.status})
                    result['created'] += 1
                    continue

                try:
                    if shipment.client_id != client.id:
                        raise ClientAccessDenied(shipment_id, client.short_code)
                    new_status = values.pop('status', shipment.status)
                    validate_shipment_workflow(shipment, new_status)
                except BusinessException as e:
                    result['skipped'] += 1
                    result['errors'].append({'row': index, 'code': e.code, 'message': e.message})
                    continue

                old_status = shipment.status
                for field, value in values.items():
                    setattr(shipment, field, value)
                shipment.status = new_status
                if shipment.delivered_at and shipment.transit_time_days is None:
                    shipment.transit_time_days = shipment.compute_transit_time_days()
                shipment.save()

                if old_status != new_status:
                    ShipmentEvent.log_status_change(shipment, old_status, new_status, user=imported_by, notes="Imported")
                result['updated'] += 1

        logger.info(
            f"Imported shipments for {client.short_code}: {result['created']} created, "
            f"{result['updated']} updated, {result['skipped']} skipped"
        )
        return result
