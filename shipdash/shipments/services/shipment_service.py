"""
Shipment Service.

Handles status progression and invoice stamping for imported shipments.
"""

import logging
from typing import Dict, Any, Iterable
from django.db import transaction
from django.utils import timezone

from ..models import Shipment, ShipmentStatus, ShipmentEvent
from ..exceptions import BusinessException, ValidationException
from .workflow import ShipmentWorkflow, validate_shipment_workflow

logger = logging.getLogger(__name__)


class ShipmentService:
    """Service class for shipment lifecycle operations."""

    @staticmethod
    def update_status(shipment_id: str, new_status: str, updated_by=None,
                      occurred_at=None, notes: str = "") -> Shipment:
        """
        Move a shipment to a new lifecycle status.

        Args:
            shipment_id: Shipment UUID
            new_status: Target ShipmentStatus value
            updated_by: User performing the change
            occurred_at: When the carrier/fulfillment event happened
            notes: Free-form notes for the event log

        Returns:
            Updated Shipment instance

        Raises:
            ValidationException: If the status is unknown
            BusinessException: If the transition is not allowed
        """
        if new_status not in ShipmentStatus.values:
            raise ValidationException(f"Unknown shipment status: {new_status}", {'status': new_status})

        with transaction.atomic():
            shipment = Shipment.objects.select_for_update().get(id=shipment_id)

            validate_shipment_workflow(shipment, new_status)

            old_status = shipment.status
            if old_status == new_status:
                return shipment

            occurred_at = occurred_at or timezone.now()
            shipment.status = new_status

            timestamp_field = ShipmentWorkflow.STATUS_TIMESTAMPS.get(new_status)
            if timestamp_field and getattr(shipment, timestamp_field) is None:
                setattr(shipment, timestamp_field, occurred_at)

            if new_status == ShipmentStatus.DELIVERED:
                shipment.transit_time_days = shipment.compute_transit_time_days()

            shipment.save()

            ShipmentEvent.log_status_change(
                shipment=shipment,
                old_status=old_status,
                new_status=new_status,
                user=updated_by,
                notes=notes
            )

            logger.info(f"Shipment {shipment.shipment_id} status updated {old_status} -> {new_status}")
            return shipment

    @staticmethod
    def stamp_invoice(shipments: Iterable[Shipment], invoice, user=None) -> int:
        """
        Link shipments to an invoice.

        Must run inside the caller's transaction. Delivered shipments accept the
        link; shipments already on another invoice are rejected.

        Returns:
            Number of shipments stamped
        """
        count = 0
        for shipment in shipments:
            if shipment.invoice_id and shipment.invoice_id != invoice.id:
                raise BusinessException(
                    f"Shipment {shipment.shipment_id} is already on invoice {shipment.invoice_id}",
                    "ALREADY_INVOICED",
                    {'shipment_id': shipment.shipment_id}
                )
            shipment.invoice = invoice
            shipment.save(update_fields=['invoice', 'updated_at'])
            ShipmentEvent.log_change(
                shipment=shipment,
                action='invoiced',
                user=user,
                new_values={'invoice_number': invoice.invoice_number},
            )
            count += 1
        return count

    @staticmethod
    def get_timeline(shipment_id: str) -> Dict[str, Any]:
        """Lifecycle timestamps and event history for a shipment."""
        shipment = Shipment.objects.prefetch_related('events__user').get(id=shipment_id)
        return {
            'shipment_id': shipment.shipment_id,
            'status': shipment.status,
            'milestones': {
                'order_imported_at': shipment.order_imported_at,
                'label_created_at': shipment.label_created_at,
                'in_transit_at': shipment.in_transit_at,
                'out_for_delivery_at': shipment.out_for_delivery_at,
                'delivered_at': shipment.delivered_at,
            },
            'events': [
                {
                    'action': event.action,
                    'old_values': event.old_values,
                    'new_values': event.new_values,
                    'user': event.user.username if event.user else None,
                    'timestamp': event.timestamp,
                    'notes': event.notes,
                }
                for event in shipment.events.all()
            ],
        }
