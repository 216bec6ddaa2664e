"""
Workflow rules for shipment status progression.

Manages allowed state transitions and enforces business rules.
"""

from ..exceptions import InvalidTransitionException, ImmutableShipmentException
from ..models import Shipment, ShipmentStatus


class ShipmentWorkflow:
    """Workflow rules for Shipment state transitions."""

    PRE_LABEL = [
        ShipmentStatus.PROCESSING, ShipmentStatus.PICKED, ShipmentStatus.PACKED,
    ]

    ALLOWED_TRANSITIONS = {
        ShipmentStatus.PROCESSING: [
            ShipmentStatus.PICKED, ShipmentStatus.ON_HOLD, ShipmentStatus.OUT_OF_STOCK,
            ShipmentStatus.EXCEPTION, ShipmentStatus.CANCELLED,
        ],
        ShipmentStatus.PICKED: [
            ShipmentStatus.PACKED, ShipmentStatus.ON_HOLD,
            ShipmentStatus.EXCEPTION, ShipmentStatus.CANCELLED,
        ],
        ShipmentStatus.PACKED: [
            ShipmentStatus.LABELED, ShipmentStatus.ON_HOLD,
            ShipmentStatus.EXCEPTION, ShipmentStatus.CANCELLED,
        ],
        ShipmentStatus.LABELED: [
            ShipmentStatus.AWAITING_CARRIER, ShipmentStatus.IN_TRANSIT,
            ShipmentStatus.EXCEPTION, ShipmentStatus.CANCELLED,
        ],
        ShipmentStatus.AWAITING_CARRIER: [
            ShipmentStatus.IN_TRANSIT, ShipmentStatus.EXCEPTION, ShipmentStatus.CANCELLED,
        ],
        ShipmentStatus.IN_TRANSIT: [
            ShipmentStatus.OUT_FOR_DELIVERY, ShipmentStatus.DELIVERED, ShipmentStatus.EXCEPTION,
        ],
        ShipmentStatus.OUT_FOR_DELIVERY: [
            ShipmentStatus.DELIVERED, ShipmentStatus.IN_TRANSIT, ShipmentStatus.EXCEPTION,
        ],
        ShipmentStatus.EXCEPTION: [
            ShipmentStatus.IN_TRANSIT, ShipmentStatus.OUT_FOR_DELIVERY,
            ShipmentStatus.DELIVERED, ShipmentStatus.CANCELLED,
        ],
        ShipmentStatus.ON_HOLD: [ShipmentStatus.PROCESSING, ShipmentStatus.CANCELLED],
        ShipmentStatus.OUT_OF_STOCK: [ShipmentStatus.PROCESSING, ShipmentStatus.CANCELLED],
        ShipmentStatus.DELIVERED: [],  # Final state
        ShipmentStatus.CANCELLED: [],  # Final state
    }

    # Timestamp stamped when a shipment enters a status
    STATUS_TIMESTAMPS = {
        ShipmentStatus.LABELED: 'label_created_at',
        ShipmentStatus.IN_TRANSIT: 'in_transit_at',
        ShipmentStatus.OUT_FOR_DELIVERY: 'out_for_delivery_at',
        ShipmentStatus.DELIVERED: 'delivered_at',
    }

    @classmethod
    def validate_transition(cls, shipment: Shipment, new_status: str) -> None:
        """
        Validate if a status transition is allowed.

        Args:
            shipment: Shipment instance
            new_status: New status to transition to

        Raises:
            ImmutableShipmentException: If the shipment is already delivered
            InvalidTransitionException: If transition is not allowed
        """
        current_status = shipment.status

        if current_status == ShipmentStatus.DELIVERED:
            raise ImmutableShipmentException(shipment.shipment_id)

        if current_status == new_status:
            return  # Allow no-op transitions

        allowed_transitions = cls.ALLOWED_TRANSITIONS.get(current_status, [])

        if new_status not in allowed_transitions:
            raise InvalidTransitionException(
                current_status=current_status,
                attempted_status=new_status,
                entity_type="Shipment"
            )

    @classmethod
    def can_transition_to(cls, shipment: Shipment, new_status: str) -> bool:
        try:
            cls.validate_transition(shipment, new_status)
            return True
        except (InvalidTransitionException, ImmutableShipmentException):
            return False


def validate_shipment_workflow(shipment: Shipment, new_status: str) -> None:
    """Validate shipment status transition."""
    ShipmentWorkflow.validate_transition(shipment, new_status)
