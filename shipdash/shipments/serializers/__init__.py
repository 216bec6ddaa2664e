from .shipment_serializers import (
    ShipmentListSerializer, ShipmentDetailSerializer, ShipmentEventSerializer,
    StatusUpdateSerializer,
)

__all__ = [
    'ShipmentListSerializer',
    'ShipmentDetailSerializer',
    'ShipmentEventSerializer',
    'StatusUpdateSerializer',
]
