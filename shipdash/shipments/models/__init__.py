"""
Shipment models.
"""

from .shipment import Shipment, ShipmentStatus, OrderType
from .event import ShipmentEvent

__all__ = ['Shipment', 'ShipmentStatus', 'OrderType', 'ShipmentEvent']
