"""
Services for shipment lifecycle management.
"""

from .shipment_service import ShipmentService
from .import_service import ShipmentImportService
from .workflow import ShipmentWorkflow, validate_shipment_workflow

__all__ = [
    'ShipmentService',
    'ShipmentImportService',
    'ShipmentWorkflow',
    'validate_shipment_workflow',
]
