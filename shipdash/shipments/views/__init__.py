"""
Views for shipments.
"""

from .mixins import ClientScopedQueryMixin, error_response
from .shipment_views import ShipmentViewSet

__all__ = ['ClientScopedQueryMixin', 'error_response', 'ShipmentViewSet']
