"""
URL configuration for the shipment query endpoints.
"""

from rest_framework.routers import DefaultRouter

from .views import ShipmentViewSet

router = DefaultRouter()
router.register(r'shipments', ShipmentViewSet, basename='shipment')

urlpatterns = router.urls
