"""
Billing query endpoints, mounted under api/data/.
"""

from rest_framework.routers import DefaultRouter

from . import views

router = DefaultRouter()
router.register(r'billing/additional-services', views.AdditionalServiceFeeViewSet, basename='additional-service')
router.register(r'billing/receiving', views.ReceivingFeeViewSet, basename='receiving-fee')
router.register(r'billing/storage', views.StorageFeeViewSet, basename='storage-fee')
router.register(r'billing/credits', views.CreditViewSet, basename='credit')
router.register(r'billing/returns', views.ReturnFeeViewSet, basename='return-fee')
router.register(r'invoices', views.InvoiceViewSet, basename='invoice')

urlpatterns = router.urls
