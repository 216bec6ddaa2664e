"""
URL configuration for the shipdash project.
"""
from django.contrib import admin
from django.http import JsonResponse
from django.urls import path, include
from django.views.decorators.http import require_http_methods


@require_http_methods(["GET"])
def api_root(request):
    """API root view with available endpoints."""
    return JsonResponse({
        'message': 'Shipdash API',
        'version': '1.0.0',
        'endpoints': {
            'authentication': {
                'token': '/api/auth/token/',
                'token_refresh': '/api/auth/token/refresh/',
                'clients': '/api/auth/clients/',
            },
            'data': {
                'shipments': '/api/data/shipments/',
                'additional_services': '/api/data/billing/additional-services/',
                'receiving': '/api/data/billing/receiving/',
                'storage': '/api/data/billing/storage/',
                'credits': '/api/data/billing/credits/',
                'returns': '/api/data/billing/returns/',
                'invoices': '/api/data/invoices/',
            },
            'billing': {
                'generate_invoice': '/api/billing/invoices/generate/',
                'invoice_files': '/api/billing/invoices/<invoice_number>/files/',
            },
            'analytics': '/api/analytics/<report>/',
        }
    })


urlpatterns = [
    path("admin/", admin.site.urls),

    # API endpoints
    path('api/', api_root, name='api-root'),
    path('api/auth/', include('accounts.urls')),
    path('api/data/', include('shipments.urls')),
    path('api/data/', include('billing.data_urls')),
    path('api/billing/', include('billing.urls')),
    path('api/analytics/', include('analytics.urls')),
]
