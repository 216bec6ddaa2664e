from django.urls import path

from . import views

urlpatterns = [
    path('invoices/generate/', views.generate_invoice, name='invoice-generate'),
    path('invoices/<str:invoice_number>/files/', views.invoice_files, name='invoice-files'),
    path('files/<str:token>/', views.download_invoice_file, name='invoice-file-download'),
]
