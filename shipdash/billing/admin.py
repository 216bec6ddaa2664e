from django.contrib import admin

from .models import (
    AdditionalServiceFee, ReceivingFee, StorageFee, Credit, ReturnFee,
    Invoice, InvoiceLineItem,
)


class InvoiceLineItemInline(admin.TabularInline):
    model = InvoiceLineItem
    extra = 0
    readonly_fields = ['category', 'description', 'quantity', 'amount']
    can_delete = False


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = [
        'invoice_number', 'client', 'invoice_date', 'period_start', 'period_end',
        'shipment_count', 'total_amount', 'status'
    ]
    list_filter = ['status', 'client']
    search_fields = ['invoice_number', 'client__company_name', 'client__short_code']
    readonly_fields = [
        'id', 'subtotal', 'tax_amount', 'total_amount', 'shipment_count',
        'transaction_count', 'pdf_path', 'xlsx_path', 'generated_by',
        'created_at', 'updated_at'
    ]
    date_hierarchy = 'invoice_date'
    inlines = [InvoiceLineItemInline]


class BillingTransactionAdmin(admin.ModelAdmin):
    list_display = ['reference_id', 'client', 'amount', 'transaction_date', 'status', 'invoice']
    list_filter = ['status', 'client']
    search_fields = ['reference_id']
    readonly_fields = ['id', 'created_at', 'updated_at']
    date_hierarchy = 'transaction_date'


@admin.register(AdditionalServiceFee)
class AdditionalServiceFeeAdmin(BillingTransactionAdmin):
    list_display = BillingTransactionAdmin.list_display + ['fee_type']
    list_filter = BillingTransactionAdmin.list_filter + ['fee_type']


@admin.register(ReceivingFee)
class ReceivingFeeAdmin(BillingTransactionAdmin):
    list_display = BillingTransactionAdmin.list_display + ['wro_id', 'receiving_status']
    search_fields = ['reference_id', 'wro_id']


@admin.register(StorageFee)
class StorageFeeAdmin(BillingTransactionAdmin):
    list_display = BillingTransactionAdmin.list_display + ['fc_name', 'location_type']
    search_fields = ['reference_id', 'inventory_id']


@admin.register(Credit)
class CreditAdmin(BillingTransactionAdmin):
    list_display = BillingTransactionAdmin.list_display + ['credit_reason']
    search_fields = ['reference_id', 'ticket_reference']


@admin.register(ReturnFee)
class ReturnFeeAdmin(BillingTransactionAdmin):
    list_display = BillingTransactionAdmin.list_display + ['return_id', 'return_status']
    search_fields = ['reference_id', 'return_id', 'tracking_number']
