from django.contrib import admin

from .models import Shipment, ShipmentEvent


class ShipmentEventInline(admin.TabularInline):
    model = ShipmentEvent
    extra = 0
    readonly_fields = ['action', 'user', 'old_values', 'new_values', 'timestamp', 'notes']
    can_delete = False


@admin.register(Shipment)
class ShipmentAdmin(admin.ModelAdmin):
    list_display = [
        'shipment_id', 'client', 'order_id', 'carrier', 'status',
        'total_charge', 'label_created_at', 'delivered_at', 'invoice'
    ]
    list_filter = ['status', 'carrier', 'order_type', 'client']
    search_fields = ['shipment_id', 'order_id', 'tracking_id', 'customer_name', 'store_order_id']
    readonly_fields = ['id', 'transit_time_days', 'created_at', 'updated_at']
    date_hierarchy = 'label_created_at'
    inlines = [ShipmentEventInline]


@admin.register(ShipmentEvent)
class ShipmentEventAdmin(admin.ModelAdmin):
    list_display = ['shipment', 'action', 'user', 'timestamp']
    list_filter = ['action']
    search_fields = ['shipment__shipment_id', 'notes']
    readonly_fields = ['id', 'timestamp']
