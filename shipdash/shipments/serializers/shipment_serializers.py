"""
Shipment serializers.
"""

from rest_framework import serializers

from tables.badges import display_status_for
from ..models import Shipment, ShipmentEvent, ShipmentStatus


class ShipmentListSerializer(serializers.ModelSerializer):
    """Serializer for the shipments table."""

    client_code = serializers.CharField(source='client.short_code', read_only=True)
    display_status = serializers.SerializerMethodField()
    invoice_number = serializers.CharField(source='invoice.invoice_number', read_only=True, default=None)

    class Meta:
        model = Shipment
        fields = [
            'id', 'client', 'client_code', 'shipment_id', 'order_id', 'store_order_id',
            'tracking_id', 'customer_name', 'channel_name', 'order_type', 'carrier',
            'carrier_service', 'ship_option_id', 'zone', 'status', 'display_status',
            'base_charge', 'surcharge', 'total_charge', 'insurance_charge', 'total_quantity',
            'city', 'state', 'zip_code', 'destination_country', 'fc_name',
            'order_imported_at', 'label_created_at', 'delivered_at', 'transit_time_days',
            'invoice_number',
        ]

    def get_display_status(self, obj):
        return display_status_for(obj.status).value


class ShipmentEventSerializer(serializers.ModelSerializer):
    username = serializers.CharField(source='user.username', read_only=True, default=None)

    class Meta:
        model = ShipmentEvent
        fields = ['id', 'action', 'old_values', 'new_values', 'username', 'timestamp', 'notes']


class ShipmentDetailSerializer(ShipmentListSerializer):
    """Serializer for a single shipment with its event history."""

    events = ShipmentEventSerializer(many=True, read_only=True)
    is_international = serializers.BooleanField(read_only=True)

    class Meta(ShipmentListSerializer.Meta):
        fields = ShipmentListSerializer.Meta.fields + [
            'origin_country', 'in_transit_at', 'out_for_delivery_at',
            'is_international', 'events', 'created_at', 'updated_at',
        ]


class StatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ShipmentStatus.choices)
    occurred_at = serializers.DateTimeField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True, default='')
