"""
Shipment query endpoint and lifecycle actions.
"""

import logging

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from accounts.permissions import IsAdminOrCare, IsClientMember
from tables.configs import SHIPMENTS
from tables.export import SHIPMENTS_EXPORT
from ..claims import calculate_claim_eligibility, claim_state_for
from ..exceptions import BusinessException
from ..filters import ShipmentFilter
from ..models import Shipment
from ..serializers import ShipmentDetailSerializer, ShipmentListSerializer, StatusUpdateSerializer
from ..services import ShipmentService
from .mixins import ClientScopedQueryMixin, error_response

logger = logging.getLogger(__name__)


class ShipmentViewSet(ClientScopedQueryMixin, viewsets.ReadOnlyModelViewSet):
    """
    Shipments for the selected client.

    Lists are paged with limit/offset and carry the client's distinct carriers
    for the carrier filter.
    """

    permission_classes = [IsClientMember]
    filter_backends = [DjangoFilterBackend]
    filterset_class = ShipmentFilter
    table_config = SHIPMENTS
    export_config = SHIPMENTS_EXPORT

    def base_queryset(self):
        return Shipment.objects.select_related('client', 'invoice')

    def get_serializer_class(self):
        if self.action in ('retrieve', 'update_status'):
            return ShipmentDetailSerializer
        return ShipmentListSerializer

    def get_queryset(self):
        # Detail routes rely on the object-level membership check instead
        if self.detail:
            return self.base_queryset()
        return super().get_queryset()

    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        serializer = self.get_serializer(page, many=True)
        response = self.get_paginated_response(serializer.data)
        response.data['carriers'] = self.distinct_carriers()
        return response

    def distinct_carriers(self):
        queryset = self.client_context.scope(Shipment.objects.exclude(carrier=''))
        return list(queryset.order_by('carrier').values_list('carrier', flat=True).distinct())

    @action(detail=True, methods=['post'], permission_classes=[IsAdminOrCare])
    def update_status(self, request, pk=None):
        """Move a shipment along its lifecycle."""
        shipment = self.get_object()
        serializer = StatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            updated = ShipmentService.update_status(
                str(shipment.id),
                serializer.validated_data['status'],
                updated_by=request.user,
                occurred_at=serializer.validated_data.get('occurred_at'),
                notes=serializer.validated_data.get('notes', ''),
            )
        except BusinessException as e:
            logger.warning(f"Status update rejected for {shipment.shipment_id}: {e.message}")
            return error_response(e)

        return Response({
            'success': True,
            'data': ShipmentDetailSerializer(updated).data
        })

    @action(detail=True, methods=['get'])
    def claim_eligibility(self, request, pk=None):
        shipment = self.get_object()
        result = calculate_claim_eligibility(shipment)
        result['lost_in_transit_state'] = claim_state_for(result).value
        return Response({
            'success': True,
            'data': result
        })

    @action(detail=True, methods=['get'])
    def timeline(self, request, pk=None):
        shipment = self.get_object()
        return Response({
            'success': True,
            'data': ShipmentService.get_timeline(str(shipment.id))
        })
