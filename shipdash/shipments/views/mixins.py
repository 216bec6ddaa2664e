"""
Behaviour shared by the transaction query endpoints.
"""

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response

from accounts.context import resolve_client_context
from tables.config import resolve_ordering
from tables.export import EXPORT_FORMATS, export_response
from ..exceptions import BusinessException


def error_response(exc: BusinessException, http_status=status.HTTP_400_BAD_REQUEST):
    return Response({
        'success': False,
        'error': exc.as_error()
    }, status=http_status)


class ClientScopedQueryMixin:
    """
    Client scoping, whitelisted ordering and export for a read-only viewset.

    Subclasses set ``table_config``, ``export_config`` and ``base_queryset()``.
    """

    table_config = None
    export_config = None
    client_field = 'client'

    @property
    def client_context(self):
        if not hasattr(self, '_client_context'):
            self._client_context = resolve_client_context(
                self.request.user, self.request.query_params.get('clientId')
            )
        return self._client_context

    def base_queryset(self):
        raise NotImplementedError

    def get_ordering(self):
        params = self.request.query_params
        return resolve_ordering(
            self.table_config, params.get('sortField'), params.get('sortDirection', 'desc')
        )

    def get_queryset(self):
        queryset = self.client_context.scope(self.base_queryset(), self.client_field)
        return queryset.order_by(*self.get_ordering())

    @action(detail=False, methods=['get'])
    def export(self, request):
        """Download the filtered rows as CSV or XLSX."""
        export_format = request.query_params.get('format', 'csv').lower()
        if export_format not in EXPORT_FORMATS:
            export_format = 'csv'

        queryset = self.filter_queryset(self.get_queryset())
        if request.query_params.get('scope', 'all') == 'page':
            limit = self.paginator.get_limit(request)
            offset = self.paginator.get_offset(request)
            queryset = queryset[offset:offset + limit]

        rows = self.get_serializer(queryset, many=True).data
        return export_response(self.export_config, rows, export_format)
