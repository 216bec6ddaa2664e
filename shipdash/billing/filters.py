"""
Query-string filters for the billing endpoints.
"""

import django_filters
from django.db.models import Q

from shipments.filters import CharInFilter, DateRangeFilterSet
from .models import (
    AdditionalServiceFee, ReceivingFee, StorageFee, Credit, ReturnFee, Invoice,
)


class TransactionFilter(DateRangeFilterSet):
    """Shared filters; subclasses name the extra columns ``search`` looks at."""

    date_field = 'transaction_date'
    search_fields = ('reference_id',)

    status = CharInFilter(method='filter_status')
    search = django_filters.CharFilter(method='filter_search')

    def filter_status(self, queryset, name, value):
        return queryset.filter(status__in=[v.strip().lower() for v in value if v.strip()])

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        query = Q()
        for field in self.search_fields:
            query |= Q(**{f"{field}__icontains": value})
        return queryset.filter(query)


class AdditionalServiceFeeFilter(TransactionFilter):
    search_fields = ('reference_id', 'fee_type')

    type = CharInFilter(field_name='fee_type', lookup_expr='in')

    class Meta:
        model = AdditionalServiceFee
        fields = []


class ReceivingFeeFilter(TransactionFilter):
    search_fields = ('reference_id', 'wro_id', 'contents')

    class Meta:
        model = ReceivingFee
        fields = []


class StorageFeeFilter(TransactionFilter):
    search_fields = ('reference_id', 'inventory_id', 'fc_name')

    class Meta:
        model = StorageFee
        fields = []


class CreditFilter(TransactionFilter):
    search_fields = ('reference_id', 'ticket_reference', 'credit_reason')

    class Meta:
        model = Credit
        fields = []


class ReturnFeeFilter(TransactionFilter):
    search_fields = ('reference_id', 'return_id', 'original_shipment_id', 'tracking_number')

    type = CharInFilter(field_name='return_type', lookup_expr='in')

    class Meta:
        model = ReturnFee
        fields = []


class InvoiceFilter(DateRangeFilterSet):
    date_field = 'invoice_date'
    date_field_is_timestamp = False

    status = CharInFilter(field_name='status', lookup_expr='in')
    search = django_filters.CharFilter(field_name='invoice_number', lookup_expr='icontains')

    class Meta:
        model = Invoice
        fields = []
