"""
Query-string filters for the transaction endpoints.

List parameters are comma-joined (``status=IN_TRANSIT,DELIVERED``).
"""

import re
from datetime import timedelta

import django_filters
from django.db.models import Q
from django.utils import timezone

from .models import Shipment

AGE_BUCKET_RE = re.compile(r'^(\d+)-(\d+)$|^(\d+)\+$')


class CharInFilter(django_filters.BaseInFilter, django_filters.CharFilter):
    """Comma-separated list of values."""


def normalize_status(value):
    return value.strip().upper().replace(' ', '_').replace('-', '_')


def parse_age_bucket(bucket):
    """Day bounds of an age bucket such as ``3-5`` or ``15+``; upper bound None when open."""
    match = AGE_BUCKET_RE.match(bucket.strip())
    if not match:
        return None
    if match.group(3) is not None:
        return int(match.group(3)), None
    return int(match.group(1)), int(match.group(2))


def age_bucket_q(buckets, field, now=None):
    """OR of label-age ranges, each ``lower <= age < upper`` in days."""
    now = now or timezone.now()
    query = Q()
    for bucket in buckets:
        bounds = parse_age_bucket(bucket)
        if bounds is None:
            continue
        lower, upper = bounds
        condition = Q(**{f"{field}__lte": now - timedelta(days=lower)})
        if upper is not None:
            condition &= Q(**{f"{field}__gt": now - timedelta(days=upper)})
        query |= condition
    return query


class DateRangeFilterSet(django_filters.FilterSet):
    """Inclusive startDate/endDate on the date part of a timestamp field."""

    date_field = 'created_at'
    # Set to False when date_field is already a DateField
    date_field_is_timestamp = True

    startDate = django_filters.DateFilter(method='filter_start_date')
    endDate = django_filters.DateFilter(method='filter_end_date')

    def _date_lookup(self, op):
        if self.date_field_is_timestamp:
            return f"{self.date_field}__date__{op}"
        return f"{self.date_field}__{op}"

    def filter_start_date(self, queryset, name, value):
        return queryset.filter(**{self._date_lookup('gte'): value})

    def filter_end_date(self, queryset, name, value):
        return queryset.filter(**{self._date_lookup('lte'): value})


class ShipmentFilter(DateRangeFilterSet):
    date_field = 'label_created_at'

    status = CharInFilter(method='filter_status')
    carrier = CharInFilter(field_name='carrier', lookup_expr='in')
    channel = CharInFilter(field_name='channel_name', lookup_expr='in')
    type = CharInFilter(field_name='order_type', lookup_expr='in')
    age = CharInFilter(method='filter_age')
    search = django_filters.CharFilter(method='filter_search')

    class Meta:
        model = Shipment
        fields = []

    def filter_status(self, queryset, name, value):
        return queryset.filter(status__in=[normalize_status(v) for v in value if v.strip()])

    def filter_age(self, queryset, name, value):
        query = age_bucket_q(value, 'label_created_at')
        if not query:
            return queryset
        return queryset.filter(query)

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(order_id__icontains=value) |
            Q(shipment_id__icontains=value) |
            Q(tracking_id__icontains=value) |
            Q(customer_name__icontains=value) |
            Q(store_order_id__icontains=value)
        )
