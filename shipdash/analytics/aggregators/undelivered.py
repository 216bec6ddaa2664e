"""
Undelivered shipment tracking.

A shipment is undelivered when it has a label but no delivery timestamp.
Age is the whole number of days since the label was created, measured
against ``now`` (defaults to the current time).
"""

import math
from collections import Counter, defaultdict

from django.utils import timezone

from ..records import as_datetime
from .common import label_or_unknown, percent, safe_aggregation, state_name

EXCEPTION_AFTER_DAYS = 14
CRITICAL_DAYS = 7
WARNING_DAYS = 5

STATUS_ORDER = ('Just Shipped', 'In Transit', 'Delayed', 'Exception')

AGE_BUCKETS = (
    ('0-2 days', 0, 2),
    ('3-4 days', 3, 4),
    ('5-6 days', 5, 6),
    ('7-10 days', 7, 10),
    ('11-14 days', 11, 14),
    ('15+ days', 15, None),
)


def days_in_transit(record, now):
    labelled = as_datetime(record.get('label_created_at'))
    return max(0, math.floor((now - labelled).total_seconds() / 86400))


def undelivered_records(records, now=None):
    """(record, days) pairs for labelled shipments without a delivery."""
    now = now or timezone.now()
    return [
        (record, days_in_transit(record, now))
        for record in records
        if record.get('label_created_at') and not record.get('delivered_at')
    ]


def transit_status(days):
    if days >= EXCEPTION_AFTER_DAYS:
        return 'Exception'
    if days >= CRITICAL_DAYS:
        return 'Delayed'
    if days <= 1:
        return 'Just Shipped'
    return 'In Transit'


@safe_aggregation()
def get_undelivered_shipments(records, now=None):
    rows = []
    for record, days in undelivered_records(records, now):
        city, state = record.get('city'), record.get('state')
        rows.append({
            'order_id': record.get('order_id'),
            'tracking_id': record.get('tracking_id'),
            'customer_name': record.get('customer_name'),
            'carrier': label_or_unknown(record.get('carrier')),
            'carrier_service': record.get('carrier_service') or '',
            'label_created_at': as_datetime(record.get('label_created_at')),
            'days_in_transit': days,
            'destination': ', '.join(part for part in (city, state) if part),
            'status': 'Exception' if days > EXCEPTION_AFTER_DAYS else 'In Transit',
        })
    return sorted(rows, key=lambda row: -row['days_in_transit'])


def _empty_summary():
    return {
        'total_undelivered': 0,
        'avg_days_in_transit': 0.0,
        'critical_count': 0,
        'warning_count': 0,
        'on_track_count': 0,
        'oldest_days': 0,
    }


@safe_aggregation(default=_empty_summary)
def get_undelivered_summary(records, now=None):
    ages = [days for _, days in undelivered_records(records, now)]
    if not ages:
        return _empty_summary()
    return {
        'total_undelivered': len(ages),
        'avg_days_in_transit': sum(ages) / len(ages),
        'critical_count': sum(1 for days in ages if days >= CRITICAL_DAYS),
        'warning_count': sum(1 for days in ages if WARNING_DAYS <= days < CRITICAL_DAYS),
        'on_track_count': sum(1 for days in ages if days < WARNING_DAYS),
        'oldest_days': max(ages),
    }


@safe_aggregation()
def get_undelivered_by_carrier(records, now=None):
    pairs = undelivered_records(records, now)
    groups = defaultdict(list)
    for record, days in pairs:
        groups[label_or_unknown(record.get('carrier'))].append(days)

    rows = [
        {
            'carrier': carrier,
            'count': len(ages),
            'avg_days': sum(ages) / len(ages),
            'critical_count': sum(1 for days in ages if days >= CRITICAL_DAYS),
            'percent': percent(len(ages), len(pairs)),
        }
        for carrier, ages in groups.items()
    ]
    return sorted(rows, key=lambda row: -row['count'])


@safe_aggregation()
def get_undelivered_by_status(records, now=None):
    pairs = undelivered_records(records, now)
    counts = Counter(transit_status(days) for _, days in pairs)
    return [
        {'status': status, 'count': counts[status], 'percent': percent(counts[status], len(pairs))}
        for status in STATUS_ORDER
        if counts[status]
    ]


@safe_aggregation()
def get_undelivered_by_age(records, now=None):
    """Every age bucket, empty ones included, once anything is undelivered."""
    ages = [days for _, days in undelivered_records(records, now)]
    if not ages:
        return []

    rows = []
    for label, low, high in AGE_BUCKETS:
        count = sum(1 for days in ages if days >= low and (high is None or days <= high))
        rows.append({
            'bucket': label,
            'min_days': low,
            'max_days': high,
            'count': count,
            'percent': percent(count, len(ages)),
        })
    return rows


@safe_aggregation()
def get_undelivered_by_state(records, now=None):
    pairs = undelivered_records(records, now)
    groups = defaultdict(list)
    for record, days in pairs:
        groups[label_or_unknown(record.get('state'))].append(days)

    rows = [
        {
            'state': state,
            'state_name': state_name(state),
            'count': len(ages),
            'avg_days': sum(ages) / len(ages),
            'percent': percent(len(ages), len(pairs)),
        }
        for state, ages in groups.items()
    ]
    return sorted(rows, key=lambda row: -row['count'])
