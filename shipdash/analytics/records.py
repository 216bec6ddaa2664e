"""
Record shapes and date ranges for the aggregators.

A record is a plain mapping with snake_case keys. Shipment records come
straight from ``Shipment.objects.values(...)`` with ``label_created_at``
aliased to ``transaction_date``; fee records carry ``transaction_date``,
``amount`` and, for additional services, ``fee_type``.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Dict, List, Optional

from django.db.models import F
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

RECORD_FIELDS = (
    'total_charge', 'base_charge', 'surcharge', 'insurance_charge',
    'total_quantity', 'carrier', 'carrier_service', 'ship_option_id', 'zone',
    'zip_code', 'city', 'state', 'destination_country', 'order_imported_at',
    'label_created_at', 'delivered_at', 'transit_time_days', 'fc_name',
    'channel_name', 'order_id', 'tracking_id', 'customer_name',
)

FEE_FIELDS = ('reference_id', 'amount', 'transaction_date', 'status')

PRESET_DAYS = {
    '7d': 7,
    '30d': 30,
    '60d': 60,
    '90d': 90,
    '6mo': 182,
    '1yr': 365,
}
DEFAULT_PRESET = '30d'

DAILY, WEEKLY, MONTHLY = 'daily', 'weekly', 'monthly'


def as_datetime(value) -> Optional[datetime]:
    """Local, aware datetime from a datetime, date or ISO string; None when blank or unparseable."""
    if value in (None, ''):
        return None
    if isinstance(value, str):
        parsed = parse_datetime(value)
        if parsed is None:
            parsed_date = parse_date(value)
            if parsed_date is None:
                return None
            parsed = datetime.combine(parsed_date, time.min)
        value = parsed
    elif isinstance(value, date) and not isinstance(value, datetime):
        value = datetime.combine(value, time.min)
    if timezone.is_naive(value):
        value = timezone.make_aware(value)
    return timezone.localtime(value)


def as_number(value) -> Optional[float]:
    """Float for a numeric field; None for missing values."""
    if value in (None, ''):
        return None
    if isinstance(value, Decimal):
        return float(value)
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def as_amount(value) -> float:
    """Monetary field as a float, with missing values counting as zero."""
    number = as_number(value)
    return 0.0 if number is None else number


def _start_of(day: date) -> datetime:
    return timezone.make_aware(datetime.combine(day, time.min))


def _end_of(day: date) -> datetime:
    return timezone.make_aware(datetime.combine(day, time.max))


@dataclass(frozen=True)
class DateRange:
    """Inclusive range of aware datetimes."""

    start: datetime
    end: datetime
    preset: Optional[str] = None

    @classmethod
    def from_dates(cls, start_date: date, end_date: date, preset: Optional[str] = None) -> 'DateRange':
        return cls(_start_of(start_date), _end_of(end_date), preset)

    @classmethod
    def from_preset(cls, preset: Optional[str], today: Optional[date] = None) -> 'DateRange':
        """Range ending today; unknown presets fall back to 30 days."""
        if preset not in PRESET_DAYS:
            preset = DEFAULT_PRESET
        today = today or timezone.localdate()
        return cls.from_dates(today - timedelta(days=PRESET_DAYS[preset]), today, preset)

    def contains(self, value) -> bool:
        moment = as_datetime(value)
        return moment is not None and self.start <= moment <= self.end

    def previous(self) -> 'DateRange':
        """Range of the same length immediately before this one."""
        span = self.end - self.start
        end = self.start - timedelta(microseconds=1)
        return DateRange(end - span, end, self.preset)

    @property
    def days(self) -> int:
        return max(1, math.ceil((self.end - self.start).total_seconds() / 86400))

    @property
    def granularity(self) -> str:
        if self.preset in ('7d', '30d'):
            return DAILY
        if self.preset in ('60d', '90d'):
            return WEEKLY
        if self.preset is not None:
            return MONTHLY
        if self.days <= 31:
            return DAILY
        if self.days <= 90:
            return WEEKLY
        return MONTHLY

    def __str__(self):
        return f"{self.start.date().isoformat()}..{self.end.date().isoformat()}"


def shipment_records(queryset) -> List[Dict]:
    """Shipment rows as aggregator records."""
    return list(queryset.values(*RECORD_FIELDS, transaction_date=F('label_created_at')))


def fee_records(queryset, extra_fields=()) -> List[Dict]:
    return list(queryset.values(*FEE_FIELDS, *extra_fields))


def in_range(records, date_range: DateRange, key: str = 'transaction_date') -> List[Dict]:
    """Records whose ``key`` falls inside the range, both ends inclusive."""
    return [record for record in records if date_range.contains(record.get(key))]
