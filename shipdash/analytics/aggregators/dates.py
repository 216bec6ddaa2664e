"""
Time bucketing for trend aggregations.
"""

from datetime import date, timedelta

from django.utils import dateformat

from ..records import DAILY, MONTHLY, WEEKLY, as_datetime


def day_key(value) -> str:
    return as_datetime(value).date().isoformat()


def week_key(value) -> str:
    """Monday of the week the moment falls in."""
    day = as_datetime(value).date()
    return (day - timedelta(days=day.weekday())).isoformat()


def month_key(value) -> str:
    moment = as_datetime(value)
    return f"{moment.year}-{moment.month:02d}"


def _key_date(key: str) -> date:
    parts = [int(part) for part in key.split('-')]
    if len(parts) == 2:
        parts.append(1)
    return date(*parts)


def day_label(key: str) -> str:
    return dateformat.format(_key_date(key), 'M j')


def week_label(key: str) -> str:
    return f"Week of {day_label(key)}"


def month_label(key: str) -> str:
    return dateformat.format(_key_date(key), 'M Y')


TIME_KEYS = {DAILY: day_key, WEEKLY: week_key, MONTHLY: month_key}
TIME_LABELS = {DAILY: day_label, WEEKLY: week_label, MONTHLY: month_label}


def time_key(value, granularity: str) -> str:
    return TIME_KEYS.get(granularity, month_key)(value)


def time_label(key: str, granularity: str) -> str:
    return TIME_LABELS.get(granularity, month_label)(key)
