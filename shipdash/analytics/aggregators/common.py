"""
Helpers shared by the aggregators.
"""

import functools
import logging
import math
import re
from datetime import datetime, time, timedelta

from django.utils import timezone

logger = logging.getLogger(__name__)

UNKNOWN = 'Unknown'

STATE_NAMES = {
    'AL': 'Alabama', 'AK': 'Alaska', 'AZ': 'Arizona', 'AR': 'Arkansas',
    'CA': 'California', 'CO': 'Colorado', 'CT': 'Connecticut', 'DE': 'Delaware',
    'FL': 'Florida', 'GA': 'Georgia', 'HI': 'Hawaii', 'ID': 'Idaho',
    'IL': 'Illinois', 'IN': 'Indiana', 'IA': 'Iowa', 'KS': 'Kansas',
    'KY': 'Kentucky', 'LA': 'Louisiana', 'ME': 'Maine', 'MD': 'Maryland',
    'MA': 'Massachusetts', 'MI': 'Michigan', 'MN': 'Minnesota', 'MS': 'Mississippi',
    'MO': 'Missouri', 'MT': 'Montana', 'NE': 'Nebraska', 'NV': 'Nevada',
    'NH': 'New Hampshire', 'NJ': 'New Jersey', 'NM': 'New Mexico', 'NY': 'New York',
    'NC': 'North Carolina', 'ND': 'North Dakota', 'OH': 'Ohio', 'OK': 'Oklahoma',
    'OR': 'Oregon', 'PA': 'Pennsylvania', 'RI': 'Rhode Island', 'SC': 'South Carolina',
    'SD': 'South Dakota', 'TN': 'Tennessee', 'TX': 'Texas', 'UT': 'Utah',
    'VT': 'Vermont', 'VA': 'Virginia', 'WA': 'Washington', 'WV': 'West Virginia',
    'WI': 'Wisconsin', 'WY': 'Wyoming', 'DC': 'District of Columbia',
}

_DIGITS = re.compile(r'\d+')


def safe_aggregation(default=list):
    """
    Log and swallow failures inside an aggregator.

    ``default`` builds the value returned on failure: an empty list for
    grouped results, an all-zero summary for scalar ones.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception:
                logger.exception(f"Aggregation {func.__name__} failed")
                return default()
        return wrapper
    return decorator


def percent(part, whole) -> float:
    return (part / whole) * 100 if whole else 0.0


def percent_change(current, previous) -> float:
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return ((current - previous) / previous) * 100


def mean(values) -> float:
    """Average of the non-null values; 0 when there are none."""
    present = [v for v in values if v is not None]
    return sum(present) / len(present) if present else 0.0


def nearest_rank(sorted_values, p):
    """Nearest-rank percentile over an already sorted list."""
    n = len(sorted_values)
    return sorted_values[min(math.floor(n * p), n - 1)]


def label_or_unknown(value) -> str:
    return value if value else UNKNOWN


def state_name(code) -> str:
    return STATE_NAMES.get(code, code)


def zone_sort_key(zone):
    """Numeric zones in order; anything without digits sorts last."""
    match = _DIGITS.search(str(zone or ''))
    if match is None:
        return (1, 0, str(zone))
    return (0, int(match.group()), str(zone))


def hours_between(start, end):
    if start is None or end is None:
        return None
    return (end - start).total_seconds() / 3600


def days_between(start, end):
    if start is None or end is None:
        return None
    return (end - start).total_seconds() / 86400


def sla_deadline(order_moment, cutoff_hour=14):
    """
    Orders placed before the cutoff must be labelled by the end of the same
    local day; later orders by the end of the next day.
    """
    day = order_moment.date()
    if order_moment.hour >= cutoff_hour:
        day += timedelta(days=1)
    return timezone.make_aware(datetime.combine(day, time.max))
