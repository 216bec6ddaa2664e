"""
Order volume breakdowns by time, place and channel.
"""

from collections import Counter, defaultdict

from ..records import as_amount, as_datetime, as_number, in_range
from .common import (
    label_or_unknown, mean, percent, safe_aggregation, state_name, zone_sort_key,
)
from .dates import day_key

DAY_NAMES = ('Sunday', 'Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday')
TOP_CITIES = 10


def _order_moment(record):
    return as_datetime(record.get('order_imported_at')) or as_datetime(record.get('transaction_date'))


def _count_rows(counter, total, key_name):
    rows = [
        {key_name: key, 'order_count': count, 'percent': percent(count, total)}
        for key, count in counter.items()
    ]
    return sorted(rows, key=lambda row: -row['order_count'])


def _with_growth(counter):
    rows = []
    previous = None
    for key in sorted(counter):
        count = counter[key]
        rows.append({
            'date': key,
            'order_count': count,
            'growth_percent': ((count - previous) / previous) * 100 if previous else None,
        })
        previous = count
    return rows


@safe_aggregation()
def aggregate_order_volume_by_hour(records, date_range):
    """Orders per local hour of order import; all 24 hours are present."""
    filtered = in_range(records, date_range)
    hours = Counter(_order_moment(record).hour for record in filtered)
    return [
        {'hour': hour, 'order_count': hours[hour], 'percent': percent(hours[hour], len(filtered))}
        for hour in range(24)
    ]


@safe_aggregation()
def aggregate_order_volume_by_day_of_week(records, date_range):
    """Orders per weekday, Sunday first; all 7 days are present."""
    filtered = in_range(records, date_range)
    # weekday() is Monday=0; the output runs Sunday=0
    days = Counter((_order_moment(record).weekday() + 1) % 7 for record in filtered)
    return [
        {
            'day_of_week': day,
            'day_name': DAY_NAMES[day],
            'order_count': days[day],
            'percent': percent(days[day], len(filtered)),
        }
        for day in range(7)
    ]


@safe_aggregation()
def aggregate_order_volume_by_fc(records, date_range):
    filtered = in_range(records, date_range)
    counter = Counter(label_or_unknown(record.get('fc_name')) for record in filtered)
    return _count_rows(counter, len(filtered), 'fc_name')


@safe_aggregation()
def aggregate_order_volume_by_store(records, date_range):
    filtered = in_range(records, date_range)
    counter = Counter(label_or_unknown(record.get('channel_name')) for record in filtered)
    return _count_rows(counter, len(filtered), 'channel_name')


@safe_aggregation()
def aggregate_daily_order_volume(records, date_range):
    counter = Counter(day_key(record['transaction_date']) for record in in_range(records, date_range))
    return _with_growth(counter)


@safe_aggregation()
def aggregate_state_volume(records, date_range):
    filtered = in_range(records, date_range)
    counter = Counter(label_or_unknown(record.get('state')) for record in filtered)
    rows = _count_rows(counter, len(filtered), 'state')
    for row in rows:
        row['state_name'] = state_name(row['state'])
        row['avg_orders_per_day'] = row['order_count'] / date_range.days
    return rows


@safe_aggregation()
def aggregate_city_volume_by_state(records, date_range, state_code):
    """Top cities (with zip code) for one state."""
    filtered = [
        record for record in in_range(records, date_range)
        if record.get('state') == state_code
    ]
    counter = Counter(
        (label_or_unknown(record.get('city')), record.get('zip_code') or '')
        for record in filtered
    )
    rows = [
        {
            'city': city,
            'state': state_code,
            'zip_code': zip_code,
            'order_count': count,
            'percent': percent(count, len(filtered)),
        }
        for (city, zip_code), count in counter.items()
    ]
    rows.sort(key=lambda row: -row['order_count'])
    return rows[:TOP_CITIES]


# Approximate (lon, lat) centre of each state, used to place cities on the map
STATE_CENTROIDS = {
    'CA': (-119.4, 36.7), 'TX': (-99.9, 31.5), 'FL': (-81.5, 27.8),
    'NY': (-75.5, 43.0), 'PA': (-77.2, 40.9), 'IL': (-89.4, 40.1),
    'OH': (-82.9, 40.4), 'GA': (-83.4, 32.7), 'NC': (-79.0, 35.5),
    'MI': (-84.5, 44.3), 'NJ': (-74.5, 40.2), 'VA': (-78.6, 37.5),
    'WA': (-120.5, 47.4), 'AZ': (-111.1, 34.2), 'MA': (-71.4, 42.2),
    'TN': (-86.6, 35.8), 'IN': (-86.1, 39.8), 'MO': (-92.2, 38.4),
    'MD': (-76.6, 39.0), 'WI': (-89.6, 44.3), 'CO': (-105.6, 39.0),
    'MN': (-94.6, 46.3), 'SC': (-80.9, 33.9), 'AL': (-86.9, 32.8),
    'LA': (-91.9, 31.0), 'KY': (-85.0, 37.8), 'OR': (-120.5, 43.8),
    'OK': (-97.1, 35.5), 'CT': (-72.7, 41.6), 'UT': (-111.9, 39.3),
    'IA': (-93.5, 42.0), 'NV': (-116.4, 38.3), 'AR': (-92.4, 34.9),
    'MS': (-89.7, 32.7), 'KS': (-98.4, 38.5), 'NM': (-106.1, 34.3),
    'NE': (-99.8, 41.5), 'WV': (-80.6, 38.6), 'ID': (-114.5, 44.1),
    'HI': (-157.5, 19.9), 'NH': (-71.6, 43.9), 'ME': (-69.4, 45.4),
    'RI': (-71.5, 41.7), 'MT': (-110.3, 47.0), 'DE': (-75.5, 39.0),
    'SD': (-100.2, 44.5), 'ND': (-100.5, 47.5), 'AK': (-152.4, 64.2),
    'VT': (-72.6, 44.0), 'WY': (-107.5, 43.0),
}
US_CENTROID = (-98.5, 39.8)


def city_coordinates(city, state):
    """
    Map position for a city: its state's centre nudged by up to half a
    degree, derived from the city name so a city always lands in the same spot.
    """
    lon, lat = STATE_CENTROIDS.get(state, US_CENTROID)
    lat_hash = sum(ord(char) * (index + 1) for index, char in enumerate(city))
    lon_hash = sum(ord(char) * (index * 7 + 3) for index, char in enumerate(city))
    return (
        round(lon + ((lon_hash % 100) - 50) / 100, 4),
        round(lat + ((lat_hash % 100) - 50) / 100, 4),
    )


@safe_aggregation()
def aggregate_city_volume(records, date_range):
    """Order volume per city across all states, with map coordinates."""
    filtered = in_range(records, date_range)
    counter = Counter(
        (label_or_unknown(record.get('city')), label_or_unknown(record.get('state')))
        for record in filtered
    )
    rows = []
    for (city, state), count in counter.items():
        lon, lat = city_coordinates(city, state)
        rows.append({
            'city': city,
            'state': state,
            'zip_code': '',
            'order_count': count,
            'percent': percent(count, len(filtered)),
            'lon': lon,
            'lat': lat,
        })
    rows.sort(key=lambda row: -row['order_count'])
    return rows


def _cost_speed_groups(records, key_field):
    groups = defaultdict(lambda: {'cost': 0.0, 'count': 0, 'transit': []})
    for record in records:
        data = groups[label_or_unknown(record.get(key_field))]
        data['cost'] += as_amount(record.get('total_charge'))
        data['count'] += 1
        transit = as_number(record.get('transit_time_days'))
        data['transit'].append(transit if transit is not None and transit > 0 else None)
    return groups


@safe_aggregation()
def aggregate_state_cost_speed(records, date_range):
    filtered = in_range(records, date_range)
    rows = [
        {
            'state': state,
            'state_name': state_name(state),
            'avg_cost': data['cost'] / data['count'],
            'avg_transit_time': mean(data['transit']),
            'order_count': data['count'],
            'percent': percent(data['count'], len(filtered)),
        }
        for state, data in _cost_speed_groups(filtered, 'state').items()
    ]
    return sorted(rows, key=lambda row: -row['order_count'])


@safe_aggregation()
def aggregate_cost_by_zone(records, date_range):
    """Cost and speed per zone, zones in numeric order with non-numeric zones last."""
    filtered = in_range(records, date_range)
    rows = [
        {
            'zone': zone,
            'avg_cost': data['cost'] / data['count'],
            'avg_transit_time': mean(data['transit']),
            'order_count': data['count'],
            'percent': percent(data['count'], len(filtered)),
        }
        for zone, data in _cost_speed_groups(filtered, 'zone').items()
    ]
    return sorted(rows, key=lambda row: zone_sort_key(row['zone']))
