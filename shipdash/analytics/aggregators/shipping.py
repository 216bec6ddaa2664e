"""
Carrier, service, zone and fulfillment-speed aggregations over shipment records.
"""

from collections import defaultdict

from ..records import as_amount, as_datetime, as_number, in_range
from .common import (
    hours_between, days_between, label_or_unknown, mean, nearest_rank,
    percent, safe_aggregation, sla_deadline, state_name, zone_sort_key,
)
from .dates import day_key, month_key, month_label


SLA_CUTOFF_HOUR = 14


def _sla_row(record, cutoff_hour):
    ordered = as_datetime(record.get('order_imported_at'))
    labelled = as_datetime(record.get('label_created_at'))
    row = {
        'order_id': record.get('order_id'),
        'tracking_id': record.get('tracking_id'),
        'customer_name': record.get('customer_name'),
        'carrier': record.get('carrier'),
        'order_imported_at': ordered,
        'label_created_at': labelled,
        'delivered_at': as_datetime(record.get('delivered_at')),
        'transit_time_days': as_number(record.get('transit_time_days')),
        'time_to_ship_hours': hours_between(ordered, labelled),
        'is_on_time': False,
        'is_breach': False,
    }
    if ordered is not None and labelled is not None:
        deadline = sla_deadline(ordered, cutoff_hour)
        row['is_on_time'] = labelled <= deadline
        row['is_breach'] = labelled > deadline
    return row


def _empty_sla():
    return {'shipments': [], 'on_time_percent': 0.0, 'breached_count': 0}


@safe_aggregation(default=_empty_sla)
def calculate_sla_metrics(records, cutoff_hour=SLA_CUTOFF_HOUR):
    """
    Time-to-ship compliance per order.

    An order imported before the cutoff hour must be labelled by the end of
    that day; otherwise by the end of the next day. Orders without a label
    count as neither on time nor breached.
    """
    rows = [_sla_row(record, cutoff_hour) for record in records]
    on_time = sum(1 for row in rows if row['is_on_time'])
    return {
        'shipments': rows,
        'on_time_percent': percent(on_time, len(rows)),
        'breached_count': sum(1 for row in rows if row['is_breach']),
    }


@safe_aggregation()
def aggregate_carrier_performance(records, date_range):
    """Orders, cost, transit time and SLA compliance per carrier."""
    filtered = in_range(records, date_range)
    groups = defaultdict(lambda: {'count': 0, 'cost': 0.0, 'transit': [], 'on_time': 0, 'breached': 0})

    for record in filtered:
        data = groups[label_or_unknown(record.get('carrier'))]
        sla = _sla_row(record, SLA_CUTOFF_HOUR)
        data['count'] += 1
        data['cost'] += as_amount(record.get('total_charge'))
        data['transit'].append(as_number(record.get('transit_time_days')))
        data['on_time'] += sla['is_on_time']
        data['breached'] += sla['is_breach']

    rows = [
        {
            'carrier': carrier,
            'order_count': data['count'],
            'percent': percent(data['count'], len(filtered)),
            'avg_cost': data['cost'] / data['count'],
            'total_cost': data['cost'],
            'avg_transit_time': mean(data['transit']),
            'on_time_percent': percent(data['on_time'], data['count']),
            'breached_orders': data['breached'],
        }
        for carrier, data in groups.items()
    ]
    return sorted(rows, key=lambda row: -row['order_count'])


@safe_aggregation()
def aggregate_ship_options(records, date_range):
    filtered = in_range(records, date_range)
    groups = defaultdict(lambda: {'service': '', 'count': 0, 'base': 0.0, 'total': 0.0, 'transit': []})

    for record in filtered:
        data = groups[label_or_unknown(record.get('ship_option_id'))]
        data['service'] = data['service'] or record.get('carrier_service') or ''
        data['count'] += 1
        data['base'] += as_amount(record.get('base_charge'))
        data['total'] += as_amount(record.get('total_charge'))
        data['transit'].append(as_number(record.get('transit_time_days')))

    rows = [
        {
            'ship_option_id': option,
            'carrier_service': label_or_unknown(data['service']),
            'order_count': data['count'],
            'percent': percent(data['count'], len(filtered)),
            'avg_cost': data['base'] / data['count'],
            'avg_cost_with_surcharge': data['total'] / data['count'],
            'avg_transit_time': mean(data['transit']),
        }
        for option, data in groups.items()
    ]
    return sorted(rows, key=lambda row: -row['order_count'])


@safe_aggregation()
def aggregate_zone_metrics(records, date_range):
    filtered = in_range(records, date_range)
    groups = defaultdict(lambda: {'count': 0, 'cost': 0.0, 'transit': []})

    for record in filtered:
        data = groups[label_or_unknown(record.get('zone'))]
        data['count'] += 1
        data['cost'] += as_amount(record.get('total_charge'))
        data['transit'].append(as_number(record.get('transit_time_days')))

    rows = [
        {
            'zone': zone,
            'order_count': data['count'],
            'percent': percent(data['count'], len(filtered)),
            'avg_cost': data['cost'] / data['count'],
            'avg_transit_time': mean(data['transit']),
        }
        for zone, data in groups.items()
    ]
    return sorted(rows, key=lambda row: zone_sort_key(row['zone']))


@safe_aggregation()
def aggregate_state_performance(records, date_range):
    """Shipped and delivered share plus order-to-delivery days per destination state."""
    filtered = in_range(records, date_range)
    groups = defaultdict(lambda: {'count': 0, 'shipped': 0, 'delivered': 0, 'delivery_days': []})

    for record in filtered:
        data = groups[label_or_unknown(record.get('state'))]
        data['count'] += 1
        if record.get('label_created_at'):
            data['shipped'] += 1
        delivered = as_datetime(record.get('delivered_at'))
        if delivered is not None:
            data['delivered'] += 1
            data['delivery_days'].append(
                days_between(as_datetime(record.get('order_imported_at')), delivered)
            )

    rows = [
        {
            'state': state,
            'state_name': state_name(state),
            'order_count': data['count'],
            'percent': percent(data['count'], len(filtered)),
            'shipped_count': data['shipped'],
            'delivered_count': data['delivered'],
            'avg_delivery_time_days': mean(data['delivery_days']),
            'shipped_percent': percent(data['shipped'], data['count']),
            'delivered_percent': percent(data['delivered'], data['count']),
        }
        for state, data in groups.items()
    ]
    return sorted(rows, key=lambda row: -row['order_count'])


@safe_aggregation()
def aggregate_fulfillment_trend(records, date_range):
    """Average, median and p90 order-to-label hours per order day."""
    daily = defaultdict(list)
    for record in in_range(records, date_range):
        ordered = as_datetime(record.get('order_imported_at'))
        hours = hours_between(ordered, as_datetime(record.get('label_created_at')))
        if hours is None:
            continue
        daily[day_key(ordered)].append(hours)

    rows = []
    for day in sorted(daily):
        hours = sorted(daily[day])
        rows.append({
            'date': day,
            'avg_fulfillment_hours': sum(hours) / len(hours),
            'median_fulfillment_hours': nearest_rank(hours, 0.5),
            'p90_fulfillment_hours': nearest_rank(hours, 0.9),
            'order_count': len(hours),
        })
    return rows


@safe_aggregation()
def aggregate_fc_fulfillment_metrics(records, date_range):
    groups = defaultdict(lambda: {'hours': [], 'count': 0, 'breached': 0})

    for record in in_range(records, date_range):
        data = groups[label_or_unknown(record.get('fc_name'))]
        sla = _sla_row(record, SLA_CUTOFF_HOUR)
        data['count'] += 1
        data['hours'].append(sla['time_to_ship_hours'])
        data['breached'] += sla['is_breach']

    rows = [
        {
            'fc_name': fc_name,
            'avg_fulfillment_hours': mean(data['hours']),
            'breach_rate': percent(data['breached'], data['count']),
            'order_count': data['count'],
            'breached_count': data['breached'],
        }
        for fc_name, data in groups.items()
    ]
    return sorted(rows, key=lambda row: -row['order_count'])


@safe_aggregation()
def aggregate_cost_trend(records, date_range):
    """Average cost per order per day, with and without surcharges."""
    daily = defaultdict(lambda: {'base': 0.0, 'with_surcharge': 0.0, 'count': 0})

    for record in in_range(records, date_range):
        data = daily[day_key(record['transaction_date'])]
        base = as_amount(record.get('base_charge'))
        data['base'] += base
        data['with_surcharge'] += base + as_amount(record.get('surcharge'))
        data['count'] += 1

    rows = []
    for day in sorted(daily):
        data = daily[day]
        avg_base = data['base'] / data['count']
        avg_with_surcharge = data['with_surcharge'] / data['count']
        rows.append({
            'date': day,
            'avg_cost_base': avg_base,
            'avg_cost_with_surcharge': avg_with_surcharge,
            'surcharge_only': avg_with_surcharge - avg_base,
            'order_count': data['count'],
        })
    return rows


@safe_aggregation()
def aggregate_order_volume_trend(records, date_range):
    """Orders per month with month-over-month growth (None for the first month)."""
    monthly = defaultdict(int)
    for record in in_range(records, date_range):
        monthly[month_key(record['transaction_date'])] += 1

    rows = []
    previous = None
    for month in sorted(monthly):
        count = monthly[month]
        rows.append({
            'month': month,
            'label': month_label(month),
            'order_count': count,
            'growth_percent': ((count - previous) / previous) * 100 if previous else None,
        })
        previous = count
    return rows


def _positive_transit(record):
    transit = as_number(record.get('transit_time_days'))
    return transit if transit is not None and transit > 0 else None


@safe_aggregation()
def aggregate_cost_vs_transit(records, date_range, min_orders=5):
    """Carrier service groups with enough delivered volume to plot cost against speed."""
    groups = defaultdict(lambda: {'cost': 0.0, 'transit': []})

    for record in in_range(records, date_range):
        transit = _positive_transit(record)
        if transit is None:
            continue
        key = (label_or_unknown(record.get('carrier')), label_or_unknown(record.get('carrier_service')))
        data = groups[key]
        data['cost'] += as_amount(record.get('base_charge')) + as_amount(record.get('surcharge'))
        data['transit'].append(transit)

    rows = [
        {
            'carrier': carrier,
            'carrier_service': service,
            'avg_cost': data['cost'] / len(data['transit']),
            'avg_transit_time': mean(data['transit']),
            'order_count': len(data['transit']),
        }
        for (carrier, service), data in groups.items()
        if len(data['transit']) >= min_orders
    ]
    return sorted(rows, key=lambda row: -row['order_count'])


@safe_aggregation()
def aggregate_transit_time_distribution(records, date_range, min_orders=10):
    """Five-number transit summary per carrier."""
    groups = defaultdict(list)
    for record in in_range(records, date_range):
        transit = _positive_transit(record)
        if transit is not None:
            groups[label_or_unknown(record.get('carrier'))].append(transit)

    rows = []
    for carrier, times in groups.items():
        if len(times) < min_orders:
            continue
        times = sorted(times)
        rows.append({
            'carrier': carrier,
            'min': times[0],
            'q1': nearest_rank(times, 0.25),
            'median': nearest_rank(times, 0.5),
            'q3': nearest_rank(times, 0.75),
            'max': times[-1],
            'order_count': len(times),
        })
    return sorted(rows, key=lambda row: -row['order_count'])


@safe_aggregation()
def aggregate_cost_speed_trend(records, date_range):
    monthly = defaultdict(lambda: {'cost': 0.0, 'count': 0, 'transit': []})

    for record in in_range(records, date_range):
        data = monthly[month_key(record['transaction_date'])]
        data['cost'] += as_amount(record.get('base_charge')) + as_amount(record.get('surcharge'))
        data['count'] += 1
        data['transit'].append(_positive_transit(record))

    return [
        {
            'month': month,
            'label': month_label(month),
            'avg_cost': monthly[month]['cost'] / monthly[month]['count'],
            'avg_transit_time': mean(monthly[month]['transit']),
            'order_count': monthly[month]['count'],
        }
        for month in sorted(monthly)
    ]
