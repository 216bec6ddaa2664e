"""
Billing breakdowns.

Shipment records supply the shipping charges; ``fees`` maps a transaction
family ('additional-services', 'storage', 'receiving', 'returns', 'credits')
to its fee records. Credit amounts are stored positive and subtracted.
"""

from collections import OrderedDict, defaultdict

from ..records import MONTHLY, as_amount, as_number, in_range
from .common import (
    label_or_unknown, percent, percent_change, safe_aggregation, zone_sort_key,
)
from .dates import month_key, month_label, time_key, time_label

PER_PICK_RATE = 0.35

# Category label per fee family, in display order
FAMILY_CATEGORIES = OrderedDict([
    ('storage', 'Warehousing'),
    ('receiving', 'Receiving'),
    ('returns', 'Returns'),
    ('credits', 'Credit'),
])

FEE_TYPE_CATEGORIES = {
    'Per Pick Fee': 'D2C Extra Picks',
    'Inventory Placement Program Fee': 'MultiHub IQ',
    'URO Storage Fee': 'URO Fees',
    'VAS - Paid Requests': 'VAS/Kitting',
    'Kitting Fee': 'VAS/Kitting',
}

ZONE_LABELS = {
    '1': 'Local',
    '2': 'Very Close',
    '3': 'Regional',
    '4': 'Medium',
    '5': 'Farther',
    '6': 'Far',
    '7': 'Very Far',
    '8': 'Coast to Coast',
}

# Amounts below half a cent are treated as empty categories
ZERO_THRESHOLD = 0.005


def map_fee_type_to_category(fee_type):
    fee_type = fee_type or ''
    if 'B2B' in fee_type.upper():
        return 'B2B Fees'
    return FEE_TYPE_CATEGORIES.get(fee_type, label_or_unknown(fee_type))


def signed_fee(family, record):
    amount = as_amount(record.get('amount'))
    return -abs(amount) if family == 'credits' else amount


def _fees_in_range(fees, date_range):
    return {family: in_range(records, date_range) for family, records in (fees or {}).items()}


def _fee_total(fees):
    return sum(signed_fee(family, record) for family, records in fees.items() for record in records)


def _shipping(record):
    return as_amount(record.get('total_charge'))


@safe_aggregation()
def aggregate_monthly_invoices(shipments, fees, date_range):
    """Per month: base and surcharge charges, each fee family and the grand total."""
    months = defaultdict(lambda: {
        'fulfillment_base': 0.0, 'surcharges': 0.0, 'additional_services': 0.0,
        'storage': 0.0, 'returns': 0.0, 'receiving': 0.0, 'credits': 0.0, 'total': 0.0,
    })

    for record in in_range(shipments, date_range):
        data = months[month_key(record['transaction_date'])]
        data['fulfillment_base'] += as_amount(record.get('base_charge'))
        data['surcharges'] += as_amount(record.get('surcharge'))
        data['total'] += _shipping(record)

    for family, records in _fees_in_range(fees, date_range).items():
        column = family.replace('-', '_')
        for record in records:
            data = months[month_key(record['transaction_date'])]
            amount = signed_fee(family, record)
            data[column] += amount
            data['total'] += amount

    return [
        dict(month=month, label=month_label(month), **months[month])
        for month in sorted(months)
    ]


def _empty_billing_summary():
    return {
        'total_cost': 0.0,
        'order_count': 0,
        'cost_per_order': 0.0,
        'period_change': {'total_cost': 0.0, 'order_count': 0.0, 'cost_per_order': 0.0},
    }


def _period_totals(shipments, fees, date_range):
    current = in_range(shipments, date_range)
    total = sum(_shipping(record) for record in current) + _fee_total(_fees_in_range(fees, date_range))
    return total, len(current)


@safe_aggregation(default=_empty_billing_summary)
def calculate_billing_summary(shipments, fees, date_range, previous_range):
    total, count = _period_totals(shipments, fees, date_range)
    previous_total, previous_count = _period_totals(shipments, fees, previous_range)
    cost_per_order = total / count if count else 0.0
    previous_cost_per_order = previous_total / previous_count if previous_count else 0.0
    return {
        'total_cost': total,
        'order_count': count,
        'cost_per_order': cost_per_order,
        'period_change': {
            'total_cost': percent_change(total, previous_total),
            'order_count': percent_change(count, previous_count),
            'cost_per_order': percent_change(cost_per_order, previous_cost_per_order),
        },
    }


@safe_aggregation()
def calculate_billing_category_breakdown(shipments, fees, date_range):
    """
    Spend per invoice category as a share of the grand total.

    Additional-service fees are split by ``map_fee_type_to_category``. Empty
    categories are dropped and the rest sorted by absolute amount.
    """
    current = in_range(shipments, date_range)
    current_fees = _fees_in_range(fees, date_range)

    categories = OrderedDict()
    categories['Shipping'] = {'amount': sum(_shipping(r) for r in current), 'quantity': len(current)}

    for record in current_fees.get('additional-services', []):
        entry = categories.setdefault(
            map_fee_type_to_category(record.get('fee_type')), {'amount': 0.0, 'quantity': 0}
        )
        entry['amount'] += signed_fee('additional-services', record)
        entry['quantity'] += 1

    for family, category in FAMILY_CATEGORIES.items():
        records = current_fees.get(family, [])
        entry = categories.setdefault(category, {'amount': 0.0, 'quantity': 0})
        entry['amount'] += sum(signed_fee(family, record) for record in records)
        entry['quantity'] += len(records)

    grand_total = sum(entry['amount'] for entry in categories.values())
    rows = [
        {
            'category': category,
            'amount': entry['amount'],
            'percent': percent(entry['amount'], grand_total) if grand_total > 0 else 0.0,
            'quantity': entry['quantity'],
            'unit_price': entry['amount'] / entry['quantity'] if entry['quantity'] else 0.0,
        }
        for category, entry in categories.items()
        if abs(entry['amount']) > ZERO_THRESHOLD
    ]
    return sorted(rows, key=lambda row: -abs(row['amount']))


@safe_aggregation()
def calculate_billing_trend(shipments, fees, date_range, granularity=MONTHLY):
    """Category totals per period at the requested granularity."""
    periods = defaultdict(lambda: {
        'shipping': 0.0, 'additional_services': 0.0, 'warehousing': 0.0,
        'receiving': 0.0, 'returns': 0.0, 'credit': 0.0, 'total': 0.0, 'order_count': 0,
    })
    columns = {
        'additional-services': 'additional_services',
        'storage': 'warehousing',
        'receiving': 'receiving',
        'returns': 'returns',
        'credits': 'credit',
    }

    for record in in_range(shipments, date_range):
        data = periods[time_key(record['transaction_date'], granularity)]
        data['shipping'] += _shipping(record)
        data['total'] += _shipping(record)
        data['order_count'] += 1

    for family, records in _fees_in_range(fees, date_range).items():
        for record in records:
            data = periods[time_key(record['transaction_date'], granularity)]
            amount = signed_fee(family, record)
            data[columns.get(family, 'additional_services')] += amount
            data['total'] += amount

    rows = []
    for key in sorted(periods):
        data = periods[key]
        rows.append(dict(
            period=key,
            label=time_label(key, granularity),
            cost_per_order=data['total'] / data['order_count'] if data['order_count'] else 0.0,
            **data
        ))
    return rows


@safe_aggregation()
def calculate_pick_pack_distribution(shipments, date_range):
    """Orders and pick cost bucketed by item count."""
    buckets = OrderedDict((label, {'count': 0, 'cost': 0.0}) for label in ('1 item', '2 items', '3+ items'))
    filtered = in_range(shipments, date_range)

    for record in filtered:
        quantity = int(as_number(record.get('total_quantity')) or 0)
        if quantity <= 1:
            label = '1 item'
        elif quantity == 2:
            label = '2 items'
        else:
            label = '3+ items'
        buckets[label]['count'] += 1
        buckets[label]['cost'] += quantity * PER_PICK_RATE

    multi = buckets['3+ items']
    unit_prices = {
        '1 item': PER_PICK_RATE,
        '2 items': PER_PICK_RATE * 2,
        '3+ items': multi['cost'] / multi['count'] if multi['count'] else PER_PICK_RATE * 3,
    }
    return [
        {
            'item_count': label,
            'order_count': data['count'],
            'percent': percent(data['count'], len(filtered)),
            'total_cost': data['cost'],
            'unit_price': unit_prices[label],
        }
        for label, data in buckets.items()
    ]


@safe_aggregation()
def calculate_shipping_cost_by_zone(shipments, date_range):
    filtered = in_range(shipments, date_range)
    zones = defaultdict(lambda: {'count': 0, 'shipping': 0.0})
    for record in filtered:
        data = zones[label_or_unknown(record.get('zone'))]
        data['count'] += 1
        data['shipping'] += as_amount(record.get('base_charge'))

    rows = [
        {
            'zone': zone,
            'zone_label': ZONE_LABELS.get(zone, zone),
            'order_count': data['count'],
            'total_shipping': data['shipping'],
            'avg_shipping': data['shipping'] / data['count'],
            'percent': percent(data['count'], len(filtered)),
        }
        for zone, data in zones.items()
    ]
    return sorted(rows, key=lambda row: zone_sort_key(row['zone']))


@safe_aggregation()
def calculate_additional_services_breakdown(additional_services, date_range):
    categories = defaultdict(lambda: {'amount': 0.0, 'count': 0})
    for record in in_range(additional_services, date_range):
        data = categories[map_fee_type_to_category(record.get('fee_type'))]
        data['amount'] += as_amount(record.get('amount'))
        data['count'] += 1

    total = sum(data['amount'] for data in categories.values())
    rows = [
        {
            'category': category,
            'amount': data['amount'],
            'transaction_count': data['count'],
            'percent': percent(data['amount'], total),
        }
        for category, data in categories.items()
        if data['amount'] > 0
    ]
    return sorted(rows, key=lambda row: -row['amount'])


def _empty_efficiency():
    return {
        'cost_per_item': 0.0,
        'avg_items_per_order': 0.0,
        'shipping_as_percent_of_total': 0.0,
        'surcharge_rate': 0.0,
        'insurance_rate': 0.0,
    }


@safe_aggregation(default=_empty_efficiency)
def calculate_billing_efficiency_metrics(shipments, fees, date_range):
    filtered = in_range(shipments, date_range)
    if not filtered:
        return _empty_efficiency()

    shipping = sum(_shipping(record) for record in filtered)
    total_cost = shipping + _fee_total(_fees_in_range(fees, date_range))
    items = sum(int(as_number(record.get('total_quantity')) or 0) for record in filtered)
    with_surcharge = sum(1 for record in filtered if as_amount(record.get('surcharge')) > 0)
    with_insurance = sum(1 for record in filtered if as_amount(record.get('insurance_charge')) > 0)

    return {
        'cost_per_item': total_cost / items if items else 0.0,
        'avg_items_per_order': items / len(filtered),
        'shipping_as_percent_of_total': percent(shipping, total_cost) if total_cost > 0 else 0.0,
        'surcharge_rate': percent(with_surcharge, len(filtered)),
        'insurance_rate': percent(with_insurance, len(filtered)),
    }
