"""
Headline KPIs for a period compared with the period before it.
"""

from ..records import as_amount, as_number, in_range
from .common import mean, percent_change, safe_aggregation
from .shipping import calculate_sla_metrics

KPI_FIELDS = ('total_cost', 'order_count', 'avg_transit_time', 'sla_percent', 'late_orders', 'undelivered')


def _empty_kpis():
    return dict(
        {field: 0 for field in KPI_FIELDS},
        period_change={field: 0.0 for field in KPI_FIELDS},
    )


def _period_kpis(records):
    sla = calculate_sla_metrics(records)
    return {
        'total_cost': sum(as_amount(record.get('total_charge')) for record in records),
        'order_count': len(records),
        'avg_transit_time': mean(as_number(record.get('transit_time_days')) for record in records),
        'sla_percent': sla['on_time_percent'],
        'late_orders': sla['breached_count'],
        'undelivered': sum(1 for record in records if not record.get('delivered_at')),
    }


@safe_aggregation(default=_empty_kpis)
def calculate_kpis(records, date_range, previous_range):
    """
    KPIs for ``date_range`` with the change against ``previous_range``.

    Changes are percentages, except the SLA change which is the difference
    in percentage points.
    """
    current = _period_kpis(in_range(records, date_range))
    previous = _period_kpis(in_range(records, previous_range))

    change = {
        field: percent_change(current[field], previous[field])
        for field in KPI_FIELDS
    }
    change['sla_percent'] = current['sla_percent'] - previous['sla_percent']
    return dict(current, period_change=change)
