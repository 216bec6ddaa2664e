"""
Analytics report endpoint.

Every report is a pure aggregation over records loaded once per request for
the caller's client and the requested period (plus the period before it, for
comparisons).
"""

import logging

from django.utils.dateparse import parse_date
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.context import resolve_client_context
from billing.models import TRANSACTION_FAMILIES
from shipments.models import Shipment
from . import aggregators
from .records import DateRange, fee_records, shipment_records

logger = logging.getLogger(__name__)

FAMILY_EXTRA_FIELDS = {
    'additional-services': ('fee_type',),
}


class ReportData:
    """Records for one request, loaded lazily and at most once."""

    def __init__(self, context, date_range, params=None):
        self.context = context
        self.range = date_range
        self.previous = date_range.previous()
        self.params = params or {}
        self._shipments = None
        self._fees = None

    @property
    def shipments(self):
        if self._shipments is None:
            queryset = self.context.scope(Shipment.objects.all()).filter(
                label_created_at__gte=self.previous.start,
                label_created_at__lte=self.range.end,
            )
            self._shipments = shipment_records(queryset)
        return self._shipments

    @property
    def all_open_shipments(self):
        """Labelled, undelivered shipments regardless of the requested period."""
        queryset = self.context.scope(Shipment.objects.all()).filter(
            label_created_at__isnull=False, delivered_at__isnull=True,
        )
        return shipment_records(queryset)

    @property
    def fees(self):
        if self._fees is None:
            self._fees = {}
            for family, model in TRANSACTION_FAMILIES.items():
                queryset = self.context.scope(model.objects.all()).filter(
                    transaction_date__gte=self.previous.start,
                    transaction_date__lte=self.range.end,
                )
                self._fees[family] = fee_records(queryset, FAMILY_EXTRA_FIELDS.get(family, ()))
        return self._fees


def city_volume(d):
    state = (d.params.get('state') or '').strip().upper()
    if state:
        return aggregators.aggregate_city_volume_by_state(d.shipments, d.range, state)
    return aggregators.aggregate_city_volume(d.shipments, d.range)


REPORTS = {
    'kpis': lambda d: aggregators.calculate_kpis(d.shipments, d.range, d.previous),
    'carriers': lambda d: aggregators.aggregate_carrier_performance(d.shipments, d.range),
    'ship-options': lambda d: aggregators.aggregate_ship_options(d.shipments, d.range),
    'zones': lambda d: aggregators.aggregate_zone_metrics(d.shipments, d.range),
    'states': lambda d: aggregators.aggregate_state_performance(d.shipments, d.range),
    'fulfillment-trend': lambda d: aggregators.aggregate_fulfillment_trend(d.shipments, d.range),
    'fc-fulfillment': lambda d: aggregators.aggregate_fc_fulfillment_metrics(d.shipments, d.range),
    'cost-trend': lambda d: aggregators.aggregate_cost_trend(d.shipments, d.range),
    'volume-trend': lambda d: aggregators.aggregate_order_volume_trend(d.shipments, d.range),
    'cost-vs-transit': lambda d: aggregators.aggregate_cost_vs_transit(d.shipments, d.range),
    'transit-distribution': lambda d: aggregators.aggregate_transit_time_distribution(d.shipments, d.range),
    'cost-speed-trend': lambda d: aggregators.aggregate_cost_speed_trend(d.shipments, d.range),
    'volume-by-hour': lambda d: aggregators.aggregate_order_volume_by_hour(d.shipments, d.range),
    'volume-by-day': lambda d: aggregators.aggregate_order_volume_by_day_of_week(d.shipments, d.range),
    'volume-by-fc': lambda d: aggregators.aggregate_order_volume_by_fc(d.shipments, d.range),
    'volume-by-store': lambda d: aggregators.aggregate_order_volume_by_store(d.shipments, d.range),
    'daily-volume': lambda d: aggregators.aggregate_daily_order_volume(d.shipments, d.range),
    'state-volume': lambda d: aggregators.aggregate_state_volume(d.shipments, d.range),
    'city-volume': city_volume,
    'state-cost-speed': lambda d: aggregators.aggregate_state_cost_speed(d.shipments, d.range),
    'zone-cost': lambda d: aggregators.aggregate_cost_by_zone(d.shipments, d.range),
    'billing-summary': lambda d: aggregators.calculate_billing_summary(d.shipments, d.fees, d.range, d.previous),
    'billing-categories': lambda d: aggregators.calculate_billing_category_breakdown(d.shipments, d.fees, d.range),
    'billing-trend': lambda d: aggregators.calculate_billing_trend(
        d.shipments, d.fees, d.range, d.range.granularity
    ),
    'pick-pack': lambda d: aggregators.calculate_pick_pack_distribution(d.shipments, d.range),
    'shipping-cost-by-zone': lambda d: aggregators.calculate_shipping_cost_by_zone(d.shipments, d.range),
    'additional-services': lambda d: aggregators.calculate_additional_services_breakdown(
        d.fees['additional-services'], d.range
    ),
    'billing-efficiency': lambda d: aggregators.calculate_billing_efficiency_metrics(d.shipments, d.fees, d.range),
    'monthly-invoices': lambda d: aggregators.aggregate_monthly_invoices(d.shipments, d.fees, d.range),
    'undelivered': lambda d: aggregators.get_undelivered_shipments(d.all_open_shipments),
    'undelivered-summary': lambda d: aggregators.get_undelivered_summary(d.all_open_shipments),
    'undelivered-by-carrier': lambda d: aggregators.get_undelivered_by_carrier(d.all_open_shipments),
    'undelivered-by-status': lambda d: aggregators.get_undelivered_by_status(d.all_open_shipments),
    'undelivered-by-age': lambda d: aggregators.get_undelivered_by_age(d.all_open_shipments),
    'undelivered-by-state': lambda d: aggregators.get_undelivered_by_state(d.all_open_shipments),
}


def resolve_date_range(params):
    """
    DateRange from ``startDate``/``endDate`` when both are given, otherwise
    from ``preset``.

    Raises:
        ValidationError: If a date is malformed or the range is reversed
    """
    start_raw, end_raw = params.get('startDate'), params.get('endDate')
    if start_raw and end_raw:
        try:
            start, end = parse_date(start_raw), parse_date(end_raw)
        except ValueError:
            start = end = None
        if start is None or end is None:
            raise ValidationError({'detail': "startDate and endDate must be YYYY-MM-DD dates"})
        if start > end:
            raise ValidationError({'detail': "startDate must not be after endDate"})
        return DateRange.from_dates(start, end)
    return DateRange.from_preset(params.get('preset'))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def analytics_report(request, report):
    """Run one named report for the caller's client and period."""
    builder = REPORTS.get(report)
    if builder is None:
        raise NotFound(f"Unknown report '{report}'")

    context = resolve_client_context(request.user, request.query_params.get('clientId'))
    date_range = resolve_date_range(request.query_params)

    data = builder(ReportData(context, date_range, request.query_params))
    logger.info(f"Report {report} for {context!r} over {date_range}")

    return Response({
        'success': True,
        'data': data,
        'granularity': date_range.granularity,
    })
