from .billing import (
    aggregate_monthly_invoices,
    calculate_additional_services_breakdown,
    calculate_billing_category_breakdown,
    calculate_billing_efficiency_metrics,
    calculate_billing_summary,
    calculate_billing_trend,
    calculate_pick_pack_distribution,
    calculate_shipping_cost_by_zone,
    map_fee_type_to_category,
)
from .kpis import calculate_kpis
from .shipping import (
    aggregate_carrier_performance,
    aggregate_cost_speed_trend,
    aggregate_cost_trend,
    aggregate_cost_vs_transit,
    aggregate_fc_fulfillment_metrics,
    aggregate_fulfillment_trend,
    aggregate_order_volume_trend,
    aggregate_ship_options,
    aggregate_state_performance,
    aggregate_transit_time_distribution,
    aggregate_zone_metrics,
    calculate_sla_metrics,
)
from .undelivered import (
    get_undelivered_by_age,
    get_undelivered_by_carrier,
    get_undelivered_by_state,
    get_undelivered_by_status,
    get_undelivered_shipments,
    get_undelivered_summary,
)
from .volume import (
    aggregate_city_volume,
    aggregate_city_volume_by_state,
    aggregate_cost_by_zone,
    aggregate_daily_order_volume,
    aggregate_order_volume_by_day_of_week,
    aggregate_order_volume_by_fc,
    aggregate_order_volume_by_hour,
    aggregate_order_volume_by_store,
    aggregate_state_cost_speed,
    aggregate_state_volume,
)

__all__ = [
    'aggregate_carrier_performance',
    'aggregate_city_volume',
    'aggregate_city_volume_by_state',
    'aggregate_cost_by_zone',
    'aggregate_cost_speed_trend',
    'aggregate_cost_trend',
    'aggregate_cost_vs_transit',
    'aggregate_daily_order_volume',
    'aggregate_fc_fulfillment_metrics',
    'aggregate_fulfillment_trend',
    'aggregate_monthly_invoices',
    'aggregate_order_volume_by_day_of_week',
    'aggregate_order_volume_by_fc',
    'aggregate_order_volume_by_hour',
    'aggregate_order_volume_by_store',
    'aggregate_order_volume_trend',
    'aggregate_ship_options',
    'aggregate_state_cost_speed',
    'aggregate_state_performance',
    'aggregate_state_volume',
    'aggregate_transit_time_distribution',
    'aggregate_zone_metrics',
    'calculate_additional_services_breakdown',
    'calculate_billing_category_breakdown',
    'calculate_billing_efficiency_metrics',
    'calculate_billing_summary',
    'calculate_billing_trend',
    'calculate_kpis',
    'calculate_pick_pack_distribution',
    'calculate_shipping_cost_by_zone',
    'calculate_sla_metrics',
    'get_undelivered_by_age',
    'get_undelivered_by_carrier',
    'get_undelivered_by_state',
    'get_undelivered_by_status',
    'get_undelivered_shipments',
    'get_undelivered_summary',
    'map_fee_type_to_category',
]
