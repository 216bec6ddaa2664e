"""
Tests for the billing, undelivered and KPI aggregations.
"""

from datetime import date, timedelta

from django.test import SimpleTestCase

from ..aggregators import (
    aggregate_monthly_invoices, calculate_additional_services_breakdown,
    calculate_billing_category_breakdown, calculate_billing_efficiency_metrics,
    calculate_billing_summary, calculate_billing_trend, calculate_kpis,
    calculate_pick_pack_distribution, calculate_shipping_cost_by_zone,
    get_undelivered_by_age, get_undelivered_by_carrier, get_undelivered_by_status,
    get_undelivered_shipments, get_undelivered_summary, map_fee_type_to_category,
)
from ..records import WEEKLY, DateRange
from .factories import aware, fee_record, shipment_record

JANUARY = DateRange.from_dates(date(2024, 1, 1), date(2024, 1, 31))


class FeeCategoryTest(SimpleTestCase):

    def test_mapping(self):
        self.assertEqual(map_fee_type_to_category('Per Pick Fee'), 'D2C Extra Picks')
        self.assertEqual(map_fee_type_to_category('Kitting Fee'), 'VAS/Kitting')
        self.assertEqual(map_fee_type_to_category('b2b pallet fee'), 'B2B Fees')
        self.assertEqual(map_fee_type_to_category('Gift Wrap'), 'Gift Wrap')
        self.assertEqual(map_fee_type_to_category(None), 'Unknown')

    def test_additional_services_breakdown(self):
        fees = [
            fee_record(aware(2024, 1, 3, 9), '6.00', fee_type='Kitting Fee'),
            fee_record(aware(2024, 1, 4, 9), '2.00', fee_type='VAS - Paid Requests'),
            fee_record(aware(2024, 1, 4, 9), '1.05', fee_type='Per Pick Fee'),
            fee_record(aware(2024, 2, 4, 9), '50.00', fee_type='Per Pick Fee'),
        ]

        rows = calculate_additional_services_breakdown(fees, JANUARY)

        self.assertEqual([row['category'] for row in rows], ['VAS/Kitting', 'D2C Extra Picks'])
        self.assertAlmostEqual(rows[0]['amount'], 8.0)
        self.assertEqual(rows[0]['transaction_count'], 2)


class BillingBreakdownTest(SimpleTestCase):

    def setUp(self):
        self.shipments = [
            shipment_record(aware(2024, 1, 2, 9), total_charge='10.00', base_charge='8.00',
                            surcharge='2.00', total_quantity=1, zone='8'),
            shipment_record(aware(2024, 1, 3, 9), total_charge='20.00', base_charge='20.00',
                            total_quantity=2, zone='2', insurance_charge='1.00'),
        ]
        self.fees = {
            'additional-services': [
                fee_record(aware(2024, 1, 2, 10), '5.00', fee_type='Per Pick Fee'),
                fee_record(aware(2024, 1, 2, 10), '3.00', fee_type='B2B Pallet Fee'),
                fee_record(aware(2024, 1, 2, 10), '0.001', fee_type='Kitting Fee'),
            ],
            'storage': [fee_record(aware(2024, 1, 5, 10), '2.00')],
            'receiving': [],
            'credits': [fee_record(aware(2024, 1, 6, 10), '4.00')],
        }

    def test_category_breakdown(self):
        rows = calculate_billing_category_breakdown(self.shipments, self.fees, JANUARY)

        self.assertEqual(
            [row['category'] for row in rows],
            ['Shipping', 'D2C Extra Picks', 'Credit', 'B2B Fees', 'Warehousing'],
        )
        by_category = {row['category']: row for row in rows}
        self.assertAlmostEqual(by_category['Shipping']['amount'], 30.0)
        self.assertEqual(by_category['Shipping']['quantity'], 2)
        self.assertAlmostEqual(by_category['Shipping']['unit_price'], 15.0)
        self.assertAlmostEqual(by_category['Credit']['amount'], -4.0)
        self.assertLess(by_category['Credit']['percent'], 0)
        self.assertNotIn('Receiving', by_category)
        self.assertNotIn('VAS/Kitting', by_category)

    def test_monthly_invoices(self):
        rows = aggregate_monthly_invoices(self.shipments, self.fees, JANUARY)

        self.assertEqual(len(rows), 1)
        row = rows[0]
        self.assertEqual(row['label'], 'Jan 2024')
        self.assertAlmostEqual(row['fulfillment_base'], 28.0)
        self.assertAlmostEqual(row['surcharges'], 2.0)
        self.assertAlmostEqual(row['credits'], -4.0)
        self.assertAlmostEqual(row['total'], 30.0 + 8.001 + 2.0 - 4.0)

    def test_summary_against_previous_period(self):
        previous = DateRange.from_dates(date(2023, 12, 1), date(2023, 12, 31))
        shipments = self.shipments + [shipment_record(aware(2023, 12, 15, 9), total_charge='15.00')]

        summary = calculate_billing_summary(shipments, {}, JANUARY, previous)

        self.assertAlmostEqual(summary['total_cost'], 30.0)
        self.assertEqual(summary['order_count'], 2)
        self.assertAlmostEqual(summary['cost_per_order'], 15.0)
        self.assertAlmostEqual(summary['period_change']['total_cost'], 100.0)
        self.assertAlmostEqual(summary['period_change']['cost_per_order'], 0.0)

    def test_trend_weekly(self):
        rows = calculate_billing_trend(self.shipments, self.fees, JANUARY, WEEKLY)

        self.assertEqual([row['period'] for row in rows], ['2024-01-01'])
        self.assertEqual(rows[0]['label'], 'Week of Jan 1')
        self.assertAlmostEqual(rows[0]['warehousing'], 2.0)
        self.assertAlmostEqual(rows[0]['credit'], -4.0)
        self.assertEqual(rows[0]['order_count'], 2)

    def test_pick_pack_distribution(self):
        shipments = [
            shipment_record(aware(2024, 1, 2, 9), total_quantity=quantity) for quantity in (1, 2, 3, 5)
        ]

        rows = calculate_pick_pack_distribution(shipments, JANUARY)

        self.assertEqual([row['item_count'] for row in rows], ['1 item', '2 items', '3+ items'])
        self.assertEqual([row['order_count'] for row in rows], [1, 1, 2])
        self.assertAlmostEqual(rows[2]['total_cost'], 2.8)
        self.assertAlmostEqual(rows[2]['unit_price'], 1.4)
        self.assertAlmostEqual(rows[1]['unit_price'], 0.7)

    def test_shipping_cost_by_zone(self):
        rows = calculate_shipping_cost_by_zone(self.shipments, JANUARY)

        self.assertEqual([row['zone'] for row in rows], ['2', '8'])
        self.assertEqual(rows[1]['zone_label'], 'Coast to Coast')
        self.assertAlmostEqual(rows[1]['avg_shipping'], 8.0)

    def test_efficiency_metrics(self):
        metrics = calculate_billing_efficiency_metrics(self.shipments, {}, JANUARY)

        self.assertAlmostEqual(metrics['cost_per_item'], 10.0)
        self.assertAlmostEqual(metrics['avg_items_per_order'], 1.5)
        self.assertAlmostEqual(metrics['surcharge_rate'], 50.0)
        self.assertAlmostEqual(metrics['insurance_rate'], 50.0)
        self.assertAlmostEqual(metrics['shipping_as_percent_of_total'], 100.0)

    def test_efficiency_metrics_empty(self):
        metrics = calculate_billing_efficiency_metrics([], self.fees, JANUARY)

        self.assertEqual(set(metrics.values()), {0.0})


class UndeliveredTest(SimpleTestCase):

    def setUp(self):
        self.now = aware(2024, 6, 30, 12)
        self.records = [
            shipment_record(self.now - timedelta(days=days, hours=1), carrier=carrier,
                            order_id=f"O-{days}", city='Austin', state='TX')
            for days, carrier in ((0, 'UPS'), (1, 'UPS'), (3, 'USPS'), (5, 'UPS'), (8, 'FedEx'), (15, 'UPS'))
        ]
        self.records.append(shipment_record(self.now - timedelta(days=4), delivered_at=self.now))
        self.records.append(shipment_record(None))

    def test_shipments_oldest_first(self):
        rows = get_undelivered_shipments(self.records, now=self.now)

        self.assertEqual([row['days_in_transit'] for row in rows], [15, 8, 5, 3, 1, 0])
        self.assertEqual(rows[0]['status'], 'Exception')
        self.assertEqual(rows[1]['status'], 'In Transit')
        self.assertEqual(rows[0]['destination'], 'Austin, TX')

    def test_summary(self):
        summary = get_undelivered_summary(self.records, now=self.now)

        self.assertEqual(summary['total_undelivered'], 6)
        self.assertEqual(summary['critical_count'], 2)
        self.assertEqual(summary['warning_count'], 1)
        self.assertEqual(summary['on_track_count'], 3)
        self.assertEqual(summary['oldest_days'], 15)
        self.assertAlmostEqual(summary['avg_days_in_transit'], 32 / 6)

    def test_summary_when_everything_delivered(self):
        summary = get_undelivered_summary(self.records[-2:], now=self.now)

        self.assertEqual(summary['total_undelivered'], 0)
        self.assertEqual(summary['oldest_days'], 0)

    def test_by_status(self):
        rows = get_undelivered_by_status(self.records, now=self.now)

        self.assertEqual(
            [(row['status'], row['count']) for row in rows],
            [('Just Shipped', 2), ('In Transit', 2), ('Delayed', 1), ('Exception', 1)],
        )

    def test_by_age_includes_empty_buckets(self):
        rows = get_undelivered_by_age(self.records, now=self.now)

        self.assertEqual([row['count'] for row in rows], [2, 1, 1, 1, 0, 1])
        self.assertIsNone(rows[-1]['max_days'])
        self.assertEqual(get_undelivered_by_age([], now=self.now), [])

    def test_by_carrier(self):
        rows = get_undelivered_by_carrier(self.records, now=self.now)

        self.assertEqual(rows[0]['carrier'], 'UPS')
        self.assertEqual(rows[0]['count'], 4)
        self.assertEqual(rows[0]['critical_count'], 1)
        self.assertAlmostEqual(sum(row['percent'] for row in rows), 100.0)


class KpiTest(SimpleTestCase):

    def setUp(self):
        self.current_range = DateRange.from_dates(date(2024, 1, 8), date(2024, 1, 14))
        self.previous_range = self.current_range.previous()
        self.records = [
            # Current week, both on time
            shipment_record(aware(2024, 1, 9, 12), order_imported_at=aware(2024, 1, 9, 9),
                            total_charge=10, transit_time_days=2, delivered_at=aware(2024, 1, 11, 9)),
            shipment_record(aware(2024, 1, 10, 12), order_imported_at=aware(2024, 1, 10, 9),
                            total_charge=30),
            # Previous week, one breach
            shipment_record(aware(2024, 1, 3, 12), order_imported_at=aware(2024, 1, 3, 9),
                            total_charge=20, transit_time_days=4, delivered_at=aware(2024, 1, 7, 9)),
            shipment_record(aware(2024, 1, 3, 10), order_imported_at=aware(2024, 1, 2, 13),
                            total_charge=0, transit_time_days=2, delivered_at=aware(2024, 1, 5, 9)),
        ]

    def test_current_values(self):
        kpis = calculate_kpis(self.records, self.current_range, self.previous_range)

        self.assertAlmostEqual(kpis['total_cost'], 40.0)
        self.assertEqual(kpis['order_count'], 2)
        self.assertAlmostEqual(kpis['avg_transit_time'], 2.0)
        self.assertAlmostEqual(kpis['sla_percent'], 100.0)
        self.assertEqual(kpis['late_orders'], 0)
        self.assertEqual(kpis['undelivered'], 1)

    def test_period_change(self):
        change = calculate_kpis(self.records, self.current_range, self.previous_range)['period_change']

        self.assertAlmostEqual(change['total_cost'], 100.0)
        self.assertAlmostEqual(change['order_count'], 0.0)
        self.assertAlmostEqual(change['avg_transit_time'], -100 / 3)
        self.assertAlmostEqual(change['late_orders'], -100.0)
        self.assertAlmostEqual(change['undelivered'], 100.0)
        # Percentage points, not a relative change
        self.assertAlmostEqual(change['sla_percent'], 50.0)

    def test_failure_returns_zeros(self):
        with self.assertLogs('analytics.aggregators.common', level='ERROR'):
            kpis = calculate_kpis(None, self.current_range, self.previous_range)

        self.assertEqual(kpis['order_count'], 0)
        self.assertEqual(kpis['period_change']['sla_percent'], 0.0)
