"""
Tests for the analytics report endpoint.
"""

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from accounts.models import Client
from billing.models import AdditionalServiceFee, Credit
from shipments.models import Shipment, ShipmentStatus
from .factories import aware

PERIOD = {'startDate': '2024-01-01', 'endDate': '2024-01-31'}


class AnalyticsReportApiTest(TestCase):

    def setUp(self):
        User = get_user_model()
        self.acme = Client.objects.create(company_name='Acme', short_code='ACM')
        self.zeta = Client.objects.create(company_name='Zeta', short_code='ZET')
        self.member = User.objects.create_user(username='member', password='pw', role='client')
        self.member.clients.add(self.acme)
        self.admin = User.objects.create_user(username='admin', password='pw', role='admin')
        self.api = APIClient()

        self._shipment(self.acme, 'S-1', 'A', aware(2024, 1, 5, 10), '10.00', delivered=True)
        self._shipment(self.acme, 'S-2', 'A', aware(2024, 1, 6, 10), '20.00', delivered=True)
        self._shipment(self.acme, 'S-3', 'B', aware(2024, 1, 7, 10), '30.00')
        self._shipment(self.acme, 'S-old', 'B', aware(2023, 12, 20, 10), '15.00', delivered=True)
        self._shipment(self.zeta, 'Z-1', 'C', aware(2024, 1, 5, 10), '99.00')

        AdditionalServiceFee.objects.create(
            client=self.acme, reference_id='AS-1', fee_type='Per Pick Fee',
            amount=Decimal('5.00'), transaction_date=aware(2024, 1, 8, 10),
        )
        Credit.objects.create(
            client=self.acme, reference_id='CR-1',
            amount=Decimal('2.00'), transaction_date=aware(2024, 1, 9, 10),
        )

    def _shipment(self, client, shipment_id, carrier, labelled, total, delivered=False):
        return Shipment.objects.create(
            client=client,
            shipment_id=shipment_id,
            order_id=f"ORD-{shipment_id}",
            carrier=carrier,
            state='NY',
            city='Brooklyn',
            status=ShipmentStatus.DELIVERED if delivered else ShipmentStatus.IN_TRANSIT,
            order_imported_at=labelled,
            label_created_at=labelled,
            delivered_at=labelled if delivered else None,
            base_charge=Decimal(total),
            total_charge=Decimal(total),
        )

    def _get(self, report, **params):
        return self.api.get(reverse('analytics-report', args=[report]), dict(PERIOD, **params))

    def test_requires_authentication(self):
        response = self._get('carriers')

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_unknown_report(self):
        self.api.force_authenticate(self.member)

        response = self._get('horoscope')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_bad_dates(self):
        self.api.force_authenticate(self.member)

        malformed = self._get('carriers', startDate='2024-13-01')
        reversed_range = self._get('carriers', startDate='2024-02-01', endDate='2024-01-01')

        self.assertEqual(malformed.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(reversed_range.status_code, status.HTTP_400_BAD_REQUEST)

    def test_foreign_client_denied(self):
        self.api.force_authenticate(self.member)

        response = self._get('carriers', clientId=str(self.zeta.id))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_carriers_scoped_to_client_and_period(self):
        self.api.force_authenticate(self.member)

        response = self._get('carriers')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['granularity'], 'daily')
        rows = {row['carrier']: row for row in response.data['data']}
        self.assertEqual(set(rows), {'A', 'B'})
        self.assertEqual(rows['A']['order_count'], 2)
        self.assertAlmostEqual(rows['A']['avg_cost'], 15.0)
        self.assertAlmostEqual(rows['B']['avg_cost'], 30.0)

    def test_admin_sees_all_clients(self):
        self.api.force_authenticate(self.admin)

        response = self._get('carriers', clientId='all')

        carriers = sorted(row['carrier'] for row in response.data['data'])
        self.assertEqual(carriers, ['A', 'B', 'C'])

    def test_kpis_compare_with_previous_period(self):
        self.api.force_authenticate(self.member)

        response = self._get('kpis')

        kpis = response.data['data']
        self.assertAlmostEqual(kpis['total_cost'], 60.0)
        self.assertEqual(kpis['order_count'], 3)
        self.assertEqual(kpis['undelivered'], 1)
        self.assertAlmostEqual(kpis['period_change']['order_count'], 200.0)

    def test_billing_categories_include_fees(self):
        self.api.force_authenticate(self.member)

        response = self._get('billing-categories')

        rows = {row['category']: row for row in response.data['data']}
        self.assertAlmostEqual(rows['Shipping']['amount'], 60.0)
        self.assertAlmostEqual(rows['D2C Extra Picks']['amount'], 5.0)
        self.assertAlmostEqual(rows['Credit']['amount'], -2.0)

    def test_volume_by_hour_always_has_24_rows(self):
        self.api.force_authenticate(self.member)

        response = self._get('volume-by-hour', startDate='2020-01-01', endDate='2020-01-02')

        self.assertEqual(len(response.data['data']), 24)

    def test_undelivered_ignores_period(self):
        self.api.force_authenticate(self.member)

        response = self._get('undelivered-summary', startDate='2020-01-01', endDate='2020-01-02')

        self.assertEqual(response.data['data']['total_undelivered'], 1)

    def test_city_volume_takes_state(self):
        self.api.force_authenticate(self.member)

        response = self._get('city-volume', state='ny')

        self.assertEqual(response.data['data'][0]['city'], 'Brooklyn')
        self.assertEqual(response.data['data'][0]['order_count'], 3)

    def test_preset_granularity(self):
        self.api.force_authenticate(self.member)

        response = self.api.get(reverse('analytics-report', args=['daily-volume']), {'preset': '1yr'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['granularity'], 'monthly')

    def test_city_volume_without_state_is_national(self):
        self.api.force_authenticate(self.member)

        response = self._get('city-volume')

        row = response.data['data'][0]
        self.assertEqual((row['city'], row['state'], row['order_count']), ('Brooklyn', 'NY', 3))
        self.assertIn('lat', row)
