"""
Tests for the shipment query endpoint.
"""

import csv
import io
from datetime import datetime, timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from accounts.models import Client
from ..models import Shipment, ShipmentStatus


def aware(*args):
    return timezone.make_aware(datetime(*args))


class ShipmentQueryApiTest(TestCase):
    """Test listing, filtering, paging and exporting shipments."""

    def setUp(self):
        User = get_user_model()
        self.acme = Client.objects.create(company_name='Acme', short_code='ACM')
        self.zeta = Client.objects.create(company_name='Zeta', short_code='ZET')

        self.admin = User.objects.create_user(username='admin', password='pw', role='admin')
        self.member = User.objects.create_user(username='member', password='pw', role='client')
        self.member.clients.add(self.acme)

        self.api = APIClient()
        self.url = reverse('shipment-list')

        self._shipment(self.acme, 'A-1', 'UPS', ShipmentStatus.IN_TRANSIT, aware(2024, 3, 1, 9), customer_name='Jane Roe')
        self._shipment(self.acme, 'A-2', 'UPS', ShipmentStatus.DELIVERED, aware(2024, 3, 2, 9))
        self._shipment(self.acme, 'A-3', 'FedEx', ShipmentStatus.EXCEPTION, aware(2024, 3, 3, 23, 30))
        self._shipment(self.acme, 'A-4', 'USPS', ShipmentStatus.IN_TRANSIT, aware(2024, 3, 5, 9))
        self._shipment(self.zeta, 'Z-1', 'DHL', ShipmentStatus.IN_TRANSIT, aware(2024, 3, 1, 9))

    def _shipment(self, client, shipment_id, carrier, status_value, labelled, **kwargs):
        return Shipment.objects.create(
            client=client,
            shipment_id=shipment_id,
            order_id=f"ORD-{shipment_id}",
            carrier=carrier,
            status=status_value,
            label_created_at=labelled,
            total_charge=Decimal('10.00'),
            **kwargs
        )

    def _ids(self, response):
        return [row['shipment_id'] for row in response.data['data']]

    def test_requires_authentication(self):
        response = self.api.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_client_user_cannot_query_other_client(self):
        self.api.force_authenticate(self.member)

        response = self.api.get(self.url, {'clientId': str(self.zeta.id)})

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertIn('detail', response.data)

    def test_client_user_defaults_to_own_client(self):
        self.api.force_authenticate(self.member)

        response = self.api.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['totalCount'], 4)
        self.assertFalse(response.data['hasMore'])
        self.assertEqual(response.data['carriers'], ['FedEx', 'UPS', 'USPS'])

    def test_admin_sees_all_clients(self):
        self.api.force_authenticate(self.admin)

        response = self.api.get(self.url)

        self.assertEqual(response.data['totalCount'], 5)
        self.assertIn('DHL', response.data['carriers'])

    def test_status_and_carrier_filters(self):
        self.api.force_authenticate(self.member)

        response = self.api.get(self.url, {'status': 'in_transit,exception', 'carrier': 'UPS,FedEx'})

        self.assertEqual(sorted(self._ids(response)), ['A-1', 'A-3'])

    def test_date_range_is_inclusive(self):
        self.api.force_authenticate(self.member)

        response = self.api.get(self.url, {'startDate': '2024-03-02', 'endDate': '2024-03-03'})

        self.assertEqual(sorted(self._ids(response)), ['A-2', 'A-3'])

    def test_search(self):
        self.api.force_authenticate(self.member)

        response = self.api.get(self.url, {'search': 'jane'})

        self.assertEqual(self._ids(response), ['A-1'])

    def test_sort_direction(self):
        self.api.force_authenticate(self.member)

        ascending = self.api.get(self.url, {'sortField': 'labelCreated', 'sortDirection': 'asc'})
        descending = self.api.get(self.url, {'sortField': 'label_created_at'})

        self.assertEqual(self._ids(ascending), ['A-1', 'A-2', 'A-3', 'A-4'])
        self.assertEqual(self._ids(descending), ['A-4', 'A-3', 'A-2', 'A-1'])

    def test_pagination_is_stable_with_ties(self):
        tie = aware(2024, 4, 1, 12)
        for index in range(7):
            self._shipment(self.acme, f"T-{index}", 'UPS', ShipmentStatus.IN_TRANSIT, tie)
        self.api.force_authenticate(self.member)
        params = {'sortField': 'labelCreated', 'startDate': '2024-04-01'}

        everything = self._ids(self.api.get(self.url, dict(params, limit=7)))
        paged = []
        for offset in (0, 3, 6):
            response = self.api.get(self.url, dict(params, limit=3, offset=offset))
            paged.extend(self._ids(response))

        self.assertEqual(len(everything), 7)
        self.assertEqual(paged, everything)

    def test_has_more(self):
        self.api.force_authenticate(self.member)

        response = self.api.get(self.url, {'limit': 2, 'offset': 0})

        self.assertTrue(response.data['hasMore'])
        self.assertEqual(len(response.data['data']), 2)

    def test_csv_export(self):
        self.api.force_authenticate(self.member)

        response = self.api.get(reverse('shipment-export'), {'format': 'csv', 'carrier': 'UPS'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'text/csv')
        rows = list(csv.reader(io.StringIO(response.content.decode())))
        self.assertEqual(rows[0][:4], ['Client', 'Customer Name', 'Channel', 'Shipment ID'])
        self.assertEqual(len(rows), 3)
        self.assertIn('$10.00', rows[1])

    def test_xlsx_export_page_scope(self):
        self.api.force_authenticate(self.member)

        response = self.api.get(reverse('shipment-export'), {'format': 'xlsx', 'scope': 'page', 'limit': 1})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('spreadsheetml', response['Content-Type'])
        self.assertTrue(response.content.startswith(b'PK'))

    def test_status_update_requires_admin_or_care(self):
        shipment = Shipment.objects.get(shipment_id='A-1')
        url = reverse('shipment-update-status', args=[shipment.id])

        self.api.force_authenticate(self.member)
        denied = self.api.post(url, {'status': ShipmentStatus.DELIVERED}, format='json')
        self.assertEqual(denied.status_code, status.HTTP_403_FORBIDDEN)

        self.api.force_authenticate(self.admin)
        allowed = self.api.post(url, {'status': ShipmentStatus.DELIVERED}, format='json')
        self.assertEqual(allowed.status_code, status.HTTP_200_OK)
        self.assertTrue(allowed.data['success'])
        self.assertEqual(allowed.data['data']['status'], ShipmentStatus.DELIVERED)

    def test_invalid_status_update_returns_error_envelope(self):
        shipment = Shipment.objects.get(shipment_id='A-2')
        self.api.force_authenticate(self.admin)

        response = self.api.post(
            reverse('shipment-update-status', args=[shipment.id]),
            {'status': ShipmentStatus.IN_TRANSIT},
            format='json',
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data['success'])
        self.assertEqual(response.data['error']['code'], 'SHIPMENT_DELIVERED')

    def test_claim_eligibility_endpoint(self):
        shipment = Shipment.objects.get(shipment_id='A-1')
        shipment.label_created_at = timezone.now() - timedelta(days=3)
        shipment.save()
        self.api.force_authenticate(self.member)

        response = self.api.get(reverse('shipment-claim-eligibility', args=[shipment.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['lost_in_transit_state'], 'too_early')

    def test_detail_of_other_client_forbidden(self):
        shipment = Shipment.objects.get(shipment_id='Z-1')
        self.api.force_authenticate(self.member)

        response = self.api.get(reverse('shipment-detail', args=[shipment.id]))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
