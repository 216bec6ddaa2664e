"""
Tests for billing transaction import, crediting and query endpoints.
"""

from datetime import datetime
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from accounts.models import Client
from shipments.exceptions import InvalidTransitionException, ValidationException
from ..models import AdditionalServiceFee, BillingStatus, Credit, ReturnFee
from ..services import BillingImportService, TransactionService, get_family_model


def aware(*args):
    return timezone.make_aware(datetime(*args))


class BillingImportTest(TestCase):

    def setUp(self):
        self.client_record = Client.objects.create(company_name='Acme', short_code='ACM')

    def test_imports_rows(self):
        result = BillingImportService.import_transactions(self.client_record, 'returns', [
            {
                'reference_id': 'RT-1', 'amount': '4.5', 'transaction_date': '2024-03-05',
                'return_id': 'R-77', 'return_type': 'Regular', 'tracking_number': '1Z999',
            },
        ])

        self.assertEqual(result['created'], 1)
        fee = ReturnFee.objects.get(reference_id='RT-1')
        self.assertEqual(fee.amount, Decimal('4.50'))
        self.assertEqual(fee.return_id, 'R-77')
        self.assertEqual(fee.status, BillingStatus.PENDING)
        self.assertEqual(timezone.localtime(fee.transaction_date).date().isoformat(), '2024-03-05')

    def test_duplicates_and_bad_rows_skipped(self):
        BillingImportService.import_transactions(self.client_record, 'credits', [
            {'reference_id': 'CR-1', 'amount': '10'},
        ])

        result = BillingImportService.import_transactions(self.client_record, 'credits', [
            {'reference_id': 'CR-1', 'amount': '10'},
            {'reference_id': '', 'amount': '1'},
            {'reference_id': 'CR-2'},
            {'reference_id': 'CR-3', 'amount': '2', 'transaction_date': 'yesterday'},
        ])

        self.assertEqual(result['created'], 0)
        self.assertEqual(result['skipped'], 4)
        self.assertEqual(len(result['errors']), 3)
        self.assertEqual(Credit.objects.count(), 1)

    def test_unknown_family(self):
        with self.assertRaises(ValidationException):
            get_family_model('postage')


class TransactionLifecycleTest(TestCase):

    def setUp(self):
        self.client_record = Client.objects.create(company_name='Acme', short_code='ACM')
        self.fee = AdditionalServiceFee.objects.create(
            client=self.client_record, reference_id='AS-1', fee_type='Kitting Fee', amount=Decimal('3.00'),
        )

    def test_pending_fee_cannot_be_credited(self):
        with self.assertRaises(InvalidTransitionException):
            TransactionService.mark_credited(AdditionalServiceFee, self.fee.pk)

    def test_invoiced_fee_can_be_credited_once(self):
        self.fee.status = BillingStatus.INVOICED
        self.fee.save()

        credited = TransactionService.mark_credited(AdditionalServiceFee, self.fee.pk)

        self.assertEqual(credited.status, BillingStatus.CREDITED)
        with self.assertRaises(InvalidTransitionException):
            TransactionService.mark_credited(AdditionalServiceFee, self.fee.pk)


class BillingQueryApiTest(TestCase):
    """Test the billing family query endpoints."""

    def setUp(self):
        User = get_user_model()
        self.acme = Client.objects.create(company_name='Acme', short_code='ACM')
        self.zeta = Client.objects.create(company_name='Zeta', short_code='ZET')
        self.admin = User.objects.create_user(username='admin', password='pw', role='admin')
        self.member = User.objects.create_user(username='member', password='pw', role='client')
        self.member.clients.add(self.acme)
        self.api = APIClient()

        self.pick = AdditionalServiceFee.objects.create(
            client=self.acme, reference_id='AS-1', fee_type='Per Pick Fee',
            amount=Decimal('0.35'), transaction_date=aware(2024, 3, 1, 10),
        )
        self.kitting = AdditionalServiceFee.objects.create(
            client=self.acme, reference_id='AS-2', fee_type='Kitting Fee',
            amount=Decimal('12.00'), transaction_date=aware(2024, 3, 2, 10),
            status=BillingStatus.INVOICED,
        )
        AdditionalServiceFee.objects.create(
            client=self.zeta, reference_id='AS-3', fee_type='Kitting Fee',
            amount=Decimal('9.00'), transaction_date=aware(2024, 3, 2, 10),
        )

    def _refs(self, response):
        return sorted(row['reference_id'] for row in response.data['data'])

    def test_lists_own_client_fees(self):
        self.api.force_authenticate(self.member)

        response = self.api.get(reverse('additional-service-list'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['totalCount'], 2)
        self.assertEqual(self._refs(response), ['AS-1', 'AS-2'])
        self.assertNotIn('carriers', response.data)

    def test_type_status_and_date_filters(self):
        self.api.force_authenticate(self.member)
        url = reverse('additional-service-list')

        by_type = self.api.get(url, {'type': 'Kitting Fee'})
        by_status = self.api.get(url, {'status': 'PENDING'})
        by_date = self.api.get(url, {'startDate': '2024-03-01', 'endDate': '2024-03-01'})

        self.assertEqual(self._refs(by_type), ['AS-2'])
        self.assertEqual(self._refs(by_status), ['AS-1'])
        self.assertEqual(self._refs(by_date), ['AS-1'])

    def test_sort_by_amount(self):
        self.api.force_authenticate(self.admin)

        response = self.api.get(reverse('additional-service-list'), {'sortField': 'amount', 'sortDirection': 'asc'})

        amounts = [Decimal(row['amount']) for row in response.data['data']]
        self.assertEqual(amounts, sorted(amounts))

    def test_credit_action(self):
        url = reverse('additional-service-credit', args=[self.kitting.pk])

        self.api.force_authenticate(self.member)
        self.assertEqual(self.api.post(url).status_code, status.HTTP_403_FORBIDDEN)

        self.api.force_authenticate(self.admin)
        response = self.api.post(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['status'], BillingStatus.CREDITED)

    def test_credit_pending_fee_returns_error_envelope(self):
        self.api.force_authenticate(self.admin)

        response = self.api.post(reverse('additional-service-credit', args=[self.pick.pk]))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['code'], 'INVALID_TRANSITION')

    def test_csv_export(self):
        self.api.force_authenticate(self.member)

        response = self.api.get(reverse('additional-service-export'), {'format': 'csv'})

        lines = response.content.decode().strip().splitlines()
        self.assertEqual(lines[0].split(',')[:2], ['Reference ID', 'Fee Type'])
        self.assertEqual(len(lines), 3)
