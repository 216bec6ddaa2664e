"""
Tests for shipment status progression and import.
"""

from datetime import datetime, timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.utils import timezone

from accounts.models import Client
from ..exceptions import (
    ImmutableShipmentException, InvalidTransitionException, ValidationException,
)
from ..models import Shipment, ShipmentEvent, ShipmentStatus
from ..services import ShipmentImportService, ShipmentService, ShipmentWorkflow


def aware(*args):
    return timezone.make_aware(datetime(*args))


class ShipmentStatusTest(TestCase):
    """Test shipment lifecycle transitions."""

    def setUp(self):
        self.user = get_user_model().objects.create_user(
            username='ops', password='testpass123', role='admin'
        )
        self.client_record = Client.objects.create(company_name='Acme', short_code='ACM')

    def _shipment(self, status=ShipmentStatus.PROCESSING, **kwargs):
        return Shipment.objects.create(
            client=self.client_record,
            shipment_id=kwargs.pop('shipment_id', 'SH-1'),
            order_id='ORD-1',
            status=status,
            **kwargs
        )

    def test_allowed_transition_logs_event(self):
        shipment = self._shipment()

        updated = ShipmentService.update_status(str(shipment.id), ShipmentStatus.PICKED, updated_by=self.user)

        self.assertEqual(updated.status, ShipmentStatus.PICKED)
        event = ShipmentEvent.objects.get(shipment=shipment, action='status_changed')
        self.assertEqual(event.old_values['status'], ShipmentStatus.PROCESSING)
        self.assertEqual(event.new_values['status'], ShipmentStatus.PICKED)
        self.assertEqual(event.user, self.user)

    def test_invalid_transition_rejected(self):
        shipment = self._shipment()

        with self.assertRaises(InvalidTransitionException):
            ShipmentService.update_status(str(shipment.id), ShipmentStatus.DELIVERED)

        shipment.refresh_from_db()
        self.assertEqual(shipment.status, ShipmentStatus.PROCESSING)

    def test_delivered_shipment_is_immutable(self):
        shipment = self._shipment(status=ShipmentStatus.DELIVERED)

        with self.assertRaises(ImmutableShipmentException):
            ShipmentService.update_status(str(shipment.id), ShipmentStatus.EXCEPTION)

    def test_unknown_status(self):
        shipment = self._shipment()
        with self.assertRaises(ValidationException):
            ShipmentService.update_status(str(shipment.id), 'TELEPORTED')

    def test_labelling_stamps_timestamp(self):
        shipment = self._shipment(status=ShipmentStatus.PACKED)
        moment = aware(2024, 3, 4, 10, 0)

        updated = ShipmentService.update_status(str(shipment.id), ShipmentStatus.LABELED, occurred_at=moment)

        self.assertEqual(updated.label_created_at, moment)

    def test_delivery_computes_transit_time(self):
        shipment = self._shipment(
            status=ShipmentStatus.IN_TRANSIT,
            label_created_at=aware(2024, 3, 1, 12, 0),
        )

        updated = ShipmentService.update_status(
            str(shipment.id), ShipmentStatus.DELIVERED, occurred_at=aware(2024, 3, 4, 0, 0)
        )

        self.assertEqual(updated.transit_time_days, Decimal('2.50'))
        self.assertTrue(updated.is_delivered)

    def test_can_transition_to(self):
        shipment = self._shipment(status=ShipmentStatus.LABELED)
        self.assertTrue(ShipmentWorkflow.can_transition_to(shipment, ShipmentStatus.IN_TRANSIT))
        self.assertFalse(ShipmentWorkflow.can_transition_to(shipment, ShipmentStatus.PICKED))

    def test_timeline(self):
        shipment = self._shipment()
        ShipmentService.update_status(str(shipment.id), ShipmentStatus.PICKED, updated_by=self.user)

        timeline = ShipmentService.get_timeline(str(shipment.id))

        self.assertEqual(timeline['status'], ShipmentStatus.PICKED)
        self.assertEqual(len(timeline['events']), 1)
        self.assertEqual(timeline['events'][0]['user'], 'ops')


class ShipmentImportTest(TestCase):
    """Test shipment import upserts."""

    def setUp(self):
        self.client_record = Client.objects.create(company_name='Acme', short_code='ACM')
        self.other_client = Client.objects.create(company_name='Other', short_code='OTH')

    def _row(self, **overrides):
        row = {
            'shipment_id': 'SH-100',
            'order_id': 'ORD-100',
            'carrier': 'UPS',
            'status': 'in transit',
            'base_charge': '8.50',
            'surcharge': '1.25',
            'state': 'ny',
            'label_created_at': '2024-03-01T10:00:00',
        }
        row.update(overrides)
        return row

    def test_creates_shipment(self):
        result = ShipmentImportService.import_shipments(self.client_record, [self._row()])

        self.assertEqual(result['created'], 1)
        shipment = Shipment.objects.get(shipment_id='SH-100')
        self.assertEqual(shipment.status, ShipmentStatus.IN_TRANSIT)
        self.assertEqual(shipment.state, 'NY')
        # Total defaults to base plus surcharge
        self.assertEqual(shipment.total_charge, Decimal('9.75'))
        self.assertTrue(timezone.is_aware(shipment.label_created_at))

    def test_updates_existing_following_workflow(self):
        ShipmentImportService.import_shipments(self.client_record, [self._row()])

        result = ShipmentImportService.import_shipments(self.client_record, [
            self._row(status='DELIVERED', delivered_at='2024-03-03T10:00:00'),
        ])

        self.assertEqual(result['updated'], 1)
        shipment = Shipment.objects.get(shipment_id='SH-100')
        self.assertEqual(shipment.status, ShipmentStatus.DELIVERED)
        self.assertEqual(shipment.transit_time_days, Decimal('2.00'))

    def test_rejected_rows_are_reported(self):
        ShipmentImportService.import_shipments(self.client_record, [self._row()])

        result = ShipmentImportService.import_shipments(self.client_record, [
            {'order_id': 'missing id'},
            self._row(status='PROCESSING'),
            self._row(base_charge='abc', shipment_id='SH-200'),
        ])

        self.assertEqual(result['skipped'], 3)
        codes = [error['code'] for error in result['errors']]
        self.assertEqual(codes, ['VALIDATION_ERROR', 'INVALID_TRANSITION', 'VALIDATION_ERROR'])

    def test_bad_quantity_skips_only_that_row(self):
        result = ShipmentImportService.import_shipments(self.client_record, [
            self._row(total_quantity=2),
            self._row(shipment_id='SH-200', total_quantity='two'),
        ])

        self.assertEqual(result['created'], 1)
        self.assertEqual(result['skipped'], 1)
        self.assertEqual(result['errors'][0]['row'], 1)
        self.assertIn('Invalid quantity', result['errors'][0]['message'])
        self.assertEqual(Shipment.objects.get(shipment_id='SH-100').total_quantity, 2)
        self.assertFalse(Shipment.objects.filter(shipment_id='SH-200').exists())

    def test_other_clients_shipment_untouched(self):
        ShipmentImportService.import_shipments(self.client_record, [self._row()])

        result = ShipmentImportService.import_shipments(self.other_client, [self._row(carrier='FedEx')])

        self.assertEqual(result['errors'][0]['code'], 'CLIENT_MISMATCH')
        self.assertEqual(Shipment.objects.get(shipment_id='SH-100').carrier, 'UPS')

    def test_delivered_shipments_not_modified(self):
        ShipmentImportService.import_shipments(self.client_record, [
            self._row(status='DELIVERED', delivered_at='2024-03-03T10:00:00'),
        ])
        delivered_at = Shipment.objects.get(shipment_id='SH-100').delivered_at

        result = ShipmentImportService.import_shipments(self.client_record, [
            self._row(status='DELIVERED', delivered_at=(delivered_at + timedelta(days=1)).isoformat()),
        ])

        self.assertEqual(result['errors'][0]['code'], 'SHIPMENT_DELIVERED')
        self.assertEqual(Shipment.objects.get(shipment_id='SH-100').delivered_at, delivered_at)
