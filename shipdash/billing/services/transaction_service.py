"""
Billing transaction lifecycle and import.
"""

import logging
from typing import Dict, Any, List
from django.db import transaction

from shipments.exceptions import ValidationException
from shipments.services.import_service import parse_decimal, parse_timestamp
from ..models import BillingStatus, TRANSACTION_FAMILIES
from .workflow import validate_billing_workflow

logger = logging.getLogger(__name__)

# Family-specific text columns accepted on import
FAMILY_FIELDS = {
    'additional-services': ('fee_type',),
    'receiving': ('fee_type', 'wro_id', 'receiving_status', 'contents'),
    'storage': ('fc_name', 'inventory_id', 'location_type', 'comment'),
    'credits': ('credit_reason', 'ticket_reference'),
    'returns': (
        'return_id', 'original_shipment_id', 'tracking_number',
        'return_status', 'return_type', 'fc_name',
    ),
}


def get_family_model(family: str):
    try:
        return TRANSACTION_FAMILIES[family]
    except KeyError:
        raise ValidationException(f"Unknown transaction family: {family}", {'family': family})


class TransactionService:
    """Service class for billing transaction state changes."""

    @staticmethod
    def mark_credited(model, pk, user=None):
        """
        Credit an invoiced transaction.

        Raises:
            BusinessException: If the transaction is not invoiced
        """
        with transaction.atomic():
            record = model.objects.select_for_update().get(pk=pk)
            validate_billing_workflow(record, BillingStatus.CREDITED)
            record.status = BillingStatus.CREDITED
            record.save(update_fields=['status', 'updated_at'])

        logger.info(
            f"{model.__name__} {record.reference_id} credited"
            f"{f' by {user.username}' if user else ''}"
        )
        return record

    @staticmethod
    def mark_invoiced(records, invoice):
        """Move pending transactions onto an invoice; runs in the caller's transaction."""
        count = 0
        for record in records:
            validate_billing_workflow(record, BillingStatus.INVOICED)
            record.status = BillingStatus.INVOICED
            record.invoice = invoice
            record.save(update_fields=['status', 'invoice', 'updated_at'])
            count += 1
        return count


class BillingImportService:
    """Creates pending billing transactions from fulfillment-system exports."""

    @staticmethod
    def import_transactions(client, family: str, rows: List[Dict[str, Any]]) -> Dict[str, Any]:
        """
        Import fee rows for one transaction family.

        Rows whose reference id already exists for the client are skipped.

        Returns:
            Counts of created and skipped rows plus per-row errors
        """
        model = get_family_model(family)
        result = {'created': 0, 'skipped': 0, 'errors': []}

        with transaction.atomic():
            existing = set(
                model.objects.filter(client=client).values_list('reference_id', flat=True)
            )
            for index, row in enumerate(rows):
                reference_id = str(row.get('reference_id') or '').strip()
                try:
                    if not reference_id:
                        raise ValidationException("reference_id is required", {'reference_id': 'missing'})
                    amount = parse_decimal(row.get('amount'), 'amount')
                    if amount is None:
                        raise ValidationException("amount is required", {'amount': 'missing'})
                    transaction_date = parse_timestamp(row.get('transaction_date'))
                except ValidationException as e:
                    result['skipped'] += 1
                    result['errors'].append({'row': index, 'code': e.code, 'message': e.message})
                    continue

                if reference_id in existing:
                    result['skipped'] += 1
                    continue

                values = {
                    field: str(row[field]).strip()
                    for field in FAMILY_FIELDS[family]
                    if row.get(field) is not None
                }
                if transaction_date is not None:
                    values['transaction_date'] = transaction_date

                model.objects.create(client=client, reference_id=reference_id, amount=amount, **values)
                existing.add(reference_id)
                result['created'] += 1

        logger.info(
            f"Imported {family} for {client.short_code}: "
            f"{result['created']} created, {result['skipped']} skipped"
        )
        return result
