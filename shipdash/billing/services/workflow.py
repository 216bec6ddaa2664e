"""
Workflow rules for billing transactions.
"""

from shipments.exceptions import InvalidTransitionException
from ..models import BillingStatus


class BillingWorkflow:
    """Pending fees are invoiced once; invoiced fees may be credited once."""

    ALLOWED_TRANSITIONS = {
        BillingStatus.PENDING: [BillingStatus.INVOICED],
        BillingStatus.INVOICED: [BillingStatus.CREDITED],
        BillingStatus.CREDITED: [],  # Final state
    }

    @classmethod
    def validate_transition(cls, transaction, new_status: str) -> None:
        current_status = transaction.status
        if new_status not in cls.ALLOWED_TRANSITIONS.get(current_status, []):
            raise InvalidTransitionException(
                current_status=current_status,
                attempted_status=new_status,
                entity_type=transaction.__class__.__name__
            )


def validate_billing_workflow(transaction, new_status: str) -> None:
    BillingWorkflow.validate_transition(transaction, new_status)
