"""
Claim eligibility for shipments.

Lost in transit claims need enough carrier silence since the label was
created; every other claim type needs the package to have been delivered.
"""

from django.utils import timezone

from tables.badges import ClaimEligibilityState

LOST_IN_TRANSIT_DOMESTIC_DAYS = 15
LOST_IN_TRANSIT_INTERNATIONAL_DAYS = 20

CLAIM_TYPES = {
    'lost_in_transit': 'Lost in Transit',
    'damage': 'Damage',
    'incorrect_items': 'Incorrect Items',
    'incorrect_quantity': 'Incorrect Quantity',
}

# Issue type stored with a submitted claim
CLAIM_ISSUE_TYPES = {
    'lost_in_transit': 'Loss',
    'damage': 'Damage',
    'incorrect_items': 'Pick Error',
    'incorrect_quantity': 'Short Ship',
}


def _plural(count, word):
    return f"{count} {word}{'' if count == 1 else 's'}"


def _days_since(moment, now):
    if moment is None:
        return None
    return int((now - moment).total_seconds() // 86400)


def last_tracking_update(shipment):
    """Most recent carrier scan, falling back from out-for-delivery to in-transit."""
    return shipment.out_for_delivery_at or shipment.in_transit_at


def lost_in_transit_eligibility(shipment, now):
    if shipment.is_delivered:
        return {
            'eligible': False,
            'reason': 'Package has been delivered. Lost in Transit claims are not applicable.',
        }

    required_days = (
        LOST_IN_TRANSIT_INTERNATIONAL_DAYS if shipment.is_international
        else LOST_IN_TRANSIT_DOMESTIC_DAYS
    )
    days_since_label = _days_since(shipment.label_created_at, now)
    if days_since_label is None:
        return {
            'eligible': False,
            'reason': 'No label date available to determine eligibility.',
        }

    if days_since_label < required_days:
        remaining = required_days - days_since_label
        kind = 'international' if shipment.is_international else 'domestic'
        return {
            'eligible': False,
            'reason': (
                f"Lost in Transit claims for {kind} shipments require {required_days} days "
                f"of carrier inactivity. This shipment was labeled "
                f"{_plural(days_since_label, 'day')} ago. "
                f"Please check back in {_plural(remaining, 'day')}."
            ),
            'days_remaining': remaining,
        }

    # Old enough to qualify; carrier inactivity still has to be confirmed
    return {'eligible': True, 'requires_verification': True}


def delivery_required_eligibility(shipment, claim_label):
    if shipment.is_delivered:
        return {'eligible': True}
    return {
        'eligible': False,
        'reason': f"{claim_label} claims can only be submitted after the package has been delivered.",
    }


def calculate_claim_eligibility(shipment, now=None):
    """
    Eligibility of a shipment for each claim type.

    Args:
        shipment: Shipment instance
        now: Reference time, defaults to the current time

    Returns:
        Dict with delivery/international flags, the last tracking update and
        one eligibility entry per claim type
    """
    now = now or timezone.now()
    last_update = last_tracking_update(shipment)

    eligibility = {
        'lost_in_transit': lost_in_transit_eligibility(shipment, now),
    }
    for claim_type in ('damage', 'incorrect_items', 'incorrect_quantity'):
        eligibility[claim_type] = delivery_required_eligibility(shipment, CLAIM_TYPES[claim_type])
    for claim_type, entry in eligibility.items():
        entry['issue_type'] = CLAIM_ISSUE_TYPES[claim_type]

    return {
        'shipment_id': shipment.shipment_id,
        'is_delivered': shipment.is_delivered,
        'is_international': shipment.is_international,
        'last_tracking_update': last_update,
        'days_since_last_update': _days_since(last_update, now),
        'eligibility': eligibility,
    }


def claim_state_for(result):
    """Badge state for the lost in transit column of an eligibility result."""
    lost = result['eligibility']['lost_in_transit']
    if lost['eligible']:
        if lost.get('requires_verification'):
            return ClaimEligibilityState.NEEDS_VERIFICATION
        return ClaimEligibilityState.ELIGIBLE
    if result['is_delivered']:
        return ClaimEligibilityState.DELIVERED_ONLY
    if lost.get('days_remaining'):
        return ClaimEligibilityState.TOO_EARLY
    return ClaimEligibilityState.NOT_ELIGIBLE
