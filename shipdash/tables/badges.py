"""
Status badges shown in the transaction tables.

Each entity has one enumerated status type and an exhaustive mapping from
every member to its presentation.
"""

from typing import NamedTuple, Optional

from django.db import models

from billing.models import BillingStatus
from shipments.models import ShipmentStatus


class Badge(NamedTuple):
    tone: str
    icon: str
    label: str

    @property
    def css_class(self):
        return TONE_CLASSES[self.tone]


TONE_CLASSES = {
    'emerald': 'bg-emerald-100/50 text-emerald-900 border-emerald-200/50',
    'orange': 'bg-orange-100/60 text-orange-900 border-orange-200/60',
    'blue': 'bg-blue-100/50 text-blue-900 border-blue-200/50',
    'violet': 'bg-violet-100/50 text-violet-900 border-violet-200/50',
    'indigo': 'bg-indigo-100/50 text-indigo-900 border-indigo-200/50',
    'cyan': 'bg-cyan-100/50 text-cyan-900 border-cyan-200/50',
    'sky': 'bg-sky-100/50 text-sky-900 border-sky-200/50',
    'slate': 'bg-slate-100/50 text-slate-900 border-slate-200/50',
    'amber': 'bg-amber-100/50 text-amber-900 border-amber-200/50',
    'red': 'bg-red-100/50 text-red-900 border-red-200/50',
}


class DisplayStatus(models.TextChoices):
    """Status a shipment is shown with, merging lifecycle and carrier tracking."""
    DELIVERED = 'Delivered', 'Delivered'
    OUT_FOR_DELIVERY = 'Out for Delivery', 'Out for Delivery'
    IN_TRANSIT = 'In Transit', 'In Transit'
    SHIPPED = 'Shipped', 'Shipped'
    AWAITING_CARRIER = 'Awaiting Carrier', 'Awaiting Carrier'
    LABELLED = 'Labelled', 'Labelled'
    PACKED = 'Packed', 'Packed'
    PICKED = 'Picked', 'Picked'
    PICK_IN_PROGRESS = 'Pick In-Progress', 'Pick In-Progress'
    AWAITING_PICK = 'Awaiting Pick', 'Awaiting Pick'
    PROCESSING = 'Processing', 'Processing'
    IMPORT_REVIEW = 'Import Review', 'Import Review'
    ON_HOLD = 'On Hold', 'On Hold'
    OUT_OF_STOCK = 'Out of Stock', 'Out of Stock'
    EXCEPTION = 'Exception', 'Exception'
    DELIVERY_ATTEMPTED = 'Delivery Attempted', 'Delivery Attempted'
    ACTION_REQUIRED = 'Action Required', 'Action Required'
    CANCELLED = 'Cancelled', 'Cancelled'
    REFUNDED = 'Refunded', 'Refunded'


DISPLAY_STATUS_BADGES = {
    DisplayStatus.DELIVERED: Badge('emerald', 'check-circle-2', 'Delivered'),
    DisplayStatus.OUT_FOR_DELIVERY: Badge('orange', 'door-open', 'Out for Delivery'),
    DisplayStatus.IN_TRANSIT: Badge('orange', 'truck', 'In Transit'),
    DisplayStatus.SHIPPED: Badge('blue', 'package', 'Shipped'),
    DisplayStatus.AWAITING_CARRIER: Badge('blue', 'inbox', 'Awaiting Carrier'),
    DisplayStatus.LABELLED: Badge('violet', 'tag', 'Labelled'),
    DisplayStatus.PACKED: Badge('indigo', 'box', 'Packed'),
    DisplayStatus.PICKED: Badge('cyan', 'check-circle', 'Picked'),
    DisplayStatus.PICK_IN_PROGRESS: Badge('sky', 'hand', 'Pick In-Progress'),
    DisplayStatus.AWAITING_PICK: Badge('slate', 'clock', 'Awaiting Pick'),
    DisplayStatus.PROCESSING: Badge('slate', 'clock', 'Processing'),
    DisplayStatus.IMPORT_REVIEW: Badge('amber', 'eye', 'Import Review'),
    DisplayStatus.ON_HOLD: Badge('amber', 'alert-circle', 'On Hold'),
    DisplayStatus.OUT_OF_STOCK: Badge('amber', 'alert-circle', 'Out of Stock'),
    DisplayStatus.EXCEPTION: Badge('red', 'alert-circle', 'Exception'),
    DisplayStatus.DELIVERY_ATTEMPTED: Badge('red', 'alert-circle', 'Delivery Attempted'),
    DisplayStatus.ACTION_REQUIRED: Badge('red', 'alert-circle', 'Action Required'),
    DisplayStatus.CANCELLED: Badge('red', 'alert-circle', 'Cancelled'),
    DisplayStatus.REFUNDED: Badge('red', 'rotate-ccw', 'Refunded'),
}

LIFECYCLE_DISPLAY_STATUS = {
    ShipmentStatus.PROCESSING: DisplayStatus.PROCESSING,
    ShipmentStatus.PICKED: DisplayStatus.PICKED,
    ShipmentStatus.PACKED: DisplayStatus.PACKED,
    ShipmentStatus.LABELED: DisplayStatus.LABELLED,
    ShipmentStatus.AWAITING_CARRIER: DisplayStatus.AWAITING_CARRIER,
    ShipmentStatus.IN_TRANSIT: DisplayStatus.IN_TRANSIT,
    ShipmentStatus.OUT_FOR_DELIVERY: DisplayStatus.OUT_FOR_DELIVERY,
    ShipmentStatus.DELIVERED: DisplayStatus.DELIVERED,
    ShipmentStatus.EXCEPTION: DisplayStatus.EXCEPTION,
    ShipmentStatus.ON_HOLD: DisplayStatus.ON_HOLD,
    ShipmentStatus.OUT_OF_STOCK: DisplayStatus.OUT_OF_STOCK,
    ShipmentStatus.CANCELLED: DisplayStatus.CANCELLED,
}


def display_status_for(shipment_status: str, tracking_status: Optional[str] = None) -> DisplayStatus:
    """
    Display status for a shipment.

    A carrier tracking status wins when it names a known display status;
    otherwise the lifecycle status decides.
    """
    if tracking_status and tracking_status in DisplayStatus.values:
        return DisplayStatus(tracking_status)
    return LIFECYCLE_DISPLAY_STATUS[ShipmentStatus(shipment_status)]


def shipment_badge(shipment_status: str, tracking_status: Optional[str] = None) -> Badge:
    return DISPLAY_STATUS_BADGES[display_status_for(shipment_status, tracking_status)]


BILLING_STATUS_BADGES = {
    BillingStatus.INVOICED: Badge('emerald', 'check-circle-2', 'Invoiced'),
    BillingStatus.PENDING: Badge('amber', 'clock', 'Pending'),
    BillingStatus.CREDITED: Badge('blue', 'rotate-ccw', 'Credited'),
}


def billing_badge(status: str) -> Badge:
    return BILLING_STATUS_BADGES[BillingStatus((status or '').lower())]


class ReturnStatus(models.TextChoices):
    COMPLETED = 'completed', 'Completed'
    PROCESSED = 'processed', 'Processed'
    IN_TRANSIT = 'in transit', 'In Transit'
    PROCESSING = 'processing', 'Processing'
    PENDING = 'pending', 'Pending'
    AWAITING = 'awaiting', 'Awaiting'
    UNKNOWN = 'unknown', 'Unknown'


RETURN_STATUS_BADGES = {
    ReturnStatus.COMPLETED: Badge('emerald', 'check-circle-2', 'Completed'),
    ReturnStatus.PROCESSED: Badge('emerald', 'check-circle-2', 'Processed'),
    ReturnStatus.IN_TRANSIT: Badge('blue', 'truck', 'In Transit'),
    ReturnStatus.PROCESSING: Badge('blue', 'loader', 'Processing'),
    ReturnStatus.PENDING: Badge('amber', 'clock', 'Pending'),
    ReturnStatus.AWAITING: Badge('amber', 'clock', 'Awaiting'),
    ReturnStatus.UNKNOWN: Badge('slate', 'loader', 'Unknown'),
}


def return_status_for(raw_status: Optional[str]) -> ReturnStatus:
    value = (raw_status or '').strip().lower()
    if value in ReturnStatus.values:
        return ReturnStatus(value)
    return ReturnStatus.UNKNOWN


def return_badge(raw_status: Optional[str]) -> Badge:
    badge = RETURN_STATUS_BADGES[return_status_for(raw_status)]
    if badge.tone == 'slate' and raw_status:
        # Unrecognised carrier wording is still shown as-is
        return badge._replace(label=raw_status)
    return badge


class ClaimEligibilityState(models.TextChoices):
    ELIGIBLE = 'eligible', 'Eligible'
    NEEDS_VERIFICATION = 'needs_verification', 'Needs Verification'
    TOO_EARLY = 'too_early', 'Too Early'
    DELIVERED_ONLY = 'delivered_only', 'Delivered'
    NOT_ELIGIBLE = 'not_eligible', 'Not Eligible'


CLAIM_STATE_BADGES = {
    ClaimEligibilityState.ELIGIBLE: Badge('emerald', 'check-circle-2', 'File Claim'),
    ClaimEligibilityState.NEEDS_VERIFICATION: Badge('amber', 'eye', 'Verify & File'),
    ClaimEligibilityState.TOO_EARLY: Badge('slate', 'clock', 'Too Early'),
    ClaimEligibilityState.DELIVERED_ONLY: Badge('blue', 'package', 'Delivered'),
    ClaimEligibilityState.NOT_ELIGIBLE: Badge('slate', 'alert-circle', 'Not Eligible'),
}
