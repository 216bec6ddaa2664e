"""
Audit trail for shipment lifecycle changes.
"""

import uuid
from decimal import Decimal
from django.db import models
from django.conf import settings
from django.utils import timezone


class ShipmentEvent(models.Model):
    """
    One change to a shipment: a status step, an import update or invoice linkage.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    shipment = models.ForeignKey(
        'Shipment',
        on_delete=models.CASCADE,
        related_name='events'
    )
    action = models.CharField(
        max_length=50,
        help_text="Action performed (imported, status_changed, invoiced, etc.)"
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='shipment_events',
        help_text="User who performed the action"
    )
    old_values = models.JSONField(default=dict, blank=True)
    new_values = models.JSONField(default=dict, blank=True)
    timestamp = models.DateTimeField(default=timezone.now)
    notes = models.TextField(blank=True)

    class Meta:
        ordering = ['-timestamp']
        indexes = [
            models.Index(fields=['shipment', '-timestamp']),
            models.Index(fields=['action', '-timestamp']),
        ]

    def __str__(self):
        return f"{self.shipment_id} - {self.action} by {self.user} at {self.timestamp}"

    @classmethod
    def log_change(cls, shipment, action: str, user=None, old_values=None,
                   new_values=None, notes=""):
        """
        Create an event entry for a shipment change.

        Args:
            shipment: The shipment being changed
            action: The action performed
            user: User who performed the action
            old_values: Previous state
            new_values: New state
            notes: Additional notes
        """
        def convert(obj):
            if isinstance(obj, dict):
                return {k: convert(v) for k, v in obj.items()}
            elif isinstance(obj, list):
                return [convert(item) for item in obj]
            elif isinstance(obj, (Decimal, uuid.UUID)):
                return str(obj)
            elif hasattr(obj, 'isoformat'):
                return obj.isoformat()
            return obj

        return cls.objects.create(
            shipment=shipment,
            action=action,
            user=user,
            old_values=convert(old_values or {}),
            new_values=convert(new_values or {}),
            notes=notes,
        )

    @classmethod
    def log_status_change(cls, shipment, old_status: str, new_status: str, user=None, notes=""):
        return cls.log_change(
            shipment=shipment,
            action='status_changed',
            user=user,
            old_values={'status': old_status},
            new_values={'status': new_status},
            notes=notes
        )
