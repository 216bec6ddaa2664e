import uuid

from django.contrib.auth.models import AbstractUser
from django.db import models


class Client(models.Model):
    """A fulfillment customer whose shipments and fees the dashboard reports on."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    company_name = models.CharField(max_length=200)
    short_code = models.CharField(
        max_length=10,
        unique=True,
        help_text="Short code embedded in invoice numbers"
    )
    next_invoice_number = models.PositiveIntegerField(
        default=1,
        help_text="Sequence number for the next generated invoice"
    )
    billing_email = models.EmailField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "clients"
        ordering = ['company_name']

    def __str__(self):
        return f"{self.company_name} ({self.short_code})"


class User(AbstractUser):
    ROLE_CHOICES = [
        ("admin", "Admin"),
        ("care", "Care Team"),
        ("client", "Client"),
    ]

    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default="client")
    clients = models.ManyToManyField(
        Client,
        blank=True,
        related_name="members",
        help_text="Clients this user can see"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "users"
        verbose_name = "User"
        verbose_name_plural = "Users"

    def __str__(self):
        return f"{self.username} ({self.get_role_display()})"

    @property
    def is_admin(self):
        return self.role == "admin"

    @property
    def is_care(self):
        return self.role == "care"

    @property
    def can_view_all_clients(self):
        return self.is_admin or self.is_care

    def is_member_of(self, client_id):
        if self.can_view_all_clients:
            return True
        return self.clients.filter(id=client_id, is_active=True).exists()
