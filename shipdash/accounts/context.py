"""
Per-request client context.

Views resolve a ClientContext once and hand it to querysets and services
explicitly, so nothing downstream reads the acting client from global state.
"""

import logging
from typing import Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework.exceptions import NotFound, PermissionDenied

from .models import Client

logger = logging.getLogger(__name__)


class ClientContext:
    """The caller plus the client (or all clients) a request is scoped to."""

    def __init__(self, user, client: Optional[Client] = None):
        self.user = user
        self.client = client

    @property
    def client_id(self):
        return self.client.id if self.client else None

    @property
    def is_all_clients(self):
        return self.client is None

    def scope(self, queryset, field='client'):
        """Restrict a queryset to the context's client."""
        if self.client is None:
            return queryset
        return queryset.filter(**{field: self.client.pk})

    def __repr__(self):
        return f"ClientContext(user={self.user}, client={self.client_id or 'ALL'})"


def resolve_client_context(user, requested_client_id: Optional[str] = None) -> ClientContext:
    """
    Work out which client a request may see.

    Admin and care users may ask for any client, or none for all clients.
    Client users may only ask for one of their own clients and default to
    their first membership.

    Raises:
        PermissionDenied: If the user may not see the requested client
    """
    if not user or not user.is_authenticated:
        raise PermissionDenied("Authentication required")

    requested_client_id = (requested_client_id or '').strip() or None

    if user.can_view_all_clients:
        if requested_client_id is None or requested_client_id == 'all':
            return ClientContext(user)
        return ClientContext(user, _get_client(requested_client_id))

    memberships = user.clients.filter(is_active=True)
    if requested_client_id is None:
        client = memberships.order_by('company_name').first()
        if client is None:
            logger.warning(f"User {user.username} has no client memberships")
            raise PermissionDenied("No client access")
        return ClientContext(user, client)

    try:
        client = memberships.get(id=requested_client_id)
    except (Client.DoesNotExist, DjangoValidationError, ValueError):
        logger.warning(f"User {user.username} denied access to client {requested_client_id}")
        raise PermissionDenied("You do not have access to this client")
    return ClientContext(user, client)


def _get_client(client_id):
    try:
        return Client.objects.get(id=client_id)
    except (Client.DoesNotExist, DjangoValidationError, ValueError):
        raise NotFound("Unknown client")
