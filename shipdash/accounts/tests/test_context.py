"""
Tests for client context resolution and role permissions.
"""

import uuid
from types import SimpleNamespace

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.exceptions import NotFound, PermissionDenied

from ..context import ClientContext, resolve_client_context
from ..models import Client
from ..permissions import IsAdmin, IsAdminOrCare, IsClientMember


class ClientContextTest(TestCase):
    """Test which clients a request may be scoped to."""

    def setUp(self):
        User = get_user_model()
        self.acme = Client.objects.create(company_name='Acme', short_code='ACM')
        self.zeta = Client.objects.create(company_name='Zeta', short_code='ZET')

        self.admin = User.objects.create_user(username='admin', password='pw', role='admin')
        self.care = User.objects.create_user(username='care', password='pw', role='care')
        self.member = User.objects.create_user(username='member', password='pw', role='client')
        self.member.clients.add(self.zeta, self.acme)
        self.orphan = User.objects.create_user(username='orphan', password='pw', role='client')

    def test_admin_without_client_sees_all(self):
        context = resolve_client_context(self.admin, None)
        self.assertTrue(context.is_all_clients)
        self.assertIsNone(context.client_id)

    def test_admin_all_keyword(self):
        context = resolve_client_context(self.care, 'all')
        self.assertTrue(context.is_all_clients)

    def test_admin_can_pick_any_client(self):
        context = resolve_client_context(self.admin, str(self.zeta.id))
        self.assertEqual(context.client, self.zeta)

    def test_admin_unknown_client(self):
        with self.assertRaises(NotFound):
            resolve_client_context(self.admin, str(uuid.uuid4()))

    def test_client_user_defaults_to_first_client(self):
        context = resolve_client_context(self.member, None)
        # Ordered by company name
        self.assertEqual(context.client, self.acme)

    def test_client_user_own_client(self):
        context = resolve_client_context(self.member, str(self.zeta.id))
        self.assertEqual(context.client, self.zeta)

    def test_client_user_foreign_client_denied(self):
        other = Client.objects.create(company_name='Other', short_code='OTH')
        with self.assertRaises(PermissionDenied):
            resolve_client_context(self.member, str(other.id))

    def test_client_user_garbage_id_denied(self):
        with self.assertRaises(PermissionDenied):
            resolve_client_context(self.member, 'not-a-uuid')

    def test_client_user_without_memberships(self):
        with self.assertRaises(PermissionDenied):
            resolve_client_context(self.orphan, None)

    def test_scope_filters_queryset(self):
        context = ClientContext(self.admin, self.acme)
        scoped = context.scope(Client.objects.all(), field='id')
        self.assertEqual(list(scoped), [self.acme])

        everything = ClientContext(self.admin).scope(Client.objects.all(), field='id')
        self.assertEqual(everything.count(), 2)

    def test_scope_filters_by_foreign_key(self):
        context = ClientContext(self.admin, self.acme)

        scoped = context.scope(get_user_model().objects.all(), field='clients')

        self.assertEqual(list(scoped), [self.member])

    def test_inactive_client_not_selectable(self):
        self.acme.is_active = False
        self.acme.save()

        self.assertEqual(resolve_client_context(self.member, None).client, self.zeta)
        with self.assertRaises(PermissionDenied):
            resolve_client_context(self.member, str(self.acme.id))


class PermissionTest(TestCase):
    """Test role based permission classes."""

    def setUp(self):
        User = get_user_model()
        self.client_record = Client.objects.create(company_name='Acme', short_code='ACM')
        self.admin = User.objects.create_user(username='admin', password='pw', role='admin')
        self.care = User.objects.create_user(username='care', password='pw', role='care')
        self.member = User.objects.create_user(username='member', password='pw', role='client')
        self.member.clients.add(self.client_record)
        self.stranger = User.objects.create_user(username='stranger', password='pw', role='client')

    def _request(self, user):
        return SimpleNamespace(user=user)

    def test_is_admin(self):
        self.assertTrue(IsAdmin().has_permission(self._request(self.admin), None))
        self.assertFalse(IsAdmin().has_permission(self._request(self.care), None))

    def test_is_admin_or_care(self):
        permission = IsAdminOrCare()
        self.assertTrue(permission.has_permission(self._request(self.care), None))
        self.assertFalse(permission.has_permission(self._request(self.member), None))

    def test_client_member_object_permission(self):
        record = SimpleNamespace(client_id=self.client_record.id)
        permission = IsClientMember()
        self.assertTrue(permission.has_object_permission(self._request(self.member), None, record))
        self.assertTrue(permission.has_object_permission(self._request(self.admin), None, record))
        self.assertFalse(permission.has_object_permission(self._request(self.stranger), None, record))

    def test_deactivated_client_fails_object_permission(self):
        self.client_record.is_active = False
        self.client_record.save()
        record = SimpleNamespace(client_id=self.client_record.id)

        self.assertFalse(IsClientMember().has_object_permission(self._request(self.member), None, record))
        self.assertTrue(IsClientMember().has_object_permission(self._request(self.care), None, record))
