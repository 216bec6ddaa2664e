"""
Tests for signed invoice file links.
"""

from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from accounts.models import Client
from ..services import InvoiceFileService, InvoiceService
from .test_invoice_generation import WEEK, InvoiceTestMixin


class InvoiceFileLinkTest(InvoiceTestMixin, TestCase):
    """Test signed URL issuing and download."""

    def setUp(self):
        super().setUp()
        self._billable_week()
        self.invoice = InvoiceService.generate_invoice(self.client_record.id, WEEK, user=self.admin)

        User = get_user_model()
        self.member = User.objects.create_user(username='member', password='pw', role='client')
        self.member.clients.add(self.client_record)
        other_client = Client.objects.create(company_name='Other', short_code='OTH')
        self.stranger = User.objects.create_user(username='stranger', password='pw', role='client')
        self.stranger.clients.add(other_client)

        self.api = APIClient()

    def _files_url(self):
        return reverse('invoice-files', args=[self.invoice.invoice_number])

    def _download(self, url):
        response = self.api.get(url)
        if response.status_code == status.HTTP_200_OK:
            content = b''.join(response.streaming_content)
            response.close()
            return response, content
        return response, None

    def test_member_gets_signed_urls(self):
        self.api.force_authenticate(self.member)

        response = self.api.get(self._files_url())

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data['data']
        self.assertEqual(data['expires_in'], 3600)
        self.assertTrue(data['pdf_url'].startswith('http://testserver/api/billing/files/'))
        self.assertNotEqual(data['pdf_url'], data['xlsx_url'])

    def test_download_pdf_and_xlsx(self):
        self.api.force_authenticate(self.member)
        data = self.api.get(self._files_url()).data['data']
        self.api.force_authenticate(None)

        pdf_response, pdf = self._download(data['pdf_url'])
        xlsx_response, xlsx = self._download(data['xlsx_url'])

        self.assertEqual(pdf_response['Content-Type'], 'application/pdf')
        self.assertTrue(pdf.startswith(b'%PDF'))
        self.assertIn(f'{self.invoice.invoice_number}.xlsx', xlsx_response['Content-Disposition'])
        self.assertTrue(xlsx.startswith(b'PK'))

    def test_stranger_is_denied(self):
        self.api.force_authenticate(self.stranger)

        response = self.api.get(self._files_url())

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_member_of_deactivated_client_is_denied(self):
        self.client_record.is_active = False
        self.client_record.save()
        self.api.force_authenticate(self.member)

        response = self.api.get(self._files_url())

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_unknown_invoice(self):
        self.api.force_authenticate(self.admin)

        response = self.api.get(reverse('invoice-files', args=['JPNOPE-0001-010124']))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_tampered_token_rejected(self):
        token = InvoiceFileService.sign(self.invoice.invoice_number, 'pdf')
        payload, signature = token.split(':', 1)
        forged = InvoiceFileService.sign('JPACM-9999-010124', 'pdf').split(':', 1)[0] + ':' + signature

        response, _ = self._download(reverse('invoice-file-download', args=[forged]))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error']['code'], 'INVALID_FILE_TOKEN')

    def test_unknown_kind_rejected(self):
        token = InvoiceFileService.sign(self.invoice.invoice_number, 'docx')

        response, _ = self._download(reverse('invoice-file-download', args=[token]))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_expired_token_rejected(self):
        token = InvoiceFileService.sign(self.invoice.invoice_number, 'pdf')

        with override_settings(INVOICE_URL_TTL_SECONDS=-1):
            response, _ = self._download(reverse('invoice-file-download', args=[token]))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error']['code'], 'FILE_LINK_EXPIRED')
