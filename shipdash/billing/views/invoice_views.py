"""
Invoice generation and file download endpoints.
"""

import logging

from django.http import FileResponse
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from accounts.permissions import IsAdmin
from shipments.exceptions import BusinessException
from shipments.views.mixins import error_response
from ..serializers import InvoiceGenerateSerializer, InvoiceSerializer
from ..services import InvoiceFileService, InvoiceService

logger = logging.getLogger(__name__)


@api_view(['POST'])
@permission_classes([IsAdmin])
def generate_invoice(request):
    """Generate the weekly invoice for a client."""
    serializer = InvoiceGenerateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        invoice = InvoiceService.generate_invoice(
            serializer.validated_data['client_id'],
            serializer.validated_data['week_start'],
            user=request.user,
        )
    except BusinessException as e:
        logger.warning(f"Invoice generation rejected: {e.code} {e.message}")
        return error_response(e)

    return Response({
        'success': True,
        'data': InvoiceSerializer(invoice).data
    }, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def invoice_files(request, invoice_number):
    """Signed, expiring download links for an invoice's PDF and XLSX."""
    urls = InvoiceFileService.get_signed_urls(invoice_number, request.user, request)
    return Response({
        'success': True,
        'data': urls
    })


@api_view(['GET'])
@permission_classes([AllowAny])
def download_invoice_file(request, token):
    # The signed token is the credential
    try:
        handle, filename, content_type = InvoiceFileService.open_signed_file(token)
    except BusinessException as e:
        logger.warning(f"Invoice file link refused: {e.code}")
        return error_response(e, http_status=status.HTTP_403_FORBIDDEN)

    return FileResponse(handle, as_attachment=True, filename=filename, content_type=content_type)
