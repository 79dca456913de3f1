import hmac
import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, authentication_classes, parser_classes
from rest_framework.exceptions import NotFound, PermissionDenied
from rest_framework.parsers import MultiPartParser, FormParser
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from django.conf import settings
from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from releasehub.core.authentication import QueryParamJWTAuthentication
from releasehub.core.exceptions import IntegrationFailure
from releasehub.core.permissions import is_owner_or_admin
from releasehub.core.utils import create_audit_log
from releasehub.documents import registry
from releasehub.notifications.integrations import Integrations
from .filters import ReleaseFilter
from .invoicing import send_invoice_for_release, sweep_invoices
from .models import Release
from .serializers import (
    ReleaseSerializer, ReleaseCreateSerializer, ReleaseUpdateSerializer,
    DocumentRequestSerializer, InvoiceTriggerSerializer,
)
from . import workflow

logger = logging.getLogger('releasehub.releases')


def get_integrations():
    return Integrations.from_settings()


def _visible_releases(user):
    releases = Release.objects.select_related('part', 'shipping_location', 'created_by')
    if user.is_admin:
        return releases
    return releases.filter(created_by=user)


def _get_release(request, release_id):
    """Fetch a release the caller created, or any release for admins"""
    release = get_object_or_404(
        Release.objects.select_related('part', 'shipping_location', 'created_by'), pk=release_id
    )
    if not is_owner_or_admin(request.user, release.created_by_id):
        raise PermissionDenied('Forbidden')
    return release


def _pdf_response(content, filename, inline=False):
    response = HttpResponse(content, content_type='application/pdf')
    disposition = 'inline' if inline else 'attachment'
    response['Content-Disposition'] = f'{disposition}; filename="{filename}"'
    return response


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def release_list_create(request):
    """
    GET: release history. Admins see every release, customers their own.
    Supports the filters in ReleaseFilter (search, status, part, dates...).
    POST: create a release, decrement inventory and dispatch documents.
    """
    if request.method == 'GET':
        filterset = ReleaseFilter(request.query_params, queryset=_visible_releases(request.user))
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        releases = filterset.qs.order_by('-created_at')
        return Response(ReleaseSerializer(releases, many=True).data)

    serializer = ReleaseCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    release, outcomes = workflow.create_release(request.user, serializer.validated_data, get_integrations())
    create_audit_log(
        request=request,
        action='release_create',
        model_name='Release',
        object_id=release.pk,
        object_reference=release.release_number,
        changes={
            'part': release.part.part_number,
            'pallets': release.pallets,
            'boxes': release.boxes,
            'total_units': release.total_units,
            'failed_steps': [outcome.name for outcome in outcomes if not outcome.ok],
        },
    )
    return Response(ReleaseSerializer(release).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def release_detail(request, release_id):
    """
    GET: one release.
    PATCH: tracking number, ship date or status (creator or admin).
    DELETE: remove an unshipped release and restore its inventory (admin).
    """
    release = _get_release(request, release_id)

    if request.method == 'GET':
        return Response(ReleaseSerializer(release).data)

    if request.method == 'PATCH':
        serializer = ReleaseUpdateSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        release, changes = workflow.update_release(release, request.user, serializer.validated_data)
        if changes:
            create_audit_log(
                request=request,
                action='release_update',
                model_name='Release',
                object_id=release.pk,
                object_reference=release.release_number,
                changes={name: str(value) for name, value in changes.items()},
            )
        return Response(ReleaseSerializer(release).data)

    release_pk = release.pk
    release = workflow.delete_release(release, request.user)
    create_audit_log(
        request=request,
        action='release_delete',
        model_name='Release',
        object_id=release_pk,
        object_reference=release.release_number,
        changes={'restored_pallets': release.pallets, 'restored_boxes': release.boxes},
    )
    return Response({'message': f'Release {release.release_number} deleted'})


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def release_documents(request, release_id):
    """
    GET: stored document URLs.
    POST: regenerate and store documents. Body: ``{"document_type": "packing-slip"|"box-labels"|"all"}``.
    """
    release = _get_release(request, release_id)

    if request.method == 'POST':
        serializer = DocumentRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        document_type = serializer.validated_data['document_type']
        try:
            workflow.regenerate_documents(release, request.user, document_type, get_integrations())
        except IntegrationFailure as e:
            logger.error(f"Document generation failed for {release.release_number}: {str(e)}")
            return Response({'error': 'Failed to store documents'}, status=status.HTTP_502_BAD_GATEWAY)
        create_audit_log(
            request=request,
            action='documents_generate',
            model_name='Release',
            object_id=release.pk,
            object_reference=release.release_number,
            changes={'document_type': document_type},
        )

    return Response({
        'release_number': release.release_number,
        'packing_slip_url': release.packing_slip_url,
        'box_labels_url': release.box_labels_url,
        'invoice_url': release.invoice_url,
        'documents_generated_at': release.documents_generated_at,
    })


@api_view(['GET'])
@authentication_classes([QueryParamJWTAuthentication])
@permission_classes([IsAuthenticated])
def release_download(request, release_id, doc_type):
    """Render a document on the fly and return it as a PDF download"""
    release = _get_release(request, release_id)
    if doc_type not in registry.DOCUMENT_TYPES:
        return Response(
            {'error': f"Unknown document type. Use one of: {', '.join(registry.DOCUMENT_TYPES)}"},
            status=status.HTTP_400_BAD_REQUEST,
        )
    content = registry.render_document(doc_type, release)
    return _pdf_response(content, registry.document_filename(doc_type, release))


@api_view(['GET', 'POST'])
@authentication_classes([QueryParamJWTAuthentication])
@permission_classes([IsAuthenticated])
@parser_classes([MultiPartParser, FormParser])
def customer_packing_slip(request, release_id):
    """
    POST: upload the customer's packing slip (multipart field ``file``, PDF only).
    GET: view the uploaded packing slip inline.
    """
    release = _get_release(request, release_id)

    if request.method == 'GET':
        if not release.customer_packing_slip_data:
            raise NotFound('Packing slip not found')
        return _pdf_response(
            bytes(release.customer_packing_slip_data),
            release.customer_packing_slip_name or 'packing-slip.pdf',
            inline=True,
        )

    release, outcomes = workflow.attach_customer_packing_slip(
        release, request.user, request.FILES.get('file'), get_integrations()
    )
    create_audit_log(
        request=request,
        action='packing_slip_upload',
        model_name='Release',
        object_id=release.pk,
        object_reference=release.release_number,
        changes={
            'file_name': release.customer_packing_slip_name,
            'failed_steps': [outcome.name for outcome in outcomes if not outcome.ok],
        },
    )
    return Response({'release': ReleaseSerializer(release).data})


def _cron_authorized(request):
    secret = settings.CRON_SECRET
    if not secret:
        logger.error("CRON_SECRET is not configured, rejecting cron request")
        return False
    header = request.META.get('HTTP_AUTHORIZATION', '')
    return hmac.compare_digest(header, f'Bearer {secret}')


@api_view(['GET', 'POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def cron_send_invoices(request):
    """
    GET: sweep today's shipped-but-uninvoiced releases.
    POST: send the invoice reminder for one release. Body: ``{"release_id": ...}``.

    Both require ``Authorization: Bearer <CRON_SECRET>``.
    """
    if not _cron_authorized(request):
        return Response({'error': 'Unauthorized'}, status=status.HTTP_401_UNAUTHORIZED)

    if request.method == 'GET':
        results = sweep_invoices()
        return Response({
            'success': True,
            'message': f"Processed {results['total']} releases",
            'results': results,
        })

    serializer = InvoiceTriggerSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    release_id = serializer.validated_data.get('release_id')
    if not release_id:
        return Response({'error': 'release_id is required'}, status=status.HTTP_400_BAD_REQUEST)

    release = get_object_or_404(Release.objects.select_related('part', 'shipping_location'), pk=release_id)
    try:
        send_invoice_for_release(release)
    except IntegrationFailure as e:
        logger.error(f"Manual invoice reminder failed for {release.release_number}: {str(e)}")
        return Response({'error': f'Failed to send invoice: {e.message}'}, status=status.HTTP_502_BAD_GATEWAY)

    create_audit_log(
        action='invoice_sent',
        model_name='Release',
        object_id=release.pk,
        object_reference=release.release_number,
        changes={'invoice_total': str(release.invoice_total)},
    )
    return Response({
        'success': True,
        'message': f'Invoice sent for {release.release_number}',
        'results': {'total': 1, 'sent': 1, 'failed': 0, 'errors': []},
    })
