"""
Release workflow: create, update and delete releases, plus the best-effort
work that follows a committed release.

Creating a release writes the release row and the inventory decrement in one
transaction. Only after that commits do the post-commit tasks run, in a fixed
order, each inside its own error boundary. A failed task is logged and
recorded as a TaskOutcome; it never undoes the release or stops the tasks
after it.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List
from django.conf import settings
from django.db import IntegrityError, transaction
from django.shortcuts import get_object_or_404
from django.template.loader import render_to_string
from django.utils import timezone
from rest_framework.exceptions import PermissionDenied, ValidationError
from releasehub.catalog.models import Part
from releasehub.catalog.units import total_units
from releasehub.core.exceptions import ConflictError, IntegrationFailure
from releasehub.core.permissions import is_owner_or_admin
from releasehub.documents import registry
from releasehub.documents.pdf import format_money, format_quantity
from releasehub.inventory import ledger
from releasehub.locations.models import ShippingLocation
from releasehub.notifications import emails
from releasehub.notifications.emails import Attachment
from . import numbering
from .models import Release
from .transitions import next_status, can_delete

logger = logging.getLogger('releasehub.releases')

MAX_NUMBER_ATTEMPTS = 3


@dataclass
class TaskOutcome:
    name: str
    ok: bool
    value: Any = None
    error: str = ''

    def as_dict(self):
        return {'name': self.name, 'ok': self.ok, 'error': self.error}


class RenderedDocuments:
    """Renders each document type for a release at most once."""

    def __init__(self, release):
        self.release = release
        self._cache: Dict[str, bytes] = {}

    def get(self, doc_type):
        if doc_type not in self._cache:
            self._cache[doc_type] = registry.render_document(doc_type, self.release)
        return self._cache[doc_type]

    def attachment(self, doc_type):
        return Attachment.from_bytes(registry.document_filename(doc_type, self.release), self.get(doc_type))


@dataclass
class PostCommitContext:
    release: Release
    integrations: Any
    documents: RenderedDocuments = None
    outcomes: List[TaskOutcome] = field(default_factory=list)

    def __post_init__(self):
        if self.documents is None:
            self.documents = RenderedDocuments(self.release)


def run_tasks(context, tasks):
    """Run ``(name, callable)`` tasks in order, isolating each one's failure."""
    for name, task in tasks:
        try:
            value = task(context)
            context.outcomes.append(TaskOutcome(name=name, ok=True, value=value))
        except IntegrationFailure as e:
            logger.error(f"{name} failed for {context.release.release_number}: {str(e)}")
            context.outcomes.append(TaskOutcome(name=name, ok=False, error=str(e)))
        except Exception as e:
            logger.error(f"{name} failed for {context.release.release_number}: {str(e)}", exc_info=True)
            context.outcomes.append(TaskOutcome(name=name, ok=False, error=str(e)))
    return context.outcomes


# ---------------------------------------------------------------------------
# Notification data
# ---------------------------------------------------------------------------

def format_ship_date(value):
    if not value:
        return ''
    return timezone.localtime(value).strftime('%A, %B %d, %Y')


def shipping_location_line(location):
    return f"{location.name} - {location.address}, {location.city}, {location.state} {location.zip_code}"


def email_context(release):
    """Flat record describing a release for notification templates."""
    part = release.part
    return {
        'release_number': release.release_number,
        'customer_po_number': release.customer_po_number,
        'part_number': part.part_number,
        'part_description': part.description,
        'pallets': release.pallets,
        'boxes': release.boxes,
        'total_units': format_quantity(release.total_units),
        'shipping_location': shipping_location_line(release.shipping_location),
        'ship_date': format_ship_date(release.ship_date),
        'tracking_number': release.tracking_number,
        'price_per_unit': format_money(part.price_per_unit, places=4),
        'invoice_total': format_money(release.invoice_total),
        'notes': release.notes,
    }


def job_payload(release, company_name=''):
    part = release.part
    delivery = release.eta_delivery_date or release.ship_date
    return {
        'externalJobId': str(release.pk),
        'jobNo': release.release_number,
        'companyName': company_name,
        'title': f"{part.part_number} - {part.description}",
        'customerPONumber': release.customer_po_number,
        'quantity': release.total_units,
        'status': release.status,
        'deliveryDate': delivery.isoformat() if delivery else None,
        'createdAt': release.created_at.isoformat(),
    }


# ---------------------------------------------------------------------------
# Post-commit tasks
# ---------------------------------------------------------------------------

def store_documents(context, doc_types=(registry.PACKING_SLIP, registry.BOX_LABELS, registry.INVOICE)):
    """Render and store documents, saving their URLs on the release."""
    release = context.release
    urls = {}
    for doc_type in doc_types:
        urls[registry.URL_FIELDS[doc_type]] = context.integrations.storage.save_pdf(
            context.documents.get(doc_type),
            registry.document_filename(doc_type, release),
            release.pk,
        )
    urls['documents_generated_at'] = timezone.now()
    Release.objects.filter(pk=release.pk).update(**urls)
    for name, value in urls.items():
        setattr(release, name, value)
    return urls


def email_release_notice(context):
    attachments = [
        context.documents.attachment(doc_type)
        for doc_type in (registry.PACKING_SLIP, registry.BOX_LABELS, registry.INVOICE)
    ]
    emails.send_release_notification(email_context(context.release), attachments)
    return True


def email_vendor_notice(context):
    release = context.release
    recipients = context.integrations.recipients_for_vendor(release.part.vendor_name)
    if not recipients:
        logger.debug(f"No vendor recipients for {release.part.vendor_name or 'unknown vendor'}, skipping vendor notice")
        return None
    emails.send_vendor_release_notification(
        email_context(release), recipients, context.documents.attachment(registry.BOX_LABELS)
    )
    return recipients


def notify_job_tracking(context):
    client = context.integrations.job_tracking
    if not client.is_configured:
        return None
    release = context.release
    job_id = client.create_job(job_payload(release, client.company_name))
    Release.objects.filter(pk=release.pk).update(external_job_id=job_id)
    release.external_job_id = job_id
    return job_id


def notify_vendor_portal(context):
    """Fire-and-forget; the thread's result is never observed here."""
    client = context.integrations.vendor_portal
    if not client.is_configured:
        return None
    release = context.release
    body = render_to_string('notifications/vendor_release.txt', dict(email_context(release), attachment_names=[]))
    return client.create_job_detached(f"{release.release_number} - {release.part.part_number}", body)


RELEASE_CREATED_TASKS = (
    ('store_documents', store_documents),
    ('email_release_notice', email_release_notice),
    ('email_vendor_notice', email_vendor_notice),
    ('job_tracking', notify_job_tracking),
    ('vendor_portal', notify_vendor_portal),
)


# ---------------------------------------------------------------------------
# Create / update / delete
# ---------------------------------------------------------------------------

def _release_fields(data, part, location, user, pallets, boxes):
    defaults = settings.RELEASE_DEFAULTS
    units = total_units(pallets, boxes, part.boxes_per_pallet, part.units_per_box)
    return {
        'part': part,
        'shipping_location': location,
        'created_by': user,
        'pallets': pallets,
        'boxes': boxes,
        'boxes_per_pallet': part.boxes_per_pallet,
        'units_per_box': part.units_per_box,
        'total_units': units,
        'customer_po_number': data['customer_po_number'],
        'batch_number': data.get('batch_number') or numbering.default_batch_number(part.part_number),
        'ship_via': data.get('ship_via') or defaults['SHIP_VIA'],
        'freight_terms': data.get('freight_terms') or defaults['FREIGHT_TERMS'],
        'payment_terms': data.get('payment_terms') or defaults['PAYMENT_TERMS'],
        'shipping_class': data.get('shipping_class') or defaults['SHIPPING_CLASS'],
        'manufacture_date': data.get('manufacture_date') or timezone.now(),
        'ship_date': data.get('ship_date'),
        'eta_delivery_date': data.get('eta_delivery_date'),
        'cartons': data.get('cartons') or (pallets * part.boxes_per_pallet + boxes),
        'weight': data.get('weight') or 0,
        'notes': data.get('notes', ''),
        'status': Release.STATUS_COMPLETED,
    }


def create_release(user, data, integrations):
    """
    Validate, allocate numbers, persist the release with its inventory
    decrement, then run the post-commit tasks.

    Returns ``(release, outcomes)``.
    """
    part = get_object_or_404(Part, pk=data['part_id'])
    location = ShippingLocation.objects.filter(pk=data['shipping_location_id']).first()
    if location is None:
        raise ValidationError({'shipping_location_id': ['Shipping location not found']})

    pallets = data.get('pallets')
    if pallets is None:
        pallets = settings.RELEASE_DEFAULTS['PALLETS']
    boxes = data.get('boxes') or settings.RELEASE_DEFAULTS['BOXES']
    if pallets == 0 and boxes == 0:
        raise ValidationError('A release must include at least one pallet or box')
    if boxes >= part.boxes_per_pallet:
        raise ValidationError(f'Boxes must be fewer than a full pallet ({part.boxes_per_pallet})')

    ledger.check_availability(part, pallets, boxes)
    fields = _release_fields(data, part, location, user, pallets, boxes)

    for attempt in range(1, MAX_NUMBER_ATTEMPTS + 1):
        try:
            with transaction.atomic():
                sequence = numbering.next_sequence() + attempt - 1
                release = Release.objects.create(
                    release_number=numbering.format_release_number(sequence),
                    ticket_number=numbering.format_ticket_number(sequence),
                    **fields,
                )
                ledger.apply_release(part, pallets, boxes, fields['boxes_per_pallet'])
            break
        except IntegrityError:
            if attempt == MAX_NUMBER_ATTEMPTS:
                raise ConflictError('Could not allocate a release number, please retry')
            logger.warning(f"Release number collision on attempt {attempt}, retrying")
            part.refresh_from_db(fields=['current_pallets', 'current_boxes'])

    logger.info(
        f"Release {release.release_number} created by {user.email}: {part.part_number} "
        f"{pallets}P/{boxes}B = {release.total_units} units"
    )

    context = PostCommitContext(release=release, integrations=integrations)
    outcomes = run_tasks(context, RELEASE_CREATED_TASKS)
    failed = [outcome.name for outcome in outcomes if not outcome.ok]
    if failed:
        logger.warning(f"Release {release.release_number} created; best-effort steps failed: {', '.join(failed)}")

    release.refresh_from_db()
    return release, outcomes


def update_release(release, user, data):
    """Apply a tracking number, ship date or status change."""
    if not is_owner_or_admin(user, release.created_by_id):
        raise PermissionDenied('Forbidden')

    new_tracking = data.get('tracking_number') or ''
    status = next_status(release.status, release.tracking_number, new_tracking, data.get('status'))

    changes = {}
    if 'tracking_number' in data:
        changes['tracking_number'] = new_tracking
    if 'ship_date' in data:
        changes['ship_date'] = data['ship_date']
    if status != release.status:
        changes['status'] = status

    for name, value in changes.items():
        setattr(release, name, value)
    if changes:
        release.save(update_fields=list(changes) + ['updated_at'])
        logger.info(f"Release {release.release_number} updated by {user.email}: {sorted(changes)}")
    return release, changes


def delete_release(release, user):
    """Delete an unshipped release and give its stock back to the part."""
    if not user.is_admin:
        raise PermissionDenied('Admin access required')

    with transaction.atomic():
        release = Release.objects.select_for_update().select_related('part').get(pk=release.pk)
        if not can_delete(release):
            raise ConflictError('Cannot delete shipped releases')
        ledger.restore_release(release)
        release.delete()

    logger.info(f"Release {release.release_number} deleted by {user.email}, inventory restored: +{release.pallets}P/+{release.boxes}B")
    return release


# ---------------------------------------------------------------------------
# Documents and customer packing slip
# ---------------------------------------------------------------------------

def regenerate_documents(release, user, document_type, integrations):
    """Re-render and store documents on request. Storage errors propagate."""
    if not is_owner_or_admin(user, release.created_by_id):
        raise PermissionDenied('Forbidden')

    if document_type == 'all':
        doc_types = (registry.PACKING_SLIP, registry.BOX_LABELS)
    else:
        doc_types = (document_type,)
    urls = store_documents(PostCommitContext(release=release, integrations=integrations), doc_types)
    logger.info(f"Documents {', '.join(doc_types)} regenerated for {release.release_number} by {user.email}")
    return urls


def attach_customer_packing_slip(release, user, uploaded_file, integrations):
    """
    Store the customer's packing slip on the release, then tell the internal
    team and the vendor it is ready to ship. Email failures are only logged.
    """
    if not is_owner_or_admin(user, release.created_by_id):
        raise PermissionDenied('Forbidden')
    if uploaded_file is None:
        raise ValidationError('No file provided')
    if uploaded_file.content_type != 'application/pdf':
        raise ValidationError('Only PDF files are accepted')

    content = uploaded_file.read()
    release.customer_packing_slip_data = content
    release.customer_packing_slip_name = uploaded_file.name
    release.customer_packing_slip_uploaded_at = timezone.now()
    release.save(update_fields=[
        'customer_packing_slip_data', 'customer_packing_slip_name',
        'customer_packing_slip_uploaded_at', 'updated_at',
    ])
    logger.info(f"Customer packing slip '{uploaded_file.name}' uploaded for {release.release_number} by {user.email}")

    attachment = Attachment.from_bytes(uploaded_file.name, content)
    data = dict(email_context(release), uploaded_by=user.name or user.email)

    def ready_to_ship(context):
        emails.send_ready_to_ship_notification(data, attachment)
        return True

    def vendor_ok_to_ship(context):
        recipients = context.integrations.recipients_for_vendor(release.part.vendor_name)
        if not recipients:
            return None
        emails.send_vendor_ship_notification(data, recipients, attachment)
        return recipients

    context = PostCommitContext(release=release, integrations=integrations)
    outcomes = run_tasks(context, (
        ('email_ready_to_ship', ready_to_ship),
        ('email_vendor_ok_to_ship', vendor_ok_to_ship),
    ))
    return release, outcomes
