"""
Templated notification emails.

Every sender takes a flat data dict plus attachments and either sends or
raises IntegrationFailure. Nothing here catches and continues; callers
decide whether a failed email matters.
"""
import base64
import logging
from dataclasses import dataclass
from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string
from releasehub.core.exceptions import IntegrationFailure

logger = logging.getLogger('releasehub.notifications')


@dataclass(frozen=True)
class Attachment:
    filename: str
    content: str  # base64
    mimetype: str = 'application/pdf'

    @classmethod
    def from_bytes(cls, filename, data, mimetype='application/pdf'):
        return cls(filename=filename, content=base64.b64encode(data).decode('ascii'), mimetype=mimetype)


def send_email(subject, template, context, to, cc=None, attachments=()):
    to = [address for address in to if address]
    if not to:
        raise IntegrationFailure('email', f'no recipients configured for "{subject}"')

    context = dict(context, attachment_names=[attachment.filename for attachment in attachments])
    message = EmailMultiAlternatives(
        subject=subject,
        body=render_to_string(f'notifications/{template}.txt', context),
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=to,
        cc=[address for address in (cc or []) if address],
    )
    message.attach_alternative(render_to_string(f'notifications/{template}.html', context), 'text/html')
    for attachment in attachments:
        message.attach(attachment.filename, base64.b64decode(attachment.content), attachment.mimetype)

    try:
        message.send(fail_silently=False)
    except Exception as e:
        raise IntegrationFailure('email', f'sending "{subject}" failed: {str(e)}') from e

    cc_list = f", CC: {', '.join(message.cc)}" if message.cc else ''
    logger.info(f'Email "{subject}" sent to {", ".join(to)}{cc_list}')


def send_release_notification(data, attachments):
    """Internal release notice with all generated documents attached."""
    send_email(
        subject=f"New Release Created - {data['release_number']}",
        template='release_created',
        context=data,
        to=settings.RELEASE_EMAIL_TO,
        cc=settings.RELEASE_EMAIL_CC,
        attachments=attachments,
    )


def send_vendor_release_notification(data, recipients, box_labels):
    """Vendor notice of a new release; only the box labels are attached."""
    send_email(
        subject=f"New Release - {data['release_number']} - Ship Date: {data.get('ship_date') or 'Not set'}",
        template='vendor_release',
        context=data,
        to=recipients,
        attachments=[box_labels],
    )


def send_ready_to_ship_notification(data, packing_slip):
    """Internal notice that the customer uploaded their packing slip."""
    send_email(
        subject=f"Ready to Ship - {data['release_number']} - {data['part_number']}",
        template='ready_to_ship',
        context=data,
        to=settings.RELEASE_EMAIL_TO,
        cc=settings.RELEASE_EMAIL_CC,
        attachments=[packing_slip],
    )


def send_vendor_ship_notification(data, recipients, packing_slip):
    """Vendor go-ahead once the customer packing slip is uploaded."""
    send_email(
        subject=f"OK to Ship - {data['release_number']} - Packing Slip Uploaded",
        template='vendor_ship',
        context=data,
        to=recipients,
        attachments=[packing_slip],
    )


def send_invoice_reminder(data, attachments=()):
    """Reminder to invoice a release shipping today."""
    send_email(
        subject=f"Invoice Needed - {data['release_number']} - {data['part_number']}",
        template='invoice_reminder',
        context=data,
        to=settings.INVOICE_REMINDER_TO,
        attachments=list(attachments),
    )
