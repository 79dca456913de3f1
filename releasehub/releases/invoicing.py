"""
Invoice reminders for releases shipping today.

The sweep is triggered from outside (a cron hitting the API); nothing here
schedules itself. Each release is handled on its own so one failure is
recorded and the sweep moves on.
"""
import logging
from datetime import datetime, time, timedelta
from django.utils import timezone
from releasehub.core.exceptions import ConflictError, IntegrationFailure
from releasehub.documents import registry
from releasehub.notifications import emails
from releasehub.notifications.emails import Attachment
from .models import Release
from .workflow import email_context

logger = logging.getLogger('releasehub.releases')


def local_day_bounds(now=None):
    """Start and end (exclusive) of the local calendar day containing ``now``."""
    now = timezone.localtime(now or timezone.now())
    start = timezone.make_aware(datetime.combine(now.date(), time.min), now.tzinfo)
    return start, start + timedelta(days=1)


def releases_due(now=None):
    start, end = local_day_bounds(now)
    return (
        Release.objects.select_related('part', 'shipping_location', 'created_by')
        .filter(ship_date__gte=start, ship_date__lt=end, invoice_sent=False)
        .order_by('ship_date', 'release_number')
    )


def send_invoice_for_release(release):
    """Email the invoice reminder for one release and mark it sent."""
    if release.invoice_sent:
        raise ConflictError(f'Invoice already sent for {release.release_number}')

    invoice = registry.render_document(registry.INVOICE, release)
    emails.send_invoice_reminder(
        email_context(release),
        [Attachment.from_bytes(registry.document_filename(registry.INVOICE, release), invoice)],
    )

    release.invoice_sent = True
    release.invoice_sent_at = timezone.now()
    release.save(update_fields=['invoice_sent', 'invoice_sent_at', 'updated_at'])
    logger.info(f"Invoice reminder sent for {release.release_number}: {release.invoice_total}")
    return release


def sweep_invoices(now=None):
    """
    Send invoice reminders for every unsent release shipping today.

    Returns ``{'total', 'sent', 'failed', 'errors'}`` where errors are
    ``"<release_number>: <message>"`` strings.
    """
    results = {'total': 0, 'sent': 0, 'failed': 0, 'errors': []}
    releases = list(releases_due(now))
    results['total'] = len(releases)

    for release in releases:
        try:
            send_invoice_for_release(release)
            results['sent'] += 1
        except IntegrationFailure as e:
            results['failed'] += 1
            results['errors'].append(f"{release.release_number}: {e.message}")
            logger.error(f"Invoice reminder failed for {release.release_number}: {str(e)}")
        except Exception as e:
            results['failed'] += 1
            results['errors'].append(f"{release.release_number}: {str(e)}")
            logger.error(f"Invoice reminder failed for {release.release_number}: {str(e)}", exc_info=True)

    logger.info(f"Invoice sweep complete: {results['sent']} sent, {results['failed']} failed of {results['total']}")
    return results
