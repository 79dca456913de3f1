"""
Test suite for notifications
Tests: templated emails and attachments, job-tracking and vendor-portal webhooks
"""
from unittest.mock import patch, MagicMock
import requests
from django.core import mail
from django.test import SimpleTestCase, override_settings
from releasehub.core.exceptions import IntegrationFailure
from releasehub.notifications import emails
from releasehub.notifications.emails import Attachment
from releasehub.notifications.integrations import Integrations, JobTrackingClient, VendorPortalClient

RELEASE_DATA = {
    'release_number': 'REL-20250120-0004',
    'customer_po_number': 'PO-7781',
    'part_number': '100307705',
    'part_description': 'MANUAL, 36 PAGE, RES, GAS, UNBRANDED',
    'pallets': 5,
    'boxes': 0,
    'total_units': '33,150',
    'shipping_location': 'AO Smith - McBee, SC - 105 Industrial Park Rd, McBee, SC 29101',
    'ship_date': 'Monday, January 20, 2025',
    'tracking_number': '',
    'price_per_unit': '$0.2859',
    'invoice_total': '$9,477.59',
    'notes': 'Deliver to dock 3 & call ahead',
    'uploaded_by': 'Kirk',
}


@override_settings(
    EMAIL_BACKEND='django.core.mail.backends.locmem.EmailBackend',
    DEFAULT_FROM_EMAIL='EPG Release <noreply@jdgraphic.com>',
    RELEASE_EMAIL_TO=['shipping@jdgraphic.com'],
    RELEASE_EMAIL_CC=['sales@jdgraphic.com'],
    INVOICE_REMINDER_TO=['billing@jdgraphic.com'],
)
class EmailTests(SimpleTestCase):
    """Test notification emails"""

    def setUp(self):
        self.pdf = Attachment.from_bytes('invoice-REL-20250120-0004.pdf', b'%PDF-1.4')

    def test_release_notification(self):
        """Internal notice goes to the release list with CC and attachments"""
        emails.send_release_notification(RELEASE_DATA, [self.pdf])
        self.assertEqual(len(mail.outbox), 1)
        message = mail.outbox[0]
        self.assertEqual(message.subject, 'New Release Created - REL-20250120-0004')
        self.assertEqual(message.to, ['shipping@jdgraphic.com'])
        self.assertEqual(message.cc, ['sales@jdgraphic.com'])
        self.assertIn('33,150', message.body)
        self.assertEqual(message.attachments[0][0], 'invoice-REL-20250120-0004.pdf')
        self.assertEqual(message.attachments[0][1], b'%PDF-1.4')
        html = message.alternatives[0][0]
        self.assertIn('dock 3 &amp; call ahead', html)

    def test_plain_text_is_not_escaped(self):
        """Text bodies keep special characters as typed"""
        emails.send_release_notification(RELEASE_DATA, [])
        self.assertIn('dock 3 & call ahead', mail.outbox[0].body)

    def test_vendor_release_subject_includes_ship_date(self):
        """Vendor notice subject carries the ship date"""
        emails.send_vendor_release_notification(RELEASE_DATA, ['orders@threez.com'], self.pdf)
        self.assertEqual(
            mail.outbox[0].subject,
            'New Release - REL-20250120-0004 - Ship Date: Monday, January 20, 2025',
        )
        self.assertEqual(mail.outbox[0].to, ['orders@threez.com'])

    def test_vendor_release_without_ship_date(self):
        """Missing ship date reads as 'Not set'"""
        emails.send_vendor_release_notification(dict(RELEASE_DATA, ship_date=''), ['orders@threez.com'], self.pdf)
        self.assertTrue(mail.outbox[0].subject.endswith('Ship Date: Not set'))

    def test_ready_to_ship(self):
        """Ready-to-ship notice names the part"""
        emails.send_ready_to_ship_notification(RELEASE_DATA, self.pdf)
        self.assertEqual(mail.outbox[0].subject, 'Ready to Ship - REL-20250120-0004 - 100307705')

    def test_vendor_ok_to_ship(self):
        """Vendor go-ahead subject"""
        emails.send_vendor_ship_notification(RELEASE_DATA, ['orders@threez.com'], self.pdf)
        self.assertEqual(mail.outbox[0].subject, 'OK to Ship - REL-20250120-0004 - Packing Slip Uploaded')

    def test_invoice_reminder(self):
        """Invoice reminder goes to billing with the total"""
        emails.send_invoice_reminder(RELEASE_DATA, [self.pdf])
        message = mail.outbox[0]
        self.assertEqual(message.subject, 'Invoice Needed - REL-20250120-0004 - 100307705')
        self.assertEqual(message.to, ['billing@jdgraphic.com'])
        self.assertIn('$9,477.59', message.body)

    @override_settings(RELEASE_EMAIL_TO=[])
    def test_no_recipients_raises(self):
        """Nothing to send to is an integration failure, not a silent skip"""
        with self.assertRaises(IntegrationFailure):
            emails.send_release_notification(RELEASE_DATA, [])
        self.assertEqual(len(mail.outbox), 0)

    def test_send_failure_raises(self):
        """Transport errors surface as IntegrationFailure"""
        with patch('django.core.mail.EmailMultiAlternatives.send', side_effect=ConnectionError('refused')):
            with self.assertRaises(IntegrationFailure) as ctx:
                emails.send_ready_to_ship_notification(RELEASE_DATA, self.pdf)
        self.assertEqual(ctx.exception.service, 'email')


def json_response(payload, status_code=200):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


class JobTrackingClientTests(SimpleTestCase):
    """Test the job-tracking webhook"""

    def setUp(self):
        self.client = JobTrackingClient('https://jobs.example.com/', 'shh', 'Enterprise Print Group', timeout=10)

    def test_not_configured_without_secret(self):
        """URL alone is not enough"""
        self.assertFalse(JobTrackingClient('https://jobs.example.com').is_configured)
        self.assertTrue(self.client.is_configured)

    @patch('releasehub.notifications.integrations.requests.post')
    def test_create_job(self, mock_post):
        """Posts the payload with the webhook secret and returns the job id"""
        mock_post.return_value = json_response({'success': True, 'jobId': 812})
        job_id = self.client.create_job({'jobNo': 'REL-20250120-0004', 'quantity': 33150})
        self.assertEqual(job_id, '812')
        args, kwargs = mock_post.call_args
        self.assertEqual(args[0], 'https://jobs.example.com/api/webhooks/jobs')
        self.assertEqual(kwargs['headers']['X-Webhook-Secret'], 'shh')
        self.assertEqual(kwargs['json']['companyName'], 'Enterprise Print Group')
        self.assertEqual(kwargs['timeout'], 10)

    @patch('releasehub.notifications.integrations.requests.post')
    def test_http_error(self, mock_post):
        """Non-2xx responses raise IntegrationFailure"""
        response = json_response({})
        response.raise_for_status.side_effect = requests.exceptions.HTTPError('500 Server Error')
        mock_post.return_value = response
        with self.assertRaises(IntegrationFailure) as ctx:
            self.client.create_job({'jobNo': 'REL-1'})
        self.assertEqual(ctx.exception.service, 'job-tracking')

    @patch('releasehub.notifications.integrations.requests.post', side_effect=requests.exceptions.Timeout())
    def test_timeout(self, mock_post):
        """Timeouts are not retried"""
        with self.assertRaises(IntegrationFailure):
            self.client.create_job({'jobNo': 'REL-1'})
        self.assertEqual(mock_post.call_count, 1)

    @patch('releasehub.notifications.integrations.requests.post')
    def test_missing_job_id(self, mock_post):
        """A success response without a jobId is a failure"""
        mock_post.return_value = json_response({'success': True})
        with self.assertRaises(IntegrationFailure):
            self.client.create_job({'jobNo': 'REL-1'})


class VendorPortalClientTests(SimpleTestCase):
    """Test the vendor-portal webhook"""

    def setUp(self):
        self.client = VendorPortalClient('https://portal.example.com', 'Enterprise Print Group')

    @patch('releasehub.notifications.integrations.requests.post')
    def test_create_job(self, mock_post):
        """Posts title, customer and email body"""
        mock_post.return_value = json_response({'id': 'job-1'})
        self.assertEqual(self.client.create_job('REL-1 - 100307705', 'body'), 'job-1')
        self.assertEqual(mock_post.call_args.args[0], 'https://portal.example.com/api/jobs')
        self.assertEqual(mock_post.call_args.kwargs['json'], {
            'title': 'REL-1 - 100307705', 'customerName': 'Enterprise Print Group', 'emailBody': 'body',
        })

    @patch('releasehub.notifications.integrations.requests.post', side_effect=requests.exceptions.ConnectionError())
    def test_detached_failure_is_contained(self, mock_post):
        """Detached calls log their failure inside the thread"""
        with self.assertLogs('releasehub.notifications', level='ERROR'):
            thread = self.client.create_job_detached('REL-1 - 100307705', 'body')
            thread.join(timeout=5)
        self.assertTrue(thread.daemon)
        self.assertFalse(thread.is_alive())

    def test_detached_unexpected_error_is_logged(self):
        """Errors outside the request layer are still logged by the thread"""
        with patch.object(VendorPortalClient, 'create_job', side_effect=RuntimeError('boom')):
            with self.assertLogs('releasehub.notifications', level='ERROR') as logs:
                thread = self.client.create_job_detached('REL-1 - 100307705', 'body')
                thread.join(timeout=5)
        self.assertIn('failed unexpectedly: boom', logs.output[0])
        self.assertFalse(thread.is_alive())


class IntegrationsTests(SimpleTestCase):
    """Test the integrations bundle"""

    @override_settings(VENDOR_NOTIFY_EMAILS={'ThreeZ': ['orders@threez.com']}, JOB_TRACKING_URL='', VENDOR_PORTAL_URL='')
    def test_from_settings(self):
        """Unconfigured webhooks report so; vendor recipients come from settings"""
        integrations = Integrations.from_settings()
        self.assertFalse(integrations.job_tracking.is_configured)
        self.assertFalse(integrations.vendor_portal.is_configured)
        self.assertEqual(integrations.recipients_for_vendor('ThreeZ'), ['orders@threez.com'])
        self.assertEqual(integrations.recipients_for_vendor('Other'), [])
