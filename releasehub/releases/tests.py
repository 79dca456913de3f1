"""
Comprehensive test suite for Releases
Tests: numbering, status transitions, release creation and inventory,
post-commit task isolation, update/delete, documents, customer packing slip,
invoice sweep
"""
from datetime import date, timedelta
from unittest.mock import patch, MagicMock
import requests
from django.core import mail
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, SimpleTestCase, override_settings
from django.utils import timezone
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework_simplejwt.tokens import RefreshToken
from releasehub.core.exceptions import IntegrationFailure
from releasehub.core.models import AuditLog
from releasehub.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from releasehub.notifications.integrations import Integrations, JobTrackingClient, VendorPortalClient
from releasehub.releases import numbering, workflow
from releasehub.releases.invoicing import sweep_invoices
from releasehub.releases.models import Release
from releasehub.releases.transitions import next_status, can_delete

FAKE_PDF = b'%PDF-1.4 fake'


def make_integrations(job_tracking=None, vendor_portal=None):
    storage = MagicMock()
    storage.save_pdf.side_effect = lambda content, file_name, release_id: f'https://blob.example.com/pdfs/{file_name}'
    return Integrations(
        storage=storage,
        job_tracking=job_tracking or JobTrackingClient(),
        vendor_portal=vendor_portal or VendorPortalClient(),
        vendor_recipients={'ThreeZ': ['orders@threez.com']},
    )


@override_settings(
    EMAIL_BACKEND='django.core.mail.backends.locmem.EmailBackend',
    RELEASE_EMAIL_TO=['shipping@jdgraphic.com'],
    RELEASE_EMAIL_CC=[],
    INVOICE_REMINDER_TO=['billing@jdgraphic.com'],
    CRON_SECRET='cron-secret',
)
class ReleaseAPITestCase(TestCase):
    """Shared setup: patched document rendering and injected integrations"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.customer = TestDataFactory.create_user(name='Kirk')
        self.part = TestDataFactory.create_part(part_number='100307705', current_pallets=50, current_boxes=10)
        self.location = TestDataFactory.create_location(name='AO Smith - McBee, SC')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.customer)

        self.integrations = make_integrations()
        integrations_patcher = patch('releasehub.releases.views.get_integrations', side_effect=lambda: self.integrations)
        integrations_patcher.start()
        self.addCleanup(integrations_patcher.stop)

        render_patcher = patch('releasehub.documents.registry.render_document', return_value=FAKE_PDF)
        self.mock_render = render_patcher.start()
        self.addCleanup(render_patcher.stop)

    def release_payload(self, **overrides):
        payload = {
            'part_id': self.part.id,
            'shipping_location_id': self.location.id,
            'customer_po_number': 'PO-7781',
            'pallets': 5,
            'boxes': 0,
        }
        payload.update(overrides)
        return payload

    def assertStock(self, pallets, boxes):
        self.part.refresh_from_db()
        self.assertEqual((self.part.current_pallets, self.part.current_boxes), (pallets, boxes))


class NumberingTests(SimpleTestCase):
    """Test release, ticket and batch numbers"""

    def test_release_number(self):
        """Sequence is zero-padded to four digits under the date"""
        self.assertEqual(numbering.format_release_number(4, date(2025, 1, 20)), 'REL-20250120-0004')

    def test_ticket_number(self):
        """Ticket sequence is zero-padded to five digits"""
        self.assertEqual(numbering.format_ticket_number(4), 'TKT-00004')

    def test_default_batch_number(self):
        """Batch defaults to the last four characters of the part number"""
        self.assertEqual(numbering.default_batch_number('100307705'), '7705')

    def test_parse_ticket_number(self):
        """Blank and foreign ticket numbers carry no sequence"""
        self.assertEqual(numbering.parse_ticket_number('TKT-00042'), 42)
        self.assertIsNone(numbering.parse_ticket_number(''))
        self.assertIsNone(numbering.parse_ticket_number('JOB-7'))


class TransitionTests(SimpleTestCase):
    """Test release status transitions"""

    def test_first_tracking_number_ships(self):
        """Adding the first tracking number moves COMPLETED to SHIPPED"""
        self.assertEqual(next_status(Release.STATUS_COMPLETED, '', '1Z999'), Release.STATUS_SHIPPED)

    def test_first_tracking_number_overrides_requested_status(self):
        """The tracking rule wins over a status in the same request"""
        self.assertEqual(
            next_status(Release.STATUS_COMPLETED, '', '1Z999', Release.STATUS_COMPLETED),
            Release.STATUS_SHIPPED,
        )

    def test_changing_tracking_number_keeps_status(self):
        """Only the first tracking number triggers the transition"""
        self.assertEqual(
            next_status(Release.STATUS_COMPLETED, '1Z111', '1Z999', Release.STATUS_COMPLETED),
            Release.STATUS_COMPLETED,
        )

    def test_explicit_status(self):
        """Status can be set directly without tracking"""
        self.assertEqual(next_status(Release.STATUS_COMPLETED, '', None, 'SHIPPED'), Release.STATUS_SHIPPED)

    def test_invalid_status(self):
        """Unknown statuses are rejected"""
        with self.assertRaises(ValidationError):
            next_status(Release.STATUS_COMPLETED, '', None, 'LOST')

    def test_can_delete(self):
        """Only unshipped releases can be deleted"""
        self.assertTrue(can_delete(Release(status=Release.STATUS_COMPLETED)))
        self.assertFalse(can_delete(Release(status=Release.STATUS_SHIPPED)))


class TaskIsolationTests(SimpleTestCase):
    """Test the post-commit task runner"""

    def test_failure_does_not_stop_later_tasks(self):
        """A failing task is recorded and the next one still runs"""
        context = workflow.PostCommitContext(
            release=Release(release_number='REL-20250120-0001'),
            integrations=None,
            documents=MagicMock(),
        )

        def failing(ctx):
            raise IntegrationFailure('email', 'smtp down')

        outcomes = workflow.run_tasks(context, [('first', failing), ('second', lambda ctx: 'ok')])
        self.assertEqual([(o.name, o.ok) for o in outcomes], [('first', False), ('second', True)])
        self.assertEqual(outcomes[0].error, 'email: smtp down')
        self.assertEqual(outcomes[1].value, 'ok')


class ReleaseCreateTests(ReleaseAPITestCase):
    """Test POST /releases/"""

    def test_create_five_pallets(self):
        """5 pallets of 51 boxes at 130 units is 33,150 units; stock drops to 45/10"""
        response = self.client.post('/api/v1/releases/', self.release_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['total_units'], 33150)
        self.assertEqual(response.data['status'], Release.STATUS_COMPLETED)
        self.assertEqual(response.data['batch_number'], '7705')
        self.assertEqual(response.data['cartons'], 255)
        self.assertEqual(response.data['boxes_per_pallet'], 51)
        self.assertEqual(response.data['ship_via'], 'Averitt Collect')
        self.assertTrue(response.data['release_number'].startswith(f"REL-{timezone.localdate():%Y%m%d}-"))
        self.assertStock(45, 10)

    def test_pallets_default_to_five(self):
        """Omitted pallets default to 5"""
        payload = self.release_payload()
        del payload['pallets']
        response = self.client.post('/api/v1/releases/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['pallets'], 5)

    def test_insufficient_inventory(self):
        """50 pallets + 20 boxes against 50/10 is refused and stock is untouched"""
        response = self.client.post('/api/v1/releases/', self.release_payload(pallets=50, boxes=20), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('Insufficient inventory', response.data['error'])
        self.assertStock(50, 10)
        self.assertFalse(Release.objects.exists())
        self.assertEqual(len(mail.outbox), 0)

    def test_borrow_pallet(self):
        """Releasing more boxes than are loose breaks one pallet"""
        response = self.client.post('/api/v1/releases/', self.release_payload(pallets=5, boxes=20), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertStock(44, 41)

    def test_boxes_must_be_less_than_a_pallet(self):
        """A full pallet's worth of loose boxes is rejected"""
        response = self.client.post('/api/v1/releases/', self.release_payload(pallets=0, boxes=51), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertStock(50, 10)

    def test_empty_release_rejected(self):
        """Zero pallets and zero boxes is rejected"""
        response = self.client.post('/api/v1/releases/', self.release_payload(pallets=0, boxes=0), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_negative_quantity_rejected(self):
        """Negative boxes fail validation"""
        response = self.client.post('/api/v1/releases/', self.release_payload(boxes=-1), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('boxes', response.data)

    def test_missing_customer_po(self):
        """Customer PO is required"""
        payload = self.release_payload()
        del payload['customer_po_number']
        response = self.client.post('/api/v1/releases/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('customer_po_number', response.data)

    def test_unknown_part(self):
        """Unknown part is 404"""
        response = self.client.post('/api/v1/releases/', self.release_payload(part_id=99999), format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_unknown_shipping_location(self):
        """Unknown shipping location is a validation error"""
        response = self.client.post('/api/v1/releases/', self.release_payload(shipping_location_id=99999), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('shipping_location_id', response.data)
        self.assertStock(50, 10)

    def test_numbering_follows_release_count(self):
        """With three releases on file the next is 0004 / 00004"""
        for _ in range(3):
            TestDataFactory.create_release(part=self.part, location=self.location, user=self.customer)
        response = self.client.post('/api/v1/releases/', self.release_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['release_number'].endswith('-0004'))
        self.assertEqual(response.data['ticket_number'], 'TKT-00004')

    def test_create_after_deleting_earlier_release(self):
        """Deleting a release other than the latest does not block new numbers"""
        numbers = []
        for _ in range(3):
            response = self.client.post('/api/v1/releases/', self.release_payload(), format='json')
            self.assertEqual(response.status_code, status.HTTP_201_CREATED)
            numbers.append(response.data)
        admin_client = AuthenticatedAPIClient().authenticate_user(self.admin)
        response = admin_client.delete(f"/api/v1/releases/{numbers[1]['id']}/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.post('/api/v1/releases/', self.release_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['release_number'].endswith('-0004'))
        self.assertEqual(response.data['ticket_number'], 'TKT-00004')
        self.assertNotIn(response.data['release_number'], [data['release_number'] for data in numbers])
        self.assertStock(35, 10)

    def test_concurrent_number_taken_moves_to_next(self):
        """A number taken between read and insert is retried one higher"""
        TestDataFactory.create_release(part=self.part, location=self.location, user=self.customer)
        with patch('releasehub.releases.numbering.next_sequence', return_value=1):
            response = self.client.post('/api/v1/releases/', self.release_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['release_number'].endswith('-0002'))
        self.assertEqual(response.data['ticket_number'], 'TKT-00002')
        self.assertStock(45, 10)

    def test_packing_snapshot_survives_part_change(self):
        """Changing the part's packing later does not alter the release"""
        response = self.client.post('/api/v1/releases/', self.release_payload(), format='json')
        self.part.units_per_box = 100
        self.part.boxes_per_pallet = 68
        self.part.save()
        release = Release.objects.get(pk=response.data['id'])
        self.assertEqual(release.total_units, 33150)
        self.assertEqual(release.total_boxes, 255)

    def test_documents_stored_and_emailed(self):
        """Documents are stored, each rendered once, and sent to staff and vendor"""
        response = self.client.post('/api/v1/releases/', self.release_payload(), format='json')
        release_number = response.data['release_number']
        self.assertEqual(response.data['packing_slip_url'], f'https://blob.example.com/pdfs/packing-slip-{release_number}.pdf')
        self.assertEqual(response.data['invoice_url'], f'https://blob.example.com/pdfs/invoice-{release_number}.pdf')
        self.assertIsNotNone(response.data['documents_generated_at'])
        self.assertEqual(self.mock_render.call_count, 3)

        self.assertEqual(len(mail.outbox), 2)
        staff, vendor = mail.outbox
        self.assertEqual(staff.subject, f'New Release Created - {release_number}')
        self.assertEqual(len(staff.attachments), 3)
        self.assertEqual(vendor.to, ['orders@threez.com'])
        self.assertEqual([a[0] for a in vendor.attachments], [f'box-labels-{release_number}.pdf'])
        self.assertTrue(AuditLog.objects.filter(action='release_create', object_reference=release_number).exists())

    def test_no_vendor_email_without_recipients(self):
        """Vendors without configured recipients are skipped"""
        self.part.vendor_name = 'Other Mill'
        self.part.save()
        self.client.post('/api/v1/releases/', self.release_payload(), format='json')
        self.assertEqual(len(mail.outbox), 1)

    def test_storage_failure_does_not_fail_release(self):
        """Storage failure is isolated; emails still go out"""
        self.integrations.storage.save_pdf.side_effect = IntegrationFailure('storage', 'disk full')
        response = self.client.post('/api/v1/releases/', self.release_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['packing_slip_url'], '')
        self.assertStock(45, 10)
        self.assertEqual(len(mail.outbox), 2)

    def test_email_failure_does_not_fail_release(self):
        """Email failure is isolated and recorded in the audit entry"""
        with patch('releasehub.releases.workflow.emails.send_release_notification',
                   side_effect=IntegrationFailure('email', 'smtp down')):
            response = self.client.post('/api/v1/releases/', self.release_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        log = AuditLog.objects.get(action='release_create')
        self.assertEqual(log.changes['failed_steps'], ['email_release_notice'])

    @patch('releasehub.notifications.integrations.requests.post')
    def test_job_tracking_id_saved(self, mock_post):
        """The job id returned by job tracking is stored on the release"""
        mock_post.return_value = MagicMock(**{'json.return_value': {'success': True, 'jobId': 812}})
        self.integrations.job_tracking = JobTrackingClient('https://jobs.example.com', 'shh', 'Enterprise Print Group')
        response = self.client.post('/api/v1/releases/', self.release_payload(), format='json')
        self.assertEqual(response.data['external_job_id'], '812')
        payload = mock_post.call_args.kwargs['json']
        self.assertEqual(payload['jobNo'], response.data['release_number'])
        self.assertEqual(payload['quantity'], 33150)
        self.assertEqual(payload['customerPONumber'], 'PO-7781')

    @patch('releasehub.notifications.integrations.requests.post', side_effect=requests.exceptions.Timeout())
    def test_job_tracking_failure_does_not_fail_release(self, mock_post):
        """A webhook timeout leaves the release in place without a job id"""
        self.integrations.job_tracking = JobTrackingClient('https://jobs.example.com', 'shh')
        response = self.client.post('/api/v1/releases/', self.release_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['external_job_id'], '')
        self.assertStock(45, 10)

    def test_vendor_portal_is_detached(self):
        """The vendor portal job is started on its own thread"""
        portal = VendorPortalClient('https://portal.example.com', 'Enterprise Print Group')
        self.integrations.vendor_portal = portal
        with patch.object(VendorPortalClient, 'create_job_detached') as mock_detached:
            response = self.client.post('/api/v1/releases/', self.release_payload(), format='json')
        title, body = mock_detached.call_args.args
        self.assertEqual(title, f"{response.data['release_number']} - 100307705")
        self.assertIn('33,150', body)


class ReleaseListTests(ReleaseAPITestCase):
    """Test GET /releases/"""

    def setUp(self):
        super().setUp()
        self.other = TestDataFactory.create_user()
        self.own = TestDataFactory.create_release(part=self.part, location=self.location, user=self.customer,
                                                  customer_po_number='PO-OWN')
        self.others = TestDataFactory.create_release(part=self.part, location=self.location, user=self.other,
                                                     customer_po_number='PO-OTHER')

    def test_customer_sees_own(self):
        """Customers only see releases they created"""
        response = self.client.get('/api/v1/releases/')
        self.assertEqual([r['id'] for r in response.data], [self.own.id])

    def test_admin_sees_all(self):
        """Admins see every release"""
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/releases/')
        self.assertEqual(len(response.data), 2)

    def test_search(self):
        """Search matches the customer PO"""
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/releases/', {'search': 'other'})
        self.assertEqual([r['id'] for r in response.data], [self.others.id])

    def test_status_filter(self):
        """Status filter narrows the list"""
        Release.objects.filter(pk=self.own.pk).update(status=Release.STATUS_SHIPPED)
        response = self.client.get('/api/v1/releases/', {'status': 'SHIPPED'})
        self.assertEqual([r['id'] for r in response.data], [self.own.id])
        response = self.client.get('/api/v1/releases/', {'status': 'COMPLETED'})
        self.assertEqual(response.data, [])


class ReleaseUpdateTests(ReleaseAPITestCase):
    """Test PATCH /releases/<id>/"""

    def setUp(self):
        super().setUp()
        self.release = TestDataFactory.create_release(part=self.part, location=self.location, user=self.customer)
        self.url = f'/api/v1/releases/{self.release.id}/'

    def test_tracking_number_ships(self):
        """The first tracking number marks the release shipped"""
        response = self.client.patch(self.url, {'tracking_number': '1Z999AA10123456784'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], Release.STATUS_SHIPPED)
        self.assertEqual(response.data['tracking_number'], '1Z999AA10123456784')
        self.assertTrue(AuditLog.objects.filter(action='release_update').exists())

    def test_ship_date(self):
        """Ship date can be updated on its own"""
        response = self.client.patch(self.url, {'ship_date': '2025-02-01'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.release.refresh_from_db()
        self.assertEqual(timezone.localtime(self.release.ship_date).date(), date(2025, 2, 1))
        self.assertEqual(self.release.status, Release.STATUS_COMPLETED)

    def test_invalid_status(self):
        """Unknown status is a 400"""
        response = self.client.patch(self.url, {'status': 'LOST'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_quantities_are_not_editable(self):
        """Fields outside the update set are ignored"""
        self.client.patch(self.url, {'pallets': 40, 'tracking_number': 'T1'}, format='json')
        self.release.refresh_from_db()
        self.assertEqual(self.release.pallets, 2)

    def test_other_customer_forbidden(self):
        """Customers cannot touch releases they did not create"""
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.patch(self.url, {'tracking_number': 'T1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_can_update(self):
        """Admins can update any release"""
        self.client.authenticate_user(self.admin)
        response = self.client.patch(self.url, {'status': 'SHIPPED'}, format='json')
        self.assertEqual(response.data['status'], Release.STATUS_SHIPPED)


class ReleaseDeleteTests(ReleaseAPITestCase):
    """Test DELETE /releases/<id>/"""

    def setUp(self):
        super().setUp()
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/v1/releases/', self.release_payload(pallets=5, boxes=20), format='json')
        self.release = Release.objects.get(pk=response.data['id'])
        self.url = f'/api/v1/releases/{self.release.id}/'

    def test_delete_restores_inventory(self):
        """Deleting adds the pallets and boxes back without normalising"""
        self.assertStock(44, 41)
        response = self.client.delete(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Release.objects.filter(pk=self.release.pk).exists())
        self.assertStock(49, 61)
        self.assertTrue(AuditLog.objects.filter(action='release_delete').exists())

    def test_shipped_release_cannot_be_deleted(self):
        """Shipped releases are kept and stock is unchanged"""
        Release.objects.filter(pk=self.release.pk).update(status=Release.STATUS_SHIPPED)
        response = self.client.delete(self.url)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Cannot delete shipped releases')
        self.assertStock(44, 41)

    def test_customer_cannot_delete(self):
        """Only admins delete releases"""
        Release.objects.filter(pk=self.release.pk).update(created_by=self.customer)
        self.client.authenticate_user(self.customer)
        response = self.client.delete(self.url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(Release.objects.filter(pk=self.release.pk).exists())


class ReleaseDocumentsTests(ReleaseAPITestCase):
    """Test document regeneration and downloads"""

    def setUp(self):
        super().setUp()
        self.release = TestDataFactory.create_release(part=self.part, location=self.location, user=self.customer)
        self.url = f'/api/v1/releases/{self.release.id}/documents/'

    def test_get_urls(self):
        """Stored URLs are returned"""
        Release.objects.filter(pk=self.release.pk).update(packing_slip_url='https://blob.example.com/p.pdf')
        response = self.client.get(self.url)
        self.assertEqual(response.data['packing_slip_url'], 'https://blob.example.com/p.pdf')

    def test_regenerate_packing_slip(self):
        """A single document type can be regenerated"""
        response = self.client.post(self.url, {'document_type': 'packing-slip'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self.integrations.storage.save_pdf.call_count, 1)
        self.assertTrue(response.data['packing_slip_url'].endswith(f'packing-slip-{self.release.release_number}.pdf'))
        self.assertEqual(response.data['box_labels_url'], '')

    def test_regenerate_all(self):
        """'all' regenerates packing slip and box labels"""
        response = self.client.post(self.url, {}, format='json')
        self.assertEqual(self.integrations.storage.save_pdf.call_count, 2)
        self.assertNotEqual(response.data['box_labels_url'], '')

    def test_regenerate_storage_failure(self):
        """Storage failure on request is reported as 502"""
        self.integrations.storage.save_pdf.side_effect = IntegrationFailure('storage', 'disk full')
        response = self.client.post(self.url, {'document_type': 'all'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)

    def test_invalid_document_type(self):
        """Only known document types can be regenerated"""
        response = self.client.post(self.url, {'document_type': 'invoice'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_download(self):
        """Downloads return the rendered PDF as an attachment"""
        response = self.client.get(f'/api/v1/releases/{self.release.id}/download/invoice/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'application/pdf')
        self.assertEqual(
            response['Content-Disposition'],
            f'attachment; filename="invoice-{self.release.release_number}.pdf"',
        )
        self.assertEqual(response.content, FAKE_PDF)

    def test_download_unknown_type(self):
        """Unknown document types are a 400"""
        response = self.client.get(f'/api/v1/releases/{self.release.id}/download/manifest/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_download_with_query_token(self):
        """Browser links can authenticate with ?token="""
        token = str(RefreshToken.for_user(self.customer).access_token)
        self.client.logout()
        response = self.client.get(f'/api/v1/releases/{self.release.id}/download/order-acknowledgement/?token={token}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_download_requires_authentication(self):
        """No header and no token is rejected"""
        self.client.logout()
        response = self.client.get(f'/api/v1/releases/{self.release.id}/download/invoice/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class CustomerPackingSlipTests(ReleaseAPITestCase):
    """Test customer packing slip upload and retrieval"""

    def setUp(self):
        super().setUp()
        self.release = TestDataFactory.create_release(part=self.part, location=self.location, user=self.customer)
        self.url = f'/api/v1/releases/{self.release.id}/customer-packing-slip/'

    def upload(self, content=b'%PDF-1.4 customer', content_type='application/pdf'):
        upload = SimpleUploadedFile('customer-slip.pdf', content, content_type=content_type)
        return self.client.post(self.url, {'file': upload}, format='multipart')

    def test_upload(self):
        """PDF is stored and staff and vendor are told it is ready to ship"""
        response = self.upload()
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['release']['has_customer_packing_slip'])
        self.release.refresh_from_db()
        self.assertEqual(bytes(self.release.customer_packing_slip_data), b'%PDF-1.4 customer')
        self.assertIsNotNone(self.release.customer_packing_slip_uploaded_at)

        subjects = [message.subject for message in mail.outbox]
        self.assertEqual(subjects, [
            f'Ready to Ship - {self.release.release_number} - 100307705',
            f'OK to Ship - {self.release.release_number} - Packing Slip Uploaded',
        ])
        self.assertEqual(mail.outbox[0].attachments[0][1], b'%PDF-1.4 customer')
        self.assertIn('Kirk', mail.outbox[0].body)

    def test_upload_rejects_non_pdf(self):
        """Only application/pdf is accepted"""
        response = self.upload(content=b'hello', content_type='text/plain')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Only PDF files are accepted')
        self.assertEqual(len(mail.outbox), 0)

    def test_upload_requires_file(self):
        """Missing file is a 400"""
        response = self.client.post(self.url, {}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'No file provided')

    def test_email_failure_does_not_fail_upload(self):
        """Notification failures are logged, the upload still succeeds"""
        with patch('releasehub.releases.workflow.emails.send_ready_to_ship_notification',
                   side_effect=IntegrationFailure('email', 'smtp down')):
            response = self.upload()
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(mail.outbox), 1)

    def test_view_uploaded_slip(self):
        """The stored PDF is served inline"""
        self.upload()
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.content, b'%PDF-1.4 customer')
        self.assertEqual(response['Content-Disposition'], 'inline; filename="customer-slip.pdf"')

    def test_view_missing_slip(self):
        """No upload yet is a 404"""
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Packing slip not found')


class InvoiceSweepTests(ReleaseAPITestCase):
    """Test the invoice cron"""

    url = '/api/v1/cron/send-invoices/'

    def setUp(self):
        super().setUp()
        now = timezone.now()
        self.today = TestDataFactory.create_release(part=self.part, location=self.location, user=self.customer,
                                                    ship_date=now)
        self.yesterday = TestDataFactory.create_release(part=self.part, location=self.location, user=self.customer,
                                                        ship_date=now - timedelta(days=1))
        self.already_sent = TestDataFactory.create_release(part=self.part, location=self.location, user=self.customer,
                                                           ship_date=now, invoice_sent=True)
        self.client.logout()

    def cron_get(self, secret='cron-secret'):
        return self.client.get(self.url, HTTP_AUTHORIZATION=f'Bearer {secret}')

    def test_requires_secret(self):
        """Wrong or missing bearer is 401"""
        self.assertEqual(self.client.get(self.url).status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(self.cron_get('wrong').status_code, status.HTTP_401_UNAUTHORIZED)

    @override_settings(CRON_SECRET='')
    def test_unset_secret_rejects(self):
        """Without a configured secret nothing is accepted"""
        response = self.client.get(self.url, HTTP_AUTHORIZATION='Bearer ')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_sweep_sends_todays_invoices(self):
        """Only unsent releases shipping today are invoiced"""
        response = self.cron_get()
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['results'], {'total': 1, 'sent': 1, 'failed': 0, 'errors': []})
        self.today.refresh_from_db()
        self.assertTrue(self.today.invoice_sent)
        self.assertIsNotNone(self.today.invoice_sent_at)
        self.yesterday.refresh_from_db()
        self.assertFalse(self.yesterday.invoice_sent)

        self.assertEqual(len(mail.outbox), 1)
        message = mail.outbox[0]
        self.assertEqual(message.subject, f'Invoice Needed - {self.today.release_number} - 100307705')
        self.assertEqual(message.attachments[0][0], f'invoice-{self.today.release_number}.pdf')

    def test_sweep_continues_after_failure(self):
        """One failing release is recorded and the rest still go out"""
        second = TestDataFactory.create_release(part=self.part, location=self.location, user=self.customer,
                                                ship_date=timezone.now())
        with patch('releasehub.releases.invoicing.emails.send_invoice_reminder',
                   side_effect=[IntegrationFailure('email', 'smtp down'), None]):
            results = sweep_invoices()
        self.assertEqual((results['total'], results['sent'], results['failed']), (2, 1, 1))
        self.assertEqual(len(results['errors']), 1)
        self.assertTrue(results['errors'][0].endswith(': smtp down'))
        sent = Release.objects.filter(pk__in=[self.today.pk, second.pk], invoice_sent=True).count()
        self.assertEqual(sent, 1)

    def test_manual_trigger(self):
        """POST sends one release's invoice"""
        response = self.client.post(self.url, {'release_id': self.yesterday.id}, format='json',
                                    HTTP_AUTHORIZATION='Bearer cron-secret')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.yesterday.refresh_from_db()
        self.assertTrue(self.yesterday.invoice_sent)
        self.assertTrue(AuditLog.objects.filter(action='invoice_sent').exists())

    def test_manual_trigger_requires_release_id(self):
        """Missing release_id is a 400"""
        response = self.client.post(self.url, {}, format='json', HTTP_AUTHORIZATION='Bearer cron-secret')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_manual_trigger_unknown_release(self):
        """Unknown release is a 404"""
        response = self.client.post(self.url, {'release_id': 99999}, format='json',
                                    HTTP_AUTHORIZATION='Bearer cron-secret')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_manual_trigger_already_sent(self):
        """Invoices are not sent twice"""
        response = self.client.post(self.url, {'release_id': self.already_sent.id}, format='json',
                                    HTTP_AUTHORIZATION='Bearer cron-secret')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(len(mail.outbox), 0)
