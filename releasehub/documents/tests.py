"""
Test suite for document generation
Tests: deterministic PDF output, page counts, barcode fallback, storage fallback
"""
import re
import shutil
import tempfile
from datetime import date
from decimal import Decimal
from pathlib import Path
from unittest.mock import patch
from django.test import TestCase, SimpleTestCase, override_settings
from releasehub.core.exceptions import IntegrationFailure
from releasehub.core.test_utils import TestDataFactory
from releasehub.documents import barcode, registry
from releasehub.documents.builders import (
    Address, BoxLabelData, InvoiceData, InvoiceLine, PackingSlipData, PackingSlipLine,
    build_invoice_data, build_packing_slip_data,
)
from releasehub.documents import render_box_labels, render_invoice, render_packing_slip
from releasehub.documents.pdf import format_money
from releasehub.documents.storage import DocumentStorage

PAGE_PATTERN = re.compile(rb'/Type /Page\b')

SHIP_TO = Address(name='AO Smith - McBee, SC', address='105 Industrial Park Rd', city='McBee', state='SC', zip='29101')
SHIP_FROM = Address(name='Enterprise Print Group', address='6234 Enterprise Drive', city='Knoxville',
                    state='TN', zip='37909', country='USA')


def packing_slip_data(**overrides):
    fields = dict(
        release_number='REL-20250120-0004',
        ticket_number='TKT-00004',
        customer_po_number='PO-7781',
        date=date(2025, 1, 20),
        ship_to=SHIP_TO,
        ship_from=SHIP_FROM,
        line_items=(PackingSlipLine('100307705', 'MANUAL, 36 PAGE, RES, GAS, UNBRANDED', 130, 33150, 0, 33150, 0),),
        ship_via='Averitt Collect',
        freight_terms='Prepaid',
        payment_terms='2% 30, Net 60',
        cartons=255,
        weight=Decimal('1250.00'),
        shipping_class='55',
        notes='Dock 3 only',
    )
    fields.update(overrides)
    return PackingSlipData(**fields)


def box_label_data(total_boxes=3):
    return BoxLabelData(
        part_number='100307705',
        description='MANUAL, 36 PAGE, RES, GAS, UNBRANDED',
        units_per_box=130,
        batch_number='7705',
        manufacture_date=date(2025, 1, 20),
        total_boxes=total_boxes,
        ship_from=SHIP_FROM,
    )


def invoice_data():
    line = InvoiceLine('100307705', 'MANUAL, 36 PAGE', 33150, Decimal('0.2859'), Decimal('9477.585'))
    return InvoiceData(
        invoice_number='REL-20250120-0004',
        date=date(2025, 1, 20),
        customer_po_number='PO-7781',
        bill_to=SHIP_FROM,
        bill_from=SHIP_TO,
        line_items=(line,),
        subtotal=line.total,
        tax=Decimal('0'),
        total=line.total,
        payment_terms='2% 30, Net 60',
    )


class DeterministicRenderingTests(SimpleTestCase):
    """Identical input must render identical bytes"""

    def test_packing_slip_is_deterministic(self):
        """Packing slip renders the same bytes twice"""
        first = render_packing_slip(packing_slip_data())
        self.assertTrue(first.startswith(b'%PDF'))
        self.assertEqual(first, render_packing_slip(packing_slip_data()))

    def test_packing_slip_changes_with_input(self):
        """Different input gives different bytes"""
        self.assertNotEqual(
            render_packing_slip(packing_slip_data()),
            render_packing_slip(packing_slip_data(customer_po_number='PO-9999')),
        )

    def test_invoice_is_deterministic(self):
        """Invoice renders the same bytes twice"""
        first = render_invoice(invoice_data())
        self.assertTrue(first.startswith(b'%PDF'))
        self.assertEqual(first, render_invoice(invoice_data()))

    def test_box_labels_one_page_per_box(self):
        """Box labels produce a page for every box"""
        content = render_box_labels(box_label_data(total_boxes=3))
        self.assertTrue(content.startswith(b'%PDF'))
        self.assertEqual(len(PAGE_PATTERN.findall(content)), 3)
        self.assertEqual(content, render_box_labels(box_label_data(total_boxes=3)))

    def test_box_labels_without_barcode(self):
        """A barcode failure falls back to text and still renders"""
        with patch.object(barcode, 'code128_png', side_effect=ValueError('bad input')):
            content = render_box_labels(box_label_data(total_boxes=1))
        self.assertTrue(content.startswith(b'%PDF'))
        self.assertIn(b'BARCODE: 100307705', content)


class BarcodeTests(SimpleTestCase):
    """Test Code128 rendering"""

    def test_png_bytes(self):
        """Barcodes render to PNG"""
        self.assertTrue(barcode.code128_png('100307705').startswith(b'\x89PNG'))


class FormattingTests(SimpleTestCase):
    """Test money formatting"""

    def test_money_rounds_half_up(self):
        """Invoice totals round half up to cents"""
        self.assertEqual(format_money(Decimal('9477.585')), '$9,477.59')

    def test_unit_price_four_places(self):
        """Unit prices keep four decimal places"""
        self.assertEqual(format_money(Decimal('0.2859'), places=4), '$0.2859')


class ReleaseDocumentTests(TestCase):
    """Test building documents from a release"""

    def setUp(self):
        part = TestDataFactory.create_part(part_number='100307705')
        self.release = TestDataFactory.create_release(part=part, pallets=5, boxes=0, notes='Dock 3')

    def test_packing_slip_data_from_release(self):
        """Snapshot carries release quantities and the ship-to location"""
        data = build_packing_slip_data(self.release)
        self.assertEqual(data.line_items[0].shipped, 33150)
        self.assertEqual(data.ship_to.name, self.release.shipping_location.name)
        self.assertEqual(data.cartons, 255)

    def test_invoice_total(self):
        """Invoice total is units times price per unit"""
        data = build_invoice_data(self.release)
        self.assertEqual(data.total, Decimal('33150') * Decimal('0.2859'))

    def test_render_every_document_type(self):
        """Every registered document type renders to a PDF"""
        for doc_type in registry.DOCUMENT_TYPES:
            if doc_type == registry.BOX_LABELS:
                # 255 pages; covered by the box label tests above
                continue
            content = registry.render_document(doc_type, self.release)
            self.assertTrue(content.startswith(b'%PDF'), doc_type)

    def test_document_filename(self):
        """File names combine the type and release number"""
        self.assertEqual(
            registry.document_filename(registry.INVOICE, self.release),
            f'invoice-{self.release.release_number}.pdf',
        )


class DocumentStorageTests(SimpleTestCase):
    """Test Azure upload with local fallback"""

    def setUp(self):
        self.media_root = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.media_root, ignore_errors=True)

    def test_local_when_not_configured(self):
        """Without Azure credentials the PDF is written under MEDIA_ROOT"""
        with override_settings(MEDIA_ROOT=self.media_root, MEDIA_URL='/media/'):
            url = DocumentStorage().save_pdf(b'%PDF-1.4 test', 'invoice-REL-1.pdf', 7)
        self.assertEqual(url, '/media/documents/releases/7/invoice-REL-1.pdf')
        saved = Path(self.media_root) / 'documents' / 'releases' / '7' / 'invoice-REL-1.pdf'
        self.assertEqual(saved.read_bytes(), b'%PDF-1.4 test')

    def test_local_overwrites_previous(self):
        """Regenerating a document replaces the stored file"""
        with override_settings(MEDIA_ROOT=self.media_root, MEDIA_URL='/media/'):
            storage = DocumentStorage()
            storage.save_pdf(b'old', 'packing-slip-REL-1.pdf', 1)
            url = storage.save_pdf(b'new', 'packing-slip-REL-1.pdf', 1)
        self.assertEqual(url, '/media/documents/releases/1/packing-slip-REL-1.pdf')

    def test_azure_upload(self):
        """Configured storage uploads to the container and returns the public URL"""
        storage = DocumentStorage('acct', 'a2V5', 'docs', 'pdfs', 'https://cdn.example.com')
        with patch('azure.storage.blob.BlobServiceClient.from_connection_string') as mock_client:
            url = storage.save_pdf(b'%PDF', 'invoice-REL-1.pdf', 1)
        blob_client = mock_client.return_value.get_blob_client
        self.assertEqual(blob_client.call_args.kwargs['container'], 'docs')
        blob_name = blob_client.call_args.kwargs['blob']
        self.assertTrue(blob_name.startswith('pdfs/'))
        self.assertTrue(blob_name.endswith('-invoice-REL-1.pdf'))
        self.assertEqual(url, f'https://cdn.example.com/{blob_name}')

    def test_azure_failure_falls_back_to_local(self):
        """A failed upload is logged and the file saved locally"""
        storage = DocumentStorage('acct', 'a2V5', 'docs', 'pdfs')
        with override_settings(MEDIA_ROOT=self.media_root, MEDIA_URL='/media/'), \
                patch('azure.storage.blob.BlobServiceClient.from_connection_string', side_effect=ValueError('down')):
            url = storage.save_pdf(b'%PDF', 'invoice-REL-1.pdf', 3)
        self.assertEqual(url, '/media/documents/releases/3/invoice-REL-1.pdf')

    def test_local_write_failure_raises(self):
        """If local storage also fails the caller gets IntegrationFailure"""
        with patch('releasehub.documents.storage.FileSystemStorage.save', side_effect=OSError('disk full')):
            with self.assertRaises(IntegrationFailure):
                DocumentStorage().save_pdf(b'%PDF', 'invoice-REL-1.pdf', 3)
