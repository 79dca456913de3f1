"""
Test suite for the catalog module
Tests: pallet/box/unit arithmetic, stock status thresholds, parts API
"""
from decimal import Decimal
from io import StringIO
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase, SimpleTestCase
from rest_framework import status
from releasehub.core.models import AuditLog
from releasehub.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from releasehub.catalog.models import Part
from releasehub.catalog.units import (
    total_boxes, total_units, percent_of_annual, stock_status,
    STATUS_GOOD, STATUS_LOW, STATUS_CRITICAL,
)


class UnitConversionTests(SimpleTestCase):
    """Test pallet/box/unit conversion"""

    def test_total_boxes(self):
        """Pallets are expanded with the part's boxes per pallet"""
        self.assertEqual(total_boxes(5, 0, 51), 255)
        self.assertEqual(total_boxes(2, 7, 51), 109)

    def test_total_units(self):
        """Five full pallets of 51 boxes at 130 units"""
        self.assertEqual(total_units(5, 0, 51, 130), 33150)

    def test_total_units_loose_boxes_only(self):
        """Loose boxes without pallets"""
        self.assertEqual(total_units(0, 3, 51, 130), 390)

    def test_zero_quantity(self):
        """Nothing in, nothing out"""
        self.assertEqual(total_units(0, 0, 51, 130), 0)


class StockStatusTests(SimpleTestCase):
    """Test stock status classification against the annual order"""

    def test_good_above_thirty_percent(self):
        """31% of annual order is good"""
        self.assertEqual(stock_status(31000, 100000), (31, STATUS_GOOD))

    def test_exactly_thirty_percent_is_low(self):
        """The good threshold is exclusive"""
        self.assertEqual(stock_status(30000, 100000), (30, STATUS_LOW))

    def test_twenty_percent_is_low(self):
        """20% of annual order is low"""
        self.assertEqual(stock_status(20000, 100000), (20, STATUS_LOW))

    def test_exactly_fifteen_percent_is_critical(self):
        """The low threshold is exclusive"""
        self.assertEqual(stock_status(15000, 100000), (15, STATUS_CRITICAL))

    def test_no_annual_order_is_critical(self):
        """A part without an annual order is critical at 0%"""
        self.assertEqual(stock_status(5000, 0), (0, STATUS_CRITICAL))

    def test_percent_rounds_half_up(self):
        """Displayed percent rounds half up"""
        self.assertEqual(stock_status(12500, 100000)[0], 13)
        self.assertAlmostEqual(percent_of_annual(12500, 100000), 12.5)

    def test_status_uses_unrounded_percent(self):
        """30.4% rounds to 30 for display but is still good"""
        self.assertEqual(stock_status(30400, 100000), (30, STATUS_GOOD))


class PartModelTests(TestCase):
    """Test Part derived properties"""

    def test_part_totals(self):
        """Totals combine pallets and loose boxes"""
        part = TestDataFactory.create_part(current_pallets=50, current_boxes=10)
        self.assertEqual(part.total_boxes, 2560)
        self.assertEqual(part.total_units, 332800)
        self.assertEqual(str(part), part.part_number)


class PartAPITests(TestCase):
    """Test parts list and admin update"""

    def setUp(self):
        self.customer = TestDataFactory.create_user()
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.part = TestDataFactory.create_part(part_number='100307705', current_pallets=50, current_boxes=10)

    def test_list_parts(self):
        """Any authenticated user can list parts with stock figures"""
        TestDataFactory.create_part(part_number='100309797')
        self.client.authenticate_user(self.customer)
        response = self.client.get('/api/v1/parts/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([p['part_number'] for p in response.data], ['100307705', '100309797'])
        first = response.data[0]
        self.assertEqual(first['total_units'], 332800)
        self.assertEqual(first['status'], STATUS_GOOD)
        self.assertEqual(first['percent_of_annual'], 333)

    def test_list_parts_requires_authentication(self):
        """Anonymous requests are rejected"""
        response = self.client.get('/api/v1/parts/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_admin_updates_part(self):
        """Admin can change catalogue fields and an audit entry is written"""
        self.client.authenticate_user(self.admin)
        response = self.client.put('/api/v1/parts/', {
            'id': self.part.id,
            'price_per_unit': '0.3000',
            'annual_order': 120000,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.part.refresh_from_db()
        self.assertEqual(self.part.price_per_unit, Decimal('0.3000'))
        self.assertEqual(self.part.annual_order, 120000)
        log = AuditLog.objects.get(action='part_update')
        self.assertEqual(log.object_reference, '100307705')
        self.assertEqual(log.changes['annual_order']['new'], '120000')

    def test_update_ignores_stock_fields(self):
        """Stock levels cannot be edited through the parts endpoint"""
        self.client.authenticate_user(self.admin)
        response = self.client.put('/api/v1/parts/', {
            'id': self.part.id,
            'current_pallets': 999,
            'description': 'UPDATED',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.part.refresh_from_db()
        self.assertEqual(self.part.current_pallets, 50)
        self.assertEqual(self.part.description, 'UPDATED')

    def test_customer_cannot_update_part(self):
        """Customers get 403 on part updates"""
        self.client.authenticate_user(self.customer)
        response = self.client.put('/api/v1/parts/', {'id': self.part.id, 'description': 'X'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertIn('error', response.data)

    def test_update_requires_id(self):
        """Missing id is a validation error"""
        self.client.authenticate_user(self.admin)
        response = self.client.put('/api/v1/parts/', {'description': 'X'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Part id is required')

    def test_update_unknown_part(self):
        """Unknown part id is 404"""
        self.client.authenticate_user(self.admin)
        response = self.client.put('/api/v1/parts/', {'id': 99999, 'description': 'X'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_update_rejects_zero_packing(self):
        """Units per box must be at least 1"""
        self.client.authenticate_user(self.admin)
        response = self.client.put('/api/v1/parts/', {'id': self.part.id, 'units_per_box': 0}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('units_per_box', response.data)


class SetPartPackingCommandTests(TestCase):
    """Test the set_part_packing management command"""

    def test_updates_packing(self):
        """Packing configuration is changed for the named part"""
        part = TestDataFactory.create_part(part_number='100309797', units_per_box=120, boxes_per_pallet=68)
        out = StringIO()
        call_command('set_part_packing', '100309797', '--units-per-box', '130', '--boxes-per-pallet', '51', stdout=out)
        part.refresh_from_db()
        self.assertEqual((part.units_per_box, part.boxes_per_pallet), (130, 51))
        self.assertIn('130 units/box', out.getvalue())

    def test_unknown_part(self):
        """Unknown part numbers raise CommandError"""
        with self.assertRaises(CommandError):
            call_command('set_part_packing', 'nope', '--units-per-box', '130', '--boxes-per-pallet', '51')
        self.assertFalse(Part.objects.exists())
