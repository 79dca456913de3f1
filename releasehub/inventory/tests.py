"""
Test suite for the inventory module
Tests: availability rule, pallet borrow, ledger writes, production API
"""
from unittest.mock import patch
from django.test import TestCase, SimpleTestCase
from rest_framework import status
from releasehub.core.exceptions import InsufficientInventory, ConflictError
from releasehub.core.models import AuditLog
from releasehub.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from releasehub.catalog.models import Part
from releasehub.inventory import ledger
from releasehub.inventory.models import Production


class AvailabilityRuleTests(SimpleTestCase):
    """Test has_sufficient_inventory"""

    def test_enough_pallets(self):
        """More pallets on hand than requested is always enough"""
        self.assertTrue(ledger.has_sufficient_inventory(50, 10, 5, 0))
        self.assertTrue(ledger.has_sufficient_inventory(50, 0, 5, 40))

    def test_too_many_pallets(self):
        """Requesting more pallets than exist is refused"""
        self.assertFalse(ledger.has_sufficient_inventory(50, 10, 51, 0))

    def test_all_pallets_needs_enough_boxes(self):
        """Taking every pallet leaves only loose boxes to cover the request"""
        self.assertTrue(ledger.has_sufficient_inventory(50, 10, 50, 10))
        self.assertFalse(ledger.has_sufficient_inventory(50, 10, 50, 20))


class PlanReleaseTests(SimpleTestCase):
    """Test the one-pallet borrow"""

    def test_no_borrow(self):
        """Enough loose boxes means no pallet is unstacked"""
        self.assertEqual(ledger.plan_release(50, 10, 5, 0, 51), (45, 10))
        self.assertEqual(ledger.plan_release(50, 10, 5, 10, 51), (45, 0))

    def test_borrow_one_pallet(self):
        """Short on boxes: one pallet is broken into boxes"""
        self.assertEqual(ledger.plan_release(50, 10, 5, 20, 51), (44, 41))

    def test_borrow_keeps_boxes_in_range(self):
        """After a borrow the box count stays below a full pallet"""
        new_pallets, new_boxes = ledger.plan_release(3, 0, 1, 50, 51)
        self.assertEqual((new_pallets, new_boxes), (1, 1))
        self.assertTrue(0 <= new_boxes < 51)


class LedgerTests(TestCase):
    """Test ledger writes against the database"""

    def setUp(self):
        self.part = TestDataFactory.create_part(current_pallets=50, current_boxes=10)

    def test_apply_release(self):
        """Stock is reduced and the instance reflects it"""
        self.assertEqual(ledger.apply_release(self.part, 5, 20), (44, 41))
        self.part.refresh_from_db()
        self.assertEqual((self.part.current_pallets, self.part.current_boxes), (44, 41))

    def test_apply_release_insufficient(self):
        """Refused release leaves stock unchanged"""
        with self.assertRaises(InsufficientInventory):
            ledger.apply_release(self.part, 50, 20)
        self.part.refresh_from_db()
        self.assertEqual((self.part.current_pallets, self.part.current_boxes), (50, 10))

    def test_apply_release_rereads_after_concurrent_change(self):
        """A stale instance is re-read and the release applied to fresh stock"""
        Part.objects.filter(pk=self.part.pk).update(current_pallets=40)
        self.assertEqual(ledger.apply_release(self.part, 5, 0), (35, 10))
        self.part.refresh_from_db()
        self.assertEqual(self.part.current_pallets, 35)

    def test_apply_release_rechecks_after_concurrent_change(self):
        """If the concurrent change drained stock, the retry refuses the release"""
        Part.objects.filter(pk=self.part.pk).update(current_pallets=2)
        with self.assertRaises(InsufficientInventory):
            ledger.apply_release(self.part, 5, 0)

    def test_apply_release_gives_up_after_repeated_conflicts(self):
        """Conflicts on every attempt end in ConflictError"""
        with patch.object(Part, 'refresh_from_db'), \
                patch('releasehub.inventory.ledger.Part.objects.filter') as mock_filter:
            mock_filter.return_value.update.return_value = 0
            with self.assertRaises(ConflictError):
                ledger.apply_release(self.part, 5, 0)
            self.assertEqual(mock_filter.return_value.update.call_count, ledger.MAX_ATTEMPTS)

    def test_apply_production_does_not_normalise(self):
        """Inbound boxes are added as-is, even past a full pallet"""
        ledger.apply_production(self.part, 2, 45)
        self.part.refresh_from_db()
        self.assertEqual((self.part.current_pallets, self.part.current_boxes), (52, 55))

    def test_restore_release(self):
        """Deleting a release adds its quantities back"""
        release = TestDataFactory.create_release(part=self.part, pallets=5, boxes=3)
        ledger.restore_release(release)
        self.part.refresh_from_db()
        self.assertEqual((self.part.current_pallets, self.part.current_boxes), (55, 13))


class ProductionAPITests(TestCase):
    """Test production endpoints"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.customer = TestDataFactory.create_user()
        self.part = TestDataFactory.create_part(current_pallets=50, current_boxes=10)
        self.client = AuthenticatedAPIClient()

    def test_record_production(self):
        """Admin records production; stock and totals update"""
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/v1/production/', {
            'part_id': self.part.id, 'pallets': 10, 'boxes': 5, 'notes': 'Run 42',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['total_units'], (10 * 51 + 5) * 130)
        self.part.refresh_from_db()
        self.assertEqual((self.part.current_pallets, self.part.current_boxes), (60, 15))
        self.assertTrue(AuditLog.objects.filter(action='production_create').exists())

    def test_list_production(self):
        """Admin lists production newest first"""
        Production.objects.create(part=self.part, pallets=1, boxes=0, total_units=6630, created_by=self.admin)
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/production/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['part']['part_number'], self.part.part_number)

    def test_customer_forbidden(self):
        """Customers cannot record production"""
        self.client.authenticate_user(self.customer)
        response = self.client.post('/api/v1/production/', {'part_id': self.part.id, 'pallets': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.part.refresh_from_db()
        self.assertEqual(self.part.current_pallets, 50)

    def test_unknown_part(self):
        """Unknown part is 404"""
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/v1/production/', {'part_id': 99999, 'pallets': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_negative_quantity_rejected(self):
        """Negative pallets fail validation"""
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/v1/production/', {'part_id': self.part.id, 'pallets': -1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('pallets', response.data)
