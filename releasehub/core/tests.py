"""
Test suite for the core module
Tests: JWT login and claims, current user, audit log, error shape, seed command
"""
from io import StringIO
from django.core.management import call_command
from django.test import TestCase
from rest_framework import status
from rest_framework_simplejwt.tokens import AccessToken
from releasehub.catalog.models import Part
from releasehub.core.models import AuditLog, User
from releasehub.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from releasehub.core.utils import create_audit_log
from releasehub.locations.models import ShippingLocation


class UserModelTests(TestCase):
    """Test the email-login user model"""

    def test_email_is_normalised(self):
        """Emails are stored lowercase"""
        user = User.objects.create_user(email='Kirk@EPrintGroup.com', password='x', name='Kirk')
        self.assertEqual(user.email, 'kirk@eprintgroup.com')
        self.assertEqual(user.role, User.ROLE_CUSTOMER)
        self.assertFalse(user.is_admin)

    def test_superuser_is_admin(self):
        """Superusers carry the ADMIN role"""
        user = User.objects.create_superuser(email='admin@jdgraphic.com', password='x', name='Admin')
        self.assertTrue(user.is_admin)
        self.assertTrue(user.is_staff)


class AuthAPITests(TestCase):
    """Test login, refresh and current user"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.user = TestDataFactory.create_user(email='kirk@eprintgroup.com', password='customer123', name='Kirk')

    def test_login_returns_tokens_and_claims(self):
        """Access token carries email, name and role"""
        response = self.client.post('/api/v1/auth/login/', {
            'email': 'kirk@eprintgroup.com', 'password': 'customer123',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('refresh', response.data)
        self.assertEqual(response.data['user']['role'], User.ROLE_CUSTOMER)
        token = AccessToken(response.data['access'])
        self.assertEqual(token['email'], 'kirk@eprintgroup.com')
        self.assertEqual(token['name'], 'Kirk')
        self.assertEqual(token['role'], User.ROLE_CUSTOMER)

    def test_login_wrong_password(self):
        """Bad credentials are a 401"""
        response = self.client.post('/api/v1/auth/login/', {
            'email': 'kirk@eprintgroup.com', 'password': 'wrong',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertIn('error', response.data)

    def test_refresh(self):
        """A refresh token yields a new access token"""
        login = self.client.post('/api/v1/auth/login/', {
            'email': 'kirk@eprintgroup.com', 'password': 'customer123',
        }, format='json')
        response = self.client.post('/api/v1/auth/refresh/', {'refresh': login.data['refresh']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)

    def test_current_user(self):
        """auth/me returns the authenticated user"""
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.data['email'], 'kirk@eprintgroup.com')

    def test_current_user_requires_token(self):
        """No token is a 401 in the error shape"""
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertIn('error', response.data)


class AuditLogTests(TestCase):
    """Test audit logging"""

    def test_create_audit_log(self):
        """Entries record user, action and reference"""
        user = TestDataFactory.create_admin()
        log = create_audit_log(user=user, action='part_update', model_name='Part', object_id=3,
                               object_reference='100307705', changes={'price_per_unit': {'old': '0.2', 'new': '0.3'}})
        self.assertEqual(log.object_id, '3')
        self.assertEqual(log.user, user)

    def test_missing_fields_skipped(self):
        """Incomplete entries are skipped, not raised"""
        self.assertIsNone(create_audit_log(action='part_update'))
        self.assertFalse(AuditLog.objects.exists())

    def test_admin_lists_audit_logs(self):
        """Admins can filter the audit log by reference"""
        admin = TestDataFactory.create_admin()
        create_audit_log(user=admin, action='release_create', model_name='Release', object_id=1, object_reference='REL-1')
        create_audit_log(user=admin, action='release_create', model_name='Release', object_id=2, object_reference='REL-2')
        client = AuthenticatedAPIClient().authenticate_user(admin)
        response = client.get('/api/v1/audit-logs/', {'reference': 'REL-2'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([entry['object_reference'] for entry in response.data], ['REL-2'])

    def test_customer_cannot_list_audit_logs(self):
        """The audit log is admin only"""
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())
        response = client.get('/api/v1/audit-logs/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error'], 'Admin access required')


class SeedDataCommandTests(TestCase):
    """Test the seed_data management command"""

    def test_seed(self):
        """Users, parts with starting stock and shipping locations are created"""
        call_command('seed_data', stdout=StringIO())
        self.assertTrue(User.objects.get(email='admin@jdgraphic.com').is_admin)
        self.assertFalse(User.objects.get(email='kirk@eprintgroup.com').is_admin)
        part = Part.objects.get(part_number='100307705')
        self.assertEqual((part.current_pallets, part.current_boxes), (50, 10))
        self.assertEqual((part.units_per_box, part.boxes_per_pallet), (130, 51))
        self.assertEqual(ShippingLocation.objects.count(), 4)

    def test_seed_is_idempotent(self):
        """Running twice keeps stock and creates nothing new"""
        call_command('seed_data', stdout=StringIO())
        Part.objects.filter(part_number='100307705').update(current_pallets=12)
        call_command('seed_data', stdout=StringIO())
        self.assertEqual(User.objects.count(), 2)
        self.assertEqual(Part.objects.count(), 2)
        self.assertEqual(Part.objects.get(part_number='100307705').current_pallets, 12)
