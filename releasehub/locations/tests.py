"""
Test suite for shipping locations
"""
from django.test import TestCase
from rest_framework import status
from releasehub.core.test_utils import TestDataFactory, AuthenticatedAPIClient


class ShippingLocationAPITests(TestCase):
    """Test GET /shipping-locations/"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user())

    def test_lists_active_locations_by_name(self):
        """Inactive locations are hidden and the rest sorted by name"""
        TestDataFactory.create_location(name='AO Smith - McBee, SC')
        TestDataFactory.create_location(name='AO Smith - Ashland City, TN')
        TestDataFactory.create_location(name='Closed Plant', is_active=False)
        response = self.client.get('/api/v1/shipping-locations/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            [location['name'] for location in response.data],
            ['AO Smith - Ashland City, TN', 'AO Smith - McBee, SC'],
        )

    def test_city_state_zip(self):
        """Address line helper"""
        location = TestDataFactory.create_location()
        self.assertEqual(location.city_state_zip, 'Ashland City, TN 37015')
