"""
Test utilities and factories for creating test data
"""
import random
import string
from decimal import Decimal
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from releasehub.catalog.models import Part
from releasehub.catalog.units import total_units
from releasehub.locations.models import ShippingLocation
from releasehub.releases import numbering
from releasehub.releases.models import Release

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(email=None, password='testpass123', name=None, role=User.ROLE_CUSTOMER):
        """Create a test user (customer by default)"""
        if not email:
            email = f'user_{TestDataFactory.random_string(6).lower()}@test.com'
        return User.objects.create_user(
            email=email,
            password=password,
            name=name or 'Test User',
            role=role,
        )

    @staticmethod
    def create_admin(email=None, password='testpass123'):
        """Create a test user with the ADMIN role"""
        return TestDataFactory.create_user(email=email, password=password, name='Test Admin', role=User.ROLE_ADMIN)

    @staticmethod
    def create_part(part_number=None, units_per_box=130, boxes_per_pallet=51,
                    current_pallets=50, current_boxes=10, price_per_unit=Decimal('0.2859'),
                    annual_order=100000, vendor_name='ThreeZ'):
        """Create a test part; defaults match the 130 units/box, 51 boxes/pallet packing"""
        if not part_number:
            part_number = ''.join(random.choices(string.digits, k=9))
        return Part.objects.create(
            part_number=part_number,
            description=f'MANUAL {part_number}',
            units_per_box=units_per_box,
            boxes_per_pallet=boxes_per_pallet,
            price_per_unit=price_per_unit,
            cost_basis_per_unit=Decimal('0.2417'),
            annual_order=annual_order,
            current_pallets=current_pallets,
            current_boxes=current_boxes,
            vendor_name=vendor_name,
        )

    @staticmethod
    def create_location(name=None, is_active=True):
        """Create a test shipping location"""
        if not name:
            name = f'Plant {TestDataFactory.random_string(6)}'
        return ShippingLocation.objects.create(
            name=name,
            address='500 Tennessee Blvd',
            city='Ashland City',
            state='TN',
            zip_code='37015',
            is_active=is_active,
        )

    @staticmethod
    def create_release(part=None, location=None, user=None, pallets=2, boxes=5, **extra):
        """
        Create a release row directly, without touching the part's stock.
        Use the workflow or the API when the inventory effect matters.
        """
        part = part or TestDataFactory.create_part()
        location = location or TestDataFactory.create_location()
        user = user or TestDataFactory.create_user()
        sequence = numbering.next_sequence()
        fields = {
            'release_number': numbering.format_release_number(sequence),
            'ticket_number': numbering.format_ticket_number(sequence),
            'part': part,
            'shipping_location': location,
            'created_by': user,
            'pallets': pallets,
            'boxes': boxes,
            'boxes_per_pallet': part.boxes_per_pallet,
            'units_per_box': part.units_per_box,
            'total_units': total_units(pallets, boxes, part.boxes_per_pallet, part.units_per_box),
            'customer_po_number': f'PO-{TestDataFactory.random_string(6).upper()}',
            'batch_number': part.part_number[-4:],
            'cartons': pallets * part.boxes_per_pallet + boxes,
        }
        fields.update(extra)
        return Release.objects.create(**fields)


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
