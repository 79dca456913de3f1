"""
Management command to load the starting users, parts and shipping locations
"""
from decimal import Decimal
from django.core.management.base import BaseCommand
from django.db import transaction
from releasehub.catalog.models import Part
from releasehub.core.models import User
from releasehub.locations.models import ShippingLocation

PARTS = [
    {
        'part_number': '100307705',
        'description': 'MANUAL, 36 PAGE, RES, GAS, UNBRANDED',
        'units_per_box': 130,
        'boxes_per_pallet': 51,
        'price_per_unit': Decimal('0.2859'),
        'cost_basis_per_unit': Decimal('0.2417'),
        'vendor_name': 'ThreeZ',
        'annual_order': 100000,
        'current_pallets': 50,
        'current_boxes': 10,
    },
    {
        'part_number': '100309797',
        'description': 'MANUAL, 28 PAGE, RES, ELECT, UNBRANDED',
        'units_per_box': 130,
        'boxes_per_pallet': 51,
        'price_per_unit': Decimal('0.2225'),
        'cost_basis_per_unit': Decimal('0.1956'),
        'vendor_name': 'ThreeZ',
        'annual_order': 200000,
        'current_pallets': 75,
        'current_boxes': 5,
    },
]

LOCATIONS = [
    {'name': 'AO Smith - Ashland City, TN', 'address': '500 Tennessee Blvd',
     'city': 'Ashland City', 'state': 'TN', 'zip_code': '37015'},
    {'name': 'AO Smith - Johnson City, TN', 'address': '1802 E Oakland Ave',
     'city': 'Johnson City', 'state': 'TN', 'zip_code': '37601'},
    {'name': 'AO Smith - McBee, SC', 'address': '105 Industrial Park Rd',
     'city': 'McBee', 'state': 'SC', 'zip_code': '29101'},
    {'name': 'AO Smith - Stratford, ON', 'address': '275 Ontario St',
     'city': 'Stratford', 'state': 'ON', 'zip_code': 'N5A 3H5'},
]

# Fields refreshed on existing parts; prices and stock are left alone
PART_UPDATE_FIELDS = ['description', 'units_per_box', 'boxes_per_pallet', 'cost_basis_per_unit', 'vendor_name']


class Command(BaseCommand):
    help = "Creates the admin and customer users, the starting parts and the AO Smith shipping locations"

    def add_arguments(self, parser):
        parser.add_argument('--admin-email', default='admin@jdgraphic.com')
        parser.add_argument('--admin-password', default='admin123')
        parser.add_argument('--customer-email', default='kirk@eprintgroup.com')
        parser.add_argument('--customer-password', default='customer123')

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write(self.style.SUCCESS("=" * 80))
        self.stdout.write(self.style.SUCCESS("SEEDING DATABASE"))
        self.stdout.write(self.style.SUCCESS("=" * 80))

        self._seed_user(options['admin_email'], options['admin_password'], 'JD Graphic Admin', User.ROLE_ADMIN)
        self._seed_user(options['customer_email'], options['customer_password'],
                        'Kirk Icuss (ePrint Group)', User.ROLE_CUSTOMER)

        for data in PARTS:
            # Starting stock is loaded directly on first create; afterwards it
            # only moves through productions and releases.
            part, created = Part.objects.get_or_create(part_number=data['part_number'], defaults=data)
            if created:
                self.stdout.write(self.style.SUCCESS(
                    f"  ✓ Part {part.part_number}: {part.current_pallets} pallets / {part.current_boxes} boxes"
                ))
            else:
                for field in PART_UPDATE_FIELDS:
                    setattr(part, field, data[field])
                part.save(update_fields=PART_UPDATE_FIELDS + ['updated_at'])
                self.stdout.write(self.style.WARNING(f"  ⊘ Part {part.part_number} exists, packing and vendor refreshed"))

        created_locations = 0
        for data in LOCATIONS:
            _, created = ShippingLocation.objects.get_or_create(name=data['name'], defaults=data)
            created_locations += int(created)
        self.stdout.write(self.style.SUCCESS(
            f"  ✓ Shipping locations: {created_locations} created, {len(LOCATIONS) - created_locations} already present"
        ))

        self.stdout.write(self.style.SUCCESS("=" * 80))
        self.stdout.write(f"Customer login: {options['customer_email']}")
        self.stdout.write(f"Admin login: {options['admin_email']}")

    def _seed_user(self, email, password, name, role):
        user = User.objects.filter(email=email.lower()).first()
        if user:
            self.stdout.write(self.style.WARNING(f"  ⊘ User {user.email} already exists"))
            return user
        if role == User.ROLE_ADMIN:
            user = User.objects.create_superuser(email=email, password=password, name=name)
        else:
            user = User.objects.create_user(email=email, password=password, name=name, role=role)
        self.stdout.write(self.style.SUCCESS(f"  ✓ Created {role.lower()} {user.email}"))
        return user
