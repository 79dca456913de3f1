"""
Management command to change a part's packing configuration
"""
from django.core.management.base import BaseCommand, CommandError
from releasehub.catalog.models import Part


class Command(BaseCommand):
    help = "Sets units per box and boxes per pallet for one or more parts"

    def add_arguments(self, parser):
        parser.add_argument('part_numbers', nargs='+', help='Part numbers to update')
        parser.add_argument('--units-per-box', type=int, required=True)
        parser.add_argument('--boxes-per-pallet', type=int, required=True)

    def handle(self, *args, **options):
        units_per_box = options['units_per_box']
        boxes_per_pallet = options['boxes_per_pallet']
        if units_per_box < 1 or boxes_per_pallet < 1:
            raise CommandError('Units per box and boxes per pallet must be at least 1')

        for part_number in options['part_numbers']:
            try:
                part = Part.objects.get(part_number=part_number)
            except Part.DoesNotExist:
                raise CommandError(f'Part {part_number} does not exist')

            old = (part.units_per_box, part.boxes_per_pallet)
            # Existing releases keep the packing snapshot taken when they were created
            Part.objects.filter(pk=part.pk).update(
                units_per_box=units_per_box,
                boxes_per_pallet=boxes_per_pallet,
            )
            self.stdout.write(self.style.SUCCESS(
                f"{part_number}: {old[0]} units/box, {old[1]} boxes/pallet -> "
                f"{units_per_box} units/box, {boxes_per_pallet} boxes/pallet"
            ))
