"""
Inventory ledger for Part.current_pallets / Part.current_boxes.

These functions are the only code that writes a part's stock levels.
Inbound productions and restored releases are plain increments with no
normalisation, so current_boxes may temporarily reach boxes_per_pallet or
more. Outbound releases are guarded by an availability check and borrow a
single pallet when the box count would go negative.

Outbound writes use a conditional UPDATE that only matches the stock levels
the decision was made on. If another request changed them first, the row is
re-read and the check repeated.
"""
import logging
from django.db.models import F
from django.utils import timezone
from releasehub.catalog.models import Part
from releasehub.core.exceptions import InsufficientInventory, ConflictError

logger = logging.getLogger('releasehub.inventory')

MAX_ATTEMPTS = 3


def has_sufficient_inventory(current_pallets, current_boxes, pallets, boxes):
    """A release is refused when it needs more pallets than exist, or every pallet plus more loose boxes than exist."""
    if current_pallets < pallets:
        return False
    if current_pallets == pallets and current_boxes < boxes:
        return False
    return True


def plan_release(current_pallets, current_boxes, pallets, boxes, boxes_per_pallet):
    """Stock levels after taking ``pallets``/``boxes``, unstacking one pallet if needed."""
    new_pallets = current_pallets - pallets
    new_boxes = current_boxes - boxes
    if new_boxes < 0:
        new_pallets -= 1
        new_boxes += boxes_per_pallet
    return new_pallets, new_boxes


def check_availability(part, pallets, boxes):
    if not has_sufficient_inventory(part.current_pallets, part.current_boxes, pallets, boxes):
        raise InsufficientInventory(
            f'Insufficient inventory for {part.part_number}: requested {pallets} pallets / {boxes} boxes, '
            f'available {part.current_pallets} pallets / {part.current_boxes} boxes'
        )


def apply_production(part, pallets, boxes):
    """Add inbound stock to the part."""
    Part.objects.filter(pk=part.pk).update(
        current_pallets=F('current_pallets') + pallets,
        current_boxes=F('current_boxes') + boxes,
        updated_at=timezone.now(),
    )
    part.refresh_from_db(fields=['current_pallets', 'current_boxes', 'updated_at'])
    logger.info(f"Production applied to {part.part_number}: +{pallets}P/+{boxes}B -> {part.current_pallets}P/{part.current_boxes}B")
    return part.current_pallets, part.current_boxes


def apply_release(part, pallets, boxes, boxes_per_pallet=None):
    """
    Take outbound stock from the part.

    ``boxes_per_pallet`` should be the value the release computed its units
    with; it defaults to the part's current setting.

    Raises InsufficientInventory when the stock cannot cover the request and
    ConflictError when concurrent writers kept winning the race.
    """
    if boxes_per_pallet is None:
        boxes_per_pallet = part.boxes_per_pallet

    for attempt in range(1, MAX_ATTEMPTS + 1):
        check_availability(part, pallets, boxes)
        new_pallets, new_boxes = plan_release(
            part.current_pallets, part.current_boxes, pallets, boxes, boxes_per_pallet
        )
        updated = Part.objects.filter(
            pk=part.pk,
            current_pallets=part.current_pallets,
            current_boxes=part.current_boxes,
        ).update(
            current_pallets=new_pallets,
            current_boxes=new_boxes,
            updated_at=timezone.now(),
        )
        if updated:
            logger.info(
                f"Release applied to {part.part_number}: -{pallets}P/-{boxes}B "
                f"{part.current_pallets}P/{part.current_boxes}B -> {new_pallets}P/{new_boxes}B"
            )
            part.current_pallets = new_pallets
            part.current_boxes = new_boxes
            return new_pallets, new_boxes

        logger.warning(f"Stock for {part.part_number} changed concurrently (attempt {attempt}/{MAX_ATTEMPTS}), re-reading")
        part.refresh_from_db(fields=['current_pallets', 'current_boxes'])

    raise ConflictError(f'Inventory for {part.part_number} is being updated by another request, please retry')


def restore_release(release):
    """Return a deleted release's pallets and boxes to its part."""
    part = release.part
    Part.objects.filter(pk=part.pk).update(
        current_pallets=F('current_pallets') + release.pallets,
        current_boxes=F('current_boxes') + release.boxes,
        updated_at=timezone.now(),
    )
    part.refresh_from_db(fields=['current_pallets', 'current_boxes', 'updated_at'])
    logger.info(f"Release {release.release_number} restored to {part.part_number}: +{release.pallets}P/+{release.boxes}B")
    return part.current_pallets, part.current_boxes
