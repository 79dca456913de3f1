from django.conf import settings
from django.db import models
from releasehub.catalog.models import Part


class Production(models.Model):
    """Inbound inventory event; immutable once recorded"""
    part = models.ForeignKey(Part, on_delete=models.PROTECT, related_name='productions')
    pallets = models.PositiveIntegerField(default=0)
    boxes = models.PositiveIntegerField(default=0)
    total_units = models.PositiveIntegerField()
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='productions')
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.part.part_number} +{self.pallets}P/{self.boxes}B"

    class Meta:
        db_table = 'productions'
        ordering = ['-created_at']
