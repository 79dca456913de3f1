from django.db import models


class ShippingLocation(models.Model):
    """Ship-to destination for releases"""
    name = models.CharField(max_length=200, unique=True)
    address = models.CharField(max_length=255)
    city = models.CharField(max_length=100)
    state = models.CharField(max_length=50)
    zip_code = models.CharField(max_length=20)
    instructions = models.TextField(blank=True, help_text="Free-text shipping instructions")
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    @property
    def city_state_zip(self):
        return f'{self.city}, {self.state} {self.zip_code}'

    class Meta:
        db_table = 'shipping_locations'
        ordering = ['name']
