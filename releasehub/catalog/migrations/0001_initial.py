# Generated manually
from decimal import Decimal
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Part',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('part_number', models.CharField(max_length=50, unique=True)),
                ('description', models.CharField(max_length=255)),
                ('units_per_box', models.PositiveIntegerField()),
                ('boxes_per_pallet', models.PositiveIntegerField()),
                ('price_per_unit', models.DecimalField(decimal_places=4, default=Decimal('0'), max_digits=10)),
                ('cost_basis_per_unit', models.DecimalField(blank=True, decimal_places=4, max_digits=10, null=True)),
                ('annual_order', models.PositiveIntegerField(default=0, help_text='Annual order benchmark in units')),
                ('current_pallets', models.IntegerField(default=0)),
                ('current_boxes', models.IntegerField(default=0)),
                ('vendor_name', models.CharField(blank=True, max_length=100)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'parts',
                'ordering': ['part_number'],
            },
        ),
    ]
