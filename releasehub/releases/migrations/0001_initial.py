# Generated manually
import django.db.models.deletion
import django.utils.timezone
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('catalog', '0001_initial'),
        ('locations', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Release',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('release_number', models.CharField(max_length=30, unique=True)),
                ('pallets', models.PositiveIntegerField()),
                ('boxes', models.PositiveIntegerField(default=0)),
                ('boxes_per_pallet', models.PositiveIntegerField(help_text='Part packing at creation time')),
                ('units_per_box', models.PositiveIntegerField(help_text='Part packing at creation time')),
                ('total_units', models.PositiveIntegerField()),
                ('customer_po_number', models.CharField(max_length=100)),
                ('ticket_number', models.CharField(blank=True, max_length=30)),
                ('batch_number', models.CharField(blank=True, max_length=50)),
                ('ship_via', models.CharField(blank=True, max_length=100)),
                ('freight_terms', models.CharField(blank=True, max_length=100)),
                ('payment_terms', models.CharField(blank=True, max_length=100)),
                ('manufacture_date', models.DateTimeField(default=django.utils.timezone.now)),
                ('ship_date', models.DateTimeField(blank=True, null=True)),
                ('eta_delivery_date', models.DateTimeField(blank=True, null=True)),
                ('cartons', models.PositiveIntegerField(default=0)),
                ('weight', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=10)),
                ('shipping_class', models.CharField(blank=True, max_length=20)),
                ('tracking_number', models.CharField(blank=True, max_length=100)),
                ('notes', models.TextField(blank=True, help_text='Special shipping instructions')),
                ('status', models.CharField(choices=[('COMPLETED', 'Completed'), ('SHIPPED', 'Shipped')], default='COMPLETED', max_length=20)),
                ('packing_slip_url', models.CharField(blank=True, max_length=500)),
                ('box_labels_url', models.CharField(blank=True, max_length=500)),
                ('invoice_url', models.CharField(blank=True, max_length=500)),
                ('documents_generated_at', models.DateTimeField(blank=True, null=True)),
                ('customer_packing_slip_data', models.BinaryField(blank=True, editable=False, null=True)),
                ('customer_packing_slip_name', models.CharField(blank=True, max_length=255)),
                ('customer_packing_slip_uploaded_at', models.DateTimeField(blank=True, null=True)),
                ('invoice_sent', models.BooleanField(default=False)),
                ('invoice_sent_at', models.DateTimeField(blank=True, null=True)),
                ('external_job_id', models.CharField(blank=True, max_length=100)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='releases', to=settings.AUTH_USER_MODEL)),
                ('part', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='releases', to='catalog.part')),
                ('shipping_location', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='releases', to='locations.shippinglocation')),
            ],
            options={
                'db_table': 'releases',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['status'], name='releases_status_idx'),
                    models.Index(fields=['ship_date', 'invoice_sent'], name='releases_invoice_due_idx'),
                ],
            },
        ),
    ]
