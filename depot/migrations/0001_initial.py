"""
Initial migration for Depot models.
"""

import django.core.serializers.json
from django.db import migrations, models


class Migration(migrations.Migration):
    """Create StoredCollection (backing table of DatabaseRecordStore)."""

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='StoredCollection',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(choices=[('stock', 'Stock'), ('transfers', 'Transfers'), ('purchase_orders', 'Purchase orders'), ('alerts', 'Alert tracking'), ('audit_log', 'Audit log'), ('products', 'Products'), ('warehouses', 'Warehouses')], max_length=50, unique=True, verbose_name='Collection')),
                ('records', models.JSONField(blank=True, default=list, encoder=django.core.serializers.json.DjangoJSONEncoder, verbose_name='Records')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Updated at')),
            ],
            options={
                'verbose_name': 'Stored collection',
                'verbose_name_plural': 'Stored collections',
                'ordering': ['name'],
            },
        ),
    ]
