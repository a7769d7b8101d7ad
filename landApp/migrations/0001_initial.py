import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('farmerApp', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='LandListing',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('title', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('location', models.CharField(max_length=255)),
                ('total_size', models.DecimalField(decimal_places=2, help_text='Total size in square feet', max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))])),
                ('available_size', models.DecimalField(decimal_places=2, help_text='Size still open for orders, in square feet', max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('price_per_sqft', models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))])),
                ('supported_vegetables', models.JSONField(default=list)),
                ('soil_type', models.CharField(blank=True, max_length=100)),
                ('water_source', models.CharField(blank=True, max_length=100)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('farmer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='land_listings', to='farmerApp.farmerprofile')),
            ],
            options={
                'db_table': 'land_listings',
                'ordering': ['-created_at'],
            },
        ),
    ]
