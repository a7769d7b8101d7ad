import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('orderApp', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='GrowthUpdate',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('position', models.PositiveIntegerField(editable=False)),
                ('status', models.CharField(help_text='Growth phase tag, e.g. sprouting', max_length=50)),
                ('notes', models.TextField(blank=True)),
                ('images', models.JSONField(blank=True, default=list)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('order', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='growth_updates', to='orderApp.order')),
                ('recorded_by', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='growth_updates', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'growth_status',
                'ordering': ['created_at', 'position'],
            },
        ),
        migrations.AddConstraint(
            model_name='growthupdate',
            constraint=models.UniqueConstraint(fields=('order', 'position'), name='unique_growth_position_per_order'),
        ),
    ]
