# Generated manually for the projects app

import uuid
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Project',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('sequence', models.PositiveIntegerField(default=0)),
                ('abbreviation', models.CharField(blank=True, max_length=50)),
                ('name', models.CharField(max_length=200, unique=True)),
                ('contract_number', models.CharField(blank=True, max_length=100)),
                ('contractor', models.CharField(max_length=200)),
                ('coordinator_name', models.CharField(max_length=100)),
                ('coordinator_email', models.EmailField(blank=True, max_length=254)),
                ('host_team', models.CharField(blank=True, max_length=50)),
                ('manager_name', models.CharField(blank=True, max_length=100)),
                ('manager_email', models.EmailField(blank=True, max_length=254)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'projects',
                'ordering': ['sequence', 'name'],
                'indexes': [
                    models.Index(fields=['host_team'], name='projects_host_team_idx'),
                    models.Index(fields=['sequence'], name='projects_sequence_idx'),
                ],
            },
        ),
    ]
