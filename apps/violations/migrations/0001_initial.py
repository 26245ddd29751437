# Generated manually for the violations app

import uuid
from decimal import Decimal
from django.core.validators import MinValueValidator
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('projects', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Violation',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('project_name', models.CharField(max_length=200)),
                ('contractor_name', models.CharField(max_length=200)),
                ('violation_date', models.DateField()),
                ('lecture_deadline', models.DateField()),
                ('description', models.TextField(blank=True)),
                ('status', models.CharField(choices=[('PENDING', '待辦理'), ('NOTIFIED', '已通知'), ('SUBMITTED', '已提送'), ('COMPLETED', '已完成')], default='PENDING', max_length=20)),
                ('completion_date', models.DateField(blank=True, null=True)),
                ('file_name', models.CharField(blank=True, max_length=255)),
                ('file_url', models.CharField(blank=True, max_length=500)),
                ('email_count', models.PositiveIntegerField(default=0)),
                ('document_url', models.CharField(blank=True, max_length=500)),
                ('scan_file_name', models.CharField(blank=True, max_length=255)),
                ('scan_file_url', models.CharField(blank=True, max_length=500)),
                ('scan_file_path', models.CharField(blank=True, max_length=500)),
                ('scan_file_history', models.JSONField(blank=True, default=list)),
                ('first_notify_date', models.DateField(blank=True, null=True)),
                ('second_notify_date', models.DateField(blank=True, null=True)),
                ('notify_status', models.CharField(choices=[('none', '未通知'), ('first', '首次通知'), ('second', '二次通知'), ('overdue', '逾期')], default='none', max_length=10)),
                ('manager_email', models.EmailField(blank=True, max_length=254)),
                ('fine_amount', models.DecimalField(decimal_places=0, default=Decimal('0'), max_digits=12, validators=[MinValueValidator(Decimal('0'))])),
                ('is_major_violation', models.BooleanField(default=False)),
                ('participants', models.JSONField(blank=True, default=list)),
                ('source_ticket_number', models.CharField(blank=True, max_length=50)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('project', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='violations', to='projects.project')),
            ],
            options={
                'db_table': 'violations',
                'ordering': ['-violation_date', '-created_at'],
                'indexes': [
                    models.Index(fields=['status', 'lecture_deadline'], name='violations_status_dl_idx'),
                    models.Index(fields=['violation_date'], name='violations_date_idx'),
                    models.Index(fields=['project_name'], name='violations_project_idx'),
                ],
            },
        ),
    ]
