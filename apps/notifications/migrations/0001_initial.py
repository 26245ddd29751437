# Generated manually for the notifications app

import uuid
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('violations', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='NotificationLog',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('notification_type', models.CharField(choices=[('first', '首次通知'), ('second', '二次通知'), ('overdue', '逾期通知'), ('manual', '手動寄信')], max_length=10)),
                ('recipient_email', models.EmailField(max_length=254)),
                ('recipient_role', models.CharField(default='coordinator', max_length=20)),
                ('sent_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('status', models.CharField(choices=[('success', '成功'), ('failed', '失敗')], default='success', max_length=10)),
                ('violation', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='notification_logs', to='violations.violation')),
            ],
            options={
                'db_table': 'notification_logs',
                'ordering': ['-sent_at'],
                'indexes': [
                    models.Index(fields=['violation', 'notification_type', 'sent_at'], name='notif_logs_lookup_idx'),
                ],
            },
        ),
    ]
