# Generated manually for the fines app

import uuid
from decimal import Decimal
from django.core.validators import MinValueValidator
from django.db import migrations, models
import django.db.models.deletion


HOST_TEAMS = [
    ('土木工作隊', '土木工作隊'),
    ('機械工作隊', '機械工作隊'),
    ('建築工作隊', '建築工作隊'),
    ('電氣工作隊', '電氣工作隊'),
    ('中部工作隊', '中部工作隊'),
    ('南部工作隊', '南部工作隊'),
    ('工業安全衛生組', '工業安全衛生組'),
    ('處長室', '處長室'),
    ('工務組', '工務組'),
    ('檢驗組', '檢驗組'),
    ('規劃組', '規劃組'),
]

TITLES = [
    ('經理', '經理'),
    ('課長', '課長'),
    ('站長', '站長'),
    ('專員', '專員'),
    ('技術員', '技術員'),
    ('處長', '處長'),
    ('副處長', '副處長'),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('projects', '0001_initial'),
        ('violations', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Section',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=100)),
                ('host_team', models.CharField(choices=HOST_TEAMS, max_length=50)),
                ('title', models.CharField(blank=True, choices=TITLES, max_length=10)),
                ('email', models.EmailField(blank=True, max_length=254)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'sections',
                'ordering': ['host_team', 'name'],
            },
        ),
        migrations.AddConstraint(
            model_name='section',
            constraint=models.UniqueConstraint(fields=('name', 'host_team'), name='unique_section_member'),
        ),
        migrations.CreateModel(
            name='Fine',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('ticket_number', models.CharField(max_length=50)),
                ('issue_date', models.DateField()),
                ('project_name', models.CharField(blank=True, max_length=200)),
                ('contractor', models.CharField(blank=True, max_length=200)),
                ('host_team', models.CharField(blank=True, max_length=50)),
                ('issuer_name', models.CharField(blank=True, max_length=100)),
                ('violation_item', models.CharField(max_length=255)),
                ('unit_price', models.DecimalField(decimal_places=0, max_digits=12, validators=[MinValueValidator(Decimal('0'))])),
                ('quantity', models.PositiveIntegerField(default=1)),
                ('subtotal', models.DecimalField(decimal_places=0, default=Decimal('0'), max_digits=14)),
                ('price_change_reason', models.CharField(blank=True, max_length=255)),
                ('relationship', models.CharField(blank=True, max_length=50)),
                ('violator_name', models.CharField(blank=True, max_length=100)),
                ('note', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('project', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='fines', to='projects.project')),
                ('issuer', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='issued_fines', to='fines.section')),
                ('violation', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='fine_items', to='violations.violation')),
            ],
            options={
                'db_table': 'fines',
                'ordering': ['-issue_date', 'ticket_number', 'created_at'],
                'indexes': [
                    models.Index(fields=['ticket_number'], name='fines_ticket_idx'),
                    models.Index(fields=['issue_date'], name='fines_issue_date_idx'),
                    models.Index(fields=['contractor'], name='fines_contractor_idx'),
                ],
            },
        ),
    ]
