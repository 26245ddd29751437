from django.core.validators import MinValueValidator
from django.db import models
from decimal import Decimal
import uuid

from apps.projects.models import HostTeam


class SectionTitle(models.TextChoices):
    MANAGER = '經理', '經理'
    SECTION_CHIEF = '課長', '課長'
    STATION_CHIEF = '站長', '站長'
    SPECIALIST = '專員', '專員'
    TECHNICIAN = '技術員', '技術員'
    DIRECTOR = '處長', '處長'
    DEPUTY_DIRECTOR = '副處長', '副處長'


# Known fine items and their standard unit prices (NT$)
FINE_ITEM_PRESETS = {
    '未依規定配戴安全帽': Decimal('1000'),
    '高處作業未繫安全帶': Decimal('3000'),
    '施工架未鋪設滿踏板': Decimal('3000'),
    '開口處未設置防護措施': Decimal('5000'),
    '電氣設備未裝設漏電斷路器': Decimal('3000'),
    '高壓氣瓶未直立固定': Decimal('1000'),
    '動火作業無滅火設備': Decimal('2000'),
    '未設置警示帶或圍籬': Decimal('1000'),
    '吊掛作業無人指揮': Decimal('5000'),
    '未實施自動檢查': Decimal('2000'),
}

RELATIONSHIP_OPTIONS = ['承攬商', '再承攬商', '協力廠商', '其他']


class Section(models.Model):
    """Roster entry for a person authorized to issue fines."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100)
    host_team = models.CharField(max_length=50, choices=HostTeam.choices)
    title = models.CharField(max_length=10, choices=SectionTitle.choices, blank=True)
    email = models.EmailField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'sections'
        constraints = [
            models.UniqueConstraint(
                fields=['name', 'host_team'],
                name='unique_section_member'
            )
        ]
        ordering = ['host_team', 'name']

    def __str__(self):
        return f"{self.host_team} {self.name} {self.title}".strip()


class Fine(models.Model):
    """
    Single fine line item.

    Line items sharing a ``ticket_number`` form one ticket.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Ticket header (shared by every item of the ticket)
    ticket_number = models.CharField(max_length=50)
    issue_date = models.DateField()
    project = models.ForeignKey(
        'projects.Project',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='fines'
    )
    project_name = models.CharField(max_length=200, blank=True)
    contractor = models.CharField(max_length=200, blank=True)
    host_team = models.CharField(max_length=50, blank=True)
    issuer = models.ForeignKey(
        Section,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='issued_fines'
    )
    issuer_name = models.CharField(max_length=100, blank=True)

    # Item
    violation_item = models.CharField(max_length=255)
    unit_price = models.DecimalField(
        max_digits=12,
        decimal_places=0,
        validators=[MinValueValidator(Decimal('0'))]
    )
    quantity = models.PositiveIntegerField(default=1)
    subtotal = models.DecimalField(max_digits=14, decimal_places=0, default=Decimal('0'))
    price_change_reason = models.CharField(max_length=255, blank=True)
    relationship = models.CharField(max_length=50, blank=True)
    violator_name = models.CharField(max_length=100, blank=True)
    note = models.TextField(blank=True)

    # Set once the ticket has been converted into a violation
    violation = models.ForeignKey(
        'violations.Violation',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='fine_items'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'fines'
        indexes = [
            models.Index(fields=['ticket_number'], name='fines_ticket_idx'),
            models.Index(fields=['issue_date'], name='fines_issue_date_idx'),
            models.Index(fields=['contractor'], name='fines_contractor_idx'),
        ]
        ordering = ['-issue_date', 'ticket_number', 'created_at']

    def __str__(self):
        return f"{self.ticket_number} - {self.violation_item} ({self.subtotal})"

    def save(self, *args, **kwargs):
        self.subtotal = Decimal(self.unit_price or 0) * (self.quantity or 0)
        update_fields = kwargs.get('update_fields')
        if update_fields is not None and 'subtotal' not in update_fields:
            kwargs['update_fields'] = list(update_fields) + ['subtotal']
        super().save(*args, **kwargs)
