from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone
from decimal import Decimal
import uuid


class ViolationStatus(models.TextChoices):
    PENDING = 'PENDING', '待辦理'
    NOTIFIED = 'NOTIFIED', '已通知'
    SUBMITTED = 'SUBMITTED', '已提送'
    COMPLETED = 'COMPLETED', '已完成'


class NotifyStatus(models.TextChoices):
    NONE = 'none', '未通知'
    FIRST = 'first', '首次通知'
    SECOND = 'second', '二次通知'
    OVERDUE = 'overdue', '逾期'


# Preset descriptions offered by the violation form
COMMON_VIOLATIONS = [
    '未依規定配戴安全帽',
    '高處作業未繫安全帶',
    '施工架未鋪設滿踏板',
    '開口處未設置防護措施',
    '電氣設備未裝設漏電斷路器',
    '高壓氣瓶未直立固定',
    '施工架無檢查合格標示',
    '動火作業無滅火設備',
    '未設置警示帶或圍籬',
    '吊掛作業無人指揮',
]


class Violation(models.Model):
    """Safety violation of a contractor with its lecture deadline."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Project context (name is kept as text so sheet rows survive project deletion)
    project = models.ForeignKey(
        'projects.Project',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='violations'
    )
    project_name = models.CharField(max_length=200)
    contractor_name = models.CharField(max_length=200)

    violation_date = models.DateField()
    lecture_deadline = models.DateField()
    description = models.TextField(blank=True)
    status = models.CharField(
        max_length=20,
        choices=ViolationStatus.choices,
        default=ViolationStatus.PENDING
    )
    completion_date = models.DateField(null=True, blank=True)

    # Fine ticket file
    file_name = models.CharField(max_length=255, blank=True)
    file_url = models.CharField(max_length=500, blank=True)

    # Sign-off document and its signed scan
    email_count = models.PositiveIntegerField(default=0)
    document_url = models.CharField(max_length=500, blank=True)
    scan_file_name = models.CharField(max_length=255, blank=True)
    scan_file_url = models.CharField(max_length=500, blank=True)
    scan_file_path = models.CharField(max_length=500, blank=True)
    scan_file_history = models.JSONField(default=list, blank=True)

    # Reminder tracking
    first_notify_date = models.DateField(null=True, blank=True)
    second_notify_date = models.DateField(null=True, blank=True)
    notify_status = models.CharField(
        max_length=10,
        choices=NotifyStatus.choices,
        default=NotifyStatus.NONE
    )
    manager_email = models.EmailField(blank=True)

    # Fine details (set when converted from a ticket)
    fine_amount = models.DecimalField(
        max_digits=12,
        decimal_places=0,
        default=Decimal('0'),
        validators=[MinValueValidator(Decimal('0'))]
    )
    is_major_violation = models.BooleanField(default=False)
    participants = models.JSONField(default=list, blank=True)
    source_ticket_number = models.CharField(max_length=50, blank=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'violations'
        indexes = [
            models.Index(fields=['status', 'lecture_deadline'], name='violations_status_dl_idx'),
            models.Index(fields=['violation_date'], name='violations_date_idx'),
            models.Index(fields=['project_name'], name='violations_project_idx'),
        ]
        ordering = ['-violation_date', '-created_at']

    def __str__(self):
        return f"{self.contractor_name} - {self.project_name} ({self.violation_date})"

    @property
    def is_completed(self):
        return self.status == ViolationStatus.COMPLETED

    def days_remaining(self, today=None):
        """Whole days until the lecture deadline; negative once overdue."""
        today = today or timezone.localdate()
        return (self.lecture_deadline - today).days

    @property
    def host_team(self):
        return self.project.host_team if self.project_id and self.project else ''
