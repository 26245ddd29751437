from django.db import models
from django.utils import timezone
import uuid


class NotificationType(models.TextChoices):
    FIRST = 'first', '首次通知'
    SECOND = 'second', '二次通知'
    OVERDUE = 'overdue', '逾期通知'
    MANUAL = 'manual', '手動寄信'


class DeliveryStatus(models.TextChoices):
    SUCCESS = 'success', '成功'
    FAILED = 'failed', '失敗'


class NotificationLog(models.Model):
    """One e-mail sent (or attempted) about a violation."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    violation = models.ForeignKey(
        'violations.Violation',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='notification_logs'
    )
    notification_type = models.CharField(max_length=10, choices=NotificationType.choices)
    recipient_email = models.EmailField()
    recipient_role = models.CharField(max_length=20, default='coordinator')
    sent_at = models.DateTimeField(default=timezone.now)
    status = models.CharField(
        max_length=10,
        choices=DeliveryStatus.choices,
        default=DeliveryStatus.SUCCESS
    )

    class Meta:
        db_table = 'notification_logs'
        indexes = [
            models.Index(fields=['violation', 'notification_type', 'sent_at'], name='notif_logs_lookup_idx'),
        ]
        ordering = ['-sent_at']

    def __str__(self):
        return f"{self.notification_type} -> {self.recipient_email} ({self.status})"
