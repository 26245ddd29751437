"""
Daily lecture deadline reminders.

Each open violation is classified by the days left until its lecture
deadline and the project coordinator is e-mailed at most once per type
and day.
"""

import logging
from datetime import date
from typing import Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.violations.models import Violation, ViolationStatus, NotifyStatus

from ..models import NotificationLog, NotificationType, DeliveryStatus
from .exceptions import NotificationsServiceError
from .mailer import deliver, log_notification, notification_subject, render_notice

logger = logging.getLogger(__name__)


def classify(violation: Violation, today: Optional[date] = None) -> Optional[str]:
    """
    Decide which reminder a violation is due, if any.

    - first: more than NOTIFY_SECOND_DAYS and at most NOTIFY_FIRST_DAYS left,
      and no first reminder yet
    - second: 0 to NOTIFY_SECOND_DAYS days left and no second reminder yet
    - overdue: deadline passed

    Completed violations never get a reminder.
    """
    if violation.status == ViolationStatus.COMPLETED or not violation.lecture_deadline:
        return None

    days = violation.days_remaining(today)
    if settings.NOTIFY_SECOND_DAYS < days <= settings.NOTIFY_FIRST_DAYS:
        return None if violation.first_notify_date else NotificationType.FIRST
    if 0 <= days <= settings.NOTIFY_SECOND_DAYS:
        return None if violation.second_notify_date else NotificationType.SECOND
    if days < 0:
        return NotificationType.OVERDUE
    return None


def log_stamp(today: date):
    """
    Log timestamp for a run on ``today``.

    Runs for another reference date (``--date``) keep the current time of day
    on that date, so repeated runs for it are deduplicated like live runs.
    """
    now = timezone.localtime()
    if now.date() == today:
        return now
    return now.replace(year=today.year, month=today.month, day=today.day)


def notified_today(violation: Violation, notification_type: str, today: date) -> bool:
    return NotificationLog.objects.filter(
        violation=violation,
        notification_type=notification_type,
        sent_at__date=today,
    ).exists()


def _mark_notified(violation: Violation, notification_type: str, today: date) -> None:
    if notification_type == NotificationType.FIRST:
        violation.first_notify_date = today
        violation.notify_status = NotifyStatus.FIRST
    elif notification_type == NotificationType.SECOND:
        violation.second_notify_date = today
        violation.notify_status = NotifyStatus.SECOND
    else:
        violation.notify_status = NotifyStatus.OVERDUE
    violation.save(update_fields=['first_notify_date', 'second_notify_date', 'notify_status', 'updated_at'])


def send_daily_notifications(today: Optional[date] = None, dry_run: bool = False) -> dict:
    """
    Send every reminder due today.

    Args:
        today: Reference date (local date by default)
        dry_run: Classify and count without sending or writing anything

    Returns:
        dict: counts per type plus ``failed`` and ``skipped``
    """
    today = today or timezone.localdate()
    counts = {'first': 0, 'second': 0, 'overdue': 0, 'failed': 0, 'skipped': 0}

    violations = (
        Violation.objects.select_related('project')
        .exclude(status=ViolationStatus.COMPLETED)
        .order_by('lecture_deadline')
    )

    for violation in violations:
        notification_type = classify(violation, today)
        if notification_type is None:
            continue

        project = violation.project
        recipient = project.coordinator_email if project else ''
        if not recipient or notified_today(violation, notification_type, today):
            counts['skipped'] += 1
            continue

        if dry_run:
            counts[notification_type] += 1
            continue

        html = render_notice(notification_type, violation, project, violation.days_remaining(today))
        try:
            deliver(to=recipient, subject=notification_subject(notification_type, violation), html=html)
        except NotificationsServiceError:
            log_notification(
                violation=violation,
                notification_type=notification_type,
                recipient_email=recipient,
                recipient_role='coordinator',
                status=DeliveryStatus.FAILED,
                sent_at=log_stamp(today),
            )
            counts['failed'] += 1
            continue

        with transaction.atomic():
            log_notification(
                violation=violation,
                notification_type=notification_type,
                recipient_email=recipient,
                recipient_role='coordinator',
                status=DeliveryStatus.SUCCESS,
                sent_at=log_stamp(today),
            )
            _mark_notified(violation, notification_type, today)
        counts[notification_type] += 1
        logger.info("Sent %s reminder for violation %s to %s", notification_type, violation.id, recipient)

    logger.info(
        "Daily reminders: first=%d second=%d overdue=%d failed=%d",
        counts['first'], counts['second'], counts['overdue'], counts['failed']
    )
    return counts
