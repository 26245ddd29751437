"""
E-mail rendering and delivery.

Notices are rendered from the Django templates in ``templates/emails``
and sent as HTML with a plain-text alternative.
"""

import logging
import os
import smtplib
from typing import Iterable, Optional

from django.conf import settings
from django.core.files.storage import default_storage
from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string
from django.utils import timezone
from django.utils.html import strip_tags

from apps.accounts.models import User
from apps.violations.dates import format_roc_short
from apps.violations.models import Violation, ViolationStatus
from apps.violations.services import increment_email_count

from ..models import NotificationLog, NotificationType, DeliveryStatus
from .exceptions import InvalidRecipientError, EmailDeliveryError

logger = logging.getLogger(__name__)

SUBJECT_PREFIXES = {
    NotificationType.FIRST: '【提醒】',
    NotificationType.SECOND: '【緊急】',
    NotificationType.OVERDUE: '【逾期警告】',
}
DEFAULT_SUBJECT_PREFIX = '【通知】'

NOTICE_STYLES = {
    'first': {
        'color': '#EAB308',
        'bg_light': '#FEF9C3',
        'icon': '⏰',
        'title': '違規講習提醒 (已通知)',
        'subtitle': '請依照流程進行通知與規劃',
    },
    'second': {
        'color': '#F97316',
        'bg_light': '#FFEDD5',
        'icon': '⚡',
        'title': '緊急提醒',
        'subtitle': '期限即將到來，請立即處理',
    },
    'overdue': {
        'color': '#EF4444',
        'bg_light': '#FEE2E2',
        'icon': '🚨',
        'title': '逾期警告',
        'subtitle': '已超過期限，請立即補辦',
    },
    'submitted': {
        'color': '#8B5CF6',
        'bg_light': '#F3E8FF',
        'icon': '📝',
        'title': '講習結果提送確認',
        'subtitle': '請確認講習成果與測驗紀錄',
    },
}

DEFAULT_COORDINATOR_NAME = '承辦人員'


def notification_subject(notification_type: str, violation: Violation) -> str:
    """``【提醒】違規講習待辦理 - <contractor>`` and its variants."""
    prefix = SUBJECT_PREFIXES.get(notification_type, DEFAULT_SUBJECT_PREFIX)
    return f"{prefix}違規講習待辦理 - {violation.contractor_name}"


def status_text(violation: Violation, days_remaining: int) -> str:
    if violation.status == ViolationStatus.SUBMITTED:
        return '已提送'
    if violation.status == ViolationStatus.COMPLETED:
        return '已完成'
    if days_remaining < 0:
        return f"已逾期 {abs(days_remaining)} 天"
    return f"剩餘 {days_remaining} 天"


def _workflow(status: str) -> str:
    if status in (ViolationStatus.PENDING, ViolationStatus.NOTIFIED):
        return 'planning'
    if status == ViolationStatus.SUBMITTED:
        return 'follow_up'
    return ''


def render_notice(notification_type: str, violation: Violation, project=None, days_remaining: int = 0) -> str:
    """Render the HTML reminder for a violation."""
    style = NOTICE_STYLES.get(notification_type, NOTICE_STYLES['first'])
    if violation.status == ViolationStatus.SUBMITTED and notification_type not in SUBJECT_PREFIXES:
        style = NOTICE_STYLES['submitted']

    context = {
        'style': style,
        'status_text': status_text(violation, days_remaining),
        'coordinator_name': (project.coordinator_name if project else '') or DEFAULT_COORDINATOR_NAME,
        'project_name': project.name if project else violation.project_name,
        'host_team': (project.host_team if project else '') or '-',
        'violation': violation,
        'violation_date': format_roc_short(violation.violation_date),
        'lecture_deadline': format_roc_short(violation.lecture_deadline),
        'workflow': _workflow(violation.status),
    }
    return render_to_string('emails/notice.html', context)


def render_manual(*, subject: str, body: str, project_name: str = '', contractor_name: str = '', deadline: str = '') -> str:
    """Wrap a hand-written message in the manual e-mail layout."""
    return render_to_string('emails/manual.html', {
        'subject': subject or '違規講習通知',
        'body': body or '',
        'project_name': project_name or '-',
        'contractor_name': contractor_name or '-',
        'deadline': deadline or '-',
    })


def build_cc_list(to: str, cc: Optional[Iterable[str]] = None) -> list:
    """
    Given CC addresses plus every admin, deduplicated.

    Empty entries and the main recipient are dropped; order is kept.
    """
    candidates = list(cc or []) + User.objects.admin_emails()
    recipient = (to or '').strip().lower()

    result = []
    seen = set()
    for email in candidates:
        email = (email or '').strip()
        key = email.lower()
        if not email or key == recipient or key in seen:
            continue
        seen.add(key)
        result.append(email)
    return result


def _attach_scan(message: EmailMultiAlternatives, violation: Violation) -> None:
    """Attach the stored sign-off scan; problems only skip the attachment."""
    path = violation.scan_file_path
    if not path:
        return
    try:
        with default_storage.open(path, 'rb') as handle:
            message.attach(violation.scan_file_name or os.path.basename(path), handle.read())
    except (OSError, ValueError) as e:
        logger.warning("Could not attach scan %s of violation %s: %s", path, violation.id, e)
        return
    logger.info("Scan %s attached to mail for violation %s", path, violation.id)


def deliver(*, to: str, subject: str, html: str, cc: Optional[list] = None, violation: Optional[Violation] = None, attach_scan: bool = False) -> None:
    """
    Send one HTML message.

    Raises:
        InvalidRecipientError: If ``to`` is blank
        EmailDeliveryError: If the mail backend fails
    """
    if not (to or '').strip():
        raise InvalidRecipientError('Recipient e-mail is required')

    message = EmailMultiAlternatives(
        subject=subject,
        body=strip_tags(html),
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=[to],
        cc=cc or [],
    )
    message.attach_alternative(html, 'text/html')
    if attach_scan and violation is not None:
        _attach_scan(message, violation)

    try:
        message.send()
    except (smtplib.SMTPException, OSError) as e:
        logger.exception("Sending '%s' to %s failed", subject, to)
        raise EmailDeliveryError(str(e))


def log_notification(
    *,
    violation,
    notification_type: str,
    recipient_email: str,
    recipient_role: str,
    status: str,
    sent_at=None,
) -> NotificationLog:
    return NotificationLog.objects.create(
        violation=violation,
        notification_type=notification_type,
        recipient_email=recipient_email,
        recipient_role=recipient_role,
        status=status,
        sent_at=sent_at or timezone.now(),
    )


def send_manual_email(
    *,
    to: str,
    subject: str,
    body: str,
    cc: Optional[Iterable[str]] = None,
    violation: Optional[Violation] = None,
    project_name: str = '',
    contractor_name: str = '',
    deadline: str = '',
) -> dict:
    """
    Send a hand-written e-mail, copying every administrator.

    When ``violation`` is given its project, contractor and deadline fill
    the info card, its scan is attached and its e-mail counter goes up.

    Returns:
        dict: ``{'success': True, 'message': 'Email sent'}``

    Raises:
        InvalidRecipientError: If ``to`` is blank
        EmailDeliveryError: If the mail backend fails
    """
    if violation is not None:
        project_name = project_name or violation.project_name
        contractor_name = contractor_name or violation.contractor_name
        deadline = deadline or format_roc_short(violation.lecture_deadline)

    html = render_manual(
        subject=subject,
        body=body,
        project_name=project_name,
        contractor_name=contractor_name,
        deadline=deadline,
    )
    cc_list = build_cc_list(to, cc)

    try:
        deliver(to=to, subject=subject, html=html, cc=cc_list, violation=violation, attach_scan=True)
    except EmailDeliveryError:
        if violation is not None:
            log_notification(
                violation=violation,
                notification_type=NotificationType.MANUAL,
                recipient_email=to,
                recipient_role='manual',
                status=DeliveryStatus.FAILED,
            )
        raise

    if violation is not None:
        increment_email_count(violation)
        log_notification(
            violation=violation,
            notification_type=NotificationType.MANUAL,
            recipient_email=to,
            recipient_role='manual',
            status=DeliveryStatus.SUCCESS,
        )

    logger.info("Manual e-mail sent to %s (cc %d)", to, len(cc_list))
    return {'success': True, 'message': 'Email sent'}
