"""Services for e-mail notifications."""

from .exceptions import (
    NotificationsServiceError,
    InvalidRecipientError,
    EmailDeliveryError,
)
from .mailer import (
    notification_subject,
    status_text,
    render_notice,
    render_manual,
    build_cc_list,
    deliver,
    log_notification,
    send_manual_email,
)
from .daily import classify, notified_today, send_daily_notifications

__all__ = [
    # Exceptions
    'NotificationsServiceError',
    'InvalidRecipientError',
    'EmailDeliveryError',
    # Mail
    'notification_subject',
    'status_text',
    'render_notice',
    'render_manual',
    'build_cc_list',
    'deliver',
    'log_notification',
    'send_manual_email',
    # Daily reminders
    'classify',
    'notified_today',
    'send_daily_notifications',
]
