"""
Date helpers for lecture deadlines and ROC (Minguo) calendar formatting.

Official documents use the ROC year, which is the Gregorian year minus 1911.
"""
from datetime import date, datetime, timedelta

from django.conf import settings
from django.utils import timezone

ROC_YEAR_OFFSET = 1911


def lecture_deadline_for(violation_date: date) -> date:
    """Default lecture deadline for a violation on ``violation_date``."""
    return violation_date + timedelta(days=settings.LECTURE_DEADLINE_DAYS)


def days_remaining(deadline: date, today: date = None) -> int:
    """Whole days from ``today`` to ``deadline``; negative when overdue."""
    today = today or timezone.localdate()
    if isinstance(deadline, datetime):
        deadline = deadline.date()
    return (deadline - today).days


def roc_year(value: date) -> int:
    return value.year - ROC_YEAR_OFFSET


def format_roc_long(value: date) -> str:
    """``2025-03-09`` -> ``114年3月9日``."""
    if not value:
        return ''
    return f"{roc_year(value)}年{value.month}月{value.day}日"


def format_roc_short(value: date) -> str:
    """``2025-03-09`` -> ``114/3/9``; ``-`` when missing."""
    if not value:
        return '-'
    return f"{roc_year(value)}/{value.month}/{value.day}"


def compact(value: date) -> str:
    """``yyyymmdd`` form used in generated file names."""
    return value.strftime('%Y%m%d')
