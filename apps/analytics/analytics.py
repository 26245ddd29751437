"""
Analytics Module
=================

This module provides the aggregate queries behind the dashboard, the
fine statistics page and the viewer summary. It reads violations and
fine line items and never modifies data.

Classes:
    AnalyticsQueries: Static methods for the dashboard and chart queries.

Key Features:
    - Open, overdue and urgent lecture counts
    - Violations per host team and per status
    - Monthly fine lists and contractor rankings
    - Fine totals by project, host team and month

Example:
    Building the dashboard for March 2025::

        from apps.analytics.analytics import AnalyticsQueries

        data = AnalyticsQueries.dashboard(year=2025, month=3)
        print(data['overview']['overdue'])
        print(data['monthly_fines']['amount'])

Note:
    All methods return plain dictionaries or lists, so views can hand
    them to ``Response`` as they are.
"""

import calendar
from collections import OrderedDict
from datetime import date, timedelta
from decimal import Decimal

from django.conf import settings
from django.db.models import Count, Sum
from django.db.models.functions import Coalesce, TruncMonth
from django.utils import timezone

from apps.fines.models import Fine
from apps.violations.models import Violation, ViolationStatus

from .exceptions import InvalidPeriodError

UNASSIGNED_TEAM = '未歸類'
UNCATEGORIZED = '未分類'

# Dashboard wording; completed violations are shown as closed cases
STATUS_CHART_LABELS = OrderedDict([
    (ViolationStatus.PENDING, '待辦理'),
    (ViolationStatus.NOTIFIED, '已通知'),
    (ViolationStatus.SUBMITTED, '已提送'),
    (ViolationStatus.COMPLETED, '已結案'),
])


def month_bounds(year, month):
    """
    First and last day of a month.

    Raises:
        InvalidPeriodError: If ``month`` is not 1-12 or ``year`` is out of range
    """
    try:
        last_day = calendar.monthrange(int(year), int(month))[1]
        return date(int(year), int(month), 1), date(int(year), int(month), last_day)
    except (ValueError, TypeError, calendar.IllegalMonthError):
        raise InvalidPeriodError(f"Invalid period: {year}-{month}")


def shift_month(value, offset):
    """``(year, month)`` of the month ``offset`` months away from ``value``."""
    index = value.year * 12 + (value.month - 1) + int(offset)
    return index // 12, index % 12 + 1


def _merge_totals(rows, key, value_key, fallback):
    """Sum rows into ``{label: total}``, folding blank labels into ``fallback``."""
    totals = OrderedDict()
    for row in rows:
        label = row[key] or fallback
        totals[label] = totals.get(label, 0) + (row[value_key] or 0)
    return totals


def _as_chart(totals):
    return [
        {'name': name, 'value': value}
        for name, value in sorted(totals.items(), key=lambda item: item[1], reverse=True)
    ]


def _fine_row(fine):
    return {
        'id': str(fine.id),
        'ticket_number': fine.ticket_number,
        'issue_date': fine.issue_date,
        'project_name': fine.project_name,
        'contractor': fine.contractor,
        'host_team': fine.host_team,
        'violation_item': fine.violation_item,
        'unit_price': fine.unit_price,
        'quantity': fine.quantity,
        'subtotal': fine.subtotal,
        'violator_name': fine.violator_name,
        'issuer_name': fine.issuer_name,
    }


class AnalyticsQueries:
    """
    Aggregate queries for analytics endpoints.

    Methods:
        violation_overview: Lecture workload counters and the urgent list.
        monthly_fines: Fine items issued in one month.
        team_chart: Violations per host team.
        status_chart: Violations per status.
        contractor_ranking: Fine totals per contractor for one month.
        fine_stats: Fine totals by project, host team and month.
        viewer_summary: Monthly fine list for the viewer role.
        dashboard: Everything the dashboard page shows.
    """

    @staticmethod
    def violation_overview(today=None):
        """
        Count open lectures by urgency.

        Args:
            today (date, optional): Reference date, local date by default.

        Returns:
            dict: A dictionary containing:
                - pending (int): Violations not completed yet.
                - overdue (int): Open violations past their deadline.
                - urgent (int): Open violations due within NOTIFY_FIRST_DAYS.
                - due_soon (int): Open violations due within NOTIFY_SECOND_DAYS.
                - completed (int): Completed violations.
                - total_fine_amount (Decimal): Sum of fine_amount over all violations.
                - urgent_list (list[dict]): The urgent violations, soonest first.

        Example:
            ::

                overview = AnalyticsQueries.violation_overview()
                print(f"{overview['overdue']} lectures are overdue")
        """
        today = today or timezone.localdate()
        open_violations = Violation.objects.exclude(status=ViolationStatus.COMPLETED)

        urgent = open_violations.filter(
            lecture_deadline__gte=today,
            lecture_deadline__lte=today + timedelta(days=settings.NOTIFY_FIRST_DAYS),
        ).order_by('lecture_deadline')

        total_fine_amount = Violation.objects.aggregate(
            total=Coalesce(Sum('fine_amount'), Decimal('0'))
        )['total']

        return {
            'pending': open_violations.count(),
            'overdue': open_violations.filter(lecture_deadline__lt=today).count(),
            'urgent': urgent.count(),
            'due_soon': open_violations.filter(
                lecture_deadline__gte=today,
                lecture_deadline__lte=today + timedelta(days=settings.NOTIFY_SECOND_DAYS),
            ).count(),
            'completed': Violation.objects.filter(status=ViolationStatus.COMPLETED).count(),
            'total_fine_amount': total_fine_amount,
            'urgent_list': [
                {
                    'id': str(v.id),
                    'contractor_name': v.contractor_name,
                    'project_name': v.project_name,
                    'lecture_deadline': v.lecture_deadline,
                    'days_remaining': v.days_remaining(today),
                    'status': v.status,
                }
                for v in urgent
            ],
        }

    @staticmethod
    def monthly_fines(year, month):
        """
        Fine line items issued in a month.

        Args:
            year (int): Calendar year.
            month (int): Month number 1-12.

        Returns:
            dict: ``items`` (list[dict]), ``amount`` (Decimal) and ``count`` (int).

        Raises:
            InvalidPeriodError: If the month does not exist.
        """
        start, end = month_bounds(year, month)
        fines = Fine.objects.filter(issue_date__gte=start, issue_date__lte=end).order_by('-issue_date', 'ticket_number')
        amount = fines.aggregate(total=Coalesce(Sum('subtotal'), Decimal('0')))['total']

        return {
            'year': int(year),
            'month': int(month),
            'items': [_fine_row(fine) for fine in fines],
            'amount': amount,
            'count': fines.count(),
        }

    @staticmethod
    def team_chart():
        """Violations per host team of their project, largest first."""
        rows = Violation.objects.values('project__host_team').annotate(count=Count('id')).order_by()
        return _as_chart(_merge_totals(rows, 'project__host_team', 'count', UNASSIGNED_TEAM))

    @staticmethod
    def status_chart():
        """
        Violations per status, in workflow order.

        Every status is listed, including those with no violations.
        """
        counts = dict(
            Violation.objects.values_list('status').annotate(count=Count('id')).order_by()
        )
        return [
            {'status': value, 'name': label, 'value': counts.get(value, 0)}
            for value, label in STATUS_CHART_LABELS.items()
        ]

    @staticmethod
    def contractor_ranking(year, month):
        """
        Fine subtotal per contractor for a month, highest first.

        Raises:
            InvalidPeriodError: If the month does not exist.
        """
        start, end = month_bounds(year, month)
        rows = (
            Fine.objects.filter(issue_date__gte=start, issue_date__lte=end)
            .values('contractor')
            .annotate(total=Sum('subtotal'))
            .order_by()
        )
        return _as_chart(_merge_totals(rows, 'contractor', 'total', UNCATEGORIZED))

    @staticmethod
    def fine_stats(today=None):
        """
        Fine totals for the statistics page.

        Returns:
            dict: A dictionary containing:
                - total_amount (Decimal): Sum of every subtotal.
                - item_count (int): Number of line items.
                - current_month_amount (Decimal): Sum for the month of ``today``.
                - by_project (list[dict]): ``name``/``value`` pairs, largest first.
                - by_team (list[dict]): Same per host team.
                - by_month (list[dict]): ``YYYY/MM`` pairs in calendar order.
        """
        today = today or timezone.localdate()
        fines = Fine.objects.all()

        by_project = fines.values('project_name').annotate(total=Sum('subtotal')).order_by()
        by_team = fines.values('host_team').annotate(total=Sum('subtotal')).order_by()
        by_month = (
            fines.annotate(month=TruncMonth('issue_date'))
            .values('month')
            .annotate(total=Sum('subtotal'))
            .order_by('month')
        )

        start, end = month_bounds(today.year, today.month)
        current_month_amount = fines.filter(issue_date__gte=start, issue_date__lte=end).aggregate(
            total=Coalesce(Sum('subtotal'), Decimal('0'))
        )['total']

        return {
            'total_amount': fines.aggregate(total=Coalesce(Sum('subtotal'), Decimal('0')))['total'],
            'item_count': fines.count(),
            'current_month_amount': current_month_amount,
            'by_project': _as_chart(_merge_totals(by_project, 'project_name', 'total', UNCATEGORIZED)),
            'by_team': _as_chart(_merge_totals(by_team, 'host_team', 'total', UNCATEGORIZED)),
            'by_month': [
                {
                    'name': row['month'].strftime('%Y/%m') if row['month'] else UNCATEGORIZED,
                    'value': row['total'] or Decimal('0'),
                }
                for row in by_month
            ],
        }

    @staticmethod
    def viewer_summary(offset=0, today=None):
        """
        Monthly fine list shown to viewer accounts.

        Args:
            offset (int): Months relative to the current one (-1 is last month).
            today (date, optional): Reference date.

        Returns:
            dict: ``year``, ``month``, ``period`` (``YYYY-MM``), ``items``,
            ``total`` and ``count``.
        """
        today = today or timezone.localdate()
        year, month = shift_month(today, offset)
        data = AnalyticsQueries.monthly_fines(year, month)
        return {
            'year': year,
            'month': month,
            'period': f"{year:04d}-{month:02d}",
            'items': data['items'],
            'total': data['amount'],
            'count': data['count'],
        }

    @staticmethod
    def dashboard(year=None, month=None, today=None):
        """
        Aggregate the dashboard page for one month.

        The month defaults to the month of ``today``.
        """
        today = today or timezone.localdate()
        year = year or today.year
        month = month or today.month

        return {
            'period': f"{int(year):04d}-{int(month):02d}",
            'overview': AnalyticsQueries.violation_overview(today),
            'team_chart': AnalyticsQueries.team_chart(),
            'status_chart': AnalyticsQueries.status_chart(),
            'monthly_fines': AnalyticsQueries.monthly_fines(year, month),
            'contractor_ranking': AnalyticsQueries.contractor_ranking(year, month),
        }
