"""
Serializers for analytics app.

This module contains:
1. Input serializers - Query parameter validation
2. Response serializers - API documentation and output formatting

Input Serializers:
    PeriodQuerySerializer - Validates the YYYY-MM period parameter
    ViewerQuerySerializer - Validates the viewer month offset

Response Serializers:
    OverviewSerializer - Lecture workload counters
    ChartEntrySerializer - One name/value chart point
    DashboardResponseSerializer - Dashboard page
    FineStatsResponseSerializer - Fine statistics page
    ViewerSummarySerializer - Viewer monthly summary
"""

from rest_framework import serializers


# =============================================================================
# Input Serializers (Query Parameter Validation)
# =============================================================================

class PeriodQuerySerializer(serializers.Serializer):
    """
    Validate the month period query parameter.

    Used by: dashboard

    Query Parameters:
        period (str): Month period in YYYY-MM format (e.g., '2025-01')

    Note:
        The validated data carries ``year`` and ``month`` integers when a
        period is given.
    """

    period = serializers.RegexField(
        regex=r'^\d{4}-(0[1-9]|1[0-2])$',
        required=False,
        allow_blank=True,
        help_text='Month period in YYYY-MM format'
    )

    def validate(self, attrs):
        """Split period into year and month."""
        period = attrs.get('period')
        if period:
            year, month = period.split('-')
            attrs['year'], attrs['month'] = int(year), int(month)
        return attrs


class ViewerQuerySerializer(serializers.Serializer):
    """
    Query Parameters:
        offset (int): Months relative to the current month; -1 or 0
    """

    offset = serializers.IntegerField(required=False, default=0, min_value=-1, max_value=0)


# =============================================================================
# Response Serializers (API Documentation)
# =============================================================================

class ChartEntrySerializer(serializers.Serializer):
    name = serializers.CharField()
    value = serializers.DecimalField(max_digits=14, decimal_places=0)


class StatusChartEntrySerializer(serializers.Serializer):
    status = serializers.CharField()
    name = serializers.CharField()
    value = serializers.IntegerField()


class UrgentViolationSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    contractor_name = serializers.CharField()
    project_name = serializers.CharField()
    lecture_deadline = serializers.DateField()
    days_remaining = serializers.IntegerField()
    status = serializers.CharField()


class OverviewSerializer(serializers.Serializer):
    """Lecture workload counters."""

    pending = serializers.IntegerField()
    overdue = serializers.IntegerField()
    urgent = serializers.IntegerField()
    due_soon = serializers.IntegerField()
    completed = serializers.IntegerField()
    total_fine_amount = serializers.DecimalField(max_digits=14, decimal_places=0)
    urgent_list = UrgentViolationSerializer(many=True)


class FineRowSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    ticket_number = serializers.CharField()
    issue_date = serializers.DateField()
    project_name = serializers.CharField()
    contractor = serializers.CharField()
    host_team = serializers.CharField()
    violation_item = serializers.CharField()
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=0)
    quantity = serializers.IntegerField()
    subtotal = serializers.DecimalField(max_digits=14, decimal_places=0)
    violator_name = serializers.CharField()
    issuer_name = serializers.CharField()


class MonthlyFinesSerializer(serializers.Serializer):
    year = serializers.IntegerField()
    month = serializers.IntegerField()
    items = FineRowSerializer(many=True)
    amount = serializers.DecimalField(max_digits=14, decimal_places=0)
    count = serializers.IntegerField()


class DashboardResponseSerializer(serializers.Serializer):
    """Dashboard page for one month."""

    period = serializers.CharField()
    overview = OverviewSerializer()
    team_chart = ChartEntrySerializer(many=True)
    status_chart = StatusChartEntrySerializer(many=True)
    monthly_fines = MonthlyFinesSerializer()
    contractor_ranking = ChartEntrySerializer(many=True)


class FineStatsResponseSerializer(serializers.Serializer):
    total_amount = serializers.DecimalField(max_digits=14, decimal_places=0)
    item_count = serializers.IntegerField()
    current_month_amount = serializers.DecimalField(max_digits=14, decimal_places=0)
    by_project = ChartEntrySerializer(many=True)
    by_team = ChartEntrySerializer(many=True)
    by_month = ChartEntrySerializer(many=True)


class ViewerSummarySerializer(serializers.Serializer):
    year = serializers.IntegerField()
    month = serializers.IntegerField()
    period = serializers.CharField()
    items = FineRowSerializer(many=True)
    total = serializers.DecimalField(max_digits=14, decimal_places=0)
    count = serializers.IntegerField()


class ErrorSerializer(serializers.Serializer):
    """Error response format."""

    error = serializers.CharField()
