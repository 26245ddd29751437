"""
Domain exceptions for analytics app.

Exception Hierarchy:
    AnalyticsServiceError (base)
    └── InvalidPeriodError

Usage:
    from apps.analytics.exceptions import InvalidPeriodError

    if not 1 <= month <= 12:
        raise InvalidPeriodError("Invalid period format. Use YYYY-MM")
"""


class AnalyticsServiceError(Exception):
    """
    Base exception for all analytics service errors.

    Views catch it to answer with 400::

        try:
            data = AnalyticsQueries.monthly_fines(2025, 13)
        except AnalyticsServiceError as e:
            return Response({'error': str(e)}, status=400)
    """

    pass


class InvalidPeriodError(AnalyticsServiceError):
    """
    Raised when a year/month pair does not name a real month.

    Example:
        raise InvalidPeriodError("Invalid period: 2025-13")
    """

    pass
