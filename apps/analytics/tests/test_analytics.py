from datetime import date, timedelta
from decimal import Decimal

import pytest
from django.urls import reverse
from django.utils import timezone
from rest_framework import status

from apps.analytics.analytics import AnalyticsQueries, month_bounds, shift_month
from apps.analytics.exceptions import InvalidPeriodError
from apps.fines.models import Fine
from apps.violations.models import ViolationStatus

TODAY = date(2025, 3, 15)


@pytest.fixture
def make_fine(db):
    def _make(issue_date, subtotal, contractor='大成營造', project_name='北區變電所新建工程', host_team='土木工作隊'):
        return Fine.objects.create(
            ticket_number=f'T-{issue_date:%m%d}',
            issue_date=issue_date,
            project_name=project_name,
            contractor=contractor,
            host_team=host_team,
            violation_item='自訂違規',
            unit_price=subtotal,
            quantity=1,
        )
    return _make


class TestPeriods:

    def test_month_bounds(self):
        assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))

    def test_invalid_month(self):
        with pytest.raises(InvalidPeriodError):
            month_bounds(2025, 13)

    def test_shift_month(self):
        assert shift_month(date(2025, 1, 31), -1) == (2024, 12)
        assert shift_month(date(2025, 12, 1), 1) == (2026, 1)
        assert shift_month(date(2025, 6, 1), 0) == (2025, 6)


@pytest.mark.django_db
class TestViolationQueries:

    def test_overview(self, make_violation):
        make_violation(lecture_deadline=TODAY - timedelta(days=1))
        make_violation(lecture_deadline=TODAY + timedelta(days=1), fine_amount=Decimal('12000'))
        make_violation(lecture_deadline=TODAY + timedelta(days=4))
        make_violation(lecture_deadline=TODAY + timedelta(days=20))
        make_violation(lecture_deadline=TODAY - timedelta(days=9), status=ViolationStatus.COMPLETED)

        overview = AnalyticsQueries.violation_overview(TODAY)

        assert overview['pending'] == 4
        assert overview['overdue'] == 1
        assert overview['urgent'] == 2
        assert overview['due_soon'] == 1
        assert overview['completed'] == 1
        assert overview['total_fine_amount'] == Decimal('12000')
        assert [v['days_remaining'] for v in overview['urgent_list']] == [1, 4]

    def test_team_chart(self, make_violation, other_project):
        make_violation()
        make_violation()
        make_violation(project=other_project)
        make_violation(project=None, project_name='舊工程', contractor_name='舊廠商')

        chart = AnalyticsQueries.team_chart()

        assert chart[0] == {'name': '土木工作隊', 'value': 2}
        assert {'name': '未歸類', 'value': 1} in chart
        assert {'name': '南部工作隊', 'value': 1} in chart

    def test_status_chart_lists_every_status(self, make_violation):
        make_violation(status=ViolationStatus.SUBMITTED)

        chart = AnalyticsQueries.status_chart()

        assert [entry['name'] for entry in chart] == ['待辦理', '已通知', '已提送', '已結案']
        assert [entry['value'] for entry in chart] == [0, 0, 1, 0]


@pytest.mark.django_db
class TestFineQueries:

    def test_monthly_fines(self, make_fine):
        make_fine(date(2025, 3, 1), 3000)
        make_fine(date(2025, 3, 31), 2000)
        make_fine(date(2025, 4, 1), 9000)

        data = AnalyticsQueries.monthly_fines(2025, 3)

        assert data['count'] == 2
        assert data['amount'] == Decimal('5000')
        assert [item['issue_date'] for item in data['items']] == [date(2025, 3, 31), date(2025, 3, 1)]

    def test_contractor_ranking(self, make_fine):
        make_fine(date(2025, 3, 1), 3000, contractor='甲營造')
        make_fine(date(2025, 3, 2), 8000, contractor='乙營造')
        make_fine(date(2025, 3, 3), 1000, contractor='甲營造')
        make_fine(date(2025, 3, 4), 500, contractor='')

        ranking = AnalyticsQueries.contractor_ranking(2025, 3)

        assert ranking == [
            {'name': '乙營造', 'value': Decimal('8000')},
            {'name': '甲營造', 'value': Decimal('4000')},
            {'name': '未分類', 'value': Decimal('500')},
        ]

    def test_fine_stats(self, make_fine):
        make_fine(date(2025, 1, 10), 1000, host_team='')
        make_fine(date(2025, 3, 5), 4000)
        make_fine(date(2025, 3, 6), 2000, project_name='南區管線汰換工程')

        stats = AnalyticsQueries.fine_stats(TODAY)

        assert stats['total_amount'] == Decimal('7000')
        assert stats['item_count'] == 3
        assert stats['current_month_amount'] == Decimal('6000')
        assert stats['by_project'][0] == {'name': '北區變電所新建工程', 'value': Decimal('5000')}
        assert {'name': '未分類', 'value': Decimal('1000')} in stats['by_team']
        assert [entry['name'] for entry in stats['by_month']] == ['2025/01', '2025/03']

    def test_viewer_summary_last_month(self, make_fine):
        make_fine(date(2025, 2, 20), 3000)
        make_fine(date(2025, 3, 2), 1000)

        summary = AnalyticsQueries.viewer_summary(offset=-1, today=TODAY)

        assert summary['period'] == '2025-02'
        assert summary['count'] == 1
        assert summary['total'] == Decimal('3000')


@pytest.mark.django_db
class TestAnalyticsApi:

    def test_dashboard(self, viewer_client, make_violation):
        make_violation()
        response = viewer_client.get(reverse('analytics:dashboard'), {'period': '2025-03'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['period'] == '2025-03'
        assert 'overview' in response.data
        assert len(response.data['status_chart']) == 4

    def test_dashboard_defaults_to_current_month(self, viewer_client, db):
        response = viewer_client.get(reverse('analytics:dashboard'))

        assert response.data['period'] == timezone.localdate().strftime('%Y-%m')

    def test_invalid_period(self, viewer_client, db):
        response = viewer_client.get(reverse('analytics:dashboard'), {'period': '2025-13'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_fine_stats(self, viewer_client, make_fine):
        make_fine(date(2025, 3, 5), 4000)
        response = viewer_client.get(reverse('analytics:fine-stats'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['item_count'] == 1

    @pytest.mark.parametrize('offset,expected', [('0', 200), ('-1', 200), ('1', 400), ('-2', 400)])
    def test_viewer_offset(self, viewer_client, db, offset, expected):
        response = viewer_client.get(reverse('analytics:viewer-summary'), {'offset': offset})

        assert response.status_code == expected

    def test_requires_auth(self, api_client):
        response = api_client.get(reverse('analytics:dashboard'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
