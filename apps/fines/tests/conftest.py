from datetime import date

import pytest

from apps.fines.models import Section, SectionTitle
from apps.fines.services import save_ticket


@pytest.fixture
def section(db):
    return Section.objects.create(
        name='陳站長',
        host_team='土木工作隊',
        title=SectionTitle.STATION_CHIEF,
        email='chief@example.com',
    )


@pytest.fixture
def ticket(project, section):
    """Ticket T-001 totalling 12,000 across two violators."""
    return save_ticket(
        ticket_number='T-001',
        header={'issue_date': date(2025, 3, 9), 'project_name': project.name, 'issuer': section},
        items=[
            {'violation_item': '開口處未設置防護措施', 'unit_price': 5000, 'quantity': 2, 'violator_name': '甲'},
            {'violation_item': '未依規定配戴安全帽', 'unit_price': 1000, 'quantity': 2, 'violator_name': '乙'},
        ],
    )
