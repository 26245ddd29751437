from datetime import date, timedelta
from decimal import Decimal

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from apps.accounts.models import User, UserRole
from apps.projects.models import Project, HostTeam
from apps.violations.models import Violation


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture(autouse=True)
def media_root(settings, tmp_path):
    """Keep uploaded and generated files out of the working tree."""
    settings.MEDIA_ROOT = str(tmp_path / 'media')
    settings.BACKUP_DIR = str(tmp_path / 'backups')
    settings.DOCUMENT_TEMPLATE_PATH = ''
    return tmp_path


@pytest.fixture(autouse=True)
def no_ssl_redirect(settings):
    """The test client speaks plain HTTP; don't redirect it to HTTPS."""
    settings.SECURE_SSL_REDIRECT = False


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(
        email='admin@example.com',
        password='AdminPass123!',
        name='管理員',
        role=UserRole.ADMIN,
    )


@pytest.fixture
def user(db):
    """Regular account allowed to edit records."""
    return User.objects.create_user(
        email='user@example.com',
        password='UserPass123!',
        name='王小明',
        role=UserRole.USER,
    )


@pytest.fixture
def viewer_user(db):
    return User.objects.create_user(
        email='viewer@example.com',
        password='ViewerPass123!',
        name='檢視者',
        role=UserRole.VIEWER,
    )


@pytest.fixture
def admin_client(admin_user):
    return _client_for(admin_user)


@pytest.fixture
def authenticated_client(user):
    """Return an API client authenticated as the regular user using JWT."""
    return _client_for(user)


@pytest.fixture
def viewer_client(viewer_user):
    return _client_for(viewer_user)


@pytest.fixture
def project(db):
    return Project.objects.create(
        sequence=3,
        abbreviation='北區變電',
        name='北區變電所新建工程',
        contract_number='C-113-001',
        contractor='大成營造',
        coordinator_name='林承辦',
        coordinator_email='coordinator@example.com',
        host_team=HostTeam.CIVIL,
        manager_name='陳主管',
        manager_email='manager@example.com',
    )


@pytest.fixture
def other_project(db):
    return Project.objects.create(
        sequence=7,
        abbreviation='南區管線',
        name='南區管線汰換工程',
        contractor='永安工程',
        coordinator_name='張承辦',
        coordinator_email='south@example.com',
        host_team=HostTeam.SOUTHERN,
    )


@pytest.fixture
def make_violation(db, project):
    """Factory for violations on ``project``; the deadline follows the date."""
    def _make(violation_date=None, lecture_deadline=None, **fields):
        violation_date = violation_date or date(2025, 3, 1)
        fields.setdefault('project', project)
        fields.setdefault('project_name', fields['project'].name if fields['project'] else '未知工程')
        fields.setdefault('contractor_name', fields['project'].contractor if fields['project'] else '未知廠商')
        fields.setdefault('description', '未依規定配戴安全帽')
        fields.setdefault('fine_amount', Decimal('0'))
        return Violation.objects.create(
            violation_date=violation_date,
            lecture_deadline=lecture_deadline or violation_date + timedelta(days=32),
            **fields,
        )
    return _make


@pytest.fixture
def violation(make_violation):
    return make_violation()
