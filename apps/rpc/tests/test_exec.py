import base64
import uuid

import jwt
import pytest
from django.core import mail
from django.urls import reverse
from rest_framework import status

from apps.accounts.models import User, UserRole
from apps.projects.models import Project
from apps.sheets.schema import PROJECTS, VIOLATIONS
from apps.violations.models import Violation

SNAPSHOT_KEYS = {'projects', 'violations', 'fines', 'sections'}


def _encode(content):
    return base64.b64encode(content).decode()


@pytest.fixture
def exec_url():
    return reverse('rpc:exec')


@pytest.mark.django_db
class TestLoginActions:

    def test_login(self, api_client, exec_url, user):
        response = api_client.post(
            exec_url,
            {'action': 'login', 'username': user.email, 'password': 'UserPass123!'},
            format='json',
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['user']['role'] == UserRole.USER
        assert 'access' in response.data['tokens']
        assert 'violations' not in response.data

    def test_login_failure(self, api_client, exec_url, user):
        response = api_client.post(
            exec_url,
            {'action': 'login', 'username': user.email, 'password': 'nope'},
            format='json',
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['success'] is False

    def test_first_call_seeds_default_admin(self, api_client, exec_url, settings, db):
        response = api_client.post(
            exec_url,
            {
                'action': 'login',
                'username': settings.DEFAULT_ADMIN_EMAIL,
                'password': settings.DEFAULT_ADMIN_PASSWORD,
            },
            format='json',
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['user']['role'] == UserRole.ADMIN

    def test_google_login(self, api_client, exec_url, settings, user):
        settings.GOOGLE_OAUTH_CLIENT_ID = ''
        credential = jwt.encode(
            {'email': user.email, 'name': 'Google 名稱'},
            'test-signing-key-that-is-long-enough-for-hs256',
            algorithm='HS256',
        )

        response = api_client.post(exec_url, {'action': 'googleLogin', 'credential': credential}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['user']['email'] == user.email

    def test_missing_fields(self, api_client, exec_url, db):
        response = api_client.post(exec_url, {'action': 'login', 'username': 'x'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'password' in response.data['error']


@pytest.mark.django_db
class TestFetch:

    def test_fetch_returns_snapshot(self, viewer_client, exec_url, violation):
        response = viewer_client.post(exec_url, {}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert SNAPSHOT_KEYS <= set(response.data)
        assert response.data['violations'][0]['id'] == str(violation.id)

    def test_unknown_action_fetches(self, viewer_client, exec_url, project):
        response = viewer_client.post(exec_url, {'action': 'somethingElse'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['projects'][0]['name'] == project.name

    def test_requires_login(self, api_client, exec_url, db):
        response = api_client.post(exec_url, {}, format='json')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['success'] is False


@pytest.mark.django_db
class TestAddUser:

    def test_admin_adds_user(self, admin_client, exec_url):
        response = admin_client.post(
            exec_url,
            {'action': 'addUser', 'newUser': {'email': 'new@example.com', 'password': 'Secret123', 'name': '新同仁'}},
            format='json',
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['success'] is True
        assert SNAPSHOT_KEYS <= set(response.data)
        assert User.objects.get(email='new@example.com').check_password('Secret123')

    def test_user_cannot_add_user(self, authenticated_client, exec_url):
        response = authenticated_client.post(
            exec_url,
            {'action': 'addUser', 'newUser': {'email': 'new@example.com', 'password': 'Secret123'}},
            format='json',
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert not User.objects.filter(email='new@example.com').exists()


@pytest.mark.django_db
class TestSync:

    def test_replaces_tables(self, authenticated_client, exec_url, project, other_project, violation):
        payload = {
            'action': 'sync',
            'projects': [PROJECTS.to_record(project)],
            'violations': [{**VIOLATIONS.to_record(violation), 'description': '高處作業未繫安全帶'}],
        }

        response = authenticated_client.post(exec_url, payload, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['success'] is True
        assert [p['name'] for p in response.data['projects']] == [project.name]
        assert not Project.objects.filter(pk=other_project.pk).exists()
        violation.refresh_from_db()
        assert violation.description == '高處作業未繫安全帶'

    def test_viewer_cannot_sync(self, viewer_client, exec_url, project):
        response = viewer_client.post(exec_url, {'action': 'sync', 'projects': []}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert Project.objects.filter(pk=project.pk).exists()

    def test_ticket_file_for_new_row(self, authenticated_client, exec_url, project):
        violation_id = str(uuid.uuid4())
        payload = {
            'action': 'sync',
            'violations': [{
                'id': violation_id,
                'projectName': project.name,
                'violationDate': '2025-03-01',
                'description': '未依規定配戴安全帽',
            }],
            'fileUpload': {
                'violationId': violation_id,
                'fileData': {'name': 'scan.pdf', 'type': 'application/pdf', 'base64': _encode(b'%PDF ticket')},
                'projectInfo': {'sequence': project.sequence, 'abbreviation': project.abbreviation},
                'violationDate': '20250301',
            },
        }

        response = authenticated_client.post(exec_url, payload, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['fileUploadStatus']['success'] is True
        violation = Violation.objects.get(pk=violation_id)
        assert violation.file_name == '03_北區變電_20250301.pdf'
        assert violation.file_url == response.data['fileUploadStatus']['fileUrl']

    def test_ticket_file_for_stored_violation(self, authenticated_client, exec_url, violation):
        payload = {
            'action': 'sync',
            'fileUpload': {
                'violationId': str(violation.id),
                'fileData': {'name': 'ticket.pdf', 'base64': _encode(b'%PDF ticket')},
            },
        }

        response = authenticated_client.post(exec_url, payload, format='json')

        assert response.data['fileUploadStatus']['success'] is True
        violation.refresh_from_db()
        assert violation.file_name == 'ticket.pdf'

    def test_failed_upload_is_reported(self, authenticated_client, exec_url, violation):
        payload = {
            'action': 'sync',
            'fileUpload': {
                'violationId': str(violation.id),
                'fileData': {'name': 'ticket.pdf', 'base64': '***'},
            },
        }

        response = authenticated_client.post(exec_url, payload, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['fileUploadStatus']['success'] is False
        assert response.data['success'] is True


@pytest.mark.django_db
class TestViolationActions:

    def test_send_email(self, authenticated_client, exec_url, admin_user, violation):
        response = authenticated_client.post(
            exec_url,
            {
                'action': 'sendEmail',
                'to': 'contractor@example.com',
                'subject': '講習通知',
                'body': '請儘速完成講習',
                'ccEmail': 'coordinator@example.com',
                'violationId': str(violation.id),
            },
            format='json',
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['success'] is True
        assert len(mail.outbox) == 1
        assert 'coordinator@example.com' in mail.outbox[0].cc
        assert admin_user.email in mail.outbox[0].cc
        violation.refresh_from_db()
        assert violation.email_count == 1

    def test_generate_document(self, authenticated_client, exec_url, violation):
        response = authenticated_client.post(
            exec_url,
            {'action': 'generateDocument', 'violationId': str(violation.id)},
            format='json',
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['success'] is True
        violation.refresh_from_db()
        assert violation.document_url == response.data['documentUrl']

    def test_upload_scan_file(self, authenticated_client, exec_url, violation):
        response = authenticated_client.post(
            exec_url,
            {
                'action': 'uploadScanFile',
                'violationId': str(violation.id),
                'fileData': _encode(b'%PDF scan'),
                'fileName': '簽辦掃描.pdf',
            },
            format='json',
        )

        assert response.status_code == status.HTTP_200_OK
        violation.refresh_from_db()
        assert violation.scan_file_name == '簽辦掃描.pdf'
        assert response.data['violations'][0]['scanFileName'] == '簽辦掃描.pdf'

    def test_unknown_violation(self, authenticated_client, exec_url, db):
        response = authenticated_client.post(
            exec_url,
            {'action': 'generateDocument', 'violationId': str(uuid.uuid4())},
            format='json',
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['success'] is False
