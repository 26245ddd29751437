from datetime import date, timedelta
from decimal import Decimal

import pytest
from django.core import mail
from django.core.files.storage import default_storage
from django.core.files.uploadedfile import SimpleUploadedFile
from django.urls import reverse
from rest_framework import status

from apps.notifications.models import NotificationLog, NotificationType
from apps.violations.models import Violation, ViolationStatus


def detail_url(violation, name='violation-detail'):
    return reverse(f'violations:{name}', kwargs={'pk': violation.id})


# =============================================================================
# Violation CRUD Tests
# =============================================================================

@pytest.mark.django_db
class TestViolationCreate:
    """Tests for POST /api/violations/"""

    def test_contractor_and_deadline_are_filled(self, authenticated_client, project):
        data = {
            'project_name': project.name,
            'violation_date': '2025-03-09',
            'description': '高處作業未繫安全帶',
        }
        response = authenticated_client.post(reverse('violations:violation-list'), data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['contractor_name'] == '大成營造'
        assert response.data['lecture_deadline'] == '2025-04-10'
        assert response.data['status'] == ViolationStatus.PENDING
        assert response.data['host_team'] == '土木工作隊'
        assert response.data['manager_email'] == 'manager@example.com'

    def test_explicit_values_win(self, authenticated_client, project):
        data = {
            'project_name': project.name,
            'contractor_name': '協力廠商甲',
            'violation_date': '2025-03-09',
            'lecture_deadline': '2025-03-20',
        }
        response = authenticated_client.post(reverse('violations:violation-list'), data, format='json')

        assert response.data['contractor_name'] == '協力廠商甲'
        assert response.data['lecture_deadline'] == '2025-03-20'

    def test_unknown_project_needs_contractor(self, authenticated_client, db):
        data = {'project_name': '不存在的工程', 'violation_date': '2025-03-09'}
        response = authenticated_client.post(reverse('violations:violation-list'), data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'Contractor name is required'

    def test_viewer_cannot_create(self, viewer_client, project):
        data = {'project_name': project.name, 'violation_date': '2025-03-09'}
        response = viewer_client.post(reverse('violations:violation-list'), data, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert not Violation.objects.exists()


@pytest.mark.django_db
class TestViolationList:
    """Tests for GET /api/violations/"""

    def test_filters(self, authenticated_client, make_violation, other_project):
        make_violation(violation_date=date(2025, 1, 5))
        make_violation(violation_date=date(2025, 2, 5), status=ViolationStatus.COMPLETED)
        make_violation(violation_date=date(2025, 2, 6), project=other_project)
        url = reverse('violations:violation-list')

        assert authenticated_client.get(url).data['count'] == 3
        assert authenticated_client.get(url, {'status': 'COMPLETED'}).data['count'] == 1
        assert authenticated_client.get(url, {'host_team': '南部工作隊'}).data['count'] == 1
        assert authenticated_client.get(url, {'search': '永安'}).data['count'] == 1
        assert authenticated_client.get(url, {'date_from': '2025-02-01'}).data['count'] == 2

    def test_newest_first(self, authenticated_client, make_violation):
        older = make_violation(violation_date=date(2025, 1, 5))
        newer = make_violation(violation_date=date(2025, 2, 5))

        results = authenticated_client.get(reverse('violations:violation-list')).data['results']

        assert [r['id'] for r in results] == [str(newer.id), str(older.id)]

    def test_invalid_date_range(self, authenticated_client, db):
        response = authenticated_client.get(
            reverse('violations:violation-list'),
            {'date_from': '2025-03-01', 'date_to': '2025-02-01'},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_presets(self, viewer_client):
        response = viewer_client.get(reverse('violations:violation-presets'))

        assert response.status_code == status.HTTP_200_OK
        assert '未依規定配戴安全帽' in response.data['descriptions']


@pytest.mark.django_db
class TestViolationUpdate:
    """Tests for PATCH /api/violations/{id}/"""

    def test_moving_date_moves_deadline(self, authenticated_client, violation):
        response = authenticated_client.patch(detail_url(violation), {'violation_date': '2025-03-10'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['lecture_deadline'] == '2025-04-11'

    def test_changing_project_refreshes_contractor(self, authenticated_client, violation, other_project):
        response = authenticated_client.patch(detail_url(violation), {'project_name': other_project.name}, format='json')

        assert response.data['contractor_name'] == '永安工程'
        violation.refresh_from_db()
        assert violation.project == other_project

    def test_status_action_stamps_completion(self, authenticated_client, violation):
        url = detail_url(violation, 'violation-set-status')

        response = authenticated_client.post(url, {'status': 'COMPLETED'}, format='json')
        assert response.status_code == status.HTTP_200_OK
        assert response.data['completion_date'] is not None

        response = authenticated_client.post(url, {'status': 'SUBMITTED'}, format='json')
        assert response.data['completion_date'] is None

    def test_unknown_status(self, authenticated_client, violation):
        url = detail_url(violation, 'violation-set-status')
        response = authenticated_client.post(url, {'status': 'ARCHIVED'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_delete(self, authenticated_client, violation):
        response = authenticated_client.delete(detail_url(violation))

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Violation.objects.exists()


# =============================================================================
# Attachment and Document Tests
# =============================================================================

@pytest.mark.django_db
class TestAttachments:

    def test_ticket_file_is_renamed_after_project(self, authenticated_client, violation):
        upload = SimpleUploadedFile('IMG_0042.pdf', b'%PDF-1.4 ticket', content_type='application/pdf')
        response = authenticated_client.post(
            detail_url(violation, 'violation-ticket-file'), {'file': upload}, format='multipart'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['fileName'] == '03_北區變電_20250301.pdf'
        violation.refresh_from_db()
        assert violation.file_url == response.data['fileUrl']

    def test_scan_replacement_is_recorded(self, authenticated_client, violation):
        url = detail_url(violation, 'violation-scan-file')
        first = SimpleUploadedFile('scan1.pdf', b'%PDF first', content_type='application/pdf')
        authenticated_client.post(url, {'file': first, 'file_name': 'scan1.pdf'}, format='multipart')

        second = SimpleUploadedFile('scan2.pdf', b'%PDF second', content_type='application/pdf')
        response = authenticated_client.post(
            url,
            {'file': second, 'file_name': 'scan2.pdf', 'replace_reason': '漏簽主管欄'},
            format='multipart',
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['wasReplaced'] is True
        violation.refresh_from_db()
        assert violation.scan_file_name == 'scan2.pdf'
        assert len(violation.scan_file_history) == 1
        entry = violation.scan_file_history[0]
        assert entry['reason'] == '漏簽主管欄'
        assert entry['oldFileName'] == 'scan1.pdf'
        assert entry['newFileName'] == 'scan2.pdf'

    def test_generate_document(self, authenticated_client, violation):
        response = authenticated_client.post(detail_url(violation, 'violation-document'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['success'] is True
        assert response.data['documentName'].startswith('簽辦_北區變電所新建工程_')
        violation.refresh_from_db()
        assert violation.document_url == response.data['documentUrl']

    def test_document_name_is_a_single_file(self, authenticated_client, make_violation):
        violation = make_violation(project=None, project_name='A/B 工程', contractor_name='大成營造')

        response = authenticated_client.post(detail_url(violation, 'violation-document'))

        name = response.data['documentName']
        assert '/' not in name
        assert name.startswith('簽辦_AB_工程_')
        assert default_storage.exists(f'documents/{name}')


@pytest.mark.django_db
class TestSendEmail:
    """Tests for POST /api/violations/{id}/send-email/"""

    def test_admins_are_copied(self, authenticated_client, admin_user, violation):
        data = {
            'to': 'coordinator@example.com',
            'subject': '講習提醒',
            'body': '請於期限內辦理講習\n謝謝',
            'cc': ['boss@example.com'],
        }
        response = authenticated_client.post(detail_url(violation, 'violation-send-email'), data, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {'success': True, 'message': 'Email sent'}
        assert len(mail.outbox) == 1
        message = mail.outbox[0]
        assert message.to == ['coordinator@example.com']
        assert message.cc == ['boss@example.com', admin_user.email]

        violation.refresh_from_db()
        assert violation.email_count == 1
        log = NotificationLog.objects.get(violation=violation)
        assert log.notification_type == NotificationType.MANUAL


@pytest.mark.django_db
class TestViolationModel:

    def test_days_remaining(self, make_violation):
        violation = make_violation(violation_date=date(2025, 3, 1))

        assert violation.days_remaining(date(2025, 3, 1)) == 32
        assert violation.days_remaining(date(2025, 4, 3)) == -1

    def test_fine_amount_default(self, make_violation):
        assert make_violation().fine_amount == Decimal('0')

    def test_deadline_default_spans_32_days(self, make_violation):
        violation = make_violation(violation_date=date(2025, 12, 15))

        assert violation.lecture_deadline - violation.violation_date == timedelta(days=32)
