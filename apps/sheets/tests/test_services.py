import uuid
from datetime import date
from decimal import Decimal

import pytest

from apps.accounts.models import User, UserRole
from apps.fines.models import Fine, Section
from apps.projects.models import Project
from apps.sheets.exceptions import UnknownTableError
from apps.sheets.header_map import headers_for, key_for_header
from apps.sheets.schema import LEGACY_ID_NAMESPACE, PROJECTS, VIOLATIONS, to_date, to_names, to_uuid
from apps.sheets.services import export_records, replace_records, snapshot
from apps.violations.models import Violation, ViolationStatus


class TestConverters:

    def test_legacy_id_is_stable(self):
        assert to_uuid('7', 'Projects') == to_uuid('7', 'Projects')
        assert to_uuid('7', 'Projects') == uuid.uuid5(LEGACY_ID_NAMESPACE, 'Projects:7')
        assert to_uuid('7', 'Projects') != to_uuid('7', 'Violations')

    def test_blank_id(self):
        assert to_uuid('  ', 'Projects') is None

    @pytest.mark.parametrize('value', ['2025-03-01', '2025/03/01', '2025-03-01 08:00:00'])
    def test_dates(self, value):
        assert to_date(value) == date(2025, 3, 1)

    def test_invalid_date(self):
        assert to_date('三月一日') is None

    def test_names(self):
        assert to_names('王小明、李大華, 陳一') == ['王小明', '李大華', '陳一']
        assert to_names('["甲", "乙"]') == ['甲', '乙']

    def test_headers_in_either_language(self):
        assert key_for_header('Projects', '工程名稱') == 'name'
        assert key_for_header('Projects', 'name') == 'name'
        assert key_for_header('Projects', '其他') == ''
        assert headers_for('Users') == ['帳號(Email)', '密碼', '姓名', '權限角色']

    def test_rows_to_records_skips_blank_rows(self):
        records = PROJECTS.rows_to_records(
            ['工程名稱', '承攬商', '備註'],
            [['北區變電所新建工程', '大成營造', 'x'], [None, '', None]],
        )

        assert records == [{'name': '北區變電所新建工程', 'contractor': '大成營造'}]


@pytest.mark.django_db
class TestReplaceRecords:

    def test_upsert_and_delete(self, project, other_project):
        records = [
            {**PROJECTS.to_record(project), 'contractor': '新承攬商'},
            {'name': '東區新建工程', 'contractor': '東昇營造', 'coordinatorName': '林承辦', 'sequence': '9'},
        ]

        result = replace_records('Projects', records)

        assert result == {'table': 'Projects', 'created': 1, 'updated': 1, 'deleted': 1, 'skipped': 0}
        project.refresh_from_db()
        assert project.contractor == '新承攬商'
        assert not Project.objects.filter(pk=other_project.pk).exists()
        assert Project.objects.get(name='東區新建工程').sequence == 9

    def test_legacy_ids_map_to_same_row(self, db):
        record = {'id': '12', 'name': '舊工程', 'contractor': '舊廠商', 'coordinatorName': '王'}

        replace_records('Projects', [record])
        result = replace_records('Projects', [{**record, 'contractor': '改名廠商'}])

        assert result['updated'] == 1
        assert Project.objects.get().id == to_uuid('12', 'Projects')
        assert Project.objects.get().contractor == '改名廠商'

    def test_violation_rows(self, project):
        result = replace_records('Violations', [
            {'projectName': project.name, 'violationDate': '2025/03/01', 'status': '不明', 'participants': '甲、乙'},
            {'projectName': '', 'violationDate': '2025-03-01'},
            {'projectName': project.name, 'violationDate': ''},
        ])

        assert result['created'] == 1
        assert result['skipped'] == 2
        violation = Violation.objects.get()
        assert violation.project == project
        assert violation.contractor_name == project.contractor
        assert violation.lecture_deadline == date(2025, 4, 2)
        assert violation.status == ViolationStatus.PENDING
        assert violation.participants == ['甲', '乙']

    def test_invalid_record_keeps_stored_row(self, violation):
        record = VIOLATIONS.to_record(violation)
        record['projectName'] = ''
        record['description'] = '改過的說明'

        result = replace_records('Violations', [record])

        assert result['skipped'] == 1
        assert result['deleted'] == 0
        violation.refresh_from_db()
        assert violation.project_name == '北區變電所新建工程'
        assert violation.description == '未依規定配戴安全帽'

    def test_fine_links(self, project):
        section = Section.objects.create(name='陳站長', host_team='土木工作隊')

        replace_records('Fines', [{
            'ticketNumber': 'T-9',
            'issueDate': '2025-03-09',
            'projectName': project.name,
            'hostTeam': '土木工作隊',
            'issuerName': '陳站長',
            'violationItem': '未依規定配戴安全帽',
            'unitPrice': '1,000',
            'quantity': 0,
            'subtotal': 999999,
            'violationId': str(uuid.uuid4()),
        }])

        fine = Fine.objects.get()
        assert fine.project == project
        assert fine.issuer == section
        assert fine.quantity == 1
        assert fine.subtotal == Decimal('1000')
        assert fine.violation_id is None

    def test_users_are_upserted_not_deleted(self, admin_user, user):
        result = replace_records('Users', [
            {'email': 'USER@example.com', 'name': '王大明', 'role': 'admin', 'password': ''},
            {'email': 'new@example.com', 'name': '新同仁', 'role': 'OWNER', 'password': 'NewPass123!'},
            {'email': '', 'name': '無帳號'},
        ])

        assert result == {'table': 'Users', 'created': 1, 'updated': 1, 'deleted': 0, 'skipped': 1}
        user.refresh_from_db()
        assert user.name == '王大明'
        assert user.role == UserRole.ADMIN
        assert user.check_password('UserPass123!')
        new_user = User.objects.get(email='new@example.com')
        assert new_user.role == UserRole.USER
        assert new_user.check_password('NewPass123!')
        assert User.objects.filter(pk=admin_user.pk).exists()

    def test_unknown_table(self, db):
        with pytest.raises(UnknownTableError):
            replace_records('Expenses', [])


@pytest.mark.django_db
class TestExport:

    def test_export_records(self, violation):
        [record] = export_records('Violations')

        assert record['id'] == str(violation.id)
        assert record['violationDate'] == '2025-03-01'
        assert record['firstNotifyDate'] == ''
        assert record['fineAmount'] == 0

    def test_user_passwords_are_blank(self, user):
        [record] = export_records('Users')

        assert record == {'email': 'user@example.com', 'password': '', 'name': '王小明', 'role': 'user'}

    def test_snapshot_keys(self, violation):
        data = snapshot()

        assert set(data) == {'projects', 'sections', 'violations', 'fines'}
        assert len(data['violations']) == 1
