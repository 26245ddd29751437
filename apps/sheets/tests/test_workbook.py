import io
from pathlib import Path

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management import call_command
from django.urls import reverse
from openpyxl import Workbook, load_workbook
from rest_framework import status

from apps.projects.models import Project
from apps.sheets.exceptions import SheetImportError
from apps.sheets.header_map import headers_for
from apps.sheets.workbook import export_workbook, import_workbook, read_workbook
from apps.violations.models import Violation

XLSX = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


def _upload(content, name='backup.xlsx'):
    return SimpleUploadedFile(name, content, content_type=XLSX)


@pytest.mark.django_db
class TestWorkbook:

    def test_export_layout(self, violation, user):
        workbook = load_workbook(io.BytesIO(export_workbook()))

        assert workbook.sheetnames == ['Projects', 'Sections', 'Violations', 'Fines', 'NotificationLogs', 'Users']
        sheet = workbook['Violations']
        assert [cell.value for cell in sheet[1]] == headers_for('Violations')
        assert sheet.freeze_panes == 'A2'
        assert sheet.max_row == 2

    def test_restore_from_backup(self, violation, project):
        backup = export_workbook()
        violation_id = violation.pk
        violation.delete()
        Project.objects.filter(pk=project.pk).update(contractor='改過的承攬商')

        results = import_workbook(io.BytesIO(backup))

        assert results['Violations']['created'] == 1
        assert results['Projects']['updated'] == 1
        restored = Violation.objects.get(pk=violation_id)
        assert restored.lecture_deadline == violation.lecture_deadline
        assert restored.project == project
        project.refresh_from_db()
        assert project.contractor == '大成營造'

    def test_tables_without_sheet_are_kept(self, violation):
        workbook = Workbook()
        sheet = workbook.active
        sheet.title = 'Sections'
        sheet.append(['姓名', '工作隊', '職稱'])
        sheet.append(['陳站長', '土木工作隊', '站長'])
        buffer = io.BytesIO()
        workbook.save(buffer)
        buffer.seek(0)

        results = import_workbook(buffer)

        assert list(results) == ['Sections']
        assert Violation.objects.filter(pk=violation.pk).exists()

    def test_unknown_sheets_only(self, db):
        workbook = Workbook()
        workbook.active.title = 'Other'
        buffer = io.BytesIO()
        workbook.save(buffer)
        buffer.seek(0)

        with pytest.raises(SheetImportError):
            import_workbook(buffer)

    def test_not_a_workbook(self):
        with pytest.raises(SheetImportError):
            read_workbook(io.BytesIO(b'not a zip file'))


@pytest.mark.django_db
class TestWorkbookApi:

    def test_export_download(self, viewer_client, project):
        response = viewer_client.get(reverse('sheets:export'))

        assert response.status_code == status.HTTP_200_OK
        assert response['Content-Type'] == XLSX
        assert 'safety_guard_' in response['Content-Disposition']
        assert load_workbook(io.BytesIO(response.content))['Projects'].max_row == 2

    def test_import(self, admin_client, project):
        backup = export_workbook()
        Project.objects.all().delete()

        response = admin_client.post(reverse('sheets:import'), {'file': _upload(backup)}, format='multipart')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['success'] is True
        assert response.data['tables']['Projects']['created'] == 1
        assert Project.objects.filter(name=project.name).exists()

    def test_import_requires_admin(self, authenticated_client, db):
        response = authenticated_client.post(
            reverse('sheets:import'),
            {'file': _upload(export_workbook())},
            format='multipart',
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_import_rejects_other_files(self, admin_client, db):
        response = admin_client.post(
            reverse('sheets:import'),
            {'file': _upload(b'a,b\n', name='backup.csv')},
            format='multipart',
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_import_broken_workbook(self, admin_client, db):
        response = admin_client.post(
            reverse('sheets:import'),
            {'file': _upload(b'broken')},
            format='multipart',
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'error' in response.data


@pytest.mark.django_db
class TestBackupCommand:

    def test_writes_backup(self, settings, project):
        out = io.StringIO()
        call_command('backup_data', stdout=out)

        [backup] = Path(settings.BACKUP_DIR).glob('backup_*.xlsx')
        assert 'Backup written' in out.getvalue()
        assert load_workbook(backup)['Projects'].max_row == 2

    def test_keeps_newest(self, tmp_path, db):
        directory = tmp_path / 'out'
        directory.mkdir()
        for stamp in ('20240101_000000', '20240201_000000'):
            (directory / f'backup_{stamp}.xlsx').write_bytes(b'')

        call_command('backup_data', '--output-dir', str(directory), '--keep', '2', stdout=io.StringIO())

        names = sorted(path.name for path in directory.glob('backup_*.xlsx'))
        assert len(names) == 2
        assert 'backup_20240101_000000.xlsx' not in names
