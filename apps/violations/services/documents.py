"""
Sign-off document service.

Fills the sign-off (簽辦) Word template for a violation with python-docx.
Placeholders may be split across runs by Word, so replacement works on
whole paragraph text and rewrites the paragraph's runs.
"""

import io
import logging
import os

from django.conf import settings
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from django.db import transaction
from django.utils import timezone
from django.utils.text import get_valid_filename
from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.opc.exceptions import PackageNotFoundError
from docx.shared import Pt

from apps.projects.services import get_project_by_name
from apps.violations.dates import compact, format_roc_long
from apps.violations.models import Violation

from .exceptions import DocumentGenerationError

logger = logging.getLogger(__name__)

DOCUMENT_DIR = 'documents'

PROJECT_NAME = '【工程名稱】'
LECTURE_DEADLINE = '【講習截止日期】'
CONTRACTOR_NAME = '【承攬商名稱】'
HOST_TEAM = '【主辦工作隊】'


def _default_template() -> Document:
    """Built-in sign-off layout used when no template file is configured."""
    document = Document()

    title = document.add_paragraph()
    title.alignment = WD_ALIGN_PARAGRAPH.CENTER
    run = title.add_run('簽')
    run.bold = True
    run.font.size = Pt(20)

    document.add_paragraph(f'主旨：{PROJECT_NAME}承攬商{CONTRACTOR_NAME}違規講習辦理案，簽請鑒核。')
    document.add_paragraph('說明：')
    document.add_paragraph(
        f'一、本處{PROJECT_NAME}之承攬商{CONTRACTOR_NAME}，經查有違反職業安全衛生規定之情事，'
        '依承攬商安全衛生管理規定應辦理違規講習。'
    )
    document.add_paragraph(
        f'二、承攬商應於{LECTURE_DEADLINE}前完成違規講習（含測驗不得少於3小時），'
        f'由{HOST_TEAM}督導辦理並全程錄影。'
    )
    document.add_paragraph('三、講習完成後一週內，將違規講習成果報告表送工業安全衛生組備查。')
    document.add_paragraph('擬辦：奉核後通知承攬商依限辦理。')

    table = document.add_table(rows=2, cols=2)
    table.style = 'Table Grid'
    table.cell(0, 0).text = '工程名稱'
    table.cell(0, 1).text = PROJECT_NAME
    table.cell(1, 0).text = '主辦工作隊'
    table.cell(1, 1).text = HOST_TEAM

    return document


def load_template():
    """
    Open the configured template, falling back to the built-in layout.

    Raises:
        DocumentGenerationError: If the configured file is not a valid .docx
    """
    path = getattr(settings, 'DOCUMENT_TEMPLATE_PATH', '')
    if path and os.path.exists(path):
        try:
            return Document(path)
        except PackageNotFoundError as e:
            raise DocumentGenerationError(f'Invalid document template: {e}')
    return _default_template()


def _replace_in_paragraph(paragraph, replacements: dict) -> bool:
    text = paragraph.text
    if not any(key in text for key in replacements):
        return False
    for key, value in replacements.items():
        text = text.replace(key, value)
    runs = paragraph.runs
    if runs:
        # Keep the first run's formatting for the whole paragraph
        runs[0].text = text
        for run in runs[1:]:
            run.text = ''
    else:
        paragraph.add_run(text)
    return True


def _iter_paragraphs(container):
    for paragraph in container.paragraphs:
        yield paragraph
    for table in getattr(container, 'tables', []):
        for row in table.rows:
            for cell in row.cells:
                yield from _iter_paragraphs(cell)


def replace_placeholders(document, replacements: dict) -> int:
    """Replace placeholders in body, tables, headers and footers. Returns hit count."""
    containers = [document]
    for section in document.sections:
        containers.extend([section.header, section.footer])

    replaced = 0
    for container in containers:
        for paragraph in _iter_paragraphs(container):
            if _replace_in_paragraph(paragraph, replacements):
                replaced += 1
    return replaced


def document_replacements(violation: Violation, project=None) -> dict:
    project = project or violation.project or get_project_by_name(violation.project_name)
    return {
        PROJECT_NAME: violation.project_name,
        LECTURE_DEADLINE: format_roc_long(violation.lecture_deadline),
        CONTRACTOR_NAME: violation.contractor_name,
        HOST_TEAM: (project.host_team if project else '') or '',
    }


@transaction.atomic
def generate_document(*, violation: Violation) -> dict:
    """
    Produce the sign-off document of a violation.

    The file is named ``簽辦_<project>_<yyyymmdd>.docx`` (generation date),
    cleaned into a single valid file name, and its URL is stored on the
    violation.

    Returns:
        dict: ``{'success': True, 'documentUrl': ..., 'documentName': ...}``

    Raises:
        DocumentGenerationError: If the template is invalid or storage fails
    """
    document = load_template()
    replace_placeholders(document, document_replacements(violation))

    name = get_valid_filename(f"簽辦_{violation.project_name}_{compact(timezone.localdate())}.docx")
    buffer = io.BytesIO()
    document.save(buffer)

    try:
        stored = default_storage.save(f"{DOCUMENT_DIR}/{name}", ContentFile(buffer.getvalue()))
    except OSError as e:
        logger.exception("Saving document %s failed", name)
        raise DocumentGenerationError(str(e))

    url = default_storage.url(stored)
    violation.document_url = url
    violation.save(update_fields=['document_url', 'updated_at'])

    logger.info("Sign-off document %s generated for violation %s", name, violation.id)
    return {'success': True, 'documentUrl': url, 'documentName': name}
