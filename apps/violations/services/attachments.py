"""
Attachment service.

Stores fine ticket files and signed sign-off scans for violations using
Django's default storage, and keeps the scan replacement history.
"""

import base64
import binascii
import logging
import mimetypes
import os
from typing import Optional

from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from django.db import transaction
from django.utils import timezone

from apps.violations.dates import compact
from apps.violations.models import Violation

from .exceptions import FileUploadError

logger = logging.getLogger(__name__)

TICKET_DIR = 'tickets'
SCAN_DIR = 'scans'
DEFAULT_SCAN_MIME = 'application/pdf'


def decode_base64_file(data: str) -> bytes:
    """
    Decode a base64 payload, accepting ``data:<mime>;base64,`` prefixes.

    Raises:
        FileUploadError: If the payload is empty or not valid base64
    """
    if not data:
        raise FileUploadError('Empty file payload')
    if data.startswith('data:') and ',' in data:
        data = data.split(',', 1)[1]
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise FileUploadError(f'Invalid base64 file payload: {e}')


def _store(directory: str, file_name: str, content: bytes) -> tuple:
    """Save bytes under ``directory`` and return (storage name, url)."""
    try:
        stored = default_storage.save(f"{directory}/{file_name}", ContentFile(content))
    except OSError as e:
        logger.exception("Storing %s failed", file_name)
        raise FileUploadError(str(e))
    return stored, default_storage.url(stored)


def ticket_file_name(original_name: str, *, sequence=None, abbreviation: str = '', violation_date=None) -> str:
    """
    Build the stored name of a fine ticket file.

    Format: ``<sequence>_<abbreviation>_<yyyymmdd><ext>``; the sequence is
    zero-padded to two digits (``00`` when unknown) and a missing
    abbreviation becomes ``未命名``.
    """
    ext = os.path.splitext(original_name or '')[1]
    seq = str(sequence).zfill(2) if sequence not in (None, '') else '00'
    abbr = abbreviation or '未命名'
    day = compact(violation_date or timezone.localdate())
    return f"{seq}_{abbr}_{day}{ext}"


def store_ticket_file(*, content: bytes, original_name: str, project=None, violation_date=None) -> tuple:
    """
    Store a fine ticket file that is not attached to a saved violation yet.

    ``project`` may be a Project instance or a dict with ``sequence`` and
    ``abbreviation``; when given, the file is renamed with
    ticket_file_name(), otherwise the original name is kept.

    Returns:
        tuple: (file name, url)

    Raises:
        FileUploadError: If the file cannot be stored
    """
    if project is not None:
        if isinstance(project, dict):
            sequence = project.get('sequence')
            abbreviation = project.get('abbreviation')
        else:
            sequence = project.sequence
            abbreviation = project.abbreviation
        name = ticket_file_name(
            original_name,
            sequence=sequence,
            abbreviation=abbreviation,
            violation_date=violation_date,
        )
    else:
        name = os.path.basename(original_name or '') or f"ticket_{compact(timezone.localdate())}"

    _, url = _store(TICKET_DIR, name, content)
    return name, url


@transaction.atomic
def upload_ticket_file(
    *,
    violation: Violation,
    content: bytes,
    original_name: str,
    project=None,
    violation_date=None,
) -> dict:
    """
    Store the fine ticket file of a violation.

    Returns:
        dict: ``{'success': True, 'fileName': ..., 'fileUrl': ...}``

    Raises:
        FileUploadError: If the file cannot be stored
    """
    name, url = store_ticket_file(
        content=content,
        original_name=original_name,
        project=project,
        violation_date=violation_date or violation.violation_date,
    )

    violation.file_name = name
    violation.file_url = url
    violation.save(update_fields=['file_name', 'file_url', 'updated_at'])

    logger.info("Ticket file %s stored for violation %s", name, violation.id)
    return {'success': True, 'fileName': name, 'fileUrl': url}


@transaction.atomic
def upload_scan_file(
    *,
    violation: Violation,
    content: bytes,
    file_name: Optional[str] = None,
    mime_type: str = DEFAULT_SCAN_MIME,
    replace_reason: Optional[str] = None,
) -> dict:
    """
    Store the signed scan of a violation's sign-off document.

    A replacement with a reason appends an entry to ``scan_file_history``::

        {'date': 'YYYY-MM-DD HH:MM', 'reason': ..., 'oldFileName': ...,
         'oldUrl': ..., 'newFileName': ..., 'newUrl': ...}

    Args:
        violation: Target violation
        content: Raw file bytes
        file_name: Stored name; defaults to ``掃描檔_<yyyymmdd>``
        mime_type: Used to pick an extension when file_name has none
        replace_reason: Why an existing scan is being replaced

    Returns:
        dict: ``scanFileUrl``, ``scanFileName`` and ``wasReplaced``

    Raises:
        FileUploadError: If the file cannot be stored
    """
    now = timezone.localtime()
    file_name = file_name or f"掃描檔_{compact(now.date())}"
    if not os.path.splitext(file_name)[1]:
        file_name += mimetypes.guess_extension(mime_type or DEFAULT_SCAN_MIME) or ''

    old_name = violation.scan_file_name
    old_url = violation.scan_file_url

    stored, url = _store(SCAN_DIR, file_name, content)

    if replace_reason and old_url:
        history = list(violation.scan_file_history or [])
        history.append({
            'date': now.strftime('%Y-%m-%d %H:%M'),
            'reason': replace_reason,
            'oldFileName': old_name,
            'oldUrl': old_url,
            'newFileName': file_name,
            'newUrl': url,
        })
        violation.scan_file_history = history
        logger.info("Scan of violation %s replaced: %s", violation.id, replace_reason)

    violation.scan_file_name = file_name
    violation.scan_file_url = url
    violation.scan_file_path = stored
    violation.save(update_fields=[
        'scan_file_name', 'scan_file_url', 'scan_file_path',
        'scan_file_history', 'updated_at',
    ])

    return {
        'success': True,
        'scanFileUrl': url,
        'scanFileName': file_name,
        'wasReplaced': bool(replace_reason),
    }
