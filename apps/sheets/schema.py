"""
Table schemas for the spreadsheet store.

A schema converts between three shapes of the same row:

- model instances,
- records: dicts with camelCase keys and JSON-friendly values,
- sheet rows: lists of cell values in header order.
"""

import json
import re
import uuid
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from apps.accounts.models import User
from apps.fines.models import Fine, Section
from apps.notifications.models import NotificationLog
from apps.projects.models import Project
from apps.violations.models import Violation

from .header_map import key_for_header

# uuid5 namespace for ids of rows written before ids were UUIDs
LEGACY_ID_NAMESPACE = uuid.UUID('6f1c9a52-3d4e-5b8a-9c0d-2e7f4a1b6c3d')

NAME_SEPARATORS = re.compile(r'[,，、;\n]+')
TRUE_VALUES = {'true', '1', 'yes', 'y', '是', 'v', '✓'}


# =============================================================================
# Value converters
# =============================================================================

def is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def to_uuid(value, table: str):
    """
    UUID of a row id.

    Legacy ids that are not UUIDs map to a stable uuid5, so the same sheet
    row always lands on the same record. Blank ids return None.
    """
    if is_blank(value):
        return None
    if isinstance(value, uuid.UUID):
        return value
    text = str(value).strip()
    try:
        return uuid.UUID(text)
    except ValueError:
        return uuid.uuid5(LEGACY_ID_NAMESPACE, f"{table}:{text}")


def to_text(value) -> str:
    if value is None:
        return ''
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def to_int(value) -> int:
    if is_blank(value):
        return 0
    try:
        return int(Decimal(str(value).replace(',', '').strip()))
    except (InvalidOperation, ValueError):
        return 0


def to_decimal(value) -> Decimal:
    if is_blank(value):
        return Decimal('0')
    try:
        return Decimal(str(value).replace(',', '').strip())
    except InvalidOperation:
        return Decimal('0')


def to_date(value):
    """Parse ``YYYY-MM-DD``, ``YYYY/MM/DD``, ISO timestamps or date cells."""
    if is_blank(value):
        return None
    if isinstance(value, datetime):
        return timezone.localtime(value).date() if timezone.is_aware(value) else value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip().replace('/', '-')
    if 'T' in text:
        # ISO timestamps are converted to the local calendar day
        try:
            stamp = parse_datetime(text.replace('Z', '+00:00'))
        except ValueError:
            stamp = None
        if stamp is not None:
            return to_date(stamp)
    try:
        return parse_date(text.split('T')[0].split(' ')[0])
    except ValueError:
        return None


def to_datetime(value):
    if is_blank(value):
        return None
    if isinstance(value, datetime):
        stamp = value
    elif isinstance(value, date):
        stamp = datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip().replace('/', '-').replace('Z', '+00:00')
        try:
            stamp = parse_datetime(text)
        except ValueError:
            stamp = None
        if stamp is None:
            day = to_date(text)
            if day is None:
                return None
            stamp = datetime(day.year, day.month, day.day)
    if timezone.is_naive(stamp):
        stamp = timezone.make_aware(stamp)
    return stamp


def to_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or '').strip().lower() in TRUE_VALUES


def to_json_list(value) -> list:
    if is_blank(value):
        return []
    if isinstance(value, list):
        return value
    try:
        parsed = json.loads(value)
    except (TypeError, ValueError):
        return []
    return parsed if isinstance(parsed, list) else []


def to_names(value) -> list:
    """List of names from a list, a JSON array or a separated string."""
    if is_blank(value):
        return []
    if isinstance(value, list):
        names = value
    else:
        text = str(value).strip()
        names = to_json_list(text) if text.startswith('[') else NAME_SEPARATORS.split(text)
    return [str(name).strip() for name in names if str(name).strip()]


PARSERS = {
    'text': to_text,
    'int': to_int,
    'decimal': to_decimal,
    'date': to_date,
    'datetime': to_datetime,
    'bool': to_bool,
    'json': to_json_list,
    'names': to_names,
}


def export_value(value, kind: str):
    """Model value to its JSON-friendly record value."""
    if value is None:
        return '' if kind in ('date', 'datetime', 'uuid', 'fk') else None
    if kind == 'date':
        return value.isoformat()
    if kind == 'datetime':
        return timezone.localtime(value).strftime('%Y-%m-%d %H:%M:%S')
    if kind == 'decimal':
        return int(value) if value == value.to_integral_value() else float(value)
    if kind in ('uuid', 'fk'):
        return str(value)
    return value


def cell_value(value, kind: str):
    """Record value to a spreadsheet cell."""
    if value is None:
        return ''
    if kind == 'json':
        return json.dumps(value, ensure_ascii=False) if value else ''
    if kind == 'names':
        return '、'.join(value)
    return value


# =============================================================================
# Table schemas
# =============================================================================

class Column:
    """One record key mapped to a model attribute."""

    def __init__(self, key, attr, kind='text'):
        self.key = key
        self.attr = attr
        self.kind = kind


class TableSchema:
    """
    Conversions for one sheet.

    Attributes:
        name: Sheet name (key of HEADER_MAP)
        model: Django model stored in the sheet
        columns: Column definitions in header order
        id_key: Record key identifying a row
    """

    def __init__(self, name, model, columns, id_key='id', snapshot_key=None):
        self.name = name
        self.model = model
        self.columns = columns
        self.id_key = id_key
        self.snapshot_key = snapshot_key

    def to_record(self, instance) -> dict:
        record = {}
        for column in self.columns:
            if column.attr is None:
                record[column.key] = ''
                continue
            record[column.key] = export_value(getattr(instance, column.attr), column.kind)
        return record

    def from_record(self, record: dict) -> dict:
        """Model field values for the keys present in ``record``."""
        values = {}
        for column in self.columns:
            if column.attr is None or column.key not in record:
                continue
            raw = record[column.key]
            if column.kind in ('uuid', 'fk'):
                table = self.name if column.kind == 'uuid' else 'Violations'
                values[column.attr] = to_uuid(raw, table)
            else:
                values[column.attr] = PARSERS[column.kind](raw)
        return values

    def to_row(self, record: dict) -> list:
        return [cell_value(record.get(column.key), column.kind) for column in self.columns]

    def rows_to_records(self, header_row, rows) -> list:
        """
        Records from raw sheet rows.

        Columns are matched by header in either language. Blank rows are
        skipped.
        """
        keys = [key_for_header(self.name, header) for header in header_row]
        records = []
        for row in rows:
            cells = list(row)
            if all(is_blank(cell) for cell in cells):
                continue
            record = {}
            for index, key in enumerate(keys):
                if key and index < len(cells):
                    record[key] = cells[index]
            records.append(record)
        return records


PROJECTS = TableSchema('Projects', Project, [
    Column('id', 'id', 'uuid'),
    Column('sequence', 'sequence', 'int'),
    Column('abbreviation', 'abbreviation'),
    Column('name', 'name'),
    Column('contractNumber', 'contract_number'),
    Column('contractor', 'contractor'),
    Column('coordinatorName', 'coordinator_name'),
    Column('coordinatorEmail', 'coordinator_email'),
    Column('hostTeam', 'host_team'),
    Column('managerName', 'manager_name'),
    Column('managerEmail', 'manager_email'),
], snapshot_key='projects')

SECTIONS = TableSchema('Sections', Section, [
    Column('id', 'id', 'uuid'),
    Column('name', 'name'),
    Column('hostTeam', 'host_team'),
    Column('title', 'title'),
    Column('email', 'email'),
], snapshot_key='sections')

VIOLATIONS = TableSchema('Violations', Violation, [
    Column('id', 'id', 'uuid'),
    Column('contractorName', 'contractor_name'),
    Column('projectName', 'project_name'),
    Column('violationDate', 'violation_date', 'date'),
    Column('lectureDeadline', 'lecture_deadline', 'date'),
    Column('description', 'description'),
    Column('status', 'status'),
    Column('fileName', 'file_name'),
    Column('fileUrl', 'file_url'),
    Column('emailCount', 'email_count', 'int'),
    Column('documentUrl', 'document_url'),
    Column('scanFileName', 'scan_file_name'),
    Column('scanFileUrl', 'scan_file_url'),
    Column('scanFilePath', 'scan_file_path'),
    Column('firstNotifyDate', 'first_notify_date', 'date'),
    Column('secondNotifyDate', 'second_notify_date', 'date'),
    Column('notifyStatus', 'notify_status'),
    Column('managerEmail', 'manager_email'),
    Column('scanFileHistory', 'scan_file_history', 'json'),
    Column('fineAmount', 'fine_amount', 'decimal'),
    Column('isMajorViolation', 'is_major_violation', 'bool'),
    Column('participants', 'participants', 'names'),
    Column('sourceTicketNumber', 'source_ticket_number'),
    Column('completionDate', 'completion_date', 'date'),
], snapshot_key='violations')

FINES = TableSchema('Fines', Fine, [
    Column('id', 'id', 'uuid'),
    Column('ticketNumber', 'ticket_number'),
    Column('issueDate', 'issue_date', 'date'),
    Column('projectName', 'project_name'),
    Column('contractor', 'contractor'),
    Column('hostTeam', 'host_team'),
    Column('violationItem', 'violation_item'),
    Column('unitPrice', 'unit_price', 'decimal'),
    Column('quantity', 'quantity', 'int'),
    Column('subtotal', 'subtotal', 'decimal'),
    Column('priceChangeReason', 'price_change_reason'),
    Column('relationship', 'relationship'),
    Column('violatorName', 'violator_name'),
    Column('issuerName', 'issuer_name'),
    Column('note', 'note'),
    Column('violationId', 'violation_id', 'fk'),
], snapshot_key='fines')

NOTIFICATION_LOGS = TableSchema('NotificationLogs', NotificationLog, [
    Column('id', 'id', 'uuid'),
    Column('violationId', 'violation_id', 'fk'),
    Column('notificationType', 'notification_type'),
    Column('recipientEmail', 'recipient_email'),
    Column('recipientRole', 'recipient_role'),
    Column('sentAt', 'sent_at', 'datetime'),
    Column('status', 'status'),
])

# Passwords are write-only: exported as blank, hashed on import
USERS = TableSchema('Users', User, [
    Column('email', 'email'),
    Column('password', None),
    Column('name', 'name'),
    Column('role', 'role'),
], id_key='email')

SCHEMAS = {
    schema.name: schema
    for schema in (PROJECTS, SECTIONS, VIOLATIONS, FINES, NOTIFICATION_LOGS, USERS)
}


def get_schema(table: str) -> TableSchema:
    from .exceptions import UnknownTableError

    try:
        return SCHEMAS[table]
    except KeyError:
        raise UnknownTableError(f"Unknown table '{table}'")
