"""
Spreadsheet store service.

Whole tables are exchanged as lists of camelCase records. Replacing a
table upserts every record by id and removes the rows that are no longer
listed, all in one transaction.
"""

import logging

from django.db import IntegrityError, transaction

from apps.accounts.models import User, UserRole
from apps.fines.models import Section
from apps.projects.services import get_project_by_name
from apps.violations.dates import lecture_deadline_for
from apps.violations.models import Violation, ViolationStatus

from .exceptions import SheetImportError
from .schema import SCHEMAS, USERS, get_schema, to_text

logger = logging.getLogger(__name__)

# Import order keeps referenced rows (projects, sections, violations) first
TABLE_ORDER = ['Projects', 'Sections', 'Violations', 'Fines', 'NotificationLogs', 'Users']


def _prepare_project(values):
    return bool(values.get('name'))


def _prepare_section(values):
    return bool(values.get('name')) and bool(values.get('host_team'))


def _prepare_violation(values):
    if not values.get('violation_date') or not values.get('project_name'):
        return False
    project = get_project_by_name(values['project_name'])
    values['project'] = project
    if project and not values.get('contractor_name'):
        values['contractor_name'] = project.contractor
    if not values.get('lecture_deadline'):
        values['lecture_deadline'] = lecture_deadline_for(values['violation_date'])
    if values.get('status') not in ViolationStatus.values:
        values['status'] = ViolationStatus.PENDING
    return True


def _prepare_fine(values):
    if not values.get('ticket_number') or not values.get('issue_date') or not values.get('violation_item'):
        return False
    values['project'] = get_project_by_name(values.get('project_name') or '')
    values['issuer'] = Section.objects.filter(
        name=values.get('issuer_name') or '',
        host_team=values.get('host_team') or '',
    ).first()
    if values.get('quantity', 1) < 1:
        values['quantity'] = 1
    values.pop('subtotal', None)
    return True


def _prepare_log(values):
    return bool(values.get('recipient_email')) and bool(values.get('notification_type'))


PREPARERS = {
    'Projects': _prepare_project,
    'Sections': _prepare_section,
    'Violations': _prepare_violation,
    'Fines': _prepare_fine,
    'NotificationLogs': _prepare_log,
}

# Link columns pointing at violations that may not exist (yet)
VIOLATION_LINKS = {'Fines', 'NotificationLogs'}


def _upsert_users(records):
    """Users are keyed by e-mail and never removed by a sync."""
    counts = {'created': 0, 'updated': 0, 'deleted': 0, 'skipped': 0}
    for record in records:
        values = USERS.from_record(record)
        email = (values.get('email') or '').strip().lower()
        if not email:
            counts['skipped'] += 1
            continue

        role = values.get('role')
        password = to_text(record.get('password'))
        user = User.objects.filter(email__iexact=email).first()
        if user is None:
            user = User(email=email)
            counts['created'] += 1
            if not password:
                user.set_unusable_password()
        else:
            counts['updated'] += 1

        if 'name' in values:
            user.name = values['name']
        if role:
            user.role = role if role in UserRole.values else UserRole.USER
        if password:
            user.set_password(password)
        user.save()
    return counts


@transaction.atomic
def replace_records(table: str, records) -> dict:
    """
    Replace the rows of a table with ``records``.

    Records are camelCase dicts. Rows are matched by id; non-UUID ids are
    mapped to stable UUIDs and records without an id get a new one. Rows
    missing from ``records`` are deleted, except for users, which are only
    ever added or updated. Passwords given for users are hashed. Records
    that fail validation are skipped and their stored rows stay untouched.

    Args:
        table: Sheet name (Projects, Sections, Violations, Fines,
            NotificationLogs or Users)
        records: Iterable of record dicts

    Returns:
        dict: ``table`` plus ``created``, ``updated``, ``deleted`` and
        ``skipped`` counts

    Raises:
        UnknownTableError: If the table does not exist
        SheetImportError: If the records break a uniqueness rule
    """
    schema = get_schema(table)
    records = list(records or [])

    if schema is USERS:
        counts = _upsert_users(records)
        logger.info("Users synced: %s", counts)
        return {'table': table, **counts}

    model = schema.model
    prepare = PREPARERS.get(table)
    counts = {'created': 0, 'updated': 0, 'deleted': 0, 'skipped': 0}

    prepared = []
    keep_ids = set()
    for record in records:
        values = schema.from_record(record)
        if values.get('id'):
            # Skipped rows are left as stored, never deleted
            keep_ids.add(values['id'])
        if prepare is not None and not prepare(values):
            counts['skipped'] += 1
            continue
        prepared.append(values)

    _, deleted = model.objects.exclude(pk__in=keep_ids).delete()
    counts['deleted'] = deleted.get(model._meta.label, 0)

    known_violations = None
    if table in VIOLATION_LINKS:
        known_violations = set(Violation.objects.values_list('id', flat=True))

    try:
        for values in prepared:
            row_id = values.pop('id', None)
            if known_violations is not None and values.get('violation_id') not in known_violations:
                values['violation_id'] = None

            instance = model.objects.filter(pk=row_id).first() if row_id else None
            if instance is None:
                instance = model(**values) if row_id is None else model(id=row_id, **values)
                counts['created'] += 1
            else:
                for attr, value in values.items():
                    setattr(instance, attr, value)
                counts['updated'] += 1
            instance.save()
    except IntegrityError as e:
        logger.exception("Replacing %s failed", table)
        raise SheetImportError(f"{table}: {e}")

    logger.info("%s replaced: %s", table, counts)
    return {'table': table, **counts}


def export_records(table: str) -> list:
    """Every row of a table as records, in model order."""
    schema = get_schema(table)
    return [schema.to_record(instance) for instance in schema.model.objects.all()]


def snapshot() -> dict:
    """
    Current projects, violations, fines and sections as records.

    This is the payload every remote-procedure call answers with.
    """
    return {
        schema.snapshot_key: export_records(schema.name)
        for schema in SCHEMAS.values()
        if schema.snapshot_key
    }
