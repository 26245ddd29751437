"""
Violation management service.

Creates and updates violations, applying the contractor and lecture
deadline auto-fill rules.
"""

import logging
from datetime import date
from typing import Optional

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from apps.projects.services import get_project_by_name
from apps.violations.dates import lecture_deadline_for
from apps.violations.models import Violation, ViolationStatus

from .exceptions import (
    ViolationValidationError,
    InvalidStatusError,
    ViolationNotFoundError,
)

logger = logging.getLogger(__name__)


def get_violation_by_id(violation_id) -> Violation:
    """
    Fetch a violation by primary key.

    Raises:
        ViolationNotFoundError: If the id is unknown or malformed
    """
    try:
        return Violation.objects.select_related('project').get(pk=violation_id)
    except (Violation.DoesNotExist, ValueError, TypeError, ValidationError):
        raise ViolationNotFoundError()


def _apply_completion(violation: Violation, status: str, today: Optional[date] = None):
    if status == ViolationStatus.COMPLETED:
        if not violation.completion_date:
            violation.completion_date = today or timezone.localdate()
    else:
        violation.completion_date = None


@transaction.atomic
def create_violation(
    *,
    project_name: str,
    violation_date: date,
    contractor_name: str = '',
    lecture_deadline: Optional[date] = None,
    description: str = '',
    status: str = ViolationStatus.PENDING,
    **extra
) -> Violation:
    """
    Record a new violation.

    Auto-fill rules:
    1. ``contractor_name`` defaults to the contractor of the named project
    2. ``lecture_deadline`` defaults to ``violation_date`` + LECTURE_DEADLINE_DAYS

    Args:
        project_name: Name of the project the violation belongs to
        violation_date: Date the violation was observed
        contractor_name: Contractor; filled from the project when blank
        lecture_deadline: Safety lecture deadline; computed when omitted
        description: What was violated
        status: Initial status (PENDING by default)
        **extra: Any other Violation field (fine_amount, participants, ...)

    Returns:
        Created Violation instance

    Raises:
        ViolationValidationError: If project or contractor cannot be determined
    """
    project_name = (project_name or '').strip()
    if not project_name:
        raise ViolationValidationError('Project name is required')
    if not violation_date:
        raise ViolationValidationError('Violation date is required')

    project = get_project_by_name(project_name)
    contractor_name = (contractor_name or '').strip()
    if not contractor_name and project:
        contractor_name = project.contractor
    if not contractor_name:
        raise ViolationValidationError('Contractor name is required')

    if status not in ViolationStatus.values:
        raise InvalidStatusError(f"Unknown status '{status}'")

    violation = Violation(
        project=project,
        project_name=project_name,
        contractor_name=contractor_name,
        violation_date=violation_date,
        lecture_deadline=lecture_deadline or lecture_deadline_for(violation_date),
        description=description or '',
        status=status,
        **extra
    )
    if project and not violation.manager_email:
        violation.manager_email = project.manager_email
    _apply_completion(violation, status)
    violation.save()

    logger.info(
        "Violation %s recorded for %s (deadline %s)",
        violation.id, contractor_name, violation.lecture_deadline
    )
    return violation


@transaction.atomic
def update_violation(*, violation: Violation, **fields) -> Violation:
    """
    Update a violation.

    Changing the project re-links the project FK and, unless a contractor
    is given explicitly, refreshes the contractor from the new project.
    Changing only the violation date moves the deadline along with it.
    """
    if 'project_name' in fields:
        project_name = (fields['project_name'] or '').strip()
        if not project_name:
            raise ViolationValidationError('Project name is required')
        fields['project_name'] = project_name
        if project_name != violation.project_name:
            project = get_project_by_name(project_name)
            violation.project = project
            if not fields.get('contractor_name') and project:
                fields['contractor_name'] = project.contractor

    if 'violation_date' in fields and 'lecture_deadline' not in fields:
        if fields['violation_date'] != violation.violation_date:
            fields['lecture_deadline'] = lecture_deadline_for(fields['violation_date'])

    status = fields.pop('status', None)

    for attr, value in fields.items():
        setattr(violation, attr, value)

    if not violation.contractor_name:
        raise ViolationValidationError('Contractor name is required')

    if status is not None:
        if status not in ViolationStatus.values:
            raise InvalidStatusError(f"Unknown status '{status}'")
        violation.status = status
        _apply_completion(violation, status)

    violation.save()
    return violation


@transaction.atomic
def change_status(*, violation: Violation, status: str, today: Optional[date] = None) -> Violation:
    """
    Move a violation to another status.

    Entering COMPLETED stamps the completion date; leaving it clears the date.

    Raises:
        InvalidStatusError: If status is not a ViolationStatus value
    """
    if status not in ViolationStatus.values:
        raise InvalidStatusError(f"Unknown status '{status}'")

    previous = violation.status
    violation.status = status
    _apply_completion(violation, status, today)
    violation.save(update_fields=['status', 'completion_date', 'updated_at'])

    logger.info("Violation %s status %s -> %s", violation.id, previous, status)
    return violation


@transaction.atomic
def delete_violation(*, violation: Violation) -> None:
    logger.info("Violation %s deleted", violation.id)
    violation.delete()


def increment_email_count(violation: Violation) -> int:
    """Bump the sent-mail counter atomically and return the new value."""
    Violation.objects.filter(pk=violation.pk).update(email_count=F('email_count') + 1)
    violation.refresh_from_db(fields=['email_count'])
    return violation.email_count
