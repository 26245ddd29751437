"""
Project management service.

Handles project CRUD with the contractor auto-fill lookup used by
violations and fines.
"""

import logging
from typing import Optional

from django.db import transaction
from django.db.models import Max

from .models import Project
from .exceptions import (
    MissingProjectFieldError,
    DuplicateProjectError,
    ProjectNotFoundError,
)

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ('name', 'coordinator_name', 'contractor')


def next_sequence() -> int:
    """Return the sequence number a new project receives by default."""
    highest = Project.objects.aggregate(highest=Max('sequence'))['highest']
    return (highest or 0) + 1


def _check_required(values: dict):
    missing = [f for f in REQUIRED_FIELDS if not (values.get(f) or '').strip()]
    if missing:
        raise MissingProjectFieldError(
            f"Required project fields missing: {', '.join(missing)}"
        )


@transaction.atomic
def create_project(**fields) -> Project:
    """
    Create a project.

    Args:
        **fields: Project model fields. ``name``, ``coordinator_name`` and
            ``contractor`` are required; ``sequence`` defaults to the next
            free number.

    Returns:
        Created Project instance

    Raises:
        MissingProjectFieldError: If a required field is blank
        DuplicateProjectError: If a project with the same name exists
    """
    _check_required(fields)
    fields['name'] = fields['name'].strip()

    if Project.objects.filter(name=fields['name']).exists():
        raise DuplicateProjectError(f"Project '{fields['name']}' already exists")

    if not fields.get('sequence'):
        fields['sequence'] = next_sequence()

    project = Project.objects.create(**fields)
    logger.info("Project %s created (sequence %s)", project.name, project.sequence)
    return project


@transaction.atomic
def update_project(*, project: Project, **fields) -> Project:
    """
    Update a project.

    Renaming a project rewrites the denormalised project name stored on
    its violations and fine line items so lookups by name keep working.

    Raises:
        MissingProjectFieldError: If a required field is set to blank
        DuplicateProjectError: If the new name belongs to another project
    """
    from apps.violations.models import Violation
    from apps.fines.models import Fine

    merged = {f: fields.get(f, getattr(project, f)) for f in REQUIRED_FIELDS}
    _check_required(merged)

    old_name = project.name
    new_name = merged['name'].strip()
    if new_name != old_name and Project.objects.filter(name=new_name).exclude(pk=project.pk).exists():
        raise DuplicateProjectError(f"Project '{new_name}' already exists")

    fields['name'] = new_name
    for attr, value in fields.items():
        setattr(project, attr, value)
    project.save()

    if new_name != old_name:
        Violation.objects.filter(project=project).update(project_name=new_name)
        Fine.objects.filter(project=project).update(project_name=new_name)
        logger.info("Project renamed from %s to %s", old_name, new_name)

    return project


@transaction.atomic
def delete_project(*, project: Project) -> None:
    """Delete a project; linked records keep the project name as text."""
    logger.info("Project %s deleted", project.name)
    project.delete()


def get_project_by_name(name: str) -> Optional[Project]:
    """Return the project with this exact name, or None."""
    if not name:
        return None
    return Project.objects.filter(name=name.strip()).first()


def get_project_by_id(project_id) -> Project:
    try:
        return Project.objects.get(pk=project_id)
    except (Project.DoesNotExist, ValueError):
        raise ProjectNotFoundError()


def contractor_for_project(name: str) -> str:
    """Contractor of the named project, or an empty string when unknown."""
    project = get_project_by_name(name)
    return project.contractor if project else ''
