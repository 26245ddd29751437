"""
Section roster service.

Sections list the people allowed to issue fines. A person is identified
by name within a host team.
"""

import logging

from django.db import transaction

from ..models import Section
from .exceptions import FineValidationError

logger = logging.getLogger(__name__)


@transaction.atomic
def save_section(*, name: str, host_team: str, title: str = '', email: str = '') -> tuple:
    """
    Create or update the roster entry for ``name`` in ``host_team``.

    Returns:
        tuple: (Section, created)

    Raises:
        FineValidationError: If name or host team is blank
    """
    name = (name or '').strip()
    host_team = (host_team or '').strip()
    if not name or not host_team:
        raise FineValidationError('Name and host team are required')

    section, created = Section.objects.update_or_create(
        name=name,
        host_team=host_team,
        defaults={'title': title or '', 'email': email or ''},
    )
    logger.info("Section %s %s %s", host_team, name, 'added' if created else 'updated')
    return section, created


@transaction.atomic
def delete_section(*, section: Section) -> None:
    """Remove a roster entry; fines keep the issuer name as text."""
    logger.info("Section %s %s deleted", section.host_team, section.name)
    section.delete()
