"""
Fine ticket service.

Fine line items are grouped into tickets by ticket number. A ticket is
saved as a whole: its header is copied onto every item and the previous
items are replaced in one transaction. A ticket whose total reaches
MAJOR_FINE_THRESHOLD requires a safety lecture and can be converted into
a violation.
"""

import logging
from collections import OrderedDict
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional

from django.conf import settings
from django.db import transaction
from django.db.models import Count, Max, Sum

from apps.projects.services import get_project_by_name
from apps.violations.services import create_violation

from ..models import Fine, FINE_ITEM_PRESETS
from .exceptions import (
    FineValidationError,
    PriceChangeReasonRequiredError,
    TicketAlreadyConvertedError,
    TicketNotFoundError,
)

logger = logging.getLogger(__name__)

HEADER_FIELDS = ('issue_date', 'project_name', 'contractor', 'host_team', 'issuer', 'issuer_name')
ITEM_FIELDS = (
    'violation_item',
    'unit_price',
    'quantity',
    'price_change_reason',
    'relationship',
    'violator_name',
    'note',
)


def _to_decimal(value, field: str) -> Decimal:
    try:
        return Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise FineValidationError(f"Invalid {field}: {value!r}")


def check_unit_price(violation_item: str, unit_price, price_change_reason: str = '') -> None:
    """
    Require a reason when a known item is fined at a non-standard price.

    Raises:
        PriceChangeReasonRequiredError: If the price differs from the preset
            and no reason is given
    """
    preset = FINE_ITEM_PRESETS.get((violation_item or '').strip())
    if preset is None:
        return
    if _to_decimal(unit_price, 'unit_price') != preset and not (price_change_reason or '').strip():
        raise PriceChangeReasonRequiredError(
            f"單價與預設 ({preset}) 不同，請填寫單價修改原因：{violation_item}"
        )


def apply_project_defaults(fields: dict) -> dict:
    """
    Link the named project and fill contractor and host team from it.

    Explicit contractor or host team values are kept.
    """
    project = get_project_by_name(fields.get('project_name') or '')
    fields['project'] = project
    if project:
        fields['project_name'] = project.name
        if not fields.get('contractor'):
            fields['contractor'] = project.contractor
        if not fields.get('host_team'):
            fields['host_team'] = project.host_team
    return fields


def _apply_issuer_defaults(fields: dict) -> dict:
    issuer = fields.get('issuer')
    if issuer is not None and not fields.get('issuer_name'):
        fields['issuer_name'] = issuer.name
    return fields


def _validate_item(item: dict, index: int) -> dict:
    violation_item = (item.get('violation_item') or '').strip()
    if not violation_item:
        raise FineValidationError(f"Item {index}: violation item is required")

    unit_price = _to_decimal(item.get('unit_price', 0), 'unit_price')
    if unit_price < 0:
        raise FineValidationError(f"Item {index}: unit price cannot be negative")

    try:
        quantity = int(item.get('quantity') or 1)
    except (TypeError, ValueError):
        raise FineValidationError(f"Item {index}: invalid quantity")
    if quantity < 1:
        raise FineValidationError(f"Item {index}: quantity must be at least 1")

    check_unit_price(violation_item, unit_price, item.get('price_change_reason', ''))

    cleaned = {f: item.get(f) or '' for f in ITEM_FIELDS}
    cleaned.update(violation_item=violation_item, unit_price=unit_price, quantity=quantity)
    return cleaned


@transaction.atomic
def create_fine_item(**fields) -> Fine:
    """Create a single line item, applying project defaults and the price rule."""
    if not (fields.get('ticket_number') or '').strip():
        raise FineValidationError('Ticket number is required')
    check_unit_price(
        fields.get('violation_item'),
        fields.get('unit_price', 0),
        fields.get('price_change_reason', ''),
    )
    apply_project_defaults(fields)
    _apply_issuer_defaults(fields)
    return Fine.objects.create(**fields)


@transaction.atomic
def update_fine_item(*, fine: Fine, **fields) -> Fine:
    for attr, value in fields.items():
        setattr(fine, attr, value)
    check_unit_price(fine.violation_item, fine.unit_price, fine.price_change_reason)
    if 'project_name' in fields:
        values = apply_project_defaults({
            'project_name': fine.project_name,
            'contractor': fields.get('contractor', ''),
            'host_team': fields.get('host_team', ''),
        })
        for attr, value in values.items():
            setattr(fine, attr, value)
    fine.save()
    return fine


@transaction.atomic
def save_ticket(*, ticket_number: str, header: dict, items: Iterable[dict]) -> list:
    """
    Replace every line item of a ticket.

    The header (issue date, project, contractor, host team, issuer) is
    written onto each item. A ticket that was already converted keeps its
    link to the violation.

    Args:
        ticket_number: Ticket the items belong to
        header: Shared ticket fields
        items: Line items (violation_item, unit_price, quantity, ...)

    Returns:
        List of the saved Fine instances, in input order

    Raises:
        FineValidationError: If the header or an item is invalid
        PriceChangeReasonRequiredError: If a preset price changes without a reason
    """
    ticket_number = (ticket_number or '').strip()
    if not ticket_number:
        raise FineValidationError('Ticket number is required')

    items = list(items or [])
    if not items:
        raise FineValidationError('A ticket needs at least one item')

    shared = {f: header.get(f) for f in HEADER_FIELDS if header.get(f) is not None}
    if not shared.get('issue_date'):
        raise FineValidationError('Issue date is required')
    apply_project_defaults(shared)
    _apply_issuer_defaults(shared)

    cleaned = [_validate_item(item, index) for index, item in enumerate(items, start=1)]

    existing = Fine.objects.select_for_update().filter(ticket_number=ticket_number)
    linked = existing.exclude(violation__isnull=True).values_list('violation_id', flat=True).first()
    removed, _ = existing.delete()

    saved = []
    for item in cleaned:
        fine = Fine(ticket_number=ticket_number, violation_id=linked, **shared, **item)
        fine.save()
        saved.append(fine)

    logger.info(
        "Ticket %s saved with %d items (replaced %d)",
        ticket_number, len(saved), removed
    )
    return saved


@transaction.atomic
def delete_ticket(*, ticket_number: str) -> int:
    """
    Delete every line item of a ticket.

    Raises:
        TicketNotFoundError: If no item has this ticket number
    """
    deleted, _ = Fine.objects.filter(ticket_number=ticket_number).delete()
    if not deleted:
        raise TicketNotFoundError()
    logger.info("Ticket %s deleted (%d items)", ticket_number, deleted)
    return deleted


def ticket_summaries(queryset=None) -> list:
    """
    One summary per ticket number, newest issue date first.

    Each summary carries ``total``, ``item_count``, ``requires_lecture``
    (total >= MAJOR_FINE_THRESHOLD) and ``converted``.
    """
    queryset = Fine.objects.all() if queryset is None else queryset
    threshold = Decimal(settings.MAJOR_FINE_THRESHOLD)

    rows = (
        queryset
        .values('ticket_number')
        .annotate(
            ticket_issue_date=Max('issue_date'),
            ticket_project_name=Max('project_name'),
            ticket_contractor=Max('contractor'),
            ticket_host_team=Max('host_team'),
            ticket_issuer_name=Max('issuer_name'),
            total=Sum('subtotal'),
            item_count=Count('id'),
            converted_items=Count('violation'),
        )
        .order_by('-ticket_issue_date', 'ticket_number')
    )

    summaries = []
    for row in rows:
        total = row['total'] or Decimal('0')
        summaries.append({
            'ticket_number': row['ticket_number'],
            'issue_date': row['ticket_issue_date'],
            'project_name': row['ticket_project_name'],
            'contractor': row['ticket_contractor'],
            'host_team': row['ticket_host_team'],
            'issuer_name': row['ticket_issuer_name'],
            'total': total,
            'item_count': row['item_count'],
            'requires_lecture': total >= threshold,
            'converted': row['converted_items'] > 0,
        })
    return summaries


def get_ticket(ticket_number: str) -> dict:
    """
    Summary of a single ticket with its line items.

    Raises:
        TicketNotFoundError: If no item has this ticket number
    """
    items = list(
        Fine.objects.filter(ticket_number=ticket_number)
        .select_related('issuer')
        .order_by('created_at')
    )
    if not items:
        raise TicketNotFoundError()

    summary = ticket_summaries(Fine.objects.filter(ticket_number=ticket_number))[0]
    summary['violation'] = next((i.violation_id for i in items if i.violation_id), None)
    summary['items'] = items
    return summary


def select_lecture_participants(items: Iterable, threshold=None) -> list:
    """
    Pick who has to attend the safety lecture for a ticket.

    Subtotals are summed per violator; everyone whose sum reaches the
    threshold (LECTURE_PARTICIPANT_THRESHOLD by default) attends. When no
    one reaches it, every named violator attends. Names keep their first
    appearance order and appear once.

    Args:
        items: Fine instances or dicts with ``violator_name`` and ``subtotal``
        threshold: Override of the per-person amount
    """
    threshold = Decimal(settings.LECTURE_PARTICIPANT_THRESHOLD if threshold is None else threshold)

    amounts = OrderedDict()
    for item in items:
        if isinstance(item, dict):
            name, subtotal = item.get('violator_name'), item.get('subtotal')
        else:
            name, subtotal = item.violator_name, item.subtotal
        name = (name or '').strip()
        if not name:
            continue
        amounts[name] = amounts.get(name, Decimal('0')) + Decimal(str(subtotal or 0))

    selected = [name for name, amount in amounts.items() if amount >= threshold]
    return selected or list(amounts)


@transaction.atomic
def convert_ticket_to_violation(
    *,
    ticket_number: str,
    description: Optional[str] = None,
    violation_date=None,
):
    """
    Create a violation from a fine ticket.

    The violation carries the ticket total as ``fine_amount``, is flagged
    major when the total reaches MAJOR_FINE_THRESHOLD and lists the
    selected lecture participants. Its deadline follows the violation
    auto-fill rule. Every item of the ticket is linked to it.

    Returns:
        The created Violation

    Raises:
        TicketNotFoundError: If the ticket has no items
        TicketAlreadyConvertedError: If the ticket was converted before
        ViolationsServiceError: If the violation cannot be recorded
    """
    items = list(
        Fine.objects.select_for_update()
        .filter(ticket_number=ticket_number)
        .order_by('created_at')
    )
    if not items:
        raise TicketNotFoundError()
    if any(item.violation_id for item in items):
        raise TicketAlreadyConvertedError(f"Ticket {ticket_number} was already converted")

    first = items[0]
    total = sum((item.subtotal for item in items), Decimal('0'))
    texts = list(OrderedDict.fromkeys(item.violation_item for item in items if item.violation_item))

    violation = create_violation(
        project_name=first.project_name,
        violation_date=violation_date or first.issue_date,
        contractor_name=first.contractor,
        description=description or '、'.join(texts),
        fine_amount=total,
        is_major_violation=total >= Decimal(settings.MAJOR_FINE_THRESHOLD),
        participants=select_lecture_participants(items),
        source_ticket_number=ticket_number,
    )
    Fine.objects.filter(ticket_number=ticket_number).update(violation=violation)

    logger.info("Ticket %s converted to violation %s (total %s)", ticket_number, violation.id, total)
    return violation
