"""Services for fines business logic."""

from .exceptions import (
    FinesServiceError,
    FineValidationError,
    PriceChangeReasonRequiredError,
    TicketAlreadyConvertedError,
    TicketNotFoundError,
)
from .tickets import (
    check_unit_price,
    apply_project_defaults,
    create_fine_item,
    update_fine_item,
    save_ticket,
    delete_ticket,
    ticket_summaries,
    get_ticket,
    select_lecture_participants,
    convert_ticket_to_violation,
)
from .sections import save_section, delete_section

__all__ = [
    # Exceptions
    'FinesServiceError',
    'FineValidationError',
    'PriceChangeReasonRequiredError',
    'TicketAlreadyConvertedError',
    'TicketNotFoundError',
    # Tickets
    'check_unit_price',
    'apply_project_defaults',
    'create_fine_item',
    'update_fine_item',
    'save_ticket',
    'delete_ticket',
    'ticket_summaries',
    'get_ticket',
    'select_lecture_participants',
    'convert_ticket_to_violation',
    # Sections
    'save_section',
    'delete_section',
]
