"""Domain-specific exceptions for fines services."""
from rest_framework.exceptions import APIException


class FinesServiceError(Exception):
    """Base exception for fines services."""
    pass


class FineValidationError(FinesServiceError):
    """Raised when ticket or line item data is incomplete."""
    pass


class PriceChangeReasonRequiredError(FineValidationError):
    """Raised when a preset unit price is changed without a reason."""
    pass


class TicketAlreadyConvertedError(FinesServiceError):
    """Raised when a ticket has already been turned into a violation."""
    pass


class TicketNotFoundError(APIException):
    """Ticket not found."""
    status_code = 404
    default_detail = 'Ticket not found.'
    default_code = 'ticket_not_found'
