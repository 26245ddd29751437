"""Services for violations business logic."""

from .exceptions import (
    ViolationsServiceError,
    ViolationValidationError,
    InvalidStatusError,
    FileUploadError,
    DocumentGenerationError,
    ViolationNotFoundError,
)
from .violation_management import (
    get_violation_by_id,
    create_violation,
    update_violation,
    change_status,
    delete_violation,
    increment_email_count,
)
from .attachments import (
    decode_base64_file,
    ticket_file_name,
    store_ticket_file,
    upload_ticket_file,
    upload_scan_file,
)
from .documents import generate_document

__all__ = [
    # Exceptions
    'ViolationsServiceError',
    'ViolationValidationError',
    'InvalidStatusError',
    'FileUploadError',
    'DocumentGenerationError',
    'ViolationNotFoundError',
    # Services
    'get_violation_by_id',
    'create_violation',
    'update_violation',
    'change_status',
    'delete_violation',
    'increment_email_count',
    'decode_base64_file',
    'ticket_file_name',
    'store_ticket_file',
    'upload_ticket_file',
    'upload_scan_file',
    'generate_document',
]
