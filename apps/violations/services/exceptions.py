"""Domain-specific exceptions for violations services."""
from rest_framework.exceptions import APIException


class ViolationsServiceError(Exception):
    """Base exception for violations services."""
    pass


class ViolationValidationError(ViolationsServiceError):
    """Raised when violation data is incomplete or inconsistent."""
    pass


class InvalidStatusError(ViolationsServiceError):
    """Raised when an unknown status is requested."""
    pass


class FileUploadError(ViolationsServiceError):
    """Raised when an uploaded file cannot be decoded or stored."""
    pass


class DocumentGenerationError(ViolationsServiceError):
    """Raised when the sign-off document cannot be produced."""
    pass


class ViolationNotFoundError(APIException):
    """Violation not found."""
    status_code = 404
    default_detail = 'Violation not found.'
    default_code = 'violation_not_found'
