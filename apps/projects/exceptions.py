"""
Domain exceptions for projects app.
"""
from rest_framework.exceptions import APIException


class ProjectServiceError(Exception):
    """Base exception for project service errors."""
    pass


class MissingProjectFieldError(ProjectServiceError):
    """Raised when a required project field is blank."""
    pass


class DuplicateProjectError(ProjectServiceError):
    """Raised when a project with the same name already exists."""
    pass


class ProjectNotFoundError(APIException):
    """Project not found."""
    status_code = 404
    default_detail = 'Project not found.'
    default_code = 'project_not_found'
