"""Exceptions for the action endpoint."""
from rest_framework.exceptions import APIException


class RpcServiceError(Exception):
    """Base exception for action dispatch errors."""
    pass


class InvalidPayloadError(RpcServiceError):
    """Raised when an action's parameters do not validate."""
    pass


class AuthenticationRequiredError(APIException):
    """Action called without a valid access token."""
    status_code = 401
    default_detail = '請先登入'
    default_code = 'authentication_required'


class ActionForbiddenError(APIException):
    """Action not allowed for the caller's role."""
    status_code = 403
    default_detail = '無權限'
    default_code = 'action_forbidden'
