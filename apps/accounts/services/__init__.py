"""Services for accounts business logic."""

from .exceptions import (
    AccountsServiceError,
    InvalidCredentialsError,
    InactiveAccountError,
    InvalidGoogleCredentialError,
    UnauthorizedGoogleAccountError,
    DuplicateUserError,
    InsufficientRoleError,
)
from .user_authentication import (
    authenticate_user,
    authenticate_google_credential,
    decode_google_credential,
)
from .user_management import create_user, ensure_default_admin

__all__ = [
    # Exceptions
    'AccountsServiceError',
    'InvalidCredentialsError',
    'InactiveAccountError',
    'InvalidGoogleCredentialError',
    'UnauthorizedGoogleAccountError',
    'DuplicateUserError',
    'InsufficientRoleError',
    # Services
    'authenticate_user',
    'authenticate_google_credential',
    'decode_google_credential',
    'create_user',
    'ensure_default_admin',
]
