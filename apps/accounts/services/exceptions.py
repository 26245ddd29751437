"""Domain-specific exceptions for accounts services."""


class AccountsServiceError(Exception):
    """Base exception for accounts services."""
    pass


class InvalidCredentialsError(AccountsServiceError):
    """Raised when authentication credentials are invalid."""
    pass


class InactiveAccountError(AccountsServiceError):
    """Raised when account is deactivated."""
    pass


class InvalidGoogleCredentialError(AccountsServiceError):
    """Raised when a Google ID token cannot be decoded or verified."""
    pass


class UnauthorizedGoogleAccountError(AccountsServiceError):
    """Raised when a Google account is not on the user whitelist."""
    pass


class DuplicateUserError(AccountsServiceError):
    """Raised when an e-mail address is already registered."""
    pass


class InsufficientRoleError(AccountsServiceError):
    """Raised when the acting user's role does not allow the operation."""
    pass
