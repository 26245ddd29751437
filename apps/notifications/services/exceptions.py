"""Domain-specific exceptions for notification services."""


class NotificationsServiceError(Exception):
    """Base exception for notification services."""
    pass


class InvalidRecipientError(NotificationsServiceError):
    """Raised when a message has no usable recipient."""
    pass


class EmailDeliveryError(NotificationsServiceError):
    """Raised when the mail backend rejects a message."""
    pass
