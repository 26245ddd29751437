"""User management service."""

import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction

from apps.accounts.models import UserRole

from .exceptions import DuplicateUserError, InsufficientRoleError

logger = logging.getLogger(__name__)

User = get_user_model()


@transaction.atomic
def create_user(
    *,
    acting_user,
    email: str,
    password: str,
    name: str = '',
    role: str = UserRole.USER,
) -> User:
    """
    Create an account on behalf of an administrator.

    Args:
        acting_user: The user performing the operation (must be an admin)
        email: New account e-mail
        password: New account password
        name: Display name
        role: One of admin, user, viewer (defaults to user)

    Returns:
        Created User instance

    Raises:
        InsufficientRoleError: If acting_user is not an admin
        DuplicateUserError: If the e-mail is already registered
    """
    if acting_user is None or getattr(acting_user, 'role', None) != UserRole.ADMIN:
        raise InsufficientRoleError('無權限')

    email = User.objects.normalize_email(email or '').strip()
    if User.objects.filter(email__iexact=email).exists():
        raise DuplicateUserError('該 Email 已存在')

    user = User.objects.create_user(
        email=email,
        password=password,
        name=name,
        role=role or UserRole.USER,
    )
    logger.info("User %s created by %s", user.email, acting_user.email)
    return user


def ensure_default_admin():
    """
    Seed the default administrator when no account exists yet.

    Returns:
        The created User, or None when accounts already exist.
    """
    if User.objects.exists():
        return None

    with transaction.atomic():
        if User.objects.select_for_update().exists():
            return None
        user = User.objects.create_user(
            email=settings.DEFAULT_ADMIN_EMAIL,
            password=settings.DEFAULT_ADMIN_PASSWORD,
            name=settings.DEFAULT_ADMIN_NAME,
            role=UserRole.ADMIN,
        )

    logger.warning("Seeded default administrator %s; change its password", user.email)
    return user
