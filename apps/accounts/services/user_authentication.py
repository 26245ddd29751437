"""User authentication service."""

import logging

import jwt
from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from .exceptions import (
    InvalidCredentialsError,
    InactiveAccountError,
    InvalidGoogleCredentialError,
    UnauthorizedGoogleAccountError,
)

logger = logging.getLogger(__name__)

User = get_user_model()

INVALID_CREDENTIALS_MESSAGE = '帳號或密碼錯誤'


@transaction.atomic
def authenticate_user(*, username: str, password: str) -> User:
    """
    Authenticate user with e-mail or name plus password.

    Uses select_for_update() to prevent race conditions when updating last_login.

    Args:
        username: The account e-mail or the account name
        password: User's password

    Returns:
        Authenticated User instance

    Raises:
        InvalidCredentialsError: If no account matches or the password is wrong
        InactiveAccountError: If account is deactivated
    """
    username = (username or '').strip()
    if not username:
        raise InvalidCredentialsError(INVALID_CREDENTIALS_MESSAGE)

    candidates = (
        User.objects
        .select_for_update()
        .filter(Q(email__iexact=username) | Q(name=username))
    )

    # Several accounts may share a name; the password decides
    user = next((u for u in candidates if u.check_password(password)), None)
    if user is None:
        logger.info("Failed login attempt for %s", username)
        raise InvalidCredentialsError(INVALID_CREDENTIALS_MESSAGE)

    if not user.is_active:
        raise InactiveAccountError("Account is deactivated")

    user.last_login = timezone.now()
    user.save(update_fields=['last_login'])

    return user


def decode_google_credential(credential: str) -> dict:
    """
    Decode the payload of a Google Identity Services ID token.

    When ``GOOGLE_OAUTH_CLIENT_ID`` is configured the token signature and
    audience are verified with google-auth. Otherwise the payload is only
    decoded, which is meant for local development.

    Raises:
        InvalidGoogleCredentialError: If the token is malformed or fails verification
    """
    if not credential or credential.count('.') != 2:
        raise InvalidGoogleCredentialError('Invalid JWT format')

    client_id = getattr(settings, 'GOOGLE_OAUTH_CLIENT_ID', '')
    if client_id:
        from google.auth.transport import requests as google_requests
        from google.oauth2 import id_token

        try:
            return id_token.verify_oauth2_token(
                credential, google_requests.Request(), client_id
            )
        except ValueError as e:
            raise InvalidGoogleCredentialError(f'Google 登入驗證失敗: {e}')

    try:
        return jwt.decode(credential, options={'verify_signature': False})
    except jwt.PyJWTError as e:
        raise InvalidGoogleCredentialError(f'Google 登入驗證失敗: {e}')


@transaction.atomic
def authenticate_google_credential(*, credential: str):
    """
    Sign in with a Google ID token.

    Only whitelisted accounts (an existing active user with the same e-mail)
    may sign in this way.

    Returns:
        Tuple of (User, display name). The display name falls back to the
        Google profile name and then to the e-mail.

    Raises:
        InvalidGoogleCredentialError: If the token cannot be decoded
        UnauthorizedGoogleAccountError: If the e-mail is not whitelisted
        InactiveAccountError: If account is deactivated
    """
    payload = decode_google_credential(credential)
    google_email = payload.get('email') or ''
    google_name = payload.get('name') or google_email

    user = (
        User.objects
        .select_for_update()
        .filter(email__iexact=google_email)
        .first()
    ) if google_email else None

    if user is None:
        logger.warning("Rejected Google sign-in for %s", google_email)
        raise UnauthorizedGoogleAccountError(
            f'此 Google 帳號 ({google_email}) 未被授權登入本系統，請聯絡管理員'
        )

    if not user.is_active:
        raise InactiveAccountError("Account is deactivated")

    user.last_login = timezone.now()
    user.save(update_fields=['last_login'])

    return user, user.name or google_name
