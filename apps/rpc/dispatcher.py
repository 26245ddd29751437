"""
Action dispatcher behind ``POST /api/exec/``.

The spreadsheet-style frontend talks to a single endpoint and names the
operation in an ``action`` key. Each action is a handler registered with
``@register``, which also declares who may call it and how its
parameters are validated. Every action except the logins answers with
the current snapshot of projects, violations, fines and sections.

Example:
    Request bodies::

        {"action": "login", "username": "admin@example.com", "password": "..."}
        {"action": "sync", "violations": [...], "projects": [...]}
        {}                                   # plain fetch
"""

import logging
from collections import OrderedDict
from datetime import datetime

from django.db import transaction

from apps.accounts.models import UserRole
from apps.accounts.services import (
    authenticate_user,
    authenticate_google_credential,
    create_user,
    ensure_default_admin,
)
from apps.accounts.tokens import login_payload
from apps.notifications.services import send_manual_email
from apps.sheets.schema import to_date, to_uuid
from apps.sheets.services import replace_records, snapshot
from apps.violations.services import (
    ViolationsServiceError,
    ViolationNotFoundError,
    decode_base64_file,
    generate_document,
    get_violation_by_id,
    store_ticket_file,
    upload_scan_file,
    upload_ticket_file,
)

from .exceptions import ActionForbiddenError, AuthenticationRequiredError, InvalidPayloadError
from .serializers import (
    AddUserActionSerializer,
    GoogleLoginActionSerializer,
    LoginActionSerializer,
    SendEmailActionSerializer,
    SyncActionSerializer,
    UploadScanFileActionSerializer,
    ViolationActionSerializer,
)

logger = logging.getLogger(__name__)

FETCH = 'fetch'
EDITOR_ROLES = (UserRole.ADMIN, UserRole.USER)

# Payload key -> table, in an order that keeps references resolvable
SYNC_TABLES = OrderedDict([
    ('projects', 'Projects'),
    ('sections', 'Sections'),
    ('violations', 'Violations'),
    ('fines', 'Fines'),
])


class Action:
    """
    A registered action.

    Attributes:
        name: Value of the ``action`` key
        handler: ``handler(user, params) -> dict``
        serializer_class: Validates the request body into ``params``
        anonymous: Callable without a token (logins)
        roles: Roles allowed to call it; None allows every signed-in user
    """

    def __init__(self, name, handler, serializer_class=None, anonymous=False, roles=None):
        self.name = name
        self.handler = handler
        self.serializer_class = serializer_class
        self.anonymous = anonymous
        self.roles = roles

    @property
    def returns_snapshot(self):
        return not self.anonymous


ACTIONS = {}


def register(name, serializer_class=None, anonymous=False, roles=None):
    def decorator(handler):
        ACTIONS[name] = Action(name, handler, serializer_class, anonymous, roles)
        return handler
    return decorator


def _format_errors(errors, prefix=''):
    """Flatten serializer errors into ``field: message`` text."""
    if isinstance(errors, dict):
        parts = [_format_errors(value, f"{prefix}{key}.") for key, value in errors.items()]
        return '; '.join(part for part in parts if part)
    if isinstance(errors, list):
        messages = [_format_errors(item, prefix) for item in errors]
        return '; '.join(message for message in messages if message)
    return f"{prefix.rstrip('.')}: {errors}" if prefix else str(errors)


def _violation(violation_id):
    return get_violation_by_id(to_uuid(violation_id, 'Violations'))


def _parse_day(value):
    """Date from ``YYYY-MM-DD``, ``YYYY/MM/DD`` or compact ``YYYYMMDD`` text."""
    text = str(value or '').strip()
    if len(text) == 8 and text.isdigit():
        try:
            return datetime.strptime(text, '%Y%m%d').date()
        except ValueError:
            return None
    return to_date(text)


# =============================================================================
# Actions
# =============================================================================

@register('login', LoginActionSerializer, anonymous=True)
def login(user, params):
    return login_payload(authenticate_user(**params))


@register('googleLogin', GoogleLoginActionSerializer, anonymous=True)
def google_login(user, params):
    account, name = authenticate_google_credential(credential=params['credential'])
    return login_payload(account, name=name)


@register('addUser', AddUserActionSerializer, roles=(UserRole.ADMIN,))
def add_user(user, params):
    create_user(acting_user=user, **params['newUser'])
    return {'success': True, 'message': '使用者已新增'}


@register('sendEmail', SendEmailActionSerializer, roles=EDITOR_ROLES)
def send_email(user, params):
    violation = _violation(params['violationId']) if params['violationId'] else None
    return send_manual_email(
        to=params['to'],
        subject=params['subject'],
        body=params['body'],
        cc=[params['ccEmail']] if params['ccEmail'] else None,
        violation=violation,
        project_name=params['projectName'],
        contractor_name=params['contractorName'],
        deadline=params['deadline'],
    )


@register('generateDocument', ViolationActionSerializer, roles=EDITOR_ROLES)
def generate_document_action(user, params):
    violation = _violation(params['violationId'])
    try:
        return generate_document(violation=violation)
    except ViolationsServiceError as e:
        logger.warning("Document generation failed for %s: %s", violation.id, e)
        return {'success': False, 'error': str(e)}


@register('uploadScanFile', UploadScanFileActionSerializer, roles=EDITOR_ROLES)
def upload_scan_file_action(user, params):
    violation = _violation(params['violationId'])
    try:
        return upload_scan_file(
            violation=violation,
            content=decode_base64_file(params['base64']),
            file_name=params['fileName'] or None,
            mime_type=params['mimeType'] or 'application/pdf',
            replace_reason=params['replaceReason'] or None,
        )
    except ViolationsServiceError as e:
        logger.warning("Scan upload failed for %s: %s", violation.id, e)
        return {'success': False, 'error': str(e)}


def _upload_sync_file(file_upload, violation_records):
    """
    Store the ticket file sent along with a sync.

    When the violation is part of the synced rows, its record gets the file
    name and url so the following table replacement keeps them. Otherwise
    the stored violation is updated directly.
    """
    file_data = file_upload['fileData']
    violation_id = str(file_upload['violationId'])
    violation_date = _parse_day(file_upload['violationDate'])

    try:
        content = decode_base64_file(file_data['base64'])
        record = next(
            (r for r in violation_records or [] if str(r.get('id', '')) == violation_id),
            None,
        )
        if record is None:
            return upload_ticket_file(
                violation=_violation(violation_id),
                content=content,
                original_name=file_data['name'],
                project=file_upload['projectInfo'],
                violation_date=violation_date,
            )

        name, url = store_ticket_file(
            content=content,
            original_name=file_data['name'],
            project=file_upload['projectInfo'],
            violation_date=violation_date or to_date(record.get('violationDate')),
        )
        record['fileName'] = name
        record['fileUrl'] = url
        logger.info("Ticket file %s stored for synced violation %s", name, violation_id)
        return {'success': True, 'fileName': name, 'fileUrl': url}
    except (ViolationsServiceError, ViolationNotFoundError) as e:
        logger.warning("Ticket upload for %s failed: %s", violation_id, e)
        return {'success': False, 'error': str(e)}


@register('sync', SyncActionSerializer, roles=EDITOR_ROLES)
def sync(user, params):
    output = {}
    file_upload = params.get('fileUpload')
    if file_upload:
        output['fileUploadStatus'] = _upload_sync_file(file_upload, params.get('violations'))

    with transaction.atomic():
        for key, table in SYNC_TABLES.items():
            if key in params:
                replace_records(table, params[key])

    output['success'] = True
    return output


@register(FETCH)
def fetch(user, params):
    return {}


# =============================================================================
# Dispatch
# =============================================================================

def dispatch(action_name, data, user=None) -> dict:
    """
    Run one action.

    Unknown or missing action names fall back to a plain fetch.

    Args:
        action_name: Value of the ``action`` key
        data: Full request body
        user: Authenticated caller, None for anonymous requests

    Returns:
        dict: Handler output, plus the snapshot for non-login actions

    Raises:
        AuthenticationRequiredError: If the action needs a signed-in caller
        ActionForbiddenError: If the caller's role may not run the action
        InvalidPayloadError: If the parameters do not validate
    """
    ensure_default_admin()

    action = ACTIONS.get(action_name) or ACTIONS[FETCH]

    if not action.anonymous:
        if user is None or not user.is_authenticated:
            raise AuthenticationRequiredError()
        if action.roles and user.role not in action.roles:
            logger.warning("%s (%s) may not run %s", user.email, user.role, action.name)
            raise ActionForbiddenError()

    params = {}
    if action.serializer_class is not None:
        serializer = action.serializer_class(data=data)
        if not serializer.is_valid():
            raise InvalidPayloadError(_format_errors(serializer.errors))
        params = serializer.validated_data

    output = action.handler(user, params)

    if action.returns_snapshot:
        output.update(snapshot())
    if action.name != FETCH:
        logger.info("Action %s done", action.name)
    return output
