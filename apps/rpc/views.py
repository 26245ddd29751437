from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import APIException
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from apps.accounts.services import (
    AccountsServiceError,
    InvalidCredentialsError,
    InactiveAccountError,
    UnauthorizedGoogleAccountError,
    InsufficientRoleError,
)
from apps.fines.services import FinesServiceError
from apps.notifications.services import NotificationsServiceError
from apps.sheets.exceptions import SheetsServiceError
from apps.violations.services import ViolationsServiceError

from .dispatcher import dispatch
from .exceptions import RpcServiceError
from .serializers import ExecRequestSerializer

DOMAIN_ERRORS = (
    RpcServiceError,
    AccountsServiceError,
    ViolationsServiceError,
    FinesServiceError,
    NotificationsServiceError,
    SheetsServiceError,
)


def _error(message, status_code):
    return Response({'success': False, 'error': message}, status=status_code)


@extend_schema(
    request=OpenApiTypes.OBJECT,
    responses={200: OpenApiTypes.OBJECT},
    description=(
        "Single action endpoint. The body names the operation in `action` "
        "(login, googleLogin, addUser, sendEmail, generateDocument, uploadScanFile, sync); "
        "anything else fetches the current data."
    ),
    tags=['exec'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def exec_action(request):
    """Action endpoint - thin HTTP handler."""
    envelope = ExecRequestSerializer(data=request.data)
    envelope.is_valid(raise_exception=True)

    user = request.user if request.user.is_authenticated else None

    try:
        output = dispatch(envelope.validated_data['action'], request.data, user)
    except InvalidCredentialsError as e:
        return _error(str(e), status.HTTP_401_UNAUTHORIZED)
    except (InactiveAccountError, UnauthorizedGoogleAccountError, InsufficientRoleError) as e:
        return _error(str(e), status.HTTP_403_FORBIDDEN)
    except APIException as e:
        return _error(str(e.detail), e.status_code)
    except DOMAIN_ERRORS as e:
        return _error(str(e), status.HTTP_400_BAD_REQUEST)

    return Response(output)
