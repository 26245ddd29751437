from rest_framework import status, serializers
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema
from .models import User
from .permissions import IsAdminRole
from .serializers import (
    UserLoginSerializer,
    GoogleLoginSerializer,
    UserCreateSerializer,
    UserSerializer,
    SessionUserSerializer,
)
from .services import (
    authenticate_user,
    authenticate_google_credential,
    create_user,
    ensure_default_admin,
    InvalidCredentialsError,
    InactiveAccountError,
    InvalidGoogleCredentialError,
    UnauthorizedGoogleAccountError,
    DuplicateUserError,
    InsufficientRoleError,
)
from .tokens import login_payload


# Response serializers for API documentation
class TokensResponseSerializer(serializers.Serializer):
    refresh = serializers.CharField()
    access = serializers.CharField()


class AuthResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    user = SessionUserSerializer()
    tokens = TokensResponseSerializer()


class ErrorResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField(required=False)
    error = serializers.CharField()


@extend_schema(
    request=UserLoginSerializer,
    responses={
        200: AuthResponseSerializer,
        401: ErrorResponseSerializer,
        403: ErrorResponseSerializer,
    },
    description="Authenticate with e-mail (or name) and password to receive JWT tokens.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def login(request):
    """Login with e-mail or name."""
    serializer = UserLoginSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    ensure_default_admin()

    try:
        user = authenticate_user(**serializer.validated_data)
    except InvalidCredentialsError as e:
        return Response({
            'success': False,
            'error': str(e)
        }, status=status.HTTP_401_UNAUTHORIZED)
    except InactiveAccountError as e:
        return Response({
            'success': False,
            'error': str(e)
        }, status=status.HTTP_403_FORBIDDEN)

    return Response(login_payload(user))


@extend_schema(
    request=GoogleLoginSerializer,
    responses={
        200: AuthResponseSerializer,
        400: ErrorResponseSerializer,
        403: ErrorResponseSerializer,
    },
    description="Sign in with a Google ID token. Only whitelisted accounts are accepted.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def google_login(request):
    """Login with a Google credential."""
    serializer = GoogleLoginSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    ensure_default_admin()

    try:
        user, name = authenticate_google_credential(**serializer.validated_data)
    except InvalidGoogleCredentialError as e:
        return Response({
            'success': False,
            'error': str(e)
        }, status=status.HTTP_400_BAD_REQUEST)
    except (UnauthorizedGoogleAccountError, InactiveAccountError) as e:
        return Response({
            'success': False,
            'error': str(e)
        }, status=status.HTTP_403_FORBIDDEN)

    return Response(login_payload(user, name=name))


@extend_schema(
    responses={200: UserSerializer},
    description="Get the current authenticated user's profile.",
    tags=['auth'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def get_current_user(request):
    """Get current authenticated user profile."""
    return Response(UserSerializer(request.user).data)


@extend_schema(
    methods=['GET'],
    responses={200: UserSerializer(many=True)},
    description="List every account (administrators only).",
    tags=['auth'],
)
@extend_schema(
    methods=['POST'],
    request=UserCreateSerializer,
    responses={
        201: UserSerializer,
        400: ErrorResponseSerializer,
        403: ErrorResponseSerializer,
    },
    description="Create an account (administrators only).",
    tags=['auth'],
)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def users(request):
    """List or create accounts."""
    if request.method == 'GET':
        return Response(UserSerializer(User.objects.all(), many=True).data)

    serializer = UserCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        user = create_user(acting_user=request.user, **serializer.validated_data)
    except DuplicateUserError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except InsufficientRoleError as e:
        return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

    return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)
