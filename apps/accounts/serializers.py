from rest_framework import serializers
from .models import User, UserRole


# =============================================================================
# Input Serializers
# =============================================================================

class UserLoginSerializer(serializers.Serializer):
    """Login with e-mail or name."""

    username = serializers.CharField(required=True, max_length=255)
    password = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'}
    )


class GoogleLoginSerializer(serializers.Serializer):
    """Google Identity Services credential (ID token)."""

    credential = serializers.CharField(required=True)


class UserCreateSerializer(serializers.Serializer):
    """Account created by an administrator."""

    email = serializers.EmailField(required=True)
    password = serializers.CharField(
        required=True,
        write_only=True,
        min_length=6,
        style={'input_type': 'password'}
    )
    name = serializers.CharField(required=False, allow_blank=True, max_length=100, default='')
    role = serializers.ChoiceField(choices=UserRole.choices, required=False, default=UserRole.USER)


# =============================================================================
# Output Serializers
# =============================================================================

class UserSerializer(serializers.ModelSerializer):
    """Basic user serializer for profile display."""

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'name',
            'role',
            'is_active',
            'created_at',
            'last_login',
        ]
        read_only_fields = fields


class SessionUserSerializer(serializers.Serializer):
    """The ``user`` object returned by the login endpoints."""

    email = serializers.EmailField()
    name = serializers.CharField()
    role = serializers.CharField()
