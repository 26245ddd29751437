from rest_framework_simplejwt.tokens import RefreshToken


def tokens_for(user):
    """Return a fresh refresh/access JWT pair for the user."""
    refresh = RefreshToken.for_user(user)
    return {
        'refresh': str(refresh),
        'access': str(refresh.access_token),
    }


def login_payload(user, name=None):
    """Response body shared by every login flavour."""
    return {
        'success': True,
        'user': {
            'email': user.email,
            'name': name or user.name,
            'role': user.role,
        },
        'tokens': tokens_for(user),
    }
