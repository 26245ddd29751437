"""
Role-based permission classes.

Accounts carry one of three roles:
- admin: full access, including user management
- user: may create and change records
- viewer: read-only access to records and statistics
"""
from rest_framework.permissions import BasePermission, SAFE_METHODS

from .models import UserRole


class IsAdminRole(BasePermission):
    """
    Permission for administrator-only endpoints.

    Usage:
        @permission_classes([IsAuthenticated, IsAdminRole])
        def list_users(request):
            ...
    """

    message = '無權限'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.role == UserRole.ADMIN)


class IsEditorOrReadOnly(BasePermission):
    """
    Read access for every role, write access for admin and user roles.

    Usage:
        class ProjectViewSet(viewsets.ModelViewSet):
            permission_classes = [IsAuthenticated, IsEditorOrReadOnly]
    """

    message = 'Viewer accounts are read-only.'

    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return True
        user = request.user
        return bool(user and user.is_authenticated and user.can_edit)
