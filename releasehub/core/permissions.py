from rest_framework.permissions import BasePermission


class IsAdminRole(BasePermission):
    """Allows access only to users with the ADMIN role"""
    message = 'Admin access required'

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and request.user.is_admin)


def is_owner_or_admin(user, owner_id):
    """True when the user created the record or holds the ADMIN role"""
    return user.is_admin or user.pk == owner_id
