from rest_framework.permissions import BasePermission

from .roles import ADMIN, CASE_MANAGER, get_effective_role, get_original_role, is_staff_role


class IsStaffRole(BasePermission):
    """Supervisor, case manager or admin (view-as aware)."""
    message = 'Unauthorized'

    def has_permission(self, request, view):
        return is_staff_role(get_effective_role(request))


class IsAdminRole(BasePermission):
    """Stored admin role; impersonation does not grant or revoke it."""
    message = 'Unauthorized'

    def has_permission(self, request, view):
        return get_original_role(request.user) == ADMIN


class IsCaseManagerRole(BasePermission):
    message = 'Unauthorized'

    def has_permission(self, request, view):
        return get_effective_role(request) == CASE_MANAGER
