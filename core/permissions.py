"""
Role-based DRF permissions.

Every marketplace user has exactly one role (creator, company or admin).
Suspended and banned accounts fail every role check.
"""

from rest_framework.permissions import BasePermission


class _RolePermission(BasePermission):
    role = None
    message = "You do not have permission to perform this action."

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        if not user.is_account_active:
            return False
        return user.role == self.role


class IsCreator(_RolePermission):
    role = "creator"
    message = "Only creators can perform this action."


class IsCompany(_RolePermission):
    role = "company"
    message = "Only companies can perform this action."


class IsAdmin(_RolePermission):
    role = "admin"
    message = "Admin access required."


class IsApprovedCompany(IsCompany):
    """Company role with an approved company profile."""

    message = "Your company account is pending approval."

    def has_permission(self, request, view):
        if not super().has_permission(request, view):
            return False
        profile = getattr(request.user, "company_profile", None)
        return profile is not None and profile.status == "approved"
