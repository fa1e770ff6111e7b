"""Custom DRF permissions for the EventGate platform."""

from rest_framework import permissions

from core.models import AppRole, UserRole


class HasAppRole(permissions.BasePermission):
    """Grant access to users holding one of the roles listed in `allowed_roles`."""

    allowed_roles = ()

    def has_permission(self, request, view):
        return UserRole.user_has_role(request.user, *self.allowed_roles)


class IsCheckInStaff(HasAppRole):
    """Door staff and admins may look up and check in attendees."""

    allowed_roles = (AppRole.ADMIN, AppRole.CHECKIN_STAFF)


class IsEventManager(HasAppRole):
    """Admins, event managers and finance officers may cancel registrations and message attendees."""

    allowed_roles = (AppRole.ADMIN, AppRole.EVENT_MANAGER, AppRole.FINANCE_OFFICER)
