"""DRF permissions for the journey and commission API."""
from rest_framework.permissions import SAFE_METHODS, BasePermission


def partner_for_user(user):
    """The Partner linked to *user*, or ``None``."""
    if user is None or not user.is_authenticated:
        return None
    return getattr(user, "partner_profile", None)


class IsOperator(BasePermission):
    """Back-office staff: may read and mutate everything."""

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and request.user.is_staff)


class IsOperatorOrPartnerReadOnly(BasePermission):
    """Staff get full access; a linked partner gets read access.

    Object scoping (a partner only sees its own rows) is done by the view's
    queryset, so a foreign object is a 404 rather than a 403.
    """

    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated):
            return False
        if user.is_staff:
            return True
        return request.method in SAFE_METHODS and partner_for_user(user) is not None
