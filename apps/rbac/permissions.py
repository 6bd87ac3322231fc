# apps/rbac/permissions.py
from typing import Iterable, Set

from rest_framework.permissions import BasePermission


def _norm(s: str) -> str:
    """I normalize role names for reliable comparisons."""
    return (s or "").strip().lower()


class HasRole(BasePermission):
    """
    I gate an endpoint by the marketplace role stored on the caller's profile.
    Subclasses (or the roles_required() factory below) set `required_roles`.

    Behavior:
    - Superusers pass when allow_superuser is set (off by default: staff
      accounts are not marketplace members).
    - Role matching is case-insensitive.
    - A missing profile or an unset role fails closed.
    """

    message = "You do not have permission to perform this action."
    required_roles: Set[str] = set()
    allow_superuser: bool = False

    def has_permission(self, request, view) -> bool:
        # No roles configured → allow (useful for composing with other perms).
        if not self.required_roles:
            return True

        user = getattr(request, "user", None)
        if not user or not user.is_authenticated:
            return False

        if self.allow_superuser and getattr(user, "is_superuser", False):
            return True

        from .utils import user_role

        return _norm(user_role(user) or "") in self.required_roles

    def has_object_permission(self, request, view, obj) -> bool:
        return self.has_permission(request, view)


def roles_required(*roles: Iterable[str]):
    """
    I return a concrete DRF permission class that requires ANY of the given roles.

    Usage:
        permission_classes = [IsAuthenticated, roles_required("farmer", "laborer")]
    """
    required = {_norm(r) for r in roles if isinstance(r, str) and r.strip()}

    class RolesRequired(HasRole):
        required_roles = required

    return RolesRequired
