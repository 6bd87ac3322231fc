# apps/rbac/utils.py
from typing import Optional

from apps.rbac.permissions import _norm

MARKETPLACE_ROLES = ("farmer", "laborer")


def user_role(user) -> Optional[str]:
    """
    Return the normalized marketplace role stored on the user's profile,
    or None when the user is anonymous, has no profile, or never picked one.
    Always read fresh from the database; callers must not cache it.
    """
    if not getattr(user, "is_authenticated", False):
        return None

    from apps.accounts.models import Profile

    role = Profile.objects.filter(user_id=user.pk).values_list("role", flat=True).first()
    role = _norm(role or "")
    return role if role in MARKETPLACE_ROLES else None

