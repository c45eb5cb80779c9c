"""Role-gated access policy for back-office actors."""

from __future__ import annotations

from typing import Any

from backoffice.core.enums import AccessLevelEnum, AdminRoleEnum
from backoffice.shared.exceptions import ForbiddenException, UnauthenticatedException

_ROLE_RANK: dict[AdminRoleEnum, int] = {
    AdminRoleEnum.ADMIN: 1,
    AdminRoleEnum.SUPER_ADMIN: 2,
}

_LEVEL_RANK: dict[AccessLevelEnum, int] = {
    AccessLevelEnum.AUTHENTICATED: 0,
    AccessLevelEnum.ADMIN: 1,
    AccessLevelEnum.SUPER_ADMIN: 2,
}


def role_rank(role: AdminRoleEnum | str | None) -> int:
    """Rank of an actor role; unknown roles rank below every level."""
    try:
        return _ROLE_RANK[AdminRoleEnum(role)]
    except ValueError:
        return -1


def authorize(actor: Any | None, required_level: AccessLevelEnum) -> None:
    """Check the actor against the level an operation requires.

    Raises ``UnauthenticatedException`` when there is no active actor and
    ``ForbiddenException`` when the actor's role ranks below the level.
    """
    if actor is None or not getattr(actor, "is_active", False):
        raise UnauthenticatedException("Authentication required")

    if role_rank(actor.role) < _LEVEL_RANK[required_level]:
        raise ForbiddenException(
            f"Operation requires {required_level.value} privileges",
        )


def is_super_admin(actor: Any) -> bool:
    return role_rank(actor.role) >= _ROLE_RANK[AdminRoleEnum.SUPER_ADMIN]
