from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fieldops.core.errors import Unauthenticated
from fieldops.domain.principal import Principal
from fieldops.persistence.repos import permissions as permissions_repo


logger = logging.getLogger(__name__)

# Screen actions and the permission flag each one reads.
ACTION_FLAGS: dict[str, str] = {
    "view": "can_view",
    "add": "can_add",
    "edit": "can_edit",
    "delete": "can_delete",
}


@dataclass(frozen=True)
class PermissionDecision:
    allowed: bool
    reason: str | None = None

    @classmethod
    def allow(cls) -> PermissionDecision:
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: str) -> PermissionDecision:
        return cls(allowed=False, reason=reason)


async def authorize(
    session: AsyncSession,
    principal: Principal,
    screen_name: str,
    action: str,
) -> PermissionDecision:
    # Resolve (role, screen) flags; any lookup failure denies (fail closed).
    if principal.is_super_tenant:
        return PermissionDecision.allow()
    if not principal.role_id:
        raise Unauthenticated("Unauthenticated")
    flag = ACTION_FLAGS.get(action)
    if flag is None:
        return PermissionDecision.deny(f"Forbidden: unknown action '{action}'")
    try:
        screen = await permissions_repo.get_screen_by_name(session, screen_name)
        if screen is None:
            return PermissionDecision.deny(f"Forbidden: screen '{screen_name}' not found")
        permission = await permissions_repo.get_role_screen_permission(
            session, role_id=principal.role_id, screen_id=screen.screen_id
        )
    except SQLAlchemyError as exc:
        logger.warning(
            "permission_lookup_failed screen=%s action=%s role_id=%s",
            screen_name,
            action,
            principal.role_id,
            exc_info=exc,
        )
        return PermissionDecision.deny("Forbidden: permission lookup failed")
    if permission is None:
        return PermissionDecision.deny(f"Forbidden: no permission for '{screen_name}'")
    if not getattr(permission, flag):
        return PermissionDecision.deny(f"Forbidden: lacks {action} on '{screen_name}'")
    return PermissionDecision.allow()
