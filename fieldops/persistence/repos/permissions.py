from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fieldops.domain.models import Role, RoleScreenPermission, Screen


async def get_screen_by_name(session: AsyncSession, name: str) -> Screen | None:
    # Screens are matched by exact name; they form the permission namespace.
    result = await session.execute(select(Screen).where(Screen.name == name))
    return result.scalar_one_or_none()


async def get_screen(session: AsyncSession, screen_id: str) -> Screen | None:
    result = await session.execute(select(Screen).where(Screen.screen_id == screen_id))
    return result.scalar_one_or_none()


async def list_screens(session: AsyncSession) -> list[Screen]:
    result = await session.execute(select(Screen).order_by(Screen.name.asc()))
    return list(result.scalars().all())


async def get_role(session: AsyncSession, role_id: str) -> Role | None:
    result = await session.execute(select(Role).where(Role.role_id == role_id))
    return result.scalar_one_or_none()


async def get_role_by_slug(session: AsyncSession, role_slug: str) -> Role | None:
    result = await session.execute(select(Role).where(Role.role_slug == role_slug))
    return result.scalar_one_or_none()


async def get_role_screen_permission(
    session: AsyncSession,
    *,
    role_id: str,
    screen_id: str,
) -> RoleScreenPermission | None:
    result = await session.execute(
        select(RoleScreenPermission).where(
            RoleScreenPermission.role_id == role_id,
            RoleScreenPermission.screen_id == screen_id,
        )
    )
    return result.scalar_one_or_none()


async def upsert_role_screen_permission(
    session: AsyncSession,
    *,
    role_id: str,
    screen_id: str,
    can_view: bool,
    can_add: bool,
    can_edit: bool,
    can_delete: bool,
) -> RoleScreenPermission:
    # Fetch first so repeated grants update flags instead of inserting duplicates.
    permission = await get_role_screen_permission(session, role_id=role_id, screen_id=screen_id)
    if permission is None:
        permission = RoleScreenPermission(role_id=role_id, screen_id=screen_id)
        session.add(permission)
    permission.can_view = can_view
    permission.can_add = can_add
    permission.can_edit = can_edit
    permission.can_delete = can_delete
    await session.flush()
    return permission
