from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from fieldops.core.config import SUPER_TENANT_ROLE
from fieldops.domain.models import Role, Screen
from fieldops.persistence.repos import permissions as permissions_repo


@dataclass(frozen=True)
class Grant:
    # One role's action flags on one screen.
    view: bool = False
    add: bool = False
    edit: bool = False
    delete: bool = False


FULL = Grant(view=True, add=True, edit=True, delete=True)
READ_ONLY = Grant(view=True)

ROLES: tuple[tuple[str, str], ...] = (
    (SUPER_TENANT_ROLE, "Super Admin"),
    ("company_admin", "Company Admin"),
    ("vendor", "Vendor"),
    ("supervisor", "Supervisor"),
    ("technician", "Technician"),
)

SCREENS: tuple[str, ...] = (
    "Company",
    "Vendor / Contractor",
    "Technician",
    "Clients/Customer",
    "Settings",
    "Manage Job",
    "Work Type",
    "Job Type",
    "Region",
    "Shift",
    "Roles",
)

# super_admin bypasses the matrix entirely and needs no rows.
MATRIX: dict[str, dict[str, Grant]] = {
    "company_admin": {
        "Vendor / Contractor": FULL,
        "Technician": FULL,
        "Clients/Customer": FULL,
        "Settings": READ_ONLY,
        "Manage Job": FULL,
        "Work Type": FULL,
        "Job Type": FULL,
        "Region": FULL,
        "Shift": FULL,
        "Roles": READ_ONLY,
    },
    "vendor": {
        "Technician": FULL,
        "Clients/Customer": READ_ONLY,
        "Manage Job": Grant(view=True, edit=True),
        "Work Type": READ_ONLY,
        "Job Type": READ_ONLY,
        "Region": READ_ONLY,
        "Shift": READ_ONLY,
        "Roles": READ_ONLY,
    },
    "supervisor": {
        "Technician": READ_ONLY,
        "Clients/Customer": READ_ONLY,
        "Manage Job": Grant(view=True, add=True, edit=True),
        "Roles": READ_ONLY,
    },
    "technician": {
        "Manage Job": Grant(view=True, edit=True),
    },
}


async def seed_rbac(session: AsyncSession) -> dict[str, Role]:
    """Create the built-in roles, screens and grants; safe to re-run.

    Existing rows are reused and grants are overwritten with the matrix values.
    Returns the roles keyed by slug. The caller commits.
    """
    roles: dict[str, Role] = {}
    for slug, name in ROLES:
        role = await permissions_repo.get_role_by_slug(session, slug)
        if role is None:
            role = Role(role_slug=slug, role_name=name)
            session.add(role)
        roles[slug] = role
    screens: dict[str, Screen] = {}
    for name in SCREENS:
        screen = await permissions_repo.get_screen_by_name(session, name)
        if screen is None:
            screen = Screen(name=name)
            session.add(screen)
        screens[name] = screen
    await session.flush()
    for slug, grants in MATRIX.items():
        for screen_name, grant in grants.items():
            await permissions_repo.upsert_role_screen_permission(
                session,
                role_id=roles[slug].role_id,
                screen_id=screens[screen_name].screen_id,
                can_view=grant.view,
                can_add=grant.add,
                can_edit=grant.edit,
                can_delete=grant.delete,
            )
    return roles
