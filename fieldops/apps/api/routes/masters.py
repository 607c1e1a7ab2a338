from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fieldops.apps.api.crud import build_crud_router
from fieldops.apps.api.deps import get_db, require_permission
from fieldops.apps.api.openapi import DEFAULT_ERROR_RESPONSES
from fieldops.apps.api.registry import MASTER_RESOURCES, ROLES
from fieldops.core.errors import NotFound
from fieldops.domain.principal import Principal
from fieldops.persistence.repos import permissions as permissions_repo
from fieldops.services.storage_errors import translate_storage_error


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/masters")


class ScreenResponse(BaseModel):
    screen_id: str
    name: str


class ScreenPermissionRequest(BaseModel):
    can_view: bool = False
    can_add: bool = False
    can_edit: bool = False
    can_delete: bool = False

    # Unknown flags are rejected rather than silently ignored.
    model_config = {"extra": "forbid"}


class ScreenPermissionResponse(BaseModel):
    id: str
    role_id: str
    screen_id: str
    can_view: bool
    can_add: bool
    can_edit: bool
    can_delete: bool


_screens_router = APIRouter(tags=["screens"], responses=DEFAULT_ERROR_RESPONSES)


@_screens_router.get("/screens", response_model=list[ScreenResponse])
async def list_screens(
    principal: Principal = Depends(require_permission(ROLES.screen, "view")),
    db: AsyncSession = Depends(get_db),
) -> list[ScreenResponse]:
    try:
        screens = await permissions_repo.list_screens(db)
    except SQLAlchemyError as exc:
        raise translate_storage_error(exc, resource="Screen", operation="list") from exc
    return [ScreenResponse(screen_id=screen.screen_id, name=screen.name) for screen in screens]


@_screens_router.put(
    "/roles/{role_id}/screens/{screen_id}",
    response_model=ScreenPermissionResponse,
)
async def upsert_screen_permission(
    role_id: str,
    screen_id: str,
    payload: ScreenPermissionRequest,
    principal: Principal = Depends(require_permission(ROLES.screen, "edit")),
    db: AsyncSession = Depends(get_db),
) -> ScreenPermissionResponse:
    # Grant or revoke the four action flags of one role on one screen.
    if await permissions_repo.get_role(db, role_id) is None:
        raise NotFound("Role not found")
    if await permissions_repo.get_screen(db, screen_id) is None:
        raise NotFound("Screen not found")
    try:
        permission = await permissions_repo.upsert_role_screen_permission(
            db,
            role_id=role_id,
            screen_id=screen_id,
            can_view=payload.can_view,
            can_add=payload.can_add,
            can_edit=payload.can_edit,
            can_delete=payload.can_delete,
        )
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        raise translate_storage_error(exc, resource="Permission", operation="update") from exc
    logger.info(
        "screen_permission_updated role_id=%s screen_id=%s actor=%s",
        role_id,
        screen_id,
        principal.id,
    )
    return ScreenPermissionResponse(
        id=permission.id,
        role_id=permission.role_id,
        screen_id=permission.screen_id,
        can_view=permission.can_view,
        can_add=permission.can_add,
        can_edit=permission.can_edit,
        can_delete=permission.can_delete,
    )


router.include_router(_screens_router)
for _descriptor in MASTER_RESOURCES:
    router.include_router(build_crud_router(_descriptor))
