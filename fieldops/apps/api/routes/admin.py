from __future__ import annotations

from fastapi import APIRouter

from fieldops.apps.api.crud import build_crud_router
from fieldops.apps.api.registry import ADMIN_RESOURCES


router = APIRouter(prefix="/admin")

# Companies, vendors, users and clients share the generic CRUD surface.
for _descriptor in ADMIN_RESOURCES:
    router.include_router(build_crud_router(_descriptor))
