from __future__ import annotations

from fastapi import APIRouter

from fieldops.apps.api.crud import build_crud_router
from fieldops.apps.api.registry import JOBS


router: APIRouter = build_crud_router(JOBS)
