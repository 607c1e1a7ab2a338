from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from fieldops.core.config import SUPER_TENANT_ROLE


class Principal(BaseModel):
    # Authenticated caller resolved from a verified bearer token; immutable per request.
    model_config = ConfigDict(frozen=True)

    id: str
    role_slug: str
    role_id: str | None = None
    # Null only for the super-tenant role.
    company_id: str | None = None

    @property
    def is_super_tenant(self) -> bool:
        return self.role_slug == SUPER_TENANT_ROLE
