from __future__ import annotations

import re
import secrets
import time
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import false, select
from sqlalchemy.sql import ColumnElement

from fieldops.core.config import SUPER_TENANT_ROLE
from fieldops.core.errors import BadRequest
from fieldops.domain.models import Client, Job, Region, Role, User, Vendor
from fieldops.domain.resources import CrudContext, ResourcePolicy
from fieldops.persistence.repos import permissions as permissions_repo
from fieldops.persistence.repos import records as records_repo


# Roles each actor may see and assign; super admins are unrestricted.
ASSIGNABLE_ROLES: dict[str, tuple[str, ...]] = {
    "company_admin": ("vendor", "supervisor", "technician"),
    "vendor": ("supervisor", "technician"),
    "supervisor": ("technician",),
    "technician": (),
}
# Field roles that must belong to a vendor of the same company.
VENDOR_BOUND_ROLES = ("supervisor", "technician")

_NON_DIGITS = re.compile(r"\D+")
_WHITESPACE = re.compile(r"\s+")


def trim(body: dict[str, Any], *fields: str) -> None:
    for name in fields:
        if isinstance(body.get(name), str):
            body[name] = body[name].strip()


def trim_lower(body: dict[str, Any], *fields: str) -> None:
    for name in fields:
        if isinstance(body.get(name), str):
            body[name] = body[name].strip().lower()


def trim_upper(body: dict[str, Any], *fields: str) -> None:
    for name in fields:
        if isinstance(body.get(name), str):
            body[name] = body[name].strip().upper()


def digits_only(body: dict[str, Any], *fields: str) -> None:
    for name in fields:
        if isinstance(body.get(name), (str, int)):
            body[name] = _NON_DIGITS.sub("", str(body[name]))


def normalize_pincode(value: Any) -> str:
    return _WHITESPACE.sub("", str(value)).upper()


def _is_pincode_value(value: Any) -> bool:
    return isinstance(value, (str, int)) and not isinstance(value, bool)


class NamedMasterPolicy(ResourcePolicy):
    # Master data identified by trimmed name columns, optionally per company.
    def __init__(self, *key_fields: str, tenant_field: str | None = None) -> None:
        self.key_fields = key_fields
        self.tenant_field = tenant_field

    def normalize(self, body: dict[str, Any], operation: str) -> None:
        trim(body, *self.key_fields)

    def duplicate_lookup(self, ctx: CrudContext, body: dict[str, Any]) -> dict[str, Any] | None:
        lookup: dict[str, Any] = {}
        if self.tenant_field is not None:
            lookup[self.tenant_field] = body.get(self.tenant_field)
        for name in self.key_fields:
            lookup[name] = body.get(name)
        if any(value in (None, "") for value in lookup.values()):
            return None
        return lookup


class RegionPolicy(NamedMasterPolicy):
    def __init__(self) -> None:
        super().__init__("region_name", tenant_field="company_id")

    def normalize(self, body: dict[str, Any], operation: str) -> None:
        super().normalize(body, operation)
        if isinstance(body.get("pincodes"), list):
            cleaned = [
                normalize_pincode(code) if _is_pincode_value(code) else code for code in body["pincodes"]
            ]
            body["pincodes"] = [code for code in cleaned if code != ""]

    def _validate_pincodes(self, body: dict[str, Any]) -> None:
        if "pincodes" not in body or body["pincodes"] is None:
            return
        pincodes = body["pincodes"]
        if not isinstance(pincodes, list) or not all(isinstance(code, str) for code in pincodes):
            raise BadRequest(
                "pincodes must be a list of codes",
                errors={"pincodes": "Expected a list of pincodes"},
            )

    async def _check_pincodes(self, ctx: CrudContext, body: dict[str, Any], exclude_id: str | None) -> None:
        # A pincode maps to at most one region across all companies.
        requested = body.get("pincodes")
        if not isinstance(requested, list) or not requested:
            return
        result = await ctx.session.execute(select(Region.region_id, Region.pincodes))
        used: set[str] = set()
        for region_id, pincodes in result.all():
            if region_id == exclude_id or not isinstance(pincodes, list):
                continue
            used.update(normalize_pincode(code) for code in pincodes if str(code).strip())
        conflicts = [code for code in requested if code in used]
        if conflicts:
            raise BadRequest(
                f"Pincodes already mapped to a region: {', '.join(conflicts)}",
                code="PINCODE_CONFLICT",
                errors={"pincodes": "Already mapped to another region"},
            )

    async def pre_create(self, ctx: CrudContext, body: dict[str, Any]) -> None:
        self._validate_pincodes(body)
        # A retried create may keep the codes of the region it duplicates.
        existing = None
        lookup = self.duplicate_lookup(ctx, body)
        if lookup is not None:
            existing = await records_repo.find_one(
                ctx.session,
                Region,
                records_repo.combine(*(getattr(Region, name) == value for name, value in lookup.items())),
            )
        await self._check_pincodes(ctx, body, exclude_id=existing.region_id if existing is not None else None)

    async def pre_update(self, ctx: CrudContext, body: dict[str, Any], row: Any) -> None:
        self._validate_pincodes(body)
        await self._check_pincodes(ctx, body, exclude_id=row.region_id)

class ShiftPolicy(NamedMasterPolicy):
    def __init__(self) -> None:
        super().__init__("shift_name", "shift_start_time", "shift_end_time", tenant_field="company_id")


class RolePolicy(ResourcePolicy):
    def normalize(self, body: dict[str, Any], operation: str) -> None:
        trim(body, "role_name")
        trim_lower(body, "role_slug")

    def duplicate_lookup(self, ctx: CrudContext, body: dict[str, Any]) -> dict[str, Any] | None:
        if not body.get("role_slug"):
            return None
        return {"role_slug": body["role_slug"]}

    async def list_where(self, ctx: CrudContext) -> ColumnElement[bool] | None:
        # Actors only see the roles they are allowed to assign.
        if ctx.is_super_tenant:
            return None
        slugs = ASSIGNABLE_ROLES.get(ctx.principal.role_slug, ())
        if not slugs:
            return false()
        return Role.role_slug.in_(slugs)


class ContactPolicy(ResourcePolicy):
    # Shared cleanup for entities carrying name/email/phone/address fields.
    trimmed: tuple[str, ...] = ("city", "address_1", "postal_code")

    def normalize(self, body: dict[str, Any], operation: str) -> None:
        trim(body, *self.trimmed)
        trim_lower(body, "email")
        digits_only(body, "phone")


class CompanyPolicy(ContactPolicy):
    trimmed = ("name", "city", "address_1", "postal_code")

    def normalize(self, body: dict[str, Any], operation: str) -> None:
        super().normalize(body, operation)
        trim_lower(body, "theme_color")
        trim_upper(body, "gst")


class VendorPolicy(ContactPolicy):
    trimmed = ("vendor_name", "address_1", "postal_code")


class ClientPolicy(ContactPolicy):
    trimmed = ("first_name", "last_name", "city", "address_1", "postal_code")


class UserPolicy(ContactPolicy):
    trimmed = ("name", "city", "address_1", "postal_code")

    async def list_where(self, ctx: CrudContext) -> ColumnElement[bool] | None:
        # The user screen only manages field staff.
        field_roles = select(Role.role_id).where(Role.role_slug.in_(VENDOR_BOUND_ROLES))
        return User.role_id.in_(field_roles)

    async def _validate_assignment(
        self,
        ctx: CrudContext,
        *,
        role_id: str | None,
        vendor_id: str | None,
        company_id: str | None,
    ) -> None:
        if not role_id:
            raise BadRequest("role_id is required", errors={"role_id": "Role is required"})
        role = await permissions_repo.get_role(ctx.session, role_id)
        if role is None:
            raise BadRequest("Invalid role_id", errors={"role_id": "Unknown role"})
        slug = (role.role_slug or "").lower()
        if not ctx.is_super_tenant and slug not in ASSIGNABLE_ROLES.get(ctx.principal.role_slug, ()):
            raise BadRequest(f"Role '{slug}' cannot be assigned by {ctx.principal.role_slug}")
        if slug == SUPER_TENANT_ROLE and company_id:
            raise BadRequest("super_admin users cannot belong to a company")
        if slug in VENDOR_BOUND_ROLES:
            if not vendor_id:
                raise BadRequest(
                    "vendor_id is required for technician/supervisor",
                    errors={"vendor_id": "Vendor is required"},
                )
            vendor = await records_repo.find_one(
                ctx.session,
                Vendor,
                records_repo.combine(Vendor.vendor_id == vendor_id, Vendor.company_id == company_id),
            )
            if vendor is None:
                raise BadRequest(
                    "vendor_id must belong to the same company",
                    errors={"vendor_id": "Vendor not found in this company"},
                )

    async def pre_create(self, ctx: CrudContext, body: dict[str, Any]) -> None:
        await self._validate_assignment(
            ctx,
            role_id=body.get("role_id"),
            vendor_id=body.get("vendor_id"),
            company_id=body.get("company_id"),
        )

    async def pre_update(self, ctx: CrudContext, body: dict[str, Any], row: Any) -> None:
        # Company is fixed; re-validate only when role or vendor changes.
        if "role_id" not in body and "vendor_id" not in body:
            return
        await self._validate_assignment(
            ctx,
            role_id=body.get("role_id", row.role_id),
            vendor_id=body.get("vendor_id", row.vendor_id),
            company_id=row.company_id,
        )


def _derive_duration(body: dict[str, Any], row: Any | None = None) -> None:
    # estimated_duration is total minutes derived from the granular fields.
    parts = ("estimated_days", "estimated_hours", "estimated_minutes")
    if not any(name in body for name in parts):
        return
    values = []
    for name in parts:
        value = body.get(name, getattr(row, name, 0) if row is not None else 0)
        value = value or 0
        if value < 0:
            raise BadRequest(f"{name} must not be negative", errors={name: "Must not be negative"})
        values.append(value)
    days, hours, minutes = values
    body["estimated_duration"] = days * 24 * 60 + hours * 60 + minutes


def generate_reference_number() -> str:
    return f"JOB-{int(time.time() * 1000)}-{secrets.token_hex(3).upper()}"


class JobPolicy(ResourcePolicy):
    def normalize(self, body: dict[str, Any], operation: str) -> None:
        trim_upper(body, "reference_number")
        trim(body, "job_description")

    async def _require_client(self, ctx: CrudContext, client_id: Any, company_id: Any) -> None:
        if not client_id:
            raise BadRequest("client_id is required", errors={"client_id": "Client is required"})
        client = await records_repo.find_one(
            ctx.session,
            Client,
            records_repo.combine(Client.client_id == client_id, Client.company_id == company_id),
        )
        if client is None:
            raise BadRequest(
                "client_id must belong to the same company",
                errors={"client_id": "Client not found in this company"},
            )

    async def pre_create(self, ctx: CrudContext, body: dict[str, Any]) -> None:
        await self._require_client(ctx, body.get("client_id"), body.get("company_id"))
        if not body.get("reference_number"):
            body["reference_number"] = generate_reference_number()
        _derive_duration(body)

    async def pre_update(self, ctx: CrudContext, body: dict[str, Any], row: Any) -> None:
        if "client_id" in body:
            await self._require_client(ctx, body["client_id"], row.company_id)
        if "reference_number" in body and not body["reference_number"]:
            raise BadRequest("reference_number cannot be empty")
        _derive_duration(body, row)

    async def list_where(self, ctx: CrudContext) -> ColumnElement[bool] | None:
        # Optional ?from= / ?to= window on the scheduled time.
        bounds = []
        for param in ("from", "to"):
            raw = ctx.query.get(param)
            if not raw:
                bounds.append(None)
                continue
            try:
                parsed = datetime.fromisoformat(str(raw))
            except ValueError as exc:
                raise BadRequest(f"Invalid '{param}' date", errors={param: "Expected ISO-8601"}) from exc
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            bounds.append(parsed)
        start, end = bounds
        conditions = []
        if start is not None:
            conditions.append(Job.scheduled_at >= start)
        if end is not None:
            conditions.append(Job.scheduled_at <= end)
        if not conditions:
            return None
        return records_repo.combine(*conditions)
