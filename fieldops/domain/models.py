from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _new_id() -> str:
    return str(uuid4())


# JSONB on Postgres, plain JSON elsewhere (SQLite test databases).
JSONType = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    pass


class Role(Base):
    __tablename__ = "roles"

    role_id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    role_name: Mapped[str] = mapped_column(String)
    # Stable lowercase tag used by principals (super_admin, company_admin, ...).
    role_slug: Mapped[str] = mapped_column(String, unique=True)
    status: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class Screen(Base):
    __tablename__ = "screens"

    # Logical permission namespace, matched by exact name.
    screen_id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String, unique=True)


class RoleScreenPermission(Base):
    __tablename__ = "role_screen_permissions"
    __table_args__ = (
        UniqueConstraint("role_id", "screen_id", name="uq_role_screen_permissions_role_screen"),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    role_id: Mapped[str] = mapped_column(String, ForeignKey("roles.role_id"), index=True)
    screen_id: Mapped[str] = mapped_column(String, ForeignKey("screens.screen_id"), index=True)
    can_view: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    can_add: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    can_edit: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    can_delete: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


class SubscriptionType(Base):
    __tablename__ = "subscription_types"

    subscription_id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    subscription_title: Mapped[str] = mapped_column(String, unique=True)
    subscription_status: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class BusinessType(Base):
    __tablename__ = "business_types"

    business_type_id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    business_type_name: Mapped[str] = mapped_column(String, unique=True)
    status: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class NatureOfWork(Base):
    __tablename__ = "nature_of_work"

    now_id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    now_name: Mapped[str] = mapped_column(String, unique=True)
    now_status: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class JobStatus(Base):
    __tablename__ = "job_statuses"

    job_status_id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    job_status_title: Mapped[str] = mapped_column(String, unique=True)
    job_status_color_code: Mapped[str | None] = mapped_column(String(16), nullable=True)
    job_status_order: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class Company(Base):
    __tablename__ = "companies"

    # The tenant itself; every scoped entity carries a company_id pointing here.
    company_id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String)
    email: Mapped[str] = mapped_column(String, unique=True)
    phone: Mapped[str] = mapped_column(String, unique=True)
    gst: Mapped[str | None] = mapped_column(String, nullable=True)
    logo: Mapped[str | None] = mapped_column(String, nullable=True)
    address_1: Mapped[str | None] = mapped_column(String, nullable=True)
    country_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    state_id: Mapped[str | None] = mapped_column(String, nullable=True)
    city: Mapped[str | None] = mapped_column(String, nullable=True)
    postal_code: Mapped[str | None] = mapped_column(String, nullable=True)
    lat: Mapped[Decimal | None] = mapped_column(Numeric(10, 7), nullable=True)
    lng: Mapped[Decimal | None] = mapped_column(Numeric(10, 7), nullable=True)
    subscription_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("subscription_types.subscription_id"), nullable=True
    )
    no_of_users: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    subscription_start_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    subscription_end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    subscription_amount_per_user: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)
    theme_color: Mapped[str | None] = mapped_column(String, nullable=True)
    status: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class Region(Base):
    __tablename__ = "regions"
    __table_args__ = (UniqueConstraint("company_id", "region_name", name="uq_regions_company_name"),)

    region_id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    company_id: Mapped[str] = mapped_column(String, ForeignKey("companies.company_id"), index=True)
    region_name: Mapped[str] = mapped_column(String)
    # Normalized postal codes; each code maps to at most one region.
    pincodes: Mapped[list[str] | None] = mapped_column(JSONType, nullable=True)
    country_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    state_id: Mapped[str | None] = mapped_column(String, nullable=True)
    district_id: Mapped[str | None] = mapped_column(String, nullable=True)
    status: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class Shift(Base):
    __tablename__ = "shifts"
    __table_args__ = (
        UniqueConstraint(
            "company_id",
            "shift_name",
            "shift_start_time",
            "shift_end_time",
            name="uq_shifts_company_name_window",
        ),
    )

    shift_id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    company_id: Mapped[str] = mapped_column(String, ForeignKey("companies.company_id"), index=True)
    shift_name: Mapped[str] = mapped_column(String)
    # Wall-clock "HH:MM" strings; no timezone semantics.
    shift_start_time: Mapped[str] = mapped_column(String)
    shift_end_time: Mapped[str] = mapped_column(String)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class WorkType(Base):
    __tablename__ = "work_types"
    __table_args__ = (
        UniqueConstraint("company_id", "worktype_name", name="uq_work_types_company_name"),
    )

    worktype_id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    company_id: Mapped[str] = mapped_column(String, ForeignKey("companies.company_id"), index=True)
    worktype_name: Mapped[str] = mapped_column(String)
    worktype_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class JobType(Base):
    __tablename__ = "job_types"
    __table_args__ = (
        UniqueConstraint(
            "company_id", "worktype_id", "jobtype_name", name="uq_job_types_company_worktype_name"
        ),
    )

    jobtype_id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    company_id: Mapped[str] = mapped_column(String, ForeignKey("companies.company_id"), index=True)
    worktype_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("work_types.worktype_id"), nullable=True, index=True
    )
    jobtype_name: Mapped[str] = mapped_column(String)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class Vendor(Base):
    __tablename__ = "vendors"
    __table_args__ = (UniqueConstraint("company_id", "email", name="uq_vendors_company_email"),)

    vendor_id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    company_id: Mapped[str] = mapped_column(String, ForeignKey("companies.company_id"), index=True)
    vendor_name: Mapped[str] = mapped_column(String)
    email: Mapped[str | None] = mapped_column(String, nullable=True)
    phone: Mapped[str | None] = mapped_column(String, nullable=True)
    address_1: Mapped[str | None] = mapped_column(String, nullable=True)
    country_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    state_id: Mapped[str | None] = mapped_column(String, nullable=True)
    region_id: Mapped[str | None] = mapped_column(String, ForeignKey("regions.region_id"), nullable=True)
    postal_code: Mapped[str | None] = mapped_column(String, nullable=True)
    status: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class User(Base):
    __tablename__ = "users"

    # Technicians, supervisors and admins. company_id is null only for super admins.
    user_id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    company_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("companies.company_id"), nullable=True, index=True
    )
    role_id: Mapped[str] = mapped_column(String, ForeignKey("roles.role_id"), index=True)
    vendor_id: Mapped[str | None] = mapped_column(String, ForeignKey("vendors.vendor_id"), nullable=True)
    supervisor_id: Mapped[str | None] = mapped_column(String, ForeignKey("users.user_id"), nullable=True)
    shift_id: Mapped[str | None] = mapped_column(String, ForeignKey("shifts.shift_id"), nullable=True)
    region_id: Mapped[str | None] = mapped_column(String, ForeignKey("regions.region_id"), nullable=True)
    name: Mapped[str] = mapped_column(String)
    email: Mapped[str] = mapped_column(String, unique=True)
    phone: Mapped[str | None] = mapped_column(String, nullable=True)
    city: Mapped[str | None] = mapped_column(String, nullable=True)
    address_1: Mapped[str | None] = mapped_column(String, nullable=True)
    postal_code: Mapped[str | None] = mapped_column(String, nullable=True)
    status: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class Client(Base):
    __tablename__ = "clients"

    client_id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    company_id: Mapped[str] = mapped_column(String, ForeignKey("companies.company_id"), index=True)
    business_type_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("business_types.business_type_id"), nullable=True
    )
    first_name: Mapped[str] = mapped_column(String)
    last_name: Mapped[str | None] = mapped_column(String, nullable=True)
    email: Mapped[str | None] = mapped_column(String, nullable=True)
    phone: Mapped[str | None] = mapped_column(String, nullable=True)
    address_1: Mapped[str | None] = mapped_column(String, nullable=True)
    city: Mapped[str | None] = mapped_column(String, nullable=True)
    postal_code: Mapped[str | None] = mapped_column(String, nullable=True)
    country_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    state_id: Mapped[str | None] = mapped_column(String, nullable=True)
    available_status: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class Job(Base):
    __tablename__ = "jobs"

    job_id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    company_id: Mapped[str] = mapped_column(String, ForeignKey("companies.company_id"), index=True)
    client_id: Mapped[str] = mapped_column(String, ForeignKey("clients.client_id"), index=True)
    reference_number: Mapped[str] = mapped_column(String, unique=True)
    worktype_id: Mapped[str | None] = mapped_column(String, ForeignKey("work_types.worktype_id"), nullable=True)
    jobtype_id: Mapped[str | None] = mapped_column(String, ForeignKey("job_types.jobtype_id"), nullable=True)
    job_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Total minutes, derived from the granular fields when those are supplied.
    estimated_duration: Mapped[int | None] = mapped_column(Integer, nullable=True)
    estimated_days: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    estimated_hours: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    estimated_minutes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    scheduled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    supervisor_id: Mapped[str | None] = mapped_column(String, ForeignKey("users.user_id"), nullable=True)
    technician_id: Mapped[str | None] = mapped_column(String, ForeignKey("users.user_id"), nullable=True)
    now_id: Mapped[str | None] = mapped_column(String, ForeignKey("nature_of_work.now_id"), nullable=True)
    job_status_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("job_statuses.job_status_id"), nullable=True
    )
    job_assigned: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class JobStatusHistory(Base):
    __tablename__ = "job_status_history"

    # Owned by the job; removed together with it inside the delete transaction.
    id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    job_id: Mapped[str] = mapped_column(String, ForeignKey("jobs.job_id"), index=True)
    job_status_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("job_statuses.job_status_id"), nullable=True
    )
    is_completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


def column_values(row: Base) -> dict[str, Any]:
    # Render mapped column attributes only; relationships are never serialized.
    return {attr.key: getattr(row, attr.key) for attr in row.__mapper__.column_attrs}
