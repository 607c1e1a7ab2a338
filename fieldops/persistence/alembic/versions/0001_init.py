"""field operations schema

Revision ID: 0001_init
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None


def _created_at() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now())


def _flag(name: str, default: bool) -> sa.Column:
    return sa.Column(
        name,
        sa.Boolean(),
        server_default=sa.text("true" if default else "false"),
        nullable=False,
    )


def upgrade() -> None:
    # RBAC: roles, screens and the per-screen action matrix.
    op.create_table(
        "roles",
        sa.Column("role_id", sa.String(), nullable=False),
        sa.Column("role_name", sa.String(), nullable=False),
        sa.Column("role_slug", sa.String(), nullable=False),
        _flag("status", True),
        _created_at(),
        sa.PrimaryKeyConstraint("role_id"),
        sa.UniqueConstraint("role_slug"),
    )
    op.create_table(
        "screens",
        sa.Column("screen_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.PrimaryKeyConstraint("screen_id"),
        sa.UniqueConstraint("name"),
    )
    op.create_table(
        "role_screen_permissions",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("role_id", sa.String(), nullable=False),
        sa.Column("screen_id", sa.String(), nullable=False),
        _flag("can_view", False),
        _flag("can_add", False),
        _flag("can_edit", False),
        _flag("can_delete", False),
        sa.ForeignKeyConstraint(["role_id"], ["roles.role_id"]),
        sa.ForeignKeyConstraint(["screen_id"], ["screens.screen_id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("role_id", "screen_id", name="uq_role_screen_permissions_role_screen"),
    )
    op.create_index("ix_role_screen_permissions_role_id", "role_screen_permissions", ["role_id"])
    op.create_index("ix_role_screen_permissions_screen_id", "role_screen_permissions", ["screen_id"])

    # Global master data.
    op.create_table(
        "subscription_types",
        sa.Column("subscription_id", sa.String(), nullable=False),
        sa.Column("subscription_title", sa.String(), nullable=False),
        _flag("subscription_status", True),
        _created_at(),
        sa.PrimaryKeyConstraint("subscription_id"),
        sa.UniqueConstraint("subscription_title"),
    )
    op.create_table(
        "business_types",
        sa.Column("business_type_id", sa.String(), nullable=False),
        sa.Column("business_type_name", sa.String(), nullable=False),
        _flag("status", True),
        _created_at(),
        sa.PrimaryKeyConstraint("business_type_id"),
        sa.UniqueConstraint("business_type_name"),
    )
    op.create_table(
        "nature_of_work",
        sa.Column("now_id", sa.String(), nullable=False),
        sa.Column("now_name", sa.String(), nullable=False),
        _flag("now_status", True),
        _created_at(),
        sa.PrimaryKeyConstraint("now_id"),
        sa.UniqueConstraint("now_name"),
    )
    op.create_table(
        "job_statuses",
        sa.Column("job_status_id", sa.String(), nullable=False),
        sa.Column("job_status_title", sa.String(), nullable=False),
        sa.Column("job_status_color_code", sa.String(length=16), nullable=True),
        sa.Column("job_status_order", sa.Integer(), nullable=True),
        _flag("status", True),
        _created_at(),
        sa.PrimaryKeyConstraint("job_status_id"),
        sa.UniqueConstraint("job_status_title"),
    )

    # Tenants.
    op.create_table(
        "companies",
        sa.Column("company_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("phone", sa.String(), nullable=False),
        sa.Column("gst", sa.String(), nullable=True),
        sa.Column("logo", sa.String(), nullable=True),
        sa.Column("address_1", sa.String(), nullable=True),
        sa.Column("country_id", sa.Integer(), nullable=True),
        sa.Column("state_id", sa.String(), nullable=True),
        sa.Column("city", sa.String(), nullable=True),
        sa.Column("postal_code", sa.String(), nullable=True),
        sa.Column("lat", sa.Numeric(10, 7), nullable=True),
        sa.Column("lng", sa.Numeric(10, 7), nullable=True),
        sa.Column("subscription_id", sa.String(), nullable=True),
        sa.Column("no_of_users", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("subscription_start_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("subscription_end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("subscription_amount_per_user", sa.Numeric(10, 2), nullable=True),
        sa.Column("remarks", sa.Text(), nullable=True),
        sa.Column("theme_color", sa.String(), nullable=True),
        _flag("status", True),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["subscription_id"], ["subscription_types.subscription_id"]),
        sa.PrimaryKeyConstraint("company_id"),
        sa.UniqueConstraint("email"),
        sa.UniqueConstraint("phone"),
    )

    # Company-scoped master data.
    op.create_table(
        "regions",
        sa.Column("region_id", sa.String(), nullable=False),
        sa.Column("company_id", sa.String(), nullable=False),
        sa.Column("region_name", sa.String(), nullable=False),
        sa.Column(
            "pincodes",
            sa.JSON().with_variant(postgresql.JSONB(), "postgresql"),
            nullable=True,
        ),
        sa.Column("country_id", sa.Integer(), nullable=True),
        sa.Column("state_id", sa.String(), nullable=True),
        sa.Column("district_id", sa.String(), nullable=True),
        _flag("status", True),
        _created_at(),
        sa.ForeignKeyConstraint(["company_id"], ["companies.company_id"]),
        sa.PrimaryKeyConstraint("region_id"),
        sa.UniqueConstraint("company_id", "region_name", name="uq_regions_company_name"),
    )
    op.create_index("ix_regions_company_id", "regions", ["company_id"])
    op.create_table(
        "shifts",
        sa.Column("shift_id", sa.String(), nullable=False),
        sa.Column("company_id", sa.String(), nullable=False),
        sa.Column("shift_name", sa.String(), nullable=False),
        sa.Column("shift_start_time", sa.String(), nullable=False),
        sa.Column("shift_end_time", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        _flag("status", True),
        _created_at(),
        sa.ForeignKeyConstraint(["company_id"], ["companies.company_id"]),
        sa.PrimaryKeyConstraint("shift_id"),
        sa.UniqueConstraint(
            "company_id",
            "shift_name",
            "shift_start_time",
            "shift_end_time",
            name="uq_shifts_company_name_window",
        ),
    )
    op.create_index("ix_shifts_company_id", "shifts", ["company_id"])
    op.create_table(
        "work_types",
        sa.Column("worktype_id", sa.String(), nullable=False),
        sa.Column("company_id", sa.String(), nullable=False),
        sa.Column("worktype_name", sa.String(), nullable=False),
        sa.Column("worktype_description", sa.Text(), nullable=True),
        _flag("status", True),
        _created_at(),
        sa.ForeignKeyConstraint(["company_id"], ["companies.company_id"]),
        sa.PrimaryKeyConstraint("worktype_id"),
        sa.UniqueConstraint("company_id", "worktype_name", name="uq_work_types_company_name"),
    )
    op.create_index("ix_work_types_company_id", "work_types", ["company_id"])
    op.create_table(
        "job_types",
        sa.Column("jobtype_id", sa.String(), nullable=False),
        sa.Column("company_id", sa.String(), nullable=False),
        sa.Column("worktype_id", sa.String(), nullable=True),
        sa.Column("jobtype_name", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        _flag("status", True),
        _created_at(),
        sa.ForeignKeyConstraint(["company_id"], ["companies.company_id"]),
        sa.ForeignKeyConstraint(["worktype_id"], ["work_types.worktype_id"]),
        sa.PrimaryKeyConstraint("jobtype_id"),
        sa.UniqueConstraint(
            "company_id", "worktype_id", "jobtype_name", name="uq_job_types_company_worktype_name"
        ),
    )
    op.create_index("ix_job_types_company_id", "job_types", ["company_id"])
    op.create_index("ix_job_types_worktype_id", "job_types", ["worktype_id"])

    # People and customers.
    op.create_table(
        "vendors",
        sa.Column("vendor_id", sa.String(), nullable=False),
        sa.Column("company_id", sa.String(), nullable=False),
        sa.Column("vendor_name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("address_1", sa.String(), nullable=True),
        sa.Column("country_id", sa.Integer(), nullable=True),
        sa.Column("state_id", sa.String(), nullable=True),
        sa.Column("region_id", sa.String(), nullable=True),
        sa.Column("postal_code", sa.String(), nullable=True),
        _flag("status", True),
        _created_at(),
        sa.ForeignKeyConstraint(["company_id"], ["companies.company_id"]),
        sa.ForeignKeyConstraint(["region_id"], ["regions.region_id"]),
        sa.PrimaryKeyConstraint("vendor_id"),
        sa.UniqueConstraint("company_id", "email", name="uq_vendors_company_email"),
    )
    op.create_index("ix_vendors_company_id", "vendors", ["company_id"])
    op.create_table(
        "users",
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("company_id", sa.String(), nullable=True),
        sa.Column("role_id", sa.String(), nullable=False),
        sa.Column("vendor_id", sa.String(), nullable=True),
        sa.Column("supervisor_id", sa.String(), nullable=True),
        sa.Column("shift_id", sa.String(), nullable=True),
        sa.Column("region_id", sa.String(), nullable=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("city", sa.String(), nullable=True),
        sa.Column("address_1", sa.String(), nullable=True),
        sa.Column("postal_code", sa.String(), nullable=True),
        _flag("status", True),
        _created_at(),
        sa.ForeignKeyConstraint(["company_id"], ["companies.company_id"]),
        sa.ForeignKeyConstraint(["role_id"], ["roles.role_id"]),
        sa.ForeignKeyConstraint(["vendor_id"], ["vendors.vendor_id"]),
        sa.ForeignKeyConstraint(["supervisor_id"], ["users.user_id"]),
        sa.ForeignKeyConstraint(["shift_id"], ["shifts.shift_id"]),
        sa.ForeignKeyConstraint(["region_id"], ["regions.region_id"]),
        sa.PrimaryKeyConstraint("user_id"),
        sa.UniqueConstraint("email"),
    )
    op.create_index("ix_users_company_id", "users", ["company_id"])
    op.create_index("ix_users_role_id", "users", ["role_id"])
    op.create_table(
        "clients",
        sa.Column("client_id", sa.String(), nullable=False),
        sa.Column("company_id", sa.String(), nullable=False),
        sa.Column("business_type_id", sa.String(), nullable=True),
        sa.Column("first_name", sa.String(), nullable=False),
        sa.Column("last_name", sa.String(), nullable=True),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("address_1", sa.String(), nullable=True),
        sa.Column("city", sa.String(), nullable=True),
        sa.Column("postal_code", sa.String(), nullable=True),
        sa.Column("country_id", sa.Integer(), nullable=True),
        sa.Column("state_id", sa.String(), nullable=True),
        _flag("available_status", True),
        _created_at(),
        sa.ForeignKeyConstraint(["company_id"], ["companies.company_id"]),
        sa.ForeignKeyConstraint(["business_type_id"], ["business_types.business_type_id"]),
        sa.PrimaryKeyConstraint("client_id"),
    )
    op.create_index("ix_clients_company_id", "clients", ["company_id"])

    # Jobs and their status trail.
    op.create_table(
        "jobs",
        sa.Column("job_id", sa.String(), nullable=False),
        sa.Column("company_id", sa.String(), nullable=False),
        sa.Column("client_id", sa.String(), nullable=False),
        sa.Column("reference_number", sa.String(), nullable=False),
        sa.Column("worktype_id", sa.String(), nullable=True),
        sa.Column("jobtype_id", sa.String(), nullable=True),
        sa.Column("job_description", sa.Text(), nullable=True),
        sa.Column("estimated_duration", sa.Integer(), nullable=True),
        sa.Column("estimated_days", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("estimated_hours", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("estimated_minutes", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("scheduled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("supervisor_id", sa.String(), nullable=True),
        sa.Column("technician_id", sa.String(), nullable=True),
        sa.Column("now_id", sa.String(), nullable=True),
        sa.Column("job_status_id", sa.String(), nullable=True),
        _flag("job_assigned", False),
        _created_at(),
        sa.ForeignKeyConstraint(["company_id"], ["companies.company_id"]),
        sa.ForeignKeyConstraint(["client_id"], ["clients.client_id"]),
        sa.ForeignKeyConstraint(["worktype_id"], ["work_types.worktype_id"]),
        sa.ForeignKeyConstraint(["jobtype_id"], ["job_types.jobtype_id"]),
        sa.ForeignKeyConstraint(["supervisor_id"], ["users.user_id"]),
        sa.ForeignKeyConstraint(["technician_id"], ["users.user_id"]),
        sa.ForeignKeyConstraint(["now_id"], ["nature_of_work.now_id"]),
        sa.ForeignKeyConstraint(["job_status_id"], ["job_statuses.job_status_id"]),
        sa.PrimaryKeyConstraint("job_id"),
        sa.UniqueConstraint("reference_number"),
    )
    op.create_index("ix_jobs_company_id", "jobs", ["company_id"])
    op.create_index("ix_jobs_client_id", "jobs", ["client_id"])
    op.create_table(
        "job_status_history",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("job_id", sa.String(), nullable=False),
        sa.Column("job_status_id", sa.String(), nullable=True),
        _flag("is_completed", False),
        _created_at(),
        sa.ForeignKeyConstraint(["job_id"], ["jobs.job_id"]),
        sa.ForeignKeyConstraint(["job_status_id"], ["job_statuses.job_status_id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_job_status_history_job_id", "job_status_history", ["job_id"])


def downgrade() -> None:
    op.drop_index("ix_job_status_history_job_id", table_name="job_status_history")
    op.drop_table("job_status_history")
    op.drop_index("ix_jobs_client_id", table_name="jobs")
    op.drop_index("ix_jobs_company_id", table_name="jobs")
    op.drop_table("jobs")
    op.drop_index("ix_clients_company_id", table_name="clients")
    op.drop_table("clients")
    op.drop_index("ix_users_role_id", table_name="users")
    op.drop_index("ix_users_company_id", table_name="users")
    op.drop_table("users")
    op.drop_index("ix_vendors_company_id", table_name="vendors")
    op.drop_table("vendors")
    op.drop_index("ix_job_types_worktype_id", table_name="job_types")
    op.drop_index("ix_job_types_company_id", table_name="job_types")
    op.drop_table("job_types")
    op.drop_index("ix_work_types_company_id", table_name="work_types")
    op.drop_table("work_types")
    op.drop_index("ix_shifts_company_id", table_name="shifts")
    op.drop_table("shifts")
    op.drop_index("ix_regions_company_id", table_name="regions")
    op.drop_table("regions")
    op.drop_table("companies")
    op.drop_table("job_statuses")
    op.drop_table("nature_of_work")
    op.drop_table("business_types")
    op.drop_table("subscription_types")
    op.drop_index("ix_role_screen_permissions_screen_id", table_name="role_screen_permissions")
    op.drop_index("ix_role_screen_permissions_role_id", table_name="role_screen_permissions")
    op.drop_table("role_screen_permissions")
    op.drop_table("screens")
    op.drop_table("roles")
