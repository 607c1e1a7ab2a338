from __future__ import annotations

from fieldops.domain.models import (
    BusinessType,
    Client,
    Company,
    Job,
    JobStatus,
    JobStatusHistory,
    JobType,
    NatureOfWork,
    Region,
    Role,
    Shift,
    SubscriptionType,
    User,
    Vendor,
    WorkType,
)
from fieldops.domain.resources import ResourceDescriptor
from fieldops.services.policies import (
    ClientPolicy,
    CompanyPolicy,
    JobPolicy,
    NamedMasterPolicy,
    RegionPolicy,
    RolePolicy,
    ShiftPolicy,
    UserPolicy,
    VendorPolicy,
)


# ---- /admin ----

COMPANIES = ResourceDescriptor(
    model=Company,
    screen="Company",
    path="companies",
    search_fields=("name", "email", "phone", "gst", "city"),
    exact_fields=("country_id", "state_id", "subscription_id", "status"),
    # The tenant itself; only super admins should hold this screen.
    tenant_scoped=False,
    tenant_field=None,
    policy=CompanyPolicy(),
)

VENDORS = ResourceDescriptor(
    model=Vendor,
    screen="Vendor / Contractor",
    path="vendors",
    search_fields=("vendor_name", "email", "phone"),
    exact_fields=("company_id", "country_id", "state_id", "region_id"),
    policy=VendorPolicy(),
)

USERS = ResourceDescriptor(
    model=User,
    screen="Technician",
    path="users",
    search_fields=("name", "email", "phone", "city"),
    exact_fields=("company_id", "role_id", "vendor_id", "shift_id", "region_id", "supervisor_id"),
    policy=UserPolicy(),
)

CLIENTS = ResourceDescriptor(
    model=Client,
    screen="Clients/Customer",
    path="clients",
    search_fields=("first_name", "last_name", "email", "phone", "city"),
    exact_fields=("company_id", "business_type_id", "country_id", "state_id"),
    status_field="available_status",
    policy=ClientPolicy(),
)

# ---- /masters ----

NATURE_OF_WORK = ResourceDescriptor(
    model=NatureOfWork,
    screen="Settings",
    path="nature-of-work",
    search_fields=("now_name",),
    status_field="now_status",
    tenant_scoped=False,
    tenant_field=None,
    policy=NamedMasterPolicy("now_name"),
)

JOB_STATUSES = ResourceDescriptor(
    model=JobStatus,
    screen="Manage Job",
    path="job-statuses",
    search_fields=("job_status_title",),
    tenant_scoped=False,
    tenant_field=None,
    policy=NamedMasterPolicy("job_status_title"),
)

SUBSCRIPTION_TYPES = ResourceDescriptor(
    model=SubscriptionType,
    screen="Settings",
    path="subscription-types",
    search_fields=("subscription_title",),
    status_field="subscription_status",
    tenant_scoped=False,
    tenant_field=None,
    policy=NamedMasterPolicy("subscription_title"),
)

BUSINESS_TYPES = ResourceDescriptor(
    model=BusinessType,
    screen="Settings",
    path="business-types",
    search_fields=("business_type_name",),
    tenant_scoped=False,
    tenant_field=None,
    policy=NamedMasterPolicy("business_type_name"),
)

WORK_TYPES = ResourceDescriptor(
    model=WorkType,
    screen="Work Type",
    path="work-types",
    search_fields=("worktype_name", "worktype_description"),
    # Super admins filter by company; everyone else is scoped automatically.
    exact_fields=("status", "company_id"),
    policy=NamedMasterPolicy("worktype_name", tenant_field="company_id"),
)

JOB_TYPES = ResourceDescriptor(
    model=JobType,
    screen="Job Type",
    path="job-types",
    search_fields=("jobtype_name", "description"),
    exact_fields=("status", "company_id", "worktype_id"),
    policy=NamedMasterPolicy("worktype_id", "jobtype_name", tenant_field="company_id"),
)

REGIONS = ResourceDescriptor(
    model=Region,
    screen="Region",
    path="regions",
    search_fields=("region_name",),
    exact_fields=("status", "company_id", "country_id", "state_id", "district_id"),
    policy=RegionPolicy(),
)

SHIFTS = ResourceDescriptor(
    model=Shift,
    screen="Shift",
    path="shifts",
    search_fields=("shift_name", "description"),
    exact_fields=("status", "company_id"),
    policy=ShiftPolicy(),
)

ROLES = ResourceDescriptor(
    model=Role,
    screen="Roles",
    path="roles",
    search_fields=("role_name", "role_slug"),
    exact_fields=("status",),
    tenant_scoped=False,
    tenant_field=None,
    policy=RolePolicy(),
)

# ---- /jobs ----

JOBS = ResourceDescriptor(
    model=Job,
    screen="Manage Job",
    path="jobs",
    search_fields=("reference_number", "job_description"),
    exact_fields=(
        "company_id",
        "client_id",
        "worktype_id",
        "jobtype_id",
        "supervisor_id",
        "technician_id",
        "now_id",
        "job_status_id",
    ),
    status_field=None,
    default_sort="created_at",
    cascade=((JobStatusHistory, "job_id"),),
    policy=JobPolicy(),
)


ADMIN_RESOURCES: tuple[ResourceDescriptor, ...] = (COMPANIES, VENDORS, USERS, CLIENTS)
MASTER_RESOURCES: tuple[ResourceDescriptor, ...] = (
    NATURE_OF_WORK,
    JOB_STATUSES,
    SUBSCRIPTION_TYPES,
    BUSINESS_TYPES,
    WORK_TYPES,
    JOB_TYPES,
    REGIONS,
    SHIFTS,
    ROLES,
)
