from __future__ import annotations

import re

import pytest

from fieldops.core.errors import BadRequest
from fieldops.domain.models import Job, Role
from fieldops.domain.resources import ResourceDescriptor
from fieldops.services.policies import (
    CompanyPolicy,
    NamedMasterPolicy,
    RegionPolicy,
    RolePolicy,
    _derive_duration,
    generate_reference_number,
    normalize_pincode,
)


def test_contact_normalization() -> None:
    body = {"name": "  Acme  ", "email": " Ops@Acme.COM ", "phone": "+91 (98) 765-43210", "gst": " 29abc "}
    CompanyPolicy().normalize(body, "create")
    assert body == {"name": "Acme", "email": "ops@acme.com", "phone": "919876543210", "gst": "29ABC"}


def test_region_pincodes_are_compacted() -> None:
    body = {"region_name": " North ", "pincodes": [" 560 001", "", "ab12 "]}
    RegionPolicy().normalize(body, "create")
    assert body == {"region_name": "North", "pincodes": ["560001", "AB12"]}
    assert normalize_pincode(" k a 1 ") == "KA1"


def test_region_pincodes_must_be_a_list_of_codes() -> None:
    policy = RegionPolicy()
    for pincodes in ("560001", {"code": "560001"}, [True], [["560001"]]):
        body = {"region_name": "North", "pincodes": pincodes}
        policy.normalize(body, "create")
        with pytest.raises(BadRequest) as excinfo:
            policy._validate_pincodes(body)
        assert excinfo.value.errors == {"pincodes": "Expected a list of pincodes"}

    body = {"region_name": "North", "pincodes": [560001, " 560 002"]}
    policy.normalize(body, "create")
    policy._validate_pincodes(body)
    assert body["pincodes"] == ["560001", "560002"]


def test_role_slug_is_lowercased() -> None:
    body = {"role_name": " Dispatcher ", "role_slug": " Dispatcher "}
    RolePolicy().normalize(body, "create")
    assert body == {"role_name": "Dispatcher", "role_slug": "dispatcher"}


def test_named_master_duplicate_lookup_requires_every_key() -> None:
    policy = NamedMasterPolicy("worktype_id", "jobtype_name", tenant_field="company_id")
    body = {"company_id": "c1", "worktype_id": "w1", "jobtype_name": "Install"}
    assert policy.duplicate_lookup(None, body) == body
    assert policy.duplicate_lookup(None, {"company_id": "c1", "jobtype_name": "Install"}) is None


def test_duration_is_derived_in_minutes() -> None:
    body = {"estimated_days": 1, "estimated_hours": 2, "estimated_minutes": 30}
    _derive_duration(body)
    assert body["estimated_duration"] == 24 * 60 + 150

    existing = Job(estimated_days=0, estimated_hours=3, estimated_minutes=0)
    body = {"estimated_minutes": 15}
    _derive_duration(body, existing)
    assert body["estimated_duration"] == 195

    untouched: dict = {}
    _derive_duration(untouched)
    assert untouched == {}

    with pytest.raises(BadRequest):
        _derive_duration({"estimated_hours": -1})


def test_reference_number_shape() -> None:
    reference = generate_reference_number()
    assert re.fullmatch(r"JOB-\d{13}-[0-9A-F]{6}", reference)
    assert generate_reference_number() != reference


def test_descriptor_rejects_unknown_fields() -> None:
    with pytest.raises(ValueError):
        ResourceDescriptor(model=Role, screen="Roles", path="roles", search_fields=("nickname",))
    with pytest.raises(ValueError):
        # Roles carry no company_id, so they cannot be tenant-scoped.
        ResourceDescriptor(model=Role, screen="Roles", path="roles", tenant_scoped=True)
