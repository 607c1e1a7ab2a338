from __future__ import annotations

import pytest
from sqlalchemy.exc import DataError, IntegrityError, OperationalError

from fieldops.core.errors import BadRequest, Conflict, InternalError
from fieldops.domain.models import WorkType
from fieldops.persistence.db import SessionLocal
from fieldops.services.storage_errors import (
    is_fk_violation,
    is_unique_violation,
    translate_storage_error,
)
from fieldops.tests.utils.auth import create_company


class _DriverError(Exception):
    # Mimics a driver exception exposing a SQLSTATE code.
    def __init__(self, message: str, sqlstate: str | None = None) -> None:
        super().__init__(message)
        self.sqlstate = sqlstate


def _integrity(message: str, sqlstate: str | None) -> IntegrityError:
    return IntegrityError("INSERT ...", {}, _DriverError(message, sqlstate))


def test_unique_violation_becomes_conflict() -> None:
    error = translate_storage_error(
        _integrity("duplicate key value", "23505"), resource="WorkType", operation="create"
    )
    assert isinstance(error, Conflict)
    assert error.message == "WorkType already exists"
    assert error.code == "UNIQUE_VIOLATION"


def test_fk_violation_message_depends_on_operation() -> None:
    exc = _integrity("violates foreign key", "23503")
    assert is_fk_violation(exc)
    deleted = translate_storage_error(exc, operation="delete")
    assert isinstance(deleted, Conflict)
    assert deleted.message == "Cannot delete: record is referenced by other data"
    created = translate_storage_error(exc, operation="create")
    assert created.message == "Operation violates a foreign key constraint"


def test_not_null_violation_names_the_field() -> None:
    exc = _integrity('null value in column "worktype_name" violates not-null constraint', "23502")
    error = translate_storage_error(exc)
    assert isinstance(error, BadRequest)
    assert error.errors == {"worktype_name": "Worktype name is required"}


def test_data_errors_are_client_errors() -> None:
    exc = DataError("SELECT ...", {}, _DriverError("invalid input syntax for type uuid", "22P02"))
    error = translate_storage_error(exc)
    assert isinstance(error, BadRequest)
    assert error.status_code == 400


def test_message_fallback_without_codes() -> None:
    exc = _integrity("UNIQUE constraint failed: roles.role_slug", None)
    assert is_unique_violation(exc)


def test_unknown_failures_stay_generic() -> None:
    exc = OperationalError("SELECT ...", {}, _DriverError("connection reset by peer"))
    error = translate_storage_error(exc)
    assert isinstance(error, InternalError)
    assert error.message == "Internal server error"
    assert "connection" not in error.message


@pytest.mark.asyncio
async def test_real_sqlite_unique_violation_is_recognized() -> None:
    company_id = await create_company()
    async with SessionLocal() as session:
        session.add(WorkType(company_id=company_id, worktype_name="Plumbing"))
        await session.commit()
    async with SessionLocal() as session:
        session.add(WorkType(company_id=company_id, worktype_name="Plumbing"))
        with pytest.raises(IntegrityError) as excinfo:
            await session.commit()
        await session.rollback()
    assert is_unique_violation(excinfo.value)
    assert isinstance(translate_storage_error(excinfo.value), Conflict)
