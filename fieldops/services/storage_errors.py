from __future__ import annotations

import logging
import re

from sqlalchemy.exc import DBAPIError, SQLAlchemyError, StatementError

from fieldops.core.errors import ApiError, BadRequest, Conflict, InternalError


logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
NOT_NULL_VIOLATION = "23502"
INVALID_TEXT_REPRESENTATION = "22P02"
NUMERIC_VALUE_OUT_OF_RANGE = "22003"
UNDEFINED_COLUMN = "42703"

# SQLite reports extended result names instead of SQLSTATE codes.
_SQLITE_CODES: dict[str, str] = {
    "SQLITE_CONSTRAINT_UNIQUE": UNIQUE_VIOLATION,
    "SQLITE_CONSTRAINT_PRIMARYKEY": UNIQUE_VIOLATION,
    "SQLITE_CONSTRAINT_FOREIGNKEY": FOREIGN_KEY_VIOLATION,
    "SQLITE_CONSTRAINT_NOTNULL": NOT_NULL_VIOLATION,
}

# Message fallbacks for drivers that expose neither.
_MESSAGE_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"unique constraint|duplicate key", re.I), UNIQUE_VIOLATION),
    (re.compile(r"foreign key constraint", re.I), FOREIGN_KEY_VIOLATION),
    (re.compile(r"not null constraint|null value in column", re.I), NOT_NULL_VIOLATION),
    (re.compile(r"invalid input syntax", re.I), INVALID_TEXT_REPRESENTATION),
    (re.compile(r"numeric field overflow|out of range", re.I), NUMERIC_VALUE_OUT_OF_RANGE),
    (re.compile(r"no such column|column .* does not exist", re.I), UNDEFINED_COLUMN),
)

_PG_COLUMN = re.compile(r'column "([^"]+)"', re.I)
_SQLITE_COLUMN = re.compile(r"NOT NULL constraint failed: \w+\.(\w+)", re.I)


def storage_error_code(exc: BaseException) -> str | None:
    # Resolve a SQLSTATE-style code from the wrapped driver exception.
    orig = getattr(exc, "orig", None)
    for candidate in (orig, getattr(orig, "__cause__", None)):
        if candidate is None:
            continue
        code = getattr(candidate, "sqlstate", None) or getattr(candidate, "pgcode", None)
        if code:
            return str(code)
        sqlite_name = getattr(candidate, "sqlite_errorname", None)
        if sqlite_name in _SQLITE_CODES:
            return _SQLITE_CODES[sqlite_name]
    message = str(orig if orig is not None else exc)
    for pattern, code in _MESSAGE_PATTERNS:
        if pattern.search(message):
            return code
    return None


def is_unique_violation(exc: BaseException) -> bool:
    return isinstance(exc, DBAPIError) and storage_error_code(exc) == UNIQUE_VIOLATION


def is_fk_violation(exc: BaseException) -> bool:
    return isinstance(exc, DBAPIError) and storage_error_code(exc) == FOREIGN_KEY_VIOLATION


def humanize_field(field: str) -> str:
    return field[:1].upper() + field[1:].replace("_", " ")


def _not_null_field(exc: BaseException) -> str | None:
    message = str(getattr(exc, "orig", None) or exc)
    match = _SQLITE_COLUMN.search(message) or _PG_COLUMN.search(message)
    return match.group(1) if match else None


def translate_storage_error(
    exc: SQLAlchemyError,
    *,
    resource: str = "Record",
    operation: str = "write",
) -> ApiError:
    """Map a storage-layer failure onto the client-facing error taxonomy.

    Raw driver messages never reach the caller; unrecognized failures become a
    generic ``InternalError`` and are logged with the original traceback.
    """
    code = storage_error_code(exc) if isinstance(exc, DBAPIError) else None
    if code == UNIQUE_VIOLATION:
        error: ApiError = Conflict(f"{resource} already exists", code="UNIQUE_VIOLATION")
    elif code == FOREIGN_KEY_VIOLATION:
        if operation == "delete":
            error = Conflict(
                "Cannot delete: record is referenced by other data", code="FK_CONSTRAINT_VIOLATION"
            )
        else:
            error = Conflict(
                "Operation violates a foreign key constraint", code="FK_CONSTRAINT_VIOLATION"
            )
    elif code == NOT_NULL_VIOLATION:
        field = _not_null_field(exc) or "field"
        message = f"{humanize_field(field)} is required"
        error = BadRequest(message, code="NOT_NULL_VIOLATION", errors={field: message})
    elif code == INVALID_TEXT_REPRESENTATION:
        error = BadRequest("Invalid value for field type", code="INVALID_TEXT_REPRESENTATION")
    elif code == NUMERIC_VALUE_OUT_OF_RANGE:
        error = BadRequest("Numeric value out of range", code="NUMERIC_OUT_OF_RANGE")
    elif code == UNDEFINED_COLUMN:
        error = BadRequest("Invalid column referenced in query", code="UNDEFINED_COLUMN")
    elif code is not None and code.startswith("22"):
        # Remaining data exceptions are malformed client values.
        error = BadRequest("Invalid value for field type", code="INVALID_VALUE")
    elif isinstance(exc, StatementError) and isinstance(exc.orig, (TypeError, ValueError)):
        # Bind-time type errors raised before the statement reaches the database.
        error = BadRequest("Invalid value for field type", code="INVALID_VALUE")
    else:
        logger.error("storage_error_unclassified resource=%s operation=%s", resource, operation, exc_info=exc)
        return InternalError("Internal server error")
    logger.info(
        "storage_error_translated resource=%s operation=%s code=%s status=%s",
        resource,
        operation,
        error.code,
        error.status_code,
    )
    return error
