from __future__ import annotations

import os
import tempfile
from pathlib import Path

# Point settings at a throwaway SQLite file before any fieldops module builds the engine.
_DB_PATH = Path(tempfile.gettempdir()) / f"fieldops-tests-{os.getpid()}.db"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_PATH}"
os.environ["JWT_SECRET"] = "fieldops-test-secret-with-enough-length"
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest  # noqa: E402

from fieldops.domain.models import Base  # noqa: E402
from fieldops.persistence.db import engine  # noqa: E402


@pytest.fixture(autouse=True)
async def fresh_schema() -> None:
    # Every test starts from an empty schema with foreign keys enforced.
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    # Dispose the async engine to prevent cross-loop connection reuse between tests.
    await engine.dispose()


def pytest_sessionfinish(session, exitstatus) -> None:
    _DB_PATH.unlink(missing_ok=True)
