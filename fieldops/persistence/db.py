from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from fieldops.core.config import get_settings


settings = get_settings()
_engine_kwargs: dict[str, Any] = {"pool_pre_ping": True}
_is_sqlite = settings.database_url.startswith("sqlite")
# Configure bounded asyncpg pools for predictable latency under load.
if not _is_sqlite:
    _engine_kwargs["pool_size"] = max(1, int(settings.api_db_pool_size))
    _engine_kwargs["max_overflow"] = max(0, int(settings.api_db_max_overflow))
    _engine_kwargs["pool_timeout"] = 30
    _engine_kwargs["pool_recycle"] = 1800
    if settings.api_db_statement_timeout_ms > 0:
        _engine_kwargs["connect_args"] = {
            "server_settings": {"statement_timeout": str(int(settings.api_db_statement_timeout_ms))}
        }
engine = create_async_engine(settings.database_url, **_engine_kwargs)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False)


if _is_sqlite:

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
        # SQLite ignores FK constraints unless enabled per connection.
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


@asynccontextmanager
async def get_session() -> AsyncSession:
    async with SessionLocal() as session:
        yield session
