from __future__ import annotations

from typing import Any, Iterable, Sequence

from sqlalchemy import and_, delete, func, select, true
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from fieldops.services.list_query import primary_key_name


def combine(*predicates: ColumnElement[bool] | None) -> ColumnElement[bool]:
    # AND together every non-empty predicate fragment.
    parts = [predicate for predicate in predicates if predicate is not None]
    if not parts:
        return true()
    return and_(*parts)


async def count_rows(session: AsyncSession, model, where: ColumnElement[bool]) -> int:
    result = await session.execute(select(func.count()).select_from(model).where(where))
    return int(result.scalar_one())


async def list_rows(
    session: AsyncSession,
    model,
    *,
    where: ColumnElement[bool],
    order_by: Sequence[ColumnElement[Any]],
    limit: int,
    offset: int,
) -> list[Any]:
    result = await session.execute(
        select(model).where(where).order_by(*order_by).limit(limit).offset(offset)
    )
    return list(result.scalars().all())


async def find_and_count(
    session: AsyncSession,
    model,
    *,
    where: ColumnElement[bool],
    order_by: Sequence[ColumnElement[Any]],
    limit: int,
    offset: int,
) -> tuple[list[Any], int]:
    # The total ignores pagination so clients can compute page counts.
    total = await count_rows(session, model, where)
    rows = await list_rows(session, model, where=where, order_by=order_by, limit=limit, offset=offset)
    return rows, total


async def find_one(session: AsyncSession, model, where: ColumnElement[bool]) -> Any | None:
    result = await session.execute(select(model).where(where).limit(1))
    return result.scalars().first()


async def get_scoped(
    session: AsyncSession,
    model,
    record_id: str,
    scope: ColumnElement[bool] | None,
) -> Any | None:
    # Identity and tenant scope are matched together so foreign rows look absent.
    pk = getattr(model, primary_key_name(model))
    return await find_one(session, model, combine(pk == record_id, scope))


async def insert_row(session: AsyncSession, model, values: dict[str, Any]) -> Any:
    row = model(**values)
    session.add(row)
    await session.flush()
    return row


async def update_row(session: AsyncSession, row: Any, values: dict[str, Any]) -> Any:
    for key, value in values.items():
        setattr(row, key, value)
    await session.flush()
    return row


async def delete_row(
    session: AsyncSession,
    row: Any,
    *,
    cascade: Iterable[tuple[Any, str]] = (),
) -> None:
    # Dependents go first inside the caller's transaction; nothing commits here.
    model = type(row)
    record_id = getattr(row, primary_key_name(model))
    for dependent, foreign_key in cascade:
        await session.execute(delete(dependent).where(getattr(dependent, foreign_key) == record_id))
    await session.delete(row)
    await session.flush()
