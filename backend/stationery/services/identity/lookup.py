"""Resolve identifiers of unknown provenance to entities."""

from typing import Any, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.interfaces import ORMOption
from sqlmodel import select

from stationery.models.base import IdentifiedEntity
from stationery.models.types import EntityRef, is_storage_key, parse_sequential_id

TEntity = TypeVar("TEntity", bound=IdentifiedEntity)

# Largest value a BIGINT id column can hold
_MAX_SEQUENTIAL_ID = 2**63 - 1


async def find_by_any_id(
    session: AsyncSession,
    model: type[TEntity],
    raw: Any,
    *options: ORMOption,
) -> TEntity | None:
    """Find the entity ``raw`` identifies, or None.

    Integers and strings of digits are looked up by sequential id, even when
    the string would also be a well-formed storage key. Anything else is
    looked up by storage key. Values that are neither return None.

    Usage:
        product = await find_by_any_id(session, Product, request_value)
        order = await find_by_any_id(session, Order, raw, selectinload(Order.line_items))
    """
    sequential_id = parse_sequential_id(raw)
    if sequential_id is not None:
        return await find_by_sequential_id(session, model, sequential_id, *options)
    if isinstance(raw, str):
        return await find_by_key(session, model, raw.strip(), *options)
    return None


async def find_by_sequential_id(
    session: AsyncSession,
    model: type[TEntity],
    entity_id: int,
    *options: ORMOption,
) -> TEntity | None:
    if entity_id > _MAX_SEQUENTIAL_ID:
        return None
    statement = select(model).where(model.id == entity_id).options(*options)
    result = await session.execute(statement)
    return result.scalars().first()


async def find_by_key(
    session: AsyncSession,
    model: type[TEntity],
    key: str,
    *options: ORMOption,
) -> TEntity | None:
    if not is_storage_key(key):
        return None
    statement = select(model).where(model.key == key).options(*options)
    result = await session.execute(statement)
    return result.scalars().first()


async def resolve_ref(
    session: AsyncSession,
    model: type[TEntity],
    ref: EntityRef | None,
    *options: ORMOption,
) -> TEntity | None:
    """Resolve a tagged reference. Dangling references resolve to None."""
    if ref is None:
        return None
    if ref.is_sequential:
        assert isinstance(ref.value, int)
        return await find_by_sequential_id(session, model, ref.value, *options)
    return await find_by_key(session, model, str(ref.value), *options)
