"""Named sequence counters handing out unique, increasing integers."""

from collections.abc import Callable
from typing import Any

import structlog
from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from stationery.config import settings
from stationery.models.sequence import SequenceCounter
from stationery.services.sequences.exceptions import SequenceAllocationError

logger = structlog.get_logger(__name__)

# Dialects with INSERT ... ON CONFLICT DO UPDATE ... RETURNING
_UPSERT_INSERTS: dict[str, Callable[..., Any]] = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class SequenceCounterStore:
    """Atomic allocation from named counters.

    The store runs inside the caller's transaction: an allocation becomes
    durable when the session commits. Where the dialect supports upserts
    the increment is a single ``INSERT ... ON CONFLICT DO UPDATE ...
    RETURNING`` statement; elsewhere a compare-and-swap ``UPDATE`` is
    retried up to ``max_retries`` times.

    Usage:
        counters = SequenceCounterStore(session)
        product.id = await counters.allocate(SequenceName.PRODUCT)
        await session.commit()
    """

    def __init__(
        self,
        session: AsyncSession,
        *,
        initial_value: int | None = None,
        max_retries: int | None = None,
    ):
        self.session = session
        self.initial_value = settings.sequence_initial_value if initial_value is None else initial_value
        if self.initial_value < 1:
            raise ValueError(f"Sequence initial value must be positive, got {self.initial_value}")
        self.max_retries = settings.sequence_max_retries if max_retries is None else max_retries

    async def allocate(self, name: str) -> int:
        """Return a value no other allocation for ``name`` has returned or will return."""
        try:
            dialect = self.session.get_bind().dialect.name
            insert_fn = _UPSERT_INSERTS.get(dialect)
            if insert_fn is not None:
                value = await self._allocate_upsert(name, insert_fn)
            else:
                value = await self._allocate_compare_and_swap(name)
        except SQLAlchemyError as e:
            logger.error("Sequence allocation failed", sequence=name, error=str(e))
            raise SequenceAllocationError(name, str(e)) from e

        logger.debug("Allocated sequential id", sequence=name, value=value)
        return value

    async def _allocate_upsert(self, name: str, insert_fn: Callable[..., Any]) -> int:
        stmt = (
            insert_fn(SequenceCounter)
            .values(name=name, next_value=self.initial_value + 1)
            .on_conflict_do_update(
                index_elements=["name"],
                set_={"next_value": SequenceCounter.next_value + 1},
            )
            .returning(SequenceCounter.next_value)
        )
        result = await self.session.execute(stmt)
        next_value: int = result.scalar_one()
        return next_value - 1

    async def _allocate_compare_and_swap(self, name: str) -> int:
        for attempt in range(1, self.max_retries + 1):
            current = await self.peek(name)

            if current is None:
                try:
                    async with self.session.begin_nested():
                        self.session.add(SequenceCounter(name=name, next_value=self.initial_value + 1))
                    return self.initial_value
                except IntegrityError:
                    # Another caller created the row first
                    logger.warning("Sequence row created concurrently, retrying", sequence=name, attempt=attempt)
                    continue

            stmt = (
                update(SequenceCounter)
                .where(SequenceCounter.name == name, SequenceCounter.next_value == current)  # type: ignore[arg-type]
                .values(next_value=current + 1)
                .execution_options(synchronize_session=False)
            )
            result = await self.session.execute(stmt)
            if result.rowcount == 1:  # type: ignore[attr-defined]
                return current

            logger.warning(
                "Sequence compare-and-swap conflict, retrying",
                sequence=name,
                attempt=attempt,
                max_retries=self.max_retries,
            )

        raise SequenceAllocationError(name, f"compare-and-swap retry budget of {self.max_retries} exhausted")

    async def peek(self, name: str) -> int | None:
        """Next value ``name`` would hand out, or None if it was never allocated from."""
        stmt = select(SequenceCounter.next_value).where(SequenceCounter.name == name)  # type: ignore[arg-type]
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def reset(self, name: str, value: int) -> None:
        """Set the next value of ``name`` directly.

        Administrative only. Running this while allocations for the same
        name are in flight can hand out duplicates.
        """
        if value < 1:
            raise ValueError(f"Sequence value must be positive, got {value}")
        # Allocations bypass the identity map, so reload before comparing
        counter = await self.session.get(SequenceCounter, name, populate_existing=True)
        if counter is None:
            self.session.add(SequenceCounter(name=name, next_value=value))
        else:
            counter.next_value = value
        await self.session.flush()
        logger.info("Sequence reset", sequence=name, next_value=value)
