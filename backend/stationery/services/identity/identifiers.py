"""Creation of entities carrying both a storage key and a sequential id."""

from typing import TypeVar

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from stationery.models.base import IdentifiedEntity
from stationery.services.sequences.counter_store import SequenceCounterStore

logger = structlog.get_logger(__name__)

TEntity = TypeVar("TEntity", bound=IdentifiedEntity)


class IdentifierService:
    """Insert, allocate and stamp as one logical operation.

    The insert, the counter increment and the ``id`` write share one
    transaction, so a failure at any step leaves neither the entity nor a
    consumed id visible.
    """

    def __init__(self, session: AsyncSession, counters: SequenceCounterStore | None = None):
        self.session = session
        self.counters = counters or SequenceCounterStore(session)

    async def create_with_sequential_id(self, entity: TEntity, sequence_name: str | None = None) -> TEntity:
        """Persist ``entity`` with its sequential id assigned, then commit.

        Entities that already carry an ``id`` keep it; no second id is
        allocated for them.
        """
        name = sequence_name or type(entity).sequence_name
        try:
            self.session.add(entity)
            await self.session.flush()
            await self.ensure_sequential_id(entity, name)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            "Created entity",
            entity=type(entity).__name__,
            key=entity.key,
            id=entity.id,
            sequence=name,
        )
        return entity

    async def ensure_sequential_id(self, entity: IdentifiedEntity, sequence_name: str | None = None) -> int:
        """Stamp ``entity`` with the next id from its sequence unless it has one.

        Flushes but does not commit; the caller owns the transaction.
        """
        if entity.id is not None:
            return entity.id

        name = sequence_name or type(entity).sequence_name
        entity.id = await self.counters.allocate(name)
        await self.session.flush()
        return entity.id
