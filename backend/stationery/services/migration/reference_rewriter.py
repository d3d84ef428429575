"""Assign sequential ids to existing records and rewrite references to them.

Offline batch tool. It must run with no concurrent writers: it resets the
named counters and any allocation made by live traffic during the run can
collide with the ids assigned here.

Steps:
1. Reset every named counter to its initial value
2. Per entity type, assign ids (in creation order) to records lacking one,
   then move the counter one past the highest id in the table
3. Rewrite every reference still holding a storage key to the referenced
   entity's sequential id
4. Commit (or roll back everything on a dry run)

Re-running is safe: records that already have an id and references that
already hold one are left untouched.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Any

import structlog
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel, select

from stationery.models.base import IdentifiedEntity
from stationery.models.cart import CartItem, WishlistEntry
from stationery.models.catalog import Category, Product
from stationery.models.order import Order, OrderLineItem
from stationery.models.references import get_ref, set_ref
from stationery.models.types import EntityRef
from stationery.models.user import User
from stationery.services.identity.lookup import find_by_key
from stationery.services.sequences.counter_store import SequenceCounterStore

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ReferenceField:
    """A reference column pair and the entity type it points at."""

    model: type[SQLModel]
    name: str
    target: type[IdentifiedEntity]

    @property
    def label(self) -> str:
        return f"{self.model.__name__}.{self.name}"


IDENTIFIED_MODELS: tuple[type[IdentifiedEntity], ...] = (User, Product, Category, Order)

REFERENCE_FIELDS: tuple[ReferenceField, ...] = (
    ReferenceField(Order, "user", User),
    ReferenceField(Order, "institute", User),
    ReferenceField(OrderLineItem, "product", Product),
    ReferenceField(CartItem, "user", User),
    ReferenceField(CartItem, "product", Product),
    ReferenceField(WishlistEntry, "user", User),
    ReferenceField(WishlistEntry, "product", Product),
    ReferenceField(User, "verified_by", User),
)


@dataclass
class RewriteReport:
    """Counts per entity type / reference field."""

    assigned: Counter[str] = field(default_factory=Counter)
    rewritten: Counter[str] = field(default_factory=Counter)
    dangling: Counter[str] = field(default_factory=Counter)
    next_values: dict[str, int] = field(default_factory=dict)
    dry_run: bool = False

    @property
    def changed(self) -> bool:
        return bool(sum(self.assigned.values()) or sum(self.rewritten.values()))


class CrossReferenceRewriter:
    """Bring existing data onto sequential ids in a single transaction."""

    def __init__(
        self,
        session: AsyncSession,
        counters: SequenceCounterStore | None = None,
        *,
        dry_run: bool = False,
    ):
        self.session = session
        self.counters = counters or SequenceCounterStore(session)
        self.dry_run = dry_run
        self._key_to_id: dict[type[IdentifiedEntity], dict[str, int | None]] = {}

    async def run(self) -> RewriteReport:
        report = RewriteReport(dry_run=self.dry_run)
        logger.info("Starting sequential id migration", dry_run=self.dry_run)

        try:
            for model in IDENTIFIED_MODELS:
                await self.counters.reset(model.sequence_name, self.counters.initial_value)

            for model in IDENTIFIED_MODELS:
                await self._assign_ids(model, report)

            for ref_field in REFERENCE_FIELDS:
                await self._rewrite_references(ref_field, report)
        except Exception:
            await self.session.rollback()
            raise

        if self.dry_run:
            await self.session.rollback()
        else:
            await self.session.commit()

        logger.info(
            "Sequential id migration complete",
            assigned=dict(report.assigned),
            rewritten=dict(report.rewritten),
            dangling=dict(report.dangling),
            next_values=report.next_values,
            dry_run=self.dry_run,
        )
        return report

    async def _assign_ids(self, model: type[IdentifiedEntity], report: RewriteReport) -> None:
        name = model.sequence_name
        highest_result = await self.session.execute(select(func.max(model.id)))
        highest: int | None = highest_result.scalar()
        next_id = self.counters.initial_value if highest is None else max(highest + 1, self.counters.initial_value)

        statement = (
            select(model)
            .where(model.id.is_(None))  # type: ignore[union-attr]
            .order_by(model.created_at, model.key)  # type: ignore[arg-type]
        )
        result = await self.session.execute(statement)
        for entity in result.scalars().all():
            entity.id = next_id
            next_id += 1
            report.assigned[model.__name__] += 1
            logger.info("Assigned sequential id", entity=model.__name__, key=entity.key, id=entity.id)

        await self.session.flush()
        await self.counters.reset(name, next_id)
        report.next_values[str(name)] = next_id

    async def _rewrite_references(self, ref_field: ReferenceField, report: RewriteReport) -> None:
        legacy_column: Any = getattr(ref_field.model, f"{ref_field.name}_legacy_key")
        result = await self.session.execute(select(ref_field.model).where(legacy_column.is_not(None)))

        for row in result.scalars().all():
            ref = get_ref(row, ref_field.name)
            if ref is None or ref.is_sequential:
                continue

            target_id = await self._target_id(ref_field.target, str(ref.value))
            if target_id is None:
                report.dangling[ref_field.label] += 1
                logger.warning("Reference target not found", reference=ref_field.label, legacy_key=ref.value)
                continue

            set_ref(row, ref_field.name, EntityRef.sequential(target_id))
            report.rewritten[ref_field.label] += 1
            logger.info("Rewrote reference", reference=ref_field.label, legacy_key=ref.value, id=target_id)

        await self.session.flush()

    async def _target_id(self, model: type[IdentifiedEntity], key: str) -> int | None:
        cache = self._key_to_id.setdefault(model, {})
        if key not in cache:
            target = await find_by_key(self.session, model, key)
            cache[key] = target.id if target else None
        return cache[key]
