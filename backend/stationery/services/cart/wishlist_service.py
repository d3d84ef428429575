"""Wishlist service."""

from dataclasses import dataclass
from typing import Any

import structlog
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from stationery.models.cart import WishlistEntry
from stationery.models.catalog import Product
from stationery.models.references import get_ref, set_ref
from stationery.models.types import EntityRef, parse_sequential_id
from stationery.models.user import User
from stationery.services.cart.exceptions import AlreadyInWishlist, NotInWishlist
from stationery.services.catalog.exceptions import ProductNotFound
from stationery.services.identity.lookup import find_by_any_id, resolve_ref

logger = structlog.get_logger(__name__)


@dataclass
class WishlistLine:
    entry: WishlistEntry
    product: Product | None


class WishlistService:
    """Service for wishlist operations.

    Products may be given by sequential id or storage key; entries always
    store the sequential id.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, user: User, raw_product_id: Any) -> WishlistEntry:
        assert user.id is not None
        product = await find_by_any_id(self.session, Product, raw_product_id)
        if not product:
            raise ProductNotFound()
        assert product.id is not None

        if await self._find_entry(user, product.id):
            raise AlreadyInWishlist("Product already in wishlist")

        entry = WishlistEntry()
        set_ref(entry, "user", EntityRef.sequential(user.id))
        set_ref(entry, "product", EntityRef.sequential(product.id))
        self.session.add(entry)
        try:
            await self.session.commit()
        except IntegrityError as e:
            # A concurrent add for the same product won
            await self.session.rollback()
            raise AlreadyInWishlist("Product already in wishlist") from e
        logger.info("Added to wishlist", user_id=user.id, product_id=product.id)
        return entry

    async def remove(self, user: User, raw_product_id: Any) -> None:
        """Remove a product. Digits are taken as the id even if the product no longer exists."""
        product_id = await self._saved_product_id(raw_product_id)
        entry = await self._find_entry(user, product_id) if product_id is not None else None
        if not entry:
            raise NotInWishlist()
        await self.session.delete(entry)
        await self.session.commit()

    async def contains(self, user: User, raw_product_id: Any) -> bool:
        """Whether the product is saved. Unknown or malformed ids are simply not saved."""
        product_id = await self._saved_product_id(raw_product_id)
        return product_id is not None and await self._find_entry(user, product_id) is not None

    async def count(self, user: User) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(WishlistEntry).where(WishlistEntry.user_id == user.id)
        )
        return result.scalar() or 0

    async def clear(self, user: User) -> int:
        """Remove every saved product. Returns how many entries were removed."""
        result = await self.session.execute(select(WishlistEntry).where(WishlistEntry.user_id == user.id))
        entries = result.scalars().all()
        for entry in entries:
            await self.session.delete(entry)
        await self.session.commit()
        removed = len(entries)
        logger.info("Cleared wishlist", user_id=user.id, removed=removed)
        return removed

    async def list_entries(self, user: User) -> list[WishlistLine]:
        assert user.id is not None
        statement = (
            select(WishlistEntry)
            .where(WishlistEntry.user_id == user.id)
            .order_by(WishlistEntry.created_at.desc())  # type: ignore[attr-defined]
        )
        result = await self.session.execute(statement)
        lines = []
        for entry in result.scalars().all():
            product = await resolve_ref(self.session, Product, get_ref(entry, "product"))
            lines.append(WishlistLine(entry=entry, product=product))
        return lines

    async def _saved_product_id(self, raw_product_id: Any) -> int | None:
        """Digits are taken as the id as-is, so entries for deleted products still match."""
        product_id = parse_sequential_id(raw_product_id)
        if product_id is None:
            product = await find_by_any_id(self.session, Product, raw_product_id)
            product_id = product.id if product else None
        return product_id

    async def _find_entry(self, user: User, product_id: int) -> WishlistEntry | None:
        statement = select(WishlistEntry).where(
            WishlistEntry.user_id == user.id,
            WishlistEntry.product_id == product_id,
        )
        result = await self.session.execute(statement)
        return result.scalars().first()
