"""Shopping cart service.

Cart lines reference their owner and product by sequential id. A product
deleted after it was added leaves a line with no product details.
"""

from dataclasses import dataclass, field
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from stationery.models.base import utc_now
from stationery.models.cart import CartItem
from stationery.models.catalog import Product
from stationery.models.references import get_ref, set_ref
from stationery.models.types import EntityRef, parse_sequential_id
from stationery.models.user import User
from stationery.services.cart.exceptions import (
    CartItemNotFound,
    InsufficientStock,
    InvalidProductId,
    InvalidQuantity,
)
from stationery.services.catalog.exceptions import ProductNotFound
from stationery.services.identity.lookup import find_by_sequential_id, resolve_ref

logger = structlog.get_logger(__name__)


@dataclass
class CartLine:
    item: CartItem
    product: Product | None

    @property
    def line_total(self) -> float:
        return round(self.item.price * self.item.quantity, 2)


@dataclass
class CartView:
    lines: list[CartLine] = field(default_factory=list)

    @property
    def total(self) -> float:
        return round(sum(line.line_total for line in self.lines), 2)

    @property
    def item_count(self) -> int:
        return sum(line.item.quantity for line in self.lines)


def parse_product_id(raw: Any) -> int:
    """Product id from request input; must be a positive integer."""
    product_id = parse_sequential_id(raw)
    if product_id is None or product_id <= 0:
        raise InvalidProductId(f"Invalid product ID: {raw}")
    return product_id


class CartService:
    """Service for cart operations of a single user."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_items(self, user: User) -> list[CartItem]:
        assert user.id is not None
        statement = (
            select(CartItem)
            .where(CartItem.user_id == user.id)
            .order_by(CartItem.created_at, CartItem.key)  # type: ignore[arg-type]
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def get_cart(self, user: User) -> CartView:
        """Cart lines with their current product, resolved in one query where possible."""
        items = await self.get_items(user)
        product_ids = {item.product_id for item in items if item.product_id is not None}
        products: dict[int, Product] = {}
        if product_ids:
            result = await self.session.execute(select(Product).where(Product.id.in_(product_ids)))  # type: ignore[union-attr]
            products = {p.id: p for p in result.scalars().all() if p.id is not None}

        lines = []
        for item in items:
            if item.product_id is not None:
                product = products.get(item.product_id)
            else:
                product = await resolve_ref(self.session, Product, get_ref(item, "product"))
            lines.append(CartLine(item=item, product=product))
        return CartView(lines=lines)

    async def add_item(self, user: User, raw_product_id: Any, quantity: int = 1) -> CartItem:
        """Add ``quantity`` of a product, merging with an existing line."""
        assert user.id is not None
        if quantity < 1:
            raise InvalidQuantity("Quantity must be at least 1")

        product_id = parse_product_id(raw_product_id)
        product = await find_by_sequential_id(self.session, Product, product_id)
        if not product:
            raise ProductNotFound(f"Product not found with ID: {product_id}")

        item = await self._find_item(user, product_id)
        requested = quantity + (item.quantity if item else 0)
        if product.stock_quantity < requested:
            raise InsufficientStock(product.name, product.stock_quantity, requested)

        if item:
            item.quantity = requested
            item.updated_at = utc_now()
        else:
            item = CartItem(quantity=quantity, price=product.price)
            set_ref(item, "user", EntityRef.sequential(user.id))
            set_ref(item, "product", EntityRef.sequential(product_id))
            self.session.add(item)

        await self.session.commit()
        logger.info("Added to cart", user_id=user.id, product_id=product_id, quantity=item.quantity)
        return item

    async def update_quantity(self, user: User, raw_product_id: Any, quantity: int) -> CartItem | None:
        """Set a line's quantity; zero or less removes the line. Returns the line if kept."""
        product_id = parse_product_id(raw_product_id)
        item = await self._find_item(user, product_id)
        if not item:
            raise CartItemNotFound()

        if quantity <= 0:
            await self.session.delete(item)
            await self.session.commit()
            return None

        product = await find_by_sequential_id(self.session, Product, product_id)
        if product and product.stock_quantity < quantity:
            raise InsufficientStock(product.name, product.stock_quantity, quantity)

        item.quantity = quantity
        item.updated_at = utc_now()
        await self.session.commit()
        return item

    async def remove_item(self, user: User, raw_product_id: Any) -> None:
        product_id = parse_product_id(raw_product_id)
        item = await self._find_item(user, product_id)
        if item:
            await self.session.delete(item)
            await self.session.commit()

    async def clear(self, user: User) -> None:
        for item in await self.get_items(user):
            await self.session.delete(item)
        await self.session.commit()
        logger.info("Cleared cart", user_id=user.id)

    async def _find_item(self, user: User, product_id: int) -> CartItem | None:
        assert user.id is not None
        statement = select(CartItem).where(CartItem.user_id == user.id, CartItem.product_id == product_id)
        result = await self.session.execute(statement)
        return result.scalars().first()
