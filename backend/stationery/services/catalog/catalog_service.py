"""Catalog management service for categories and products."""

from typing import Any

import structlog
from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from stationery.models.catalog import Category, Product
from stationery.models.types import parse_sequential_id
from stationery.services.catalog.exceptions import (
    CategoryAlreadyExists,
    CategoryNotFound,
    InvalidProductData,
    ProductNotFound,
)
from stationery.services.identity.identifiers import IdentifierService
from stationery.services.identity.lookup import find_by_any_id

logger = structlog.get_logger(__name__)

MAX_PRICE = 999999.99
_UPDATABLE_PRODUCT_FIELDS = frozenset(
    {"name", "category", "price", "description", "author", "genre", "stock_quantity", "image_url"}
)


class CatalogService:
    """Service for category and product operations."""

    def __init__(self, session: AsyncSession, identifiers: IdentifierService | None = None):
        self.session = session
        self.identifiers = identifiers or IdentifierService(session)

    async def create_category(self, name: str, description: str | None = None) -> Category:
        normalized = _normalize_category(name)
        existing = await self.session.execute(select(Category).where(Category.name == normalized))
        if existing.scalars().first():
            raise CategoryAlreadyExists(f"Category {normalized!r} already exists")

        category = Category(name=normalized, description=description.strip() if description else None)
        return await self.identifiers.create_with_sequential_id(category)

    async def get_category(self, raw_id: Any) -> Category:
        category = await find_by_any_id(self.session, Category, raw_id)
        if not category:
            raise CategoryNotFound()
        return category

    async def list_categories(self) -> list[Category]:
        result = await self.session.execute(select(Category).order_by(Category.name))
        return list(result.scalars().all())

    async def create_product(
        self,
        *,
        name: str,
        category: str,
        price: float,
        stock_quantity: int,
        description: str = "",
        author: str = "",
        genre: str = "",
        image_url: str = "",
    ) -> Product:
        """Create a product and assign it the next product id."""
        if not name or not name.strip():
            raise InvalidProductData("Product name is required")
        _validate_price(price)
        _validate_stock(stock_quantity)

        product = Product(
            name=name.strip(),
            category=_normalize_category(category),
            price=float(price),
            stock_quantity=int(stock_quantity),
            description=description or "",
            author=author or "",
            genre=genre or "",
            image_url=image_url or "",
        )
        return await self.identifiers.create_with_sequential_id(product)

    async def get_product(self, raw_id: Any) -> Product:
        """Get product by sequential id or storage key."""
        product = await find_by_any_id(self.session, Product, raw_id)
        if not product:
            raise ProductNotFound()
        return product

    async def update_product(self, raw_id: Any, **fields: Any) -> Product:
        """Update product fields. Identifiers cannot be changed."""
        unknown = set(fields) - _UPDATABLE_PRODUCT_FIELDS
        if unknown:
            raise InvalidProductData(f"Cannot update fields: {', '.join(sorted(unknown))}")

        product = await self.get_product(raw_id)
        if "name" in fields:
            if not fields["name"] or not fields["name"].strip():
                raise InvalidProductData("Product name is required")
            fields["name"] = fields["name"].strip()
        if "category" in fields:
            fields["category"] = _normalize_category(fields["category"])
        if "price" in fields:
            _validate_price(fields["price"])
        if "stock_quantity" in fields:
            _validate_stock(fields["stock_quantity"])

        for field_name, value in fields.items():
            setattr(product, field_name, value)
        product.touch()
        await self.session.commit()
        return product

    async def delete_product(self, raw_id: Any) -> None:
        """Delete a product. References to it in orders and carts are left dangling."""
        product = await self.get_product(raw_id)
        await self.session.delete(product)
        await self.session.commit()
        logger.info("Deleted product", product_id=product.id, key=product.key)

    async def list_products(
        self,
        *,
        category: str | None = None,
        search: str | None = None,
        skip: int = 0,
        limit: int = 12,
    ) -> tuple[list[Product], int]:
        """List products with optional filters. Returns (products, total_count).

        A search term made of digits also matches the product id.
        """
        filters = []
        if category and category.strip().lower() != "all":
            filters.append(Product.category == _normalize_category(category))
        if search and search.strip():
            term = search.strip()
            pattern = f"%{term}%"
            matches = [
                Product.name.ilike(pattern),  # type: ignore[attr-defined]
                Product.description.ilike(pattern),  # type: ignore[attr-defined]
                Product.author.ilike(pattern),  # type: ignore[attr-defined]
            ]
            search_id = parse_sequential_id(term)
            if search_id is not None:
                matches.append(Product.id == search_id)
            filters.append(or_(*matches))

        statement = (
            select(Product)
            .where(*filters)
            .order_by(Product.created_at.desc(), Product.key.desc())  # type: ignore[attr-defined]
            .offset(skip)
            .limit(limit)
        )
        result = await self.session.execute(statement)
        products = list(result.scalars().all())

        count_statement = select(func.count()).select_from(Product).where(*filters)
        count_result = await self.session.execute(count_statement)
        total = count_result.scalar() or 0

        return products, total


def _normalize_category(name: str) -> str:
    normalized = (name or "").strip().lower()
    if not normalized:
        raise InvalidProductData("Category is required")
    if len(normalized) > 50:
        raise InvalidProductData("Category name must be at most 50 characters")
    return normalized


def _validate_price(price: float) -> None:
    if price is None or price < 0 or price > MAX_PRICE:
        raise InvalidProductData(f"Price must be between 0 and {MAX_PRICE}")


def _validate_stock(stock_quantity: int) -> None:
    if stock_quantity is None or int(stock_quantity) < 0:
        raise InvalidProductData("Stock quantity must be non-negative")
