"""Category and Product database models."""

from typing import ClassVar

from sqlalchemy import CheckConstraint, Numeric
from sqlmodel import Field

from stationery.models.base import IdentifiedEntity
from stationery.models.enums import SequenceName


class Category(IdentifiedEntity, table=True):
    """Product category. Names are stored trimmed and lowercased."""

    __tablename__ = "categories"

    sequence_name: ClassVar[SequenceName] = SequenceName.CATEGORY

    name: str = Field(unique=True, index=True, max_length=50)
    description: str | None = Field(default=None, max_length=200)


class Product(IdentifiedEntity, table=True):
    """Catalog product."""

    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("stock_quantity >= 0", name="ck_products_stock_non_negative"),
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
    )

    sequence_name: ClassVar[SequenceName] = SequenceName.PRODUCT

    name: str = Field(max_length=100)
    category: str = Field(index=True)  # Category name, lowercased; not a foreign key
    price: float = Field(sa_type=Numeric(10, 2, asdecimal=False))
    description: str = ""
    author: str = Field(default="", max_length=100)
    genre: str = Field(default="", max_length=100)
    stock_quantity: int = 0
    image_url: str = Field(default="", max_length=200)

    @property
    def in_stock(self) -> bool:
        return self.stock_quantity > 0
