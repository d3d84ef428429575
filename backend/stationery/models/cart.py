"""Cart and wishlist database models."""

from datetime import datetime

from sqlalchemy import DateTime, Numeric, UniqueConstraint
from sqlmodel import Field, SQLModel

from stationery.models.base import utc_now
from stationery.models.references import ref_constraint
from stationery.models.types import ULIDType, new_key


class CartItem(SQLModel, table=True):
    """One product line in a user's cart.

    ``price`` is the product price at the time the line was first added.
    """

    __tablename__ = "cart_items"
    __table_args__ = (
        ref_constraint("cart_items", "user"),
        ref_constraint("cart_items", "product"),
    )

    key: str = Field(default_factory=new_key, primary_key=True, sa_type=ULIDType)
    user_id: int | None = Field(default=None, index=True)
    user_legacy_key: str | None = None
    product_id: int | None = None
    product_legacy_key: str | None = None
    quantity: int = 1
    price: float = Field(sa_type=Numeric(10, 2, asdecimal=False))
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))


class WishlistEntry(SQLModel, table=True):
    """A product saved to a user's wishlist."""

    __tablename__ = "wishlist_entries"
    __table_args__ = (
        ref_constraint("wishlist_entries", "user"),
        ref_constraint("wishlist_entries", "product"),
        UniqueConstraint("user_id", "product_id", name="uq_wishlist_entries_user_product"),
    )

    key: str = Field(default_factory=new_key, primary_key=True, sa_type=ULIDType)
    user_id: int | None = Field(default=None, index=True)
    user_legacy_key: str | None = None
    product_id: int | None = None
    product_legacy_key: str | None = None
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
