"""Order and OrderLineItem database models."""

from datetime import datetime
from typing import ClassVar

from sqlalchemy import Column, DateTime, ForeignKey, Numeric
from sqlmodel import Field, Relationship, SQLModel

from stationery.models.base import IdentifiedEntity, utc_now
from stationery.models.enums import (
    ORDER_STATUS_SA_ENUM,
    ORDER_TYPE_SA_ENUM,
    PAYMENT_METHOD_SA_ENUM,
    PAYMENT_STATUS_SA_ENUM,
    OrderStatus,
    OrderType,
    PaymentMethod,
    PaymentStatus,
    SequenceName,
)
from stationery.models.references import ref_constraint
from stationery.models.types import ULIDType, new_key


class Order(IdentifiedEntity, table=True):
    """Customer order.

    ``user`` is the purchaser; ``institute`` is set to the same account for
    orders placed by institute users.
    """

    __tablename__ = "orders"
    __table_args__ = (
        ref_constraint("orders", "user"),
        ref_constraint("orders", "institute", required=False),
    )

    sequence_name: ClassVar[SequenceName] = SequenceName.ORDER

    user_id: int | None = Field(default=None, index=True)
    user_legacy_key: str | None = None
    institute_id: int | None = Field(default=None, index=True)
    institute_legacy_key: str | None = None

    subtotal: float = Field(sa_type=Numeric(12, 2, asdecimal=False))
    discount: float = Field(default=0, sa_type=Numeric(12, 2, asdecimal=False))
    total_amount: float = Field(sa_type=Numeric(12, 2, asdecimal=False))

    shipping_address: str
    shipping_city: str
    shipping_state: str
    shipping_zip_code: str
    shipping_country: str | None = None

    payment_method: PaymentMethod = Field(
        default=PaymentMethod.COD, sa_column=Column(PAYMENT_METHOD_SA_ENUM, nullable=False)
    )
    payment_status: PaymentStatus = Field(
        default=PaymentStatus.PENDING, sa_column=Column(PAYMENT_STATUS_SA_ENUM, nullable=False)
    )
    order_status: OrderStatus = Field(default=OrderStatus.PENDING, sa_column=Column(ORDER_STATUS_SA_ENUM, nullable=False))
    order_type: OrderType = Field(default=OrderType.REGULAR, sa_column=Column(ORDER_TYPE_SA_ENUM, nullable=False))
    tracking_number: str | None = None
    transaction_id: str | None = None
    notes: str | None = None

    # Relationships
    line_items: list["OrderLineItem"] = Relationship(
        back_populates="order",
        sa_relationship_kwargs={"cascade": "all, delete-orphan", "order_by": "OrderLineItem.position"},
    )


class OrderLineItem(SQLModel, table=True):
    """One product line within an order.

    ``product_name`` and ``unit_price`` are snapshots; the product reference
    may dangle once the product is deleted.
    """

    __tablename__ = "order_line_items"
    __table_args__ = (ref_constraint("order_line_items", "product"),)

    key: str = Field(default_factory=new_key, primary_key=True, sa_type=ULIDType)
    order_key: str = Field(
        sa_column=Column(ULIDType, ForeignKey("orders.key", ondelete="CASCADE"), index=True, nullable=False),
    )
    position: int
    product_id: int | None = Field(default=None, index=True)
    product_legacy_key: str | None = None
    product_name: str
    quantity: int = Field(ge=1)
    unit_price: float = Field(sa_type=Numeric(10, 2, asdecimal=False))
    subtotal: float = Field(sa_type=Numeric(12, 2, asdecimal=False))
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))

    # Relationships
    order: Order = Relationship(back_populates="line_items")
