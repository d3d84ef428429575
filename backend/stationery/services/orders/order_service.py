"""Order placement and management service."""

from typing import Any

import structlog
from sqlalchemy import func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.orm.attributes import set_committed_value
from sqlmodel import select

from stationery.config import settings
from stationery.models.cart import CartItem
from stationery.models.catalog import Product
from stationery.models.enums import OrderStatus, OrderType, PaymentMethod, PaymentStatus, UserRole
from stationery.models.order import Order, OrderLineItem
from stationery.models.references import get_ref, set_ref
from stationery.models.types import EntityRef
from stationery.models.user import User
from stationery.services.cart.cart_service import CartService, parse_product_id
from stationery.services.cart.exceptions import InsufficientStock
from stationery.services.catalog.exceptions import ProductNotFound
from stationery.services.identity.identifiers import IdentifierService
from stationery.services.identity.lookup import find_by_any_id, find_by_sequential_id, resolve_ref
from stationery.services.orders.exceptions import (
    EmptyOrder,
    OrderAccessDenied,
    OrderNotFound,
    PaymentAlreadyCompleted,
)
from stationery.services.orders.schemas import OrderItemRequest, ShippingAddress

logger = structlog.get_logger(__name__)

class OrderService:
    """Service for order operations.

    Orders reference the purchaser (and, for institute accounts, the
    institute) and every product line by sequential id.
    """

    def __init__(self, session: AsyncSession, identifiers: IdentifierService | None = None):
        self.session = session
        self.identifiers = identifiers or IdentifierService(session)

    async def place_order(
        self,
        user: User,
        items: list[OrderItemRequest],
        shipping_address: ShippingAddress,
        *,
        payment_method: PaymentMethod = PaymentMethod.COD,
        order_type: OrderType = OrderType.REGULAR,
        notes: str | None = None,
    ) -> Order:
        """Create an order, reserving stock for every line.

        Stock reservation, the order insert and its id allocation commit
        together; any failure rolls all of them back.
        """
        try:
            order = await self._build_order(
                user,
                items,
                shipping_address,
                payment_method=payment_method,
                order_type=order_type,
                notes=notes,
            )
        except Exception:
            await self.session.rollback()
            raise

        await self.identifiers.create_with_sequential_id(order)
        logger.info(
            "Order placed",
            order_id=order.id,
            user_id=user.id,
            lines=len(items),
            total_amount=order.total_amount,
        )
        return order

    async def place_order_from_cart(
        self,
        user: User,
        shipping_address: ShippingAddress,
        *,
        payment_method: PaymentMethod = PaymentMethod.COD,
        order_type: OrderType = OrderType.REGULAR,
        notes: str | None = None,
    ) -> Order:
        """Place an order for the cart's contents and empty the cart.

        Cart lines still holding a legacy product key are resolved to the
        product's id. The order, the stock changes and the emptied cart
        commit together.
        """
        cart_items = await CartService(self.session).get_items(user)
        try:
            items = [
                OrderItemRequest(product_id=await self._cart_line_product_id(item), quantity=item.quantity)
                for item in cart_items
            ]
            order = await self._build_order(
                user,
                items,
                shipping_address,
                payment_method=payment_method,
                order_type=order_type,
                notes=notes,
            )
            self.session.add(order)
            await self.session.flush()
            await self.identifiers.ensure_sequential_id(order)
            for cart_item in cart_items:
                await self.session.delete(cart_item)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            "Order placed from cart",
            order_id=order.id,
            user_id=user.id,
            lines=len(items),
            total_amount=order.total_amount,
        )
        return order

    async def get_order(self, raw_id: Any) -> Order:
        """Get order by sequential id or storage key, with line items loaded."""
        order = await find_by_any_id(self.session, Order, raw_id, selectinload(Order.line_items))  # type: ignore[arg-type]
        if not order:
            raise OrderNotFound()
        return order

    async def get_order_for_user(self, raw_id: Any, user: User) -> Order:
        """Get an order the user owns; admins may read any order."""
        order = await self.get_order(raw_id)
        if order.user_id != user.id and user.role != UserRole.ADMIN:
            raise OrderAccessDenied("Access denied")
        return order

    async def list_orders(
        self,
        *,
        status: OrderStatus | None = None,
        payment_status: PaymentStatus | None = None,
        order_type: OrderType | None = None,
        skip: int = 0,
        limit: int = 10,
    ) -> tuple[list[Order], int]:
        """List orders of every user, newest first. Returns (orders, total_count)."""
        filters = []
        if status is not None:
            filters.append(Order.order_status == status)
        if payment_status is not None:
            filters.append(Order.payment_status == payment_status)
        if order_type is not None:
            filters.append(Order.order_type == order_type)
        return await self._list(filters, skip, limit)

    async def list_user_orders(
        self,
        user: User,
        *,
        status: OrderStatus | None = None,
        skip: int = 0,
        limit: int = 10,
    ) -> tuple[list[Order], int]:
        """List a user's orders, newest first. Returns (orders, total_count)."""
        filters = [Order.user_id == user.id]
        if status is not None:
            filters.append(Order.order_status == status)
        return await self._list(filters, skip, limit)

    async def update_status(self, raw_id: Any, status: OrderStatus, acting_user: User) -> Order:
        if acting_user.role != UserRole.ADMIN:
            raise OrderAccessDenied("Only admin can update order status")
        order = await self.get_order(raw_id)
        order.order_status = status
        order.touch()
        await self.session.commit()
        logger.info("Order status updated", order_id=order.id, status=status.value, admin_id=acting_user.id)
        return order

    async def process_payment(
        self,
        raw_id: Any,
        acting_user: User,
        payment_method: PaymentMethod,
        transaction_id: str | None,
    ) -> Order:
        """Record payment for an order. Only its owner or an admin may pay it."""
        order = await self.get_order_for_user(raw_id, acting_user)
        if order.payment_status == PaymentStatus.COMPLETED:
            raise PaymentAlreadyCompleted("Payment already completed")

        order.payment_method = payment_method
        order.payment_status = PaymentStatus.COMPLETED
        order.transaction_id = transaction_id
        order.touch()
        await self.session.commit()
        logger.info("Payment processed", order_id=order.id, payment_method=payment_method.value)
        return order

    async def _list(self, filters: list[Any], skip: int, limit: int) -> tuple[list[Order], int]:
        statement = (
            select(Order)
            .options(selectinload(Order.line_items))  # type: ignore[arg-type]
            .where(*filters)
            .order_by(Order.created_at.desc(), Order.key.desc())  # type: ignore[attr-defined]
            .offset(skip)
            .limit(limit)
        )
        result = await self.session.execute(statement)
        orders = list(result.scalars().all())

        count_statement = select(func.count()).select_from(Order).where(*filters)
        count_result = await self.session.execute(count_statement)
        total = count_result.scalar() or 0

        return orders, total

    async def _build_order(
        self,
        user: User,
        items: list[OrderItemRequest],
        shipping_address: ShippingAddress,
        *,
        payment_method: PaymentMethod,
        order_type: OrderType,
        notes: str | None,
    ) -> Order:
        """Reserve stock for every line and build the order (not added or committed)."""
        assert user.id is not None
        if not items:
            raise EmptyOrder("Products list is required and must not be empty")

        line_items = [await self._reserve_line(position, item) for position, item in enumerate(items, start=1)]

        subtotal = round(sum(line.subtotal for line in line_items), 2)
        discount = 0.0
        if order_type == OrderType.BULK and user.role == UserRole.INSTITUTE:
            discount = round(subtotal * settings.bulk_order_discount_rate, 2)

        order = Order(
            subtotal=subtotal,
            discount=discount,
            total_amount=round(subtotal - discount, 2),
            shipping_address=shipping_address.address,
            shipping_city=shipping_address.city,
            shipping_state=shipping_address.state,
            shipping_zip_code=shipping_address.zip_code,
            shipping_country=shipping_address.country,
            payment_method=payment_method,
            payment_status=PaymentStatus.PENDING if payment_method == PaymentMethod.COD else PaymentStatus.COMPLETED,
            order_status=OrderStatus.PENDING,
            order_type=order_type,
            notes=notes,
            line_items=line_items,
        )
        set_ref(order, "user", EntityRef.sequential(user.id))
        if user.role == UserRole.INSTITUTE:
            set_ref(order, "institute", EntityRef.sequential(user.id))
        return order

    async def _cart_line_product_id(self, item: CartItem) -> int:
        if item.product_id is not None:
            return item.product_id
        product = await resolve_ref(self.session, Product, get_ref(item, "product"))
        if product is None or product.id is None:
            raise ProductNotFound(f"Product {item.product_legacy_key} in cart not found")
        return product.id

    async def _reserve_line(self, position: int, item: OrderItemRequest) -> OrderLineItem:
        """Decrement stock for one requested line and build the line item (not committed)."""
        product_id = parse_product_id(item.product_id)
        product = await find_by_sequential_id(self.session, Product, product_id)
        if not product:
            raise ProductNotFound(f"Product with ID {product_id} not found")

        # Conditional decrement so concurrent orders cannot oversell
        result = await self.session.execute(
            update(Product)
            .where(Product.id == product_id, Product.stock_quantity >= item.quantity)  # type: ignore[arg-type,operator]
            .values(stock_quantity=Product.stock_quantity - item.quantity)
            .returning(Product.stock_quantity)
            .execution_options(synchronize_session=False)
        )
        remaining = result.scalar_one_or_none()
        if remaining is None:
            await self.session.refresh(product)
            raise InsufficientStock(product.name, product.stock_quantity, item.quantity)
        set_committed_value(product, "stock_quantity", remaining)

        line = OrderLineItem(
            position=position,
            product_name=product.name,
            quantity=item.quantity,
            unit_price=product.price,
            subtotal=round(product.price * item.quantity, 2),
        )
        set_ref(line, "product", EntityRef.sequential(product_id))
        return line
