"""
Tests for resolving identifiers of unknown provenance
"""
import pytest
from sqlalchemy.orm import selectinload

from stationery.models import EntityRef, Order, Product
from stationery.models.types import is_storage_key, new_key
from stationery.services.identity import find_by_any_id, find_by_key, find_by_sequential_id, resolve_ref


@pytest.fixture
async def seven_products(catalog):
    return [
        await catalog.create_product(name=f"Marker {n}", category="markers", price=40.0, stock_quantity=20)
        for n in range(1, 8)
    ]


class TestFindByAnyId:
    async def test_integer_finds_by_sequential_id(self, db_session, seven_products):
        product = await find_by_any_id(db_session, Product, 7)
        assert product is not None
        assert product.key == seven_products[6].key

    @pytest.mark.parametrize("raw", ["7", " 7 ", "007"])
    async def test_numeric_string_finds_by_sequential_id(self, db_session, seven_products, raw):
        product = await find_by_any_id(db_session, Product, raw)
        assert product is not None
        assert product.id == 7

    async def test_storage_key_finds_entity(self, db_session, seven_products):
        target = seven_products[2]
        product = await find_by_any_id(db_session, Product, target.key)
        assert product is not None
        assert product.id == 3

    async def test_unknown_integer_returns_none(self, db_session, seven_products):
        assert await find_by_any_id(db_session, Product, 999999) is None
        assert await find_by_any_id(db_session, Product, "999999") is None

    async def test_unknown_storage_key_returns_none(self, db_session, seven_products):
        assert await find_by_any_id(db_session, Product, new_key()) is None

    async def test_numeric_string_prefers_sequential_id(self, db_session, seven_products):
        # 26 digits is also a well-formed storage key
        raw = "00000000000000000000000001"
        assert is_storage_key(raw)

        product = await find_by_any_id(db_session, Product, raw)

        assert product is not None
        assert product.id == 1

    @pytest.mark.parametrize("raw", ["", "abc", "-3", "3.5", "１２", None, -1, 2.0, True, 2**70])
    async def test_invalid_identifiers_return_none(self, db_session, seven_products, raw):
        assert await find_by_any_id(db_session, Product, raw) is None

    async def test_loader_options_are_applied(self, db_session, customer, seven_products):
        from stationery.services.orders.order_service import OrderService
        from stationery.services.orders.schemas import OrderItemRequest, ShippingAddress

        order = await OrderService(db_session).place_order(
            customer,
            [OrderItemRequest(product_id=1, quantity=2)],
            ShippingAddress(address="Putalisadak", city="Kathmandu", state="Bagmati", zip_code="44600"),
        )

        found = await find_by_any_id(db_session, Order, str(order.id), selectinload(Order.line_items))
        assert found is not None
        assert [line.product_id for line in found.line_items] == [1]


class TestDirectLookups:
    async def test_find_by_sequential_id(self, db_session, seven_products):
        product = await find_by_sequential_id(db_session, Product, 4)
        assert product is not None
        assert product.name == "Marker 4"

    async def test_find_by_key_rejects_malformed_key(self, db_session, seven_products):
        assert await find_by_key(db_session, Product, "not-a-key") is None


class TestResolveRef:
    async def test_sequential_ref(self, db_session, seven_products):
        product = await resolve_ref(db_session, Product, EntityRef.sequential(2))
        assert product is not None
        assert product.key == seven_products[1].key

    async def test_legacy_ref(self, db_session, seven_products):
        product = await resolve_ref(db_session, Product, EntityRef.legacy(seven_products[4].key))
        assert product is not None
        assert product.id == 5

    async def test_missing_and_dangling_refs(self, db_session, seven_products):
        assert await resolve_ref(db_session, Product, None) is None
        assert await resolve_ref(db_session, Product, EntityRef.sequential(404)) is None
        assert await resolve_ref(db_session, Product, EntityRef.legacy(new_key())) is None
