"""
Tests for the shopping cart and wishlist
"""
import pytest
from sqlalchemy.exc import IntegrityError

from stationery.models import EntityRef, WishlistEntry
from stationery.models.references import get_ref, set_ref
from stationery.services.cart.cart_service import CartService, parse_product_id
from stationery.services.cart.exceptions import (
    AlreadyInWishlist,
    CartItemNotFound,
    InsufficientStock,
    InvalidProductId,
    InvalidQuantity,
    NotInWishlist,
)
from stationery.services.cart.wishlist_service import WishlistService
from stationery.services.catalog.exceptions import ProductNotFound


@pytest.fixture
def cart(db_session) -> CartService:
    return CartService(db_session)


@pytest.fixture
def wishlist(db_session) -> WishlistService:
    return WishlistService(db_session)


@pytest.mark.parametrize("raw, expected", [(3, 3), ("3", 3), (" 12 ", 12)])
def test_parse_product_id(raw, expected):
    assert parse_product_id(raw) == expected


@pytest.mark.parametrize("raw", [0, "0", -2, "abc", "1.5", None, "01J9Z8Q3W5E8XK3TQ5D0M4YB7R"])
def test_parse_product_id_rejects_non_positive_integers(raw):
    with pytest.raises(InvalidProductId):
        parse_product_id(raw)


class TestCart:
    async def test_add_item_references_by_sequential_id(self, cart, customer, products):
        item = await cart.add_item(customer, "2", quantity=3)

        assert get_ref(item, "user") == EntityRef.sequential(customer.id)
        assert get_ref(item, "product") == EntityRef.sequential(2)
        assert item.quantity == 3
        assert item.price == 25.5

    async def test_adding_again_merges_quantities(self, cart, customer, products):
        await cart.add_item(customer, 1, quantity=2)
        item = await cart.add_item(customer, 1, quantity=3)

        assert item.quantity == 5
        assert len(await cart.get_items(customer)) == 1

    async def test_combined_quantity_checked_against_stock(self, cart, customer, products):
        await cart.add_item(customer, 3, quantity=2)

        with pytest.raises(InsufficientStock) as exc_info:
            await cart.add_item(customer, 3, quantity=2)

        assert exc_info.value.available == 3
        assert exc_info.value.requested == 4

    async def test_add_rejects_bad_input(self, cart, customer, products):
        with pytest.raises(InvalidQuantity):
            await cart.add_item(customer, 1, quantity=0)
        with pytest.raises(InvalidProductId):
            await cart.add_item(customer, "abc")
        with pytest.raises(ProductNotFound):
            await cart.add_item(customer, 999999)

    async def test_get_cart_totals(self, cart, customer, products):
        await cart.add_item(customer, 1, quantity=2)
        await cart.add_item(customer, 2, quantity=4)

        view = await cart.get_cart(customer)

        assert [line.product.id for line in view.lines] == [1, 2]
        assert view.total == 342.0
        assert view.item_count == 6

    async def test_deleted_product_leaves_line_without_details(self, cart, catalog, customer, products):
        await cart.add_item(customer, 1)
        await cart.add_item(customer, 2)
        await catalog.delete_product(2)

        view = await cart.get_cart(customer)

        by_product = {line.item.product_id: line.product for line in view.lines}
        assert by_product[1] is not None
        assert by_product[2] is None

    async def test_update_quantity(self, cart, customer, products):
        await cart.add_item(customer, 1)

        item = await cart.update_quantity(customer, 1, 7)
        assert item is not None
        assert item.quantity == 7

        with pytest.raises(InsufficientStock):
            await cart.update_quantity(customer, 1, 51)

    async def test_update_to_zero_removes_line(self, cart, customer, products):
        await cart.add_item(customer, 1)
        assert await cart.update_quantity(customer, 1, 0) is None
        assert await cart.get_items(customer) == []

    async def test_update_missing_line(self, cart, customer, products):
        with pytest.raises(CartItemNotFound):
            await cart.update_quantity(customer, 2, 1)

    async def test_remove_and_clear(self, cart, customer, products):
        await cart.add_item(customer, 1)
        await cart.add_item(customer, 2)
        await cart.add_item(customer, 3)

        await cart.remove_item(customer, 2)
        assert {i.product_id for i in await cart.get_items(customer)} == {1, 3}

        await cart.clear(customer)
        assert (await cart.get_cart(customer)).item_count == 0

    async def test_carts_are_per_user(self, cart, customer, institute, products):
        await cart.add_item(customer, 1)
        assert await cart.get_items(institute) == []


class TestWishlist:
    async def test_add_by_id_or_key_stores_sequential_id(self, wishlist, customer, products):
        by_id = await wishlist.add(customer, "1")
        by_key = await wishlist.add(customer, products[2].key)

        assert by_id.product_id == 1
        assert by_key.product_id == 3
        assert by_key.product_legacy_key is None

    async def test_duplicate_rejected(self, wishlist, customer, products):
        await wishlist.add(customer, 2)
        with pytest.raises(AlreadyInWishlist):
            await wishlist.add(customer, "2")

    async def test_unknown_product(self, wishlist, customer, products):
        with pytest.raises(ProductNotFound):
            await wishlist.add(customer, 404)

    async def test_list_entries_includes_product_details(self, wishlist, catalog, customer, products):
        await wishlist.add(customer, 1)
        await wishlist.add(customer, 3)
        await catalog.delete_product(3)

        lines = await wishlist.list_entries(customer)

        details = {line.entry.product_id: line.product for line in lines}
        assert details[1].name == "A5 Notebook"
        assert details[3] is None

    async def test_remove_by_id_even_after_product_deleted(self, wishlist, catalog, customer, products):
        await wishlist.add(customer, 2)
        await catalog.delete_product(2)

        await wishlist.remove(customer, "2")

        assert await wishlist.list_entries(customer) == []

    async def test_remove_by_key(self, wishlist, customer, products):
        await wishlist.add(customer, 1)
        await wishlist.remove(customer, products[0].key)
        assert await wishlist.list_entries(customer) == []

    async def test_remove_missing(self, wishlist, customer, products):
        with pytest.raises(NotInWishlist):
            await wishlist.remove(customer, 1)

    async def test_contains_count_and_clear(self, wishlist, customer, institute, products):
        await wishlist.add(customer, 1)
        await wishlist.add(customer, 3)
        await wishlist.add(institute, 1)

        assert await wishlist.contains(customer, "1")
        assert await wishlist.contains(customer, products[2].key)
        assert not await wishlist.contains(customer, 2)
        assert await wishlist.count(customer) == 2

        assert await wishlist.clear(customer) == 2
        assert await wishlist.count(customer) == 0
        assert await wishlist.count(institute) == 1

    async def test_storage_rejects_duplicate_entries(self, db_session, customer, products):
        for _ in range(2):
            entry = WishlistEntry()
            set_ref(entry, "user", EntityRef.sequential(customer.id))
            set_ref(entry, "product", EntityRef.sequential(1))
            db_session.add(entry)

        with pytest.raises(IntegrityError):
            await db_session.commit()
        await db_session.rollback()

    async def test_concurrent_duplicate_reported_as_already_in_wishlist(
        self, wishlist, db_session, customer, products, monkeypatch
    ):
        await wishlist.add(customer, 2)

        async def entry_not_seen_yet(user, product_id):
            return None

        monkeypatch.setattr(wishlist, "_find_entry", entry_not_seen_yet)

        with pytest.raises(AlreadyInWishlist):
            await wishlist.add(customer, 2)

        await db_session.refresh(customer)
        assert await wishlist.count(customer) == 1
