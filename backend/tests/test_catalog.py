"""
Tests for catalog management
"""
import pytest

from stationery.services.catalog.exceptions import (
    CategoryAlreadyExists,
    CategoryNotFound,
    InvalidProductData,
    ProductNotFound,
)


class TestCategories:
    async def test_create_category_normalizes_name(self, catalog):
        category = await catalog.create_category("  Art Supplies ", " Paints and brushes ")
        assert category.id == 1
        assert category.name == "art supplies"
        assert category.description == "Paints and brushes"

    async def test_duplicate_category_rejected(self, catalog):
        await catalog.create_category("Pens")
        with pytest.raises(CategoryAlreadyExists):
            await catalog.create_category("PENS")

    async def test_get_and_list_categories(self, catalog):
        await catalog.create_category("notebooks")
        second = await catalog.create_category("books")

        assert (await catalog.get_category("2")).key == second.key
        assert [c.name for c in await catalog.list_categories()] == ["books", "notebooks"]
        with pytest.raises(CategoryNotFound):
            await catalog.get_category(99)


class TestProducts:
    async def test_products_receive_consecutive_ids(self, products):
        assert [p.id for p in products] == [1, 2, 3]
        assert products[0].category == "notebooks"
        assert products[2].author == "A. P. J. Abdul Kalam"

    async def test_get_product_by_id_and_key(self, catalog, products):
        assert (await catalog.get_product(2)).name == "Gel Pen Blue"
        assert (await catalog.get_product("3")).name == "Wings of Fire"
        assert (await catalog.get_product(products[0].key)).id == 1

    async def test_get_missing_product_raises(self, catalog, products):
        with pytest.raises(ProductNotFound):
            await catalog.get_product(999999)
        with pytest.raises(ProductNotFound):
            await catalog.get_product("no-such-product")

    @pytest.mark.parametrize(
        "overrides",
        [
            {"name": "  "},
            {"price": -1},
            {"price": 1_000_000},
            {"stock_quantity": -5},
            {"category": ""},
        ],
    )
    async def test_invalid_product_data(self, catalog, overrides):
        fields = {"name": "Ruler", "category": "geometry", "price": 15.0, "stock_quantity": 10}
        fields.update(overrides)
        with pytest.raises(InvalidProductData):
            await catalog.create_product(**fields)

    async def test_update_product(self, catalog, products):
        updated = await catalog.update_product(2, price=30.0, stock_quantity=8, category="Writing")

        assert updated.id == 2
        assert updated.price == 30.0
        assert updated.stock_quantity == 8
        assert updated.category == "writing"

    async def test_update_cannot_change_identifiers(self, catalog, products):
        with pytest.raises(InvalidProductData, match="id"):
            await catalog.update_product(1, id=42)
        with pytest.raises(InvalidProductData, match="key"):
            await catalog.update_product(1, key="01J0000000000000000000000")

    async def test_delete_product(self, catalog, products):
        await catalog.delete_product("1")
        with pytest.raises(ProductNotFound):
            await catalog.get_product(1)

        replacement = await catalog.create_product(name="A4 Notebook", category="notebooks", price=150, stock_quantity=5)
        assert replacement.id == 4


class TestListProducts:
    async def test_list_all(self, catalog, products):
        items, total = await catalog.list_products()
        assert total == 3
        assert {p.id for p in items} == {1, 2, 3}

    async def test_filter_by_category(self, catalog, products):
        items, total = await catalog.list_products(category="PENS")
        assert total == 1
        assert items[0].name == "Gel Pen Blue"

        _, total = await catalog.list_products(category="all")
        assert total == 3

    async def test_search_matches_text_fields(self, catalog, products):
        items, total = await catalog.list_products(search="kalam")
        assert total == 1
        assert items[0].id == 3

    async def test_numeric_search_matches_id(self, catalog, products):
        items, total = await catalog.list_products(search="2")
        assert total == 1
        assert items[0].name == "Gel Pen Blue"

    async def test_pagination(self, catalog, products):
        page, total = await catalog.list_products(skip=1, limit=1)
        assert total == 3
        assert len(page) == 1
