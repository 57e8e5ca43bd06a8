"""Unit tests for SQLiteProductStore."""

from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest

from src.core.entities import Product
from src.core.exceptions import DuplicateProductError, ProductNotFoundError
from src.infrastructure.storage.sqlite.product_store import SQLiteProductStore

BASE = datetime(2026, 1, 10, 8, 0, tzinfo=UTC)


def make_product(name: str, usage: int = 1, days: int = 0, price: str = "100") -> Product:
    at = BASE + timedelta(days=days)
    return Product(
        name=name,
        unit_price=Decimal(price),
        usage_count=usage,
        last_used_at=at,
        created_at=at,
        updated_at=at,
    )


class TestCreate:
    async def test_create_assigns_id(self, db_pool):
        store = SQLiteProductStore()

        product = await store.create(make_product("Chair"))

        assert product.id is not None
        loaded = await store.get(product.id)
        assert loaded.name == "Chair"
        assert loaded.normalized_name == "chair"
        assert loaded.unit_price == Decimal("100")
        assert loaded.last_used_at == BASE

    async def test_case_insensitive_duplicate_rejected(self, db_pool):
        store = SQLiteProductStore()
        await store.create(make_product("Chair"))

        with pytest.raises(DuplicateProductError):
            await store.create(make_product("CHAIR"))


class TestSearch:
    async def test_substring_ranked_by_usage_then_recency(self, db_pool):
        store = SQLiteProductStore()
        await store.create(make_product("Office Chair", usage=2, days=1))
        await store.create(make_product("Chair", usage=5, days=0))
        await store.create(make_product("Armchair", usage=2, days=3))
        await store.create(make_product("Table", usage=9, days=4))

        results = await store.search("chair", limit=10)

        assert [p.name for p in results] == ["Chair", "Armchair", "Office Chair"]

    async def test_limit(self, db_pool):
        store = SQLiteProductStore()
        for i in range(5):
            await store.create(make_product(f"Chair {i}"))

        assert len(await store.search("chair", limit=3)) == 3

    async def test_like_wildcards_matched_literally(self, db_pool):
        store = SQLiteProductStore()
        await store.create(make_product("Discount 50%"))
        await store.create(make_product("Discount 500"))
        await store.create(make_product("snake_case"))
        await store.create(make_product("snakeXcase"))

        assert [p.name for p in await store.search("50%")] == ["Discount 50%"]
        assert [p.name for p in await store.search("e_c")] == ["snake_case"]


class TestListing:
    async def test_list_recent(self, db_pool):
        store = SQLiteProductStore()
        await store.create(make_product("Old", days=0))
        await store.create(make_product("New", days=2))
        await store.create(make_product("Mid", days=1))

        assert [p.name for p in await store.list_recent(limit=2)] == ["New", "Mid"]

    async def test_list_products_recency_then_usage(self, db_pool):
        store = SQLiteProductStore()
        await store.create(make_product("Lamp", usage=1, days=1))
        await store.create(make_product("Desk", usage=7, days=1))
        await store.create(make_product("Rug", usage=3, days=0))

        assert [p.name for p in await store.list_products()] == ["Desk", "Lamp", "Rug"]


class TestUpdate:
    async def test_update_fields(self, db_pool):
        store = SQLiteProductStore()
        product = await store.create(make_product("Chair"))
        product.unit_price = Decimal("1250.50")
        product.description = "Oak"

        await store.update(product)

        loaded = await store.get(product.id)
        assert loaded.unit_price == Decimal("1250.50")
        assert loaded.description == "Oak"

    async def test_rename_onto_existing_name_rejected(self, db_pool):
        store = SQLiteProductStore()
        await store.create(make_product("Chair"))
        table = await store.create(make_product("Table"))
        table.name = "chair"
        table.normalized_name = "chair"

        with pytest.raises(DuplicateProductError):
            await store.update(table)

    async def test_update_missing_raises(self, db_pool):
        store = SQLiteProductStore()
        ghost = make_product("Ghost")
        ghost.id = 999

        with pytest.raises(ProductNotFoundError):
            await store.update(ghost)


class TestIncrementUsage:
    async def test_increment_existing(self, db_pool):
        store = SQLiteProductStore()
        await store.create(make_product("Chair", usage=2))
        later = BASE + timedelta(days=5)

        assert await store.increment_usage("chair", later) is True

        chair = await store.find_by_normalized_name("chair")
        assert chair.usage_count == 3
        assert chair.last_used_at == later

    async def test_increment_missing_does_not_create(self, db_pool):
        store = SQLiteProductStore()

        assert await store.increment_usage("sofa", BASE) is False
        assert await store.find_by_normalized_name("sofa") is None

    async def test_delete(self, db_pool):
        store = SQLiteProductStore()
        product = await store.create(make_product("Chair"))

        assert await store.delete(product.id) is True
        assert await store.delete(product.id) is False
