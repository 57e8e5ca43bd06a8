"""
SQLite implementation of the product catalog storage.

Identity is the ``normalized_name`` column, backed by a UNIQUE index.
"""

from datetime import datetime
from decimal import Decimal

import aiosqlite

from src.config import get_logger
from src.core.entities.product import Product
from src.core.exceptions import DatabaseError, DuplicateProductError, ProductNotFoundError
from src.core.interfaces.storage import IProductStore
from src.infrastructure.storage.sqlite.connection import (
    get_connection,
    get_transaction,
    parse_timestamp,
    store_errors,
)

logger = get_logger(__name__)


def _escape_like(fragment: str) -> str:
    """Escape LIKE wildcards so user input matches literally."""
    return fragment.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _translate_integrity_error(e: aiosqlite.IntegrityError, product: Product, operation: str):
    if "products.normalized_name" in str(e):
        return DuplicateProductError(product.name)
    return DatabaseError(operation, str(e))


class SQLiteProductStore(IProductStore):
    """SQLite implementation of catalog product storage."""

    async def create(self, product: Product) -> Product:
        with store_errors("create_product"):
            try:
                async with get_transaction() as conn:
                    cursor = await conn.execute(
                        """
                        INSERT INTO products (
                            name, normalized_name, unit_price, description,
                            usage_count, last_used_at, created_at, updated_at
                        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                        """,
                        (
                            product.name,
                            product.normalized_name,
                            str(product.unit_price),
                            product.description,
                            product.usage_count,
                            product.last_used_at.isoformat(),
                            product.created_at.isoformat(),
                            product.updated_at.isoformat(),
                        ),
                    )
            except aiosqlite.IntegrityError as e:
                raise _translate_integrity_error(e, product, "create_product") from e

        product.id = cursor.lastrowid
        return product

    async def get(self, product_id: int) -> Product | None:
        with store_errors("get_product"):
            async with get_connection() as conn:
                cursor = await conn.execute(
                    "SELECT * FROM products WHERE id = ?", (product_id,)
                )
                row = await cursor.fetchone()
                return self._row_to_product(row) if row else None

    async def find_by_normalized_name(self, normalized_name: str) -> Product | None:
        with store_errors("find_product"):
            async with get_connection() as conn:
                cursor = await conn.execute(
                    "SELECT * FROM products WHERE normalized_name = ?",
                    (normalized_name,),
                )
                row = await cursor.fetchone()
                return self._row_to_product(row) if row else None

    async def search(self, fragment: str, limit: int = 10) -> list[Product]:
        with store_errors("search_products"):
            async with get_connection() as conn:
                cursor = await conn.execute(
                    """
                    SELECT * FROM products
                    WHERE normalized_name LIKE ? ESCAPE '\\'
                    ORDER BY usage_count DESC, last_used_at DESC
                    LIMIT ?
                    """,
                    (f"%{_escape_like(fragment)}%", limit),
                )
                rows = await cursor.fetchall()
                return [self._row_to_product(row) for row in rows]

    async def list_recent(self, limit: int = 10) -> list[Product]:
        with store_errors("list_recent_products"):
            async with get_connection() as conn:
                cursor = await conn.execute(
                    """
                    SELECT * FROM products
                    ORDER BY last_used_at DESC, id DESC
                    LIMIT ?
                    """,
                    (limit,),
                )
                rows = await cursor.fetchall()
                return [self._row_to_product(row) for row in rows]

    async def list_products(self, limit: int = 50) -> list[Product]:
        with store_errors("list_products"):
            async with get_connection() as conn:
                cursor = await conn.execute(
                    """
                    SELECT * FROM products
                    ORDER BY last_used_at DESC, usage_count DESC
                    LIMIT ?
                    """,
                    (limit,),
                )
                rows = await cursor.fetchall()
                return [self._row_to_product(row) for row in rows]

    async def update(self, product: Product) -> Product:
        if product.id is None:
            raise ProductNotFoundError(0)
        with store_errors("update_product"):
            try:
                async with get_transaction() as conn:
                    cursor = await conn.execute(
                        """
                        UPDATE products SET
                            name = ?, normalized_name = ?, unit_price = ?,
                            description = ?, usage_count = ?, last_used_at = ?,
                            updated_at = ?
                        WHERE id = ?
                        """,
                        (
                            product.name,
                            product.normalized_name,
                            str(product.unit_price),
                            product.description,
                            product.usage_count,
                            product.last_used_at.isoformat(),
                            product.updated_at.isoformat(),
                            product.id,
                        ),
                    )
            except aiosqlite.IntegrityError as e:
                raise _translate_integrity_error(e, product, "update_product") from e

        if cursor.rowcount == 0:
            raise ProductNotFoundError(product.id)
        return product

    async def increment_usage(self, normalized_name: str, at: datetime) -> bool:
        with store_errors("increment_product_usage"):
            async with get_transaction() as conn:
                cursor = await conn.execute(
                    """
                    UPDATE products
                    SET usage_count = usage_count + 1,
                        last_used_at = ?
                    WHERE normalized_name = ?
                    """,
                    (at.isoformat(), normalized_name),
                )
                return cursor.rowcount > 0

    async def delete(self, product_id: int) -> bool:
        with store_errors("delete_product"):
            async with get_transaction() as conn:
                cursor = await conn.execute(
                    "DELETE FROM products WHERE id = ?", (product_id,)
                )
                return cursor.rowcount > 0

    @staticmethod
    def _row_to_product(row: aiosqlite.Row) -> Product:
        """Convert a database row to a Product entity."""
        return Product(
            id=row["id"],
            name=row["name"],
            normalized_name=row["normalized_name"],
            unit_price=Decimal(row["unit_price"]),
            description=row["description"],
            usage_count=int(row["usage_count"]),
            last_used_at=parse_timestamp(row["last_used_at"]),
            created_at=parse_timestamp(row["created_at"]),
            updated_at=parse_timestamp(row["updated_at"]),
        )
