"""SQLite storage implementations."""

from src.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
    store_errors,
)
from src.infrastructure.storage.sqlite.invoice_store import SQLiteInvoiceStore
from src.infrastructure.storage.sqlite.product_store import SQLiteProductStore

# Aliases used by the application lifespan
get_connection_pool = get_pool
close_connection_pool = close_pool

# Singleton instances
_invoice_store: SQLiteInvoiceStore | None = None
_product_store: SQLiteProductStore | None = None


async def get_invoice_store() -> SQLiteInvoiceStore:
    """Get singleton invoice store instance."""
    global _invoice_store
    if _invoice_store is None:
        _invoice_store = SQLiteInvoiceStore()
    return _invoice_store


async def get_product_store() -> SQLiteProductStore:
    """Get singleton product store instance."""
    global _product_store
    if _product_store is None:
        _product_store = SQLiteProductStore()
    return _product_store


__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
    "store_errors",
    # Aliases for connection
    "get_connection_pool",
    "close_connection_pool",
    # Store classes
    "SQLiteInvoiceStore",
    "SQLiteProductStore",
    # Factory functions
    "get_invoice_store",
    "get_product_store",
]
