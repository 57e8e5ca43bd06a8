"""
Abstract interfaces for invoice and catalog storage.

Adapters translate driver failures into ``StoreUnavailableError`` and
unique-key violations into the dedicated conflict exceptions.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from src.core.entities.invoice import Invoice
from src.core.entities.product import Product


class IInvoiceStore(ABC):
    """
    Abstract interface for invoice storage.

    The invoice number is unique; the store is the final authority on it.
    """

    @abstractmethod
    async def insert(self, invoice: Invoice) -> Invoice:
        """
        Persist a new invoice and return it with its id assigned.

        Raises:
            InvoiceNumberConflictError: The number is already taken.
        """

    @abstractmethod
    async def find_by_number(self, number: str) -> Invoice | None:
        """Get invoice by its human-readable number."""

    @abstractmethod
    async def find_by_id(self, invoice_id: int) -> Invoice | None:
        """Get invoice by store id."""

    @abstractmethod
    async def list_recent(self, limit: int = 100) -> list[Invoice]:
        """List invoices, most recently issued first."""

    @abstractmethod
    async def delete_by_id(self, invoice_id: int) -> bool:
        """Delete an invoice. Returns False if it did not exist."""


class IProductStore(ABC):
    """
    Abstract interface for catalog product storage.

    Lookups are keyed on ``normalized_name``.
    """

    @abstractmethod
    async def create(self, product: Product) -> Product:
        """
        Create a product.

        Raises:
            DuplicateProductError: The normalized name is already used.
        """

    @abstractmethod
    async def get(self, product_id: int) -> Product | None:
        """Get product by id."""

    @abstractmethod
    async def find_by_normalized_name(self, normalized_name: str) -> Product | None:
        """Exact match on the normalized name."""

    @abstractmethod
    async def search(self, fragment: str, limit: int = 10) -> list[Product]:
        """Substring match on the normalized name, most used first."""

    @abstractmethod
    async def list_recent(self, limit: int = 10) -> list[Product]:
        """Most recently used products first."""

    @abstractmethod
    async def list_products(self, limit: int = 50) -> list[Product]:
        """All products by recency, then usage."""

    @abstractmethod
    async def update(self, product: Product) -> Product:
        """
        Overwrite an existing product.

        Raises:
            DuplicateProductError: The new normalized name is used by another product.
        """

    @abstractmethod
    async def increment_usage(self, normalized_name: str, at: datetime) -> bool:
        """
        Add one to usage_count and set last_used_at.

        Returns False when no product matches; never creates one.
        """

    @abstractmethod
    async def delete(self, product_id: int) -> bool:
        """Delete a product. Returns False if it did not exist."""
