"""
Dependency injection container for FastAPI.

Provides service instances to route handlers.
"""

from functools import lru_cache

from src.application.use_cases import IssueInvoiceUseCase
from src.config import Settings, get_settings
from src.core.services import ProductCatalog
from src.infrastructure.storage.sqlite import (
    SQLiteInvoiceStore,
    get_invoice_store,
    get_product_store,
)


@lru_cache
def get_app_settings() -> Settings:
    """Get cached application settings."""
    return get_settings()


# Store dependencies
async def get_inv_store() -> SQLiteInvoiceStore:
    """Get invoice store."""
    return await get_invoice_store()


# Catalog dependency
async def get_product_catalog() -> ProductCatalog:
    """Get product catalog service."""
    return ProductCatalog(store=await get_product_store())


# Use case dependency
def get_issue_invoice_use_case() -> IssueInvoiceUseCase:
    """Get issue invoice use case."""
    return IssueInvoiceUseCase()
