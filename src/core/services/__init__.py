"""
Core business logic services.

Layer-pure services that depend only on:
- src/core/entities/*
- src/core/interfaces/*
- src/core/exceptions.py

NO infrastructure imports. All dependencies injected via constructor.
"""

from src.core.services.invoice_numbering import (
    InvoiceNumberAllocator,
    InvoiceNumberGenerator,
)
from src.core.services.invoice_totals import (
    InvoiceTotals,
    compute_line_total,
    compute_totals,
    round2,
)
from src.core.services.product_catalog import ProductCatalog

__all__ = [
    # Totals
    "InvoiceTotals",
    "compute_line_total",
    "compute_totals",
    "round2",
    # Numbering
    "InvoiceNumberGenerator",
    "InvoiceNumberAllocator",
    # Catalog
    "ProductCatalog",
]
