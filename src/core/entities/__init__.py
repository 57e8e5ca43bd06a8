"""Core domain entities."""

from src.core.entities.invoice import (
    Invoice,
    IssuerInfo,
    LineItem,
    TaxInfo,
)
from src.core.entities.product import Product, normalize_product_name

__all__ = [
    # Invoice entities
    "Invoice",
    "IssuerInfo",
    "LineItem",
    "TaxInfo",
    # Catalog entities
    "Product",
    "normalize_product_name",
]
