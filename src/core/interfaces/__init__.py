"""Core interfaces (ports) for dependency injection."""

from src.core.interfaces.storage import IInvoiceStore, IProductStore

__all__ = [
    # Storage interfaces
    "IInvoiceStore",
    "IProductStore",
]
