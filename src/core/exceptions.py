"""
Domain exceptions for the invoicing application.

Provides specific exception types for different error scenarios.
"""

from typing import Any


class FacturierError(Exception):
    """Base exception for all application errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Validation Exceptions
class ValidationError(FacturierError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


# Storage Exceptions
class StorageError(FacturierError):
    """Base exception for storage operations."""

    pass


class InvoiceNotFoundError(StorageError):
    """Invoice not found in storage."""

    def __init__(self, invoice_ref: int | str):
        super().__init__(
            f"Invoice not found: {invoice_ref}",
            code="INVOICE_NOT_FOUND",
            details={"invoice": invoice_ref},
        )


class ProductNotFoundError(StorageError):
    """Catalog product not found in storage."""

    def __init__(self, product_id: int):
        super().__init__(
            f"Product not found: {product_id}",
            code="PRODUCT_NOT_FOUND",
            details={"product_id": product_id},
        )


class DuplicateProductError(StorageError):
    """Another product already uses this (case-insensitive) name."""

    def __init__(self, name: str):
        super().__init__(
            f"A product named '{name}' already exists",
            code="DUPLICATE_PRODUCT",
            details={"name": name},
        )


class InvoiceNumberConflictError(StorageError):
    """Insert rejected because the invoice number is already taken."""

    def __init__(self, number: str):
        super().__init__(
            f"Invoice number already in use: {number}",
            code="INVOICE_NUMBER_CONFLICT",
            details={"number": number},
        )


class StoreUnavailableError(StorageError):
    """The backing store cannot be reached."""

    def __init__(self, operation: str, reason: str | None = None):
        super().__init__(
            f"Store unavailable during {operation}" + (f": {reason}" if reason else ""),
            code="STORE_UNAVAILABLE",
            details={"operation": operation, "reason": reason},
        )


class DatabaseError(StorageError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )


# Issuance Exceptions
class IssuanceError(FacturierError):
    """Base exception for invoice issuance."""

    pass


class NumberCapacityExhaustedError(IssuanceError):
    """No free invoice number was found within the attempt budget."""

    def __init__(self, attempts: int):
        super().__init__(
            f"Could not allocate a unique invoice number after {attempts} attempts",
            code="NUMBER_CAPACITY_EXHAUSTED",
            details={"attempts": attempts},
        )


class CatalogSyncError(FacturierError):
    """Catalog statistics could not be updated after an invoice was committed."""

    def __init__(self, product_name: str, invoice_number: str, reason: str):
        super().__init__(
            f"Catalog sync failed for '{product_name}' on {invoice_number}: {reason}",
            code="CATALOG_SYNC_FAILED",
            details={
                "product_name": product_name,
                "invoice_number": invoice_number,
                "reason": reason,
            },
        )
