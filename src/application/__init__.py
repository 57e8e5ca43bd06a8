"""
Application layer - Use cases and DTOs.

This layer orchestrates business logic by:
1. Defining request/response DTOs for API contracts
2. Implementing use cases that coordinate core services

Use cases are the only entry point for API handlers that write invoices.
"""

from src.application.dto.requests import (
    IssueInvoiceRequest,
    UpdateProductRequest,
    UpsertProductRequest,
)
from src.application.dto.responses import (
    ErrorResponse,
    HealthResponse,
    InvoiceListResponse,
    InvoiceResponse,
    IssueInvoiceResponse,
    LineItemResponse,
    ProductListResponse,
    ProductResponse,
)
from src.application.use_cases import (
    CatalogSyncReport,
    IssueInvoiceResult,
    IssueInvoiceUseCase,
)

__all__ = [
    # Request DTOs
    "IssueInvoiceRequest",
    "UpsertProductRequest",
    "UpdateProductRequest",
    # Response DTOs
    "InvoiceResponse",
    "InvoiceListResponse",
    "IssueInvoiceResponse",
    "LineItemResponse",
    "ProductResponse",
    "ProductListResponse",
    "HealthResponse",
    "ErrorResponse",
    # Use Cases
    "IssueInvoiceUseCase",
    "IssueInvoiceResult",
    "CatalogSyncReport",
]
