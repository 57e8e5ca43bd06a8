"""Data Transfer Objects for API layer.

Request DTOs: Validate and parse incoming API requests.
Response DTOs: Structure and serialize API responses.

These are the ONLY contracts between API handlers and use cases.
"""

from src.application.dto.requests import (
    IssueInvoiceRequest,
    IssuerRequest,
    LineItemRequest,
    UpdateProductRequest,
    UpsertProductRequest,
)
from src.application.dto.responses import (
    CatalogSyncFailureResponse,
    CatalogSyncResponse,
    ComponentHealthResponse,
    ErrorResponse,
    HealthResponse,
    InvoiceListResponse,
    InvoiceResponse,
    IssueInvoiceResponse,
    IssuerResponse,
    LineItemResponse,
    ProductListResponse,
    ProductResponse,
)

__all__ = [
    # Requests
    "IssueInvoiceRequest",
    "IssuerRequest",
    "LineItemRequest",
    "UpsertProductRequest",
    "UpdateProductRequest",
    # Responses
    "InvoiceResponse",
    "InvoiceListResponse",
    "IssuerResponse",
    "LineItemResponse",
    "IssueInvoiceResponse",
    "CatalogSyncResponse",
    "CatalogSyncFailureResponse",
    "ProductResponse",
    "ProductListResponse",
    "HealthResponse",
    "ComponentHealthResponse",
    "ErrorResponse",
]
