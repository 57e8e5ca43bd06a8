"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization.
These are the ONLY contracts between use cases and API layer.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class LineItemResponse(BaseModel):
    """Line item in invoice response."""

    name: str = Field(..., description="Product name")
    description: str | None = Field(default=None, description="Line description")
    quantity: int = Field(..., description="Quantity billed")
    unit_price: float = Field(..., description="Price per unit")
    line_total: float = Field(..., description="Line total (quantity * unit_price)")


class IssuerResponse(BaseModel):
    """Issuer block."""

    name: str
    address: str = ""
    phone: str = ""
    email: str = ""
    logo_ref: str = ""


class InvoiceResponse(BaseModel):
    """Invoice response DTO."""

    id: int = Field(..., description="Store ID")
    number: str = Field(..., description="Unique invoice number", examples=["FACT-20260119-0042"])
    issued_at: datetime = Field(..., description="Issuance timestamp (UTC)")
    issuer: IssuerResponse
    lines: list[LineItemResponse] = Field(default=[], description="Line items")
    subtotal: float = Field(..., description="Sum of line totals, rounded")
    tax_rate: float = Field(default=0.0, description="Tax rate in percent")
    tax_amount: float = Field(default=0.0, description="Tax amount, rounded")
    grand_total: float = Field(..., description="Subtotal plus tax, rounded")
    currency: str = Field(default="FCFA", description="Currency label")
    notes: str | None = None
    created_at: datetime


class InvoiceListResponse(BaseModel):
    """List of invoices, most recent first."""

    invoices: list[InvoiceResponse]
    total: int


class CatalogSyncFailureResponse(BaseModel):
    """A product whose statistics could not be updated."""

    product_name: str
    reason: str


class CatalogSyncResponse(BaseModel):
    """Outcome of the post-issuance catalog update."""

    updated: list[str] = Field(default=[], description="Products whose usage was counted")
    missing: list[str] = Field(default=[], description="Names not present in the catalog")
    failed: list[CatalogSyncFailureResponse] = Field(default=[])


class IssueInvoiceResponse(BaseModel):
    """Response for invoice issuance.

    The invoice is committed even when catalog_sync reports failures.
    """

    invoice: InvoiceResponse
    catalog_sync: CatalogSyncResponse


class ProductResponse(BaseModel):
    """Catalog product."""

    id: int
    name: str
    normalized_name: str
    unit_price: float
    description: str | None = None
    usage_count: int
    last_used_at: datetime
    created_at: datetime
    updated_at: datetime


class ProductListResponse(BaseModel):
    """List of catalog products."""

    products: list[ProductResponse]
    total: int


class ComponentHealthResponse(BaseModel):
    """Health of one backing component."""

    name: str
    available: bool
    latency_ms: float | None = None
    error: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    database: ComponentHealthResponse | None = None


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. INVOICE_NOT_FOUND)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=datetime.now)
