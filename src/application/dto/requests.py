"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
These are the ONLY contracts between API and use cases.

Line fields are deliberately loose: the issuance use case owns numeric
coercion so that bad values surface as VALIDATION_ERROR (400) with the
offending field named.
"""

from typing import Any

from pydantic import BaseModel, Field


class LineItemRequest(BaseModel):
    """A line as submitted by the client."""

    name: str | None = Field(default=None, description="Product name")
    unit_price: Any = Field(default=None, description="Price per unit", examples=[1500])
    quantity: Any = Field(default=None, description="Whole quantity >= 1", examples=[2])
    description: str | None = Field(default=None, description="Optional line description")
    line_total: Any = Field(
        default=None,
        description="Ignored; recomputed server side",
    )


class IssuerRequest(BaseModel):
    """Issuer block printed on the invoice."""

    name: str | None = Field(default=None, description="Business name")
    address: str = ""
    phone: str = ""
    email: str = ""
    logo_ref: str = Field(default="", description="Reference to a stored logo")


class IssueInvoiceRequest(BaseModel):
    """Request to issue (finalize and persist) an invoice."""

    lines: list[LineItemRequest] = Field(
        default_factory=list,
        description="Billed lines, in display order",
    )
    issuer: IssuerRequest | None = Field(default=None, description="Issuer details")
    currency: str | None = Field(
        default=None,
        description="Currency label (defaults to configured currency)",
        examples=["FCFA"],
    )
    notes: str | None = Field(default=None, description="Free-text notes")
    tax_rate: Any = Field(
        default=None,
        description="Tax rate in percent; missing means 0",
        examples=[18],
    )


# --- Catalog ---


class UpsertProductRequest(BaseModel):
    """Create a catalog product or refresh the existing one with that name."""

    name: str = Field(..., min_length=1, description="Product name")
    unit_price: float = Field(..., ge=0, description="Last known unit price")
    description: str | None = Field(default=None, description="Default line description")


class UpdateProductRequest(BaseModel):
    """Edit a catalog product. Omitted fields are left unchanged."""

    name: str | None = Field(default=None, min_length=1)
    unit_price: float | None = Field(default=None, ge=0)
    description: str | None = None
