"""
Invoice domain entities.

An invoice is created once at issuance and never mutated afterwards, so the
models here are frozen. Stores hand back copies with ``id`` assigned.
"""

from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Context, Decimal, localcontext

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Wide enough that products and sums of accepted amounts are exact
MONEY_CONTEXT = Context(prec=80, rounding=ROUND_HALF_UP)


class LineItem(BaseModel):
    """A single billed product line."""

    model_config = ConfigDict(frozen=True)

    name: str
    unit_price: Decimal = Field(..., ge=0)
    quantity: int = Field(..., ge=1)
    description: str | None = None
    line_total: Decimal = Decimal("0")

    @model_validator(mode="after")
    def check_line_total(self) -> "LineItem":
        """line_total is always unit_price * quantity."""
        with localcontext(MONEY_CONTEXT):
            expected = self.unit_price * self.quantity
        if self.line_total != expected:
            object.__setattr__(self, "line_total", expected)
        return self


class IssuerInfo(BaseModel):
    """The business issuing the invoice, as printed on it."""

    model_config = ConfigDict(frozen=True)

    name: str = "Mon Entreprise"
    address: str = ""
    phone: str = ""
    email: str = ""
    logo_ref: str = ""


class TaxInfo(BaseModel):
    """Tax rate (percent) and the resulting amount."""

    model_config = ConfigDict(frozen=True)

    rate: Decimal = Decimal("0")
    amount: Decimal = Decimal("0")


class Invoice(BaseModel):
    """
    An issued invoice.

    Totals are computed server side before construction; see
    ``src.core.services.invoice_totals``.
    """

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    number: str
    issued_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    issuer: IssuerInfo = Field(default_factory=IssuerInfo)
    lines: list[LineItem]
    subtotal: Decimal
    tax: TaxInfo = Field(default_factory=TaxInfo)
    grand_total: Decimal
    currency: str = "FCFA"
    notes: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @model_validator(mode="after")
    def require_lines(self) -> "Invoice":
        if not self.lines:
            raise ValueError("an invoice needs at least one line")
        return self
