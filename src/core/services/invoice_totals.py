"""
Invoice totals calculation.

Amounts are rounded to the cent, half away from zero, at each of the three
boundaries (subtotal, tax amount, grand total). Every rounded figure feeds
the next formula, so client-side previews that follow the same steps agree
to the cent.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, localcontext

from src.core.entities.invoice import MONEY_CONTEXT, LineItem, TaxInfo
from src.core.exceptions import ValidationError

CENT = Decimal("0.01")
HUNDRED = Decimal("100")

# Accepted amounts stay below 10**MAX_MAGNITUDE with at most MAX_DIGITS digits
MAX_MAGNITUDE = 15
MAX_DIGITS = 30


@dataclass(frozen=True)
class InvoiceTotals:
    """Server-computed totals of an invoice."""

    subtotal: Decimal
    tax: TaxInfo
    grand_total: Decimal


def round2(value: Decimal) -> Decimal:
    """Round to 2 decimal places, half away from zero."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def compute_line_total(unit_price: Decimal, quantity: int) -> Decimal:
    """Line total before any rounding."""
    if unit_price < 0:
        raise ValidationError("unit_price", "must be zero or positive", unit_price)
    if quantity < 1:
        raise ValidationError("quantity", "must be at least 1", quantity)
    with localcontext(MONEY_CONTEXT):
        return unit_price * quantity


def in_money_range(value: Decimal) -> bool:
    """Whether an amount is small enough for exact totals."""
    return (
        value.adjusted() < MAX_MAGNITUDE
        and len(value.as_tuple().digits) <= MAX_DIGITS
    )


def compute_totals(
    lines: Iterable[LineItem],
    tax_rate: Decimal | int | None = None,
) -> InvoiceTotals:
    """
    Compute subtotal, tax and grand total for a list of lines.

    Line totals are recomputed from unit price and quantity; whatever
    ``line_total`` the caller carried is ignored.

    Args:
        lines: Invoice lines.
        tax_rate: Tax rate in percent. ``None`` means 0.

    Returns:
        InvoiceTotals with every amount rounded to the cent.
    """
    rate = Decimal("0") if tax_rate is None else Decimal(tax_rate)
    if rate < 0:
        raise ValidationError("tax_rate", "must be zero or positive", tax_rate)

    with localcontext(MONEY_CONTEXT):
        raw_subtotal = sum(
            (compute_line_total(line.unit_price, line.quantity) for line in lines),
            Decimal("0"),
        )
        subtotal = round2(raw_subtotal)
        tax_amount = round2(subtotal * rate / HUNDRED)
        grand_total = round2(subtotal + tax_amount)

    return InvoiceTotals(
        subtotal=subtotal,
        tax=TaxInfo(rate=rate, amount=tax_amount),
        grand_total=grand_total,
    )
