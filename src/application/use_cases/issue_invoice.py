"""
Issue Invoice Use Case.

Validates client lines, computes totals server side, allocates a unique
number, persists the invoice, then updates catalog usage statistics.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from tenacity import AsyncRetrying, RetryError, retry_if_exception_type, stop_after_attempt

from src.application.dto.requests import IssueInvoiceRequest, LineItemRequest
from src.application.dto.responses import (
    CatalogSyncFailureResponse,
    CatalogSyncResponse,
    InvoiceResponse,
    IssueInvoiceResponse,
    IssuerResponse,
    LineItemResponse,
)
from src.config import InvoicingSettings, get_logger, get_settings
from src.core.entities.invoice import Invoice, IssuerInfo, LineItem
from src.core.exceptions import (
    CatalogSyncError,
    InvoiceNumberConflictError,
    NumberCapacityExhaustedError,
    ValidationError,
)
from src.core.interfaces.storage import IInvoiceStore
from src.core.services.invoice_numbering import (
    InvoiceNumberAllocator,
    InvoiceNumberGenerator,
    log_number_retry,
    utc_now,
)
from src.core.services.invoice_totals import (
    compute_line_total,
    compute_totals,
    in_money_range,
)
from src.core.services.product_catalog import ProductCatalog

logger = get_logger(__name__)


@dataclass
class CatalogSyncReport:
    """What the post-commit catalog update did, line by line."""

    updated: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)
    failed: list[CatalogSyncError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


@dataclass
class IssueInvoiceResult:
    """Result of issuing an invoice."""

    invoice: Invoice
    catalog_sync: CatalogSyncReport


def _to_decimal(field_name: str, value: Any) -> Decimal:
    """Coerce a client-supplied number, rejecting bools and non-finite values."""
    if value is None:
        raise ValidationError(field_name, "is required")
    if isinstance(value, bool):
        raise ValidationError(field_name, "must be a number", value)

    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, int):
        number = Decimal(value)
    elif isinstance(value, float):
        number = Decimal(str(value))
    elif isinstance(value, str):
        try:
            number = Decimal(value.strip())
        except InvalidOperation:
            raise ValidationError(field_name, "must be a number", value) from None
    else:
        raise ValidationError(field_name, "must be a number", value)

    if not number.is_finite():
        raise ValidationError(field_name, "must be a finite number", value)
    if not in_money_range(number):
        raise ValidationError(field_name, "is out of range", value)
    return number


def normalize_line(index: int, line: LineItemRequest) -> LineItem:
    """Turn a submitted line into a LineItem with a recomputed total."""
    prefix = f"lines[{index}]"

    if line.name is None or not line.name.strip():
        raise ValidationError(f"{prefix}.name", "is required", line.name)

    unit_price = _to_decimal(f"{prefix}.unit_price", line.unit_price)
    if unit_price < 0:
        raise ValidationError(f"{prefix}.unit_price", "must be zero or positive", line.unit_price)

    quantity = _to_decimal(f"{prefix}.quantity", line.quantity)
    if quantity != quantity.to_integral_value():
        raise ValidationError(f"{prefix}.quantity", "must be a whole number", line.quantity)
    if quantity < 1:
        raise ValidationError(f"{prefix}.quantity", "must be at least 1", line.quantity)

    return LineItem(
        name=line.name.strip(),
        unit_price=unit_price,
        quantity=int(quantity),
        description=line.description,
        line_total=compute_line_total(unit_price, int(quantity)),
    )


def normalize_tax_rate(value: Any) -> Decimal:
    if value is None:
        return Decimal("0")
    rate = _to_decimal("tax_rate", value)
    if rate < 0:
        raise ValidationError("tax_rate", "must be zero or positive", value)
    return rate


def invoice_to_response(invoice: Invoice) -> InvoiceResponse:
    """Convert an Invoice entity to its API representation."""
    return InvoiceResponse(
        id=invoice.id,  # type: ignore[arg-type]
        number=invoice.number,
        issued_at=invoice.issued_at,
        issuer=IssuerResponse(**invoice.issuer.model_dump()),
        lines=[
            LineItemResponse(
                name=line.name,
                description=line.description,
                quantity=line.quantity,
                unit_price=float(line.unit_price),
                line_total=float(line.line_total),
            )
            for line in invoice.lines
        ],
        subtotal=float(invoice.subtotal),
        tax_rate=float(invoice.tax.rate),
        tax_amount=float(invoice.tax.amount),
        grand_total=float(invoice.grand_total),
        currency=invoice.currency,
        notes=invoice.notes,
        created_at=invoice.created_at,
    )


class IssueInvoiceUseCase:
    """
    Use case for issuing an invoice.

    Flow:
    1. Validate and normalize lines (no store access on failure)
    2. Compute totals
    3. Allocate a number and insert; an insert conflict re-allocates
    4. Record product usage in the catalog (best effort)
    """

    def __init__(
        self,
        invoice_store: IInvoiceStore | None = None,
        catalog: ProductCatalog | None = None,
        generator: InvoiceNumberGenerator | None = None,
        settings: InvoicingSettings | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._invoice_store = invoice_store
        self._catalog = catalog
        self._settings = settings
        self._clock = clock
        self._generator = generator
        self._allocator: InvoiceNumberAllocator | None = None

    def _get_settings(self) -> InvoicingSettings:
        if self._settings is None:
            self._settings = get_settings().invoicing
        return self._settings

    async def _get_invoice_store(self) -> IInvoiceStore:
        if self._invoice_store is None:
            from src.infrastructure.storage.sqlite import get_invoice_store

            self._invoice_store = await get_invoice_store()
        return self._invoice_store

    async def _get_catalog(self) -> ProductCatalog:
        if self._catalog is None:
            from src.infrastructure.storage.sqlite import get_product_store

            self._catalog = ProductCatalog(await get_product_store(), clock=self._clock)
        return self._catalog

    async def _get_allocator(self) -> InvoiceNumberAllocator:
        if self._allocator is None:
            settings = self._get_settings()
            generator = self._generator or InvoiceNumberGenerator(
                clock=self._clock,
                prefix=settings.number_prefix,
                tz=settings.number_tz,
            )
            self._allocator = InvoiceNumberAllocator(
                store=await self._get_invoice_store(),
                generator=generator,
                max_attempts=settings.max_number_attempts,
            )
        return self._allocator

    def _build_issuer(self, request: IssueInvoiceRequest) -> IssuerInfo:
        default_name = self._get_settings().default_issuer_name
        if request.issuer is None:
            return IssuerInfo(name=default_name)
        data = request.issuer.model_dump()
        data["name"] = (data.get("name") or "").strip() or default_name
        return IssuerInfo(**data)

    async def execute(self, request: IssueInvoiceRequest) -> IssueInvoiceResult:
        """
        Issue an invoice.

        Raises:
            ValidationError: Bad lines or tax rate. Nothing was written.
            NumberCapacityExhaustedError: No free number within the budget.
            StoreUnavailableError: The invoice store could not be reached.
        """
        if not request.lines:
            raise ValidationError("lines", "an invoice needs at least one line")

        lines = [normalize_line(i, line) for i, line in enumerate(request.lines)]
        tax_rate = normalize_tax_rate(request.tax_rate)
        totals = compute_totals(lines, tax_rate)

        settings = self._get_settings()
        issuer = self._build_issuer(request)

        logger.info(
            "invoice_issue_started",
            lines=len(lines),
            grand_total=str(totals.grand_total),
        )

        store = await self._get_invoice_store()
        allocator = await self._get_allocator()

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(settings.max_number_attempts),
                retry=retry_if_exception_type(InvoiceNumberConflictError),
                before_sleep=log_number_retry,
            ):
                with attempt:
                    number = await allocator.allocate()
                    issued_at = self._clock()
                    invoice = Invoice(
                        number=number,
                        issued_at=issued_at,
                        issuer=issuer,
                        lines=lines,
                        subtotal=totals.subtotal,
                        tax=totals.tax,
                        grand_total=totals.grand_total,
                        currency=request.currency or settings.default_currency,
                        notes=request.notes,
                        created_at=issued_at,
                    )
                    saved = await store.insert(invoice)
        except RetryError as e:
            raise NumberCapacityExhaustedError(settings.max_number_attempts) from e

        logger.info(
            "invoice_issued",
            invoice_id=saved.id,
            number=saved.number,
            grand_total=str(saved.grand_total),
        )

        report = await self._sync_catalog(saved)
        return IssueInvoiceResult(invoice=saved, catalog_sync=report)

    async def _sync_catalog(self, invoice: Invoice) -> CatalogSyncReport:
        """Count one use per line for products already in the catalog."""
        report = CatalogSyncReport()

        try:
            catalog = await self._get_catalog()
        except Exception as e:
            for line in invoice.lines:
                report.failed.append(CatalogSyncError(line.name, invoice.number, str(e)))
            logger.warning("catalog_sync_failed", number=invoice.number, error=str(e))
            return report

        for line in invoice.lines:
            try:
                found = await catalog.record_usage(line.name, at=invoice.issued_at)
            except Exception as e:
                report.failed.append(CatalogSyncError(line.name, invoice.number, str(e)))
                logger.warning(
                    "catalog_sync_failed",
                    number=invoice.number,
                    product=line.name,
                    error=str(e),
                )
                continue

            if found:
                report.updated.append(line.name)
            else:
                report.missing.append(line.name)

        logger.debug(
            "catalog_sync_complete",
            number=invoice.number,
            updated=len(report.updated),
            missing=len(report.missing),
            failed=len(report.failed),
        )
        return report

    def to_response(self, result: IssueInvoiceResult) -> IssueInvoiceResponse:
        """Convert result to API response."""
        sync = result.catalog_sync
        return IssueInvoiceResponse(
            invoice=invoice_to_response(result.invoice),
            catalog_sync=CatalogSyncResponse(
                updated=sync.updated,
                missing=sync.missing,
                failed=[
                    CatalogSyncFailureResponse(
                        product_name=error.details["product_name"],
                        reason=error.details["reason"],
                    )
                    for error in sync.failed
                ],
            ),
        )
