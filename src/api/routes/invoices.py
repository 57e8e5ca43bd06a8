"""
Invoice issuance and lookup endpoints.
"""

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import get_app_settings, get_inv_store, get_issue_invoice_use_case
from src.application.dto.requests import IssueInvoiceRequest
from src.application.dto.responses import (
    ErrorResponse,
    InvoiceListResponse,
    InvoiceResponse,
    IssueInvoiceResponse,
)
from src.application.use_cases import IssueInvoiceUseCase, invoice_to_response
from src.config import Settings
from src.core.exceptions import InvoiceNotFoundError
from src.infrastructure.storage.sqlite import SQLiteInvoiceStore

router = APIRouter(prefix="/api/invoices", tags=["invoices"])


@router.post(
    "",
    response_model=IssueInvoiceResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid lines or tax rate"},
        503: {"model": ErrorResponse, "description": "Store unavailable or numbers exhausted"},
    },
)
async def issue_invoice(
    request: IssueInvoiceRequest,
    use_case: IssueInvoiceUseCase = Depends(get_issue_invoice_use_case),
) -> IssueInvoiceResponse:
    """
    Issue an invoice.

    Totals are recomputed server side and a unique number is assigned.
    Catalog statistics are updated afterwards; failures there are reported
    in ``catalog_sync`` and do not undo the invoice.
    """
    result = await use_case.execute(request)
    return use_case.to_response(result)


@router.get("", response_model=InvoiceListResponse)
async def list_invoices(
    limit: int | None = Query(default=None, ge=1, le=1000),
    store: SQLiteInvoiceStore = Depends(get_inv_store),
    settings: Settings = Depends(get_app_settings),
) -> InvoiceListResponse:
    """List invoices, most recently issued first."""
    invoices = await store.list_recent(limit=limit or settings.invoicing.list_limit)
    return InvoiceListResponse(
        invoices=[invoice_to_response(inv) for inv in invoices],
        total=len(invoices),
    )


@router.get(
    "/by-number/{number}",
    response_model=InvoiceResponse,
    responses={404: {"model": ErrorResponse, "description": "Invoice not found"}},
)
async def get_invoice_by_number(
    number: str,
    store: SQLiteInvoiceStore = Depends(get_inv_store),
) -> InvoiceResponse:
    """Get an invoice by its human-readable number."""
    invoice = await store.find_by_number(number)
    if invoice is None:
        raise InvoiceNotFoundError(number)
    return invoice_to_response(invoice)


@router.get(
    "/{invoice_id}",
    response_model=InvoiceResponse,
    responses={404: {"model": ErrorResponse, "description": "Invoice not found"}},
)
async def get_invoice(
    invoice_id: int,
    store: SQLiteInvoiceStore = Depends(get_inv_store),
) -> InvoiceResponse:
    """Get an invoice by store ID."""
    invoice = await store.find_by_id(invoice_id)
    if invoice is None:
        raise InvoiceNotFoundError(invoice_id)
    return invoice_to_response(invoice)


@router.delete(
    "/{invoice_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse, "description": "Invoice not found"}},
)
async def delete_invoice(
    invoice_id: int,
    store: SQLiteInvoiceStore = Depends(get_inv_store),
) -> None:
    """Delete an invoice. Catalog statistics are left as they are."""
    deleted = await store.delete_by_id(invoice_id)
    if not deleted:
        raise InvoiceNotFoundError(invoice_id)
