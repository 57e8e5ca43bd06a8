"""Application use cases."""

from src.application.use_cases.issue_invoice import (
    CatalogSyncReport,
    IssueInvoiceResult,
    IssueInvoiceUseCase,
    invoice_to_response,
)

__all__ = [
    "IssueInvoiceUseCase",
    "IssueInvoiceResult",
    "CatalogSyncReport",
    "invoice_to_response",
]
