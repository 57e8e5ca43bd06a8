"""Pytest configuration and fixtures."""

import asyncio
import random
from collections.abc import Generator
from datetime import UTC, datetime
from decimal import Decimal

import pytest

from src.config import reset_settings
from src.core.entities import Invoice, LineItem
from src.core.exceptions import InvoiceNumberConflictError, StoreUnavailableError
from src.core.interfaces import IInvoiceStore

FIXED_NOW = datetime(2026, 1, 19, 10, 30, tzinfo=UTC)


class ScriptedRandom(random.Random):
    """random.Random whose randint replays a fixed list of values."""

    def __init__(self, values: list[int]):
        super().__init__(0)
        self._values = list(values)
        self.calls = 0

    def randint(self, a: int, b: int) -> int:
        self.calls += 1
        return self._values.pop(0)


class InMemoryInvoiceStore(IInvoiceStore):
    """
    Dict-backed invoice store enforcing number uniqueness on insert.

    ``find_by_number`` yields to the event loop after answering, so two
    concurrent issuances can both see a number as free before either
    inserts it.
    """

    def __init__(self):
        self.invoices: dict[int, Invoice] = {}
        self.insert_calls = 0
        self.probe_calls = 0
        self.unavailable = False
        self._next_id = 1

    def _check(self, operation: str) -> None:
        if self.unavailable:
            raise StoreUnavailableError(operation, "connection refused")

    async def insert(self, invoice: Invoice) -> Invoice:
        self._check("insert_invoice")
        self.insert_calls += 1
        if any(inv.number == invoice.number for inv in self.invoices.values()):
            raise InvoiceNumberConflictError(invoice.number)
        saved = invoice.model_copy(update={"id": self._next_id})
        self.invoices[self._next_id] = saved
        self._next_id += 1
        return saved

    async def find_by_number(self, number: str) -> Invoice | None:
        self._check("find_invoice_by_number")
        self.probe_calls += 1
        found = next((inv for inv in self.invoices.values() if inv.number == number), None)
        await asyncio.sleep(0)
        return found

    async def find_by_id(self, invoice_id: int) -> Invoice | None:
        return self.invoices.get(invoice_id)

    async def list_recent(self, limit: int = 100) -> list[Invoice]:
        ordered = sorted(
            self.invoices.values(), key=lambda inv: (inv.issued_at, inv.id), reverse=True
        )
        return ordered[:limit]

    async def delete_by_id(self, invoice_id: int) -> bool:
        return self.invoices.pop(invoice_id, None) is not None


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch) -> Generator[None, None, None]:
    """Point settings at a per-test data directory."""
    monkeypatch.setenv("STORAGE_DATA_DIR", str(tmp_path / "data"))
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def fixed_clock():
    """Clock frozen at 2026-01-19 10:30 UTC."""
    return lambda: FIXED_NOW


@pytest.fixture
def scripted_rng():
    """Factory for random sources that replay the given suffixes."""
    return ScriptedRandom


@pytest.fixture
def memory_invoice_store() -> InMemoryInvoiceStore:
    return InMemoryInvoiceStore()


@pytest.fixture
def sample_invoice() -> Invoice:
    """A two-line invoice with totals already computed (18% tax)."""
    return Invoice(
        number="FACT-20260119-0042",
        issued_at=FIXED_NOW,
        lines=[
            LineItem(name="Chair", unit_price=Decimal("1000"), quantity=3),
            LineItem(
                name="Table",
                unit_price=Decimal("2500.555"),
                quantity=2,
                description="Oak, 6 seats",
            ),
        ],
        subtotal=Decimal("8001.11"),
        tax={"rate": Decimal("18"), "amount": Decimal("1440.20")},
        grand_total=Decimal("9441.31"),
        created_at=FIXED_NOW,
    )
