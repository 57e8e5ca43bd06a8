"""Tests for IssueInvoiceUseCase."""

import asyncio
import re
from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from src.application.dto.requests import IssueInvoiceRequest, IssuerRequest, LineItemRequest
from src.application.use_cases.issue_invoice import IssueInvoiceUseCase
from src.config import InvoicingSettings
from src.core.exceptions import (
    NumberCapacityExhaustedError,
    StoreUnavailableError,
    ValidationError,
)
from src.core.services.invoice_numbering import InvoiceNumberGenerator


@pytest.fixture
def mock_catalog():
    catalog = AsyncMock()
    catalog.record_usage.return_value = True
    return catalog


@pytest.fixture
def use_case_factory(memory_invoice_store, mock_catalog, fixed_clock, scripted_rng):
    """Build a use case over the in-memory store with scripted number suffixes."""

    def factory(suffixes=(42, 43, 44, 45, 46), max_attempts=5, catalog=mock_catalog):
        return IssueInvoiceUseCase(
            invoice_store=memory_invoice_store,
            catalog=catalog,
            generator=InvoiceNumberGenerator(
                rng=scripted_rng(list(suffixes)), clock=fixed_clock
            ),
            settings=InvoicingSettings(max_number_attempts=max_attempts),
            clock=fixed_clock,
        )

    return factory


def make_request(*lines: dict, **kwargs) -> IssueInvoiceRequest:
    return IssueInvoiceRequest(lines=[LineItemRequest(**line) for line in lines], **kwargs)


CHAIR = {"name": "Chair", "unit_price": 1000, "quantity": 3}
TABLE = {"name": "Table", "unit_price": "2500.555", "quantity": 2}


class TestIssueInvoice:
    async def test_issues_with_server_totals(self, use_case_factory, memory_invoice_store):
        use_case = use_case_factory()

        result = await use_case.execute(make_request(CHAIR))

        invoice = result.invoice
        assert invoice.id == 1
        assert invoice.number == "FACT-20260119-0042"
        assert invoice.subtotal == Decimal("3000")
        assert invoice.tax.amount == Decimal("0")
        assert invoice.grand_total == Decimal("3000")
        assert invoice.currency == "FCFA"
        assert invoice.issuer.name == "Mon Entreprise"
        assert memory_invoice_store.invoices[1] == invoice

    async def test_tax_and_fractional_price(self, use_case_factory):
        use_case = use_case_factory()

        result = await use_case.execute(make_request(TABLE, tax_rate=18))

        invoice = result.invoice
        assert invoice.lines[0].line_total == Decimal("5001.110")
        assert invoice.subtotal == Decimal("5001.11")
        assert invoice.tax.amount == Decimal("900.20")
        assert invoice.grand_total == Decimal("5901.31")

    async def test_client_line_total_discarded(self, use_case_factory):
        use_case = use_case_factory()

        result = await use_case.execute(make_request({**CHAIR, "line_total": 1}))

        assert result.invoice.lines[0].line_total == Decimal("3000")

    async def test_lines_keep_entry_order(self, use_case_factory):
        use_case = use_case_factory()

        result = await use_case.execute(make_request(TABLE, CHAIR))

        assert [line.name for line in result.invoice.lines] == ["Table", "Chair"]

    async def test_issuer_currency_and_notes(self, use_case_factory):
        use_case = use_case_factory()

        result = await use_case.execute(
            make_request(
                CHAIR,
                issuer=IssuerRequest(name="Boutique Awa", phone="+221 77 000 00 00"),
                currency="XOF",
                notes="Paid cash",
            )
        )

        assert result.invoice.issuer.name == "Boutique Awa"
        assert result.invoice.issuer.phone == "+221 77 000 00 00"
        assert result.invoice.currency == "XOF"
        assert result.invoice.notes == "Paid cash"

    async def test_number_format(self, use_case_factory):
        use_case = use_case_factory()

        result = await use_case.execute(make_request(CHAIR))

        assert re.match(r"^FACT-\d{8}-\d{4}$", result.invoice.number)

    async def test_number_dated_in_configured_zone(self, memory_invoice_store, mock_catalog):
        use_case = IssueInvoiceUseCase(
            invoice_store=memory_invoice_store,
            catalog=mock_catalog,
            settings=InvoicingSettings(number_timezone="Asia/Tokyo"),
            clock=lambda: datetime(2026, 1, 19, 23, 30, tzinfo=UTC),
        )

        result = await use_case.execute(make_request(CHAIR))

        assert result.invoice.number.startswith("FACT-20260120-")
        assert result.invoice.issued_at == datetime(2026, 1, 19, 23, 30, tzinfo=UTC)


class TestValidation:
    async def test_empty_lines_rejected_without_store_access(
        self, use_case_factory, memory_invoice_store, mock_catalog
    ):
        use_case = use_case_factory()

        with pytest.raises(ValidationError) as exc_info:
            await use_case.execute(IssueInvoiceRequest(lines=[]))

        assert exc_info.value.details["field"] == "lines"
        assert memory_invoice_store.probe_calls == 0
        assert memory_invoice_store.insert_calls == 0
        mock_catalog.record_usage.assert_not_awaited()

    @pytest.mark.parametrize(
        ("line", "field"),
        [
            ({"unit_price": 10, "quantity": 1}, "lines[0].name"),
            ({"name": "  ", "unit_price": 10, "quantity": 1}, "lines[0].name"),
            ({"name": "Chair", "quantity": 1}, "lines[0].unit_price"),
            ({"name": "Chair", "unit_price": "abc", "quantity": 1}, "lines[0].unit_price"),
            ({"name": "Chair", "unit_price": "NaN", "quantity": 1}, "lines[0].unit_price"),
            ({"name": "Chair", "unit_price": float("inf"), "quantity": 1}, "lines[0].unit_price"),
            ({"name": "Chair", "unit_price": True, "quantity": 1}, "lines[0].unit_price"),
            ({"name": "Chair", "unit_price": -1, "quantity": 1}, "lines[0].unit_price"),
            ({"name": "Chair", "unit_price": "1e27", "quantity": 1}, "lines[0].unit_price"),
            (
                {"name": "Chair", "unit_price": "123456789012345678901234567.5", "quantity": 1},
                "lines[0].unit_price",
            ),
            (
                {"name": "Chair", "unit_price": "0.1234567890123456789012345678901", "quantity": 1},
                "lines[0].unit_price",
            ),
            ({"name": "Chair", "unit_price": 10}, "lines[0].quantity"),
            ({"name": "Chair", "unit_price": 10, "quantity": 0}, "lines[0].quantity"),
            ({"name": "Chair", "unit_price": 10, "quantity": 1.5}, "lines[0].quantity"),
            ({"name": "Chair", "unit_price": 10, "quantity": "two"}, "lines[0].quantity"),
            ({"name": "Chair", "unit_price": 10, "quantity": "1e20"}, "lines[0].quantity"),
        ],
    )
    async def test_bad_line_rejected(
        self, use_case_factory, memory_invoice_store, line, field
    ):
        use_case = use_case_factory()

        with pytest.raises(ValidationError) as exc_info:
            await use_case.execute(make_request(line))

        assert exc_info.value.details["field"] == field
        assert memory_invoice_store.insert_calls == 0

    async def test_error_names_offending_line(self, use_case_factory):
        use_case = use_case_factory()

        with pytest.raises(ValidationError) as exc_info:
            await use_case.execute(
                make_request(CHAIR, {"name": "Lamp", "unit_price": 5, "quantity": -2})
            )

        assert exc_info.value.details["field"] == "lines[1].quantity"

    @pytest.mark.parametrize("rate", [-1, "abc", "-0.5", "1e27"])
    async def test_bad_tax_rate_rejected(self, use_case_factory, memory_invoice_store, rate):
        use_case = use_case_factory()

        with pytest.raises(ValidationError) as exc_info:
            await use_case.execute(make_request(CHAIR, tax_rate=rate))

        assert exc_info.value.details["field"] == "tax_rate"
        assert memory_invoice_store.probe_calls == 0

    async def test_numeric_strings_coerced(self, use_case_factory):
        use_case = use_case_factory()

        result = await use_case.execute(
            make_request({"name": "Chair", "unit_price": "1000", "quantity": "3"}, tax_rate="0")
        )

        assert result.invoice.grand_total == Decimal("3000")
        assert result.invoice.lines[0].quantity == 3

    async def test_large_amounts_stay_exact(self, use_case_factory):
        use_case = use_case_factory()

        result = await use_case.execute(
            make_request(
                {"name": "Crane", "unit_price": "99999999999999.9999999999", "quantity": 999},
                tax_rate="18",
            )
        )

        invoice = result.invoice
        assert invoice.lines[0].line_total == Decimal("99899999999999999.9999999001")
        assert invoice.subtotal == Decimal("99900000000000000.00")
        assert invoice.tax.amount == Decimal("17982000000000000.00")
        assert invoice.grand_total == Decimal("117882000000000000.00")


class TestNumberConflicts:
    async def test_concurrent_issuance_same_candidate(self, use_case_factory):
        # Both issuances draw 0042; the loser hits the insert conflict and
        # draws 0043 on its second attempt.
        use_case = use_case_factory(suffixes=[42, 42, 43])

        first, second = await asyncio.gather(
            use_case.execute(make_request(CHAIR)),
            use_case.execute(make_request(TABLE)),
        )

        numbers = {first.invoice.number, second.invoice.number}
        assert numbers == {"FACT-20260119-0042", "FACT-20260119-0043"}

    async def test_probe_collision_retried(
        self, use_case_factory, memory_invoice_store, sample_invoice
    ):
        await memory_invoice_store.insert(sample_invoice)  # holds ...-0042
        use_case = use_case_factory(suffixes=[42, 7])

        result = await use_case.execute(make_request(CHAIR))

        assert result.invoice.number == "FACT-20260119-0007"

    async def test_capacity_exhausted(
        self, use_case_factory, memory_invoice_store, sample_invoice
    ):
        await memory_invoice_store.insert(sample_invoice)
        use_case = use_case_factory(suffixes=[42] * 3, max_attempts=3)

        with pytest.raises(NumberCapacityExhaustedError):
            await use_case.execute(make_request(CHAIR))

        assert len(memory_invoice_store.invoices) == 1

    async def test_store_unavailable_aborts(
        self, use_case_factory, memory_invoice_store, mock_catalog
    ):
        memory_invoice_store.unavailable = True
        use_case = use_case_factory()

        with pytest.raises(StoreUnavailableError):
            await use_case.execute(make_request(CHAIR))

        mock_catalog.record_usage.assert_not_awaited()


class TestCatalogSync:
    async def test_usage_recorded_per_line_at_issue_time(
        self, use_case_factory, mock_catalog, fixed_clock
    ):
        use_case = use_case_factory()

        result = await use_case.execute(make_request(CHAIR, TABLE))

        assert mock_catalog.record_usage.await_count == 2
        mock_catalog.record_usage.assert_any_await("Chair", at=fixed_clock())
        mock_catalog.record_usage.assert_any_await("Table", at=fixed_clock())
        assert result.catalog_sync.updated == ["Chair", "Table"]
        assert result.catalog_sync.ok

    async def test_same_product_twice_counted_per_line(self, use_case_factory, mock_catalog):
        use_case = use_case_factory()

        await use_case.execute(make_request(CHAIR, {**CHAIR, "name": "chair"}))

        assert mock_catalog.record_usage.await_count == 2

    async def test_unknown_products_reported_missing(self, use_case_factory, mock_catalog):
        mock_catalog.record_usage.return_value = False
        use_case = use_case_factory()

        result = await use_case.execute(make_request(CHAIR))

        assert result.catalog_sync.missing == ["Chair"]
        assert result.catalog_sync.updated == []

    async def test_sync_failure_does_not_fail_issuance(
        self, use_case_factory, mock_catalog, memory_invoice_store
    ):
        mock_catalog.record_usage.side_effect = [
            StoreUnavailableError("increment_product_usage", "locked"),
            True,
        ]
        use_case = use_case_factory()

        result = await use_case.execute(make_request(CHAIR, TABLE))

        assert result.invoice.id in memory_invoice_store.invoices
        assert not result.catalog_sync.ok
        assert len(result.catalog_sync.failed) == 1
        failure = result.catalog_sync.failed[0]
        assert failure.code == "CATALOG_SYNC_FAILED"
        assert failure.details["product_name"] == "Chair"
        assert result.catalog_sync.updated == ["Table"]


class TestToResponse:
    async def test_response_shape(self, use_case_factory):
        use_case = use_case_factory()
        result = await use_case.execute(make_request(TABLE, tax_rate=18))

        response = use_case.to_response(result)

        assert response.invoice.number == "FACT-20260119-0042"
        assert response.invoice.subtotal == 5001.11
        assert response.invoice.tax_amount == 900.2
        assert response.invoice.grand_total == 5901.31
        assert response.invoice.lines[0].quantity == 2
        assert response.catalog_sync.updated == ["Table"]
