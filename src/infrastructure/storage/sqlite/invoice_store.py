"""SQLite implementation of invoice storage."""

from decimal import Decimal

import aiosqlite

from src.config import get_logger
from src.core.entities.invoice import Invoice, IssuerInfo, LineItem, TaxInfo
from src.core.exceptions import DatabaseError, InvoiceNumberConflictError
from src.core.interfaces.storage import IInvoiceStore
from src.infrastructure.storage.sqlite.connection import (
    get_connection,
    get_transaction,
    parse_timestamp,
    store_errors,
)

logger = get_logger(__name__)


class SQLiteInvoiceStore(IInvoiceStore):
    """SQLite implementation of invoice storage."""

    async def insert(self, invoice: Invoice) -> Invoice:
        """Insert invoice header and lines in one transaction."""
        with store_errors("insert_invoice"):
            try:
                async with get_transaction() as conn:
                    cursor = await conn.execute(
                        """
                        INSERT INTO invoices (
                            number, issued_at,
                            issuer_name, issuer_address, issuer_phone,
                            issuer_email, issuer_logo_ref,
                            subtotal, tax_rate, tax_amount, grand_total,
                            currency, notes, created_at
                        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                        """,
                        (
                            invoice.number,
                            invoice.issued_at.isoformat(),
                            invoice.issuer.name,
                            invoice.issuer.address,
                            invoice.issuer.phone,
                            invoice.issuer.email,
                            invoice.issuer.logo_ref,
                            str(invoice.subtotal),
                            str(invoice.tax.rate),
                            str(invoice.tax.amount),
                            str(invoice.grand_total),
                            invoice.currency,
                            invoice.notes,
                            invoice.created_at.isoformat(),
                        ),
                    )
                    invoice_id = cursor.lastrowid

                    await conn.executemany(
                        """
                        INSERT INTO invoice_lines (
                            invoice_id, position, name, unit_price,
                            quantity, description, line_total
                        ) VALUES (?, ?, ?, ?, ?, ?, ?)
                        """,
                        [
                            (
                                invoice_id,
                                position,
                                line.name,
                                str(line.unit_price),
                                line.quantity,
                                line.description,
                                str(line.line_total),
                            )
                            for position, line in enumerate(invoice.lines)
                        ],
                    )
            except aiosqlite.IntegrityError as e:
                if "invoices.number" in str(e):
                    raise InvoiceNumberConflictError(invoice.number) from e
                raise DatabaseError("insert_invoice", str(e)) from e

        logger.info(
            "invoice_inserted",
            invoice_id=invoice_id,
            number=invoice.number,
            lines=len(invoice.lines),
        )
        return invoice.model_copy(update={"id": invoice_id})

    async def find_by_number(self, number: str) -> Invoice | None:
        with store_errors("find_invoice_by_number"):
            async with get_connection() as conn:
                cursor = await conn.execute(
                    "SELECT * FROM invoices WHERE number = ?",
                    (number,),
                )
                row = await cursor.fetchone()
                if row is None:
                    return None
                return await self._load(conn, row)

    async def find_by_id(self, invoice_id: int) -> Invoice | None:
        with store_errors("find_invoice_by_id"):
            async with get_connection() as conn:
                cursor = await conn.execute(
                    "SELECT * FROM invoices WHERE id = ?",
                    (invoice_id,),
                )
                row = await cursor.fetchone()
                if row is None:
                    return None
                return await self._load(conn, row)

    async def list_recent(self, limit: int = 100) -> list[Invoice]:
        with store_errors("list_invoices"):
            async with get_connection() as conn:
                cursor = await conn.execute(
                    """
                    SELECT * FROM invoices
                    ORDER BY issued_at DESC, id DESC
                    LIMIT ?
                    """,
                    (limit,),
                )
                rows = await cursor.fetchall()
                return [await self._load(conn, row) for row in rows]

    async def delete_by_id(self, invoice_id: int) -> bool:
        with store_errors("delete_invoice"):
            async with get_transaction() as conn:
                cursor = await conn.execute(
                    "DELETE FROM invoices WHERE id = ?",
                    (invoice_id,),
                )
                deleted = cursor.rowcount > 0

        if deleted:
            logger.info("invoice_deleted", invoice_id=invoice_id)
        return deleted

    async def _load(self, conn: aiosqlite.Connection, row: aiosqlite.Row) -> Invoice:
        cursor = await conn.execute(
            """
            SELECT * FROM invoice_lines
            WHERE invoice_id = ?
            ORDER BY position
            """,
            (row["id"],),
        )
        line_rows = await cursor.fetchall()
        return self._row_to_invoice(row, [self._row_to_line(r) for r in line_rows])

    @staticmethod
    def _row_to_invoice(row: aiosqlite.Row, lines: list[LineItem]) -> Invoice:
        """Convert a database row to an Invoice entity."""
        return Invoice(
            id=row["id"],
            number=row["number"],
            issued_at=parse_timestamp(row["issued_at"]),
            issuer=IssuerInfo(
                name=row["issuer_name"],
                address=row["issuer_address"],
                phone=row["issuer_phone"],
                email=row["issuer_email"],
                logo_ref=row["issuer_logo_ref"],
            ),
            lines=lines,
            subtotal=Decimal(row["subtotal"]),
            tax=TaxInfo(rate=Decimal(row["tax_rate"]), amount=Decimal(row["tax_amount"])),
            grand_total=Decimal(row["grand_total"]),
            currency=row["currency"],
            notes=row["notes"],
            created_at=parse_timestamp(row["created_at"]),
        )

    @staticmethod
    def _row_to_line(row: aiosqlite.Row) -> LineItem:
        """Convert a database row to a LineItem entity."""
        return LineItem(
            name=row["name"],
            unit_price=Decimal(row["unit_price"]),
            quantity=int(row["quantity"]),
            description=row["description"],
            line_total=Decimal(row["line_total"]),
        )
