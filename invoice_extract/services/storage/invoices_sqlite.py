"""
SQLite-based invoice storage for production use.

Each invoice is one row: the full normalized record as a JSON document,
plus the columns needed to look it up and order it.
"""

import sqlite3
import uuid
from datetime import datetime, UTC
from typing import Optional

from pydantic import ValidationError

from ...core.errors import PersistenceError
from ...models.invoice import STORED_MODELS, stored_invoice_adapter
from .invoice_store_base import InvoiceStoreBase


class SQLiteInvoiceStore(InvoiceStoreBase):
    """
    SQLite-backed invoice store with persistent storage.

    Features:
    - Persistent storage across application restarts
    - Both invoice shapes in one table, told apart by the ``mode`` column
    - Thread-safe operations (one connection per call, SQLite's built-in locking)
    """

    def __init__(self, db_path: str = "invoices.db"):
        """
        Initialize store with database path.

        Args:
            db_path: Path to SQLite database file (default: invoices.db)
        """
        self.db_path = db_path
        self._init_database()

    def _init_database(self):
        """Create invoices table if it doesn't exist"""
        try:
            conn = sqlite3.connect(self.db_path)
            try:
                conn.execute("""
                    CREATE TABLE IF NOT EXISTS invoices (
                        id TEXT PRIMARY KEY,
                        mode TEXT NOT NULL,
                        data TEXT NOT NULL,
                        created_at TEXT NOT NULL,
                        CHECK (mode IN ('single', 'multi'))
                    )
                """)
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise PersistenceError(detail=f"Could not initialise {self.db_path}: {e}") from e

    def _get_connection(self) -> sqlite3.Connection:
        """Get database connection with row factory"""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _row_to_invoice(self, row):
        try:
            return stored_invoice_adapter.validate_json(row["data"])
        except ValidationError as e:
            raise PersistenceError(detail=f"Corrupt invoice record {row['id']}: {e}") from e

    def create(self, invoice):
        """
        Store a normalized invoice.

        Args:
            invoice: SingleInvoice or MultiInvoice

        Returns:
            The stored invoice with ``id`` and ``created_at`` assigned
        """
        stored_cls = STORED_MODELS[invoice.mode]
        stored = stored_cls(
            **invoice.model_dump(),
            id=str(uuid.uuid4()),
            created_at=datetime.now(UTC),
        )

        try:
            conn = self._get_connection()
            try:
                conn.execute("""
                    INSERT INTO invoices (id, mode, data, created_at)
                    VALUES (?, ?, ?, ?)
                """, (
                    stored.id,
                    stored.mode,
                    stored.model_dump_json(by_alias=True),
                    stored.created_at.isoformat(),
                ))
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise PersistenceError(detail=str(e)) from e

        return stored

    def get(self, invoice_id: str) -> Optional[object]:
        try:
            conn = self._get_connection()
            try:
                row = conn.execute(
                    "SELECT id, data FROM invoices WHERE id = ?", (invoice_id,)
                ).fetchone()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise PersistenceError(detail=str(e)) from e

        if row is None:
            return None
        return self._row_to_invoice(row)

    def list_all(self) -> list:
        """
        List all invoices (ordered by creation time, newest first).
        """
        try:
            conn = self._get_connection()
            try:
                rows = conn.execute("""
                    SELECT id, data
                    FROM invoices
                    ORDER BY created_at DESC, rowid DESC
                """).fetchall()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise PersistenceError(detail=str(e)) from e

        return [self._row_to_invoice(row) for row in rows]

    def delete(self, invoice_id: str) -> bool:
        try:
            conn = self._get_connection()
            try:
                cursor = conn.execute("DELETE FROM invoices WHERE id = ?", (invoice_id,))
                rows_affected = cursor.rowcount
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise PersistenceError(detail=str(e)) from e

        return rows_affected > 0
