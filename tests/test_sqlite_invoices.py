"""
Tests for SQLite-based invoice persistence.

This test suite verifies that SQLiteInvoiceStore:
- Persists invoices across instances
- Stores nested objects inline and reads them back unchanged
- Keeps both invoice shapes in one table
- Reports storage faults as PersistenceError
"""

import json
import os
import sqlite3
import tempfile
from datetime import date

import pytest

from invoice_extract.core.errors import PersistenceError
from invoice_extract.models.invoice import ExtractionMode, StoredMultiInvoice, StoredSingleInvoice
from invoice_extract.services.normalizer import normalize
from invoice_extract.services.storage.invoices_sqlite import SQLiteInvoiceStore


@pytest.fixture
def db_path():
    """Create a temporary database file for testing"""
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    yield path
    # Cleanup
    if os.path.exists(path):
        os.remove(path)


@pytest.fixture
def store(db_path):
    """Create a fresh SQLiteInvoiceStore for each test"""
    return SQLiteInvoiceStore(db_path)


def single_invoice(number="A-100", **fields):
    return normalize({"invoiceNumber": number, **fields}, ExtractionMode.SINGLE, f"{number}.pdf")


def multi_invoice(number="INV-1", **fields):
    return normalize({"invoiceNumber": number, **fields}, ExtractionMode.MULTI, "batch.pdf")


def test_create_persists_to_db(store, db_path):
    """Test that creating an invoice writes a JSON document row"""
    stored = store.create(single_invoice(clientInfo={"name": "Globex"}))

    conn = sqlite3.connect(db_path)
    row = conn.execute("SELECT id, mode, data FROM invoices WHERE id = ?", (stored.id,)).fetchone()
    conn.close()

    assert row is not None
    assert row[0] == stored.id
    assert row[1] == "single"
    document = json.loads(row[2])
    assert document["invoiceNumber"] == "A-100"
    assert document["clientInfo"]["name"] == "Globex"
    assert document["clientInfo"]["address"]["city"] is None


def test_get_round_trips_nested_fields(store):
    stored = store.create(single_invoice(
        dueDate="2024-03-01",
        totalAmount="$1,200.00",
        items=[{"description": "Widget", "quantity": 2}],
        paymentDetails={"status": "Overdue"},
    ))

    fetched = store.get(stored.id)

    assert isinstance(fetched, StoredSingleInvoice)
    assert fetched == stored
    assert fetched.due_date == date(2024, 3, 1)
    assert fetched.total_amount == 1200.0
    assert fetched.items[0].description == "Widget"
    assert fetched.payment_details.status == "Overdue"


def test_get_missing_returns_none(store):
    assert store.get("does-not-exist") is None


def test_both_modes_share_one_table(store):
    single = store.create(single_invoice())
    multi = store.create(multi_invoice(vatTotal="5.00"))

    assert isinstance(store.get(single.id), StoredSingleInvoice)
    fetched_multi = store.get(multi.id)
    assert isinstance(fetched_multi, StoredMultiInvoice)
    assert fetched_multi.vat_total == 5.0


def test_list_all_newest_first(store):
    first = store.create(single_invoice("1"))
    second = store.create(single_invoice("2"))
    third = store.create(multi_invoice("3"))

    assert [inv.id for inv in store.list_all()] == [third.id, second.id, first.id]


def test_delete_removes_record(store):
    keep = store.create(single_invoice("keep"))
    drop = store.create(single_invoice("drop"))

    assert store.delete(drop.id) is True
    assert store.get(drop.id) is None
    assert [inv.id for inv in store.list_all()] == [keep.id]


def test_delete_missing_returns_false(store):
    assert store.delete("does-not-exist") is False


def test_persistence_across_instances(db_path):
    """Test that data persists when creating new store instances"""
    stored = SQLiteInvoiceStore(db_path).create(single_invoice("persistent"))

    fetched = SQLiteInvoiceStore(db_path).get(stored.id)

    assert fetched is not None
    assert fetched.invoice_number == "persistent"


def test_unopenable_database_raises_persistence_error(tmp_path):
    # A directory cannot be opened as a database file
    with pytest.raises(PersistenceError):
        SQLiteInvoiceStore(str(tmp_path))


def test_corrupt_record_raises_persistence_error(store, db_path):
    stored = store.create(single_invoice())
    conn = sqlite3.connect(db_path)
    conn.execute("UPDATE invoices SET data = ? WHERE id = ?", ('{"mode": "unknown"}', stored.id))
    conn.commit()
    conn.close()

    with pytest.raises(PersistenceError):
        store.get(stored.id)
