"""
Tests for listing, flattening and deleting stored invoices.
"""

from invoice_extract.api import deps
from invoice_extract.api.main import app
from invoice_extract.core.errors import PersistenceError
from invoice_extract.models.invoice import ExtractionMode
from invoice_extract.services.normalizer import normalize
from invoice_extract.services.storage import InMemoryInvoiceStore


def add_invoice(store, number, mode=ExtractionMode.SINGLE, **fields):
    return store.create(normalize({"invoiceNumber": number, **fields}, mode, f"{number}.pdf"))


class BrokenStore(InMemoryInvoiceStore):
    def list_all(self):
        raise PersistenceError(detail="database is locked")

    def delete(self, invoice_id):
        raise PersistenceError(detail="database is locked")


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_list_invoices_newest_first(client, store):
    first = add_invoice(store, "1")
    second = add_invoice(store, "2", mode=ExtractionMode.MULTI)

    r = client.get("/invoices")

    assert r.status_code == 200
    body = r.json()
    assert [inv["id"] for inv in body] == [second.id, first.id]
    assert body[0]["mode"] == "multi"
    assert body[1]["clientInfo"]["address"]["street"] is None


def test_list_invoices_empty(client):
    r = client.get("/invoices")
    assert r.status_code == 200
    assert r.json() == []


def test_list_invoices_storage_fault_returns_500(client):
    app.dependency_overrides[deps.get_store] = lambda: BrokenStore()

    r = client.get("/invoices")

    assert r.status_code == 500
    assert r.json()["error"] == "Error fetching invoices"


def test_delete_existing_invoice(client, store):
    keep = add_invoice(store, "keep")
    drop = add_invoice(store, "drop")

    r = client.delete("/invoices", params={"id": drop.id})

    assert r.status_code == 200
    assert r.json() == {"id": drop.id}
    remaining = client.get("/invoices").json()
    assert [inv["id"] for inv in remaining] == [keep.id]


def test_delete_unknown_invoice_returns_404(client, store):
    add_invoice(store, "keep")

    r = client.delete("/invoices", params={"id": "does-not-exist"})

    assert r.status_code == 404
    assert r.json()["error"] == "Invoice not found"
    assert len(store.list_all()) == 1


def test_delete_without_id_returns_400(client):
    r = client.delete("/invoices")

    assert r.status_code == 400
    assert "error" in r.json()


def test_delete_storage_fault_returns_500(client):
    app.dependency_overrides[deps.get_store] = lambda: BrokenStore()

    r = client.delete("/invoices", params={"id": "abc"})

    assert r.status_code == 500
    assert r.json()["error"] == "Error deleting invoice"


def test_rows_flatten_line_items_with_total_row(client, store):
    add_invoice(
        store, "INV-1", mode=ExtractionMode.MULTI,
        companyFrom="Initech",
        items=[{"itemCode": "A", "grossTotal": 12}, {"itemCode": "B", "grossTotal": 8}],
        grossTotal=20, vatTotal=4, netTotal=16,
    )

    r = client.get("/invoices/rows")

    assert r.status_code == 200
    rows = r.json()
    assert [row["itemCode"] for row in rows] == ["A", "B", None]
    assert [row["isTotal"] for row in rows] == [False, False, True]
    assert rows[-1]["description"] == "TOTAL FOR INVOICE"
    assert rows[-1]["lineTotal"] == 20
    assert all(row["company"] == "Initech" for row in rows)


def test_cors_preflight_for_upload(client):
    r = client.options(
        "/invoices/extract",
        headers={
            "Origin": "https://review.example.com",
            "Access-Control-Request-Method": "POST",
        },
    )

    assert r.status_code == 200
    assert r.headers["access-control-allow-origin"] == "*"
    assert "POST" in r.headers["access-control-allow-methods"]
