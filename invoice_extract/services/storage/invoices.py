"""
In-memory invoice storage (for tests and local demos).
Records are lost when the process exits; use SQLiteInvoiceStore otherwise.
"""
from datetime import datetime, UTC
from threading import Lock
from typing import Dict, Optional
import uuid

from ...models.invoice import STORED_MODELS
from .invoice_store_base import InvoiceStoreBase


class InMemoryInvoiceStore(InvoiceStoreBase):
    def __init__(self):
        self._invoices: Dict[str, object] = {}
        self._lock = Lock()

    def create(self, invoice):
        """Assign an ID and creation time, then keep the record"""
        stored_cls = STORED_MODELS[invoice.mode]
        stored = stored_cls(
            **invoice.model_dump(),
            id=str(uuid.uuid4()),
            created_at=datetime.now(UTC),
        )
        with self._lock:
            self._invoices[stored.id] = stored
        return stored

    def get(self, invoice_id: str) -> Optional[object]:
        return self._invoices.get(invoice_id)

    def list_all(self) -> list:
        """All invoices, newest first"""
        with self._lock:
            return list(reversed(self._invoices.values()))

    def delete(self, invoice_id: str) -> bool:
        with self._lock:
            return self._invoices.pop(invoice_id, None) is not None
