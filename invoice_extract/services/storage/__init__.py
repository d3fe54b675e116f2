from functools import lru_cache

from ...core.config import settings
from .invoice_store_base import InvoiceStoreBase
from .invoices import InMemoryInvoiceStore
from .invoices_sqlite import SQLiteInvoiceStore


@lru_cache(maxsize=1)
def get_invoice_store() -> InvoiceStoreBase:
    """Process-wide store, opened on first use and kept for the process lifetime."""
    return SQLiteInvoiceStore(settings.invoice_db_path)


__all__ = [
    "InvoiceStoreBase",
    "InMemoryInvoiceStore",
    "SQLiteInvoiceStore",
    "get_invoice_store",
]
