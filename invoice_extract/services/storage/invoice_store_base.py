"""
Storage contract for normalized invoices.

Both invoice shapes go through the same store; the ``mode`` tag on each
record tells them apart when they are read back.
"""

from abc import ABC, abstractmethod
from typing import Optional


class InvoiceStoreBase(ABC):
    """
    Abstract base class for invoice storage.

    Records are whole documents: nested party, address and payment objects
    are stored inline. There is no partial update; a record is either
    created, read or deleted.

    Implementations must raise PersistenceError on any storage fault.
    """

    @abstractmethod
    def create(self, invoice):
        """
        Store a normalized invoice.

        Args:
            invoice: SingleInvoice or MultiInvoice

        Returns:
            The stored invoice with its assigned ``id`` and ``created_at``
        """
        pass

    @abstractmethod
    def get(self, invoice_id: str) -> Optional[object]:
        """
        Get a stored invoice by ID.

        Returns:
            StoredSingleInvoice / StoredMultiInvoice, or None if not found
        """
        pass

    @abstractmethod
    def list_all(self) -> list:
        """
        List all stored invoices, newest first.
        """
        pass

    @abstractmethod
    def delete(self, invoice_id: str) -> bool:
        """
        Delete one invoice.

        Returns:
            True if a record was deleted, False if no record has that ID
        """
        pass
