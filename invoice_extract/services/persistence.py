import asyncio
from dataclasses import dataclass, field
from loguru import logger
from ..core.errors import PersistenceError
from .storage import InvoiceStoreBase


@dataclass
class BatchSaveResult:
    """Outcome of saving several invoices; the batch is not atomic."""
    saved: list = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.saved)

    @property
    def partial(self) -> bool:
        return bool(self.errors) and bool(self.saved)


class PersistenceGateway:
    """Writes normalized invoices to a store without blocking the event loop."""

    def __init__(self, store: InvoiceStoreBase):
        self.store = store

    async def save(self, invoice, log=logger):
        try:
            stored = await asyncio.to_thread(self.store.create, invoice)
        except PersistenceError as e:
            log.error("Failed to save invoice: {}", e.detail or e.message,
                      invoice_number=invoice.invoice_number)
            raise
        except Exception as e:
            log.error("Failed to save invoice: {}", e, invoice_number=invoice.invoice_number)
            raise PersistenceError(detail=str(e)) from e

        log.info("Invoice saved", invoice_id=stored.id, invoice_number=stored.invoice_number)
        return stored

    async def save_all(self, invoices: list, log=logger) -> BatchSaveResult:
        """
        Save every invoice concurrently and wait for all of them to settle.

        A failed write never rolls back the others. Saved records keep the
        order of ``invoices``; completion order is not observable.
        """
        outcomes = await asyncio.gather(
            *(self.save(invoice, log=log) for invoice in invoices),
            return_exceptions=True,
        )

        result = BatchSaveResult()
        for position, outcome in enumerate(outcomes):
            if isinstance(outcome, PersistenceError):
                result.errors.append(f"Invoice {position + 1}: {outcome.detail or outcome.message}")
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                result.saved.append(outcome)

        log.info("Batch save finished", saved=result.count, failed=len(result.errors))
        return result
