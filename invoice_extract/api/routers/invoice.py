import uuid
from fastapi import APIRouter, Depends, File, Query, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from loguru import logger
from ..deps import get_pipeline, get_store
from ...core.config import settings
from ...core.errors import PersistenceError
from ...models.invoice import ExtractionMode, UploadedDocument
from ...services.pipeline import InvoicePipeline
from ...services.storage import InvoiceStoreBase
from ...services.tabular import flatten_invoices

router = APIRouter(prefix="/invoices", tags=["invoices"])


def _to_json(invoice) -> dict:
    return invoice.model_dump(mode="json", by_alias=True)


@router.post("/extract")
async def extract(
    file: UploadFile | str | None = File(None),
    mode: ExtractionMode | None = Query(None, description="single or multi; defaults to EXTRACTION_MODE"),
    pipeline: InvoicePipeline = Depends(get_pipeline),
):
    """
    Extract, normalize and store the invoice(s) in an uploaded PDF.

    Single mode returns the stored invoice. Multi mode returns every stored
    invoice plus a status of "ok" or "partial" when some writes failed.

    Errors are returned as {"error": "..."} with status 400 for bad uploads
    and PDFs without text, 500 for extraction, model and storage failures,
    and 504 when the request deadline is exceeded.
    """
    # A plain form value under "file" is not an upload
    if isinstance(file, str):
        file = None

    log = logger.bind(
        request_id=uuid.uuid4().hex[:12],
        filename=file.filename if file else None,
    )

    document = None
    if file is not None:
        content = await file.read()
        document = UploadedDocument(
            content=content,
            media_type=file.content_type,
            size=len(content),
            filename=file.filename,
        )
        log.info("File received", size=len(content), media_type=file.content_type)

    result = await pipeline.run(document, mode or ExtractionMode(settings.extraction_mode), log=log)

    if result.mode is ExtractionMode.SINGLE:
        return _to_json(result.invoices[0])

    return {
        "status": result.status,
        "count": result.count,
        "invoices": [_to_json(invoice) for invoice in result.invoices],
        "errors": result.errors,
    }


@router.get("")
async def list_invoices(store: InvoiceStoreBase = Depends(get_store)):
    """All stored invoices, newest first."""
    try:
        invoices = await run_in_threadpool(store.list_all)
    except PersistenceError as e:
        raise PersistenceError(message="Error fetching invoices", detail=e.detail) from e
    return [_to_json(invoice) for invoice in invoices]


@router.get("/rows")
async def list_invoice_rows(store: InvoiceStoreBase = Depends(get_store)):
    """Stored invoices flattened to one row per line item plus a total row each."""
    try:
        invoices = await run_in_threadpool(store.list_all)
    except PersistenceError as e:
        raise PersistenceError(message="Error fetching invoices", detail=e.detail) from e
    return jsonable_encoder(flatten_invoices(invoices))


@router.delete("")
async def delete_invoice(
    id: str | None = Query(None, description="ID of the invoice to delete"),
    store: InvoiceStoreBase = Depends(get_store),
):
    if not id:
        return JSONResponse(status_code=400, content={"error": "Invoice id is required"})

    try:
        deleted = await run_in_threadpool(store.delete, id)
    except PersistenceError as e:
        raise PersistenceError(message="Error deleting invoice", detail=e.detail) from e

    if not deleted:
        return JSONResponse(status_code=404, content={"error": "Invoice not found"})

    logger.info("Invoice deleted", invoice_id=id)
    return {"id": id}
