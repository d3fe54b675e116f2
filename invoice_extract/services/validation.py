from loguru import logger
from ..core.errors import InvalidInput
from ..models.invoice import UploadedDocument

PDF_MEDIA_TYPE = "application/pdf"


def validate_upload(document: UploadedDocument | None, max_bytes: int, log=logger) -> None:
    """
    Reject uploads that are missing, not a PDF, or over the size limit.

    Runs before any text extraction or model call so oversized or bogus
    uploads never reach the expensive stages.
    """
    if document is None or not document.content:
        log.warning("Upload rejected", reason="missing-file")
        raise InvalidInput("missing-file")

    if document.media_type != PDF_MEDIA_TYPE:
        log.warning("Upload rejected", reason="wrong-media-type", media_type=document.media_type)
        raise InvalidInput(
            "wrong-media-type",
            detail=f"Expected {PDF_MEDIA_TYPE}, got {document.media_type!r}",
        )

    if document.size > max_bytes:
        log.warning("Upload rejected", reason="too-large", size=document.size, max_bytes=max_bytes)
        raise InvalidInput(
            "too-large",
            detail=f"{document.size} bytes exceeds the {max_bytes} byte limit",
        )
