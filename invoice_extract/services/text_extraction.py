"""
PDF to text conversion.

Two backends are available: pdfplumber reads the embedded text layer
locally, and Azure Document Intelligence ``prebuilt-read`` is used when it
is configured. TextExtractorAdapter wraps either one and owns the failure
classification: a backend error is ExtractionFailed, a document with no
usable text is EmptyDocument.
"""

from io import BytesIO
from loguru import logger
import pdfplumber
from azure.ai.documentintelligence import DocumentIntelligenceClient
from azure.core.credentials import AzureKeyCredential
from ..core.config import settings
from ..core.errors import EmptyDocument, ExtractionFailed


class PdfPlumberBackend:
    """Extract the text layer of every page with pdfplumber."""

    name = "pdfplumber"

    def to_text(self, content: bytes) -> str:
        parts = []
        with pdfplumber.open(BytesIO(content)) as pdf:
            for page in pdf.pages:
                page_text = page.extract_text()
                if page_text:
                    parts.append(page_text)
        return "\n".join(parts)


class AzureReadBackend:
    """Extract document text with Azure Document Intelligence."""

    name = "azure-document-intelligence"

    def __init__(self, endpoint: str, api_key: str):
        self.endpoint = endpoint
        self.api_key = api_key

    def to_text(self, content: bytes) -> str:
        client = DocumentIntelligenceClient(
            endpoint=self.endpoint,
            credential=AzureKeyCredential(self.api_key)
        )
        poller = client.begin_analyze_document(
            "prebuilt-read",
            body=content,
            content_type="application/octet-stream"
        )
        result = poller.result()
        return result.content or ""


def create_text_backend():
    if settings.az_di_endpoint and settings.az_di_api_key:
        return AzureReadBackend(settings.az_di_endpoint, settings.az_di_api_key)
    return PdfPlumberBackend()


class TextExtractorAdapter:
    def __init__(self, backend=None, min_text_length: int = 10):
        self.backend = backend or PdfPlumberBackend()
        self.min_text_length = min_text_length

    def extract(self, content: bytes, log=logger) -> str:
        backend_name = getattr(self.backend, "name", type(self.backend).__name__)
        log.info("Extracting text from PDF", backend=backend_name, size=len(content))

        try:
            text = self.backend.to_text(content)
        except Exception as e:
            log.error(f"Text extraction failed: {e}")
            raise ExtractionFailed(detail=str(e)) from e

        text = text or ""
        if len(text.strip()) < self.min_text_length:
            log.warning("PDF has no extractable text", text_length=len(text.strip()))
            raise EmptyDocument(
                detail=f"Extracted {len(text.strip())} characters, need at least {self.min_text_length}"
            )

        log.info("PDF text extracted", text_length=len(text))
        log.debug("Extracted text preview", preview=text[:500])
        return text
