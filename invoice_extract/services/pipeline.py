"""
The extraction pipeline: one upload in, stored invoice(s) out.

Stages run strictly in sequence and each one is a hard gate. The first
classified error aborts the upload and nothing is saved. The one exception
is a multi-invoice batch, whose writes are independent of each other.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, UTC

from loguru import logger

from ..core.errors import PersistenceError, PipelineTimeout
from ..models.invoice import ExtractionMode, UploadedDocument
from .llm_client import StructuredExtractionClient
from .normalizer import normalize
from .persistence import PersistenceGateway
from .response_parser import parse_response
from .text_extraction import TextExtractorAdapter
from .validation import validate_upload


@dataclass
class PipelineResult:
    mode: ExtractionMode
    invoices: list = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.invoices)

    @property
    def status(self) -> str:
        return "partial" if self.errors else "ok"


class InvoicePipeline:
    def __init__(
        self,
        text_extractor: TextExtractorAdapter,
        model_client: StructuredExtractionClient,
        persistence: PersistenceGateway,
        max_upload_bytes: int = 10 * 1024 * 1024,
        timeout_seconds: float = 60.0,
    ):
        self.text_extractor = text_extractor
        self.model_client = model_client
        self.persistence = persistence
        self.max_upload_bytes = max_upload_bytes
        self.timeout_seconds = timeout_seconds

    async def run(self, document: UploadedDocument | None, mode: ExtractionMode, log=logger) -> PipelineResult:
        """Process one upload within the request deadline."""
        try:
            return await asyncio.wait_for(self._run(document, ExtractionMode(mode), log), self.timeout_seconds)
        except asyncio.TimeoutError as e:
            log.error("Invoice processing timed out", timeout_seconds=self.timeout_seconds)
            raise PipelineTimeout(detail=f"Exceeded {self.timeout_seconds}s deadline") from e

    async def _run(self, document, mode: ExtractionMode, log) -> PipelineResult:
        log.info("Starting invoice processing", mode=mode.value)

        validate_upload(document, self.max_upload_bytes, log=log)

        text = await asyncio.to_thread(self.text_extractor.extract, document.content, log)

        raw = await self.model_client.extract(text, mode, log=log)

        candidates = parse_response(raw, mode, log=log)

        now = datetime.now(UTC)
        invoices = [
            normalize(candidate, mode, document.filename, now=now, log=log)
            for candidate in candidates
        ]

        if mode is ExtractionMode.SINGLE:
            stored = await self.persistence.save(invoices[0], log=log)
            return PipelineResult(mode=mode, invoices=[stored])

        batch = await self.persistence.save_all(invoices, log=log)
        if batch.errors and not batch.saved:
            raise PersistenceError(
                message="Error saving invoices",
                detail="; ".join(batch.errors),
            )
        return PipelineResult(mode=mode, invoices=batch.saved, errors=batch.errors)
