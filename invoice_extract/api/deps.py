from functools import lru_cache
from fastapi import Depends
from ..core.config import settings
from ..services.llm_client import OpenAIExtractionClient, StructuredExtractionClient
from ..services.persistence import PersistenceGateway
from ..services.pipeline import InvoicePipeline
from ..services.storage import InvoiceStoreBase, get_invoice_store
from ..services.text_extraction import TextExtractorAdapter, create_text_backend

# Each collaborator is its own dependency so tests can swap it through
# app.dependency_overrides without touching the others.


def get_store() -> InvoiceStoreBase:
    return get_invoice_store()


def get_text_extractor() -> TextExtractorAdapter:
    return TextExtractorAdapter(create_text_backend(), min_text_length=settings.min_text_length)


@lru_cache(maxsize=1)
def get_model_client() -> StructuredExtractionClient:
    return OpenAIExtractionClient(
        api_key=settings.llm_api_key,
        model=settings.llm_deployment,
        base_url=settings.llm_base_url,
        temperature=settings.llm_temperature,
    )


def get_pipeline(
    text_extractor: TextExtractorAdapter = Depends(get_text_extractor),
    model_client: StructuredExtractionClient = Depends(get_model_client),
    store: InvoiceStoreBase = Depends(get_store),
) -> InvoicePipeline:
    return InvoicePipeline(
        text_extractor=text_extractor,
        model_client=model_client,
        persistence=PersistenceGateway(store),
        max_upload_bytes=settings.max_upload_bytes,
        timeout_seconds=settings.request_timeout_seconds,
    )
