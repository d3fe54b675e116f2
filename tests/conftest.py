"""
Pytest configuration and shared fixtures.

Registers the integration marker and provides deterministic stand-ins for
the three external collaborators of the pipeline: the PDF text backend,
the language model and the invoice store.
"""

import io

import pytest
from fastapi.testclient import TestClient

from invoice_extract.api import deps
from invoice_extract.api.main import app
from invoice_extract.core.errors import PersistenceError
from invoice_extract.services.llm_client import StructuredExtractionClient
from invoice_extract.services.storage import InMemoryInvoiceStore
from invoice_extract.services.text_extraction import TextExtractorAdapter

SAMPLE_TEXT = "INVOICE\nInvoice #A-100\nTotal: $1,200.00\nDue 2024-03-01"


def pytest_addoption(parser):
    """Add custom command-line options"""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration tests against a real language model API"
    )


def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test requiring a real LLM_API_KEY"
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --run-integration is specified"""
    if config.getoption("--run-integration"):
        return

    skip_integration = pytest.mark.skip(reason="need --run-integration option to run")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


class FakeTextBackend:
    """Returns canned text (or raises) and counts how often it was called"""

    name = "fake"

    def __init__(self, text=SAMPLE_TEXT, error=None):
        self.text = text
        self.error = error
        self.calls = 0

    def to_text(self, content: bytes) -> str:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.text


class FakeModelClient(StructuredExtractionClient):
    """Returns a canned model response (or raises) and records each request"""

    def __init__(self, response="{}", error=None):
        self.response = response
        self.error = error
        self.calls = []

    async def extract(self, text, mode, log=None):
        self.calls.append((text, mode))
        if self.error is not None:
            raise self.error
        return self.response


class FlakyInvoiceStore(InMemoryInvoiceStore):
    """In-memory store that fails to write invoices with the given numbers"""

    def __init__(self, failing_numbers=()):
        super().__init__()
        self.failing_numbers = set(failing_numbers)

    def create(self, invoice):
        if invoice.invoice_number in self.failing_numbers:
            raise PersistenceError(detail=f"write failed for {invoice.invoice_number}")
        return super().create(invoice)


@pytest.fixture
def store():
    return InMemoryInvoiceStore()


@pytest.fixture
def text_backend():
    return FakeTextBackend()


@pytest.fixture
def model_client():
    return FakeModelClient()


@pytest.fixture
def client(store, text_backend, model_client):
    """TestClient with every external collaborator replaced by a fake"""
    app.dependency_overrides[deps.get_store] = lambda: store
    app.dependency_overrides[deps.get_text_extractor] = lambda: TextExtractorAdapter(text_backend, min_text_length=10)
    app.dependency_overrides[deps.get_model_client] = lambda: model_client
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def pdf_upload():
    """Build the ``files`` argument for a multipart upload"""
    def _upload(content=b"%PDF-1.4 sample invoice", filename="invoice.pdf", media_type="application/pdf"):
        return {"file": (filename, io.BytesIO(content), media_type)}
    return _upload
