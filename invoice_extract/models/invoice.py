"""
Invoice schemas for both extraction modes.

Field names are snake_case in Python and camelCase on the wire and in
storage. ``mode`` tags every record so the two shapes can live in one
collection and be told apart when read back.
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel


class ExtractionMode(str, Enum):
    SINGLE = "single"
    MULTI = "multi"


PaymentStatus = Literal["Paid", "Unpaid", "Overdue", "Partial"]


@dataclass
class UploadedDocument:
    """One uploaded file, discarded once the pipeline finishes."""
    content: bytes | None
    media_type: str | None
    size: int
    filename: str | None


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Address(CamelModel):
    street: str | None = None
    city: str | None = None
    state: str | None = None
    zip: str | None = None
    country: str | None = None


class ClientInfo(CamelModel):
    name: str | None = None
    contact_person: str | None = None
    address: Address = Field(default_factory=Address)
    email: str | None = None
    phone: str | None = None


class BusinessInfo(CamelModel):
    name: str | None = None
    address: Address = Field(default_factory=Address)
    email: str | None = None
    phone: str | None = None
    tax_id: str | None = None


class LineItem(CamelModel):
    description: str | None = None
    quantity: float | None = None
    unit_price: float | None = None
    line_total: float | None = None


class PaymentDetails(CamelModel):
    method: str | None = None
    status: PaymentStatus | None = None
    payment_date: date | None = None
    transaction_reference: str | None = None
    balance_due: float | None = None


class SingleInvoice(CamelModel):
    """Rich single-invoice shape with party and payment information."""
    mode: Literal["single"] = "single"

    invoice_number: str | None = None
    invoice_date: date | None = None
    due_date: date | None = None
    payment_terms: str | None = None

    client_info: ClientInfo = Field(default_factory=ClientInfo)
    business_info: BusinessInfo = Field(default_factory=BusinessInfo)

    items: list[LineItem] = Field(default_factory=list)

    subtotal: float | None = None
    discount: float | None = None
    tax_rate: float | None = None
    tax_amount: float | None = None
    total_amount: float | None = None

    payment_details: PaymentDetails = Field(default_factory=PaymentDetails)

    source_file_name: str | None = None
    last_updated: datetime | None = None


class MultiLineItem(CamelModel):
    item_code: str | None = None
    description: str | None = None
    quantity: float | None = None
    unit: str | None = None
    price_per_item: float | None = None
    gross_total: float | None = None
    vat_amount: float | None = None
    net_total: float | None = None


class MultiInvoice(CamelModel):
    """Flattened invoice shape with VAT totals, one of many per document."""
    mode: Literal["multi"] = "multi"

    invoice_number: str | None = None
    company_from: str | None = None
    invoice_date: date | None = None

    items: list[MultiLineItem] = Field(default_factory=list)

    gross_total: float | None = None
    vat_total: float | None = None
    net_total: float | None = None

    source_file_name: str | None = None
    last_updated: datetime | None = None


class StoredSingleInvoice(SingleInvoice):
    id: str
    created_at: datetime


class StoredMultiInvoice(MultiInvoice):
    id: str
    created_at: datetime


NormalizedInvoice = Annotated[Union[SingleInvoice, MultiInvoice], Field(discriminator="mode")]
StoredInvoice = Annotated[Union[StoredSingleInvoice, StoredMultiInvoice], Field(discriminator="mode")]

stored_invoice_adapter = TypeAdapter(StoredInvoice)

# Fields set by the system rather than read from the model response
SYSTEM_FIELDS = frozenset({"mode", "source_file_name", "last_updated", "id", "created_at"})

INVOICE_MODELS = {
    ExtractionMode.SINGLE: SingleInvoice,
    ExtractionMode.MULTI: MultiInvoice,
}

STORED_MODELS = {
    "single": StoredSingleInvoice,
    "multi": StoredMultiInvoice,
}
