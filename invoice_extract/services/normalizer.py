"""
Field-level normalization of candidate invoices.

The normalizer walks the target schema rather than the candidate, so every
field of the schema is present in the output whatever the model returned.
Each leaf is coerced according to its declared type:

- ``str``: "", "undefined" and "null" become None, other strings are kept as-is
- ``float``: currency symbols and separators are stripped before parsing
- ``date``: parsed with dateutil, unparseable values become None
- ``Literal``: values outside the allowed set become None

A bad value degrades to None in place; normalization never fails as a whole.
"""

import math
import re
import types
from datetime import date, datetime, timezone
from typing import Any, Literal, Optional, Union, get_args, get_origin

from dateutil import parser as date_parser
from loguru import logger
from pydantic import BaseModel

from ..models.invoice import INVOICE_MODELS, SYSTEM_FIELDS, ExtractionMode

EMPTY_MARKERS = frozenset({"", "undefined", "null"})

_NON_NUMERIC = re.compile(r"[^0-9.\-]")

# Fills the month and day a partial date leaves out, e.g. "2024" -> 2024-01-01
MISSING_DATE_PARTS = datetime(2000, 1, 1)


def clean_string(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return None if value in EMPTY_MARKERS else value
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return str(value)
    return None


def parse_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
        return number if math.isfinite(number) else None
    if isinstance(value, str):
        cleaned = _NON_NUMERIC.sub("", value)
        if not cleaned:
            return None
        try:
            number = float(cleaned)
        except ValueError:
            return None
        return number if math.isfinite(number) else None
    return None


def parse_date(value: Any) -> Optional[date]:
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    try:
        return date_parser.parse(value, default=MISSING_DATE_PARTS).date()
    except (ValueError, OverflowError):
        return None


def _unwrap_optional(annotation):
    if get_origin(annotation) in (Union, types.UnionType):
        args = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def _coerce(annotation, value: Any) -> Any:
    target = _unwrap_optional(annotation)
    origin = get_origin(target)

    if origin is list:
        (item_type,) = get_args(target)
        if not isinstance(value, list):
            return []
        return [_coerce(item_type, item) for item in value]
    if origin is None and isinstance(target, type) and issubclass(target, BaseModel):
        return normalize_model(target, value)
    if origin is Literal:
        cleaned = clean_string(value)
        return cleaned if cleaned in get_args(target) else None
    if target is str:
        return clean_string(value)
    if target is float:
        return parse_number(value)
    if target is date:
        return parse_date(value)

    raise TypeError(f"No normalization rule for field type {annotation!r}")


def normalize_model(model_cls: type[BaseModel], data: Any, **system_values):
    """Build ``model_cls`` from a loosely shaped dict, coercing every field."""
    if not isinstance(data, dict):
        data = {}

    values = {}
    for name, field in model_cls.model_fields.items():
        if name in SYSTEM_FIELDS:
            continue
        key = field.alias or name
        raw = data[key] if key in data else data.get(name)
        values[name] = _coerce(field.annotation, raw)

    values.update(system_values)
    return model_cls(**values)


def normalize(candidate: dict, mode: ExtractionMode, source_file_name: str | None,
              now: datetime | None = None, log=logger):
    """Coerce one candidate invoice into the canonical schema for ``mode``."""
    model_cls = INVOICE_MODELS[ExtractionMode(mode)]
    invoice = normalize_model(
        model_cls,
        candidate,
        source_file_name=source_file_name,
        last_updated=now or datetime.now(timezone.utc),
    )
    log.debug("Normalized invoice", invoice_number=invoice.invoice_number, items=len(invoice.items))
    return invoice
