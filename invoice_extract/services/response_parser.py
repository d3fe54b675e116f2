import json
from loguru import logger
from ..core.errors import MalformedModelResponse
from ..models.invoice import ExtractionMode
from .prompts import INVOICES_KEY


def parse_response(raw: str, mode: ExtractionMode, log=logger) -> list[dict]:
    """
    Parse a model response into candidate invoices, in the order emitted.

    Fails closed: anything that is not valid JSON of the expected shape
    raises MalformedModelResponse. No repair is attempted.
    """
    mode = ExtractionMode(mode)
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        log.error(f"Failed to parse language model response: {e}")
        raise MalformedModelResponse(detail=f"Invalid JSON: {e}") from e

    if not isinstance(data, dict):
        log.error("Language model response is not a JSON object", type=type(data).__name__)
        raise MalformedModelResponse(detail=f"Expected a JSON object, got {type(data).__name__}")

    if mode is ExtractionMode.SINGLE:
        log.info("Parsed language model response", candidates=1)
        return [data]

    invoices = data.get(INVOICES_KEY)
    if not isinstance(invoices, list):
        log.error(f"Response has no '{INVOICES_KEY}' list", keys=sorted(data.keys()))
        raise MalformedModelResponse(detail=f"Missing '{INVOICES_KEY}' array")

    for position, invoice in enumerate(invoices):
        if not isinstance(invoice, dict):
            raise MalformedModelResponse(
                detail=f"'{INVOICES_KEY}[{position}]' is {type(invoice).__name__}, expected an object"
            )

    log.info("Parsed language model response", candidates=len(invoices))
    return invoices
