"""
Classified failures raised by the extraction pipeline.

Every stage raises its own subclass of PipelineError. The API layer maps
each one to an HTTP status and a short, stable message that can be shown
to the user as-is. Implementation detail goes in ``detail`` and is only
returned outside production.
"""

from typing import Optional


class PipelineError(Exception):
    """Base class for classified pipeline failures."""

    kind: str = "PipelineError"
    status_code: int = 500
    default_message: str = "Error processing invoice"

    def __init__(self, message: Optional[str] = None, detail: Optional[str] = None):
        self.message = message or self.default_message
        self.detail = detail
        super().__init__(self.message)

    def to_dict(self, include_detail: bool = False) -> dict:
        body = {"error": self.message}
        if include_detail and self.detail:
            body["details"] = self.detail
        return body


class InvalidInput(PipelineError):
    kind = "InvalidInput"
    status_code = 400

    MESSAGES = {
        "missing-file": "No file uploaded",
        "wrong-media-type": "Only PDF files are accepted",
        "too-large": "File is too large",
    }

    def __init__(self, reason: str, detail: Optional[str] = None):
        self.reason = reason
        super().__init__(self.MESSAGES.get(reason, "Invalid upload"), detail)


class ExtractionFailed(PipelineError):
    kind = "ExtractionFailed"
    default_message = "Failed to extract text from PDF"


class EmptyDocument(PipelineError):
    kind = "EmptyDocument"
    status_code = 400
    default_message = "No extractable text found in PDF"


class ModelUnavailable(PipelineError):
    kind = "ModelUnavailable"
    default_message = "Language model service is unavailable"


class EmptyModelResponse(PipelineError):
    kind = "EmptyModelResponse"
    default_message = "Language model returned an empty response"


class MalformedModelResponse(PipelineError):
    kind = "MalformedModelResponse"
    default_message = "Invalid response format from language model"


class PersistenceError(PipelineError):
    kind = "PersistenceError"
    default_message = "Error saving invoice"


class PipelineTimeout(PipelineError):
    kind = "PipelineTimeout"
    status_code = 504
    default_message = "Invoice processing timed out"
