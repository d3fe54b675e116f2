"""
Structured extraction through an OpenAI-compatible chat completions API.

The client sends exactly two messages (the extraction prompt and the raw
document text), asks for a JSON object response and decodes at low
temperature. It never retries: transport, auth and rate-limit failures are
raised as ModelUnavailable for the caller to handle.
"""

from abc import ABC, abstractmethod
from loguru import logger
import openai
from openai import AsyncOpenAI
from ..core.errors import EmptyModelResponse, ModelUnavailable
from ..models.invoice import ExtractionMode
from .prompts import build_prompt


class StructuredExtractionClient(ABC):
    """Anything that can turn document text into a raw JSON string."""

    @abstractmethod
    async def extract(self, text: str, mode: ExtractionMode, log=logger) -> str:
        pass


class OpenAIExtractionClient(StructuredExtractionClient):
    def __init__(
        self,
        api_key: str | None,
        model: str = "gpt-4o-mini",
        base_url: str | None = None,
        temperature: float = 0.0,
    ):
        self.model = model
        self.temperature = temperature
        self.client = None
        if api_key:
            self.client = AsyncOpenAI(api_key=api_key, base_url=base_url, max_retries=0)

    async def extract(self, text: str, mode: ExtractionMode, log=logger) -> str:
        if self.client is None:
            log.error("Language model is not configured - set LLM_API_KEY")
            raise ModelUnavailable(detail="LLM_API_KEY is not set")

        messages = [
            {"role": "system", "content": build_prompt(mode)},
            {"role": "user", "content": text},
        ]

        log.info("Sending text to language model", model=self.model, mode=ExtractionMode(mode).value)
        try:
            completion = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature,
                response_format={"type": "json_object"},
            )
        except openai.APIError as e:
            log.error(f"Language model call failed: {e}")
            raise ModelUnavailable(detail=f"{type(e).__name__}: {e}") from e

        if not completion.choices:
            log.error("Language model returned no choices")
            raise EmptyModelResponse(detail="Response contained no choices")

        content = completion.choices[0].message.content
        if not content or not content.strip():
            log.error("Language model returned empty content",
                      finish_reason=completion.choices[0].finish_reason)
            raise EmptyModelResponse(detail=f"finish_reason={completion.choices[0].finish_reason}")

        log.info("Received response from language model", response_length=len(content))
        log.debug("Language model response", response=content)
        return content
