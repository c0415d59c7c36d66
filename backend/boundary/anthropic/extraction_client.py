"""
Claude client for PDF document extraction.

Sends a prompt together with the PDF as a base64 ``document`` block and
returns the text answer with its token usage. SDK failures are mapped
to ExtractionError.

Dependencies: anthropic
System role: LLM boundary for document identification, extraction and matching
"""

import base64
import logging
from dataclasses import dataclass

import anthropic
from anthropic import APIConnectionError, APIError, APIStatusError, APITimeoutError

from backend.core.exceptions import ExtractionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StepOutput:
    text: str
    input_tokens: int = 0
    output_tokens: int = 0


class ClaudeExtractionClient:
    """Wraps AsyncAnthropic for single-turn extraction calls."""

    def __init__(
        self,
        api_key: str,
        model: str,
        max_tokens: int = 32000,
        temperature: float = 0.1,
        timeout_seconds: float = 300.0,
    ) -> None:
        self._client = anthropic.AsyncAnthropic(api_key=api_key, timeout=timeout_seconds)
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature

    @property
    def model(self) -> str:
        return self._model

    async def extract(self, pdf_bytes: bytes, prompt: str) -> StepOutput:
        """
        Run one prompt against a PDF.

        Args:
            pdf_bytes: Raw PDF content
            prompt: Instruction text for this step

        Returns:
            StepOutput with the concatenated text blocks and token usage

        Raises:
            ExtractionError: On API failure or an empty answer
        """
        content = [
            {"type": "text", "text": prompt},
            {
                "type": "document",
                "source": {
                    "type": "base64",
                    "media_type": "application/pdf",
                    "data": base64.b64encode(pdf_bytes).decode("ascii"),
                },
            },
        ]
        return await self._create(content, self._model, self._max_tokens)

    async def complete(self, prompt: str, model: str | None = None, max_tokens: int = 4096) -> StepOutput:
        """Run a text-only prompt (used for process matching)."""
        return await self._create(prompt, model or self._model, max_tokens)

    async def _create(self, content, model: str, max_tokens: int) -> StepOutput:
        try:
            response = await self._client.messages.create(
                model=model,
                max_tokens=max_tokens,
                temperature=self._temperature,
                messages=[{"role": "user", "content": content}],
            )
        except APITimeoutError as e:
            raise ExtractionError("Claude API timeout", details={"model": model}) from e
        except APIConnectionError as e:
            raise ExtractionError(f"Claude API connection failed: {e}", details={"model": model}) from e
        except APIStatusError as e:
            logger.error(
                "Claude API returned an error",
                extra={"model": model, "status_code": e.status_code, "error": str(e)},
            )
            raise ExtractionError(
                f"Claude API error: {e.message}",
                details={"model": model, "status_code": e.status_code},
            ) from e
        except APIError as e:
            raise ExtractionError(f"Claude API error: {e}", details={"model": model}) from e

        text = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
        if not text:
            raise ExtractionError("Claude returned no text content", details={"model": model})

        usage = getattr(response, "usage", None)
        return StepOutput(
            text=text,
            input_tokens=getattr(usage, "input_tokens", 0) or 0,
            output_tokens=getattr(usage, "output_tokens", 0) or 0,
        )
