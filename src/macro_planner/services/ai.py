"""Text generation with ordered model fallback."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

from macro_planner.domain.errors import UpstreamAIError

_logger = logging.getLogger(__name__)


class TextGenerationClient(Protocol):
    """Interface for an LLM text completion backend."""

    async def generate(self, *, model: str, prompt: str) -> str:
        """Return free text generated for the prompt."""


@dataclass
class TextGenerationService:
    """Try each model in order; the first non-empty answer wins."""

    client: TextGenerationClient
    models: list[str]
    timeout_seconds: float = 20.0

    async def generate(self, prompt: str) -> str:
        """Return generated text or raise UpstreamAIError when every model fails."""
        if not self.models:
            raise UpstreamAIError("No AI models configured")
        for model in self.models:
            try:
                text = await asyncio.wait_for(
                    self.client.generate(model=model, prompt=prompt),
                    timeout=self.timeout_seconds,
                )
            except TimeoutError:
                _logger.warning(
                    "AI model %s timed out after %ss", model, self.timeout_seconds
                )
                continue
            except Exception as exc:
                _logger.warning(
                    "AI model %s failed (status=%s): %s",
                    model,
                    _status_code_from_exception(exc),
                    exc,
                )
                continue
            if text and text.strip():
                return text
            _logger.warning("AI model %s returned an empty response", model)
        raise UpstreamAIError(f"All AI models failed: {', '.join(self.models)}")


def _status_code_from_exception(exc: Exception) -> str:
    """Extract an HTTP status code from an SDK exception, if available."""
    status_code = getattr(exc, "status_code", None)
    if status_code is None:
        response = getattr(exc, "response", None)
        status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return str(status_code)
    return "n/a"
