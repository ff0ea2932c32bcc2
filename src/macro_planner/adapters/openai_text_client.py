"""OpenAI Responses API client for meal suggestion text."""

from dataclasses import dataclass

import httpx
from openai import AsyncOpenAI

from macro_planner.services.ai import TextGenerationClient


@dataclass
class OpenAITextClient(TextGenerationClient):
    """Text generation client backed by OpenAI Responses API."""

    client: AsyncOpenAI
    store: bool = False

    @classmethod
    def create(
        cls, api_key: str, timeout_seconds: float = 20.0, store: bool = False
    ) -> "OpenAITextClient":
        """Create an OpenAI text client."""
        return cls(
            client=AsyncOpenAI(
                api_key=api_key,
                timeout=httpx.Timeout(timeout_seconds),
                max_retries=0,
            ),
            store=store,
        )

    async def generate(self, *, model: str, prompt: str) -> str:
        """Call OpenAI Responses API and return the output text."""
        response = await self.client.responses.create(
            model=model,
            input=prompt,
            store=self.store,
        )
        return response.output_text or ""

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.close()
