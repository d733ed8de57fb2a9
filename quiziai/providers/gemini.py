"""
Google Gemini provider implementation.

Talks to the Generative Language REST API directly with httpx.
"""

from typing import Any, Optional

import httpx

from ..prompts import Prompt
from .base import ProviderError, TriviaProvider


class GeminiProvider(TriviaProvider):
    """Provider for Google Gemini models.

    Configuration:
        api_key: Gemini API key (required)
        base_url: API base URL (default: "https://generativelanguage.googleapis.com/v1")
        models: Models to try in order (default: flash before pro)
        timeout: Request timeout in seconds (default: 60.0)
    """

    name = "gemini"
    DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1"
    DEFAULT_MODELS = (
        "gemini-2.5-flash",
        "gemini-3-flash-preview",
        "gemini-2.5-pro",
        "gemini-3-pro-preview",
    )

    def __init__(self, config: Optional[dict[str, Any]] = None):
        super().__init__(config)
        self.base_url = self.config.get("base_url", self.DEFAULT_BASE_URL).rstrip("/")

    async def _request_text(self, prompt: Prompt, count: int, model: str) -> str:
        url = f"{self.base_url}/models/{model}:generateContent"
        payload = {"contents": [{"parts": [{"text": prompt.full_text}]}]}

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                url,
                params={"key": self.api_key},
                json=payload,
                headers={"Content-Type": "application/json"},
            )

        if response.status_code != 200:
            raise ProviderError(
                f"Gemini API error ({response.status_code}) for {model}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            data = response.json()
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ProviderError(f"Unexpected Gemini response format: {e!r}")

        if not isinstance(text, str):
            raise ProviderError(f"Unexpected Gemini text type: {type(text).__name__}")
        return text
