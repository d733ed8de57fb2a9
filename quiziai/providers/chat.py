"""
OpenAI-compatible chat completions provider.

Shared by every backend that speaks the /chat/completions protocol
(Groq, the Hugging Face router, ...).
"""

from typing import Any, Optional

import httpx

from ..prompts import Prompt
from .base import ProviderError, TriviaProvider

BATCH_MAX_TOKENS = 2000
SINGLE_MAX_TOKENS = 500


class ChatCompletionsProvider(TriviaProvider):
    """Provider for OpenAI-compatible chat completion APIs.

    The prompt instructions go in the system message and the source content
    in the user message.

    Configuration:
        api_key: Bearer token (required)
        base_url: API base URL
        models: Models to try in order
        timeout: Request timeout in seconds (default: 60.0)
        temperature: Sampling temperature (default: 0.7)
    """

    name = "chat"
    DEFAULT_BASE_URL = "https://api.openai.com/v1"

    def __init__(self, config: Optional[dict[str, Any]] = None):
        super().__init__(config)
        self.base_url = self.config.get("base_url", self.DEFAULT_BASE_URL).rstrip("/")

    def _get_headers(self) -> dict[str, str]:
        """Get HTTP headers for API requests.

        Returns:
            Dictionary of HTTP headers
        """
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

    def _build_payload(self, prompt: Prompt, count: int, model: str) -> dict[str, Any]:
        return {
            "model": model,
            "messages": [
                {"role": "system", "content": prompt.instructions},
                {"role": "user", "content": prompt.content},
            ],
            "temperature": self.temperature,
            "max_tokens": BATCH_MAX_TOKENS if count > 1 else SINGLE_MAX_TOKENS,
        }

    @staticmethod
    def _extract_text(data: Any) -> str:
        """Pull generated text out of a chat completion body.

        Falls back from choices[0].message.content to choices[0].text and
        then to a top-level generated_text field.
        """
        if not isinstance(data, dict):
            return ""

        choices = data.get("choices")
        if isinstance(choices, list) and choices and isinstance(choices[0], dict):
            choice = choices[0]
            message = choice.get("message")
            if isinstance(message, dict):
                content = message.get("content")
                if isinstance(content, str) and content:
                    return content
            text = choice.get("text")
            if isinstance(text, str) and text:
                return text

        generated = data.get("generated_text")
        return generated if isinstance(generated, str) else ""

    async def _request_text(self, prompt: Prompt, count: int, model: str) -> str:
        url = f"{self.base_url}/chat/completions"
        payload = self._build_payload(prompt, count, model)

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(url, json=payload, headers=self._get_headers())

        if response.status_code != 200:
            raise ProviderError(
                f"{self.name} API error ({response.status_code}) for {model}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(f"{self.name} returned a non-JSON body: {e}")

        return self._extract_text(data)
