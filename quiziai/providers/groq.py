"""
Groq provider implementation.

Groq serves Llama models through an OpenAI-compatible endpoint and
supports JSON mode, which keeps responses parseable.
"""

from typing import Any

from ..prompts import Prompt
from .chat import ChatCompletionsProvider


class GroqProvider(ChatCompletionsProvider):
    """Provider for the Groq API.

    Configuration:
        api_key: Groq API key (required)
        base_url: API base URL (default: "https://api.groq.com/openai/v1")
        models: Models to try in order (default: fast 8B before 70B)
    """

    name = "groq"
    DEFAULT_BASE_URL = "https://api.groq.com/openai/v1"
    DEFAULT_MODELS = ("llama-3.1-8b-instant", "llama-3.3-70b-versatile")

    def _build_payload(self, prompt: Prompt, count: int, model: str) -> dict[str, Any]:
        payload = super()._build_payload(prompt, count, model)
        payload["response_format"] = {"type": "json_object"}
        return payload
