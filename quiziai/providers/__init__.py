"""
Trivia provider implementations.

Each provider wraps one vendor API and reports a typed ProviderResult.
"""

from .base import (
    ProviderError,
    ProviderResult,
    ResultStatus,
    TriviaProvider,
    is_rate_limit_signal,
)
from .chat import ChatCompletionsProvider
from .gemini import GeminiProvider
from .groq import GroqProvider
from .huggingface import HuggingFaceProvider

# Registry used by TriviaGenerator.create_from_config()
PROVIDER_CLASSES: dict[str, type[TriviaProvider]] = {
    "gemini": GeminiProvider,
    "groq": GroqProvider,
    "huggingface": HuggingFaceProvider,
    "chat": ChatCompletionsProvider,
}

__all__ = [
    "TriviaProvider",
    "ProviderResult",
    "ResultStatus",
    "ProviderError",
    "is_rate_limit_signal",
    "ChatCompletionsProvider",
    "GeminiProvider",
    "GroqProvider",
    "HuggingFaceProvider",
    "PROVIDER_CLASSES",
]
