"""
QuiziAI: AI-generated trivia from Wikipedia topics.

Features:
- Prompt building shared by every AI provider
- Strict validation of provider output (no repair of bad questions)
- Ordered provider fallback (Gemini, Groq, Hugging Face) with rate-limit detection
- Batch generation with duplicate filtering and paced sequential fallback
- Pre-fetching question queue with single-flight background refill
- Offline mode with canned questions

Usage:
    python -m quiziai --topic "Revolución Francesa"
    python -m quiziai --mock

Configuration:
    See config.example.json; API keys can also come from GEMINI_API_KEY,
    GROQ_API_KEY and HUGGINGFACE_API_KEY.
"""

from .assembler import (
    RATE_LIMIT,
    BatchAssembler,
    BatchResult,
    QuestionResult,
    generate_question,
)
from .content import ContentSummary, WikipediaContentSource
from .prompts import Prompt, build_prompt
from .providers import (
    ChatCompletionsProvider,
    GeminiProvider,
    GroqProvider,
    HuggingFaceProvider,
    ProviderResult,
    ResultStatus,
    TriviaProvider,
)
from .question import GenerationRequest, TriviaQuestion
from .queue import QuestionQueue
from .service import (
    EmptyContent,
    GenerationError,
    NoProviderConfigured,
    RateLimited,
    TriviaGenerator,
)
from .session import GameSession
from .validator import EmptyBatch, MalformedResponse, ResponseMode, validate_response

__all__ = [
    "RATE_LIMIT",
    "BatchAssembler",
    "BatchResult",
    "QuestionResult",
    "generate_question",
    "ContentSummary",
    "WikipediaContentSource",
    "Prompt",
    "build_prompt",
    "TriviaProvider",
    "ProviderResult",
    "ResultStatus",
    "ChatCompletionsProvider",
    "GeminiProvider",
    "GroqProvider",
    "HuggingFaceProvider",
    "GenerationRequest",
    "TriviaQuestion",
    "QuestionQueue",
    "GenerationError",
    "NoProviderConfigured",
    "RateLimited",
    "EmptyContent",
    "TriviaGenerator",
    "GameSession",
    "ResponseMode",
    "MalformedResponse",
    "EmptyBatch",
    "validate_response",
]

__version__ = "0.1.0"
