"""
Trivia generation service.

TriviaGenerator walks an ordered chain of providers with one shared prompt
and turns their typed results into a question, a list of questions, or a
well-defined error.
"""

import asyncio
import logging
from typing import Any, Optional, Sequence, Union

from .mock_data import mock_questions
from .prompts import DEFAULT_LANGUAGE, build_prompt
from .providers import PROVIDER_CLASSES, ProviderResult, ResultStatus, TriviaProvider
from .question import GenerationRequest, TriviaQuestion

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER_ORDER = ("gemini", "groq", "huggingface")


class GenerationError(Exception):
    """Base class for generation errors."""


class NoProviderConfigured(GenerationError):
    """No provider has credentials and mock mode is off."""


class RateLimited(GenerationError):
    """Every provider failed and at least one reported a rate limit."""


class EmptyContent(GenerationError):
    """Generation was requested for blank content."""


class TriviaGenerator:
    """Generate trivia questions through an ordered provider fallback chain.

    Attributes:
        providers: Provider instances, in the order they are tried
        use_mocks: Serve canned questions instead of calling providers
        language: Language generated questions must be written in
        call_timeout: Optional cap in seconds on each provider call
    """

    def __init__(
        self,
        providers: Sequence[TriviaProvider],
        use_mocks: bool = False,
        language: str = DEFAULT_LANGUAGE,
        call_timeout: Optional[float] = None,
    ):
        self.providers = list(providers)
        self.use_mocks = use_mocks
        self.language = language
        self.call_timeout = call_timeout

        logger.info(
            f"Trivia generator initialized with providers="
            f"{[p.name for p in self.providers]}, use_mocks={use_mocks}"
        )

    def available_providers(self) -> list[TriviaProvider]:
        """List providers that have credentials, in chain order."""
        return [provider for provider in self.providers if provider.is_available()]

    async def _call_provider(self, provider: TriviaProvider, prompt, count: int) -> ProviderResult:
        try:
            if self.call_timeout:
                return await asyncio.wait_for(
                    provider.generate(prompt, count), timeout=self.call_timeout
                )
            return await provider.generate(prompt, count)
        except asyncio.TimeoutError:
            logger.warning(f"[{provider.name}] Timed out after {self.call_timeout}s")
            return ProviderResult.failed("timeout")
        except Exception as e:
            logger.error(f"[{provider.name}] Unexpected error: {e}", exc_info=True)
            return ProviderResult.failed(str(e))

    async def generate(
        self,
        content: str,
        previous_questions: Sequence[str] = (),
        previous_answer_indices: Sequence[int] = (),
        count: int = 1,
    ) -> Union[TriviaQuestion, list[TriviaQuestion], None]:
        """Generate trivia from source content.

        Args:
            content: Source text to build questions from
            previous_questions: Question texts already asked, oldest first
            previous_answer_indices: Correct-answer indices already used
            count: Number of questions requested

        Returns:
            A TriviaQuestion when count == 1 (or when a provider ignored batch
            mode), a list of questions for batches, or None if every provider
            failed without a rate limit

        Raises:
            ValueError: If count < 1
            EmptyContent: If content is blank
            NoProviderConfigured: If no provider is available
            RateLimited: If all providers failed and one was rate limited
        """
        if count < 1:
            raise ValueError(f"count must be at least 1, got {count}")

        if self.use_mocks:
            logger.info(f"Mock mode enabled, returning {count} canned question(s)")
            return mock_questions(count)

        if not content or not content.strip():
            raise EmptyContent("No content provided to generate trivia")

        available = self.available_providers()
        if not available:
            raise NoProviderConfigured(
                "No AI provider configured. Set at least one API key "
                "(GEMINI_API_KEY, GROQ_API_KEY or HUGGINGFACE_API_KEY)."
            )

        request = GenerationRequest(
            content=content.strip(),
            previous_questions=previous_questions,
            previous_answer_indices=previous_answer_indices,
            count=count,
        )
        prompt = build_prompt(request, self.language)

        logger.info(
            f"Generating {count} question(s) with {len(available)} provider(s), "
            f"{len(request.previous_questions)} previous question(s)"
        )

        saw_rate_limit = False

        for provider in available:
            logger.info(f"Trying provider: {provider.name}")
            result = await self._call_provider(provider, prompt, count)

            if result.is_ok:
                logger.info(f"Provider {provider.name} succeeded")
                return result.payload()

            if result.status is ResultStatus.RATE_LIMITED:
                saw_rate_limit = True
                logger.warning(f"Provider {provider.name} rate limited, trying next")
            else:
                logger.warning(f"Provider {provider.name} failed: {result.detail}")

        if saw_rate_limit:
            raise RateLimited("All providers failed, at least one was rate limited")

        logger.error("All providers failed")
        return None

    @classmethod
    def create_from_config(cls, config: dict[str, Any]) -> "TriviaGenerator":
        """Create a generator from a configuration dictionary.

        Args:
            config: Application configuration

        Returns:
            Initialized TriviaGenerator

        Raises:
            ValueError: If provider_order names an unknown provider
        """
        providers_config = config.get("providers", {})
        order = config.get("provider_order") or DEFAULT_PROVIDER_ORDER

        providers = []
        for name in order:
            provider_class = PROVIDER_CLASSES.get(name)
            if not provider_class:
                raise ValueError(
                    f"Unknown provider '{name}'. "
                    f"Available: {', '.join(PROVIDER_CLASSES.keys())}"
                )
            providers.append(provider_class(providers_config.get(name) or {}))

        return cls(
            providers=providers,
            use_mocks=bool(config.get("use_mocks", False)),
            language=config.get("language", DEFAULT_LANGUAGE),
            call_timeout=config.get("call_timeout"),
        )
