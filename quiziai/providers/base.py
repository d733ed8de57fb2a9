"""
Base provider interface for trivia generation backends.

This module defines the abstract base class and common types for providers.
Providers never raise to the caller: every outcome is a ProviderResult, so
the generator can walk its fallback chain without exception sniffing.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Sequence, Union

import httpx

from ..prompts import Prompt
from ..question import TriviaQuestion
from ..validator import MalformedResponse, ResponseMode, validate_response

logger = logging.getLogger(__name__)

# Response body fragments that signal quota exhaustion or throttling
RATE_LIMIT_KEYWORDS = (
    "quota",
    "rate limit",
    "rate_limit",
    "ratelimit",
    "too many requests",
)


def is_rate_limit_signal(status_code: Optional[int], body: str = "") -> bool:
    """Check whether an HTTP response means the vendor is throttling us.

    Args:
        status_code: HTTP status code (None for transport errors)
        body: Response body text

    Returns:
        True on HTTP 429 or a body mentioning quota/rate limits
    """
    if status_code == 429:
        return True
    lowered = (body or "").lower()
    return any(keyword in lowered for keyword in RATE_LIMIT_KEYWORDS)


class ResultStatus(Enum):
    """Outcome of one provider call."""

    OK = "ok"
    RATE_LIMITED = "rate_limited"
    FAILED = "failed"


@dataclass(frozen=True)
class ProviderResult:
    """Typed outcome of TriviaProvider.generate().

    Attributes:
        status: OK, RATE_LIMITED or FAILED
        questions: Validated questions (empty unless OK)
        detail: Human-readable reason for non-OK outcomes
        single: True if the provider answered with one bare question
    """

    status: ResultStatus
    questions: tuple[TriviaQuestion, ...] = field(default_factory=tuple)
    detail: str = ""
    single: bool = False

    @classmethod
    def ok(cls, result: Union[TriviaQuestion, Sequence[TriviaQuestion]]) -> "ProviderResult":
        """Wrap a validated payload."""
        if isinstance(result, TriviaQuestion):
            return cls(status=ResultStatus.OK, questions=(result,), single=True)
        return cls(status=ResultStatus.OK, questions=tuple(result))

    @classmethod
    def rate_limited(cls, detail: str = "") -> "ProviderResult":
        """Provider signalled quota exhaustion or throttling."""
        return cls(status=ResultStatus.RATE_LIMITED, detail=detail)

    @classmethod
    def failed(cls, detail: str = "") -> "ProviderResult":
        """Provider produced nothing usable."""
        return cls(status=ResultStatus.FAILED, detail=detail)

    @property
    def is_ok(self) -> bool:
        return self.status is ResultStatus.OK

    def payload(self) -> Union[TriviaQuestion, list[TriviaQuestion], None]:
        """Return the question(s) in the shape the generator hands out."""
        if not self.is_ok:
            return None
        if self.single:
            return self.questions[0]
        return list(self.questions)


class ProviderError(Exception):
    """Error raised inside a provider while talking to its backend."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        """Initialize provider error.

        Args:
            message: Error message
            status_code: HTTP status code if applicable
            body: Response body text if applicable
        """
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    @property
    def is_rate_limit(self) -> bool:
        """Whether this error is a quota/throttling signal."""
        return is_rate_limit_signal(self.status_code, self.body)


class TriviaProvider(ABC):
    """Abstract base class for trivia generation providers.

    Subclasses implement _request_text() for one model; the base class
    handles iterating alternative models, rate-limit detection and
    response validation.

    Configuration:
        api_key: Credential for the backend (provider unavailable without it)
        models: Model identifiers to try in order
        timeout: Request timeout in seconds (default: 60.0)
        temperature: Sampling temperature (default: 0.7)
    """

    name: str = "provider"
    DEFAULT_MODELS: tuple[str, ...] = ()
    DEFAULT_TIMEOUT = 60.0

    def __init__(self, config: Optional[dict[str, Any]] = None):
        """Initialize provider with configuration.

        Args:
            config: Provider-specific configuration dictionary
        """
        self.config = dict(config or {})
        self.api_key = (self.config.get("api_key") or "").strip()
        self.timeout = self.config.get("timeout", self.DEFAULT_TIMEOUT)
        self.temperature = self.config.get("temperature", 0.7)
        self.models = self._configured_models()
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def _configured_models(self) -> list[str]:
        models = self.config.get("models")
        if isinstance(models, str):
            models = [models]
        if not models and self.config.get("default_model"):
            models = [self.config["default_model"]]
        return list(models or self.DEFAULT_MODELS)

    def is_available(self) -> bool:
        """Check if the provider has a credential configured.

        Pure check, no network access.
        """
        return bool(self.api_key)

    @abstractmethod
    async def _request_text(self, prompt: Prompt, count: int, model: str) -> str:
        """Send one request for one model and return the raw model text.

        Args:
            prompt: Shared prompt
            count: Number of questions requested
            model: Model identifier

        Returns:
            Raw generated text (may be empty)

        Raises:
            ProviderError: On HTTP or transport failure
        """

    def _parse(self, text: str, count: int) -> Union[TriviaQuestion, list[TriviaQuestion]]:
        """Validate model text against the question contract."""
        return validate_response(text, ResponseMode.for_count(count))

    async def generate(self, prompt: Prompt, count: int) -> ProviderResult:
        """Generate question(s), trying each configured model in order.

        Args:
            prompt: Shared prompt built for this request
            count: Number of questions requested

        Returns:
            ProviderResult: OK with questions, RATE_LIMITED if the vendor
            throttled us, FAILED if every model failed
        """
        if not self.api_key:
            self.logger.info(f"[{self.name}] API key not configured, skipping")
            return ProviderResult.failed(f"{self.name} API key not configured")

        last_detail = "no models configured"

        for model in self.models:
            self.logger.info(f"[{self.name}] Trying model {model}")
            try:
                text = await self._request_text(prompt, count, model)
            except ProviderError as e:
                if e.is_rate_limit:
                    self.logger.warning(
                        f"[{self.name}] Rate limit/quota hit on {model}: {e}"
                    )
                    return ProviderResult.rate_limited(str(e))
                self.logger.warning(f"[{self.name}] Model {model} failed: {e}")
                last_detail = str(e)
                continue
            except httpx.TimeoutException as e:
                self.logger.warning(f"[{self.name}] Model {model} timed out: {e}")
                last_detail = f"timeout: {e}"
                continue
            except httpx.RequestError as e:
                self.logger.warning(f"[{self.name}] Connection error on {model}: {e}")
                last_detail = f"connection error: {e}"
                continue
            except (TypeError, AttributeError, KeyError) as e:
                self.logger.warning(f"[{self.name}] Unexpected response shape from {model}: {e}")
                last_detail = f"unexpected response: {e}"
                continue

            if not isinstance(text, str) or not text.strip():
                self.logger.warning(f"[{self.name}] No text in response for {model}")
                last_detail = "empty response"
                continue

            self.logger.debug(f"[{self.name}] Raw response: {text[:500]}")

            try:
                result = self._parse(text, count)
            except MalformedResponse as e:
                self.logger.warning(f"[{self.name}] Invalid response from {model}: {e}")
                last_detail = str(e)
                continue

            generated = 1 if isinstance(result, TriviaQuestion) else len(result)
            self.logger.info(f"[{self.name}] Model {model} generated {generated} question(s)")
            return ProviderResult.ok(result)

        return ProviderResult.failed(last_detail)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(models={self.models!r}, available={self.is_available()})"
