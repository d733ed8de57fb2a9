"""
Response validation for provider output.

Every provider funnels its raw model text through validate_response(), so
the question shape contract is enforced in exactly one place.
"""

import json
import logging
import re
from enum import Enum
from typing import Any, Union

from .question import TriviaQuestion

logger = logging.getLogger(__name__)


class ResponseMode(Enum):
    """Expected response shape."""

    SINGLE = "single"
    BATCH = "batch"

    @classmethod
    def for_count(cls, count: int) -> "ResponseMode":
        """Pick the mode matching a requested question count."""
        return cls.BATCH if count > 1 else cls.SINGLE


class MalformedResponse(ValueError):
    """Raised when a provider payload cannot be turned into questions."""


class EmptyBatch(MalformedResponse):
    """Raised when no element of a batch survives validation."""


_THINK_BLOCK = re.compile(r"<think>.*?</think>", re.DOTALL | re.IGNORECASE)
_OPENING_FENCE = re.compile(r"^```[a-zA-Z0-9_-]*\s*")
_CLOSING_FENCE = re.compile(r"\s*```$")


def clean_response_text(text: str) -> str:
    """Strip provider wrapping around a JSON payload.

    Removes <think>...</think> reasoning segments, markdown code fences
    and surrounding whitespace.

    Args:
        text: Raw model output

    Returns:
        Text ready for JSON parsing
    """
    cleaned = _THINK_BLOCK.sub("", text).strip()
    if cleaned.startswith("```"):
        cleaned = _OPENING_FENCE.sub("", cleaned)
        cleaned = _CLOSING_FENCE.sub("", cleaned)
    return cleaned.strip()


def _decode(raw: Any) -> dict[str, Any]:
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")

    if isinstance(raw, str):
        cleaned = clean_response_text(raw)
        try:
            raw = json.loads(cleaned)
        except json.JSONDecodeError as e:
            raise MalformedResponse(f"Response is not valid JSON: {e}") from e

    if not isinstance(raw, dict):
        raise MalformedResponse(
            f"Expected a JSON object, got {type(raw).__name__}"
        )
    return raw


def _validate_single(data: dict[str, Any]) -> TriviaQuestion:
    try:
        return TriviaQuestion.from_dict(data)
    except (TypeError, ValueError) as e:
        raise MalformedResponse(f"Invalid trivia structure: {e}") from e


def _validate_batch(data: dict[str, Any]) -> Union[TriviaQuestion, list[TriviaQuestion]]:
    if "questions" not in data:
        if "question" in data:
            # Provider ignored batch mode and answered with one question
            logger.info("Batch requested but a single question was returned")
            return _validate_single(data)
        raise MalformedResponse("Invalid batch structure: missing questions array")

    items = data["questions"]
    if not isinstance(items, list):
        raise MalformedResponse("Invalid batch structure: questions is not a list")

    questions = []
    for position, item in enumerate(items):
        try:
            questions.append(TriviaQuestion.from_dict(item))
        except (TypeError, ValueError) as e:
            logger.warning(f"Skipping invalid question #{position} in batch: {e}")

    if not questions:
        raise EmptyBatch("No valid questions in batch")

    return questions


def validate_response(
    raw: Any,
    mode: ResponseMode,
) -> Union[TriviaQuestion, list[TriviaQuestion]]:
    """Validate a raw provider payload.

    Args:
        raw: Model output text (str/bytes) or an already decoded JSON object
        mode: SINGLE for one question, BATCH for a {"questions": [...]} wrapper

    Returns:
        A TriviaQuestion in SINGLE mode; a list of questions in BATCH mode
        (or a single TriviaQuestion if the provider ignored batch mode)

    Raises:
        MalformedResponse: If the payload cannot be parsed or is invalid
        EmptyBatch: If no batch element is valid
    """
    data = _decode(raw)

    if mode is ResponseMode.BATCH:
        return _validate_batch(data)
    return _validate_single(data)
