"""
Trivia Question Models

Data models for generated trivia questions and generation requests.
"""

from dataclasses import dataclass, field
from typing import Any, Sequence
import re


OPTION_COUNT = 4

_WHITESPACE = re.compile(r"\s+")


def normalize_question_text(text: str) -> str:
    """
    Normalize question text for duplicate detection.

    Lowercases the text and collapses runs of whitespace so that
    "What is  X?" and "what is x? " compare equal.

    Args:
        text: Raw question text

    Returns:
        Normalized text
    """
    return _WHITESPACE.sub(" ", text).strip().casefold()


def _non_blank(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


@dataclass(frozen=True)
class TriviaQuestion:
    """
    A validated multiple-choice trivia question.

    Instances are valid by construction: any violation of the shape
    contract raises ValueError in __post_init__, so a question that
    exists can always be served.

    Attributes:
        question: The question text
        options: Exactly four distinct answer options, in display order
        correct_answer_index: Index into options of the correct answer (0-3)
        fun_fact: Short fact related to the correct answer
    """

    question: str
    options: tuple[str, str, str, str]
    correct_answer_index: int
    fun_fact: str

    def __post_init__(self) -> None:
        """Enforce the question shape contract."""
        if not _non_blank(self.question):
            raise ValueError("question must be a non-empty string")

        options = self.options
        if isinstance(options, (str, bytes)) or not isinstance(options, Sequence):
            raise ValueError("options must be a sequence of strings")
        options = tuple(options)
        if len(options) != OPTION_COUNT:
            raise ValueError(
                f"options must contain exactly {OPTION_COUNT} entries, got {len(options)}"
            )
        if not all(_non_blank(opt) for opt in options):
            raise ValueError("options must be non-empty strings")
        if len({opt.strip().casefold() for opt in options}) != OPTION_COUNT:
            raise ValueError("options must be distinct")
        # Frozen dataclass: normalise list input to a tuple
        object.__setattr__(self, "options", options)

        index = self.correct_answer_index
        if isinstance(index, bool) or not isinstance(index, int):
            raise ValueError("correct_answer_index must be an integer")
        if not 0 <= index < OPTION_COUNT:
            raise ValueError(
                f"correct_answer_index must be between 0 and {OPTION_COUNT - 1}, got {index}"
            )

        if not _non_blank(self.fun_fact):
            raise ValueError("fun_fact must be a non-empty string")

    @property
    def correct_answer(self) -> str:
        """Text of the correct option."""
        return self.options[self.correct_answer_index]

    @property
    def normalized_text(self) -> str:
        """Question text normalized for duplicate detection."""
        return normalize_question_text(self.question)

    def is_correct(self, index: int) -> bool:
        """Check whether the given option index is the correct answer."""
        return index == self.correct_answer_index

    @classmethod
    def from_dict(cls, data: Any) -> "TriviaQuestion":
        """
        Build a question from the JSON wire shape.

        Expected keys: question, options, correctAnswerIndex, funFact.

        Args:
            data: Decoded JSON object

        Returns:
            TriviaQuestion

        Raises:
            ValueError: If the object does not satisfy the shape contract
        """
        if not isinstance(data, dict):
            raise ValueError(f"question must be an object, got {type(data).__name__}")

        index = data.get("correctAnswerIndex")
        # JSON numbers like 1.0 are still a valid position
        if isinstance(index, float) and index.is_integer():
            index = int(index)

        options = data.get("options")
        if not isinstance(options, list):
            raise ValueError("options must be a list")

        return cls(
            question=data.get("question"),
            options=tuple(options),
            correct_answer_index=index,
            fun_fact=data.get("funFact"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON wire shape."""
        return {
            "question": self.question,
            "options": list(self.options),
            "correctAnswerIndex": self.correct_answer_index,
            "funFact": self.fun_fact,
        }


@dataclass(frozen=True)
class GenerationRequest:
    """
    Parameters for one generation call.

    History sequences are snapshotted to tuples so callers can keep
    mutating their own lists while a request is in flight.

    Attributes:
        content: Source text to build questions from
        previous_questions: Question texts already asked, oldest first
        previous_answer_indices: Correct-answer indices already used, oldest first
        count: Number of questions requested (>= 1)
    """

    content: str
    previous_questions: tuple[str, ...] = field(default_factory=tuple)
    previous_answer_indices: tuple[int, ...] = field(default_factory=tuple)
    count: int = 1

    def __post_init__(self) -> None:
        if self.count < 1:
            raise ValueError(f"count must be at least 1, got {self.count}")
        object.__setattr__(self, "previous_questions", tuple(self.previous_questions))
        object.__setattr__(
            self, "previous_answer_indices", tuple(self.previous_answer_indices)
        )
        if len(self.previous_questions) != len(self.previous_answer_indices):
            raise ValueError(
                f"history length mismatch: {len(self.previous_questions)} question(s), "
                f"{len(self.previous_answer_indices)} answer index(es)"
            )

    @property
    def is_batch(self) -> bool:
        """Whether more than one question is requested."""
        return self.count > 1
