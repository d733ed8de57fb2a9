"""
Question assembly on top of TriviaGenerator.

generate_question() is the single-question path used by the game session
and by the sequential fallback. BatchAssembler asks for a whole batch in one
call and degrades to paced single-question calls when that fails. Neither
raises: failures are reported as message strings, with RATE_LIMIT as the
sentinel for provider saturation.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from .question import TriviaQuestion, normalize_question_text
from .service import NoProviderConfigured, RateLimited, TriviaGenerator

logger = logging.getLogger(__name__)

RATE_LIMIT = "RATE_LIMIT"
DUPLICATE_SKIPPED = "Duplicate question skipped"
NO_CONTENT_MESSAGE = "No se proporcionó contenido para generar la trivia."
GENERATION_FAILED_MESSAGE = "Error al generar la trivia. Intenta de nuevo."
NO_PROVIDER_MESSAGE = (
    "Error de configuración: no hay ningún proveedor de IA configurado. "
    "Define al menos una API key."
)

# Errors that make further single-question attempts pointless
_STOP_ERRORS = (RATE_LIMIT, NO_PROVIDER_MESSAGE)


@dataclass(frozen=True)
class QuestionResult:
    """Outcome of a single-question request: exactly one field is set."""

    question: Optional[TriviaQuestion] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.question is not None


@dataclass
class BatchResult:
    """Outcome of a batch request.

    Attributes:
        questions: Accepted questions, in generation order (may be short)
        errors: Messages for every failed or skipped item
    """

    questions: list[TriviaQuestion] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def rate_limited(self) -> bool:
        """True if generation stopped on provider saturation."""
        return RATE_LIMIT in self.errors


async def generate_question(
    generator: TriviaGenerator,
    content: str,
    previous_questions: Sequence[str] = (),
    previous_answer_indices: Sequence[int] = (),
) -> QuestionResult:
    """Generate one question, reporting failures as a message.

    Args:
        generator: Configured trivia generator
        content: Source text
        previous_questions: Question texts already asked
        previous_answer_indices: Correct-answer indices already used

    Returns:
        QuestionResult with either the question or an error message
    """
    if not content or not content.strip():
        logger.error("No content provided")
        return QuestionResult(error=NO_CONTENT_MESSAGE)

    try:
        result = await generator.generate(
            content,
            previous_questions=tuple(previous_questions),
            previous_answer_indices=tuple(previous_answer_indices),
            count=1,
        )
    except RateLimited:
        logger.warning("Rate limit reached on every provider")
        return QuestionResult(error=RATE_LIMIT)
    except NoProviderConfigured as e:
        logger.error(f"No provider configured: {e}")
        return QuestionResult(error=NO_PROVIDER_MESSAGE)
    except Exception as e:
        logger.error(f"Question generation failed: {e}", exc_info=True)
        return QuestionResult(error=GENERATION_FAILED_MESSAGE)

    if isinstance(result, list):
        result = result[0] if result else None

    if result is None:
        logger.error("No trivia generated")
        return QuestionResult(error=GENERATION_FAILED_MESSAGE)

    return QuestionResult(question=result)


class BatchAssembler:
    """Build batches of unique questions.

    Attributes:
        generator: Trivia generator used for every call
        pacing_delay: Seconds to wait between single-question fallback calls
    """

    def __init__(self, generator: TriviaGenerator, pacing_delay: float = 0.5):
        self.generator = generator
        self.pacing_delay = pacing_delay

    @staticmethod
    def _accept_unique(
        candidates: Iterable[TriviaQuestion],
        seen: set[str],
        result: BatchResult,
    ) -> None:
        for question in candidates:
            key = question.normalized_text
            if key in seen:
                logger.warning(f"Duplicate question skipped: {question.question!r}")
                result.errors.append(DUPLICATE_SKIPPED)
                continue
            seen.add(key)
            result.questions.append(question)

    async def generate_batch(
        self,
        content: str,
        count: int,
        previous_questions: Sequence[str] = (),
        previous_answer_indices: Sequence[int] = (),
    ) -> BatchResult:
        """Generate up to count unique questions.

        Tries one batch call first. If it fails, falls back to paced
        single-question calls with a rolling history, stopping early on a
        rate limit or missing configuration.

        Args:
            content: Source text
            count: Number of questions wanted
            previous_questions: Question texts already asked
            previous_answer_indices: Correct-answer indices already used

        Returns:
            BatchResult; may hold fewer than count questions
        """
        result = BatchResult()

        if not content or not content.strip():
            result.errors.append(NO_CONTENT_MESSAGE)
            return result

        if count < 1:
            return result

        history = list(previous_questions)
        indices = list(previous_answer_indices)
        seen = {normalize_question_text(q) for q in history}

        logger.info(f"Generating batch of {count} questions, {len(history)} in history")

        try:
            generated = await self.generator.generate(
                content,
                previous_questions=tuple(history),
                previous_answer_indices=tuple(indices),
                count=count,
            )
        except NoProviderConfigured as e:
            logger.error(f"No provider configured: {e}")
            result.errors.append(NO_PROVIDER_MESSAGE)
            return result
        except RateLimited:
            logger.warning("Batch generation rate limited, falling back to single questions")
            result.errors.append(RATE_LIMIT)
            generated = None
        except Exception as e:
            logger.error(f"Batch generation failed: {e}", exc_info=True)
            result.errors.append(str(e))
            generated = None
        else:
            if generated is None:
                result.errors.append(GENERATION_FAILED_MESSAGE)

        if generated is not None:
            if isinstance(generated, TriviaQuestion):
                generated = [generated]
            self._accept_unique(generated, seen, result)
            logger.info(f"Batch produced {len(result.questions)} unique question(s)")
            return result

        await self._sequential_fallback(content, count, history, indices, seen, result)
        return result

    async def _sequential_fallback(
        self,
        content: str,
        count: int,
        history: list[str],
        indices: list[int],
        seen: set[str],
        result: BatchResult,
    ) -> None:
        logger.info(f"Falling back to {count} sequential single-question calls")

        for attempt in range(count):
            if attempt:
                await asyncio.sleep(self.pacing_delay)

            single = await generate_question(self.generator, content, history, indices)

            if single.question is not None:
                question = single.question
                if question.normalized_text in seen:
                    logger.warning(f"Duplicate question skipped: {question.question!r}")
                    result.errors.append(DUPLICATE_SKIPPED)
                    continue
                seen.add(question.normalized_text)
                result.questions.append(question)
                history.append(question.question)
                indices.append(question.correct_answer_index)
                continue

            result.errors.append(single.error)
            if single.error in _STOP_ERRORS:
                logger.warning(f"Stopping sequential generation: {single.error}")
                break

        logger.info(
            f"Sequential generation produced {len(result.questions)}/{count} question(s)"
        )
