"""
Game session controller.

GameSession owns everything that changes while a player works through a
topic: the question queue, the rolling histories of asked questions and
answer positions, the cached topic content and the score. It decides when
to refill the queue in the background and guarantees that at most one
refill runs at a time.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, Optional

from .assembler import (
    NO_PROVIDER_MESSAGE,
    RATE_LIMIT,
    BatchAssembler,
    QuestionResult,
    generate_question,
)
from .content import ContentSummary, WikipediaContentSource
from .queue import QuestionQueue
from .question import TriviaQuestion
from .service import TriviaGenerator

logger = logging.getLogger(__name__)

TOPIC_REQUIRED_MESSAGE = "Escribe un tema para empezar."
NO_TOPIC_MESSAGE = "Elige un tema antes de pedir una pregunta."
CONTENT_NOT_FOUND_MESSAGE = (
    "No se encontró información sobre este tema en Wikipedia. Intenta con otro."
)
REPEATED_QUESTION_MESSAGE = "La IA repitió una pregunta anterior. Intenta de nuevo."

ContentFetcher = Callable[[str], Awaitable[Optional[ContentSummary]]]


@dataclass(frozen=True)
class Score:
    """Answers recorded so far in a session."""

    correct: int = 0
    total: int = 0

    @property
    def accuracy(self) -> float:
        return self.correct / self.total if self.total else 0.0


class GameSession:
    """
    One player's run through a topic.

    The refill flag is checked and set in the same synchronous step and
    cleared in a finally block, so two refills are never in flight at
    once. All mutation happens on the event loop thread.

    Attributes:
        generator: Trivia generator for foreground single questions
        assembler: Batch assembler for initial fill and refills
        fetch_content: Coroutine function returning topic content
        queue: Pre-fetched questions
        topic: Current topic, or None before start()
        content: Cached source text for the topic
        current_question: Last question served
        last_error: Last error message shown to the player
        last_refill_errors: Errors reported by the most recent refill
    """

    def __init__(
        self,
        generator: TriviaGenerator,
        assembler: BatchAssembler,
        fetch_content: ContentFetcher,
        queue: Optional[QuestionQueue] = None,
    ):
        self.generator = generator
        self.assembler = assembler
        self.fetch_content = fetch_content
        self.queue = queue if queue is not None else QuestionQueue()

        self.topic: Optional[str] = None
        self.content: Optional[str] = None
        self.current_question: Optional[TriviaQuestion] = None
        self.last_error: Optional[str] = None
        self.last_refill_errors: list[str] = []

        self._asked: list[str] = []
        self._asked_keys: set[str] = set()
        self._answer_indices: list[int] = []
        self._correct = 0
        self._total = 0
        self._answered = False

        self._refill_in_flight = False
        self._refill_task: Optional[asyncio.Task] = None

    # ------------------------------------------------------------------
    # State accessors
    # ------------------------------------------------------------------

    @property
    def refill_in_flight(self) -> bool:
        return self._refill_in_flight

    @property
    def score(self) -> Score:
        return Score(correct=self._correct, total=self._total)

    @property
    def asked_questions(self) -> list[str]:
        """Copy of the asked question texts, oldest first."""
        return list(self._asked)

    @property
    def answer_indices(self) -> list[int]:
        """Copy of the served correct-answer indices, oldest first."""
        return list(self._answer_indices)

    def _history(self) -> tuple[tuple[str, ...], tuple[int, ...]]:
        return tuple(self._asked), tuple(self._answer_indices)

    def _fail(self, message: str) -> QuestionResult:
        self.last_error = message
        return QuestionResult(error=message)

    # ------------------------------------------------------------------
    # Game flow
    # ------------------------------------------------------------------

    async def start(self, topic: str) -> QuestionResult:
        """
        Start (or resume) a topic and serve its first question.

        A new topic clears the queue, the histories and the score. The
        queue is filled with one batch before the first question is served.

        Args:
            topic: Topic to play

        Returns:
            QuestionResult with the first question or an error message
        """
        topic = (topic or "").strip()
        if not topic:
            return self._fail(TOPIC_REQUIRED_MESSAGE)

        if topic != self.topic:
            logger.info(f"Starting new topic: {topic!r}")
            self.reset()
            self.topic = topic

        if self.content is None:
            try:
                summary = await self.fetch_content(topic)
            except Exception as e:
                logger.error(f"Content fetch failed for {topic!r}: {e}", exc_info=True)
                summary = None

            extract = (getattr(summary, "extract", "") or "").strip() if summary else ""
            if not extract:
                return self._fail(CONTENT_NOT_FOUND_MESSAGE)
            self.content = extract

        if self.queue.is_empty() and self._refill_in_flight:
            logger.info("Queue empty, waiting for in-flight refill before the initial fill")
            await self.wait_for_refill()

        if self.queue.is_empty():
            asked, indices = self._history()
            batch = await self.assembler.generate_batch(
                self.content, self.queue.target_size, asked, indices
            )
            added = self._enqueue(batch.questions)
            logger.info(f"Initial fill queued {added} question(s) for {topic!r}")

            if not added:
                if batch.rate_limited:
                    return self._fail(RATE_LIMIT)
                if NO_PROVIDER_MESSAGE in batch.errors:
                    return self._fail(NO_PROVIDER_MESSAGE)

        return await self.next_question()

    async def next_question(self) -> QuestionResult:
        """
        Serve the next question.

        Pops from the queue, waits for an in-flight refill if the queue ran
        dry, and finally generates one question in the foreground. Triggers
        a background refill once the queue falls below its low watermark.

        Returns:
            QuestionResult with the question or an error message
        """
        if self.content is None:
            return self._fail(NO_TOPIC_MESSAGE)

        question = self._pop_fresh()

        if question is None and self._refill_in_flight:
            logger.info("Queue empty, waiting for in-flight refill")
            await self.wait_for_refill()
            question = self._pop_fresh()

        if question is None:
            logger.info("Queue exhausted, generating a question in the foreground")
            asked, indices = self._history()
            result = await generate_question(self.generator, self.content, asked, indices)
            if result.error:
                return self._fail(result.error)
            question = result.question
            if question.normalized_text in self._asked_keys:
                logger.warning(f"Foreground question repeats history: {question.question!r}")
                return self._fail(REPEATED_QUESTION_MESSAGE)

        self._serve(question)

        if self.queue.needs_refill():
            self.request_refill()

        return QuestionResult(question=question)

    def _pop_fresh(self) -> Optional[TriviaQuestion]:
        while True:
            question = self.queue.pop()
            if question is None:
                return None
            if question.normalized_text in self._asked_keys:
                logger.warning(f"Dropping queued duplicate: {question.question!r}")
                continue
            return question

    def _serve(self, question: TriviaQuestion) -> None:
        self._asked.append(question.question)
        self._asked_keys.add(question.normalized_text)
        self._answer_indices.append(question.correct_answer_index)
        self.current_question = question
        self._answered = False
        self.last_error = None

    def _enqueue(self, questions: Iterable[TriviaQuestion]) -> int:
        fresh = []
        keys = set(self._asked_keys)
        for question in questions:
            key = question.normalized_text
            if key in keys or question in self.queue:
                logger.debug(f"Not queueing duplicate: {question.question!r}")
                continue
            keys.add(key)
            fresh.append(question)
        return self.queue.push_many(fresh)

    def record_answer(self, index: int) -> bool:
        """
        Record the player's answer to the current question.

        Answering the same question twice does not change the score.

        Args:
            index: Chosen option index

        Returns:
            True if the answer is correct

        Raises:
            ValueError: If no question has been served
        """
        if self.current_question is None:
            raise ValueError("No question to answer")

        correct = self.current_question.is_correct(index)
        if not self._answered:
            self._answered = True
            self._total += 1
            if correct:
                self._correct += 1
        return correct

    # ------------------------------------------------------------------
    # Background refill
    # ------------------------------------------------------------------

    def request_refill(self) -> bool:
        """
        Start a background refill unless one is already running.

        Must be called from within a running event loop.

        Returns:
            True if a refill was started
        """
        if self._refill_in_flight:
            logger.debug("Refill already in flight, not starting another")
            return False
        if self.content is None:
            return False

        amount = self.queue.refill_amount()
        if amount <= 0:
            return False

        asked, indices = self._history()
        self._refill_in_flight = True
        try:
            self._refill_task = asyncio.create_task(
                self._refill(self.topic, self.content, amount, asked, indices)
            )
        except RuntimeError:
            self._refill_in_flight = False
            raise
        logger.info(f"Background refill started for {amount} question(s)")
        return True

    async def _refill(
        self,
        topic: Optional[str],
        content: str,
        amount: int,
        asked: tuple[str, ...],
        indices: tuple[int, ...],
    ) -> None:
        try:
            batch = await self.assembler.generate_batch(content, amount, asked, indices)
            if topic != self.topic:
                logger.info("Topic changed during refill, discarding results")
                return
            added = self._enqueue(batch.questions)
            self.last_refill_errors = list(batch.errors)
            if batch.errors:
                logger.warning(f"Refill reported errors: {batch.errors}")
            logger.info(f"Refill queued {added} question(s), queue size {self.queue.size()}")
        except Exception as e:
            logger.error(f"Background refill failed: {e}", exc_info=True)
            self.last_refill_errors = [str(e)]
        finally:
            # A reset may already have replaced the task; leave its flag alone
            if self._refill_task is None or self._refill_task is asyncio.current_task():
                self._refill_task = None
                self._refill_in_flight = False

    async def wait_for_refill(self) -> None:
        """Wait for the in-flight refill, if any, to settle."""
        task = self._refill_task
        if task is not None:
            await asyncio.wait({task})

    def reset(self) -> None:
        """Forget the topic, the queue, the histories and the score."""
        if self._refill_task is not None:
            self._refill_task.cancel()
        self._refill_task = None
        self._refill_in_flight = False

        cleared = self.queue.clear()
        if cleared:
            logger.debug(f"Cleared {cleared} queued question(s)")

        self.topic = None
        self.content = None
        self.current_question = None
        self.last_error = None
        self.last_refill_errors = []
        self._asked.clear()
        self._asked_keys.clear()
        self._answer_indices.clear()
        self._correct = 0
        self._total = 0
        self._answered = False

    @classmethod
    def create_from_config(cls, config: dict[str, Any]) -> "GameSession":
        """
        Build a session and its collaborators from configuration.

        Args:
            config: Application configuration

        Returns:
            GameSession wired to a TriviaGenerator, BatchAssembler,
            QuestionQueue and WikipediaContentSource
        """
        generator = TriviaGenerator.create_from_config(config)

        batch_config = config.get("batch", {})
        assembler = BatchAssembler(
            generator, pacing_delay=batch_config.get("pacing_delay", 0.5)
        )

        queue_config = config.get("queue", {})
        queue = QuestionQueue(
            low_watermark=queue_config.get("low_watermark", 2),
            target_size=queue_config.get("target_size", 10),
        )

        content_config = config.get("content", {})
        source = WikipediaContentSource(
            primary_language=content_config.get("primary_language", "es"),
            fallback_language=content_config.get("fallback_language", "en"),
            timeout=content_config.get("timeout", 10.0),
        )

        return cls(generator, assembler, source, queue=queue)
