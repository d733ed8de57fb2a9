"""
Tests for the game session controller.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from quiziai.assembler import NO_PROVIDER_MESSAGE, RATE_LIMIT, BatchResult
from quiziai.content import ContentSummary, WikipediaContentSource
from quiziai.queue import QuestionQueue
from quiziai.service import RateLimited, TriviaGenerator
from quiziai.session import (
    CONTENT_NOT_FOUND_MESSAGE,
    NO_TOPIC_MESSAGE,
    REPEATED_QUESTION_MESSAGE,
    TOPIC_REQUIRED_MESSAGE,
    GameSession,
)

from .helpers import make_question

CONTENT = "Paris is the capital and largest city of France."


def questions(*texts):
    return [make_question(text, index=i % 4) for i, text in enumerate(texts)]


def build_session(batches=(), single=None, low_watermark=2, target_size=4, fetch=None):
    """Session over doubles.

    batches: BatchResult or exception per generate_batch call; empty
        results once the script runs out
    single: outcomes for foreground generator.generate calls
    """
    generator = MagicMock()
    generator.generate = AsyncMock(side_effect=list(single or []))

    scripted = list(batches)

    async def generate_batch(content, count, asked, indices):
        outcome = scripted.pop(0) if scripted else BatchResult()
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    assembler = MagicMock()
    assembler.generate_batch = AsyncMock(side_effect=generate_batch)

    if fetch is None:
        fetch = AsyncMock(return_value=ContentSummary(title="Paris", extract=CONTENT))

    queue = QuestionQueue(low_watermark=low_watermark, target_size=target_size)
    return GameSession(generator, assembler, fetch, queue=queue)


class TestStart:
    """Test GameSession.start()."""

    @pytest.mark.asyncio
    async def test_blank_topic(self):
        session = build_session()
        result = await session.start("  ")
        assert result.error == TOPIC_REQUIRED_MESSAGE
        session.fetch_content.assert_not_called()

    @pytest.mark.asyncio
    async def test_content_not_found(self):
        session = build_session(fetch=AsyncMock(return_value=None))
        result = await session.start("Nowhere")
        assert result.error == CONTENT_NOT_FOUND_MESSAGE
        assert session.last_error == CONTENT_NOT_FOUND_MESSAGE
        session.assembler.generate_batch.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_extract(self):
        session = build_session(fetch=AsyncMock(return_value=ContentSummary("X", "   ")))
        assert (await session.start("X")).error == CONTENT_NOT_FOUND_MESSAGE

    @pytest.mark.asyncio
    async def test_fetch_exception(self):
        session = build_session(fetch=AsyncMock(side_effect=RuntimeError("offline")))
        assert (await session.start("X")).error == CONTENT_NOT_FOUND_MESSAGE

    @pytest.mark.asyncio
    async def test_initial_fill_and_first_question(self):
        batch = questions("A?", "B?", "C?", "D?")
        session = build_session([BatchResult(questions=batch)])

        result = await session.start("Paris")

        assert result.question is batch[0]
        session.assembler.generate_batch.assert_awaited_once_with(CONTENT, 4, (), ())
        assert session.queue.size() == 3
        assert session.asked_questions == ["A?"]
        assert session.answer_indices == [0]
        assert session.current_question is batch[0]
        assert not session.refill_in_flight

    @pytest.mark.asyncio
    async def test_initial_fill_rate_limited(self):
        session = build_session([BatchResult(errors=[RATE_LIMIT])])

        result = await session.start("Paris")

        assert result.error == RATE_LIMIT
        assert session.last_error == RATE_LIMIT
        session.generator.generate.assert_not_called()

    @pytest.mark.asyncio
    async def test_initial_fill_no_provider(self):
        session = build_session([BatchResult(errors=[NO_PROVIDER_MESSAGE])])
        assert (await session.start("Paris")).error == NO_PROVIDER_MESSAGE

    @pytest.mark.asyncio
    async def test_new_topic_resets_state(self):
        session = build_session([
            BatchResult(questions=questions("A?", "B?", "C?", "D?")),
            BatchResult(questions=questions("X?", "Y?", "Z?", "W?")),
        ])
        await session.start("Paris")
        session.record_answer(0)

        result = await session.start("Rome")

        assert result.question.question == "X?"
        assert session.topic == "Rome"
        assert session.asked_questions == ["X?"]
        assert session.score.total == 0
        assert session.fetch_content.await_count == 2

    @pytest.mark.asyncio
    async def test_same_topic_reuses_content_and_queue(self):
        session = build_session([BatchResult(questions=questions("A?", "B?", "C?", "D?"))])
        await session.start("Paris")

        result = await session.start("Paris")

        assert result.question.question == "B?"
        assert session.fetch_content.await_count == 1
        assert session.assembler.generate_batch.await_count == 1


class TestNextQuestion:
    """Test GameSession.next_question()."""

    @pytest.mark.asyncio
    async def test_requires_topic(self):
        session = build_session()
        assert (await session.next_question()).error == NO_TOPIC_MESSAGE

    @pytest.mark.asyncio
    async def test_serves_in_order(self):
        session = build_session([BatchResult(questions=questions("A?", "B?", "C?", "D?"))])
        await session.start("Paris")

        assert (await session.next_question()).question.question == "B?"
        assert session.asked_questions == ["A?", "B?"]
        assert session.answer_indices == [0, 1]

    @pytest.mark.asyncio
    async def test_pop_time_duplicate_filter(self):
        session = build_session([BatchResult(questions=questions("A?", "B?", "C?", "D?"))])
        await session.start("Paris")
        # Sneak a repeat of an asked question past the enqueue filter
        session.queue._items.appendleft(make_question("  a?"))

        result = await session.next_question()

        assert result.question.question == "B?"

    @pytest.mark.asyncio
    async def test_triggers_refill_below_low_watermark(self):
        session = build_session([
            BatchResult(questions=questions("A?", "B?", "C?")),
            BatchResult(questions=questions("D?", "E?", "F?")),
        ])
        await session.start("Paris")
        assert not session.refill_in_flight

        await session.next_question()

        assert session.refill_in_flight
        await session.wait_for_refill()
        assert not session.refill_in_flight

        last_call = session.assembler.generate_batch.await_args_list[-1]
        assert last_call.args == (CONTENT, 3, ("A?", "B?"), (0, 1))
        assert [q.question for q in session.queue.items] == ["C?", "D?", "E?", "F?"]

    @pytest.mark.asyncio
    async def test_refill_drops_duplicates(self):
        session = build_session([
            BatchResult(questions=questions("A?", "B?", "C?")),
            BatchResult(questions=questions("a?", "C?", "G?")),
        ])
        await session.start("Paris")
        await session.next_question()
        await session.wait_for_refill()

        assert [q.question for q in session.queue.items] == ["C?", "G?"]

    @pytest.mark.asyncio
    async def test_waits_for_in_flight_refill(self):
        gate = asyncio.Event()
        calls = []

        async def generate_batch(content, count, asked, indices):
            calls.append(count)
            if len(calls) == 1:
                return BatchResult(questions=questions("A?"))
            await gate.wait()
            return BatchResult(questions=questions("B?", "C?"))

        session = build_session()
        session.assembler.generate_batch = AsyncMock(side_effect=generate_batch)

        await session.start("Paris")
        assert session.refill_in_flight

        asyncio.get_running_loop().call_later(0.01, gate.set)
        result = await session.next_question()

        assert result.question.question == "B?"
        session.generator.generate.assert_not_called()
        await session.wait_for_refill()

    @pytest.mark.asyncio
    async def test_exhaustion_falls_back_to_foreground(self):
        session = build_session(
            [BatchResult(questions=questions("A?")), BatchResult()],
            single=[make_question("F?")],
        )
        await session.start("Paris")
        await session.wait_for_refill()

        result = await session.next_question()

        assert result.question.question == "F?"
        kwargs = session.generator.generate.await_args.kwargs
        assert kwargs["previous_questions"] == ("A?",)
        assert kwargs["count"] == 1
        await session.wait_for_refill()

    @pytest.mark.asyncio
    async def test_foreground_rate_limit(self):
        session = build_session(
            [BatchResult(questions=questions("A?")), BatchResult(errors=[RATE_LIMIT])],
            single=[RateLimited("all")],
        )
        await session.start("Paris")
        await session.wait_for_refill()
        assert session.last_refill_errors == [RATE_LIMIT]

        result = await session.next_question()

        assert result.error == RATE_LIMIT
        assert session.last_error == RATE_LIMIT

    @pytest.mark.asyncio
    async def test_foreground_repeat_rejected(self):
        session = build_session(
            [BatchResult(questions=questions("A?")), BatchResult()],
            single=[make_question("A?")],
        )
        await session.start("Paris")
        await session.wait_for_refill()

        result = await session.next_question()

        assert result.error == REPEATED_QUESTION_MESSAGE
        assert session.asked_questions == ["A?"]


class TestRefillSingleFlight:
    """At most one refill is in flight."""

    @pytest.mark.asyncio
    async def test_second_request_rejected(self):
        gate = asyncio.Event()
        active = 0
        max_active = 0
        calls = 0

        async def generate_batch(content, count, asked, indices):
            nonlocal active, max_active, calls
            calls += 1
            if calls == 1:
                return BatchResult(questions=questions("A?"))
            active += 1
            max_active = max(max_active, active)
            await gate.wait()
            active -= 1
            return BatchResult(questions=questions("B?"))

        session = build_session()
        session.assembler.generate_batch = AsyncMock(side_effect=generate_batch)
        await session.start("Paris")

        assert session.refill_in_flight
        assert session.request_refill() is False
        assert session.request_refill() is False
        await asyncio.sleep(0)

        gate.set()
        await session.wait_for_refill()

        assert calls == 2
        assert max_active == 1
        assert not session.refill_in_flight
        assert session.request_refill() is True
        await session.wait_for_refill()

    @pytest.mark.asyncio
    async def test_restart_same_topic_waits_for_refill(self):
        gate = asyncio.Event()
        active = 0
        max_active = 0
        calls = 0

        async def generate_batch(content, count, asked, indices):
            nonlocal active, max_active, calls
            calls += 1
            active += 1
            max_active = max(max_active, active)
            try:
                if calls == 1:
                    return BatchResult(questions=questions("A?"))
                await gate.wait()
                return BatchResult(questions=questions("B?"))
            finally:
                active -= 1

        session = build_session()
        session.assembler.generate_batch = AsyncMock(side_effect=generate_batch)
        first = await session.start("Paris")
        assert first.question.question == "A?"
        assert session.refill_in_flight

        session.queue.clear()

        async def release():
            await asyncio.sleep(0)
            gate.set()

        releaser = asyncio.create_task(release())
        result = await session.start("Paris")

        assert result.question.question == "B?"
        assert calls == 2
        assert max_active == 1

        await releaser
        await session.wait_for_refill()
        assert max_active == 1

    @pytest.mark.asyncio
    async def test_flag_cleared_after_failure(self):
        session = build_session([
            BatchResult(questions=questions("A?")),
            RuntimeError("refill exploded"),
        ])
        await session.start("Paris")
        assert session.refill_in_flight

        await session.wait_for_refill()

        assert not session.refill_in_flight
        assert session.last_refill_errors == ["refill exploded"]

    @pytest.mark.asyncio
    async def test_no_refill_when_full(self):
        session = build_session([BatchResult(questions=questions("A?", "B?", "C?", "D?"))])
        await session.start("Paris")
        session.queue.push_many(questions("E?", "F?"))

        assert session.queue.refill_amount() == 0
        assert session.request_refill() is False

    @pytest.mark.asyncio
    async def test_reset_cancels_refill(self):
        gate = asyncio.Event()

        async def generate_batch(content, count, asked, indices):
            if not asked:
                return BatchResult(questions=questions("A?"))
            await gate.wait()
            return BatchResult(questions=questions("B?"))

        session = build_session()
        session.assembler.generate_batch = AsyncMock(side_effect=generate_batch)
        await session.start("Paris")
        task = session._refill_task
        await asyncio.sleep(0)

        session.reset()

        assert not session.refill_in_flight
        assert session.topic is None
        assert session.queue.is_empty()
        await asyncio.wait({task})
        assert task.cancelled()
        assert session.queue.is_empty()


class TestScore:
    """Test answer recording."""

    @pytest.mark.asyncio
    async def test_record_answer(self):
        session = build_session([BatchResult(questions=questions("A?", "B?", "C?", "D?"))])
        await session.start("Paris")

        assert session.record_answer(0) is True
        assert session.record_answer(1) is False  # already answered, not recounted
        assert session.score.correct == 1
        assert session.score.total == 1

        await session.next_question()
        assert session.record_answer(3) is False
        assert session.score.total == 2
        assert session.score.accuracy == 0.5

    def test_record_without_question(self):
        with pytest.raises(ValueError):
            build_session().record_answer(0)


class TestCreateFromConfig:

    def test_wiring(self, test_config):
        session = GameSession.create_from_config(test_config)

        assert isinstance(session.generator, TriviaGenerator)
        assert session.assembler.generator is session.generator
        assert session.assembler.pacing_delay == 0
        assert session.queue.low_watermark == 3
        assert session.queue.target_size == 6
        assert isinstance(session.fetch_content, WikipediaContentSource)
        assert session.fetch_content.timeout == 5.0
