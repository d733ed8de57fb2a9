"""
Question Queue

FIFO buffer of ready-to-serve questions with refill watermarks.
"""

from collections import deque
from typing import Iterable, List, Optional, Union

from .question import TriviaQuestion, normalize_question_text


class QuestionQueue:
    """
    Pre-fetched questions for one game session.

    Questions are served in the order they were pushed. When the queue
    drops below low_watermark the owner should request a background refill
    of refill_amount() questions to bring it back to target_size.

    The queue has no lock: it is only mutated from the event loop thread,
    and the single-flight refill guard lives in the session that owns it.
    """

    def __init__(self, low_watermark: int = 2, target_size: int = 10):
        """
        Initialize question queue.

        Args:
            low_watermark: Size below which a refill is needed
            target_size: Size a refill aims for

        Raises:
            ValueError: If the watermarks are inconsistent
        """
        if target_size < 1:
            raise ValueError(f"target_size must be at least 1, got {target_size}")
        if not 0 <= low_watermark <= target_size:
            raise ValueError(
                f"low_watermark must be between 0 and target_size ({target_size}), "
                f"got {low_watermark}"
            )
        self.low_watermark = low_watermark
        self.target_size = target_size
        self._items: deque[TriviaQuestion] = deque()

    @property
    def items(self) -> List[TriviaQuestion]:
        """Copy of the queued questions, head first."""
        return list(self._items)

    def size(self) -> int:
        """Number of queued questions."""
        return len(self._items)

    def is_empty(self) -> bool:
        return not self._items

    def needs_refill(self) -> bool:
        """Check if the queue has dropped below the low watermark."""
        return len(self._items) < self.low_watermark

    def refill_amount(self) -> int:
        """Number of questions needed to reach target_size."""
        return max(0, self.target_size - len(self._items))

    def push(self, question: TriviaQuestion) -> None:
        """Append one question at the tail."""
        self._items.append(question)

    def push_many(self, questions: Iterable[TriviaQuestion]) -> int:
        """
        Append questions at the tail, preserving their order.

        Args:
            questions: Questions to enqueue

        Returns:
            Number of questions added
        """
        before = len(self._items)
        self._items.extend(questions)
        return len(self._items) - before

    def pop(self) -> Optional[TriviaQuestion]:
        """
        Remove and return the head of the queue.

        Returns:
            The oldest queued question, or None if the queue is empty
        """
        if not self._items:
            return None
        return self._items.popleft()

    def peek(self, count: int = 1) -> List[TriviaQuestion]:
        """
        Look at upcoming questions without removing them.

        Args:
            count: Number of questions to return

        Returns:
            Up to count questions from the head
        """
        return list(self._items)[:count]

    def clear(self) -> int:
        """
        Remove every queued question.

        Returns:
            Number of questions removed
        """
        count = len(self._items)
        self._items.clear()
        return count

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item: Union[TriviaQuestion, str]) -> bool:
        text = item.question if isinstance(item, TriviaQuestion) else item
        if not isinstance(text, str):
            return False
        key = normalize_question_text(text)
        return any(q.normalized_text == key for q in self._items)

    def __repr__(self) -> str:
        return (
            f"QuestionQueue(size={len(self._items)}, low_watermark={self.low_watermark}, "
            f"target_size={self.target_size})"
        )
