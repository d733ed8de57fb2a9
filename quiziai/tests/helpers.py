"""
Shared builders for QuiziAI tests.
"""

from quiziai.providers import ProviderResult, TriviaProvider
from quiziai.question import TriviaQuestion


def question_dict(text="What is the capital of France?", index=0, fun_fact="Paris hosts the Louvre."):
    """Wire-shape question payload."""
    return {
        "question": text,
        "options": ["Paris", "London", "Berlin", "Madrid"],
        "correctAnswerIndex": index,
        "funFact": fun_fact,
    }


def make_question(text, index=0):
    return TriviaQuestion.from_dict(question_dict(text, index))


class FakeProvider(TriviaProvider):
    """Provider returning scripted results without any network access.

    Each call to generate() consumes the next scripted result; the last
    one repeats. Exceptions in the script are raised.
    """

    def __init__(self, name, results=None, available=True):
        super().__init__({"api_key": "test-key" if available else ""})
        self.name = name
        self.results = list(results or [ProviderResult.failed("no script")])
        self.calls = []

    async def _request_text(self, prompt, count, model):
        raise AssertionError("FakeProvider never sends requests")

    async def generate(self, prompt, count):
        self.calls.append((prompt, count))
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, BaseException):
            raise result
        return result
