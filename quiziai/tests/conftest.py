"""
Test fixtures for QuiziAI tests.
"""

import json

import pytest

from quiziai.assembler import BatchAssembler
from quiziai.service import TriviaGenerator

from .helpers import FakeProvider, make_question, question_dict


@pytest.fixture
def sample_question():
    """Sample trivia question."""
    return make_question("What is the capital of France?", index=0)


@pytest.fixture
def sample_questions():
    """Three distinct questions."""
    return [
        make_question("What is the capital of France?", index=0),
        make_question("Which city hosts the Louvre?", index=1),
        make_question("Which river crosses Paris?", index=2),
    ]


@pytest.fixture
def single_json():
    """Raw model text for one valid question."""
    return json.dumps(question_dict())


@pytest.fixture
def batch_json():
    """Raw model text for a valid batch of two questions."""
    return json.dumps({
        "questions": [
            question_dict("Q1?", 0),
            question_dict("Q2?", 1),
        ]
    })


@pytest.fixture
def make_provider():
    """Factory for scripted providers."""
    return FakeProvider


@pytest.fixture
def make_generator():
    """Factory building a TriviaGenerator over scripted providers."""
    def _make(*providers, **kwargs):
        return TriviaGenerator(list(providers), **kwargs)
    return _make


@pytest.fixture
def make_assembler():
    """Factory building a BatchAssembler with no pacing delay."""
    def _make(generator, pacing_delay=0):
        return BatchAssembler(generator, pacing_delay=pacing_delay)
    return _make


@pytest.fixture
def test_config():
    """Configuration dictionary with fake credentials."""
    return {
        "use_mocks": False,
        "language": "Spanish",
        "provider_order": ["gemini", "groq", "huggingface"],
        "providers": {
            "gemini": {"api_key": "gemini-test-key"},
            "groq": {"api_key": "groq-test-key"},
            "huggingface": {},
        },
        "queue": {"low_watermark": 3, "target_size": 6},
        "batch": {"pacing_delay": 0},
        "content": {"primary_language": "es", "fallback_language": "en", "timeout": 5.0},
    }
