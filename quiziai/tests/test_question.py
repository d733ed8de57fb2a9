"""
Tests for trivia question models.
"""

import pytest

from quiziai.question import (
    GenerationRequest,
    TriviaQuestion,
    normalize_question_text,
)

from .helpers import question_dict


class TestNormalizeQuestionText:
    """Test duplicate-detection normalization."""

    def test_case_and_whitespace_insensitive(self):
        assert normalize_question_text("  What is  X?\n") == normalize_question_text("what is x?")

    def test_distinct_text_differs(self):
        assert normalize_question_text("Q1?") != normalize_question_text("Q2?")


class TestTriviaQuestion:
    """Test TriviaQuestion invariants."""

    def test_creation(self, sample_question):
        """Test basic question creation."""
        assert sample_question.question == "What is the capital of France?"
        assert sample_question.options == ("Paris", "London", "Berlin", "Madrid")
        assert sample_question.correct_answer_index == 0
        assert sample_question.correct_answer == "Paris"
        assert sample_question.fun_fact

    def test_list_options_become_tuple(self):
        q = TriviaQuestion("Q?", ["a", "b", "c", "d"], 3, "fact")
        assert q.options == ("a", "b", "c", "d")
        assert q.correct_answer == "d"

    @pytest.mark.parametrize("options", [
        ["a", "b", "c"],
        ["a", "b", "c", "d", "e"],
        ["a", "b", "", "d"],
        ["a", "b", "c", "A"],
        "abcd",
    ])
    def test_invalid_options_rejected(self, options):
        with pytest.raises(ValueError):
            TriviaQuestion("Q?", options, 0, "fact")

    @pytest.mark.parametrize("index", [-1, 4, True, "1", 1.5, None])
    def test_invalid_index_rejected(self, index):
        with pytest.raises(ValueError):
            TriviaQuestion("Q?", ["a", "b", "c", "d"], index, "fact")

    def test_blank_question_rejected(self):
        with pytest.raises(ValueError):
            TriviaQuestion("   ", ["a", "b", "c", "d"], 0, "fact")

    def test_blank_fun_fact_rejected(self):
        with pytest.raises(ValueError):
            TriviaQuestion("Q?", ["a", "b", "c", "d"], 0, "")

    def test_is_correct(self, sample_question):
        assert sample_question.is_correct(0)
        assert not sample_question.is_correct(1)

    def test_from_dict_and_to_dict(self):
        data = question_dict("Q?", 2)
        q = TriviaQuestion.from_dict(data)
        assert q.correct_answer_index == 2
        assert q.to_dict() == data

    def test_from_dict_accepts_integral_float(self):
        data = question_dict("Q?")
        data["correctAnswerIndex"] = 1.0
        assert TriviaQuestion.from_dict(data).correct_answer_index == 1

    @pytest.mark.parametrize("missing", ["question", "options", "correctAnswerIndex", "funFact"])
    def test_from_dict_missing_field(self, missing):
        data = question_dict("Q?")
        del data[missing]
        with pytest.raises(ValueError):
            TriviaQuestion.from_dict(data)

    def test_from_dict_non_object(self):
        with pytest.raises(ValueError):
            TriviaQuestion.from_dict(["not", "an", "object"])

    def test_frozen(self, sample_question):
        with pytest.raises(AttributeError):
            sample_question.question = "changed"


class TestGenerationRequest:
    """Test GenerationRequest."""

    def test_defaults(self):
        request = GenerationRequest(content="text")
        assert request.count == 1
        assert request.previous_questions == ()
        assert not request.is_batch

    def test_history_is_snapshot(self):
        history = ["Q1?"]
        indices = [2]
        request = GenerationRequest(
            content="text", previous_questions=history, previous_answer_indices=indices, count=5
        )
        history.append("Q2?")
        indices.append(0)
        assert request.previous_questions == ("Q1?",)
        assert request.previous_answer_indices == (2,)
        assert request.is_batch

    def test_count_must_be_positive(self):
        with pytest.raises(ValueError):
            GenerationRequest(content="text", count=0)

    def test_history_lengths_must_match(self):
        with pytest.raises(ValueError):
            GenerationRequest(
                content="text",
                previous_questions=("a?", "b?"),
                previous_answer_indices=(1,),
            )
        with pytest.raises(ValueError):
            GenerationRequest(content="text", previous_answer_indices=(0,))
