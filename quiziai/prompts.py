"""
Prompt builder for trivia generation.

This module turns a GenerationRequest into the instruction text shared by
every provider. Providers only decide how to wrap it (single text part,
system/user messages, ...); the wording itself never depends on the backend.
"""

import json
from dataclasses import dataclass

from .question import GenerationRequest


DEFAULT_LANGUAGE = "Spanish"

# Separates the instructions from the source content in the full prompt text
CONTENT_MARKER = "Content to build the trivia from:"

# Number of recent answer positions quoted back to the model
RECENT_ANSWER_WINDOW = 3

_EXAMPLE_QUESTION = {
    "question": "question text",
    "options": ["option 1", "option 2", "option 3", "option 4"],
    "correctAnswerIndex": 0,
    "funFact": "short fun fact",
}


@dataclass(frozen=True)
class Prompt:
    """A built prompt, reused unchanged across the provider fallback chain.

    Attributes:
        instructions: Rules and output format, without the source content
        full_text: Instructions followed by the content marker and the content
        content: The source content alone, for adapters that send it separately
    """

    instructions: str
    full_text: str
    content: str


def _json_format(count: int) -> str:
    if count > 1:
        return json.dumps({"questions": [_EXAMPLE_QUESTION]}, indent=2, ensure_ascii=False)
    return json.dumps(_EXAMPLE_QUESTION, indent=2, ensure_ascii=False)


def build_instructions(request: GenerationRequest, language: str = DEFAULT_LANGUAGE) -> str:
    """Build the instruction part of the prompt.

    Args:
        request: Generation parameters and history
        language: Language the questions must be written in

    Returns:
        Instruction text (no source content)
    """
    count = request.count
    batch = request.is_batch
    target = f"{count} questions" if batch else "one question"

    rules = [
        (
            f"Generate exactly {count} different questions."
            if batch
            else "The question must be clear and direct."
        ),
        "The 4 options must all be plausible, but only one may be correct.",
        "correctAnswerIndex must be 0, 1, 2 or 3 (the index of the correct option).",
        "The funFact must be short (at most 100 characters) and related to the correct answer.",
        f"All content must be written in {language}.",
        "Do NOT include markdown or code, only the raw JSON.",
        "Vary the position of the correct answer (correctAnswerIndex); "
        "do not always use the same position.",
    ]

    sections = [
        f"You are a trivia question generator. Your task is to create {target} "
        "that are educational and entertaining, based on the provided content.",
        "IMPORTANT: Respond ONLY with a valid JSON object, with no additional text, "
        "no markdown and no explanations.",
        f"The JSON format must be exactly:\n{_json_format(count)}",
        "Rules:\n" + "\n".join(f"- {rule}" for rule in rules),
    ]

    if request.previous_questions:
        asked = "\n".join(
            f"{i}. {question}"
            for i, question in enumerate(request.previous_questions, 1)
        )
        sections.append(
            "IMPORTANT: The following questions have already been asked about this topic. "
            f"Each new question must be COMPLETELY DIFFERENT and not similar to any of them:\n"
            f"{asked}\n\n"
            "Cover a different aspect of the topic and do not repeat information "
            "that was already asked."
        )

    if request.previous_answer_indices:
        recent = request.previous_answer_indices[-RECENT_ANSWER_WINDOW:]
        sections.append(
            "IMPORTANT: The most recent correct answers were at positions: "
            f"{', '.join(str(i) for i in recent)}. Use a DIFFERENT position "
            "for the correct answer (0, 1, 2 or 3) to keep variety."
        )

    return "\n\n".join(sections)


def build_prompt(request: GenerationRequest, language: str = DEFAULT_LANGUAGE) -> Prompt:
    """Build the shared prompt for a generation request.

    Pure function: the same request always yields the same prompt. The
    source content goes last so long content never pushes the rules out
    of a truncated context window.

    Args:
        request: Generation parameters and history
        language: Language the questions must be written in

    Returns:
        Prompt with instructions and full text
    """
    instructions = build_instructions(request, language)
    full_text = f"{instructions}\n\n{CONTENT_MARKER}\n\n{request.content}"
    return Prompt(instructions=instructions, full_text=full_text, content=request.content)
