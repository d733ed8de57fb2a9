"""
Terminal runner for QuiziAI.

    python -m quiziai [--config PATH] [--topic TOPIC] [--mock] [--log-level LEVEL]
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

from common.config import ConfigError, load_config, setup_logging

from .assembler import RATE_LIMIT, QuestionResult
from .question import TriviaQuestion
from .session import GameSession

logger = logging.getLogger(__name__)

LETTERS = "ABCD"

RATE_LIMIT_NOTICE = (
    "Los servicios de IA están saturados en este momento. "
    "Espera unos segundos y pulsa 'n' para reintentar."
)
HELP_TEXT = "[A-D] responder  [n] siguiente  [t] nuevo tema  [q] salir"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quiziai",
        description="AI-generated trivia questions from Wikipedia topics",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a JSON or YAML config file",
    )
    parser.add_argument(
        "--topic",
        default=None,
        help="Topic to start with (prompted if omitted)",
    )
    parser.add_argument(
        "--mock",
        action="store_true",
        help="Use canned questions instead of calling AI providers",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (overrides the config file)",
    )
    return parser


def format_question(question: TriviaQuestion) -> str:
    lines = ["", question.question]
    for letter, option in zip(LETTERS, question.options):
        lines.append(f"  {letter}) {option}")
    return "\n".join(lines)


def parse_answer(text: str) -> Optional[int]:
    """Map 'a'..'d' (any case) to an option index."""
    text = text.strip().upper()
    if len(text) == 1 and text in LETTERS:
        return LETTERS.index(text)
    return None


async def ask(prompt: str) -> str:
    # input() blocks, so run it off the loop and let refills progress
    try:
        return await asyncio.to_thread(input, prompt)
    except EOFError:
        return "q"


def show_result(result: QuestionResult) -> bool:
    """Print a question or an error. Returns True if a question is shown."""
    if result.error == RATE_LIMIT:
        print(f"\n{RATE_LIMIT_NOTICE}")
        return False
    if result.error:
        print(f"\n{result.error}")
        return False
    print(format_question(result.question))
    return True


async def play(session: GameSession, topic: Optional[str] = None) -> None:
    """Interactive game loop."""
    while not topic:
        topic = (await ask("Tema: ")).strip()
        if topic.lower() == "q":
            return

    has_question = show_result(await session.start(topic))

    while True:
        command = (await ask(f"\n{HELP_TEXT}\n> ")).strip().lower()

        if command == "q":
            break

        if command == "t":
            topic = (await ask("Tema: ")).strip()
            if topic:
                has_question = show_result(await session.start(topic))
            continue

        if command == "n":
            if session.topic is None:
                print("Elige un tema primero ('t').")
                continue
            has_question = show_result(await session.next_question())
            continue

        index = parse_answer(command)
        if index is None:
            print("Opción no válida.")
            continue
        if not has_question:
            print("No hay ninguna pregunta activa.")
            continue

        question = session.current_question
        if session.record_answer(index):
            print("¡Correcto!")
        else:
            print(f"Incorrecto. La respuesta era: {question.correct_answer}")
        print(f"Dato curioso: {question.fun_fact}")
        score = session.score
        print(f"Puntuación: {score.correct}/{score.total}")
        has_question = False

    score = session.score
    if score.total:
        print(f"\nPuntuación final: {score.correct}/{score.total}")
    session.reset()
    logger.info("Game loop finished")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point"""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    if args.mock:
        config["use_mocks"] = True
    if args.log_level:
        config.setdefault("logging", {})["level"] = args.log_level

    setup_logging(config)

    try:
        session = GameSession.create_from_config(config)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    try:
        asyncio.run(play(session, args.topic))
    except KeyboardInterrupt:
        logger.info("Interrupted")
    return 0


if __name__ == "__main__":
    sys.exit(main())
