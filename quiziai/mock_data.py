"""
Canned trivia questions for offline and test mode.

Used by TriviaGenerator when use_mocks is enabled so the full game loop
can run without any API key or network access.
"""

from typing import Union

from .question import TriviaQuestion


def _q(question: str, options: list[str], index: int, fun_fact: str) -> TriviaQuestion:
    return TriviaQuestion(
        question=question,
        options=tuple(options),
        correct_answer_index=index,
        fun_fact=fun_fact,
    )


MOCK_TRIVIA_BATCH: tuple[TriviaQuestion, ...] = (
    _q(
        "¿En qué año comenzó la Revolución Francesa?",
        ["1789", "1776", "1812", "1492"],
        0,
        "La Revolución Francesa marcó el fin del absolutismo y el inicio de la Edad Contemporánea.",
    ),
    _q(
        "¿Cuál es el planeta más grande del Sistema Solar?",
        ["Marte", "Saturno", "Júpiter", "Neptuno"],
        2,
        "Júpiter es tan grande que todos los demás planetas podrían caber dentro de él.",
    ),
    _q(
        "¿Quién dirigió la película 'El Padrino'?",
        ["Steven Spielberg", "Francis Ford Coppola", "Martin Scorsese", "Quentin Tarantino"],
        1,
        "Marlon Brando usó prótesis dentales para darle a Vito Corleone su característica mandíbula.",
    ),
    _q(
        "¿Cuál es la capital de Australia?",
        ["Sídney", "Melbourne", "Canberra", "Brisbane"],
        2,
        "Canberra fue diseñada específicamente para ser la capital de Australia en 1913.",
    ),
    _q(
        "¿Qué elemento químico tiene el símbolo 'Au'?",
        ["Plata", "Oro", "Aluminio", "Cobre"],
        1,
        "El símbolo 'Au' proviene del latín 'aurum'.",
    ),
    _q(
        "¿En qué año cayó el Muro de Berlín?",
        ["1987", "1989", "1991", "1985"],
        1,
        "El Muro de Berlín cayó el 9 de noviembre de 1989.",
    ),
    _q(
        "¿Quién escribió 'Cien años de soledad'?",
        ["Mario Vargas Llosa", "Gabriel García Márquez", "Julio Cortázar", "Isabel Allende"],
        1,
        "García Márquez ganó el Premio Nobel de Literatura en 1982.",
    ),
    _q(
        "¿Cuál es el océano más grande del mundo?",
        ["Atlántico", "Índico", "Pacífico", "Ártico"],
        2,
        "El Océano Pacífico cubre más de un tercio de la superficie de la Tierra.",
    ),
    _q(
        "¿Qué pintor español es conocido por su 'Período Azul'?",
        ["Salvador Dalí", "Pablo Picasso", "Joan Miró", "Diego Velázquez"],
        1,
        "Picasso pintó su Período Azul entre 1901 y 1904.",
    ),
    _q(
        "¿Cuál es la velocidad de la luz en el vacío?",
        ["300,000 km/s", "150,000 km/s", "450,000 km/s", "200,000 km/s"],
        0,
        "La velocidad de la luz es de unos 299,792,458 metros por segundo.",
    ),
)


def mock_questions(count: int = 1) -> Union[TriviaQuestion, list[TriviaQuestion]]:
    """Return canned questions.

    Args:
        count: Number of questions wanted

    Returns:
        The first canned question when count == 1, otherwise a new list of
        at most count questions
    """
    if count <= 1:
        return MOCK_TRIVIA_BATCH[0]
    return list(MOCK_TRIVIA_BATCH[:count])
