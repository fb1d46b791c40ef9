"""Registry of game types and their per-game behavior."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .models import GameType

MAX_LEVELS = 200
SCORE_PER_LEVEL = 10
MAX_HANGMAN_MISTAKES = 6

SUCCESS_DELAY = 2.0
SEQUENCE_SUCCESS_DELAY = 1.5
FAIL_DELAY = 2.0
SENTENCE_FAIL_DELAY = 2.5
TIMEOUT_DELAY = 1.0
MENU_DELAY = 1.0


class GameFamily(str, Enum):
    """Engine family shared by several game types."""

    CHOICE = "choice"
    LETTERS = "letters"
    SENTENCE = "sentence"
    GRAMMAR = "grammar"
    HANGMAN = "hangman"
    SEQUENCE = "sequence"


@dataclass(frozen=True)
class GameDefinition:
    """Static description of one game type."""

    game_type: GameType
    title: str
    family: GameFamily
    category: str = ""
    timed: bool = False
    speech_lang: str = "en-US"
    speaks: bool = True
    success_delay: float = SUCCESS_DELAY
    fail_delay: float = FAIL_DELAY


def _category_game(game_type: GameType, title: str, category: str) -> GameDefinition:
    return GameDefinition(game_type, title, GameFamily.CHOICE, category=category)


def _sequence_game(game_type: GameType, title: str, name: str) -> GameDefinition:
    return GameDefinition(
        game_type,
        title,
        GameFamily.SEQUENCE,
        category=name,
        speaks=False,
        success_delay=SEQUENCE_SUCCESS_DELAY,
    )


GAMES: dict[GameType, GameDefinition] = {
    definition.game_type: definition
    for definition in (
        GameDefinition(GameType.GUESS, "Word guess", GameFamily.LETTERS, category="pictures"),
        GameDefinition(
            GameType.TRANSLATE,
            "Fast translate",
            GameFamily.CHOICE,
            category="translate",
            timed=True,
            speech_lang="fa-IR",
        ),
        GameDefinition(
            GameType.SENTENCE,
            "Sentence builder",
            GameFamily.SENTENCE,
            category="sentences",
            fail_delay=SENTENCE_FAIL_DELAY,
        ),
        GameDefinition(GameType.GRAMMAR, "Grammar check", GameFamily.GRAMMAR, category="grammar"),
        GameDefinition(GameType.HANGMAN, "Hangman", GameFamily.HANGMAN, category="hangman"),
        GameDefinition(GameType.NUM_TO_WORD, "Number to word", GameFamily.CHOICE),
        GameDefinition(GameType.WORD_TO_NUM, "Word to number", GameFamily.CHOICE),
        GameDefinition(GameType.COLORS, "Colors", GameFamily.CHOICE, category="colors"),
        _category_game(GameType.ANIMAL, "Animals", "animals"),
        _category_game(GameType.JOBS, "Jobs", "jobs"),
        _sequence_game(GameType.DAYS, "Days of the week", "days"),
        _sequence_game(GameType.MONTHS, "Months of the year", "months"),
        _category_game(GameType.FAMILY, "Family", "family"),
        _category_game(GameType.PLACES, "Places", "places"),
        _category_game(GameType.OBJECTS, "Objects", "objects"),
        _category_game(GameType.CLOTHES, "Clothes", "clothes"),
        _category_game(GameType.ADJECTIVES, "Adjectives", "adjectives"),
    )
}


def get_game(game_type: GameType | str) -> GameDefinition:
    """Look up a game definition by enum member or identifier string."""
    return GAMES[GameType(game_type)]


def time_limit_for_level(level: int) -> int:
    """Countdown length for timed games; shrinks every five levels down to 3."""
    return max(3, 10 - level // 5)
