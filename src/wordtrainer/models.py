"""Core domain models for corpus records, challenges, and outcomes."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class VocabularyItem:
    """One word pair: English source text and its translation."""

    source_text: str
    target_text: str
    image: str = ""


@dataclass(frozen=True)
class ColorItem:
    """Color name with the swatch shown as prompt."""

    name: str
    hex: str
    target_text: str


@dataclass(frozen=True)
class PictureItem:
    """Picture prompt for the letter-assembly game."""

    image: str
    answer: str


@dataclass(frozen=True)
class SentenceItem:
    """Sentence split into ordered tokens, with its translation."""

    tokens: tuple[str, ...]
    translation: str


@dataclass(frozen=True)
class GrammarItem:
    """Sentence with exactly one wrong token and its correction options."""

    tokens: tuple[str, ...]
    wrong_index: int
    correct_token: str
    options: tuple[str, ...]


@dataclass(frozen=True)
class HangmanItem:
    """Hangman target word (A-Z only) and hint."""

    word: str
    hint: str


@dataclass(frozen=True)
class Corpus:
    """Read-only vocabulary corpus grouped by category."""

    vocabulary: dict[str, tuple[VocabularyItem, ...]]
    colors: tuple[ColorItem, ...]
    pictures: tuple[PictureItem, ...]
    sentences: tuple[SentenceItem, ...]
    grammar: tuple[GrammarItem, ...]
    hangman: tuple[HangmanItem, ...]
    sequences: dict[str, tuple[str, ...]]

    def words(self, category: str) -> tuple[VocabularyItem, ...]:
        """Return word pairs for a vocabulary category."""
        try:
            return self.vocabulary[category]
        except KeyError:
            raise KeyError(f"Unknown vocabulary category: {category}") from None

    def sequence(self, name: str) -> tuple[str, ...]:
        """Return one fixed ordered list (days, months)."""
        try:
            return self.sequences[name]
        except KeyError:
            raise KeyError(f"Unknown sequence: {name}") from None


class GameType(str, Enum):
    """Game type identifiers, also used as persistence keys."""

    GUESS = "guess"
    TRANSLATE = "translate"
    SENTENCE = "sentence"
    GRAMMAR = "grammar"
    HANGMAN = "hangman"
    NUM_TO_WORD = "numToWord"
    WORD_TO_NUM = "wordToNum"
    COLORS = "colors"
    ANIMAL = "animal"
    JOBS = "jobs"
    DAYS = "days"
    MONTHS = "months"
    FAMILY = "family"
    PLACES = "places"
    OBJECTS = "objects"
    CLOTHES = "clothes"
    ADJECTIVES = "adjectives"


@dataclass(frozen=True)
class Challenge(ABC):
    """One generated level: prompt and correct answer."""

    game_type: GameType
    level: int
    item_index: int | None

    @property
    @abstractmethod
    def answer_text(self) -> str:
        """Literal correct-answer text used for feedback and speech."""


@dataclass(frozen=True)
class ChoiceChallenge(Challenge):
    """Single-shot pick among four options."""

    prompt: str
    answer: str
    distractors: tuple[str, ...]
    options: tuple[str, ...]
    swatch: str = ""
    time_limit: int | None = None

    @property
    def answer_text(self) -> str:
        return self.answer


@dataclass(frozen=True)
class LetterChallenge(Challenge):
    """Assemble a word from a shuffled pool of letter tiles."""

    image: str
    answer: str
    tiles: tuple[str, ...]

    @property
    def answer_text(self) -> str:
        return self.answer


@dataclass(frozen=True)
class SentenceChallenge(Challenge):
    """Rebuild a sentence from its shuffled tokens."""

    translation: str
    tokens: tuple[str, ...]
    pool: tuple[str, ...]

    @property
    def answer_text(self) -> str:
        return " ".join(self.tokens)


@dataclass(frozen=True)
class GrammarChallenge(Challenge):
    """Find the wrong token, then pick its correction."""

    tokens: tuple[str, ...]
    wrong_index: int
    correct_token: str
    options: tuple[str, ...]

    @property
    def answer_text(self) -> str:
        return self.correct_token

    @property
    def corrected_sentence(self) -> str:
        fixed = list(self.tokens)
        fixed[self.wrong_index] = self.correct_token
        return " ".join(fixed)


@dataclass(frozen=True)
class HangmanChallenge(Challenge):
    """Guess a word letter by letter."""

    word: str
    hint: str

    @property
    def answer_text(self) -> str:
        return self.word


@dataclass(frozen=True)
class SequenceChallenge(Challenge):
    """Fill blanked positions of an ordered list."""

    sequence: tuple[str, ...]
    blanks: tuple[int, ...]
    pool: tuple[str, ...]

    @property
    def answer_text(self) -> str:
        return " ".join(self.sequence[index] for index in self.blanks)


@dataclass(frozen=True)
class Outcome:
    """Terminal result of one challenge."""

    game_type: GameType
    level: int
    succeeded: bool
    answer_text: str = ""
    timed_out: bool = False

    @property
    def symbol(self) -> str:
        return "✅" if self.succeeded else "❌"
