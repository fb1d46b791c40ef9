"""Input-validation state machines, one per game family."""

from __future__ import annotations

import string
from collections.abc import Callable
from enum import Enum
from typing import Any

from .games import GAMES, MAX_HANGMAN_MISTAKES, GameFamily
from .models import (
    Challenge,
    ChoiceChallenge,
    GrammarChallenge,
    HangmanChallenge,
    LetterChallenge,
    Outcome,
    SentenceChallenge,
    SequenceChallenge,
)

OutcomeFn = Callable[[Outcome], None]
MissFn = Callable[[], None]


class EngineState(str, Enum):
    ACTIVE = "active"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class InputResult(str, Enum):
    """What one input event did to the engine."""

    IGNORED = "ignored"
    ACCEPTED = "accepted"
    MISS = "miss"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class VariantEngine:
    """Base state machine: ACTIVE until a single terminal Outcome is reported."""

    challenge: Challenge

    def __init__(self, challenge: Challenge, on_outcome: OutcomeFn | None = None, on_miss: MissFn | None = None):
        self.challenge = challenge
        self.state = EngineState.ACTIVE
        self.outcome: Outcome | None = None
        self._on_outcome = on_outcome
        self._on_miss = on_miss

    @property
    def active(self) -> bool:
        return self.state is EngineState.ACTIVE

    def expire(self) -> InputResult:
        """Fail the challenge because its countdown ran out; no answer text."""
        if not self.active:
            return InputResult.IGNORED
        return self._finish(False, "", timed_out=True)

    def snapshot(self) -> dict[str, Any]:
        """Render-ready view of the engine state."""
        return {"state": self.state.value}

    def _miss(self) -> InputResult:
        if self._on_miss is not None:
            self._on_miss()
        return InputResult.MISS

    def _finish(self, succeeded: bool, text: str, timed_out: bool = False) -> InputResult:
        self.state = EngineState.SUCCEEDED if succeeded else EngineState.FAILED
        self.outcome = Outcome(
            game_type=self.challenge.game_type,
            level=self.challenge.level,
            succeeded=succeeded,
            answer_text=text,
            timed_out=timed_out,
        )
        if self._on_outcome is not None:
            self._on_outcome(self.outcome)
        return InputResult.SUCCEEDED if succeeded else InputResult.FAILED


class ChoiceEngine(VariantEngine):
    """One selection decides the challenge."""

    challenge: ChoiceChallenge

    def choose(self, option: str) -> InputResult:
        """Pick one of the four options; any pick ends the challenge."""
        if not self.active or option not in self.challenge.options:
            return InputResult.IGNORED
        return self._finish(option == self.challenge.answer, self.challenge.answer)

    def choose_index(self, index: int) -> InputResult:
        if not 0 <= index < len(self.challenge.options):
            return InputResult.IGNORED
        return self.choose(self.challenge.options[index])

    def snapshot(self) -> dict[str, Any]:
        return {
            **super().snapshot(),
            "prompt": self.challenge.prompt,
            "options": list(self.challenge.options),
        }


class LetterEngine(VariantEngine):
    """Fill answer slots from letter tiles, with undo."""

    challenge: LetterChallenge

    def __init__(self, challenge: LetterChallenge, on_outcome: OutcomeFn | None = None, on_miss: MissFn | None = None):
        super().__init__(challenge, on_outcome, on_miss)
        # slot_tiles[i] is the tile index that filled answer slot i.
        self.slot_tiles: list[int] = []

    @property
    def guess(self) -> str:
        return "".join(self.challenge.tiles[tile] for tile in self.slot_tiles)

    def tile_available(self, tile: int) -> bool:
        return 0 <= tile < len(self.challenge.tiles) and tile not in self.slot_tiles

    def tap(self, tile: int) -> InputResult:
        """Fill the next answer slot from tile `tile`."""
        if not self.active or not self.tile_available(tile):
            return InputResult.IGNORED
        if len(self.slot_tiles) >= len(self.challenge.answer):
            return InputResult.IGNORED
        self.slot_tiles.append(tile)
        if len(self.slot_tiles) < len(self.challenge.answer):
            return InputResult.ACCEPTED
        return self._finish(self.guess == self.challenge.answer, self.challenge.answer)

    def tap_letter(self, letter: str) -> InputResult:
        """Tap the first free tile showing `letter`."""
        for tile, value in enumerate(self.challenge.tiles):
            if value == letter.upper() and self.tile_available(tile):
                return self.tap(tile)
        return InputResult.IGNORED

    def undo(self) -> InputResult:
        """Clear the last filled slot and free its tile."""
        if not self.active or not self.slot_tiles:
            return InputResult.IGNORED
        self.slot_tiles.pop()
        return InputResult.ACCEPTED

    def snapshot(self) -> dict[str, Any]:
        return {
            **super().snapshot(),
            "slots": [self.challenge.tiles[tile] for tile in self.slot_tiles]
            + [""] * (len(self.challenge.answer) - len(self.slot_tiles)),
            "tiles": [
                {"letter": letter, "available": self.tile_available(index)}
                for index, letter in enumerate(self.challenge.tiles)
            ],
        }


class SentenceEngine(VariantEngine):
    """Move word chips between the pool and the sentence being built."""

    challenge: SentenceChallenge

    def __init__(
        self, challenge: SentenceChallenge, on_outcome: OutcomeFn | None = None, on_miss: MissFn | None = None
    ):
        super().__init__(challenge, on_outcome, on_miss)
        self.placed: list[int] = []

    @property
    def built(self) -> list[str]:
        return [self.challenge.pool[chip] for chip in self.placed]

    def move(self, chip: int) -> InputResult:
        """Toggle chip `chip` (index into the shuffled pool) between pool and sentence."""
        if not self.active or not 0 <= chip < len(self.challenge.pool):
            return InputResult.IGNORED
        if chip in self.placed:
            self.placed.remove(chip)
            return InputResult.ACCEPTED
        self.placed.append(chip)
        if len(self.placed) < len(self.challenge.tokens):
            return InputResult.ACCEPTED
        return self._check()

    def _check(self) -> InputResult:
        built = self.built
        assert len(built) == len(self.challenge.tokens), "sentence length mismatch"
        correct = all(word == expected for word, expected in zip(built, self.challenge.tokens))
        return self._finish(correct, self.challenge.answer_text)

    def snapshot(self) -> dict[str, Any]:
        return {
            **super().snapshot(),
            "built": self.built,
            "pool": [
                {"chip": chip, "word": word}
                for chip, word in enumerate(self.challenge.pool)
                if chip not in self.placed
            ],
        }


class GrammarEngine(VariantEngine):
    """Step 1: find the wrong token. Step 2: pick its correction."""

    challenge: GrammarChallenge

    def __init__(self, challenge: GrammarChallenge, on_outcome: OutcomeFn | None = None, on_miss: MissFn | None = None):
        super().__init__(challenge, on_outcome, on_miss)
        self.step = 1
        self.misses = 0

    def select_token(self, index: int) -> InputResult:
        """Mark the token believed to be wrong."""
        if not self.active or self.step != 1 or not 0 <= index < len(self.challenge.tokens):
            return InputResult.IGNORED
        if index != self.challenge.wrong_index:
            # No limit on wrong picks here; only step 2 can fail the challenge.
            self.misses += 1
            return self._miss()
        self.step = 2
        return InputResult.ACCEPTED

    def choose(self, option: str) -> InputResult:
        if not self.active or self.step != 2 or option not in self.challenge.options:
            return InputResult.IGNORED
        if option == self.challenge.correct_token:
            return self._finish(True, self.challenge.corrected_sentence)
        return self._finish(False, self.challenge.correct_token)

    def choose_index(self, index: int) -> InputResult:
        if not 0 <= index < len(self.challenge.options):
            return InputResult.IGNORED
        return self.choose(self.challenge.options[index])

    def snapshot(self) -> dict[str, Any]:
        return {
            **super().snapshot(),
            "step": self.step,
            "misses": self.misses,
            "tokens": list(self.challenge.tokens),
            "marked": self.challenge.wrong_index if self.step == 2 else None,
            "options": list(self.challenge.options) if self.step == 2 else [],
        }


class HangmanEngine(VariantEngine):
    challenge: HangmanChallenge

    def __init__(self, challenge: HangmanChallenge, on_outcome: OutcomeFn | None = None, on_miss: MissFn | None = None):
        super().__init__(challenge, on_outcome, on_miss)
        self.guessed: set[str] = set()
        self.mistakes = 0

    @property
    def masked(self) -> str:
        return " ".join(letter if letter in self.guessed else "_" for letter in self.challenge.word)

    def can_guess(self, letter: str) -> bool:
        letter = letter.upper()
        return len(letter) == 1 and letter in string.ascii_uppercase and letter not in self.guessed

    def guess(self, letter: str) -> InputResult:
        """Reveal `letter` where it occurs, or count a mistake."""
        if not self.active or not self.can_guess(letter):
            return InputResult.IGNORED
        letter = letter.upper()
        self.guessed.add(letter)
        hit = letter in self.challenge.word
        if not hit:
            self.mistakes += 1
        if set(self.challenge.word) <= self.guessed:
            return self._finish(True, self.challenge.word)
        if self.mistakes >= MAX_HANGMAN_MISTAKES:
            return self._finish(False, self.challenge.word)
        return InputResult.ACCEPTED if hit else self._miss()

    def snapshot(self) -> dict[str, Any]:
        return {
            **super().snapshot(),
            "masked": self.masked,
            "hint": self.challenge.hint,
            "mistakes": self.mistakes,
            "guessed": sorted(self.guessed),
        }


class SequenceEngine(VariantEngine):
    """Place pool values into the blanked positions of an ordered list."""

    challenge: SequenceChallenge

    def __init__(
        self, challenge: SequenceChallenge, on_outcome: OutcomeFn | None = None, on_miss: MissFn | None = None
    ):
        super().__init__(challenge, on_outcome, on_miss)
        self.slots: dict[int, str | None] = {position: None for position in challenge.blanks}
        self.pool: list[str] = list(challenge.pool)

    def place(self, pool_index: int) -> InputResult:
        """Put pool value `pool_index` into the first empty slot."""
        if not self.active or not 0 <= pool_index < len(self.pool):
            return InputResult.IGNORED
        empty = next((position for position in self.challenge.blanks if self.slots[position] is None), None)
        if empty is None:
            return InputResult.IGNORED
        self.slots[empty] = self.pool.pop(pool_index)
        if any(value is None for value in self.slots.values()):
            return InputResult.ACCEPTED
        return self._check()

    def remove(self, position: int) -> InputResult:
        """Clear a filled slot and return its value to the pool."""
        if not self.active or self.slots.get(position) is None:
            return InputResult.IGNORED
        value = self.slots[position]
        assert value is not None
        self.slots[position] = None
        self.pool.append(value)
        return InputResult.ACCEPTED

    def _check(self) -> InputResult:
        assert not self.pool and len(self.slots) == len(self.challenge.blanks), "sequence slots out of sync"
        sequence = self.challenge.sequence
        correct = all(value == sequence[position] for position, value in self.slots.items())
        return self._finish(correct, self.challenge.answer_text)

    def snapshot(self) -> dict[str, Any]:
        return {
            **super().snapshot(),
            "cells": [
                self.slots[position] or "" if position in self.slots else value
                for position, value in enumerate(self.challenge.sequence)
            ],
            "blanks": list(self.challenge.blanks),
            "pool": list(self.pool),
        }


ENGINES: dict[GameFamily, type[VariantEngine]] = {
    GameFamily.CHOICE: ChoiceEngine,
    GameFamily.LETTERS: LetterEngine,
    GameFamily.SENTENCE: SentenceEngine,
    GameFamily.GRAMMAR: GrammarEngine,
    GameFamily.HANGMAN: HangmanEngine,
    GameFamily.SEQUENCE: SequenceEngine,
}


def create_engine(
    challenge: Challenge, on_outcome: OutcomeFn | None = None, on_miss: MissFn | None = None
) -> VariantEngine:
    """Build the engine matching the challenge's game family."""
    family = GAMES[challenge.game_type].family
    return ENGINES[family](challenge, on_outcome, on_miss)
