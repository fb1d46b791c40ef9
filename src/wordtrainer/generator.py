"""Challenge generation for every game type."""

from __future__ import annotations

import logging
import random
import string
from collections.abc import Callable, Sequence

from .content_loader import CorpusError
from .games import GAMES, GameFamily, get_game, time_limit_for_level
from .models import (
    Challenge,
    ChoiceChallenge,
    Corpus,
    GameType,
    GrammarChallenge,
    HangmanChallenge,
    LetterChallenge,
    SentenceChallenge,
    SequenceChallenge,
)
from .numwords import number_to_words

DISTRACTOR_COUNT = 3
MAX_DRAW_ATTEMPTS = 64
BASE_NOISE_LETTERS = 3
MAX_EXTRA_NOISE_LETTERS = 6
SEQUENCE_BLANKS = 4
NUMBER_RANGE_START = 20
NUMBER_RANGE_CAP = 300
NUMBER_DISTRACTOR_SPREAD = 10

logger = logging.getLogger(__name__)


def draw_distractors(
    answer: str,
    draw: Callable[[], str],
    candidates: Sequence[str],
    rng: random.Random,
    count: int = DISTRACTOR_COUNT,
) -> tuple[str, ...]:
    """Draw `count` distinct values different from `answer`.

    Rejection-samples `draw()` up to MAX_DRAW_ATTEMPTS times, then sweeps the
    shuffled `candidates` to fill whatever is still missing.
    """
    chosen: list[str] = []
    for _ in range(MAX_DRAW_ATTEMPTS):
        if len(chosen) == count:
            return tuple(chosen)
        value = draw()
        if value != answer and value not in chosen:
            chosen.append(value)

    if len(chosen) < count:
        logger.debug("Distractor draw for %r fell back to a sweep after %d attempts", answer, MAX_DRAW_ATTEMPTS)
        remaining = [value for value in dict.fromkeys(candidates) if value != answer and value not in chosen]
        rng.shuffle(remaining)
        chosen.extend(remaining[: count - len(chosen)])
    if len(chosen) < count:
        raise CorpusError(f"Not enough distinct distractors for '{answer}'.")
    return tuple(chosen)


def number_range_for_level(level: int) -> int:
    """Size of the value range for number games; widens by one per level."""
    return min(NUMBER_RANGE_CAP, NUMBER_RANGE_START + level)


def noise_letter_count(level: int) -> int:
    """Extra random letters mixed into the guess pool."""
    return BASE_NOISE_LETTERS + min(MAX_EXTRA_NOISE_LETTERS, level // 5)


class ChallengeGenerator:
    """Builds the challenge for a (game type, level) pair."""

    def __init__(self, corpus: Corpus, rng: random.Random | None = None) -> None:
        self.corpus = corpus
        self.rng = rng or random.Random()
        self._builders: dict[GameFamily, Callable[[GameType, int], Challenge]] = {
            GameFamily.CHOICE: self._choice,
            GameFamily.LETTERS: self._letters,
            GameFamily.SENTENCE: self._sentence,
            GameFamily.GRAMMAR: self._grammar,
            GameFamily.HANGMAN: self._hangman,
            GameFamily.SEQUENCE: self._sequence,
        }

    def generate(self, game_type: GameType | str, level: int) -> Challenge:
        """Return a fresh challenge; corpus item is `level mod len(corpus)`."""
        if level < 0:
            raise ValueError(f"Level must be non-negative, got {level}.")
        definition = get_game(game_type)
        return self._builders[definition.family](definition.game_type, level)

    def _options(self, answer: str, distractors: tuple[str, ...]) -> tuple[str, ...]:
        options = [answer, *distractors]
        self.rng.shuffle(options)
        return tuple(options)

    def _choice_from(
        self,
        game_type: GameType,
        level: int,
        prompts: Sequence[str],
        answers: Sequence[str],
        swatch: str = "",
        time_limit: int | None = None,
    ) -> ChoiceChallenge:
        index = level % len(answers)
        answer = answers[index]
        distractors = draw_distractors(answer, lambda: self.rng.choice(answers), answers, self.rng)
        return ChoiceChallenge(
            game_type=game_type,
            level=level,
            item_index=index,
            prompt=prompts[index],
            answer=answer,
            distractors=distractors,
            options=self._options(answer, distractors),
            swatch=swatch,
            time_limit=time_limit,
        )

    def _choice(self, game_type: GameType, level: int) -> ChoiceChallenge:
        if game_type in (GameType.NUM_TO_WORD, GameType.WORD_TO_NUM):
            return self._number(game_type, level)
        if game_type is GameType.COLORS:
            colors = self.corpus.colors
            return self._choice_from(
                game_type,
                level,
                [item.target_text for item in colors],
                [item.name for item in colors],
                swatch=colors[level % len(colors)].hex,
            )
        definition = GAMES[game_type]
        items = self.corpus.words(definition.category)
        time_limit = time_limit_for_level(level) if definition.timed else None
        if game_type is GameType.TRANSLATE:
            return self._choice_from(
                game_type,
                level,
                [item.source_text for item in items],
                [item.target_text for item in items],
                time_limit=time_limit,
            )
        return self._choice_from(
            game_type,
            level,
            [item.target_text for item in items],
            [item.source_text for item in items],
            time_limit=time_limit,
        )

    def _number(self, game_type: GameType, level: int) -> ChoiceChallenge:
        size = number_range_for_level(level)
        value = int(self.rng.random() * size)
        spread = size + NUMBER_DISTRACTOR_SPREAD

        def render(number: int) -> str:
            return number_to_words(number) if game_type is GameType.NUM_TO_WORD else str(number)

        answer = render(value)
        distractors = draw_distractors(
            answer,
            lambda: render(self.rng.randrange(spread)),
            [render(number) for number in range(spread)],
            self.rng,
        )
        prompt = str(value) if game_type is GameType.NUM_TO_WORD else number_to_words(value)
        return ChoiceChallenge(
            game_type=game_type,
            level=level,
            item_index=None,
            prompt=prompt,
            answer=answer,
            distractors=distractors,
            options=self._options(answer, distractors),
        )

    def _letters(self, game_type: GameType, level: int) -> LetterChallenge:
        pictures = self.corpus.pictures
        index = level % len(pictures)
        item = pictures[index]
        noise = [self.rng.choice(string.ascii_uppercase) for _ in range(noise_letter_count(level))]
        tiles = [*item.answer, *noise]
        self.rng.shuffle(tiles)
        return LetterChallenge(
            game_type=game_type,
            level=level,
            item_index=index,
            image=item.image,
            answer=item.answer,
            tiles=tuple(tiles),
        )

    def _sentence(self, game_type: GameType, level: int) -> SentenceChallenge:
        sentences = self.corpus.sentences
        index = level % len(sentences)
        item = sentences[index]
        pool = list(item.tokens)
        self.rng.shuffle(pool)
        return SentenceChallenge(
            game_type=game_type,
            level=level,
            item_index=index,
            translation=item.translation,
            tokens=item.tokens,
            pool=tuple(pool),
        )

    def _grammar(self, game_type: GameType, level: int) -> GrammarChallenge:
        items = self.corpus.grammar
        index = level % len(items)
        item = items[index]
        options = list(item.options)
        self.rng.shuffle(options)
        return GrammarChallenge(
            game_type=game_type,
            level=level,
            item_index=index,
            tokens=item.tokens,
            wrong_index=item.wrong_index,
            correct_token=item.correct_token,
            options=tuple(options),
        )

    def _hangman(self, game_type: GameType, level: int) -> HangmanChallenge:
        items = self.corpus.hangman
        index = level % len(items)
        item = items[index]
        return HangmanChallenge(game_type=game_type, level=level, item_index=index, word=item.word, hint=item.hint)

    def _sequence(self, game_type: GameType, level: int) -> SequenceChallenge:
        sequence = self.corpus.sequence(GAMES[game_type].category)
        blanks = sorted(self.rng.sample(range(len(sequence)), SEQUENCE_BLANKS))
        pool = [sequence[index] for index in blanks]
        self.rng.shuffle(pool)
        return SequenceChallenge(
            game_type=game_type,
            level=level,
            item_index=None,
            sequence=sequence,
            blanks=tuple(blanks),
            pool=tuple(pool),
        )
