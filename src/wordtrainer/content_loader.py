"""Load the vocabulary corpus from bundled JSON resources."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from importlib import resources
from pathlib import Path
from typing import Any

from .games import GAMES, GameFamily
from .models import ColorItem, Corpus, GrammarItem, HangmanItem, PictureItem, SentenceItem, VocabularyItem

CONTENT_PACKAGE = "wordtrainer.content.corpus"
MIN_CHOICE_ITEMS = 4
GRAMMAR_OPTION_COUNT = 4
REQUIRED_SEQUENCES = ("days", "months")
MIN_SEQUENCE_LENGTH = 4

logger = logging.getLogger(__name__)


class CorpusError(ValueError):
    """Raised when bundled content is malformed or too small to play."""


def _vocabulary_item(raw: dict[str, Any], image: str) -> VocabularyItem:
    source = str(raw.get("en", "")).strip()
    target = str(raw.get("fa", "")).strip()
    if not source or not target:
        raise CorpusError(f"Vocabulary item {raw!r} needs both 'en' and 'fa'.")
    return VocabularyItem(source_text=source, target_text=target, image=str(raw.get("image", image)))


def _color_item(raw: dict[str, Any]) -> ColorItem:
    return ColorItem(name=str(raw["name"]).strip().upper(), hex=str(raw["hex"]), target_text=str(raw.get("fa", "")))


def _picture_item(raw: dict[str, Any]) -> PictureItem:
    answer = str(raw["answer"]).strip().upper()
    if not answer.isalpha():
        raise CorpusError(f"Picture answer '{answer}' must contain letters only.")
    return PictureItem(image=str(raw.get("image", "")), answer=answer)


def _sentence_item(raw: dict[str, Any]) -> SentenceItem:
    tokens = tuple(str(word) for word in raw.get("words", []))
    if not tokens:
        raise CorpusError(f"Sentence item {raw!r} has no words.")
    return SentenceItem(tokens=tokens, translation=str(raw.get("fa", "")))


def _grammar_item(raw: dict[str, Any]) -> GrammarItem:
    tokens = tuple(str(word) for word in raw.get("words", []))
    wrong_index = int(raw["wrong_index"])
    correct = str(raw["correct"])
    options = tuple(str(option) for option in raw.get("options", []))
    if not 0 <= wrong_index < len(tokens):
        raise CorpusError(f"Grammar item {' '.join(tokens)!r} has wrong_index {wrong_index} out of range.")
    if len(set(options)) != GRAMMAR_OPTION_COUNT or correct not in options:
        raise CorpusError(
            f"Grammar item {' '.join(tokens)!r} needs {GRAMMAR_OPTION_COUNT} distinct options including '{correct}'."
        )
    return GrammarItem(tokens=tokens, wrong_index=wrong_index, correct_token=correct, options=options)


def _hangman_item(raw: dict[str, Any]) -> HangmanItem:
    word = str(raw["word"]).strip()
    if not word.isascii() or not word.isalpha() or not word.isupper():
        raise CorpusError(f"Hangman word '{word}' must be upper-case A-Z letters only.")
    return HangmanItem(word=word, hint=str(raw.get("hint", "")))


class _CorpusBuilder:
    """Accumulates category files into one corpus."""

    def __init__(self) -> None:
        self.vocabulary: dict[str, tuple[VocabularyItem, ...]] = {}
        self.colors: tuple[ColorItem, ...] = ()
        self.pictures: tuple[PictureItem, ...] = ()
        self.sentences: tuple[SentenceItem, ...] = ()
        self.grammar: tuple[GrammarItem, ...] = ()
        self.hangman: tuple[HangmanItem, ...] = ()
        self.sequences: dict[str, tuple[str, ...]] = {}
        self._seen: set[str] = set()

    def add(self, raw: dict[str, Any]) -> None:
        category = str(raw["category"])
        kind = str(raw.get("kind", "vocabulary"))
        if category in self._seen:
            raise CorpusError(f"Duplicate corpus category: {category}")
        self._seen.add(category)
        items = raw.get("items", [])

        if kind == "vocabulary":
            image = str(raw.get("image", ""))
            self.vocabulary[category] = tuple(_vocabulary_item(item, image) for item in items)
        elif kind == "colors":
            self.colors = tuple(_color_item(item) for item in items)
        elif kind == "pictures":
            self.pictures = tuple(_picture_item(item) for item in items)
        elif kind == "sentences":
            self.sentences = tuple(_sentence_item(item) for item in items)
        elif kind == "grammar":
            self.grammar = tuple(_grammar_item(item) for item in items)
        elif kind == "hangman":
            self.hangman = tuple(_hangman_item(item) for item in items)
        elif kind == "sequence":
            self.sequences[category] = tuple(str(item) for item in items)
        else:
            raise CorpusError(f"Category '{category}' has unknown kind '{kind}'.")

    def build(self) -> Corpus:
        corpus = Corpus(
            vocabulary=dict(self.vocabulary),
            colors=self.colors,
            pictures=self.pictures,
            sentences=self.sentences,
            grammar=self.grammar,
            hangman=self.hangman,
            sequences=dict(self.sequences),
        )
        _validate_corpus(corpus)
        return corpus


def _build(raw_documents: Iterable[dict[str, Any]]) -> Corpus:
    builder = _CorpusBuilder()
    for raw in raw_documents:
        builder.add(raw)
    corpus = builder.build()
    logger.debug(
        "Loaded corpus with %d vocabulary categories, %d sentences, %d grammar items",
        len(corpus.vocabulary),
        len(corpus.sentences),
        len(corpus.grammar),
    )
    return corpus


def load_corpus() -> Corpus:
    """Load the bundled corpus."""
    documents: list[dict[str, Any]] = []
    for entry in sorted(resources.files(CONTENT_PACKAGE).iterdir(), key=lambda item: item.name):
        if entry.name.endswith(".json"):
            documents.append(json.loads(entry.read_text(encoding="utf-8-sig")))
    return _build(documents)


def load_corpus_from_dir(path: Path) -> Corpus:
    """Load a corpus from a directory of category files for tests/tools."""
    documents = [json.loads(file_path.read_text(encoding="utf-8-sig")) for file_path in sorted(path.glob("*.json"))]
    return _build(documents)


def _validate_corpus(corpus: Corpus) -> None:
    """Fail fast when a category cannot produce a full challenge."""
    for category, items in corpus.vocabulary.items():
        _require_distinct(f"vocabulary '{category}' (en)", [item.source_text for item in items])
        _require_distinct(f"vocabulary '{category}' (fa)", [item.target_text for item in items])
    _require_distinct("colors", [item.name for item in corpus.colors])
    for definition in GAMES.values():
        if definition.family is not GameFamily.CHOICE or definition.category in ("", "colors"):
            continue
        if definition.category not in corpus.vocabulary:
            raise CorpusError(f"Corpus is missing vocabulary category '{definition.category}'.")
    for label, count in (
        ("pictures", len(corpus.pictures)),
        ("sentences", len(corpus.sentences)),
        ("grammar", len(corpus.grammar)),
        ("hangman", len(corpus.hangman)),
    ):
        if count == 0:
            raise CorpusError(f"Corpus category '{label}' is empty.")
    for name in REQUIRED_SEQUENCES:
        sequence = corpus.sequences.get(name)
        if sequence is None:
            raise CorpusError(f"Corpus is missing sequence '{name}'.")
        if len(set(sequence)) < MIN_SEQUENCE_LENGTH or len(set(sequence)) != len(sequence):
            raise CorpusError(f"Sequence '{name}' needs at least {MIN_SEQUENCE_LENGTH} distinct values.")


def _require_distinct(label: str, values: list[str]) -> None:
    distinct = len(set(values))
    if distinct < MIN_CHOICE_ITEMS:
        raise CorpusError(f"Corpus {label} has {distinct} distinct answers; at least {MIN_CHOICE_ITEMS} are required.")
