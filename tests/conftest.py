from __future__ import annotations

import json
import random
import shutil
import sys
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any
from uuid import uuid4

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from wordtrainer.content_loader import load_corpus  # noqa: E402
from wordtrainer.models import Corpus  # noqa: E402


def _tmp_path_fixture() -> Iterator[Path]:
    """Provide per-test temporary directory path inside the workspace.

    Overrides pytest's builtin ``tmp_path`` so databases and corpus files
    written by tests stay under ``.tmp_pytest/`` in the project root.
    """
    base = ROOT / ".tmp_pytest"
    base.mkdir(parents=True, exist_ok=True)
    path = base / str(uuid4())
    path.mkdir(parents=True, exist_ok=False)
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)
        try:
            next(base.iterdir())
        except StopIteration:
            base.rmdir()
        except FileNotFoundError:
            pass


tmp_path = pytest.fixture(name="tmp_path")(_tmp_path_fixture)


@pytest.fixture(scope="session")
def corpus() -> Corpus:
    """Bundled corpus, loaded once per test run."""
    return load_corpus()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def corpus_documents() -> list[dict[str, Any]]:
    """Smallest set of category files that passes validation."""
    words = [{"en": f"Word{idx}", "fa": f"fa{idx}"} for idx in range(4)]
    documents: list[dict[str, Any]] = [
        {"category": name, "kind": "vocabulary", "items": words}
        for name in ("translate", "animals", "jobs", "family", "places", "objects", "clothes", "adjectives")
    ]
    documents.extend(
        [
            {
                "category": "colors",
                "kind": "colors",
                "items": [
                    {"name": "red", "hex": "#f00", "fa": "r"},
                    {"name": "green", "hex": "#0f0", "fa": "g"},
                    {"name": "blue", "hex": "#00f", "fa": "b"},
                    {"name": "black", "hex": "#000", "fa": "k"},
                ],
            },
            {"category": "pictures", "kind": "pictures", "items": [{"image": "cat.png", "answer": "cat"}]},
            {"category": "sentences", "kind": "sentences", "items": [{"words": ["I", "am", "here"], "fa": "t"}]},
            {
                "category": "grammar",
                "kind": "grammar",
                "items": [
                    {
                        "words": ["He", "go", "home."],
                        "wrong_index": 1,
                        "correct": "goes",
                        "options": ["goes", "go", "gone", "going"],
                    }
                ],
            },
            {"category": "hangman", "kind": "hangman", "items": [{"word": "CAT", "hint": "pet"}]},
            {"category": "days", "kind": "sequence", "items": ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]},
            {"category": "months", "kind": "sequence", "items": ["Jan", "Feb", "Mar", "Apr", "May"]},
        ]
    )
    return documents


@pytest.fixture
def write_corpus(tmp_path: Path) -> Callable[[list[dict[str, Any]]], Path]:
    """Write category documents as one JSON file each and return the directory."""

    def _write(documents: list[dict[str, Any]]) -> Path:
        root = tmp_path / "corpus"
        root.mkdir(parents=True, exist_ok=True)
        for idx, document in enumerate(documents):
            (root / f"{idx:02d}-{document['category']}.json").write_text(json.dumps(document), encoding="utf-8")
        return root

    return _write
