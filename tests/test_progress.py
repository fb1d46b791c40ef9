import json
import sqlite3
from pathlib import Path

import pytest

from wordtrainer.models import GameType
from wordtrainer.progress import SCHEMA_VERSION, STORAGE_KEY, ProgressRecord, ProgressStore


def test_defaults_for_every_game_type() -> None:
    store = ProgressStore(":memory:")
    records = store.all_records()
    assert [record.game_type for record in records] == list(GameType)
    assert all(record == ProgressRecord(record.game_type) for record in records)
    assert store.read_blob() is None


def test_get_accepts_identifier_strings() -> None:
    store = ProgressStore(":memory:")
    assert store.get("numToWord").game_type is GameType.NUM_TO_WORD
    with pytest.raises(ValueError):
        store.get("chess")


def test_save_persists_whole_document() -> None:
    store = ProgressStore(":memory:")
    store.save(ProgressRecord(GameType.ANIMAL, level=12))
    document = json.loads(store.read_blob() or "{}")
    assert document["animal"] == {"level": 12, "medals": 0, "completed": False}
    assert document["hangman"] == {"level": 0, "medals": 0, "completed": False}
    assert set(document) == {game_type.value for game_type in GameType}


def test_progress_survives_reopen(tmp_path: Path) -> None:
    db_path = tmp_path / "nested" / "progress.db"
    store = ProgressStore(db_path)
    store.save(ProgressRecord(GameType.TRANSLATE, level=0, medals=2, completed=True))
    store.close()

    reopened = ProgressStore(db_path)
    assert reopened.get(GameType.TRANSLATE) == ProgressRecord(GameType.TRANSLATE, 0, 2, True)
    reopened.close()


def test_negative_values_are_rejected() -> None:
    store = ProgressStore(":memory:")
    with pytest.raises(ValueError):
        store.save(ProgressRecord(GameType.JOBS, level=-1))


def _store_with_blob(tmp_path: Path, blob: str) -> Path:
    db_path = tmp_path / "progress.db"
    ProgressStore(db_path).close()
    conn = sqlite3.connect(db_path)
    with conn:
        conn.execute(
            "INSERT INTO storage (key, value, updated_at) VALUES (?, ?, ?)",
            (STORAGE_KEY, blob, "2024-01-01T00:00:00+00:00"),
        )
    conn.close()
    return db_path


def test_corrupt_json_falls_back_to_defaults(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    db_path = _store_with_blob(tmp_path, "{not json")
    with caplog.at_level("WARNING", logger="wordtrainer.progress"):
        store = ProgressStore(db_path)
    assert store.get(GameType.ANIMAL) == ProgressRecord(GameType.ANIMAL)
    assert "not valid JSON" in caplog.text
    store.close()


def test_non_object_root_falls_back_to_defaults(tmp_path: Path) -> None:
    store = ProgressStore(_store_with_blob(tmp_path, "[1, 2, 3]"))
    assert store.get(GameType.COLORS).level == 0
    store.close()


def test_unknown_and_malformed_entries_are_skipped(tmp_path: Path) -> None:
    blob = json.dumps(
        {
            "animal": {"level": 5, "medals": 1, "completed": False},
            "chess": {"level": 9},
            "jobs": {"level": -3},
            "days": "broken",
            "months": {"level": "7"},
            "colors": {"level": True},
        }
    )
    store = ProgressStore(_store_with_blob(tmp_path, blob))
    assert store.get(GameType.ANIMAL) == ProgressRecord(GameType.ANIMAL, 5, 1, False)
    assert store.get(GameType.JOBS).level == 0
    assert store.get(GameType.DAYS).level == 0
    assert store.get(GameType.MONTHS).level == 7
    assert store.get(GameType.COLORS).level == 0
    store.close()


def test_schema_version_is_recorded(tmp_path: Path) -> None:
    db_path = tmp_path / "progress.db"
    ProgressStore(db_path).close()
    conn = sqlite3.connect(db_path)
    assert conn.execute("PRAGMA user_version").fetchone()[0] == SCHEMA_VERSION
    conn.close()


def test_newer_schema_is_refused(tmp_path: Path) -> None:
    db_path = tmp_path / "progress.db"
    conn = sqlite3.connect(db_path)
    conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION + 1}")
    conn.close()
    with pytest.raises(RuntimeError, match="newer than supported"):
        ProgressStore(db_path)
