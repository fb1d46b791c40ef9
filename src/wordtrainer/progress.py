"""SQLite persistence for per-game level and medal progress."""

from __future__ import annotations

import json
import logging
import sqlite3
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path

from .models import GameType

SCHEMA_VERSION = 1
STORAGE_KEY = "wordtrainer_progress"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProgressRecord:
    """Persisted level/medal state for one game type."""

    game_type: GameType
    level: int = 0
    medals: int = 0
    completed: bool = False

    def to_json(self) -> dict[str, object]:
        data = asdict(self)
        data.pop("game_type")
        return data


def default_records() -> dict[GameType, ProgressRecord]:
    """Fresh all-zero records for every known game type."""
    return {game_type: ProgressRecord(game_type) for game_type in GameType}


class ProgressStore:
    """Key-value storage holding all progress as one JSON document."""

    def __init__(self, db_path: Path | str) -> None:
        """Open the database, apply migrations, and load progress."""
        if isinstance(db_path, Path):
            db_path.parent.mkdir(parents=True, exist_ok=True)
            target = str(db_path)
        else:
            target = db_path
        self._conn = sqlite3.connect(target)
        self._conn.row_factory = sqlite3.Row
        self._apply_migrations()
        self._records = self._load()

    def _apply_migrations(self) -> None:
        """Apply forward-only schema migrations to latest version."""
        current = int(self._conn.execute("PRAGMA user_version").fetchone()[0])
        if current > SCHEMA_VERSION:
            raise RuntimeError(f"Database schema version {current} is newer than supported {SCHEMA_VERSION}.")

        for version in range(current + 1, SCHEMA_VERSION + 1):
            if version == 1:
                self._migrate_to_v1()
            with self._conn:
                self._conn.execute(f"PRAGMA user_version = {version}")

    def _migrate_to_v1(self) -> None:
        with self._conn:
            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS storage (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """)

    def read_blob(self) -> str | None:
        """Return the raw stored document, if any."""
        row = self._conn.execute("SELECT value FROM storage WHERE key = ?", (STORAGE_KEY,)).fetchone()
        return None if row is None else str(row["value"])

    def write_blob(self, value: str) -> None:
        """Replace the stored document in one transaction."""
        with self._conn:
            self._conn.execute(
                """
                INSERT INTO storage (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                """,
                (STORAGE_KEY, value, datetime.now(UTC).isoformat()),
            )

    def _load(self) -> dict[GameType, ProgressRecord]:
        records = default_records()
        blob = self.read_blob()
        if blob is None:
            return records
        try:
            raw: object = json.loads(blob)
        except json.JSONDecodeError:
            logger.warning("Stored progress is not valid JSON; starting from defaults.", exc_info=True)
            return records
        if not isinstance(raw, dict):
            logger.warning("Stored progress root is %s, not an object; starting from defaults.", type(raw).__name__)
            return records

        for key, value in raw.items():
            try:
                game_type = GameType(key)
            except ValueError:
                logger.info("Ignoring progress for unknown game type %r.", key)
                continue
            record = _record_from_json(game_type, value)
            if record is None:
                logger.warning("Progress for %s is malformed; resetting it.", game_type.value)
                continue
            records[game_type] = record
        return records

    def get(self, game_type: GameType | str) -> ProgressRecord:
        """Return the record for a game type (defaults on first access)."""
        key = GameType(game_type)
        record = self._records.get(key)
        if record is None:
            record = ProgressRecord(key)
            self._records[key] = record
        return record

    def all_records(self) -> list[ProgressRecord]:
        """Return records in game-type declaration order."""
        return [self.get(game_type) for game_type in GameType]

    def save(self, record: ProgressRecord) -> None:
        """Store one record and persist the whole document immediately."""
        if record.level < 0 or record.medals < 0:
            raise ValueError(f"Invalid progress for {record.game_type.value}: {record}")
        self._records[record.game_type] = record
        payload = {game_type.value: item.to_json() for game_type, item in self._records.items()}
        self.write_blob(json.dumps(payload, ensure_ascii=False))

    def close(self) -> None:
        """Close db connection."""
        self._conn.close()

    def __del__(self) -> None:  # pragma: no cover
        """Best-effort connection cleanup."""
        try:
            self.close()
        except Exception:
            pass


def _record_from_json(game_type: GameType, value: object) -> ProgressRecord | None:
    """Build a record from stored JSON, or None when it cannot be trusted."""
    if not isinstance(value, dict):
        return None
    level = _coerce_int(value.get("level", 0))
    medals = _coerce_int(value.get("medals", 0))
    completed = value.get("completed", False)
    if level is None or medals is None or level < 0 or medals < 0 or not isinstance(completed, bool):
        return None
    return ProgressRecord(game_type=game_type, level=level, medals=medals, completed=completed)


def _coerce_int(value: object) -> int | None:
    """Coerce stored value to int."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None
