"""Application service: sessions, level progression, and medals."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path

from .content_loader import load_corpus
from .engines import VariantEngine, create_engine
from .games import GAMES, MAX_LEVELS, MENU_DELAY, SCORE_PER_LEVEL, TIMEOUT_DELAY, GameDefinition
from .generator import ChallengeGenerator
from .models import Challenge, ChoiceChallenge, Corpus, GameType, Outcome
from .progress import ProgressRecord, ProgressStore
from .timers import Countdown, Scheduler, TimerHandle

logger = logging.getLogger(__name__)


class StartResult(str, Enum):
    STARTED = "started"
    NEEDS_CONFIRMATION = "needs_confirmation"


@dataclass
class Session:
    """Transient state of one play-through of a game type."""

    game_type: GameType
    level: int
    score: int = 0


@dataclass(frozen=True)
class MenuEntry:
    """Menu row for one game type."""

    definition: GameDefinition
    record: ProgressRecord

    @property
    def badges(self) -> tuple[str, ...]:
        badges: list[str] = []
        if self.record.medals > 0:
            badges.append(f"🏅 {self.record.medals}")
        if self.record.completed:
            badges.append("completed")
        elif self.record.level > 0:
            badges.append(f"Lvl {self.record.level + 1}")
        return tuple(badges)


class AudioSink:
    """Sound cues and speech. The default implementation is silent."""

    def play_cue(self, name: str) -> None:
        pass

    def speak(self, text: str, lang: str) -> None:
        pass


class GameEvents:
    """Presentation hooks; override the ones you need."""

    def challenge_started(self, challenge: Challenge, engine: VariantEngine) -> None:
        pass

    def tick(self, remaining: int) -> None:
        pass

    def miss(self) -> None:
        pass

    def outcome(self, outcome: Outcome, score: int) -> None:
        pass

    def session_ended(self, game_type: GameType, completed: bool) -> None:
        pass


class ProgressionController:
    """Owns the current session and drives challenge -> outcome -> next level."""

    def __init__(
        self,
        db_path: Path | str,
        *,
        corpus: Corpus | None = None,
        rng: random.Random | None = None,
        scheduler: Scheduler | None = None,
        audio: AudioSink | None = None,
        events: GameEvents | None = None,
        max_levels: int = MAX_LEVELS,
    ) -> None:
        """Load content and progress; no session is active yet."""
        self.corpus = corpus or load_corpus()
        self.generator = ChallengeGenerator(self.corpus, rng)
        self.progress = ProgressStore(db_path)
        self.scheduler = scheduler or Scheduler()
        self.audio = audio or AudioSink()
        self.events = events or GameEvents()
        self.max_levels = max_levels
        self.session: Session | None = None
        self.challenge: Challenge | None = None
        self.engine: VariantEngine | None = None
        self._countdown: Countdown | None = None
        self._pending: TimerHandle | None = None

    def menu(self) -> list[MenuEntry]:
        """Return all game types with their progress."""
        return [MenuEntry(GAMES[record.game_type], record) for record in self.progress.all_records()]

    def medal_records(self) -> list[ProgressRecord]:
        """Return records that hold at least one medal."""
        return [record for record in self.progress.all_records() if record.medals > 0]

    def start_game(self, game_type: GameType | str) -> StartResult:
        """Start a session, unless the game is completed and needs a reset first."""
        record = self.progress.get(game_type)
        if record.completed:
            logger.info("%s is completed; waiting for reset confirmation", record.game_type.value)
            return StartResult.NEEDS_CONFIRMATION
        self._begin_session(record.game_type, record.level)
        return StartResult.STARTED

    def confirm_reset(self, game_type: GameType | str) -> None:
        """Reset a completed game to level 0 and start it; other games start where they are."""
        record = self.progress.get(game_type)
        if not record.completed:
            self._begin_session(record.game_type, record.level)
            return
        self.progress.save(replace(record, level=0, completed=False))
        self._begin_session(record.game_type, 0)

    def decline_reset(self, game_type: GameType | str) -> None:
        """Leave a completed game untouched."""
        logger.debug("Reset of %s declined", GameType(game_type).value)

    def leave_game(self) -> None:
        """Cancel pending timers and drop the session."""
        self._cancel_timers()
        if self.session is not None:
            logger.info("Leaving %s at level %d", self.session.game_type.value, self.session.level)
        self.session = None
        self.challenge = None
        self.engine = None

    @property
    def time_left(self) -> int | None:
        """Remaining countdown units, or None when no countdown runs."""
        if self._countdown is None:
            return None
        return self._countdown.remaining

    def fast_forward(self) -> None:
        """Jump the clock to the pending post-outcome transition and run it."""
        if self._pending is not None and self._pending.pending:
            self.scheduler.advance(self._pending.due - self.scheduler.now)

    def close(self) -> None:
        """Close resources."""
        self.leave_game()
        self.progress.close()

    def _begin_session(self, game_type: GameType, level: int) -> None:
        self.leave_game()
        self.session = Session(game_type=game_type, level=level)
        logger.info("Starting %s at level %d", game_type.value, level)
        self._next_challenge()

    def _next_challenge(self) -> None:
        session = self.session
        assert session is not None, "no active session"
        self._cancel_timers()
        challenge = self.generator.generate(session.game_type, session.level)
        engine = create_engine(
            challenge,
            on_outcome=lambda outcome: self._handle_outcome(engine, outcome),
            on_miss=lambda: self._handle_miss(engine),
        )
        self.challenge = challenge
        self.engine = engine
        if isinstance(challenge, ChoiceChallenge) and challenge.time_limit is not None:
            self._countdown = Countdown(self.scheduler, challenge.time_limit, self.events.tick, engine.expire)
            self._countdown.start()
        self.events.challenge_started(challenge, engine)

    def _handle_miss(self, engine: VariantEngine) -> None:
        if engine is not self.engine:
            return
        self._cue("fail")
        self.events.miss()

    def _handle_outcome(self, engine: VariantEngine, outcome: Outcome) -> None:
        session = self.session
        if engine is not self.engine or session is None:
            return
        self._cancel_timers()
        definition = GAMES[session.game_type]

        if outcome.succeeded:
            self._cue("success")
            session.score += SCORE_PER_LEVEL
            completed = self._record_success(session)
            self.events.outcome(outcome, session.score)
            if outcome.answer_text and definition.speaks:
                self._speak(outcome.answer_text, definition.speech_lang)
            if completed:
                self._pending = self.scheduler.call_later(definition.success_delay + MENU_DELAY, self._finish_session)
            else:
                self._pending = self.scheduler.call_later(definition.success_delay, self._next_challenge)
            return

        self._cue("fail")
        self.events.outcome(outcome, session.score)
        if outcome.answer_text and definition.speaks:
            self._speak(f"No, it is {outcome.answer_text}", definition.speech_lang)
        delay = TIMEOUT_DELAY if outcome.timed_out else definition.fail_delay
        self._pending = self.scheduler.call_later(delay, self._next_challenge)

    def _record_success(self, session: Session) -> bool:
        """Advance the record one level; award a medal at max level. Returns completion."""
        record = self.progress.get(session.game_type)
        level = session.level + 1
        if level >= self.max_levels:
            record = replace(record, level=0, medals=record.medals + 1, completed=True)
            self.progress.save(record)
            logger.info("%s completed; medals now %d", session.game_type.value, record.medals)
            return True
        self.progress.save(replace(record, level=level))
        session.level = level
        return False

    def _finish_session(self) -> None:
        session = self.session
        self.leave_game()
        if session is not None:
            self.events.session_ended(session.game_type, True)

    def _cancel_timers(self) -> None:
        if self._countdown is not None:
            self._countdown.cancel()
            self._countdown = None
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _cue(self, name: str) -> None:
        try:
            self.audio.play_cue(name)
        except Exception:
            logger.warning("Audio cue %r failed", name, exc_info=True)

    def _speak(self, text: str, lang: str) -> None:
        try:
            self.audio.speak(text, lang)
        except Exception:
            logger.warning("Speech for %r failed", text, exc_info=True)
