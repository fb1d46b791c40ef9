"""CLI entrypoint for the vocabulary mini-game shell."""

from __future__ import annotations

import argparse
import logging
import random
import time
from collections.abc import Callable
from pathlib import Path

from .engines import (
    ChoiceEngine,
    GrammarEngine,
    HangmanEngine,
    InputResult,
    LetterEngine,
    SentenceEngine,
    SequenceEngine,
    VariantEngine,
)
from .games import GAMES, MAX_HANGMAN_MISTAKES
from .models import Challenge, GameType, Outcome
from .service import GameEvents, ProgressionController, StartResult

InputFn = Callable[[str], str]
PrintFn = Callable[[str], None]
ClockFn = Callable[[], float]
MENU_QUIT_COMMANDS = {"q"}
MENU_MEDALS_COMMANDS = {"m"}
FLOW_EXIT_COMMANDS = {":b", ":back", ":q", ":quit", ":exit"}
UNDO_COMMANDS = {"-", ":u", ":undo"}
DEFAULT_DB_PATH = Path(".wordtrainer") / "progress.db"


class _ShellEvents(GameEvents):
    """Prints outcome feedback as the controller reports it."""

    def __init__(self, print_fn: PrintFn) -> None:
        self.print_fn = print_fn

    def outcome(self, outcome: Outcome, score: int) -> None:
        if outcome.timed_out:
            self.print_fn(f"{outcome.symbol} Time's up!")
        elif outcome.succeeded:
            self.print_fn(f"{outcome.symbol} {outcome.answer_text}".rstrip())
        else:
            self.print_fn(f"{outcome.symbol} Correct answer: {outcome.answer_text}")
        self.print_fn(f"Score: {score}")

    def miss(self) -> None:
        self.print_fn("Not quite.")

    def session_ended(self, game_type: GameType, completed: bool) -> None:
        if completed:
            self.print_fn(f"🏅 You finished every level of {GAMES[game_type].title} and earned a medal!")


def _service(db_path: Path | str = DEFAULT_DB_PATH, seed: int | None = None) -> ProgressionController:
    """Create the controller with a local database path."""
    rng = random.Random(seed) if seed is not None else None
    return ProgressionController(db_path, rng=rng)


def run(argv: list[str] | None = None) -> int:
    """Run the CLI application."""
    parser = argparse.ArgumentParser(prog="wordtrainer", description="Vocabulary and grammar mini-games")
    parser.add_argument("command", nargs="?", default="play", choices=["play", "medals"])
    parser.add_argument("--db", type=Path, default=DEFAULT_DB_PATH, help="progress database path")
    parser.add_argument("--seed", type=int, default=None, help="seed for reproducible challenges")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="logging verbosity",
    )
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")
    if args.command == "medals":
        return medals_report(db_path=args.db)
    return play_shell(db_path=args.db, seed=args.seed)


def medals_report(print_fn: PrintFn = print, db_path: Path | str = DEFAULT_DB_PATH) -> int:
    """Print earned medals and exit."""
    service = _service(db_path)
    try:
        _medals_flow(service, print_fn)
    finally:
        service.close()
    return 0


def play_shell(
    input_fn: InputFn = input,
    print_fn: PrintFn = print,
    *,
    db_path: Path | str = DEFAULT_DB_PATH,
    seed: int | None = None,
    clock: ClockFn = time.monotonic,
) -> int:
    """Run the persistent menu-driven shell."""
    service = _service(db_path, seed)
    service.events = _ShellEvents(print_fn)
    try:
        while True:
            entries = service.menu()
            print_fn("\n=== Word Trainer ===")
            for idx, entry in enumerate(entries, start=1):
                badges = f" [{', '.join(entry.badges)}]" if entry.badges else ""
                print_fn(f"{idx:>2}) {entry.definition.title}{badges}")
            print_fn(" m) Medals")
            print_fn(" q) Quit")
            choice = input_fn("Choose game: ").strip().lower()

            if choice in MENU_QUIT_COMMANDS:
                return 0
            if choice in MENU_MEDALS_COMMANDS:
                _medals_flow(service, print_fn)
                continue
            if choice.isdigit() and 0 <= int(choice) - 1 < len(entries):
                game_type = entries[int(choice) - 1].definition.game_type
                if _start_flow(service, game_type, input_fn, print_fn):
                    _play_flow(service, input_fn, print_fn, clock)
                continue
            print_fn("Invalid choice.")
    finally:
        service.close()


def _start_flow(service: ProgressionController, game_type: GameType, input_fn: InputFn, print_fn: PrintFn) -> bool:
    """Start a game, asking for confirmation before resetting a completed one."""
    if service.start_game(game_type) is StartResult.STARTED:
        return True
    title = GAMES[game_type].title
    print_fn(f"You already completed {title}. Playing again resets its level to 1 (medals are kept).")
    confirm = input_fn("Type YES to start over: ").strip()
    if confirm != "YES":
        service.decline_reset(game_type)
        print_fn("Reset cancelled.")
        return False
    service.confirm_reset(game_type)
    return True


def _medals_flow(service: ProgressionController, print_fn: PrintFn) -> None:
    """List medals per game."""
    print_fn("\n=== Medals ===")
    records = service.medal_records()
    if not records:
        print_fn("No medals yet!")
        return
    title_width = max(len(GAMES[record.game_type].title) for record in records)
    for record in records:
        print_fn(f"🏅 {GAMES[record.game_type].title:<{title_width}} x{record.medals}")


def _play_flow(service: ProgressionController, input_fn: InputFn, print_fn: PrintFn, clock: ClockFn) -> None:
    """Play challenges until the player leaves or the game is completed."""
    print_fn("Type :b or :q to return to the menu.")
    while service.session is not None:
        engine = service.engine
        assert engine is not None and service.challenge is not None
        session = service.session
        print_fn(f"\n--- {GAMES[session.game_type].title} | Level {session.level + 1} | Score {session.score} ---")
        _render(service.challenge, engine, print_fn)
        if service.time_left is not None:
            print_fn(f"Time left: {service.time_left}")

        started = clock()
        raw = input_fn(_prompt(engine)).strip()
        if raw.lower() in FLOW_EXIT_COMMANDS:
            service.leave_game()
            return

        time_left = service.time_left
        if time_left is not None:
            service.scheduler.advance(min(clock() - started, float(time_left)))
        if engine.active:
            result = _apply(engine, raw)
            if result is InputResult.IGNORED:
                print_fn("Invalid input.")
        if not engine.active:
            service.fast_forward()


def _prompt(engine: VariantEngine) -> str:
    if isinstance(engine, LetterEngine):
        return "Tile number or letter (- to undo): "
    if isinstance(engine, SentenceEngine):
        return "Word number to move: "
    if isinstance(engine, GrammarEngine):
        return "Wrong word number: " if engine.step == 1 else "Correction number: "
    if isinstance(engine, HangmanEngine):
        return "Letter: "
    if isinstance(engine, SequenceEngine):
        return "Value number to place (r<slot> to remove): "
    return "Option number: "


def _render(challenge: Challenge, engine: VariantEngine, print_fn: PrintFn) -> None:
    """Print the current challenge and engine state."""
    view = engine.snapshot()
    if isinstance(engine, ChoiceEngine):
        swatch = f" (color {engine.challenge.swatch})" if engine.challenge.swatch else ""
        print_fn(f"{view['prompt']}{swatch}")
        for idx, option in enumerate(view["options"], start=1):
            print_fn(f"{idx}) {option}")
    elif isinstance(engine, LetterEngine):
        print_fn(f"Picture: {engine.challenge.image}")
        print_fn("Word: " + " ".join(letter or "_" for letter in view["slots"]))
        tiles = [
            f"{idx}:{tile['letter']}" if tile["available"] else f"{idx}:."
            for idx, tile in enumerate(view["tiles"], start=1)
        ]
        print_fn("Tiles: " + "  ".join(tiles))
    elif isinstance(engine, SentenceEngine):
        print_fn(f"Translate: {engine.challenge.translation}")
        built = [f"{chip + 1}:{engine.challenge.pool[chip]}" for chip in engine.placed]
        print_fn("Sentence: " + (" ".join(built) if built else "(empty)"))
        print_fn("Words: " + "  ".join(f"{item['chip'] + 1}:{item['word']}" for item in view["pool"]))
    elif isinstance(engine, GrammarEngine):
        tokens = [
            f"{idx}:[{token}]" if view["marked"] == idx - 1 else f"{idx}:{token}"
            for idx, token in enumerate(view["tokens"], start=1)
        ]
        print_fn(" ".join(tokens))
        if view["misses"]:
            print_fn(f"Wrong picks so far: {view['misses']}")
        for idx, option in enumerate(view["options"], start=1):
            print_fn(f"{idx}) {option}")
    elif isinstance(engine, HangmanEngine):
        print_fn(f"Hint: {view['hint']}")
        print_fn(view["masked"])
        print_fn(f"Mistakes: {view['mistakes']}/{MAX_HANGMAN_MISTAKES}  Guessed: {' '.join(view['guessed']) or '-'}")
    elif isinstance(engine, SequenceEngine):
        for idx, cell in enumerate(view["cells"], start=1):
            marker = "*" if idx - 1 in view["blanks"] else " "
            print_fn(f"{marker}{idx:>2}) {cell or '____'}")
        print_fn("Values: " + "  ".join(f"{idx}:{value}" for idx, value in enumerate(view["pool"], start=1)))
    else:  # pragma: no cover
        print_fn(challenge.answer_text)


def _apply(engine: VariantEngine, raw: str) -> InputResult:
    """Translate one line of input into an engine event."""
    number = int(raw) - 1 if raw.isdigit() else None
    if isinstance(engine, ChoiceEngine):
        if number is not None and 0 <= number < len(engine.challenge.options):
            return engine.choose_index(number)
        matches = [option for option in engine.challenge.options if option.lower() == raw.lower()]
        return engine.choose(matches[0]) if matches else InputResult.IGNORED
    if isinstance(engine, LetterEngine):
        if raw in UNDO_COMMANDS:
            return engine.undo()
        if number is not None:
            return engine.tap(number)
        return engine.tap_letter(raw) if len(raw) == 1 else InputResult.IGNORED
    if isinstance(engine, SentenceEngine):
        return engine.move(number) if number is not None else InputResult.IGNORED
    if isinstance(engine, GrammarEngine):
        if number is None:
            return InputResult.IGNORED
        return engine.select_token(number) if engine.step == 1 else engine.choose_index(number)
    if isinstance(engine, HangmanEngine):
        return engine.guess(raw)
    if isinstance(engine, SequenceEngine):
        lowered = raw.lower()
        if lowered.startswith("r") and lowered[1:].isdigit():
            return engine.remove(int(lowered[1:]) - 1)
        return engine.place(number) if number is not None else InputResult.IGNORED
    return InputResult.IGNORED


def main_entry() -> None:
    """Console script entrypoint."""
    raise SystemExit(run())


if __name__ == "__main__":  # pragma: no cover
    main_entry()
