import pytest

from wordtrainer.engines import (
    ChoiceEngine,
    EngineState,
    GrammarEngine,
    HangmanEngine,
    InputResult,
    LetterEngine,
    SentenceEngine,
    SequenceEngine,
    create_engine,
)
from wordtrainer.models import (
    Challenge,
    ChoiceChallenge,
    GameType,
    GrammarChallenge,
    HangmanChallenge,
    LetterChallenge,
    Outcome,
    SentenceChallenge,
    SequenceChallenge,
)


def _choice() -> ChoiceChallenge:
    return ChoiceChallenge(
        game_type=GameType.ANIMAL,
        level=0,
        item_index=0,
        prompt="گربه",
        answer="Cat",
        distractors=("Dog", "Lion", "Cow"),
        options=("Dog", "Cat", "Cow", "Lion"),
    )


def _hangman(word: str = "CAT") -> HangmanChallenge:
    return HangmanChallenge(game_type=GameType.HANGMAN, level=0, item_index=0, word=word, hint="pet")


def test_choice_right_and_wrong_answers() -> None:
    outcomes: list[Outcome] = []
    engine = ChoiceEngine(_choice(), on_outcome=outcomes.append)
    assert engine.choose("Cat") is InputResult.SUCCEEDED
    assert outcomes[0].succeeded is True
    assert outcomes[0].answer_text == "Cat"

    outcomes.clear()
    engine = ChoiceEngine(_choice(), on_outcome=outcomes.append)
    assert engine.choose_index(0) is InputResult.FAILED
    assert outcomes[0].succeeded is False
    assert outcomes[0].answer_text == "Cat"


def test_terminal_engine_ignores_further_input() -> None:
    outcomes: list[Outcome] = []
    engine = ChoiceEngine(_choice(), on_outcome=outcomes.append)
    engine.choose("Dog")
    assert engine.state is EngineState.FAILED
    assert engine.choose("Cat") is InputResult.IGNORED
    assert engine.expire() is InputResult.IGNORED
    assert len(outcomes) == 1


def test_choice_ignores_values_that_are_not_options() -> None:
    engine = ChoiceEngine(_choice())
    assert engine.choose("Horse") is InputResult.IGNORED
    assert engine.choose_index(4) is InputResult.IGNORED
    assert engine.active


def test_expire_reports_timeout_without_answer_text() -> None:
    outcomes: list[Outcome] = []
    engine = ChoiceEngine(_choice(), on_outcome=outcomes.append)
    assert engine.expire() is InputResult.FAILED
    assert outcomes == [Outcome(GameType.ANIMAL, 0, False, "", timed_out=True)]


def test_letters_fill_slots_with_undo() -> None:
    challenge = LetterChallenge(
        game_type=GameType.GUESS,
        level=0,
        item_index=0,
        image="cat.png",
        answer="CAT",
        tiles=("T", "X", "C", "A", "Q"),
    )
    outcomes: list[Outcome] = []
    engine = LetterEngine(challenge, on_outcome=outcomes.append)
    assert engine.tap(2) is InputResult.ACCEPTED
    assert engine.tap(1) is InputResult.ACCEPTED
    assert engine.guess == "CX"
    assert not engine.tile_available(1)

    assert engine.undo() is InputResult.ACCEPTED
    assert engine.guess == "C"
    assert engine.tile_available(1)
    assert engine.snapshot()["slots"] == ["C", "", ""]

    assert engine.tap(2) is InputResult.IGNORED
    assert engine.tap_letter("a") is InputResult.ACCEPTED
    assert engine.tap_letter("T") is InputResult.SUCCEEDED
    assert outcomes[0].succeeded and outcomes[0].answer_text == "CAT"


def test_letters_undo_all_restores_starting_state() -> None:
    challenge = LetterChallenge(
        game_type=GameType.GUESS,
        level=0,
        item_index=0,
        image="apple.png",
        answer="APPLE",
        tiles=("P", "L", "A", "P", "E", "P", "K"),
    )
    engine = LetterEngine(challenge)
    start = engine.snapshot()
    for tile in (2, 5, 0, 3):
        assert engine.tap(tile) is InputResult.ACCEPTED
    assert engine.guess == "APPP"
    for _ in range(4):
        assert engine.undo() is InputResult.ACCEPTED
    assert engine.undo() is InputResult.IGNORED
    assert engine.snapshot() == start
    assert engine.slot_tiles == []
    assert engine.active


def test_letters_wrong_word_fails_when_full() -> None:
    challenge = LetterChallenge(
        game_type=GameType.GUESS, level=0, item_index=0, image="", answer="AB", tiles=("B", "A", "Z")
    )
    engine = LetterEngine(challenge)
    engine.tap(0)
    assert engine.tap(1) is InputResult.FAILED
    assert engine.outcome is not None and engine.outcome.answer_text == "AB"


def test_sentence_builds_in_order() -> None:
    challenge = SentenceChallenge(
        game_type=GameType.SENTENCE,
        level=0,
        item_index=0,
        translation="t",
        tokens=("I", "am", "here"),
        pool=("here", "I", "am"),
    )
    engine = SentenceEngine(challenge)
    assert engine.move(1) is InputResult.ACCEPTED
    assert engine.move(0) is InputResult.ACCEPTED
    assert engine.built == ["I", "here"]
    assert engine.move(0) is InputResult.ACCEPTED
    assert engine.built == ["I"]
    assert [item["word"] for item in engine.snapshot()["pool"]] == ["here", "am"]
    engine.move(2)
    assert engine.move(0) is InputResult.SUCCEEDED
    assert engine.outcome is not None and engine.outcome.answer_text == "I am here"


def test_sentence_with_repeated_words_removes_the_tapped_chip() -> None:
    challenge = SentenceChallenge(
        game_type=GameType.SENTENCE,
        level=0,
        item_index=0,
        translation="t",
        tokens=("no", "means", "no"),
        pool=("no", "no", "means"),
    )
    engine = SentenceEngine(challenge)
    engine.move(0)
    engine.move(1)
    engine.move(0)
    assert engine.placed == [1]
    engine.move(2)
    assert engine.move(0) is InputResult.SUCCEEDED


def test_sentence_wrong_order_fails() -> None:
    challenge = SentenceChallenge(
        game_type=GameType.SENTENCE,
        level=0,
        item_index=0,
        translation="t",
        tokens=("I", "am", "here"),
        pool=("here", "I", "am"),
    )
    engine = SentenceEngine(challenge)
    engine.move(0)
    engine.move(1)
    assert engine.move(2) is InputResult.FAILED
    assert engine.outcome is not None and engine.outcome.answer_text == "I am here"


def test_grammar_two_steps_with_unlimited_misses() -> None:
    challenge = GrammarChallenge(
        game_type=GameType.GRAMMAR,
        level=0,
        item_index=0,
        tokens=("He", "go", "home."),
        wrong_index=1,
        correct_token="goes",
        options=("gone", "goes", "go", "going"),
    )
    misses: list[bool] = []
    engine = GrammarEngine(challenge, on_miss=lambda: misses.append(True))
    assert engine.choose("goes") is InputResult.IGNORED
    for _ in range(10):
        assert engine.select_token(0) is InputResult.MISS
    assert engine.active
    assert len(misses) == 10
    assert engine.snapshot()["misses"] == 10
    assert engine.snapshot()["options"] == []

    assert engine.select_token(1) is InputResult.ACCEPTED
    assert engine.step == 2
    assert engine.snapshot()["marked"] == 1
    assert engine.choose_index(1) is InputResult.SUCCEEDED
    assert engine.outcome is not None and engine.outcome.answer_text == "He goes home."


def test_grammar_wrong_correction_fails() -> None:
    challenge = GrammarChallenge(
        game_type=GameType.GRAMMAR,
        level=0,
        item_index=0,
        tokens=("He", "go", "home."),
        wrong_index=1,
        correct_token="goes",
        options=("gone", "goes", "go", "going"),
    )
    engine = GrammarEngine(challenge)
    engine.select_token(1)
    assert engine.choose("gone") is InputResult.FAILED
    assert engine.outcome is not None and engine.outcome.answer_text == "goes"


def test_hangman_letters_in_any_order() -> None:
    engine = HangmanEngine(_hangman("BANANA"))
    assert engine.guess("n") is InputResult.ACCEPTED
    assert engine.masked == "_ _ N _ N _"
    assert engine.guess("B") is InputResult.ACCEPTED
    assert engine.guess("A") is InputResult.SUCCEEDED
    assert engine.outcome is not None and engine.outcome.answer_text == "BANANA"


def test_hangman_fails_on_sixth_mistake() -> None:
    misses: list[bool] = []
    engine = HangmanEngine(_hangman(), on_miss=lambda: misses.append(True))
    for letter in "QWERY":
        assert engine.guess(letter) is InputResult.MISS
    assert engine.active
    assert engine.guess("Z") is InputResult.FAILED
    assert engine.mistakes == 6
    assert len(misses) == 5


def test_hangman_ignores_repeats_and_non_letters() -> None:
    engine = HangmanEngine(_hangman())
    engine.guess("Q")
    assert engine.guess("q") is InputResult.IGNORED
    assert engine.guess("7") is InputResult.IGNORED
    assert engine.guess("ab") is InputResult.IGNORED
    assert engine.guess("é") is InputResult.IGNORED
    assert engine.mistakes == 1


def test_hangman_completion_wins_even_on_last_mistake_budget() -> None:
    engine = HangmanEngine(_hangman("AB"))
    for letter in "QWERT":
        engine.guess(letter)
    engine.guess("A")
    assert engine.guess("B") is InputResult.SUCCEEDED


def _sequence() -> SequenceChallenge:
    return SequenceChallenge(
        game_type=GameType.DAYS,
        level=0,
        item_index=None,
        sequence=("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"),
        blanks=(0, 2, 3, 6),
        pool=("Sun", "Mon", "Thu", "Wed"),
    )


def test_sequence_fills_blanks_in_order() -> None:
    engine = SequenceEngine(_sequence())
    assert engine.place(1) is InputResult.ACCEPTED
    assert engine.snapshot()["cells"][:3] == ["Mon", "Tue", ""]
    assert engine.place(2) is InputResult.ACCEPTED
    assert engine.place(1) is InputResult.ACCEPTED
    assert engine.place(0) is InputResult.SUCCEEDED
    assert engine.outcome is not None and engine.outcome.answer_text == "Mon Wed Thu Sun"


def test_sequence_remove_returns_value_to_pool() -> None:
    engine = SequenceEngine(_sequence())
    engine.place(0)
    assert engine.slots[0] == "Sun"
    assert engine.remove(0) is InputResult.ACCEPTED
    assert engine.pool[-1] == "Sun"
    assert engine.remove(0) is InputResult.IGNORED
    assert engine.remove(1) is InputResult.IGNORED


def test_sequence_swapped_values_fail() -> None:
    engine = SequenceEngine(_sequence())
    engine.place(1)
    engine.place(1)
    engine.place(0)
    assert engine.place(0) is InputResult.FAILED


def test_create_engine_picks_family_engine() -> None:
    assert isinstance(create_engine(_choice()), ChoiceEngine)
    assert isinstance(create_engine(_hangman()), HangmanEngine)
    assert isinstance(create_engine(_sequence()), SequenceEngine)


def test_base_challenge_cannot_be_instantiated() -> None:
    with pytest.raises(TypeError):
        Challenge(game_type=GameType.GUESS, level=0, item_index=0)
