from __future__ import annotations

import random

import pytest

from adventure.api.models import Session
from adventure.challenges import default_registry
from adventure.challenges.contract import ChallengeBoard, ChallengeInfo, ResultChannel
from adventure.challenges.math_add import MathAddChallenge
from adventure.challenges.memory import HIDDEN, MemoryChallenge, pairs_for
from adventure.challenges.pattern import PatternChallenge, pattern_for
from adventure.challenges.registry import ChallengeRegistry, FixedSelector, RandomSelector
from adventure.errors import ChallengeConfigurationError, ChallengeNotRegistered

SESSION = Session(session_id="s-1", profile_name="Player", character_id="bunny", theme_id="forest")


class _Results:
    def __init__(self) -> None:
        self.calls: list[bool] = []

    def __call__(self, success: bool) -> None:
        self.calls.append(success)


@pytest.mark.asyncio
async def test_result_channel_first_result_wins() -> None:
    ch = ResultChannel("math_add")
    assert ch.resolved is False

    ch.resolve(False)
    ch.resolve(True)

    assert ch.resolved is True
    assert await ch.wait() is False


def test_registry_validates_at_registration() -> None:
    reg = default_registry()
    assert reg.ids() == ("math_add", "memory", "pattern")
    assert "memory" in reg

    with pytest.raises(ChallengeConfigurationError):
        reg.register(MathAddChallenge())  # duplicate id

    with pytest.raises(ChallengeConfigurationError):
        reg.register(object())  # type: ignore[arg-type]

    class _BadId:
        info = ChallengeInfo(id="Bad Id", name="Bad", kind="math")

        def start(self, board, difficulty, on_result):  # type: ignore[no-untyped-def]
            on_result(True)

    with pytest.raises(ChallengeConfigurationError):
        reg.register(_BadId())


def test_registry_require_and_validate_ids() -> None:
    reg = ChallengeRegistry([MathAddChallenge()])

    assert reg.require("math_add").info.name == "Number Cruncher"
    with pytest.raises(ChallengeNotRegistered):
        reg.require("memory")
    with pytest.raises(ChallengeConfigurationError):
        reg.validate_ids(["math_add", "memory"])


def test_selectors_only_accept_registered_ids() -> None:
    reg = default_registry()

    fixed = FixedSelector("math_add", registry=reg)
    assert {fixed.select(n, SESSION) for n in range(9)} == {"math_add"}

    with pytest.raises(ChallengeConfigurationError):
        FixedSelector("chess", registry=reg)
    with pytest.raises(ChallengeConfigurationError):
        RandomSelector([], registry=reg)

    rnd = RandomSelector(reg.ids(), registry=reg, rng=random.Random(7))
    picks = [rnd.select(n, SESSION) for n in range(60)]
    assert set(picks) == {"math_add", "memory", "pattern"}

    again = RandomSelector(reg.ids(), registry=reg, rng=random.Random(7))
    assert [again.select(n, SESSION) for n in range(60)] == picks


def test_math_add_operand_range_and_answer() -> None:
    board = ChallengeBoard()
    results = _Results()
    MathAddChallenge(rng=random.Random(3)).start(board, 1, results)

    puzzle = board.puzzle
    assert puzzle is not None
    a, b = (int(x) for x in puzzle.prompt.removesuffix(" = ?").split(" + "))
    assert 1 <= a <= 5 and 1 <= b <= 5
    assert sorted(int(c) for c in puzzle.choices) == [a + b - 1, a + b, a + b + 1]

    board.answer(str(a + b))
    assert results.calls == [True]


def test_math_add_wrong_answer_fails() -> None:
    board = ChallengeBoard()
    results = _Results()
    MathAddChallenge(rng=random.Random(3)).start(board, 2, results)

    a, b = (int(x) for x in board.puzzle.prompt.removesuffix(" = ?").split(" + "))  # type: ignore[union-attr]
    board.answer(str(a + b + 1))
    assert results.calls == [False]


@pytest.mark.parametrize(
    ("difficulty", "expected"),
    [(1, "🔵"), (2, "🟢"), (3, "🔴"), (4, "🔵"), (5, "🔵"), (9, "🔵")],
)
def test_pattern_next_symbol_is_next_in_sequence(difficulty: int, expected: str) -> None:
    spec = pattern_for(difficulty)
    assert spec.next_symbol() == expected

    board = ChallengeBoard()
    results = _Results()
    PatternChallenge(rng=random.Random(1)).start(board, difficulty, results)

    assert board.puzzle is not None
    assert board.puzzle.prompt.endswith("❓")
    assert expected in board.puzzle.choices
    assert len(board.puzzle.choices) >= 3

    board.answer(expected)
    board.answer("🟣")  # only the first answer counts
    assert results.calls == [True]


def test_memory_matches_all_pairs() -> None:
    board = ChallengeBoard()
    results = _Results()
    challenge = MemoryChallenge(rng=random.Random(5))
    challenge.start(board, 1, results)

    assert board.puzzle is not None
    assert board.puzzle.choices == (HIDDEN,) * 6

    # Peek at the dealt layout by flipping everything once.
    symbols: dict[int, str] = {}
    for i in range(6):
        board.answer(str(i))
        symbols[i] = board.puzzle.choices[i]  # type: ignore[union-attr]
        if results.calls:
            break

    if not results.calls:
        by_symbol: dict[str, list[int]] = {}
        for i, s in symbols.items():
            by_symbol.setdefault(s, []).append(i)
        for first, second in by_symbol.values():
            board.answer(str(first))
            board.answer(str(second))

    assert results.calls == [True]
    assert HIDDEN not in board.puzzle.choices  # type: ignore[union-attr]


def test_memory_board_never_shrinks_as_difficulty_rises() -> None:
    pairs = [pairs_for(d) for d in range(1, 10)]

    assert pairs == sorted(pairs)
    assert pairs[-1] == 8

    board = ChallengeBoard()
    MemoryChallenge(rng=random.Random(1)).start(board, 7, _Results())
    assert board.puzzle is not None
    assert len(board.puzzle.choices) == 16


def test_board_without_active_challenge_rejects_answers() -> None:
    board = ChallengeBoard()
    with pytest.raises(RuntimeError):
        board.answer("1")
