from __future__ import annotations

import random

from adventure.challenges.contract import ChallengeBoard, ChallengeInfo, Puzzle, ResultCallback

PAIRS_BY_DIFFICULTY = {1: 3, 2: 4, 3: 5, 4: 6, 5: 8}

SYMBOLS = ("🍎", "🍊", "🍋", "🍇", "🍓", "🍒", "🥝", "🍑", "🌟", "🌙", "❤️", "💎")
HIDDEN = "?"


def pairs_for(difficulty: int) -> int:
    # Past the table the board stays at its largest size.
    return PAIRS_BY_DIFFICULTY[min(max(1, difficulty), max(PAIRS_BY_DIFFICULTY))]


class _MemoryRound:
    def __init__(self, cards: list[str], board: ChallengeBoard, on_result: ResultCallback) -> None:
        self.cards = cards
        self.board = board
        self.on_result = on_result
        self.matched: set[int] = set()
        self.flipped: list[int] = []
        self.done = False

    def face(self) -> tuple[str, ...]:
        shown = self.matched | set(self.flipped)
        return tuple(c if i in shown else HIDDEN for i, c in enumerate(self.cards))

    def redraw(self) -> None:
        self.board.show(Puzzle(prompt="Match the pairs!", choices=self.face()))

    def flip(self, choice: str) -> None:
        if self.done:
            return
        try:
            idx = int(choice)
        except ValueError:
            return
        # A mismatched pair stays face up until the next flip.
        if len(self.flipped) == 2:
            self.flipped.clear()

        if not 0 <= idx < len(self.cards) or idx in self.matched or idx in self.flipped:
            return

        self.flipped.append(idx)
        if len(self.flipped) == 2:
            first, second = self.flipped
            if self.cards[first] == self.cards[second]:
                self.matched.update(self.flipped)
                self.flipped.clear()

        self.redraw()

        if len(self.matched) == len(self.cards):
            self.done = True
            self.on_result(True)


class MemoryChallenge:
    """Flip cards two at a time until every pair is matched.

    Answers are card indices. There is no way to lose; more pairs is the only
    thing difficulty changes.
    """

    info = ChallengeInfo(id="memory", name="Memory Match", kind="memory")

    def __init__(self, *, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def start(self, board: ChallengeBoard, difficulty: int, on_result: ResultCallback) -> None:
        pairs = pairs_for(difficulty)
        symbols = list(SYMBOLS[:pairs])
        cards = symbols + symbols
        self._rng.shuffle(cards)

        rnd = _MemoryRound(cards, board, on_result)
        board.show(Puzzle(prompt="Match the pairs!", choices=rnd.face()), rnd.flip)
