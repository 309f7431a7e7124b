from __future__ import annotations

import random

from adventure.challenges.contract import ChallengeBoard, ChallengeInfo, Puzzle, ResultCallback


class MathAddChallenge:
    """Add two numbers, pick the sum out of three neighbours.

    Operand range grows with difficulty: 1..5 at difficulty 1, 1..21 at difficulty 5.
    """

    info = ChallengeInfo(id="math_add", name="Number Cruncher", kind="math")

    def __init__(self, *, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def start(self, board: ChallengeBoard, difficulty: int, on_result: ResultCallback) -> None:
        top = max(1, difficulty) * 4 + 1
        a = self._rng.randint(1, top)
        b = self._rng.randint(1, top)
        answer = a + b

        options = [answer, answer + 1, answer - 1]
        self._rng.shuffle(options)

        def _on_answer(choice: str) -> None:
            on_result(choice.strip() == str(answer))

        board.show(Puzzle(prompt=f"{a} + {b} = ?", choices=tuple(str(o) for o in options)), _on_answer)
