from __future__ import annotations

import random
from dataclasses import dataclass

from adventure.challenges.contract import ChallengeBoard, ChallengeInfo, Puzzle, ResultCallback

PALETTE = ("🔴", "🔵", "🟢", "🟡", "🟣", "🟠")
R, B, G = PALETTE[0], PALETTE[1], PALETTE[2]


@dataclass(frozen=True, slots=True)
class PatternSpec:
    unit: tuple[str, ...]
    shown: int

    def sequence(self) -> tuple[str, ...]:
        return tuple(self.unit[i % len(self.unit)] for i in range(self.shown))

    def next_symbol(self) -> str:
        return self.unit[self.shown % len(self.unit)]


PATTERNS: dict[int, PatternSpec] = {
    1: PatternSpec(unit=(R, B), shown=3),  # AB
    2: PatternSpec(unit=(R, B, G), shown=5),  # ABC
    3: PatternSpec(unit=(R, R, B, B), shown=5),  # AABB
    4: PatternSpec(unit=(R, B, B, R), shown=5),  # ABBA
}
HARDEST = PatternSpec(unit=(R, B, R, G), shown=5)  # ABAC


def pattern_for(difficulty: int) -> PatternSpec:
    return PATTERNS.get(difficulty, HARDEST)


class PatternChallenge:
    """What comes next? One guess per round."""

    info = ChallengeInfo(id="pattern", name="Pattern Match", kind="logic")

    def __init__(self, *, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def start(self, board: ChallengeBoard, difficulty: int, on_result: ResultCallback) -> None:
        spec = pattern_for(difficulty)
        answer = spec.next_symbol()

        choices = list(dict.fromkeys(spec.unit))
        for sym in PALETTE:
            if len(choices) >= 3:
                break
            if sym not in choices:
                choices.append(sym)
        self._rng.shuffle(choices)

        answered = False

        def _on_answer(choice: str) -> None:
            nonlocal answered
            if answered:
                return
            answered = True
            on_result(choice == answer)

        prompt = " ".join(spec.sequence()) + " ❓"
        board.show(Puzzle(prompt=prompt, choices=tuple(choices)), _on_answer)
