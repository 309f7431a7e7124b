from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)

ResultCallback = Callable[[bool], None]
AnswerHandler = Callable[[str], None]


@dataclass(frozen=True, slots=True)
class ChallengeInfo:
    id: str
    name: str
    kind: str


@dataclass(frozen=True, slots=True)
class Puzzle:
    """What a challenge currently shows the player."""

    prompt: str
    choices: tuple[str, ...]


class ChallengeBoard:
    """Surface a challenge draws its puzzle on and reads answers from.

    The UI (or a test) reads `puzzle` and calls `answer()`; the running challenge
    decides what an answer means and when it is done.
    """

    def __init__(self) -> None:
        self.title: str | None = None
        self._puzzle: Puzzle | None = None
        self._on_answer: AnswerHandler | None = None

    @property
    def puzzle(self) -> Puzzle | None:
        return self._puzzle

    @property
    def is_active(self) -> bool:
        return self._on_answer is not None

    def show(self, puzzle: Puzzle, on_answer: AnswerHandler | None = None) -> None:
        self._puzzle = puzzle
        if on_answer is not None:
            self._on_answer = on_answer

    def answer(self, choice: str) -> None:
        if self._on_answer is None:
            raise RuntimeError("No challenge is waiting for an answer")
        self._on_answer(choice)

    def clear(self) -> None:
        self.title = None
        self._puzzle = None
        self._on_answer = None


@runtime_checkable
class Challenge(Protocol):
    info: ChallengeInfo

    def start(self, board: ChallengeBoard, difficulty: int, on_result: ResultCallback) -> None:
        """Set up the puzzle on `board` and eventually call `on_result` exactly once."""
        ...


class ResultChannel:
    """Single-shot pass/fail channel between one challenge run and the engine.

    `resolve` is handed to the challenge as its `on_result` callback. The first call
    wins; anything after it is a faulty module and gets logged and dropped.
    """

    def __init__(self, challenge_id: str) -> None:
        self.challenge_id = challenge_id
        self._future: asyncio.Future[bool] = asyncio.get_running_loop().create_future()

    @property
    def resolved(self) -> bool:
        return self._future.done()

    def resolve(self, success: bool) -> None:
        if self._future.done():
            logger.warning("Ignoring duplicate result from challenge %s", self.challenge_id)
            return
        self._future.set_result(bool(success))

    async def wait(self) -> bool:
        return await self._future
