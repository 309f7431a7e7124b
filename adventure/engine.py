from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from adventure.api.models import ProgressResult, Session
from adventure.challenges.contract import ChallengeBoard, ResultChannel
from adventure.challenges.registry import ChallengeRegistry, ChallengeSelector
from adventure.client import SessionBackend
from adventure.errors import AttemptRejected, ChallengeConfigurationError
from adventure.progression import STAR_AWARD, ChallengeFailed, ChallengeSucceeded, Progress, reduce

logger = logging.getLogger(__name__)

SessionListener = Callable[[Session], None]


@dataclass(frozen=True, slots=True)
class AttemptOutcome:
    challenge_id: str
    difficulty: int
    success: bool
    advanced: bool
    mercy: bool
    victory: bool
    failures: int
    session: Session


class ProgressionEngine:
    """Runs challenge attempts for one session on the client.

    Holds the cached session (read-only: every change comes back from the backend)
    and the per-node failure counter. At most one attempt is outstanding at a time.
    """

    def __init__(
        self,
        *,
        session: Session,
        backend: SessionBackend,
        registry: ChallengeRegistry,
        selector: ChallengeSelector,
    ) -> None:
        self._progress = Progress(session=session)
        self._backend = backend
        self._registry = registry
        self._selector = selector
        self._in_flight = False
        self._listeners: list[SessionListener] = []

    @property
    def session(self) -> Session:
        return self._progress.session

    @property
    def failures(self) -> int:
        return self._progress.failures

    @property
    def difficulty(self) -> int:
        return self._progress.difficulty

    @property
    def victory(self) -> bool:
        return self._progress.victory

    @property
    def busy(self) -> bool:
        return self._in_flight

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self, session: Session) -> None:
        for listener in list(self._listeners):
            listener(session)

    async def attempt_challenge(self, node_index: int, board: ChallengeBoard) -> AttemptOutcome:
        if self._in_flight:
            raise AttemptRejected("A challenge is already in progress")
        if self.victory:
            raise AttemptRejected("Session is complete")
        if node_index != self.session.current_node:
            raise AttemptRejected(f"Node {node_index} is not the current node")

        self._in_flight = True
        try:
            session = self.session
            difficulty = self.difficulty
            challenge_id = self._selector.select(session.current_node, session)

            try:
                challenge = self._registry.require(challenge_id)
            except ChallengeConfigurationError:
                logger.error("No challenge module for %r at node %d", challenge_id, session.current_node)
                raise

            channel = ResultChannel(challenge_id)
            board.clear()
            board.title = challenge.info.name
            try:
                challenge.start(board, difficulty, channel.resolve)
            except Exception as e:
                logger.error("Challenge %s failed to start", challenge_id, exc_info=True)
                raise ChallengeConfigurationError(f"Challenge {challenge_id} failed to start: {e}") from e

            success = await channel.wait()
            return await self._record(challenge_id=challenge_id, difficulty=difficulty, success=success)
        finally:
            board.clear()
            self._in_flight = False

    async def _record(self, *, challenge_id: str, difficulty: int, success: bool) -> AttemptOutcome:
        before = self._progress
        after = reduce(before, ChallengeSucceeded() if success else ChallengeFailed())

        advanced = after.session.current_node != before.session.current_node
        if not advanced:
            # Plain failure: only the local counter moves, the server is not told.
            self._progress = after
        else:
            result = ProgressResult(success=success, stars=STAR_AWARD if success else 0, used_mercy=not success)
            session = await self._backend.apply(before.session.session_id, result)
            self._progress = Progress(session=session, failures=0)
            self._notify(session)

        return AttemptOutcome(
            challenge_id=challenge_id,
            difficulty=difficulty,
            success=success,
            advanced=advanced,
            mercy=advanced and not success,
            victory=self.victory,
            failures=self.failures,
            session=self.session,
        )
