"""Progression rules for one session.

Everything here is pure: functions take a `Session` (or `Progress`) and return a
new one. The server applies results with `apply_result`; the client runtime feeds
challenge outcomes through `reduce` to track the failure counter it owns.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from adventure.api.models import NodeOutcome, ProgressResult, Session
from adventure.errors import SessionCompleted
from adventure.fsm import SessionFSM

logger = logging.getLogger(__name__)

STAR_AWARD = 3
MERCY_THRESHOLD = 3
START_LEVEL = 1


def _now() -> datetime:
    return datetime.now(tz=UTC)


def clamp_level(level: int) -> int:
    return max(1, level)


def effective_difficulty(level: int, mercy_mode: bool) -> int:
    return max(1, clamp_level(level) - (1 if mercy_mode else 0))


def is_victory(session: Session) -> bool:
    return SessionFSM(session).finished


def _advance(session: Session, *, stars: int, mercy: bool) -> Session:
    fsm = SessionFSM(session)
    if fsm.finished:
        raise SessionCompleted(session.session_id)
    fsm.advance()

    updated = session.model_copy(deep=True)
    updated.current_node = session.current_node + 1
    updated.total_stars = session.total_stars + stars
    updated.mercy_mode = mercy

    if fsm.finished:
        logger.info("Session %s reached victory with %d stars", session.session_id, updated.total_stars)
    return updated


def on_success(session: Session) -> Session:
    return _advance(session, stars=STAR_AWARD, mercy=False)


def on_mercy(session: Session) -> Session:
    """Forced advance after too many failures: no stars, next challenge easier."""

    logger.info("Session %s: mercy advance from node %d", session.session_id, session.current_node)
    return _advance(session, stars=0, mercy=True)


@dataclass(frozen=True, slots=True)
class ChallengeSucceeded:
    pass


@dataclass(frozen=True, slots=True)
class ChallengeFailed:
    pass


ProgressEvent = ChallengeSucceeded | ChallengeFailed


@dataclass(frozen=True, slots=True)
class Progress:
    """Session plus the per-node failure counter, which only the client holds."""

    session: Session
    failures: int = 0

    @property
    def victory(self) -> bool:
        return is_victory(self.session)

    @property
    def difficulty(self) -> int:
        return effective_difficulty(self.session.current_level, self.session.mercy_mode)


def reduce(progress: Progress, event: ProgressEvent) -> Progress:
    if progress.victory:
        raise SessionCompleted(progress.session.session_id)

    if isinstance(event, ChallengeSucceeded):
        return Progress(session=on_success(progress.session), failures=0)

    failures = progress.failures + 1
    if failures < MERCY_THRESHOLD:
        return Progress(session=progress.session, failures=failures)
    return Progress(session=on_mercy(progress.session), failures=0)


def apply_result(session: Session, result: ProgressResult, *, now: datetime | None = None) -> Session:
    """Server-side transition for one reported challenge result.

    The client's `stars` value is ignored; a success is always worth STAR_AWARD.
    A failure only moves the session when the client reports the mercy rule fired.
    """

    if is_victory(session):
        raise SessionCompleted(session.session_id)

    node = session.current_node
    if result.success:
        updated = on_success(session)
        awarded = STAR_AWARD
    elif result.used_mercy:
        updated = on_mercy(session)
        awarded = 0
    else:
        updated = session.model_copy(deep=True)
        awarded = 0

    updated.node_history.append(
        NodeOutcome(
            node=node,
            success=result.success,
            used_mercy=(not result.success) and result.used_mercy,
            stars_awarded=awarded,
            at=now or _now(),
        )
    )
    return updated
