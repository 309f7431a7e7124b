from __future__ import annotations

import logging
from datetime import UTC, datetime
from uuid import uuid4

import redis

from adventure.api.models import Session
from adventure.errors import SessionNotFound
from adventure.progression import START_LEVEL

logger = logging.getLogger(__name__)

SESSIONS_SET_KEY = "adventure:sessions"
SESSION_KEY_PREFIX = "adventure:session:"  # + {session_id}


def _now() -> datetime:
    return datetime.now(tz=UTC)


def _session_key(session_id: str) -> str:
    return f"{SESSION_KEY_PREFIX}{session_id}"


def create_session(*, r: redis.Redis, profile_name: str, character_id: str, theme_id: str) -> Session:
    now = _now()
    session = Session(
        session_id=str(uuid4()),
        profile_name=profile_name,
        character_id=character_id,
        theme_id=theme_id,
        current_level=START_LEVEL,
        current_node=0,
        total_stars=0,
        mercy_mode=False,
        node_history=[],
        created_at=now,
        last_updated_at=now,
    )

    r.set(_session_key(session.session_id), session.model_dump_json(by_alias=True))
    r.sadd(SESSIONS_SET_KEY, session.session_id)

    logger.info("Created session %s (character=%s theme=%s)", session.session_id, character_id, theme_id)
    return session


def save_session(*, r: redis.Redis, session: Session) -> Session:
    # Whole-record overwrite; there are no partial updates.
    session.last_updated_at = _now()
    r.set(_session_key(session.session_id), session.model_dump_json(by_alias=True))
    r.sadd(SESSIONS_SET_KEY, session.session_id)
    return session


def get_session(*, r: redis.Redis, session_id: str) -> Session | None:
    raw = r.get(_session_key(session_id))
    if not raw:
        return None
    return Session.model_validate_json(raw)


def require_session(*, r: redis.Redis, session_id: str) -> Session:
    session = get_session(r=r, session_id=session_id)
    if session is None:
        raise SessionNotFound(session_id)
    return session


def list_sessions(*, r: redis.Redis) -> list[Session]:
    out: list[Session] = []
    for sid in sorted(r.smembers(SESSIONS_SET_KEY)):
        session = get_session(r=r, session_id=sid)
        if session is not None:
            out.append(session)
    out.sort(key=lambda s: s.created_at or datetime.min.replace(tzinfo=UTC), reverse=True)
    return out


def delete_all_sessions(*, r: redis.Redis) -> int:
    ids = list(r.smembers(SESSIONS_SET_KEY))
    deleted = 0
    if ids:
        deleted = int(r.delete(*[_session_key(sid) for sid in ids]))
    r.delete(SESSIONS_SET_KEY)
    logger.info("Deleted %d sessions", deleted)
    return deleted
