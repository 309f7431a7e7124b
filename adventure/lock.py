from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from uuid import uuid4

import redis

from adventure.errors import SessionBusy


@contextmanager
def session_lock(*, r: redis.Redis, session_id: str, ttl_ms: int = 5_000) -> Iterator[None]:
    """Best-effort per-session lock around a read-modify-write.

    Only one player drives a session, so contention means a double submit; we fail
    fast instead of queueing.
    """

    key = f"lock:session:{session_id}"
    token = uuid4().hex
    acquired = r.set(key, token, nx=True, px=ttl_ms)
    if not acquired:
        raise SessionBusy(session_id)
    try:
        yield
    finally:
        # Don't release a lock that expired and was taken by someone else.
        if r.get(key) == token:
            r.delete(key)
