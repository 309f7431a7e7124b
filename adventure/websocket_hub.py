from __future__ import annotations

import asyncio
import logging

from fastapi import WebSocket

from adventure.api.models import Session

logger = logging.getLogger(__name__)


def session_event(session: Session) -> dict[str, object]:
    """Wire message carrying the full, server-authoritative session record."""

    return {
        "type": "session_updated",
        "session_id": session.session_id,
        "state": session.model_dump(mode="json", by_alias=True),
    }


class SessionWebSocketHub:
    """Pushes session records to the sockets watching them.

    A watcher is sent the stored record when it attaches and the new record after
    every change, so a UI can render straight from the messages without polling.
    """

    def __init__(self) -> None:
        self._watchers: dict[str, set[WebSocket]] = {}
        self._lock = asyncio.Lock()

    def watcher_count(self, session_id: str) -> int:
        return len(self._watchers.get(session_id, ()))

    async def watch(self, websocket: WebSocket, snapshot: Session) -> None:
        await websocket.accept()
        async with self._lock:
            self._watchers.setdefault(snapshot.session_id, set()).add(websocket)
        await websocket.send_json(session_event(snapshot))

    async def unwatch(self, session_id: str, websocket: WebSocket) -> None:
        async with self._lock:
            sockets = self._watchers.get(session_id)
            if sockets is None:
                return
            sockets.discard(websocket)
            if not sockets:
                del self._watchers[session_id]

    async def publish(self, session: Session) -> int:
        """Send `session` to its watchers; returns how many received it."""

        async with self._lock:
            sockets = list(self._watchers.get(session.session_id, ()))

        event = session_event(session)
        delivered = 0
        for ws in sockets:
            try:
                await ws.send_json(event)
            except Exception:
                logger.debug("Dropping dead websocket for session %s", session.session_id, exc_info=True)
                await self.unwatch(session.session_id, ws)
            else:
                delivered += 1
        return delivered


hub = SessionWebSocketHub()
