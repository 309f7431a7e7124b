"""Client side of the session sync protocol.

The server owns every progression field. The client sends challenge results and
replaces its cached session with whatever comes back. When the server cannot be
reached at session start the client may play an offline session instead; those
live in their own id namespace and are never sent to the server.
"""
from __future__ import annotations

import logging
import os
from types import TracebackType
from typing import Any, Protocol
from uuid import uuid4

import httpx

from adventure.api.models import Manifest, ProgressResult, Session, SessionUpdateResponse
from adventure.errors import ApiUnavailable, SessionBusy, SessionCompleted, SessionNotFound
from adventure.progression import START_LEVEL, apply_result

logger = logging.getLogger(__name__)

OFFLINE_PREFIX = "offline-"


def get_api_url() -> str:
    return os.environ.get("ADVENTURE_API_URL", "http://localhost:8000")


def is_offline_session_id(session_id: str) -> bool:
    return session_id.startswith(OFFLINE_PREFIX)


class AdventureClient:
    def __init__(
        self,
        *,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 5.0,
    ) -> None:
        self._http = httpx.AsyncClient(base_url=base_url or get_api_url(), transport=transport, timeout=timeout)

    async def __aenter__(self) -> "AdventureClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            resp = await self._http.request(method, path, **kwargs)
        except httpx.TransportError as e:
            raise ApiUnavailable(f"{method} {path}: {e}") from e
        if resp.status_code >= 500:
            raise ApiUnavailable(f"{method} {path}: HTTP {resp.status_code}")
        return resp

    async def get_manifest(self) -> Manifest:
        resp = await self._request("GET", "/api/manifest")
        resp.raise_for_status()
        return Manifest.model_validate(resp.json())

    async def start_session(self, *, profile_name: str, char_id: str, theme_id: str) -> Session:
        body = {"profileName": profile_name, "charId": char_id, "themeId": theme_id}
        resp = await self._request("POST", "/api/session/start", json=body)
        resp.raise_for_status()
        return Session.model_validate(resp.json())

    async def get_session(self, session_id: str) -> Session:
        resp = await self._request("GET", f"/api/session/{session_id}")
        if resp.status_code == 404:
            raise SessionNotFound(session_id)
        resp.raise_for_status()
        return Session.model_validate(resp.json())

    async def update_progress(self, session_id: str, result: ProgressResult) -> Session:
        body = {"sessionId": session_id, "result": result.model_dump(by_alias=True)}
        resp = await self._request("POST", "/api/session/update", json=body)
        if resp.status_code == 404:
            raise SessionNotFound(session_id)
        if resp.status_code == 409:
            if resp.json().get("error") == "Session is busy":
                raise SessionBusy(session_id)
            raise SessionCompleted(session_id)
        resp.raise_for_status()
        return SessionUpdateResponse.model_validate(resp.json()).state


class SessionBackend(Protocol):
    async def start(self, *, profile_name: str, char_id: str, theme_id: str) -> Session: ...

    async def apply(self, session_id: str, result: ProgressResult) -> Session: ...


class RemoteBackend:
    def __init__(self, client: AdventureClient) -> None:
        self.client = client

    async def start(self, *, profile_name: str, char_id: str, theme_id: str) -> Session:
        return await self.client.start_session(profile_name=profile_name, char_id=char_id, theme_id=theme_id)

    async def apply(self, session_id: str, result: ProgressResult) -> Session:
        if is_offline_session_id(session_id):
            raise ValueError("Offline sessions are never sent to the server")
        return await self.client.update_progress(session_id, result)


class OfflineBackend:
    """Degraded local play. Same rules as the server, kept in memory, never synced."""

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}

    async def start(self, *, profile_name: str, char_id: str, theme_id: str) -> Session:
        session = Session(
            session_id=f"{OFFLINE_PREFIX}{uuid4()}",
            profile_name=profile_name,
            character_id=char_id,
            theme_id=theme_id,
            current_level=START_LEVEL,
        )
        self._sessions[session.session_id] = session
        return session

    async def apply(self, session_id: str, result: ProgressResult) -> Session:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        updated = apply_result(session, result)
        self._sessions[session_id] = updated
        return updated


async def start_session_with_fallback(
    remote: RemoteBackend,
    offline: OfflineBackend,
    *,
    profile_name: str,
    char_id: str,
    theme_id: str,
) -> tuple[Session, SessionBackend]:
    """Start on the server; drop to an offline session only on a transient failure."""

    try:
        session = await remote.start(profile_name=profile_name, char_id=char_id, theme_id=theme_id)
        return session, remote
    except ApiUnavailable as e:
        logger.warning("Server unreachable (%s); starting offline session", e)
        session = await offline.start(profile_name=profile_name, char_id=char_id, theme_id=theme_id)
        return session, offline
