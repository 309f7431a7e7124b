from __future__ import annotations

import logging

import redis
from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status

from adventure.api.deps import get_redis
from adventure.api.models import (
    DeleteSessionsResponse,
    Manifest,
    NodeView,
    Session,
    SessionMapResponse,
    SessionStartRequest,
    SessionUpdateRequest,
    SessionUpdateResponse,
)
from adventure.assets.singleton import get_manifest
from adventure.lock import session_lock
from adventure.node_graph import Bounds, build_nodes
from adventure.progression import apply_result, is_victory
from adventure.session_store import (
    create_session,
    delete_all_sessions,
    get_session,
    list_sessions,
    require_session,
    save_session,
)
from adventure.websocket_hub import hub

logger = logging.getLogger(__name__)

router = APIRouter()
api_router = APIRouter(prefix="/api")


@router.websocket("/ws/session/{session_id}")
async def session_updates_ws(websocket: WebSocket, session_id: str, r: redis.Redis = Depends(get_redis)) -> None:
    session = get_session(r=r, session_id=session_id)
    if session is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await hub.watch(websocket, session)
    try:
        # Inbound frames are ignored; clients may send pings.
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        await hub.unwatch(session_id, websocket)


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@api_router.get("/manifest", response_model=Manifest)
async def manifest_route() -> Manifest:
    return get_manifest().to_model()


@api_router.post("/session/start", response_model=Session)
async def start_session_route(payload: SessionStartRequest, r: redis.Redis = Depends(get_redis)) -> Session:
    return create_session(
        r=r,
        profile_name=payload.profile_name,
        character_id=payload.char_id,
        theme_id=payload.theme_id,
    )


@api_router.post("/session/update", response_model=SessionUpdateResponse)
async def update_session_route(payload: SessionUpdateRequest, r: redis.Redis = Depends(get_redis)) -> SessionUpdateResponse:
    with session_lock(r=r, session_id=payload.session_id):
        session = require_session(r=r, session_id=payload.session_id)
        updated = apply_result(session, payload.result)
        save_session(r=r, session=updated)

    logger.debug(
        "Session %s: node %d -> %d, stars=%d, mercy=%s",
        updated.session_id,
        session.current_node,
        updated.current_node,
        updated.total_stars,
        updated.mercy_mode,
    )
    await hub.publish(updated)
    return SessionUpdateResponse(success=True, state=updated)


@api_router.get("/session/{session_id}", response_model=Session)
async def get_session_route(session_id: str, r: redis.Redis = Depends(get_redis)) -> Session:
    return require_session(r=r, session_id=session_id)


@api_router.get("/session/{session_id}/map", response_model=SessionMapResponse)
async def session_map_route(
    session_id: str,
    width: float = Query(1280.0, gt=0),
    height: float = Query(720.0, gt=0),
    r: redis.Redis = Depends(get_redis),
) -> SessionMapResponse:
    """Node positions and statuses for the renderer, derived from the session."""

    session = require_session(r=r, session_id=session_id)
    layout = get_manifest().layout_for(session.theme_id)
    nodes = build_nodes(layout, session.current_node, Bounds(width=width, height=height))
    return SessionMapResponse(
        session_id=session.session_id,
        layout=layout,
        victory=is_victory(session),
        nodes=[NodeView(id=n.id, x=n.x, y=n.y, status=n.status) for n in nodes],
    )


@api_router.get("/admin/sessions", response_model=list[Session])
async def list_sessions_route(r: redis.Redis = Depends(get_redis)) -> list[Session]:
    return list_sessions(r=r)


@api_router.delete("/admin/sessions", response_model=DeleteSessionsResponse, status_code=status.HTTP_200_OK)
async def delete_sessions_route(r: redis.Redis = Depends(get_redis)) -> DeleteSessionsResponse:
    return DeleteSessionsResponse(success=True, deleted=delete_all_sessions(r=r))
