from __future__ import annotations

import fakeredis
import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from adventure.websocket_hub import hub

START = {"profileName": "Ada", "charId": "bunny", "themeId": "forest"}


def test_ws_pushes_snapshot_then_updated_state(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis
    session_id = client.post("/api/session/start", json=START).json()["sessionId"]

    with client.websocket_connect(f"/ws/session/{session_id}") as ws:
        snapshot = ws.receive_json()
        assert snapshot["type"] == "session_updated"
        assert snapshot["session_id"] == session_id
        assert snapshot["state"]["currentNode"] == 0

        res = client.post("/api/session/update", json={"sessionId": session_id, "result": {"success": True, "stars": 3}})
        assert res.status_code == 200

        msg = ws.receive_json()
        assert msg["session_id"] == session_id
        # The pushed record is the same one the REST call returned.
        assert msg["state"] == res.json()["state"]
        assert msg["state"]["currentNode"] == 1
        assert msg["state"]["totalStars"] == 3


def test_ws_only_hears_its_own_session(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis
    watched = client.post("/api/session/start", json=START).json()["sessionId"]
    other = client.post("/api/session/start", json=START).json()["sessionId"]

    with client.websocket_connect(f"/ws/session/{watched}") as ws:
        ws.receive_json()
        client.post("/api/session/update", json={"sessionId": other, "result": {"success": True}})
        client.post("/api/session/update", json={"sessionId": watched, "result": {"success": False, "usedMercy": True}})

        msg = ws.receive_json()
        assert msg["session_id"] == watched
        assert msg["state"]["mercyMode"] is True


def test_ws_rejects_unknown_session(client: TestClient) -> None:
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/ws/session/missing") as ws:
            ws.receive_json()


def test_ws_watcher_is_removed_on_disconnect(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis
    session_id = client.post("/api/session/start", json=START).json()["sessionId"]

    with client.websocket_connect(f"/ws/session/{session_id}") as ws:
        ws.receive_json()
        assert hub.watcher_count(session_id) == 1

    # Publishing to nobody is a no-op.
    res = client.post("/api/session/update", json={"sessionId": session_id, "result": {"success": True}})
    assert res.status_code == 200
    assert hub.watcher_count(session_id) == 0
