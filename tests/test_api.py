import pytest
from fastapi.testclient import TestClient

from live_tutor.api import app

WS_URL = "/api/v1/ws/lesson/roblox_studio_intro"


@pytest.fixture
def client():
    return TestClient(app)


def toolcall(*calls):
    return {"type": "toolcall", "toolCall": {"functionCalls": [{"id": i, "name": n} for i, n in calls]}}


def test_root(client):
    assert client.get("/").status_code == 200


def test_list_lessons(client):
    data = client.get("/api/v1/lessons").json()
    ids = [item["id"] for item in data["lessons"]]
    assert "roblox_studio_intro" in ids
    roblox = next(item for item in data["lessons"] if item["id"] == "roblox_studio_intro")
    assert roblox["step_count"] == 7


def test_lesson_config(client):
    resp = client.get("/api/v1/lessons/roblox_studio_intro/config")
    assert resp.status_code == 200
    body = resp.json()
    assert "systemInstruction" in body
    assert body["tools"][0]["functionDeclarations"][0]["name"] == "start_lesson"


def test_unknown_lesson_is_404(client):
    resp = client.get("/api/v1/lessons/nope/config")
    assert resp.status_code == 404
    body = resp.json()
    assert body["response_type"] == "error"
    assert "nope" in body["message"]


def test_ws_sends_initial_state(client):
    with client.websocket_connect(WS_URL) as ws:
        frame = ws.receive_json()
        assert frame["type"] == "state"
        assert frame["state"]["status"] == "IDLE"
        assert frame["state"]["connected"] is False
        assert frame["state"]["current_task"] is None


def test_ws_start_then_tool_calls(client):
    with client.websocket_connect(WS_URL) as ws:
        ws.receive_json()  # initial state

        ws.send_json({"type": "start"})
        assert ws.receive_json() == {"type": "connect"}
        assert ws.receive_json() == {"type": "send", "content": {"text": "Start the lesson"}}
        state = ws.receive_json()
        assert state["state"]["awaiting_first_response"] is True

        ws.send_json(toolcall(("a", "start_lesson"), ("b", "unknown_tool")))
        frame = ws.receive_json()
        assert frame["type"] == "toolResponse"
        responses = frame["toolResponse"]["functionResponses"]
        assert [r["id"] for r in responses] == ["a", "b"]
        assert responses[1]["response"]["result"]["string_value"] == "unknown_tool OK."
        state = ws.receive_json()["state"]
        assert state["status"] == "IN_PROGRESS"
        assert state["awaiting_first_response"] is False

        ws.send_json(toolcall(("c", "verify_step")))
        frame = ws.receive_json()
        assert frame["toolResponse"]["functionResponses"][0]["response"]["result"]["string_value"] == "Step verified"
        assert ws.receive_json()["state"]["current_index"] == 1


def test_ws_rejects_bad_frames(client):
    with client.websocket_connect(WS_URL) as ws:
        ws.receive_json()

        ws.send_text("not json")
        assert ws.receive_json()["error_code"] == "INVALID_PAYLOAD"

        ws.send_json({"data": {}})
        assert ws.receive_json()["error_code"] == "INVALID_PAYLOAD"

        ws.send_json({"type": "toolcall", "toolCall": {"functionCalls": [{"name": "x"}]}})
        assert ws.receive_json()["error_code"] == "INVALID_PAYLOAD"

        ws.send_json({"type": "dance"})
        assert ws.receive_json()["error_code"] == "UNKNOWN_EVENT"

        ws.send_json({"type": "ping"})
        ws.send_json({"type": "start"})
        assert ws.receive_json()["type"] == "connect"


def test_ws_unknown_lesson(client):
    with client.websocket_connect("/api/v1/ws/lesson/nope") as ws:
        frame = ws.receive_json()
        assert frame["type"] == "error"
        assert frame["error_code"] == "UNKNOWN_LESSON"
