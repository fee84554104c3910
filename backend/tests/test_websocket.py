import pytest


def frame_message(payload):
    data = {key: value for key, value in payload.items() if key != "frame_number"}
    return {"type": "frame", "data": data, "timestamp": 1704067200000}


@pytest.fixture
def frames(swing_payload):
    return swing_payload["frames"]


def test_connect_starts_session(client):
    with client.websocket_connect("/ws/swing") as websocket:
        message = websocket.receive_json()
        assert message["type"] == "session_started"
        assert message["data"]["session_id"]

        # Counted while open
        assert client.get("/api/health").json()["active_sessions"] == 1


def test_frame_returns_phase_result(client, frames):
    with client.websocket_connect("/ws/swing") as websocket:
        websocket.receive_json()

        websocket.send_json(frame_message(frames[0]))
        message = websocket.receive_json()

        assert message["type"] == "phase_result"
        data = message["data"]
        assert data["frame_number"] == 0
        assert data["phase"] == "address"
        assert data["phase_changed"] is True
        assert len(data["keypoints"]) == 13
        assert data["keypoints"][0]["body_part"] == "NOSE"
        assert data["metrics"]["tempo"] == 3.0


def test_frames_are_numbered_per_session(client, frames):
    with client.websocket_connect("/ws/swing") as websocket:
        websocket.receive_json()
        for payload in frames[:3]:
            websocket.send_json(frame_message(payload))
            message = websocket.receive_json()
        assert message["data"]["frame_number"] == 2


def test_out_of_order_frame_keeps_connection(client, frames):
    with client.websocket_connect("/ws/swing") as websocket:
        websocket.receive_json()
        websocket.send_json(frame_message(frames[5]))
        websocket.receive_json()

        websocket.send_json(frame_message(frames[1]))
        error = websocket.receive_json()
        assert error["type"] == "error"
        assert "older" in error["data"]["error"]

        websocket.send_json(frame_message(frames[6]))
        assert websocket.receive_json()["type"] == "phase_result"


def test_invalid_frame_data(client):
    with client.websocket_connect("/ws/swing") as websocket:
        websocket.receive_json()
        websocket.send_json({"type": "frame", "data": {"timestamp": 0.0, "image_width": 0}})

        message = websocket.receive_json()

        assert message["type"] == "error"
        assert message["data"]["error"].startswith("Invalid frame data")


def test_unknown_message_type(client):
    with client.websocket_connect("/ws/swing") as websocket:
        websocket.receive_json()
        websocket.send_json({"type": "dance"})

        message = websocket.receive_json()

        assert message["type"] == "error"
        assert "dance" in message["data"]["error"]


def test_invalid_json(client):
    with client.websocket_connect("/ws/swing") as websocket:
        websocket.receive_json()
        websocket.send_text("not json")

        assert websocket.receive_json()["data"]["error"] == "Invalid JSON"


def test_start_session_resets(client, frames):
    with client.websocket_connect("/ws/swing") as websocket:
        websocket.receive_json()
        websocket.send_json(frame_message(frames[10]))
        websocket.receive_json()

        websocket.send_json({"type": "start_session"})
        assert websocket.receive_json()["type"] == "session_started"

        # Earlier timestamps are accepted again after the reset
        websocket.send_json(frame_message(frames[0]))
        message = websocket.receive_json()
        assert message["type"] == "phase_result"
        assert message["data"]["frame_number"] == 0


def test_end_session(client, frames):
    with client.websocket_connect("/ws/swing") as websocket:
        websocket.receive_json()
        for payload in frames[:2]:
            websocket.send_json(frame_message(payload))
            websocket.receive_json()

        websocket.send_json({"type": "end_session"})
        message = websocket.receive_json()

        assert message["type"] == "session_ended"
        assert message["data"]["frames_received"] == 2
        assert message["data"]["frames_valid"] == 2
        assert message["data"]["final_phase"] == "address"
