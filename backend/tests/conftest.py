import pytest
from fastapi.testclient import TestClient

from swingiq.core.domain import (
    BodyPart,
    KeypointObservation,
    PoseFrame,
    RawLandmark,
    TRACKED_LANDMARKS,
)
from swingiq.main import app

FPS = 30.0

# Right-handed golfer standing square to the camera, hands at address
STANCE = {
    BodyPart.NOSE: (0.50, 0.20),
    BodyPart.LEFT_SHOULDER: (0.45, 0.30),
    BodyPart.RIGHT_SHOULDER: (0.55, 0.30),
    BodyPart.LEFT_ELBOW: (0.47, 0.38),
    BodyPart.RIGHT_ELBOW: (0.53, 0.38),
    BodyPart.LEFT_WRIST: (0.50, 0.35),
    BodyPart.RIGHT_WRIST: (0.55, 0.40),
    BodyPart.LEFT_HIP: (0.46, 0.55),
    BodyPart.RIGHT_HIP: (0.54, 0.55),
    BodyPart.LEFT_KNEE: (0.45, 0.70),
    BodyPart.RIGHT_KNEE: (0.55, 0.70),
    BodyPart.LEFT_ANKLE: (0.44, 0.85),
    BodyPart.RIGHT_ANKLE: (0.56, 0.85),
}


def build_frame(frame_number=0, timestamp=None, positions=None, missing=(), confidence=0.95):
    """
    PoseFrame in the default stance.

    positions overrides individual landmarks, missing lists landmarks
    replaced by the zero sentinel.
    """
    if timestamp is None:
        timestamp = frame_number / FPS
    points = dict(STANCE)
    points.update(positions or {})

    keypoints = []
    for part in TRACKED_LANDMARKS:
        if part in missing:
            keypoints.append(KeypointObservation.missing(part))
        else:
            x, y = points[part]
            keypoints.append(KeypointObservation(part, x, y, confidence))
    return PoseFrame(frame_number=frame_number, timestamp=timestamp, keypoints=tuple(keypoints))


def lead_wrist_path(i):
    """Lead wrist position at frame i of the synthetic 30-frame swing."""
    if i < 2:
        return (0.50, 0.35)                      # address
    if i < 20:
        return (0.25, 0.05)                      # top of backswing
    if i < 26:
        k = i - 20
        return (0.27 + 0.01 * k, 0.25 + 0.04 * k)  # coming down, toward the target
    if i == 26:
        return (0.45, 0.45)                      # through the ball
    if i == 27:
        return (0.68, 0.35)                      # follow through
    return (0.75, 0.10)                          # held finish


def build_swing():
    """
    30 frames at 30fps: address 0-1, backswing 2-19 (0.6s),
    downswing 20-25 (0.2s), impact 26, follow through 27-28, finish 29.
    """
    return [
        build_frame(i, positions={BodyPart.LEFT_WRIST: lead_wrist_path(i)})
        for i in range(30)
    ]


def raw_landmarks(frame, visibility=0.95, presence=0.95):
    """Provider-shaped landmarks for a frame on a square image."""
    return [
        RawLandmark(int(kp.body_part), kp.x, kp.y, visibility, presence)
        for kp in frame.keypoints
        if kp.is_valid
    ]


def frame_payload(frame, width=1000, height=1000):
    """JSON body of one provider frame."""
    return {
        "frame_number": frame.frame_number,
        "timestamp": frame.timestamp,
        "image_width": width,
        "image_height": height,
        "landmarks": [
            {"index": lm.index, "x": lm.x, "y": lm.y, "visibility": lm.visibility, "presence": lm.presence}
            for lm in raw_landmarks(frame)
        ],
    }


@pytest.fixture
def make_frame():
    return build_frame


@pytest.fixture
def swing_frames():
    return build_swing()


@pytest.fixture
def swing_payload():
    return {"frames": [frame_payload(frame) for frame in build_swing()]}


@pytest.fixture(scope="function")
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def to_raw():
    return raw_landmarks


@pytest.fixture
def to_payload():
    return frame_payload
