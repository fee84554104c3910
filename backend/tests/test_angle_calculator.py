import math

import pytest

from swingiq.core.domain import BodyPart, KeypointObservation, PoseFrame, SwingAngles
from swingiq.core.domain.pose import empty_keypoints
from swingiq.core.services import AngleCalculator


def kp(x, y, part=BodyPart.NOSE, confidence=0.9):
    return KeypointObservation(part, x, y, confidence)


# =============================================================================
# Three-point angles
# =============================================================================

def test_collinear_points_give_straight_angle():
    assert AngleCalculator.calculate_angle(kp(0, 0), kp(0.5, 0.5), kp(1, 1)) == pytest.approx(180.0)


def test_points_in_same_direction_give_zero():
    assert AngleCalculator.calculate_angle(kp(1, 0), kp(0, 0), kp(2, 0)) == pytest.approx(0.0, abs=1e-6)


def test_right_angle():
    assert AngleCalculator.calculate_angle(kp(0, 1), kp(0, 0), kp(1, 0)) == pytest.approx(90.0)


def test_zero_length_arm_gives_zero():
    assert AngleCalculator.angle_between_points((0.3, 0.3), (0.3, 0.3), (0.5, 0.1)) == 0.0


def test_sentinel_points_are_unavailable():
    missing = KeypointObservation.missing(BodyPart.LEFT_ELBOW)
    assert AngleCalculator.calculate_angle(kp(0, 0), missing, kp(1, 1)) is None
    assert AngleCalculator.calculate_angle(None, kp(0, 0), kp(1, 1)) is None
    assert AngleCalculator.line_angle(missing, missing) is None
    assert AngleCalculator.calculate_midpoint(missing, kp(0, 0)) is None
    assert AngleCalculator.calculate_distance(kp(0, 0), missing) is None


def test_distance():
    assert AngleCalculator.calculate_distance(kp(0.1, 0.1), kp(0.4, 0.5)) == pytest.approx(0.5)


# =============================================================================
# Frame angles
# =============================================================================

def test_level_shoulders(make_frame):
    assert AngleCalculator.shoulder_angle(make_frame()) == pytest.approx(0.0)


def test_tilted_hips(make_frame):
    frame = make_frame(positions={
        BodyPart.LEFT_HIP: (0.45, 0.50),
        BodyPart.RIGHT_HIP: (0.55, 0.60),
    })
    assert AngleCalculator.hip_angle(frame) == pytest.approx(45.0)


def test_straight_lead_arm(make_frame):
    frame = make_frame(positions={
        BodyPart.LEFT_SHOULDER: (0.40, 0.30),
        BodyPart.LEFT_ELBOW: (0.40, 0.40),
        BodyPart.LEFT_WRIST: (0.40, 0.50),
    })
    assert AngleCalculator.elbow_angle(frame, "left") == pytest.approx(180.0)


def test_bent_trail_knee(make_frame):
    frame = make_frame(positions={
        BodyPart.RIGHT_HIP: (0.55, 0.55),
        BodyPart.RIGHT_KNEE: (0.55, 0.70),
        BodyPart.RIGHT_ANKLE: (0.70, 0.70),
    })
    assert AngleCalculator.knee_angle(frame, "right") == pytest.approx(90.0)


def test_spine_angle_uses_nose_over_mid_hip(make_frame):
    frame = make_frame(positions={BodyPart.NOSE: (0.65, 0.40)})
    # Mid-hip is (0.5, 0.55)
    expected = abs(math.degrees(math.atan2(0.15, -0.15)))
    assert AngleCalculator.spine_angle(frame) == pytest.approx(expected)


def test_spine_angle_without_nose(make_frame):
    assert AngleCalculator.spine_angle(make_frame(missing=(BodyPart.NOSE,))) is None


def test_weight_distribution(make_frame):
    frame = make_frame(positions={
        BodyPart.LEFT_HIP: (0.45, 0.55),
        BodyPart.RIGHT_HIP: (0.49, 0.55),
    })
    front, back = AngleCalculator.weight_distribution(frame)
    # Hip center 0.47 between ankles at 0.44 and 0.56
    assert front == pytest.approx(25.0)
    assert back == pytest.approx(75.0)


def test_weight_distribution_defaults(make_frame):
    assert AngleCalculator.weight_distribution(make_frame(missing=(BodyPart.LEFT_ANKLE,))) == (50.0, 50.0)

    same_x = make_frame(positions={
        BodyPart.LEFT_ANKLE: (0.5, 0.85),
        BodyPart.RIGHT_ANKLE: (0.5, 0.86),
    })
    assert AngleCalculator.weight_distribution(same_x) == (50.0, 50.0)


def test_stance_metrics(make_frame):
    width, offset = AngleCalculator.stance_metrics(make_frame())
    assert width == pytest.approx(0.12)
    assert offset == pytest.approx(0.30)


def test_empty_frame_is_unavailable_everywhere():
    frame = PoseFrame(frame_number=0, timestamp=0.0, keypoints=empty_keypoints())

    assert AngleCalculator.calculate_all_angles(frame) == SwingAngles()
    assert AngleCalculator.hip_center(frame) is None
    assert AngleCalculator.head_position(frame) is None
    assert AngleCalculator.stance_metrics(frame) is None
    assert AngleCalculator.weight_distribution(frame) == (50.0, 50.0)


def test_all_angles_on_full_frame(make_frame):
    angles = AngleCalculator.calculate_all_angles(make_frame())
    for value in (
        angles.spine_angle,
        angles.shoulder_angle,
        angles.hip_angle,
        angles.left_elbow,
        angles.right_elbow,
        angles.left_knee,
        angles.right_knee,
    ):
        assert value is not None
        assert 0.0 <= value <= 180.0
