"""
Angle Calculator Service

Mathematical calculations for body angles used in golf swing analysis.
All angles are calculated in degrees.

This is pure mathematics - no external dependencies except numpy.
Every method returns None ("unavailable") instead of raising when a
required landmark is the missing sentinel.
"""

import math
from typing import Optional, Tuple

import numpy as np

from ..domain.pose import KeypointObservation, PoseFrame, BodyPart
from ..domain.analysis import SwingAngles

Point = Tuple[float, float]


class AngleCalculator:
    """
    Calculates biomechanical angles from pose keypoints.

    Golf-specific angles include:
    - Hip and shoulder line angles
    - Spine tilt from vertical
    - Elbow angles
    - Knee flex
    - Weight distribution between the feet

    All methods are static - no state needed. Both the live classifier
    and the batch analysis path call into this class, so every landmark
    convention lives here once.
    """

    # -------------------------------------------------------------------------
    # Core Angle Calculations
    # -------------------------------------------------------------------------

    @staticmethod
    def line_angle(
        left: Optional[KeypointObservation],
        right: Optional[KeypointObservation],
    ) -> Optional[float]:
        """
        Angle of the left->right line against the horizontal.

        Returns:
            abs(atan2(dy, dx)) in degrees (0-180), or None if either
            landmark is unavailable
        """
        if left is None or right is None or not (left.is_valid and right.is_valid):
            return None

        angle = math.degrees(math.atan2(right.y - left.y, right.x - left.x))
        return abs(angle)

    @staticmethod
    def angle_between_points(p1: Point, vertex: Point, p3: Point) -> float:
        """
        Angle at vertex formed by p1-vertex-p3, in degrees (0-180).

        Returns 0 when either arm of the angle has zero length.
        """
        v1 = np.array([p1[0] - vertex[0], p1[1] - vertex[1]], dtype=float)
        v2 = np.array([p3[0] - vertex[0], p3[1] - vertex[1]], dtype=float)

        norm1 = np.linalg.norm(v1)
        norm2 = np.linalg.norm(v2)
        if norm1 == 0 or norm2 == 0:
            return 0.0

        # Clamp to valid range (handles floating point errors)
        cos_angle = np.clip(np.dot(v1, v2) / (norm1 * norm2), -1.0, 1.0)

        return float(np.degrees(np.arccos(cos_angle)))

    @classmethod
    def calculate_angle(
        cls,
        p1: Optional[KeypointObservation],
        p2: Optional[KeypointObservation],  # Vertex point
        p3: Optional[KeypointObservation],
    ) -> Optional[float]:
        """
        Calculate angle at p2 formed by p1-p2-p3.

        Args:
            p1: First point
            p2: Vertex point (where angle is measured)
            p3: Third point

        Returns:
            Angle in degrees (0-180), or None if any landmark is unavailable

        Example:
            For elbow angle: shoulder -> elbow -> wrist
            angle = calculate_angle(shoulder, elbow, wrist)
        """
        if p1 is None or p2 is None or p3 is None:
            return None
        if not (p1.is_valid and p2.is_valid and p3.is_valid):
            return None

        return cls.angle_between_points(p1.position, p2.position, p3.position)

    # -------------------------------------------------------------------------
    # Reference Points
    # -------------------------------------------------------------------------

    @staticmethod
    def calculate_midpoint(
        p1: Optional[KeypointObservation],
        p2: Optional[KeypointObservation],
    ) -> Optional[Point]:
        """Calculate midpoint between two landmarks."""
        if p1 is None or p2 is None or not (p1.is_valid and p2.is_valid):
            return None
        return ((p1.x + p2.x) / 2, (p1.y + p2.y) / 2)

    @staticmethod
    def calculate_distance(
        p1: Optional[KeypointObservation],
        p2: Optional[KeypointObservation],
    ) -> Optional[float]:
        """Calculate 2D distance between two landmarks."""
        if p1 is None or p2 is None or not (p1.is_valid and p2.is_valid):
            return None
        return p1.distance_to(p2)

    @classmethod
    def hip_center(cls, frame: PoseFrame) -> Optional[Point]:
        return cls.calculate_midpoint(
            frame.get_landmark(BodyPart.LEFT_HIP),
            frame.get_landmark(BodyPart.RIGHT_HIP),
        )

    @classmethod
    def shoulder_center(cls, frame: PoseFrame) -> Optional[Point]:
        return cls.calculate_midpoint(
            frame.get_landmark(BodyPart.LEFT_SHOULDER),
            frame.get_landmark(BodyPart.RIGHT_SHOULDER),
        )

    @classmethod
    def foot_center(cls, frame: PoseFrame) -> Optional[Point]:
        return cls.calculate_midpoint(
            frame.get_landmark(BodyPart.LEFT_ANKLE),
            frame.get_landmark(BodyPart.RIGHT_ANKLE),
        )

    @staticmethod
    def head_position(frame: PoseFrame) -> Optional[Point]:
        """Nose position as the head reference."""
        nose = frame.get_landmark(BodyPart.NOSE)
        return nose.position if nose else None

    # -------------------------------------------------------------------------
    # Golf-Specific Angle Calculations
    # -------------------------------------------------------------------------

    @classmethod
    def hip_angle(cls, frame: PoseFrame) -> Optional[float]:
        """
        Hip line angle against the horizontal.

        Ideal: ~45° turn at top of backswing, hips lead in downswing.
        """
        return cls.line_angle(
            frame.get_landmark(BodyPart.LEFT_HIP),
            frame.get_landmark(BodyPart.RIGHT_HIP),
        )

    @classmethod
    def shoulder_angle(cls, frame: PoseFrame) -> Optional[float]:
        """
        Shoulder line angle against the horizontal.

        Ideal: ~90° turn at top of backswing.
        """
        return cls.line_angle(
            frame.get_landmark(BodyPart.LEFT_SHOULDER),
            frame.get_landmark(BodyPart.RIGHT_SHOULDER),
        )

    @classmethod
    def spine_angle(cls, frame: PoseFrame) -> Optional[float]:
        """
        Spine tilt from vertical.

        Uses the vector from mid-hip to nose with swapped atan2 axes
        (atan2(dx, dy)), so the value measures tilt away from the
        image's vertical axis.

        Returns:
            Absolute angle in degrees, or None if nose or hips are missing
        """
        nose = frame.get_landmark(BodyPart.NOSE)
        mid_hip = cls.hip_center(frame)
        if nose is None or mid_hip is None:
            return None

        dx = nose.x - mid_hip[0]
        dy = nose.y - mid_hip[1]
        return abs(math.degrees(math.atan2(dx, dy)))

    @classmethod
    def elbow_angle(cls, frame: PoseFrame, side: str = "left") -> Optional[float]:
        """
        Calculate elbow bend angle.

        Args:
            frame: Pose frame with landmarks
            side: "left" or "right"

        Returns:
            Elbow angle in degrees (180 = straight arm, 90 = right angle)
        """
        shoulder, elbow, wrist = frame.left_arm if side == "left" else frame.right_arm
        return cls.calculate_angle(shoulder, elbow, wrist)

    @classmethod
    def knee_angle(cls, frame: PoseFrame, side: str = "left") -> Optional[float]:
        """
        Calculate knee flex angle.

        Returns:
            Knee angle in degrees (180 = straight leg, 90 = deep squat)
        """
        hip, knee, ankle = frame.left_leg if side == "left" else frame.right_leg
        return cls.calculate_angle(hip, knee, ankle)

    @classmethod
    def weight_distribution(cls, frame: PoseFrame) -> Tuple[float, float]:
        """
        Estimate front/back foot weight split from hip position.

        For a right-handed golfer the left foot is the front foot.

        Returns:
            (front_pct, back_pct), (50, 50) when ankles or hips are
            unavailable or the ankles share the same x
        """
        left_ankle = frame.get_landmark(BodyPart.LEFT_ANKLE)
        right_ankle = frame.get_landmark(BodyPart.RIGHT_ANKLE)
        hip_center = cls.hip_center(frame)
        if left_ankle is None or right_ankle is None or hip_center is None:
            return (50.0, 50.0)

        total_width = abs(right_ankle.x - left_ankle.x)
        if total_width == 0:
            return (50.0, 50.0)

        front = abs(hip_center[0] - left_ankle.x) / total_width * 100
        return (front, 100 - front)

    @classmethod
    def stance_metrics(cls, frame: PoseFrame) -> Optional[Tuple[float, float]]:
        """
        Stance width and hip-over-feet offset.

        Returns:
            (ankle distance, distance from hip center to foot center),
            or None when ankles or hips are unavailable
        """
        width = cls.calculate_distance(
            frame.get_landmark(BodyPart.LEFT_ANKLE),
            frame.get_landmark(BodyPart.RIGHT_ANKLE),
        )
        hip_center = cls.hip_center(frame)
        foot_center = cls.foot_center(frame)
        if width is None or hip_center is None or foot_center is None:
            return None

        offset = math.hypot(hip_center[0] - foot_center[0], hip_center[1] - foot_center[1])
        return (width, offset)

    # -------------------------------------------------------------------------
    # Complete Frame Analysis
    # -------------------------------------------------------------------------

    @classmethod
    def calculate_all_angles(cls, frame: PoseFrame) -> SwingAngles:
        """
        Calculate all golf-relevant angles for a frame.

        Returns:
            SwingAngles with all calculated values (None for any that failed)
        """
        return SwingAngles(
            spine_angle=cls.spine_angle(frame),
            shoulder_angle=cls.shoulder_angle(frame),
            hip_angle=cls.hip_angle(frame),
            left_elbow=cls.elbow_angle(frame, "left"),
            right_elbow=cls.elbow_angle(frame, "right"),
            left_knee=cls.knee_angle(frame, "left"),
            right_knee=cls.knee_angle(frame, "right"),
        )
