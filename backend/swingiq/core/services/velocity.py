"""
Velocity Estimator Service

Finite-difference velocity of a tracked landmark (the lead wrist by
default) across frames, and the "impact window" of high-speed frames.

Velocities are in normalized image units per second.
"""

import math
from dataclasses import dataclass
from typing import Optional, Sequence

from ..domain.pose import BodyPart, LandmarkRef, PoseFrame, resolve_body_part
from .pose_history import PoseHistory

# Lead wrist for a right-handed golfer
LEAD_WRIST = BodyPart.LEFT_WRIST


@dataclass(frozen=True)
class Vector:
    """2D vector used for velocities and swing-path directions."""
    dx: float = 0.0
    dy: float = 0.0

    @property
    def magnitude(self) -> float:
        return math.hypot(self.dx, self.dy)

    def dot(self, other: "Vector") -> float:
        return self.dx * other.dx + self.dy * other.dy

    def cross(self, other: "Vector") -> float:
        """Z component of self x other."""
        return self.dx * other.dy - self.dy * other.dx

    @property
    def is_zero(self) -> bool:
        return self.dx == 0.0 and self.dy == 0.0


ZERO = Vector()


class VelocityEstimator:
    """
    Landmark velocity between frames.

    Every method returns the zero vector on degenerate input: fewer than
    two valid frames, a non-positive time step, or the landmark missing
    in either frame.
    """

    @staticmethod
    def velocity_between(
        current: PoseFrame,
        previous: PoseFrame,
        part: LandmarkRef = LEAD_WRIST,
    ) -> Vector:
        """v = (position change) / (timestamp change)."""
        now = current.get_landmark(part)
        before = previous.get_landmark(part)
        if now is None or before is None:
            return ZERO

        dt = current.timestamp - previous.timestamp
        if dt <= 0:
            return ZERO

        return Vector((now.x - before.x) / dt, (now.y - before.y) / dt)

    @classmethod
    def velocity_at(
        cls,
        frames: Sequence[PoseFrame],
        index: int,
        part: LandmarkRef = LEAD_WRIST,
    ) -> Vector:
        """
        Velocity of a landmark at frames[index].

        Differences against the closest earlier frame in which the
        landmark is valid, so a single dropped detection does not zero
        the estimate.
        """
        if index < 0:
            index += len(frames)
        if index <= 0 or index >= len(frames):
            return ZERO

        body_part = resolve_body_part(part)
        current = frames[index]
        if current.get_landmark(body_part) is None:
            return ZERO

        for j in range(index - 1, -1, -1):
            if frames[j].get_landmark(body_part) is not None:
                return cls.velocity_between(current, frames[j], body_part)
        return ZERO

    @classmethod
    def latest_velocity(cls, history: PoseHistory, part: LandmarkRef = LEAD_WRIST) -> Vector:
        """Velocity at the newest frame of a session's history."""
        if len(history) < 2:
            return ZERO
        return cls.velocity_at(history.frames(), len(history) - 1, part)

    @classmethod
    def speed_series(
        cls,
        frames: Sequence[PoseFrame],
        part: LandmarkRef = LEAD_WRIST,
    ) -> list[float]:
        """Speed at every frame (0 for the first and for unavailable frames)."""
        return [cls.velocity_at(frames, i, part).magnitude for i in range(len(frames))]

    @classmethod
    def impact_window(
        cls,
        frames: Sequence[PoseFrame],
        threshold: float = 1.5,
        search_frames: Optional[int] = None,
        part: LandmarkRef = LEAD_WRIST,
    ) -> list[PoseFrame]:
        """
        Frames whose landmark speed exceeds the threshold.

        Args:
            frames: Ordered frames, oldest first
            threshold: Minimum speed in normalized units per second
            search_frames: Only consider this many trailing frames
                (velocities still use earlier frames as reference)
            part: Landmark tracked, lead wrist by default

        Returns:
            Matching frames in chronological order
        """
        start = 0
        if search_frames is not None:
            start = max(0, len(frames) - search_frames)

        return [
            frames[i]
            for i in range(start, len(frames))
            if cls.velocity_at(frames, i, part).magnitude > threshold
        ]
