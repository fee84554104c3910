"""
Pose History Service

Bounded, ordered buffer of the most recent smoothed frames of a session.
"""

from collections import deque
from typing import Iterator, Optional

from ..domain.pose import KeypointObservation, LandmarkRef, PoseFrame


class FrameOrderError(ValueError):
    """Raised when a frame older than the latest one is appended."""


class PoseHistory:
    """
    FIFO buffer of PoseFrames with a fixed capacity.

    Appending to a full buffer evicts the oldest frame. Frames must
    arrive in non-decreasing timestamp order.

    Single-writer: only the frame-ingestion step appends. Classifier and
    metrics code only read, and never while an append for the same
    session is in flight.
    """

    def __init__(self, capacity: int = 30):
        if capacity < 1:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._frames: deque[PoseFrame] = deque(maxlen=capacity)

    def __len__(self) -> int:
        return len(self._frames)

    def __iter__(self) -> Iterator[PoseFrame]:
        return iter(self._frames)

    def __bool__(self) -> bool:
        return bool(self._frames)

    @property
    def is_full(self) -> bool:
        return len(self._frames) == self.capacity

    def append(self, frame: PoseFrame) -> None:
        """
        Add a frame, evicting the oldest when full.

        Raises:
            FrameOrderError: if the frame is older than the latest frame
        """
        latest = self.latest
        if latest is not None and frame.timestamp < latest.timestamp:
            raise FrameOrderError(
                f"Frame {frame.frame_number} at {frame.timestamp:.3f}s is older than "
                f"frame {latest.frame_number} at {latest.timestamp:.3f}s"
            )
        self._frames.append(frame)

    def clear(self) -> None:
        self._frames.clear()

    @property
    def latest(self) -> Optional[PoseFrame]:
        return self._frames[-1] if self._frames else None

    @property
    def oldest(self) -> Optional[PoseFrame]:
        return self._frames[0] if self._frames else None

    def frame_back(self, steps: int) -> Optional[PoseFrame]:
        """Frame `steps` positions before the latest (0 = latest)."""
        if steps < 0 or steps >= len(self._frames):
            return None
        return self._frames[-1 - steps]

    def landmark(self, ref: LandmarkRef, steps_back: int = 0) -> Optional[KeypointObservation]:
        """
        Named landmark lookup, e.g. history.landmark("leftWrist").

        Returns None when the frame does not exist or the landmark is
        the missing sentinel.
        """
        frame = self.frame_back(steps_back)
        if frame is None:
            return None
        return frame.get_landmark(ref)

    def frames(self) -> list[PoseFrame]:
        """Snapshot of the buffer, oldest first."""
        return list(self._frames)

    def recent(self, count: int) -> list[PoseFrame]:
        """Up to `count` most recent frames, oldest first."""
        if count <= 0:
            return []
        return list(self._frames)[-count:]
