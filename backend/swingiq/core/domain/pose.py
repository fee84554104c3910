"""
Pose Domain Models

Data structures for representing the body landmarks a pose provider
reports and the per-frame keypoint arrays the engine works on.

The provider follows the MediaPipe 33-point pose model:
https://developers.google.com/mediapipe/solutions/vision/pose_landmarker

Only the 13 landmarks relevant to a golf swing are kept. Every frame
carries all 13 in the same order; a landmark that was not detected is
stored as the zero sentinel (position (0, 0), confidence 0) so that
indexing stays fixed across the whole session.
"""

import re
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Union


class BodyPart(IntEnum):
    """
    MediaPipe Pose landmark indices tracked for swing analysis.

    Right-handed golfer convention: the left side is the lead side.
    """
    NOSE = 0

    # Upper body
    LEFT_SHOULDER = 11
    RIGHT_SHOULDER = 12
    LEFT_ELBOW = 13
    RIGHT_ELBOW = 14
    LEFT_WRIST = 15
    RIGHT_WRIST = 16

    # Lower body
    LEFT_HIP = 23
    RIGHT_HIP = 24
    LEFT_KNEE = 25
    RIGHT_KNEE = 26
    LEFT_ANKLE = 27
    RIGHT_ANKLE = 28

    @classmethod
    def from_name(cls, name: str) -> "BodyPart":
        """
        Resolve a semantic role name to a body part.

        Accepts enum names ("LEFT_WRIST"), snake case ("left_wrist")
        and camel case ("leftWrist").

        Raises:
            ValueError: if the name is not a tracked landmark
        """
        key = name.strip()
        if "_" not in key and not key.isupper():
            # camelCase -> CAMEL_CASE
            key = re.sub(r"(?<!^)(?=[A-Z])", "_", key)
        key = key.upper()
        try:
            return cls[key]
        except KeyError:
            raise ValueError(f"Unknown landmark name: {name!r}") from None


# Fixed ordering of keypoint arrays in every PoseFrame
TRACKED_LANDMARKS: tuple[BodyPart, ...] = (
    BodyPart.NOSE,
    BodyPart.LEFT_SHOULDER,
    BodyPart.RIGHT_SHOULDER,
    BodyPart.LEFT_ELBOW,
    BodyPart.RIGHT_ELBOW,
    BodyPart.LEFT_WRIST,
    BodyPart.RIGHT_WRIST,
    BodyPart.LEFT_HIP,
    BodyPart.RIGHT_HIP,
    BodyPart.LEFT_KNEE,
    BodyPart.RIGHT_KNEE,
    BodyPart.LEFT_ANKLE,
    BodyPart.RIGHT_ANKLE,
)

KEYPOINT_COUNT = len(TRACKED_LANDMARKS)

_POSITION = {part: position for position, part in enumerate(TRACKED_LANDMARKS)}


def keypoint_position(body_part: BodyPart) -> int:
    """Position of a body part inside a frame's keypoint array."""
    return _POSITION[body_part]


LandmarkRef = Union[BodyPart, str]


def resolve_body_part(ref: LandmarkRef) -> BodyPart:
    """Accept either a BodyPart or a semantic role name."""
    if isinstance(ref, BodyPart):
        return ref
    return BodyPart.from_name(ref)


@dataclass(frozen=True)
class RawLandmark:
    """
    A single landmark as reported by the pose provider.

    Attributes:
        index: MediaPipe landmark index (0-32)
        x: Horizontal position, normalized to the provider's input square
        y: Vertical position, normalized to the provider's input square
        visibility: Likelihood the landmark is not occluded (0.0 to 1.0)
        presence: Likelihood the landmark is inside the image (0.0 to 1.0)
    """
    index: int
    x: float
    y: float
    visibility: float = 0.0
    presence: float = 0.0

    @property
    def combined_confidence(self) -> float:
        """Average of visibility and presence."""
        return (self.visibility + self.presence) / 2.0


@dataclass(frozen=True)
class RawFrame:
    """
    Provider output for one frame of a recorded clip.

    An empty landmarks tuple means the provider found nobody in the frame.
    """
    frame_number: int
    timestamp: float
    image_width: int
    image_height: int
    landmarks: tuple[RawLandmark, ...] = ()


@dataclass(frozen=True)
class KeypointObservation:
    """
    One tracked landmark in true-image normalized coordinates.

    Attributes:
        body_part: Which landmark this is
        x: Horizontal position (0.0 = left edge, 1.0 = right edge)
        y: Vertical position (0.0 = top edge, 1.0 = bottom edge)
        confidence: Combined provider confidence, 0 for the missing sentinel
    """
    body_part: BodyPart
    x: float = 0.0
    y: float = 0.0
    confidence: float = 0.0

    @classmethod
    def missing(cls, body_part: BodyPart) -> "KeypointObservation":
        """The zero sentinel used in place of a rejected landmark."""
        return cls(body_part=body_part, x=0.0, y=0.0, confidence=0.0)

    @property
    def is_valid(self) -> bool:
        return self.confidence > 0.0

    @property
    def position(self) -> tuple[float, float]:
        return (self.x, self.y)

    def to_pixel(self, width: int, height: int) -> tuple[int, int]:
        """Convert normalized coordinates to pixel coordinates."""
        return (int(self.x * width), int(self.y * height))

    def distance_to(self, other: "KeypointObservation") -> float:
        """Euclidean distance to another keypoint in normalized units."""
        return ((self.x - other.x) ** 2 + (self.y - other.y) ** 2) ** 0.5


@dataclass(frozen=True)
class PoseFrame:
    """
    Smoothed keypoints for a single processed video or camera frame.

    Attributes:
        frame_number: Monotonic frame counter
        timestamp: Capture time in seconds
        keypoints: One observation per entry of TRACKED_LANDMARKS, in order
    """
    frame_number: int
    timestamp: float
    keypoints: tuple[KeypointObservation, ...]

    def __post_init__(self) -> None:
        if len(self.keypoints) != KEYPOINT_COUNT:
            raise ValueError(
                f"PoseFrame needs {KEYPOINT_COUNT} keypoints, got {len(self.keypoints)}"
            )
        # Tuples keep the frame immutable even when built from a list
        if not isinstance(self.keypoints, tuple):
            object.__setattr__(self, "keypoints", tuple(self.keypoints))

    def keypoint(self, ref: LandmarkRef) -> KeypointObservation:
        """Get the stored observation (possibly the sentinel)."""
        return self.keypoints[keypoint_position(resolve_body_part(ref))]

    def get_landmark(self, ref: LandmarkRef) -> Optional[KeypointObservation]:
        """Get a landmark, or None when it is the missing sentinel."""
        observation = self.keypoint(ref)
        return observation if observation.is_valid else None

    @property
    def valid_count(self) -> int:
        return sum(1 for kp in self.keypoints if kp.is_valid)

    @property
    def has_keypoints(self) -> bool:
        """True when at least one landmark was accepted."""
        return self.valid_count > 0

    # -------------------------------------------------------------------------
    # Convenience accessors for common landmark groups
    # -------------------------------------------------------------------------

    @property
    def left_arm(self) -> tuple[Optional[KeypointObservation], ...]:
        """Lead arm landmarks (shoulder, elbow, wrist)."""
        return (
            self.get_landmark(BodyPart.LEFT_SHOULDER),
            self.get_landmark(BodyPart.LEFT_ELBOW),
            self.get_landmark(BodyPart.LEFT_WRIST),
        )

    @property
    def right_arm(self) -> tuple[Optional[KeypointObservation], ...]:
        """Trail arm landmarks (shoulder, elbow, wrist)."""
        return (
            self.get_landmark(BodyPart.RIGHT_SHOULDER),
            self.get_landmark(BodyPart.RIGHT_ELBOW),
            self.get_landmark(BodyPart.RIGHT_WRIST),
        )

    @property
    def left_leg(self) -> tuple[Optional[KeypointObservation], ...]:
        return (
            self.get_landmark(BodyPart.LEFT_HIP),
            self.get_landmark(BodyPart.LEFT_KNEE),
            self.get_landmark(BodyPart.LEFT_ANKLE),
        )

    @property
    def right_leg(self) -> tuple[Optional[KeypointObservation], ...]:
        return (
            self.get_landmark(BodyPart.RIGHT_HIP),
            self.get_landmark(BodyPart.RIGHT_KNEE),
            self.get_landmark(BodyPart.RIGHT_ANKLE),
        )


def empty_keypoints() -> tuple[KeypointObservation, ...]:
    """A keypoint array made only of sentinels."""
    return tuple(KeypointObservation.missing(part) for part in TRACKED_LANDMARKS)
