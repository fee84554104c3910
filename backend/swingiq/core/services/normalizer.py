"""
Coordinate Normalizer Service

Turns raw provider landmarks into the fixed-length keypoint array the
engine works on.

The pose provider letterboxes every image into a square of side
max(width, height) before running the model, so its normalized output
is relative to that square. This module undoes the padding, applies the
confidence gate, and substitutes the zero sentinel for anything that
is rejected.
"""

import logging
from typing import Iterable, Mapping, Optional, Union

from ..domain.config import EngineConfig, DEFAULT_CONFIG
from ..domain.pose import (
    TRACKED_LANDMARKS,
    KeypointObservation,
    RawLandmark,
)
from .smoothing import TemporalSmoother

logger = logging.getLogger(__name__)


def unletterbox(
    x: float,
    y: float,
    image_width: float,
    image_height: float,
) -> tuple[float, float]:
    """
    Map a point normalized to the letterbox square back to the image.

    Args:
        x, y: Position normalized to the square (0-1)
        image_width, image_height: True image size in pixels

    Returns:
        Position normalized to the true image. May fall outside [0, 1]
        when the provider placed the point in the padding.

    Raises:
        ValueError: if either dimension is not positive
    """
    if image_width <= 0 or image_height <= 0:
        raise ValueError(f"Invalid image size: {image_width}x{image_height}")

    side = max(image_width, image_height)
    pad_x = (side - image_width) / 2   # 0 for landscape frames
    pad_y = (side - image_height) / 2  # 0 for portrait frames

    abs_x = x * side - pad_x
    abs_y = y * side - pad_y

    return (abs_x / image_width, abs_y / image_height)


def is_in_frame(x: float, y: float) -> bool:
    """Both coordinates inside the normalized image."""
    return 0.0 <= x <= 1.0 and 0.0 <= y <= 1.0


LandmarkInput = Union[Mapping[int, RawLandmark], Iterable[RawLandmark]]


class KeypointNormalizer:
    """
    Validates and normalizes provider landmarks.

    A landmark is accepted only if its combined confidence and both
    individual scores clear the configured gates and its unletterboxed
    position lies inside the image.

    Usage:
        normalizer = KeypointNormalizer()
        keypoints = normalizer.build_keypoints(landmarks, 1920, 1080, smoother)
        frame = PoseFrame(frame_number=0, timestamp=0.0, keypoints=keypoints)
    """

    def __init__(self, config: EngineConfig = DEFAULT_CONFIG):
        self.min_combined = config.min_combined_confidence
        self.min_visibility = config.min_visibility
        self.min_presence = config.min_presence

    def accepts(self, landmark: RawLandmark) -> bool:
        """Apply the provider confidence gate."""
        return (
            landmark.combined_confidence > self.min_combined
            and landmark.visibility > self.min_visibility
            and landmark.presence > self.min_presence
        )

    def normalize(
        self,
        landmark: RawLandmark,
        image_width: float,
        image_height: float,
    ) -> Optional[tuple[float, float, float]]:
        """
        Normalize a single landmark.

        Returns:
            (x, y, confidence) in true-image coordinates, or None when
            the landmark must be replaced by the sentinel
        """
        if not self.accepts(landmark):
            logger.debug(
                "Landmark %d filtered out - visibility %.2f, presence %.2f",
                landmark.index, landmark.visibility, landmark.presence,
            )
            return None

        x, y = unletterbox(landmark.x, landmark.y, image_width, image_height)
        if not is_in_frame(x, y):
            logger.debug("Landmark %d out of bounds - x %.3f, y %.3f", landmark.index, x, y)
            return None

        return (x, y, landmark.combined_confidence)

    def build_keypoints(
        self,
        landmarks: LandmarkInput,
        image_width: float,
        image_height: float,
        smoother: Optional[TemporalSmoother] = None,
    ) -> tuple[KeypointObservation, ...]:
        """
        Build the fixed-length keypoint array for one frame.

        Args:
            landmarks: Provider landmarks, either a mapping by index or
                any iterable of RawLandmark (extra indices are ignored)
            image_width, image_height: True image size in pixels
            smoother: Session smoother applied to accepted points

        Returns:
            One observation per tracked landmark, sentinels for the rest
        """
        if isinstance(landmarks, Mapping):
            by_index = dict(landmarks)
        else:
            by_index = {lm.index: lm for lm in landmarks}

        keypoints = []
        for part in TRACKED_LANDMARKS:
            raw = by_index.get(int(part))
            normalized = None
            if raw is not None:
                normalized = self.normalize(raw, image_width, image_height)

            if normalized is None:
                keypoints.append(KeypointObservation.missing(part))
                continue

            x, y, confidence = normalized
            if smoother is not None:
                x, y = smoother.smooth(part, x, y, confidence)
            keypoints.append(KeypointObservation(body_part=part, x=x, y=y, confidence=confidence))

        return tuple(keypoints)
