"""
Temporal Smoothing Service

Confidence-weighted moving average per landmark, reducing frame-to-frame
jitter in provider output.
"""

from collections import deque
from typing import Optional

from ..domain.config import EngineConfig, DEFAULT_CONFIG
from ..domain.pose import BodyPart


class TemporalSmoother:
    """
    Smooths accepted keypoints against their recent raw history.

    For each landmark the last `window` raw points are kept. A new point
    is blended with a recency-weighted average of that history:

        output = raw * (1 - factor) + weighted_history * factor

    High-confidence points get a light factor (more weight on the new
    point), everything else a heavy one. With fewer than two points in
    history the raw point is returned unchanged, so a stream starts
    without an artificial transient.

    Only accepted points should be fed in; sentinels are skipped by the
    caller and never enter the history.

    One smoother belongs to one analysis session.
    """

    def __init__(self, config: EngineConfig = DEFAULT_CONFIG):
        self.window = config.smoothing_window
        self.high_confidence = config.high_confidence
        self.light_factor = config.light_smoothing
        self.heavy_factor = config.heavy_smoothing
        self.high_weight = config.high_confidence_weight
        self.low_weight = config.low_confidence_weight
        self._history: dict[BodyPart, deque[tuple[float, float]]] = {}

    def reset(self, body_part: Optional[BodyPart] = None) -> None:
        """Forget history for one landmark, or for all of them."""
        if body_part is None:
            self._history.clear()
        else:
            self._history.pop(body_part, None)

    def history(self, body_part: BodyPart) -> list[tuple[float, float]]:
        return list(self._history.get(body_part, ()))

    def smooth(
        self,
        body_part: BodyPart,
        x: float,
        y: float,
        confidence: float,
    ) -> tuple[float, float]:
        """
        Record a raw point and return its smoothed position.

        Args:
            body_part: Landmark the point belongs to
            x, y: Raw normalized position
            confidence: Combined provider confidence of this sample

        Returns:
            Smoothed (x, y)
        """
        buf = self._history.get(body_part)
        if buf is None:
            buf = deque(maxlen=self.window)
            self._history[body_part] = buf

        buf.append((x, y))

        if len(buf) < 2:
            return (x, y)

        high = confidence > self.high_confidence
        factor = self.light_factor if high else self.heavy_factor
        scale = self.high_weight if high else self.low_weight

        # Recent points weigh more
        weighted_x = 0.0
        weighted_y = 0.0
        total_weight = 0.0
        for i, (px, py) in enumerate(buf):
            weight = (i + 1) * scale
            weighted_x += px * weight
            weighted_y += py * weight
            total_weight += weight

        avg_x = weighted_x / total_weight
        avg_y = weighted_y / total_weight

        return (
            x * (1.0 - factor) + avg_x * factor,
            y * (1.0 - factor) + avg_y * factor,
        )
