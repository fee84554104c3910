"""
Progression / Trend Analyzer Service

Frame-by-frame biomechanics over a whole clip, aggregated per joint and
classified into trends.

Confidence and consistency values here are heuristic signal-quality
proxies derived from the spread of a series. They are not calibrated
probabilities or statistical confidence intervals.
"""

import logging
import math
from typing import Optional, Sequence

import numpy as np

from ..domain.analysis import (
    BiomechanicsSummary,
    FrameBiomechanics,
    JointSeries,
    ProgressionContext,
    ProgressionReport,
    Trend,
    TrendResult,
)
from ..domain.config import EngineConfig, DEFAULT_CONFIG
from ..domain.pose import PoseFrame
from .angle_calculator import AngleCalculator
from .velocity import LEAD_WRIST, VelocityEstimator

logger = logging.getLogger(__name__)


# Per-frame metrics aggregated into the biomechanics summary
SUMMARY_METRICS = (
    "hip_angle",
    "shoulder_angle",
    "spine_angle",
    "left_elbow",
    "right_elbow",
    "left_knee",
    "right_knee",
    "wrist_speed",
    "stance_width",
)

# Trend name -> per-frame metric
TREND_METRICS = {
    "hip": "hip_angle",
    "shoulder": "shoulder_angle",
    "spine": "spine_angle",
    "left_elbow": "left_elbow",
    "right_elbow": "right_elbow",
    "left_knee": "left_knee",
    "right_knee": "right_knee",
}


def standard_deviation(values: Sequence[float]) -> float:
    """Population standard deviation, 0 for fewer than two values."""
    if len(values) < 2:
        return 0.0
    return float(np.std(values))


def consistency(values: Sequence[float]) -> float:
    """
    1 - coefficient of variation, floored at 0.

    A single value (or none) is perfectly consistent.
    """
    if len(values) <= 1:
        return 1.0

    std = standard_deviation(values)
    if std == 0:
        return 1.0

    average = float(np.mean(values))
    if average <= 0:
        return 0.0
    return max(0.0, 1.0 - std / average)


class ProgressionAnalyzer:
    """
    Analyzes how biomechanical metrics evolve across a clip.

    Usage:
        analyzer = ProgressionAnalyzer()
        report = analyzer.analyze(frames)
        report.trends["hip"].trend  # Trend.INCREASING
    """

    def __init__(self, config: EngineConfig = DEFAULT_CONFIG):
        self.stable_band = config.trend_stable_band

    # -------------------------------------------------------------------------
    # Per-frame metrics
    # -------------------------------------------------------------------------

    @staticmethod
    def frame_biomechanics(
        frame: PoseFrame,
        previous_frames: Sequence[PoseFrame] = (),
    ) -> FrameBiomechanics:
        """
        All measurable metrics of one frame.

        Metrics that are unavailable on this frame are left out rather
        than filled with a placeholder, so they never bias a trend.

        Args:
            frame: Frame to measure
            previous_frames: Earlier frames, oldest first, used for the
                wrist speed
        """
        metrics: dict[str, float] = {}

        angles = AngleCalculator.calculate_all_angles(frame)
        for name, value in (
            ("hip_angle", angles.hip_angle),
            ("shoulder_angle", angles.shoulder_angle),
            ("spine_angle", angles.spine_angle),
            ("left_elbow", angles.left_elbow),
            ("right_elbow", angles.right_elbow),
            ("left_knee", angles.left_knee),
            ("right_knee", angles.right_knee),
        ):
            if value is not None:
                metrics[name] = value

        head = AngleCalculator.head_position(frame)
        if head is not None:
            metrics["head_x"], metrics["head_y"] = head

        stance = AngleCalculator.stance_metrics(frame)
        if stance is not None:
            metrics["stance_width"], metrics["stance_offset"] = stance

        if AngleCalculator.hip_center(frame) is not None and AngleCalculator.foot_center(frame) is not None:
            metrics["weight_front"], metrics["weight_back"] = AngleCalculator.weight_distribution(frame)

        # Speed needs an earlier frame that still tracked the lead wrist
        if frame.get_landmark(LEAD_WRIST) is not None and any(
            previous.get_landmark(LEAD_WRIST) is not None for previous in previous_frames
        ):
            sequence = list(previous_frames) + [frame]
            metrics["wrist_speed"] = VelocityEstimator.velocity_at(sequence, len(sequence) - 1).magnitude

        return FrameBiomechanics(
            frame_number=frame.frame_number,
            timestamp=frame.timestamp,
            metrics=metrics,
        )

    def _frame_series(self, frames: Sequence[PoseFrame]) -> list[FrameBiomechanics]:
        return [
            self.frame_biomechanics(frame, frames[:i])
            for i, frame in enumerate(frames)
        ]

    # -------------------------------------------------------------------------
    # Trends
    # -------------------------------------------------------------------------

    def calculate_trend(self, values: Sequence[float], timespan: float) -> TrendResult:
        """
        Compare the last third of a series against the first third.

        Args:
            values: Valid per-frame values in frame order
            timespan: Clip duration in seconds, used for the slope

        Returns:
            TrendResult; INSUFFICIENT_DATA for fewer than three values
        """
        series = tuple(float(v) for v in values)
        if len(series) < 3:
            return TrendResult(trend=Trend.INSUFFICIENT_DATA, series=series)

        third = len(series) // 3
        first_avg = float(np.mean(series[:third]))
        last_avg = float(np.mean(series[-third:]))
        change = last_avg - first_avg

        if abs(change) < self.stable_band:
            trend = Trend.STABLE
        elif change > 0:
            trend = Trend.INCREASING
        else:
            trend = Trend.DECREASING

        slope = change / timespan if timespan > 0 else 0.0

        std = standard_deviation(series)
        peak = max(series)
        if std == 0:
            confidence = 1.0
        elif peak <= 0:
            confidence = 0.0
        else:
            confidence = max(0.0, 1.0 - std / peak)

        return TrendResult(
            trend=trend,
            slope=slope,
            confidence=confidence,
            change_amount=change,
            series=series,
        )

    # -------------------------------------------------------------------------
    # Clip-level analysis
    # -------------------------------------------------------------------------

    def summarize(self, frames: Sequence[PoseFrame]) -> BiomechanicsSummary:
        """Aggregate per-joint series, head stability and weight shift."""
        per_frame = self._frame_series(frames)

        joints = {}
        for name in SUMMARY_METRICS:
            series = tuple(fb.metrics[name] for fb in per_frame if name in fb.metrics)
            if not series:
                continue
            joints[name] = JointSeries(
                series=series,
                average=float(np.mean(series)),
                peak=max(series),
                consistency=consistency(series),
            )

        heads = [
            (fb.metrics["head_x"], fb.metrics["head_y"])
            for fb in per_frame
            if "head_x" in fb.metrics
        ]
        fronts = [fb.metrics["weight_front"] for fb in per_frame if "weight_front" in fb.metrics]

        return BiomechanicsSummary(
            joints=joints,
            head_stability=self.head_stability(heads),
            average_front_foot=float(np.mean(fronts)) if fronts else 50.0,
        )

    @staticmethod
    def head_stability(positions: Sequence[tuple[float, float]]) -> float:
        """1 - 10 * mean frame-to-frame head movement, floored at 0."""
        if len(positions) < 2:
            return 1.0

        movements = [
            math.hypot(cur[0] - prev[0], cur[1] - prev[1])
            for prev, cur in zip(positions, positions[1:])
        ]
        return max(0.0, 1.0 - float(np.mean(movements)) * 10.0)

    def analyze(self, frames: Sequence[PoseFrame]) -> Optional[ProgressionReport]:
        """
        Frame-by-frame progression of a clip.

        Returns:
            ProgressionReport, or None for fewer than two frames
        """
        if len(frames) < 2:
            return None

        start = frames[0].timestamp
        end = frames[-1].timestamp
        total_time = end - start
        fps = (len(frames) - 1) / total_time if total_time > 0 else 0.0

        per_frame = self._frame_series(frames)

        trends = {}
        for trend_name, metric in TREND_METRICS.items():
            values = [fb.metrics[metric] for fb in per_frame if metric in fb.metrics]
            trends[trend_name] = self.calculate_trend(values, total_time)

        logger.debug(
            "Progression over %d frames (%.2fs): %s",
            len(frames), total_time,
            ", ".join(f"{name}={result.trend.value}" for name, result in trends.items()),
        )

        return ProgressionReport(
            context=ProgressionContext(
                fps=fps,
                total_time=total_time,
                start_timestamp=start,
                end_timestamp=end,
                frame_count=len(frames),
            ),
            frames=tuple(per_frame),
            trends=trends,
        )

    @staticmethod
    def sample_frames(frames: Sequence[PoseFrame], limit: int = 15) -> list[PoseFrame]:
        """
        Evenly spaced subset of at most `limit` frames.

        The first and last frames are always kept.
        """
        if limit <= 0 or len(frames) <= limit:
            return list(frames)
        if limit == 1:
            return [frames[0]]

        step = (len(frames) - 1) / (limit - 1)
        # Round half up
        return [frames[int(math.floor(i * step + 0.5))] for i in range(limit)]
