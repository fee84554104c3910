"""
Swing Metrics Aggregator Service

Tempo, balance and swing-path deviation computed from phase timing and
frames, plus the 0-100 scores and fault detection built on top of them.
"""

import logging
from dataclasses import replace
from typing import Optional, Sequence

import numpy as np

from ..domain.analysis import (
    FaultSeverity,
    FaultType,
    PhaseTiming,
    SwingFault,
    SwingMetrics,
    SwingPathDirection,
    SwingPhase,
    SwingScores,
)
from ..domain.config import EngineConfig, DEFAULT_CONFIG
from ..domain.pose import BodyPart, PoseFrame
from .angle_calculator import AngleCalculator
from .velocity import LEAD_WRIST, Vector, VelocityEstimator

logger = logging.getLogger(__name__)


# Neutral values reported when a clip has too few usable frames
DEGRADED_METRICS = SwingMetrics(tempo=2.5, balance=0.75, swing_path_deviation=0.0)
DEGRADED_OVERALL_SCORE = 65.0

# Forward direction used when no address frame gives a shoulder line
DEFAULT_TARGET_LINE = Vector(1.0, 0.0)

# Balance reported when hips or ankles are not tracked
UNKNOWN_BALANCE = 0.5

# Fault limits
MIN_TEMPO = 2.0
MIN_BALANCE = 0.6
PATH_MEDIUM_LIMIT = 4.0
PATH_HIGH_LIMIT = 8.0
MIN_SPINE_ANGLE = 20.0


def _clamp_score(value: float) -> float:
    return float(np.clip(value, 0.0, 100.0))


class SwingMetricsAggregator:
    """
    Derives swing metrics from a session's frames and phase timing.

    The same code serves the live path (trailing window of the history
    buffer) and the batch path (a whole clip).

    Usage:
        aggregator = SwingMetricsAggregator()
        metrics = aggregator.compute(frames, timing, address_frame)
        scores = aggregator.score(metrics)
    """

    def __init__(self, config: EngineConfig = DEFAULT_CONFIG):
        self.config = config

    # -------------------------------------------------------------------------
    # Tempo & Balance
    # -------------------------------------------------------------------------

    def tempo(self, phase_timing: PhaseTiming) -> float:
        """
        Backswing duration / downswing duration.

        Falls back to the ideal ratio when either phase has not been
        timed yet or the downswing took no time.
        """
        backswing = phase_timing.get(SwingPhase.BACKSWING)
        downswing = phase_timing.get(SwingPhase.DOWNSWING)
        if backswing is None or downswing is None or downswing <= 0:
            return self.config.ideal_tempo
        return backswing / downswing

    @staticmethod
    def balance(frame: Optional[PoseFrame]) -> float:
        """1 - 5 * lateral offset between hip center and foot center, floored at 0."""
        if frame is None:
            return UNKNOWN_BALANCE

        hip_center = AngleCalculator.hip_center(frame)
        foot_center = AngleCalculator.foot_center(frame)
        if hip_center is None or foot_center is None:
            return UNKNOWN_BALANCE

        lateral_deviation = abs(hip_center[0] - foot_center[0])
        return max(0.0, 1.0 - lateral_deviation * 5.0)

    @classmethod
    def average_balance(cls, frames: Sequence[PoseFrame]) -> float:
        """Mean balance over the frames where it can be measured."""
        values = [
            cls.balance(frame)
            for frame in frames
            if AngleCalculator.hip_center(frame) is not None
            and AngleCalculator.foot_center(frame) is not None
        ]
        if not values:
            return UNKNOWN_BALANCE
        return float(np.mean(values))

    # -------------------------------------------------------------------------
    # Swing Path
    # -------------------------------------------------------------------------

    @staticmethod
    def target_line(address_frame: Optional[PoseFrame]) -> Vector:
        """Perpendicular to the shoulder line at address."""
        if address_frame is None:
            return DEFAULT_TARGET_LINE

        left = address_frame.get_landmark(BodyPart.LEFT_SHOULDER)
        right = address_frame.get_landmark(BodyPart.RIGHT_SHOULDER)
        if left is None or right is None:
            return DEFAULT_TARGET_LINE

        shoulder_line = Vector(right.x - left.x, right.y - left.y)
        if shoulder_line.is_zero:
            return DEFAULT_TARGET_LINE

        return Vector(-shoulder_line.dy, shoulder_line.dx)

    @staticmethod
    def club_path(impact_frames: Sequence[PoseFrame]) -> Vector:
        """Lead wrist displacement from the first to the last impact frame."""
        if len(impact_frames) < 2:
            return Vector()

        first = impact_frames[0].get_landmark(LEAD_WRIST)
        last = impact_frames[-1].get_landmark(LEAD_WRIST)
        if first is None or last is None:
            return Vector()

        return Vector(last.x - first.x, last.y - first.y)

    @staticmethod
    def deviation_angle(target: Vector, path: Vector) -> float:
        """
        Signed angle between target line and club path, in degrees.

        Negative (cross product < 0) means inside-out, positive means
        outside-in. Zero-length vectors give 0.
        """
        target_mag = target.magnitude
        path_mag = path.magnitude
        if target_mag == 0 or path_mag == 0:
            return 0.0

        cos_angle = np.clip(target.dot(path) / (target_mag * path_mag), -1.0, 1.0)
        angle = float(np.degrees(np.arccos(cos_angle)))

        if target.cross(path) < 0:
            angle = -angle
        return angle

    def swing_path_deviation(
        self,
        frames: Sequence[PoseFrame],
        address_frame: Optional[PoseFrame] = None,
        search_frames: Optional[int] = None,
    ) -> float:
        """
        Deviation of the club path through impact from the target line.

        Args:
            frames: Ordered frames, oldest first
            address_frame: Frame giving the shoulder line at setup
            search_frames: Trailing window searched for impact frames,
                None to search the whole sequence

        Returns:
            Signed degrees, 0 when there are too few frames or too few
            high-speed frames to measure
        """
        if len(frames) < self.config.impact_search_frames:
            return 0.0

        impact_frames = VelocityEstimator.impact_window(
            frames,
            threshold=self.config.impact_velocity_threshold,
            search_frames=search_frames,
        )
        if len(impact_frames) < self.config.min_impact_frames:
            return 0.0

        target = self.target_line(address_frame)
        path = self.club_path(impact_frames)
        return self.deviation_angle(target, path)

    # -------------------------------------------------------------------------
    # Aggregation
    # -------------------------------------------------------------------------

    def compute(
        self,
        frames: Sequence[PoseFrame],
        phase_timing: PhaseTiming,
        address_frame: Optional[PoseFrame] = None,
        live: bool = True,
    ) -> SwingMetrics:
        """
        Compute all three metrics.

        Live mode measures balance on the latest frame and searches the
        trailing impact window; batch mode averages balance over every
        frame and searches the whole clip.
        """
        if live:
            balance = self.balance(frames[-1] if frames else None)
            search_frames: Optional[int] = self.config.impact_search_frames
        else:
            balance = self.average_balance(frames)
            search_frames = None

        return SwingMetrics(
            tempo=self.tempo(phase_timing),
            balance=balance,
            swing_path_deviation=self.swing_path_deviation(frames, address_frame, search_frames),
            on_plane_tolerance=self.config.on_plane_tolerance,
        )

    def tempo_score(self, tempo: float) -> float:
        """100 at the ideal ratio, dropping 25 points per unit away from it."""
        return _clamp_score((4.0 - abs(tempo - self.config.ideal_tempo)) / 4.0 * 100.0)

    @staticmethod
    def balance_score(balance: float) -> float:
        return _clamp_score(balance * 100.0)

    @staticmethod
    def path_score(deviation: float) -> float:
        return _clamp_score(100.0 - abs(deviation) * 5.0)

    def score(self, metrics: SwingMetrics) -> SwingScores:
        """0-100 sub-scores and their mean."""
        tempo = self.tempo_score(metrics.tempo)
        balance = self.balance_score(metrics.balance)
        path = self.path_score(metrics.swing_path_deviation)
        return SwingScores(
            overall=(tempo + balance + path) / 3.0,
            tempo=tempo,
            balance=balance,
            swing_path=path,
        )

    def degraded_metrics(self) -> SwingMetrics:
        return replace(DEGRADED_METRICS, on_plane_tolerance=self.config.on_plane_tolerance)

    def degraded_scores(self) -> SwingScores:
        """Scores reported alongside DEGRADED_METRICS."""
        scores = self.score(DEGRADED_METRICS)
        return SwingScores(
            overall=DEGRADED_OVERALL_SCORE,
            tempo=scores.tempo,
            balance=scores.balance,
            swing_path=scores.swing_path,
        )

    # -------------------------------------------------------------------------
    # Fault Detection
    # -------------------------------------------------------------------------

    def detect_faults(
        self,
        metrics: SwingMetrics,
        average_spine_angle: Optional[float] = None,
    ) -> list[SwingFault]:
        """
        Flag metrics outside their acceptable ranges.

        Returns:
            Faults in a fixed order: posture, swing path, tempo, balance
        """
        faults = []

        if average_spine_angle is not None and average_spine_angle < MIN_SPINE_ANGLE:
            faults.append(SwingFault(FaultType.POSTURE, FaultSeverity.MEDIUM, average_spine_angle))

        deviation = metrics.swing_path_deviation
        if abs(deviation) > PATH_MEDIUM_LIMIT:
            severity = FaultSeverity.HIGH if abs(deviation) > PATH_HIGH_LIMIT else FaultSeverity.MEDIUM
            direction = SwingPathDirection.INSIDE_OUT if deviation < 0 else SwingPathDirection.OUTSIDE_IN
            faults.append(SwingFault(FaultType.SWING_PATH, severity, deviation, direction))

        if metrics.tempo < MIN_TEMPO:
            faults.append(SwingFault(FaultType.TEMPO, FaultSeverity.MEDIUM, metrics.tempo))

        if metrics.balance < MIN_BALANCE:
            faults.append(SwingFault(FaultType.BALANCE, FaultSeverity.MEDIUM, metrics.balance))

        if faults:
            logger.debug("Detected %d swing faults", len(faults))
        return faults
