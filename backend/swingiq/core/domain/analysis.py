"""
Swing Analysis Domain Models

Data structures for representing swing analysis results: phases,
metrics, scores, biomechanics summaries and trends.

These are plain records. Nothing here knows about JSON, reports or
any other output format.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .pose import PoseFrame


class SwingPhase(Enum):
    """
    Phases emitted by the rule-based classifier.

    The sequence is not strictly monotonic: the classifier may hold a
    phase, fall back to UNKNOWN when landmarks drop out, or return to
    ADDRESS to start the next swing.
    """
    UNKNOWN = "unknown"
    ADDRESS = "address"
    TAKEAWAY = "takeaway"
    BACKSWING = "backswing"
    DOWNSWING = "downswing"
    IMPACT = "impact"
    FOLLOW_THROUGH = "follow_through"
    FINISH = "finish"


# Seconds spent in each phase entered during the current swing
PhaseTiming = dict[SwingPhase, float]


class SwingPathDirection(Enum):
    """Club approach relative to the target line."""
    ON_PLANE = "on_plane"
    INSIDE_OUT = "inside_out"
    OUTSIDE_IN = "outside_in"


@dataclass(frozen=True)
class SwingAngles:
    """
    Key angles measured on one frame.

    All angles are in degrees. None means the angle couldn't be
    calculated (landmarks not visible).
    """
    spine_angle: Optional[float] = None       # Tilt from vertical, nose over mid-hip
    shoulder_angle: Optional[float] = None    # Shoulder line vs horizontal
    hip_angle: Optional[float] = None         # Hip line vs horizontal
    left_elbow: Optional[float] = None        # Lead arm bend
    right_elbow: Optional[float] = None       # Trail arm bend
    left_knee: Optional[float] = None         # Lead knee flex
    right_knee: Optional[float] = None        # Trail knee flex


@dataclass(frozen=True)
class SwingMetrics:
    """
    Core swing metrics.

    Attributes:
        tempo: Backswing duration / downswing duration
        balance: 0-1, penalizes lateral hip sway over the feet
        swing_path_deviation: Degrees, negative = inside-out,
            positive = outside-in
        on_plane_tolerance: Deviation (degrees) still reported as on plane
    """
    tempo: float
    balance: float
    swing_path_deviation: float
    on_plane_tolerance: float = field(default=2.0, compare=False)

    def swing_path_direction(self) -> SwingPathDirection:
        if abs(self.swing_path_deviation) < self.on_plane_tolerance:
            return SwingPathDirection.ON_PLANE
        if self.swing_path_deviation < 0:
            return SwingPathDirection.INSIDE_OUT
        return SwingPathDirection.OUTSIDE_IN


@dataclass(frozen=True)
class SwingScores:
    """0-100 sub-scores and their average."""
    overall: float
    tempo: float
    balance: float
    swing_path: float


class FaultType(Enum):
    POSTURE = "posture"
    SWING_PATH = "swing_path"
    TEMPO = "tempo"
    BALANCE = "balance"


class FaultSeverity(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class SwingFault:
    """
    A detected swing fault.

    Attributes:
        fault_type: Which aspect of the swing is off
        severity: How far outside the acceptable range it is
        value: The measurement that triggered the fault
        direction: Path direction for swing path faults
    """
    fault_type: FaultType
    severity: FaultSeverity
    value: float
    direction: Optional[SwingPathDirection] = None


@dataclass(frozen=True)
class PhaseSegment:
    """A contiguous run of frames classified as the same phase."""
    phase: SwingPhase
    start_frame: int
    end_frame: int
    duration: float


@dataclass(frozen=True)
class JointSeries:
    """
    One biomechanical measurement aggregated over a clip.

    consistency is a heuristic signal-quality proxy (1 - coefficient of
    variation), not a calibrated probability.
    """
    series: tuple[float, ...]
    average: float
    peak: float
    consistency: float


@dataclass(frozen=True)
class BiomechanicsSummary:
    """
    Per-joint series and aggregates over a full frame set.

    Attributes:
        joints: Metric name -> aggregated series
        head_stability: 1 - 10 * mean frame-to-frame nose movement, floored at 0
        average_front_foot: Mean front-foot weight percentage
    """
    joints: dict[str, JointSeries] = field(default_factory=dict)
    head_stability: float = 1.0
    average_front_foot: float = 50.0

    def get(self, name: str) -> Optional[JointSeries]:
        return self.joints.get(name)


class Trend(str, Enum):
    STABLE = "stable"
    INCREASING = "increasing"
    DECREASING = "decreasing"
    INSUFFICIENT_DATA = "insufficient_data"


@dataclass(frozen=True)
class TrendResult:
    """
    Direction of a per-frame metric over a clip.

    Attributes:
        trend: Classification of last-third vs first-third averages
        slope: change_amount / clip duration (units per second)
        confidence: Heuristic consistency figure in [0, 1]; not a
            statistical confidence interval
        change_amount: Last-third average minus first-third average
        series: The valid per-frame values the trend was computed from
    """
    trend: Trend
    slope: float = 0.0
    confidence: float = 0.0
    change_amount: float = 0.0
    series: tuple[float, ...] = ()


@dataclass(frozen=True)
class ProgressionContext:
    """Timing context of a clip."""
    fps: float
    total_time: float
    start_timestamp: float
    end_timestamp: float
    frame_count: int


@dataclass(frozen=True)
class FrameBiomechanics:
    """Valid metrics of one frame (unavailable metrics are absent)."""
    frame_number: int
    timestamp: float
    metrics: dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class ProgressionReport:
    """Frame-by-frame metrics and their trends over a clip."""
    context: ProgressionContext
    frames: tuple[FrameBiomechanics, ...]
    trends: dict[str, TrendResult]

    @property
    def valid_frames(self) -> int:
        return len(self.frames)


@dataclass
class SwingAnalysisResult:
    """
    Complete analysis of one clip.

    degraded is set when the clip had too few usable frames; metrics and
    scores then hold documented neutral defaults.
    """
    metrics: SwingMetrics
    scores: SwingScores
    total_frames: int
    valid_frames: int
    degraded: bool = False
    final_phase: SwingPhase = SwingPhase.UNKNOWN
    phases: list[PhaseSegment] = field(default_factory=list)
    phase_timing: PhaseTiming = field(default_factory=dict)
    faults: list[SwingFault] = field(default_factory=list)
    biomechanics: Optional[BiomechanicsSummary] = None
    progression: Optional[ProgressionReport] = None
    key_frames: dict[SwingPhase, int] = field(default_factory=dict)

    def get_phase_segment(self, phase: SwingPhase) -> Optional[PhaseSegment]:
        """First segment classified as the given phase."""
        for segment in self.phases:
            if segment.phase == phase:
                return segment
        return None

    @property
    def swing_path_direction(self) -> SwingPathDirection:
        return self.metrics.swing_path_direction()


@dataclass(frozen=True)
class FrameResult:
    """Outcome of ingesting one frame into a live session."""
    frame: PoseFrame
    phase: SwingPhase
    phase_changed: bool
    metrics: SwingMetrics
    phase_timing: PhaseTiming
