"""
Engine Configuration

Tunable constants for the pose-biomechanics engine. All values are
hand-tuned heuristics; override them with dataclasses.replace() rather
than editing the code that uses them.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class PhaseThresholds:
    """
    Decision thresholds for the swing-phase classifier.

    Offsets are lead-wrist position relative to the shoulder centre in
    normalized image units (negative x = toward the trail side, negative
    y = above the shoulders). Speeds are normalized units per second.
    """
    # Rule 1: hands in front of the chest
    address_box: float = 0.1

    # Rule 2: hands moving back slowly, still low
    takeaway_offset: float = 0.1
    takeaway_max_height: float = -0.2
    takeaway_max_speed: float = 0.5

    # Rule 3: hands back and above the shoulders
    backswing_offset: float = 0.2
    backswing_height: float = -0.1

    # Rule 4: hands still back but moving fast toward the target
    downswing_offset: float = 0.1
    downswing_min_speed: float = 1.0

    # Rule 5: hands in front of the body at high speed
    impact_box: float = 0.15
    impact_min_speed: float = 2.0

    # Rule 6: hands past the lead side, below the shoulders
    follow_through_offset: float = 0.1

    # Rule 7: hands well past the lead side and nearly still
    finish_offset: float = 0.2
    finish_max_speed: float = 0.3


@dataclass(frozen=True)
class EngineConfig:
    """
    Settings shared by every stage of the analysis pipeline.

    Attributes:
        history_capacity: Frames kept in a session's pose history (~1s at 30fps)
        smoothing_window: Raw points remembered per landmark for smoothing
        high_confidence: Confidence above which a point gets light smoothing
        light_smoothing: Blend factor toward history for high-confidence points
        heavy_smoothing: Blend factor toward history for other points
        high_confidence_weight: Recency weight scale for high-confidence points
        low_confidence_weight: Recency weight scale for other points
        min_combined_confidence: Provider acceptance gate on (visibility+presence)/2
        min_visibility: Provider acceptance gate on visibility
        min_presence: Provider acceptance gate on presence
        impact_velocity_threshold: Wrist speed marking the impact window
        impact_search_frames: Trailing frames searched for the impact window
            in a live session
        min_impact_frames: Impact-window frames needed for a swing path
        min_valid_frames: Valid frames needed for non-degraded clip metrics
        ideal_tempo: Backswing/downswing ratio used as neutral default
        trend_stable_band: Change (metric units) below which a trend is stable
        on_plane_tolerance: Path deviation (degrees) still considered on plane
        frame_timeout: Seconds the pose provider gets per frame before the
            frame is dropped
    """
    history_capacity: int = 30
    smoothing_window: int = 5
    high_confidence: float = 0.9
    light_smoothing: float = 0.3
    heavy_smoothing: float = 0.6
    high_confidence_weight: float = 1.2
    low_confidence_weight: float = 0.8
    min_combined_confidence: float = 0.5
    min_visibility: float = 0.4
    min_presence: float = 0.4
    impact_velocity_threshold: float = 1.5
    impact_search_frames: int = 10
    min_impact_frames: int = 3
    min_valid_frames: int = 5
    ideal_tempo: float = 3.0
    trend_stable_band: float = 5.0
    on_plane_tolerance: float = 2.0
    frame_timeout: float = 5.0
    phase_thresholds: PhaseThresholds = field(default_factory=PhaseThresholds)

    def __post_init__(self) -> None:
        if self.history_capacity < 2:
            raise ValueError("history_capacity must be at least 2")
        if self.smoothing_window < 1:
            raise ValueError("smoothing_window must be positive")
        if self.frame_timeout <= 0:
            raise ValueError("frame_timeout must be positive")


DEFAULT_CONFIG = EngineConfig()
