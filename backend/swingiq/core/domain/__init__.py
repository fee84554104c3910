"""
Domain Models

Pure data structures representing golf swing analysis concepts.
No external dependencies - just Python dataclasses and enums.
"""

from .pose import (
    BodyPart,
    KeypointObservation,
    PoseFrame,
    RawLandmark,
    RawFrame,
    TRACKED_LANDMARKS,
    KEYPOINT_COUNT,
)
from .analysis import (
    SwingPhase,
    PhaseTiming,
    SwingAngles,
    SwingMetrics,
    SwingScores,
    SwingPathDirection,
    SwingFault,
    FaultType,
    FaultSeverity,
    PhaseSegment,
    JointSeries,
    BiomechanicsSummary,
    Trend,
    TrendResult,
    ProgressionContext,
    FrameBiomechanics,
    ProgressionReport,
    SwingAnalysisResult,
    FrameResult,
)
from .config import EngineConfig, PhaseThresholds, DEFAULT_CONFIG

__all__ = [
    "BodyPart",
    "KeypointObservation",
    "PoseFrame",
    "RawLandmark",
    "RawFrame",
    "TRACKED_LANDMARKS",
    "KEYPOINT_COUNT",
    "SwingPhase",
    "PhaseTiming",
    "SwingAngles",
    "SwingMetrics",
    "SwingScores",
    "SwingPathDirection",
    "SwingFault",
    "FaultType",
    "FaultSeverity",
    "PhaseSegment",
    "JointSeries",
    "BiomechanicsSummary",
    "Trend",
    "TrendResult",
    "ProgressionContext",
    "FrameBiomechanics",
    "ProgressionReport",
    "SwingAnalysisResult",
    "FrameResult",
    "EngineConfig",
    "PhaseThresholds",
    "DEFAULT_CONFIG",
]
