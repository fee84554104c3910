"""
Services Layer

Business logic services for golf swing analysis.
These services orchestrate domain models; per-session state lives in
AnalysisSession.
"""

from .angle_calculator import AngleCalculator
from .metrics import DEGRADED_METRICS, SwingMetricsAggregator
from .normalizer import KeypointNormalizer, unletterbox
from .phase_classifier import SwingPhaseClassifier, SwingTimingState, transition
from .pose_history import FrameOrderError, PoseHistory
from .pose_provider import PoseProvider, ProviderResult, TimedImage, detect_with_timeout, run_stream
from .progression import ProgressionAnalyzer
from .session import AnalysisSession
from .smoothing import TemporalSmoother
from .swing_analyzer import SwingAnalyzer
from .velocity import Vector, VelocityEstimator

__all__ = [
    "AngleCalculator",
    "DEGRADED_METRICS",
    "SwingMetricsAggregator",
    "KeypointNormalizer",
    "unletterbox",
    "SwingPhaseClassifier",
    "SwingTimingState",
    "transition",
    "FrameOrderError",
    "PoseHistory",
    "PoseProvider",
    "ProviderResult",
    "TimedImage",
    "detect_with_timeout",
    "run_stream",
    "ProgressionAnalyzer",
    "AnalysisSession",
    "TemporalSmoother",
    "SwingAnalyzer",
    "Vector",
    "VelocityEstimator",
]
