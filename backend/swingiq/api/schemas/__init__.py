"""
API Schemas

Pydantic models for request/response validation.
"""

from .pose import (
    RawLandmarkSchema,
    RawFrameSchema,
    KeypointSchema,
    WebSocketMessageType,
    WebSocketMessage,
    FrameMessage,
)

from .analysis import (
    SwingPhaseEnum,
    SwingMetricsSchema,
    SwingScoresSchema,
    SwingFaultSchema,
    PhaseSegmentSchema,
    JointSeriesSchema,
    BiomechanicsSchema,
    TrendResultSchema,
    ProgressionSchema,
    SwingAnalysisResponse,
    AnalyzeFramesRequest,
    TrendRequest,
    PhaseResultMessage,
    HealthResponse,
)

__all__ = [
    # Pose schemas
    "RawLandmarkSchema",
    "RawFrameSchema",
    "KeypointSchema",
    "WebSocketMessageType",
    "WebSocketMessage",
    "FrameMessage",
    # Analysis schemas
    "SwingPhaseEnum",
    "SwingMetricsSchema",
    "SwingScoresSchema",
    "SwingFaultSchema",
    "PhaseSegmentSchema",
    "JointSeriesSchema",
    "BiomechanicsSchema",
    "TrendResultSchema",
    "ProgressionSchema",
    "SwingAnalysisResponse",
    "AnalyzeFramesRequest",
    "TrendRequest",
    "PhaseResultMessage",
    "HealthResponse",
]
