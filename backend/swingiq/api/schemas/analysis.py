"""
Analysis API Schemas

Pydantic models for swing analysis API requests and responses.
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from enum import Enum

from swingiq.core.domain import (
    BiomechanicsSummary,
    FrameResult,
    ProgressionReport,
    SwingMetrics,
    SwingScores,
    TrendResult,
)
from .pose import KeypointSchema, RawFrameSchema


class SwingPhaseEnum(str, Enum):
    """Swing phases for API."""
    UNKNOWN = "unknown"
    ADDRESS = "address"
    TAKEAWAY = "takeaway"
    BACKSWING = "backswing"
    DOWNSWING = "downswing"
    IMPACT = "impact"
    FOLLOW_THROUGH = "follow_through"
    FINISH = "finish"


class SwingMetricsSchema(BaseModel):
    """
    Core swing metrics.
    """
    tempo: float = Field(..., description="Backswing / downswing duration ratio (3.0 is ideal)")
    balance: float = Field(..., ge=0.0, le=1.0, description="Hip-over-feet balance (1 = centered)")
    swing_path_deviation: float = Field(..., description="Degrees; negative = inside-out, positive = outside-in")
    swing_path_direction: str = Field(..., description="on_plane, inside_out or outside_in")

    class Config:
        json_schema_extra = {
            "example": {
                "tempo": 2.9,
                "balance": 0.82,
                "swing_path_deviation": -3.4,
                "swing_path_direction": "inside_out"
            }
        }

    @classmethod
    def from_domain(cls, metrics: SwingMetrics) -> "SwingMetricsSchema":
        return cls(
            tempo=metrics.tempo,
            balance=metrics.balance,
            swing_path_deviation=metrics.swing_path_deviation,
            swing_path_direction=metrics.swing_path_direction().value,
        )


class SwingScoresSchema(BaseModel):
    """
    0-100 sub-scores and their average.
    """
    overall: float = Field(..., ge=0, le=100, description="Mean of the three sub-scores")
    tempo: float = Field(..., ge=0, le=100, description="Closeness of tempo to 3:1")
    balance: float = Field(..., ge=0, le=100, description="Balance x 100")
    swing_path: float = Field(..., ge=0, le=100, description="Closeness of the path to the target line")

    @classmethod
    def from_domain(cls, scores: SwingScores) -> "SwingScoresSchema":
        return cls(
            overall=scores.overall,
            tempo=scores.tempo,
            balance=scores.balance,
            swing_path=scores.swing_path,
        )


class SwingFaultSchema(BaseModel):
    """
    A detected swing fault.
    """
    type: str = Field(..., description="posture, swing_path, tempo or balance")
    severity: str = Field(..., description="low, medium or high")
    value: float = Field(..., description="Measurement that triggered the fault")
    direction: Optional[str] = Field(None, description="Path direction for swing path faults")


class PhaseSegmentSchema(BaseModel):
    """
    Run of consecutive frames in the same phase.
    """
    phase: SwingPhaseEnum = Field(..., description="Swing phase")
    start_frame: int = Field(..., description="First frame number")
    end_frame: int = Field(..., description="Last frame number")
    duration: float = Field(..., ge=0.0, description="Seconds until the next phase started")


class JointSeriesSchema(BaseModel):
    """
    One biomechanical measurement across the clip.
    """
    series: List[float] = Field(..., description="Valid per-frame values")
    average: float = Field(..., description="Mean value")
    peak: float = Field(..., description="Maximum value")
    consistency: float = Field(..., ge=0.0, le=1.0, description="1 - coefficient of variation")


class BiomechanicsSchema(BaseModel):
    """
    Per-joint aggregates over the clip.
    """
    joints: dict[str, JointSeriesSchema] = Field(default_factory=dict, description="Metric -> series")
    head_stability: float = Field(..., ge=0.0, le=1.0, description="1 = perfectly still head")
    average_front_foot: float = Field(..., description="Mean front-foot weight percentage")

    @classmethod
    def from_domain(cls, summary: BiomechanicsSummary) -> "BiomechanicsSchema":
        return cls(
            joints={
                name: JointSeriesSchema(
                    series=list(joint.series),
                    average=joint.average,
                    peak=joint.peak,
                    consistency=joint.consistency,
                )
                for name, joint in summary.joints.items()
            },
            head_stability=summary.head_stability,
            average_front_foot=summary.average_front_foot,
        )


class TrendResultSchema(BaseModel):
    """
    Direction of one metric over the clip.

    confidence is a heuristic consistency figure, not a statistical
    confidence interval.
    """
    trend: str = Field(..., description="stable, increasing, decreasing or insufficient_data")
    slope: float = Field(..., description="Change per second")
    confidence: float = Field(..., ge=0.0, le=1.0, description="1 - std / max of the series")
    change_amount: float = Field(..., description="Last-third average minus first-third average")
    series: List[float] = Field(default_factory=list, description="Values the trend was computed from")

    class Config:
        json_schema_extra = {
            "example": {
                "trend": "increasing",
                "slope": 45.0,
                "confidence": 0.74,
                "change_amount": 27.0,
                "series": [10.0, 15.0, 22.0, 30.0, 37.0]
            }
        }

    @classmethod
    def from_domain(cls, result: TrendResult) -> "TrendResultSchema":
        return cls(
            trend=result.trend.value,
            slope=result.slope,
            confidence=result.confidence,
            change_amount=result.change_amount,
            series=list(result.series),
        )


class ProgressionContextSchema(BaseModel):
    fps: float = Field(..., description="Frames per second derived from timestamps")
    total_time: float = Field(..., description="Clip duration in seconds")
    start_timestamp: float
    end_timestamp: float
    frame_count: int


class FrameBiomechanicsSchema(BaseModel):
    frame_number: int
    timestamp: float
    metrics: dict[str, float] = Field(default_factory=dict, description="Only metrics measurable on this frame")


class ProgressionSchema(BaseModel):
    """
    Frame-by-frame metrics and trends.
    """
    context: ProgressionContextSchema
    frames: List[FrameBiomechanicsSchema] = Field(default_factory=list)
    trends: dict[str, TrendResultSchema] = Field(default_factory=dict)
    valid_frames: int

    @classmethod
    def from_domain(cls, report: ProgressionReport) -> "ProgressionSchema":
        ctx = report.context
        return cls(
            context=ProgressionContextSchema(
                fps=ctx.fps,
                total_time=ctx.total_time,
                start_timestamp=ctx.start_timestamp,
                end_timestamp=ctx.end_timestamp,
                frame_count=ctx.frame_count,
            ),
            frames=[
                FrameBiomechanicsSchema(
                    frame_number=fb.frame_number,
                    timestamp=fb.timestamp,
                    metrics=dict(fb.metrics),
                )
                for fb in report.frames
            ],
            trends={name: TrendResultSchema.from_domain(t) for name, t in report.trends.items()},
            valid_frames=report.valid_frames,
        )


class SwingAnalysisResponse(BaseModel):
    """
    Complete swing analysis result.

    This is the main response from the analyze endpoint.
    """
    # Frame counts
    total_frames: int = Field(..., description="Frames received")
    valid_frames: int = Field(..., description="Frames with at least one tracked keypoint")
    degraded: bool = Field(..., description="Too few usable frames; metrics are neutral defaults")

    # Metrics & scores
    metrics: SwingMetricsSchema
    scores: SwingScoresSchema

    # Phases
    final_phase: SwingPhaseEnum = Field(..., description="Phase of the last frame")
    phases: List[PhaseSegmentSchema] = Field(default_factory=list, description="Phase segments in order")
    phase_timing: dict[str, float] = Field(default_factory=dict, description="Seconds per phase of the swing")
    key_frames: dict[str, int] = Field(default_factory=dict, description="Phase -> first frame number")

    # Details
    faults: List[SwingFaultSchema] = Field(default_factory=list, description="Detected faults")
    biomechanics: Optional[BiomechanicsSchema] = Field(None, description="Per-joint aggregates")
    progression: Optional[ProgressionSchema] = Field(None, description="Frame-by-frame progression")

    class Config:
        json_schema_extra = {
            "example": {
                "total_frames": 90,
                "valid_frames": 88,
                "degraded": False,
                "metrics": {
                    "tempo": 2.9,
                    "balance": 0.82,
                    "swing_path_deviation": -3.4,
                    "swing_path_direction": "inside_out"
                },
                "scores": {"overall": 84.1, "tempo": 97.5, "balance": 82.0, "swing_path": 83.0},
                "final_phase": "finish"
            }
        }


class AnalyzeFramesRequest(BaseModel):
    """
    Request to analyze pre-extracted pose frames.

    Used when the client has already run pose detection on a recording.
    """
    frames: List[RawFrameSchema] = Field(..., description="Provider output per frame")


class TrendRequest(BaseModel):
    """
    Request to classify the trend of a metric series.
    """
    values: List[float] = Field(..., description="Per-frame values in order")
    timespan: float = Field(..., ge=0.0, description="Duration covered by the values in seconds")


class PhaseResultMessage(BaseModel):
    """
    WebSocket payload with the outcome of one frame.

    Sent from backend to frontend after processing a frame.
    """
    frame_number: int = Field(..., description="Corresponding frame number")
    timestamp: float = Field(..., description="Capture time in seconds")
    phase: SwingPhaseEnum = Field(..., description="Classified swing phase")
    phase_changed: bool = Field(..., description="Whether this frame changed the phase")
    keypoints: List[KeypointSchema] = Field(..., description="13 tracked keypoints")
    metrics: SwingMetricsSchema = Field(..., description="Live swing metrics")
    phase_timing: dict[str, float] = Field(default_factory=dict, description="Seconds per phase this swing")

    @classmethod
    def from_domain(cls, result: FrameResult) -> "PhaseResultMessage":
        frame = result.frame
        return cls(
            frame_number=frame.frame_number,
            timestamp=frame.timestamp,
            phase=SwingPhaseEnum(result.phase.value),
            phase_changed=result.phase_changed,
            keypoints=[
                KeypointSchema(body_part=kp.body_part.name, x=kp.x, y=kp.y, confidence=kp.confidence)
                for kp in frame.keypoints
            ],
            metrics=SwingMetricsSchema.from_domain(result.metrics),
            phase_timing={phase.value: seconds for phase, seconds in result.phase_timing.items()},
        )


class HealthResponse(BaseModel):
    """
    Health check response.
    """
    status: str = Field("healthy", description="Service status")
    version: str = Field(..., description="API version")
    active_sessions: int = Field(..., description="Open WebSocket analysis sessions")
