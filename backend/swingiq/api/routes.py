"""
REST API Routes

FastAPI routes for golf swing analysis.
Handles HTTP requests for clip analysis and trend classification.
"""

import logging
from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException

from .schemas import (
    AnalyzeFramesRequest,
    BiomechanicsSchema,
    HealthResponse,
    PhaseSegmentSchema,
    ProgressionSchema,
    SwingAnalysisResponse,
    SwingFaultSchema,
    SwingMetricsSchema,
    SwingPhaseEnum,
    SwingScoresSchema,
    TrendRequest,
    TrendResultSchema,
)
from swingiq.config import get_settings
from swingiq.core.domain import SwingAnalysisResult
from swingiq.core.services import FrameOrderError, ProgressionAnalyzer, SwingAnalyzer

# Configure logging
logger = logging.getLogger(__name__)

# Create router
router = APIRouter()


@lru_cache
def get_analyzer() -> SwingAnalyzer:
    """Shared stateless analyzer configured from settings."""
    return SwingAnalyzer(get_settings().engine_config())


# =============================================================================
# Health Check
# =============================================================================

@router.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="Health check endpoint"
)
async def health_check() -> HealthResponse:
    """
    Check if the API is running.

    Returns:
        Health status, version and number of live analysis sessions
    """
    from .websocket import manager

    return HealthResponse(
        status="healthy",
        version=get_settings().version,
        active_sessions=manager.active_count,
    )


# =============================================================================
# Swing Analysis
# =============================================================================

@router.post(
    "/analysis/frames",
    response_model=SwingAnalysisResponse,
    tags=["Swing Analysis"],
    summary="Analyze a golf swing from pre-extracted pose frames"
)
async def analyze_frames(
    request: AnalyzeFramesRequest,
    analyzer: SwingAnalyzer = Depends(get_analyzer),
) -> SwingAnalysisResponse:
    """
    Analyze a recorded golf swing.

    The frames will be:
    1. Normalized and smoothed in timestamp order
    2. Classified into swing phases one by one
    3. Measured for tempo, balance and swing path
    4. Scored and checked for faults

    Clips with fewer than 5 usable frames return neutral default metrics
    with `degraded` set.

    Args:
        request: Provider landmarks for every frame of the clip

    Returns:
        Complete swing analysis
    """
    try:
        result = analyzer.analyze_raw_frames(frame.to_domain() for frame in request.frames)
    except (FrameOrderError, ValueError) as e:
        logger.warning(f"Rejected frame data: {e}")
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logger.error(f"Swing analysis failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    return _convert_analysis_to_response(result)


@router.post(
    "/analysis/trend",
    response_model=TrendResultSchema,
    tags=["Swing Analysis"],
    summary="Classify the trend of a metric series"
)
async def analyze_trend(
    request: TrendRequest,
    analyzer: SwingAnalyzer = Depends(get_analyzer),
) -> TrendResultSchema:
    """
    Compare the last third of a series against the first third.

    Fewer than 3 values yield `insufficient_data`.
    """
    progression: ProgressionAnalyzer = analyzer.progression
    result = progression.calculate_trend(request.values, request.timespan)
    return TrendResultSchema.from_domain(result)


# =============================================================================
# Helper Functions
# =============================================================================

def _convert_analysis_to_response(result: SwingAnalysisResult) -> SwingAnalysisResponse:
    """Convert domain SwingAnalysisResult to API response schema."""
    phases = [
        PhaseSegmentSchema(
            phase=SwingPhaseEnum(segment.phase.value),
            start_frame=segment.start_frame,
            end_frame=segment.end_frame,
            duration=segment.duration,
        )
        for segment in result.phases
    ]

    faults = [
        SwingFaultSchema(
            type=fault.fault_type.value,
            severity=fault.severity.value,
            value=fault.value,
            direction=fault.direction.value if fault.direction else None,
        )
        for fault in result.faults
    ]

    return SwingAnalysisResponse(
        total_frames=result.total_frames,
        valid_frames=result.valid_frames,
        degraded=result.degraded,
        metrics=SwingMetricsSchema.from_domain(result.metrics),
        scores=SwingScoresSchema.from_domain(result.scores),
        final_phase=SwingPhaseEnum(result.final_phase.value),
        phases=phases,
        phase_timing={phase.value: seconds for phase, seconds in result.phase_timing.items()},
        key_frames={phase.value: frame for phase, frame in result.key_frames.items()},
        faults=faults,
        biomechanics=BiomechanicsSchema.from_domain(result.biomechanics) if result.biomechanics else None,
        progression=ProgressionSchema.from_domain(result.progression) if result.progression else None,
    )
