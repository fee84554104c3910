"""
Swing Analyzer Service

High-level service that runs the whole pipeline: normalize, smooth,
buffer, classify and measure.

This is the main entry point for analyzing golf swings. The analyzer is
stateless; everything that changes while a swing is analyzed lives in
the AnalysisSession passed to it.
"""

import logging
from typing import Iterable, Mapping, Optional, Sequence, Union

from ..domain.analysis import (
    FrameResult,
    PhaseSegment,
    PhaseTiming,
    SwingAnalysisResult,
    SwingMetrics,
    SwingPhase,
)
from ..domain.config import EngineConfig, DEFAULT_CONFIG
from ..domain.pose import PoseFrame, RawFrame, RawLandmark
from .metrics import SwingMetricsAggregator
from .normalizer import KeypointNormalizer
from .phase_classifier import SwingPhaseClassifier
from .pose_history import FrameOrderError
from .progression import ProgressionAnalyzer
from .session import AnalysisSession
from .smoothing import TemporalSmoother

logger = logging.getLogger(__name__)


class SwingAnalyzer:
    """
    Analyzes golf swings from live frames or recorded clips.

    This service:
    1. Normalizes provider landmarks and smooths them per session
    2. Appends frames to the session history
    3. Classifies the swing phase and keeps phase timing
    4. Computes tempo, balance and swing path
    5. For whole clips, scores the swing, flags faults and reports
       per-joint progression

    Usage:
        analyzer = SwingAnalyzer()

        # Live: one session per camera stream
        session = analyzer.new_session()
        result = analyzer.ingest(session, landmarks, 1920, 1080, timestamp=0.033)
        print(result.phase, result.metrics.tempo)

        # Recorded clip of pre-extracted frames
        analysis = analyzer.analyze_frames(frames)
        print(f"Overall score: {analysis.scores.overall:.0f}")
    """

    def __init__(self, config: EngineConfig = DEFAULT_CONFIG):
        self.config = config
        self.normalizer = KeypointNormalizer(config)
        self.classifier = SwingPhaseClassifier(config.phase_thresholds)
        self.aggregator = SwingMetricsAggregator(config)
        self.progression = ProgressionAnalyzer(config)

    def new_session(self) -> AnalysisSession:
        return AnalysisSession(config=self.config)

    # -------------------------------------------------------------------------
    # Live Ingestion
    # -------------------------------------------------------------------------

    def ingest(
        self,
        session: AnalysisSession,
        landmarks: Union[Mapping[int, RawLandmark], Iterable[RawLandmark]],
        image_width: float,
        image_height: float,
        timestamp: float,
        frame_number: Optional[int] = None,
    ) -> FrameResult:
        """
        Process one frame of provider output.

        Args:
            session: Session the frame belongs to
            landmarks: Provider landmarks (any subset of the 33 indices)
            image_width, image_height: True image size in pixels
            timestamp: Capture time in seconds
            frame_number: Frame counter, defaults to the session's count

        Returns:
            FrameResult with the classified phase and live metrics

        Raises:
            FrameOrderError: if the frame is older than the session's latest
            ValueError: if the image size is not positive
        """
        self._check_order(session, timestamp)

        keypoints = self.normalizer.build_keypoints(
            landmarks, image_width, image_height, session.smoother
        )
        frame = PoseFrame(
            frame_number=session.next_frame_number if frame_number is None else frame_number,
            timestamp=timestamp,
            keypoints=keypoints,
        )
        return self.ingest_frame(session, frame)

    def ingest_frame(self, session: AnalysisSession, frame: PoseFrame) -> FrameResult:
        """Process a frame whose keypoints are already normalized."""
        session.history.append(frame)
        session.frames_received += 1
        if frame.has_keypoints:
            session.frames_valid += 1

        previous = session.current_phase
        phase = self.classifier.update(session)

        return FrameResult(
            frame=frame,
            phase=phase,
            phase_changed=phase != previous,
            metrics=self.current_metrics(session),
            phase_timing=dict(session.timing.phase_timing),
        )

    def current_metrics(self, session: AnalysisSession) -> SwingMetrics:
        """Metrics over the session's recent history and current swing timing."""
        return self.aggregator.compute(
            session.history.frames(),
            session.timing.phase_timing,
            session.timing.address_frame,
            live=True,
        )

    @staticmethod
    def record_dropped(session: AnalysisSession) -> None:
        """Count a frame the provider failed to deliver."""
        session.frames_dropped += 1

    @staticmethod
    def _check_order(session: AnalysisSession, timestamp: float) -> None:
        # Checked before smoothing so a rejected frame leaves no trace
        latest = session.history.latest
        if latest is not None and timestamp < latest.timestamp:
            raise FrameOrderError(
                f"Frame at {timestamp:.3f}s is older than the latest frame at {latest.timestamp:.3f}s"
            )

    # -------------------------------------------------------------------------
    # Clip Analysis
    # -------------------------------------------------------------------------

    def analyze_raw_frames(self, raw_frames: Iterable[RawFrame]) -> SwingAnalysisResult:
        """
        Analyze a recorded clip of provider output.

        Frames are normalized and smoothed in timestamp order, then
        analyzed like analyze_frames.
        """
        ordered = sorted(raw_frames, key=lambda raw: (raw.timestamp, raw.frame_number))
        smoother = TemporalSmoother(self.config)

        frames = [
            PoseFrame(
                frame_number=raw.frame_number,
                timestamp=raw.timestamp,
                keypoints=self.normalizer.build_keypoints(
                    raw.landmarks, raw.image_width, raw.image_height, smoother
                ),
            )
            for raw in ordered
        ]
        return self.analyze_frames(frames)

    def analyze_frames(self, frames: Sequence[PoseFrame]) -> SwingAnalysisResult:
        """
        Analyze a golf swing from pre-extracted pose frames.

        Frames are classified one by one in a fresh session, exactly as
        the live path would see them, then metrics are computed over the
        whole clip.

        Args:
            frames: PoseFrames in any order (sorted by timestamp here)

        Returns:
            Complete SwingAnalysisResult. With fewer usable frames than
            the configured minimum the result is marked degraded and
            carries neutral default metrics.
        """
        ordered = sorted(frames, key=lambda f: (f.timestamp, f.frame_number))
        session = self.new_session()

        labels: list[SwingPhase] = []
        swing_timing: PhaseTiming = {}
        address_frame: Optional[PoseFrame] = None

        for frame in ordered:
            result = self.ingest_frame(session, frame)
            labels.append(result.phase)

            if address_frame is None and result.phase == SwingPhase.ADDRESS:
                address_frame = frame
            # Keep the timing of the latest swing that got through its downswing
            if SwingPhase.DOWNSWING in session.timing.phase_timing:
                swing_timing = dict(session.timing.phase_timing)

        phase_timing = swing_timing or dict(session.timing.phase_timing)
        segments = self._phase_segments(ordered, labels)
        valid_count = sum(1 for frame in ordered if frame.has_keypoints)

        analysis = SwingAnalysisResult(
            metrics=self.aggregator.degraded_metrics(),
            scores=self.aggregator.degraded_scores(),
            total_frames=len(ordered),
            valid_frames=valid_count,
            degraded=True,
            final_phase=labels[-1] if labels else SwingPhase.UNKNOWN,
            phases=segments,
            phase_timing=phase_timing,
            key_frames=self._key_frames(segments),
        )

        if valid_count < self.config.min_valid_frames:
            logger.warning(
                "Only %d of %d frames usable (need %d) - returning default metrics",
                valid_count, len(ordered), self.config.min_valid_frames,
            )
            return analysis

        metrics = self.aggregator.compute(ordered, phase_timing, address_frame, live=False)
        biomechanics = self.progression.summarize(ordered)
        spine = biomechanics.get("spine_angle")

        analysis.metrics = metrics
        analysis.scores = self.aggregator.score(metrics)
        analysis.degraded = False
        analysis.faults = self.aggregator.detect_faults(metrics, spine.average if spine else None)
        analysis.biomechanics = biomechanics
        analysis.progression = self.progression.analyze(ordered)

        logger.info(
            "Analyzed %d frames (%d valid): tempo %.2f, balance %.2f, path %.1f°, score %.0f",
            len(ordered), valid_count, metrics.tempo, metrics.balance,
            metrics.swing_path_deviation, analysis.scores.overall,
        )
        return analysis

    # -------------------------------------------------------------------------
    # Phase Segments
    # -------------------------------------------------------------------------

    @staticmethod
    def _phase_segments(
        frames: Sequence[PoseFrame],
        labels: Sequence[SwingPhase],
    ) -> list[PhaseSegment]:
        """
        Group consecutive frames with the same phase.

        A segment lasts until the next segment starts; the last one ends
        at the final frame.
        """
        segments: list[PhaseSegment] = []
        start = 0
        for i in range(1, len(labels) + 1):
            if i < len(labels) and labels[i] == labels[start]:
                continue

            end_time = frames[i].timestamp if i < len(labels) else frames[-1].timestamp
            segments.append(PhaseSegment(
                phase=labels[start],
                start_frame=frames[start].frame_number,
                end_frame=frames[i - 1].frame_number,
                duration=end_time - frames[start].timestamp,
            ))
            start = i
        return segments

    @staticmethod
    def _key_frames(segments: Sequence[PhaseSegment]) -> dict[SwingPhase, int]:
        """First frame number of each classified phase."""
        key_frames: dict[SwingPhase, int] = {}
        for segment in segments:
            if segment.phase != SwingPhase.UNKNOWN:
                key_frames.setdefault(segment.phase, segment.start_frame)
        return key_frames
