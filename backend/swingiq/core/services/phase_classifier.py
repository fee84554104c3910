"""
Swing Phase Classifier Service

Rule-based state machine that labels each new frame with a swing phase
from the lead wrist's position relative to the shoulder center and its
velocity, and keeps the per-swing phase timing.
"""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from ..domain.analysis import PhaseTiming, SwingPhase
from ..domain.config import PhaseThresholds
from ..domain.pose import BodyPart, PoseFrame
from .angle_calculator import AngleCalculator
from .velocity import LEAD_WRIST, Vector, VelocityEstimator

if TYPE_CHECKING:
    from .session import AnalysisSession

logger = logging.getLogger(__name__)


@dataclass
class SwingTimingState:
    """
    Phase bookkeeping of one session.

    Attributes:
        current_phase: Phase of the latest classified frame
        phase_timing: Seconds spent in each phase entered this swing
        phase_started_at: Timestamp the current phase was entered,
            None before the first timed phase
        swing_started_at: Timestamp of the takeaway that started the
            current swing, None when no swing is in progress
        address_frame: Frame at which the current swing's address began
        transitions: Number of phase changes seen
    """
    current_phase: SwingPhase = SwingPhase.UNKNOWN
    phase_timing: PhaseTiming = field(default_factory=dict)
    phase_started_at: Optional[float] = None
    swing_started_at: Optional[float] = None
    address_frame: Optional[PoseFrame] = None
    transitions: int = 0

    def reset(self) -> None:
        self.current_phase = SwingPhase.UNKNOWN
        self.phase_timing.clear()
        self.phase_started_at = None
        self.swing_started_at = None
        self.address_frame = None
        self.transitions = 0

    @property
    def in_swing(self) -> bool:
        return self.swing_started_at is not None


def transition(
    state: SwingTimingState,
    new_phase: SwingPhase,
    timestamp: float,
    frame: Optional[PoseFrame] = None,
) -> bool:
    """
    Apply a classified phase to the timing state.

    On a change the time spent in the outgoing phase overwrites its
    entry in phase_timing, so a phase entered again reports only its
    latest stint. Entering takeaway with no active swing starts the
    swing timer; entering address from any other phase ends the swing,
    clearing timing and the swing timer.

    Returns:
        True if the phase changed
    """
    previous = state.current_phase
    if new_phase == previous:
        return False

    if state.phase_started_at is not None:
        elapsed = max(0.0, timestamp - state.phase_started_at)
        state.phase_timing[previous] = elapsed

    state.phase_started_at = timestamp

    if new_phase == SwingPhase.TAKEAWAY and state.swing_started_at is None:
        state.swing_started_at = timestamp

    if new_phase == SwingPhase.ADDRESS:
        if state.phase_timing or state.swing_started_at is not None:
            logger.debug("Back at address at %.3fs - resetting swing timing", timestamp)
        state.phase_timing.clear()
        state.swing_started_at = None
        state.address_frame = frame

    state.current_phase = new_phase
    state.transitions += 1
    logger.debug("Phase %s -> %s at %.3fs", previous.value, new_phase.value, timestamp)
    return True


class SwingPhaseClassifier:
    """
    Hand-tuned decision tree over lead wrist position and velocity.

    Rules are checked in priority order and the first match wins. When
    nothing matches the previous phase is held, which filters out single
    noisy frames. Missing wrist or shoulders yield UNKNOWN.

    Usage:
        classifier = SwingPhaseClassifier()
        phase = classifier.classify(frame, velocity, previous_phase)
    """

    def __init__(self, thresholds: Optional[PhaseThresholds] = None):
        self.thresholds = thresholds or PhaseThresholds()

    @staticmethod
    def wrist_offset(frame: PoseFrame) -> Optional[tuple[float, float]]:
        """Lead wrist position relative to the shoulder center (dx, dy)."""
        wrist = frame.get_landmark(LEAD_WRIST)
        # Trail wrist must be tracked too for a usable frame
        trail = frame.get_landmark(BodyPart.RIGHT_WRIST)
        center = AngleCalculator.shoulder_center(frame)
        if wrist is None or trail is None or center is None:
            return None
        return (wrist.x - center[0], wrist.y - center[1])

    def classify(
        self,
        frame: PoseFrame,
        velocity: Vector,
        previous: SwingPhase = SwingPhase.UNKNOWN,
    ) -> SwingPhase:
        offset = self.wrist_offset(frame)
        if offset is None:
            return SwingPhase.UNKNOWN

        dx, dy = offset
        speed = velocity.magnitude
        t = self.thresholds

        if abs(dx) < t.address_box and abs(dy) < t.address_box:
            return SwingPhase.ADDRESS
        if dx < -t.takeaway_offset and dy > t.takeaway_max_height and speed < t.takeaway_max_speed:
            return SwingPhase.TAKEAWAY
        if dx < -t.backswing_offset and dy < t.backswing_height:
            return SwingPhase.BACKSWING
        if dx < -t.downswing_offset and speed > t.downswing_min_speed and velocity.dx > 0:
            return SwingPhase.DOWNSWING
        if abs(dx) < t.impact_box and speed > t.impact_min_speed:
            return SwingPhase.IMPACT
        if dx > t.follow_through_offset and dy > 0:
            return SwingPhase.FOLLOW_THROUGH
        if dx > t.finish_offset and speed < t.finish_max_speed:
            return SwingPhase.FINISH

        return previous

    def update(self, session: "AnalysisSession") -> SwingPhase:
        """
        Classify the session's latest frame and record the transition.

        Returns:
            The session's phase after the update
        """
        frame = session.history.latest
        if frame is None:
            return session.timing.current_phase

        velocity = VelocityEstimator.latest_velocity(session.history)
        phase = self.classify(frame, velocity, session.timing.current_phase)
        transition(session.timing, phase, frame.timestamp, frame)
        return phase
