"""
Analysis Session

Everything mutable that belongs to one analysis (the frame history, the
smoothing state and the phase timing) bundled into one explicit value.
The engine itself stays stateless, so a live preview and a batch
re-analysis can run side by side without sharing anything.
"""

import uuid
from dataclasses import dataclass, field

from ..domain.config import EngineConfig, DEFAULT_CONFIG
from .phase_classifier import SwingTimingState
from .pose_history import PoseHistory
from .smoothing import TemporalSmoother


@dataclass
class AnalysisSession:
    """
    Per-session state passed through every pipeline stage.

    A session must be fed from one source at a time, in non-decreasing
    timestamp order.

    Attributes:
        id: Session identifier
        config: Engine configuration used for this session
        history: Recent smoothed frames
        smoother: Per-landmark smoothing state
        timing: Phase and swing timer bookkeeping
        frames_received: Frames handed to the session
        frames_valid: Frames with at least one accepted keypoint
        frames_dropped: Frames lost to provider failures or timeouts
    """
    config: EngineConfig = DEFAULT_CONFIG
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    history: PoseHistory = field(init=False)
    smoother: TemporalSmoother = field(init=False)
    timing: SwingTimingState = field(default_factory=SwingTimingState)
    frames_received: int = 0
    frames_valid: int = 0
    frames_dropped: int = 0

    def __post_init__(self):
        self.history = PoseHistory(self.config.history_capacity)
        self.smoother = TemporalSmoother(self.config)

    def reset(self) -> None:
        """Discard all state and start over, keeping id and config."""
        self.history.clear()
        self.smoother.reset()
        self.timing.reset()
        self.frames_received = 0
        self.frames_valid = 0
        self.frames_dropped = 0

    @property
    def current_phase(self):
        return self.timing.current_phase

    @property
    def next_frame_number(self) -> int:
        return self.frames_received
