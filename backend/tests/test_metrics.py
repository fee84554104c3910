import math
from dataclasses import replace

import pytest

from swingiq.core.domain import (
    DEFAULT_CONFIG,
    BodyPart,
    FaultSeverity,
    FaultType,
    SwingMetrics,
    SwingPathDirection,
    SwingPhase,
)
from swingiq.core.services import DEGRADED_METRICS, SwingMetricsAggregator, Vector
from swingiq.core.services.metrics import DEFAULT_TARGET_LINE


@pytest.fixture
def aggregator():
    return SwingMetricsAggregator()


@pytest.fixture
def path_frames(make_frame):
    """Ten frames with the lead wrist moving fast along a given angle."""
    def build(degrees, step=0.06):
        dx = math.cos(math.radians(degrees)) * step
        dy = math.sin(math.radians(degrees)) * step
        return [
            make_frame(i, positions={BodyPart.LEFT_WRIST: (0.1 + dx * i, 0.3 + dy * i)})
            for i in range(10)
        ]
    return build


# =============================================================================
# Tempo & Balance
# =============================================================================

def test_tempo_ratio(aggregator):
    timing = {SwingPhase.BACKSWING: 0.9, SwingPhase.DOWNSWING: 0.3}
    assert aggregator.tempo(timing) == pytest.approx(3.0)


@pytest.mark.parametrize(
    "timing",
    [
        {},
        {SwingPhase.BACKSWING: 0.9},
        {SwingPhase.BACKSWING: 0.9, SwingPhase.DOWNSWING: 0.0},
    ],
)
def test_tempo_defaults_to_ideal(aggregator, timing):
    assert aggregator.tempo(timing) == 3.0


def test_centered_balance(aggregator, make_frame):
    assert aggregator.balance(make_frame()) == pytest.approx(1.0)


def test_sway_reduces_balance(aggregator, make_frame):
    frame = make_frame(positions={
        BodyPart.LEFT_HIP: (0.50, 0.55),
        BodyPart.RIGHT_HIP: (0.58, 0.55),
    })
    # Hip center 0.54 vs foot center 0.50
    assert aggregator.balance(frame) == pytest.approx(0.8)


def test_balance_is_floored(aggregator, make_frame):
    frame = make_frame(positions={
        BodyPart.LEFT_HIP: (0.80, 0.55),
        BodyPart.RIGHT_HIP: (0.90, 0.55),
    })
    assert aggregator.balance(frame) == 0.0


def test_balance_unavailable(aggregator, make_frame):
    assert aggregator.balance(make_frame(missing=(BodyPart.LEFT_ANKLE,))) == 0.5
    assert aggregator.balance(None) == 0.5


def test_average_balance_skips_unmeasurable_frames(aggregator, make_frame):
    frames = [make_frame(0), make_frame(1, missing=(BodyPart.RIGHT_HIP,))]
    assert aggregator.average_balance(frames) == pytest.approx(1.0)


# =============================================================================
# Swing Path
# =============================================================================

def test_target_line_is_perpendicular_to_shoulders(make_frame):
    target = SwingMetricsAggregator.target_line(make_frame())
    # Shoulder line (0.1, 0) -> perpendicular (0, 0.1)
    assert target.dx == pytest.approx(0.0)
    assert target.dy == pytest.approx(0.1)


def test_target_line_default(make_frame):
    assert SwingMetricsAggregator.target_line(None) == DEFAULT_TARGET_LINE
    no_shoulder = make_frame(missing=(BodyPart.RIGHT_SHOULDER,))
    assert SwingMetricsAggregator.target_line(no_shoulder) == DEFAULT_TARGET_LINE


def test_deviation_parallel_path():
    assert SwingMetricsAggregator.deviation_angle(Vector(1, 0), Vector(2, 0)) == pytest.approx(0.0, abs=1e-6)


def test_deviation_sign_convention():
    rotated = Vector(math.cos(math.radians(30)), math.sin(math.radians(30)))
    assert SwingMetricsAggregator.deviation_angle(Vector(1, 0), rotated) == pytest.approx(30.0)

    mirrored = Vector(rotated.dx, -rotated.dy)
    assert SwingMetricsAggregator.deviation_angle(Vector(1, 0), mirrored) == pytest.approx(-30.0)


def test_deviation_zero_vector():
    assert SwingMetricsAggregator.deviation_angle(Vector(1, 0), Vector()) == 0.0


def test_swing_path_parallel_to_target(aggregator, path_frames):
    assert aggregator.swing_path_deviation(path_frames(0)) == pytest.approx(0.0, abs=1e-6)


def test_swing_path_rotated_thirty_degrees(aggregator, path_frames):
    deviation = aggregator.swing_path_deviation(path_frames(30))
    assert deviation == pytest.approx(30.0)
    assert SwingMetrics(3.0, 1.0, deviation).swing_path_direction() == SwingPathDirection.OUTSIDE_IN


def test_swing_path_needs_enough_frames(aggregator, path_frames):
    assert aggregator.swing_path_deviation(path_frames(30)[:9]) == 0.0


def test_swing_path_needs_impact_frames(aggregator, path_frames):
    # Slow wrist never crosses the impact threshold
    assert aggregator.swing_path_deviation(path_frames(30, step=0.01)) == 0.0


def test_compute_live(aggregator, path_frames):
    timing = {SwingPhase.BACKSWING: 0.6, SwingPhase.DOWNSWING: 0.3}
    metrics = aggregator.compute(path_frames(0), timing)
    assert metrics.tempo == pytest.approx(2.0)
    assert metrics.balance == pytest.approx(1.0)
    assert metrics.swing_path_deviation == pytest.approx(0.0, abs=1e-6)


# =============================================================================
# Scores
# =============================================================================

def test_perfect_scores(aggregator):
    scores = aggregator.score(SwingMetrics(tempo=3.0, balance=1.0, swing_path_deviation=0.0))
    assert scores.tempo == 100.0
    assert scores.balance == 100.0
    assert scores.swing_path == 100.0
    assert scores.overall == 100.0


def test_scores_are_clamped(aggregator):
    scores = aggregator.score(SwingMetrics(tempo=8.0, balance=0.5, swing_path_deviation=-25.0))
    assert scores.tempo == 0.0
    assert scores.swing_path == 0.0
    assert scores.overall == pytest.approx(50.0 / 3)


def test_partial_scores(aggregator):
    scores = aggregator.score(SwingMetrics(tempo=5.0, balance=0.82, swing_path_deviation=10.0))
    assert scores.tempo == pytest.approx(50.0)
    assert scores.balance == pytest.approx(82.0)
    assert scores.swing_path == pytest.approx(50.0)


def test_degraded_scores(aggregator):
    scores = aggregator.degraded_scores()
    assert DEGRADED_METRICS == SwingMetrics(2.5, 0.75, 0.0)
    assert scores.overall == 65.0
    assert scores.tempo == pytest.approx(87.5)
    assert scores.balance == pytest.approx(75.0)


# =============================================================================
# Faults
# =============================================================================

def test_no_faults_for_good_swing(aggregator):
    metrics = SwingMetrics(tempo=3.0, balance=0.9, swing_path_deviation=1.0)
    assert aggregator.detect_faults(metrics, average_spine_angle=35.0) == []


def test_fault_order_and_severity(aggregator):
    metrics = SwingMetrics(tempo=1.5, balance=0.4, swing_path_deviation=10.0)

    faults = aggregator.detect_faults(metrics, average_spine_angle=12.0)

    assert [f.fault_type for f in faults] == [
        FaultType.POSTURE,
        FaultType.SWING_PATH,
        FaultType.TEMPO,
        FaultType.BALANCE,
    ]
    path = faults[1]
    assert path.severity == FaultSeverity.HIGH
    assert path.direction == SwingPathDirection.OUTSIDE_IN
    assert path.value == 10.0


def test_medium_inside_out_path(aggregator):
    faults = aggregator.detect_faults(SwingMetrics(3.0, 0.9, -5.0))
    assert len(faults) == 1
    assert faults[0].severity == FaultSeverity.MEDIUM
    assert faults[0].direction == SwingPathDirection.INSIDE_OUT


def test_path_direction_tolerance():
    assert SwingMetrics(3.0, 1.0, 1.9).swing_path_direction() == SwingPathDirection.ON_PLANE
    assert SwingMetrics(3.0, 1.0, -2.0).swing_path_direction() == SwingPathDirection.INSIDE_OUT


def test_on_plane_tolerance_from_config(path_frames):
    wide = SwingMetricsAggregator(replace(DEFAULT_CONFIG, on_plane_tolerance=10.0))

    metrics = wide.compute(path_frames(5), {}, live=False)

    assert metrics.swing_path_deviation == pytest.approx(5.0)
    assert metrics.swing_path_direction() == SwingPathDirection.ON_PLANE
    assert SwingMetricsAggregator().compute(path_frames(5), {}, live=False).swing_path_direction() == (
        SwingPathDirection.OUTSIDE_IN
    )
    assert wide.degraded_metrics().on_plane_tolerance == 10.0
