import pytest

from swingiq.core.domain import BodyPart, Trend
from swingiq.core.services import ProgressionAnalyzer
from swingiq.core.services.progression import consistency, standard_deviation


@pytest.fixture
def progression():
    return ProgressionAnalyzer()


# =============================================================================
# Trend classification
# =============================================================================

def test_increasing_series(progression):
    result = progression.calculate_trend([10.0, 15.0, 22.0, 30.0, 37.0], timespan=0.6)

    assert result.trend == Trend.INCREASING
    assert result.change_amount == pytest.approx(27.0)
    assert result.slope == pytest.approx(45.0)
    assert result.series == (10.0, 15.0, 22.0, 30.0, 37.0)
    assert 0.0 <= result.confidence <= 1.0


def test_decreasing_series(progression):
    result = progression.calculate_trend([90, 88, 80, 70, 60, 50], timespan=1.0)
    assert result.trend == Trend.DECREASING
    assert result.change_amount == pytest.approx(-34.0)


def test_flat_series_is_stable(progression):
    result = progression.calculate_trend([42.0, 42.0, 42.0, 42.0], timespan=1.0)
    assert result.trend == Trend.STABLE
    assert result.confidence == 1.0
    assert result.slope == 0.0


def test_small_change_is_stable(progression):
    assert progression.calculate_trend([40, 41, 42, 43, 44, 44.9], timespan=1.0).trend == Trend.STABLE


def test_two_points_are_insufficient(progression):
    result = progression.calculate_trend([10.0, 90.0], timespan=1.0)
    assert result.trend == Trend.INSUFFICIENT_DATA
    assert result.series == (10.0, 90.0)


def test_zero_timespan_gives_zero_slope(progression):
    assert progression.calculate_trend([0, 10, 20], timespan=0.0).slope == 0.0


def test_non_positive_peak_gives_zero_confidence(progression):
    assert progression.calculate_trend([-30, -20, -10], timespan=1.0).confidence == 0.0


# =============================================================================
# Helpers
# =============================================================================

def test_standard_deviation():
    assert standard_deviation([5.0]) == 0.0
    assert standard_deviation([2, 4, 4, 4, 5, 5, 7, 9]) == pytest.approx(2.0)


@pytest.mark.parametrize(
    "values, expected",
    [
        ([], 1.0),
        ([7.0], 1.0),
        ([3.0, 3.0, 3.0], 1.0),
        ([-1.0, 1.0], 0.0),
        ([2, 4, 4, 4, 5, 5, 7, 9], 0.6),
    ],
)
def test_consistency(values, expected):
    assert consistency(values) == pytest.approx(expected)


def test_head_stability():
    assert ProgressionAnalyzer.head_stability([(0.5, 0.2)]) == 1.0
    assert ProgressionAnalyzer.head_stability([(0.5, 0.2), (0.51, 0.2)]) == pytest.approx(0.9)
    assert ProgressionAnalyzer.head_stability([(0.0, 0.0), (0.5, 0.0)]) == 0.0


def test_sample_frames_keeps_ends(make_frame):
    frames = [make_frame(i) for i in range(30)]

    sampled = ProgressionAnalyzer.sample_frames(frames, limit=15)

    assert len(sampled) == 15
    assert sampled[0].frame_number == 0
    assert sampled[-1].frame_number == 29
    numbers = [f.frame_number for f in sampled]
    assert numbers == sorted(set(numbers))


def test_sample_frames_small_inputs(make_frame):
    frames = [make_frame(i) for i in range(5)]
    assert ProgressionAnalyzer.sample_frames(frames, limit=15) == frames
    assert ProgressionAnalyzer.sample_frames(frames, limit=1) == [frames[0]]


# =============================================================================
# Clip analysis
# =============================================================================

def test_frame_biomechanics_skips_unavailable_metrics(make_frame):
    frame = make_frame(missing=(BodyPart.LEFT_ANKLE, BodyPart.NOSE))

    metrics = ProgressionAnalyzer.frame_biomechanics(frame).metrics

    assert "hip_angle" in metrics
    assert "left_elbow" in metrics
    assert "left_knee" not in metrics
    assert "spine_angle" not in metrics
    assert "head_x" not in metrics
    assert "stance_width" not in metrics
    assert "weight_front" not in metrics
    assert "wrist_speed" not in metrics


def test_frame_biomechanics_wrist_speed(make_frame):
    previous = make_frame(0, positions={BodyPart.LEFT_WRIST: (0.50, 0.35)})
    current = make_frame(1, positions={BodyPart.LEFT_WRIST: (0.55, 0.35)})

    metrics = ProgressionAnalyzer.frame_biomechanics(current, [previous]).metrics

    assert metrics["wrist_speed"] == pytest.approx(1.5)
    assert metrics["weight_front"] == pytest.approx(50.0)


def test_wrist_speed_spans_dropped_frame(progression, make_frame):
    frames = [
        make_frame(0, positions={BodyPart.LEFT_WRIST: (0.30, 0.35)}),
        make_frame(1, missing=(BodyPart.LEFT_WRIST,)),
        make_frame(2, positions={BodyPart.LEFT_WRIST: (0.50, 0.35)}),
    ]

    wrist = progression.summarize(frames).get("wrist_speed")

    # Measured against frame 0, two frames back
    assert wrist.series == pytest.approx((3.0,))
    assert wrist.peak == pytest.approx(3.0)


def test_analyze_needs_two_frames(progression, make_frame):
    assert progression.analyze([]) is None
    assert progression.analyze([make_frame(0)]) is None


def test_analyze_clip(progression, make_frame):
    # Shoulders turn steadily over one second
    frames = [
        make_frame(i, positions={BodyPart.RIGHT_SHOULDER: (0.55, 0.30 + 0.01 * i)})
        for i in range(31)
    ]

    report = progression.analyze(frames)

    assert report.context.frame_count == 31
    assert report.context.total_time == pytest.approx(1.0)
    assert report.context.fps == pytest.approx(30.0)
    assert report.valid_frames == 31
    assert set(report.trends) == {
        "hip", "shoulder", "spine", "left_elbow", "right_elbow", "left_knee", "right_knee",
    }
    assert report.trends["shoulder"].trend == Trend.INCREASING
    assert report.trends["hip"].trend == Trend.STABLE
    assert len(report.trends["shoulder"].series) == 31


def test_summarize(progression, swing_frames):
    summary = progression.summarize(swing_frames)

    hip = summary.get("hip_angle")
    assert hip.average == pytest.approx(0.0)
    assert hip.consistency == 1.0
    assert len(hip.series) == 30
    assert summary.get("wrist_speed").peak > 2.0
    assert summary.head_stability == 1.0
    assert summary.average_front_foot == pytest.approx(50.0)
    assert summary.get("unknown_metric") is None
