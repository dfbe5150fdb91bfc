import numpy as np
import pytest

from tonal_duet.detection.autocorrelation import AutocorrelationEstimator, estimate_pitch
from tonal_duet.note_types import Frame

SAMPLE_RATE = 44100
BUFFER_SIZE = 2048


def sine_frame(frequency, amplitude=0.5, sample_rate=SAMPLE_RATE, size=BUFFER_SIZE, offset=0):
    t = (offset + np.arange(size)) / sample_rate
    return Frame(amplitude * np.sin(2 * np.pi * frequency * t), sample_rate)


@pytest.mark.parametrize("frequency", [196.0, 220.0, 261.63, 440.0, 523.25, 880.0, 1000.0])
def test_recovers_sine_frequency_within_one_percent(frequency):
    estimator = AutocorrelationEstimator()

    for offset in (0, 2048, 4096 + 37):
        estimate = estimator.estimate(sine_frame(frequency, offset=offset))
        assert estimate is not None
        assert estimate == pytest.approx(frequency, rel=0.01)


def test_recovers_frequency_at_48k():
    estimate = AutocorrelationEstimator().estimate(sine_frame(330.0, sample_rate=48000))
    assert estimate == pytest.approx(330.0, rel=0.01)


def test_quiet_frame_is_no_pitch():
    frame = sine_frame(440.0, amplitude=0.005)
    assert AutocorrelationEstimator().estimate(frame) is None


def test_silence_is_no_pitch():
    assert AutocorrelationEstimator().estimate(Frame(np.zeros(BUFFER_SIZE), SAMPLE_RATE)) is None


def test_silence_threshold_is_configurable():
    frame = sine_frame(440.0, amplitude=0.005)
    estimate = AutocorrelationEstimator(silence_threshold=0.001).estimate(frame)
    assert estimate == pytest.approx(440.0, rel=0.01)


def test_empty_frame_is_no_pitch():
    assert estimate_pitch(np.array([]), SAMPLE_RATE) is None


def test_constant_offset_without_zero_crossings_is_no_pitch():
    # Never drops below the window threshold, so the full frame is analyzed;
    # its autocorrelation only decreases and has no period peak.
    assert estimate_pitch(np.full(BUFFER_SIZE, 0.5), SAMPLE_RATE) is None


def test_tiny_frames_do_not_fail():
    for size in (1, 2, 3, 4):
        result = estimate_pitch(np.full(size, 0.5), SAMPLE_RATE)
        assert result is None or result > 0


def test_frame_validation():
    with pytest.raises(ValueError):
        Frame(np.zeros(16), 0)
    with pytest.raises(ValueError):
        Frame(np.zeros((16, 2)), SAMPLE_RATE)

    frame = Frame([0.0, 0.5, -0.5], SAMPLE_RATE)
    with pytest.raises(ValueError):
        frame.samples[0] = 1.0
    assert len(frame) == 3
