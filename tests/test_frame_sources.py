import numpy as np
import pytest
import soundfile as sf

from tonal_duet.audio.frame_sources import ToneFrameSource, WavFileFrameSource
from tonal_duet.core.exceptions import AcquisitionFailure
from tonal_duet.detection.pitch_engine import PitchEngine


@pytest.fixture
def a4_wav(tmp_path):
    """Two seconds of a stereo A4 at 22050 Hz."""
    sample_rate = 22050
    t = np.arange(2 * sample_rate) / sample_rate
    tone = 0.5 * np.sin(2 * np.pi * 440.0 * t)
    path = tmp_path / "a4.wav"
    sf.write(str(path), np.column_stack([tone, tone]), sample_rate)
    return path


def test_tone_source_produces_requested_frames():
    source = ToneFrameSource(440.0, sample_rate=8000, frames_per_buffer=256, frame_count=3)
    assert source.read() is None  # not opened yet

    source.open()
    frames = [source.read() for _ in range(4)]

    assert [len(f) for f in frames[:3]] == [256, 256, 256]
    assert frames[3] is None
    assert frames[0].sample_rate == 8000


def test_tone_source_is_phase_continuous():
    source = ToneFrameSource(440.0, sample_rate=8000, frames_per_buffer=100)
    source.open()
    joined = np.concatenate([source.read().samples, source.read().samples])

    t = np.arange(200) / 8000
    np.testing.assert_allclose(joined, 0.5 * np.sin(2 * np.pi * 440.0 * t), atol=1e-9)


def test_tone_source_mixes_and_reopens():
    source = ToneFrameSource([220.0, 330.0], amplitude=0.8, frame_count=1)
    source.open()
    frame = source.read()
    assert np.max(np.abs(frame.samples)) <= 0.8 + 1e-9
    assert source.read() is None

    source.close()
    source.open()
    assert source.read() is not None


def test_wav_source_reads_mono_frames(a4_wav):
    source = WavFileFrameSource(a4_wav, frames_per_buffer=4096)
    assert source.sample_rate == 22050

    source.open()
    frames = []
    while True:
        frame = source.read()
        if frame is None:
            break
        frames.append(frame)
    source.close()

    assert sum(len(f) for f in frames) == 2 * 22050
    assert len(frames[-1]) == 2 * 22050 - 10 * 4096
    assert all(f.samples.ndim == 1 for f in frames)


def test_wav_source_loops(a4_wav):
    source = WavFileFrameSource(a4_wav, frames_per_buffer=22050, loop=True)
    source.open()
    frames = [source.read() for _ in range(5)]
    source.close()

    assert all(frame is not None for frame in frames)
    assert source.read() is None


def test_wav_source_applies_gain(a4_wav):
    plain = WavFileFrameSource(a4_wav)
    louder = WavFileFrameSource(a4_wav, gain=2.0)
    plain.open()
    louder.open()

    np.testing.assert_allclose(louder.read().samples, 2.0 * plain.read().samples, atol=1e-6)


def test_missing_file_is_acquisition_failure(tmp_path):
    source = WavFileFrameSource(tmp_path / "missing.wav")
    with pytest.raises(AcquisitionFailure):
        source.open()


def test_engine_detects_a4_in_file(a4_wav):
    engine = PitchEngine()
    results = []

    engine.start(WavFileFrameSource(a4_wav, frames_per_buffer=2048), results.append, background=False)

    assert len(results) >= 20
    assert {r.note_name for r in results} == {"A4"}
