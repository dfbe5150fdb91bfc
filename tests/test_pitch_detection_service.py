import pytest

from tonal_duet.audio.frame_sources import ToneFrameSource
from tonal_duet.core.config import ConfigManager
from tonal_duet.core.exceptions import InvalidIgnoreEntry
from tonal_duet.services.pitch_detection_service import PitchDetectionService


@pytest.fixture
def config_manager(tmp_path):
    return ConfigManager(str(tmp_path))


def test_reports_note_frequency_and_cents(config_manager):
    detections = []
    service = PitchDetectionService(
        frame_source=ToneFrameSource(466.16, frame_count=4),
        config_manager=config_manager,
    )

    service.start(lambda note, frequency, cents: detections.append((note, frequency, cents)))

    assert service.wait(timeout=10)
    assert [note for note, _, _ in detections] == ["A#4"] * 4
    for _, frequency, cents in detections:
        assert frequency == pytest.approx(466.16, rel=0.01)
        assert abs(cents) < 10


def test_flat_spelling(config_manager):
    detections = []
    service = PitchDetectionService(
        frame_source=ToneFrameSource(466.16, frame_count=2),
        config_manager=config_manager,
        use_flats=True,
    )

    service.start(lambda note, frequency, cents: detections.append(note))

    assert service.wait(timeout=10)
    assert detections == ["Bb4", "Bb4"]


def test_ignores_frequencies_being_played(config_manager):
    detections = []
    service = PitchDetectionService(
        frame_source=ToneFrameSource(523.25, frame_count=5),
        config_manager=config_manager,
    )
    service.set_frequencies_to_ignore([523.25])

    service.start(lambda *args: detections.append(args))

    assert service.wait(timeout=10)
    assert detections == []
    assert not service.is_running()


def test_invalid_ignore_frequencies_are_rejected(config_manager):
    service = PitchDetectionService(
        frame_source=ToneFrameSource(440.0), config_manager=config_manager
    )
    with pytest.raises(InvalidIgnoreEntry):
        service.set_frequencies_to_ignore([float("nan")])


def test_stop_is_idempotent(config_manager):
    service = PitchDetectionService(
        frame_source=ToneFrameSource(440.0), config_manager=config_manager, name="player1"
    )
    service.start(lambda *args: None)
    assert service.is_running()
    assert service.engine.name == "player1"

    service.stop()
    service.stop()
    assert not service.is_running()
