import json

from tonal_duet.audio.frame_sources import ToneFrameSource, WavFileFrameSource
from tonal_duet.core.config import ConfigManager
from tonal_duet.core.factory import ComponentFactory


def test_defaults_are_written(tmp_path):
    manager = ConfigManager(str(tmp_path))

    assert manager.get_config("pitch_engine")["silence_threshold"] == 0.01
    assert manager.get_config("audio_input")["frames_per_buffer"] == 2048
    saved = json.loads((tmp_path / "pitch_engine.json").read_text())
    assert saved["ignore_tolerance"] == 10.0


def test_save_and_reload(tmp_path):
    manager = ConfigManager(str(tmp_path))
    assert manager.save_config("pitch_engine", {"ignore_tolerance": 4.0})

    reloaded = ConfigManager(str(tmp_path))
    assert reloaded.get_config("pitch_engine")["ignore_tolerance"] == 4.0
    # Untouched keys keep their defaults
    assert reloaded.get_config("pitch_engine")["reference_frequency"] == 440.0


def test_missing_keys_are_backfilled(tmp_path):
    (tmp_path / "audio_input.json").write_text(json.dumps({"sample_rate": 48000}))

    config = ConfigManager(str(tmp_path)).get_config("audio_input")

    assert config["sample_rate"] == 48000
    assert config["channels"] == 1


def test_corrupt_file_falls_back_to_defaults(tmp_path):
    (tmp_path / "pitch_engine.json").write_text("{not json")

    config = ConfigManager(str(tmp_path)).get_config("pitch_engine")

    assert config["window_threshold"] == 0.2


def test_unknown_config(tmp_path):
    manager = ConfigManager(str(tmp_path))
    assert manager.get_config("nope") == {}


def test_factory_applies_configuration(tmp_path):
    (tmp_path / "pitch_engine.json").write_text(json.dumps({"ignore_tolerance": 2.5}))
    (tmp_path / "audio_input.json").write_text(
        json.dumps({"frames_per_buffer": 1024, "sample_rate": 22050})
    )
    manager = ConfigManager(str(tmp_path))
    factory = ComponentFactory(manager)

    engine = factory.create_engine(name="configured")
    engine.set_ignore_set([440.0])
    assert engine.ignore_set.entries[0].tolerance == 2.5
    assert engine.name == "configured"

    source = factory.create_frame_source("tone", frequencies=[440.0], frame_count=1)
    assert isinstance(source, ToneFrameSource)
    assert source.sample_rate == 22050
    source.open()
    assert len(source.read()) == 1024

    wav = factory.create_frame_source("wav", file_path=str(tmp_path / "x.wav"))
    assert isinstance(wav, WavFileFrameSource)


def test_factory_rejects_unknown_source(tmp_path):
    factory = ComponentFactory(ConfigManager(str(tmp_path)))
    try:
        factory.create_frame_source("telepathy")
    except ValueError as e:
        assert "telepathy" in str(e)
    else:
        raise AssertionError("expected ValueError")
