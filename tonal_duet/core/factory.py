"""Factory for creating Tonal Duet components."""

from typing import Callable, Dict, Optional, Tuple

from ..logger import get_logger
from ..audio.frame_sources import ToneFrameSource, WavFileFrameSource
from ..detection.pitch_engine import PitchEngine
from .config import ConfigManager
from .interfaces import IFrameSource

logger = get_logger(__name__)

# Engine settings read from the "pitch_engine" configuration
ENGINE_KEYS: Tuple[str, ...] = (
    "reference_frequency",
    "silence_threshold",
    "window_threshold",
    "ignore_tolerance",
)


def _create_device_source(**kwargs) -> IFrameSource:
    # Imported here so that sounddevice (and PortAudio) is only loaded for live input
    from ..audio.input_stream import SoundDeviceFrameSource

    return SoundDeviceFrameSource(**kwargs)


class ComponentFactory:
    """Factory for creating Tonal Duet components."""

    def __init__(self, config_manager: Optional[ConfigManager] = None):
        """Initialize the component factory.

        Args:
            config_manager: Configuration manager, or None to create a default one
        """
        self.config_manager = config_manager or ConfigManager()

        # Register frame source implementations
        self.frame_source_classes: Dict[str, Callable[..., IFrameSource]] = {
            "device": _create_device_source,
            "wav": WavFileFrameSource,
            "tone": ToneFrameSource,
        }

        # "audio_input" settings each implementation accepts
        self.frame_source_settings: Dict[str, Tuple[str, ...]] = {
            "device": ("sample_rate", "frames_per_buffer", "channels"),
            "wav": ("frames_per_buffer",),
            "tone": ("sample_rate", "frames_per_buffer"),
        }

    def create_engine(self, **kwargs) -> PitchEngine:
        """Create a pitch engine.

        Args:
            **kwargs: Parameters overriding the "pitch_engine" configuration

        Returns:
            Pitch engine instance
        """
        config = self.config_manager.get_config("pitch_engine")
        params = {key: config[key] for key in ENGINE_KEYS if key in config}
        params.update(kwargs)

        engine = PitchEngine(**params)
        logger.info(f"Created pitch engine: {engine.name}")
        return engine

    def create_frame_source(self, implementation: str = "device", **kwargs) -> IFrameSource:
        """Create a frame source.

        Args:
            implementation: Name of the implementation to use ("device", "wav" or "tone")
            **kwargs: Additional parameters to pass to the constructor

        Returns:
            Frame source instance

        Raises:
            ValueError: If the implementation is not registered
        """
        if implementation not in self.frame_source_classes:
            raise ValueError(f"Unknown frame source implementation: {implementation}")

        config = self.config_manager.get_config("audio_input")
        params = {
            key: config[key]
            for key in self.frame_source_settings.get(implementation, ())
            if key in config
        }
        params.update(kwargs)

        source = self.frame_source_classes[implementation](**params)
        logger.info(f"Created frame source: {implementation}")
        return source
