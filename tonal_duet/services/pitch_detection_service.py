"""Pitch detection service that integrates a frame source and a pitch engine."""

from __future__ import annotations

from typing import Callable, Optional

from ..core.config import ConfigManager
from ..core.factory import ComponentFactory
from ..core.interfaces import DeviceSelector, IFrameSource
from ..detection.ignore_filter import IgnoreSpec
from ..detection.pitch_engine import PitchEngine
from ..logger import get_logger
from ..note_types import DetectionResult

logger = get_logger(__name__)

PitchCallback = Callable[[str, float, float], None]


class PitchDetectionService:
    """Facade reporting detections as (note, frequency, cents).

    Run one service per performer; services share no state.
    """

    def __init__(
        self,
        device: DeviceSelector = None,
        frame_source: Optional[IFrameSource] = None,
        config_manager: Optional[ConfigManager] = None,
        use_flats: bool = False,
        name: Optional[str] = None,
    ) -> None:
        """Initialize the pitch detection service.

        Args:
            device: Input device id or name substring, or None for the default input
            frame_source: Frame source to use instead of a live input device
            config_manager: Configuration manager, or None to create a default one
            use_flats: Report notes with flats (e.g. 'Bb4') instead of sharps
            name: Name for the engine in logs
        """
        factory = ComponentFactory(config_manager)
        self._frame_source = frame_source or factory.create_frame_source("device", device=device)
        self._engine = factory.create_engine(
            name=name or f"detector-{device if device is not None else 'default'}"
        )
        self._use_flats = use_flats
        self._on_pitch: Optional[PitchCallback] = None

    @property
    def engine(self) -> PitchEngine:
        return self._engine

    def start(self, on_pitch: PitchCallback) -> None:
        """Start detection.

        Args:
            on_pitch: Called with (note name, frequency in Hz, cents) for each detection

        Raises:
            AcquisitionFailure: If the input cannot be opened
            EngineAlreadyRunning: If the service is already running
        """
        self._on_pitch = on_pitch
        self._engine.start(self._frame_source, self._handle_result)

    def _handle_result(self, result: DetectionResult) -> None:
        """Adapts engine results to the (note, frequency, cents) callback."""
        if self._on_pitch:
            self._on_pitch(result.note.label(self._use_flats), result.frequency, result.cents)

    def stop(self) -> None:
        """Stop detection."""
        self._engine.stop()

    def set_frequencies_to_ignore(self, frequencies: IgnoreSpec) -> None:
        """Ignore the given frequencies, e.g. tones currently being played back.

        Raises:
            InvalidIgnoreEntry: If an entry is invalid
        """
        self._engine.set_ignore_set(frequencies)

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._engine.wait(timeout)

    def is_running(self) -> bool:
        return self._engine.is_running()
