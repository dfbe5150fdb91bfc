"""Frame sources that do not need an audio device: synthesized tones and WAV files."""

from __future__ import annotations

import threading
import time
from typing import ClassVar, Iterable, List, Optional, Union

import numpy as np
import soundfile as sf

from ..core.exceptions import AcquisitionFailure
from ..core.interfaces import IFrameSource
from ..logger import get_logger
from ..note_types import Frame

logger = get_logger(__name__)


class ToneFrameSource(IFrameSource):
    """Synthesizes phase-continuous sine tones, one frame per read.

    Several frequencies are mixed with equal weight. An empty list produces
    silence.
    """

    SAMPLE_RATE: ClassVar[int] = 44100
    FRAMES_PER_BUFFER: ClassVar[int] = 2048

    def __init__(
        self,
        frequencies: Union[float, Iterable[float]],
        sample_rate: int = SAMPLE_RATE,
        frames_per_buffer: int = FRAMES_PER_BUFFER,
        amplitude: float = 0.5,
        frame_count: Optional[int] = None,
    ) -> None:
        """Initialize the tone source.

        Args:
            frequencies: Tone frequency in Hz, or several to mix
            sample_rate: Sample rate in Hz
            frames_per_buffer: Samples per frame
            amplitude: Peak amplitude of the mix
            frame_count: Number of frames before the source is exhausted, or None for endless
        """
        if isinstance(frequencies, (int, float)):
            frequencies = [frequencies]
        self._frequencies: List[float] = [float(f) for f in frequencies]
        self._sample_rate = sample_rate
        self._frames_per_buffer = frames_per_buffer
        self._amplitude = amplitude
        self._frame_count = frame_count

        self._position = 0
        self._emitted = 0
        self._is_open = False

    def open(self) -> None:
        self._position = 0
        self._emitted = 0
        self._is_open = True

    def read(self) -> Optional[Frame]:
        if not self._is_open:
            return None
        if self._frame_count is not None and self._emitted >= self._frame_count:
            return None

        t = (self._position + np.arange(self._frames_per_buffer)) / self._sample_rate
        samples = np.zeros(self._frames_per_buffer)
        for frequency in self._frequencies:
            samples += np.sin(2 * np.pi * frequency * t)
        if self._frequencies:
            samples *= self._amplitude / len(self._frequencies)

        self._position += self._frames_per_buffer
        self._emitted += 1
        return Frame(samples, self._sample_rate)

    def close(self) -> None:
        self._is_open = False

    @property
    def sample_rate(self) -> int:
        return self._sample_rate


class WavFileFrameSource(IFrameSource):
    """Provides frames by reading from an audio file (WAV, FLAC, ...) with soundfile."""

    FRAMES_PER_BUFFER: ClassVar[int] = 2048

    def __init__(
        self,
        file_path: str,
        frames_per_buffer: int = FRAMES_PER_BUFFER,
        loop: bool = False,
        gain: float = 1.0,
        realtime: bool = False,
    ) -> None:
        """Initialize the file source.

        Args:
            file_path: Path of the audio file
            frames_per_buffer: Samples per frame; the last frame may be shorter
            loop: Restart from the beginning when the file ends
            gain: Linear gain applied to every frame
            realtime: Sleep for each frame's duration to simulate live input
        """
        self._file_path = str(file_path)
        self._frames_per_buffer = frames_per_buffer
        self._loop = loop
        self._gain = gain
        self._realtime = realtime

        self._file: Optional[sf.SoundFile] = None
        self._sample_rate: Optional[int] = None
        # read() and close() may be called from different threads
        self._lock = threading.Lock()

    def open(self) -> None:
        with self._lock:
            if self._file is not None:
                return
            try:
                self._file = sf.SoundFile(self._file_path)
            except (RuntimeError, OSError) as e:
                raise AcquisitionFailure(f"Cannot open audio file {self._file_path}: {e}") from e
            self._sample_rate = self._file.samplerate
            logger.info(
                f"Opened {self._file_path}: {self._file.samplerate} Hz, "
                f"{self._file.channels} channel(s), {self._file.frames} samples"
            )

    def read(self) -> Optional[Frame]:
        with self._lock:
            if self._file is None:
                return None
            data = self._file.read(self._frames_per_buffer, dtype="float32", always_2d=True)
            if len(data) == 0 and self._loop:
                self._file.seek(0)
                data = self._file.read(self._frames_per_buffer, dtype="float32", always_2d=True)
            if len(data) == 0:
                return None
            sample_rate = self._file.samplerate

        # Mix down to mono
        samples = data.mean(axis=1)
        if self._gain != 1.0:
            samples = samples * self._gain

        if self._realtime:
            time.sleep(len(samples) / sample_rate)

        return Frame(samples, sample_rate)

    def close(self) -> None:
        with self._lock:
            if self._file is not None:
                self._file.close()
                self._file = None

    @property
    def sample_rate(self) -> int:
        if self._sample_rate is None:
            try:
                self._sample_rate = sf.info(self._file_path).samplerate
            except (RuntimeError, OSError) as e:
                raise AcquisitionFailure(f"Cannot read audio file {self._file_path}: {e}") from e
        return self._sample_rate
