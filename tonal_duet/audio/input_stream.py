"""Live microphone frames from a sounddevice input stream."""

from __future__ import annotations

from typing import ClassVar, List, Optional

import sounddevice as sd

from ..core.exceptions import AcquisitionFailure
from ..core.interfaces import DeviceSelector, IFrameSource
from ..logger import get_logger
from ..note_types import Frame
from .audio_device import resolve_input_device

logger = get_logger(__name__)


class SoundDeviceFrameSource(IFrameSource):
    """Pull-based frame source reading blocks from an input device.

    Reads block until a full buffer is available, so the detection loop runs
    exactly once per captured block. Only the first channel is analyzed.
    Not thread-safe: read() and close() must be called from the same thread.
    """

    # Audio configuration
    SAMPLE_RATE: ClassVar[int] = 44100  # Hz
    FRAMES_PER_BUFFER: ClassVar[int] = 2048
    CHANNELS: ClassVar[int] = 1  # Mono audio
    # Rates tried after the requested one if the device rejects it
    FALLBACK_RATES: ClassVar[List[int]] = [44100, 48000, 22050, 16000]

    def __init__(
        self,
        device: DeviceSelector = None,
        sample_rate: Optional[int] = None,
        frames_per_buffer: Optional[int] = None,
        channels: Optional[int] = None,
    ) -> None:
        """Initialize the input source.

        Args:
            device: Device id, name substring, or None for the default input
            sample_rate: Requested sample rate in Hz, or None for default (44100)
            frames_per_buffer: Samples per frame, or None for default (2048)
            channels: Number of channels to capture, or None for default (1)
        """
        self._device = device
        self._sample_rate = sample_rate or self.SAMPLE_RATE
        self._frames_per_buffer = frames_per_buffer or self.FRAMES_PER_BUFFER
        self._channels = channels or self.CHANNELS
        self._stream: Optional[sd.InputStream] = None

    def _pick_sample_rate(self, device_id: Optional[int]) -> int:
        rates = [self._sample_rate] + [r for r in self.FALLBACK_RATES if r != self._sample_rate]
        for rate in rates:
            try:
                sd.check_input_settings(device=device_id, samplerate=rate, channels=self._channels)
                return rate
            except (sd.PortAudioError, ValueError) as e:
                logger.warning(f"Sample rate {rate} Hz not supported: {e}")
        raise AcquisitionFailure(
            f"Input device {self._device!r} supports none of the sample rates {rates}"
        )

    def open(self) -> None:
        if self._stream is not None:
            return

        device_id = resolve_input_device(self._device)
        rate = self._pick_sample_rate(device_id)

        try:
            stream = sd.InputStream(
                device=device_id,
                samplerate=rate,
                blocksize=self._frames_per_buffer,
                channels=self._channels,
                dtype="float32",
            )
            stream.start()
        except (sd.PortAudioError, ValueError) as e:
            raise AcquisitionFailure(f"Could not start input device {self._device!r}: {e}") from e

        self._sample_rate = rate
        self._stream = stream
        logger.info(f"Audio input started: device={device_id}, rate={rate} Hz")

    def read(self) -> Optional[Frame]:
        stream = self._stream
        if stream is None:
            return None

        try:
            data, overflowed = stream.read(self._frames_per_buffer)
        except sd.PortAudioError as e:
            logger.error(f"Audio input failed: {e}")
            return None

        if overflowed:
            logger.warning("Audio input overflow, samples were dropped")

        # Extract mono audio data (take first channel if multi-channel)
        return Frame(data[:, 0], self._sample_rate)

    def close(self) -> None:
        stream, self._stream = self._stream, None
        if stream is None:
            return
        try:
            stream.abort()
            stream.close()
            logger.info("Audio input stopped")
        except sd.PortAudioError as e:
            logger.error(f"Error stopping audio input: {e}")

    @property
    def sample_rate(self) -> int:
        return self._sample_rate
