"""Frame sources for the detection engine.

The live input source lives in ``tonal_duet.audio.input_stream`` and is not
imported here, since loading sounddevice requires the PortAudio library.
"""

from .frame_sources import ToneFrameSource, WavFileFrameSource

__all__ = ["ToneFrameSource", "WavFileFrameSource"]
