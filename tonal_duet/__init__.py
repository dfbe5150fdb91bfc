"""Tonal Duet: live pitch detection that ignores the tones it plays itself."""

from .core.exceptions import (
    AcquisitionFailure,
    EngineAlreadyRunning,
    InvalidIgnoreEntry,
    PitchEngineError,
)
from .detection import AutocorrelationEstimator, IgnoreEntry, IgnoreSet, PitchEngine, should_ignore
from .note_types import DetectionResult, EngineState, Frame, NoteName
from .note_utils import cents_off, get_note_name, quantize

__version__ = "0.2.0"

__all__ = [
    "AcquisitionFailure",
    "AutocorrelationEstimator",
    "DetectionResult",
    "EngineAlreadyRunning",
    "EngineState",
    "Frame",
    "IgnoreEntry",
    "IgnoreSet",
    "InvalidIgnoreEntry",
    "NoteName",
    "PitchEngine",
    "PitchEngineError",
    "cents_off",
    "get_note_name",
    "quantize",
    "should_ignore",
]
