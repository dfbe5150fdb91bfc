"""Core components for the Tonal Duet application."""

# Import interfaces and errors for easier access
from .exceptions import (
    AcquisitionFailure,
    EngineAlreadyRunning,
    InvalidIgnoreEntry,
    PitchEngineError,
)
from .interfaces import IFrameSource, IPitchEngine

__all__ = [
    "IFrameSource",
    "IPitchEngine",
    "PitchEngineError",
    "AcquisitionFailure",
    "EngineAlreadyRunning",
    "InvalidIgnoreEntry",
]
