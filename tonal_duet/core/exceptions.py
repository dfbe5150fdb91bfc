"""Error taxonomy for the pitch detection engine.

A quiet frame or a frame without a usable autocorrelation peak is not an
error; the estimator returns ``None`` for it and the frame is skipped.
"""


class PitchEngineError(Exception):
    """Base class for errors surfaced by Tonal Duet."""


class AcquisitionFailure(PitchEngineError):
    """The frame source could not be opened (device missing, permission denied, unreadable file)."""


class EngineAlreadyRunning(PitchEngineError):
    """``start`` was called on an engine that is already running."""


class InvalidIgnoreEntry(PitchEngineError, ValueError):
    """An ignore entry had a non-finite frequency or a non-positive tolerance."""
