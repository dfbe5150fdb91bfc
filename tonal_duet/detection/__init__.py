"""Pitch detection pipeline: estimator, ignore filter and detection loop."""

from .autocorrelation import AutocorrelationEstimator, estimate_pitch
from .ignore_filter import DEFAULT_TOLERANCE, IgnoreEntry, IgnoreSet, should_ignore
from .pitch_engine import PitchEngine

__all__ = [
    "AutocorrelationEstimator",
    "estimate_pitch",
    "IgnoreEntry",
    "IgnoreSet",
    "DEFAULT_TOLERANCE",
    "should_ignore",
    "PitchEngine",
]
