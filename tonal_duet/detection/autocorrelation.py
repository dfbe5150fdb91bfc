"""Autocorrelation pitch estimation for single frames of mono audio."""

from __future__ import annotations

from typing import ClassVar, Optional

import numpy as np

from ..logger import get_logger
from ..note_types import Frame

logger = get_logger(__name__)


def _windowed(samples: np.ndarray, threshold: float) -> np.ndarray:
    """Trim the frame to start and end near a low-amplitude sample.

    ``r1`` is searched in the first half of the frame and ``r2`` in the second
    half. Without a qualifying sample the bounds fall back to the frame edges.
    """
    n = len(samples)
    half = n // 2
    quiet = np.abs(samples) < threshold

    r1 = 0
    hits = np.flatnonzero(quiet[:half])
    if hits.size:
        r1 = int(hits[0])

    r2 = n
    hits = np.flatnonzero(quiet[half + 1:2 * half])
    if hits.size:
        r2 = half + 1 + int(hits[0])

    return samples[r1:r2]


def estimate_pitch(
    samples: np.ndarray,
    sample_rate: int,
    silence_threshold: float = 0.01,
    window_threshold: float = 0.2,
) -> Optional[float]:
    """Estimate the fundamental frequency of a block of samples.

    Args:
        samples: Mono samples normalized to [-1, 1]
        sample_rate: Sample rate in Hz
        silence_threshold: RMS below which the block counts as silence
        window_threshold: Amplitude below which a sample may bound the analysis window

    Returns:
        Frequency in Hz, or None if the block is silent or has no usable period
    """
    samples = np.asarray(samples, dtype=np.float64)
    if samples.size == 0:
        return None

    rms = float(np.sqrt(np.mean(samples**2)))
    if rms < silence_threshold:
        logger.debug(f"Below silence gate: rms={rms:.5f} < {silence_threshold}")
        return None

    buf = _windowed(samples, window_threshold)
    size = len(buf)
    if size < 2:
        return None

    # c[i] = sum_j buf[j] * buf[j + i] for every lag i
    corr = np.correlate(buf, buf, mode="full")[size - 1:]

    # Walk down from the trivial lag-0 maximum before looking for the period peak
    d = 0
    while d + 1 < size and corr[d] > corr[d + 1]:
        d += 1
    if d == size - 1:
        # Decreasing all the way: nothing periodic in this block
        logger.debug(f"No usable autocorrelation peak (size={size})")
        return None
    period = d + int(np.argmax(corr[d:]))
    if period == 0:
        return None

    # Parabolic interpolation needs both neighbours; otherwise keep the integer lag
    refined = float(period)
    if period + 1 < size:
        x1, x2, x3 = corr[period - 1], corr[period], corr[period + 1]
        a = (x1 + x3 - 2 * x2) / 2
        b = (x3 - x1) / 2
        if a:
            refined = period - b / (2 * a)

    if not np.isfinite(refined) or refined <= 0:
        return None

    frequency = sample_rate / refined
    logger.debug(f"Estimated {frequency:.2f}Hz (period={refined:.3f}, rms={rms:.4f})")
    return float(frequency)


class AutocorrelationEstimator:
    """Frame-level pitch estimator built on time-domain autocorrelation."""

    DEFAULT_SILENCE_THRESHOLD: ClassVar[float] = 0.01
    DEFAULT_WINDOW_THRESHOLD: ClassVar[float] = 0.2

    def __init__(
        self,
        silence_threshold: float = DEFAULT_SILENCE_THRESHOLD,
        window_threshold: float = DEFAULT_WINDOW_THRESHOLD,
    ) -> None:
        self.silence_threshold = silence_threshold
        self.window_threshold = window_threshold

    def estimate(self, frame: Frame) -> Optional[float]:
        """Return the frame's fundamental frequency in Hz, or None for no pitch."""
        return estimate_pitch(
            frame.samples,
            frame.sample_rate,
            silence_threshold=self.silence_threshold,
            window_threshold=self.window_threshold,
        )
