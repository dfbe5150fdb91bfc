"""Defines the core interfaces for the Tonal Duet application."""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Callable, Optional, Union

from ..note_types import DetectionResult, Frame

# Input device id, case-insensitive name substring, or None for the system default
DeviceSelector = Union[int, str, None]


class IFrameSource(ABC):
    """Interface for pull-based sources of fixed-length mono frames."""

    @abstractmethod
    def open(self) -> None:
        """Acquire the underlying resource.

        Raises:
            AcquisitionFailure: If the source cannot be opened
        """
        pass

    @abstractmethod
    def read(self) -> Optional[Frame]:
        """Return the next frame, or None once the source is exhausted or unavailable."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the underlying resource. Safe to call more than once."""
        pass

    @property
    @abstractmethod
    def sample_rate(self) -> int:
        """The sample rate of the frames produced."""
        pass


class IPitchEngine(ABC):
    """Interface for continuous pitch detectors."""

    @abstractmethod
    def start(
        self,
        frame_source: IFrameSource,
        on_result: Callable[[DetectionResult], None],
        background: bool = True,
    ) -> None:
        """Start pulling frames and reporting detections."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop detecting; no result is delivered after this returns."""
        pass

    @abstractmethod
    def set_ignore_set(self, entries) -> None:
        """Replace the set of frequencies to suppress."""
        pass

    @abstractmethod
    def is_running(self) -> bool:
        """Check if the engine is running."""
        pass
