"""Service layer for Tonal Duet."""

from .pitch_detection_service import PitchDetectionService

__all__ = ["PitchDetectionService"]
